"""
Database service layer for the FastAPI application.
"""

from typing import List

import structlog
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from books_api.config import APIConfig
from books_api.models import Book

logger = structlog.get_logger(__name__)


SELECT_BOOKS = text("SELECT bookid, bookname, author, genre, publisher FROM books")
SELECT_BOOK = text(
    "SELECT bookid, bookname, author, genre, publisher FROM books WHERE bookid = :bookid"
)
DELETE_BOOK = text("DELETE FROM books WHERE bookid = :bookid")
INSERT_BOOK = text(
    "INSERT INTO books (bookid, bookname, author, genre, publisher) "
    "VALUES (:bookid, :bookname, :author, :genre, :publisher)"
)


class StorageError(Exception):
    """Raised when a statement cannot be executed."""


class BookConflictError(StorageError):
    """Raised when an insert violates a constraint, e.g. a duplicate id."""


class BookNotFoundError(Exception):
    """Raised when no row matches the requested id."""

    def __init__(self, book_id: int):
        super().__init__(f"Book {book_id} not found")
        self.book_id = book_id


def timeout_connect_args(backend: str, timeout: float) -> dict:
    """
    Driver arguments that bound connecting and each statement to ``timeout``.

    Args:
        backend: SQLAlchemy backend name (``mysql``, ``sqlite``, ...)
        timeout: Timeout in seconds

    Returns:
        Keyword arguments for the DBAPI ``connect()`` call
    """
    if backend == "mysql":
        return {
            "connect_timeout": max(1, int(timeout)),
            "read_timeout": timeout,
            "write_timeout": timeout,
        }
    if backend == "sqlite":
        return {"timeout": timeout}
    return {}


def build_engine(settings: APIConfig) -> Engine:
    """
    Create the pooled engine for the books database.

    Args:
        settings: API configuration holding the URL, pool and timeout settings

    Returns:
        SQLAlchemy engine; no connection is opened until first use
    """
    url = make_url(settings.database_url)
    engine = create_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_timeout,
        connect_args=timeout_connect_args(url.get_backend_name(), settings.db_timeout),
    )
    logger.info(
        "Database engine created",
        url=url.render_as_string(hide_password=True),
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_recycle=settings.db_pool_recycle,
    )
    return engine


class BookStore:
    """Storage accessor for the books table."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def list_books(self) -> List[Book]:
        """
        Get every book in the table's natural scan order.

        Returns:
            List of books, empty when the table is empty
        """
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(SELECT_BOOKS).mappings().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list books", error=str(e))
            raise StorageError("Failed to list books") from e

        return [Book.model_validate(dict(row)) for row in rows]

    def get_book(self, book_id: int) -> Book:
        """
        Get a single book by ID.

        Args:
            book_id: Book identifier

        Returns:
            The matching book

        Raises:
            BookNotFoundError: No row has this id
            StorageError: The query failed
        """
        try:
            with self.engine.connect() as conn:
                row = conn.execute(SELECT_BOOK, {"bookid": book_id}).mappings().first()
        except SQLAlchemyError as e:
            logger.error("Failed to get book", book_id=book_id, error=str(e))
            raise StorageError(f"Failed to get book {book_id}") from e

        if row is None:
            raise BookNotFoundError(book_id)
        return Book.model_validate(dict(row))

    def insert_book(self, book: Book) -> int:
        """
        Insert a book with its caller-supplied id.

        Args:
            book: Book to insert

        Returns:
            Row identifier reported by the driver
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(INSERT_BOOK, book.model_dump())
                insert_id = result.lastrowid
        except IntegrityError as e:
            logger.warning("Book insert conflict", book_id=book.bookid, error=str(e))
            raise BookConflictError(f"Book {book.bookid} conflicts with an existing row") from e
        except SQLAlchemyError as e:
            logger.error("Failed to insert book", book_id=book.bookid, error=str(e))
            raise StorageError(f"Failed to insert book {book.bookid}") from e

        return insert_id

    def delete_book(self, book_id: int) -> None:
        """Delete a book by ID. Deleting a missing id is not an error."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(DELETE_BOOK, {"bookid": book_id})
        except SQLAlchemyError as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise StorageError(f"Failed to delete book {book_id}") from e

        logger.debug("Book deleted", book_id=book_id, rows=result.rowcount)

    def close(self) -> None:
        """Dispose of the connection pool."""
        self.engine.dispose()
