"""
Book endpoints: the collection at ``/books`` and single items at ``/books/{id}``.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic_core import PydanticSerializationError

from books_api.database import BookConflictError, BookNotFoundError, BookStore, StorageError
from books_api.models import Book, BookList, PathStatus, parse_book_path

logger = structlog.get_logger(__name__)

BOOK_PATH = "books"

router = APIRouter(tags=["Books"])


def get_book_store(request: Request) -> BookStore:
    """Dependency returning the storage accessor attached to the application."""
    return request.app.state.book_store


def resolve_book_id(book_path: str) -> int:
    """Turn the item path into a book id or raise the matching HTTP error."""
    match = parse_book_path(book_path)
    if match.status == PathStatus.MALFORMED:
        logger.info("Malformed book path", path=book_path)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST)
    if match.status == PathStatus.NOT_FOUND:
        logger.info("Book path is not an id", path=book_path)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return match.book_id


# Collection endpoint
@router.get(f"/{BOOK_PATH}")
def list_books(store: BookStore = Depends(get_book_store)) -> Response:
    """List every book."""
    try:
        books = store.list_books()
    except StorageError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        body = BookList.dump_json(books)
    except PydanticSerializationError as e:
        logger.error("Failed to serialize books", count=len(books), error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(content=body, media_type="application/json")


@router.post(f"/{BOOK_PATH}", status_code=status.HTTP_201_CREATED)
def create_book(book: Book, store: BookStore = Depends(get_book_store)) -> Response:
    """
    Insert a book with the id supplied in the body.

    Insert failures of any kind answer 400; the new row id is not returned.
    """
    try:
        insert_id = store.insert_book(book)
    except BookConflictError:
        logger.info("Rejected duplicate book", book_id=book.bookid)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST)

    logger.info("Book created", book_id=book.bookid, insert_id=insert_id)
    return Response(status_code=status.HTTP_201_CREATED)


@router.options(f"/{BOOK_PATH}")
def preflight_books() -> Response:
    """CORS preflight."""
    return Response(status_code=status.HTTP_200_OK)


# Item endpoint
@router.get(f"/{BOOK_PATH}/{{book_path:path}}")
def get_book(book_path: str, store: BookStore = Depends(get_book_store)) -> Response:
    """Get a single book by ID."""
    book_id = resolve_book_id(book_path)

    try:
        book = store.get_book(book_id)
    except BookNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    try:
        body = book.model_dump_json()
    except PydanticSerializationError as e:
        logger.error("Failed to serialize book", book_id=book_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(content=body, media_type="application/json")


@router.delete(f"/{BOOK_PATH}/{{book_path:path}}")
def delete_book(book_path: str, store: BookStore = Depends(get_book_store)) -> Response:
    """Delete a book by ID; missing ids still succeed."""
    book_id = resolve_book_id(book_path)

    try:
        store.delete_book(book_id)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response(status_code=status.HTTP_200_OK)
