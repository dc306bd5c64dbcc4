"""
Pytest configuration and shared fixtures.
"""

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from books_api.config import APIConfig
from books_api.database import BookStore
from books_api.main import create_app
from books_api.models import Book


CREATE_BOOKS_TABLE = """
    CREATE TABLE books (
        bookid INTEGER PRIMARY KEY,
        bookname TEXT NOT NULL,
        author TEXT NOT NULL,
        genre TEXT NOT NULL,
        publisher TEXT NOT NULL
    )
"""


def create_books_table(engine):
    """Create the books table on the given engine."""
    with engine.begin() as conn:
        conn.execute(text(CREATE_BOOKS_TABLE))


@pytest.fixture
def books_table():
    """Callable creating the books table on an engine."""
    return create_books_table


@pytest.fixture
def test_settings():
    """Configuration used by the test application."""
    return APIConfig(database_url="sqlite://", log_format="console")


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine shared across threads, with the books table."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_books_table(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def book_store(sqlite_engine):
    """Storage accessor backed by the in-memory database."""
    return BookStore(sqlite_engine)


@pytest.fixture
def client(book_store, test_settings):
    """Test client serving a real storage accessor."""
    return TestClient(create_app(store=book_store, settings=test_settings))


@pytest.fixture
def mock_book_store():
    """Mock storage accessor for failure paths."""
    store = MagicMock(spec=BookStore)
    store.list_books.return_value = []
    store.insert_book.return_value = 0
    return store


@pytest.fixture
def mock_client(mock_book_store, test_settings):
    """Test client serving the mock storage accessor."""
    app = create_app(store=mock_book_store, settings=test_settings)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def sample_book():
    """Create a sample book for testing."""
    return Book(
        bookid=1,
        bookname="Dune",
        author="Herbert",
        genre="SF",
        publisher="Ace"
    )


@pytest.fixture
def sample_book_payload(sample_book):
    """JSON body for the sample book."""
    return sample_book.model_dump()
