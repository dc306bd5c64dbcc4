"""
API models and schemas for the FastAPI application.
"""

import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter


# ASCII digits only; the id column is a signed 64-bit integer
BOOK_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
MIN_BOOK_ID = -2**63
MAX_BOOK_ID = 2**63 - 1


class Book(BaseModel):
    """A row of the books table.

    Missing fields decode to zero values so a partial body still inserts.
    Values are not coerced: ``"5"`` or ``true`` is not a valid id.
    """
    bookid: int = Field(
        0, ge=MIN_BOOK_ID, le=MAX_BOOK_ID, description="Primary key, supplied by the caller"
    )
    bookname: str = Field("", description="Book title")
    author: str = Field("", description="Book author")
    genre: str = Field("", description="Book genre")
    publisher: str = Field("", description="Book publisher")

    model_config = {
        "extra": "ignore",
        "strict": True
    }


BookList = TypeAdapter(List[Book])


class PathStatus(str, Enum):
    """Outcome of matching the item endpoint path."""
    OK = "ok"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


class BookPath(BaseModel):
    """Typed result of parsing the trailing part of ``/books/{...}``."""
    status: PathStatus = Field(..., description="Match outcome")
    book_id: Optional[int] = Field(None, description="Parsed identifier when status is OK")


def parse_book_path(remainder: str) -> BookPath:
    """
    Parse everything after ``books/`` into a book identifier.

    A single signed 64-bit integer segment matches; more than one segment
    is malformed; anything else (including an empty segment) does not name
    a book.
    """
    segments = remainder.split("/")
    if len(segments) > 1:
        return BookPath(status=PathStatus.MALFORMED)

    segment = segments[0]
    if not BOOK_ID_PATTERN.fullmatch(segment):
        return BookPath(status=PathStatus.NOT_FOUND)

    book_id = int(segment)
    if not MIN_BOOK_ID <= book_id <= MAX_BOOK_ID:
        return BookPath(status=PathStatus.NOT_FOUND)

    return BookPath(status=PathStatus.OK, book_id=book_id)
