"""
Unit tests for the book model and item path parsing.
"""

import pytest
from pydantic import ValidationError

from books_api.models import Book, BookList, BookPath, PathStatus, parse_book_path


class TestBook:
    """Test cases for the Book model."""

    def test_json_field_names(self, sample_book):
        """Books serialize with the table's column names."""
        assert sample_book.model_dump() == {
            "bookid": 1,
            "bookname": "Dune",
            "author": "Herbert",
            "genre": "SF",
            "publisher": "Ace"
        }

    def test_missing_fields_default_to_zero_values(self):
        """A partial body still decodes."""
        book = Book.model_validate_json('{"bookname": "Emma"}')
        assert book.bookid == 0
        assert book.bookname == "Emma"
        assert book.author == ""

    def test_unknown_fields_ignored(self):
        """Extra keys in the body are dropped."""
        book = Book.model_validate({"bookid": 3, "isbn": "123"})
        assert "isbn" not in book.model_dump()

    def test_non_numeric_id_rejected(self):
        """A non-numeric id does not decode."""
        with pytest.raises(ValidationError):
            Book.model_validate_json('{"bookid": "three"}')

    def test_book_list_serialization(self, sample_book):
        """Lists serialize to JSON arrays, empty lists included."""
        assert BookList.dump_json([]) == b"[]"
        assert BookList.dump_json([sample_book]).startswith(b'[{"bookid":1,')


class TestParseBookPath:
    """Test cases for parse_book_path."""

    @pytest.mark.parametrize("remainder,book_id", [
        ("1", 1),
        ("42", 42),
        ("007", 7),
        ("-3", -3),
        ("9223372036854775807", 2**63 - 1),
    ])
    def test_integer_segment(self, remainder, book_id):
        """A single integer segment names a book."""
        assert parse_book_path(remainder) == BookPath(status=PathStatus.OK, book_id=book_id)

    @pytest.mark.parametrize("remainder", [
        "abc", "", "1.5", " 1", "1_000", "1e3", "\u0661", "9223372036854775808", "-9223372036854775809"
    ])
    def test_non_integer_segment(self, remainder):
        """Anything but an integer does not name a book."""
        result = parse_book_path(remainder)
        assert result.status == PathStatus.NOT_FOUND
        assert result.book_id is None

    @pytest.mark.parametrize("remainder", ["1/2", "1/", "abc/def", "books/1"])
    def test_nested_segments(self, remainder):
        """More than one segment is malformed."""
        assert parse_book_path(remainder).status == PathStatus.MALFORMED


@pytest.mark.parametrize("body", [
    '{"bookid": "5"}',
    '{"bookid": true}',
    '{"bookid": 1.0}',
    '{"bookid": 9223372036854775808}',
])
def test_book_values_not_coerced(body):
    """Ids must be JSON integers within the column range."""
    with pytest.raises(ValidationError):
        Book.model_validate_json(body)
