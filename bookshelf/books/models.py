"""
Book entity and validation rules.

A ``Book`` is a single tracked title in the collection. Validation is a
normalize-then-validate step: a missing ``type`` is defaulted to
``book`` before the remaining checks run.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any

from bookshelf.errors import ValidationError


class BookStatus(str, Enum):
    """Reading status of a book."""
    WANT_TO_READ = "Want to Read"
    CURRENTLY_READING = "Currently Reading"
    READ = "Read"

    @classmethod
    def is_valid(cls, value: Optional[str]) -> bool:
        return value in {status.value for status in cls}


class BookType(str, Enum):
    """Format of a book."""
    BOOK = "book"
    AUDIOBOOK = "audiobook"

    @classmethod
    def is_valid(cls, value: Optional[str]) -> bool:
        return value in {book_type.value for book_type in cls}


DEFAULT_STATUS = BookStatus.WANT_TO_READ.value
DEFAULT_TYPE = BookType.BOOK.value

MIN_RATING = 1
MAX_RATING = 10

# Largest value an INTEGER column can hold
MAX_SERIES_INDEX = 2 ** 63 - 1


class _Unset:
    """Marker for a partial-update argument that was not provided."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


def is_set(value: Any) -> bool:
    """Return True when a partial-update argument was provided (even as None)."""
    return value is not UNSET


@dataclass
class Book:
    """A book in the collection."""
    title: str
    author: str
    external_id: str
    isbn: Optional[str] = None
    status: str = ""
    type: str = ""
    rating: Optional[int] = None
    comments: Optional[str] = None
    cover_url: Optional[str] = None
    series: Optional[str] = None
    series_index: Optional[int] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation of the book."""
        data = asdict(self)
        return {"id": data.pop("id"), **data}


def validate_rating(rating: Optional[int]) -> None:
    """Reject a rating outside the 1-10 range. None means unrated."""
    if rating is None:
        return
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("rating must be an integer")
    if rating < MIN_RATING or rating > MAX_RATING:
        raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")


def validate_status(status: Optional[str]) -> None:
    if not BookStatus.is_valid(status):
        raise ValidationError(
            "invalid status provided, must be 'Want to Read', 'Currently Reading' or 'Read'"
        )


def validate_type(book_type: Optional[str]) -> None:
    if not BookType.is_valid(book_type):
        raise ValidationError("invalid type provided, must be 'book' or 'audiobook'")


def validate_series(series: Optional[str], series_index: Optional[int]) -> None:
    """
    Check the series co-constraint.

    Args:
        series: Series name, or None
        series_index: Position within the series, or None

    Raises:
        ValidationError: If the index is out of range, or is given without a series name
    """
    if series_index is None:
        return
    if isinstance(series_index, bool) or not isinstance(series_index, int):
        raise ValidationError("series_index must be an integer")
    if series_index <= 0:
        raise ValidationError("series_index must be greater than 0")
    if series_index > MAX_SERIES_INDEX:
        raise ValidationError(f"series_index must not be greater than {MAX_SERIES_INDEX}")
    if series is None or not series.strip():
        raise ValidationError("cannot provide series_index without series name")


def validate_book(book: Book) -> None:
    """
    Normalize and validate a book before it is stored.

    A missing ``type`` is set to ``book``. The status is not defaulted
    here; callers that treat an empty status as "use the default" must
    apply it first.

    Args:
        book: Book to validate (``type`` may be modified)

    Raises:
        ValidationError: If any field is invalid
    """
    for field_name in ("title", "author", "external_id"):
        value = getattr(book, field_name)
        if value is None or not str(value).strip():
            raise ValidationError(f"{field_name} is required")

    validate_rating(book.rating)
    validate_status(book.status)

    if not book.type:
        book.type = DEFAULT_TYPE
    else:
        validate_type(book.type)

    validate_series(book.series, book.series_index)
