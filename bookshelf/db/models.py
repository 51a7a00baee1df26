"""
SQLAlchemy database models for the Bookshelf service.
"""

from datetime import datetime, timezone
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# SQLite INTEGER columns hold signed 64-bit values
MIN_INTEGER = -2 ** 63
MAX_INTEGER = 2 ** 63 - 1


def fits_integer(value: int) -> bool:
    """Whether a value can be bound to an INTEGER column."""
    return MIN_INTEGER <= value <= MAX_INTEGER


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the way DateTime columns store it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BookRecord(Base):
    """A book in the collection."""
    __tablename__ = 'books'
    __table_args__ = (
        CheckConstraint(
            "status IN ('Want to Read', 'Currently Reading', 'Read')",
            name='ck_books_status',
        ),
        CheckConstraint("type IN ('book', 'audiobook')", name='ck_books_type'),
        CheckConstraint(
            'rating IS NULL OR (rating >= 1 AND rating <= 10)',
            name='ck_books_rating',
        ),
        CheckConstraint(
            'series_index IS NULL OR series_index > 0',
            name='ck_books_series_index',
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    author = Column(Text, nullable=False)
    external_id = Column(String(100), unique=True, nullable=False)  # e.g. OL45804W
    isbn = Column(String(20), nullable=True)
    status = Column(String(50), nullable=False, default='Want to Read')
    type = Column(String(20), nullable=False, default='book')
    rating = Column(Integer, nullable=True)
    comments = Column(Text, nullable=True)
    cover_url = Column(Text, nullable=True)
    series = Column(Text, nullable=True)
    series_index = Column(Integer, nullable=True)


class ShelfRecord(Base):
    """A named custom shelf."""
    __tablename__ = 'shelves'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), unique=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class BookShelfRecord(Base):
    """Membership of a book on a custom shelf."""
    __tablename__ = 'book_shelves'

    book_id = Column(Integer, ForeignKey('books.id'), primary_key=True)
    shelf_id = Column(Integer, ForeignKey('shelves.id'), primary_key=True)
    added_at = Column(DateTime, default=utcnow)
