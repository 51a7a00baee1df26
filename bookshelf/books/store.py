"""
Book store for the Bookshelf service.

Create/read/update/delete of book records. Every operation runs in its
own session and transaction; the database serializes concurrent writes
and enforces the same constraints the validator checks.
"""

from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bookshelf.books.models import (
    DEFAULT_STATUS,
    UNSET,
    Book,
    is_set,
    validate_book,
    validate_rating,
    validate_series,
    validate_status,
    validate_type,
)
from bookshelf.db.database import Database
from bookshelf.db.models import BookRecord, BookShelfRecord, fits_integer
from bookshelf.errors import ConflictError, InternalError, NotFoundError, ValidationError
from bookshelf.utils.logging import get_logger


def record_to_book(record: BookRecord) -> Book:
    """Convert a database row into a Book."""
    return Book(
        id=record.id,
        title=record.title,
        author=record.author,
        external_id=record.external_id,
        isbn=record.isbn,
        status=record.status,
        type=record.type,
        rating=record.rating,
        comments=record.comments,
        cover_url=record.cover_url,
        series=record.series,
        series_index=record.series_index,
    )


def check_row_id(row_id: int, kind: str = "book") -> None:
    """Raise NotFoundError for an ID no row can have."""
    if not fits_integer(row_id):
        raise NotFoundError(f"{kind} with ID {row_id} not found")


class BookStore:
    """
    Durable storage of the book collection.

    Responsibilities:
    - Apply defaults and validate books before they are written
    - Map constraint violations and missing rows to service errors
    - Keep every mutation atomic
    """

    def __init__(self, database: Database, logger=None):
        """
        Initialize the store.

        Args:
            database: Database providing sessions
            logger: Logger to use (defaults to a module logger)
        """
        self.database = database
        self.logger = logger or get_logger(__name__)

    def add_book(self, book: Book) -> int:
        """
        Add a book to the collection.

        The book's ``id`` is set on success.

        Args:
            book: Book to add

        Returns:
            The newly assigned ID

        Raises:
            ValidationError: If the book is invalid
            ConflictError: If a book with the same external_id exists
        """
        if not book.status:
            book.status = DEFAULT_STATUS
        validate_book(book)

        self.logger.debug("Adding book", title=book.title, external_id=book.external_id)

        try:
            with self.database.session_scope() as session:
                existing = session.query(BookRecord.id).filter(
                    BookRecord.external_id == book.external_id
                ).first()
                if existing:
                    raise ConflictError(
                        f"book with external_id {book.external_id} already exists"
                    )

                record = BookRecord(
                    title=book.title,
                    author=book.author,
                    external_id=book.external_id,
                    isbn=book.isbn,
                    status=book.status,
                    type=book.type,
                    rating=book.rating,
                    comments=book.comments,
                    cover_url=book.cover_url,
                    series=book.series,
                    series_index=book.series_index,
                )
                session.add(record)
                session.flush()
                book.id = record.id

        except ConflictError:
            self.logger.warning("Duplicate book rejected", external_id=book.external_id)
            raise
        except IntegrityError as e:
            # Another request inserted the same external_id between check and insert
            self.logger.warning(
                "Insert violated a constraint",
                external_id=book.external_id,
                error=str(e.orig)
            )
            raise ConflictError(
                f"book with external_id {book.external_id} already exists"
            ) from e
        except SQLAlchemyError as e:
            self.logger.error("Failed to add book", title=book.title, error=str(e))
            raise InternalError(f"failed to add book: {e}") from e

        self.logger.info("Added book", book_id=book.id, title=book.title)
        return book.id

    def get_books(self) -> List[Book]:
        """
        Get all books ordered by title.

        Books with identical titles come back in insertion order.

        Returns:
            List of books (empty when the collection is empty)
        """
        try:
            with self.database.session_scope() as session:
                records = session.query(BookRecord).order_by(
                    BookRecord.title.asc(),
                    BookRecord.id.asc()
                ).all()
                books = [record_to_book(r) for r in records]
        except SQLAlchemyError as e:
            self.logger.error("Failed to list books", error=str(e))
            raise InternalError(f"failed to retrieve books: {e}") from e

        self.logger.debug("Retrieved books", count=len(books))
        return books

    def get_book_by_id(self, book_id: int) -> Book:
        """
        Get a single book.

        Raises:
            NotFoundError: If no book has this ID
        """
        check_row_id(book_id)

        try:
            with self.database.session_scope() as session:
                record = session.get(BookRecord, book_id)
                book = record_to_book(record) if record else None
        except SQLAlchemyError as e:
            self.logger.error("Failed to get book", book_id=book_id, error=str(e))
            raise InternalError(f"failed to retrieve book {book_id}: {e}") from e

        if book is None:
            raise NotFoundError(f"book with ID {book_id} not found")
        return book

    def update_book_status(self, book_id: int, status: str) -> None:
        """
        Change the reading status of a book.

        Raises:
            ValidationError: If the status is not recognized
            NotFoundError: If no book has this ID
        """
        validate_status(status)
        self._update_column(book_id, "status", status)

    def update_book_type(self, book_id: int, book_type: str) -> None:
        """
        Change whether a book is a paper book or an audiobook.

        Raises:
            ValidationError: If the type is not recognized
            NotFoundError: If no book has this ID
        """
        validate_type(book_type)
        self._update_column(book_id, "type", book_type)

    def _update_column(self, book_id: int, column: str, value: Any) -> None:
        self.logger.debug("Updating book", book_id=book_id, column=column, value=value)
        check_row_id(book_id)

        try:
            with self.database.session_scope() as session:
                updated = session.query(BookRecord).filter(
                    BookRecord.id == book_id
                ).update({column: value}, synchronize_session=False)
        except SQLAlchemyError as e:
            self.logger.error("Failed to update book", book_id=book_id, column=column, error=str(e))
            raise InternalError(f"failed to update {column}: {e}") from e

        if updated == 0:
            self.logger.info("No book to update", book_id=book_id)
            raise NotFoundError(f"book with ID {book_id} not found")

        self.logger.info("Updated book", book_id=book_id, column=column)

    def update_book_details(
        self,
        book_id: int,
        rating: Optional[int] = UNSET,
        comments: Optional[str] = UNSET,
        series: Optional[str] = UNSET,
        series_index: Optional[int] = UNSET,
    ) -> Book:
        """
        Partially update rating, comments and series information.

        Only arguments that are passed are changed; passing ``None``
        clears the field. The series co-constraint is checked against
        the row as it will be after the update.

        Args:
            book_id: ID of the book
            rating: New rating (1-10) or None
            comments: New comments or None
            series: New series name or None
            series_index: New position in the series or None

        Returns:
            The updated book

        Raises:
            ValidationError: If the resulting values are invalid
            NotFoundError: If no book has this ID
        """
        changes = {
            name: value
            for name, value in (
                ("rating", rating),
                ("comments", comments),
                ("series", series),
                ("series_index", series_index),
            )
            if is_set(value)
        }

        if "rating" in changes:
            validate_rating(changes["rating"])

        self.logger.debug("Updating book details", book_id=book_id, fields=sorted(changes))

        try:
            with self.database.session_scope() as session:
                check_row_id(book_id)
                record = session.get(BookRecord, book_id)
                if record is None:
                    raise NotFoundError(f"book with ID {book_id} not found")

                validate_series(
                    changes.get("series", record.series),
                    changes.get("series_index", record.series_index),
                )

                for name, value in changes.items():
                    setattr(record, name, value)
                session.flush()
                book = record_to_book(record)

        except (NotFoundError, ValidationError) as e:
            self.logger.info("Book details not updated", book_id=book_id, reason=e.message)
            raise
        except SQLAlchemyError as e:
            self.logger.error("Failed to update book details", book_id=book_id, error=str(e))
            raise InternalError(f"failed to update book details: {e}") from e

        self.logger.info("Updated book details", book_id=book_id, fields=sorted(changes))
        return book

    def delete_book(self, book_id: int) -> None:
        """
        Permanently remove a book and its shelf memberships.

        Raises:
            NotFoundError: If no book has this ID
        """
        try:
            with self.database.session_scope() as session:
                check_row_id(book_id)

                session.query(BookShelfRecord).filter(
                    BookShelfRecord.book_id == book_id
                ).delete(synchronize_session=False)

                deleted = session.query(BookRecord).filter(
                    BookRecord.id == book_id
                ).delete(synchronize_session=False)

                if deleted == 0:
                    raise NotFoundError(f"book with ID {book_id} not found")

        except NotFoundError:
            self.logger.info("No book to delete", book_id=book_id)
            raise
        except SQLAlchemyError as e:
            self.logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise InternalError(f"failed to delete book: {e}") from e

        self.logger.info("Deleted book", book_id=book_id)
