"""
Custom shelves.

Shelves are named groupings of books that exist alongside the fixed
reading status. Membership lives in the ``book_shelves`` junction table.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from bookshelf.books.models import Book
from bookshelf.books.store import check_row_id, record_to_book
from bookshelf.db.database import Database
from bookshelf.db.models import BookRecord, BookShelfRecord, ShelfRecord, fits_integer, utcnow
from bookshelf.errors import ConflictError, InternalError, NotFoundError, ValidationError
from bookshelf.utils.logging import get_logger


@dataclass
class Shelf:
    """A named custom shelf."""
    id: int
    name: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class ShelfStore:
    """Storage of custom shelves and their book memberships."""

    def __init__(self, database: Database, logger=None):
        self.database = database
        self.logger = logger or get_logger(__name__)

    def list_shelves(self) -> List[Shelf]:
        """Get all shelves ordered by name."""
        try:
            with self.database.session_scope() as session:
                records = session.query(ShelfRecord).order_by(
                    ShelfRecord.name.asc()
                ).all()
                return [Shelf(id=r.id, name=r.name, created_at=r.created_at) for r in records]
        except SQLAlchemyError as e:
            self.logger.error("Failed to list shelves", error=str(e))
            raise InternalError(f"failed to retrieve shelves: {e}") from e

    def create_shelf(self, name: Optional[str]) -> Shelf:
        """
        Create a shelf.

        Args:
            name: Shelf name (surrounding whitespace is stripped)

        Returns:
            The created shelf

        Raises:
            ValidationError: If the name is blank
            ConflictError: If a shelf with this name exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("shelf name is required")

        try:
            with self.database.session_scope() as session:
                if session.query(ShelfRecord.id).filter(ShelfRecord.name == name).first():
                    raise ConflictError(f"shelf {name!r} already exists")

                record = ShelfRecord(name=name, created_at=utcnow())
                session.add(record)
                session.flush()
                shelf = Shelf(id=record.id, name=record.name, created_at=record.created_at)

        except ConflictError:
            self.logger.warning("Duplicate shelf rejected", name=name)
            raise
        except IntegrityError as e:
            raise ConflictError(f"shelf {name!r} already exists") from e
        except SQLAlchemyError as e:
            self.logger.error("Failed to create shelf", name=name, error=str(e))
            raise InternalError(f"failed to create shelf: {e}") from e

        self.logger.info("Created shelf", shelf_id=shelf.id, name=name)
        return shelf

    def delete_shelf(self, shelf_id: int) -> None:
        """
        Delete a shelf and its memberships. The books themselves stay.

        Raises:
            NotFoundError: If no shelf has this ID
        """
        try:
            with self.database.session_scope() as session:
                check_row_id(shelf_id, "shelf")

                session.query(BookShelfRecord).filter(
                    BookShelfRecord.shelf_id == shelf_id
                ).delete(synchronize_session=False)

                deleted = session.query(ShelfRecord).filter(
                    ShelfRecord.id == shelf_id
                ).delete(synchronize_session=False)

                if deleted == 0:
                    raise NotFoundError(f"shelf with ID {shelf_id} not found")

        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            self.logger.error("Failed to delete shelf", shelf_id=shelf_id, error=str(e))
            raise InternalError(f"failed to delete shelf: {e}") from e

        self.logger.info("Deleted shelf", shelf_id=shelf_id)

    def add_book_to_shelf(self, shelf_id: int, book_id: int) -> None:
        """
        Put a book on a shelf. Re-adding refreshes the added_at timestamp.

        Raises:
            NotFoundError: If the shelf or the book does not exist
        """
        try:
            with self.database.session_scope() as session:
                check_row_id(shelf_id, "shelf")
                check_row_id(book_id)

                if session.get(ShelfRecord, shelf_id) is None:
                    raise NotFoundError(f"shelf with ID {shelf_id} not found")
                if session.get(BookRecord, book_id) is None:
                    raise NotFoundError(f"book with ID {book_id} not found")

                membership = session.get(BookShelfRecord, (book_id, shelf_id))
                if membership is None:
                    session.add(BookShelfRecord(
                        book_id=book_id,
                        shelf_id=shelf_id,
                        added_at=utcnow(),
                    ))
                else:
                    membership.added_at = utcnow()

        except NotFoundError:
            raise
        except IntegrityError as e:
            self.logger.info("Book or shelf removed while shelving", shelf_id=shelf_id, book_id=book_id)
            raise NotFoundError(f"book with ID {book_id} or shelf with ID {shelf_id} not found") from e
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to add book to shelf",
                shelf_id=shelf_id,
                book_id=book_id,
                error=str(e)
            )
            raise InternalError(f"failed to add book to shelf: {e}") from e

        self.logger.info("Added book to shelf", shelf_id=shelf_id, book_id=book_id)

    def remove_book_from_shelf(self, shelf_id: int, book_id: int) -> None:
        """
        Take a book off a shelf.

        Raises:
            NotFoundError: If the book is not on the shelf
        """
        if not (fits_integer(shelf_id) and fits_integer(book_id)):
            raise NotFoundError(f"book {book_id} is not on shelf {shelf_id}")

        try:
            with self.database.session_scope() as session:
                deleted = session.query(BookShelfRecord).filter(
                    BookShelfRecord.shelf_id == shelf_id,
                    BookShelfRecord.book_id == book_id,
                ).delete(synchronize_session=False)
        except SQLAlchemyError as e:
            self.logger.error(
                "Failed to remove book from shelf",
                shelf_id=shelf_id,
                book_id=book_id,
                error=str(e)
            )
            raise InternalError(f"failed to remove book from shelf: {e}") from e

        if deleted == 0:
            raise NotFoundError(f"book {book_id} is not on shelf {shelf_id}")

        self.logger.info("Removed book from shelf", shelf_id=shelf_id, book_id=book_id)

    def get_books_in_shelf(self, shelf_id: int) -> List[Book]:
        """
        Get the books on a shelf ordered by title.

        Raises:
            NotFoundError: If no shelf has this ID
        """
        try:
            with self.database.session_scope() as session:
                check_row_id(shelf_id, "shelf")

                if session.get(ShelfRecord, shelf_id) is None:
                    raise NotFoundError(f"shelf with ID {shelf_id} not found")

                records = session.query(BookRecord).join(
                    BookShelfRecord, BookShelfRecord.book_id == BookRecord.id
                ).filter(
                    BookShelfRecord.shelf_id == shelf_id
                ).order_by(
                    BookRecord.title.asc(),
                    BookRecord.id.asc()
                ).all()
                return [record_to_book(r) for r in records]

        except NotFoundError:
            raise
        except SQLAlchemyError as e:
            self.logger.error("Failed to list shelf books", shelf_id=shelf_id, error=str(e))
            raise InternalError(f"failed to retrieve shelf books: {e}") from e
