import pytest
from sqlalchemy.exc import IntegrityError

from bookshelf.books.models import Book
from bookshelf.db.models import BookRecord
from bookshelf.errors import ConflictError, NotFoundError, ValidationError


def test_add_book_assigns_id(book_store, make_book):
    book = make_book()
    book_id = book_store.add_book(book)

    assert book_id > 0
    assert book.id == book_id


def test_add_book_applies_defaults(book_store, make_book):
    book = make_book()
    book_store.add_book(book)

    assert book.status == "Want to Read"
    assert book.type == "book"


def test_add_book_rejects_invalid_status(book_store, make_book):
    with pytest.raises(ValidationError):
        book_store.add_book(make_book(status="Finished"))
    assert book_store.get_books() == []


def test_add_book_rejects_missing_author(book_store, make_book):
    with pytest.raises(ValidationError, match="author is required"):
        book_store.add_book(make_book(author=""))


def test_add_duplicate_external_id_conflicts(book_store, make_book):
    book_store.add_book(make_book(external_id="OL1W"))

    with pytest.raises(ConflictError):
        book_store.add_book(make_book(title="Dune Messiah", external_id="OL1W"))

    assert len(book_store.get_books()) == 1


def test_round_trip(book_store):
    book = Book(
        title="Children of Dune",
        author="Frank Herbert",
        external_id="OL893527W",
        isbn="9780441104024",
        status="Currently Reading",
        type="audiobook",
        rating=8,
        comments="Slower than the first two",
        cover_url="https://covers.openlibrary.org/b/id/6977542-M.jpg",
        series="Dune Chronicles",
        series_index=3,
    )
    book_store.add_book(book)

    assert book_store.get_book_by_id(book.id) == book


def test_get_books_empty(book_store):
    assert book_store.get_books() == []


def test_get_books_ordered_by_title(book_store, make_book):
    for title in ["Hyperion", "Dune", "Foundation"]:
        book_store.add_book(make_book(title=title))

    assert [b.title for b in book_store.get_books()] == ["Dune", "Foundation", "Hyperion"]


def test_get_books_equal_titles_keep_insertion_order(book_store, make_book):
    first = make_book(title="Dune", author="Frank Herbert")
    second = make_book(title="Dune", author="Brian Herbert")
    book_store.add_book(first)
    book_store.add_book(second)

    assert [b.id for b in book_store.get_books()] == [first.id, second.id]


def test_get_missing_book(book_store):
    with pytest.raises(NotFoundError):
        book_store.get_book_by_id(999)


def test_update_status(book_store, sample_book):
    book_store.update_book_status(sample_book.id, "Read")

    assert book_store.get_book_by_id(sample_book.id).status == "Read"


def test_update_status_invalid_leaves_row_unchanged(book_store, sample_book):
    with pytest.raises(ValidationError):
        book_store.update_book_status(sample_book.id, "Done")

    assert book_store.get_book_by_id(sample_book.id).status == "Want to Read"


def test_update_status_missing_book(book_store):
    with pytest.raises(NotFoundError):
        book_store.update_book_status(42, "Read")


def test_update_type(book_store, sample_book):
    book_store.update_book_type(sample_book.id, "audiobook")
    assert book_store.get_book_by_id(sample_book.id).type == "audiobook"

    with pytest.raises(ValidationError):
        book_store.update_book_type(sample_book.id, "ebook")
    with pytest.raises(NotFoundError):
        book_store.update_book_type(42, "book")


def test_update_details_only_changes_given_fields(book_store, sample_book):
    book_store.update_book_details(sample_book.id, rating=9, comments="Great")
    book_store.update_book_details(sample_book.id, comments="Still great")

    stored = book_store.get_book_by_id(sample_book.id)
    assert stored.rating == 9
    assert stored.comments == "Still great"


def test_update_details_explicit_none_clears(book_store, sample_book):
    book_store.update_book_details(sample_book.id, rating=7, comments="Fine")
    updated = book_store.update_book_details(sample_book.id, rating=None)

    assert updated.rating is None
    assert updated.comments == "Fine"


def test_update_details_with_nothing_is_a_noop(book_store, sample_book):
    updated = book_store.update_book_details(sample_book.id)
    assert updated == book_store.get_book_by_id(sample_book.id)


def test_update_details_rejects_bad_rating(book_store, sample_book):
    with pytest.raises(ValidationError):
        book_store.update_book_details(sample_book.id, rating=11)
    assert book_store.get_book_by_id(sample_book.id).rating is None


def test_update_details_series_index_without_series(book_store, sample_book):
    with pytest.raises(ValidationError):
        book_store.update_book_details(sample_book.id, series=None, series_index=3)


def test_update_details_series_index_uses_stored_series(book_store, sample_book):
    book_store.update_book_details(sample_book.id, series="Dune Chronicles")
    updated = book_store.update_book_details(sample_book.id, series_index=1)

    assert updated.series == "Dune Chronicles"
    assert updated.series_index == 1


def test_update_details_cannot_drop_series_under_index(book_store, sample_book):
    book_store.update_book_details(sample_book.id, series="Dune Chronicles", series_index=1)

    with pytest.raises(ValidationError):
        book_store.update_book_details(sample_book.id, series=None)

    book_store.update_book_details(sample_book.id, series=None, series_index=None)
    stored = book_store.get_book_by_id(sample_book.id)
    assert stored.series is None
    assert stored.series_index is None


def test_update_details_missing_book(book_store):
    with pytest.raises(NotFoundError):
        book_store.update_book_details(42, rating=5)


def test_delete_book(book_store, sample_book):
    book_store.delete_book(sample_book.id)

    with pytest.raises(NotFoundError):
        book_store.get_book_by_id(sample_book.id)


def test_delete_missing_book(book_store):
    with pytest.raises(NotFoundError):
        book_store.delete_book(42)


def test_delete_book_removes_shelf_memberships(book_store, shelf_store, sample_book):
    shelf = shelf_store.create_shelf("Favourites")
    shelf_store.add_book_to_shelf(shelf.id, sample_book.id)

    book_store.delete_book(sample_book.id)

    assert shelf_store.get_books_in_shelf(shelf.id) == []


def test_schema_enforces_rating_range(database):
    with pytest.raises(IntegrityError):
        with database.session_scope() as session:
            session.add(BookRecord(
                title="Dune",
                author="Frank Herbert",
                external_id="OL1W",
                status="Read",
                type="book",
                rating=11,
            ))


def test_schema_enforces_status_values(database):
    with pytest.raises(IntegrityError):
        with database.session_scope() as session:
            session.add(BookRecord(
                title="Dune",
                author="Frank Herbert",
                external_id="OL1W",
                status="Finished",
                type="book",
            ))


@pytest.mark.parametrize("book_id", [2 ** 70, -2 ** 70])
def test_id_outside_integer_range_is_not_found(book_store, sample_book, book_id):
    with pytest.raises(NotFoundError):
        book_store.get_book_by_id(book_id)
    with pytest.raises(NotFoundError):
        book_store.update_book_status(book_id, "Read")
    with pytest.raises(NotFoundError):
        book_store.update_book_type(book_id, "audiobook")
    with pytest.raises(NotFoundError):
        book_store.update_book_details(book_id, rating=5)
    with pytest.raises(NotFoundError):
        book_store.delete_book(book_id)

    assert [b.id for b in book_store.get_books()] == [sample_book.id]


def test_add_book_rejects_series_index_too_large(book_store, make_book):
    with pytest.raises(ValidationError, match="series_index"):
        book_store.add_book(make_book(series="Dune Chronicles", series_index=2 ** 70))

    assert book_store.get_books() == []


def test_update_details_rejects_series_index_too_large(book_store, sample_book):
    book_store.update_book_details(sample_book.id, series="Dune Chronicles")

    with pytest.raises(ValidationError, match="series_index"):
        book_store.update_book_details(sample_book.id, series_index=2 ** 70)

    assert book_store.get_book_by_id(sample_book.id).series_index is None
