import pytest
from unittest.mock import Mock

from bookshelf.api.openlibrary import OpenLibraryClient
from bookshelf.books.models import Book
from bookshelf.books.shelves import ShelfStore
from bookshelf.books.store import BookStore
from bookshelf.config import AppConfig
from bookshelf.db.database import Database
from bookshelf.main import create_app
from bookshelf.search.reconciler import SearchReconciler
from bookshelf.web.context import Services


@pytest.fixture
def database():
    """Fresh in-memory database for each test."""
    db = Database("sqlite://")
    db.init_db()
    yield db
    db.close()


@pytest.fixture
def book_store(database):
    return BookStore(database)


@pytest.fixture
def shelf_store(database):
    return ShelfStore(database)


@pytest.fixture
def catalog_client():
    """Open Library client whose search never leaves the process."""
    client = OpenLibraryClient()
    client.search = Mock(return_value=[])
    yield client
    client.close()


@pytest.fixture
def reconciler(catalog_client, book_store):
    return SearchReconciler(catalog_client, book_store)


@pytest.fixture
def config():
    return AppConfig(database_url="sqlite://")


@pytest.fixture
def services(book_store, shelf_store, reconciler):
    return Services(book_store=book_store, shelf_store=shelf_store, reconciler=reconciler)


@pytest.fixture
def app(config, services):
    app = create_app(config, services)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_book():
    """Factory for unsaved books; keyword arguments override the defaults."""
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        fields = {
            'title': 'Dune',
            'author': 'Frank Herbert',
            'external_id': f"OL{counter['n']}W",
        }
        fields.update(overrides)
        return Book(**fields)

    return _make


@pytest.fixture
def sample_book(book_store, make_book):
    """A stored book."""
    book = make_book(title='Dune', author='Frank Herbert', external_id='OL893415W', isbn='9780441013593')
    book_store.add_book(book)
    return book
