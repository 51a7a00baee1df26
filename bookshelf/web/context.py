"""
Access to the service objects a Flask app was built with.
"""

from dataclasses import dataclass

from flask import Flask, current_app

from bookshelf.books.shelves import ShelfStore
from bookshelf.books.store import BookStore
from bookshelf.search.reconciler import SearchReconciler

EXTENSION_KEY = "bookshelf"


@dataclass
class Services:
    """Stores and collaborators handed to the request handlers."""
    book_store: BookStore
    shelf_store: ShelfStore
    reconciler: SearchReconciler


def register_services(app: Flask, services: Services) -> None:
    app.extensions[EXTENSION_KEY] = services


def get_services() -> Services:
    """Services of the app handling the current request."""
    return current_app.extensions[EXTENSION_KEY]
