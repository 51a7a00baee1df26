"""
Book routes for the Bookshelf service.
"""

from flask import Blueprint, jsonify, request

from bookshelf.books.models import Book
from bookshelf.web.context import get_services
from bookshelf.web.payloads import (
    AddBookPayload,
    DetailsPayload,
    StatusPayload,
    TypePayload,
    parse_body,
)

books_bp = Blueprint('books', __name__, url_prefix='/api/books')


@books_bp.route('', methods=['GET'])
def list_books():
    """List the collection ordered by title."""
    books = get_services().book_store.get_books()
    return jsonify([book.to_dict() for book in books])


@books_bp.route('', methods=['POST'])
def add_book():
    """Add a book picked from the catalog search."""
    payload = parse_body(AddBookPayload)

    book = Book(
        title=payload.title,
        author=payload.author,
        external_id=payload.external_id,
        isbn=payload.isbn,
        status=payload.status or "",
        type=payload.type or "",
        rating=payload.rating,
        comments=payload.comments,
        cover_url=payload.cover_url,
        series=payload.series,
        series_index=payload.series_index,
    )
    get_services().book_store.add_book(book)

    return jsonify(book.to_dict()), 201


@books_bp.route('/search', methods=['GET'])
def search_books():
    """Search the catalog, marking books already in the collection."""
    results = get_services().reconciler.search(request.args.get('q'))
    return jsonify([result.to_dict() for result in results])


@books_bp.route('/<int:book_id>', methods=['GET'])
def get_book(book_id: int):
    book = get_services().book_store.get_book_by_id(book_id)
    return jsonify(book.to_dict())


@books_bp.route('/<int:book_id>', methods=['PUT'])
def update_status(book_id: int):
    """Move a book to another reading status."""
    payload = parse_body(StatusPayload)
    get_services().book_store.update_book_status(book_id, payload.status)
    return jsonify({'message': 'Book status updated successfully'})


@books_bp.route('/<int:book_id>/type', methods=['PUT'])
def update_type(book_id: int):
    payload = parse_body(TypePayload)
    get_services().book_store.update_book_type(book_id, payload.type)
    return jsonify({'message': 'Book type updated successfully'})


@books_bp.route('/<int:book_id>/details', methods=['PUT'])
def update_details(book_id: int):
    """
    Update rating, comments and series information.

    Fields left out of the body keep their stored values; an explicit
    null clears a field.
    """
    payload = parse_body(DetailsPayload)
    changes = {name: getattr(payload, name) for name in payload.model_fields_set}

    book = get_services().book_store.update_book_details(book_id, **changes)

    return jsonify({
        'message': 'Book details updated successfully',
        'book': book.to_dict(),
    })


@books_bp.route('/<int:book_id>', methods=['DELETE'])
def delete_book(book_id: int):
    get_services().book_store.delete_book(book_id)
    return '', 204
