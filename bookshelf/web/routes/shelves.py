"""
Custom shelf routes for the Bookshelf service.
"""

from flask import Blueprint, jsonify

from bookshelf.web.context import get_services
from bookshelf.web.payloads import ShelfPayload, parse_body

shelves_bp = Blueprint('shelves', __name__, url_prefix='/api/shelves')


@shelves_bp.route('', methods=['GET'])
def list_shelves():
    shelves = get_services().shelf_store.list_shelves()
    return jsonify([shelf.to_dict() for shelf in shelves])


@shelves_bp.route('', methods=['POST'])
def create_shelf():
    payload = parse_body(ShelfPayload)
    shelf = get_services().shelf_store.create_shelf(payload.name)
    return jsonify(shelf.to_dict()), 201


@shelves_bp.route('/<int:shelf_id>', methods=['DELETE'])
def delete_shelf(shelf_id: int):
    get_services().shelf_store.delete_shelf(shelf_id)
    return '', 204


@shelves_bp.route('/<int:shelf_id>/books', methods=['GET'])
def shelf_books(shelf_id: int):
    """List the books on a shelf ordered by title."""
    books = get_services().shelf_store.get_books_in_shelf(shelf_id)
    return jsonify([book.to_dict() for book in books])


@shelves_bp.route('/<int:shelf_id>/books/<int:book_id>', methods=['PUT'])
def add_to_shelf(shelf_id: int, book_id: int):
    get_services().shelf_store.add_book_to_shelf(shelf_id, book_id)
    return jsonify({'message': 'Book added to shelf'})


@shelves_bp.route('/<int:shelf_id>/books/<int:book_id>', methods=['DELETE'])
def remove_from_shelf(shelf_id: int, book_id: int):
    get_services().shelf_store.remove_book_from_shelf(shelf_id, book_id)
    return '', 204
