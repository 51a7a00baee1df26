"""
Main entry point for the Bookshelf service.

Builds the Flask app around the book store and catalog search, and
serves it with waitress.
"""

import atexit
from datetime import datetime, timezone
from typing import Optional

from flask import Flask

from bookshelf.api.openlibrary import OpenLibraryClient
from bookshelf.books.shelves import ShelfStore
from bookshelf.books.store import BookStore
from bookshelf.config import AppConfig, get_config_from_env
from bookshelf.db.database import Database
from bookshelf.search.reconciler import SearchReconciler
from bookshelf.utils.logging import get_logger, setup_logging
from bookshelf.web.context import Services, register_services
from bookshelf.web.hooks import register_error_handlers, register_request_logging

logger = get_logger(__name__)

VERSION = "0.1.0"


def build_services(
    config: AppConfig,
    database: Database,
    client: Optional[OpenLibraryClient] = None,
) -> Services:
    """
    Create the stores and the search reconciler.

    Args:
        config: Application configuration
        database: Initialized database
        client: Catalog client (built from config when omitted)

    Returns:
        Services for create_app
    """
    book_store = BookStore(database)
    if client is None:
        client = OpenLibraryClient(
            config.openlibrary_url,
            covers_url=config.openlibrary_covers_url,
            timeout=config.search_timeout,
        )
    return Services(
        book_store=book_store,
        shelf_store=ShelfStore(database),
        reconciler=SearchReconciler(client, book_store, limit=config.search_limit),
    )


def create_app(config: AppConfig, services: Services) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Application configuration
        services: Stores and search reconciler used by the handlers

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.max_body_bytes
    app.config['WEB_DIR'] = config.web_dir
    app.json.sort_keys = False

    register_services(app, services)
    register_error_handlers(app)
    register_request_logging(app)

    from bookshelf.web.routes.books import books_bp
    from bookshelf.web.routes.shelves import shelves_bp

    app.register_blueprint(books_bp)
    app.register_blueprint(shelves_bp)

    @app.route('/health')
    def health():
        return {'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()}

    if config.web_dir:
        from bookshelf.web.routes.frontend import frontend_bp
        app.register_blueprint(frontend_bp)

    return app


def main():
    """Main entry point."""
    config = get_config_from_env()

    setup_logging(config.log_level)

    logger.info(
        "Starting Bookshelf service",
        version=VERSION,
        port=config.port,
        database_url=config.database_url,
        web_dir=config.web_dir,
    )

    database = Database(config.database_url)
    database.init_db()

    services = build_services(config, database)
    app = create_app(config, services)

    atexit.register(services.reconciler.client.close)
    atexit.register(database.close)

    from waitress import serve
    serve(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
