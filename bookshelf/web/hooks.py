"""
Error handlers and request logging for the Flask app.
"""

import time

import structlog
from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from bookshelf.errors import BookshelfError
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str):
    """Build the JSON error body used by every endpoint."""
    return jsonify({'error': message}), status_code


def register_error_handlers(app: Flask) -> None:
    """Render service and HTTP errors as JSON."""

    @app.errorhandler(BookshelfError)
    def handle_service_error(error: BookshelfError):
        log = logger.error if error.status_code >= 500 else logger.info
        log(
            "Request failed",
            error_type=type(error).__name__,
            status=error.status_code,
            message=str(error)
        )
        return error_response(error.status_code, str(error))

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(error: RequestEntityTooLarge):
        limit = app.config.get('MAX_CONTENT_LENGTH')
        return error_response(413, f"Request body must not be larger than {limit} bytes")

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return error_response(error.code or 500, error.description or error.name)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        logger.exception("Unhandled error", error=str(error))
        return error_response(500, "Internal server error")


def register_request_logging(app: Flask) -> None:
    """Log each request with its method, path, status and duration."""

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.path)
        logger.debug("HTTP request started", remote_addr=request.remote_addr)

    @app.after_request
    def log_request(response):
        started = g.pop('request_started', None)
        duration_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        logger.info("HTTP request completed", status=response.status_code, duration_ms=duration_ms)
        return response

    @app.teardown_request
    def clear_context(exc):
        structlog.contextvars.clear_contextvars()
