"""
Error types for the Bookshelf service.

Stores, the search reconciler and the Open Library client raise these;
the web layer maps each one to an HTTP status and a JSON error body.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class BookshelfError(Exception):
    """Base exception for all service errors."""
    message: str

    status_code = 500

    def __str__(self) -> str:
        return self.message


class ValidationError(BookshelfError):
    """Bad input shape or values."""
    status_code = 400


class ConflictError(BookshelfError):
    """Uniqueness violation."""
    status_code = 409


class NotFoundError(BookshelfError):
    """No matching row."""
    status_code = 404


class InternalError(BookshelfError):
    """Storage or transport failure not caused by the caller."""
    status_code = 500


@dataclass(eq=False)
class UpstreamError(BookshelfError):
    """The external search service was unreachable or answered with an error."""
    upstream_status: Optional[int] = None

    status_code = 502

    def __str__(self) -> str:
        if self.upstream_status:
            return f"Upstream error {self.upstream_status}: {self.message}"
        return f"Upstream error: {self.message}"


class UpstreamDecodeError(UpstreamError):
    """The external search service answered with a body we cannot decode."""
