"""
Search result reconciliation for the Bookshelf service.

Turns raw Open Library search documents into search results and marks
the ones that are already in the collection.
"""

from typing import Any, Dict, List, Optional

from bookshelf.books.models import Book
from bookshelf.books.store import BookStore
from bookshelf.api.openlibrary import OpenLibraryClient
from bookshelf.errors import UpstreamDecodeError, UpstreamError, ValidationError
from bookshelf.search.models import SearchResult
from bookshelf.utils.logging import get_logger

DEFAULT_SEARCH_LIMIT = 10

ISBN_13_LENGTH = 13
ISBN_10_LENGTH = 10


def extract_external_id(key: Optional[str]) -> Optional[str]:
    """
    Take the identifier from a catalog key.

    ``/works/OL45804W`` becomes ``OL45804W``.

    Returns:
        The last path segment, or None when it is empty
    """
    if not key:
        return None
    return key.split("/")[-1] or None


def choose_isbn(isbns: List[str]) -> Optional[str]:
    """Prefer an ISBN-13, else the first ISBN-10, else nothing."""
    for code in isbns:
        if len(code) == ISBN_13_LENGTH:
            return code
    for code in isbns:
        if len(code) == ISBN_10_LENGTH:
            return code
    return None


def _field(doc: Dict[str, Any], name: str, expected: type) -> Any:
    value = doc.get(name)
    if value is None:
        return None
    if not isinstance(value, expected) or isinstance(value, bool):
        raise UpstreamDecodeError(f"unexpected type for '{name}' in search document")
    return value


def _string_list(doc: Dict[str, Any], name: str) -> List[str]:
    values = _field(doc, name, list) or []
    if not all(isinstance(v, str) for v in values):
        raise UpstreamDecodeError(f"unexpected type in '{name}' list of search document")
    return values


class SearchReconciler:
    """
    Matches catalog search hits against the collection.

    Results keep the catalog's relevance order. The whole call fails if
    the catalog call fails; no partial results are returned.
    """

    def __init__(
        self,
        client: OpenLibraryClient,
        store: BookStore,
        limit: int = DEFAULT_SEARCH_LIMIT,
        logger=None,
    ):
        """
        Initialize the reconciler.

        Args:
            client: Catalog search client
            store: Book store used (read-only) to find existing books
            limit: Maximum number of hits requested from the catalog
            logger: Logger to use (defaults to a module logger)
        """
        self.client = client
        self.store = store
        self.limit = limit
        self.logger = logger or get_logger(__name__)

    def normalize(self, doc: Dict[str, Any]) -> Optional[SearchResult]:
        """
        Convert one search document into a SearchResult.

        Args:
            doc: Raw Open Library search document

        Returns:
            SearchResult, or None when the document has no identifier or title

        Raises:
            UpstreamDecodeError: If a field has an unexpected type
        """
        external_id = extract_external_id(_field(doc, "key", str))
        title = _field(doc, "title", str)
        if not external_id or not title:
            return None

        authors = _string_list(doc, "author_name")
        isbns = _string_list(doc, "isbn")
        cover_id = _field(doc, "cover_i", int)

        return SearchResult(
            external_id=external_id,
            title=title,
            author=", ".join(authors),
            isbn=choose_isbn(isbns),
            cover_url=self.client.cover_url(cover_id),
        )

    def search(self, query: Optional[str]) -> List[SearchResult]:
        """
        Search the catalog and annotate hits already in the collection.

        Args:
            query: Free-text search query

        Returns:
            List of SearchResult in catalog relevance order

        Raises:
            ValidationError: If the query is empty
            UpstreamError: If the catalog is unreachable, errors, or answers garbage
        """
        if query is None or not query.strip():
            raise ValidationError("Missing search query parameter 'q'")

        self.logger.debug("Starting catalog search", query=query, limit=self.limit)

        try:
            docs = self.client.search(query, limit=self.limit)
            candidates = [self.normalize(doc) for doc in docs]
        except UpstreamError as e:
            self.logger.warning(
                "Catalog search failed",
                query=query,
                error=str(e),
                upstream_status=e.upstream_status
            )
            raise

        existing: Dict[str, Book] = {
            book.external_id: book for book in self.store.get_books()
        }

        results = []
        for result in candidates:
            if result is None:
                continue
            book = existing.get(result.external_id)
            if book is not None:
                result.existing_id = book.id
                result.existing_status = book.status
            results.append(result)

        self.logger.info(
            "Catalog search complete",
            query=query,
            hits=len(docs),
            results=len(results),
            in_collection=sum(1 for r in results if r.in_collection)
        )
        return results
