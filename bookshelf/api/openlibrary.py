"""
Open Library API client for the Bookshelf service.

Documentation: https://openlibrary.org/dev/docs/api/search
"""

from typing import Any, Dict, List, Optional

from bookshelf.api.base import BaseClient
from bookshelf.errors import UpstreamDecodeError
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)

OPENLIBRARY_URL = "https://openlibrary.org"
COVERS_URL = "https://covers.openlibrary.org"

SEARCH_FIELDS = "key,title,author_name,isbn,cover_i,author_key,first_publish_year"


class OpenLibraryClient(BaseClient):
    """
    Client for the Open Library search API.

    Only the raw search documents are returned here; turning them into
    search results is the reconciler's job.
    """

    def __init__(
        self,
        base_url: str = OPENLIBRARY_URL,
        covers_url: str = COVERS_URL,
        timeout: float = 10,
    ):
        """
        Initialize Open Library client.

        Args:
            base_url: Open Library server URL
            covers_url: Cover image server URL
            timeout: Request timeout in seconds
        """
        super().__init__(base_url, timeout=timeout)
        self.covers_url = covers_url.rstrip("/")

    def search(self, query: str, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Run a free-text search.

        Args:
            query: Search text (title, author, ISBN...)
            limit: Maximum number of documents to return

        Returns:
            List of search documents in relevance order

        Raises:
            UpstreamError: If Open Library cannot be reached or answers with an error
            UpstreamDecodeError: If the response is not a search document list
        """
        logger.debug("Searching Open Library", query=query, limit=limit)

        response = self.get(
            "/search.json",
            params={"q": query, "fields": SEARCH_FIELDS, "limit": limit},
        )

        if not isinstance(response, dict):
            raise UpstreamDecodeError("Open Library response is not a JSON object")

        docs = response.get("docs")
        if not isinstance(docs, list) or not all(isinstance(doc, dict) for doc in docs):
            raise UpstreamDecodeError("Open Library response has no valid 'docs' list")

        logger.info(
            "Open Library search complete",
            query=query,
            num_found=response.get("numFound"),
            returned=len(docs)
        )
        return docs

    def cover_url(self, cover_id: Optional[int], size: str = "M") -> Optional[str]:
        """
        Build a cover image URL.

        Args:
            cover_id: Open Library cover ID
            size: S, M or L

        Returns:
            Cover URL, or None if the cover ID is missing or not positive
        """
        if isinstance(cover_id, bool) or not isinstance(cover_id, int) or cover_id <= 0:
            return None
        return f"{self.covers_url}/b/id/{cover_id}-{size}.jpg"
