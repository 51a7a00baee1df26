"""
Base API client class for the Bookshelf service.
"""

from typing import Any, Dict, Optional
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from bookshelf.errors import UpstreamDecodeError, UpstreamError
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)

USER_AGENT = "Bookshelf/1.0 (personal book tracker)"


class BaseClient:
    """
    Base class for API clients with common functionality.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10,
        max_retries: int = 0,
        retry_backoff_factor: float = 0.5,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        })

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from endpoint."""
        return f"{self.base_url}{endpoint}"

    def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Any:
        """
        Make an HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint
            **kwargs: Additional arguments for requests

        Returns:
            Decoded JSON body

        Raises:
            UpstreamError: If the request fails or answers with an error status
            UpstreamDecodeError: If the body is not valid JSON
        """
        url = self._build_url(endpoint)

        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.ConnectionError as e:
            raise UpstreamError(f"Connection error: {str(e)}") from e
        except requests.exceptions.Timeout as e:
            raise UpstreamError(f"Request timeout: {str(e)}") from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"Request failed: {str(e)}") from e

        logger.info(
            "Upstream response",
            method=method,
            url=url,
            status=response.status_code,
            elapsed_ms=int(response.elapsed.total_seconds() * 1000),
        )

        if not 200 <= response.status_code < 300:
            raise UpstreamError(
                message=response.text[:500] or response.reason or "error response",
                upstream_status=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamDecodeError(f"Failed to decode response from {url}: {str(e)}") from e

    def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        """Make a GET request."""
        return self._request("GET", endpoint, params=params, **kwargs)

    def close(self) -> None:
        """Close the session."""
        self.session.close()
