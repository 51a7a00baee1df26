"""
Data models for catalog search.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class SearchResult:
    """A catalog hit, annotated when the book is already in the collection."""
    external_id: str
    title: str
    author: str
    isbn: Optional[str] = None
    cover_url: Optional[str] = None

    # Set only when the collection already holds this work
    existing_id: Optional[int] = None
    existing_status: Optional[str] = None

    @property
    def in_collection(self) -> bool:
        return self.existing_id is not None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation, leaving out unset optional fields."""
        return {key: value for key, value in asdict(self).items() if value is not None}
