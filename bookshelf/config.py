"""
Configuration management for the Bookshelf service.
Values come from environment variables, optionally seeded from a .env file.
"""

import os
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()


class AppConfig(BaseModel):
    """Configuration for the Bookshelf service."""

    # Storage
    database_url: str = Field(
        default="sqlite:///data/bookshelf.db",
        description="Database connection URL"
    )

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Address to listen on")
    port: int = Field(default=8080, description="Port to listen on")
    max_body_bytes: int = Field(default=1024 * 1024, description="Largest accepted request body")
    web_dir: Optional[str] = Field(default=None, description="Directory of static frontend assets")

    # Open Library
    openlibrary_url: str = Field(
        default="https://openlibrary.org",
        description="Open Library base URL"
    )
    openlibrary_covers_url: str = Field(
        default="https://covers.openlibrary.org",
        description="Open Library cover image base URL"
    )
    search_limit: int = Field(default=10, ge=1, description="Maximum search results per query")
    search_timeout: float = Field(default=10.0, gt=0, description="Search request timeout in seconds")

    log_level: str = Field(default="INFO", description="Logging level")


def get_config_from_env() -> AppConfig:
    """Load configuration from environment variables."""
    return AppConfig(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/bookshelf.db"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        max_body_bytes=int(os.getenv("MAX_BODY_BYTES", str(1024 * 1024))),
        web_dir=os.getenv("WEB_DIR") or None,
        openlibrary_url=os.getenv("OPENLIBRARY_URL", "https://openlibrary.org"),
        openlibrary_covers_url=os.getenv("OPENLIBRARY_COVERS_URL", "https://covers.openlibrary.org"),
        search_limit=int(os.getenv("SEARCH_LIMIT", "10")),
        search_timeout=float(os.getenv("SEARCH_TIMEOUT", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
