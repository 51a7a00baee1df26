"""
Database connection and session management.
"""

import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookshelf.db.models import Base
from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///data/bookshelf.db"


def get_database_url() -> str:
    """Get database URL from environment or use default."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def _is_memory_url(db_url: str) -> bool:
    return db_url in ("sqlite://", "sqlite:///:memory:")


def ensure_data_directory(db_url: str) -> None:
    """Ensure the data directory exists for a SQLite database file."""
    if db_url.startswith("sqlite:///") and not _is_memory_url(db_url):
        db_path = db_url.replace("sqlite:///", "", 1)
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """
    Owns the SQLAlchemy engine and session factory.

    One instance is created at startup and handed to the stores; tests
    create their own in-memory instance.
    """

    def __init__(self, db_url: Optional[str] = None, echo: bool = False):
        """
        Initialize the engine.

        Args:
            db_url: SQLAlchemy database URL (defaults to DATABASE_URL)
            echo: Log emitted SQL
        """
        self.db_url = db_url or get_database_url()
        engine_kwargs = {"echo": echo}

        if self.db_url.startswith("sqlite"):
            ensure_data_directory(self.db_url)
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if _is_memory_url(self.db_url):
                # A single shared connection, otherwise every session sees an empty database
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(self.db_url, **engine_kwargs)

        if self.db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine, expire_on_commit=False
        )

    def init_db(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema verified", url=self.engine.url.render_as_string(hide_password=True))

    def get_session(self) -> Session:
        """Get a new database session."""
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager running the enclosed work as one transaction."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self.engine.dispose()
