"""
Database Connection Management.

SQLAlchemy engine and session lifecycle for chat history storage.
SQLite is the default; any SQLAlchemy URL works (PostgreSQL in production).
"""
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from medassist.core.config import get_settings
from medassist.core.logging_config import get_logger

logger = get_logger(__name__)


class DatabaseConnection:
    """
    Owns the engine and hands out sessions.

    Example:
        >>> db = DatabaseConnection("sqlite:///:memory:")
        >>> with db.get_session() as session:
        ...     session.execute(text("SELECT 1"))
    """

    def __init__(self, connection_url: Optional[str] = None):
        db_url = connection_url or get_settings().database_url

        if db_url.startswith("sqlite"):
            # Sessions are used from the agent thread pool and request threads
            self.engine = create_engine(
                db_url,
                connect_args={"check_same_thread": False},
                echo=False,
            )
        else:
            self.engine = create_engine(
                db_url,
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                echo=False,
            )

        self._session_factory = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)
        logger.info(f"Database connection initialized: {db_url.split('@')[-1]}")

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """
        Session that commits on success and rolls back on SQLAlchemy errors.

        Yields:
            SQLAlchemy Session object
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Database error, rolling back: {e}")
            raise
        finally:
            session.close()

    def check_connection(self) -> bool:
        try:
            with self.get_session() as session:
                session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")


_db_connection: Optional[DatabaseConnection] = None


def get_database() -> DatabaseConnection:
    """Get or create the database connection (lazy, after app startup)."""
    global _db_connection
    if _db_connection is None:
        _db_connection = DatabaseConnection()
    return _db_connection


def reset_database() -> None:
    global _db_connection
    if _db_connection is not None:
        _db_connection.close()
    _db_connection = None
