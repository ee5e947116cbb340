"""
Database Initialization - create the chat history tables.
"""
from sqlalchemy.exc import SQLAlchemyError

from medassist.core.exceptions import DatabaseError
from medassist.core.logging_config import get_logger
from medassist.database.connection import get_database
from medassist.database.models import Base

logger = get_logger(__name__)


def init_chat_tables() -> bool:
    """
    Create chat tables if they don't exist.

    Called at startup when persistent memory is enabled.

    Raises:
        DatabaseError: If the tables cannot be created
    """
    try:
        Base.metadata.create_all(get_database().engine)
    except SQLAlchemyError as e:
        logger.error(f"Failed to initialize chat tables: {e}")
        raise DatabaseError(f"Failed to initialize chat tables: {e}") from e

    logger.info("Chat tables initialized successfully")
    return True


def drop_chat_tables() -> bool:
    """Drop chat tables (development and tests only)."""
    try:
        Base.metadata.drop_all(get_database().engine)
    except SQLAlchemyError as e:
        logger.error(f"Failed to drop chat tables: {e}")
        raise DatabaseError(f"Failed to drop chat tables: {e}") from e

    logger.warning("Chat tables dropped")
    return True


if __name__ == "__main__":
    init_chat_tables()
