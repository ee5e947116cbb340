"""
Database module - chat history persistence (SQLAlchemy).
"""
from medassist.database.connection import DatabaseConnection, get_database, reset_database
from medassist.database.init_db import drop_chat_tables, init_chat_tables
from medassist.database.models import Base, ChatMessageRecord, ChatSessionRecord

__all__ = [
    "DatabaseConnection",
    "get_database",
    "reset_database",
    "Base",
    "ChatSessionRecord",
    "ChatMessageRecord",
    "init_chat_tables",
    "drop_chat_tables",
]
