"""
Persistent Memory Manager - database-backed chat transcripts.

Write-through cache: reads hit the in-process cache first and fall back
to the database; every new message is written to the database at once,
so sessions survive restarts.
"""
import json
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Dict, Generator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medassist.core.exceptions import DatabaseError
from medassist.core.logging_config import get_logger
from medassist.database.connection import DatabaseConnection, get_database
from medassist.database.models import Base, ChatMessageRecord, ChatSessionRecord
from medassist.memory.conversation import DEFAULT_TITLE, ConversationMemory, Message

logger = get_logger(__name__)


def _json_safe(metadata: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Metadata as stored in the JSON column (datetimes and objects as strings)."""
    if not metadata:
        return None
    return json.loads(json.dumps(metadata, default=str))


class PersistentMemoryManager:
    """
    Same interface as MemoryManager, backed by chat_sessions/chat_messages.

    Example:
        >>> manager = PersistentMemoryManager()
        >>> session = manager.get_or_create_session("3f1c...")
        >>> session.add_user_message("What is Brufen?")  # saved immediately
    """

    def __init__(
        self,
        db: Optional[DatabaseConnection] = None,
        session_ttl_minutes: int = 1440,
        max_messages_per_session: int = 100
    ):
        self.db = db or get_database()
        self.session_ttl = timedelta(minutes=session_ttl_minutes)
        self.max_messages = max_messages_per_session

        self._cache: Dict[str, "PersistentConversationMemory"] = {}
        self._lock = threading.RLock()

        try:
            Base.metadata.create_all(self.db.engine)
        except SQLAlchemyError as e:
            raise DatabaseError(f"Failed to initialize chat tables: {e}") from e

        logger.info(
            f"PersistentMemoryManager initialized: TTL={session_ttl_minutes}min, "
            f"max_messages={max_messages_per_session}"
        )

    @contextmanager
    def _transaction(self) -> Generator[Session, None, None]:
        try:
            with self.db.get_session() as db_session:
                yield db_session
        except SQLAlchemyError as e:
            raise DatabaseError(f"Chat history storage failed: {e}") from e

    def get_or_create_session(self, session_id: str) -> ConversationMemory:
        with self._lock:
            if session_id in self._cache:
                return self._cache[session_id]

            with self._transaction() as db_session:
                record = db_session.get(ChatSessionRecord, session_id)
                if record is not None:
                    memory = self._load_from_db(record, db_session)
                    logger.info(f"Loaded session from DB: {session_id} ({memory.message_count} messages)")
                else:
                    now = datetime.utcnow()
                    db_session.add(ChatSessionRecord(
                        id=session_id,
                        created_at=now,
                        last_activity=now,
                        message_count=0,
                    ))
                    memory = PersistentConversationMemory(session_id, self, self.max_messages)
                    logger.info(f"Created new persistent session: {session_id}")

            self._cache[session_id] = memory
            return memory

    def get_session(self, session_id: str) -> Optional[ConversationMemory]:
        with self._lock:
            if session_id in self._cache:
                return self._cache[session_id]

            with self._transaction() as db_session:
                record = db_session.get(ChatSessionRecord, session_id)
                if record is None:
                    return None
                memory = self._load_from_db(record, db_session)

            self._cache[session_id] = memory
            return memory

    def session_exists(self, session_id: str) -> bool:
        return self.get_session(session_id) is not None

    def save_message(self, session_id: str, message: Message) -> None:
        """Append one message row and bump the session's counters."""
        with self._transaction() as db_session:
            db_session.add(ChatMessageRecord(
                session_id=session_id,
                role=message.role,
                content=message.content,
                image=message.image,
                timestamp=message.timestamp,
                extra_data=_json_safe(message.metadata),
            ))

            record = db_session.get(ChatSessionRecord, session_id)
            if record is not None:
                record.message_count += 1
                record.last_activity = message.timestamp
                if not record.title and message.role == "user" and message.content.strip():
                    memory = self._cache.get(session_id)
                    record.title = memory.title if memory else message.content.strip()[:30]

        logger.debug(f"Saved message: session={session_id}, role={message.role}")

    def clear_session(self, session_id: str) -> bool:
        with self._lock:
            self._cache.pop(session_id, None)

            with self._transaction() as db_session:
                record = db_session.get(ChatSessionRecord, session_id)
                if record is None:
                    return False
                db_session.delete(record)

            logger.info(f"Deleted session from DB: {session_id}")
            return True

    def clear_session_history(self, session_id: str) -> bool:
        with self._lock:
            if session_id in self._cache:
                self._cache[session_id].clear()

            with self._transaction() as db_session:
                record = db_session.get(ChatSessionRecord, session_id)
                if record is None:
                    return False
                db_session.query(ChatMessageRecord).filter(
                    ChatMessageRecord.session_id == session_id
                ).delete()
                record.message_count = 0
                record.title = None
                record.last_activity = datetime.utcnow()

            logger.info(f"Cleared history for session: {session_id}")
            return True

    def clear_all(self) -> int:
        with self._lock:
            self._cache.clear()
            with self._transaction() as db_session:
                db_session.query(ChatMessageRecord).delete()
                count = db_session.query(ChatSessionRecord).delete()

            logger.info(f"Cleared all sessions ({count})")
            return count

    def get_session_info(self, session_id: str) -> Optional[Dict]:
        with self._transaction() as db_session:
            record = db_session.get(ChatSessionRecord, session_id)
            if record is None:
                return None
            info = record.to_dict()

        info["session_id"] = info.pop("id")
        info["title"] = info["title"] or DEFAULT_TITLE
        info["expires_at"] = (datetime.fromisoformat(info["last_activity"]) + self.session_ttl).isoformat()
        return info

    def list_sessions(self) -> List[Dict[str, str]]:
        with self._transaction() as db_session:
            records = db_session.query(ChatSessionRecord).order_by(
                ChatSessionRecord.last_activity.desc()
            ).all()
            return [{"id": r.id, "title": r.title or DEFAULT_TITLE} for r in records]

    def get_stats(self) -> Dict:
        with self._transaction() as db_session:
            total_sessions = db_session.query(ChatSessionRecord).count()
            total_messages = db_session.query(ChatMessageRecord).count()

        return {
            "backend": "persistent",
            "active_sessions": total_sessions,
            "cached_sessions": len(self._cache),
            "total_messages": total_messages,
            "session_ttl_minutes": int(self.session_ttl.total_seconds() / 60),
        }

    def _load_from_db(self, record: ChatSessionRecord, db_session: Session) -> "PersistentConversationMemory":
        memory = PersistentConversationMemory(record.id, self, self.max_messages)
        memory.created_at = record.created_at
        memory.last_activity = record.last_activity

        rows = db_session.query(ChatMessageRecord).filter(
            ChatMessageRecord.session_id == record.id
        ).order_by(ChatMessageRecord.id).all()

        for row in rows[-self.max_messages:]:
            memory.messages.append(Message(
                role=row.role,
                content=row.content or "",
                image=row.image,
                timestamp=row.timestamp,
                metadata=row.extra_data if isinstance(row.extra_data, dict) else {},
            ))
        return memory


class PersistentConversationMemory(ConversationMemory):
    """ConversationMemory that writes every new message through to the database."""

    def __init__(self, session_id: str, manager: PersistentMemoryManager, max_messages: int = 100):
        super().__init__(session_id, max_messages)
        self._manager = manager

    def _add_message(self, message: Message) -> None:
        super()._add_message(message)
        self._manager.save_message(self.session_id, message)


_persistent_manager: Optional[PersistentMemoryManager] = None


def get_persistent_memory_manager() -> PersistentMemoryManager:
    global _persistent_manager
    if _persistent_manager is None:
        _persistent_manager = PersistentMemoryManager()
    return _persistent_manager


def reset_persistent_memory_manager() -> None:
    global _persistent_manager
    _persistent_manager = None
