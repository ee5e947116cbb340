"""
Memory Manager - in-memory chat sessions with TTL expiry.

Suitable for a single process; sessions are lost on restart. Set
MEMORY_PERSISTENT=true for the database-backed manager.
"""
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from medassist.core.logging_config import get_logger
from medassist.memory.conversation import ConversationMemory

logger = get_logger(__name__)


class MemoryManager:
    """
    Thread-safe registry of chat sessions.

    Example:
        >>> manager = MemoryManager(session_ttl_minutes=60)
        >>> session = manager.get_or_create_session("3f1c...")
        >>> session.add_user_message("Is ibuprofen safe with aspirin?")
        >>> manager.list_sessions()[0]["title"]
        'Is ibuprofen safe with aspirin...'
    """

    def __init__(
        self,
        session_ttl_minutes: int = 60,
        max_sessions: int = 1000,
        max_messages_per_session: int = 50
    ):
        self.session_ttl = timedelta(minutes=session_ttl_minutes)
        self.max_sessions = max_sessions
        self.max_messages = max_messages_per_session

        self._sessions: Dict[str, ConversationMemory] = {}
        self._lock = threading.RLock()

        logger.info(
            f"MemoryManager initialized: TTL={session_ttl_minutes}min, "
            f"max_sessions={max_sessions}, max_messages={max_messages_per_session}"
        )

    def get_or_create_session(self, session_id: str) -> ConversationMemory:
        with self._lock:
            self._cleanup_expired()

            session = self._sessions.get(session_id)
            if session is not None:
                return session

            if len(self._sessions) >= self.max_sessions:
                self._evict_oldest_session()

            session = ConversationMemory(session_id=session_id, max_messages=self.max_messages)
            self._sessions[session_id] = session
            logger.info(f"Created new session: {session_id}")
            return session

    def get_session(self, session_id: str) -> Optional[ConversationMemory]:
        """Existing, unexpired session or None."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None and self._is_expired(session):
                self._sessions.pop(session_id, None)
                return None
            return session

    def session_exists(self, session_id: str) -> bool:
        return self.get_session(session_id) is not None

    def clear_session(self, session_id: str) -> bool:
        """
        Remove a session completely.

        Returns:
            True if the session existed
        """
        with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.info(f"Deleted session: {session_id}")
                return True
            return False

    def clear_session_history(self, session_id: str) -> bool:
        """Empty a session's transcript but keep the session."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.clear()
            logger.info(f"Cleared history for session: {session_id}")
            return True

    def clear_all(self) -> int:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            logger.info(f"Cleared all sessions ({count})")
            return count

    def get_session_info(self, session_id: str) -> Optional[Dict]:
        session = self.get_session(session_id)
        if session is None:
            return None
        info = session.get_summary()
        info["expires_at"] = (session.last_activity + self.session_ttl).isoformat()
        return info

    def list_sessions(self) -> List[Dict[str, str]]:
        """Sessions newest first, as id/title pairs for a sidebar."""
        with self._lock:
            self._cleanup_expired()
            ordered = sorted(self._sessions.values(), key=lambda s: s.last_activity, reverse=True)
            return [{"id": s.session_id, "title": s.title} for s in ordered]

    def get_stats(self) -> Dict:
        with self._lock:
            return {
                "backend": "memory",
                "active_sessions": len(self._sessions),
                "total_messages": sum(s.message_count for s in self._sessions.values()),
                "max_sessions": self.max_sessions,
                "session_ttl_minutes": int(self.session_ttl.total_seconds() / 60),
            }

    def _is_expired(self, session: ConversationMemory) -> bool:
        return datetime.utcnow() - session.last_activity > self.session_ttl

    def _cleanup_expired(self) -> int:
        expired = [sid for sid, session in self._sessions.items() if self._is_expired(session)]
        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")
        return len(expired)

    def _evict_oldest_session(self) -> None:
        if not self._sessions:
            return
        oldest_id = min(self._sessions, key=lambda sid: self._sessions[sid].last_activity)
        del self._sessions[oldest_id]
        logger.warning(f"Evicted oldest session: {oldest_id}")


_memory_manager: Optional[MemoryManager] = None


def get_memory_manager() -> MemoryManager:
    """Get or create the global in-memory manager."""
    global _memory_manager
    if _memory_manager is None:
        _memory_manager = MemoryManager()
    return _memory_manager


def reset_memory_manager() -> None:
    global _memory_manager
    _memory_manager = None
