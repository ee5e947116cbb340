"""
Memory Package - chat transcripts per session.

- In-memory manager (default): fast, lost on restart
- Persistent manager (MEMORY_PERSISTENT=true): SQLAlchemy-backed

Use `get_memory_manager()` to get the configured one.

Example:
    >>> from medassist.memory import get_memory_manager
    >>> manager = get_memory_manager()
    >>> session = manager.get_or_create_session("3f1c...")
    >>> session.add_user_message("What is Panadol?")
"""
from typing import Union

from medassist.core.config import get_settings
from medassist.memory.conversation import ConversationMemory, Message
from medassist.memory.manager import MemoryManager, reset_memory_manager
from medassist.memory.manager import get_memory_manager as get_stm_manager
from medassist.memory.persistent import (
    PersistentMemoryManager,
    get_persistent_memory_manager,
    reset_persistent_memory_manager,
)

AnyMemoryManager = Union[MemoryManager, PersistentMemoryManager]


def get_memory_manager() -> AnyMemoryManager:
    """
    Returns:
        PersistentMemoryManager if MEMORY_PERSISTENT=true, else MemoryManager
    """
    if get_settings().memory_persistent:
        return get_persistent_memory_manager()
    return get_stm_manager()


def reset_memory_managers() -> None:
    reset_memory_manager()
    reset_persistent_memory_manager()


__all__ = [
    "Message",
    "ConversationMemory",
    "MemoryManager",
    "PersistentMemoryManager",
    "AnyMemoryManager",
    "get_memory_manager",
    "get_stm_manager",
    "get_persistent_memory_manager",
    "reset_memory_managers",
]
