"""
Conversation Memory - chat transcript for one session.

- Message: one turn (text plus an optional image data URI)
- ConversationMemory: ordered, size-capped list of turns
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

TITLE_LENGTH = 30
DEFAULT_TITLE = "New Chat"


@dataclass
class Message:
    """
    A single chat turn.

    Attributes:
        role: 'user' or 'assistant'
        content: Message text (may be empty for image-only turns)
        image: Optional image data URI the user attached
        timestamp: When the message was created
        metadata: Extra data (agents used, confidence, query type)
    """
    role: Literal["user", "assistant"]
    content: str
    image: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, str]:
        """Role and content only, the shape chat-completion APIs expect."""
        return {"role": self.role, "content": self.content}

    def to_full_dict(self) -> Dict[str, Any]:
        return {
            "role": self.role,
            "content": self.content,
            "image": self.image,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class ConversationMemory:
    """
    Transcript of one chat session.

    Oldest messages are dropped once max_messages is exceeded.

    Example:
        >>> memory = ConversationMemory(session_id="abc-123")
        >>> memory.add_user_message("What is Panadol used for?")
        >>> memory.title
        'What is Panadol used for?'
    """

    def __init__(self, session_id: str, max_messages: int = 50):
        self.session_id = session_id
        self.max_messages = max_messages
        self.messages: List[Message] = []
        self.created_at = datetime.utcnow()
        self.last_activity = self.created_at

    def add_user_message(
        self,
        content: str,
        image: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Message:
        message = Message(role="user", content=content, image=image, metadata=metadata or {})
        self._add_message(message)
        return message

    def add_assistant_message(
        self,
        content: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Message:
        message = Message(role="assistant", content=content, metadata=metadata or {})
        self._add_message(message)
        return message

    def _add_message(self, message: Message) -> None:
        self.messages.append(message)
        self.last_activity = message.timestamp

        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]

    def get_all_messages(self) -> List[Message]:
        return self.messages.copy()

    def get_history_for_llm(self) -> List[Dict[str, str]]:
        return [msg.to_dict() for msg in self.messages]

    def clear(self) -> None:
        self.messages = []
        self.last_activity = datetime.utcnow()

    @property
    def title(self) -> str:
        """First user message, truncated; 'New Chat' until there is one."""
        for message in self.messages:
            if message.role == "user" and message.content.strip():
                text = message.content.strip()
                if len(text) > TITLE_LENGTH:
                    return text[:TITLE_LENGTH] + "..."
                return text
        return DEFAULT_TITLE

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def is_empty(self) -> bool:
        return not self.messages

    def get_summary(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "title": self.title,
            "message_count": self.message_count,
            "user_messages": sum(1 for m in self.messages if m.role == "user"),
            "assistant_messages": sum(1 for m in self.messages if m.role == "assistant"),
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
        }
