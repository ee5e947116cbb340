"""
Session Management Routes - chat session lifecycle.

Endpoints:
- POST /session/new: Create a new session
- GET /session/list: Sessions newest first (id and title)
- GET /session: Memory manager statistics
- GET /session/{id}: Session info
- GET /session/{id}/history: Full transcript
- POST /session/{id}/clear: Clear the transcript, keep the session
- DELETE /session/all: Delete every session
- DELETE /session/{id}: Delete a session
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from medassist.agents import forget_all_conversations, forget_conversation
from medassist.core.config import get_settings
from medassist.core.exceptions import SessionNotFoundError
from medassist.core.logging_config import get_logger
from medassist.memory import get_memory_manager
from medassist.models.chat import SessionSummary

logger = get_logger(__name__)
router = APIRouter(prefix="/session", tags=["Session Management"])


def _storage() -> str:
    return "persistent" if get_settings().memory_persistent else "memory"


class SessionCreateResponse(BaseModel):
    session_id: str = Field(..., description="New session identifier")
    message: str = Field(default="Session created successfully")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    storage: str = Field(default="memory", description="Storage type (memory or persistent)")


class SessionInfoResponse(BaseModel):
    session_id: str
    title: str
    message_count: int
    created_at: str
    last_activity: str
    expires_at: str
    user_messages: Optional[int] = None
    assistant_messages: Optional[int] = None


class SessionHistoryResponse(BaseModel):
    session_id: str
    title: str
    messages: List[Dict[str, Any]]
    message_count: int


class SessionDeleteResponse(BaseModel):
    session_id: str
    message: str
    deleted: bool


class SessionListResponse(BaseModel):
    sessions: List[SessionSummary]
    total: int
    storage: str


class ManagerStatsResponse(BaseModel):
    active_sessions: int
    total_messages: int
    session_ttl_minutes: int
    storage: str = Field(default="memory", description="Storage type")
    cached_sessions: Optional[int] = None
    max_sessions: Optional[int] = None


@router.post("/new", response_model=SessionCreateResponse, summary="Create New Session")
def create_session():
    session_id = str(uuid.uuid4())
    get_memory_manager().get_or_create_session(session_id)

    logger.info(f"Created new session via API: {session_id} (storage={_storage()})")
    return SessionCreateResponse(
        session_id=session_id,
        message="Session created successfully. Use this session_id in your /chat requests.",
        storage=_storage(),
    )


@router.get("/list", response_model=SessionListResponse, summary="List Sessions")
def list_sessions():
    sessions = get_memory_manager().list_sessions()
    return SessionListResponse(
        sessions=[SessionSummary(**s) for s in sessions],
        total=len(sessions),
        storage=_storage(),
    )


@router.get("", response_model=ManagerStatsResponse, summary="Get Manager Stats")
def get_manager_stats():
    stats = get_memory_manager().get_stats()
    stats["storage"] = stats.pop("backend", _storage())
    return ManagerStatsResponse(**stats)


@router.delete("/all", summary="Delete All Sessions")
def delete_all_sessions():
    deleted = get_memory_manager().clear_all()
    forget_all_conversations()
    logger.info(f"Deleted all sessions: {deleted}")
    return {"message": "All conversation history deleted", "sessions_deleted": deleted}


@router.get("/{session_id}", response_model=SessionInfoResponse, summary="Get Session Info")
def get_session_info(session_id: str):
    info = get_memory_manager().get_session_info(session_id)
    if not info:
        raise SessionNotFoundError(session_id)
    return SessionInfoResponse(**info)


@router.get("/{session_id}/history", response_model=SessionHistoryResponse, summary="Get Session History")
def get_session_history(session_id: str):
    session = get_memory_manager().get_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)

    messages = [m.to_full_dict() for m in session.get_all_messages()]
    return SessionHistoryResponse(
        session_id=session_id,
        title=session.title,
        messages=messages,
        message_count=len(messages),
    )


@router.post("/{session_id}/clear", response_model=SessionDeleteResponse, summary="Clear Session History")
def clear_session_history(session_id: str):
    if not get_memory_manager().clear_session_history(session_id):
        raise SessionNotFoundError(session_id)
    forget_conversation(session_id)

    return SessionDeleteResponse(session_id=session_id, message="Session history cleared", deleted=False)


@router.delete("/{session_id}", response_model=SessionDeleteResponse, summary="Delete Session")
def delete_session(session_id: str):
    forget_conversation(session_id)
    if not get_memory_manager().clear_session(session_id):
        return SessionDeleteResponse(
            session_id=session_id,
            message="Session not found (may have already expired)",
            deleted=False,
        )

    logger.info(f"Deleted session via API: {session_id}")
    return SessionDeleteResponse(session_id=session_id, message="Session deleted successfully", deleted=True)
