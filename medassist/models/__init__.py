"""
Models module - Pydantic schemas for the HTTP API.
"""
from medassist.models.chat import (
    AgentInfoResponse,
    ChatRequest,
    ChatResponse,
    ChatResult,
    ErrorResponse,
    HealthResponse,
    PillIdentificationRequest,
    PillIdentificationResponse,
    SessionSummary,
    SpeechToTextRequest,
    SpeechToTextResponse,
)

__all__ = [
    "ChatRequest",
    "ChatResult",
    "ChatResponse",
    "PillIdentificationRequest",
    "PillIdentificationResponse",
    "SpeechToTextRequest",
    "SpeechToTextResponse",
    "AgentInfoResponse",
    "SessionSummary",
    "HealthResponse",
    "ErrorResponse",
]
