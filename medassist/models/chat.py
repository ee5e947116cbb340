"""
Request and Response models for the HTTP API.

These Pydantic models define the contract between client and server.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """
    Request model for the /chat endpoint.

    At least one of text or image_data_uri must be present.

    Attributes:
        text: The user's question
        image_data_uri: Optional photo (pill, pack or handwritten document)
        language: Response language
        session_id: Optional session identifier for multi-turn conversations
    """
    text: Optional[str] = Field(
        default=None,
        description="The user's message or question (longer text is truncated to 2000 characters)",
        examples=["What is Panadol used for?"]
    )
    image_data_uri: Optional[str] = Field(
        default=None,
        description="Image as a data URI (data:image/...;base64,...)"
    )
    language: Literal["english", "urdu"] = Field(
        default="english",
        description="Response language"
    )
    session_id: Optional[str] = Field(
        default=None,
        description="Session ID for multi-turn conversations"
    )


class ChatResult(BaseModel):
    """What the chat service produced for one message."""
    response: str
    session_id: str
    agents_used: List[str] = Field(default_factory=list)
    confidence: float = 0.0
    suggestions: List[str] = Field(default_factory=list)
    query_type: str = "general"


class ChatResponse(ChatResult):
    """Response model for the /chat endpoint."""
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class PillIdentificationRequest(BaseModel):
    image_data_uri: str = Field(..., description="Photo of the pill as a data URI")


class PillIdentificationResponse(BaseModel):
    """
    Identified pill.

    Attributes:
        name: Most likely medicine name
        description: Physical description (shape, color, imprint)
        dosage: Typical educational dosage text
    """
    name: str
    description: str
    dosage: str


class SpeechToTextRequest(BaseModel):
    audio_data_uri: str = Field(..., description="Recording as a data URI (data:audio/...;base64,...)")


class SpeechToTextResponse(BaseModel):
    text: str


class AgentInfoResponse(BaseModel):
    """One registered agent and its capabilities."""
    name: str
    description: str
    capabilities: List[Dict[str, Any]] = Field(default_factory=list)


class SessionSummary(BaseModel):
    id: str
    title: str


class HealthResponse(BaseModel):
    """Response model for the /health endpoint."""
    status: str = Field(default="healthy")
    version: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)
