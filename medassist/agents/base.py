"""
Base agent contract shared by every specialist agent.

An agent receives an AgentInput (text and/or an image) plus an
AgentContext, and returns an AgentResponse. Agents never raise to the
orchestrator for provider problems: call_llm turns an LLMError into a
localized "service unavailable" sentence, and each agent wraps its own
processing in a localized apology.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from medassist.agents import messages
from medassist.core.exceptions import LLMError
from medassist.core.logging_config import LoggerMixin
from medassist.llm.client import LLMClient, get_llm_client


class Language(str, Enum):
    """Response languages the assistant supports."""
    ENGLISH = "english"
    URDU = "urdu"


@dataclass
class AgentResponse:
    """One agent's answer with its self-reported confidence (0..1)."""
    agent_name: str
    response: str
    confidence: float
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class AgentContext:
    """
    Per-request context handed to every agent.

    Attributes:
        conversation_id: Chat session the request belongs to
        user_id: Optional caller identity
        language: Response language ('english' or 'urdu')
        previous_responses: Agent answers from earlier turns
        medical_history: Free-text history items supplied by the caller
    """
    conversation_id: Optional[str] = None
    user_id: Optional[str] = None
    language: str = Language.ENGLISH.value
    previous_responses: List[AgentResponse] = field(default_factory=list)
    medical_history: List[str] = field(default_factory=list)


@dataclass
class AgentInput:
    """What the user sent: text, an image data URI, or both."""
    text: str = ""
    image_data_uri: Optional[str] = None

    @property
    def has_image(self) -> bool:
        return bool(self.image_data_uri)

    @property
    def is_text_only(self) -> bool:
        return not self.has_image


@dataclass
class AgentCapability:
    """A named operation an agent advertises, with pydantic I/O models."""
    name: str
    description: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_model.model_json_schema(),
            "output_schema": self.output_model.model_json_schema(),
        }


# Capitalised words that start sentences rather than name medicines
_SENTENCE_STARTERS = {
    "what", "how", "can", "could", "should", "would", "does", "do", "is", "are",
    "tell", "the", "my", "this", "that", "these", "those", "i", "please", "explain",
    "give", "show", "when", "where", "which", "why", "will", "about", "list",
}


def guess_medication_name(text: str) -> Optional[str]:
    """
    Pick a likely medicine name from free text.

    Takes the first capitalised word longer than three characters that is
    not a common sentence opener, with surrounding punctuation removed.

    Returns:
        The candidate word, or None when nothing qualifies
    """
    for raw_word in (text or "").split():
        word = re.sub(r"^[^\w]+|[^\w]+$", "", raw_word)
        if len(word) > 3 and word[0].isupper() and word.lower() not in _SENTENCE_STARTERS:
            return word
    return None


class BaseAgent(ABC, LoggerMixin):
    """
    Abstract base for specialist agents.

    Subclasses implement can_handle() and process(). Model calls go
    through call_llm() so every prompt carries the same agent context
    block and shares the same failure handling.
    """

    def __init__(
        self,
        name: str,
        description: str,
        llm_client: Optional[LLMClient] = None,
        model: Optional[str] = None
    ):
        self.name = name
        self.description = description
        self.llm_client = llm_client or get_llm_client()
        self.model = model
        self.capabilities: List[AgentCapability] = []

    @abstractmethod
    def can_handle(self, text: str, context: AgentContext) -> bool:
        """Return True when this agent should answer the query text."""

    @abstractmethod
    def process(self, agent_input: AgentInput, context: AgentContext) -> AgentResponse:
        """Answer the query. Must not raise for expected failures."""

    def get_info(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "capabilities": [capability.to_dict() for capability in self.capabilities],
        }

    def call_llm(self, system_prompt: str, user_prompt: str, context: AgentContext) -> str:
        """
        Call the model with the agent context block appended.

        Args:
            system_prompt: Agent-specific system instruction
            user_prompt: The task prompt
            context: Request context (language drives the reply language)

        Returns:
            Model reply, or the localized unavailable message when every
            provider fails
        """
        full_system_prompt = f"""{system_prompt}

IMPORTANT CONTEXT:
- Agent: {self.name}
- Language: {context.language}
- Always respond in {context.language}
- Include appropriate medical disclaimers
- Maintain professional medical assistant tone"""

        try:
            reply = self.llm_client.generate(
                user_prompt,
                system_prompt=full_system_prompt,
                model=self.model,
            )
        except LLMError as e:
            self.logger.error(f"[{self.name}] LLM call failed: {e}")
            return messages.localized(messages.SERVICE_UNAVAILABLE, context.language)

        return reply or messages.EMPTY_REPLY

    @staticmethod
    def is_unavailable(reply: str) -> bool:
        """True when a call_llm reply is the service-unavailable fallback."""
        return reply in messages.SERVICE_UNAVAILABLE.values()

    def require_available(self, reply: str) -> str:
        """
        Pass a call_llm reply through, or raise when it is the fallback.

        Raises:
            LLMError: If the model was unavailable
        """
        if self.is_unavailable(reply):
            raise LLMError(f"{self.name}: model unavailable")
        return reply

    def unknown_medicine_response(self, query: str, language: str = Language.ENGLISH.value) -> str:
        return messages.unknown_medicine(query, language)

    def respond(
        self,
        response: str,
        confidence: float,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AgentResponse:
        """Build an AgentResponse stamped with this agent's name."""
        return AgentResponse(
            agent_name=self.name,
            response=response,
            confidence=confidence,
            metadata=metadata or {},
        )
