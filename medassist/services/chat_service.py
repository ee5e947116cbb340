"""
Chat Service - Business logic for the conversational endpoint.

This service runs the chat flow:
1. Validates that the message has text or an image
2. Retrieves/creates session memory
3. Runs the agent orchestrator
4. Stores both turns in memory
5. Returns the answer with follow-up suggestions

Routes stay thin; the same flow can be driven without HTTP in tests.
"""
import uuid
from typing import List, Optional

from medassist.agents import MedicalAgentOrchestrator, get_orchestrator
from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput
from medassist.core.exceptions import ValidationError
from medassist.core.logging_config import get_logger
from medassist.core.validators import sanitize_message
from medassist.memory import AnyMemoryManager, get_memory_manager
from medassist.models.chat import ChatRequest, ChatResult

logger = get_logger(__name__)

FALLBACK_AGENT = "FallbackAgent"

# Query types whose suggestion set goes by another name
_SUGGESTION_KEYS = {"medical_documentation": "report_analysis"}


def generate_follow_up_suggestions(query_type: str, language: str) -> List[str]:
    """Two follow-up prompts suited to the kind of question just answered."""
    table = messages.FOLLOW_UP_SUGGESTIONS.get(language, messages.FOLLOW_UP_SUGGESTIONS[messages.ENGLISH])
    key = _SUGGESTION_KEYS.get(query_type, query_type)
    return list(table.get(key, table["default"]))


class ChatService:
    """
    Service for medical chat with conversation memory.

    Example:
        >>> service = ChatService()
        >>> result = service.process_message(
        ...     ChatRequest(text="What is Panadol?", session_id="3f1c...")
        ... )
        >>> result.agents_used
        ['DrugInformationAgent']
    """

    def __init__(
        self,
        orchestrator: Optional[MedicalAgentOrchestrator] = None,
        memory_manager: Optional[AnyMemoryManager] = None
    ):
        self.orchestrator = orchestrator or get_orchestrator()
        self.memory_manager = memory_manager or get_memory_manager()
        logger.info("ChatService initialized")

    def process_message(self, request: ChatRequest) -> ChatResult:
        """
        Answer one chat message.

        Args:
            request: Text and/or image, language and optional session id

        Returns:
            ChatResult; unexpected failures produce the localized fallback
            answer from FallbackAgent rather than an exception.

        Raises:
            ValidationError: If neither text nor an image was supplied
        """
        text = sanitize_message(request.text)
        if not text and not request.image_data_uri:
            raise ValidationError("Please enter a message or upload an image.", field="text")

        session_id = request.session_id or str(uuid.uuid4())
        language = request.language

        logger.info(
            f"Processing message: session={session_id[:8]}..., "
            f"length={len(text)}, image={bool(request.image_data_uri)}, language={language}"
        )

        try:
            if not self.memory_manager.session_exists(session_id):
                # Expired or deleted transcript: earlier agent turns no longer apply
                self.orchestrator.forget_conversation(session_id)
            memory = self.memory_manager.get_or_create_session(session_id)

            history = self.orchestrator.get_conversation_history(session_id)
            context = AgentContext(
                conversation_id=session_id,
                language=language,
                previous_responses=list(history[-1].previous_responses) if history else [],
            )

            result = self.orchestrator.process_query(
                AgentInput(text=text, image_data_uri=request.image_data_uri),
                context,
            )
            if not result.primary_response:
                raise RuntimeError("Agent orchestrator failed to produce a valid response")

            agents_used = [r.agent_name for r in result.agent_responses]
            query_type = result.query_analysis.query_type

            memory.add_user_message(text, image=request.image_data_uri)
            memory.add_assistant_message(result.primary_response, metadata={
                "agents_used": agents_used,
                "confidence": result.confidence,
                "query_type": query_type,
            })

            logger.info(
                f"Message processed: session={session_id[:8]}..., agents={agents_used}, "
                f"confidence={result.confidence}"
            )

            return ChatResult(
                response=result.primary_response,
                session_id=session_id,
                agents_used=agents_used,
                confidence=result.confidence,
                suggestions=generate_follow_up_suggestions(query_type, language),
                query_type=query_type,
            )

        except Exception as e:
            logger.exception(f"Unexpected error in chat service: {e}")
            return ChatResult(
                response=messages.localized(messages.CHAT_FALLBACK, language),
                session_id=session_id,
                agents_used=[FALLBACK_AGENT],
                confidence=0.1,
                suggestions=list(messages.CHAT_FALLBACK_SUGGESTIONS.get(
                    language, messages.CHAT_FALLBACK_SUGGESTIONS[messages.ENGLISH]
                )),
                query_type="general",
            )


_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service


def reset_chat_service() -> None:
    global _chat_service
    _chat_service = None
