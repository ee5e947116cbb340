"""
Chat Routes - the conversational endpoint.

Handlers are plain functions: FastAPI runs them in its thread pool, which
keeps the blocking model calls off the event loop.
"""
import uuid

from fastapi import APIRouter, Request, Response

from medassist.api.deps import client_identifier, enforce_rate_limit
from medassist.core.config import get_settings
from medassist.core.exceptions import ImageValidationError, ValidationError
from medassist.core.logging_config import get_logger
from medassist.core.validators import validate_chat_input, validate_image_data_uri, validate_session_id
from medassist.models.chat import ChatRequest, ChatResponse, ErrorResponse
from medassist.services.chat_service import get_chat_service

logger = get_logger(__name__)

router = APIRouter(
    prefix="/chat",
    tags=["Chat"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"}
    }
)


@router.post(
    "",
    response_model=ChatResponse,
    summary="Ask the medical assistant",
    description="""
    Send a question, a photo (pill, pack or handwritten prescription), or both.

    The query is analyzed, routed to the relevant specialist agents
    (drug information, interactions, dosage, side effects, documents) and
    their answers are merged into one educational reply.

    Include a `session_id` to keep the conversation in one transcript.
    Requests are limited per session, or per client IP without one; see the X-RateLimit-* headers.
    """
)
def send_message(request: ChatRequest, http_request: Request, response: Response) -> ChatResponse:
    if request.session_id:
        is_valid, error = validate_session_id(request.session_id)
        if not is_valid:
            raise ValidationError(error, field="session_id")

    is_valid, sanitized_text, error = validate_chat_input(request.text, request.image_data_uri, request.language)
    if not is_valid:
        raise ValidationError(error, field="text")

    if request.image_data_uri:
        is_valid, error = validate_image_data_uri(request.image_data_uri, get_settings().max_image_bytes)
        if not is_valid:
            raise ImageValidationError(error or "Invalid image data URI format.")

    enforce_rate_limit(client_identifier(http_request, request.session_id or ""), response)
    session_id = request.session_id or str(uuid.uuid4())

    logger.info(f"Chat request: session={session_id[:8]}..., language={request.language}")

    result = get_chat_service().process_message(
        request.model_copy(update={"text": sanitized_text, "session_id": session_id})
    )
    return ChatResponse(**result.model_dump())
