"""
Speech-to-Text Route - voice input for the chat box.
"""
from fastapi import APIRouter, Request, Response

from medassist.api.deps import client_identifier, enforce_rate_limit
from medassist.models.chat import ErrorResponse, SpeechToTextRequest, SpeechToTextResponse
from medassist.services.speech_service import get_speech_service

router = APIRouter(
    prefix="/speech-to-text",
    tags=["Speech"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid audio"},
        502: {"model": ErrorResponse, "description": "Transcription failed"},
    }
)


@router.post("", response_model=SpeechToTextResponse, summary="Transcribe recorded audio")
def speech_to_text(request: SpeechToTextRequest, http_request: Request, response: Response):
    enforce_rate_limit(client_identifier(http_request), response)
    return SpeechToTextResponse(text=get_speech_service().transcribe(request.audio_data_uri))
