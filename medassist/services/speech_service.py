"""
Speech-to-Text Service - transcription of recorded voice input.
"""
from typing import Optional

from medassist.core.exceptions import LLMError, TranscriptionError, ValidationError
from medassist.core.logging_config import get_logger
from medassist.core.validators import validate_audio_data_uri
from medassist.llm.client import LLMClient, audio_part, get_llm_client, text_part
from medassist.llm.prompts.vision_prompts import TRANSCRIBE_INSTRUCTION

logger = get_logger(__name__)


class SpeechToTextService:
    """Sends an audio clip to an audio-capable model and returns its transcript."""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm_client = llm_client or get_llm_client()

    def transcribe(self, audio_data_uri: str) -> str:
        """
        Args:
            audio_data_uri: Recording as data:audio/<type>;base64,<payload>

        Returns:
            The transcribed text

        Raises:
            ValidationError: If the data URI is malformed
            TranscriptionError: If the model fails or returns nothing
        """
        is_valid, error = validate_audio_data_uri(audio_data_uri)
        if not is_valid:
            raise ValidationError(error or "Invalid audio data URI format.", field="audio_data_uri")

        try:
            text = self.llm_client.generate_multimodal([
                audio_part(audio_data_uri),
                text_part(TRANSCRIBE_INSTRUCTION),
            ])
        except LLMError as e:
            logger.error(f"Error during speech-to-text transcription: {e}")
            raise TranscriptionError() from e

        if not text or not text.strip():
            logger.error("Transcription failed to produce text")
            raise TranscriptionError()

        return text.strip()


_speech_service: Optional[SpeechToTextService] = None


def get_speech_service() -> SpeechToTextService:
    global _speech_service
    if _speech_service is None:
        _speech_service = SpeechToTextService()
    return _speech_service
