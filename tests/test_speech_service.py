"""
Speech-to-text tests.
"""
import pytest

from medassist.core.exceptions import TranscriptionError, ValidationError
from medassist.services.speech_service import SpeechToTextService
from tests.conftest import FakeLLMClient, unavailable


def test_audio_is_transcribed(audio_uri):
    llm = FakeLLMClient(multimodal_reply="  What is Panadol?  ")

    text = SpeechToTextService(llm).transcribe(audio_uri)

    assert text == "What is Panadol?"
    audio, instruction = llm.multimodal_calls[0]["parts"]
    assert audio["type"] == "input_audio"
    assert audio["input_audio"]["format"] == "mp3"
    assert instruction == {"type": "text", "text": "Transcribe the audio."}


@pytest.mark.parametrize("reply", [unavailable(), "   "])
def test_failed_transcription_raises(audio_uri, reply):
    with pytest.raises(TranscriptionError):
        SpeechToTextService(FakeLLMClient(multimodal_reply=reply)).transcribe(audio_uri)


def test_non_audio_upload_is_rejected(image_uri):
    llm = FakeLLMClient()

    with pytest.raises(ValidationError) as excinfo:
        SpeechToTextService(llm).transcribe(image_uri)

    assert excinfo.value.field == "audio_data_uri"
    assert llm.multimodal_calls == []
