"""
Shared fixtures.

Environment defaults are applied before any medassist import so the
cached Settings never pick up a developer's real keys.
"""
import base64
import os

os.environ["OPENROUTER_API_KEY"] = ""
os.environ["GEMINI_API_KEY"] = ""
os.environ["HUGGINGFACE_API_KEY"] = ""
os.environ["OPENFDA_ENABLED"] = "false"
os.environ["MEMORY_PERSISTENT"] = "false"
os.environ["APP_ENV"] = "development"

import pytest

from medassist.core.config import get_settings
from medassist.core.exceptions import LLMError
from medassist.llm.huggingface import MedicalEntity


get_settings.cache_clear()


def make_image_uri(payload: bytes = b"fake-image-bytes", mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode()}"


def make_audio_uri(payload: bytes = b"fake-audio-bytes", mime: str = "audio/mpeg") -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode()}"


class FakeLLMClient:
    """
    Stand-in for LLMClient scripted by prompt substrings.

    rules is a list of (substring, reply) pairs checked in order against
    the user prompt; a reply that is an exception instance is raised.
    """

    def __init__(self, rules=None, default="", image_reply="", multimodal_reply=""):
        self.rules = list(rules or [])
        self.default = default
        self.image_reply = image_reply
        self.multimodal_reply = multimodal_reply
        self.calls = []
        self.image_calls = []
        self.multimodal_calls = []

    @staticmethod
    def _answer(reply):
        if isinstance(reply, Exception):
            raise reply
        return reply

    def generate(self, user_message, system_prompt=None, history=None, model=None):
        self.calls.append({"user_message": user_message, "system_prompt": system_prompt, "model": model})
        for needle, reply in self.rules:
            if needle in user_message:
                return self._answer(reply)
        return self._answer(self.default)

    def generate_with_image(self, image_data_uri, system_prompt=None, user_message=None, model=None):
        self.image_calls.append({
            "image_data_uri": image_data_uri,
            "system_prompt": system_prompt,
            "user_message": user_message,
        })
        return self._answer(self.image_reply)

    def generate_multimodal(self, parts, system_prompt=None, model=None):
        self.multimodal_calls.append({"parts": parts, "system_prompt": system_prompt})
        return self._answer(self.multimodal_reply)

    def prompts_containing(self, needle):
        return [call["user_message"] for call in self.calls if needle in call["user_message"]]


class FakeHFClient:
    """Stand-in for HuggingFaceClient with canned entities and OCR text per model."""

    def __init__(self, entities=None, ocr_texts=None):
        self.entities = list(entities or [])
        self.ocr_texts = dict(ocr_texts or {})
        self.ocr_calls = []

    def extract_medical_entities(self, text):
        return list(self.entities)

    def perform_ocr(self, image_bytes, mime_type, model):
        self.ocr_calls.append(model)
        reply = self.ocr_texts.get(model, "")
        if isinstance(reply, Exception):
            raise reply
        return reply


def entity(text, label="MEDICATION"):
    return MedicalEntity(text=text, label=label, confidence=0.9, start=0, end=len(text))


def unavailable():
    return LLMError("All LLM providers failed. Last error: boom")


@pytest.fixture(autouse=True)
def reset_singletons():
    """Every test starts with fresh global services."""
    from medassist.agents import reset_orchestrator
    from medassist.core.rate_limiter import reset_rate_limiter
    from medassist.llm.client import reset_llm_client
    from medassist.llm.huggingface import reset_huggingface_client
    from medassist.memory import reset_memory_managers
    from medassist.services import pill_service, speech_service
    from medassist.services.chat_service import reset_chat_service
    from medassist.services.ocr_service import reset_ocr_service

    def reset():
        reset_rate_limiter()
        reset_memory_managers()
        reset_orchestrator()
        reset_chat_service()
        reset_llm_client()
        reset_huggingface_client()
        reset_ocr_service()
        pill_service._pill_service = None
        speech_service._speech_service = None

    reset()
    yield
    reset()


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def fake_hf():
    return FakeHFClient()


@pytest.fixture
def image_uri():
    return make_image_uri()


@pytest.fixture
def audio_uri():
    return make_audio_uri()
