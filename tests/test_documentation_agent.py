"""
MedicalDocumentationAgent tests.
"""
import pytest

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput
from medassist.agents.documentation import MedicalDocumentationAgent
from medassist.services.ocr_service import MedicalOCRService
from tests.conftest import FakeHFClient, FakeLLMClient

PRESCRIPTION = "Rx: Amoxicillin 500mg tid for 7 days after meal. Dr. Khan"


@pytest.fixture
def context():
    return AgentContext(conversation_id="conv-1", language="english")


def make_agent(settings, ocr_texts=None):
    hf = FakeHFClient(ocr_texts=ocr_texts)
    ocr = MedicalOCRService(hf, settings)
    return MedicalDocumentationAgent(FakeLLMClient(), ocr_service=ocr), hf


def test_can_handle(settings, context):
    agent, _ = make_agent(settings)

    assert agent.can_handle("Can you read this prescription?", context)
    assert not agent.can_handle("What is Panadol?", context)


def test_requires_an_image(settings, context):
    agent, hf = make_agent(settings)

    response = agent.process(AgentInput(text="read this prescription"), context)

    assert response.confidence == 0.2
    assert response.response == messages.IMAGE_REQUIRED["english"]
    assert hf.ocr_calls == []


def test_readable_document_is_transcribed(settings, context, image_uri):
    agent, _ = make_agent(settings, ocr_texts={settings.ocr_model: PRESCRIPTION})

    response = agent.process(AgentInput(text="", image_data_uri=image_uri), context)

    assert response.response.startswith("Extracted text from document (Confidence: ")
    assert response.response.endswith(f'\n\n"{PRESCRIPTION}"')
    assert response.confidence > 0.9
    assert response.metadata["is_ocr_result"] is True
    assert response.metadata["model_used"] == settings.ocr_model


def test_blank_document_is_unreadable(settings, context, image_uri):
    agent, hf = make_agent(settings)

    response = agent.process(AgentInput(text="", image_data_uri=image_uri), context)

    assert response.response == messages.DOCUMENT_UNREADABLE["english"]
    assert response.confidence == 0.0
    assert "is_ocr_result" not in response.metadata
    assert hf.ocr_calls == [settings.ocr_model, settings.ocr_fallback_model]


def test_non_image_upload_returns_error(settings, context):
    agent, hf = make_agent(settings)

    response = agent.process(AgentInput(text="", image_data_uri="data:text/plain;base64,eHg="), context)

    assert response.confidence == 0.0
    assert response.response == messages.DOCUMENT_ERROR["english"]
    assert response.metadata == {"error": True}
    assert hf.ocr_calls == []


def test_urdu_header(settings, image_uri):
    agent, _ = make_agent(settings, ocr_texts={settings.ocr_model: PRESCRIPTION})

    response = agent.process(AgentInput(image_data_uri=image_uri), AgentContext(language="urdu"))

    assert response.response.startswith("دستاویز سے نکالی گئی عبارت")
