"""
HTTP API tests using FastAPI's TestClient.
"""
import pytest
from fastapi.testclient import TestClient

from medassist import agents as agents_module
from medassist.agents.base import AgentContext, AgentResponse
from medassist.agents.orchestrator import MedicalAgentOrchestrator
from medassist.api.main import app
from medassist.core import rate_limiter as rate_limiter_module
from medassist.core.config import get_settings
from medassist.core.exceptions import TranscriptionError
from medassist.core.rate_limiter import RateLimiter
from medassist.memory import get_memory_manager
from medassist.models.chat import ChatResult
from medassist.services.pill_service import PillIdentification
from tests.conftest import FakeLLMClient, make_audio_uri, make_image_uri

SESSION_ID = "3f1c2b7e-9a4d-4c55-8f3e-2b1a6c7d8e9f"


class StubChatService:
    def __init__(self):
        self.requests = []

    def process_message(self, request):
        self.requests.append(request)
        return ChatResult(
            response="Panadol is paracetamol.",
            session_id=request.session_id,
            agents_used=["DrugInformationAgent"],
            confidence=0.9,
            suggestions=["Ask about side effects", "Check for drug interactions"],
            query_type="medicine",
        )


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def chat_service(monkeypatch):
    service = StubChatService()
    monkeypatch.setattr("medassist.api.routes.chat.get_chat_service", lambda: service)
    return service


def test_root_and_health(client):
    assert client.get("/").json()["documentation"] == "/docs"

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "healthy"


def test_readiness_reports_missing_key(client, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "")

    body = client.get("/health/ready").json()

    assert body["status"] == "degraded"
    assert body["environment"]["missing_required"] == ["OPENROUTER_API_KEY"]


def test_readiness_masks_configured_key(client, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-secret-1234")

    body = client.get("/health/ready").json()

    assert body["status"] == "ready"
    check = body["environment"]["checks"][0]
    assert check["value"] == "***1234"
    assert "secret" not in str(body)


def test_chat_returns_answer(client, chat_service):
    response = client.post("/chat", json={"text": "  What is   Panadol? ", "session_id": SESSION_ID})

    assert response.status_code == 200
    body = response.json()
    assert body["response"] == "Panadol is paracetamol."
    assert body["session_id"] == SESSION_ID
    assert body["agents_used"] == ["DrugInformationAgent"]
    assert "timestamp" in body
    assert response.headers["X-RateLimit-Remaining"] == str(get_settings().rate_limit_per_minute - 1)
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert chat_service.requests[0].text == "What is Panadol?"


def test_chat_generates_session_id(client, chat_service):
    body = client.post("/chat", json={"text": "What is Panadol?"}).json()

    assert len(body["session_id"]) == 36


def test_chat_rejects_empty_message(client, chat_service):
    response = client.post("/chat", json={"text": "   "})

    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"
    assert response.json()["details"] == "field=text"
    assert chat_service.requests == []


def test_chat_rejects_bad_session_id(client, chat_service):
    response = client.post("/chat", json={"text": "hello", "session_id": "not-a-uuid"})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid session_id format (must be UUID)"


def test_chat_rejects_bad_image(client, chat_service):
    response = client.post("/chat", json={"text": "what is this", "image_data_uri": "data:text/plain;base64,eHg="})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_image"


def test_chat_rejects_unsupported_language(client, chat_service):
    response = client.post("/chat", json={"text": "hello", "language": "french"})

    assert response.status_code == 422


def test_chat_rate_limit(client, chat_service, monkeypatch):
    monkeypatch.setattr(rate_limiter_module, "_rate_limiter", RateLimiter(requests_per_minute=1))

    first = client.post("/chat", json={"text": "hello", "session_id": SESSION_ID})
    second = client.post("/chat", json={"text": "hello again", "session_id": SESSION_ID})

    assert first.status_code == 200
    assert second.status_code == 429
    assert second.json()["error"] == "rate_limit_exceeded"
    assert int(second.headers["Retry-After"]) >= 1
    assert len(chat_service.requests) == 1


def test_chat_rate_limit_without_session_uses_client_address(client, chat_service, monkeypatch):
    limiter = RateLimiter(requests_per_minute=1)
    monkeypatch.setattr(rate_limiter_module, "_rate_limiter", limiter)

    first = client.post("/chat", json={"text": "hello"})
    second = client.post("/chat", json={"text": "hello again"})

    assert first.status_code == 200
    assert second.status_code == 429
    assert len(chat_service.requests) == 1
    assert limiter.tracked_identifiers() == 1


def test_identify_pill(client, monkeypatch):
    class StubPillService:
        def identify(self, image_data_uri):
            return PillIdentification(name="Panadol", description="White tablet", dosage="500mg")

    monkeypatch.setattr("medassist.api.routes.identify.get_pill_service", lambda: StubPillService())

    response = client.post("/identify-pill", json={"image_data_uri": make_image_uri()})

    assert response.status_code == 200
    assert response.json() == {"name": "Panadol", "description": "White tablet", "dosage": "500mg"}


def test_identify_pill_rejects_bad_image(client):
    response = client.post("/identify-pill", json={"image_data_uri": "nonsense"})

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_image"


def test_speech_to_text(client, monkeypatch):
    class StubSpeechService:
        def __init__(self, error=None):
            self.error = error

        def transcribe(self, audio_data_uri):
            if self.error:
                raise self.error
            return "What is Panadol?"

    monkeypatch.setattr("medassist.api.routes.speech.get_speech_service", lambda: StubSpeechService())
    assert client.post("/speech-to-text", json={"audio_data_uri": make_audio_uri()}).json() == {
        "text": "What is Panadol?"
    }

    monkeypatch.setattr(
        "medassist.api.routes.speech.get_speech_service",
        lambda: StubSpeechService(TranscriptionError()),
    )
    failed = client.post("/speech-to-text", json={"audio_data_uri": make_audio_uri()})
    assert failed.status_code == 502
    assert failed.json()["error"] == "transcription_error"


def test_agents_listing(client, monkeypatch):
    class StubOrchestrator:
        def get_agents_info(self):
            return [{"name": "DosageAgent", "description": "Dosing", "capabilities": []}]

    monkeypatch.setattr("medassist.api.routes.agents.get_orchestrator", lambda: StubOrchestrator())

    assert client.get("/agents").json() == [{"name": "DosageAgent", "description": "Dosing", "capabilities": []}]


def test_session_lifecycle(client):
    created = client.post("/session/new").json()
    session_id = created["session_id"]
    assert created["storage"] == "memory"

    session = get_memory_manager().get_session(session_id)
    session.add_user_message("What is Panadol?")
    session.add_assistant_message("Paracetamol.")

    listed = client.get("/session/list").json()
    assert listed["total"] == 1
    assert listed["sessions"] == [{"id": session_id, "title": "What is Panadol?"}]

    info = client.get(f"/session/{session_id}").json()
    assert info["message_count"] == 2
    assert info["user_messages"] == 1

    history = client.get(f"/session/{session_id}/history").json()
    assert [m["role"] for m in history["messages"]] == ["user", "assistant"]

    stats = client.get("/session").json()
    assert stats["storage"] == "memory"
    assert stats["total_messages"] == 2

    cleared = client.post(f"/session/{session_id}/clear").json()
    assert cleared["deleted"] is False
    assert client.get(f"/session/{session_id}/history").json()["messages"] == []

    deleted = client.delete(f"/session/{session_id}").json()
    assert deleted["deleted"] is True
    assert client.delete(f"/session/{session_id}").json()["deleted"] is False


def test_clearing_or_deleting_a_session_forgets_agent_memory(client, monkeypatch):
    orchestrator = MedicalAgentOrchestrator(llm_client=FakeLLMClient(), max_workers=1)
    monkeypatch.setattr(agents_module, "_orchestrator", orchestrator)
    for conversation_id in (SESSION_ID, "other-session"):
        orchestrator._remember(AgentContext(conversation_id=conversation_id), [AgentResponse("DosageAgent", "500mg", 0.9)])
    get_memory_manager().get_or_create_session(SESSION_ID)

    assert client.post(f"/session/{SESSION_ID}/clear").status_code == 200
    assert orchestrator.get_conversation_history(SESSION_ID) == []
    assert orchestrator.remembered_conversations() == 1

    client.delete("/session/all")
    assert orchestrator.remembered_conversations() == 0


def test_unknown_session_is_404(client):
    response = client.get(f"/session/{SESSION_ID}")

    assert response.status_code == 404
    assert response.json()["error"] == "session_not_found"
    assert client.get(f"/session/{SESSION_ID}/history").status_code == 404
    assert client.post(f"/session/{SESSION_ID}/clear").status_code == 404


def test_delete_all_sessions(client):
    client.post("/session/new")
    client.post("/session/new")

    body = client.delete("/session/all").json()

    assert body["sessions_deleted"] == 2
    assert client.get("/session/list").json()["total"] == 0
