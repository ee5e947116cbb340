"""
ChatService tests: memory, suggestions and the fallback answer.
"""
import json

import pytest

from medassist.agents import create_medical_orchestrator, messages
from medassist.agents.base import AgentContext, AgentResponse, BaseAgent
from medassist.agents.orchestrator import MedicalAgentOrchestrator, OrchestratorResponse, QueryAnalysis
from medassist.core.exceptions import ValidationError
from medassist.memory import MemoryManager
from medassist.models.chat import ChatRequest
from medassist.services.chat_service import ChatService, generate_follow_up_suggestions
from medassist.services.ocr_service import MedicalOCRService
from tests.conftest import FakeHFClient, FakeLLMClient

SESSION_ID = "3f1c2b7e-9a4d-4c55-8f3e-2b1a6c7d8e9f"


def orchestrator_response(text="Panadol is paracetamol.", query_type="medicine", agents=("DrugInformationAgent",)):
    return OrchestratorResponse(
        primary_response=text,
        agent_responses=[AgentResponse(name, text, 0.9) for name in agents],
        query_analysis=QueryAnalysis(
            query_type=query_type,
            complexity="simple",
            required_agents=list(agents),
            priority=5,
            medical_entities=[],
        ),
        confidence=0.9,
    )


class StubOrchestrator:
    """Records each query and answers with a canned result or error."""

    def __init__(self, result=None, error=None, history=None):
        self.result = result or orchestrator_response()
        self.error = error
        self.history = history or []
        self.queries = []
        self.forgotten = []

    def get_conversation_history(self, conversation_id):
        return list(self.history)

    def forget_conversation(self, conversation_id):
        self.forgotten.append(conversation_id)

    def process_query(self, agent_input, context):
        self.queries.append((agent_input, context))
        if self.error:
            raise self.error
        return self.result


def test_message_is_answered_and_remembered():
    memory = MemoryManager()
    orchestrator = StubOrchestrator()
    service = ChatService(orchestrator=orchestrator, memory_manager=memory)

    result = service.process_message(ChatRequest(text="  What   is Panadol? ", session_id=SESSION_ID))

    assert result.response == "Panadol is paracetamol."
    assert result.session_id == SESSION_ID
    assert result.agents_used == ["DrugInformationAgent"]
    assert result.confidence == 0.9
    assert result.query_type == "medicine"
    assert result.suggestions == messages.FOLLOW_UP_SUGGESTIONS["english"]["medicine"]

    agent_input, context = orchestrator.queries[0]
    assert agent_input.text == "What is Panadol?"
    assert context.conversation_id == SESSION_ID

    stored = memory.get_session(SESSION_ID).get_all_messages()
    assert [m.role for m in stored] == ["user", "assistant"]
    assert stored[1].metadata["agents_used"] == ["DrugInformationAgent"]


class RecordingDrugAgent(BaseAgent):
    def __init__(self):
        super().__init__("DrugInformationAgent", "Records contexts", llm_client=FakeLLMClient())
        self.contexts = []

    def can_handle(self, text, context):
        return True

    def process(self, agent_input, context):
        self.contexts.append(context)
        return AgentResponse(self.name, "Panadol is paracetamol.", 0.9)


@pytest.fixture
def recording_orchestrator():
    agent = RecordingDrugAgent()
    orchestrator = MedicalAgentOrchestrator(llm_client=FakeLLMClient(), max_workers=1)
    orchestrator.register_agent(agent)
    yield orchestrator, agent
    orchestrator.shutdown()


def test_deleted_session_starts_without_agent_memory(recording_orchestrator):
    orchestrator, agent = recording_orchestrator
    memory = MemoryManager()
    service = ChatService(orchestrator=orchestrator, memory_manager=memory)

    service.process_message(ChatRequest(text="What is Panadol?", session_id=SESSION_ID))
    service.process_message(ChatRequest(text="And Brufen?", session_id=SESSION_ID))
    assert [r.agent_name for r in agent.contexts[1].previous_responses] == ["DrugInformationAgent"]

    memory.clear_session(SESSION_ID)
    service.process_message(ChatRequest(text="What is Panadol?", session_id=SESSION_ID))

    assert agent.contexts[2].previous_responses == []
    assert len(orchestrator.get_conversation_history(SESSION_ID)) == 1


def test_session_id_is_generated_when_missing():
    service = ChatService(orchestrator=StubOrchestrator(), memory_manager=MemoryManager())

    result = service.process_message(ChatRequest(text="What is Panadol?"))

    assert len(result.session_id) == 36


def test_image_only_message_is_accepted(image_uri):
    orchestrator = StubOrchestrator()
    service = ChatService(orchestrator=orchestrator, memory_manager=MemoryManager())

    service.process_message(ChatRequest(image_data_uri=image_uri, session_id=SESSION_ID))

    assert orchestrator.queries[0][0].image_data_uri == image_uri


def test_empty_message_is_rejected():
    service = ChatService(orchestrator=StubOrchestrator(), memory_manager=MemoryManager())

    with pytest.raises(ValidationError):
        service.process_message(ChatRequest(text="   "))


def test_previous_turn_is_passed_as_context():
    previous = orchestrator_response()
    history = [AgentContext(conversation_id=SESSION_ID, previous_responses=previous.agent_responses)]
    orchestrator = StubOrchestrator(history=history)
    service = ChatService(orchestrator=orchestrator, memory_manager=MemoryManager())

    service.process_message(ChatRequest(text="And its side effects?", session_id=SESSION_ID))

    context = orchestrator.queries[0][1]
    assert [r.agent_name for r in context.previous_responses] == ["DrugInformationAgent"]


@pytest.mark.parametrize("error", [RuntimeError("boom"), None])
def test_failures_produce_fallback_answer(error):
    result = orchestrator_response(text="") if error is None else None
    service = ChatService(orchestrator=StubOrchestrator(result=result, error=error), memory_manager=MemoryManager())

    reply = service.process_message(ChatRequest(text="What is Panadol?", language="urdu", session_id=SESSION_ID))

    assert reply.response == messages.CHAT_FALLBACK["urdu"]
    assert reply.agents_used == ["FallbackAgent"]
    assert reply.confidence == 0.1
    assert reply.suggestions == messages.CHAT_FALLBACK_SUGGESTIONS["urdu"]
    assert reply.query_type == "general"


def test_suggestions_by_query_type():
    assert generate_follow_up_suggestions("dosage", "english") == ["What to do if I miss a dose?", "Ask about food interactions"]
    assert generate_follow_up_suggestions("medical_documentation", "english") == (
        messages.FOLLOW_UP_SUGGESTIONS["english"]["report_analysis"]
    )
    assert generate_follow_up_suggestions("general", "urdu") == messages.FOLLOW_UP_SUGGESTIONS["urdu"]["default"]


def test_full_flow_with_real_agents(settings):
    llm = FakeLLMClient(rules=[
        ("Analyze the following medical query", json.dumps({
            "queryType": "dosage",
            "complexity": "simple",
            "requiredAgents": ["DosageAgent"],
            "priority": 5,
            "medicalEntities": ["Panadol"],
        })),
        ("classify it as either PERSONAL or EDUCATIONAL", "PERSONAL"),
    ])
    orchestrator = create_medical_orchestrator(
        llm_client=llm,
        hf_client=FakeHFClient(),
        ocr_service=MedicalOCRService(FakeHFClient(), settings),
        drug_info_lookup=lambda name: None,
    )
    try:
        service = ChatService(orchestrator=orchestrator, memory_manager=MemoryManager())
        result = service.process_message(ChatRequest(text="How much Panadol should I take?", session_id=SESSION_ID))
    finally:
        orchestrator.shutdown()

    assert result.response == messages.PERSONAL_DOSAGE_REFUSAL["english"]
    assert result.agents_used == ["DosageAgent"]
    assert result.suggestions == messages.FOLLOW_UP_SUGGESTIONS["english"]["dosage"]


def test_agent_memory_is_kept_for_live_sessions():
    memory = MemoryManager()
    orchestrator = StubOrchestrator()
    service = ChatService(orchestrator=orchestrator, memory_manager=memory)

    service.process_message(ChatRequest(text="What is Panadol?", session_id=SESSION_ID))
    service.process_message(ChatRequest(text="And Brufen?", session_id=SESSION_ID))

    assert orchestrator.forgotten == [SESSION_ID]
