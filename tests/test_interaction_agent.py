"""
InteractionAgent tests.
"""
import pytest

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput
from medassist.agents.interaction import (
    InteractionAgent,
    extract_list_from_response,
    extract_overall_risk,
    extract_patient_info,
    split_into_sections,
)
from tests.conftest import FakeHFClient, FakeLLMClient, entity, unavailable

EXTRACTION = "Extract medication names and patient conditions"
ANALYSIS = "Analyze the following medication combination"
FORMAT = "Format the following drug interaction analysis"

EXTRACTION_REPLY = """Medications: [Atenolol, Amlodipine]
Conditions: [asthma]
Age: 65
Pregnant: no"""

ANALYSIS_REPLY = """**Drug-Drug Interactions:**
- Atenolol with Amlodipine: moderate risk of low blood pressure
**Contraindications:**
- Avoid Atenolol in severe asthma
**Food/Lifestyle Interactions:**
- Alcohol may increase dizziness
**Special Populations:**
Elderly patients need closer monitoring
**Overall Risk Assessment:**
Moderate overall risk"""

FORMATTED = "Atenolol and Amlodipine can lower blood pressure together."


@pytest.fixture
def context():
    return AgentContext(conversation_id="conv-1", language="english")


def make_agent(rules, entities=None):
    llm = FakeLLMClient(rules=rules)
    return InteractionAgent(llm, hf_client=FakeHFClient(entities=entities)), llm


def test_can_handle(context):
    agent, _ = make_agent([])

    assert agent.can_handle("Can I take Atenolol and Amlodipine together?", context)
    assert not agent.can_handle("What is Panadol?", context)


def test_interactions_are_analyzed(context):
    agent, llm = make_agent(
        [(FORMAT, FORMATTED), (ANALYSIS, ANALYSIS_REPLY), (EXTRACTION, EXTRACTION_REPLY)],
        entities=[entity("Atenolol"), entity("asthma", label="Disease_disorder")],
    )

    response = agent.process(AgentInput(text="Is Atenolol safe with Amlodipine? I have asthma."), context)

    assert response.response == FORMATTED
    assert response.confidence == 0.85
    assert response.metadata["medications"] == ["Atenolol", "Amlodipine"]
    assert response.metadata["patientConditions"] == ["asthma"]

    analysis = response.metadata["interactionAnalysis"]
    assert analysis["drugInteractions"][0]["drugs"] == ["Atenolol", "Amlodipine"]
    assert analysis["drugInteractions"][0]["severity"] == "moderate"
    assert analysis["contraindications"][0]["medication"] == "Atenolol"
    assert analysis["contraindications"][0]["severity"] == "warning"
    assert analysis["foodInteractions"][0]["food"] == "alcohol"
    assert analysis["specialConsiderations"] == "Elderly patients need closer monitoring"
    assert analysis["overallRisk"] == "moderate"

    analysis_prompt = llm.prompts_containing(ANALYSIS)[0]
    assert "Medications: Atenolol, Amlodipine" in analysis_prompt
    assert '"age": 65' in analysis_prompt


def test_no_medications_returns_error(context):
    agent, _ = make_agent([(EXTRACTION, "Medications: none\nConditions: none")])

    response = agent.process(AgentInput(text="Is it safe together?"), context)

    assert response.confidence == 0.0
    assert response.response == messages.INTERACTION_ERROR["english"]


def test_unavailable_analysis_returns_error(context):
    agent, _ = make_agent([(ANALYSIS, unavailable()), (EXTRACTION, EXTRACTION_REPLY)])

    response = agent.process(AgentInput(text="Atenolol with Amlodipine?"), context)

    assert response.confidence == 0.0
    assert "error" in response.metadata


def test_split_into_sections_handles_numbered_headings():
    sections = split_into_sections("1. Drug-Drug Interactions:\nline one\n2. Overall Risk Assessment\nHigh")

    assert sections == {"drug-drug interactions": "line one", "overall risk assessment": "High"}


def test_list_and_patient_parsing():
    assert extract_list_from_response("Medications: [Warfarin, N/A, Aspirin]", "Medications:") == ["Warfarin", "Aspirin"]
    assert extract_list_from_response("nothing here", "Medications:") == []
    assert extract_patient_info("Age: 30\nPregnant: yes") == {"age": 30, "isPregnant": True}
    assert extract_overall_risk("Critical - seek emergency care") == "critical"
    assert extract_overall_risk("") == "low"
