"""
SideEffectsAgent tests.
"""
import pytest

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput
from medassist.agents.side_effects import (
    SideEffectsAgent,
    assess_urgency,
    determine_query_type,
    extract_symptoms,
    parse_side_effects_list,
)
from tests.conftest import FakeLLMClient, unavailable

CHECK = "Does this text mention a specific medication"
ANALYSIS = "Analyze the following text for medication side effects"
PROFILE = "Provide comprehensive side effects profile"
FORMAT = "Format this side effects information"

ANALYSIS_REPLY = """Stomach upset is a known effect of ibuprofen.
You should contact a doctor if the pain persists.
Watch for serious bleeding."""

PROFILE_REPLY = """**Common Side Effects:**
- Nausea (15%)
- Headache, common
**Less Common Side Effects:**
- Dizziness 1-10%
**Rare but Serious Side Effects:**
- Severe allergic reaction, very rare
**When to Contact Healthcare Provider:**
Seek help for facial swelling"""

FORMATTED = "Ibuprofen commonly causes stomach upset."


@pytest.fixture
def context():
    return AgentContext(conversation_id="conv-1", language="english")


def test_can_handle(context):
    agent = SideEffectsAgent(FakeLLMClient())

    assert agent.can_handle("What are the side effects of Ibuprofen?", context)
    assert agent.can_handle("I get a rash after my tablets", context)
    assert not agent.can_handle("What is Ibuprofen?", context)


def test_symptom_report_is_triaged(context):
    llm = FakeLLMClient(rules=[(FORMAT, FORMATTED), (CHECK, "Ibuprofen"), (ANALYSIS, ANALYSIS_REPLY)])

    response = SideEffectsAgent(llm).process(
        AgentInput(text="I am feeling nausea after taking Ibuprofen"), context
    )

    assert response.response == FORMATTED
    assert response.confidence == 0.85
    info = response.metadata["sideEffectsInfo"]
    assert info["queryType"] == "symptom_report"
    assert info["medication"] == "Ibuprofen"
    assert info["symptoms"] == ["nausea"]
    assert info["urgency"] == "high"
    assert info["recommendations"] == ["You should contact a doctor if the pain persists."]


def test_unknown_medicine(context):
    llm = FakeLLMClient(rules=[(CHECK, "UNKNOWN_MEDICINE")])

    response = SideEffectsAgent(llm).process(AgentInput(text="side effects of Zorbanex"), context)

    assert response.confidence == 0.9
    assert 'I don\'t know about "side effects of Zorbanex"' in response.response
    assert not llm.prompts_containing(ANALYSIS)


def test_unavailable_model_returns_error(context):
    llm = FakeLLMClient(rules=[(CHECK, unavailable())])

    response = SideEffectsAgent(llm).process(AgentInput(text="side effects of Ibuprofen"), context)

    assert response.confidence == 0.0
    assert response.response == messages.SIDE_EFFECTS_ERROR["english"]


def test_image_input_gets_full_profile(context, image_uri):
    llm = FakeLLMClient(rules=[(FORMAT, FORMATTED), (PROFILE, PROFILE_REPLY)])

    response = SideEffectsAgent(llm).process(AgentInput(text="Brufen", image_data_uri=image_uri), context)

    assert response.response == FORMATTED
    info = response.metadata["sideEffectsInfo"]
    assert info["medication"] == "Brufen"
    assert [e["effect"] for e in info["commonSideEffects"]] == ["Nausea (15%)", "Headache, common"]
    assert info["commonSideEffects"][0]["frequency"] == "15%"
    assert info["uncommonSideEffects"][0]["frequency"] == "1-10%"
    assert info["seriousSideEffects"][0]["severity"] == "severe"
    assert info["whenToContact"] == "Seek help for facial swelling"
    assert not llm.prompts_containing(CHECK)


def test_helpers():
    assert determine_query_type("I'm having headaches") == "symptom_report"
    assert determine_query_type("How to manage drowsiness") == "management_advice"
    assert determine_query_type("Side effects of Brufen?") == "side_effects_inquiry"
    assert extract_symptoms("dizziness and dry mouth") == ["dizziness", "dry mouth"]
    assert assess_urgency("Seek emergency care") == "emergency"
    assert assess_urgency("Usually mild") == "low"
    assert parse_side_effects_list("no bullets here") == []
