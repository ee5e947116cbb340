"""
DrugInformationAgent tests.
"""
import json

import pytest

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput
from medassist.agents.drug_information import DrugInformationAgent, MedicineProfile, UnknownMedicine
from medassist.services.drug_info_service import OPENFDA_SOURCE, ExternalDrugInformation
from tests.conftest import FakeHFClient, FakeLLMClient, entity, unavailable

INTENT = "classify its intent"
NAME_EXTRACTION = "Extract ONLY the medicine/drug name"
DRUG_MENTION = "Extract the medicine/drug name from this text"
PROFILE = "Create a concise educational profile"

PANADOL_PROFILE = json.dumps({
    "medicineName": "Panadol",
    "type": "Analgesic and antipyretic",
    "description": "Brand of paracetamol used to relieve pain and reduce fever.",
    "usage": "Commonly used for headaches, muscle aches and fever.",
    "sideEffects": ["Nausea", "Rash", "", "Liver problems in overdose", "Allergic reactions", "Extra"],
    "warnings": ["Do not combine with other paracetamol products"],
    "reliability": "High",
    "source": "Pharmacology reference",
    "agents": ["DrugInformationAgent"],
})


def make_agent(rules, hf=None, lookup=None, image_reply=""):
    llm = FakeLLMClient(rules=rules, image_reply=image_reply)
    agent = DrugInformationAgent(llm, hf_client=hf or FakeHFClient(), drug_info_lookup=lookup)
    return agent, llm


@pytest.fixture
def context():
    return AgentContext(conversation_id="conv-1", language="english")


def test_question_gets_profile_card(context):
    agent, llm = make_agent([
        (INTENT, "MEDICINE_INFORMATION"),
        (NAME_EXTRACTION, "Panadol"),
        (PROFILE, PANADOL_PROFILE),
    ])

    response = agent.process(AgentInput(text="What is Panadol?"), context)

    assert response.agent_name == "DrugInformationAgent"
    assert response.confidence == 0.9
    assert "┌" + "─" * 49 + "┐" in response.response
    assert "│  Panadol" in response.response
    assert "Analgesic and antipyretic" in response.response
    assert "   • Nausea" in response.response
    assert "Extra" not in response.response
    assert response.metadata["processingMethod"] == "text"
    assert response.metadata["source"] == "Pharmacology reference"
    assert llm.prompts_containing(PROFILE)[0].count('"Panadol"') == 1


def test_bare_name_skips_extraction(context):
    agent, llm = make_agent([(INTENT, "MEDICINE_INFORMATION"), (PROFILE, PANADOL_PROFILE)])

    agent.process(AgentInput(text="Panadol"), context)

    assert not llm.prompts_containing(NAME_EXTRACTION)
    assert len(llm.prompts_containing(PROFILE)) == 1


def test_long_query_uses_ner_entity(context):
    hf = FakeHFClient(entities=[entity("Brufen", label="Chemical")])
    agent, llm = make_agent([(INTENT, "MEDICINE_INFORMATION"), (PROFILE, PANADOL_PROFILE)], hf=hf)

    agent.process(AgentInput(text="I would like to learn more about how Brufen works in the body"), context)

    assert 'medicine "Brufen"' in llm.prompts_containing(PROFILE)[0]
    assert not llm.prompts_containing(DRUG_MENTION)


def test_long_query_without_entities_asks_model(context):
    agent, llm = make_agent([
        (INTENT, "MEDICINE_INFORMATION"),
        (DRUG_MENTION, "Metformin"),
        (PROFILE, PANADOL_PROFILE),
    ])

    agent.process(AgentInput(text="my grandmother keeps some metformin in her kitchen drawer"), context)

    assert 'medicine "Metformin"' in llm.prompts_containing(PROFILE)[0]


def test_personal_advice_is_declined(context):
    agent, llm = make_agent([(INTENT, "MEDICAL_ADVICE")])

    response = agent.process(AgentInput(text="Should I take Panadol for my headache?"), context)

    assert response.confidence == 0.6
    assert response.response == messages.DIRECT_ADVICE_NOTICE["english"]
    assert response.metadata["queryType"] == "medical_advice_request"
    assert not llm.prompts_containing(PROFILE)


def test_advice_notice_in_urdu():
    agent, _ = make_agent([(INTENT, "MEDICAL_ADVICE")])

    response = agent.process(AgentInput(text="کیا میں پیناڈول لوں؟"), AgentContext(language="urdu"))

    assert response.response == messages.DIRECT_ADVICE_NOTICE["urdu"]


def test_unrelated_query_is_unknown(context):
    agent, _ = make_agent([(INTENT, "OTHER")])

    response = agent.process(AgentInput(text="tell me a joke"), context)

    assert response.confidence == 0.2
    assert 'I don\'t know about "tell me a joke"' in response.response
    assert response.metadata["queryType"] == "non_medicine_request"


def test_unknown_marker_gives_unknown_reply(context):
    agent, _ = make_agent([(INTENT, "MEDICINE_INFORMATION"), (PROFILE, "UNKNOWN_MEDICINE_NOT_RECOGNIZED")])

    response = agent.process(AgentInput(text="Zorbanex"), context)

    assert 'I don\'t know about "Zorbanex"' in response.response
    assert response.confidence == 0.8


@pytest.mark.parametrize("profile", [
    {"medicineName": "Zorbanex", "type": "Unknown", "description": "No data"},
    {"medicineName": "Zorbanex", "type": "Tablet", "description": "Medication type not specified"},
    {"medicineName": "Zorbanex", "type": "Not specified"},
])
def test_profiles_with_unknown_indicators_are_rejected(context, profile):
    agent, _ = make_agent([(INTENT, "MEDICINE_INFORMATION"), (PROFILE, json.dumps(profile))])

    result = agent.get_medicine_profile("Zorbanex", context)

    assert isinstance(result, UnknownMedicine)


def test_unavailable_model_asks_for_configuration(context):
    agent, _ = make_agent([(INTENT, unavailable()), (PROFILE, unavailable())])

    response = agent.process(AgentInput(text="Panadol"), context)

    assert "API configuration is required" in response.response
    assert '"Panadol"' in response.response


def test_profile_is_enriched_from_label(context):
    label = ExternalDrugInformation(
        brand_names=["Tylenol"],
        generic_name="ACETAMINOPHEN",
        therapeutic_class="Analgesic [EPC]",
        indications=["Temporarily relieves minor aches and pains"],
        warnings=["Liver warning"],
    )
    sparse_profile = json.dumps({"medicineName": "Tylenol", "description": "Pain reliever."})
    agent, _ = make_agent(
        [(INTENT, "MEDICINE_INFORMATION"), (PROFILE, sparse_profile)],
        lookup=lambda name: label if name == "Tylenol" else None,
    )

    response = agent.process(AgentInput(text="Tylenol"), context)

    assert response.confidence == 0.9
    assert response.metadata["source"] == OPENFDA_SOURCE
    assert response.metadata["drugInfo"]["reliability"] == "High"
    assert "Analgesic [EPC]" in response.response
    assert "Temporarily relieves minor aches and pains" in response.response
    assert "   • Liver warning" in response.response


def test_pill_photo_is_identified(context, image_uri):
    agent, llm = make_agent(
        [(INTENT, "MEDICINE_INFORMATION"), (PROFILE, PANADOL_PROFILE)],
        image_reply="Medicine name: Brufen 400, Strength: 400mg, round white tablet",
    )

    response = agent.process(AgentInput(text="", image_data_uri=image_uri), context)

    assert response.metadata["processingMethod"] == "image"
    assert llm.image_calls[0]["image_data_uri"] == image_uri
    profile_prompt = llm.prompts_containing(PROFILE)[0]
    assert 'medicine "Brufen 400"' in profile_prompt
    assert "uploaded image" in profile_prompt
    assert not llm.prompts_containing(INTENT)


def test_unrecognised_photo(context, image_uri):
    agent, _ = make_agent([(INTENT, "MEDICINE_INFORMATION")], image_reply="I cannot identify this object.")

    response = agent.process(AgentInput(text="", image_data_uri=image_uri), context)

    assert response.response == messages.NO_MEDICINE_IN_IMAGE["english"]
    assert response.confidence == 0.7


def test_malformed_photo_returns_error(context):
    agent, _ = make_agent([(INTENT, "MEDICINE_INFORMATION")])

    response = agent.process(AgentInput(text="", image_data_uri="not-a-data-uri"), context)

    assert response.confidence == 0.0
    assert response.response == messages.DRUG_INFO_ERROR["english"]
    assert "error" in response.metadata


def test_sanitize_drug_name():
    agent, _ = make_agent([])

    assert agent.sanitize_drug_name(None) is None
    assert agent.sanitize_drug_name("No specific drug mentioned") is None
    assert agent.sanitize_drug_name("unknown") is None
    assert agent.sanitize_drug_name("Panadol tablet") == "Panadol"
    assert agent.sanitize_drug_name("x") is None
    assert agent.sanitize_drug_name("word " * 20) is None


def test_llm_name_extraction_filters_refusals(context):
    agent, _ = make_agent([(NAME_EXTRACTION, "Sorry, I cannot help with that")])
    assert agent.sanitize_drug_name("what is this thing", context) is None

    agent, _ = make_agent([(NAME_EXTRACTION, '"The Aspirin."\nextra')])
    assert agent.sanitize_drug_name("tell me about aspirin", context) == "Aspirin"


def test_profile_summary():
    agent, _ = make_agent([])

    assert agent.profile_summary(UnknownMedicine("nope")) == {"isUnknown": True}
    summary = agent.profile_summary(MedicineProfile(medicine_name="Panadol"))
    assert summary["medicineName"] == "Panadol"
    assert summary["reliability"] == "Moderate"
