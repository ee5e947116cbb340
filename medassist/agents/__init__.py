"""
Agents module - Specialist medical agents and their orchestrator.

- base.py             : Agent contract (input, context, response, capabilities)
- messages.py         : Localized canned text (English / Urdu)
- drug_information.py : Medicine identification and profiles
- dosage.py           : Educational dosing information
- interaction.py      : Drug, condition and food interactions
- side_effects.py     : Adverse effects and symptom triage
- documentation.py    : OCR of handwritten medical documents
- orchestrator.py     : Query analysis, routing and synthesis
"""
from typing import Optional

from medassist.agents.base import (
    AgentCapability,
    AgentContext,
    AgentInput,
    AgentResponse,
    BaseAgent,
    Language,
)
from medassist.agents.documentation import MedicalDocumentationAgent
from medassist.agents.dosage import DosageAgent
from medassist.agents.drug_information import DrugInformationAgent
from medassist.agents.interaction import InteractionAgent
from medassist.agents.orchestrator import MedicalAgentOrchestrator, OrchestratorResponse, QueryAnalysis
from medassist.agents.side_effects import SideEffectsAgent
from medassist.core.logging_config import get_logger
from medassist.llm.client import LLMClient
from medassist.llm.huggingface import HuggingFaceClient
from medassist.services.drug_info_service import DrugInfoLookup, get_drug_info_lookup
from medassist.services.ocr_service import MedicalOCRService

logger = get_logger(__name__)

_orchestrator: Optional[MedicalAgentOrchestrator] = None


def create_medical_orchestrator(
    llm_client: Optional[LLMClient] = None,
    hf_client: Optional[HuggingFaceClient] = None,
    ocr_service: Optional[MedicalOCRService] = None,
    drug_info_lookup: Optional[DrugInfoLookup] = None
) -> MedicalAgentOrchestrator:
    """
    Build an orchestrator with all five specialist agents registered.

    Args:
        llm_client: Shared model client (global singleton if omitted)
        hf_client: Hugging Face client for NER
        ocr_service: OCR service for the documentation agent
        drug_info_lookup: Label lookup; defaults to OpenFDA when enabled
    """
    lookup = drug_info_lookup if drug_info_lookup is not None else get_drug_info_lookup()

    orchestrator = MedicalAgentOrchestrator(llm_client=llm_client)
    shared_llm = orchestrator.llm_client

    orchestrator.register_agent(DrugInformationAgent(shared_llm, hf_client=hf_client, drug_info_lookup=lookup))
    orchestrator.register_agent(InteractionAgent(shared_llm, hf_client=hf_client))
    orchestrator.register_agent(DosageAgent(shared_llm))
    orchestrator.register_agent(SideEffectsAgent(shared_llm))
    orchestrator.register_agent(MedicalDocumentationAgent(shared_llm, ocr_service=ocr_service))

    logger.info(f"Orchestrator ready with agents: {orchestrator.registered_agents()}")
    return orchestrator


def get_orchestrator() -> MedicalAgentOrchestrator:
    """Get or create the global orchestrator."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = create_medical_orchestrator()
    return _orchestrator


def forget_conversation(conversation_id: str) -> None:
    """Drop agent memory for a conversation, if the orchestrator has been built."""
    if _orchestrator is not None:
        _orchestrator.forget_conversation(conversation_id)


def forget_all_conversations() -> None:
    if _orchestrator is not None:
        _orchestrator.clear_memory()


def reset_orchestrator() -> None:
    """Drop the global orchestrator (used by tests)."""
    global _orchestrator
    if _orchestrator is not None:
        _orchestrator.shutdown()
    _orchestrator = None


__all__ = [
    "AgentCapability",
    "AgentContext",
    "AgentInput",
    "AgentResponse",
    "BaseAgent",
    "Language",
    "DrugInformationAgent",
    "DosageAgent",
    "InteractionAgent",
    "SideEffectsAgent",
    "MedicalDocumentationAgent",
    "MedicalAgentOrchestrator",
    "OrchestratorResponse",
    "QueryAnalysis",
    "create_medical_orchestrator",
    "get_orchestrator",
    "reset_orchestrator",
    "forget_conversation",
    "forget_all_conversations",
]
