"""
Dosage Agent - educational dosing information.

Personal questions ("how much should I take?") are refused with a pointer
to a clinician; general questions get standard dosing ranges framed as
"typically prescribed as", never as a recommendation.
"""
import json
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from medassist.agents import messages
from medassist.agents.base import (
    AgentCapability,
    AgentContext,
    AgentInput,
    AgentResponse,
    BaseAgent,
    guess_medication_name,
)
from medassist.llm.client import LLMClient
from medassist.llm.prompts import dosage_prompts
from medassist.llm.prompts.drug_prompts import UNKNOWN_MEDICINE_MARKER

DOSAGE_TERMS = (
    "dose", "dosage", "mg", "ml", "tablet", "capsule", "how much", "how many",
    "strength", "frequency", "administration", "take", "timing",
)

NOT_SPECIFIED = "Not specified"

OrganFunction = Literal["normal", "mild_impairment", "moderate_impairment", "severe_impairment"]


class DosageRequest(BaseModel):
    medication: str = Field(..., description="Medicine to describe")
    patient_weight: Optional[float] = None
    patient_age: Optional[int] = None
    indication: Optional[str] = None
    renal_function: Optional[OrganFunction] = None
    hepatic_function: Optional[OrganFunction] = None
    is_pregnant: Optional[bool] = None
    is_breastfeeding: Optional[bool] = None
    text: Optional[str] = None


class DosageResult(BaseModel):
    medication: str
    standard_dose: str = NOT_SPECIFIED
    frequency: str = NOT_SPECIFIED
    timing: str = NOT_SPECIFIED
    duration: str = NOT_SPECIFIED
    special_considerations: str = NOT_SPECIFIED


def extract_value(text: str, key: str) -> str:
    """Text after the colon on the first line mentioning key."""
    for line in text.split("\n"):
        if key.lower() in line.lower() and ":" in line:
            return line[line.index(":") + 1:].strip()
    return NOT_SPECIFIED


class DosageAgent(BaseAgent):
    """Explains standard dosing patterns without personal recommendations."""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        super().__init__(
            "DosageAgent",
            "Specialized agent for medication dosage calculations, administration schedules, "
            "and timing recommendations",
            llm_client=llm_client,
        )
        self.capabilities = [
            AgentCapability(
                name="explainDosage",
                description="Explain typical dosing ranges and schedules for a medicine",
                input_model=DosageRequest,
                output_model=DosageResult,
            ),
        ]

    def can_handle(self, text: str, context: AgentContext) -> bool:
        lower = (text or "").lower()
        return any(term in lower for term in DOSAGE_TERMS)

    def process(self, agent_input: AgentInput, context: AgentContext) -> AgentResponse:
        self.logger.info("Processing dosage request")

        try:
            if agent_input.is_text_only and self.analyze_query_intent(agent_input.text, context) == "PERSONAL":
                self.logger.info("Personal dosage request detected, returning refusal")
                return self.respond(
                    messages.localized(messages.PERSONAL_DOSAGE_REFUSAL, context.language),
                    0.95,
                    {"reason": "Personal advice request blocked"},
                )

            if agent_input.is_text_only:
                dosage_info = self.extract_dosage_info_from_text(agent_input.text, context)
            else:
                medication = guess_medication_name(agent_input.text) or agent_input.text.strip() or "Unknown medication"
                dosage_info = self.calculate_dosage(medication, context)

            if dosage_info.get("isUnknown"):
                return self.respond(dosage_info["unknownResponse"], 0.9, {"reason": "Unknown medicine"})

            formatted = self.format_dosage_response(dosage_info, context)
            return self.respond(formatted, 0.8, {"dosageInfo": dosage_info})

        except Exception as e:
            self.logger.error(f"Failed to process dosage request: {e}", exc_info=True)
            return self.respond(
                messages.localized(messages.DOSAGE_ERROR, context.language),
                0.0,
                {"error": str(e)},
            )

    def analyze_query_intent(self, query: str, context: AgentContext) -> str:
        """
        Classify a dosage question.

        Returns:
            'PERSONAL' or 'EDUCATIONAL'. An unavailable model counts as
            PERSONAL so nothing slips through unchecked.
        """
        reply = self.call_llm(
            dosage_prompts.INTENT_SYSTEM_PROMPT,
            dosage_prompts.get_dosage_intent_prompt(query),
            context,
        )
        if self.is_unavailable(reply):
            return "PERSONAL"
        return "PERSONAL" if "PERSONAL" in reply.strip().upper() else "EDUCATIONAL"

    def extract_dosage_info_from_text(self, text: str, context: AgentContext) -> Dict[str, Any]:
        medication = guess_medication_name(text)
        if not medication:
            return {"isUnknown": True, "unknownResponse": self.unknown_medicine_response(text, context.language)}

        reply = self.require_available(self.call_llm(
            dosage_prompts.EDUCATIONAL_SYSTEM_PROMPT,
            dosage_prompts.get_educational_dosage_prompt(text, medication),
            context,
        ))

        lower = reply.lower()
        if UNKNOWN_MEDICINE_MARKER in reply or "not recognized" in lower or "unknown medicine" in lower:
            return {"isUnknown": True, "unknownResponse": self.unknown_medicine_response(medication, context.language)}

        return self.parse_dosage_info(reply, medication)

    def calculate_dosage(self, medication: str, context: AgentContext) -> Dict[str, Any]:
        """General dosing overview for a named medicine."""
        reply = self.require_available(self.call_llm(
            dosage_prompts.OVERVIEW_SYSTEM_PROMPT,
            dosage_prompts.get_dosage_overview_prompt(medication),
            context,
        ))
        return {"medication": medication, "rawResponse": reply}

    @staticmethod
    def parse_dosage_info(reply: str, medication: str) -> Dict[str, Any]:
        return {
            "medication": medication,
            "standardDose": extract_value(reply, "dose"),
            "frequency": extract_value(reply, "frequency"),
            "timing": extract_value(reply, "timing"),
            "duration": extract_value(reply, "duration"),
            "specialConsiderations": extract_value(reply, "considerations"),
            "rawResponse": reply,
        }

    def format_dosage_response(self, dosage_info: Dict[str, Any], context: AgentContext) -> str:
        return self.require_available(self.call_llm(
            dosage_prompts.get_dosage_format_system_prompt(context.language),
            dosage_prompts.get_dosage_format_prompt(
                json.dumps(dosage_info, indent=2, ensure_ascii=False),
                context.language,
            ),
            context,
        ))
