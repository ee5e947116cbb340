"""
Interaction Agent - drug-drug, drug-condition and food interactions.

Medications are collected from two sources (biomedical NER and an LLM
listing), the model writes a sectioned safety analysis, and the sections
are mined for structured findings before the model presents them.
"""
import json
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from medassist.agents import messages
from medassist.agents.base import AgentCapability, AgentContext, AgentInput, AgentResponse, BaseAgent
from medassist.llm.client import LLMClient
from medassist.llm.huggingface import HuggingFaceClient, get_huggingface_client
from medassist.llm.prompts import interaction_prompts

INTERACTION_KEYWORDS = (
    "interaction", "interact", "combine", "together", "with",
    "safe", "contraindication", "avoid", "warning", "dangerous",
    "taking multiple", "drug interaction", "medication safety",
    "can i take", "should i avoid", "blood pressure medication",
)

FOOD_ITEMS = ("alcohol", "food", "grapefruit", "dairy", "caffeine", "meal")

_DRUG_NAME_PATTERN = re.compile(r"([A-Z][a-z]+(?:ine|ol|ide|ate|um|ic acid|mycin|cillin))")
_AGE_PATTERN = re.compile(r"Age:\s*(\d+)")
_SECTION_NUMBER = re.compile(r"^\d+\.")
_EMPTY_LIST_ITEMS = {"none", "n/a", "not mentioned"}

Severity = Literal["mild", "moderate", "severe", "contraindicated"]


class InteractionRequest(BaseModel):
    medications: List[str] = Field(default_factory=list)
    text: Optional[str] = None
    patient_conditions: List[str] = Field(default_factory=list)
    age: Optional[int] = None
    is_pregnant: Optional[bool] = None


class DrugPairInteraction(BaseModel):
    drug1: str
    drug2: str
    severity: Severity
    description: str
    clinical_effect: str = ""
    management: str = ""


class Contraindication(BaseModel):
    medication: str
    condition: str
    reason: str
    severity: Literal["warning", "contraindicated"]


class FoodInteraction(BaseModel):
    medication: str
    food: str
    effect: str
    recommendation: str = ""


class InteractionReport(BaseModel):
    interactions: List[DrugPairInteraction] = Field(default_factory=list)
    contraindications: List[Contraindication] = Field(default_factory=list)
    food_interactions: List[FoodInteraction] = Field(default_factory=list)
    overall_risk_level: Literal["low", "moderate", "high", "critical"] = "low"


def split_into_sections(text: str) -> Dict[str, str]:
    """
    Split a reply on '**Heading**' and '1. Heading' lines.

    Keys are lowercased headings without markup, numbering or trailing colon.
    """
    sections: Dict[str, str] = {}
    current: Optional[str] = None
    content: List[str] = []

    for line in text.split("\n"):
        if line.startswith("**") or _SECTION_NUMBER.match(line):
            if current:
                sections[current] = "\n".join(content).strip()
            heading = _SECTION_NUMBER.sub("", line.replace("**", "")).strip()
            current = heading.rstrip(":").strip().lower()
            content = []
        else:
            content.append(line)

    if current:
        sections[current] = "\n".join(content).strip()
    return sections


def extract_drug_names(text: str) -> List[str]:
    return _DRUG_NAME_PATTERN.findall(text)


def extract_severity(text: str) -> str:
    lower = text.lower()
    if "contraindicated" in lower or "dangerous" in lower:
        return "contraindicated"
    if "severe" in lower or "major" in lower:
        return "severe"
    if "moderate" in lower:
        return "moderate"
    return "mild"


def extract_overall_risk(text: str) -> str:
    lower = text.lower()
    if "critical" in lower or "emergency" in lower:
        return "critical"
    if "high" in lower:
        return "high"
    if "moderate" in lower:
        return "moderate"
    return "low"


def extract_food_items(text: str) -> List[str]:
    lower = text.lower()
    return [food for food in FOOD_ITEMS if food in lower]


def _non_blank_lines(text: str) -> List[str]:
    return [line for line in text.split("\n") if line.strip()]


def extract_drug_interactions(text: str) -> List[Dict[str, Any]]:
    """Lines like '- Warfarin with Aspirin: ...' naming at least two drugs."""
    interactions = []
    for line in _non_blank_lines(text):
        lower = line.lower()
        if "-" in line and ("with" in lower or "and" in lower):
            drugs = extract_drug_names(line)
            if len(drugs) >= 2:
                interactions.append({
                    "drugs": drugs,
                    "severity": extract_severity(line),
                    "description": line.strip(),
                    "clinicalEffect": "",
                    "management": "",
                })
    return interactions


def extract_contraindications(text: str) -> List[Dict[str, Any]]:
    found = []
    for line in _non_blank_lines(text):
        lower = line.lower()
        if "contraindicated" in lower or "avoid" in lower:
            drugs = extract_drug_names(line)
            found.append({
                "medication": drugs[0] if drugs else "Unknown",
                "condition": "Various conditions",
                "reason": line.strip(),
                "severity": "contraindicated" if "contraindicated" in lower else "warning",
            })
    return found


def extract_food_interactions(text: str) -> List[Dict[str, Any]]:
    found = []
    for line in _non_blank_lines(text):
        lower = line.lower()
        if "food" in lower or "alcohol" in lower or "dietary" in lower:
            foods = extract_food_items(line)
            found.append({
                "medication": "Multiple medications",
                "food": foods[0] if foods else "Various foods",
                "effect": line.strip(),
                "recommendation": "",
            })
    return found


def extract_list_from_response(response: str, marker: str) -> List[str]:
    """Comma-separated items after marker on its first occurrence."""
    for line in response.split("\n"):
        if marker in line:
            list_text = line[line.index(marker) + len(marker):].strip().strip("[]")
            items = [item.strip() for item in list_text.split(",")]
            return [item for item in items if item and item.lower() not in _EMPTY_LIST_ITEMS]
    return []


def extract_patient_info(response: str) -> Dict[str, Any]:
    info: Dict[str, Any] = {}
    match = _AGE_PATTERN.search(response)
    if match:
        info["age"] = int(match.group(1))
    if "pregnant: yes" in response.lower():
        info["isPregnant"] = True
    return info


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    unique = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


class InteractionAgent(BaseAgent):
    """Checks medication combinations for safety problems."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        hf_client: Optional[HuggingFaceClient] = None
    ):
        super().__init__(
            "InteractionAgent",
            "Specialized agent for analyzing drug interactions, contraindications, and medication safety warnings",
            llm_client=llm_client,
        )
        self.hf_client = hf_client or get_huggingface_client()
        self.capabilities = [
            AgentCapability(
                name="checkDrugInteractions",
                description="Analyze interactions between multiple medications",
                input_model=InteractionRequest,
                output_model=InteractionReport,
            ),
            AgentCapability(
                name="checkContraindications",
                description="Check if medications are safe for patient conditions",
                input_model=InteractionRequest,
                output_model=InteractionReport,
            ),
        ]

    def can_handle(self, text: str, context: AgentContext) -> bool:
        lower = (text or "").lower()
        return any(keyword in lower for keyword in INTERACTION_KEYWORDS)

    def process(self, agent_input: AgentInput, context: AgentContext) -> AgentResponse:
        self.logger.info("Processing drug interaction request")

        try:
            extracted = self.extract_medication_info(agent_input.text, context)
            medications = extracted["medications"]
            if not medications:
                raise ValueError("No medications found to analyze")

            analysis = self.analyze_interactions(
                medications,
                extracted["conditions"],
                extracted["patientInfo"],
                context,
            )
            formatted = self.format_interaction_response(analysis, medications, context)

            return self.respond(formatted, 0.85, {
                "medications": medications,
                "patientConditions": extracted["conditions"],
                "interactionAnalysis": analysis,
            })

        except Exception as e:
            self.logger.error(f"Failed to process interaction request: {e}", exc_info=True)
            return self.respond(
                messages.localized(messages.INTERACTION_ERROR, context.language),
                0.0,
                {"error": str(e)},
            )

    def extract_medication_info(self, text: str, context: AgentContext) -> Dict[str, Any]:
        entities = self.hf_client.extract_medical_entities(text)
        medications = [e.text for e in entities if e.label_matches("drug", "medication")]
        conditions = [e.text for e in entities if e.label_matches("disease", "condition")]

        reply = self.call_llm(
            interaction_prompts.EXTRACTION_SYSTEM_PROMPT,
            interaction_prompts.get_medication_extraction_prompt(text),
            context,
        )
        if self.is_unavailable(reply):
            reply = ""

        return {
            "medications": _dedupe(medications + extract_list_from_response(reply, "Medications:")),
            "conditions": _dedupe(conditions + extract_list_from_response(reply, "Conditions:")),
            "patientInfo": extract_patient_info(reply),
        }

    def analyze_interactions(
        self,
        medications: List[str],
        conditions: List[str],
        patient_info: Dict[str, Any],
        context: AgentContext
    ) -> Dict[str, Any]:
        reply = self.require_available(self.call_llm(
            interaction_prompts.ANALYSIS_SYSTEM_PROMPT,
            interaction_prompts.get_interaction_analysis_prompt(
                medications, conditions, json.dumps(patient_info)
            ),
            context,
        ))
        return self.parse_interaction_analysis(reply)

    @staticmethod
    def parse_interaction_analysis(reply: str) -> Dict[str, Any]:
        sections = split_into_sections(reply)
        return {
            "drugInteractions": extract_drug_interactions(sections.get("drug-drug interactions", "")),
            "contraindications": extract_contraindications(sections.get("contraindications", "")),
            "foodInteractions": extract_food_interactions(sections.get("food/lifestyle interactions", "")),
            "specialConsiderations": sections.get("special populations", ""),
            "overallRisk": extract_overall_risk(sections.get("overall risk assessment", "")),
            "rawAnalysis": reply,
        }

    def format_interaction_response(
        self,
        analysis: Dict[str, Any],
        medications: List[str],
        context: AgentContext
    ) -> str:
        return self.require_available(self.call_llm(
            interaction_prompts.get_interaction_format_system_prompt(context.language),
            interaction_prompts.get_interaction_format_prompt(
                json.dumps(analysis, indent=2, ensure_ascii=False),
                medications,
                context.language,
            ),
            context,
        ))
