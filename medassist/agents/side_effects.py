"""
Side Effects Agent - adverse effect profiles and symptom triage.

Text questions are checked for a real medicine first; symptom reports are
scored for urgency from the model's own wording. Image input (a pack or
label the OCR step could not read) gets a full frequency-banded profile.
"""
import json
import re
from typing import Any, Dict, List, Optional

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput, AgentResponse, BaseAgent, guess_medication_name
from medassist.llm.client import LLMClient
from medassist.llm.prompts import side_effects_prompts

SIDE_EFFECT_KEYWORDS = (
    "side effect", "adverse effect", "reaction", "allergy", "allergic",
    "symptoms after taking", "caused by", "experience", "feeling",
    "nausea", "dizziness", "headache", "rash", "itching", "swelling",
    "what to expect", "common effects", "rare effects", "serious effects",
)

SYMPTOM_KEYWORDS = (
    "nausea", "vomiting", "dizziness", "headache", "fatigue", "drowsiness",
    "rash", "itching", "swelling", "pain", "stomach", "diarrhea", "constipation",
    "blurred vision", "dry mouth", "difficulty sleeping", "anxiety", "depression",
)

_UNKNOWN_MARKERS = ("not a real pharmaceutical", "not recognized")
_FREQUENCY_PATTERN = re.compile(r"(\d+%|\d+-\d+%|common|rare|very rare|frequent)", re.IGNORECASE)
_SECTION_NUMBER = re.compile(r"^\d+\.")


def determine_query_type(text: str) -> str:
    lower = text.lower()
    if "experiencing" in lower or "feeling" in lower or "having" in lower:
        return "symptom_report"
    if "how to" in lower or "what should i do" in lower or "manage" in lower:
        return "management_advice"
    return "side_effects_inquiry"


def extract_symptoms(text: str) -> List[str]:
    lower = text.lower()
    return [symptom for symptom in SYMPTOM_KEYWORDS if symptom in lower]


def assess_urgency(response: str) -> str:
    lower = response.lower()
    if "emergency" in lower or "immediate" in lower or "urgent" in lower:
        return "emergency"
    if "serious" in lower or "concerning" in lower:
        return "high"
    if "moderate" in lower or "monitor" in lower:
        return "moderate"
    return "low"


def extract_recommendations(response: str) -> List[str]:
    keywords = ("recommend", "should", "contact", "seek")
    return [line.strip() for line in response.split("\n") if any(k in line for k in keywords)]


def split_response_into_sections(response: str) -> Dict[str, str]:
    """Like the interaction splitter, but any line with a colon also opens a section."""
    sections: Dict[str, str] = {}
    current: Optional[str] = None
    content: List[str] = []

    for line in response.split("\n"):
        if line.startswith("**") or _SECTION_NUMBER.match(line) or ":" in line:
            if current:
                sections[current] = "\n".join(content).strip()
            heading = _SECTION_NUMBER.sub("", line.replace("**", "")).replace(":", "", 1)
            current = heading.strip().lower()
            content = []
        else:
            content.append(line)

    if current:
        sections[current] = "\n".join(content).strip()
    return sections


def assess_severity(text: str) -> str:
    lower = text.lower()
    if "severe" in lower or "serious" in lower or "emergency" in lower:
        return "severe"
    if "moderate" in lower or "significant" in lower:
        return "moderate"
    return "mild"


def parse_side_effects_list(text: str) -> List[Dict[str, Any]]:
    """Bulleted lines ('-' or '•') as effect/frequency/severity dicts."""
    effects = []
    for line in text.split("\n"):
        if not line.strip() or ("-" not in line and "•" not in line):
            continue
        effect = re.sub(r"[-•]", "", line, count=1).strip()
        frequency = _FREQUENCY_PATTERN.search(effect)
        effects.append({
            "effect": effect,
            "frequency": frequency.group(0) if frequency else None,
            "severity": assess_severity(effect),
        })
    return effects


def _section(sections: Dict[str, str], *prefixes: str) -> str:
    """First section whose heading starts with one of the prefixes."""
    for prefix in prefixes:
        for heading, body in sections.items():
            if heading.startswith(prefix):
                return body
    return ""


class SideEffectsAgent(BaseAgent):
    """Describes adverse effects and when to seek help."""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        super().__init__(
            "SideEffectsAgent",
            "Specialized agent for analyzing medication side effects, risk assessment, and safety monitoring",
            llm_client=llm_client,
        )

    def can_handle(self, text: str, context: AgentContext) -> bool:
        lower = (text or "").lower()
        return any(keyword in lower for keyword in SIDE_EFFECT_KEYWORDS)

    def process(self, agent_input: AgentInput, context: AgentContext) -> AgentResponse:
        self.logger.info("Processing side effects request")

        try:
            if agent_input.is_text_only:
                info = self.analyze_side_effects_from_text(agent_input.text, context)
            else:
                medication = guess_medication_name(agent_input.text) or agent_input.text.strip()
                info = self.get_side_effects_profile(medication, context)

            if info.get("isUnknown"):
                return self.respond(info["unknownResponse"], 0.9, {"reason": "Unknown medicine"})

            formatted = self.format_side_effects_response(info, context)
            return self.respond(formatted, 0.85, {"sideEffectsInfo": info})

        except Exception as e:
            self.logger.error(f"Failed to process side effects request: {e}", exc_info=True)
            return self.respond(
                messages.localized(messages.SIDE_EFFECTS_ERROR, context.language),
                0.0,
                {"error": str(e)},
            )

    def analyze_side_effects_from_text(self, text: str, context: AgentContext) -> Dict[str, Any]:
        check = self.require_available(self.call_llm(
            side_effects_prompts.MEDICATION_CHECK_SYSTEM_PROMPT,
            side_effects_prompts.get_medication_check_prompt(text),
            context,
        ))

        if "UNKNOWN_MEDICINE" in check or any(marker in check.lower() for marker in _UNKNOWN_MARKERS):
            return {"isUnknown": True, "unknownResponse": self.unknown_medicine_response(text, context.language)}

        reply = self.require_available(self.call_llm(
            side_effects_prompts.ANALYSIS_SYSTEM_PROMPT,
            side_effects_prompts.get_side_effects_analysis_prompt(text),
            context,
        ))
        return self.parse_side_effects_analysis(reply, text)

    def get_side_effects_profile(self, medication: str, context: AgentContext) -> Dict[str, Any]:
        reply = self.require_available(self.call_llm(
            side_effects_prompts.PROFILE_SYSTEM_PROMPT,
            side_effects_prompts.get_side_effects_profile_prompt(medication),
            context,
        ))
        return self.parse_side_effects_profile(reply, medication)

    @staticmethod
    def parse_side_effects_analysis(reply: str, original_text: str) -> Dict[str, Any]:
        return {
            "queryType": determine_query_type(original_text),
            "medication": guess_medication_name(original_text) or "Unknown medication",
            "symptoms": extract_symptoms(original_text),
            "urgency": assess_urgency(reply),
            "recommendations": extract_recommendations(reply),
            "rawAnalysis": reply,
        }

    @staticmethod
    def parse_side_effects_profile(reply: str, medication: str) -> Dict[str, Any]:
        sections = split_response_into_sections(reply)
        return {
            "medication": medication,
            "commonSideEffects": parse_side_effects_list(_section(sections, "common")),
            "uncommonSideEffects": parse_side_effects_list(_section(sections, "uncommon", "less common")),
            "seriousSideEffects": parse_side_effects_list(_section(sections, "serious", "rare")),
            "specialPopulations": _section(sections, "special populations"),
            "monitoring": _section(sections, "monitoring", "drug-specific monitoring"),
            "whenToContact": _section(sections, "when to contact", "emergency"),
            "rawProfile": reply,
        }

    def format_side_effects_response(self, info: Dict[str, Any], context: AgentContext) -> str:
        return self.require_available(self.call_llm(
            side_effects_prompts.get_side_effects_format_system_prompt(context.language),
            side_effects_prompts.get_side_effects_format_prompt(
                json.dumps(info, indent=2, ensure_ascii=False),
                context.language,
            ),
            context,
        ))
