"""
Drug Information Agent - medicine identification and educational profiles.

Flow for a query:
1. Classify intent (medicine information, personal advice, unrelated)
2. Work out which medicine is meant (direct name, NER entity, LLM extraction,
   or vision identification for photos)
3. Ask the model for a short JSON profile and, when configured, enrich it
   with U.S. FDA label data
4. Render the profile as a card with localized labels
"""
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from medassist.agents import messages
from medassist.agents.base import AgentCapability, AgentContext, AgentInput, AgentResponse, BaseAgent
from medassist.core.exceptions import LLMError
from medassist.core.validators import parse_data_uri
from medassist.llm.client import LLMClient
from medassist.llm.huggingface import HuggingFaceClient, get_huggingface_client
from medassist.llm.parsing import extract_json_object, first_line
from medassist.llm.prompts import drug_prompts
from medassist.services.drug_info_service import DrugInfoLookup, ExternalDrugInformation

AGENT_NAME = "DrugInformationAgent"

MAX_LIST_ITEMS = 4
SHORT_QUERY_WORDS = 5
UNNAMED_ITEM = "the mentioned item"

_QUESTION_WORDS = (
    "what", "is", "are", "tell", "about", "explain", "describe", "how", "why",
    "when", "where", "show", "give", "can", "you",
)
_FILLER_WORDS = (
    "medicine", "drug", "medication", "tablet", "pill", "capsule", "syrup",
    "information", "details", "about", "of", "the", "a", "an",
)
_NO_MEDICINE_REPLIES = ("unknown", "unknown medicine", "none")
_REFUSAL_MARKERS = ("can't", "cannot", "sorry")
_UNKNOWN_INDICATORS = ("not specified", "not available", "medication type not specified")

_QUESTION_PATTERN = re.compile(r"\b(" + "|".join(_QUESTION_WORDS) + r")\b", re.IGNORECASE)
_FILLER_PATTERN = re.compile(r"\b(" + "|".join(_FILLER_WORDS) + r")\b", re.IGNORECASE)
_VISION_NAME_PATTERN = re.compile(r"(?:medicine|drug|pill)(?:\s+name)?:?\s*([^\n,.]+)", re.IGNORECASE)

_CARD_RULE = "─" * 49
_CARD_TOP = f"┌{_CARD_RULE}┐"
_CARD_MIDDLE = f"├{_CARD_RULE}┤"
_CARD_BOTTOM = f"└{_CARD_RULE}┘"


class DrugInfoRequest(BaseModel):
    text: Optional[str] = Field(default=None, description="Free-text question")
    image_data_uri: Optional[str] = Field(default=None, description="Photo of a pill or pack")
    drug_name: Optional[str] = Field(default=None, description="Medicine name, when already known")


class DrugNameRequest(BaseModel):
    drug_name: str = Field(..., description="Brand or generic medicine name")


class DrugInfoResult(BaseModel):
    medicine_name: str
    generic_name: Optional[str] = None
    brand_names: List[str] = Field(default_factory=list)
    mechanism: Optional[str] = None
    therapeutic_class: Optional[str] = None
    primary_uses: List[str] = Field(default_factory=list)
    formulations: List[str] = Field(default_factory=list)
    strength: Optional[str] = None
    administration_route: Optional[str] = None


@dataclass
class MedicineProfile:
    """Normalized profile of a recognised medicine."""
    medicine_name: str
    medicine_type: Optional[str] = None
    recognized_from: str = "text"
    description: Optional[str] = None
    usage: Optional[str] = None
    side_effects: Optional[List[str]] = None
    warnings: Optional[List[str]] = None
    reliability: str = "Moderate"
    source: str = drug_prompts.DEFAULT_PROFILE_SOURCE
    agents_involved: List[str] = field(default_factory=lambda: [AGENT_NAME, "ComplianceClassifier"])
    external: Optional[ExternalDrugInformation] = None


@dataclass
class UnknownMedicine:
    """Marker result: no usable profile, answer with the message instead."""
    message: str


ProfileResult = Union[MedicineProfile, UnknownMedicine]


def _to_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _to_str_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    cleaned = [str(entry if entry is not None else "").strip() for entry in value]
    cleaned = [entry for entry in cleaned if entry][:MAX_LIST_ITEMS]
    return cleaned or None


class DrugInformationAgent(BaseAgent):
    """
    Explains recognised medicines in plain language.

    Args:
        llm_client: Text/vision model client
        hf_client: Hugging Face client used for biomedical NER
        drug_info_lookup: Optional label lookup (OpenFDA) used to enrich profiles
    """

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        hf_client: Optional[HuggingFaceClient] = None,
        drug_info_lookup: Optional[DrugInfoLookup] = None
    ):
        super().__init__(
            AGENT_NAME,
            "Specialized agent for medicine identification, drug facts, mechanisms of action, "
            "and comprehensive drug information",
            llm_client=llm_client,
        )
        self.hf_client = hf_client or get_huggingface_client()
        self.drug_info_lookup = drug_info_lookup
        self.capabilities = [
            AgentCapability(
                name="identifyMedicine",
                description="Identify medicines from text description or image",
                input_model=DrugInfoRequest,
                output_model=DrugInfoResult,
            ),
            AgentCapability(
                name="getMedicineInfo",
                description="Get comprehensive information about a specific medicine",
                input_model=DrugNameRequest,
                output_model=DrugInfoResult,
            ),
        ]

    def can_handle(self, text: str, context: AgentContext) -> bool:
        return bool((text or "").strip())

    def process(self, agent_input: AgentInput, context: AgentContext) -> AgentResponse:
        self.logger.info(f"Processing drug information request (image={agent_input.has_image})")

        try:
            query_text = agent_input.text or ""

            intent = "medicine_info"
            if query_text.strip():
                intent = self.classify_query_intent(query_text, context)

            if intent == "medical_advice":
                return self.respond(
                    messages.localized(messages.DIRECT_ADVICE_NOTICE, context.language),
                    0.6,
                    {"queryType": "medical_advice_request"},
                )

            if intent == "other" and agent_input.is_text_only:
                return self.respond(
                    self.unknown_medicine_response(query_text or UNNAMED_ITEM, context.language),
                    0.2,
                    {"queryType": "non_medicine_request"},
                )

            if agent_input.has_image:
                result = self.identify_from_image(agent_input.image_data_uri, context)
                confidence = 0.7
                method = "image"
            else:
                result = self.extract_from_text(query_text, context)
                confidence = 0.8
                method = "text"

            # Profiles always carry a source, so 0.8 and 0.7 only apply to unknown-medicine replies
            if isinstance(result, MedicineProfile) and result.source:
                confidence = 0.9

            self.logger.info(f"Drug information result: {self.profile_summary(result)}")

            return self.respond(
                self.format_drug_response(result, context),
                confidence,
                {
                    "drugInfo": asdict(result),
                    "processingMethod": method,
                    "source": result.source if isinstance(result, MedicineProfile) else None,
                },
            )

        except Exception as e:
            self.logger.error(f"Failed to process drug information request: {e}", exc_info=True)
            return self.respond(
                messages.localized(messages.DRUG_INFO_ERROR, context.language),
                0.0,
                {"error": str(e)},
            )

    def classify_query_intent(self, query: str, context: AgentContext) -> str:
        """
        Returns:
            'medicine_info', 'medical_advice' or 'other'
        """
        trimmed = query.strip()
        if not trimmed:
            return "other"

        reply = self.call_llm(
            drug_prompts.INTENT_CLASSIFIER_SYSTEM_PROMPT,
            drug_prompts.get_intent_classification_prompt(trimmed),
            context,
        )
        normalized = re.sub(r"[_-]", "", reply.strip().upper())

        if "ADVICE" in normalized:
            return "medical_advice"
        if "INFORMATION" in normalized or "MEDICINE" in normalized:
            return "medicine_info"
        if normalized.startswith("OTHER"):
            return "other"
        # Uncertain replies are treated as medicine questions
        return "medicine_info"

    def sanitize_drug_name(self, raw_name: Optional[str], context: Optional[AgentContext] = None) -> Optional[str]:
        """
        Reduce a raw string to a bare medicine name.

        Question-like input is handed to the model for extraction when a
        context is available; other input has filler words stripped.

        Returns:
            The name, or None when the input names no medicine
        """
        if not raw_name:
            return None

        normalized = re.sub(r"\s+", " ", re.sub("[‘’]", "'", raw_name)).strip()
        if not normalized:
            return None

        lower = normalized.lower()
        if "no specific drug" in lower or "no medicine" in lower or lower in _NO_MEDICINE_REPLIES:
            return None

        if _QUESTION_PATTERN.search(normalized) and context is not None:
            return self._extract_name_with_llm(normalized, context)

        cleaned = _FILLER_PATTERN.sub(" ", normalized)
        simplified = re.sub(r"\s+", " ", re.sub(r"[,;:/-]+", " ", cleaned)).strip()

        if len(simplified) < 2 or len(simplified) > 50:
            return None
        return simplified

    def _extract_name_with_llm(self, query: str, context: AgentContext) -> Optional[str]:
        reply = self.call_llm(
            drug_prompts.NAME_EXTRACTOR_SYSTEM_PROMPT,
            drug_prompts.get_name_extraction_prompt(query),
            context,
        )
        if self.is_unavailable(reply):
            return None

        candidate = first_line(reply)
        candidate = re.sub(r"^[\"']|[\"']$", "", candidate)
        candidate = re.sub(r"\.$", "", candidate)
        candidate = re.sub(r"^(the|a|an)\s+", "", candidate, flags=re.IGNORECASE).strip()

        lower = candidate.lower()
        if (
            2 <= len(candidate) <= 50
            and not any(marker in lower for marker in _REFUSAL_MARKERS)
            and candidate.upper() != "NONE"
        ):
            self.logger.debug(f"LLM extracted medicine name: {candidate}")
            return candidate

        self.logger.debug(f"LLM name extraction returned nothing usable: {candidate!r}")
        return None

    def extract_from_text(self, text: str, context: AgentContext) -> ProfileResult:
        """Find the medicine a text query is about and build its profile."""
        try:
            trimmed = text.strip()

            if len(trimmed.split()) <= SHORT_QUERY_WORDS:
                direct = self.sanitize_drug_name(trimmed, context)
                if direct and len(direct) >= 3:
                    return self.get_medicine_profile(direct, context, origin="text")

            drug_entities = [
                entity for entity in self.hf_client.extract_medical_entities(text)
                if entity.label_matches("drug", "medication", "chemical")
            ]
            if drug_entities:
                drug_name = drug_entities[0].text
            else:
                drug_name = self.call_llm(
                    drug_prompts.EXTRACTION_SPECIALIST_SYSTEM_PROMPT,
                    drug_prompts.get_drug_mention_prompt(text),
                    context,
                )
                if self.is_unavailable(drug_name):
                    drug_name = ""

            name = self.sanitize_drug_name(drug_name, context)
            if not name:
                return UnknownMedicine(self.unknown_medicine_response(UNNAMED_ITEM, context.language))

            return self.get_medicine_profile(name, context, origin="text")

        except (ValueError, RuntimeError) as e:
            self.logger.warning(f"Entity-based extraction failed, falling back to LLM inference: {e}")
            reply = self.call_llm(
                drug_prompts.EXTRACTION_SPECIALIST_SYSTEM_PROMPT,
                drug_prompts.get_fallback_extraction_prompt(text),
                context,
            )
            name = None if self.is_unavailable(reply) else self.sanitize_drug_name(reply.strip(), context)
            if not name:
                return UnknownMedicine(self.unknown_medicine_response(UNNAMED_ITEM, context.language))
            return self.get_medicine_profile(name, context, origin="inference")

    def identify_from_image(self, image_data_uri: str, context: AgentContext) -> ProfileResult:
        """
        Identify a pill from a photo, then build its profile.

        Raises:
            ValueError: If the image is not a base64 data URI
        """
        parse_data_uri(image_data_uri)

        try:
            reply = self.llm_client.generate_with_image(
                image_data_uri,
                system_prompt=drug_prompts.PILL_EXPERT_SYSTEM_PROMPT,
                user_message=drug_prompts.get_pill_identification_prompt(),
            )
        except LLMError as e:
            self.logger.error(f"Vision identification failed: {e}")
            reply = ""

        match = _VISION_NAME_PATTERN.search(reply or "")
        if match:
            name = self.sanitize_drug_name(match.group(1).strip(), context)
            if name:
                return self.get_medicine_profile(name, context, origin="image")

        return UnknownMedicine(messages.localized(messages.NO_MEDICINE_IN_IMAGE, context.language))

    def get_medicine_profile(self, medicine_name: str, context: AgentContext, origin: str = "text") -> ProfileResult:
        """Ask the model for a JSON profile and enrich it from label data."""
        name = medicine_name.strip()
        if not name:
            return UnknownMedicine(self.unknown_medicine_response(UNNAMED_ITEM, context.language))

        reply = self.call_llm(
            drug_prompts.MEDICINE_PROFILE_SYSTEM_PROMPT,
            drug_prompts.get_medicine_profile_prompt(name, origin),
            context,
        )

        if not reply or self.is_unavailable(reply) or "API key" in reply:
            self.logger.error("Model unavailable while building medicine profile")
            return UnknownMedicine(messages.api_configuration_required(name, context.language))

        if drug_prompts.UNKNOWN_MEDICINE_MARKER in reply.strip().upper():
            return UnknownMedicine(self.unknown_medicine_response(name, context.language))

        profile = self.parse_medicine_profile(reply, name, origin)
        if profile is None:
            return UnknownMedicine(self.unknown_medicine_response(name, context.language))

        self._enrich_from_label(profile)
        return profile

    def parse_medicine_profile(self, reply: str, fallback_name: str, origin: str) -> Optional[MedicineProfile]:
        """
        Turn the model's JSON into a MedicineProfile.

        Returns:
            None when the JSON is missing or describes an unknown medicine
        """
        try:
            parsed = extract_json_object(reply)
        except ValueError as e:
            self.logger.warning(f"Could not parse medicine profile JSON: {e}")
            return None

        medicine_type = _to_str(parsed.get("type"))
        description = _to_str(parsed.get("description"))

        type_lower = (medicine_type or "").lower()
        description_lower = (description or "").lower()
        if type_lower == "unknown" or "not specified" in type_lower or any(
            indicator in description_lower for indicator in _UNKNOWN_INDICATORS
        ):
            self.logger.info("Profile carries unknown-medicine indicators")
            return None

        return MedicineProfile(
            medicine_name=_to_str(parsed.get("medicineName")) or fallback_name,
            medicine_type=medicine_type,
            recognized_from=origin,
            description=description,
            usage=_to_str(parsed.get("usage")),
            side_effects=_to_str_list(parsed.get("sideEffects")),
            warnings=_to_str_list(parsed.get("warnings")),
            reliability=_to_str(parsed.get("reliability")) or "Moderate",
            source=_to_str(parsed.get("source")) or drug_prompts.DEFAULT_PROFILE_SOURCE,
            agents_involved=_to_str_list(parsed.get("agents")) or [AGENT_NAME, "ComplianceClassifier"],
        )

    def _enrich_from_label(self, profile: MedicineProfile) -> None:
        if self.drug_info_lookup is None:
            return

        label = self.drug_info_lookup(profile.medicine_name)
        if label is None:
            return

        self.logger.info(f"Enriched '{profile.medicine_name}' with {label.source}")
        profile.external = label
        profile.source = label.source
        profile.reliability = "High"
        if not profile.medicine_type and label.therapeutic_class:
            profile.medicine_type = label.therapeutic_class
        if not profile.usage and label.indications:
            profile.usage = label.indications[0]
        if not profile.warnings and label.warnings:
            profile.warnings = label.warnings[:MAX_LIST_ITEMS]

    def format_drug_response(self, result: ProfileResult, context: AgentContext) -> str:
        """Render a profile as a localized card, or pass an unknown message through."""
        if isinstance(result, UnknownMedicine):
            return result.message

        labels = messages.CARD_LABELS.get(context.language, messages.CARD_LABELS[messages.ENGLISH])

        def render_list(items: Optional[List[str]]) -> str:
            entries = [item.strip() for item in items or [] if item.strip()]
            if not entries:
                return f"   {labels['none']}"
            return "\n".join(f"   • {item}" for item in entries)

        lines = [
            "",
            _CARD_TOP,
            f"│  {labels['medicine_name']}",
            f"│  {result.medicine_name or labels['unnamed']}",
            _CARD_MIDDLE,
            f"│  {labels['type']}: {result.medicine_type or labels['no_type']}",
            _CARD_BOTTOM,
            "",
            labels["description"],
            f"   {result.description or labels['no_description']}",
            "",
            labels["usage"],
            f"   {result.usage or labels['no_usage']}",
            "",
            labels["side_effects"],
            render_list(result.side_effects),
            "",
            labels["warnings"],
            render_list(result.warnings),
            "",
            _CARD_RULE,
            labels["disclaimer"],
            _CARD_RULE,
            "",
        ]
        return "\n".join(lines)

    def profile_summary(self, result: ProfileResult) -> Dict[str, Any]:
        """Compact dict of a profile for logs and metadata consumers."""
        if isinstance(result, UnknownMedicine):
            return {"isUnknown": True}
        return {
            "medicineName": result.medicine_name,
            "source": result.source,
            "reliability": result.reliability,
        }
