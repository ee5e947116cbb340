"""
Drug Information Service - U.S. FDA drug label lookup via OpenFDA.

Used to ground the drug information agent's profile in label data when a
medicine name matches a published label closely enough. Lookups are best
effort: any HTTP, JSON or schema problem yields None and the caller keeps
the model-only profile.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests
from pydantic import BaseModel, ValidationError as PydanticValidationError

from medassist.core.config import Settings, get_settings
from medassist.core.logging_config import get_logger

logger = get_logger(__name__)

OPENFDA_SOURCE = "U.S. FDA Drug Label (OpenFDA)"
MAX_SEARCH_TERMS = 6
RESULT_LIMIT = 5
MAX_PARAGRAPHS = 5
MIN_MATCH_SCORE = 5
HOMEOPATHIC_SIGNALS = ("homeopathic", "homeopathy", "non-standardized")

_STRENGTH_PATTERN = re.compile(r"\b\d+(?:\.\d+)?\s*(?:mg|mcg|g|ml|iu|units)?\b", re.IGNORECASE)


class OpenFdaFields(BaseModel):
    brand_name: Optional[List[str]] = None
    generic_name: Optional[List[str]] = None
    substance_name: Optional[List[str]] = None
    pharm_class_epc: Optional[List[str]] = None
    pharm_class_cs: Optional[List[str]] = None


class OpenFdaLabel(BaseModel):
    """One drug label record (only the fields we read)."""
    id: Optional[str] = None
    set_id: Optional[str] = None
    openfda: Optional[OpenFdaFields] = None
    indications_and_usage: Optional[List[str]] = None
    dosage_and_administration: Optional[List[str]] = None
    dosage_forms_and_strengths: Optional[List[str]] = None
    warnings: Optional[List[str]] = None
    boxed_warning: Optional[List[str]] = None
    mechanism_of_action: Optional[List[str]] = None


class OpenFdaResponse(BaseModel):
    results: Optional[List[OpenFdaLabel]] = None


@dataclass
class ExternalDrugInformation:
    """Label facts for one medicine."""
    brand_names: List[str] = field(default_factory=list)
    generic_name: Optional[str] = None
    mechanism: Optional[str] = None
    therapeutic_class: Optional[str] = None
    indications: Optional[List[str]] = None
    dosage_and_administration: Optional[List[str]] = None
    dosage_forms: Optional[List[str]] = None
    warnings: Optional[List[str]] = None
    source: str = OPENFDA_SOURCE
    openfda_id: Optional[str] = None


DrugInfoLookup = Callable[[str], Optional[ExternalDrugInformation]]


def normalize_term(term: str) -> str:
    """Lowercase, drop punctuation and strengths like '500 mg', collapse spaces."""
    normalized = re.sub(r"[^a-z0-9\s-]", " ", term.lower())
    normalized = _STRENGTH_PATTERN.sub(" ", normalized)
    return re.sub(r"\s+", " ", normalized).strip()


def tokenize(term: str) -> List[str]:
    return [token for token in normalize_term(term).split() if len(token) > 2]


def build_search_terms(term: str) -> List[str]:
    """The whole normalized name followed by its significant tokens, deduplicated."""
    terms: List[str] = []
    base = normalize_term(term)
    if base:
        terms.append(base)
    for token in tokenize(term):
        if token not in terms:
            terms.append(token)
    return terms


def _candidate_names(record: OpenFdaLabel) -> List[str]:
    fields = record.openfda or OpenFdaFields()
    names: List[str] = []
    for values in (
        fields.brand_name,
        fields.generic_name,
        fields.substance_name,
        record.indications_and_usage,
        record.mechanism_of_action,
    ):
        names.extend(values or [])
    return names


def compute_match_score(record: OpenFdaLabel, search_terms: List[str]) -> int:
    """
    Score how well a label matches the searched name.

    Exact name +15, substring +8, all tokens (multi-token terms) +6,
    some token +3; labels without names score -5 and homeopathic
    labels lose 10.
    """
    names = [name for name in (normalize_term(n) for n in _candidate_names(record)) if name]
    if not names:
        return -5

    score = 0
    for term in search_terms:
        tokens = tokenize(term)
        for name in names:
            if name == term:
                score += 15
            elif term in name:
                score += 8
            elif len(tokens) > 1 and all(token in name for token in tokens):
                score += 6
            elif any(token in name for token in tokens):
                score += 3

    if any(signal in name for name in names for signal in HOMEOPATHIC_SIGNALS):
        score -= 10

    return score


def pick_best_record(results: List[OpenFdaLabel], search_terms: List[str]) -> Optional[OpenFdaLabel]:
    best_score = float("-inf")
    best: Optional[OpenFdaLabel] = None
    for record in results:
        score = compute_match_score(record, search_terms)
        if score > best_score:
            best_score, best = score, record
    return best if best_score >= MIN_MATCH_SCORE else None


def split_paragraphs(values: Optional[List[str]]) -> Optional[List[str]]:
    if not values:
        return None
    lines = [line.strip() for entry in values for line in re.split(r"\n+", entry)]
    return [line for line in lines if line][:MAX_PARAGRAPHS]


def build_search_query(search_terms: List[str]) -> str:
    return " OR ".join(
        f'(openfda.brand_name:"{term}" OR openfda.generic_name:"{term}" OR openfda.substance_name:"{term}")'
        for term in search_terms[:MAX_SEARCH_TERMS]
    )


def fetch_drug_information(
    drug_name: str,
    settings: Optional[Settings] = None
) -> Optional[ExternalDrugInformation]:
    """
    Look a medicine up in the OpenFDA label database.

    Args:
        drug_name: Brand or generic name as typed or inferred
        settings: Optional settings override

    Returns:
        Label facts for the best-matching record, or None
    """
    settings = settings or get_settings()

    sanitized = re.sub(r"\s+", " ", re.sub(r"[^a-z0-9\s\-]", " ", drug_name or "", flags=re.IGNORECASE)).strip()
    if not sanitized:
        return None

    search_terms = build_search_terms(sanitized)
    if not search_terms:
        return None

    try:
        response = requests.get(
            settings.openfda_url,
            params={"search": build_search_query(search_terms), "limit": RESULT_LIMIT},
            headers={"Content-Type": "application/json"},
            timeout=settings.llm_timeout_seconds,
        )
        if not response.ok:
            logger.warning(f"OpenFDA request failed: {response.status_code} {response.reason}")
            return None

        parsed = OpenFdaResponse.model_validate(response.json())
    except (requests.RequestException, ValueError, PydanticValidationError) as e:
        logger.error(f"Failed to fetch drug information for '{sanitized}': {e}")
        return None

    if not parsed.results:
        return None

    record = pick_best_record(parsed.results, search_terms)
    if record is None:
        logger.info(f"No OpenFDA label matched '{sanitized}' closely enough")
        return None

    fields = record.openfda or OpenFdaFields()
    return ExternalDrugInformation(
        brand_names=fields.brand_name or [],
        generic_name=(fields.generic_name or fields.substance_name or [None])[0],
        mechanism=(record.mechanism_of_action or [None])[0],
        therapeutic_class=(fields.pharm_class_epc or fields.pharm_class_cs or [None])[0],
        indications=split_paragraphs(record.indications_and_usage),
        dosage_and_administration=split_paragraphs(record.dosage_and_administration),
        dosage_forms=split_paragraphs(record.dosage_forms_and_strengths),
        warnings=split_paragraphs(record.boxed_warning or record.warnings),
        openfda_id=record.set_id or record.id,
    )


def get_drug_info_lookup(settings: Optional[Settings] = None) -> Optional[DrugInfoLookup]:
    """The OpenFDA lookup when enabled in settings, else None."""
    settings = settings or get_settings()
    if not settings.openfda_enabled:
        return None
    return lambda name: fetch_drug_information(name, settings=settings)
