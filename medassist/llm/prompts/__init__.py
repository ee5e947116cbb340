"""
Prompts module - LLM prompt templates.

One file per agent so prompt wording changes show up as focused diffs.
"""
from medassist.llm.prompts.orchestrator_prompts import (
    get_analysis_system_prompt,
    get_query_analysis_prompt,
    get_medical_advice_check_prompt,
    get_synthesis_prompt,
)
from medassist.llm.prompts.drug_prompts import (
    UNKNOWN_MEDICINE_MARKER,
    MEDICINE_PROFILE_SYSTEM_PROMPT,
    get_medicine_profile_prompt,
)
from medassist.llm.prompts.vision_prompts import (
    TRANSCRIBE_INSTRUCTION,
    get_pill_scanner_system_prompt,
)

__all__ = [
    "get_analysis_system_prompt",
    "get_query_analysis_prompt",
    "get_medical_advice_check_prompt",
    "get_synthesis_prompt",
    "UNKNOWN_MEDICINE_MARKER",
    "MEDICINE_PROFILE_SYSTEM_PROMPT",
    "get_medicine_profile_prompt",
    "TRANSCRIBE_INSTRUCTION",
    "get_pill_scanner_system_prompt",
]
