"""Helpers for pulling structure out of free-text model replies."""
import json
import re
from typing import Any, Dict, Iterable

_FENCE_PATTERN = re.compile(r"```(?:json)?", re.IGNORECASE)
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Find and decode the outermost JSON object in a reply.

    Models often wrap JSON in code fences or add a sentence before it;
    both are tolerated.

    Raises:
        ValueError: If no decodable object is present
    """
    if not text:
        raise ValueError("Empty model reply")

    cleaned = _FENCE_PATTERN.sub("", text)
    match = _OBJECT_PATTERN.search(cleaned)
    if not match:
        raise ValueError("No JSON object found in model reply")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON in model reply: {e}") from e

    if not isinstance(parsed, dict):
        raise ValueError("Model reply JSON is not an object")
    return parsed


def first_line(text: str) -> str:
    return (text or "").strip().split("\n")[0].strip()


def strip_quotes(text: str) -> str:
    return re.sub(r"^[\"']|[\"']$", "", text.strip())


def contains_any(text: str, needles: Iterable[str]) -> bool:
    """Case-insensitive substring test against several needles."""
    lower = (text or "").lower()
    return any(needle.lower() in lower for needle in needles)
