"""
Input Validators - Sanitization and validation utilities.

Covers the three kinds of user input the assistant accepts:
free text, base64 data URIs (images and audio) and identifiers
(session ids, language codes).
"""
import re
import uuid
from typing import Optional, Tuple

from medassist.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 2000
SUPPORTED_LANGUAGES = ("english", "urdu")

_DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def sanitize_message(message: Optional[str], max_length: int = MAX_MESSAGE_LENGTH) -> str:
    """
    Sanitize a user message.

    - Removes null bytes
    - Strips and normalizes whitespace
    - Limits length

    Args:
        message: Raw user message
        max_length: Maximum allowed length

    Returns:
        Sanitized message (empty string for None)
    """
    if not message:
        return ""

    cleaned = message.replace("\x00", "").strip()
    cleaned = re.sub(r"\s+", " ", cleaned)

    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length]

    return cleaned


def validate_session_id(session_id: Optional[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate a session ID is a proper UUID.

    Args:
        session_id: Session ID to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not session_id:
        return True, None  # Empty is OK (will be generated)

    try:
        uuid.UUID(session_id)
        return True, None
    except ValueError:
        return False, "Invalid session_id format (must be UUID)"


def validate_language(language: str) -> Tuple[bool, Optional[str]]:
    """Check the response language is one the assistant can answer in."""
    if language not in SUPPORTED_LANGUAGES:
        return False, f"Invalid language: {language}. Must be one of: {', '.join(SUPPORTED_LANGUAGES)}"
    return True, None


def parse_data_uri(data_uri: Optional[str]) -> Tuple[str, str]:
    """
    Split a base64 data URI into its MIME type and payload.

    Args:
        data_uri: String of the form 'data:<mimetype>;base64,<encoded_data>'

    Returns:
        Tuple of (mime_type, base64_payload)

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    match = _DATA_URI_PATTERN.match((data_uri or "").strip())
    if not match:
        raise ValueError("Invalid data URI format. Expected 'data:<mimetype>;base64,<encoded_data>'.")
    return match.group("mime"), match.group("data")


def estimate_data_uri_bytes(data_uri: str) -> int:
    """Rough decoded size of a data URI (base64 inflates by 4/3)."""
    return int(len(data_uri) * 3 / 4)


def validate_image_data_uri(
    data_uri: Optional[str],
    max_bytes: int = 10 * 1024 * 1024
) -> Tuple[bool, Optional[str]]:
    """
    Validate an uploaded image.

    Args:
        data_uri: Image as a base64 data URI
        max_bytes: Largest accepted decoded size

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not data_uri or not data_uri.startswith("data:image/"):
        return False, "Invalid image format"

    try:
        parse_data_uri(data_uri)
    except ValueError as e:
        return False, str(e)

    if estimate_data_uri_bytes(data_uri) > max_bytes:
        return False, f"Image too large (max {max_bytes // (1024 * 1024)}MB)"

    return True, None


def validate_audio_data_uri(data_uri: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate an uploaded audio clip."""
    if not data_uri or not data_uri.startswith("data:audio/"):
        return False, "Invalid audio data URI format."

    try:
        parse_data_uri(data_uri)
    except ValueError as e:
        return False, str(e)

    return True, None


def validate_chat_input(
    text: Optional[str],
    image_data_uri: Optional[str],
    language: str
) -> Tuple[bool, str, Optional[str]]:
    """
    Full validation of a chat submission.

    A submission needs text, an image, or both.

    Args:
        text: Raw user text (may be empty when an image is attached)
        image_data_uri: Optional attached image
        language: Requested response language

    Returns:
        Tuple of (is_valid, sanitized_text, error_message)
    """
    sanitized = sanitize_message(text)

    if not sanitized and not image_data_uri:
        return False, "", "Please enter a message or upload an image."

    is_valid, error = validate_language(language)
    if not is_valid:
        return False, sanitized, error

    if text and len(text.strip()) > MAX_MESSAGE_LENGTH:
        logger.warning(f"Message truncated to {MAX_MESSAGE_LENGTH} characters")

    return True, sanitized, None
