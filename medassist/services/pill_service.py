"""
Pill Identification Service - standalone pill scanner.

One vision call with a strict JSON-only prompt. Unlike the chat flow this
returns a fixed three-field record, and provider or parse failures come
back as an "Error During Identification" record instead of an exception.
"""
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from medassist.core.config import get_settings
from medassist.core.exceptions import ImageValidationError, LLMError
from medassist.core.logging_config import get_logger
from medassist.core.validators import validate_image_data_uri
from medassist.llm.client import LLMClient, get_llm_client
from medassist.llm.parsing import extract_json_object
from medassist.llm.prompts.vision_prompts import get_pill_scanner_system_prompt

logger = get_logger(__name__)


@dataclass
class PillIdentification:
    name: str
    description: str
    dosage: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


IDENTIFICATION_ERROR = PillIdentification(
    name="Error During Identification",
    description=(
        "An error occurred while analyzing the image. This could be due to network issues "
        "or API limitations. Please ensure you have a clear image of a medicine and try again."
    ),
    dosage="N/A - Please retry",
)


class PillIdentificationService:
    """
    Identify a medicine from a photo.

    Example:
        >>> service = PillIdentificationService()
        >>> service.identify("data:image/jpeg;base64,/9j/4AAQ...").name
        'Panadol (Paracetamol 500mg)'
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm_client = llm_client or get_llm_client()
        self.max_image_bytes = get_settings().max_image_bytes

    def identify(self, image_data_uri: str) -> PillIdentification:
        """
        Raises:
            ImageValidationError: If the data URI is malformed or too large
        """
        is_valid, error = validate_image_data_uri(image_data_uri, self.max_image_bytes)
        if not is_valid:
            logger.warning(f"Rejected pill image: {error}")
            raise ImageValidationError()

        try:
            reply = self.llm_client.generate_with_image(
                image_data_uri,
                system_prompt=get_pill_scanner_system_prompt(),
            )
            data = extract_json_object(reply)
            result = PillIdentification(
                name=str(data["name"]).strip(),
                description=str(data["description"]).strip(),
                dosage=str(data["dosage"]).strip(),
            )
        except (LLMError, ValueError, KeyError) as e:
            logger.error(f"Pill identification failed: {e}")
            return IDENTIFICATION_ERROR

        logger.info(f"Identified pill: {result.name}")
        return result


_pill_service: Optional[PillIdentificationService] = None


def get_pill_service() -> PillIdentificationService:
    global _pill_service
    if _pill_service is None:
        _pill_service = PillIdentificationService()
    return _pill_service
