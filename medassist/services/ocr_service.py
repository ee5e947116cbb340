"""
OCR Service - Handwritten medical document transcription.

Uses Microsoft TrOCR through the Hugging Face Inference API:
- Primary model: microsoft/trocr-large-handwritten (messy cursive, abbreviations)
- Fallback model: microsoft/trocr-base-handwritten (tried when the primary
  result scores below 0.5)

The models return bare text without a score, so confidence is estimated
from how much the text looks like a prescription: length, medical terms,
dosage patterns, Latin abbreviations and prescription markers.
"""
import base64
import binascii
import re
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import requests

from medassist.core.config import Settings, get_settings
from medassist.core.logging_config import get_logger
from medassist.core.validators import estimate_data_uri_bytes, parse_data_uri
from medassist.llm.huggingface import HuggingFaceClient, get_huggingface_client

logger = get_logger(__name__)

LOW_CONFIDENCE_THRESHOLD = 0.5

MEDICAL_TERMS = (
    # Prescription vocabulary
    "patient", "diagnosis", "treatment", "prescription", "medicine", "medication",
    "dose", "dosage", "mg", "tablet", "capsule", "syrup", "injection",
    # Abbreviations doctors write
    "bid", "tid", "qid", "prn", "po", "iv", "im", "od", "bd",
    # Instructions
    "take", "daily", "twice", "morning", "evening", "after", "before",
    "food", "meal", "pain", "fever", "blood", "pressure", "sugar",
    # Categories
    "antibiotic", "painkiller", "vitamin", "supplement", "drops", "ointment",
)

DOSAGE_PATTERNS = [
    re.compile(r"\d+\s*mg", re.IGNORECASE),
    re.compile(r"\d+\s*ml", re.IGNORECASE),
    re.compile(r"\d+\s*times?", re.IGNORECASE),
    re.compile(r"\d+x\s*daily", re.IGNORECASE),
    re.compile(r"\d+/day", re.IGNORECASE),
    re.compile(r"\d+\s*tablet", re.IGNORECASE),
    re.compile(r"\d+\s*capsule", re.IGNORECASE),
]

ABBREVIATION_PATTERN = re.compile(
    r"\b(bid|tid|qid|prn|po|iv|im|od|bd|hs|ac|pc|qh|stat)\b", re.IGNORECASE
)

SPECIAL_CHAR_PATTERN = re.compile(r"[^a-zA-Z0-9\s.,!?()\-/]")

PRESCRIPTION_INDICATORS = [
    re.compile(r"rx[:\s]", re.IGNORECASE),
    re.compile(r"sig[:\s]", re.IGNORECASE),
    re.compile(r"dispense?[:\s]", re.IGNORECASE),
    re.compile(r"refill", re.IGNORECASE),
    re.compile(r"\d+\s*refills?", re.IGNORECASE),
    re.compile(r"doctor|dr\.?", re.IGNORECASE),
    re.compile(r"pharmacy", re.IGNORECASE),
]


@dataclass
class OCRResult:
    """Outcome of one document transcription."""
    extracted_text: str
    confidence: float
    processing_time_ms: int
    model_used: str

    def to_dict(self) -> dict:
        return {
            "extracted_text": self.extracted_text,
            "confidence": self.confidence,
            "processing_time_ms": self.processing_time_ms,
            "model_used": self.model_used,
        }


def calculate_confidence(text: str) -> float:
    """
    Estimate how reliable a transcription is.

    Args:
        text: Text produced by the OCR model

    Returns:
        Score in [0.1, 1.0], or 0.0 for empty text
    """
    if not text:
        return 0.0

    confidence = 0.6

    if len(text) > 30:
        confidence += 0.15
    if len(text) > 100:
        confidence += 0.1
    if len(text) > 250:
        confidence += 0.05

    lower = text.lower()
    found_terms = sum(1 for term in MEDICAL_TERMS if term in lower)
    confidence += min(found_terms * 0.03, 0.25)

    dosage_matches = sum(len(pattern.findall(text)) for pattern in DOSAGE_PATTERNS)
    confidence += min(dosage_matches * 0.08, 0.2)

    abbreviation_matches = len(ABBREVIATION_PATTERN.findall(text))
    confidence += min(abbreviation_matches * 0.1, 0.15)

    special_ratio = len(SPECIAL_CHAR_PATTERN.findall(text)) / len(text)
    if special_ratio > 0.15:
        confidence -= 0.15

    if any(pattern.search(text) for pattern in PRESCRIPTION_INDICATORS):
        confidence += 0.1

    return max(0.1, min(1.0, confidence))


class MedicalOCRService:
    """
    Transcribes photos of handwritten prescriptions and notes.

    Example:
        >>> service = MedicalOCRService()
        >>> result = service.extract_text_from_image("data:image/png;base64,...")
        >>> result.model_used
        'microsoft/trocr-large-handwritten'
    """

    def __init__(
        self,
        hf_client: Optional[HuggingFaceClient] = None,
        settings: Optional[Settings] = None
    ):
        self.settings = settings or get_settings()
        self.hf_client = hf_client or get_huggingface_client()
        self.model = self.settings.ocr_model
        self.fallback_model = self.settings.ocr_fallback_model
        self.max_image_bytes = self.settings.max_image_bytes

    def validate_image(self, image_data_uri: Optional[str]) -> Tuple[bool, str]:
        """
        Check an image is usable for OCR.

        Returns:
            Tuple of (is_valid, message)
        """
        if not image_data_uri or not image_data_uri.startswith("data:image/"):
            return False, "Invalid image format"

        if estimate_data_uri_bytes(image_data_uri) > self.max_image_bytes:
            return False, f"Image too large (max {self.max_image_bytes // (1024 * 1024)}MB)"

        return True, "Image is valid for OCR processing"

    def extract_text_from_image(self, image_data_uri: str) -> OCRResult:
        """
        Transcribe a document image, retrying with the fallback model
        when the primary result looks unreliable.

        Never raises: failures produce an empty result with
        model_used='error'.
        """
        start = time.monotonic()
        logger.info("Starting text extraction from handwritten document")

        try:
            result = self._perform_ocr(image_data_uri, self.model)

            if result.confidence < LOW_CONFIDENCE_THRESHOLD:
                logger.info("Low confidence with primary model, trying fallback model")
                fallback = self._perform_ocr(image_data_uri, self.fallback_model)
                if fallback.confidence > result.confidence:
                    logger.info("Fallback model performed better, using its result")
                    result = fallback

        except (ValueError, binascii.Error, RuntimeError, requests.RequestException) as e:
            logger.error(f"OCR text extraction failed: {e}")
            return OCRResult(
                extracted_text="",
                confidence=0.0,
                processing_time_ms=self._elapsed_ms(start),
                model_used="error",
            )

        result.processing_time_ms = self._elapsed_ms(start)
        logger.info(
            f"OCR completed in {result.processing_time_ms}ms "
            f"(confidence={result.confidence:.2f}, chars={len(result.extracted_text)})"
        )
        return result

    def _perform_ocr(self, image_data_uri: str, model: str) -> OCRResult:
        mime_type, payload = parse_data_uri(image_data_uri)
        image_bytes = base64.b64decode(payload)

        text = self.hf_client.perform_ocr(image_bytes, mime_type, model)
        return OCRResult(
            extracted_text=text,
            confidence=calculate_confidence(text),
            processing_time_ms=0,
            model_used=model,
        )

    @staticmethod
    def _elapsed_ms(start: float) -> int:
        return int((time.monotonic() - start) * 1000)


_ocr_service: Optional[MedicalOCRService] = None


def get_ocr_service() -> MedicalOCRService:
    """Get or create the shared OCR service."""
    global _ocr_service
    if _ocr_service is None:
        _ocr_service = MedicalOCRService()
    return _ocr_service


def reset_ocr_service() -> None:
    global _ocr_service
    _ocr_service = None
