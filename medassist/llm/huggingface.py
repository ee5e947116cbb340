"""
Hugging Face Inference API client for biomedical NLP.

Two models are used:
- d4data/biomedical-ner-all for medication/condition entity recognition
- microsoft/trocr-*-handwritten for OCR of handwritten prescriptions

Entity extraction never fails outright: without an API key, or when
the service errors, a small regex extractor answers instead.
"""
import re
import time
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from medassist.core.config import Settings, get_settings
from medassist.core.logging_config import get_logger

logger = get_logger(__name__)

MAX_LOADING_RETRIES = 3

_FALLBACK_PATTERNS = [
    re.compile(r"\b(paracetamol|acetaminophen|ibuprofen|aspirin|panadol|advil|tylenol)\b", re.IGNORECASE),
    re.compile(r"\b\w+\s?(tablet|capsule|syrup|drops|injection|mg|ml)\b", re.IGNORECASE),
]


@dataclass
class MedicalEntity:
    """A span recognised by the NER model."""
    text: str
    label: str
    confidence: float
    start: int
    end: int

    def label_matches(self, *keywords: str) -> bool:
        label = self.label.lower()
        return any(keyword in label for keyword in keywords)


class HuggingFaceClient:
    """
    Thin wrapper around the Hugging Face Inference API.

    Example:
        >>> client = HuggingFaceClient()
        >>> [e.text for e in client.extract_medical_entities("Is panadol safe with aspirin?")]
        ['panadol', 'aspirin']
    """

    def __init__(self, settings: Optional[Settings] = None, loading_wait_seconds: float = 10.0):
        self.settings = settings or get_settings()
        self.api_key = self.settings.huggingface_api_key
        self.base_url = self.settings.huggingface_base_url
        self.timeout = self.settings.llm_timeout_seconds
        self.loading_wait_seconds = loading_wait_seconds

        if not self.api_key:
            logger.warning("No HUGGINGFACE_API_KEY found; entity extraction uses regex fallback and OCR is disabled")

    def extract_medical_entities(self, text: str) -> List[MedicalEntity]:
        """
        Recognise medications, conditions and other biomedical entities.

        Args:
            text: Free text to analyse

        Returns:
            Entities in order of appearance
        """
        if not self.api_key:
            return self.fallback_entity_extraction(text)

        try:
            result = self._post_json(
                f"models/{self.settings.ner_model}",
                {"inputs": text, "options": {"wait_for_model": True}},
            )
        except (requests.RequestException, RuntimeError, ValueError) as e:
            logger.error(f"Medical entity extraction failed, using fallback: {e}")
            return self.fallback_entity_extraction(text)

        if not isinstance(result, list):
            logger.warning("No entities found or invalid NER response, using fallback")
            return self.fallback_entity_extraction(text)

        return [
            MedicalEntity(
                text=item.get("word", ""),
                label=item.get("entity_group") or item.get("entity") or "",
                confidence=float(item.get("score", 0.0)),
                start=int(item.get("start", 0)),
                end=int(item.get("end", 0)),
            )
            for item in result
            if isinstance(item, dict)
        ]

    def fallback_entity_extraction(self, text: str) -> List[MedicalEntity]:
        """Regex-based extraction of common medicine mentions."""
        entities = []
        for pattern in _FALLBACK_PATTERNS:
            for match in pattern.finditer(text or ""):
                entities.append(MedicalEntity(
                    text=match.group(0),
                    label="MEDICATION",
                    confidence=0.7,
                    start=match.start(),
                    end=match.end(),
                ))
        return entities

    def perform_ocr(self, image_bytes: bytes, mime_type: str, model: str) -> str:
        """
        Transcribe handwriting in an image.

        Args:
            image_bytes: Raw image bytes
            mime_type: Image MIME type (e.g. image/jpeg)
            model: TrOCR model id

        Returns:
            The generated text (may be empty)

        Raises:
            RuntimeError: Without an API key, on HTTP errors, or when the
                model never finishes loading
        """
        if not self.api_key:
            raise RuntimeError("HUGGINGFACE_API_KEY is not configured; OCR is unavailable")

        logger.info(f"Starting OCR with model: {model}")
        result = self._post(
            f"models/{model}",
            data=image_bytes,
            content_type=mime_type,
        )

        if isinstance(result, list) and result:
            return (result[0] or {}).get("generated_text", "") or ""
        if isinstance(result, dict):
            return result.get("generated_text", "") or ""
        return ""

    def _post_json(self, endpoint: str, payload: dict) -> Any:
        return self._post(endpoint, json_payload=payload)

    def _post(
        self,
        endpoint: str,
        json_payload: Optional[dict] = None,
        data: Optional[bytes] = None,
        content_type: str = "application/json"
    ) -> Any:
        url = f"{self.base_url}/{endpoint}"
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": content_type}

        for attempt in range(MAX_LOADING_RETRIES + 1):
            response = requests.post(
                url,
                headers=headers,
                json=json_payload,
                data=data,
                timeout=self.timeout,
            )
            result = response.json() if response.content else {}

            # A cold model answers 503 with {"error": "Model ... is currently loading"}
            if isinstance(result, dict) and "loading" in str(result.get("error", "")).lower():
                if attempt < MAX_LOADING_RETRIES:
                    logger.info(f"Model {endpoint} is loading, retrying in {self.loading_wait_seconds}s")
                    time.sleep(self.loading_wait_seconds)
                    continue
                raise RuntimeError(f"Model {endpoint} did not finish loading")

            if not response.ok:
                raise RuntimeError(f"HTTP {response.status_code}: {response.reason}")

            return result

        raise RuntimeError(f"Model {endpoint} did not finish loading")


_hf_client: Optional[HuggingFaceClient] = None


def get_huggingface_client() -> HuggingFaceClient:
    """Get or create the shared Hugging Face client."""
    global _hf_client
    if _hf_client is None:
        _hf_client = HuggingFaceClient()
    return _hf_client


def reset_huggingface_client() -> None:
    global _hf_client
    _hf_client = None
