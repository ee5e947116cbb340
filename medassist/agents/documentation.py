"""
Medical Documentation Agent - reads handwritten prescriptions and notes.

Its reply is the transcription itself; the orchestrator appends it to the
user's text so the other agents can answer questions about the document.
"""
from typing import Optional

from medassist.agents import messages
from medassist.agents.base import AgentContext, AgentInput, AgentResponse, BaseAgent
from medassist.llm.client import LLMClient
from medassist.services.ocr_service import MedicalOCRService, get_ocr_service

AGENT_NAME = "MedicalDocumentationAgent"
MIN_OCR_CONFIDENCE = 0.3

DOCUMENT_KEYWORDS = (
    "document", "prescription", "handwritten", "note", "doctor's note",
    "medical record", "chart", "read this", "analyze this document",
    "transcribe this", "what does this say",
)


class MedicalDocumentationAgent(BaseAgent):
    """OCR front end for document photos."""

    def __init__(
        self,
        llm_client: Optional[LLMClient] = None,
        ocr_service: Optional[MedicalOCRService] = None
    ):
        super().__init__(
            AGENT_NAME,
            "Analyzes medical documents, performs OCR on handwritten notes, and structures medical information",
            llm_client=llm_client,
        )
        self.ocr_service = ocr_service or get_ocr_service()

    def can_handle(self, text: str, context: AgentContext) -> bool:
        lower = (text or "").lower()
        return any(keyword in lower for keyword in DOCUMENT_KEYWORDS)

    def process(self, agent_input: AgentInput, context: AgentContext) -> AgentResponse:
        self.logger.info("Processing document request")

        if not agent_input.has_image:
            return self.respond(
                messages.localized(messages.IMAGE_REQUIRED, context.language),
                0.2,
                {"reason": "No image provided for OCR"},
            )

        try:
            is_valid, reason = self.ocr_service.validate_image(agent_input.image_data_uri)
            if not is_valid:
                raise ValueError(f"Invalid image: {reason}")

            result = self.ocr_service.extract_text_from_image(agent_input.image_data_uri)

            if not result.extracted_text or result.confidence < MIN_OCR_CONFIDENCE:
                return self.respond(
                    messages.localized(messages.DOCUMENT_UNREADABLE, context.language),
                    result.confidence,
                    {"reason": "Low OCR confidence or no text extracted", **result.to_dict()},
                )

            header = messages.ocr_header(result.confidence, context.language)
            return self.respond(
                f'{header}\n\n"{result.extracted_text}"',
                result.confidence,
                {**result.to_dict(), "is_ocr_result": True},
            )

        except ValueError as e:
            self.logger.error(f"Failed to process medical document: {e}")
            return self.respond(
                messages.localized(messages.DOCUMENT_ERROR, context.language),
                0.0,
                {"error": True},
            )
