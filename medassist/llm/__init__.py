"""
LLM module - Language model integration.

This module handles all model interactions:
- Chat completions via OpenRouter (Gemini as last resort)
- Multimodal parts for images and audio
- Biomedical NER and handwriting OCR via Hugging Face
- Parsing helpers for free-text replies
"""
from medassist.core.exceptions import LLMError
from medassist.llm.client import LLMClient, get_llm_client, reset_llm_client
from medassist.llm.huggingface import HuggingFaceClient, MedicalEntity, get_huggingface_client

__all__ = [
    "LLMClient",
    "LLMError",
    "get_llm_client",
    "reset_llm_client",
    "HuggingFaceClient",
    "MedicalEntity",
    "get_huggingface_client",
]
