"""
LLM Client for the OpenRouter chat-completion API.

This module provides a single interface for every model call the
assistant makes:
- Text prompts (agents, orchestrator analysis and synthesis)
- Multimodal prompts (pill photos, audio clips)

Requests walk a fallback cascade: the requested model, the default
model, any configured fallback models, and finally Google Gemini for
text-only requests when GEMINI_API_KEY is set.
"""
import time
from typing import Any, Dict, List, Optional

import google.generativeai as genai
import requests

from medassist.core.config import Settings, get_settings
from medassist.core.exceptions import LLMError
from medassist.core.logging_config import get_logger
from medassist.core.validators import parse_data_uri

logger = get_logger(__name__)

# Audio MIME subtypes OpenRouter expects under a different name
_AUDIO_FORMATS = {"mpeg": "mp3", "x-wav": "wav", "wave": "wav", "x-m4a": "m4a", "mp4": "m4a"}


def text_part(text: str) -> Dict[str, Any]:
    """Content part carrying plain text."""
    return {"type": "text", "text": text}


def image_part(image_data_uri: str) -> Dict[str, Any]:
    """Content part carrying an image as a data URI."""
    return {"type": "image_url", "image_url": {"url": image_data_uri}}


def audio_part(audio_data_uri: str) -> Dict[str, Any]:
    """
    Content part carrying base64 audio.

    Raises:
        ValueError: If the data URI is malformed
    """
    mime_type, data = parse_data_uri(audio_data_uri)
    subtype = mime_type.split("/", 1)[1].split(";")[0].lower()
    return {
        "type": "input_audio",
        "input_audio": {"data": data, "format": _AUDIO_FORMATS.get(subtype, subtype)},
    }


class LLMClient:
    """
    Client for OpenRouter with an optional Gemini fallback.

    Example:
        >>> client = LLMClient()
        >>> client.generate("What is paracetamol?", system_prompt="Be brief.")
        'Paracetamol is a pain reliever and fever reducer...'
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize the client.

        Args:
            settings: Optional settings override (tests pass their own)
        """
        self.settings = settings or get_settings()

        self.base_url = self.settings.openrouter_base_url
        self.api_key = self.settings.openrouter_api_key
        self.default_model = self.settings.llm_model
        self.vision_model = self.settings.llm_vision_model
        self.temperature = self.settings.llm_temperature
        self.max_tokens = self.settings.llm_max_tokens
        self.timeout = self.settings.llm_timeout_seconds
        self.backoff = self.settings.llm_retry_backoff_seconds

        self.google_enabled = bool(self.settings.gemini_api_key)
        if self.google_enabled:
            genai.configure(api_key=self.settings.gemini_api_key)

        if not self.api_key:
            logger.warning("OPENROUTER_API_KEY is not set; OpenRouter models are disabled")

        logger.info(
            f"LLM client initialized: default={self.default_model}, "
            f"fallbacks={len(self.settings.llm_fallback_models)}, gemini={self.google_enabled}"
        )

    @property
    def is_configured(self) -> bool:
        """True when at least one provider has credentials."""
        return bool(self.api_key) or self.google_enabled

    def generate(
        self,
        user_message: str,
        system_prompt: Optional[str] = None,
        history: Optional[List[Dict[str, str]]] = None,
        model: Optional[str] = None
    ) -> str:
        """
        Generate a text completion.

        Args:
            user_message: The prompt for this turn
            system_prompt: Optional system instruction
            history: Prior turns as role/content dicts
            model: Model to try first (defaults to LLM_MODEL)

        Returns:
            The model's reply text

        Raises:
            LLMError: If no provider is configured or every attempt fails
        """
        messages = self._build_messages(system_prompt, history, user_message)
        return self._run_cascade(
            messages,
            model=model,
            google_request=(user_message, system_prompt, history),
        )

    def generate_multimodal(
        self,
        parts: List[Dict[str, Any]],
        system_prompt: Optional[str] = None,
        model: Optional[str] = None
    ) -> str:
        """
        Generate a completion from mixed content parts.

        Multimodal requests only go to OpenRouter; Gemini is not tried.

        Args:
            parts: Content parts built with text_part/image_part/audio_part
            system_prompt: Optional system instruction
            model: Model to try first (defaults to LLM_VISION_MODEL)
        """
        if len(parts) == 1 and parts[0].get("type") == "text":
            content: Any = parts[0]["text"]
        else:
            content = parts

        messages = self._build_messages(system_prompt, None, content)
        return self._run_cascade(messages, model=model or self.vision_model)

    def generate_with_image(
        self,
        image_data_uri: str,
        system_prompt: Optional[str] = None,
        user_message: Optional[str] = None,
        model: Optional[str] = None
    ) -> str:
        """Shortcut for an image plus optional instruction text."""
        parts = [image_part(image_data_uri)]
        if user_message:
            parts.append(text_part(user_message))
        return self.generate_multimodal(parts, system_prompt=system_prompt, model=model)

    def _build_messages(
        self,
        system_prompt: Optional[str],
        history: Optional[List[Dict[str, str]]],
        content: Any
    ) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if history:
            messages.extend(history)
        messages.append({"role": "user", "content": content})
        return messages

    def _model_cascade(self, model: Optional[str]) -> List[Dict[str, str]]:
        cascade: List[Dict[str, str]] = []
        if not self.api_key:
            return cascade

        seen = set()
        for name in (model or self.default_model, self.default_model, *self.settings.llm_fallback_models):
            if name and name not in seen:
                seen.add(name)
                cascade.append({"provider": "openrouter", "model": name})
        return cascade

    def _run_cascade(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
        google_request: Optional[tuple] = None
    ) -> str:
        cascade = self._model_cascade(model)
        if google_request is not None and self.google_enabled:
            cascade.append({"provider": "google", "model": self.settings.gemini_model})

        if not cascade:
            raise LLMError("OpenRouter API key not configured. Set OPENROUTER_API_KEY in your .env file.")

        last_error: Optional[Exception] = None

        for i, attempt in enumerate(cascade):
            provider = attempt["provider"]
            target_model = attempt["model"]

            try:
                if i > 0:
                    logger.info(f"Attempt {i + 1}: falling back to {provider} ({target_model})")
                    time.sleep(self.backoff * i)

                if provider == "google":
                    return self._generate_google(*google_request, model=target_model)
                return self._generate_openrouter(messages, target_model)

            except Exception as e:
                error_msg = str(e).lower()
                is_rate_limit = "429" in error_msg or "quota" in error_msg or "rate limit" in error_msg
                log_fn = logger.warning if is_rate_limit else logger.error
                log_fn(f"Provider failed ({provider}/{target_model}): {e}")
                last_error = e

        logger.critical(f"All {len(cascade)} LLM attempts failed")
        raise LLMError(f"All LLM providers failed. Last error: {last_error}")

    def _generate_openrouter(self, messages: List[Dict[str, Any]], model: str) -> str:
        """Execute one request against OpenRouter."""
        response = requests.post(
            f"{self.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
                "HTTP-Referer": self.settings.app_url,
                "X-Title": self.settings.app_title,
            },
            json={
                "model": model,
                "messages": messages,
                "temperature": self.temperature,
                "max_tokens": self.max_tokens,
            },
            timeout=self.timeout,
        )

        if not response.ok:
            raise LLMError(f"OpenRouter API error: {response.status_code} - {response.text[:500]}")

        data = response.json()
        choices = data.get("choices") or []
        if not choices or not choices[0].get("message"):
            raise LLMError("Invalid response from OpenRouter API")

        content = choices[0]["message"].get("content") or ""
        if isinstance(content, list):
            content = "".join(part.get("text", "") for part in content if isinstance(part, dict))

        logger.debug(f"OpenRouter ({model}) replied: {content[:100]}...")
        return content

    def _generate_google(
        self,
        user_message: str,
        system_prompt: Optional[str],
        history: Optional[List[Dict[str, str]]],
        model: str
    ) -> str:
        """Execute one request against Google Gemini."""
        model_instance = genai.GenerativeModel(
            model_name=model,
            system_instruction=system_prompt or None
        )

        chat_history = []
        for msg in history or []:
            role = "user" if msg["role"] == "user" else "model"
            chat_history.append({"role": role, "parts": [msg["content"]]})

        chat = model_instance.start_chat(history=chat_history)
        response = chat.send_message(user_message)
        return response.text


# Singleton instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get or create the shared LLM client."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient()
    return _llm_client


def reset_llm_client() -> None:
    """Drop the shared client (useful for testing)."""
    global _llm_client
    _llm_client = None
