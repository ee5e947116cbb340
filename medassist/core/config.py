"""
Configuration management via environment variables.

This module loads configuration from .env file using python-dotenv.
All configuration values are accessed through the Settings class.

Only OPENROUTER_API_KEY is needed for the assistant to answer questions.
Hugging Face, Gemini and OpenFDA integrations are optional and degrade
gracefully when their keys are absent.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv


# Load .env file from project root
# This must happen before accessing os.environ
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(env_path)


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    frozen=True makes the dataclass immutable, preventing accidental
    modification of settings at runtime.

    Attributes:
        app_name: Application identifier for logging
        app_env: Environment name (development, staging, production)
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        openrouter_api_key: API key for the OpenRouter chat-completion service
        openrouter_base_url: Base URL of the OpenRouter API
        app_url: Sent to OpenRouter as HTTP-Referer
        app_title: Sent to OpenRouter as X-Title
        llm_model: Default text model
        llm_fallback_models: Extra OpenRouter models tried after the default
        llm_vision_model: Model used for image understanding
        llm_temperature: LLM creativity (0.0 = deterministic, 1.0 = creative)
        llm_max_tokens: Maximum response length
        gemini_api_key: Optional Google Gemini key, last resort for text requests
        huggingface_api_key: Optional key for biomedical NER and OCR models
        database_url: SQLAlchemy URL for persistent chat history
    """
    # Application settings
    app_name: str
    app_env: str
    log_level: str

    # OpenRouter settings
    openrouter_api_key: str
    openrouter_base_url: str
    app_url: str
    app_title: str

    # LLM settings
    llm_model: str
    llm_fallback_models: Tuple[str, ...]
    llm_vision_model: str
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_seconds: int
    llm_retry_backoff_seconds: float

    # Google Gemini (optional fallback provider)
    gemini_api_key: str
    gemini_model: str

    # Hugging Face inference
    huggingface_api_key: str
    huggingface_base_url: str
    ner_model: str
    ocr_model: str
    ocr_fallback_model: str

    # OpenFDA drug labels
    openfda_enabled: bool
    openfda_url: str

    # Chat history storage
    database_url: str
    memory_persistent: bool

    # Safety settings
    rate_limit_per_minute: int
    enable_audit_logging: bool
    max_image_bytes: int
    agent_workers: int

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env.lower() == "development"

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env.lower() == "production"


def _get_env(key: str, default: Optional[str] = None) -> str:
    """
    Get environment variable with optional default.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value

    Raises:
        ValueError: If required variable is not set and no default provided
    """
    value = os.environ.get(key, default)
    if value is None:
        raise ValueError(
            f"Required environment variable '{key}' is not set. "
            f"Please check your .env file."
        )
    return value


def _get_bool(key: str, default: str) -> bool:
    return _get_env(key, default).strip().lower() in ("1", "true", "yes", "on")


def _get_list(key: str) -> Tuple[str, ...]:
    raw = _get_env(key, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    maxsize=1 ensures only one instance exists for the process.
    Call get_settings.cache_clear() after changing the environment.

    Returns:
        Settings instance with all configuration values
    """
    database_url = _get_env("DATABASE_URL", "sqlite:///./medassist.db")
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)

    return Settings(
        # Application
        app_name=_get_env("APP_NAME", "MedAssist"),
        app_env=_get_env("APP_ENV", "development"),
        log_level=_get_env("LOG_LEVEL", "DEBUG"),

        # OpenRouter
        openrouter_api_key=_get_env("OPENROUTER_API_KEY", ""),
        openrouter_base_url=_get_env("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1").rstrip("/"),
        app_url=_get_env("APP_URL", "http://localhost:9002"),
        app_title=_get_env("APP_TITLE", "AI-LTH Health Assistant"),

        # LLM
        llm_model=_get_env("LLM_MODEL", "meta-llama/llama-3.2-3b-instruct:free"),
        llm_fallback_models=_get_list("LLM_FALLBACK_MODELS"),
        llm_vision_model=_get_env("LLM_VISION_MODEL", "qwen/qwen-2-vl-7b-instruct:free"),
        llm_temperature=float(_get_env("LLM_TEMPERATURE", "0.7")),
        llm_max_tokens=int(_get_env("LLM_MAX_TOKENS", "4000")),
        llm_timeout_seconds=int(_get_env("LLM_TIMEOUT_SECONDS", "60")),
        llm_retry_backoff_seconds=float(_get_env("LLM_RETRY_BACKOFF_SECONDS", "1.0")),

        # Gemini
        gemini_api_key=_get_env("GEMINI_API_KEY", ""),
        gemini_model=_get_env("GEMINI_MODEL", "gemini-2.0-flash"),

        # Hugging Face
        huggingface_api_key=_get_env("HUGGINGFACE_API_KEY", ""),
        huggingface_base_url=_get_env("HUGGINGFACE_BASE_URL", "https://api-inference.huggingface.co").rstrip("/"),
        ner_model=_get_env("NER_MODEL", "d4data/biomedical-ner-all"),
        ocr_model=_get_env("OCR_MODEL", "microsoft/trocr-large-handwritten"),
        ocr_fallback_model=_get_env("OCR_FALLBACK_MODEL", "microsoft/trocr-base-handwritten"),

        # OpenFDA
        openfda_enabled=_get_bool("OPENFDA_ENABLED", "true"),
        openfda_url=_get_env("OPENFDA_URL", "https://api.fda.gov/drug/label.json"),

        # Storage
        database_url=database_url,
        memory_persistent=_get_bool("MEMORY_PERSISTENT", "false"),

        # Safety
        rate_limit_per_minute=int(_get_env("RATE_LIMIT_PER_MINUTE", "30")),
        enable_audit_logging=_get_bool("ENABLE_AUDIT_LOGGING", "true"),
        max_image_bytes=int(_get_env("MAX_IMAGE_BYTES", str(10 * 1024 * 1024))),
        agent_workers=int(_get_env("AGENT_WORKERS", "5")),
    )


# (variable, required, description)
ENVIRONMENT_VARIABLES: List[Tuple[str, bool, str]] = [
    ("OPENROUTER_API_KEY", True, "OpenRouter API key for accessing free AI models"),
    ("HUGGINGFACE_API_KEY", False, "Hugging Face API key for medical NER and OCR models"),
    ("GEMINI_API_KEY", False, "Google Gemini API key, used only when every OpenRouter model fails"),
    ("APP_URL", False, "Public URL of the application (OpenRouter referrer)"),
]


def mask_secret(value: str) -> str:
    """Return a log-safe rendering of a secret (last four characters only)."""
    return "***" + value[-4:] if value else ""


def check_environment() -> Dict:
    """
    Report which credentials are configured.

    Values are masked; only the last four characters are ever shown.

    Returns:
        Dict with all_required, checks, missing_required and warnings
    """
    checks = []
    missing_required = []
    warnings = []

    for variable, required, description in ENVIRONMENT_VARIABLES:
        value = os.environ.get(variable, "")
        present = bool(value and value.strip())

        checks.append({
            "variable": variable,
            "required": required,
            "description": description,
            "present": present,
            "value": mask_secret(value.strip()) if present else None,
        })

        if required and not present:
            missing_required.append(variable)
        if not required and not present:
            warnings.append(f"Optional variable {variable} is not set: {description}")

    return {
        "all_required": not missing_required,
        "checks": checks,
        "missing_required": missing_required,
        "warnings": warnings,
    }
