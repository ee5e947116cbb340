"""
Custom Exceptions - Application-specific error classes.

Each exception carries an HTTP status code and a machine-readable error
code. The API layer turns them into JSON error bodies; the agent layer
catches provider failures itself and answers with a localized apology.
"""
from typing import Optional


class AssistantException(Exception):
    """
    Base exception for all assistant errors.

    Subclass this for specific error types.
    """
    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        """Convert to error response dict."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details
        }


class RateLimitExceeded(AssistantException):
    """Raised when a client exceeds the rate limit."""
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60):
        super().__init__(
            message=f"Rate limit exceeded. Please wait {retry_after} seconds.",
            details=f"retry_after={retry_after}"
        )
        self.retry_after = retry_after


class ValidationError(AssistantException):
    """Raised when input validation fails."""
    status_code = 400
    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details=f"field={field}" if field else None)
        self.field = field


class ImageValidationError(ValidationError):
    """Raised when an uploaded image is malformed or too large."""
    error_code = "invalid_image"

    def __init__(self, message: str = "Invalid image data URI format."):
        super().__init__(message, field="image_data_uri")


class LLMError(AssistantException):
    """Raised when every configured LLM provider fails."""
    status_code = 503
    error_code = "llm_error"

    def __init__(self, message: str = "LLM service unavailable"):
        super().__init__(message)


class TranscriptionError(AssistantException):
    """Raised when audio cannot be transcribed."""
    status_code = 502
    error_code = "transcription_error"

    def __init__(
        self,
        message: str = "Failed to transcribe audio. Please ensure the audio format is correct and try again."
    ):
        super().__init__(message)


class DatabaseError(AssistantException):
    """Raised when chat history storage fails."""
    status_code = 503
    error_code = "database_error"

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class SessionNotFoundError(AssistantException):
    """Raised when a session is not found."""
    status_code = 404
    error_code = "session_not_found"

    def __init__(self, session_id: str):
        super().__init__(
            message=f"Session not found: {session_id[:8]}...",
            details=f"session_id={session_id}"
        )
