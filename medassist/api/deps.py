"""
Shared route helpers.
"""
from fastapi import Request, Response

from medassist.core.exceptions import RateLimitExceeded
from medassist.core.rate_limiter import get_rate_limiter


def client_identifier(request: Request, session_id: str = "") -> str:
    """Rate limit key: the session when known, else the client IP."""
    if session_id:
        return session_id
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(identifier: str, response: Response) -> None:
    """
    Record one request and set the X-RateLimit-* headers.

    Raises:
        RateLimitExceeded: If the identifier has used up its window
    """
    rate_limiter = get_rate_limiter()
    is_allowed, remaining = rate_limiter.is_allowed(identifier)

    response.headers["X-RateLimit-Limit"] = str(rate_limiter.limit)
    response.headers["X-RateLimit-Remaining"] = str(remaining)

    if not is_allowed:
        raise RateLimitExceeded(retry_after=rate_limiter.retry_after(identifier))
