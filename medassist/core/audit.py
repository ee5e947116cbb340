"""
Audit Middleware - Request/response logging for monitoring.

Logs one line per request with method, path, status, duration, client
and session. Request bodies are never logged: they carry health
questions and base64 images.
"""
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from medassist.core.logging_config import get_logger

logger = get_logger(__name__)

QUIET_PATHS = ("/health", "/health/ready")


class AuditMiddleware(BaseHTTPMiddleware):
    """Middleware for logging all requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log audit information."""
        start_time = time.perf_counter()

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        session = request.headers.get("X-Session-ID") or request.query_params.get("session_id") or ""
        if not session and path.startswith("/session/"):
            session = path[len("/session/"):].split("/", 1)[0]
        session = session[:8] or "-"

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"REQUEST FAILED: {method} {path} "
                f"client={client_ip} duration={duration:.3f}s error={e}"
            )
            raise

        duration = time.perf_counter() - start_time
        self._log_request(method, path, response.status_code, duration, client_ip, session)
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        return response

    def _log_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration: float,
        client_ip: str,
        session: str
    ) -> None:
        if path in QUIET_PATHS:
            logger.debug(f"HEALTH: {path} status={status_code} duration={duration:.3f}s")
            return

        if status_code >= 500:
            log_fn = logger.error
        elif status_code >= 400:
            log_fn = logger.warning
        else:
            log_fn = logger.info

        log_fn(
            f"REQUEST: {method} {path} "
            f"status={status_code} duration={duration:.3f}s "
            f"client={client_ip} session={session}"
        )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds hardening headers to every response.

    Cache-Control is set to no-store because answers may contain
    health details tied to a session.
    """

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "strict-origin-when-cross-origin",
        "Cache-Control": "no-store",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in self.HEADERS.items():
            response.headers.setdefault(header, value)
        return response
