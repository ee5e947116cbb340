"""
Rate Limiter - Control request frequency per client.

Every chat, pill-identification and transcription request ends in at
least one paid LLM call, so requests are throttled per session id
(or client IP when no session is supplied).

In-memory only; a multi-instance deployment needs a shared store.
"""
import math
import threading
import time
from collections import deque
from typing import Deque, Dict, Optional, Tuple

from medassist.core.exceptions import RateLimitExceeded
from medassist.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Sliding window rate limiter.

    Keeps a deque of request times per identifier; anything older than
    the window is dropped before each decision.

    Example:
        >>> limiter = RateLimiter(requests_per_minute=2)
        >>> limiter.is_allowed("session-123")
        (True, 1)
        >>> limiter.is_allowed("session-123")
        (True, 0)
        >>> limiter.is_allowed("session-123")
        (False, 0)
    """

    def __init__(self, requests_per_minute: int = 30, window_seconds: float = 60.0):
        """
        Initialize the rate limiter.

        Args:
            requests_per_minute: Maximum requests allowed per window
            window_seconds: Length of the sliding window
        """
        self.limit = requests_per_minute
        self.window = window_seconds

        self._requests: Dict[str, Deque[float]] = {}
        self._lock = threading.RLock()
        self._last_sweep = time.monotonic()

        logger.info(f"RateLimiter initialized: {requests_per_minute} requests/{int(window_seconds)}s")

    def is_allowed(self, identifier: str) -> Tuple[bool, int]:
        """
        Record a request if it fits in the window.

        Args:
            identifier: Session ID or IP address

        Returns:
            Tuple of (is_allowed, remaining_requests)
        """
        with self._lock:
            now = time.monotonic()
            if now - self._last_sweep >= self.window:
                self._sweep(now)

            history = self._prune(identifier, now)
            if len(history) >= self.limit:
                logger.warning(f"Rate limit exceeded for: {identifier[:8]}...")
                return False, 0

            history.append(now)
            self._requests[identifier] = history
            return True, self.limit - len(history)

    def check(self, identifier: str) -> int:
        """
        Like is_allowed, but raises instead of returning False.

        Returns:
            Remaining requests in the current window

        Raises:
            RateLimitExceeded: With the number of seconds until a slot frees up
        """
        allowed, remaining = self.is_allowed(identifier)
        if not allowed:
            raise RateLimitExceeded(retry_after=self.retry_after(identifier))
        return remaining

    def get_remaining(self, identifier: str) -> int:
        """Remaining requests for an identifier without recording one."""
        with self._lock:
            return max(0, self.limit - len(self._prune(identifier, time.monotonic())))

    def retry_after(self, identifier: str) -> int:
        """Whole seconds until the oldest request leaves the window (at least 1)."""
        with self._lock:
            history = self._requests.get(identifier)
            if not history:
                return 1
            wait = history[0] + self.window - time.monotonic()
            return max(1, math.ceil(wait))

    def reset(self, identifier: Optional[str] = None) -> None:
        """Forget one identifier, or everything when None."""
        with self._lock:
            if identifier is None:
                self._requests.clear()
            else:
                self._requests.pop(identifier, None)

    def tracked_identifiers(self) -> int:
        """Number of identifiers currently holding requests in memory."""
        with self._lock:
            return len(self._requests)

    def _prune(self, identifier: str, now: float) -> Deque[float]:
        """Drop expired times; an identifier left empty is removed from the map."""
        history = self._requests.get(identifier)
        if history is None:
            return deque()
        cutoff = now - self.window
        while history and history[0] <= cutoff:
            history.popleft()
        if not history:
            del self._requests[identifier]
        return history

    def _sweep(self, now: float) -> None:
        for identifier in list(self._requests):
            self._prune(identifier, now)
        self._last_sweep = now


# Global rate limiter instance
_rate_limiter: Optional[RateLimiter] = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the global rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        from medassist.core.config import get_settings
        _rate_limiter = RateLimiter(requests_per_minute=get_settings().rate_limit_per_minute)
    return _rate_limiter


def reset_rate_limiter() -> None:
    """Drop the global rate limiter (useful for testing)."""
    global _rate_limiter
    _rate_limiter = None
