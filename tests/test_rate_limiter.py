"""
Sliding window rate limiter tests.
"""
from types import SimpleNamespace

import pytest

from medassist.core import rate_limiter as rate_limiter_module
from medassist.core.exceptions import RateLimitExceeded
from medassist.core.rate_limiter import RateLimiter, get_rate_limiter


@pytest.fixture
def clock(monkeypatch):
    now = {"value": 1000.0}
    monkeypatch.setattr(rate_limiter_module, "time", SimpleNamespace(monotonic=lambda: now["value"]))
    return now


def test_allows_up_to_limit(clock):
    limiter = RateLimiter(requests_per_minute=2)

    assert limiter.is_allowed("session-a") == (True, 1)
    assert limiter.is_allowed("session-a") == (True, 0)
    assert limiter.is_allowed("session-a") == (False, 0)
    assert limiter.is_allowed("session-b") == (True, 1)


def test_window_slides(clock):
    limiter = RateLimiter(requests_per_minute=1, window_seconds=60)
    limiter.is_allowed("s")

    clock["value"] += 30
    assert limiter.is_allowed("s")[0] is False
    assert limiter.retry_after("s") == 30

    clock["value"] += 31
    assert limiter.is_allowed("s") == (True, 0)


def test_check_raises_with_retry_after(clock):
    limiter = RateLimiter(requests_per_minute=1)
    assert limiter.check("s") == 0

    with pytest.raises(RateLimitExceeded) as exc_info:
        limiter.check("s")

    assert exc_info.value.retry_after == 60
    assert exc_info.value.status_code == 429


def test_get_remaining_and_reset(clock):
    limiter = RateLimiter(requests_per_minute=3)
    limiter.is_allowed("s")

    assert limiter.get_remaining("s") == 2
    limiter.reset("s")
    assert limiter.get_remaining("s") == 3
    assert limiter.retry_after("unknown") == 1


def test_global_limiter_uses_settings(settings):
    assert get_rate_limiter().limit == settings.rate_limit_per_minute
    assert get_rate_limiter() is get_rate_limiter()


def test_expired_identifiers_are_evicted(clock):
    limiter = RateLimiter(requests_per_minute=5, window_seconds=60)
    for i in range(100):
        limiter.is_allowed(f"session-{i}")
    assert limiter.tracked_identifiers() == 100

    clock["value"] += 61
    limiter.is_allowed("fresh")

    assert limiter.tracked_identifiers() == 1


def test_read_only_calls_do_not_track_identifiers(clock):
    limiter = RateLimiter(requests_per_minute=2)

    assert limiter.get_remaining("never-seen") == 2
    assert limiter.retry_after("never-seen") == 1
    assert limiter.tracked_identifiers() == 0
