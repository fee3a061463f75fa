"""Unit tests for the in-memory sliding-window rate limiter."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter


def test_admits_first_thirty_and_denies_the_thirty_first() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=30, window_seconds=60, clock=clock)

    decisions = []
    for i in range(35):
        clock.return_value = 1000.0 + i * 0.5
        decisions.append(limiter.allow("203.0.113.5"))

    assert decisions[:30] == [True] * 30
    assert decisions[30:] == [False] * 5


def test_allows_up_to_limit_and_reports_remaining() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    assert limiter.consume("k").remaining == 2
    assert limiter.consume("k").remaining == 1
    result = limiter.consume("k")
    assert result.allowed is True
    assert result.remaining == 0
    assert result.retry_after_seconds is None


def test_blocked_result_carries_retry_metadata() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    limiter.consume("k")
    clock.return_value = 1010.0
    limiter.consume("k")

    clock.return_value = 1020.0
    blocked = limiter.consume("k")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    # Oldest admission (t=1000) leaves the window at t=1060.
    assert blocked.reset_at == 1060
    assert blocked.retry_after_seconds == 40


def test_denied_requests_are_not_recorded() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=10, clock=clock)

    assert limiter.allow("k") is True
    for offset in range(1, 10):
        clock.return_value = 1000.0 + offset
        assert limiter.allow("k") is False

    # Only the admitted request counts, so the key frees up 10s after it.
    clock.return_value = 1010.0
    assert limiter.allow("k") is True
    assert limiter.stats()["recorded_admissions"] == 1


def test_window_slides_instead_of_resetting() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

    for t in (1000.0, 1020.0, 1040.0):
        clock.return_value = t
        assert limiter.allow("k") is True

    clock.return_value = 1059.9
    assert limiter.allow("k") is False

    # Only the t=1000 entry expired: one new admission brings the count back to the limit.
    clock.return_value = 1060.0
    assert limiter.allow("k") is True
    assert limiter.allow("k") is False

    clock.return_value = 1080.0
    assert limiter.allow("k") is True
    assert limiter.allow("k") is False


def test_entry_expires_exactly_at_window_length() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.allow("k") is True
    clock.return_value = 1059.999
    assert limiter.allow("k") is False
    clock.return_value = 1060.0
    assert limiter.allow("k") is True


def test_isolated_by_key() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.allow("k1") is True
    assert limiter.allow("k1") is False

    assert limiter.allow("k2") is True


def test_empty_key_is_its_own_bucket() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=1, window_seconds=60, clock=clock)

    assert limiter.allow("") is True
    assert limiter.allow("") is False
    assert limiter.allow("198.51.100.7") is True


def test_idle_keys_are_kept_until_evicted() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)

    limiter.allow("old")
    clock.return_value = 1030.0
    limiter.allow("recent")

    clock.return_value = 1070.0
    assert limiter.stats()["tracked_keys"] == 2

    assert limiter.evict_idle_keys() == 1
    stats = limiter.stats()
    assert stats["tracked_keys"] == 1
    assert stats["recorded_admissions"] == 1


def test_auto_eviction_drops_idle_keys_on_decision() -> None:
    clock = Mock(return_value=1000.0)
    limiter = InMemorySlidingWindowRateLimiter(
        limit=2, window_seconds=60, clock=clock, evict_idle_keys=True
    )

    limiter.allow("a")
    limiter.allow("b")
    clock.return_value = 1100.0
    limiter.allow("c")

    assert limiter.stats()["tracked_keys"] == 1


def test_concurrent_calls_never_exceed_limit() -> None:
    limiter = InMemorySlidingWindowRateLimiter(limit=30, window_seconds=60)
    barrier = threading.Barrier(16)
    admitted: list[bool] = []
    admitted_lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        local = [limiter.allow("shared") for _ in range(10)]
        with admitted_lock:
            admitted.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(admitted) == 160
    assert admitted.count(True) == 30
    assert limiter.stats()["recorded_admissions"] == 30


@pytest.mark.parametrize(
    "kwargs",
    [
        {"limit": 0, "window_seconds": 60},
        {"limit": 1, "window_seconds": 0},
        {"limit": 1, "window_seconds": -5},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemorySlidingWindowRateLimiter(**kwargs)
