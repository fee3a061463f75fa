"""In-memory sliding-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the whole request log, so the
  prune-check-append sequence for a key is one critical section.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections import deque
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


class InMemorySlidingWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting admissions in a trailing window per key.

    Each key owns a deque of admission timestamps in chronological order.
    Before every decision the entries that fell out of the window are dropped;
    the request is admitted only while fewer than ``limit`` entries remain.
    A denied request is not recorded, so it never extends the wait.

    Keys are created lazily and kept after their history empties out unless
    ``evict_idle_keys`` is enabled or ``evict_idle_keys()`` is called.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
        evict_idle_keys: bool = False,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of admissions per trailing window.
            window_seconds: Length of the sliding window in seconds.
            clock: Time source function returning UNIX time in seconds.
            evict_idle_keys: Sweep keys with an empty history on every decision.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._auto_evict = evict_idle_keys
        self._lock = threading.Lock()
        self._requests: dict[str, deque[float]] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _prune_locked(self, history: deque[float], now: float) -> None:
        while history and now - history[0] >= self._window_seconds:
            history.popleft()

    def _evict_idle_locked(self, now: float) -> int:
        idle = []
        for key, history in self._requests.items():
            self._prune_locked(history, now)
            if not history:
                idle.append(key)
        for key in idle:
            del self._requests[key]
        return len(idle)

    def consume(self, key: str) -> RateLimitResult:
        """Decide admission for ``key``, recording the timestamp when admitted.

        Args:
            key: Client identifier. An empty string is its own bucket.

        Returns:
            RateLimitResult with the decision and window metadata.
        """
        with self._lock:
            now = self._clock()
            history = self._requests.get(key)
            if history is None:
                history = self._requests[key] = deque()

            self._prune_locked(history, now)

            allowed = len(history) < self._limit
            if allowed:
                history.append(now)

            remaining = self._limit - len(history)
            oldest = history[0] if history else now
            reset_at = oldest + self._window_seconds

            if self._auto_evict:
                self._evict_idle_locked(now)

        if allowed:
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=remaining,
                reset_at=int(math.ceil(reset_at)),
                retry_after_seconds=None,
            )

        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=int(math.ceil(reset_at)),
            retry_after_seconds=max(0, int(math.ceil(reset_at - now))),
        )

    def evict_idle_keys(self) -> int:
        """Remove keys whose history is empty after pruning.

        Returns:
            Number of keys removed.
        """
        with self._lock:
            evicted = self._evict_idle_locked(self._clock())

        if evicted:
            logger.debug(
                "rate_limit.evicted_idle_keys",
                extra={"evicted": evicted},
            )
        return evicted

    def stats(self) -> dict[str, int | float]:
        """Return limiter configuration and size without exposing keys."""

        with self._lock:
            return {
                "limit": self._limit,
                "window_seconds": self._window_seconds,
                "tracked_keys": len(self._requests),
                "recorded_admissions": sum(len(h) for h in self._requests.values()),
            }
