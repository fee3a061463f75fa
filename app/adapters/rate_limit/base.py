"""Rate limiter interfaces.

The HTTP layer depends on this abstraction (not the concrete implementation)
so the admission decision stays independent of how request history is stored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of an admission decision.

    Attributes:
        allowed: Whether the request was admitted (and recorded).
        limit: Max admissions per window.
        remaining: Admissions still available in the trailing window.
        reset_at: UNIX epoch seconds when the oldest counted admission expires.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for per-key admission controllers."""

    @abstractmethod
    def consume(self, key: str) -> RateLimitResult:
        """Decide admission for ``key`` and record it when admitted.

        Args:
            key: Client identifier; any string, including the empty string.

        Returns:
            RateLimitResult describing the decision.
        """
        raise NotImplementedError

    def allow(self, key: str) -> bool:
        """Return True and record the admission, or False without recording."""
        return self.consume(key).allowed

    @abstractmethod
    def stats(self) -> dict[str, int | float]:
        """Return configuration and size counters, never the keys themselves."""
        raise NotImplementedError
