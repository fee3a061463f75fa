"""Rate limiting adapters.

This package keeps the admission decision behind a small interface so the
HTTP layer never touches the per-client request log directly.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemorySlidingWindowRateLimiter", "RateLimitResult"]
