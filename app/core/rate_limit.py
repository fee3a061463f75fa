"""Admission control dependency for FastAPI routes.

This module wires the sliding-window limiter into the HTTP layer.

Strategy:
- One process-wide limiter; request history never leaves it.
- Bucketed by the resolved client key (proxy headers, then peer address).
- Admission runs before the request body is decoded, so malformed payloads
  still count against the client.
"""

from __future__ import annotations

import logging
import threading

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.core.client_key import client_key_from_request
from app.core.config import settings
from app.core.errors import RateLimitAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


_limiter: AbstractRateLimiter | None = None
_limiter_config: tuple[int, int, bool] | None = None
_limiter_lock = threading.Lock()


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    If configuration changes (primarily in tests), the limiter is rebuilt.

    Returns:
        AbstractRateLimiter: Configured limiter instance.
    """

    global _limiter, _limiter_config

    config = (
        settings.app.rate_limit_requests,
        settings.app.rate_limit_window_seconds,
        settings.app.rate_limit_evict_idle_keys,
    )

    with _limiter_lock:
        if _limiter is None or _limiter_config != config:
            _limiter = InMemorySlidingWindowRateLimiter(
                limit=config[0],
                window_seconds=config[1],
                evict_idle_keys=config[2],
            )
            _limiter_config = config
        return _limiter


def reset_rate_limiter() -> None:
    """Drop the cached limiter so the next request starts with empty history."""

    global _limiter, _limiter_config
    with _limiter_lock:
        _limiter = None
        _limiter_config = None


def _limit_headers(limit: int, remaining: int, reset_at: int, retry_after: int) -> dict[str, str]:
    return {
        "Retry-After": str(retry_after),
        "X-RateLimit-Limit": str(limit),
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(reset_at),
    }


async def enforce_admission(request: Request) -> str:
    """FastAPI dependency admitting or rejecting the current client.

    Args:
        request: FastAPI request.

    Returns:
        str: The resolved client key, for the route to stamp on the record.

    Raises:
        RateLimitAppError: When the client already used its budget in the
            trailing window. Nothing is recorded for the rejected request.
    """

    client_key = client_key_from_request(request)

    if not settings.app.rate_limit_enabled:
        return client_key

    result = get_rate_limiter().consume(client_key)
    key_hash = hash_identifier(client_key)

    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_s": settings.app.rate_limit_window_seconds,
            },
        )
        return client_key

    retry_after = result.retry_after_seconds or 0
    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_hash": key_hash,
            "limit": result.limit,
            "window_s": settings.app.rate_limit_window_seconds,
            "retry_after_s": retry_after,
            "path": request.url.path,
        },
    )

    headers: dict[str, str] = {}
    if settings.app.rate_limit_include_headers:
        headers = _limit_headers(result.limit, result.remaining, result.reset_at, retry_after)

    raise RateLimitAppError(
        code="rate_limit_exceeded",
        message="Too many requests, please try again later",
        details={
            "limit": result.limit,
            "retry_after": retry_after,
        },
        headers=headers,
    )
