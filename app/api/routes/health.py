from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings
from app.core.rate_limit import get_rate_limiter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Not subject to admission control. Reports whether rate limiting is on
    and how many clients the limiter currently tracks.

    Returns:
        dict: ``status`` set to "ok" plus a ``rate_limit`` summary.
    """

    rate_limit: dict = {"enabled": settings.app.rate_limit_enabled}
    if settings.app.rate_limit_enabled:
        rate_limit.update(get_rate_limiter().stats())

    return {"status": "ok", "rate_limit": rate_limit}
