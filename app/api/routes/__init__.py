from __future__ import annotations

from app.api.routes.collect import router as collect_router
from app.api.routes.fingerprint import router as fingerprint_router
from app.api.routes.health import router as health_router

__all__ = ["collect_router", "fingerprint_router", "health_router"]
