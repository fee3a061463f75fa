from __future__ import annotations

"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests and the server entry point build the same application.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import collect_router, fingerprint_router, health_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations


def _parse_origins(origins: str) -> list[str]:
    return [origin.strip() for origin in origins.split(",") if origin.strip()]


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Device Telemetry API",
        description=(
            "Accepts browser/device telemetry submissions, stamps them with "
            "server time and the resolved client address, and echoes them back. "
            "Submissions are admitted per client through a sliding-window rate "
            "limit; probe signals can be reduced to the same short digests the "
            "collection page computes."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
    )

    # Middleware (last added runs first: CORS answers preflights before routing)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_parse_origins(settings.app.cors_allow_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(collect_router)
    app.include_router(fingerprint_router)
    app.include_router(health_router)

    # OpenAPI customizations (tags, 429 responses)
    apply_openapi_customizations(app)

    return app
