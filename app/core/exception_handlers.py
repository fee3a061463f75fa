"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain, framework and unexpected) and return consistent JSON responses with
proper HTTP status codes and traceability.

Design:
- AppError subclasses → appropriate HTTP status (400, 429)
- Request decoding errors → 400 malformed_input
- Routing errors (404, 405) → same envelope
- Unexpected Exception → generic 500 (safety net)
- All responses include request_id for distributed tracing
"""

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import AppError, RateLimitAppError
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    code: str,
    message: str,
    *,
    details: Any = None,
    headers: dict[str, str] | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Build the error envelope shared by every failure response.

    Args:
        status_code: HTTP status code.
        code: Machine-readable error code.
        message: Human-readable message.
        details: Optional structured context.
        headers: Optional extra response headers.
        request_id: Correlation id; defaults to the one in the request context.

    Returns:
        JSONResponse with ``status``, ``message`` and ``error`` keys.
    """
    error_content: dict[str, Any] = {
        "code": code,
        "request_id": request_id or get_request_id(),
    }
    if details:
        error_content["details"] = jsonable_encoder(details)

    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message, "error": error_content},
        headers=headers or None,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Routes domain errors to appropriate HTTP status codes:
    - ValidationAppError → 400 Bad Request (malformed payload)
    - RateLimitAppError → 429 Too Many Requests (admission denied)
    - any other AppError → 400

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = 400
    headers: dict[str, str] | None = None
    if isinstance(exc, RateLimitAppError):
        status_code = 429
        headers = exc.headers

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    return error_response(
        status_code,
        exc.code,
        exc.message,
        details=exc.details,
        headers=headers,
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Reject bodies FastAPI could not decode as malformed input (400)."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
    logger.warning(
        "request_validation_failed",
        extra={"request_path": request.url.path, "error_count": len(errors)},
    )
    return error_response(
        400,
        "malformed_input",
        "Invalid JSON format",
        details={"errors": errors},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors (404, 405...) in the shared envelope."""
    return error_response(
        exc.status_code,
        f"http_{exc.status_code}",
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Catches any exception not handled by specific handlers.
    Logs detailed information for debugging while returning generic message.
    Prevents information leakage (no stack traces to client).

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    request_id = get_request_id() or getattr(request.state, "request_id", None)
    headers = {settings.log.request_id_header: request_id} if request_id else None

    return error_response(
        500,
        "internal_server_error",
        "An unexpected error occurred. Please try again later.",
        headers=headers,
        request_id=request_id,
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Must be called during app initialization.
    Order matters: specific handlers registered before general fallback.

    Args:
        app: FastAPI application instance.

    Example:
        >>> from fastapi import FastAPI
        >>> from app.core.exception_handlers import setup_exception_handlers
        >>> app = FastAPI()
        >>> setup_exception_handlers(app)
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
