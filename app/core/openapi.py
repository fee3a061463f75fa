"""OpenAPI metadata and customization utilities.

Adds tag descriptions and documents the admission-control response shared by
every rate-limited operation, keeping documentation concerns out of the app
factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

RATE_LIMITED_PATHS = ("/collect", "/fingerprint")

_TAGS = [
    {
        "name": "Telemetry",
        "description": "Device telemetry submission.",
    },
    {
        "name": "Fingerprint",
        "description": "Reduction of raw probe signals into short digests.",
    },
    {
        "name": "Health",
        "description": "Liveness checks.",
    },
]

_TOO_MANY_REQUESTS = {
    "description": "Client exceeded its admissions in the sliding window.",
    "headers": {
        "Retry-After": {"schema": {"type": "integer"}},
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {"schema": {"type": "integer"}},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and 429 responses."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in _TAGS:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        paths = schema.get("paths", {})
        for path in RATE_LIMITED_PATHS:
            for method_obj in paths.get(path, {}).values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {}).setdefault("429", _TOO_MANY_REQUESTS)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
