"""Telemetry collection service.

Turns a decoded JSON body into a finalized TelemetryRecord: the payload is
validated as a flat object of string fields, then stamped with server time
and the resolved client identifier.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from app.core.errors import ValidationAppError
from app.core.logging import hash_identifier
from app.schemas.telemetry import TelemetryRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_WIRE_NAMES = {
    (field.alias or to_camel(name)).lower(): field.alias or to_camel(name)
    for name, field in TelemetryRecord.model_fields.items()
}


def _fold_keys(payload: dict[str, Any]) -> dict[str, Any]:
    """Match keys to wire names case-insensitively; the last duplicate wins."""
    folded: dict[str, Any] = {}
    for key, value in payload.items():
        folded[_WIRE_NAMES.get(key.lower(), key)] = value
    return folded


def decode_record(payload: Any) -> TelemetryRecord:
    """Validate a decoded JSON value as a TelemetryRecord.

    Args:
        payload: Result of JSON decoding the request body. ``None`` (a JSON
            ``null`` body) decodes to an empty record. Keys match field names
            without regard to case, so ``"UserAgent"`` fills ``userAgent``.

    Returns:
        The record built from the payload's known fields.

    Raises:
        ValidationAppError: If the payload is not an object or a field value
            is not a string.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        logger.warning(
            "telemetry.malformed_payload",
            extra={"reason": "not_an_object", "payload_type": type(payload).__name__},
        )
        raise ValidationAppError(
            code="malformed_input",
            message="Invalid JSON format: expected an object",
        )

    try:
        return TelemetryRecord.model_validate(_fold_keys(payload))
    except ValidationError as exc:
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors(include_url=False, include_input=False)
        ]
        logger.warning(
            "telemetry.malformed_payload",
            extra={"reason": "invalid_field", "error_count": len(errors)},
        )
        raise ValidationAppError(
            code="malformed_input",
            message="Invalid JSON format: field values must be strings",
            details={"errors": errors},
        ) from exc


def finalize_record(
    record: TelemetryRecord,
    client_key: str,
    *,
    now: datetime | None = None,
) -> TelemetryRecord:
    """Stamp server-assigned fields onto a record.

    Args:
        record: Record decoded from the client payload.
        client_key: Resolved client identifier; overwrites ``ip_address``.
        now: Submission time; defaults to the server's local time.

    Returns:
        A new record with ``timestamp`` (``YYYY-MM-DD HH:MM:SS``) and
        ``ip_address`` set. The input record is left untouched.
    """
    collected_at = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    finalized = record.model_copy(
        update={"timestamp": collected_at, "ip_address": client_key}
    )

    logger.info(
        "telemetry.collected",
        extra={
            "collected_at": collected_at,
            "key_hash": hash_identifier(client_key),
            "user_agent": finalized.user_agent,
        },
    )
    return finalized
