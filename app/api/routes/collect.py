import json
import logging

from fastapi import APIRouter, Depends, Request

from app.core.errors import ValidationAppError
from app.core.rate_limit import enforce_admission
from app.schemas.telemetry import CollectResponse, TelemetryRecord
from app.services.collection_service import decode_record, finalize_record

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Telemetry"])


@router.post(
    "/collect",
    response_model=CollectResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "application/json": {
                    "schema": TelemetryRecord.model_json_schema(by_alias=True)
                }
            },
        }
    },
)
async def collect(
    request: Request,
    client_key: str = Depends(enforce_admission),
) -> CollectResponse:
    """Accept a device telemetry submission.

    The client is admitted first; only then is the body decoded, so a burst
    of malformed submissions is throttled like any other.

    Args:
        request: Incoming request carrying the JSON body.
        client_key: Resolved client identifier (from the admission dependency).

    Returns:
        CollectResponse: Acknowledgement echoing the finalized record.

    Raises:
        ValidationAppError: 400 if the body is not a JSON object of strings.
    """
    body = await request.body()
    try:
        payload = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning(
            "telemetry.malformed_payload",
            extra={"reason": "invalid_json", "body_bytes": len(body)},
        )
        raise ValidationAppError(
            code="malformed_input",
            message=f"Invalid JSON format: {exc}",
        ) from exc

    record = finalize_record(decode_record(payload), client_key)
    return CollectResponse(data=record)
