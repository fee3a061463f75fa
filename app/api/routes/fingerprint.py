from fastapi import APIRouter, Depends

from app.core.rate_limit import enforce_admission
from app.schemas.telemetry import FingerprintRequest, FingerprintResponse
from app.utils.fingerprint import reduce_signal

router = APIRouter(tags=["Fingerprint"])


@router.post(
    "/fingerprint",
    response_model=FingerprintResponse,
    dependencies=[Depends(enforce_admission)],
)
async def fingerprint(body: FingerprintRequest) -> FingerprintResponse:
    """Reduce a raw probe signal to the digest the browser page would compute.

    Useful for checking a submitted ``canvasFingerprint``, ``webglFingerprint``
    or ``fontFingerprint`` against the raw signal it was derived from.
    """
    return FingerprintResponse(digest=reduce_signal(body.signal))
