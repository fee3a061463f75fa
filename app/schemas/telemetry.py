"""Pydantic schemas for device telemetry submissions and acknowledgements."""

from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Paired escapes are already combined by the JSON decoder, so any surrogate
# code point left in a decoded string is unpaired.
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


class TelemetryRecord(BaseModel):
    """Flat, best-effort description of a browser/device environment.

    Every field is an optional string; missing fields and JSON ``null`` become
    empty strings and unknown fields are ignored. ``timestamp`` and
    ``ip_address`` are assigned by the server and overwrite client values.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        strict=True,
    )

    timestamp: str = ""
    ip_address: str = ""

    # Browser
    user_agent: str = ""
    platform: str = ""
    language: str = ""
    vendor: str = ""
    product: str = ""
    browser_version: str = ""
    os_version: str = ""
    device_type: str = ""
    referrer_policy: str = ""
    https_support: str = ""

    # Display
    screen: str = ""
    available_screen: str = ""
    viewport_size: str = ""
    color_depth: str = ""
    pixel_ratio: str = ""

    # System
    timezone: str = ""
    cpu_cores: str = ""
    device_memory: str = ""
    hardware_concurrency: str = ""

    # Network
    connection: str = ""
    online_status: str = ""

    # Hardware features
    touch_support: str = ""
    max_touch_points: str = ""
    battery: str = ""
    vibration: str = ""
    device_orientation: str = ""
    accelerometer: str = ""
    gyroscope: str = ""
    magnetometer: str = ""
    gamepad_api: str = Field("", alias="gamepadAPI")
    vr_display: str = ""
    bluetooth: str = ""
    usb: str = ""

    # Graphics and media
    webgl: str = ""
    canvas: str = ""
    audio_context: str = ""
    media_devices: str = ""
    webrtc: str = ""
    pdf_viewer: str = ""
    css_features: str = ""
    font_list: str = ""
    plugins: str = ""
    mime_types: str = ""

    # Storage and APIs
    local_storage: str = ""
    session_storage: str = ""
    indexed_db: str = Field("", alias="indexedDB")
    service_worker: str = ""
    web_assembly: str = ""
    clipboard: str = ""
    share: str = ""
    payment_request: str = ""
    notifications: str = ""

    # Permissions and privacy
    cookies_enabled: str = ""
    java_enabled: str = ""
    do_not_track: str = ""
    geolocation: str = ""
    location_details: str = ""

    # Fingerprint digests computed by the page
    canvas_fingerprint: str = ""
    webgl_fingerprint: str = ""
    font_fingerprint: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _normalize_value(cls, value: Any) -> Any:
        """Map ``null`` to ``""`` and unpaired surrogates to U+FFFD."""
        if value is None:
            return ""
        if isinstance(value, str):
            return _LONE_SURROGATE.sub("\ufffd", value)
        return value


class CollectResponse(BaseModel):
    """Acknowledgement returned for an accepted submission."""

    status: Literal["success"] = "success"
    message: str = Field(
        "Device info collected",
        description="Human-readable outcome.",
    )
    data: TelemetryRecord = Field(
        ..., description="The finalized record, with server-assigned fields."
    )


class FingerprintRequest(BaseModel):
    """Raw probe signal to reduce."""

    signal: str = Field(
        ...,
        description="Any string: a canvas data URL, joined WebGL parameters, a font list...",
    )


class FingerprintResponse(BaseModel):
    """Digest of a raw probe signal."""

    digest: str = Field(
        ..., description="Lowercase hexadecimal digest; '0' for an empty signal."
    )
