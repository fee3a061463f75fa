"""Resolve the client identifier used to bucket admission decisions.

The identifier is not authenticated; it only decides which request history a
submission is counted against.
"""

from __future__ import annotations

from typing import Mapping

from fastapi import Request

from app.core.config import settings

FORWARDED_FOR_HEADER = "X-Forwarded-For"
REAL_IP_HEADER = "X-Real-IP"


def strip_port(address: str) -> str:
    """Remove the port from a ``host:port`` or ``[v6]:port`` peer address.

    Addresses that are not in host:port form (a bare IPv6 address, a name
    without a port) are returned unchanged.

    Examples:
        >>> strip_port("203.0.113.5:51234")
        '203.0.113.5'
        >>> strip_port("[2001:db8::1]:443")
        '2001:db8::1'
        >>> strip_port("2001:db8::1")
        '2001:db8::1'
    """
    if address.startswith("["):
        host, sep, rest = address[1:].partition("]")
        if sep and (not rest or (rest.startswith(":") and rest[1:].isdigit())):
            return host
        return address

    host, sep, port = address.rpartition(":")
    if sep and host and ":" not in host and port.isdigit():
        return host
    return address


def resolve_client_key(
    headers: Mapping[str, str],
    peer: str | None,
    *,
    trust_proxy_headers: bool = True,
) -> str:
    """Pick the client identifier from proxy headers or the peer address.

    Order: first entry of ``X-Forwarded-For``, then ``X-Real-IP``, then the
    transport peer with its port stripped. Header lookups go through the
    mapping as given, so pass a case-insensitive mapping for HTTP headers.

    Args:
        headers: Request headers.
        peer: Transport peer address, optionally with a port.
        trust_proxy_headers: Ignore both proxy headers when False.

    Returns:
        The resolved key; an empty string when nothing identifies the client.
    """
    if trust_proxy_headers:
        forwarded_for = headers.get(FORWARDED_FOR_HEADER)
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = headers.get(REAL_IP_HEADER)
        if real_ip:
            return real_ip.strip()

    if not peer:
        return ""
    return strip_port(peer)


def client_key_from_request(request: Request) -> str:
    """Resolve the client key of a FastAPI request using global settings."""
    peer = request.client.host if request.client else None
    return resolve_client_key(
        request.headers,
        peer,
        trust_proxy_headers=settings.app.trust_proxy_headers,
    )
