"""Client identifier resolution for rate limiting.

The identifier is taken from proxy headers only. This assumes a fronting
proxy overwrites ``X-Forwarded-For`` / ``X-Real-IP`` / ``CF-Connecting-IP``
before requests reach the service; when the service is exposed directly, a
client can set these headers itself to dodge its own bucket or to fill
someone else's.

Clients without any of the headers all share the ``"unknown"`` bucket, so
anonymous clients can throttle each other.
"""

from __future__ import annotations

from typing import Protocol

UNKNOWN_CLIENT = "unknown"

FORWARDED_FOR_HEADER = "x-forwarded-for"
REAL_IP_HEADER = "x-real-ip"
CF_CONNECTING_IP_HEADER = "cf-connecting-ip"


class HeaderSource(Protocol):
    """Anything that can look up a request header by name.

    Starlette's ``Headers`` (case-insensitive) and plain dicts keyed by
    lower-case names both satisfy it.
    """

    def get(self, key: str, default: None = None) -> str | None: ...


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def resolve_client_identifier(headers: HeaderSource) -> str:
    """Derive the rate limiting key for a request from its headers.

    Precedence: left-most ``X-Forwarded-For`` entry, then ``X-Real-IP``,
    then ``CF-Connecting-IP``, then ``"unknown"``.

    Args:
        headers: Request headers.

    Returns:
        Client identifier string, never empty.

    Examples:
        >>> resolve_client_identifier({"x-forwarded-for": "192.168.1.1, 10.0.0.1"})
        '192.168.1.1'
        >>> resolve_client_identifier({})
        'unknown'
    """

    forwarded = headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        first_hop = _clean(forwarded.split(",")[0])
        if first_hop:
            return first_hop

    for header_name in (REAL_IP_HEADER, CF_CONNECTING_IP_HEADER):
        value = _clean(headers.get(header_name))
        if value:
            return value

    return UNKNOWN_CLIENT
