"""
HTTP request helpers.

Usage:
    from core.helpers import get_client_ip

    ip = get_client_ip(request)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address

if TYPE_CHECKING:
    from django.http import HttpRequest


def get_client_ip(request: HttpRequest) -> str | None:
    """
    Extract client IP from request, handling proxies.

    Checks X-Forwarded-For header for proxy chains and takes the first
    address (the original client).

    Returns:
        Client IP address, or None if missing or not a valid IPv4/IPv6
        address
    """
    x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
    if x_forwarded_for:
        ip = x_forwarded_for.split(",")[0].strip()
    else:
        ip = request.META.get("REMOTE_ADDR", "")

    try:
        validate_ipv46_address(ip)
    except ValidationError:
        return None
    return ip


__all__ = [
    "get_client_ip",
]
