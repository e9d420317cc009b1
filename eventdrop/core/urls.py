"""Gate for externally supplied URLs.

Nothing here touches the network: hosts are judged on their literal form so
the check can run before any fetch is attempted. Callers that follow
redirects must run every hop through :func:`validate_external_url` again.
"""

from __future__ import annotations

import ipaddress
from urllib.parse import urlparse

from eventdrop.core.errors import ForbiddenHost, InvalidUrl

ALLOWED_SCHEMES = {"http", "https"}
MAX_URL_LENGTH = 1000

BLOCKED_HOSTNAMES = {
    "localhost",
    "metadata",
    "metadata.google.internal",
    "instance-data",
}

BLOCKED_SUFFIXES = (
    ".localhost",
    ".internal",
    ".local",
    ".localdomain",
    ".home.arpa",
    ".lan",
    ".corp",
    ".intranet",
)


def validate_external_url(url: str) -> str:
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrl("URL is required")

    cleaned = url.strip()
    if len(cleaned) > MAX_URL_LENGTH:
        raise InvalidUrl("URL is too long")
    try:
        parsed = urlparse(cleaned)
        hostname = parsed.hostname
        # accessing .port validates the netloc's port component
        parsed.port
    except ValueError as exc:
        raise InvalidUrl(f"Invalid URL: {exc}") from exc

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrl("Only http and https URLs are allowed")
    if not hostname:
        raise InvalidUrl("URL has no host")

    if is_forbidden_host(hostname):
        raise ForbiddenHost(f"Host is not allowed: {hostname}")

    return cleaned


def is_forbidden_host(hostname: str) -> bool:
    host = hostname.strip().lower().rstrip(".")
    if not host:
        return True

    if host in BLOCKED_HOSTNAMES or host.endswith(BLOCKED_SUFFIXES):
        return True

    address = _as_ip_address(host)
    if address is None:
        return False
    return _is_internal_address(address)


def extract_domain(url: str) -> str:
    parsed = urlparse(url if "://" in url else f"https://{url}")
    return parsed.netloc.lower()


def _as_ip_address(host: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    candidate = host.strip("[]")
    try:
        return ipaddress.ip_address(candidate)
    except ValueError:
        pass

    # Legacy IPv4 spellings ("2130706433", "0x7f.0.0.1") still resolve to
    # loopback in most resolvers.
    try:
        packed = _parse_legacy_ipv4(candidate)
    except ValueError:
        return None
    return ipaddress.IPv4Address(packed)


def _parse_legacy_ipv4(host: str) -> int:
    parts = host.split(".")
    if not 1 <= len(parts) <= 4:
        raise ValueError(host)
    numbers = [int(part, 0) if part.lower().startswith("0x") else _parse_octal_or_decimal(part) for part in parts]
    value = 0
    for index, number in enumerate(numbers[:-1]):
        if not 0 <= number <= 255:
            raise ValueError(host)
        value |= number << (8 * (3 - index))
    last = numbers[-1]
    if not 0 <= last < 2 ** (8 * (5 - len(numbers))):
        raise ValueError(host)
    return value | last


def _parse_octal_or_decimal(part: str) -> int:
    if not part or not part.isdigit():
        raise ValueError(part)
    if len(part) > 1 and part.startswith("0"):
        return int(part, 8)
    return int(part)


def _is_internal_address(address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    if isinstance(address, ipaddress.IPv6Address):
        mapped = address.ipv4_mapped or address.sixtofour
        if mapped is not None:
            return _is_internal_address(mapped)
    return (
        address.is_loopback
        or address.is_private
        or address.is_link_local
        or address.is_unspecified
        or address.is_reserved
        or address.is_multicast
        or not address.is_global
    )
