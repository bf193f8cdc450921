"""Header extraction, canonicalization and sanitizing."""

from collections.abc import Iterable

import httpx


SANITIZED_OUTPUT = "████████████████████"

# Credentials are masked in these headers unless sanitizing is disabled
AUTHORIZATION_HEADERS = {"authorization", "proxy-authorization"}


def canonical_header_key(key: str) -> str:
    """Convert a header name to canonical MIME form.

    ``content-type`` becomes ``Content-Type`` and ``x-api-key`` becomes
    ``X-Api-Key``.
    """
    return "-".join(word.capitalize() for word in key.strip().split("-"))


def group_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    """Group header values by canonical key, preserving value order."""
    grouped: dict[str, list[str]] = {}
    for key, value in headers.multi_items():
        grouped.setdefault(canonical_header_key(key), []).append(value)
    return grouped


def sanitize_authorization(value: str) -> str:
    """Keep the auth scheme, mask the credentials."""
    scheme, sep, credentials = value.strip().partition(" ")
    if not sep or not credentials:
        return SANITIZED_OUTPUT
    return f"{scheme} {SANITIZED_OUTPUT}"


def sanitize_cookie(value: str) -> str:
    """Keep cookie names, mask their values."""
    cookies = []
    for pair in value.split(";"):
        pair = pair.strip()
        if not pair:
            continue
        name, sep, _ = pair.partition("=")
        cookies.append(f"{name}={SANITIZED_OUTPUT}" if sep else pair)
    return "; ".join(cookies)


def sanitize_set_cookie(value: str) -> str:
    """Mask the cookie value, keep its attributes."""
    cookie, sep, attributes = value.partition(";")
    name, eq, _ = cookie.partition("=")
    masked = f"{name.strip()}={SANITIZED_OUTPUT}" if eq else cookie.strip()
    if sep:
        return f"{masked};{attributes}"
    return masked


def sanitize_header(key: str, value: str) -> str:
    """Mask credentials carried by well-known headers."""
    lower_key = key.lower()
    if lower_key in AUTHORIZATION_HEADERS:
        return sanitize_authorization(value)
    if lower_key == "cookie":
        return sanitize_cookie(value)
    if lower_key == "set-cookie":
        return sanitize_set_cookie(value)
    return value


def printable_headers(
    headers: httpx.Headers,
    skip: Iterable[str] = (),
    sanitize: bool = True,
    exclude: Iterable[str] = (),
) -> list[tuple[str, str]]:
    """Flatten headers into sorted ``(Key, value)`` pairs ready to print.

    Args:
        headers: Headers of the request or response
        skip: Lowercased header names configured to be never printed
        sanitize: Whether to mask credentials
        exclude: Lowercased header names already printed by the caller
    """
    hidden = {name.lower() for name in skip} | {name.lower() for name in exclude}
    lines = []
    for key, values in sorted(group_headers(headers).items()):
        if key.lower() in hidden:
            continue
        for value in values:
            lines.append((key, sanitize_header(key, value) if sanitize else value))
    return lines
