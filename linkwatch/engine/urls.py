"""URL validation, normalisation and cache-key derivation."""

from __future__ import annotations

import hashlib
from urllib.parse import urlsplit, urlunsplit

import httpx

from ..exceptions import InvalidURL

QUEUE_KEY_PREFIX = "linkwatch_queue_"
ALLOWED_SCHEMES = ("http", "https")


def normalize_url(url: str) -> str:
    """Lowercase scheme and host, then encode the rest the way httpx sends it.

    Keys built from the stored URL must match keys built from
    ``response.request.url``, so non-ASCII paths and queries are
    percent-encoded here too.
    """

    text = url.strip()
    try:
        parts = urlsplit(text)
    except ValueError:
        return text
    lowered = urlunsplit(
        (parts.scheme.lower(), parts.netloc.lower(), parts.path, parts.query, parts.fragment)
    )
    try:
        return str(httpx.URL(lowered))
    except httpx.InvalidURL:
        return lowered


def is_valid_url(url: str | None) -> bool:
    if not url or not isinstance(url, str):
        return False
    text = url.strip()
    if not text or any(ch.isspace() for ch in text):
        return False
    try:
        parts = urlsplit(text)
        hostname = parts.hostname
        parts.port  # noqa: B018 - raises on a malformed port
    except ValueError:
        return False
    return parts.scheme.lower() in ALLOWED_SCHEMES and bool(hostname)


def ensure_valid_url(url: str | None) -> str:
    if not is_valid_url(url):
        raise InvalidURL(str(url))
    return normalize_url(url)  # type: ignore[arg-type]


def url_key(url: str) -> str:
    """Stable cache key for a target URL."""

    digest = hashlib.md5(normalize_url(url).encode("utf-8")).hexdigest()
    return f"{QUEUE_KEY_PREFIX}{digest}"


__all__ = [
    "ALLOWED_SCHEMES",
    "QUEUE_KEY_PREFIX",
    "ensure_valid_url",
    "is_valid_url",
    "normalize_url",
    "url_key",
]
