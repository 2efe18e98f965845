"""Error taxonomy shared by the queue, fetch and cache layers."""

from __future__ import annotations


class LinkWatchError(Exception):
    """Base class for linkwatch errors."""


class InvalidURL(LinkWatchError, ValueError):
    """Target is not an absolute http(s) URL."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid target URL: {url!r}")
        self.url = url


class TransportError(LinkWatchError):
    """Request failed before an HTTP status could be obtained."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Transport failure for {url}: {reason}")
        self.url = url
        self.reason = reason


class HTTPFailureStatus(LinkWatchError):
    """A resolved entry carries a 4xx/5xx status or the error sentinel."""

    def __init__(self, url: str, status: int | str) -> None:
        super().__init__(f"{url} resolved to {status}")
        self.url = url
        self.status = status


class StorageError(LinkWatchError):
    """Cache backend is unavailable or rejected the operation."""


__all__ = [
    "HTTPFailureStatus",
    "InvalidURL",
    "LinkWatchError",
    "StorageError",
    "TransportError",
]
