"""Match HTTP responses back to their queue entries and notify listeners."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable

import httpx
import structlog

from ..infra.cache_store import QueueEntry
from ..logging_conf import component_logger
from .queue import QueueManager


@dataclass(slots=True)
class ResponseEvent:
    """A usable response for a pending entry ("http-response")."""

    entry: QueueEntry
    url: str
    status_code: int
    body: str


@dataclass(slots=True)
class ErrorEvent:
    """A transport failure or an unusable response ("http-error")."""

    entry: QueueEntry
    url: str
    status_code: int | None
    error: Exception | None = None


ResponseListener = Callable[[ResponseEvent], None]
ErrorListener = Callable[[ErrorEvent], None]


class ResponseCorrelator:
    """Pure dispatch layer: looks entries up by URL hash, never writes them."""

    def __init__(self, queue: QueueManager, logger: structlog.BoundLogger | None = None) -> None:
        self.queue = queue
        self.logger = logger or component_logger("correlator")
        self._response_listeners: list[ResponseListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._lock = Lock()

    def on_response(self, listener: ResponseListener) -> None:
        with self._lock:
            self._response_listeners.append(listener)

    def on_error(self, listener: ErrorListener) -> None:
        with self._lock:
            self._error_listeners.append(listener)

    def process(self, url: str, response: Any = None, error: Exception | None = None) -> Any:
        """Dispatch for ``url`` when it belongs to a pending entry; always returns ``response``."""

        entry = self.queue.get_entry(url)
        if entry is None or not entry.is_pending:
            return response

        status_code = getattr(response, "status_code", None) if response is not None else None
        body = _response_text(response) if response is not None else ""
        if error is not None or not status_code or not body:
            self.logger.info(
                "http_error_correlated",
                key=entry.id,
                url=url,
                status=status_code,
                error=str(error) if error else None,
            )
            event = ErrorEvent(entry=entry, url=url, status_code=status_code or None, error=error)
            for listener in self._snapshot(self._error_listeners):
                listener(event)
        else:
            self.logger.debug("http_response_correlated", key=entry.id, url=url, status=status_code)
            response_event = ResponseEvent(entry=entry, url=url, status_code=int(status_code), body=body)
            for listener in self._snapshot(self._response_listeners):
                listener(response_event)
        return response

    def response_hook(self, response: httpx.Response) -> None:
        """httpx ``event_hooks["response"]`` entry point for other clients in the process."""

        if response.is_redirect:
            return
        response.read()
        self.process(str(response.request.url), response)

    def _snapshot(self, listeners: list) -> list:
        with self._lock:
            return list(listeners)


def _response_text(response: Any) -> str:
    try:
        return response.text or ""
    except (httpx.ResponseNotRead, UnicodeDecodeError):
        return ""


__all__ = ["ErrorEvent", "ErrorListener", "ResponseCorrelator", "ResponseEvent", "ResponseListener"]
