"""Turn correlated responses into resolved, TTL-bounded cache entries."""

from __future__ import annotations

from threading import Lock
from typing import Callable

import structlog

from ..infra.cache_store import STATUS_ERROR, QueueEntry
from ..logging_conf import component_logger
from .correlator import ErrorEvent, ResponseCorrelator, ResponseEvent
from .parser import PreviewParser
from .queue import QueueManager

ResolvedListener = Callable[[QueueEntry], None]


class MetadataExtractor:
    """Listen for correlator events and write the final status and preview."""

    def __init__(
        self,
        queue: QueueManager,
        parser: PreviewParser,
        cache_duration: int,
        error_ttl: int | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.queue = queue
        self.parser = parser
        self.cache_duration = cache_duration
        self.error_ttl = error_ttl if error_ttl is not None else cache_duration
        self.logger = logger or component_logger("extractor")
        self._listeners: list[ResolvedListener] = []
        self._lock = Lock()

    def attach(self, correlator: ResponseCorrelator) -> None:
        correlator.on_response(self.handle_response)
        correlator.on_error(self.handle_error)

    def on_resolved(self, listener: ResolvedListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def handle_response(self, event: ResponseEvent) -> QueueEntry | None:
        entry = event.entry
        preview = entry.preview
        if entry.kind == "link":
            preview = self.parser.parse(event.body)
        resolved = self.queue.resolve(entry, event.status_code, preview, self.cache_duration)
        if resolved is None:
            return None
        self.logger.info(
            "entry_resolved",
            key=resolved.id,
            url=event.url,
            status=resolved.status,
            preview_fields=sorted(preview or {}),
        )
        self._notify(resolved)
        return resolved

    def handle_error(self, event: ErrorEvent) -> QueueEntry | None:
        if event.status_code:
            status: int | str = event.status_code
            ttl = self.cache_duration
        else:
            status = STATUS_ERROR
            ttl = self.error_ttl
        resolved = self.queue.resolve(event.entry, status, event.entry.preview, ttl)
        if resolved is None:
            return None
        self.logger.info("entry_failed", key=resolved.id, url=event.url, status=status)
        self._notify(resolved)
        return resolved

    def _notify(self, entry: QueueEntry) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(entry)


__all__ = ["MetadataExtractor", "ResolvedListener"]
