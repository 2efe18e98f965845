"""Queue of URLs awaiting a background fetch, kept inside the cache store."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

import structlog

from ..exceptions import InvalidURL
from ..infra.cache_store import STATUS_ERROR, STATUS_PENDING, CacheStore, QueueEntry
from ..logging_conf import component_logger
from .urls import QUEUE_KEY_PREFIX, ensure_valid_url, url_key


class QueueManager:
    """Pending entries are queue jobs; resolved entries are cached results."""

    def __init__(self, store: CacheStore, logger: structlog.BoundLogger | None = None) -> None:
        self.store = store
        self.logger = logger or component_logger("queue")

    def enqueue(self, target_url: str, source_url: str = "", kind: str = "link") -> QueueEntry | None:
        """Queue ``target_url`` unless it is invalid or already known.

        Returns the stored entry (new or existing), or ``None`` for a URL that
        failed validation.
        """

        try:
            normalized = ensure_valid_url(target_url)
        except InvalidURL:
            self.logger.debug("enqueue_rejected", url=target_url)
            return None
        key = url_key(normalized)
        entry = QueueEntry(
            id=key,
            target_url=normalized,
            source_url=source_url or "",
            created_at=self.store.now(),
            kind=kind,
        )
        if not self.store.add(key, entry):
            return self.store.get(key)
        self.logger.info("entry_enqueued", key=key, url=normalized, kind=kind)
        return entry

    def get_entry(self, target_url: str) -> QueueEntry | None:
        return self.store.get(url_key(target_url))

    def list_pending(self) -> list[QueueEntry]:
        return self.store.list(QUEUE_KEY_PREFIX, status=STATUS_PENDING)

    def list(
        self,
        status: int | str | None = None,
        search: str | None = None,
        offset: int = 0,
        limit: int = 10,
        order_by: str = "status",
        descending: bool = False,
    ) -> tuple[list[QueueEntry], int]:
        entries = self.store.list(
            QUEUE_KEY_PREFIX,
            status=status,
            search=search,
            order_by=order_by,
            descending=descending,
            offset=offset,
            limit=limit,
        )
        total = self.store.count(QUEUE_KEY_PREFIX, status=status, search=search)
        return entries, total

    def remove(self, key: str) -> bool:
        removed = self.store.delete(key)
        if removed:
            self.logger.info("entry_removed", key=key)
        return removed

    def remove_many(self, keys: Iterable[str]) -> int:
        return sum(1 for key in keys if self.remove(key))

    def clear(self, search: str | None = None) -> int:
        self.store.purge_expired()
        count = self.store.delete_matching(QUEUE_KEY_PREFIX, search=search or None)
        self.logger.info("queue_cleared", search=search or "", removed=count)
        return count

    def purge_expired(self) -> int:
        return self.store.purge_expired()

    # ------------------------------------------------------------------
    # Resolution writes
    # ------------------------------------------------------------------
    def resolve(
        self,
        entry: QueueEntry,
        status: int | str,
        preview: dict[str, str] | None,
        ttl: float,
    ) -> QueueEntry | None:
        """Write the final status of a pending entry.

        Returns ``None`` when the entry was removed or resolved in the meantime;
        nothing is written in that case.
        """

        resolved = replace(entry, status=status, preview=preview)
        stored = self.store.update_if_status(entry.id, resolved, STATUS_PENDING, ttl)
        if stored is None:
            self.logger.info("resolve_dropped", key=entry.id, status=status)
        return stored

    def mark_error(self, entry: QueueEntry, ttl: float) -> QueueEntry | None:
        return self.resolve(entry, STATUS_ERROR, entry.preview, ttl)


__all__ = ["QueueManager"]
