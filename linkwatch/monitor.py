"""Composition root wiring the cache, queue, fetcher, correlator and scheduler."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import httpx

from .config import ConfigRepository, MonitorConfig
from .engine import Fetcher, MetadataExtractor, PreviewParser, QueueManager, ResponseCorrelator
from .engine.extractor import ResolvedListener
from .infra import CacheStore, QueueEntry, SQLiteManager
from .logging_conf import component_logger
from .scheduler import APSchedulerAdapter, SweepReport, Sweeper


@dataclass
class LinkMonitor:
    """One instance of every service, built explicitly by the host process."""

    config: MonitorConfig
    storage: SQLiteManager
    store: CacheStore
    queue: QueueManager
    correlator: ResponseCorrelator
    extractor: MetadataExtractor
    fetcher: Fetcher
    sweeper: Sweeper
    scheduler: APSchedulerAdapter

    @classmethod
    def build(
        cls,
        config: MonitorConfig,
        database_path: Path | None = None,
        clock: Callable[[], float] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> "LinkMonitor":
        storage = SQLiteManager()
        store = CacheStore(storage, database_path or config.database_path, clock=clock)
        queue = QueueManager(store)
        correlator = ResponseCorrelator(queue)
        extractor = MetadataExtractor(
            queue,
            PreviewParser(config.preview_properties),
            cache_duration=config.cache_duration,
            error_ttl=config.effective_error_ttl,
        )
        extractor.attach(correlator)
        fetcher = Fetcher(config, correlator, transport=transport)
        sweeper = Sweeper(queue, fetcher, error_ttl=config.effective_error_ttl)
        return cls(
            config=config,
            storage=storage,
            store=store,
            queue=queue,
            correlator=correlator,
            extractor=extractor,
            fetcher=fetcher,
            sweeper=sweeper,
            scheduler=APSchedulerAdapter(),
        )

    @classmethod
    def from_repository(
        cls, repository: ConfigRepository, transport: httpx.BaseTransport | None = None
    ) -> "LinkMonitor":
        config = repository.load()
        return cls.build(config, database_path=repository.database_path(), transport=transport)

    # ------------------------------------------------------------------
    # Consumer read path
    # ------------------------------------------------------------------
    def lookup(self, url: str, source_url: str | None = None, kind: str = "link") -> QueueEntry | None:
        """Return the cached entry, or queue ``url`` and return ``None``."""

        entry = self.queue.get_entry(url)
        if entry is None:
            self.queue.enqueue(url, source_url or self.config.home_url, kind=kind)
        return entry

    def is_broken(self, url: str, source_url: str | None = None) -> bool:
        entry = self.lookup(url, source_url)
        return entry is not None and entry.is_broken

    def get_preview(self, url: str, source_url: str | None = None) -> dict[str, str] | None:
        entry = self.lookup(url, source_url)
        if entry is None or entry.is_pending:
            return None
        return entry.preview

    def on_resolved(self, listener: ResolvedListener) -> None:
        self.extractor.on_resolved(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def sweep(self) -> SweepReport:
        return self.sweeper.sweep()

    def start(self) -> None:
        self.scheduler.schedule_sweep(self.sweeper.sweep, self.config.sweep_interval)
        self.scheduler.start()

    def shutdown(self) -> None:
        self.scheduler.remove_sweep()
        self.scheduler.shutdown()
        self.fetcher.close()
        self.storage.close_all()

    def uninstall(self) -> int:
        """Drop every cached entry."""

        removed = self.queue.clear()
        component_logger("monitor").info("cache_uninstalled", removed=removed)
        return removed


__all__ = ["LinkMonitor"]
