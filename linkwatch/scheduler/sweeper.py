"""Periodic sweep over pending queue entries."""

from __future__ import annotations

from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from threading import Lock
from typing import Protocol

import structlog

from ..engine.queue import QueueManager
from ..engine.urls import is_valid_url
from ..logging_conf import component_logger


class SweepState(str, Enum):
    IDLE = "idle"
    SWEEPING = "sweeping"


class SubmitsFetches(Protocol):
    def submit(self, url: str) -> Future: ...


@dataclass
class SweepReport:
    """Outcome of one sweep; futures complete after the sweep has returned."""

    issued: int = 0
    skipped: int = 0
    invalid: int = 0
    futures: list[Future] = field(default_factory=list, repr=False)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until every issued fetch finished; return ``False`` on timeout."""

        if not self.futures:
            return True
        _, not_done = wait(self.futures, timeout=timeout)
        return not not_done


class Sweeper:
    """Two-state (idle/sweeping) driver that hands pending URLs to the fetcher."""

    def __init__(
        self,
        queue: QueueManager,
        fetcher: SubmitsFetches,
        error_ttl: int,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.queue = queue
        self.fetcher = fetcher
        self.error_ttl = error_ttl
        self.logger = logger or component_logger("sweeper")
        self.state = SweepState.IDLE
        self._sweep_lock = Lock()
        self._in_flight: set[str] = set()
        self._in_flight_lock = Lock()

    @property
    def in_flight(self) -> frozenset[str]:
        with self._in_flight_lock:
            return frozenset(self._in_flight)

    def sweep(self) -> SweepReport:
        report = SweepReport()
        if not self._sweep_lock.acquire(blocking=False):
            self.logger.info("sweep_skipped", reason="already_sweeping")
            return report
        try:
            self.state = SweepState.SWEEPING
            purged = self.queue.purge_expired()
            pending = self.queue.list_pending()
            self.logger.info("sweep_started", pending=len(pending), purged=purged)
            for entry in pending:
                if not is_valid_url(entry.target_url):
                    self.queue.mark_error(entry, self.error_ttl)
                    report.invalid += 1
                    self.logger.warning("sweep_invalid_url", key=entry.id, url=entry.target_url)
                    continue
                with self._in_flight_lock:
                    if entry.id in self._in_flight:
                        report.skipped += 1
                        continue
                    self._in_flight.add(entry.id)
                try:
                    future = self.fetcher.submit(entry.target_url)
                except Exception:
                    self._release(entry.id)
                    raise
                future.add_done_callback(partial(self._finished, entry.id))
                report.futures.append(future)
                report.issued += 1
            self.logger.info(
                "sweep_finished",
                issued=report.issued,
                skipped=report.skipped,
                invalid=report.invalid,
            )
            return report
        finally:
            self.state = SweepState.IDLE
            self._sweep_lock.release()

    def _finished(self, key: str, _future: Future) -> None:
        self._release(key)

    def _release(self, key: str) -> None:
        with self._in_flight_lock:
            self._in_flight.discard(key)


__all__ = ["SubmitsFetches", "SweepReport", "SweepState", "Sweeper"]
