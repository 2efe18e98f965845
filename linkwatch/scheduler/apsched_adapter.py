"""APScheduler wrapper driving the periodic sweep."""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from ..logging_conf import component_logger

SWEEP_JOB_ID = "linkwatch::sweep"


class APSchedulerAdapter:
    """Own the background scheduler and the single sweep job."""

    def __init__(self) -> None:
        self.scheduler = BackgroundScheduler()
        self.logger = component_logger("scheduler")
        self.started = False

    def start(self) -> None:
        if not self.started:
            self.scheduler.start()
            self.started = True
            self.logger.info("apscheduler_started")

    def shutdown(self) -> None:
        if self.started:
            self.scheduler.shutdown(wait=False)
            self.started = False
            self.logger.info("apscheduler_stopped")

    def schedule_sweep(
        self, callback: Callable[[], object], interval: float, run_immediately: bool = True
    ) -> None:
        trigger = self._build_trigger(interval)
        job_kwargs: dict = {}
        if run_immediately:
            job_kwargs["next_run_time"] = datetime.now()
        # one sweep per process at a time; a late tick collapses into the next
        self.scheduler.add_job(
            callback,
            trigger=trigger,
            id=SWEEP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            **job_kwargs,
        )
        self.logger.info("sweep_scheduled", interval=interval)

    def remove_sweep(self) -> None:
        try:
            self.scheduler.remove_job(SWEEP_JOB_ID)
        except Exception:  # noqa: BLE001
            self.logger.warning("job_remove_failed", job=SWEEP_JOB_ID)

    @staticmethod
    def _build_trigger(interval: float) -> IntervalTrigger:
        if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval <= 0:
            raise ValueError("Sweep interval requires a positive number of seconds")
        return IntervalTrigger(seconds=float(interval))


__all__ = ["APSchedulerAdapter", "SWEEP_JOB_ID"]
