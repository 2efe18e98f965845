from __future__ import annotations

import pytest
from apscheduler.triggers.interval import IntervalTrigger

from linkwatch.scheduler import SWEEP_JOB_ID, APSchedulerAdapter


class StubScheduler:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    def add_job(self, callback, trigger, **kwargs):  # noqa: ANN001
        self.calls.append({"event": "add", "callback": callback, "trigger": trigger, **kwargs})

    def get_jobs(self):
        return []

    def start(self):
        self.calls.append({"event": "started"})

    def shutdown(self, wait=False):  # noqa: ARG002
        self.calls.append({"event": "shutdown"})

    def remove_job(self, job_id):  # noqa: ANN001
        self.calls.append({"event": "remove", "id": job_id})


def test_build_trigger_uses_interval_seconds() -> None:
    trigger = APSchedulerAdapter._build_trigger(90)
    assert isinstance(trigger, IntervalTrigger)
    assert trigger.interval.total_seconds() == 90


@pytest.mark.parametrize("interval", [0, -5, "fast", True])
def test_build_trigger_rejects_bad_interval(interval) -> None:
    with pytest.raises(ValueError):
        APSchedulerAdapter._build_trigger(interval)


def test_schedule_sweep_registers_single_instance_job() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]

    def sweep() -> None:
        return None

    adapter.schedule_sweep(sweep, 45)
    adapter.start()
    adapter.start()
    adapter.remove_sweep()
    adapter.shutdown()
    adapter.shutdown()

    add = stub.calls[0]
    assert add["id"] == SWEEP_JOB_ID
    assert add["callback"] is sweep
    assert add["max_instances"] == 1
    assert add["coalesce"] is True
    assert add["replace_existing"] is True
    assert "next_run_time" in add
    assert add["trigger"].interval.total_seconds() == 45
    assert [call["event"] for call in stub.calls[1:]] == ["started", "remove", "shutdown"]


def test_schedule_sweep_can_defer_first_run() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]
    adapter.schedule_sweep(lambda: None, 30, run_immediately=False)
    assert "next_run_time" not in stub.calls[0]
