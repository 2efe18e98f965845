"""Scheduling: interval trigger and sweep state machine."""

from .apsched_adapter import SWEEP_JOB_ID, APSchedulerAdapter
from .sweeper import SweepReport, SweepState, Sweeper

__all__ = ["APSchedulerAdapter", "SWEEP_JOB_ID", "SweepReport", "SweepState", "Sweeper"]
