"""
Data Models
===========

Re-exports the relay's data models.

Models:
    State:
        - SchedulerState: ACTIVE / ASLEEP
        - FetchSuccess, FetchFailure, FetchOutcome: per-cycle result

    Status:
        - StatusReport: /status.json payload
"""

from frame_relay.models.state import FetchFailure, FetchOutcome, FetchSuccess, SchedulerState
from frame_relay.models.status import FrameCounters, StatusReport, TimingReport

__all__ = [
    # State
    "SchedulerState",
    "FetchSuccess",
    "FetchFailure",
    "FetchOutcome",
    # Status
    "FrameCounters",
    "TimingReport",
    "StatusReport",
]
