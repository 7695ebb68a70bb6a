"""
Status Report Schema
====================

Pydantic model for the ``/status.json`` payload.

Output Contract:
    {
        "uptime": 3600,
        "frames": {"fetched": 120, "failed": 2, "served": 400},
        "mean_fetch_duration": 84.2,
        "sleeps": 3,
        "wakeups": 3,
        "is_asleep": false,
        "config": {
            "SLEEP_TIMEOUT": 2000,
            "WAKE_CHECK_INTERVAL": 2000,
            "BACKOFF_INTERVAL": 500,
            "REFRESH_INTERVAL": 150
        },
        "clients_connected": 1
    }

``clients_connected`` is only present when push notifications are enabled.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FrameCounters(BaseModel):
    """Per-outcome frame counters."""

    fetched: int = Field(..., ge=0, description="Successful upstream fetches")
    failed: int = Field(..., ge=0, description="Failed upstream fetches")
    served: int = Field(..., ge=0, description="Frames handed to viewers")


class TimingReport(BaseModel):
    """Effective timing configuration, in milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    sleep_timeout: float = Field(..., alias="SLEEP_TIMEOUT")
    wake_check_interval: float = Field(..., alias="WAKE_CHECK_INTERVAL")
    backoff_interval: float = Field(..., alias="BACKOFF_INTERVAL")
    refresh_interval: float = Field(..., alias="REFRESH_INTERVAL")


class StatusReport(BaseModel):
    """
    Complete relay status.

    Attributes:
        uptime: Whole seconds since the relay started
        frames: Fetched / failed / served counters
        mean_fetch_duration: Running mean of successful fetch durations (ms)
        sleeps: ACTIVE -> ASLEEP transitions
        wakeups: ASLEEP -> ACTIVE transitions
        is_asleep: Whether fetching is currently suspended
        config: Timing configuration
        clients_connected: Open push connections (push deployments only)
    """

    uptime: int = Field(..., ge=0)
    frames: FrameCounters
    mean_fetch_duration: float = Field(..., ge=0.0)
    sleeps: int = Field(..., ge=0)
    wakeups: int = Field(..., ge=0)
    is_asleep: bool
    config: TimingReport
    clients_connected: Optional[int] = Field(default=None, ge=0)

    def to_payload(self) -> dict:
        """Serialize with the wire field names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
