"""
Scheduler State Models
======================

State and per-cycle outcome types for the fetch scheduler.

Core Concepts:
    - SchedulerState: ACTIVE (fetching on a cadence) or ASLEEP (suspended)
    - FetchOutcome: result of exactly one upstream request

Transitions:
    ACTIVE -> ASLEEP: no viewer present at the start of a cycle
    ASLEEP -> ACTIVE: viewer present again; fetch immediately
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from frame_relay.errors import UpstreamTransportError


class SchedulerState(str, Enum):
    """
    Power-management state of the fetch loop.

    Attributes:
        ACTIVE: Fetching frames, paced to the refresh interval
        ASLEEP: No viewers; no upstream requests are issued
    """

    ACTIVE = "ACTIVE"
    ASLEEP = "ASLEEP"


@dataclass(frozen=True, slots=True)
class FetchSuccess:
    """
    Upstream answered with a complete body.

    Attributes:
        body: Raw response bytes (may be empty)
        duration_ms: Time from request start to last body byte
    """

    body: bytes
    duration_ms: float

    def __repr__(self) -> str:
        return f"FetchSuccess(bytes={len(self.body)}, duration_ms={self.duration_ms:.1f})"


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """Upstream request failed at the transport level."""

    error: UpstreamTransportError
    duration_ms: float = 0.0


FetchOutcome = Union[FetchSuccess, FetchFailure]
