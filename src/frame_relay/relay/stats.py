"""
Stats Collector
===============

Running counters for the relay, for observability ONLY.

Stats do NOT influence scheduling decisions.

Tracked:
    - fetched / failed / served frame counters (never decrease)
    - sleep / wakeup transition counters
    - current sleep state
    - running mean of successful fetch durations

The mean is updated incrementally (mean += (x - mean) / n), so no
duration samples are kept.
"""

import time
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True, slots=True)
class StatsSnapshot:
    """Point-in-time copy of the relay counters."""

    uptime_seconds: float
    frames_fetched: int
    frames_failed: int
    frames_served: int
    sleeps: int
    wakeups: int
    is_asleep: bool
    mean_fetch_duration_ms: float


class StatsCollector:
    """
    Accumulates relay counters.

    Example:
        stats = StatsCollector()
        stats.record_success(100.0)
        stats.record_success(400.0)
        stats.mean_fetch_duration_ms   # 250.0
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started = clock()
        self.frames_fetched: int = 0
        self.frames_failed: int = 0
        self.frames_served: int = 0
        self.sleeps: int = 0
        self.wakeups: int = 0
        self.is_asleep: bool = False
        self.mean_fetch_duration_ms: float = 0.0

    @property
    def uptime_seconds(self) -> float:
        return self._clock() - self._started

    def record_success(self, duration_ms: float) -> None:
        """Count a successful fetch and fold its duration into the mean."""
        self.frames_fetched += 1
        self.mean_fetch_duration_ms += (
            (duration_ms - self.mean_fetch_duration_ms) / self.frames_fetched
        )

    def record_failure(self) -> None:
        self.frames_failed += 1

    def record_served(self) -> None:
        self.frames_served += 1

    def record_sleep(self) -> None:
        self.sleeps += 1
        self.is_asleep = True

    def record_wakeup(self) -> None:
        self.wakeups += 1
        self.is_asleep = False

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            uptime_seconds=self.uptime_seconds,
            frames_fetched=self.frames_fetched,
            frames_failed=self.frames_failed,
            frames_served=self.frames_served,
            sleeps=self.sleeps,
            wakeups=self.wakeups,
            is_asleep=self.is_asleep,
            mean_fetch_duration_ms=self.mean_fetch_duration_ms,
        )
