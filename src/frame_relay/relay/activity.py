"""
Viewer Activity Tracking
========================

Backends that record when viewers ask for frames and how many push
connections are open.

Backends:
    - InMemoryActivityTracker: single process
    - RedisActivityTracker: several relay processes sharing one counter

Both expose the same async contract, selected once at startup by
configuration (see create_activity_tracker).

Design Rules:
    - Counters never read below zero
    - A missing shared counter key reads as zero
    - Shared increments/decrements are atomic (Redis INCR/DECR)
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

import redis.asyncio as redis


logger = logging.getLogger(__name__)


class ActivityTracker(ABC):
    """Contract shared by all activity backends."""

    @abstractmethod
    async def record_activity(self) -> None:
        """Mark that a viewer just requested something."""

    @abstractmethod
    async def idle_seconds(self) -> Optional[float]:
        """Seconds since the last recorded activity, or None if never."""

    @abstractmethod
    async def current_count(self) -> int:
        """Number of currently open viewer connections."""

    @abstractmethod
    async def increment(self) -> int:
        """Register a viewer connection. Returns the new count."""

    @abstractmethod
    async def decrement(self) -> int:
        """Unregister a viewer connection. Returns the new count."""

    async def aclose(self) -> None:
        """Release backend resources."""


class InMemoryActivityTracker(ActivityTracker):
    """
    Process-local activity tracker.

    Uses a monotonic clock for idle time. All calls happen on the event
    loop, so plain integer updates are safe.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._last_activity: Optional[float] = None
        self._count: int = 0

    async def record_activity(self) -> None:
        self._last_activity = self._clock()

    async def idle_seconds(self) -> Optional[float]:
        if self._last_activity is None:
            return None
        return max(0.0, self._clock() - self._last_activity)

    async def current_count(self) -> int:
        return self._count

    async def increment(self) -> int:
        self._count += 1
        return self._count

    async def decrement(self) -> int:
        self._count = max(0, self._count - 1)
        return self._count


class RedisActivityTracker(ActivityTracker):
    """
    Redis-backed activity tracker.

    Keys:
        {prefix}:viewers        - integer connection count (INCR/DECR)
        {prefix}:last_activity  - UNIX timestamp of the last viewer request

    Wall-clock time is used for last activity because monotonic clocks are
    not comparable between processes.

    Example:
        tracker = RedisActivityTracker.from_url("redis://localhost:6379/0")
        await tracker.increment()
    """

    def __init__(
        self,
        client: "redis.Redis",
        key_prefix: str = "frame_relay",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize Redis tracker.

        Args:
            client: redis.asyncio client (decode_responses not required)
            key_prefix: Namespace for the tracker's keys
            clock: Wall clock in seconds
        """
        self._client = client
        self._clock = clock
        self.count_key = f"{key_prefix}:viewers"
        self.activity_key = f"{key_prefix}:last_activity"

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "frame_relay") -> "RedisActivityTracker":
        logger.info(f"Using Redis activity tracker at {url} (prefix={key_prefix})")
        return cls(redis.from_url(url), key_prefix=key_prefix)

    async def record_activity(self) -> None:
        await self._client.set(self.activity_key, repr(self._clock()))

    async def idle_seconds(self) -> Optional[float]:
        raw = await self._client.get(self.activity_key)
        if raw is None:
            return None
        return max(0.0, self._clock() - float(raw))

    async def current_count(self) -> int:
        raw = await self._client.get(self.count_key)
        if raw is None:
            return 0
        return max(0, int(raw))

    async def increment(self) -> int:
        return max(0, int(await self._client.incr(self.count_key)))

    async def decrement(self) -> int:
        value = int(await self._client.decr(self.count_key))
        if value < 0:
            # Counter was reset while connections were open
            logger.warning(f"Viewer counter went negative ({value}), resetting to 0")
            await self._client.set(self.count_key, 0)
            return 0
        return value

    async def aclose(self) -> None:
        await self._client.aclose()


def create_activity_tracker(
    backend: str,
    redis_url: Optional[str] = None,
    key_prefix: str = "frame_relay",
) -> ActivityTracker:
    """
    Create the activity tracker selected by configuration.

    Fails fast if the redis backend is requested without a URL.
    """
    if backend == "memory":
        logger.info("Using in-memory activity tracker")
        return InMemoryActivityTracker()

    elif backend == "redis":
        if not redis_url:
            raise ValueError("Redis activity backend requested but no redis_url configured")
        return RedisActivityTracker.from_url(redis_url, key_prefix=key_prefix)

    else:
        raise ValueError(f"Unknown activity backend: {backend}")
