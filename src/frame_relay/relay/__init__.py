"""
Relay Module
============

Frame acquisition and fan-out components.

This module provides the core of the relay:
    - Frame: Immutable frame (bytes + timestamp)
    - FrameStore: Latest-frame holder, atomic replace
    - UpstreamClient: One GET per fetch cycle (httpx)
    - ActivityTracker: Viewer activity backends (memory / redis)
    - PresencePolicy: Timeout- or connection-based viewer presence
    - StatsCollector: Counters and running mean fetch duration
    - FetchScheduler: ACTIVE / ASLEEP fetch loop
    - WebSocketBroadcaster: Push frame events to viewers

Example:
    from frame_relay.relay import (
        FetchScheduler, FrameStore, InMemoryActivityTracker,
        SchedulerTiming, StatsCollector, TimeoutPresence, UpstreamClient,
    )

    store = FrameStore()
    tracker = InMemoryActivityTracker()
    scheduler = FetchScheduler(
        client=UpstreamClient("camera.local", 8080, "/snapshot.jpg"),
        store=store,
        presence=TimeoutPresence(tracker, sleep_timeout_ms=2000),
        stats=StatsCollector(),
        timing=SchedulerTiming(),
    )

    task = asyncio.create_task(scheduler.run())
"""

from frame_relay.relay.activity import (
    ActivityTracker,
    InMemoryActivityTracker,
    RedisActivityTracker,
    create_activity_tracker,
)
from frame_relay.relay.client import UpstreamClient
from frame_relay.relay.frame import Frame
from frame_relay.relay.notifier import FrameObserver, WebSocketBroadcaster
from frame_relay.relay.presence import (
    ConnectionPresence,
    PresencePolicy,
    TimeoutPresence,
    create_presence_policy,
)
from frame_relay.relay.scheduler import FetchScheduler, SchedulerTiming
from frame_relay.relay.stats import StatsCollector, StatsSnapshot
from frame_relay.relay.store import FrameStore


__all__ = [
    "Frame",
    "FrameStore",
    "UpstreamClient",
    "ActivityTracker",
    "InMemoryActivityTracker",
    "RedisActivityTracker",
    "create_activity_tracker",
    "PresencePolicy",
    "TimeoutPresence",
    "ConnectionPresence",
    "create_presence_policy",
    "StatsCollector",
    "StatsSnapshot",
    "FetchScheduler",
    "SchedulerTiming",
    "FrameObserver",
    "WebSocketBroadcaster",
]
