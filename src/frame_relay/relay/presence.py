"""
Presence Policies
=================

Decide whether at least one viewer is "present" at the start of a fetch
cycle. The scheduler only asks is_present(); how presence is derived is
chosen at startup.

Policies:
    timeout:     a viewer requested a frame within sleep_timeout
    connections: at least one push connection is open, or no frame has
                 been fetched yet
"""

import logging
from abc import ABC, abstractmethod

from frame_relay.relay.activity import ActivityTracker
from frame_relay.relay.store import FrameStore


logger = logging.getLogger(__name__)


class PresencePolicy(ABC):
    """Viewer presence query used by the fetch scheduler."""

    #: Whether connect events should wake the scheduler immediately.
    wakes_on_connect: bool = False

    @abstractmethod
    async def is_present(self) -> bool:
        ...


class TimeoutPresence(PresencePolicy):
    """Present iff the last viewer request is at most sleep_timeout_ms old."""

    def __init__(self, tracker: ActivityTracker, sleep_timeout_ms: float) -> None:
        self.tracker = tracker
        self.sleep_timeout_ms = sleep_timeout_ms

    async def is_present(self) -> bool:
        idle = await self.tracker.idle_seconds()
        if idle is None:
            return False
        return idle * 1000.0 <= self.sleep_timeout_ms


class ConnectionPresence(PresencePolicy):
    """
    Present iff viewer connections are open.

    Until the first frame has been stored the relay counts as present, so
    the first fetch always happens and a viewer arriving later never
    waits on an empty store.
    """

    wakes_on_connect = True

    def __init__(self, tracker: ActivityTracker, store: FrameStore) -> None:
        self.tracker = tracker
        self.store = store

    async def is_present(self) -> bool:
        if not self.store.has_frame:
            return True
        return await self.tracker.current_count() > 0


def create_presence_policy(
    mode: str,
    tracker: ActivityTracker,
    store: FrameStore,
    sleep_timeout_ms: float,
) -> PresencePolicy:
    """Create the presence policy selected by configuration."""
    if mode == "timeout":
        logger.info(f"Presence: timeout-based (sleep_timeout={sleep_timeout_ms}ms)")
        return TimeoutPresence(tracker, sleep_timeout_ms)

    elif mode == "connections":
        logger.info("Presence: connection-based")
        return ConnectionPresence(tracker, store)

    else:
        raise ValueError(f"Unknown presence mode: {mode}")
