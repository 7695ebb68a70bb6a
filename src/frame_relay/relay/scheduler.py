"""
Fetch Scheduler
===============

The relay's fetch loop and its power-management state machine.

States:
    ACTIVE: fetch, then wait until the next cycle is due
    ASLEEP: no viewers; poll presence every wake_check_interval

Cycle Rules:
    not present, ACTIVE  -> ASLEEP, wait wake_check_interval, no fetch
    not present, ASLEEP  -> stay, wait wake_check_interval, no fetch
    present,     ASLEEP  -> ACTIVE, fetch immediately
    present,     ACTIVE  -> fetch

    success -> wait max(0, refresh_interval - fetch duration)
    failure -> wait backoff_interval

Design Rules:
    - Exactly one cycle runs at a time; the next delay is computed from the
      finished cycle's outcome before anything else is scheduled
    - Only the scheduler writes the FrameStore and the fetch counters
    - request_wake() cuts the current wait short (push re-activation)
    - A failing cycle never stops the loop
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List

from frame_relay.errors import UpstreamTransportError
from frame_relay.models.state import FetchFailure, FetchSuccess, SchedulerState
from frame_relay.relay.client import UpstreamClient
from frame_relay.relay.frame import Frame
from frame_relay.relay.notifier import FrameObserver
from frame_relay.relay.presence import PresencePolicy
from frame_relay.relay.stats import StatsCollector
from frame_relay.relay.store import FrameStore


logger = logging.getLogger(__name__)


@dataclass
class SchedulerTiming:
    """
    Scheduler timing, in milliseconds.

    Loaded from configuration file.
    """

    wake_check_interval_ms: float = 2000.0
    backoff_interval_ms: float = 500.0
    refresh_interval_ms: float = 150.0


class FetchScheduler:
    """
    Serialized fetch loop with sleep/wake power management.

    Example:
        scheduler = FetchScheduler(
            client=client,
            store=store,
            presence=presence,
            stats=stats,
            timing=SchedulerTiming(refresh_interval_ms=250),
        )

        task = asyncio.create_task(scheduler.run())
        ...
        scheduler.stop()
        await task
    """

    def __init__(
        self,
        client: UpstreamClient,
        store: FrameStore,
        presence: PresencePolicy,
        stats: StatsCollector,
        timing: SchedulerTiming,
        observers: Iterable[FrameObserver] = (),
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            client: Upstream frame source
            store: Where successful frames are written
            presence: Viewer presence policy
            stats: Counters updated by each cycle
            timing: Wake-check, backoff and refresh intervals
            observers: Notified after every fetch
            wall_clock: Source of frame timestamps
        """
        self.client = client
        self.store = store
        self.presence = presence
        self.stats = stats
        self.timing = timing
        self._observers: List[FrameObserver] = list(observers)
        self._wall_clock = wall_clock

        self._state = SchedulerState.ACTIVE
        self._running: bool = False
        self._interrupt = asyncio.Event()

        logger.info(
            f"FetchScheduler initialized: "
            f"refresh={timing.refresh_interval_ms}ms, "
            f"backoff={timing.backoff_interval_ms}ms, "
            f"wake_check={timing.wake_check_interval_ms}ms"
        )

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def running(self) -> bool:
        return self._running

    def add_observer(self, observer: FrameObserver) -> None:
        self._observers.append(observer)

    async def run_cycle(self) -> float:
        """
        Run one scheduler cycle.

        Returns:
            Milliseconds to wait before the next cycle (never negative).
        """
        present = await self.presence.is_present()

        if not present:
            if self._state is SchedulerState.ACTIVE:
                logger.info("No viewers present, going to sleep")
                self._state = SchedulerState.ASLEEP
                self.stats.record_sleep()
            return self.timing.wake_check_interval_ms

        if self._state is SchedulerState.ASLEEP:
            logger.info("Viewer present, waking up")
            self._state = SchedulerState.ACTIVE
            self.stats.record_wakeup()

        return await self._fetch()

    async def _fetch(self) -> float:
        logger.debug("Requesting new frame")
        outcome = await self.client.fetch()
        # A wake requested during the fetch is satisfied by this fetch
        self._interrupt.clear()

        if isinstance(outcome, FetchSuccess):
            frame = Frame(data=outcome.body, timestamp=self._wall_clock())
            self.store.replace(frame)
            self.stats.record_success(outcome.duration_ms)
            logger.debug(
                f"Frame complete: {frame.size} bytes in {outcome.duration_ms:.1f}ms "
                f"(mean {self.stats.mean_fetch_duration_ms:.1f}ms)"
            )
            await self._notify_ready(frame)
            return max(0.0, self.timing.refresh_interval_ms - outcome.duration_ms)

        assert isinstance(outcome, FetchFailure)
        self.stats.record_failure()
        logger.warning(
            f"Upstream fetch failed ({outcome.error}), "
            f"retrying in {self.timing.backoff_interval_ms}ms"
        )
        await self._notify_failed(outcome.error)
        return self.timing.backoff_interval_ms

    async def _notify_ready(self, frame: Frame) -> None:
        for observer in self._observers:
            try:
                await observer.frame_ready(frame)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed on frame_ready: {e}")

    async def _notify_failed(self, error: UpstreamTransportError) -> None:
        for observer in self._observers:
            try:
                await observer.frame_failed(error)
            except Exception as e:
                logger.error(f"Observer {observer!r} failed on frame_failed: {e}")

    def request_wake(self) -> None:
        """
        Cut the current wait short and run a cycle now.

        Called when the first viewer connects. The cycle still checks
        presence, so a spurious wake only costs one presence query.
        """
        logger.debug(f"Wake requested (state={self._state.value})")
        self._interrupt.set()

    async def run(self) -> None:
        """
        Run cycles until stop() is called.

        Each cycle's delay is computed from its own outcome; the next cycle
        starts only after that delay elapses or a wake is requested.
        """
        self._running = True
        logger.info("FetchScheduler started")

        while self._running:
            try:
                delay_ms = await self.run_cycle()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Fetch cycle error: {e}")
                delay_ms = self.timing.backoff_interval_ms

            if not self._running:
                break
            await self._wait(delay_ms)

        logger.info("FetchScheduler stopped")

    async def _wait(self, delay_ms: float) -> None:
        if delay_ms <= 0:
            # Tight loop, but still yield to the request handlers
            await asyncio.sleep(0)
            self._interrupt.clear()
            return
        try:
            await asyncio.wait_for(self._interrupt.wait(), timeout=delay_ms / 1000.0)
        except asyncio.TimeoutError:
            pass
        finally:
            self._interrupt.clear()

    def stop(self) -> None:
        """Signal the loop to exit after the current cycle or wait."""
        logger.info("FetchScheduler stopping...")
        self._running = False
        self._interrupt.set()
