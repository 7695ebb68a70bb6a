"""
Relay Context
=============

The process-wide state of one relay, owned in a single object and handed
to the app instead of living in module globals.

Lifecycle:
    build_context() at startup -> app.state.relay -> closed on shutdown
"""

import logging
from dataclasses import dataclass
from typing import Optional

from frame_relay.config import Settings
from frame_relay.relay import (
    ActivityTracker,
    FetchScheduler,
    FrameStore,
    PresencePolicy,
    SchedulerTiming,
    StatsCollector,
    UpstreamClient,
    WebSocketBroadcaster,
    create_activity_tracker,
    create_presence_policy,
)
from frame_relay.web import IndexPage, StaticFileResolver


logger = logging.getLogger(__name__)


@dataclass
class RelayContext:
    """Everything one relay process owns."""

    settings: Settings
    store: FrameStore
    stats: StatsCollector
    tracker: ActivityTracker
    presence: PresencePolicy
    client: UpstreamClient
    scheduler: FetchScheduler
    static: StaticFileResolver
    index_page: IndexPage
    broadcaster: Optional[WebSocketBroadcaster] = None

    async def aclose(self) -> None:
        await self.client.aclose()
        await self.tracker.aclose()


def build_context(
    settings: Settings,
    client: Optional[UpstreamClient] = None,
    tracker: Optional[ActivityTracker] = None,
) -> RelayContext:
    """
    Wire up all relay components from settings.

    Args:
        settings: Loaded configuration
        client: Override the upstream client (tests)
        tracker: Override the activity backend (tests)

    Raises:
        StaticRootError: The web root cannot be resolved
    """
    # Fail fast before anything else is created
    static = StaticFileResolver(settings.paths.web_root)
    index_page = IndexPage(settings.paths.index_template)

    store = FrameStore()
    stats = StatsCollector()

    if tracker is None:
        tracker = create_activity_tracker(
            backend=settings.activity.backend,
            redis_url=settings.activity.redis_url,
            key_prefix=settings.activity.key_prefix,
        )

    presence = create_presence_policy(
        mode=settings.presence.mode,
        tracker=tracker,
        store=store,
        sleep_timeout_ms=settings.timing.sleep_timeout_ms,
    )

    if client is None:
        client = UpstreamClient(
            host=settings.upstream.host,
            port=settings.upstream.port,
            path=settings.upstream.path,
            timeout_seconds=settings.upstream.timeout_seconds,
        )
        logger.info(f"Upstream URL: {client.url}")

    scheduler = FetchScheduler(
        client=client,
        store=store,
        presence=presence,
        stats=stats,
        timing=SchedulerTiming(
            wake_check_interval_ms=settings.timing.wake_check_interval_ms,
            backoff_interval_ms=settings.timing.backoff_interval_ms,
            refresh_interval_ms=settings.timing.refresh_interval_ms,
        ),
    )

    broadcaster: Optional[WebSocketBroadcaster] = None
    if settings.push.enabled:
        broadcaster = WebSocketBroadcaster()
        scheduler.add_observer(broadcaster)

    return RelayContext(
        settings=settings,
        store=store,
        stats=stats,
        tracker=tracker,
        presence=presence,
        client=client,
        scheduler=scheduler,
        static=static,
        index_page=index_page,
        broadcaster=broadcaster,
    )
