"""
frame-relay Main Application
============================

FastAPI entry point for the relay.

Endpoints:
    GET  /             - Viewer page (marks activity)
    GET  /status.json  - Relay counters and timing configuration
    GET  /image*       - Current frame as image/jpeg (marks activity)
    GET  /<other>      - Static file from the web root
    WS   {push.path}   - frame_ready / frame_failed events (push deployments)

Run:
    uvicorn frame_relay.main:create_app --factory --port 8000
    python -m frame_relay.main
    frame-relay
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from frame_relay import __version__
from frame_relay.config import Settings, log_config_summary, settings as default_settings
from frame_relay.context import RelayContext, build_context
from frame_relay.errors import NotFoundError, PathEscapeError, TemplateOrFileReadError
from frame_relay.models.status import FrameCounters, StatusReport, TimingReport
from frame_relay.relay import ActivityTracker, UpstreamClient
from frame_relay.web import error_retry_timeout, update_interval


logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the fetch loop on startup, stop it on shutdown."""
    ctx: RelayContext = app.state.relay

    logger.info(f"Starting frame-relay {__version__}")
    if ctx.settings.logging.debug:
        log_config_summary(ctx.settings)

    # The relay counts as watched at startup, so the first frame is fetched
    await ctx.tracker.record_activity()

    scheduler_task = asyncio.create_task(
        ctx.scheduler.run(),
        name="fetch_scheduler",
    )

    yield

    logger.info("Shutting down gracefully...")
    ctx.scheduler.stop()

    try:
        await asyncio.wait_for(scheduler_task, timeout=5.0)
    except asyncio.TimeoutError:
        scheduler_task.cancel()
        try:
            await scheduler_task
        except asyncio.CancelledError:
            pass

    await ctx.aclose()
    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    client: Optional[UpstreamClient] = None,
    tracker: Optional[ActivityTracker] = None,
) -> FastAPI:
    """
    Create the relay app.

    Args:
        settings: Configuration; defaults to the environment-loaded settings
        client: Upstream client override (tests)
        tracker: Activity backend override (tests)

    Raises:
        StaticRootError: The web root cannot be resolved
    """
    if settings is None:
        settings = default_settings

    ctx = build_context(settings, client=client, tracker=tracker)

    app = FastAPI(
        title="frame-relay",
        description="Single-upstream camera frame relay",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.relay = ctx

    # -------------------------------------------------------------------------
    # Error handlers
    # -------------------------------------------------------------------------

    @app.exception_handler(PathEscapeError)
    async def forbidden(request: Request, exc: PathEscapeError) -> PlainTextResponse:
        return PlainTextResponse("403 - Forbidden", status_code=403)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError) -> PlainTextResponse:
        return PlainTextResponse("404 - Not Found", status_code=404)

    @app.exception_handler(TemplateOrFileReadError)
    async def read_error(request: Request, exc: TemplateOrFileReadError) -> PlainTextResponse:
        logger.error(f"Read error serving {request.url.path}: {exc}")
        return PlainTextResponse("500 - Internal Server Error", status_code=500)

    # -------------------------------------------------------------------------
    # HTTP endpoints
    # -------------------------------------------------------------------------

    @app.get("/", response_class=HTMLResponse)
    async def index() -> HTMLResponse:
        """Viewer page with client-side intervals derived from live stats."""
        await ctx.tracker.record_activity()
        timing = ctx.settings.timing
        mean = ctx.stats.mean_fetch_duration_ms
        html = ctx.index_page.render(
            error_retry_timeout_ms=error_retry_timeout(timing.backoff_interval_ms, mean),
            update_interval_ms=update_interval(timing.refresh_interval_ms, mean),
        )
        return HTMLResponse(html)

    @app.get("/status.json")
    async def status() -> JSONResponse:
        """Relay counters for observability."""
        snapshot = ctx.stats.snapshot()
        timing = ctx.settings.timing

        clients_connected: Optional[int] = None
        if ctx.settings.push.enabled:
            clients_connected = await ctx.tracker.current_count()

        report = StatusReport(
            uptime=int(snapshot.uptime_seconds),
            frames=FrameCounters(
                fetched=snapshot.frames_fetched,
                failed=snapshot.frames_failed,
                served=snapshot.frames_served,
            ),
            mean_fetch_duration=snapshot.mean_fetch_duration_ms,
            sleeps=snapshot.sleeps,
            wakeups=snapshot.wakeups,
            is_asleep=snapshot.is_asleep,
            config=TimingReport(
                sleep_timeout=timing.sleep_timeout_ms,
                wake_check_interval=timing.wake_check_interval_ms,
                backoff_interval=timing.backoff_interval_ms,
                refresh_interval=timing.refresh_interval_ms,
            ),
            clients_connected=clients_connected,
        )
        return JSONResponse(report.to_payload())

    @app.get("/image{suffix:path}")
    async def image(suffix: str) -> Response:
        """Current frame. Any path starting with /image is accepted."""
        await ctx.tracker.record_activity()

        frame = ctx.store.read()
        if frame is None:
            return PlainTextResponse("503 - No frame yet", status_code=503)

        ctx.stats.record_served()
        return Response(
            content=frame.data,
            media_type="image/jpeg",
            headers={"Cache-Control": "no-cache"},
        )

    # -------------------------------------------------------------------------
    # WebSocket push
    # -------------------------------------------------------------------------

    if ctx.broadcaster is not None:
        broadcaster = ctx.broadcaster

        async def push_stream(websocket: WebSocket) -> None:
            """Push frame events; connection count feeds viewer presence."""
            await websocket.accept()
            await ctx.tracker.record_activity()
            count = await ctx.tracker.increment()
            broadcaster.register(websocket)
            logger.info(f"Push client connected ({count} total)")

            if count == 1 and ctx.presence.wakes_on_connect:
                ctx.scheduler.request_wake()

            try:
                await websocket.send_json({"event": "connected", "clients": count})

                while True:
                    await websocket.receive_text()
            except WebSocketDisconnect:
                pass
            finally:
                broadcaster.unregister(websocket)
                count = await ctx.tracker.decrement()
                logger.info(f"Push client disconnected ({count} remaining)")

        app.add_api_websocket_route(settings.push.path, push_stream)

    # -------------------------------------------------------------------------
    # Static files (registered last)
    # -------------------------------------------------------------------------

    @app.get("/{path:path}")
    async def static_file(path: str) -> Response:
        data, content_type = ctx.static.read(path)
        return Response(content=data, media_type=content_type)

    return app


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Serve the relay with uvicorn using the environment-loaded settings."""
    import uvicorn

    uvicorn.run(
        create_app(default_settings),
        host=default_settings.server.host,
        port=default_settings.server.port,
        reload=False,
    )


if __name__ == "__main__":
    run()
