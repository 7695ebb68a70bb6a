"""
Frame Notifier
==============

Push notifications from the fetch loop to connected viewers.

The scheduler calls every registered FrameObserver after each fetch. It
does not care how many observers exist or whether any viewer is listening.

Events (JSON over WebSocket):
    {"event": "connected", "clients": 1}          (sent once on connect)
    {"event": "frame_ready", "timestamp": 1707321234.567, "size": 48213}
    {"event": "frame_failed", "error": "ConnectError: ..."}
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Set

from fastapi import WebSocket

from frame_relay.errors import UpstreamTransportError
from frame_relay.relay.frame import Frame


logger = logging.getLogger(__name__)


class FrameObserver(ABC):
    """Receives fetch results from the scheduler."""

    @abstractmethod
    async def frame_ready(self, frame: Frame) -> None:
        ...

    @abstractmethod
    async def frame_failed(self, error: UpstreamTransportError) -> None:
        ...


class WebSocketBroadcaster(FrameObserver):
    """
    Broadcasts fetch events to every registered WebSocket.

    Sockets that fail or take longer than send_timeout seconds on send
    are dropped; the next disconnect handler for that socket is a no-op.
    """

    def __init__(self, send_timeout: float = 1.0) -> None:
        self._sockets: Set[WebSocket] = set()
        self.send_timeout = send_timeout

    @property
    def client_count(self) -> int:
        return len(self._sockets)

    def register(self, websocket: WebSocket) -> None:
        self._sockets.add(websocket)
        logger.debug(f"Push client registered ({len(self._sockets)} total)")

    def unregister(self, websocket: WebSocket) -> None:
        self._sockets.discard(websocket)
        logger.debug(f"Push client unregistered ({len(self._sockets)} total)")

    async def frame_ready(self, frame: Frame) -> None:
        await self._broadcast({
            "event": "frame_ready",
            "timestamp": frame.timestamp,
            "size": frame.size,
        })

    async def frame_failed(self, error: UpstreamTransportError) -> None:
        await self._broadcast({
            "event": "frame_failed",
            "error": str(error),
        })

    async def _broadcast(self, payload: dict) -> None:
        sockets = list(self._sockets)
        if not sockets:
            return

        # Concurrent sends, each bounded by send_timeout
        results = await asyncio.gather(
            *(
                asyncio.wait_for(websocket.send_json(payload), timeout=self.send_timeout)
                for websocket in sockets
            ),
            return_exceptions=True,
        )
        for websocket, result in zip(sockets, results):
            if isinstance(result, Exception):
                logger.warning(f"Dropping push client after send error: {result!r}")
                self._sockets.discard(websocket)
