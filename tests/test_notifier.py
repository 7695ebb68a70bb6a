"""
Notifier Tests
==============

Tests for the WebSocket broadcaster.
"""

import asyncio

from frame_relay.errors import UpstreamTransportError
from frame_relay.relay import Frame, WebSocketBroadcaster


class RecordingSocket:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


class TestWebSocketBroadcaster:

    def test_frame_ready_broadcast(self):
        broadcaster = WebSocketBroadcaster()
        sockets = [RecordingSocket(), RecordingSocket()]
        for socket in sockets:
            broadcaster.register(socket)

        asyncio.run(broadcaster.frame_ready(Frame(data=b"abc", timestamp=12.5)))

        for socket in sockets:
            assert socket.sent == [{"event": "frame_ready", "timestamp": 12.5, "size": 3}]

    def test_frame_failed_broadcast(self):
        broadcaster = WebSocketBroadcaster()
        socket = RecordingSocket()
        broadcaster.register(socket)

        asyncio.run(broadcaster.frame_failed(UpstreamTransportError("ConnectError: refused")))

        assert socket.sent == [{"event": "frame_failed", "error": "ConnectError: refused"}]

    def test_failing_socket_dropped(self):
        broadcaster = WebSocketBroadcaster()
        good, bad = RecordingSocket(), RecordingSocket(fail=True)
        broadcaster.register(good)
        broadcaster.register(bad)

        asyncio.run(broadcaster.frame_ready(Frame(data=b"x", timestamp=1.0)))

        assert broadcaster.client_count == 1
        assert len(good.sent) == 1

    def test_unregister_unknown_is_noop(self):
        broadcaster = WebSocketBroadcaster()
        broadcaster.unregister(RecordingSocket())
        assert broadcaster.client_count == 0

    def test_slow_socket_dropped_without_blocking_others(self):
        class StalledSocket(RecordingSocket):
            async def send_json(self, payload):
                await asyncio.sleep(10)

        broadcaster = WebSocketBroadcaster(send_timeout=0.05)
        good, stalled = RecordingSocket(), StalledSocket()
        broadcaster.register(good)
        broadcaster.register(stalled)

        async def scenario():
            loop = asyncio.get_running_loop()
            started = loop.time()
            await broadcaster.frame_ready(Frame(data=b"x", timestamp=1.0))
            return loop.time() - started

        elapsed = asyncio.run(scenario())

        assert elapsed < 1.0
        assert good.sent == [{"event": "frame_ready", "timestamp": 1.0, "size": 1}]
        assert broadcaster.client_count == 1
