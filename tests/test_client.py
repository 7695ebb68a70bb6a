"""
Upstream Client Tests
=====================

Tests for the httpx-based upstream client using httpx.MockTransport.
"""

import asyncio

import httpx

from frame_relay.errors import UpstreamTransportError
from frame_relay.models.state import FetchFailure, FetchSuccess
from frame_relay.relay import UpstreamClient

from conftest import JPEG_BYTES, FakeClock


def fetch_once(client):
    async def scenario():
        try:
            return await client.fetch()
        finally:
            await client.aclose()

    return asyncio.run(scenario())


class TestUpstreamClient:

    def test_url(self):
        client = UpstreamClient("camera.local", 8080, "snapshot.jpg")
        assert client.url == "http://camera.local:8080/snapshot.jpg"

    def test_zero_timeout_disables_timeout(self):
        client = UpstreamClient("camera.local", 8080, timeout_seconds=0)
        assert client.timeout_seconds is None

    def test_success_returns_raw_bytes(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, content=JPEG_BYTES, headers={"Content-Type": "image/jpeg"})

        client = UpstreamClient(
            "camera.local", 8080, "/snapshot.jpg",
            transport=httpx.MockTransport(handler),
        )

        outcome = fetch_once(client)

        assert isinstance(outcome, FetchSuccess)
        assert outcome.body == JPEG_BYTES
        assert len(requests) == 1
        assert requests[0].method == "GET"
        assert str(requests[0].url) == "http://camera.local:8080/snapshot.jpg"

    def test_duration_measured_with_clock(self):
        clock = FakeClock()

        def handler(request):
            clock.advance(0.125)
            return httpx.Response(200, content=b"x")

        client = UpstreamClient(
            "camera.local", 8080,
            transport=httpx.MockTransport(handler),
            clock=clock,
        )

        outcome = fetch_once(client)

        assert outcome.duration_ms == 125.0

    def test_empty_body_is_success(self):
        client = UpstreamClient(
            "camera.local", 8080,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"")),
        )

        outcome = fetch_once(client)

        assert isinstance(outcome, FetchSuccess)
        assert outcome.body == b""

    def test_error_status_still_relayed(self):
        client = UpstreamClient(
            "camera.local", 8080,
            transport=httpx.MockTransport(lambda request: httpx.Response(503, content=b"busy")),
        )

        outcome = fetch_once(client)

        assert isinstance(outcome, FetchSuccess)
        assert outcome.body == b"busy"

    def test_connection_error_is_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = UpstreamClient("camera.local", 8080, transport=httpx.MockTransport(handler))

        outcome = fetch_once(client)

        assert isinstance(outcome, FetchFailure)
        assert isinstance(outcome.error, UpstreamTransportError)
        assert "ConnectError" in str(outcome.error)

    def test_timeout_is_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client = UpstreamClient("camera.local", 8080, transport=httpx.MockTransport(handler))

        outcome = fetch_once(client)

        assert isinstance(outcome, FetchFailure)
        assert "ReadTimeout" in str(outcome.error)

    def test_invalid_url_is_failure(self):
        def handler(request):
            raise httpx.InvalidURL("Invalid port: 'abc'")

        client = UpstreamClient("camera.local", 8080, transport=httpx.MockTransport(handler))

        outcome = fetch_once(client)

        assert isinstance(outcome, FetchFailure)
        assert "InvalidURL" in str(outcome.error)
