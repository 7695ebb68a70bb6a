"""
Upstream Client
===============

Async HTTP client for pulling single frames from the upstream camera.

This client:
    - Issues exactly one GET per call to fetch()
    - Reads the whole body as raw bytes (no text decoding)
    - Reports transport failures as FetchFailure, never raises them
    - Does NOT retry; retry pacing belongs to the scheduler

Example:
    client = UpstreamClient(host="camera.local", port=8080, path="/snapshot.jpg")

    outcome = await client.fetch()
    if isinstance(outcome, FetchSuccess):
        print(f"Got {len(outcome.body)} bytes in {outcome.duration_ms:.0f}ms")

    await client.aclose()
"""

import logging
import time
from typing import Callable, Optional

import httpx

from frame_relay.errors import UpstreamTransportError
from frame_relay.models.state import FetchFailure, FetchOutcome, FetchSuccess


logger = logging.getLogger(__name__)


class UpstreamClient:
    """
    One-shot frame fetcher for a single upstream URL.

    Attributes:
        url: Full upstream URL
        timeout_seconds: Per-request timeout, or None for no timeout
    """

    def __init__(
        self,
        host: str,
        port: int,
        path: str = "/",
        timeout_seconds: Optional[float] = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize upstream client.

        Args:
            host: Camera host name or address
            port: Camera HTTP port
            path: Snapshot path on the camera
            timeout_seconds: Request timeout; None or 0 disables it
            transport: Optional httpx transport (tests inject MockTransport)
            clock: Monotonic clock in seconds, used to time each fetch
        """
        if not path.startswith("/"):
            path = "/" + path
        self.url = f"http://{host}:{port}{path}"
        self.timeout_seconds = timeout_seconds or None
        self._clock = clock
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            transport=transport,
        )

    async def fetch(self) -> FetchOutcome:
        """
        Fetch one frame.

        Returns:
            FetchSuccess with the raw body and duration, or FetchFailure
            wrapping an UpstreamTransportError.
        """
        started = self._clock()
        try:
            response = await self._client.get(self.url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            duration_ms = (self._clock() - started) * 1000.0
            logger.debug(f"Upstream request failed after {duration_ms:.0f}ms: {e!r}")
            return FetchFailure(
                error=UpstreamTransportError(f"{type(e).__name__}: {e}"),
                duration_ms=duration_ms,
            )

        duration_ms = (self._clock() - started) * 1000.0

        if not response.is_success:
            logger.warning(
                f"Upstream answered HTTP {response.status_code}, "
                f"relaying body anyway ({len(response.content)} bytes)"
            )

        return FetchSuccess(body=response.content, duration_ms=duration_ms)

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
