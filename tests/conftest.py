"""
Test Configuration
==================

Pytest fixtures and test doubles for frame-relay.
"""

import asyncio
from typing import List, Optional

import pytest

from frame_relay.models.state import FetchOutcome, FetchSuccess


JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x02\x00\xff\xd9"


class ScriptedUpstream:
    """Upstream client double returning scripted outcomes."""

    def __init__(
        self,
        outcomes: Optional[List[FetchOutcome]] = None,
        default: Optional[FetchOutcome] = None,
        delay: float = 0.0,
    ) -> None:
        self.outcomes = list(outcomes or [])
        self.default = default or FetchSuccess(body=JPEG_BYTES, duration_ms=5.0)
        self.delay = delay
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self.url = "http://upstream.test/"

    async def fetch(self) -> FetchOutcome:
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.outcomes:
                return self.outcomes.pop(0)
            return self.default
        finally:
            self.in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True


class SwitchPresence:
    """Presence policy double flipped by the test."""

    wakes_on_connect = False

    def __init__(self, present: bool = True) -> None:
        self.present = present
        self.queries = 0

    async def is_present(self) -> bool:
        self.queries += 1
        return self.present


class FakeClock:
    """Manually advanced clock (seconds)."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRedis:
    """Minimal async stand-in for the redis.asyncio client calls the tracker makes."""

    def __init__(self) -> None:
        self.data = {}
        self.closed = False

    async def get(self, key):
        value = self.data.get(key)
        return None if value is None else str(value).encode()

    async def set(self, key, value):
        self.data[key] = value
        return True

    async def incr(self, key):
        self.data[key] = int(self.data.get(key, 0)) + 1
        return self.data[key]

    async def decr(self, key):
        self.data[key] = int(self.data.get(key, 0)) - 1
        return self.data[key]

    async def aclose(self):
        self.closed = True


@pytest.fixture
def upstream():
    """Upstream double that always succeeds."""
    return ScriptedUpstream()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def web_root(tmp_path):
    """Web root with a couple of files, a subdirectory and an outside secret."""
    root = tmp_path / "httpdocs"
    root.mkdir()
    (root / "style.css").write_text("body { color: red; }")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (root / "sub").mkdir()
    (root / "sub" / "page.html").write_text("<p>hi</p>")

    secret = tmp_path / "secret.txt"
    secret.write_text("top secret")
    (root / "leak.txt").symlink_to(secret)
    return root


@pytest.fixture
def index_template(tmp_path):
    path = tmp_path / "index.html"
    path.write_text(
        "<script>var UPDATE_INTERVAL = {{UPDATE_INTERVAL}}; "
        "var ERROR_RETRY_TIMEOUT = {{ERROR_RETRY_TIMEOUT}};</script>"
    )
    return path


@pytest.fixture
def make_settings(web_root, index_template):
    """Build Settings pointing at the temporary web root and template."""
    from frame_relay.config import Settings

    def _make(**sections) -> Settings:
        data = {
            "paths": {
                "web_root": str(web_root),
                "index_template": str(index_template),
            },
        }
        data.update(sections)
        return Settings.model_validate(data)

    return _make
