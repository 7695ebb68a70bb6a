"""
Presence and Activity Tests
===========================

Tests for the presence policies and both activity backends.
"""

import asyncio

import pytest

from frame_relay.relay import (
    ConnectionPresence,
    Frame,
    FrameStore,
    InMemoryActivityTracker,
    RedisActivityTracker,
    TimeoutPresence,
    create_activity_tracker,
    create_presence_policy,
)


class TestTimeoutPresence:

    def test_never_active_is_absent(self, clock):
        tracker = InMemoryActivityTracker(clock=clock)
        presence = TimeoutPresence(tracker, sleep_timeout_ms=2000)

        assert asyncio.run(presence.is_present()) is False

    def test_recent_activity_is_present(self, clock):
        tracker = InMemoryActivityTracker(clock=clock)
        presence = TimeoutPresence(tracker, sleep_timeout_ms=2000)

        asyncio.run(tracker.record_activity())
        clock.advance(1.999)

        assert asyncio.run(presence.is_present()) is True

    def test_stale_activity_is_absent(self, clock):
        tracker = InMemoryActivityTracker(clock=clock)
        presence = TimeoutPresence(tracker, sleep_timeout_ms=2000)

        asyncio.run(tracker.record_activity())
        clock.advance(2.5)

        assert asyncio.run(presence.is_present()) is False

    def test_does_not_wake_on_connect(self):
        presence = TimeoutPresence(InMemoryActivityTracker(), 2000)
        assert presence.wakes_on_connect is False


class TestConnectionPresence:

    def test_present_before_first_frame(self):
        presence = ConnectionPresence(InMemoryActivityTracker(), FrameStore())
        assert asyncio.run(presence.is_present()) is True

    def test_absent_without_connections_after_first_frame(self):
        store = FrameStore()
        store.replace(Frame(data=b"x", timestamp=1.0))
        presence = ConnectionPresence(InMemoryActivityTracker(), store)

        assert asyncio.run(presence.is_present()) is False

    def test_present_with_connection(self):
        store = FrameStore()
        store.replace(Frame(data=b"x", timestamp=1.0))
        tracker = InMemoryActivityTracker()
        presence = ConnectionPresence(tracker, store)

        asyncio.run(tracker.increment())

        assert asyncio.run(presence.is_present()) is True
        assert presence.wakes_on_connect is True


class TestInMemoryActivityTracker:

    def test_counts(self):
        tracker = InMemoryActivityTracker()

        async def scenario():
            await tracker.increment()
            await tracker.increment()
            await tracker.decrement()
            return await tracker.current_count()

        assert asyncio.run(scenario()) == 1

    def test_count_never_negative(self):
        tracker = InMemoryActivityTracker()

        async def scenario():
            await tracker.decrement()
            return await tracker.current_count()

        assert asyncio.run(scenario()) == 0

    def test_idle_seconds(self, clock):
        tracker = InMemoryActivityTracker(clock=clock)

        assert asyncio.run(tracker.idle_seconds()) is None
        asyncio.run(tracker.record_activity())
        clock.advance(3.0)
        assert asyncio.run(tracker.idle_seconds()) == pytest.approx(3.0)


class TestRedisActivityTracker:

    def test_absent_key_reads_zero(self, fake_redis):
        tracker = RedisActivityTracker(fake_redis, key_prefix="cam")
        assert asyncio.run(tracker.current_count()) == 0
        assert asyncio.run(tracker.idle_seconds()) is None

    def test_increment_decrement(self, fake_redis):
        tracker = RedisActivityTracker(fake_redis, key_prefix="cam")

        async def scenario():
            assert await tracker.increment() == 1
            assert await tracker.increment() == 2
            assert await tracker.decrement() == 1
            return await tracker.current_count()

        assert asyncio.run(scenario()) == 1
        assert fake_redis.data["cam:viewers"] == 1

    def test_negative_counter_reset(self, fake_redis):
        tracker = RedisActivityTracker(fake_redis, key_prefix="cam")

        assert asyncio.run(tracker.decrement()) == 0
        assert fake_redis.data["cam:viewers"] == 0

    def test_last_activity_shared(self, fake_redis, clock):
        writer = RedisActivityTracker(fake_redis, key_prefix="cam", clock=clock)
        reader = RedisActivityTracker(fake_redis, key_prefix="cam", clock=clock)

        asyncio.run(writer.record_activity())
        clock.advance(1.5)

        assert asyncio.run(reader.idle_seconds()) == pytest.approx(1.5)

    def test_aclose(self, fake_redis):
        tracker = RedisActivityTracker(fake_redis)
        asyncio.run(tracker.aclose())
        assert fake_redis.closed is True


class TestFactories:

    def test_memory_backend(self):
        assert isinstance(create_activity_tracker("memory"), InMemoryActivityTracker)

    def test_redis_backend_requires_url(self):
        with pytest.raises(ValueError):
            create_activity_tracker("redis")

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_activity_tracker("memcached")

    def test_presence_modes(self):
        tracker = InMemoryActivityTracker()
        store = FrameStore()

        assert isinstance(create_presence_policy("timeout", tracker, store, 2000), TimeoutPresence)
        assert isinstance(create_presence_policy("connections", tracker, store, 2000), ConnectionPresence)
        with pytest.raises(ValueError):
            create_presence_policy("psychic", tracker, store, 2000)
