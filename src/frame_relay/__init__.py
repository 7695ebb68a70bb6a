"""
frame-relay
===========

Single-upstream camera frame relay.

Pulls one still image at a time from an upstream camera over HTTP, keeps
the latest frame in memory, and serves it to any number of viewers without
each viewer causing its own upstream request. Fetching is suspended while
nobody is watching and resumes as soon as a viewer shows up.

Components:
    - relay.client: UpstreamClient (one GET per cycle)
    - relay.store: FrameStore (latest frame, atomic replace)
    - relay.activity: viewer activity backends (memory / redis)
    - relay.presence: presence policies (timeout / connections)
    - relay.scheduler: FetchScheduler (ACTIVE / ASLEEP state machine)
    - relay.stats: StatsCollector (counters + running mean)
    - relay.notifier: push notification to connected viewers

Example:
    from frame_relay.main import create_app
    from frame_relay.config import load_config

    app = create_app(load_config())
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
