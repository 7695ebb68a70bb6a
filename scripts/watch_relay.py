#!/usr/bin/env python3
"""
Relay Watch Script
==================

Standalone script to check a running relay's push channel.

This script:
    1. Connects to the relay's push endpoint
    2. Runs for a configurable duration
    3. Logs event counts every report interval
    4. Reports final summary

Prerequisites:
    - The relay must be running with push enabled (PUSH_PATH=/ws)
    - Install dependencies: pip install -e .

Usage:
    python scripts/watch_relay.py --duration 60
    python scripts/watch_relay.py --url ws://localhost:8000/ws
"""

import argparse
import asyncio
import json
import logging
import os
import sys
import time

import websockets
from websockets.exceptions import ConnectionClosed


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def watch(url: str, duration: int, report_interval: int) -> dict:
    """
    Count push events for a while.

    Args:
        url: WebSocket URL of the relay's push endpoint
        duration: Watch duration in seconds
        report_interval: Seconds between progress reports

    Returns:
        Final counts dict
    """
    logger.info("=" * 60)
    logger.info(f"Watching {url} for {duration} seconds")
    logger.info("=" * 60)

    counts = {"connected": 0, "frame_ready": 0, "frame_failed": 0, "other": 0}
    start_time = time.time()
    last_report_time = start_time
    last_ready = 0

    async with websockets.connect(url, ping_interval=20, ping_timeout=10) as ws:
        while True:
            elapsed = time.time() - start_time
            if elapsed >= duration:
                logger.info(f"Watch duration ({duration}s) reached")
                break

            try:
                raw = await asyncio.wait_for(ws.recv(), timeout=0.5)
            except asyncio.TimeoutError:
                raw = None
            except ConnectionClosed as e:
                logger.error(f"Relay closed the connection: {e}")
                break

            if raw is not None:
                try:
                    event = json.loads(raw).get("event")
                except (json.JSONDecodeError, AttributeError):
                    event = None
                counts[event if event in counts else "other"] += 1
                if event == "frame_failed":
                    logger.warning(f"Relay reported failed fetch: {raw}")

            time_since_report = time.time() - last_report_time
            if time_since_report >= report_interval:
                ready_since_last = counts["frame_ready"] - last_ready
                fps = ready_since_last / time_since_report
                logger.info("-" * 40)
                logger.info(f"Progress Report (elapsed: {elapsed:.0f}s)")
                logger.info(f"  Frames announced: {counts['frame_ready']}")
                logger.info(f"  Failed fetches: {counts['frame_failed']}")
                logger.info(f"  Current rate: {fps:.1f} frames/s")
                last_report_time = time.time()
                last_ready = counts["frame_ready"]

    total_time = time.time() - start_time
    logger.info("=" * 60)
    logger.info("FINAL SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total runtime: {total_time:.1f} seconds")
    logger.info(f"Frames announced: {counts['frame_ready']}")
    logger.info(f"Failed fetches: {counts['frame_failed']}")
    logger.info(f"Unrecognized messages: {counts['other']}")
    logger.info("=" * 60)

    return {"duration": total_time, **counts}


def main():
    parser = argparse.ArgumentParser(description="Watch a relay's push channel")
    parser.add_argument(
        "--url",
        type=str,
        default=os.environ.get("RELAY_PUSH_URL", "ws://localhost:8000/ws"),
        help="WebSocket URL of the relay push endpoint",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=60,
        help="Watch duration in seconds (default: 60)",
    )
    parser.add_argument(
        "--report-interval",
        type=int,
        default=10,
        help="Seconds between progress reports (default: 10)",
    )

    args = parser.parse_args()

    result = asyncio.run(watch(
        url=args.url,
        duration=args.duration,
        report_interval=args.report_interval,
    ))

    sys.exit(0 if result["frame_ready"] > 0 else 1)


if __name__ == "__main__":
    main()
