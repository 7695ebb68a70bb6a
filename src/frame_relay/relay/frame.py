"""
Frame Data Model
================

The relay's in-memory frame.

Design Rules:
    - Immutable; a new Frame is built for every successful fetch
    - Holds raw upstream bytes, never decoded or re-encoded
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Frame:
    """
    Most recent image fetched from upstream.

    Attributes:
        data: Raw JPEG bytes exactly as received
        timestamp: UNIX timestamp when the fetch completed
    """

    data: bytes
    timestamp: float

    @property
    def size(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the image."""
        return f"Frame(size={self.size}, timestamp={self.timestamp:.3f})"
