"""
Frame Store
===========

Holds the single most recent frame.

Design Rules:
    - One writer (the fetch scheduler), any number of readers
    - replace() swaps the whole Frame reference in one assignment, so a
      reader gets either the previous frame or the new one
    - Does NOT keep history
"""

import logging
from typing import Optional

from frame_relay.relay.frame import Frame


logger = logging.getLogger(__name__)


class FrameStore:
    """
    Latest-frame holder.

    Example:
        store = FrameStore()
        store.read()            # None
        store.replace(frame)
        store.read() is frame   # True
    """

    def __init__(self) -> None:
        self._frame: Optional[Frame] = None
        self._replacements: int = 0

    @property
    def has_frame(self) -> bool:
        """Whether at least one frame has been stored."""
        return self._frame is not None

    @property
    def replacements(self) -> int:
        """Number of times the frame has been replaced."""
        return self._replacements

    def replace(self, frame: Frame) -> None:
        """
        Replace the current frame.

        Args:
            frame: Newly fetched frame
        """
        if frame.size == 0:
            logger.warning("Storing empty frame from upstream")
        self._frame = frame
        self._replacements += 1

    def read(self) -> Optional[Frame]:
        """
        Get the current frame.

        Returns:
            Most recent frame, or None before the first successful fetch.
        """
        return self._frame
