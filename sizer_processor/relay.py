"""
FrameRelay - single-slot hand-off between acquisition and detection.

The slot holds at most one frame. A frame offered while the slot is full is
dropped, so the detection thread never works through a backlog: memory stays
bounded and latency stays at one frame, at the cost of skipped frames under
load. Frames are never reordered and a taken frame is gone, so the same
frame instance is never processed twice.

Thread Safety:
- One threading.Condition guards the slot
- offer() notifies a consumer blocked in wait_take()
"""

import threading
from typing import Any, Optional


class FrameRelay:
    """
    Drop-if-full single-slot buffer.

    Usage:
        relay = FrameRelay()

        # acquisition thread
        relay.offer(frame)

        # detection thread
        frame = relay.wait_take(timeout=0.1)
        if frame is not None:
            ...
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._slot: Optional[Any] = None
        self._accepted = 0
        self._dropped = 0

    def offer(self, frame: Any) -> bool:
        """
        Put a frame in the slot if it is empty.

        Returns:
            True if the frame was accepted, False if it was dropped
        """
        if frame is None:
            raise ValueError("Cannot relay None: it is the empty-slot sentinel")

        with self._cond:
            if self._slot is not None:
                self._dropped += 1
                return False
            self._slot = frame
            self._accepted += 1
            self._cond.notify()
            return True

    def take(self) -> Optional[Any]:
        """Remove and return the pending frame, or None if the slot is empty."""
        with self._cond:
            frame, self._slot = self._slot, None
            return frame

    def wait_take(self, timeout: Optional[float] = None) -> Optional[Any]:
        """
        Block until a frame is available, then remove and return it.

        Returns:
            The frame, or None if nothing arrived within ``timeout``
        """
        with self._cond:
            if self._slot is None:
                self._cond.wait_for(lambda: self._slot is not None, timeout=timeout)
            frame, self._slot = self._slot, None
            return frame

    def wake(self) -> None:
        """Wake any thread blocked in wait_take() (used on shutdown)."""
        with self._cond:
            self._cond.notify_all()

    def is_empty(self) -> bool:
        with self._cond:
            return self._slot is None

    @property
    def accepted_count(self) -> int:
        with self._cond:
            return self._accepted

    @property
    def dropped_count(self) -> int:
        with self._cond:
            return self._dropped
