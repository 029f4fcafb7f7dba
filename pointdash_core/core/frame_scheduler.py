from __future__ import annotations

import itertools
import logging
import time
from typing import Callable


LOGGER = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]


class FrameScheduler:
    """Single-threaded animation-frame queue.

    Callbacks requested before `run_frame` starts run in that frame, in request
    order. Callbacks requested from inside a frame are deferred to the next one.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._ids = itertools.count(1)
        self._pending: dict[int, FrameCallback] = {}
        self._running: dict[int, FrameCallback] = {}
        self._last_frame_at: float | None = None

    def now(self) -> float:
        return float(self._clock())

    @property
    def last_frame_at(self) -> float | None:
        return self._last_frame_at

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int | None) -> None:
        if handle is None:
            return
        self._pending.pop(handle, None)
        # A callback may cancel a sibling that is queued later in the same frame.
        self._running.pop(handle, None)

    def pending_count(self) -> int:
        return len(self._pending)

    def run_frame(self, now: float | None = None) -> int:
        ts = self.now() if now is None else float(now)
        self._last_frame_at = ts
        self._running = self._pending
        self._pending = {}
        ran = 0
        while self._running:
            handle = next(iter(self._running))
            callback = self._running.pop(handle)
            callback(ts)
            ran += 1
        if ran:
            LOGGER.debug("frame at %.4f ran %d callbacks", ts, ran)
        return ran

    def clear(self) -> None:
        self._pending.clear()
        self._running.clear()
