from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Hashable

from pointdash_core.core import EmitCadence


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveUpdate:
    point_id: Hashable
    x: float
    y: float


class LiveUpdateThrottle:
    """Coalesces live drag updates to at most one emission per interval.

    The first update of a burst goes out immediately; later ones inside the
    interval replace each other and the survivor is sent by `poll`. Changing
    the point id drops whatever is pending for the previous point.
    """

    def __init__(self, emit: Callable[[LiveUpdate], None], *, interval_s: float = 0.016) -> None:
        self._emit = emit
        self._cadence = EmitCadence(interval_s=interval_s)
        self._pending: LiveUpdate | None = None
        self.emitted = 0
        self.dropped = 0

    @property
    def pending(self) -> LiveUpdate | None:
        return self._pending

    def submit(self, update: LiveUpdate, now: float) -> bool:
        if self._pending is not None and self._pending.point_id != update.point_id:
            self.cancel()
        if self._cadence.ready(now):
            self._pending = None
            self._send(update, now)
            return True
        if self._pending is not None:
            self.dropped += 1
        self._pending = update
        return False

    def poll(self, now: float) -> bool:
        if self._pending is None or not self._cadence.ready(now):
            return False
        update = self._pending
        self._pending = None
        self._send(update, now)
        return True

    def cancel(self) -> None:
        if self._pending is not None:
            LOGGER.debug("cancelled pending live update for %r", self._pending.point_id)
        self._pending = None

    def reset(self) -> None:
        self.cancel()
        self._cadence.reset()

    def _send(self, update: LiveUpdate, now: float) -> None:
        self._cadence.mark(now)
        self.emitted += 1
        self._emit(update)
