from __future__ import annotations

from dataclasses import dataclass


@dataclass
class EmitCadence:
    """Minimum-interval gate for emissions driven by an external clock."""

    interval_s: float
    _last_emit_at: float | None = None

    def __post_init__(self) -> None:
        if self.interval_s < 0:
            raise ValueError("interval_s must be >= 0")

    @property
    def last_emit_at(self) -> float | None:
        return self._last_emit_at

    def ready(self, now: float) -> bool:
        if self._last_emit_at is None:
            return True
        # Clock going backwards (e.g. replayed timestamps) must not stall emissions.
        if now < self._last_emit_at:
            return True
        return (now - self._last_emit_at) >= self.interval_s

    def mark(self, now: float) -> None:
        self._last_emit_at = now

    def reset(self) -> None:
        self._last_emit_at = None
