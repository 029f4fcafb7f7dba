from __future__ import annotations

import itertools
import random
import time
from typing import Callable, Protocol


_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

# Shared by every id factory in the process.
_ISSUED_IDS: set[str] = set()

TakenPredicate = Callable[[str], bool]


class IdFactory(Protocol):
    def __call__(self, taken: TakenPredicate | None = None) -> str:
        ...


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be >= 0")
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class TimestampIdFactory:
    """Millisecond timestamp plus random suffix, both base-36.

    Every id handed out in the process is remembered, so a collision inside the
    same millisecond draws a fresh suffix instead of repeating an id. `taken`
    lets the caller veto ids already present in its own point snapshot.
    """

    def __init__(
        self,
        *,
        prefix: str = "",
        suffix_len: int = 6,
        clock_ms: Callable[[], int] | None = None,
        rng: random.Random | None = None,
        issued: set[str] | None = None,
    ) -> None:
        if suffix_len <= 0:
            raise ValueError("suffix_len must be > 0")
        self._prefix = prefix
        self._suffix_len = suffix_len
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)
        self._rng = rng or random.Random()
        self._issued = _ISSUED_IDS if issued is None else issued

    def __call__(self, taken: TakenPredicate | None = None) -> str:
        while True:
            stamp = to_base36(int(self._clock_ms()))
            suffix = "".join(self._rng.choice(_BASE36) for _ in range(self._suffix_len))
            out = f"{self._prefix}-{stamp}-{suffix}" if self._prefix else f"{stamp}{suffix}"
            if out in self._issued or (taken is not None and taken(out)):
                continue
            self._issued.add(out)
            return out


class SequentialIdFactory:
    """`prefix-N` ids; skips numbers already issued in the process or taken by the caller."""

    def __init__(self, *, prefix: str = "point", start: int = 0, issued: set[str] | None = None) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._issued = _ISSUED_IDS if issued is None else issued

    def __call__(self, taken: TakenPredicate | None = None) -> str:
        while True:
            out = f"{self._prefix}-{next(self._counter)}"
            if out in self._issued or (taken is not None and taken(out)):
                continue
            self._issued.add(out)
            return out


def build_id_factory(strategy: str) -> IdFactory:
    if strategy == "timestamp":
        return TimestampIdFactory()
    if strategy == "sequential":
        return SequentialIdFactory()
    raise ValueError(f"unknown id strategy: {strategy}")
