from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np


@dataclass
class LayerCache:
    """Static chrome (background, axes, labels) keyed by size and tick layout."""

    chrome_key: tuple[Any, ...] | None = None
    chrome_template: np.ndarray | None = None
    hits: int = 0

    def lookup(self, key: tuple[Any, ...]) -> np.ndarray | None:
        if self.chrome_key == key and self.chrome_template is not None:
            self.hits += 1
            return self.chrome_template.copy()
        return None

    def store(self, key: tuple[Any, ...], template: np.ndarray) -> None:
        self.chrome_key = key
        self.chrome_template = template.copy()

    def invalidate(self) -> None:
        self.chrome_key = None
        self.chrome_template = None


@dataclass
class DirtyState:
    """Marks pending redraw work; reasons from superseded changes collapse into one."""

    dirty: bool = True
    reasons: set[str] = field(default_factory=set)

    def mark(self, reason: str) -> bool:
        was_dirty = self.dirty
        self.dirty = True
        self.reasons.add(reason)
        return not was_dirty

    def consume(self) -> set[str]:
        reasons = set(self.reasons)
        self.dirty = False
        self.reasons.clear()
        return reasons
