from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional


EventType = Literal[
    "pointer_down",
    "pointer_move",
    "pointer_up",
    "pointer_cancel",
    "pointer_leave",
    "double_click",
    "wheel",
]

PointerType = Literal["mouse", "touch", "pen"]

EVENT_TYPES: frozenset[str] = frozenset(
    {
        "pointer_down",
        "pointer_move",
        "pointer_up",
        "pointer_cancel",
        "pointer_leave",
        "double_click",
        "wheel",
    }
)


@dataclass(frozen=True)
class InputEvent:
    """Pointer/wheel event in container pixel space (origin top-left)."""

    event_type: EventType
    timestamp: float
    x: float = 0.0
    y: float = 0.0
    pointer_id: int = 1
    pointer_type: PointerType = "mouse"
    button: Optional[int] = 0
    delta_y: Optional[float] = None
    delta_mode: int = 0
    modifiers: Optional[dict[str, bool]] = None

    def __post_init__(self) -> None:
        if self.event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {self.event_type}")
        if self.pointer_type not in {"mouse", "touch", "pen"}:
            raise ValueError(f"unknown pointer type: {self.pointer_type}")

    @property
    def ctrl(self) -> bool:
        return bool(self.modifiers and self.modifiers.get("ctrl"))

    def with_position(self, x: float, y: float) -> "InputEvent":
        return InputEvent(
            event_type=self.event_type,
            timestamp=self.timestamp,
            x=x,
            y=y,
            pointer_id=self.pointer_id,
            pointer_type=self.pointer_type,
            button=self.button,
            delta_y=self.delta_y,
            delta_mode=self.delta_mode,
            modifiers=self.modifiers,
        )
