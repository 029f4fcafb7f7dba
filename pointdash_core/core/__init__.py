from .cadence import EmitCadence
from .events import EVENT_TYPES, EventType, InputEvent, PointerType
from .frame_scheduler import FrameCallback, FrameScheduler

__all__ = [
    "EVENT_TYPES",
    "EmitCadence",
    "EventType",
    "FrameCallback",
    "FrameScheduler",
    "InputEvent",
    "PointerType",
]
