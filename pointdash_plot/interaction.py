from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Literal, Protocol, Union

from pointdash_core.core import FrameScheduler, InputEvent
from pointdash_plot.config import GraphConfig
from pointdash_plot.ids import IdFactory
from pointdash_plot.live import LiveUpdate, LiveUpdateThrottle
from pointdash_plot.points import Point, PointId
from pointdash_plot.transform import (
    BackgroundPan,
    EffectiveScale,
    PinchZoom,
    Pixel,
    WheelZoom,
    ZoomLimits,
    ZoomTransform,
    apply_gesture,
)


LOGGER = logging.getLogger(__name__)

GestureKind = Literal["potential_drag", "dragging", "panning", "pinching"]


@dataclass(frozen=True)
class AddIntent:
    point: Point


@dataclass(frozen=True)
class MoveIntent:
    point_id: PointId
    x: float
    y: float
    final: bool


@dataclass(frozen=True)
class SelectIntent:
    point_id: PointId


@dataclass(frozen=True)
class HoverIntent:
    point_id: PointId | None


Intent = Union[AddIntent, MoveIntent, SelectIntent, HoverIntent]


class InteractionHost(Protocol):
    """What the controller needs from the view that owns it."""

    @property
    def inner_size(self) -> tuple[float, float]:
        ...

    @property
    def transform(self) -> ZoomTransform:
        ...

    def zoom_limits(self) -> ZoomLimits:
        ...

    def effective_scales(self) -> tuple[EffectiveScale, EffectiveScale]:
        ...

    def find_point(self, point_id: PointId | None) -> Point | None:
        ...

    def hit_test(self, px: float, py: float) -> PointId | None:
        ...

    def apply_transform(self, transform: ZoomTransform, *, source: str) -> None:
        ...

    def cancel_auto_pan(self) -> None:
        ...


@dataclass
class InteractionSession:
    pointer_id: int
    start_pixel: Pixel
    kind: GestureKind
    dragged_point_id: PointId | None = None
    start_transform: ZoomTransform | None = None
    last_pixel: Pixel | None = None
    moved: bool = False

    @property
    def is_dragging(self) -> bool:
        return self.kind == "dragging"


@dataclass(frozen=True)
class DragPreview:
    """Where the dragged point lands if released now."""

    point_id: PointId
    x: float
    y: float
    pixel: Pixel


@dataclass(frozen=True)
class _TapRecord:
    timestamp: float
    pixel: Pixel
    pointer_id: int


@dataclass
class _PinchState:
    pointer_ids: tuple[int, int]
    start: tuple[Pixel, Pixel]
    start_transform: ZoomTransform


def distance_sq(a: Pixel, b: Pixel) -> float:
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    return dx * dx + dy * dy


class InteractionController:
    """Turns inner-plot pointer events into point intents and zoom/pan updates.

    Per pointer: idle -> potential_drag (down on a point) -> dragging (moved at
    least the drag threshold) -> idle on up. A potential drag released below the
    threshold is a click. Background presses pan, two background pointers pinch.
    """

    def __init__(
        self,
        host: InteractionHost,
        *,
        scheduler: FrameScheduler,
        sink: Callable[[Intent], None],
        id_factory: IdFactory,
        config: GraphConfig | None = None,
    ) -> None:
        self._host = host
        self._scheduler = scheduler
        self._sink = sink
        self._id_factory = id_factory
        self._config = config or GraphConfig()
        self._sessions: dict[int, InteractionSession] = {}
        self._active: dict[int, Pixel] = {}
        self._pinch: _PinchState | None = None
        self._last_tap: _TapRecord | None = None
        self._hovered: PointId | None = None
        self._flush_handle: int | None = None
        self._drag_preview: DragPreview | None = None
        self._throttle = LiveUpdateThrottle(
            self._emit_live,
            interval_s=self._config.live_update_interval_s,
        )

    @property
    def config(self) -> GraphConfig:
        return self._config

    def set_config(self, config: GraphConfig) -> None:
        self._config = config
        self._throttle = LiveUpdateThrottle(self._emit_live, interval_s=config.live_update_interval_s)

    @property
    def hovered_id(self) -> PointId | None:
        return self._hovered

    @property
    def throttle(self) -> LiveUpdateThrottle:
        return self._throttle

    @property
    def drag_preview(self) -> DragPreview | None:
        return self._drag_preview

    def session(self, pointer_id: int) -> InteractionSession | None:
        return self._sessions.get(pointer_id)

    def is_dragging(self) -> bool:
        return any(s.kind in {"potential_drag", "dragging"} for s in self._sessions.values())

    def dragged_point_id(self) -> PointId | None:
        for session in self._sessions.values():
            if session.is_dragging:
                return session.dragged_point_id
        return None

    def clamp_pixel(self, x: float, y: float) -> Pixel:
        w, h = self._host.inner_size
        return (max(0.0, min(w, x)), max(0.0, min(h, y)))

    def invert_pixel(self, x: float, y: float) -> tuple[float, float]:
        cx, cy = self.clamp_pixel(x, y)
        # Always ask the host: scales change with every transform or data update.
        sx, sy = self._host.effective_scales()
        return float(sx.invert(cx)), float(sy.invert(cy))

    def handle(self, event: InputEvent) -> None:
        """Dispatch one event whose x/y are already in inner plot pixels."""

        kind = event.event_type
        if kind == "pointer_down":
            self._on_down(event)
        elif kind == "pointer_move":
            self._on_move(event)
        elif kind == "pointer_up":
            self._on_up(event)
        elif kind == "pointer_cancel":
            self._on_cancel(event)
        elif kind == "pointer_leave":
            self._on_leave(event)
        elif kind == "double_click":
            self._on_double_click(event)
        elif kind == "wheel":
            self._on_wheel(event)

    def close(self) -> None:
        self._throttle.cancel()
        self._scheduler.cancel_frame(self._flush_handle)
        self._flush_handle = None
        self._drag_preview = None
        self._sessions.clear()
        self._active.clear()
        self._pinch = None

    def _on_down(self, event: InputEvent) -> None:
        if event.pointer_type == "mouse" and event.button not in (0, None):
            return
        pixel = (event.x, event.y)
        self._active[event.pointer_id] = pixel

        if len(self._active) > 1:
            self._maybe_start_pinch(event)
            return

        hit = self._host.hit_test(event.x, event.y)
        if hit is not None:
            self._sessions[event.pointer_id] = InteractionSession(
                pointer_id=event.pointer_id,
                start_pixel=pixel,
                kind="potential_drag",
                dragged_point_id=hit,
                last_pixel=pixel,
            )
            return

        if event.pointer_type in {"touch", "pen"} and self._is_double_tap(event):
            self._last_tap = None
            self._emit_add(event.x, event.y)
            return

        if event.pointer_type in {"touch", "pen"}:
            self._last_tap = _TapRecord(timestamp=event.timestamp, pixel=pixel, pointer_id=event.pointer_id)
        self._sessions[event.pointer_id] = InteractionSession(
            pointer_id=event.pointer_id,
            start_pixel=pixel,
            kind="panning",
            start_transform=self._host.transform,
            last_pixel=pixel,
        )

    def _on_move(self, event: InputEvent) -> None:
        pixel = (event.x, event.y)
        if event.pointer_id in self._active:
            self._active[event.pointer_id] = pixel

        if self._pinch is not None and event.pointer_id in self._pinch.pointer_ids:
            self._update_pinch()
            return

        session = self._sessions.get(event.pointer_id)
        if session is None:
            if event.pointer_id not in self._active and event.pointer_type != "touch":
                self._update_hover(event.x, event.y)
            return
        session.last_pixel = pixel

        if session.kind == "potential_drag":
            if distance_sq(session.start_pixel, pixel) < self._config.drag_threshold_sq:
                return
            session.kind = "dragging"
            LOGGER.debug("drag started on %r (pointer %d)", session.dragged_point_id, event.pointer_id)

        if session.kind == "dragging":
            x, y = self.invert_pixel(event.x, event.y)
            self._drag_preview = DragPreview(
                point_id=session.dragged_point_id,
                x=x,
                y=y,
                pixel=self.clamp_pixel(event.x, event.y),
            )
            self._submit_live(LiveUpdate(point_id=session.dragged_point_id, x=x, y=y), event.timestamp)
            return

        if session.kind == "panning":
            if pixel != session.start_pixel and not session.moved:
                session.moved = True
                self._host.cancel_auto_pan()
                # Auto-pan frames may have run since the press.
                session.start_transform = self._host.transform
            if self._last_tap is not None and self._last_tap.pointer_id == event.pointer_id:
                if distance_sq(session.start_pixel, pixel) >= self._config.double_tap_distance_sq:
                    self._last_tap = None
            assert session.start_transform is not None
            gesture = BackgroundPan(
                start_transform=session.start_transform,
                start_pixel=session.start_pixel,
                current_pixel=pixel,
            )
            self._host.apply_transform(
                apply_gesture(self._host.transform, gesture, self._host.zoom_limits()),
                source="pan",
            )

    def _on_up(self, event: InputEvent) -> None:
        self._active.pop(event.pointer_id, None)
        if self._pinch is not None and event.pointer_id in self._pinch.pointer_ids:
            self._end_pinch(event.pointer_id)
            return

        session = self._sessions.pop(event.pointer_id, None)
        if session is None:
            return
        pixel = (event.x, event.y)

        if session.kind == "potential_drag":
            if distance_sq(session.start_pixel, pixel) < self._config.drag_threshold_sq:
                LOGGER.debug("click on %r", session.dragged_point_id)
                self._sink(SelectIntent(point_id=session.dragged_point_id))
                return
            session.kind = "dragging"

        if session.kind == "dragging":
            self._throttle.cancel()
            self._scheduler.cancel_frame(self._flush_handle)
            self._flush_handle = None
            self._drag_preview = None
            x, y = self.invert_pixel(event.x, event.y)
            LOGGER.debug("drag committed for %r at (%g, %g)", session.dragged_point_id, x, y)
            self._sink(MoveIntent(point_id=session.dragged_point_id, x=x, y=y, final=True))

    def _on_cancel(self, event: InputEvent) -> None:
        self._active.pop(event.pointer_id, None)
        if self._pinch is not None and event.pointer_id in self._pinch.pointer_ids:
            self._pinch = None
        session = self._sessions.pop(event.pointer_id, None)
        if session is not None and session.kind in {"potential_drag", "dragging"}:
            self._throttle.cancel()
            self._scheduler.cancel_frame(self._flush_handle)
            self._flush_handle = None
            self._drag_preview = None
            LOGGER.debug("drag on %r cancelled", session.dragged_point_id)

    def _on_leave(self, event: InputEvent) -> None:
        if self.is_dragging():
            return
        self._set_hover(None)

    def _on_double_click(self, event: InputEvent) -> None:
        # Touch and pen adds come from tap detection; their synthesized dblclick is ignored.
        if event.pointer_type != "mouse":
            return
        if self._host.hit_test(event.x, event.y) is not None:
            return
        self._emit_add(event.x, event.y)

    def _on_wheel(self, event: InputEvent) -> None:
        if event.delta_y is None or event.delta_y == 0:
            return
        self._host.cancel_auto_pan()
        gesture = WheelZoom(
            anchor=(event.x, event.y),
            delta_y=float(event.delta_y),
            delta_mode=event.delta_mode,
            ctrl=event.ctrl,
        )
        self._host.apply_transform(
            apply_gesture(self._host.transform, gesture, self._host.zoom_limits()),
            source="wheel",
        )

    def _maybe_start_pinch(self, event: InputEvent) -> None:
        # Another pointer is already down; this press is never a tap.
        self._last_tap = None
        if self._pinch is not None:
            return
        others = [pid for pid in self._active if pid != event.pointer_id]
        other = others[0]
        other_session = self._sessions.get(other)
        if other_session is not None and other_session.kind != "panning":
            return
        if self._host.hit_test(event.x, event.y) is not None:
            return
        self._host.cancel_auto_pan()
        self._sessions.pop(other, None)
        self._pinch = _PinchState(
            pointer_ids=(other, event.pointer_id),
            start=(self._active[other], self._active[event.pointer_id]),
            start_transform=self._host.transform,
        )
        LOGGER.debug("pinch started with pointers %r", self._pinch.pointer_ids)

    def _update_pinch(self) -> None:
        assert self._pinch is not None
        a, b = self._pinch.pointer_ids
        if a not in self._active or b not in self._active:
            return
        gesture = PinchZoom(
            start_transform=self._pinch.start_transform,
            start=self._pinch.start,
            current=(self._active[a], self._active[b]),
        )
        self._host.apply_transform(
            apply_gesture(self._host.transform, gesture, self._host.zoom_limits()),
            source="pinch",
        )

    def _end_pinch(self, lifted: int) -> None:
        assert self._pinch is not None
        remaining = [pid for pid in self._pinch.pointer_ids if pid != lifted and pid in self._active]
        self._pinch = None
        LOGGER.debug("pinch ended")
        for pid in remaining:
            pixel = self._active[pid]
            self._sessions[pid] = InteractionSession(
                pointer_id=pid,
                start_pixel=pixel,
                kind="panning",
                start_transform=self._host.transform,
                last_pixel=pixel,
            )

    def _is_double_tap(self, event: InputEvent) -> bool:
        tap = self._last_tap
        if tap is None:
            return False
        if event.timestamp - tap.timestamp > self._config.double_tap_interval_s:
            return False
        return distance_sq(tap.pixel, (event.x, event.y)) <= self._config.double_tap_distance_sq

    def _emit_add(self, x: float, y: float) -> None:
        dx, dy = self.invert_pixel(x, y)
        point_id = self._id_factory(taken=lambda pid: self._host.find_point(pid) is not None)
        point = Point(id=point_id, x=dx, y=dy)
        LOGGER.debug("add point %r at (%g, %g)", point.id, dx, dy)
        self._sink(AddIntent(point=point))

    def _update_hover(self, x: float, y: float) -> None:
        if self.is_dragging():
            return
        self._set_hover(self._host.hit_test(x, y))

    def _set_hover(self, point_id: PointId | None) -> None:
        if point_id == self._hovered:
            return
        self._hovered = point_id
        self._sink(HoverIntent(point_id=point_id))

    def _submit_live(self, update: LiveUpdate, now: float) -> None:
        if self._throttle.submit(update, now):
            return
        if self._flush_handle is None:
            self._flush_handle = self._scheduler.request_frame(self._flush_live)

    def _flush_live(self, now: float) -> None:
        self._flush_handle = None
        self._throttle.poll(now)
        if self._throttle.pending is not None:
            self._flush_handle = self._scheduler.request_frame(self._flush_live)

    def _emit_live(self, update: LiveUpdate) -> None:
        self._sink(MoveIntent(point_id=update.point_id, x=update.x, y=update.y, final=False))
