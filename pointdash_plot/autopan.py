from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Protocol

from pointdash_core.core import FrameScheduler
from pointdash_plot.points import Point, PointId
from pointdash_plot.scales import Scale
from pointdash_plot.transform import ZoomLimits, ZoomTransform, center_on, constrain


LOGGER = logging.getLogger(__name__)


def ease_cubic_in_out(t: float) -> float:
    t = max(0.0, min(1.0, t)) * 2.0
    if t <= 1.0:
        return t * t * t / 2.0
    t -= 2.0
    return (t * t * t + 2.0) / 2.0


def interpolate_transform(a: ZoomTransform, b: ZoomTransform, e: float) -> ZoomTransform:
    return ZoomTransform(
        k=a.k + (b.k - a.k) * e,
        tx=a.tx + (b.tx - a.tx) * e,
        ty=a.ty + (b.ty - a.ty) * e,
    )


class AutoPanHost(Protocol):
    @property
    def inner_size(self) -> tuple[float, float]:
        ...

    @property
    def transform(self) -> ZoomTransform:
        ...

    def zoom_limits(self) -> ZoomLimits:
        ...

    def base_scales(self) -> tuple[Scale, Scale]:
        ...

    def find_point(self, point_id: PointId | None) -> Point | None:
        ...

    def apply_transform(self, transform: ZoomTransform, *, source: str) -> None:
        ...


@dataclass
class AutoPanAnimation:
    start: ZoomTransform
    target: ZoomTransform
    duration_s: float
    started_at: float | None = None

    def sample(self, now: float) -> tuple[ZoomTransform, bool]:
        if self.started_at is None:
            self.started_at = now
        if self.duration_s <= 0:
            return self.target, True
        progress = (now - self.started_at) / self.duration_s
        if progress >= 1.0:
            return self.target, True
        return interpolate_transform(self.start, self.target, ease_cubic_in_out(progress)), False


class AutoPanController:
    """Pans a newly highlighted point back into view when it sits off-screen."""

    def __init__(
        self,
        host: AutoPanHost,
        scheduler: FrameScheduler,
        *,
        padding_px: float = 20.0,
        duration_s: float = 0.3,
    ) -> None:
        self._host = host
        self._scheduler = scheduler
        self.padding_px = padding_px
        self.duration_s = duration_s
        self._animation: AutoPanAnimation | None = None
        self._handle: int | None = None

    @property
    def active(self) -> bool:
        return self._animation is not None

    @property
    def target(self) -> ZoomTransform | None:
        return self._animation.target if self._animation is not None else None

    def is_visible(self, point: Point) -> bool:
        bx, by = self._host.base_scales()
        px, py = self._host.transform.apply((float(bx.apply(point.x)), float(by.apply(point.y))))
        w, h = self._host.inner_size
        pad = self.padding_px
        return pad <= px <= w - pad and pad <= py <= h - pad

    def plan(self, point: Point) -> ZoomTransform | None:
        """Constrained transform that centres `point`, or None when no pan is needed."""

        if self.is_visible(point):
            return None
        bx, by = self._host.base_scales()
        limits = self._host.zoom_limits()
        current = self._host.transform
        target = constrain(center_on(current, (float(bx.apply(point.x)), float(by.apply(point.y))), limits), limits)
        if target.almost_equal(current):
            return None
        return target

    def focus(self, point_id: PointId | None) -> bool:
        """Start panning toward `point_id`; call only when the highlighted id changes."""

        point = self._host.find_point(point_id)
        if point is None:
            return False
        target = self.plan(point)
        if target is None:
            return False
        self.cancel()
        self._animation = AutoPanAnimation(
            start=self._host.transform,
            target=target,
            duration_s=self.duration_s,
        )
        self._handle = self._scheduler.request_frame(self._step)
        LOGGER.debug("auto-pan to %r started: target %r", point_id, target)
        return True

    def cancel(self) -> None:
        if self._animation is None:
            return
        self._scheduler.cancel_frame(self._handle)
        self._handle = None
        self._animation = None
        LOGGER.debug("auto-pan cancelled")

    def _step(self, now: float) -> None:
        self._handle = None
        animation = self._animation
        if animation is None:
            return
        sampled, done = animation.sample(now)
        if done:
            self._animation = None
            self._host.apply_transform(animation.target, source="autopan")
            LOGGER.debug("auto-pan finished")
            return
        self._host.apply_transform(constrain(sampled, self._host.zoom_limits()), source="autopan")
        self._handle = self._scheduler.request_frame(self._step)
