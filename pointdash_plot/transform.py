from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Literal, Union

from pointdash_plot.scales import Scale, safe_domain


Extent = tuple[tuple[float, float], tuple[float, float]]
Pixel = tuple[float, float]

DEFAULT_ZOOM_EXTENT = (0.5, 40.0)


@dataclass(frozen=True)
class ZoomTransform:
    """Uniform zoom `k` plus translation, applied on top of base pixel space."""

    k: float = 1.0
    tx: float = 0.0
    ty: float = 0.0

    def apply(self, point: Pixel) -> Pixel:
        return (point[0] * self.k + self.tx, point[1] * self.k + self.ty)

    def invert(self, point: Pixel) -> Pixel:
        return ((point[0] - self.tx) / self.k, (point[1] - self.ty) / self.k)

    def invert_x(self, px: float) -> float:
        return (px - self.tx) / self.k

    def invert_y(self, py: float) -> float:
        return (py - self.ty) / self.k

    def translate(self, dx: float, dy: float) -> "ZoomTransform":
        """Translate in base (pre-zoom) units, like d3's `transform.translate`."""
        return ZoomTransform(k=self.k, tx=self.tx + self.k * dx, ty=self.ty + self.k * dy)

    def with_k(self, k: float) -> "ZoomTransform":
        return ZoomTransform(k=k, tx=self.tx, ty=self.ty)

    def scale_to(self, k: float, anchor: Pixel) -> "ZoomTransform":
        """Change zoom to `k` keeping the base point under `anchor` in place."""
        bx, by = self.invert(anchor)
        return ZoomTransform(k=k, tx=anchor[0] - k * bx, ty=anchor[1] - k * by)

    def rescale(self, base: Scale, axis: Literal["x", "y"]) -> "EffectiveScale":
        t = self.tx if axis == "x" else self.ty
        return EffectiveScale(base=base, k=self.k, t=t)

    def almost_equal(self, other: "ZoomTransform", tol: float = 1e-9) -> bool:
        return (
            abs(self.k - other.k) <= tol
            and abs(self.tx - other.tx) <= tol
            and abs(self.ty - other.ty) <= tol
        )


IDENTITY = ZoomTransform()


@dataclass(frozen=True)
class EffectiveScale:
    """Base scale composed with one axis of the current zoom transform."""

    base: Scale
    k: float
    t: float

    def apply(self, v: Any) -> Any:
        return self.k * self.base.apply(v) + self.t

    def invert(self, px: Any) -> Any:
        return self.base.invert((px - self.t) / self.k)

    def ticks(self, count: int = 6):
        lo = self.invert(min(self.base.range))
        hi = self.invert(max(self.base.range))
        visible = Scale(
            domain=safe_domain(float(min(lo, hi)), float(max(lo, hi))),
            range=self.base.range,
            mode=self.base.mode,
            constant=self.base.constant,
        )
        return visible.ticks(count)


@dataclass(frozen=True)
class ZoomLimits:
    """Viewport extent, pan extent and zoom extent for one view."""

    width: float
    height: float
    zoom_extent: tuple[float, float] = DEFAULT_ZOOM_EXTENT

    def __post_init__(self) -> None:
        kmin, kmax = self.zoom_extent
        if kmin <= 0 or kmax <= 0:
            raise ValueError("zoom extent bounds must be > 0")
        if kmin > kmax:
            raise ValueError("zoom extent min must be <= max")

    @property
    def extent(self) -> Extent:
        return ((0.0, 0.0), (float(self.width), float(self.height)))

    @property
    def translate_extent(self) -> Extent:
        return self.extent

    @property
    def center(self) -> Pixel:
        return (float(self.width) * 0.5, float(self.height) * 0.5)

    def clamp_k(self, k: float) -> float:
        kmin, kmax = self.zoom_extent
        return max(kmin, min(kmax, k))


def constrain(transform: ZoomTransform, limits: ZoomLimits) -> ZoomTransform:
    """Clamp zoom to the zoom extent, then keep content inside the pan extent."""

    k = limits.clamp_k(transform.k if math.isfinite(transform.k) else 1.0)
    tx = transform.tx if math.isfinite(transform.tx) else 0.0
    ty = transform.ty if math.isfinite(transform.ty) else 0.0
    t = ZoomTransform(k=k, tx=tx, ty=ty)
    (ex0, ey0), (ex1, ey1) = limits.extent
    (tx0, ty0), (tx1, ty1) = limits.translate_extent
    dx0 = t.invert_x(ex0) - tx0
    dx1 = t.invert_x(ex1) - tx1
    dy0 = t.invert_y(ey0) - ty0
    dy1 = t.invert_y(ey1) - ty1
    shift_x = (dx0 + dx1) / 2.0 if dx1 > dx0 else (min(0.0, dx0) or max(0.0, dx1))
    shift_y = (dy0 + dy1) / 2.0 if dy1 > dy0 else (min(0.0, dy0) or max(0.0, dy1))
    return t.translate(shift_x, shift_y)


def wheel_zoom_factor(delta_y: float, *, delta_mode: int = 0, ctrl: bool = False) -> float:
    # Pixel deltas are small, line deltas medium, page deltas large.
    mode_factor = 0.05 if delta_mode == 1 else (1.0 if delta_mode else 0.002)
    return 2.0 ** (-float(delta_y) * mode_factor * (10.0 if ctrl else 1.0))


def zoom_at(transform: ZoomTransform, anchor: Pixel, k: float, limits: ZoomLimits) -> ZoomTransform:
    """Zoom to `k` keeping the base point under `anchor` fixed on screen."""

    return constrain(transform.scale_to(limits.clamp_k(k), anchor), limits)


def pan_by(transform: ZoomTransform, dx: float, dy: float, limits: ZoomLimits) -> ZoomTransform:
    return constrain(ZoomTransform(k=transform.k, tx=transform.tx + dx, ty=transform.ty + dy), limits)


def center_on(transform: ZoomTransform, base_point: Pixel, limits: ZoomLimits) -> ZoomTransform:
    """Same zoom, translated so `base_point` lands on the viewport center (unconstrained)."""

    cx, cy = limits.center
    return ZoomTransform(k=transform.k, tx=cx - transform.k * base_point[0], ty=cy - transform.k * base_point[1])


@dataclass(frozen=True)
class WheelZoom:
    anchor: Pixel
    delta_y: float
    delta_mode: int = 0
    ctrl: bool = False


@dataclass(frozen=True)
class PinchZoom:
    start_transform: ZoomTransform
    start: tuple[Pixel, Pixel]
    current: tuple[Pixel, Pixel]


@dataclass(frozen=True)
class BackgroundPan:
    start_transform: ZoomTransform
    start_pixel: Pixel
    current_pixel: Pixel


Gesture = Union[WheelZoom, PinchZoom, BackgroundPan]


def apply_gesture(transform: ZoomTransform, gesture: Gesture, limits: ZoomLimits) -> ZoomTransform:
    if isinstance(gesture, WheelZoom):
        factor = wheel_zoom_factor(gesture.delta_y, delta_mode=gesture.delta_mode, ctrl=gesture.ctrl)
        return zoom_at(transform, gesture.anchor, transform.k * factor, limits)
    if isinstance(gesture, BackgroundPan):
        base = gesture.start_transform
        return pan_by(
            base,
            gesture.current_pixel[0] - gesture.start_pixel[0],
            gesture.current_pixel[1] - gesture.start_pixel[1],
            limits,
        )
    if isinstance(gesture, PinchZoom):
        base = gesture.start_transform
        (a0, b0), (a1, b1) = gesture.start, gesture.current
        d0 = math.hypot(b0[0] - a0[0], b0[1] - a0[1])
        d1 = math.hypot(b1[0] - a1[0], b1[1] - a1[1])
        ratio = d1 / d0 if d0 > 1e-9 else 1.0
        k1 = limits.clamp_k(base.k * ratio)
        mid0 = ((a0[0] + b0[0]) * 0.5, (a0[1] + b0[1]) * 0.5)
        mid1 = ((a1[0] + b1[0]) * 0.5, (a1[1] + b1[1]) * 0.5)
        bx, by = base.invert(mid0)
        return constrain(ZoomTransform(k=k1, tx=mid1[0] - k1 * bx, ty=mid1[1] - k1 * by), limits)
    raise TypeError(f"unsupported gesture: {type(gesture)!r}")
