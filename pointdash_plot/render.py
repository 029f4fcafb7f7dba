from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Callable, Sequence

import numpy as np

from pointdash_plot.config import GraphConfig, Margins
from pointdash_plot.interaction import DragPreview
from pointdash_plot.points import Point, PointId, find_point, sort_by_x
from pointdash_plot.raster import (
    LayerCache,
    draw_circle,
    draw_hline,
    draw_polyline,
    draw_text,
    draw_vline,
    fill_rect,
    new_canvas,
    text_size,
)
from pointdash_plot.scales import format_si, format_tick, format_ticks_for_axis
from pointdash_plot.style import DEFAULT_STYLE, RGBA, PlotStyle, with_opacity
from pointdash_plot.transform import EffectiveScale


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tick:
    value: float
    label: str
    position: float


@dataclass
class Marker:
    """One point's marker; the same object is reused for an id across redraws."""

    point_id: PointId
    cx: float = 0.0
    cy: float = 0.0
    radius: float = 6.0
    fill: RGBA = DEFAULT_STYLE.primary
    opacity: float = 1.0
    highlighted: bool = False
    hovered: bool = False


@dataclass(frozen=True)
class Tooltip:
    """Coordinate readout for the hovered point, or for the dragged point mid-drag."""

    point_id: PointId
    anchor: tuple[float, float]
    lines: tuple[str, ...]


@dataclass(frozen=True)
class RenderScene:
    inner_size: tuple[float, float]
    x_ticks: tuple[Tick, ...]
    y_ticks: tuple[Tick, ...]
    line_xs: np.ndarray
    line_ys: np.ndarray
    markers: tuple[Marker, ...]
    x_label: str = "X Axis"
    y_label: str = "Y Axis"
    tooltip: Tooltip | None = None

    @property
    def grid_x(self) -> tuple[float, ...]:
        return tuple(t.position for t in self.x_ticks)

    @property
    def grid_y(self) -> tuple[float, ...]:
        return tuple(t.position for t in self.y_ticks)


class MarkerLayer:
    def __init__(self) -> None:
        self._markers: dict[PointId, Marker] = {}

    def __len__(self) -> int:
        return len(self._markers)

    def get(self, point_id: PointId) -> Marker | None:
        return self._markers.get(point_id)

    def clear(self) -> None:
        self._markers.clear()

    def sync(
        self,
        points: Sequence[Point],
        sx: EffectiveScale,
        sy: EffectiveScale,
        *,
        highlighted_id: PointId | None,
        hovered_id: PointId | None,
        style: PlotStyle = DEFAULT_STYLE,
    ) -> tuple[Marker, ...]:
        """Update markers in place and return them in paint order (highlighted last)."""

        has_highlight = find_point(points, highlighted_id) is not None
        live: dict[PointId, Marker] = {}
        for point in points:
            marker = self._markers.get(point.id) or Marker(point_id=point.id)
            is_highlighted = has_highlight and point.id == highlighted_id
            marker.cx = float(sx.apply(point.x))
            marker.cy = float(sy.apply(point.y))
            marker.highlighted = is_highlighted
            marker.hovered = point.id == hovered_id
            marker.radius = float(
                style.point_radius_active if (is_highlighted or marker.hovered) else style.point_radius
            )
            marker.fill = style.highlight if is_highlighted else style.primary
            marker.opacity = style.dimmed_opacity if (has_highlight and not is_highlighted) else 1.0
            live[point.id] = marker
        self._markers = live
        return tuple(live[p.id] for p in paint_order(points, highlighted_id if has_highlight else None))


def paint_order(points: Sequence[Point], highlighted_id: PointId | None) -> list[Point]:
    ordered = [p for p in points if p.id != highlighted_id]
    ordered.extend(p for p in points if p.id == highlighted_id)
    return ordered


def hit_test(
    points: Sequence[Point],
    sx: EffectiveScale,
    sy: EffectiveScale,
    px: float,
    py: float,
    *,
    hit_radius: float,
    highlighted_id: PointId | None = None,
) -> PointId | None:
    """Top-most point (last in paint order) within `hit_radius` of the pixel."""

    r2 = hit_radius * hit_radius
    for point in reversed(paint_order(points, highlighted_id)):
        dx = px - float(sx.apply(point.x))
        dy = py - float(sy.apply(point.y))
        if dx * dx + dy * dy <= r2:
            return point.id
    return None


def build_ticks(
    scale: EffectiveScale,
    count: int,
    extent: float,
    formatter: Callable[[np.ndarray], list[str]],
) -> tuple[Tick, ...]:
    values = np.asarray(scale.ticks(count), dtype=np.float64)
    if values.size == 0:
        return ()
    positions = np.asarray(scale.apply(values), dtype=np.float64)
    keep = np.isfinite(positions) & (positions >= -0.5) & (positions <= extent + 0.5)
    values = values[keep]
    positions = positions[keep]
    labels = formatter(values)
    return tuple(Tick(value=float(v), label=lbl, position=float(p)) for v, lbl, p in zip(values, labels, positions))


def si_formatter(values: np.ndarray) -> list[str]:
    return [format_si(float(v)) for v in values]


def build_tooltip(
    points: Sequence[Point],
    sx: EffectiveScale,
    sy: EffectiveScale,
    *,
    hovered_id: PointId | None,
    drag: DragPreview | None,
    value_format: Callable[[float], str] = format_si,
) -> Tooltip | None:
    """A live drag owns the tooltip; otherwise it follows the hovered point."""

    if drag is not None:
        return Tooltip(
            point_id=drag.point_id,
            anchor=drag.pixel,
            lines=(f"X: {value_format(drag.x)}", f"Y: {value_format(drag.y)}"),
        )
    point = find_point(points, hovered_id)
    if point is None:
        return None
    return Tooltip(
        point_id=point.id,
        anchor=(float(sx.apply(point.x)), float(sy.apply(point.y))),
        lines=(f"X: {value_format(point.x)}", f"Y: {value_format(point.y)}"),
    )


class RenderSync:
    def __init__(self, config: GraphConfig | None = None, style: PlotStyle = DEFAULT_STYLE) -> None:
        self.config = config or GraphConfig()
        self.style = style
        self.markers = MarkerLayer()

    def render(
        self,
        points: Sequence[Point],
        sx: EffectiveScale,
        sy: EffectiveScale,
        highlighted_id: PointId | None = None,
        hovered_id: PointId | None = None,
        drag: DragPreview | None = None,
    ) -> RenderScene:
        w = abs(sx.base.range[1] - sx.base.range[0])
        h = abs(sy.base.range[1] - sy.base.range[0])
        plain = self.config.tick_format != "si"
        formatter = format_ticks_for_axis if plain else si_formatter
        ordered = sort_by_x(points)
        line_xs = np.asarray(sx.apply(np.asarray([p.x for p in ordered], dtype=np.float64)), dtype=np.float64)
        line_ys = np.asarray(sy.apply(np.asarray([p.y for p in ordered], dtype=np.float64)), dtype=np.float64)
        markers = self.markers.sync(
            points,
            sx,
            sy,
            highlighted_id=highlighted_id,
            hovered_id=hovered_id,
            style=self.style,
        )
        LOGGER.debug("render scene with %d markers", len(markers))
        return RenderScene(
            inner_size=(w, h),
            x_ticks=build_ticks(sx, self.config.tick_count, w, formatter),
            y_ticks=build_ticks(sy, self.config.tick_count, h, formatter),
            line_xs=line_xs,
            line_ys=line_ys,
            markers=markers,
            x_label=self.config.x_label,
            y_label=self.config.y_label,
            tooltip=build_tooltip(
                points,
                sx,
                sy,
                hovered_id=hovered_id,
                drag=drag,
                value_format=format_tick if plain else format_si,
            ),
        )


def rasterize(
    scene: RenderScene,
    width: int,
    height: int,
    margins: Margins,
    *,
    style: PlotStyle = DEFAULT_STYLE,
    cache: LayerCache | None = None,
) -> np.ndarray:
    """Draw a scene into a (height, width, 4) uint8 RGBA array."""

    width = max(1, int(width))
    height = max(1, int(height))
    inner_w, inner_h = scene.inner_size
    x0, y0 = margins.left, margins.top
    x1, y1 = x0 + int(round(inner_w)), y0 + int(round(inner_h))
    clip = (x0, y0, x1 + 1, y1 + 1)

    key = (
        width,
        height,
        margins,
        tuple((t.label, round(t.position, 1)) for t in scene.x_ticks),
        tuple((t.label, round(t.position, 1)) for t in scene.y_ticks),
        scene.x_label,
        scene.y_label,
    )
    canvas = cache.lookup(key) if cache is not None else None
    if canvas is None:
        canvas = _draw_chrome(scene, width, height, (x0, y0, x1, y1), style)
        if cache is not None:
            cache.store(key, canvas)

    for t in scene.x_ticks:
        draw_vline(canvas, x0 + int(round(t.position)), y0, y1, style.grid, clip=clip)
    for t in scene.y_ticks:
        draw_hline(canvas, x0, x1, y0 + int(round(t.position)), style.grid, clip=clip)

    if scene.line_xs.size >= 2:
        finite = np.isfinite(scene.line_xs) & np.isfinite(scene.line_ys)
        draw_polyline(
            canvas,
            scene.line_xs[finite] + x0,
            scene.line_ys[finite] + y0,
            style.primary,
            width=style.line_width,
            clip=clip,
        )

    for marker in scene.markers:
        if not (math.isfinite(marker.cx) and math.isfinite(marker.cy)):
            continue
        draw_circle(
            canvas,
            marker.cx + x0,
            marker.cy + y0,
            marker.radius,
            with_opacity(marker.fill, marker.opacity),
            stroke=with_opacity(style.marker_stroke, marker.opacity),
            stroke_width=style.stroke_width,
            clip=clip,
        )

    if scene.tooltip is not None:
        _draw_tooltip(canvas, scene.tooltip, (x0, y0), style)
    return canvas


def _draw_chrome(
    scene: RenderScene,
    width: int,
    height: int,
    rect: tuple[int, int, int, int],
    style: PlotStyle,
) -> np.ndarray:
    x0, y0, x1, y1 = rect
    canvas = new_canvas(width, height, color=style.background)
    fill_rect(canvas, (x0, y0, x1 + 1, y1 + 1), style.plot_bg)
    draw_hline(canvas, x0, x1, y1, style.axis)
    draw_vline(canvas, x0, y0, y1, style.axis)

    tick_px = style.tick_font_px
    for t in scene.x_ticks:
        px = x0 + int(round(t.position))
        draw_vline(canvas, px, y1, y1 + style.tick_length, style.axis)
        tw, _ = text_size(t.label, font_size_px=tick_px)
        draw_text(canvas, px - tw // 2, y1 + style.tick_length + 3, t.label, style.text, font_size_px=tick_px)
    for t in scene.y_ticks:
        py = y0 + int(round(t.position))
        draw_hline(canvas, x0 - style.tick_length, x0, py, style.axis)
        tw, th = text_size(t.label, font_size_px=tick_px)
        draw_text(canvas, x0 - style.tick_length - 3 - tw, py - th // 2, t.label, style.text, font_size_px=tick_px)

    label_px = style.label_font_px
    lw, lh = text_size(scene.x_label, font_size_px=label_px)
    draw_text(canvas, (x0 + x1) // 2 - lw // 2, min(height - lh - 1, y1 + 22), scene.x_label, style.text, font_size_px=label_px)
    _, rh = text_size(scene.y_label, font_size_px=label_px, rotate_deg=90)
    draw_text(
        canvas,
        max(0, x0 - 46),
        (y0 + y1) // 2 - rh // 2,
        scene.y_label,
        style.text,
        font_size_px=label_px,
        rotate_deg=90,
    )
    return canvas


def _draw_tooltip(canvas: np.ndarray, tooltip: Tooltip, origin: tuple[int, int], style: PlotStyle) -> None:
    height, width = canvas.shape[0], canvas.shape[1]
    font_px = style.tooltip_font_px
    pad = style.tooltip_padding
    sizes = [text_size(line, font_size_px=font_px) for line in tooltip.lines]
    line_h = max(h for _, h in sizes) + 2
    box_w = max(w for w, _ in sizes) + 2 * pad
    box_h = line_h * len(sizes) + 2 * pad
    dx, dy = style.tooltip_offset
    bx = origin[0] + int(round(tooltip.anchor[0])) + dx
    by = origin[1] + int(round(tooltip.anchor[1])) + dy
    # Keep the box on the canvas.
    bx = max(0, min(width - box_w, bx))
    by = max(0, min(height - box_h, by))
    fill_rect(canvas, (bx, by, bx + box_w, by + box_h), style.tooltip_bg)
    for i, line in enumerate(tooltip.lines):
        draw_text(canvas, bx + pad, by + pad + i * line_h, line, style.tooltip_text, font_size_px=font_px)
