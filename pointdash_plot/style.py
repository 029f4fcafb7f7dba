from __future__ import annotations

from dataclasses import dataclass


RGBA = tuple[int, int, int, int]


@dataclass(frozen=True)
class PlotStyle:
    background: RGBA = (255, 255, 255, 255)
    plot_bg: RGBA = (255, 255, 255, 255)
    primary: RGBA = (25, 118, 210, 255)
    highlight: RGBA = (255, 87, 34, 255)
    marker_stroke: RGBA = (255, 255, 255, 255)
    grid: RGBA = (0, 0, 0, 26)
    axis: RGBA = (0, 0, 0, 255)
    text: RGBA = (0, 0, 0, 255)
    point_radius: int = 6
    point_radius_active: int = 8
    stroke_width: int = 2
    line_width: int = 2
    dimmed_opacity: float = 0.35
    tick_length: int = 6
    tick_font_px: float = 11.0
    label_font_px: float = 12.0
    tooltip_bg: RGBA = (0, 0, 0, 204)
    tooltip_text: RGBA = (255, 255, 255, 255)
    tooltip_font_px: float = 12.0
    tooltip_padding: int = 10
    tooltip_offset: tuple[int, int] = (10, -28)


DEFAULT_STYLE = PlotStyle()


def with_opacity(color: RGBA, opacity: float) -> RGBA:
    r, g, b, a = color
    return (r, g, b, int(round(a * max(0.0, min(1.0, opacity)))))
