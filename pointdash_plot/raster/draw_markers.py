from __future__ import annotations

import numpy as np

from pointdash_plot.raster.canvas import RGBA, Rect, blend_region, clip_rect


def draw_circle(
    dst: np.ndarray,
    cx: float,
    cy: float,
    radius: float,
    fill: RGBA,
    *,
    stroke: RGBA | None = None,
    stroke_width: float = 0.0,
    clip: Rect | None = None,
) -> None:
    """Filled, optionally stroked disc with one pixel of edge anti-aliasing."""

    outer = radius + (stroke_width * 0.5 if stroke is not None else 0.0)
    x0, y0, x1, y1 = clip_rect(dst, clip)
    bx0 = max(x0, int(np.floor(cx - outer - 1)))
    by0 = max(y0, int(np.floor(cy - outer - 1)))
    bx1 = min(x1, int(np.ceil(cx + outer + 1)) + 1)
    by1 = min(y1, int(np.ceil(cy + outer + 1)) + 1)
    if bx1 <= bx0 or by1 <= by0:
        return

    yy, xx = np.mgrid[by0:by1, bx0:bx1]
    dist = np.hypot(xx + 0.5 - cx, yy + 0.5 - cy).astype(np.float32)
    if stroke is not None and stroke_width > 0:
        inner = radius - stroke_width * 0.5
        blend_region(dst, bx0, by0, _coverage(dist, inner), fill)
        ring = np.clip(_coverage(dist, outer) - _coverage(dist, inner), 0.0, 1.0)
        blend_region(dst, bx0, by0, ring, stroke)
        return
    blend_region(dst, bx0, by0, _coverage(dist, radius), fill)


def _coverage(dist: np.ndarray, radius: float) -> np.ndarray:
    return np.clip(radius + 0.5 - dist, 0.0, 1.0)
