from __future__ import annotations

import numpy as np

from pointdash_plot.raster.canvas import RGBA, Rect, clip_rect, draw_pixel


def draw_polyline(
    dst: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    color: RGBA,
    width: int = 1,
    clip: Rect | None = None,
) -> None:
    if xs.size < 2:
        return
    bounds = clip_rect(dst, clip)
    # Segments are walked pixel by pixel; keep far off-screen endpoints bounded.
    limit = float(max(dst.shape[0], dst.shape[1]) * 4)
    px = np.clip(np.rint(xs), -limit, limit).astype(np.int64)
    py = np.clip(np.rint(ys), -limit, limit).astype(np.int64)
    for i in range(px.size - 1):
        _draw_line_segment(dst, int(px[i]), int(py[i]), int(px[i + 1]), int(py[i + 1]), color, width, bounds)


def _draw_line_segment(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int, clip: Rect) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _stamp(dst, x0, y0, color, width, clip)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _stamp(dst: np.ndarray, x: int, y: int, color: RGBA, width: int, clip: Rect) -> None:
    cx0, cy0, cx1, cy1 = clip
    radius = max(0, width // 2)
    if x + radius < cx0 or x - radius >= cx1 or y + radius < cy0 or y - radius >= cy1:
        return
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color, clip)
