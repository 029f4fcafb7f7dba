from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]
Rect = tuple[int, int, int, int]


def new_canvas(width: int, height: int, color: RGBA = (255, 255, 255, 255)) -> np.ndarray:
    canvas = np.empty((max(1, int(height)), max(1, int(width)), 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def clip_rect(dst: np.ndarray, rect: Rect | None = None) -> Rect:
    """Intersect `rect` (x0, y0, x1, y1; exclusive end) with the canvas bounds."""

    h, w = dst.shape[0], dst.shape[1]
    if rect is None:
        return (0, 0, w, h)
    x0, y0, x1, y1 = rect
    return (max(0, x0), max(0, y0), min(w, x1), min(h, y1))


def blend_region(dst: np.ndarray, x0: int, y0: int, coverage: np.ndarray, color: RGBA) -> None:
    """Source-over blend `color` into dst[y0:, x0:] weighted by `coverage` in [0, 1]."""

    h, w = coverage.shape
    if h <= 0 or w <= 0:
        return
    alpha = (color[3] / 255.0) * coverage.astype(np.float32)
    if not np.any(alpha > 0):
        return
    view = dst[y0 : y0 + h, x0 : x0 + w]
    src = np.asarray(color[:3], dtype=np.float32).reshape(1, 1, 3)
    a = alpha[:, :, None]
    view[:, :, :3] = np.clip(src * a + view[:, :, :3].astype(np.float32) * (1.0 - a), 0, 255).astype(np.uint8)
    view[:, :, 3] = 255


def fill_rect(dst: np.ndarray, rect: Rect, color: RGBA) -> None:
    x0, y0, x1, y1 = clip_rect(dst, rect)
    if x1 <= x0 or y1 <= y0:
        return
    blend_region(dst, x0, y0, np.ones((y1 - y0, x1 - x0), dtype=np.float32), color)


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA, clip: Rect | None = None) -> None:
    cx0, cy0, cx1, cy1 = clip_rect(dst, clip)
    if x < cx0 or x >= cx1 or y < cy0 or y >= cy1:
        return
    blend_region(dst, x, y, np.ones((1, 1), dtype=np.float32), color)


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA, clip: Rect | None = None) -> None:
    fill_rect_clipped(dst, (min(x0, x1), y, max(x0, x1) + 1, y + 1), color, clip)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA, clip: Rect | None = None) -> None:
    fill_rect_clipped(dst, (x, min(y0, y1), x + 1, max(y0, y1) + 1), color, clip)


def fill_rect_clipped(dst: np.ndarray, rect: Rect, color: RGBA, clip: Rect | None) -> None:
    cx0, cy0, cx1, cy1 = clip_rect(dst, clip)
    x0, y0, x1, y1 = rect
    fill_rect(dst, (max(x0, cx0), max(y0, cy0), min(x1, cx1), min(y1, cy1)), color)
