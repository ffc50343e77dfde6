from __future__ import annotations

import numpy as np

from trendline_plot.raster.canvas import RGBA


def draw_polyline(dst: np.ndarray, xs: np.ndarray, ys: np.ndarray, color: RGBA, width: int = 1) -> None:
    """Stroke connected segments through pixel coordinates.

    Pixels are collected first and blended once so overlapping brush stamps do
    not darken translucent strokes.
    """
    if xs.size < 2:
        return
    px = np.rint(np.asarray(xs, dtype=np.float64)).astype(np.int64)
    py = np.rint(np.asarray(ys, dtype=np.float64)).astype(np.int64)
    covered: set[tuple[int, int]] = set()
    for i in range(px.size - 1):
        _rasterize_segment(covered, int(px[i]), int(py[i]), int(px[i + 1]), int(py[i + 1]), width=width)
    stamp_pixels(dst, covered, color)


def draw_dot(dst: np.ndarray, x: float, y: float, color: RGBA, width: int = 1) -> None:
    covered: set[tuple[int, int]] = set()
    _stamp_brush(covered, int(round(x)), int(round(y)), width)
    stamp_pixels(dst, covered, color)


def stamp_pixels(dst: np.ndarray, pixels: set[tuple[int, int]], color: RGBA) -> None:
    if not pixels or color[3] <= 0:
        return
    h, w = dst.shape[0], dst.shape[1]
    coords = np.asarray([p for p in pixels if 0 <= p[0] < w and 0 <= p[1] < h], dtype=np.int64)
    if coords.size == 0:
        return
    cols = coords[:, 0]
    rows = coords[:, 1]
    a = color[3] / 255.0
    src = np.asarray(color[:3], dtype=np.float32)
    current = dst[rows, cols].astype(np.float32)
    dst_a = current[:, 3:4] / 255.0
    out_a = a + dst_a * (1.0 - a)
    num = src * a + current[:, :3] * dst_a * (1.0 - a)
    safe = np.where(out_a > 1e-6, out_a, 1.0)
    out = np.empty((coords.shape[0], 4), dtype=np.uint8)
    out[:, :3] = np.clip(num / safe, 0, 255).astype(np.uint8)
    out[:, 3:4] = np.clip(out_a * 255.0, 0, 255).astype(np.uint8)
    dst[rows, cols] = out


def _rasterize_segment(covered: set[tuple[int, int]], x0: int, y0: int, x1: int, y1: int, *, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy

    while True:
        _stamp_brush(covered, x0, y0, width)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


def _stamp_brush(covered: set[tuple[int, int]], x: int, y: int, width: int) -> None:
    lo = -(max(1, width) - 1) // 2
    hi = lo + max(1, width)
    for yy in range(y + lo, y + hi):
        for xx in range(x + lo, x + hi):
            covered.add((xx, yy))
