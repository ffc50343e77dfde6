from __future__ import annotations

import numpy as np


RGBA = tuple[int, int, int, int]
TRANSPARENT: RGBA = (0, 0, 0, 0)


def new_canvas(width: int, height: int, color: RGBA = TRANSPARENT) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def with_opacity(color: RGBA, opacity: float) -> RGBA:
    a = max(0.0, min(1.0, float(opacity)))
    return (color[0], color[1], color[2], int(round(color[3] * a)))


def blend_over(dst: np.ndarray, src: np.ndarray) -> None:
    """Porter-Duff ``src over dst`` for equally shaped RGBA layers, in place."""
    if dst.shape != src.shape:
        raise ValueError(f"layer shape mismatch: {dst.shape} != {src.shape}")
    src_a = src[:, :, 3:4].astype(np.float32) / 255.0
    if not np.any(src_a > 0):
        return
    dst_a = dst[:, :, 3:4].astype(np.float32) / 255.0
    out_a = src_a + dst_a * (1.0 - src_a)
    num = src[:, :, :3].astype(np.float32) * src_a + dst[:, :, :3].astype(np.float32) * dst_a * (1.0 - src_a)
    safe = np.where(out_a > 1e-6, out_a, 1.0)
    dst[:, :, :3] = np.clip(num / safe, 0, 255).astype(np.uint8)
    dst[:, :, 3:4] = np.clip(out_a * 255.0, 0, 255).astype(np.uint8)


def fill_rect(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA) -> None:
    """Blend ``color`` over the inclusive pixel rectangle, clipped to the canvas."""
    left = max(0, min(int(x0), int(x1)))
    right = min(dst.shape[1] - 1, max(int(x0), int(x1)))
    top = max(0, min(int(y0), int(y1)))
    bottom = min(dst.shape[0] - 1, max(int(y0), int(y1)))
    if right < left or bottom < top:
        return
    region = dst[top : bottom + 1, left : right + 1]
    _blend_span(region, color)


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    fill_rect(dst, x0, y, x1, y, color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    fill_rect(dst, x, y0, x, y1, color)


def _blend_span(span: np.ndarray, color: RGBA) -> None:
    a = color[3] / 255.0
    if a <= 0:
        return
    src = np.asarray(color[:3], dtype=np.float32)
    dst_a = span[..., 3:4].astype(np.float32) / 255.0
    out_a = a + dst_a * (1.0 - a)
    num = src * a + span[..., :3].astype(np.float32) * dst_a * (1.0 - a)
    safe = np.where(out_a > 1e-6, out_a, 1.0)
    span[..., :3] = np.clip(num / safe, 0, 255).astype(np.uint8)
    span[..., 3:4] = np.clip(out_a * 255.0, 0, 255).astype(np.uint8)
