from __future__ import annotations

import numpy as np

from trendline_plot.raster.canvas import RGBA
from trendline_plot.raster.draw_lines import stamp_pixels


def draw_circle_marker(
    dst: np.ndarray,
    x: float,
    y: float,
    *,
    radius: int,
    fill: RGBA,
    stroke: RGBA | None = None,
    stroke_width: float = 1.5,
) -> None:
    """Filled disc with an optional outer ring, centred on ``(x, y)``."""
    cx = float(x)
    cy = float(y)
    outer = float(radius) + (stroke_width * 0.5 if stroke is not None else 0.0)
    inner = float(radius) - (stroke_width * 0.5 if stroke is not None else 0.0)
    reach = int(np.ceil(outer))
    ring: set[tuple[int, int]] = set()
    body: set[tuple[int, int]] = set()
    x0 = int(round(cx))
    y0 = int(round(cy))
    for yy in range(y0 - reach, y0 + reach + 1):
        for xx in range(x0 - reach, x0 + reach + 1):
            dist = float(np.hypot(xx - cx, yy - cy))
            if dist > outer:
                continue
            if stroke is not None and dist > inner:
                ring.add((xx, yy))
            else:
                body.add((xx, yy))
    stamp_pixels(dst, body, fill)
    if stroke is not None:
        stamp_pixels(dst, ring, stroke)
