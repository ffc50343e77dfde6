from __future__ import annotations

from functools import lru_cache
from typing import Literal

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from trendline_plot.raster.canvas import RGBA, blend_over


DEFAULT_FONT_FAMILY = "DejaVu Sans"
DEFAULT_FONT_SIZE_PX = 11.0
# Font files tried after the requested family; Pillow searches the platform font dirs.
FALLBACK_FONT_FILES = ("DejaVuSans.ttf", "Helvetica.ttc", "Arial.ttf", "LiberationSans-Regular.ttf")

TextAnchor = Literal["start", "middle", "end"]
TextBaseline = Literal["top", "middle", "bottom"]


def draw_text(
    dst: np.ndarray,
    x: float,
    y: float,
    text: str,
    color: RGBA,
    *,
    anchor: TextAnchor = "start",
    baseline: TextBaseline = "top",
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = DEFAULT_FONT_SIZE_PX,
) -> tuple[int, int, int, int] | None:
    """Blend ``text`` onto ``dst`` and return the touched rect ``(x, y, w, h)``.

    ``anchor`` aligns the text box horizontally on ``x`` (SVG ``text-anchor``);
    ``baseline`` aligns it vertically on ``y``. Text falling fully outside the
    canvas draws nothing and returns None.
    """
    if not text or color[3] <= 0:
        return None
    mask = _glyph_mask(text, font_family, _font_px(font_size_px))
    mask_h, mask_w = mask.shape
    offset_x = {"start": 0, "middle": mask_w // 2, "end": mask_w}[anchor]
    offset_y = {"top": 0, "middle": mask_h // 2, "bottom": mask_h}[baseline]
    left = int(round(x)) - offset_x
    top = int(round(y)) - offset_y

    clip_x0, clip_y0 = max(0, left), max(0, top)
    clip_x1 = min(dst.shape[1], left + mask_w)
    clip_y1 = min(dst.shape[0], top + mask_h)
    if clip_x1 <= clip_x0 or clip_y1 <= clip_y0:
        return None
    coverage = mask[clip_y0 - top : clip_y1 - top, clip_x0 - left : clip_x1 - left]
    layer = np.empty(coverage.shape + (4,), dtype=np.uint8)
    layer[..., :3] = color[:3]
    layer[..., 3] = (coverage.astype(np.uint16) * color[3] // 255).astype(np.uint8)
    blend_over(dst[clip_y0:clip_y1, clip_x0:clip_x1], layer)
    return (clip_x0, clip_y0, clip_x1 - clip_x0, clip_y1 - clip_y0)


def _font_px(font_size_px: float) -> int:
    return max(1, int(round(font_size_px)))


@lru_cache(maxsize=512)
def _glyph_mask(text: str, font_family: str, size_px: int) -> np.ndarray:
    font = _font(font_family, size_px)
    left, top, right, bottom = font.getbbox(text)
    image = Image.new("L", (max(1, int(right - left)), max(1, int(bottom - top))), 0)
    ImageDraw.Draw(image).text((-left, -top), text, fill=255, font=font)
    mask = np.asarray(image, dtype=np.uint8)
    mask.setflags(write=False)
    return mask


@lru_cache(maxsize=32)
def _font(font_family: str, size_px: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    requested = font_family.replace(" ", "")
    for name in (f"{requested}.ttf", f"{requested}.ttc", *FALLBACK_FONT_FILES):
        try:
            return ImageFont.truetype(name, size=size_px)
        except OSError:
            continue
    return ImageFont.load_default(size=size_px)
