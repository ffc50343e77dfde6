from .canvas import blend_over, draw_hline, draw_vline, fill_rect, new_canvas, with_opacity
from .draw_lines import draw_dot, draw_polyline
from .draw_markers import draw_circle_marker
from .draw_text import draw_text
from .layers import DirtyState, LayerCache

__all__ = [
    "DirtyState",
    "LayerCache",
    "blend_over",
    "draw_circle_marker",
    "draw_dot",
    "draw_hline",
    "draw_polyline",
    "draw_text",
    "draw_vline",
    "fill_rect",
    "new_canvas",
    "with_opacity",
]
