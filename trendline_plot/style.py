from __future__ import annotations

from dataclasses import dataclass

from trendline_plot.scales import RGBA, parse_hex_color


COLOR_SCHEME: tuple[str, str] = ("#1f77b4", "#ff7f0e")
Y_AXIS_TITLE = "Average intake as a percentage of weighted reference nutrient intakes"


@dataclass(frozen=True)
class ChartLayout:
    height: int = 600
    margin_top: int = 30
    margin_right: int = 180
    margin_bottom: int = 30
    margin_left: int = 30
    label_gap_px: float = 12.0
    label_offset_px: int = 12
    dimmed_opacity: float = 0.1
    reference_value: float = 100.0
    y_floor: float = 90.0
    fallback_y_domain: tuple[float, float] = (90.0, 110.0)
    nice_count: int = 10
    x_tick_spacing_px: float = 40.0
    y_tick_spacing_px: float = 80.0
    line_width: int = 2
    marker_radius: int = 4
    marker_text_offset_px: int = 6
    curve_steps: int = 12

    def __post_init__(self) -> None:
        if self.height <= 0:
            raise ValueError("height must be > 0")
        if min(self.margin_top, self.margin_right, self.margin_bottom, self.margin_left) < 0:
            raise ValueError("margins must be >= 0")
        if self.label_gap_px <= 0:
            raise ValueError("label_gap_px must be > 0")
        if not 0.0 <= self.dimmed_opacity <= 1.0:
            raise ValueError("dimmed_opacity must be in [0, 1]")
        lo, hi = self.fallback_y_domain
        if not lo < hi:
            raise ValueError("fallback_y_domain must be increasing")
        if self.curve_steps < 1:
            raise ValueError("curve_steps must be >= 1")


@dataclass(frozen=True)
class ChartStyle:
    background: RGBA = (12, 16, 23, 255)
    plot_bg_color: RGBA = (20, 26, 36, 255)
    grid_color: RGBA = (225, 232, 242, 51)
    axis_color: RGBA = (124, 138, 156, 255)
    text_color: RGBA = (208, 218, 232, 255)
    band_color: RGBA = (103, 204, 131, 40)
    marker_stroke: RGBA = (255, 255, 255, 255)
    palette: tuple[RGBA, ...] = tuple(parse_hex_color(c) for c in COLOR_SCHEME)
    tick_font_px: float = 11.0
    label_font_px: float = 12.0
    title_font_px: float = 12.0

    def __post_init__(self) -> None:
        if not self.palette:
            raise ValueError("palette must include at least one color")
        for color in (self.background, self.plot_bg_color, self.grid_color, self.text_color, *self.palette):
            if len(color) != 4 or any(c < 0 or c > 255 for c in color):
                raise ValueError(f"invalid RGBA color: {color!r}")

    @property
    def neutral_color(self) -> RGBA:
        return self.text_color
