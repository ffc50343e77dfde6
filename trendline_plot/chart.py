from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
import logging
import math
from typing import Protocol

import numpy as np

from trendline_core.events import InputEvent
from trendline_core.window_matrix import WindowMatrix, WriteBatch
from trendline_plot.compile import compile_full_rewrite_batch, compile_replace_rect_batch
from trendline_plot.curves import build_path
from trendline_plot.errors import ChartDataError
from trendline_plot.geometry import GridPointIndex, Sample, SampleSet, build_sample_set
from trendline_plot.interaction import PointerTracker
from trendline_plot.labels import LabelPlacement, layout_end_labels
from trendline_plot.raster import (
    DirtyState,
    LayerCache,
    blend_over,
    draw_circle_marker,
    draw_dot,
    draw_hline,
    draw_polyline,
    draw_text,
    draw_vline,
    fill_rect,
    new_canvas,
    with_opacity,
)
from trendline_plot.reconcile import KeyedDiff, reconcile
from trendline_plot.records import Record, RecordKey, year_axis_values
from trendline_plot.scales import (
    RGBA,
    LinearScale,
    OrdinalColorScale,
    format_ticks_for_axis,
    format_value,
    nice_domain,
)
from trendline_plot.style import Y_AXIS_TITLE, ChartLayout, ChartStyle


LOGGER = logging.getLogger(__name__)

Rect = tuple[int, int, int, int]


class ChartContainer(Protocol):
    @property
    def client_width(self) -> int: ...


@dataclass(frozen=True)
class StaticContainer:
    client_width: int


@dataclass
class SeriesElement:
    """Rendered state for one ``(region, nutrient)`` series, updated in place across redraws."""

    key: RecordKey
    record: Record
    color: RGBA
    opacity: float = 1.0
    pieces: list[tuple[np.ndarray, np.ndarray]] = field(default_factory=list, repr=False)
    label_y: float | None = None


@dataclass
class MarkerElement:
    key: RecordKey
    x: float
    y: float
    value: float
    color: RGBA

    @property
    def text(self) -> str:
        return format_value(self.value)


class TrendChart:
    """Multi-series trend chart with hover highlighting.

    ``update_data`` and the ``on_pointer_*`` methods are the only mutating
    entry points. A data update rebuilds the y scale, the keyed scene, the
    flattened samples and the nearest-sample index before returning, so any
    following pointer query sees the new geometry.
    """

    def __init__(
        self,
        container: ChartContainer,
        years: Sequence[str],
        *,
        layout: ChartLayout | None = None,
        style: ChartStyle | None = None,
    ) -> None:
        self.layout = layout or ChartLayout()
        self.style = style or ChartStyle()
        self._width = int(container.client_width)
        self._height = int(self.layout.height)
        lay = self.layout
        if self._width - lay.margin_left - lay.margin_right <= 1 or self._height - lay.margin_top - lay.margin_bottom <= 1:
            raise ChartDataError(f"chart surface too small: {self._width}x{self._height}")

        self._years = tuple(str(y) for y in years)
        if not self._years:
            raise ChartDataError("at least one year is required")
        try:
            self._year_values = year_axis_values(self._years)
        except ValueError as exc:
            raise ChartDataError(str(exc)) from exc
        if self._year_values.size > 1 and not np.all(np.diff(self._year_values) > 0):
            raise ChartDataError("years must be strictly increasing")

        self.x_scale = LinearScale(
            domain=(float(self._year_values[0]), float(self._year_values[-1])),
            range=(lay.margin_left, self._width - lay.margin_right),
        )
        self.y_scale = LinearScale(
            domain=lay.fallback_y_domain,
            range=(self._height - lay.margin_bottom, lay.margin_top),
        )
        self.color_scale = OrdinalColorScale(palette=self.style.palette, unknown=self.style.neutral_color)

        self._data: tuple[Record, ...] = ()
        self._elements: dict[RecordKey, SeriesElement] = {}
        self._label_order: tuple[RecordKey, ...] = ()
        self._markers: dict[RecordKey, MarkerElement] = {}
        self._samples: SampleSet = build_sample_set((), self._years, self._year_values, self.x_scale, self.y_scale)
        self._index = GridPointIndex(self._samples.px, self._samples.py)
        self._tracker = PointerTracker()
        self._overlay_visible = False
        self._highlight_nutrient: str | None = None
        self._last_diff: KeyedDiff[RecordKey] | None = None
        self._cache = LayerCache()
        self._dirty = DirtyState()
        self._series_revision = 0
        self.data_revision = 0
        self.overlay_revision = 0
        self.surface = WindowMatrix(height=self._height, width=self._width, background=self.style.background)

    # -- read-only views -------------------------------------------------

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def years(self) -> tuple[str, ...]:
        return self._years

    @property
    def data(self) -> tuple[Record, ...]:
        return self._data

    @property
    def samples(self) -> SampleSet:
        return self._samples

    @property
    def index(self) -> GridPointIndex:
        return self._index

    @property
    def elements(self) -> dict[RecordKey, SeriesElement]:
        return dict(self._elements)

    @property
    def markers(self) -> dict[RecordKey, MarkerElement]:
        return dict(self._markers)

    @property
    def label_order(self) -> tuple[RecordKey, ...]:
        return self._label_order

    @property
    def last_diff(self) -> KeyedDiff[RecordKey] | None:
        return self._last_diff

    @property
    def overlay_visible(self) -> bool:
        return self._overlay_visible

    @property
    def highlighted_nutrient(self) -> str | None:
        return self._highlight_nutrient

    @property
    def pointer_phase(self) -> str:
        return self._tracker.phase

    @property
    def last_hit(self) -> Sample | None:
        idx = self._tracker.last_index
        return None if idx is None else self._samples.sample(idx)

    def label_positions(self) -> dict[RecordKey, float]:
        return {k: el.label_y for k, el in self._elements.items() if el.label_y is not None}

    def contains(self, x: float, y: float) -> bool:
        return 0.0 <= x < self._width and 0.0 <= y < self._height

    # -- data updates ----------------------------------------------------

    def update_data(self, records: Iterable[Record], *, regions: Sequence[str] | None = None) -> None:
        """Replace the visible record set and rebuild scales, scene and hit index.

        ``regions`` is the color domain (the currently selected regions); when
        omitted the visible regions in first-appearance order are used.
        """
        data = tuple(records)
        seen: set[RecordKey] = set()
        for record in data:
            if record.key in seen:
                raise ChartDataError(f"duplicate series key in visible data: {record.key}")
            seen.add(record.key)
            if record.values.size != len(self._years):
                raise ChartDataError(f"series {record.key} has {record.values.size} values for {len(self._years)} years")

        self._data = data
        self._update_y_domain()
        if regions is None:
            regions = [record.region for record in data]
        self.color_scale.set_domain(regions)

        self._elements, self._last_diff = reconcile(
            self._elements,
            data,
            key=lambda r: r.key,
            create=self._create_element,
            update=self._update_element,
        )
        self._layout_labels()

        self._samples = build_sample_set(data, self._years, self._year_values, self.x_scale, self.y_scale)
        self._index = GridPointIndex(self._samples.px, self._samples.py)
        self._tracker.reset_hits()
        self._clear_highlight()

        self.data_revision += 1
        self._series_revision += 1
        self._dirty.mark(None, reason="data")
        LOGGER.debug(
            "chart data updated: series=%d entered=%d exited=%d samples=%d y_domain=%s",
            len(data),
            len(self._last_diff.entered),
            len(self._last_diff.exited),
            len(self._index),
            self.y_scale.domain,
        )

    def _update_y_domain(self) -> None:
        lay = self.layout
        finite: list[np.ndarray] = []
        for record in self._data:
            vals = record.values[np.isfinite(record.values)]
            if vals.size:
                finite.append(vals)
        if not finite:
            lo, hi = lay.fallback_y_domain
        else:
            all_vals = np.concatenate(finite)
            # Keep the band below the reference value in view.
            lo = min(lay.y_floor, float(np.min(all_vals)))
            hi = float(np.max(all_vals))
            if hi <= lo:
                hi = lo + 1.0
        self.y_scale.set_domain(*nice_domain(lo, hi, count=lay.nice_count))

    def _create_element(self, record: Record) -> SeriesElement:
        element = SeriesElement(key=record.key, record=record, color=self.color_scale(record.region))
        self._project(element)
        return element

    def _update_element(self, element: SeriesElement, record: Record) -> None:
        element.record = record
        element.color = self.color_scale(record.region)
        element.opacity = 1.0
        self._project(element)

    def _project(self, element: SeriesElement) -> None:
        px = self.x_scale.map_array(self._year_values)
        py = self.y_scale.map_array(element.record.values)
        element.pieces = build_path(px, py, steps=self.layout.curve_steps)

    def _layout_labels(self) -> None:
        entries = [
            (key, el.record.final_value, self.y_scale(el.record.final_value))
            for key, el in self._elements.items()
        ]
        placements: list[LabelPlacement] = layout_end_labels(
            entries,
            min_gap=self.layout.label_gap_px,
            start=float(self._height),
        )
        placed = {p.key: p.y for p in placements}
        for key, el in self._elements.items():
            el.label_y = placed.get(key)
        self._label_order = tuple(p.key for p in placements)

    # -- pointer interaction ---------------------------------------------

    def on_pointer_enter(self) -> None:
        self._tracker.enter()
        self._overlay_visible = True
        self._clear_highlight()
        self._dirty.mark(self._data_rect(), reason="overlay")

    def on_pointer_move(self, x: float, y: float) -> bool:
        """Hit-test the pointer; returns True when the overlay changed."""
        if not self._tracker.tracking:
            self.on_pointer_enter()
        idx = self._index.find(x, y, hint=self._tracker.last_index)
        if not self._tracker.accept(idx):
            return False
        if idx is None:
            self._clear_highlight()
        else:
            self._highlight(self._samples.sample(idx))
        self.overlay_revision += 1
        self._dirty.mark(self._data_rect(), reason="overlay")
        return True

    def on_pointer_leave(self) -> None:
        self._tracker.leave()
        self._overlay_visible = False
        self._clear_highlight()
        self._dirty.mark(self._data_rect(), reason="overlay")

    def handle_pointer_event(self, event: InputEvent) -> bool:
        if event.event_type == "pointer_enter":
            self.on_pointer_enter()
            return True
        if event.event_type == "pointer_leave":
            self.on_pointer_leave()
            return True
        if event.event_type == "pointer_move":
            if event.x is None or event.y is None:
                return False
            if not self.contains(event.x, event.y):
                if self._tracker.tracking:
                    self.on_pointer_leave()
                    return True
                return False
            return self.on_pointer_move(event.x, event.y)
        return False

    def _highlight(self, sample: Sample) -> None:
        nutrient = sample.nutrient
        if nutrient != self._highlight_nutrient:
            for el in self._elements.values():
                el.opacity = 1.0 if el.record.nutrient == nutrient else self.layout.dimmed_opacity
            self._highlight_nutrient = nutrient
            self._series_revision += 1

        x = self.x_scale(float(self._year_values[sample.year_index]))
        matching = [
            record
            for record in self._data
            if record.nutrient == nutrient and np.isfinite(record.values[sample.year_index])
        ]

        def create(record: Record) -> MarkerElement:
            value = record.value_at(sample.year_index)
            return MarkerElement(key=record.key, x=x, y=self.y_scale(value), value=value, color=self.color_scale(record.region))

        def update(marker: MarkerElement, record: Record) -> None:
            marker.value = record.value_at(sample.year_index)
            marker.x = x
            marker.y = self.y_scale(marker.value)
            marker.color = self.color_scale(record.region)

        self._markers, _ = reconcile(self._markers, matching, key=lambda r: r.key, create=create, update=update)
        LOGGER.debug("hover hit sample=%d nutrient=%s year=%s markers=%d", sample.index, nutrient, sample.year, len(self._markers))

    def _clear_highlight(self) -> None:
        if self._highlight_nutrient is not None:
            self._series_revision += 1
        for el in self._elements.values():
            el.opacity = 1.0
        self._highlight_nutrient = None
        self._markers = {}

    # -- rendering -------------------------------------------------------

    def plot_rect(self) -> Rect:
        lay = self.layout
        return (
            lay.margin_left,
            lay.margin_top,
            self._width - lay.margin_left - lay.margin_right,
            self._height - lay.margin_top - lay.margin_bottom,
        )

    def _data_rect(self) -> Rect:
        """Region that series, labels and markers can touch."""
        pad = self.layout.marker_radius + self.layout.line_width + 2
        x0 = max(0, self.layout.margin_left - pad)
        y1 = min(self._height, self._height - self.layout.margin_bottom + pad)
        return (x0, 0, self._width - x0, y1)

    def render(self) -> np.ndarray:
        frame = self._render_static().copy()
        blend_over(frame, self._render_series())
        if self._overlay_visible and self._markers:
            blend_over(frame, self._render_overlay())
        return frame

    def _render_static(self) -> np.ndarray:
        key = (self._width, self._height, self.y_scale.domain, self.style, self.layout)
        if self._cache.static_key == key and self._cache.static_template is not None:
            return self._cache.static_template

        lay = self.layout
        st = self.style
        canvas = new_canvas(self._width, self._height, color=st.background)
        px0, py0, pw, ph = self.plot_rect()
        px1 = px0 + pw
        py1 = py0 + ph
        fill_rect(canvas, px0, py0, px1 - 1, py1 - 1, st.plot_bg_color)

        ref_y = self.y_scale(lay.reference_value)
        if math.isfinite(ref_y) and ref_y < py1:
            fill_rect(canvas, px0, int(round(max(float(py0), ref_y))), px1 - 1, py1 - 1, st.band_color)

        y_ticks = self.y_scale.ticks(self._height / lay.y_tick_spacing_px)
        for value, label in zip(y_ticks.tolist(), format_ticks_for_axis(y_ticks), strict=True):
            ty = int(round(self.y_scale(value)))
            draw_hline(canvas, px0, px1 - 1, ty, st.grid_color)
            draw_text(canvas, px0 - 4, ty, label, st.text_color, anchor="end", baseline="middle", font_size_px=st.tick_font_px)
        draw_text(canvas, 2, 15, Y_AXIS_TITLE, st.text_color, baseline="bottom", font_size_px=st.title_font_px)

        draw_hline(canvas, px0, px1 - 1, py1, st.axis_color)
        x_ticks = self.x_scale.ticks(self._width / lay.x_tick_spacing_px)
        # Years are whole numbers; fractional ticks would label nothing real.
        x_ticks = x_ticks[np.isclose(x_ticks, np.round(x_ticks))]
        for value in x_ticks.tolist():
            tx = int(round(self.x_scale(value)))
            draw_vline(canvas, tx, py1, py1 + 6, st.axis_color)
            draw_text(canvas, tx, py1 + 9, str(int(round(value))), st.text_color, anchor="middle", font_size_px=st.tick_font_px)

        self._cache.static_key = key
        self._cache.static_template = canvas
        return canvas

    def _render_series(self) -> np.ndarray:
        key = (self._series_revision, self.data_revision)
        if self._cache.series_key == key and self._cache.series_template is not None:
            return self._cache.series_template

        lay = self.layout
        canvas = new_canvas(self._width, self._height)
        label_x = self._width - lay.margin_right + lay.label_offset_px
        for el in self._elements.values():
            color = with_opacity(el.color, el.opacity)
            for xs, ys in el.pieces:
                if xs.size >= 2:
                    draw_polyline(canvas, xs, ys, color, width=lay.line_width)
                elif xs.size == 1:
                    draw_dot(canvas, float(xs[0]), float(ys[0]), color, width=lay.line_width + 1)
            if el.label_y is not None:
                draw_text(
                    canvas,
                    label_x,
                    el.label_y,
                    el.record.nutrient,
                    color,
                    baseline="middle",
                    font_size_px=self.style.label_font_px,
                )
        self._cache.series_key = key
        self._cache.series_template = canvas
        return canvas

    def _render_overlay(self) -> np.ndarray:
        lay = self.layout
        canvas = new_canvas(self._width, self._height)
        for marker in self._markers.values():
            draw_circle_marker(
                canvas,
                marker.x,
                marker.y,
                radius=lay.marker_radius,
                fill=marker.color,
                stroke=self.style.marker_stroke,
            )
            draw_text(
                canvas,
                marker.x,
                marker.y - lay.marker_text_offset_px,
                marker.text,
                marker.color,
                anchor="middle",
                baseline="bottom",
                font_size_px=self.style.tick_font_px,
            )
        return canvas

    # -- surface output --------------------------------------------------

    @property
    def dirty_rect(self) -> Rect | None:
        return self._dirty.rect if self._dirty.dirty else None

    @property
    def needs_redraw(self) -> bool:
        return self._dirty.dirty

    def compile_write_batch(self) -> WriteBatch:
        batch = compile_full_rewrite_batch(self.render())
        self._dirty.clear()
        return batch

    def compile_incremental_write_batch(self) -> WriteBatch:
        rect = self._dirty.rect if self._dirty.dirty else None
        if rect is None:
            return self.compile_write_batch()
        frame = self.render()
        x, y, w, h = rect
        batch = compile_replace_rect_batch(frame, x=x, y=y, width=w, height=h)
        self._dirty.clear()
        return batch

    def present(self) -> int:
        """Push pending changes to ``surface``; returns the surface revision."""
        if not self._dirty.dirty:
            return self.surface.revision
        LOGGER.debug("present rect=%s reasons=%s", self._dirty.rect, sorted(self._dirty.reasons))
        return self.surface.submit_write_batch(self.compile_incremental_write_batch())
