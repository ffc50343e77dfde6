from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

import numpy as np

from trendline_plot.records import Record, RecordKey
from trendline_plot.scales import LinearScale


@dataclass(frozen=True)
class Sample:
    index: int
    year_index: int
    year: str
    value: float
    key: RecordKey
    nutrient: str


@dataclass(frozen=True)
class SampleSet:
    """Flattened ``(record, year)`` samples, record-major then year order.

    Sample ``i`` belongs to ``records[i // len(years)]`` at year position
    ``i % len(years)``.
    """

    records: tuple[Record, ...]
    years: tuple[str, ...]
    px: np.ndarray
    py: np.ndarray

    def __len__(self) -> int:
        return int(self.px.size)

    def sample(self, index: int) -> Sample:
        n_years = len(self.years)
        if index < 0 or index >= len(self):
            raise IndexError(f"sample index out of range: {index}")
        record = self.records[index // n_years]
        year_index = index % n_years
        return Sample(
            index=index,
            year_index=year_index,
            year=self.years[year_index],
            value=record.value_at(year_index),
            key=record.key,
            nutrient=record.nutrient,
        )


def build_sample_set(
    records: Sequence[Record],
    years: Sequence[str],
    year_values: np.ndarray,
    x_scale: LinearScale,
    y_scale: LinearScale,
) -> SampleSet:
    n_years = len(years)
    if year_values.shape != (n_years,):
        raise ValueError("year_values must match years")
    for record in records:
        if record.values.size != n_years:
            raise ValueError(f"record {record.key} has {record.values.size} values for {n_years} years")
    if not records:
        empty = np.empty(0, dtype=np.float64)
        return SampleSet(records=(), years=tuple(years), px=empty, py=empty)
    xs = np.tile(x_scale.map_array(year_values), len(records))
    values = np.concatenate([record.values for record in records])
    ys = y_scale.map_array(values)
    return SampleSet(records=tuple(records), years=tuple(years), px=xs, py=ys)


class GridPointIndex:
    """Uniform-grid nearest-neighbour index over planar points.

    Non-finite points are never returned. Ties on distance resolve to the
    lowest point index, so results do not depend on the search hint.
    """

    def __init__(self, xs: np.ndarray, ys: np.ndarray, *, points_per_cell: float = 2.0) -> None:
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.shape != ys.shape or xs.ndim != 1:
            raise ValueError("xs and ys must be 1-D arrays of equal length")
        self._xs = xs
        self._ys = ys
        self._valid = np.isfinite(xs) & np.isfinite(ys)
        ids = np.flatnonzero(self._valid)
        self._size = int(ids.size)
        if ids.size == 0:
            self._x0 = self._y0 = 0.0
            self._cell = 1.0
            self._cols = self._rows = 0
            self._order = ids
            self._starts = np.zeros(1, dtype=np.int64)
            return

        vx = xs[ids]
        vy = ys[ids]
        self._x0 = float(np.min(vx))
        self._y0 = float(np.min(vy))
        span_x = float(np.max(vx)) - self._x0
        span_y = float(np.max(vy)) - self._y0
        area = max(span_x, 1.0) * max(span_y, 1.0)
        self._cell = max(1.0, math.sqrt(area * points_per_cell / ids.size))
        self._cols = int(span_x // self._cell) + 1
        self._rows = int(span_y // self._cell) + 1

        cx = np.minimum(((vx - self._x0) // self._cell).astype(np.int64), self._cols - 1)
        cy = np.minimum(((vy - self._y0) // self._cell).astype(np.int64), self._rows - 1)
        cell_ids = cy * self._cols + cx
        # Stable sort keeps point indices ascending inside each cell.
        perm = np.argsort(cell_ids, kind="stable")
        self._order = ids[perm]
        self._starts = np.searchsorted(cell_ids[perm], np.arange(self._cols * self._rows + 1), side="left")

    def __len__(self) -> int:
        return self._size

    def find(self, x: float, y: float, hint: int | None = None) -> int | None:
        if self._size == 0:
            return None
        x = float(x)
        y = float(y)
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        best = -1
        best_d2 = math.inf
        if hint is not None and 0 <= hint < self._xs.size and self._valid[hint]:
            best = int(hint)
            best_d2 = self._dist2(best, x, y)

        ci = self._clamp(int(math.floor((x - self._x0) / self._cell)), self._cols)
        cj = self._clamp(int(math.floor((y - self._y0) / self._cell)), self._rows)
        max_ring = max(self._cols, self._rows)
        for ring in range(max_ring + 1):
            lower = self._ring_lower_bound(ring, ci, cj, x, y)
            if lower * lower > best_d2:
                break
            for col, row in self._ring_cells(ring, ci, cj):
                cell = row * self._cols + col
                for idx in self._order[self._starts[cell] : self._starts[cell + 1]]:
                    i = int(idx)
                    d2 = self._dist2(i, x, y)
                    if d2 < best_d2 or (d2 == best_d2 and i < best):
                        best = i
                        best_d2 = d2
        return best if best >= 0 else None

    def _dist2(self, i: int, x: float, y: float) -> float:
        dx = float(self._xs[i]) - x
        dy = float(self._ys[i]) - y
        return dx * dx + dy * dy

    @staticmethod
    def _clamp(v: int, upper: int) -> int:
        return max(0, min(upper - 1, v))

    def _ring_cells(self, ring: int, ci: int, cj: int):
        if ring == 0:
            yield (ci, cj)
            return
        c_lo, c_hi = ci - ring, ci + ring
        r_lo, r_hi = cj - ring, cj + ring
        for col in range(max(0, c_lo), min(self._cols - 1, c_hi) + 1):
            if r_lo >= 0:
                yield (col, r_lo)
            if r_hi < self._rows:
                yield (col, r_hi)
        for row in range(max(0, r_lo + 1), min(self._rows - 1, r_hi - 1) + 1):
            if c_lo >= 0:
                yield (c_lo, row)
            if c_hi < self._cols:
                yield (c_hi, row)

    def _ring_lower_bound(self, ring: int, ci: int, cj: int, x: float, y: float) -> float:
        """Smallest possible distance from ``(x, y)`` to any cell of ``ring``."""
        if ring == 0:
            return 0.0
        candidates: list[float] = []
        for col in (ci - ring, ci + ring):
            if 0 <= col < self._cols:
                candidates.append(self._axis_gap(x, self._x0 + col * self._cell))
        for row in (cj - ring, cj + ring):
            if 0 <= row < self._rows:
                candidates.append(self._axis_gap(y, self._y0 + row * self._cell))
        if not candidates:
            return math.inf
        return min(candidates)

    def _axis_gap(self, v: float, lo: float) -> float:
        hi = lo + self._cell
        if v < lo:
            return lo - v
        if v > hi:
            return v - hi
        return 0.0


def brute_force_nearest(xs: np.ndarray, ys: np.ndarray, x: float, y: float) -> int | None:
    """Reference O(n) scan; ties resolve to the lowest index."""
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    d2 = (xs - float(x)) ** 2 + (ys - float(y)) ** 2
    d2 = np.where(np.isfinite(d2), d2, np.inf)
    if d2.size == 0 or not np.isfinite(np.min(d2)):
        return None
    return int(np.argmin(d2))
