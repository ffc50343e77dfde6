from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math

from trendline_plot.records import RecordKey


@dataclass(frozen=True)
class LabelPlacement:
    key: RecordKey
    final_value: float
    natural_y: float
    y: float


def decollide(natural_ys: Sequence[float], *, min_gap: float = 12.0, start: float) -> list[float]:
    """Greedy upward push for labels listed bottom-first.

    Each label lands at ``min(previous - min_gap, natural)``; uncrowded labels
    keep their natural position and nothing is ever pushed down. The topmost
    label may end above the drawable area.
    """
    out: list[float] = []
    current = float(start)
    for natural in natural_ys:
        current = min(current - min_gap, float(natural))
        out.append(current)
    return out


def layout_end_labels(
    entries: Sequence[tuple[RecordKey, float, float]],
    *,
    min_gap: float = 12.0,
    start: float,
) -> list[LabelPlacement]:
    """Place end-of-line labels for ``(key, final_value, natural_y)`` entries.

    Entries are sorted ascending by final value (stable for ties) before the
    walk. Entries whose final value or natural position is not finite are left
    out: they have no end point to label.
    """
    placeable = [e for e in entries if math.isfinite(e[1]) and math.isfinite(e[2])]
    ordered = sorted(placeable, key=lambda e: e[1])
    ys = decollide([e[2] for e in ordered], min_gap=min_gap, start=start)
    return [
        LabelPlacement(key=key, final_value=float(final), natural_y=float(natural), y=y)
        for (key, final, natural), y in zip(ordered, ys, strict=True)
    ]
