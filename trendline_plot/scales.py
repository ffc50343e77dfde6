from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
import math
from typing import Sequence

import numpy as np


RGBA = tuple[int, int, int, int]

_E10 = math.sqrt(50.0)
_E5 = math.sqrt(10.0)
_E2 = math.sqrt(2.0)


@dataclass
class LinearScale:
    """Continuous mapping from a data domain onto a pixel range."""

    domain: tuple[float, float] = (0.0, 1.0)
    range: tuple[float, float] = (0.0, 1.0)

    def __post_init__(self) -> None:
        self.domain = (float(self.domain[0]), float(self.domain[1]))
        self.range = (float(self.range[0]), float(self.range[1]))

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.range
        if d0 == d1:
            return (r0 + r1) * 0.5
        return r0 + (float(value) - d0) * (r1 - r0) / (d1 - d0)

    def map_array(self, values: np.ndarray) -> np.ndarray:
        d0, d1 = self.domain
        r0, r1 = self.range
        arr = np.asarray(values, dtype=np.float64)
        if d0 == d1:
            return np.full(arr.shape, (r0 + r1) * 0.5, dtype=np.float64)
        return r0 + (arr - d0) * ((r1 - r0) / (d1 - d0))

    def set_domain(self, vmin: float, vmax: float, *, nice: bool = False, count: int = 10) -> "LinearScale":
        if nice:
            vmin, vmax = nice_domain(vmin, vmax, count=count)
        self.domain = (float(vmin), float(vmax))
        return self

    def ticks(self, count: float = 10) -> np.ndarray:
        return linear_ticks(self.domain[0], self.domain[1], count)


@dataclass
class OrdinalColorScale:
    """Maps categories onto a small palette in domain order; unknown keys get a neutral color."""

    palette: tuple[RGBA, ...]
    unknown: RGBA
    _domain: tuple[str, ...] = field(default=())

    @property
    def domain(self) -> tuple[str, ...]:
        return self._domain

    def set_domain(self, categories: Sequence[str]) -> "OrdinalColorScale":
        seen: dict[str, None] = {}
        for category in categories:
            seen.setdefault(str(category), None)
        self._domain = tuple(seen)
        return self

    def __call__(self, category: str) -> RGBA:
        try:
            idx = self._domain.index(category)
        except ValueError:
            return self.unknown
        if idx >= len(self.palette):
            return self.unknown
        return self.palette[idx]


def parse_hex_color(value: str, alpha: int = 255) -> RGBA:
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) == 8:
        alpha = int(text[6:8], 16)
        text = text[:6]
    if len(text) != 6:
        raise ValueError(f"invalid hex color: {value!r}")
    return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16), int(alpha))


def tick_increment(start: float, stop: float, count: float) -> float:
    """Positive step (>= 1) or negative inverse step (< 1) for ``count`` ticks."""
    step = (stop - start) / max(0.0, float(count))
    if not np.isfinite(step) or step <= 0:
        return 0.0
    power = math.floor(math.log10(step))
    error = step / (10.0**power)
    if error >= _E10:
        factor = 10.0
    elif error >= _E5:
        factor = 5.0
    elif error >= _E2:
        factor = 2.0
    else:
        factor = 1.0
    if power >= 0:
        return factor * (10.0**power)
    return -(10.0 ** (-power)) / factor


def nice_domain(vmin: float, vmax: float, *, count: int = 10) -> tuple[float, float]:
    """Extend ``[vmin, vmax]`` outward to tick-aligned bounds."""
    start, stop = float(vmin), float(vmax)
    if not (np.isfinite(start) and np.isfinite(stop)):
        return (start, stop)
    reverse = stop < start
    if reverse:
        start, stop = stop, start
    prestep: float | None = None
    for _ in range(10):
        step = tick_increment(start, stop, count)
        if step == prestep:
            break
        if step > 0:
            start = math.floor(start / step) * step
            stop = math.ceil(stop / step) * step
        elif step < 0:
            start = math.ceil(start * step) / step
            stop = math.floor(stop * step) / step
        else:
            break
        prestep = step
    return (stop, start) if reverse else (start, stop)


def linear_ticks(vmin: float, vmax: float, count: float) -> np.ndarray:
    if count <= 0:
        raise ValueError("count must be > 0")
    lo, hi = (float(vmin), float(vmax))
    if not (np.isfinite(lo) and np.isfinite(hi)):
        return np.asarray([], dtype=np.float64)
    if lo == hi:
        return np.asarray([lo], dtype=np.float64)
    if hi < lo:
        lo, hi = hi, lo
    inc = tick_increment(lo, hi, count)
    if inc == 0:
        return np.asarray([], dtype=np.float64)
    if inc > 0:
        i0 = math.ceil(lo / inc)
        i1 = math.floor(hi / inc)
        ticks = np.arange(i0, i1 + 1, dtype=np.float64) * inc
    else:
        inv = -inc
        i0 = math.ceil(lo * inv)
        i1 = math.floor(hi * inv)
        ticks = np.arange(i0, i1 + 1, dtype=np.float64) / inv
    # Normalize floating-point drift so values like -4.44e-16 become 0.
    ticks[np.isclose(ticks, 0.0, rtol=0.0, atol=abs(inc) * 1e-9)] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not np.isfinite(value):
        return str(value)
    if step is not None and np.isfinite(step) and step > 0 and abs(value) <= step * 1e-9:
        value = 0.0
    abs_v = abs(value)
    decimals = _decimals_from_step(step) if step is not None else 6
    if abs_v != 0 and (abs_v >= 1e6 or (step is not None and abs(step) < 1e-4) or abs_v < 1e-6):
        return f"{value:.4e}"

    d = Decimal(str(value))
    quant = Decimal("1").scaleb(-decimals)
    try:
        q = d.quantize(quant)
    except InvalidOperation:
        q = d
    out = format(q, "f")
    # Only trim trailing zeros for fractional values (preserve integer zeros like 30, 40).
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    if out == "-0":
        out = "0"
    return out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    if ticks.size == 0:
        return []
    if ticks.size == 1:
        return [format_tick(float(ticks[0]))]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def format_value(value: float) -> str:
    """Tooltip text for a single sample value."""
    if not np.isfinite(value):
        return ""
    return format_tick(float(value))


def _decimals_from_step(step: float) -> int:
    if step <= 0 or not np.isfinite(step):
        return 6
    d = Decimal(str(step)).normalize()
    exp = d.as_tuple().exponent
    decimals = max(0, -int(exp))
    return min(12, decimals)
