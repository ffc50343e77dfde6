from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


RecordKey = tuple[str, str]


@dataclass(frozen=True, eq=False)
class Record:
    nutrient_type: str
    nutrient: str
    region: str
    values: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        arr = np.array(self.values, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError("Record.values must be 1-D")
        arr.setflags(write=False)
        object.__setattr__(self, "values", arr)

    @property
    def key(self) -> RecordKey:
        return (self.region, self.nutrient)

    @property
    def final_value(self) -> float:
        if self.values.size == 0:
            return float("nan")
        return float(self.values[-1])

    def value_at(self, year_index: int) -> float:
        return float(self.values[int(year_index)])


@dataclass(frozen=True)
class TableDomains:
    years: tuple[str, ...]
    nutrient_types: tuple[str, ...]
    regions: tuple[str, ...]


@dataclass(frozen=True)
class NormalizedTable:
    records: tuple[Record, ...]
    domains: TableDomains


def year_axis_values(years: tuple[str, ...] | list[str]) -> np.ndarray:
    out = np.empty(len(years), dtype=np.float64)
    for i, label in enumerate(years):
        try:
            out[i] = float(str(label).strip())
        except ValueError as exc:
            raise ValueError(f"year column label is not numeric: {label!r}") from exc
    return out
