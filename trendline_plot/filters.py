from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

from trendline_plot.errors import FilterContractError
from trendline_plot.records import Record


MAX_REGIONS = 2

FilterKey = Literal["nutrientType", "regions"]
FILTER_KEYS: tuple[str, ...] = ("nutrientType", "regions")


@dataclass(frozen=True)
class FilterState:
    nutrient_type: str
    regions: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "regions", tuple(self.regions))


@dataclass(frozen=True)
class FilterChange:
    """Notification emitted by a filter control."""

    key: str
    value: str | tuple[str, ...]


def apply_filter(records: Iterable[Record], state: FilterState) -> tuple[Record, ...]:
    """Visible subset for ``state``; input order is preserved and nothing is mutated."""
    wanted = set(state.regions)
    return tuple(
        record
        for record in records
        if record.nutrient_type == state.nutrient_type and record.region in wanted
    )


def apply_filter_change(state: FilterState, change: FilterChange) -> FilterState:
    if change.key == "nutrientType":
        if not isinstance(change.value, str):
            raise FilterContractError("nutrientType value must be a single category")
        return dataclasses.replace(state, nutrient_type=change.value)
    if change.key == "regions":
        if isinstance(change.value, str) or not isinstance(change.value, Sequence):
            raise FilterContractError("regions value must be a sequence of categories")
        regions = tuple(str(r) for r in change.value)
        if len(regions) > MAX_REGIONS:
            raise FilterContractError(f"at most {MAX_REGIONS} regions may be selected, got {len(regions)}")
        if len(set(regions)) != len(regions):
            raise FilterContractError("regions must not repeat")
        return dataclasses.replace(state, regions=regions)
    raise FilterContractError(f"unknown filter key: {change.key!r}")


def parse_filter_change(payload: object) -> FilterChange:
    """Parse a ``{"key": ..., "value": ...}`` notification payload."""
    if isinstance(payload, FilterChange):
        return payload
    if not isinstance(payload, Mapping):
        raise FilterContractError(f"filter change payload must be a mapping, got {type(payload)!r}")
    key = payload.get("key")
    if key not in FILTER_KEYS:
        raise FilterContractError(f"unknown filter key: {key!r}")
    value = payload.get("value")
    if key == "regions" and isinstance(value, list):
        value = tuple(value)
    return FilterChange(key=key, value=value)  # type: ignore[arg-type]
