from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from trendline_plot.errors import FilterContractError
from trendline_plot.filters import MAX_REGIONS, FilterChange
from trendline_plot.scales import RGBA, OrdinalColorScale
from trendline_plot.style import ChartStyle


FilterListener = Callable[[FilterChange], None]


@dataclass
class _Emitter:
    _listeners: list[FilterListener] = field(default_factory=list)

    def subscribe(self, listener: FilterListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, change: FilterChange) -> None:
        for listener in list(self._listeners):
            listener(change)


@dataclass
class NutrientTypeControl(_Emitter):
    """Single-select (radio) model over the nutrient-type categories."""

    options: tuple[str, ...] = ()
    selected: str = ""

    def __post_init__(self) -> None:
        self.options = tuple(self.options)
        if not self.options:
            raise ValueError("NutrientTypeControl requires at least one option")
        if not self.selected:
            self.selected = self.options[0]
        if self.selected not in self.options:
            raise ValueError(f"unknown nutrient type: {self.selected!r}")

    def select(self, value: str) -> bool:
        if value not in self.options:
            raise FilterContractError(f"unknown nutrient type: {value!r}")
        if value == self.selected:
            return False
        previous, self.selected = self.selected, value
        try:
            self._emit(FilterChange(key="nutrientType", value=value))
        except Exception:
            self.selected = previous
            raise
        return True


@dataclass
class RegionsControl(_Emitter):
    """Capped multi-select (checkbox) model over the regions.

    Checked regions are kept in option order. Once ``max_count`` are checked
    the remaining options are disabled, and checking one anyway is rejected.
    Label colors follow the chart palette in checked order; unchecked regions
    use the neutral color.
    """

    options: tuple[str, ...] = ()
    checked: tuple[str, ...] = ()
    max_count: int = MAX_REGIONS
    style: ChartStyle = field(default_factory=ChartStyle)

    def __post_init__(self) -> None:
        self.options = tuple(self.options)
        if self.max_count < 1:
            raise ValueError("max_count must be >= 1")
        unknown = [r for r in self.checked if r not in self.options]
        if unknown:
            raise ValueError(f"unknown regions: {unknown!r}")
        if len(set(self.checked)) > self.max_count:
            raise ValueError(f"at most {self.max_count} regions may be checked")
        self.checked = self._in_option_order(self.checked)
        self._colors = OrdinalColorScale(palette=self.style.palette, unknown=self.style.neutral_color)
        self._colors.set_domain(self.checked)

    def title(self) -> str:
        return f"Region (Up to {self.max_count})"

    def is_disabled(self, region: str) -> bool:
        return len(self.checked) >= self.max_count and region not in self.checked

    def disabled(self) -> tuple[str, ...]:
        return tuple(r for r in self.options if self.is_disabled(r))

    def legend_colors(self) -> dict[str, RGBA]:
        return {r: self._colors(r) for r in self.options}

    def set_checked(self, region: str, checked: bool) -> bool:
        if region not in self.options:
            raise FilterContractError(f"unknown region: {region!r}")
        if checked == (region in self.checked):
            return False
        if checked:
            if self.is_disabled(region):
                raise FilterContractError(f"at most {self.max_count} regions may be selected")
            current = self.checked + (region,)
        else:
            current = tuple(r for r in self.checked if r != region)
        previous = self.checked
        self.reset(current)
        try:
            self._emit(FilterChange(key="regions", value=self.checked))
        except Exception:
            # A listener rejected the selection.
            self.reset(previous)
            raise
        return True

    def reset(self, checked: Sequence[str]) -> None:
        """Adopt an externally applied selection without notifying listeners."""
        unknown = [r for r in checked if r not in self.options]
        if unknown:
            raise FilterContractError(f"unknown regions: {unknown!r}")
        self.checked = self._in_option_order(checked)
        self._colors.set_domain(self.checked)

    def toggle(self, region: str) -> bool:
        return self.set_checked(region, region not in self.checked)

    def _in_option_order(self, regions: Sequence[str]) -> tuple[str, ...]:
        wanted = set(regions)
        return tuple(r for r in self.options if r in wanted)
