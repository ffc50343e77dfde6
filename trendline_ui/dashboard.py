from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import IO

from trendline_plot.adapters import read_table
from trendline_plot.chart import ChartContainer, TrendChart
from trendline_plot.errors import FilterContractError
from trendline_plot.filters import FilterChange, FilterState, apply_filter, apply_filter_change, parse_filter_change
from trendline_plot.records import NormalizedTable, Record
from trendline_plot.style import ChartLayout, ChartStyle
from trendline_ui.controls import NutrientTypeControl, RegionsControl


LOGGER = logging.getLogger(__name__)


@dataclass
class TrendDashboard:
    """Holds the loaded table and filter state and keeps the chart in sync."""

    table: NormalizedTable
    chart: TrendChart
    filters: FilterState
    nutrient_type_control: NutrientTypeControl
    regions_control: RegionsControl
    visible: tuple[Record, ...] = ()

    @classmethod
    def create(
        cls,
        table: NormalizedTable,
        container: ChartContainer,
        *,
        layout: ChartLayout | None = None,
        style: ChartStyle | None = None,
    ) -> "TrendDashboard":
        domains = table.domains
        if not domains.nutrient_types or not domains.regions:
            raise ValueError("table has no rows to filter")
        style = style or ChartStyle()
        filters = FilterState(nutrient_type=domains.nutrient_types[0], regions=(domains.regions[0],))
        dashboard = cls(
            table=table,
            chart=TrendChart(container, domains.years, layout=layout, style=style),
            filters=filters,
            nutrient_type_control=NutrientTypeControl(options=domains.nutrient_types, selected=filters.nutrient_type),
            regions_control=RegionsControl(options=domains.regions, checked=filters.regions, style=style),
        )
        dashboard.nutrient_type_control.subscribe(dashboard.handle_filter_change)
        dashboard.regions_control.subscribe(dashboard.handle_filter_change)
        dashboard.refresh()
        return dashboard

    @classmethod
    def from_csv(cls, source: str | Path | IO[str], container: ChartContainer, **kwargs) -> "TrendDashboard":
        return cls.create(read_table(source), container, **kwargs)

    def handle_filter_change(self, change: FilterChange | Mapping[str, object]) -> None:
        """Apply a filter change; on any error filters, controls and chart keep their previous state."""
        parsed = parse_filter_change(change)
        state = apply_filter_change(self.filters, parsed)
        if state.nutrient_type not in self.nutrient_type_control.options:
            raise FilterContractError(f"unknown nutrient type: {state.nutrient_type!r}")
        unknown = [r for r in state.regions if r not in self.regions_control.options]
        if unknown:
            raise FilterContractError(f"unknown regions: {unknown!r}")
        self._show(state)
        self.regions_control.reset(state.regions)
        self.nutrient_type_control.selected = state.nutrient_type
        self.filters = state
        LOGGER.info("filter change %s=%r", parsed.key, parsed.value)

    def refresh(self) -> None:
        self._show(self.filters)

    def _show(self, state: FilterState) -> None:
        visible = apply_filter(self.table.records, state)
        color_domain = tuple(r for r in self.regions_control.options if r in state.regions)
        self.chart.update_data(visible, regions=color_domain)
        self.visible = visible
