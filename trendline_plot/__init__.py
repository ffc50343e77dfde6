from trendline_plot.adapters import normalize_table, read_table
from trendline_plot.chart import ChartContainer, MarkerElement, SeriesElement, StaticContainer, TrendChart
from trendline_plot.errors import ChartDataError, FilterContractError, TableFormatError, TrendlineError
from trendline_plot.filters import MAX_REGIONS, FilterChange, FilterState, apply_filter, apply_filter_change
from trendline_plot.geometry import GridPointIndex, Sample, SampleSet, build_sample_set
from trendline_plot.records import NormalizedTable, Record, TableDomains
from trendline_plot.style import ChartLayout, ChartStyle

__all__ = [
    "ChartContainer",
    "ChartDataError",
    "ChartLayout",
    "ChartStyle",
    "FilterChange",
    "FilterContractError",
    "FilterState",
    "GridPointIndex",
    "MAX_REGIONS",
    "MarkerElement",
    "NormalizedTable",
    "Record",
    "Sample",
    "SampleSet",
    "SeriesElement",
    "StaticContainer",
    "TableDomains",
    "TableFormatError",
    "TrendChart",
    "TrendlineError",
    "apply_filter",
    "apply_filter_change",
    "build_sample_set",
    "normalize_table",
    "read_table",
]
