from __future__ import annotations


class TrendlineError(Exception):
    """Base error for the trendline chart engine."""


class TableFormatError(TrendlineError):
    """Raised when the source table is structurally unusable."""


class ChartDataError(TrendlineError):
    """Raised when data handed to the chart violates its contract."""


class FilterContractError(TrendlineError):
    """Raised for malformed filter-change payloads."""
