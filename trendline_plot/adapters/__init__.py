from trendline_plot.adapters.table import DESCRIPTIVE_COLUMNS, coerce_number, normalize_table, read_table

__all__ = ["DESCRIPTIVE_COLUMNS", "coerce_number", "normalize_table", "read_table"]
