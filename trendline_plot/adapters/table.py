from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
import logging
from pathlib import Path
from typing import Any, IO

import numpy as np
import pandas as pd

from trendline_plot.errors import TableFormatError
from trendline_plot.records import NormalizedTable, Record, TableDomains


LOGGER = logging.getLogger(__name__)

DESCRIPTIVE_COLUMNS: tuple[str, str, str] = ("Type", "Nutrient", "Region")


def read_table(source: str | Path | IO[str]) -> NormalizedTable:
    """Read a ``Type,Nutrient,Region,<year>...`` CSV and normalize it.

    Every cell is read as text so year coercion happens in one place.
    """
    try:
        frame = pd.read_csv(source, dtype=str, keep_default_na=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise TableFormatError(f"unreadable table: {exc}") from exc
    return normalize_table(frame)


def normalize_table(rows: Any, *, columns: Sequence[str] | None = None) -> NormalizedTable:
    """Convert raw rows into immutable records plus their axis domains.

    ``rows`` is a pandas DataFrame or a sequence of mappings keyed by column
    label. Column order after the first three descriptive columns is the
    authoritative year order.
    """
    if isinstance(rows, pd.DataFrame):
        column_labels = [str(c) for c in rows.columns]
        raw_rows: list[Mapping[str, Any]] = [
            dict(zip(column_labels, values, strict=False)) for values in rows.itertuples(index=False, name=None)
        ]
    else:
        raw_rows = list(rows)
        if columns is None:
            if not raw_rows:
                raise TableFormatError("columns are required for an empty row sequence")
            columns = list(raw_rows[0].keys())
        column_labels = [str(c) for c in columns]

    if len(column_labels) < len(DESCRIPTIVE_COLUMNS) + 1:
        raise TableFormatError(f"table needs {len(DESCRIPTIVE_COLUMNS)} descriptive columns and at least one year column")
    for expected, actual in zip(DESCRIPTIVE_COLUMNS, column_labels, strict=False):
        if expected != actual.strip():
            raise TableFormatError(f"expected column {expected!r}, found {actual!r}")

    years = tuple(label.strip() for label in column_labels[len(DESCRIPTIVE_COLUMNS) :])
    type_col, nutrient_col, region_col = column_labels[: len(DESCRIPTIVE_COLUMNS)]

    nutrient_types: dict[str, None] = {}
    regions: dict[str, None] = {}
    records: list[Record] = []
    seen_rows: dict[tuple[str, str, str], int] = {}
    coerced = 0
    year_cols = column_labels[len(DESCRIPTIVE_COLUMNS) :]
    for row_index, row in enumerate(raw_rows):
        if not isinstance(row, Mapping):
            raise TableFormatError(f"row {row_index} is not a mapping: {type(row)!r}")
        nutrient_type = _text(row.get(type_col))
        region = _text(row.get(region_col))
        nutrient = _text(row.get(nutrient_col))
        identity = (nutrient_type, region, nutrient)
        if identity in seen_rows:
            raise TableFormatError(
                f"row {row_index} repeats Type/Region/Nutrient {identity!r} of row {seen_rows[identity]}"
            )
        seen_rows[identity] = row_index
        nutrient_types.setdefault(nutrient_type, None)
        regions.setdefault(region, None)
        values = np.empty(len(year_cols), dtype=np.float64)
        for i, col in enumerate(year_cols):
            values[i] = coerce_number(row.get(col))
        coerced += int(np.count_nonzero(np.isnan(values)))
        records.append(
            Record(
                nutrient_type=nutrient_type,
                nutrient=nutrient,
                region=region,
                values=values,
            )
        )

    if coerced:
        LOGGER.warning("table normalization produced %d missing (NaN) year values", coerced)
    LOGGER.debug("normalized %d records over %d years", len(records), len(years))
    return NormalizedTable(
        records=tuple(records),
        domains=TableDomains(
            years=years,
            nutrient_types=tuple(nutrient_types),
            regions=tuple(regions),
        ),
    )


def coerce_number(raw: Any) -> float:
    """Coerce one table cell to float; anything non-numeric becomes NaN."""
    if raw is None:
        return float("nan")
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, (int, float, Decimal, np.integer, np.floating)):
        return float(raw)
    text = str(raw).strip()
    if not text:
        return float("nan")
    try:
        return float(text)
    except ValueError:
        return float("nan")


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, float) and np.isnan(raw):
        return ""
    return str(raw).strip()
