from __future__ import annotations

import io
import math
import unittest

import numpy as np
import pandas as pd

from trendline_plot.adapters import coerce_number, normalize_table, read_table
from trendline_plot.errors import TableFormatError
from trendline_plot.records import Record, year_axis_values


CSV = """Type,Nutrient,Region,2008,2009,2010
Vitamin,Vitamin A,North,101.5,99,
Vitamin,Vitamin A,South,88,n/a,92.25
Mineral,Iron,North,70,71,72
Vitamin,Folate,East,110,111,112
"""


class TableNormalizationTests(unittest.TestCase):
    def test_read_table_builds_records_and_domains(self) -> None:
        with self.assertLogs("trendline_plot.adapters.table", level="WARNING") as logs:
            table = read_table(io.StringIO(CSV))
        self.assertIn("2 missing", logs.output[0])
        self.assertEqual(table.domains.years, ("2008", "2009", "2010"))
        self.assertEqual(table.domains.nutrient_types, ("Vitamin", "Mineral"))
        self.assertEqual(table.domains.regions, ("North", "South", "East"))
        self.assertEqual(len(table.records), 4)

        first = table.records[0]
        self.assertEqual(first.key, ("North", "Vitamin A"))
        self.assertEqual(first.value_at(0), 101.5)
        self.assertTrue(math.isnan(first.final_value))
        self.assertTrue(math.isnan(table.records[1].value_at(1)))
        self.assertEqual(table.records[1].final_value, 92.25)

    def test_records_are_read_only(self) -> None:
        table = read_table(io.StringIO(CSV))
        with self.assertRaises(ValueError):
            table.records[0].values[0] = 1.0

    def test_year_order_follows_column_order(self) -> None:
        rows = [{"Type": "T", "Nutrient": "N", "Region": "R", "2010": "3", "2008": "1"}]
        table = normalize_table(rows)
        self.assertEqual(table.domains.years, ("2010", "2008"))
        np.testing.assert_array_equal(table.records[0].values, [3.0, 1.0])

    def test_dataframe_input(self) -> None:
        frame = pd.DataFrame(
            [["T", "N", "R", 1.0, 2.0]],
            columns=["Type", "Nutrient", "Region", "2001", "2002"],
        )
        table = normalize_table(frame)
        np.testing.assert_array_equal(table.records[0].values, [1.0, 2.0])
        self.assertEqual(table.domains.years, ("2001", "2002"))

    def test_rejects_missing_descriptive_columns(self) -> None:
        with self.assertRaises(TableFormatError):
            normalize_table([], columns=["Nutrient", "Type", "Region", "2008"])
        with self.assertRaises(TableFormatError):
            normalize_table([], columns=["Type", "Nutrient", "Region"])
        with self.assertRaises(TableFormatError):
            normalize_table([])

    def test_repeated_type_region_nutrient_is_a_format_error(self) -> None:
        csv_text = "Nutrient,Type,Region,2008,2009\nA,Mineral,South,1,2\nA,Mineral,South,3,4\n"
        with self.assertRaisesRegex(TableFormatError, "repeats Type/Region/Nutrient"):
            read_table(io.StringIO(csv_text))
        # The same nutrient name under another region is a distinct series.
        table = read_table(io.StringIO("Nutrient,Type,Region,2008,2009\nA,Mineral,South,1,2\nA,Mineral,North,3,4\n"))
        self.assertEqual([r.key for r in table.records], [("South", "A"), ("North", "A")])

    def test_empty_csv_is_a_format_error(self) -> None:
        with self.assertRaises(TableFormatError):
            read_table(io.StringIO(""))

    def test_coerce_number(self) -> None:
        self.assertEqual(coerce_number(" 12.5 "), 12.5)
        self.assertEqual(coerce_number(7), 7.0)
        self.assertTrue(math.isnan(coerce_number("")))
        self.assertTrue(math.isnan(coerce_number(None)))
        self.assertTrue(math.isnan(coerce_number("abc")))

    def test_year_axis_values_rejects_text(self) -> None:
        with self.assertRaises(ValueError):
            year_axis_values(["2008", "later"])

    def test_record_rejects_2d_values(self) -> None:
        with self.assertRaises(ValueError):
            Record(nutrient_type="T", nutrient="N", region="R", values=np.zeros((2, 2)))


if __name__ == "__main__":
    unittest.main()
