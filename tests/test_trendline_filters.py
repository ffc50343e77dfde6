from __future__ import annotations

import unittest

import numpy as np

from trendline_plot.errors import FilterContractError
from trendline_plot.filters import (
    FilterChange,
    FilterState,
    apply_filter,
    apply_filter_change,
    parse_filter_change,
)
from trendline_plot.records import Record


YEARS = tuple(str(y) for y in range(2008, 2020))


def _record(nutrient_type: str, nutrient: str, region: str, base: float = 100.0) -> Record:
    return Record(nutrient_type, nutrient, region, np.full(len(YEARS), base))


class FilterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.records = (
            _record("Vitamin", "Vitamin A", "North"),
            _record("Vitamin", "Vitamin A", "East"),
            _record("Vitamin", "Vitamin A", "South"),
            _record("Vitamin", "Folate", "North"),
            _record("Mineral", "Iron", "North"),
        )

    def test_regions_subset_excludes_unselected_region(self) -> None:
        state = FilterState(nutrient_type="Vitamin", regions=("North", "South"))
        visible = apply_filter(self.records, state)
        self.assertEqual(
            [r.key for r in visible],
            [("North", "Vitamin A"), ("South", "Vitamin A"), ("North", "Folate")],
        )
        self.assertTrue(all(r.region != "East" for r in visible))

    def test_filter_is_idempotent_and_preserves_identity(self) -> None:
        state = FilterState(nutrient_type="Vitamin", regions=("North",))
        once = apply_filter(self.records, state)
        twice = apply_filter(once, state)
        self.assertEqual(once, twice)
        self.assertIs(once[0], self.records[0])

    def test_empty_regions_yield_nothing(self) -> None:
        self.assertEqual(apply_filter(self.records, FilterState(nutrient_type="Vitamin")), ())

    def test_apply_filter_change(self) -> None:
        state = FilterState(nutrient_type="Vitamin", regions=("North",))
        moved = apply_filter_change(state, FilterChange(key="nutrientType", value="Mineral"))
        self.assertEqual(moved, FilterState(nutrient_type="Mineral", regions=("North",)))
        self.assertEqual(state.nutrient_type, "Vitamin")
        both = apply_filter_change(state, FilterChange(key="regions", value=("North", "South")))
        self.assertEqual(both.regions, ("North", "South"))

    def test_apply_filter_change_contract(self) -> None:
        state = FilterState(nutrient_type="Vitamin", regions=("North",))
        bad = [
            FilterChange(key="year", value="2008"),
            FilterChange(key="nutrientType", value=("Vitamin",)),
            FilterChange(key="regions", value="North"),
            FilterChange(key="regions", value=("North", "South", "East")),
            FilterChange(key="regions", value=("North", "North")),
        ]
        for change in bad:
            with self.subTest(change=change):
                with self.assertRaises(FilterContractError):
                    apply_filter_change(state, change)

    def test_parse_filter_change(self) -> None:
        parsed = parse_filter_change({"key": "regions", "value": ["North"]})
        self.assertEqual(parsed, FilterChange(key="regions", value=("North",)))
        with self.assertRaises(FilterContractError):
            parse_filter_change({"key": "colour", "value": "red"})
        with self.assertRaises(FilterContractError):
            parse_filter_change(["regions", "North"])


if __name__ == "__main__":
    unittest.main()
