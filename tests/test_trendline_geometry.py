from __future__ import annotations

import unittest

import numpy as np

from trendline_plot.geometry import GridPointIndex, brute_force_nearest, build_sample_set
from trendline_plot.interaction import PointerTracker
from trendline_plot.records import Record
from trendline_plot.scales import LinearScale


class GridPointIndexTests(unittest.TestCase):
    def test_matches_brute_force_on_random_points(self) -> None:
        rng = np.random.default_rng(1234)
        xs = rng.uniform(0.0, 800.0, size=300)
        ys = rng.uniform(0.0, 600.0, size=300)
        xs[::17] = np.nan
        index = GridPointIndex(xs, ys)
        self.assertEqual(len(index), int(np.count_nonzero(np.isfinite(xs))))
        queries = rng.uniform(-100.0, 900.0, size=(200, 2))
        hint = None
        for qx, qy in queries:
            expected = brute_force_nearest(xs, ys, qx, qy)
            got = index.find(qx, qy, hint=hint)
            self.assertEqual(got, expected)
            hint = got

    def test_exact_hit_returns_that_point(self) -> None:
        xs = np.array([10.0, 20.0, 30.0])
        ys = np.array([5.0, 5.0, 50.0])
        index = GridPointIndex(xs, ys)
        self.assertEqual(index.find(20.0, 5.0), 1)
        self.assertEqual(index.find(30.0, 50.0, hint=0), 2)

    def test_equidistant_points_resolve_to_lowest_index(self) -> None:
        xs = np.array([0.0, 10.0])
        ys = np.array([0.0, 0.0])
        index = GridPointIndex(xs, ys)
        self.assertEqual(index.find(5.0, 0.0), 0)
        self.assertEqual(index.find(5.0, 0.0, hint=1), 0)

    def test_empty_and_non_finite_queries(self) -> None:
        empty = GridPointIndex(np.array([]), np.array([]))
        self.assertEqual(len(empty), 0)
        self.assertIsNone(empty.find(1.0, 1.0))
        all_nan = GridPointIndex(np.array([np.nan]), np.array([1.0]))
        self.assertIsNone(all_nan.find(0.0, 0.0))
        index = GridPointIndex(np.array([1.0]), np.array([1.0]))
        self.assertIsNone(index.find(float("nan"), 0.0))
        self.assertEqual(index.find(1e9, -1e9), 0)

    def test_stale_or_invalid_hint_is_ignored(self) -> None:
        index = GridPointIndex(np.array([0.0, np.nan, 100.0]), np.array([0.0, 0.0, 0.0]))
        self.assertEqual(index.find(90.0, 0.0, hint=1), 2)
        self.assertEqual(index.find(90.0, 0.0, hint=99), 2)

    def test_shape_mismatch_rejected(self) -> None:
        with self.assertRaises(ValueError):
            GridPointIndex(np.zeros(3), np.zeros(2))


class SampleSetTests(unittest.TestCase):
    def test_samples_are_record_major(self) -> None:
        years = ("2008", "2009", "2010")
        records = (
            Record("Vitamin", "A", "North", [100.0, 101.0, 102.0]),
            Record("Vitamin", "B", "North", [90.0, np.nan, 95.0]),
        )
        x_scale = LinearScale(domain=(2008, 2010), range=(0, 200))
        y_scale = LinearScale(domain=(90, 110), range=(200, 0))
        samples = build_sample_set(records, years, np.array([2008.0, 2009.0, 2010.0]), x_scale, y_scale)
        self.assertEqual(len(samples), 6)
        np.testing.assert_allclose(samples.px, [0, 100, 200, 0, 100, 200])
        self.assertTrue(np.isnan(samples.py[4]))
        sample = samples.sample(5)
        self.assertEqual((sample.year, sample.value, sample.key, sample.nutrient), ("2010", 95.0, ("North", "B"), "B"))
        with self.assertRaises(IndexError):
            samples.sample(6)
        with self.assertRaises(ValueError):
            build_sample_set(records, years[:2], np.array([2008.0, 2009.0]), x_scale, y_scale)


class PointerTrackerTests(unittest.TestCase):
    def test_accept_reports_changes_only(self) -> None:
        tracker = PointerTracker()
        self.assertFalse(tracker.tracking)
        tracker.enter()
        self.assertTrue(tracker.tracking)
        self.assertTrue(tracker.accept(3))
        self.assertFalse(tracker.accept(3))
        self.assertTrue(tracker.accept(None))
        tracker.accept(4)
        tracker.leave()
        self.assertEqual((tracker.phase, tracker.last_index), ("idle", None))


if __name__ == "__main__":
    unittest.main()
