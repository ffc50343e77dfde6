from __future__ import annotations

import unittest

import numpy as np

from trendline_plot.curves import build_path, contiguous_true_runs, monotone_x_points
from trendline_plot.labels import decollide, layout_end_labels
from trendline_plot.reconcile import diff_keys, reconcile


class CurveTests(unittest.TestCase):
    def test_contiguous_true_runs(self) -> None:
        mask = np.array([True, True, False, True, False, False, True])
        self.assertEqual(contiguous_true_runs(mask), [(0, 2), (3, 4), (6, 7)])
        self.assertEqual(contiguous_true_runs(np.zeros(3, dtype=bool)), [])

    def test_monotone_curve_passes_through_samples_without_overshoot(self) -> None:
        xs = np.array([0.0, 10.0, 20.0, 30.0])
        ys = np.array([0.0, 10.0, 30.0, 35.0])
        px, py = monotone_x_points(xs, ys, steps=8)
        self.assertEqual(px.size, 1 + 3 * 8)
        for i in range(4):
            self.assertAlmostEqual(px[i * 8], xs[i])
            self.assertAlmostEqual(py[i * 8], ys[i])
        self.assertTrue(np.all(np.diff(px) > 0))
        self.assertTrue(np.all(np.diff(py) >= -1e-9))

    def test_flat_segment_stays_flat(self) -> None:
        _, py = monotone_x_points(np.array([0.0, 1.0, 2.0]), np.array([0.0, 1.0, 1.0]), steps=4)
        self.assertTrue(np.all(py <= 1.0 + 1e-9))
        self.assertTrue(np.all(py >= -1e-9))

    def test_build_path_breaks_at_missing_values(self) -> None:
        px = np.array([0.0, 1.0, 2.0, 3.0, 4.0])
        py = np.array([5.0, np.nan, 6.0, 7.0, 8.0])
        pieces = build_path(px, py, steps=4)
        self.assertEqual(len(pieces), 2)
        self.assertEqual(pieces[0][0].tolist(), [0.0])
        self.assertEqual(pieces[1][0].size, 1 + 2 * 4)
        self.assertEqual(build_path(px, np.full(5, np.nan)), [])


class LabelLayoutTests(unittest.TestCase):
    def test_close_labels_are_separated_by_exact_gap(self) -> None:
        placements = layout_end_labels(
            [(("North", "B"), 104.0, 292.0), (("North", "A"), 100.0, 300.0)],
            min_gap=12.0,
            start=600.0,
        )
        by_key = {p.key: p for p in placements}
        self.assertEqual(by_key[("North", "A")].y, 300.0)
        self.assertEqual(by_key[("North", "B")].y, 288.0)
        self.assertEqual([p.key for p in placements], [("North", "A"), ("North", "B")])

    def test_uncrowded_labels_keep_natural_position(self) -> None:
        self.assertEqual(decollide([500.0, 300.0, 100.0], min_gap=12.0, start=600.0), [500.0, 300.0, 100.0])
        self.assertEqual(decollide([595.0], min_gap=12.0, start=600.0), [588.0])

    def test_separation_holds_for_crowded_labels(self) -> None:
        rng = np.random.default_rng(7)
        finals = rng.uniform(95.0, 105.0, size=25)
        entries = [((f"R{i}", f"N{i}"), float(v), 600.0 - 3.0 * float(v)) for i, v in enumerate(finals)]
        placements = layout_end_labels(entries, min_gap=12.0, start=600.0)
        self.assertEqual(len(placements), 25)
        ys = [p.y for p in placements]
        for lower, upper in zip(ys, ys[1:]):
            self.assertGreaterEqual(lower - upper, 12.0 - 1e-9)
        for p in placements:
            self.assertLessEqual(p.y, p.natural_y)
        self.assertEqual([p.final_value for p in placements], sorted(finals.tolist()))

    def test_missing_final_values_are_skipped(self) -> None:
        placements = layout_end_labels(
            [(("a", "x"), float("nan"), float("nan")), (("b", "y"), 100.0, 300.0)],
            start=600.0,
        )
        self.assertEqual([p.key for p in placements], [("b", "y")])


class ReconcileTests(unittest.TestCase):
    def test_diff_keys(self) -> None:
        diff = diff_keys(["a", "b", "c"], ["c", "d", "a"])
        self.assertEqual(diff.entered, ("d",))
        self.assertEqual(diff.updated, ("c", "a"))
        self.assertEqual(diff.exited, ("b",))
        with self.assertRaises(ValueError):
            diff_keys([], ["a", "a"])

    def test_reconcile_reuses_surviving_elements(self) -> None:
        created: list[str] = []

        def create(item: tuple[str, int]) -> dict[str, int]:
            created.append(item[0])
            return {"value": item[1]}

        def update(element: dict[str, int], item: tuple[str, int]) -> None:
            element["value"] = item[1]

        first, _ = reconcile({}, [("a", 1), ("b", 2)], key=lambda i: i[0], create=create, update=update)
        second, diff = reconcile(first, [("b", 20), ("c", 3)], key=lambda i: i[0], create=create, update=update)
        self.assertIs(second["b"], first["b"])
        self.assertEqual(second["b"]["value"], 20)
        self.assertEqual(list(second), ["b", "c"])
        self.assertEqual(diff.exited, ("a",))
        self.assertEqual(created, ["a", "b", "c"])
        self.assertIn("a", first)


if __name__ == "__main__":
    unittest.main()
