from __future__ import annotations

import unittest

import numpy as np

from trendline_plot.scales import (
    LinearScale,
    OrdinalColorScale,
    format_ticks_for_axis,
    format_value,
    linear_ticks,
    nice_domain,
    parse_hex_color,
    tick_increment,
)


class ScaleTests(unittest.TestCase):
    def test_tick_increment(self) -> None:
        self.assertEqual(tick_increment(0, 100, 10), 10.0)
        self.assertEqual(tick_increment(60, 140, 10), 10.0)
        self.assertEqual(tick_increment(90, 130, 10), 5.0)
        self.assertEqual(tick_increment(0, 1, 10), -10.0)
        self.assertEqual(tick_increment(5, 5, 10), 0.0)

    def test_nice_domain_keeps_low_minimum(self) -> None:
        self.assertEqual(nice_domain(60, 140), (60.0, 140.0))
        self.assertEqual(nice_domain(90, 130), (90.0, 130.0))
        lo, hi = nice_domain(0.13, 0.87)
        self.assertAlmostEqual(lo, 0.1)
        self.assertAlmostEqual(hi, 0.9)

    def test_nice_domain_extends_outward(self) -> None:
        lo, hi = nice_domain(87.3, 142.1)
        self.assertLessEqual(lo, 87.3)
        self.assertGreaterEqual(hi, 142.1)
        self.assertEqual((lo, hi), (85.0, 145.0))

    def test_linear_ticks(self) -> None:
        ticks = linear_ticks(90, 110, 10)
        np.testing.assert_allclose(ticks, np.arange(90, 111, 2, dtype=np.float64))
        self.assertEqual(linear_ticks(3, 3, 10).tolist(), [3.0])
        with self.assertRaises(ValueError):
            linear_ticks(0, 1, 0)

    def test_linear_scale_maps_values(self) -> None:
        scale = LinearScale(domain=(90, 110), range=(570, 30))
        self.assertEqual(scale(100), 300.0)
        np.testing.assert_allclose(scale.map_array(np.array([90.0, 110.0, np.nan])), [570.0, 30.0, np.nan])
        scale.set_domain(87.3, 142.1, nice=True)
        self.assertEqual(scale.domain, (85.0, 145.0))

    def test_ordinal_color_scale(self) -> None:
        palette = (parse_hex_color("#1f77b4"), parse_hex_color("#ff7f0e"))
        neutral = (200, 200, 200, 255)
        scale = OrdinalColorScale(palette=palette, unknown=neutral)
        scale.set_domain(["North", "South", "North"])
        self.assertEqual(scale.domain, ("North", "South"))
        self.assertEqual(scale("North"), (31, 119, 180, 255))
        self.assertEqual(scale("South"), (255, 127, 14, 255))
        self.assertEqual(scale("East"), neutral)

    def test_parse_hex_color(self) -> None:
        self.assertEqual(parse_hex_color("#fff"), (255, 255, 255, 255))
        self.assertEqual(parse_hex_color("00000080"), (0, 0, 0, 128))
        with self.assertRaises(ValueError):
            parse_hex_color("#12345")

    def test_formatting(self) -> None:
        self.assertEqual(format_ticks_for_axis(np.array([90.0, 92.0, 94.0])), ["90", "92", "94"])
        self.assertEqual(format_ticks_for_axis(np.array([0.1, 0.2])), ["0.1", "0.2"])
        self.assertEqual(format_value(101.5), "101.5")
        self.assertEqual(format_value(float("nan")), "")


if __name__ == "__main__":
    unittest.main()
