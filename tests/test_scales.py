from __future__ import annotations

import math
import unittest

import numpy as np

from pointdash_plot.scales import (
    Domain,
    build_scale,
    compute_domain,
    format_si,
    format_ticks_for_axis,
    generate_nice_ticks,
    resolve_scale_mode,
    safe_domain,
    symlog,
    symexp,
    tick_increment,
)


class DomainTests(unittest.TestCase):
    def test_empty_snapshot_uses_default_domain(self) -> None:
        self.assertEqual(compute_domain([]), Domain(0.0, 100.0))

    def test_padding_uses_min_padding_for_small_spans(self) -> None:
        self.assertEqual(compute_domain([5.0, 95.0]), Domain(0.0, 100.0))
        self.assertEqual(compute_domain([10.0]), Domain(5.0, 15.0))

    def test_padding_uses_ratio_for_large_spans(self) -> None:
        d = compute_domain([0.0, 1000.0])
        self.assertAlmostEqual(d.min, -50.0)
        self.assertAlmostEqual(d.max, 1050.0)

    def test_non_finite_values_are_ignored(self) -> None:
        self.assertEqual(compute_domain([math.nan, math.inf]), Domain(0.0, 100.0))
        self.assertEqual(compute_domain([math.nan, 10.0]), Domain(5.0, 15.0))

    def test_degenerate_domain_falls_back(self) -> None:
        self.assertEqual(safe_domain(3.0, 3.0), Domain(0.0, 100.0))
        self.assertEqual(safe_domain(math.nan, 1.0), Domain(0.0, 100.0))
        self.assertEqual(build_scale((7.0, 7.0), (0.0, 100.0)).domain, Domain(0.0, 100.0))


class ScaleModeTests(unittest.TestCase):
    def test_auto_switches_to_symlog_at_threshold(self) -> None:
        self.assertEqual(resolve_scale_mode(Domain(0.0, 1e6)), "symlog")
        self.assertEqual(resolve_scale_mode(Domain(0.0, 999_999.0)), "linear")

    def test_explicit_mode_overrides_auto(self) -> None:
        self.assertEqual(resolve_scale_mode(Domain(0.0, 1e9), "linear"), "linear")
        self.assertEqual(resolve_scale_mode(Domain(0.0, 1.0), "symlog"), "symlog")

    def test_unknown_mode_raises(self) -> None:
        with self.assertRaises(ValueError):
            resolve_scale_mode(Domain(0.0, 1.0), "log")  # type: ignore[arg-type]


class ScaleTests(unittest.TestCase):
    def test_linear_apply_and_invert(self) -> None:
        s = build_scale((0.0, 100.0), (0.0, 620.0))
        self.assertAlmostEqual(s.apply(50.0), 310.0)
        self.assertAlmostEqual(s.invert(310.0), 50.0)
        for v in (-12.5, 0.0, 33.3, 100.0, 250.0):
            self.assertAlmostEqual(s.invert(s.apply(v)), v, places=9)

    def test_inverted_range_maps_y_up(self) -> None:
        s = build_scale((0.0, 100.0), (440.0, 0.0))
        self.assertAlmostEqual(s.apply(0.0), 440.0)
        self.assertAlmostEqual(s.apply(100.0), 0.0)

    def test_array_inputs(self) -> None:
        s = build_scale((0.0, 100.0), (0.0, 620.0))
        out = s.apply(np.asarray([0.0, 100.0]))
        self.assertIsInstance(out, np.ndarray)
        np.testing.assert_allclose(out, [0.0, 620.0])
        np.testing.assert_allclose(s.invert(out), [0.0, 100.0])

    def test_symlog_round_trip(self) -> None:
        s = build_scale((-1e7, 1e7), (0.0, 1000.0), "symlog")
        for v in (-5e6, -12345.0, -1.0, 0.0, 0.5, 12345.0, 9e6):
            self.assertAlmostEqual(s.invert(s.apply(v)), v, delta=max(1e-6, abs(v) * 1e-9))

    def test_symlog_is_odd_and_monotonic(self) -> None:
        s = build_scale((-1e7, 1e7), (0.0, 1000.0), "symlog")
        self.assertAlmostEqual(s.apply(0.0), 500.0)
        self.assertAlmostEqual(s.apply(1e4) + s.apply(-1e4), 1000.0)
        xs = np.linspace(-1e7, 1e7, 101)
        self.assertTrue(np.all(np.diff(s.apply(xs)) > 0))
        self.assertAlmostEqual(float(symexp(symlog(42.0))), 42.0)

    def test_invert_with_degenerate_range_returns_domain_min(self) -> None:
        s = build_scale((0.0, 100.0), (5.0, 5.0))
        self.assertEqual(s.invert(5.0), 0.0)

    def test_unknown_mode_raises(self) -> None:
        with self.assertRaises(ValueError):
            build_scale((0.0, 1.0), (0.0, 1.0), "log")  # type: ignore[arg-type]


class TickTests(unittest.TestCase):
    def test_linear_ticks_are_nice(self) -> None:
        s = build_scale((0.0, 100.0), (0.0, 620.0))
        np.testing.assert_allclose(s.ticks(6), [0, 20, 40, 60, 80, 100])

    def test_symlog_ticks_are_signed_powers_of_ten(self) -> None:
        s = build_scale((-1000.0, 1000.0), (0.0, 620.0), "symlog")
        ticks = s.ticks(6).tolist()
        for v in (0.0, 1000.0, -1000.0, 10.0):
            self.assertIn(v, ticks)

    def test_tick_increment_picks_one_two_five_steps(self) -> None:
        self.assertEqual(tick_increment(0.0, 100.0, 6), 20.0)
        self.assertEqual(tick_increment(0.0, 30.0, 6), 5.0)
        self.assertAlmostEqual(tick_increment(0.0, 1.0, 5), 0.2)
        np.testing.assert_allclose(generate_nice_ticks(0.0, 1.0, 5), [0.0, 0.2, 0.4, 0.6, 0.8, 1.0])

    def test_nice_ticks_snap_floating_drift(self) -> None:
        ticks = generate_nice_ticks(-0.3, 0.3, 5)
        self.assertIn(0.0, ticks.tolist())
        self.assertEqual(format_ticks_for_axis(np.asarray([0.0, 0.1, 0.2])), ["0", "0.1", "0.2"])


class FormatSiTests(unittest.TestCase):
    def test_examples(self) -> None:
        self.assertEqual(format_si(0.0), "0.0")
        self.assertEqual(format_si(1500.0), "1.5k")
        self.assertEqual(format_si(100.0), "100")
        self.assertEqual(format_si(2e9), "2.0B")
        self.assertEqual(format_si(-1500.0), "-1.5k")
        self.assertEqual(format_si(0.5), "500m")

    def test_rounding_carries_into_next_prefix(self) -> None:
        self.assertEqual(format_si(999.6), "1.0k")


if __name__ == "__main__":
    unittest.main()
