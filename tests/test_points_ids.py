from __future__ import annotations

import random
import unittest

from pointdash_plot.errors import PlotDataError
from pointdash_plot.ids import SequentialIdFactory, TimestampIdFactory, build_id_factory, to_base36
from pointdash_plot.points import (
    Point,
    append_point,
    coerce_point,
    coerce_points,
    find_point,
    replace_point,
    sort_by_x,
)


class PointTests(unittest.TestCase):
    def test_coerce_inputs(self) -> None:
        self.assertEqual(coerce_point(("a", 1, 2)), Point("a", 1.0, 2.0))
        p = coerce_point({"id": "b", "x": "3.5", "y": None, "createdAt": "2024-01-01"})
        self.assertEqual((p.x, p.y), (3.5, 0.0))
        self.assertEqual(p.extra, {"createdAt": "2024-01-01"})
        self.assertEqual(p.to_dict(), {"id": "b", "x": 3.5, "y": 0.0, "createdAt": "2024-01-01"})

    def test_single_point_without_id_raises(self) -> None:
        with self.assertRaises(PlotDataError):
            coerce_point({"x": 1, "y": 2})
        with self.assertRaises(PlotDataError):
            coerce_point((None, 1, 2))
        with self.assertRaises(PlotDataError):
            coerce_point("nope")

    def test_snapshot_skips_points_without_id(self) -> None:
        with self.assertLogs("pointdash_plot.points", level="WARNING") as logs:
            points = coerce_points([{"id": "a", "x": 1, "y": 2}, {"x": 3, "y": 4}, (None, 5, 6)])
        self.assertEqual([p.id for p in points], ["a"])
        self.assertEqual(len(logs.records), 2)

    def test_duplicate_ids_are_dropped(self) -> None:
        with self.assertLogs("pointdash_plot.points", level="WARNING"):
            points = coerce_points([("a", 1, 1), ("a", 2, 2), ("b", 3, 3)])
        self.assertEqual([p.id for p in points], ["a", "b"])
        self.assertEqual(points[0].x, 1.0)
        self.assertEqual(coerce_points(None), ())

    def test_list_helpers(self) -> None:
        pts = [Point("a", 2.0, 0.0, extra={"note": "keep"}), Point("b", 1.0, 0.0), Point("c", 2.0, 5.0)]
        moved = replace_point(pts, "a", 9.0, 9.0)
        self.assertEqual(moved[0], Point("a", 9.0, 9.0))
        self.assertEqual(moved[0].extra, {"note": "keep"})
        self.assertIs(moved[1], pts[1])
        self.assertEqual([p.id for p in sort_by_x(pts)], ["b", "a", "c"])
        self.assertEqual(len(append_point(pts, Point("d", 0.0, 0.0))), 4)
        self.assertIsNone(find_point(pts, None))
        self.assertEqual(find_point(pts, "c"), pts[2])


class IdFactoryTests(unittest.TestCase):
    def test_base36(self) -> None:
        self.assertEqual(to_base36(0), "0")
        self.assertEqual(to_base36(35), "z")
        self.assertEqual(to_base36(36), "10")
        with self.assertRaises(ValueError):
            to_base36(-1)

    def test_timestamp_ids_are_unique_even_with_frozen_clock(self) -> None:
        factory = TimestampIdFactory(clock_ms=lambda: 1_700_000_000_000, rng=random.Random(7), suffix_len=1)
        ids = [factory() for _ in range(30)]
        self.assertEqual(len(set(ids)), 30)
        self.assertTrue(all(i.startswith(to_base36(1_700_000_000_000)) for i in ids))

    def test_ids_are_never_reused_across_factories(self) -> None:
        a = TimestampIdFactory(clock_ms=lambda: 5, rng=random.Random(1), suffix_len=2)
        b = TimestampIdFactory(clock_ms=lambda: 5, rng=random.Random(1), suffix_len=2)
        self.assertNotEqual(a(), b())

    def test_sequential_and_builder(self) -> None:
        seq = SequentialIdFactory(prefix="p", start=3, issued=set())
        self.assertEqual([seq(), seq()], ["p-3", "p-4"])
        self.assertIsInstance(build_id_factory("timestamp"), TimestampIdFactory)
        self.assertIsInstance(build_id_factory("sequential"), SequentialIdFactory)
        with self.assertRaises(ValueError):
            build_id_factory("uuid")

    def test_sequential_ids_skip_issued_and_taken(self) -> None:
        issued: set[str] = set()
        a = SequentialIdFactory(issued=issued)
        b = SequentialIdFactory(issued=issued)
        self.assertEqual(a(), "point-0")
        self.assertEqual(b(), "point-1")
        self.assertEqual(b(taken={"point-2", "point-3"}.__contains__), "point-4")
        self.assertEqual(issued, {"point-0", "point-1", "point-4"})

    def test_timestamp_ids_respect_taken(self) -> None:
        factory = TimestampIdFactory(clock_ms=lambda: 0, rng=random.Random(3), suffix_len=1, issued=set())
        blocked = {f"0{c}" for c in "0123456789abcdefghijklmnopqrstuvwxy"}
        self.assertEqual(factory(taken=blocked.__contains__), "0z")


if __name__ == "__main__":
    unittest.main()
