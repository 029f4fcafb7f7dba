from __future__ import annotations

import unittest

import numpy as np

from pointdash_plot.config import GraphConfig, Margins
from pointdash_plot.interaction import DragPreview
from pointdash_plot.points import Point
from pointdash_plot.raster import DirtyState, LayerCache, draw_circle, new_canvas
from pointdash_plot.render import MarkerLayer, RenderSync, hit_test, rasterize
from pointdash_plot.scales import build_scale
from pointdash_plot.style import DEFAULT_STYLE
from pointdash_plot.transform import IDENTITY, ZoomTransform


def scales(transform: ZoomTransform = IDENTITY):
    bx = build_scale((0.0, 100.0), (0.0, 620.0))
    by = build_scale((0.0, 100.0), (440.0, 0.0))
    return transform.rescale(bx, "x"), transform.rescale(by, "y")


POINTS = [Point("c", 80.0, 10.0), Point("a", 20.0, 30.0), Point("b", 50.0, 50.0), Point("d", 20.0, 90.0)]


class RenderSyncTests(unittest.TestCase):
    def test_scene_contents(self) -> None:
        sx, sy = scales()
        scene = RenderSync().render(POINTS, sx, sy)
        self.assertEqual([t.label for t in scene.x_ticks], ["0.0", "20", "40", "60", "80", "100"])
        np.testing.assert_allclose([t.position for t in scene.y_ticks][:2], [440.0, 352.0])
        self.assertEqual(scene.grid_x, tuple(t.position for t in scene.x_ticks))
        self.assertEqual((scene.x_label, scene.y_label), ("X Axis", "Y Axis"))
        # Sorted by x; a and d tie and keep snapshot order.
        np.testing.assert_allclose(scene.line_xs, [124.0, 124.0, 310.0, 496.0])
        np.testing.assert_allclose(scene.line_ys, [308.0, 44.0, 220.0, 396.0])
        self.assertEqual([m.point_id for m in scene.markers], ["c", "a", "b", "d"])

    def test_highlight_is_raised_and_others_dimmed(self) -> None:
        sx, sy = scales()
        scene = RenderSync().render(POINTS, sx, sy, highlighted_id="a", hovered_id="d")
        markers = {m.point_id: m for m in scene.markers}
        self.assertEqual(scene.markers[-1].point_id, "a")
        self.assertEqual(markers["a"].radius, 8.0)
        self.assertEqual(markers["a"].fill, DEFAULT_STYLE.highlight)
        self.assertEqual(markers["a"].opacity, 1.0)
        self.assertEqual(markers["b"].opacity, 0.35)
        self.assertEqual(markers["b"].radius, 6.0)
        self.assertEqual(markers["d"].radius, 8.0)

    def test_missing_highlight_does_not_dim(self) -> None:
        sx, sy = scales()
        scene = RenderSync().render(POINTS, sx, sy, highlighted_id="zzz")
        self.assertTrue(all(m.opacity == 1.0 for m in scene.markers))

    def test_plain_tick_format(self) -> None:
        sx, sy = scales()
        scene = RenderSync(GraphConfig(tick_format="plain")).render(POINTS, sx, sy)
        self.assertEqual(scene.x_ticks[0].label, "0")

    def test_tooltip_follows_hover_unless_dragging(self) -> None:
        sx, sy = scales()
        sync = RenderSync()
        self.assertIsNone(sync.render(POINTS, sx, sy).tooltip)

        tip = sync.render(POINTS, sx, sy, hovered_id="b").tooltip
        assert tip is not None
        self.assertEqual(tip.lines, ("X: 50", "Y: 50"))
        self.assertEqual(tip.anchor, (310.0, 220.0))

        drag = DragPreview("a", 0.25, 1500.0, (1.55, 0.0))
        tip = sync.render(POINTS, sx, sy, hovered_id="b", drag=drag).tooltip
        assert tip is not None
        self.assertEqual((tip.point_id, tip.anchor), ("a", (1.55, 0.0)))
        self.assertEqual(tip.lines, ("X: 250m", "Y: 1.5k"))

    def test_plain_tooltip_values(self) -> None:
        sx, sy = scales()
        tip = RenderSync(GraphConfig(tick_format="plain")).render(POINTS, sx, sy, hovered_id="b").tooltip
        assert tip is not None
        self.assertEqual(tip.lines, ("X: 50", "Y: 50"))

    def test_empty_points(self) -> None:
        sx, sy = scales()
        scene = RenderSync().render([], sx, sy)
        self.assertEqual(scene.markers, ())
        self.assertEqual(scene.line_xs.size, 0)


class MarkerLayerTests(unittest.TestCase):
    def test_markers_are_reused_by_id(self) -> None:
        layer = MarkerLayer()
        sx, sy = scales()
        first = {m.point_id: m for m in layer.sync(POINTS, sx, sy, highlighted_id=None, hovered_id=None)}
        moved = [POINTS[2].moved(10.0, 10.0), POINTS[0], POINTS[1]]
        second = {m.point_id: m for m in layer.sync(moved, sx, sy, highlighted_id=None, hovered_id=None)}
        self.assertIs(first["b"], second["b"])
        self.assertIs(first["c"], second["c"])
        self.assertAlmostEqual(second["b"].cx, 62.0)
        self.assertNotIn("d", second)
        self.assertEqual(len(layer), 3)


class HitTestTests(unittest.TestCase):
    def test_topmost_in_paint_order_wins(self) -> None:
        pts = [Point("under", 50.0, 50.0), Point("over", 50.5, 50.0)]
        sx, sy = scales()
        self.assertEqual(hit_test(pts, sx, sy, 312.0, 220.0, hit_radius=8.0), "over")
        self.assertEqual(
            hit_test(pts, sx, sy, 312.0, 220.0, hit_radius=8.0, highlighted_id="under"),
            "under",
        )
        self.assertIsNone(hit_test(pts, sx, sy, 100.0, 100.0, hit_radius=8.0))

    def test_uses_current_transform(self) -> None:
        pts = [Point("p", 50.0, 50.0)]
        sx, sy = scales(ZoomTransform(k=2.0, tx=-310.0, ty=-220.0))
        self.assertEqual(hit_test(pts, sx, sy, 310.0, 220.0, hit_radius=8.0), "p")
        self.assertIsNone(hit_test(pts, *scales(), 0.0, 0.0, hit_radius=8.0))


class RasterizeTests(unittest.TestCase):
    def test_rasterize_draws_markers_inside_plot(self) -> None:
        sx, sy = scales()
        scene = RenderSync().render([Point("p", 50.0, 50.0)], sx, sy, highlighted_id="p")
        rgba = rasterize(scene, 700, 500, Margins())
        self.assertEqual(rgba.shape, (500, 700, 4))
        self.assertEqual(rgba.dtype, np.uint8)
        self.assertEqual(tuple(int(v) for v in rgba[240, 360]), DEFAULT_STYLE.highlight)
        self.assertEqual(tuple(int(v) for v in rgba[2, 698]), DEFAULT_STYLE.background)

    def test_markers_are_clipped_to_plot_area(self) -> None:
        sx, sy = scales()
        scene = RenderSync().render([Point("edge", 0.0, 50.0)], sx, sy)
        rgba = rasterize(scene, 700, 500, Margins())
        self.assertEqual(tuple(int(v) for v in rgba[240, 46]), DEFAULT_STYLE.background)
        self.assertNotEqual(tuple(int(v) for v in rgba[240, 52]), DEFAULT_STYLE.background)

    def test_tooltip_box_is_drawn_beside_anchor(self) -> None:
        sx, sy = scales()
        sync = RenderSync()
        bare = rasterize(sync.render(POINTS, sx, sy), 700, 500, Margins())
        tipped = rasterize(sync.render(POINTS, sx, sy, hovered_id="b"), 700, 500, Margins())
        # b sits at container (360, 240); the box starts at (370, 212).
        self.assertEqual(int(bare[214, 372, 0]), 255)
        self.assertLess(int(tipped[214, 372, 0]), 60)
        self.assertEqual(int(tipped[214, 368, 0]), 255)

    def test_chrome_is_cached_between_frames(self) -> None:
        sx, sy = scales()
        sync = RenderSync()
        cache = LayerCache()
        rasterize(sync.render(POINTS, sx, sy), 700, 500, Margins(), cache=cache)
        rasterize(sync.render(POINTS[:2], sx, sy), 700, 500, Margins(), cache=cache)
        self.assertEqual(cache.hits, 1)
        cache.invalidate()
        self.assertIsNone(cache.chrome_template)

    def test_circle_alpha_blends(self) -> None:
        canvas = new_canvas(20, 20, color=(255, 255, 255, 255))
        draw_circle(canvas, 10.0, 10.0, 4.0, (0, 0, 0, 128))
        self.assertTrue(100 < int(canvas[10, 10, 0]) < 160)


class DirtyStateTests(unittest.TestCase):
    def test_reasons_collapse(self) -> None:
        state = DirtyState(dirty=False)
        self.assertTrue(state.mark("points"))
        self.assertFalse(state.mark("hover"))
        self.assertEqual(state.consume(), {"points", "hover"})
        self.assertFalse(state.dirty)


if __name__ == "__main__":
    unittest.main()
