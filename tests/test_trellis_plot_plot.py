from __future__ import annotations

import unittest
from unittest import mock

import numpy as np

from trellis_plot import (
    NO_MATCH,
    BaseAnimator,
    Dataset,
    HoverInteraction,
    LinearScale,
    NullAnimator,
    PlotDataError,
    RasterSurface,
    accessorize,
    scatter_plot,
)
from trellis_plot.plot import Plot
from trellis_plot.scatter import PointMarkStrategy
from trellis_ui import ComponentStateError, Group, Point, RenderController, Table


def fixed_scales() -> tuple[LinearScale, LinearScale]:
    return LinearScale().set_domain((0, 100)), LinearScale().set_domain((0, 100))


class AccessorizeTests(unittest.TestCase):
    def test_callables_receive_leading_arguments(self) -> None:
        meta = {"dataset_key": "k"}
        self.assertEqual(accessorize(lambda d: d * 2)(4, 0, None, meta), 8)
        self.assertEqual(accessorize(lambda d, i: d + i)(4, 3, None, meta), 7)
        self.assertEqual(accessorize(lambda d, i, u, m: m["dataset_key"])(4, 0, None, meta), "k")
        self.assertEqual(accessorize(lambda *args: len(args))(4, 0, None, meta), 4)

    def test_strings_are_fields_unless_hash_prefixed(self) -> None:
        self.assertEqual(accessorize("x")({"x": 5}, 0, None, {}), 5)
        self.assertEqual(accessorize("real")(complex(2, 3), 0, None, {}), 2.0)
        self.assertIsNone(accessorize("missing")({"x": 5}, 0, None, {}))
        self.assertEqual(accessorize("#ff0000")({"x": 5}, 0, None, {}), "#ff0000")
        self.assertEqual(accessorize(7)({"x": 5}, 0, None, {}), 7)


class PlotDataBindingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = RenderController("deferred")

    def test_auto_keys_preserve_insertion_order(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        shared = Dataset([{"x": 1, "y": 1}])
        plot.add_dataset(shared).add_dataset([{"x": 2, "y": 2}]).add_dataset(shared, key="again")
        self.assertEqual(plot.dataset_keys(), ["_0", "_1", "again"])
        self.assertIs(plot.dataset("_0"), plot.dataset("again"))

        plot.remove_dataset(shared)
        self.assertEqual(plot.dataset_keys(), ["_1"])
        with self.assertRaises(PlotDataError):
            plot.remove_dataset("_0")

    def test_re_adding_key_replaces_dataset(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        plot.add_dataset([{"x": 1, "y": 1}], key="series")
        replacement = Dataset([{"x": 9, "y": 9}])
        plot.add_dataset(replacement, key="series")
        self.assertEqual(plot.datasets(), [replacement])

    def test_extents_only_reach_scales_while_anchored(self) -> None:
        x_scale, y_scale = LinearScale(), LinearScale()
        plot = scatter_plot(x_scale, y_scale, render_controller=self.controller)
        plot.add_dataset([{"x": 0, "y": 10}, {"x": 100, "y": 20}])
        self.assertEqual(x_scale.extents(), [])

        plot.render_to(RasterSurface.create(50, 40))
        self.assertEqual(x_scale.domain(), (-2.5, 102.5))
        self.assertEqual(x_scale.extents(), [[0.0, 100.0]])
        self.assertEqual(y_scale.range(), (40.0, 0.0))
        self.assertEqual(x_scale.range(), (0.0, 50.0))

        plot.detach()
        self.assertEqual(x_scale.extents(), [])
        self.assertEqual(y_scale.extents(), [])

    def test_dataset_change_marks_data_changed_and_invalidates(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        data = Dataset([{"x": 1, "y": 1}])
        plot.add_dataset(data)
        plot.render_to(RasterSurface.create(20, 20))
        self.assertFalse(plot.data_changed)

        data.append({"x": 2, "y": 2})
        self.assertTrue(plot.data_changed)
        self.assertTrue(self.controller.pending())
        self.controller.flush()
        self.assertFalse(plot.data_changed)

    def test_scale_change_schedules_render(self) -> None:
        x_scale, y_scale = fixed_scales()
        plot = scatter_plot(x_scale, y_scale, render_controller=self.controller)
        plot.render_to(RasterSurface.create(20, 20))
        with mock.patch.object(self.controller, "register_to_render") as register:
            x_scale.set_domain((0, 50))
        register.assert_called_once_with(plot)

    def test_projectors_fill_defaults(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        projectors = plot.generate_attr_to_projector()
        datum = {"x": 25, "y": 75}
        self.assertEqual(projectors["r"](datum, 0, None, {}), 3.0)
        self.assertEqual(projectors["opacity"](datum, 0, None, {}), 0.6)
        self.assertEqual(projectors["fill"](datum, 0, None, {}), "#5279c7")
        self.assertEqual(projectors["symbol"](datum, 0, None, {}), "circle")

        plot.project("r", lambda d: d["x"] / 5)
        self.assertEqual(plot.generate_attr_to_projector()["r"](datum, 0, None, {}), 5.0)

    def test_render_paints_marks(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        plot.add_dataset([{"x": 50, "y": 50}])
        plot.project("fill", "#ff0000").project("opacity", 1)
        surface = RasterSurface.create(100, 100)
        plot.render_to(surface)
        self.assertEqual(tuple(int(v) for v in surface.pixels()[50, 50]), (255, 0, 0, 255))
        self.assertEqual(tuple(int(v) for v in surface.pixels()[5, 5]), (255, 255, 255, 255))
        self.assertEqual(surface.to_image().size, (100, 100))

    def test_plot_in_table_paints_inside_its_cell(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        plot.add_dataset([{"x": 0, "y": 100}])
        plot.project("fill", "#000000").project("opacity", 1).project("symbol", lambda d: "square")
        spacer = Group(render_controller=self.controller)
        table = Table([[spacer, plot]], render_controller=self.controller)
        table.set_col_weight(0, 1)
        surface = RasterSurface.create(100, 50)
        table.render_to(surface)
        pixels = surface.pixels()
        self.assertEqual(int(pixels[0, 50, 0]), 0)
        self.assertTrue(np.all(pixels[:, :40, :3] == 255))


class DrawStepTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = RenderController("deferred")

    def test_reset_step_precedes_main_step_when_animating(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller).animate(True)
        plot.add_dataset([{"x": 1, "y": 1}])

        steps = plot.generate_draw_steps()
        self.assertEqual(len(steps), 2)
        self.assertIsInstance(steps[0].animator, NullAnimator)
        self.assertEqual(steps[0].attr_to_projector["r"]({"x": 1}, 0, None, {}), 0)
        self.assertEqual(steps[1].animator, BaseAnimator(duration=250, delay=5))

        plot.render_to(RasterSurface.create(20, 20))
        self.assertEqual(len(plot.generate_draw_steps()), 1)
        self.assertEqual(plot.last_draw_time, BaseAnimator(duration=250, delay=5).timing(1))

    def test_disabled_animation_uses_null_animator(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        plot.add_dataset([{"x": 1, "y": 1}])
        steps = plot.generate_draw_steps()
        self.assertEqual(len(steps), 1)
        self.assertIsInstance(steps[0].animator, NullAnimator)

    def test_custom_animator_is_used(self) -> None:
        plot = scatter_plot(*fixed_scales(), render_controller=self.controller).animate(True)
        custom = BaseAnimator(duration=10)
        plot.set_animator("symbols", custom)
        self.assertIs(plot.animator("symbols"), custom)

    def test_missing_position_projection_is_an_error(self) -> None:
        plot = Plot(PointMarkStrategy(), render_controller=self.controller)
        with self.assertRaises(PlotDataError):
            plot.generate_draw_steps()


class ClosestMarkTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = RenderController("deferred")
        self.plot = scatter_plot(*fixed_scales(), render_controller=self.controller)
        # y scale range is (100, 0), so y=50 sits at pixel row 50.
        self.plot.add_dataset([{"x": 52, "y": 50, "name": "far"}], key="first")
        self.plot.add_dataset([{"x": 43, "y": 50, "name": "near"}], key="second")
        self.surface = RasterSurface.create(100, 100)

    def test_contained_marks_prefer_smallest_distance(self) -> None:
        self.plot.project("r", 15)
        self.plot.render_to(self.surface)
        result = self.plot.closest_mark(Point(40.0, 50.0), 5.0)
        self.assertEqual(result.datum["name"], "near")
        self.assertEqual(result.mark.key, "second")
        self.assertAlmostEqual(result.pixel_position.x, 43.0)

    def test_falls_back_to_marks_within_radius(self) -> None:
        self.plot.render_to(self.surface)
        result = self.plot.closest_mark((47.0, 50.0), 5.0)
        self.assertEqual(result.datum["name"], "near")

    def test_no_mark_in_range_returns_sentinel(self) -> None:
        self.plot.render_to(self.surface)
        result = self.plot.closest_mark(Point(60.0, 80.0), 5.0)
        self.assertIs(result, NO_MATCH)
        self.assertIsNone(result.datum)
        self.assertIsNone(result.pixel_position)

    def test_nothing_rendered_means_no_match(self) -> None:
        self.assertIs(self.plot.closest_mark(Point(43.0, 50.0)), NO_MATCH)


class RepaintTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = RenderController("immediate")

    def black_plot(self, x_scale: LinearScale, y_scale: LinearScale, x: float) -> Plot:
        plot = scatter_plot(x_scale, y_scale, render_controller=self.controller)
        plot.add_dataset([{"x": x, "y": 50}])
        plot.project("fill", "#000000").project("opacity", 1).project("r", 4)
        return plot

    def test_domain_change_erases_previous_marks(self) -> None:
        x_scale, y_scale = fixed_scales()
        plot = self.black_plot(x_scale, y_scale, 20)
        surface = RasterSurface.create(100, 100)
        plot.render_to(surface)
        self.assertEqual(tuple(int(v) for v in surface.pixels()[50, 20]), (0, 0, 0, 255))

        x_scale.set_domain((0, 50))

        self.assertEqual(tuple(int(v) for v in surface.pixels()[50, 20]), (255, 255, 255, 255))
        self.assertEqual(tuple(int(v) for v in surface.pixels()[50, 40]), (0, 0, 0, 255))
        self.assertAlmostEqual(plot.closest_mark(Point(40.0, 50.0), 1.0).pixel_position.x, 40.0)

    def test_sibling_in_group_is_repainted(self) -> None:
        under = self.black_plot(*fixed_scales(), 20)
        x_scale, y_scale = fixed_scales()
        over = self.black_plot(x_scale, y_scale, 80)
        group = Group([under, over], render_controller=self.controller)
        surface = RasterSurface.create(100, 100)
        group.render_to(surface)

        x_scale.set_domain((0, 200))

        pixels = surface.pixels()
        self.assertEqual(int(pixels[50, 20, 0]), 0)
        self.assertEqual(int(pixels[50, 80, 0]), 255)
        self.assertEqual(int(pixels[50, 40, 0]), 0)


class ExtentCacheTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = RenderController("deferred")

    def test_shared_dataset_extents_follow_each_key(self) -> None:
        x_scale, y_scale = LinearScale(), LinearScale()
        x_scale.domainer().pad(0)
        plot = scatter_plot(x_scale, y_scale, render_controller=self.controller)
        plot.project("x", lambda d, i, u, m: d["x"] + (100 if m["dataset_key"] == "b" else 0), x_scale)
        shared = Dataset([{"x": 0, "y": 0}, {"x": 10, "y": 1}])
        plot.add_dataset(shared, key="a").add_dataset(shared, key="b")

        plot.render_to(RasterSurface.create(50, 50))

        self.assertEqual(sorted(x_scale.extents()), [[0.0, 10.0], [100.0, 110.0]])
        self.assertEqual(x_scale.domain(), (0.0, 110.0))

    def test_reprojecting_does_not_grow_cache(self) -> None:
        x_scale, y_scale = fixed_scales()
        plot = scatter_plot(x_scale, y_scale, render_controller=self.controller)
        data = Dataset([{"x": 1, "y": 2}])
        plot.add_dataset(data)
        plot.render_to(RasterSurface.create(20, 20))
        cached = data.cached_extent_count()

        for _ in range(5):
            plot.project("x", "x", x_scale)

        self.assertEqual(data.cached_extent_count(), cached)

        plot.remove_dataset(data)
        self.assertEqual(data.cached_extent_count(), 0)


class HoverInteractionTests(unittest.TestCase):
    def test_hover_over_and_out_callbacks(self) -> None:
        controller = RenderController("deferred")
        plot = scatter_plot(*fixed_scales(), render_controller=controller)
        plot.add_dataset([{"x": 20, "y": 50}, {"x": 80, "y": 50}])
        spacer = Group(render_controller=controller)
        table = Table([[spacer, plot]], render_controller=controller)
        table.set_col_weight(0, 1)
        table.render_to(RasterSurface.create(200, 100))

        over: list[int] = []
        out: list[int] = []
        hover = HoverInteraction(max_radius=5)
        hover.on_hover_over(lambda hit: over.append(hit.mark.index))
        hover.on_hover_out(lambda hit: out.append(hit.mark.index))
        plot.register_interaction(hover)

        # The plot occupies the right half, so local x=20 is surface x=120.
        hover.handle_pointer(121.0, 50.0)
        hover.handle_pointer(120.0, 51.0)
        hover.handle_pointer(180.0, 50.0)
        hover.handle_pointer(150.0, 50.0)
        hover.handle_pointer(10.0, 50.0)

        self.assertEqual(over, [0, 1])
        self.assertEqual(out, [1])
        self.assertIs(hover.current(), NO_MATCH)

    def test_removed_plot_releases_interactions(self) -> None:
        controller = RenderController("deferred")
        plot = scatter_plot(*fixed_scales(), render_controller=controller)
        plot.add_dataset([{"x": 20, "y": 50}])
        plot.render_to(RasterSurface.create(100, 100))
        hover = HoverInteraction(max_radius=5)
        plot.register_interaction(hover)
        self.assertIsNot(hover.handle_pointer(20.0, 50.0), NO_MATCH)

        plot.remove()

        self.assertEqual(plot.interactions(), [])
        self.assertIs(hover.current(), NO_MATCH)
        with self.assertRaises(ComponentStateError):
            hover.handle_pointer(20.0, 50.0)


if __name__ == "__main__":
    unittest.main()
