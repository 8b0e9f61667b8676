from __future__ import annotations

import math
import unittest

from trellis_ui import Component, EngineConfig, Point, RenderController, SpaceRequest, Table


class FixedBox(Component):
    _fixed_width_flag = True
    _fixed_height_flag = True

    def __init__(self, width: float, height: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.size = (width, height)

    def requested_space(self, available_width: float, available_height: float) -> SpaceRequest:
        return SpaceRequest(width=self.size[0], height=self.size[1])


class WrappingText(Component):
    """Text of a fixed total width broken into 10px lines at the offered width."""

    _fixed_height_flag = True

    def __init__(self, text_width: float, **kwargs) -> None:
        super().__init__(**kwargs)
        self.text_width = text_width
        self.reported_heights: list[float] = []

    def requested_space(self, available_width: float, available_height: float) -> SpaceRequest:
        lines = math.ceil(self.text_width / max(available_width, 1.0))
        height = 10.0 * lines
        self.reported_heights.append(height)
        return SpaceRequest(
            width=min(available_width, self.text_width),
            height=height,
            wants_width=available_width < self.text_width,
        )


class TableLayoutTests(unittest.TestCase):
    def setUp(self) -> None:
        self.controller = RenderController("deferred")

    def test_wrapping_cell_converges_within_bound(self) -> None:
        label = FixedBox(50, 10, render_controller=self.controller)
        text = WrappingText(290, render_controller=self.controller)
        table = Table([[label, text]], render_controller=self.controller)

        table.compute_layout(Point(0.0, 0.0), 200.0, 100.0)

        layout = table.last_layout()
        assert layout is not None
        self.assertLessEqual(layout.iterations, 5)
        self.assertAlmostEqual(layout.col_widths[0], 50.0)
        self.assertAlmostEqual(layout.col_widths[1], 150.0)
        self.assertEqual(layout.row_heights, (20.0,))
        self.assertGreaterEqual(layout.row_heights[0], text.reported_heights[-1])
        self.assertAlmostEqual(text.box().x, 50.0)
        self.assertEqual(text.box().height, 20.0)

    def test_iteration_bound_comes_from_config(self) -> None:
        text = WrappingText(1000, render_controller=self.controller)
        table = Table(
            [[text]],
            config=EngineConfig(table_max_iterations=1),
            render_controller=self.controller,
        )
        with self.assertLogs("trellis_ui.table.component", level="DEBUG"):
            table.compute_layout(Point(0.0, 0.0), 200.0, 100.0)
        self.assertEqual(table.last_layout().iterations, 1)

    def test_equal_elastic_tracks_split_remaining_space(self) -> None:
        box = FixedBox(30, 10, render_controller=self.controller)
        left = Component(render_controller=self.controller)
        right = Component(render_controller=self.controller)
        table = Table([[box, left, right]], render_controller=self.controller)

        table.compute_layout(Point(0.0, 0.0), 200.0, 50.0)

        self.assertEqual(table.last_layout().col_widths, (30.0, 85.0, 85.0))
        self.assertEqual(left.box().x, 30.0)
        self.assertEqual(right.box().x, 115.0)
        self.assertEqual(box.box().height, 10.0)
        self.assertEqual(left.box().height, 50.0)

    def test_track_without_elastic_cell_stays_fixed(self) -> None:
        box = FixedBox(30, 10, render_controller=self.controller)
        table = Table([[box, None]], render_controller=self.controller)

        table.compute_layout(Point(0.0, 0.0), 200.0, 50.0)

        self.assertEqual(table.last_layout().col_widths, (30.0, 0.0))

    def test_padding_and_weights(self) -> None:
        left = Component(render_controller=self.controller)
        right = Component(render_controller=self.controller)
        table = Table([[left, right]], render_controller=self.controller)
        table.set_padding(col=10).set_col_weight(1, 3)

        table.compute_layout(Point(0.0, 0.0), 210.0, 40.0)

        self.assertEqual(table.last_layout().col_widths, (50.0, 150.0))
        self.assertEqual(right.box().x, 60.0)

    def test_requested_space_sums_guarantees_and_padding(self) -> None:
        table = Table(
            [
                [FixedBox(20, 5, render_controller=self.controller), FixedBox(10, 5, render_controller=self.controller)],
                [None, FixedBox(15, 7, render_controller=self.controller)],
            ],
            render_controller=self.controller,
        )
        table.set_padding(row=2, col=4)
        request = table.requested_space(500.0, 500.0)
        self.assertEqual((request.width, request.height), (39.0, 14.0))
        self.assertFalse(request.wants_width or request.wants_height)
        self.assertTrue(table.fixed_width())

    def test_under_allocation_clips_without_error(self) -> None:
        box = FixedBox(80, 80, render_controller=self.controller)
        table = Table([[box]], render_controller=self.controller)
        table.compute_layout(Point(0.0, 0.0), 30.0, 20.0)
        self.assertEqual((box.box().width, box.box().height), (30.0, 20.0))

    def test_cell_management(self) -> None:
        table = Table(render_controller=self.controller)
        box = FixedBox(1, 1, render_controller=self.controller)
        self.assertTrue(table.add_component(2, 1, box))
        self.assertEqual(table.shape, (3, 2))
        self.assertFalse(table.add_component(0, 0, box))
        with self.assertRaises(ValueError):
            table.add_component(2, 1, FixedBox(1, 1, render_controller=self.controller))
        with self.assertRaises(ValueError):
            table.add_component(-1, 0, FixedBox(1, 1, render_controller=self.controller))
        table.remove_component(box)
        self.assertIsNone(table.cell(2, 1))
        self.assertTrue(table.empty())


if __name__ == "__main__":
    unittest.main()
