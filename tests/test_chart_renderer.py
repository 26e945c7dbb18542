"""Tests for chart_renderer — what ends up on the page axes."""
import unittest

from matplotlib.patches import Circle, Rectangle

from chart_renderer import bubble_radius, draw_block, new_page_figure
from layout_tiler import PageGeometry, single_block
from pivot_matrix import PivotMatrix
from view_builder import ViewBuilder


def _view(values):
    rows = [f"Item {i}" for i in range(len(values))]
    data = {r: {"01/01/24": v} for r, v in zip(rows, values)}
    matrix = PivotMatrix.from_payload({"rows": rows, "columns": ["01/01/24"], "data": data})
    return ViewBuilder().build(matrix, "symptom", "P-001")


def _drawn(view, chart, kind):
    geometry = PageGeometry.for_document()
    _, ax = new_page_figure(geometry)
    draw_block(ax, geometry, view, single_block(view), chart)
    return [p for p in ax.patches if isinstance(p, kind)]


class TestBubbles(unittest.TestCase):
    def test_radii_follow_values(self):
        view = _view([2, 10, 100])
        circles = _drawn(view, "bubble", Circle)
        self.assertEqual(len(circles), 3)
        # rows are ranked 100, 10, 2
        radii = [c.radius for c in circles]
        self.assertEqual(len(set(radii)), 3)
        self.assertEqual(radii, sorted(radii, reverse=True))

    def test_largest_bubble_fits_cell(self):
        geometry = PageGeometry.for_document()
        half_cell = min(geometry.row_height_px, geometry.column_width_px) / 2
        for c in _drawn(_view([1, 5, 1000]), "bubble", Circle):
            self.assertLessEqual(c.radius, half_cell)

    def test_zero_cell_has_no_circle(self):
        matrix = PivotMatrix.from_payload({"rows": ["A"], "columns": ["01/01/24", "01/02/24"],
                                           "data": {"A": {"01/01/24": 3}}})
        view = ViewBuilder().build(matrix, "symptom")
        self.assertEqual(len(_drawn(view, "bubble", Circle)), 1)

    def test_bubble_radius_proportional(self):
        geometry = PageGeometry.for_document()
        self.assertAlmostEqual(bubble_radius(23.0, 23.0, geometry) / 2,
                               bubble_radius(11.5, 23.0, geometry))


class TestHeatmap(unittest.TestCase):
    def test_one_rectangle_per_cell(self):
        self.assertEqual(len(_drawn(_view([1, 2, 3]), "heatmap", Rectangle)), 3)

    def test_unknown_chart(self):
        with self.assertRaises(ValueError):
            _drawn(_view([1]), "pie", Rectangle)


if __name__ == "__main__":
    unittest.main()
