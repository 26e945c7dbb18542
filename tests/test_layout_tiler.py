"""
Unit tests for layout_tiler.py
Tests page capacity, 2-D tiling completeness and page descriptions.
"""

import unittest
from datetime import date, timedelta

from layout_tiler import (
    PageGeometry,
    compute_capacity,
    describe_range,
    single_block,
    tile,
    tile_for_geometry,
)
from pivot_matrix import PivotMatrix
from settings import RenderSettings
from view_builder import ViewBuilder


def _view(n_rows, n_cols):
    start = date(2024, 1, 1)
    columns = [(start + timedelta(days=j)).strftime("%m/%d/%y") for j in range(n_cols)]
    rows = [f"Item {i:03d}" for i in range(n_rows)]
    data = {r: {c: (i * 3 + j) % 7 + 1 for j, c in enumerate(columns)} for i, r in enumerate(rows)}
    matrix = PivotMatrix.from_payload({"rows": rows, "columns": columns, "data": data})
    return ViewBuilder().build(matrix, "symptom", "P-001")


class TestTile(unittest.TestCase):
    def test_single_page(self):
        blocks = tile(_view(5, 4), 10, 10)
        self.assertEqual(len(blocks), 1)
        self.assertEqual(blocks[0].total_pages, 1)
        self.assertEqual(blocks[0].row_range, (0, 5))
        self.assertEqual(blocks[0].col_range, (0, 4))

    def test_page_counts(self):
        blocks = tile(_view(83, 18), 40, 8)
        # ceil(83/40) = 3 bands x ceil(18/8) = 3 pages
        self.assertEqual(len(blocks), 9)
        self.assertTrue(all(b.total_pages == 9 for b in blocks))
        self.assertEqual([b.page_index for b in blocks], list(range(9)))

    def test_row_major_order(self):
        blocks = tile(_view(5, 5), 2, 2)
        self.assertEqual([(b.row_range[0], b.col_range[0]) for b in blocks],
                         [(0, 0), (0, 2), (0, 4), (2, 0), (2, 2), (2, 4), (4, 0), (4, 2), (4, 4)])

    def test_completeness(self):
        view = _view(23, 11)
        for rc, cc in [(1, 1), (4, 3), (7, 11), (23, 2), (100, 100)]:
            with self.subTest(rc=rc, cc=cc):
                seen = []
                for b in tile(view, rc, cc):
                    for r in b.rows:
                        for c in b.columns:
                            seen.append((r.name, c))
                expected = [(r.name, c) for r in view.ranked_rows for c in view.columns]
                self.assertEqual(len(seen), len(expected))
                self.assertEqual(set(seen), set(expected))

    def test_block_carries_headers(self):
        view = _view(6, 6)
        blocks = tile(view, 4, 4)
        last = blocks[-1]
        self.assertEqual(last.rows, view.ranked_rows[4:6])
        self.assertEqual(last.columns, view.columns[4:6])
        self.assertEqual(last.column_labels, view.column_labels[4:6])
        self.assertEqual(last.page_number, 4)

    def test_totals_preserved(self):
        view = _view(17, 9)
        total = sum(view.value(r.name, c) for b in tile(view, 5, 4) for r in b.rows for c in b.columns)
        self.assertEqual(total, sum(r.total for r in view.ranked_rows))

    def test_empty_view_yields_one_block(self):
        view = ViewBuilder().build(PivotMatrix.empty(), "symptom")
        blocks = tile(view, 10, 10)
        self.assertEqual(len(blocks), 1)
        self.assertTrue(blocks[0].is_empty)
        self.assertEqual(blocks[0].total_pages, 1)
        self.assertEqual(describe_range(blocks[0]), "No data available")

    def test_invalid_capacity(self):
        view = _view(2, 2)
        with self.assertRaises(ValueError):
            tile(view, 0, 5)
        with self.assertRaises(ValueError):
            tile(view, 5, -1)

    def test_single_block(self):
        block = single_block(_view(30, 20))
        self.assertEqual(block.total_pages, 1)
        self.assertEqual(block.cell_count, 600)


class TestDescribeRange(unittest.TestCase):
    def test_text(self):
        blocks = tile(_view(83, 18), 40, 8)
        self.assertEqual(describe_range(blocks[1]), "Rows 1–40 of 83, Columns 9–16 of 18")
        self.assertEqual(describe_range(blocks[-1]), "Rows 81–83 of 83, Columns 17–18 of 18")


class TestPageGeometry(unittest.TestCase):
    def test_document_capacity(self):
        g = PageGeometry.for_document()
        self.assertEqual((g.width_px, g.height_px), (1100, 850))
        rc, cc = compute_capacity(g)
        self.assertEqual(rc, (850 - 80 - 90 - 30 - 60) // 22)
        self.assertEqual(cc, (1100 - 80 - 240) // 56)

    def test_settings_change_capacity(self):
        dense = PageGeometry.for_document(RenderSettings(row_height_px=11))
        self.assertGreater(dense.row_capacity, PageGeometry.for_document().row_capacity)

    def test_screen_too_small(self):
        with self.assertRaises(ValueError):
            compute_capacity(PageGeometry.for_screen(300, 200))

    def test_tile_for_geometry(self):
        view = _view(60, 30)
        rc, cc = compute_capacity(PageGeometry.for_document())
        blocks = tile_for_geometry(view)
        self.assertEqual(len(blocks), -(-60 // rc) * -(-30 // cc))


if __name__ == "__main__":
    unittest.main()
