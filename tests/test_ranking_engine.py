"""Tests for ranking_engine — the single row ordering."""
import random
import unittest

from pivot_matrix import PivotMatrix
from ranking_engine import RankedRow, RankingMode, rank, row_totals


def _matrix(data, rows=None, columns=None):
    rows = rows if rows is not None else sorted(data)
    columns = columns if columns is not None else sorted({c for r in data.values() for c in r})
    return PivotMatrix.from_payload({"rows": rows, "columns": columns, "data": data})


class TestRank(unittest.TestCase):
    def test_total_descending(self):
        m = _matrix({"A": {"d1": 5}, "B": {"d1": 1, "d2": 3}, "C": {"d2": 9}})
        ranked = rank(m)
        self.assertEqual([r.name for r in ranked], ["C", "A", "B"])
        self.assertEqual([r.total for r in ranked], [9, 5, 4])
        self.assertEqual([r.rank for r in ranked], [1, 2, 3])

    def test_ties_broken_by_name(self):
        m = _matrix({"Zeta": {"d1": 2}, "Alpha": {"d1": 2}, "Mid": {"d1": 2}})
        self.assertEqual([r.name for r in rank(m)], ["Alpha", "Mid", "Zeta"])

    def test_deterministic_under_row_permutation(self):
        data = {f"item{i}": {"d1": i % 4, "d2": (i * 7) % 5} for i in range(30)}
        expected = rank(_matrix(data))
        rows = list(data)
        for seed in range(5):
            random.Random(seed).shuffle(rows)
            with self.subTest(seed=seed):
                self.assertEqual(rank(_matrix(data, rows=list(rows))), expected)

    def test_zero_rows_excluded(self):
        m = _matrix({"A": {"d1": 1}, "Empty": {"d1": 0}}, rows=["A", "Empty", "Absent"])
        self.assertEqual([r.name for r in rank(m)], ["A"])

    def test_all_rows_mode(self):
        m = _matrix({"B": {"d1": 1}, "A": {"d1": 3}}, rows=["Zed", "B", "Absent", "A"])
        ranked = rank(m, RankingMode.ALL_ROWS)
        self.assertEqual([r.name for r in ranked], ["A", "B", "Absent", "Zed"])
        self.assertEqual([r.rank for r in ranked], [1, 2, None, None])
        self.assertEqual(ranked[-1].total, 0)

    def test_frequency(self):
        m = _matrix({"A": {"d1": 5, "d2": 0, "d3": 2}})
        self.assertEqual(rank(m)[0], RankedRow("A", 7, 1, 2))

    def test_empty_matrix(self):
        self.assertEqual(rank(PivotMatrix.empty()), [])
        self.assertEqual(rank(PivotMatrix.empty(), RankingMode.ALL_ROWS), [])

    def test_row_totals(self):
        m = _matrix({"A": {"d1": 5}, "B": {"d1": 1, "d2": 3}})
        totals = row_totals(m)
        self.assertEqual(totals["A"], 5)
        self.assertEqual(totals["B"], 4)


if __name__ == "__main__":
    unittest.main()
