"""
Ranking Engine
==============
The one place rows are ordered. Every chart, table and export takes its row
order from ``rank()``; nothing else sorts rows.

Order: total descending, then name ascending. Rank 1 is the highest total.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

import pandas as pd

from pivot_matrix import PivotMatrix

logger = logging.getLogger("MatrixViewer.Ranking")


class RankingMode(enum.Enum):
    """Which rows a caller receives.

    RANKED:   rows with total > 0 only (charts and exports).
    ALL_ROWS: ranked rows followed by zero-total rows (rank None),
              alphabetically, for "all rows" listings.
    """
    RANKED = "ranked"
    ALL_ROWS = "all_rows"


@dataclass(frozen=True)
class RankedRow:
    name: str
    total: int
    rank: Optional[int]
    frequency: int = 0  # columns with a non-zero count


def row_totals(matrix: PivotMatrix) -> pd.Series:
    """Per-row totals, indexed by row name."""
    return matrix.to_frame().sum(axis=1).astype("int64")


def rank(matrix: PivotMatrix, mode: RankingMode = RankingMode.RANKED) -> List[RankedRow]:
    """Rank the rows of *matrix*. Deterministic for identical input."""
    frame = matrix.to_frame()
    if not len(frame.index):
        return []

    summary = pd.DataFrame({
        "name": list(frame.index),
        "total": frame.sum(axis=1).astype("int64").to_numpy(),
        "frequency": (frame > 0).sum(axis=1).astype("int64").to_numpy(),
    })

    ranked = summary[summary["total"] > 0].sort_values(
        ["total", "name"], ascending=[False, True], kind="mergesort")
    result = [
        RankedRow(r.name, int(r.total), i, int(r.frequency))
        for i, r in enumerate(ranked.itertuples(index=False), start=1)
    ]

    if mode is RankingMode.ALL_ROWS:
        zero = summary[summary["total"] == 0].sort_values("name", kind="mergesort")
        result.extend(RankedRow(r.name, 0, None, 0) for r in zero.itertuples(index=False))

    logger.debug("Ranked %d of %d rows (%s)", len(ranked), len(summary), mode.value)
    return result
