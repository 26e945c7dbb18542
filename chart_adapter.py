"""
Chart Adapter
=============
Three projections of one MatrixView: heatmap cells, bubble points and the
ranked table. They share the view's ranked rows and ScaleEngine, so a row
has the same rank, total and bucket colour in every chart and export.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd

from ranking_engine import RankedRow
from scale_engine import ScaleBucket
from view_builder import MatrixView

logger = logging.getLogger("MatrixViewer.ChartAdapter")

# Leading columns of the ranked table
TABLE_COLUMNS = ("Rank", "Item", "Total", "Label")


@dataclass(frozen=True)
class HeatmapCell:
    row: str
    column: str
    value: int
    bucket: ScaleBucket
    color: str  # hex fill, white for EMPTY
    text_color: str


@dataclass(frozen=True)
class BubblePoint:
    x: str  # column display label
    y: str  # row label with rank and total
    column: str
    row: str
    size: float
    color: str
    value: int
    frequency: int


def row_label(ranked_row: RankedRow) -> str:
    """'1. Fatigue (12)'. Unranked rows show only name and total."""
    if ranked_row.rank is None:
        return f"{ranked_row.name} ({ranked_row.total})"
    return f"{ranked_row.rank}. {ranked_row.name} ({ranked_row.total})"


def tooltip(point: BubblePoint) -> str:
    sessions = "session" if point.frequency == 1 else "sessions"
    return f"Value: {point.value} | Appears in {point.frequency} {sessions}"


class ChartAdapter:
    """Projects a MatrixView, optionally restricted to a subset of rows/columns.

    Args:
        view: the shared MatrixView
        rows: RankedRows to project (default: all of the view's)
        columns: original column labels to project (default: all, in order)
    """

    def __init__(self, view: MatrixView, rows: Optional[Sequence[RankedRow]] = None,
                 columns: Optional[Sequence[str]] = None):
        self.view = view
        self.rows = tuple(view.ranked_rows if rows is None else rows)
        self.columns = tuple(view.columns if columns is None else columns)
        self._labels = dict(zip(view.columns, view.column_labels))

    def column_label(self, column: str) -> str:
        return self._labels.get(column, column)

    def cell(self, ranked_row: RankedRow, column: str) -> HeatmapCell:
        scale = self.view.scale
        value = self.view.value(ranked_row.name, column)
        bucket = scale.bucket(value, self.view.max_value)
        return HeatmapCell(ranked_row.name, column, value, bucket,
                           scale.color_hex(bucket), scale.text_color(bucket))

    def to_heatmap_cells(self) -> List[HeatmapCell]:
        """Every row x column cell, row-major; zero cells are EMPTY."""
        return [self.cell(r, c) for r in self.rows for c in self.columns]

    def to_bubble_points(self) -> List[BubblePoint]:
        """One point per non-zero cell; zero cells get no bubble."""
        scale = self.view.scale
        points = []
        for r in self.rows:
            label = row_label(r)
            for c in self.columns:
                value = self.view.value(r.name, c)
                if value <= 0:
                    continue
                bucket = scale.bucket(value, self.view.max_value)
                points.append(BubblePoint(
                    x=self.column_label(c), y=label, column=c, row=r.name,
                    size=scale.size(value), color=scale.color_hex(bucket),
                    value=value, frequency=r.frequency,
                ))
        return points

    def to_ranked_table(self) -> pd.DataFrame:
        """Rank, Item, Total, Label, then one column per date label."""
        # Header names must stay unique: a repeated display label falls back to
        # the raw label, then to a numbered suffix
        used = set(TABLE_COLUMNS)
        date_labels = []
        for c in self.columns:
            label = self.column_label(c)
            if label in used:
                label = c
            n = 2
            base = label
            while label in used:
                label = f"{base} ({n})"
                n += 1
            used.add(label)
            date_labels.append(label)

        data = {
            "Rank": pd.Series([r.rank for r in self.rows], dtype=object),  # None when unranked
            "Item": [r.name for r in self.rows],
            "Total": pd.Series([r.total for r in self.rows], dtype="int64"),
            "Label": [row_label(r) for r in self.rows],
        }
        for c, label in zip(self.columns, date_labels):
            data[label] = pd.Series([self.view.value(r.name, c) for r in self.rows], dtype="int64")
        return pd.DataFrame(data, columns=list(TABLE_COLUMNS) + date_labels)
