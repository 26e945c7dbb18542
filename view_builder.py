"""View Builder — assembles the single MatrixView shared by every chart and export.

A MatrixView is computed once per (matrix, data type, settings) request:
columns in chronological order, one ranking, one ScaleEngine. Screen
rendering, tiling and all exporters read from it; none of them sorts rows,
orders dates or picks colours on their own.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from config import DATA_TYPES, NO_DATA_MESSAGE
from date_normalizer import DateParseError, display_label, sort_columns
from pivot_matrix import PivotMatrix
from ranking_engine import RankedRow, RankingMode, rank
from scale_engine import ScaleEngine
from settings import RenderSettings

logger = logging.getLogger("MatrixViewer.ViewBuilder")


def data_type_name(data_type: str) -> str:
    """Display name for a data type id ('category' -> 'Diagnostic Categories')."""
    entry = DATA_TYPES.get(data_type)
    return entry["name"] if entry else str(data_type)


@dataclass(frozen=True)
class MatrixView:
    """Everything a renderer needs, derived once from a PivotMatrix."""
    matrix: PivotMatrix
    data_type: str
    subject: str
    title: str
    columns: Tuple[str, ...]
    column_labels: Tuple[str, ...]
    ranked_rows: Tuple[RankedRow, ...]
    max_value: int
    scale: ScaleEngine
    mode: RankingMode = RankingMode.RANKED
    date_failures: Tuple[DateParseError, ...] = field(default_factory=tuple)
    total_ranked: int = 0  # ranked rows before any compact limit

    @property
    def row_count(self) -> int:
        return len(self.ranked_rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    @property
    def is_empty(self) -> bool:
        """The "No data available" state: nothing to draw."""
        return self.max_value == 0 or not self.ranked_rows or not self.columns

    @property
    def empty_message(self) -> str:
        return NO_DATA_MESSAGE

    @property
    def is_truncated(self) -> bool:
        return self.row_count < self.total_ranked

    def value(self, row: str, column: str) -> int:
        return self.matrix.value(row, column)


class ViewBuilder:
    """Builds MatrixViews with explicit settings (no ambient state).

    Args:
        settings: RenderSettings; defaults when omitted
    """

    def __init__(self, settings: Optional[RenderSettings] = None):
        self.settings = settings or RenderSettings()

    def build(self, matrix: PivotMatrix, data_type: str, subject: str = "",
              title: Optional[str] = None, mode: RankingMode = RankingMode.RANKED,
              compact: bool = False, limit: Optional[int] = None,
              strict_max: bool = False) -> MatrixView:
        """Validate *matrix* and derive its view.

        Args:
            compact: keep only the top ``settings.compact_row_limit`` rows
            limit: explicit row limit (overrides *compact*)
            strict_max: treat a wrong declared maxValue as an integrity error

        Raises:
            MatrixIntegrityError: the matrix is structurally invalid
        """
        matrix.validate(strict_max=strict_max)

        columns, failures = sort_columns(matrix.columns)
        if failures:
            logger.warning("%d of %d %s column(s) are not dates; original order kept for them",
                           len(failures), len(columns), data_type)

        ranked: List[RankedRow] = rank(matrix, mode)
        total_ranked = len(ranked)
        if limit is None and compact:
            limit = self.settings.compact_row_limit
        if limit is not None:
            ranked = ranked[:max(limit, 0)]

        max_value = matrix.verified_max()
        values = [v for row in matrix.cells.values() for v in row.values()]
        scale = ScaleEngine.for_values(values, theme=self.settings.theme,
                                       compression=self.settings.compression)

        view = MatrixView(
            matrix=matrix,
            data_type=data_type,
            subject=str(subject),
            title=title or data_type_name(data_type),
            columns=tuple(columns),
            column_labels=tuple(display_label(c) for c in columns),
            ranked_rows=tuple(ranked),
            max_value=max_value,
            scale=scale,
            mode=mode,
            date_failures=tuple(failures),
            total_ranked=total_ranked,
        )
        if view.is_empty:
            logger.info("%s view for %r: %s", view.title, view.subject, NO_DATA_MESSAGE)
        return view

    def with_theme(self, view: MatrixView, theme: str) -> MatrixView:
        """Re-colour an existing view; rows and buckets are untouched."""
        return MatrixView(
            matrix=view.matrix, data_type=view.data_type, subject=view.subject,
            title=view.title, columns=view.columns, column_labels=view.column_labels,
            ranked_rows=view.ranked_rows, max_value=view.max_value,
            scale=view.scale.with_theme(theme), mode=view.mode,
            date_failures=view.date_failures, total_ranked=view.total_ranked,
        )
