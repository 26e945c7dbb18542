"""Pivot Matrix — the rows x dates count matrix consumed by every view.

A matrix arrives from the pivot API as
``{rows: [...], columns: [...], data: {row: {column: count}}, maxValue?}``.
Cells are sparse (absent = 0). ``maxValue`` is advisory only: some upstream
paths approximate it, so the observed maximum is always recomputed.
"""

import math
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

import pandas as pd

logger = logging.getLogger("MatrixViewer.PivotMatrix")


class MatrixIntegrityError(ValueError):
    """The matrix breaks a structural invariant and must not be rendered."""


def _to_count(value, row, col):
    """Coerce a JSON number to a non-negative int count."""
    if isinstance(value, bool) or value is None:
        raise MatrixIntegrityError(f"Cell {row!r}/{col!r} is not a count: {value!r}")
    if isinstance(value, float):
        if not math.isfinite(value) or value != int(value):
            raise MatrixIntegrityError(f"Cell {row!r}/{col!r} is not an integer: {value!r}")
        value = int(value)
    if not isinstance(value, int):
        raise MatrixIntegrityError(f"Cell {row!r}/{col!r} is not a count: {value!r}")
    if value < 0:
        raise MatrixIntegrityError(f"Cell {row!r}/{col!r} is negative: {value}")
    return value


@dataclass(frozen=True)
class PivotMatrix:
    """Immutable rows x columns count matrix."""
    rows: Tuple[str, ...]
    columns: Tuple[str, ...]
    cells: Mapping[str, Mapping[str, int]] = field(default_factory=dict)
    max_value: Optional[int] = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_payload(cls, payload: Mapping) -> "PivotMatrix":
        """Build a matrix from the pivot API JSON contract.

        Raises MatrixIntegrityError for malformed payloads.
        """
        if not isinstance(payload, Mapping):
            raise MatrixIntegrityError("Pivot payload must be an object")

        rows = payload.get("rows") or []
        columns = payload.get("columns") or []
        data = payload.get("data") or {}
        if not isinstance(rows, (list, tuple)) or not isinstance(columns, (list, tuple)):
            raise MatrixIntegrityError("'rows' and 'columns' must be arrays")
        if not isinstance(data, Mapping):
            raise MatrixIntegrityError("'data' must be an object")

        cells: Dict[str, Dict[str, int]] = {}
        for row, row_data in data.items():
            if not isinstance(row_data, Mapping):
                raise MatrixIntegrityError(f"Row {row!r} data must be an object")
            cells[str(row)] = {str(col): _to_count(v, row, col) for col, v in row_data.items()}

        max_value = payload.get("maxValue")
        if max_value is not None:
            max_value = _to_count(max_value, "maxValue", "-")

        matrix = cls(tuple(str(r) for r in rows), tuple(str(c) for c in columns),
                     cells, max_value)
        matrix.validate()
        return matrix

    @classmethod
    def empty(cls) -> "PivotMatrix":
        return cls((), (), {}, 0)

    # ------------------------------------------------------------------
    # Integrity
    # ------------------------------------------------------------------

    def validate(self, strict_max=False):
        """Check the structural invariants.

        With *strict_max*, a declared maxValue that differs from the
        observed maximum is an error instead of a logged recomputation.
        """
        if len(set(self.rows)) != len(self.rows):
            raise MatrixIntegrityError("Duplicate row identifiers")
        if len(set(self.columns)) != len(self.columns):
            raise MatrixIntegrityError("Duplicate column labels")

        row_set, col_set = set(self.rows), set(self.columns)
        for row, row_data in self.cells.items():
            if row not in row_set:
                raise MatrixIntegrityError(f"Row {row!r} has cells but is not declared")
            for col, value in row_data.items():
                if col not in col_set:
                    raise MatrixIntegrityError(
                        f"Column {col!r} (row {row!r}) has cells but is not declared")
                _to_count(value, row, col)

        if self.max_value is not None and strict_max:
            observed = self.observed_max()
            if self.max_value != observed:
                raise MatrixIntegrityError(
                    f"Declared maxValue {self.max_value} != observed maximum {observed}")

    def observed_max(self) -> int:
        return max((v for row in self.cells.values() for v in row.values()), default=0)

    def verified_max(self) -> int:
        """The true maximum; logs when the declared value disagrees."""
        observed = self.observed_max()
        if self.max_value is None:
            logger.debug("maxValue absent, using observed maximum %s", observed)
        elif self.max_value != observed:
            logger.warning("maxValue %s inconsistent with observed maximum %s; recomputed",
                           self.max_value, observed)
        return observed

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    def value(self, row, column) -> int:
        return self.cells.get(row, {}).get(column, 0)

    def is_empty(self) -> bool:
        """True when no cell holds a count (zero rows, zero columns or all zeros)."""
        return not self.rows or not self.columns or self.observed_max() == 0

    def to_frame(self) -> pd.DataFrame:
        """Dense rows x columns DataFrame of int counts, zeros filled in."""
        df = pd.DataFrame(
            [[self.value(r, c) for c in self.columns] for r in self.rows],
            index=pd.Index(self.rows, dtype=object, name="item"),
            columns=pd.Index(self.columns, dtype=object, name="date"),
        )
        return df.astype("int64")
