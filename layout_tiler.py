"""
Layout Tiler
============
Splits a MatrixView into page-sized blocks when rows, columns or both
overflow a page.

Blocks are enumerated row-major: every horizontal page of the first row
band, then every horizontal page of the next band. Each block carries its
own ranked rows and column labels, so a page repeats the row and column
headers it needs and nothing else.
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from config import (
    COLUMN_HEADER_PX, COLUMN_WIDTH_PX, DOCUMENT_PAGE_SIZE_IN, LAYOUT_DPI,
    NO_DATA_MESSAGE, PAGE_FOOTER_PX, PAGE_HEADER_PX, PAGE_MARGIN_PX,
    ROW_HEIGHT_PX, ROW_LABEL_PX,
)
from ranking_engine import RankedRow
from view_builder import MatrixView

logger = logging.getLogger("MatrixViewer.LayoutTiler")


@dataclass(frozen=True)
class PageGeometry:
    """Drawing area of one page and the pixel budget of one row/column."""
    width_px: int
    height_px: int
    margin_px: int = PAGE_MARGIN_PX
    header_px: int = PAGE_HEADER_PX
    footer_px: int = PAGE_FOOTER_PX
    column_header_px: int = COLUMN_HEADER_PX
    row_label_px: int = ROW_LABEL_PX
    row_height_px: int = ROW_HEIGHT_PX
    column_width_px: int = COLUMN_WIDTH_PX

    @classmethod
    def for_document(cls, settings=None) -> "PageGeometry":
        """Landscape letter page at LAYOUT_DPI."""
        width_in, height_in = DOCUMENT_PAGE_SIZE_IN
        return cls._with_settings(int(width_in * LAYOUT_DPI), int(height_in * LAYOUT_DPI), settings)

    @classmethod
    def for_screen(cls, width_px, height_px, settings=None) -> "PageGeometry":
        """A screen viewport; same header/footer budget as a document page."""
        return cls._with_settings(int(width_px), int(height_px), settings)

    @classmethod
    def _with_settings(cls, width_px, height_px, settings):
        if settings is None:
            return cls(width_px, height_px)
        return cls(width_px, height_px,
                   row_height_px=settings.row_height_px,
                   column_width_px=settings.column_width_px)

    @property
    def size_inches(self) -> Tuple[float, float]:
        return self.width_px / LAYOUT_DPI, self.height_px / LAYOUT_DPI

    @property
    def grid_width_px(self) -> int:
        return self.width_px - 2 * self.margin_px - self.row_label_px

    @property
    def grid_height_px(self) -> int:
        return (self.height_px - 2 * self.margin_px - self.header_px
                - self.footer_px - self.column_header_px)

    @property
    def row_capacity(self) -> int:
        return self.grid_height_px // self.row_height_px

    @property
    def col_capacity(self) -> int:
        return self.grid_width_px // self.column_width_px


def compute_capacity(geometry: PageGeometry) -> Tuple[int, int]:
    """(row_capacity, col_capacity) for *geometry*.

    Raises ValueError when not even one row or column fits.
    """
    rc, cc = geometry.row_capacity, geometry.col_capacity
    if rc < 1 or cc < 1:
        raise ValueError(
            f"Page {geometry.width_px}x{geometry.height_px}px fits {rc} row(s) "
            f"and {cc} column(s); at least one of each is required")
    return rc, cc


@dataclass(frozen=True)
class PageBlock:
    """One page of a tiled view. Ranges are half-open [start, end)."""
    row_range: Tuple[int, int]
    col_range: Tuple[int, int]
    page_index: int  # 0-based
    total_pages: int
    rows: Tuple[RankedRow, ...] = ()
    columns: Tuple[str, ...] = ()
    column_labels: Tuple[str, ...] = ()
    total_rows: int = 0
    total_columns: int = 0

    @property
    def page_number(self) -> int:
        return self.page_index + 1

    @property
    def is_empty(self) -> bool:
        return not self.rows or not self.columns

    @property
    def cell_count(self) -> int:
        return (self.row_range[1] - self.row_range[0]) * (self.col_range[1] - self.col_range[0])


def single_block(view: MatrixView) -> PageBlock:
    """The whole view as one page."""
    return tile(view, max(view.row_count, 1), max(view.column_count, 1))[0]


def tile(view: MatrixView, row_capacity: int, col_capacity: int) -> List[PageBlock]:
    """Split *view* into blocks of at most row_capacity x col_capacity cells."""
    if row_capacity < 1 or col_capacity < 1:
        raise ValueError(f"Capacities must be >= 1 (got {row_capacity} x {col_capacity})")

    n_rows, n_cols = view.row_count, view.column_count
    if view.is_empty:
        return [PageBlock((0, 0), (0, 0), 0, 1, total_rows=0, total_columns=0)]

    vertical = math.ceil(n_rows / row_capacity)
    horizontal = math.ceil(n_cols / col_capacity)
    total = vertical * horizontal

    blocks = []
    for v in range(vertical):
        r0, r1 = v * row_capacity, min((v + 1) * row_capacity, n_rows)
        for h in range(horizontal):
            c0, c1 = h * col_capacity, min((h + 1) * col_capacity, n_cols)
            blocks.append(PageBlock(
                row_range=(r0, r1),
                col_range=(c0, c1),
                page_index=len(blocks),
                total_pages=total,
                rows=view.ranked_rows[r0:r1],
                columns=view.columns[c0:c1],
                column_labels=view.column_labels[c0:c1],
                total_rows=n_rows,
                total_columns=n_cols,
            ))

    logger.debug("Tiled %dx%d view into %d page(s) (%d x %d)",
                 n_rows, n_cols, total, vertical, horizontal)
    return blocks


def tile_for_geometry(view: MatrixView, geometry: Optional[PageGeometry] = None) -> List[PageBlock]:
    """Tile with capacities derived from *geometry* (a document page by default)."""
    rc, cc = compute_capacity(geometry or PageGeometry.for_document())
    return tile(view, rc, cc)


def describe_range(block: PageBlock) -> str:
    """'Rows 1–40 of 83, Columns 5–12 of 18' (1-based, inclusive)."""
    if block.is_empty:
        return NO_DATA_MESSAGE
    r0, r1 = block.row_range
    c0, c1 = block.col_range
    return (f"Rows {r0 + 1}–{r1} of {block.total_rows}, "
            f"Columns {c0 + 1}–{c1} of {block.total_columns}")
