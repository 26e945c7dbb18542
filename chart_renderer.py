"""
Chart Renderer
==============
Draws one page of a MatrixView onto a matplotlib Figure.

The page axes span the whole figure in pixel units of the PageGeometry
(origin top-left, y growing downwards), so rectangles, circles, text and
grid lines are placed exactly where the tiler budgeted them. Figures are
built with ``matplotlib.figure.Figure`` rather than pyplot so export jobs
can render off the main thread.
"""

import logging
from typing import Optional, Sequence

import matplotlib
matplotlib.use("Agg")
from matplotlib.figure import Figure
from matplotlib.patches import Circle, Rectangle

from chart_adapter import ChartAdapter, row_label
from config import (
    CHART_KINDS, GRID_COLOR, HEADER_TEXT_COLOR, LAYOUT_DPI, MUTED_TEXT_COLOR,
    NO_DATA_MESSAGE,
)
from layout_tiler import PageBlock, PageGeometry

logger = logging.getLogger("MatrixViewer.ChartRenderer")


def _fit(text, max_px, font_px=8.0):
    """Truncate *text* so it roughly fits *max_px* at *font_px* per char."""
    max_chars = max(int(max_px // (font_px * 0.6)), 4)
    return text if len(text) <= max_chars else text[:max_chars - 1] + "…"


def new_page_figure(geometry: PageGeometry, dpi: float = LAYOUT_DPI):
    """Figure plus full-bleed axes in page pixel coordinates."""
    fig = Figure(figsize=geometry.size_inches, dpi=dpi, facecolor="white")
    ax = fig.add_axes([0, 0, 1, 1])
    ax.set_xlim(0, geometry.width_px)
    ax.set_ylim(geometry.height_px, 0)
    ax.set_axis_off()
    return fig, ax


def draw_header(ax, geometry: PageGeometry, title: str, lines: Sequence[str] = ()):
    x = geometry.margin_px
    y = geometry.margin_px
    ax.text(x, y, title, fontsize=16, fontweight="bold",
            color=HEADER_TEXT_COLOR, va="top", ha="left")
    for i, line in enumerate(lines):
        ax.text(x, y + 28 + i * 16, line, fontsize=10,
                color=MUTED_TEXT_COLOR, va="top", ha="left")


def draw_footer(ax, geometry: PageGeometry, text: str):
    ax.text(geometry.width_px / 2, geometry.height_px - geometry.margin_px / 2, text,
            fontsize=9, color=MUTED_TEXT_COLOR, ha="center", va="center")


def draw_legend(ax, geometry: PageGeometry, scale):
    """Bucket swatches in the top-right corner of the header."""
    swatch = 12
    x = geometry.width_px - geometry.margin_px - 5 * (swatch + 58)
    y = geometry.margin_px + 4
    for bucket, color in scale.legend():
        ax.add_patch(Rectangle((x, y), swatch, swatch, facecolor=color,
                               edgecolor=GRID_COLOR, linewidth=0.5))
        ax.text(x + swatch + 4, y + swatch / 2, bucket.name.title(),
                fontsize=7, va="center", ha="left", color=HEADER_TEXT_COLOR)
        x += swatch + 58


def _grid_origin(geometry: PageGeometry):
    x0 = geometry.margin_px + geometry.row_label_px
    y0 = geometry.margin_px + geometry.header_px + geometry.column_header_px
    return x0, y0


def _draw_axes_labels(ax, geometry: PageGeometry, adapter: ChartAdapter):
    """Row labels down the left, rotated column labels across the top."""
    x0, y0 = _grid_origin(geometry)
    rh, cw = geometry.row_height_px, geometry.column_width_px
    for i, r in enumerate(adapter.rows):
        ax.text(x0 - 6, y0 + (i + 0.5) * rh, _fit(row_label(r), geometry.row_label_px - 10),
                fontsize=8, ha="right", va="center", color=HEADER_TEXT_COLOR)
    for j, c in enumerate(adapter.columns):
        ax.text(x0 + (j + 0.5) * cw, y0 - 6, adapter.column_label(c),
                fontsize=8, rotation=45, ha="left", va="bottom",
                rotation_mode="anchor", color=HEADER_TEXT_COLOR)


def draw_heatmap(ax, geometry: PageGeometry, adapter: ChartAdapter):
    """Coloured cells with their counts; zero cells stay white and blank."""
    x0, y0 = _grid_origin(geometry)
    rh, cw = geometry.row_height_px, geometry.column_width_px
    n_cols = len(adapter.columns)
    for k, cell in enumerate(adapter.to_heatmap_cells()):
        i, j = divmod(k, n_cols)
        x, y = x0 + j * cw, y0 + i * rh
        ax.add_patch(Rectangle((x, y), cw, rh, facecolor=cell.color,
                               edgecolor=GRID_COLOR, linewidth=0.5))
        if cell.value > 0:
            ax.text(x + cw / 2, y + rh / 2, str(cell.value), fontsize=8,
                    ha="center", va="center", color=cell.text_color)
    _draw_axes_labels(ax, geometry, adapter)


def draw_bubbles(ax, geometry: PageGeometry, adapter: ChartAdapter):
    """One circle per non-zero cell, radius from the ScaleEngine."""
    x0, y0 = _grid_origin(geometry)
    rh, cw = geometry.row_height_px, geometry.column_width_px
    n_rows, n_cols = len(adapter.rows), len(adapter.columns)

    ax.hlines([y0 + (i + 0.5) * rh for i in range(n_rows)], x0, x0 + n_cols * cw,
              colors=GRID_COLOR, linewidth=0.5)
    ax.vlines([x0 + (j + 0.5) * cw for j in range(n_cols)], y0, y0 + n_rows * rh,
              colors=GRID_COLOR, linewidth=0.5)

    row_pos = {r.name: i for i, r in enumerate(adapter.rows)}
    col_pos = {c: j for j, c in enumerate(adapter.columns)}
    max_size = adapter.view.scale.max_size
    for p in adapter.to_bubble_points():
        cx = x0 + (col_pos[p.column] + 0.5) * cw
        cy = y0 + (row_pos[p.row] + 0.5) * rh
        ax.add_patch(Circle((cx, cy), bubble_radius(p.size, max_size, geometry),
                            facecolor=p.color, edgecolor=HEADER_TEXT_COLOR,
                            linewidth=0.3, alpha=0.9))
    _draw_axes_labels(ax, geometry, adapter)


def bubble_radius(size: float, max_size: float, geometry: PageGeometry) -> float:
    """Bubble size rescaled so the largest bubble fills half a cell.

    Proportional, so the drawn radii keep the ScaleEngine's ordering.
    """
    cell_radius = max(min(geometry.row_height_px, geometry.column_width_px), 2) / 2
    return cell_radius * min(size, max_size) / max_size


def draw_empty(ax, geometry: PageGeometry, message: str = NO_DATA_MESSAGE):
    ax.text(geometry.width_px / 2, geometry.height_px / 2, message,
            fontsize=14, color=MUTED_TEXT_COLOR, ha="center", va="center")


def draw_block(ax, geometry: PageGeometry, view, block: Optional[PageBlock], chart: str = "heatmap"):
    """Draw the grid part of one page: a chart, or the empty-state message."""
    if chart not in CHART_KINDS:
        raise ValueError(f"Unknown chart kind {chart!r}; expected one of {CHART_KINDS}")
    if view.is_empty or block is None or block.is_empty:
        draw_empty(ax, geometry, view.empty_message)
        return
    logger.debug("Drawing %s page %d of %d", chart, block.page_number, block.total_pages)
    adapter = ChartAdapter(view, block.rows, block.columns)
    if chart == "bubble":
        draw_bubbles(ax, geometry, adapter)
    else:
        draw_heatmap(ax, geometry, adapter)
