"""
Document Export
===============
Multi-page landscape PDF of a MatrixView.

Every page is self-describing: title, subject, generation time, page
number and the row/column range it shows are printed in the header, the
block's own row and column labels are repeated, and a "Page X of Y" footer
closes the page. Cancellation is checked between pages; a cancelled export
produces no output.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Callable, List, Optional, Sequence

import matplotlib
matplotlib.use("Agg")
from matplotlib.backends.backend_pdf import PdfPages

from base_exporter import BaseExporter, ExportCancelled
from chart_adapter import row_label
from chart_renderer import draw_block, draw_footer, draw_header, draw_legend, new_page_figure
from config import DEFAULT_CHART, LAYOUT_DPI
from layout_tiler import PageBlock, PageGeometry, describe_range, tile_for_geometry
from view_builder import MatrixView

logger = logging.getLogger("MatrixViewer.DocumentExport")

PDF_METADATA = {"Creator": "Matrix Viewer", "CreationDate": None}


@dataclass(frozen=True)
class PageModel:
    """The text content of one exported page."""
    title: str
    subject_line: str
    generated_line: str
    page_label: str
    range_text: str
    row_labels: List[str]
    column_labels: List[str]
    is_empty: bool

    @property
    def header_lines(self) -> List[str]:
        return [line for line in (self.subject_line, self.generated_line,
                                  f"{self.page_label}  ·  {self.range_text}") if line]

    @property
    def footer(self) -> str:
        return self.page_label


def build_page_model(view: MatrixView, block: PageBlock, generated_at: Optional[datetime] = None) -> PageModel:
    return PageModel(
        title=view.title,
        subject_line=f"Subject: {view.subject}" if view.subject else "",
        generated_line=f"Generated {BaseExporter.format_timestamp(generated_at)}" if generated_at else "",
        page_label=f"Page {block.page_number} of {block.total_pages}",
        range_text=describe_range(block),
        row_labels=[row_label(r) for r in block.rows],
        column_labels=list(block.column_labels),
        is_empty=view.is_empty or block.is_empty,
    )


def render_page(view: MatrixView, block: PageBlock, geometry: PageGeometry,
                chart: str = DEFAULT_CHART, generated_at: Optional[datetime] = None,
                dpi: float = LAYOUT_DPI):
    """One page as a matplotlib Figure."""
    model = build_page_model(view, block, generated_at)
    fig, ax = new_page_figure(geometry, dpi)
    draw_header(ax, geometry, model.title, model.header_lines)
    if not model.is_empty:
        draw_legend(ax, geometry, view.scale)
    draw_block(ax, geometry, view, block, chart)
    draw_footer(ax, geometry, model.footer)
    return fig


def to_document(view: MatrixView, page_blocks: Optional[Sequence[PageBlock]] = None,
                chart: str = DEFAULT_CHART, generated_at: Optional[datetime] = None,
                geometry: Optional[PageGeometry] = None, cancel_event=None,
                progress_callback: Optional[Callable[[int, int], None]] = None) -> bytes:
    """Render *view* as PDF bytes, one page per block.

    Args:
        page_blocks: pre-tiled blocks; tiled for *geometry* when omitted
        cancel_event: ``threading.Event``; checked before each page
        progress_callback: called as ``(pages_done, total_pages)``

    Raises:
        ExportCancelled: *cancel_event* was set before the last page
    """
    geometry = geometry or PageGeometry.for_document()
    blocks = list(page_blocks) if page_blocks else tile_for_geometry(view, geometry)
    total = len(blocks)

    buffer = BytesIO()
    with PdfPages(buffer, metadata=PDF_METADATA) as pdf:
        for done, block in enumerate(blocks):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Document export cancelled after %d of %d page(s)", done, total)
                raise ExportCancelled(f"Cancelled after {done} of {total} page(s)")
            fig = render_page(view, block, geometry, chart, generated_at)
            pdf.savefig(fig)
            if progress_callback:
                progress_callback(done + 1, total)

    logger.info("Document for %s/%s: %d page(s)", view.subject, view.data_type, total)
    return buffer.getvalue()


def write_document(view: MatrixView, path, **kwargs) -> str:
    """Render and save atomically; see ``to_document`` for *kwargs*.

    Pages are stamped with the current time unless *generated_at* is given.
    """
    kwargs["generated_at"] = kwargs.get("generated_at") or datetime.now()
    return BaseExporter.save_bytes(to_document(view, **kwargs), path)


class DocumentExporter(BaseExporter):
    extension = "pdf"

    def __init__(self, settings=None, chart=DEFAULT_CHART):
        super().__init__(settings)
        self.chart = chart

    def export_view(self, view, generated_at=None, **kwargs) -> bytes:
        kwargs.setdefault("chart", self.chart)
        kwargs.setdefault("geometry", PageGeometry.for_document(self.settings))
        return to_document(view, generated_at=generated_at or datetime.now(), **kwargs)

    def filename(self, view, generated_at):
        return self.document_filename(view.subject, view.data_type)
