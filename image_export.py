"""
Image Export
============
PNG of a whole MatrixView or of one page block.

The page is sized to the rows and columns it shows and drawn at
``scale`` x the layout density, so the raster stays sharp when zoomed.
Very large views are scaled down to stay under MAX_IMAGE_PX.
"""

import logging
from dataclasses import replace
from datetime import datetime
from io import BytesIO
from typing import Optional

import matplotlib
matplotlib.use("Agg")
from matplotlib.backends.backend_agg import FigureCanvasAgg

from base_exporter import BaseExporter
from config import DEFAULT_CHART, DEFAULT_IMAGE_SCALE, LAYOUT_DPI, MAX_IMAGE_PX
from document_export import render_page
from layout_tiler import PageBlock, PageGeometry, single_block
from view_builder import MatrixView

logger = logging.getLogger("MatrixViewer.ImageExport")

# Smallest page drawn, so the header and empty-state message always fit
MIN_IMAGE_WIDTH_PX = 640
MIN_IMAGE_HEIGHT_PX = 320


def fit_geometry(block: PageBlock, base: Optional[PageGeometry] = None) -> PageGeometry:
    """Geometry just large enough for *block*."""
    base = base or PageGeometry.for_document()
    n_rows = block.row_range[1] - block.row_range[0]
    n_cols = block.col_range[1] - block.col_range[0]
    width = 2 * base.margin_px + base.row_label_px + n_cols * base.column_width_px
    height = (2 * base.margin_px + base.header_px + base.footer_px
              + base.column_header_px + n_rows * base.row_height_px)
    return replace(base, width_px=max(width, MIN_IMAGE_WIDTH_PX),
                   height_px=max(height, MIN_IMAGE_HEIGHT_PX))


def effective_scale(geometry: PageGeometry, scale: float) -> float:
    """*scale*, reduced when the raster would exceed MAX_IMAGE_PX on a side."""
    if scale <= 0:
        raise ValueError(f"Image scale must be positive (got {scale})")
    largest = max(geometry.width_px, geometry.height_px) * scale
    if largest > MAX_IMAGE_PX:
        reduced = MAX_IMAGE_PX / max(geometry.width_px, geometry.height_px)
        logger.warning("Image would be %dpx wide; scale reduced from %.2f to %.2f",
                       int(largest), scale, reduced)
        return reduced
    return scale


def to_image(view: MatrixView, chart: str = DEFAULT_CHART, block: Optional[PageBlock] = None,
             scale: float = DEFAULT_IMAGE_SCALE, generated_at: Optional[datetime] = None,
             base_geometry: Optional[PageGeometry] = None) -> bytes:
    """PNG bytes of the full view, or of *block* when given."""
    block = block or single_block(view)
    geometry = fit_geometry(block, base_geometry)
    dpi = LAYOUT_DPI * effective_scale(geometry, scale)

    fig = render_page(view, block, geometry, chart, generated_at, dpi=dpi)
    FigureCanvasAgg(fig)
    output = BytesIO()
    fig.savefig(output, format="png", dpi=dpi, facecolor="white")
    logger.debug("Image for %s/%s: %dx%d px at %.0f dpi", view.subject, view.data_type,
                 geometry.width_px, geometry.height_px, dpi)
    return output.getvalue()


class ImageExporter(BaseExporter):
    extension = "png"

    def __init__(self, settings=None, chart=DEFAULT_CHART):
        super().__init__(settings)
        self.chart = chart

    def export_view(self, view, generated_at=None, **kwargs) -> bytes:
        kwargs.setdefault("chart", self.chart)
        kwargs.setdefault("scale", self.settings.image_scale)
        kwargs.setdefault("base_geometry", PageGeometry.for_document(self.settings))
        return to_image(view, generated_at=generated_at or datetime.now(), **kwargs)

    def filename(self, view, generated_at):
        return self.image_filename(view.subject, view.data_type)
