"""
Spreadsheet Export
==================
Writes a MatrixView to a single-sheet .xlsx workbook.

Layout:
    A1        "Item"
    B1..      date labels (MM/DD/YY), chronological
    A2..      row labels exactly as on screen ("1. Fatigue (12)")
    B2..      counts, filled with the bucket colour of the shared ScaleEngine

The grid is assembled from page blocks so a tiled export writes the same
cells as an un-tiled one.
"""

import logging
import zipfile
from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.writer.excel import ExcelWriter

from base_exporter import BaseExporter
from chart_adapter import ChartAdapter, row_label
from layout_tiler import PageBlock, single_block
from view_builder import MatrixView

logger = logging.getLogger("MatrixViewer.SpreadsheetExport")

ITEM_HEADER = "Item"
LABEL_COLUMN_WIDTH = 42
DATE_COLUMN_WIDTH = 11

_thin = Side(style='thin', color="DDDDDD")
CELL_BORDER = Border(left=_thin, right=_thin, top=_thin, bottom=_thin)
HEADER_BORDER = Border(left=_thin, right=_thin, top=_thin, bottom=Side(style='medium'))


def _argb(hex_color):
    return hex_color.lstrip('#').upper()


def _write_block(ws, view: MatrixView, block: PageBlock):
    adapter = ChartAdapter(view, block.rows, block.columns)
    r0, c0 = block.row_range[0], block.col_range[0]

    for j, label in enumerate(block.column_labels):
        cell = ws.cell(row=1, column=c0 + j + 2, value=label)
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal='center', vertical='center', text_rotation=45)
        cell.border = HEADER_BORDER

    for i, ranked in enumerate(block.rows):
        excel_row = r0 + i + 2
        label_cell = ws.cell(row=excel_row, column=1, value=row_label(ranked))
        label_cell.alignment = Alignment(vertical='center')
        label_cell.border = CELL_BORDER
        for j, column in enumerate(block.columns):
            hm = adapter.cell(ranked, column)
            cell = ws.cell(row=excel_row, column=c0 + j + 2, value=hm.value)
            cell.fill = PatternFill(fill_type='solid', start_color=_argb(hm.color), end_color=_argb(hm.color))
            cell.font = Font(color=_argb(hm.text_color))
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = CELL_BORDER


def build_workbook(view: MatrixView, page_blocks: Optional[Sequence[PageBlock]] = None,
                   generated_at: Optional[datetime] = None) -> openpyxl.Workbook:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = BaseExporter.sanitize_sheet_name(view.title)
    if generated_at is not None:
        wb.properties.created = generated_at
        wb.properties.modified = generated_at

    if view.is_empty:
        ws.cell(row=1, column=1, value=view.empty_message).font = Font(italic=True)
        ws.column_dimensions['A'].width = LABEL_COLUMN_WIDTH
        return wb

    header = ws.cell(row=1, column=1, value=ITEM_HEADER)
    header.font = Font(bold=True)
    header.border = HEADER_BORDER

    blocks = list(page_blocks) if page_blocks else [single_block(view)]
    for block in blocks:
        _write_block(ws, view, block)

    ws.column_dimensions['A'].width = LABEL_COLUMN_WIDTH
    for j in range(view.column_count):
        ws.column_dimensions[get_column_letter(j + 2)].width = DATE_COLUMN_WIDTH
    ws.row_dimensions[1].height = 48
    ws.freeze_panes = "B2"
    return wb


def to_spreadsheet(view: MatrixView, page_blocks: Optional[Sequence[PageBlock]] = None,
                   generated_at: Optional[datetime] = None) -> bytes:
    """The view as .xlsx bytes."""
    wb = build_workbook(view, page_blocks, generated_at)
    output = BytesIO()
    # wb.save() would overwrite properties.modified with the current time
    ExcelWriter(wb, zipfile.ZipFile(output, "w", zipfile.ZIP_DEFLATED)).save()
    logger.debug("Spreadsheet for %s/%s: %d rows x %d columns",
                 view.subject, view.data_type, view.row_count, view.column_count)
    return BaseExporter.normalize_zip(output.getvalue())


class SpreadsheetExporter(BaseExporter):
    extension = "xlsx"

    def export_view(self, view, generated_at=None, page_blocks=None, **kwargs) -> bytes:
        return to_spreadsheet(view, page_blocks=page_blocks, generated_at=generated_at)

    def filename(self, view, generated_at):
        return self.spreadsheet_filename(view.subject, view.data_type, generated_at)
