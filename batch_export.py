"""
Batch Export Module
===================
Exports several data types of one subject, in several formats, in one
operation. Produces a ZIP file with one folder per format.

Command line:
    python batch_export.py P-001.json --formats xlsx pdf --out-dir exports/
"""

import os
import sys
import logging
import zipfile
import argparse
from io import BytesIO
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from base_exporter import BaseExporter
from config import CHART_KINDS, COLOR_THEMES, DATA_TYPE_ORDER, DEFAULT_CHART, EXPORT_FORMATS
from document_export import DocumentExporter
from image_export import ImageExporter
from pivot_loader import LoadResult, load_pivot_json
from settings import RenderSettings, load_settings
from spreadsheet_export import SpreadsheetExporter
from view_builder import MatrixView, ViewBuilder

logger = logging.getLogger("MatrixViewer.BatchExport")

FORMAT_FOLDERS = {
    "xlsx": "Spreadsheets",
    "pdf": "Documents",
    "png": "Images",
}


class BatchExporter:
    """Builds one view per data type and runs every selected exporter on it.

    Failures of one data type or format are logged and collected in
    ``failures``; the remaining exports still run.
    """

    def __init__(self, settings: Optional[RenderSettings] = None, chart: str = DEFAULT_CHART):
        self.settings = settings or RenderSettings()
        self.builder = ViewBuilder(self.settings)
        self.exporters: Dict[str, BaseExporter] = {
            "xlsx": SpreadsheetExporter(self.settings),
            "pdf": DocumentExporter(self.settings, chart=chart),
            "png": ImageExporter(self.settings, chart=chart),
        }
        self.failures: List[Tuple[str, str, str]] = []

    def build_views(self, loaded: Dict[str, LoadResult], subject: str = "",
                    compact: bool = False) -> List[MatrixView]:
        views = []
        for data_type in DATA_TYPE_ORDER:
            if data_type not in loaded:
                continue
            result = loaded[data_type]
            try:
                views.append(self.builder.build(result.matrix, data_type,
                                                subject or result.subject, compact=compact))
            except ValueError as e:
                logger.error("Cannot build %s view: %s", data_type, e)
                self.failures.append((data_type, "view", str(e)))
        return views

    def _generate_all(self, views: Sequence[MatrixView], formats: Sequence[str],
                      generated_at: datetime):
        """Generate all selected exports. Returns list of (folder, filename, bytes)."""
        results = []
        for fmt in formats:
            exporter = self.exporters[fmt]
            for view in views:
                try:
                    data = exporter.export_view(view, generated_at=generated_at)
                    results.append((FORMAT_FOLDERS[fmt], exporter.filename(view, generated_at), data))
                except Exception as e:
                    logger.error("%s export of %s failed: %s", fmt, view.data_type, e)
                    self.failures.append((view.data_type, fmt, str(e)))
        return results

    def export_zip_bytes(self, views: Sequence[MatrixView], formats: Sequence[str] = EXPORT_FORMATS,
                         generated_at: Optional[datetime] = None) -> Tuple[bytes, int]:
        """ZIP of every view in every format. Returns (zip_bytes, file_count)."""
        unknown = [f for f in formats if f not in self.exporters]
        if unknown:
            raise ValueError(f"Unknown export format(s): {', '.join(unknown)}")
        generated_at = generated_at or datetime.now()

        results = self._generate_all(views, formats, generated_at)
        zip_buffer = BytesIO()
        with zipfile.ZipFile(zip_buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
            for folder, filename, data in results:
                arc_path = f"{folder}/{filename}" if folder else filename
                zf.writestr(BaseExporter.zip_entry(arc_path), data)
        return zip_buffer.getvalue(), len(results)

    def export_zip(self, views: Sequence[MatrixView], out_dir: str, subject: str = "",
                   formats: Sequence[str] = EXPORT_FORMATS,
                   generated_at: Optional[datetime] = None) -> str:
        """Write the batch ZIP into *out_dir*. Returns its path.

        Raises ExportIOError when the ZIP cannot be written.
        """
        generated_at = generated_at or datetime.now()
        data, n_files = self.export_zip_bytes(views, formats, generated_at)
        subject = subject or (views[0].subject if views else "")
        zip_path = os.path.join(out_dir, BaseExporter.batch_filename(subject, generated_at))
        BaseExporter.save_bytes(data, zip_path)
        logger.info("Batch export: %d files -> %s", n_files, zip_path)
        return zip_path


# =============================================================================
# Command line
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export pivot matrices to spreadsheets, documents and images.")
    parser.add_argument("input", help="Pivot JSON file (single matrix or bundle)")
    parser.add_argument("--subject", default=None, help="Subject id used in filenames")
    parser.add_argument("--data-type", default=None, choices=DATA_TYPE_ORDER,
                        help="Data type of a single-matrix file")
    parser.add_argument("--formats", nargs="+", default=list(EXPORT_FORMATS), choices=EXPORT_FORMATS)
    parser.add_argument("--chart", default=DEFAULT_CHART, choices=CHART_KINDS)
    parser.add_argument("--theme", default=None, choices=sorted(COLOR_THEMES))
    parser.add_argument("--compact", action="store_true", help="Top rows only")
    parser.add_argument("--out-dir", default=".", help="Output folder")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    settings = load_settings()
    if args.theme:
        settings.theme = args.theme

    try:
        loaded = load_pivot_json(args.input, data_type=args.data_type, subject=args.subject)
    except (OSError, ValueError) as e:
        logger.error("Cannot load %s: %s", args.input, e)
        return 2

    batch = BatchExporter(settings, chart=args.chart)
    views = batch.build_views(loaded, subject=args.subject or "", compact=args.compact)
    try:
        zip_path = batch.export_zip(views, args.out_dir, subject=args.subject or "",
                                    formats=args.formats)
    except Exception as e:
        logger.error("Batch export failed: %s", e)
        return 1

    print(zip_path)
    for data_type, fmt, reason in batch.failures:
        print(f"FAILED {data_type} {fmt}: {reason}", file=sys.stderr)
    return 1 if batch.failures else 0


if __name__ == "__main__":
    sys.exit(main())
