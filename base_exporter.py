"""Base Exporter — shared helpers for the spreadsheet, image and document exporters.

Consolidates the patterns every export path needs:
  - Filename and sheet-name sanitizing
  - Export filenames per format
  - Deterministic ZIP entries
  - Atomic writes (no partial file under the final name)
  - Single/multi-view export orchestration (one file or zip)
"""

import os
import re
import logging
import zipfile
from datetime import datetime
from io import BytesIO
from typing import Iterable, Optional

from config import SHEET_NAME_ILLEGAL_CHARS, SHEET_NAME_MAX_LEN
from settings import RenderSettings

logger = logging.getLogger(__name__)

# Earliest timestamp a ZIP entry can hold; used so identical exports are byte-identical
FIXED_ZIP_DATE = (1980, 1, 1, 0, 0, 0)

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|\s]+')


class ExportIOError(Exception):
    """The export could not be written to its destination."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")


class ExportCancelled(Exception):
    """The user cancelled a running export."""


class BaseExporter:
    """Shared export logic for all matrix exporters.

    Subclasses set ``extension`` and implement ``export_view(view, **kwargs)``
    returning bytes and ``filename(view, generated_at)``.
    """

    extension = ""

    def __init__(self, settings: Optional[RenderSettings] = None):
        self.settings = settings or RenderSettings()

    # ------------------------------------------------------------------
    # Naming
    # ------------------------------------------------------------------

    @staticmethod
    def safe_name(value, fallback="export"):
        """Filesystem-safe form of a subject id or data type."""
        s = _UNSAFE_FILENAME_RE.sub("-", str(value if value is not None else "")).strip("-.")
        return s or fallback

    @staticmethod
    def sanitize_sheet_name(name, fallback="Sheet"):
        """Excel sheet name: no ``[]:*?/\\`` and at most 31 characters."""
        s = "".join(ch for ch in str(name) if ch not in SHEET_NAME_ILLEGAL_CHARS)
        s = s.strip().strip("'")[:SHEET_NAME_MAX_LEN].strip()
        return s or fallback

    @staticmethod
    def spreadsheet_filename(subject, data_type, on_date):
        return f"{BaseExporter.safe_name(subject)}_{BaseExporter.safe_name(data_type)}_{on_date:%Y-%m-%d}.xlsx"

    @staticmethod
    def document_filename(subject, data_type):
        return f"{BaseExporter.safe_name(subject)}_{BaseExporter.safe_name(data_type)}_visualization.pdf"

    @staticmethod
    def image_filename(subject, data_type):
        return f"{BaseExporter.safe_name(subject)}_{BaseExporter.safe_name(data_type)}.png"

    @staticmethod
    def batch_filename(subject, generated_at):
        return f"{BaseExporter.safe_name(subject)}_matrix_export_{generated_at:%Y%m%d_%H%M%S}.zip"

    @staticmethod
    def format_timestamp(generated_at):
        """Timestamp as printed on exported pages."""
        return generated_at.strftime("%Y-%m-%d %H:%M")

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @staticmethod
    def zip_entry(arcname):
        """ZipInfo with a fixed timestamp."""
        info = zipfile.ZipInfo(arcname, date_time=FIXED_ZIP_DATE)
        info.compress_type = zipfile.ZIP_DEFLATED
        info.external_attr = 0o644 << 16
        return info

    @staticmethod
    def normalize_zip(data: bytes) -> bytes:
        """Rewrite a zip container (e.g. an .xlsx) with fixed entry timestamps."""
        out = BytesIO()
        with zipfile.ZipFile(BytesIO(data)) as src, zipfile.ZipFile(out, "w") as dst:
            for item in src.infolist():
                dst.writestr(BaseExporter.zip_entry(item.filename), src.read(item.filename))
        return out.getvalue()

    @staticmethod
    def save_bytes(data: bytes, path) -> str:
        """Write *data* to *path* atomically.

        The bytes go to ``<path>.part`` first and are renamed over *path*
        only once complete; on failure the temp file is removed.

        Raises ExportIOError.
        """
        path = os.fspath(path)
        tmp_path = path + ".part"
        try:
            with open(tmp_path, "wb") as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Export write failed for %s: %s", path, e)
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError as cleanup_error:
                    logger.warning("Could not remove partial file %s: %s", tmp_path, cleanup_error)
            raise ExportIOError(path, e.strerror or str(e)) from e
        logger.info("Exported %d bytes -> %s", len(data), path)
        return path

    # ------------------------------------------------------------------
    # Export orchestration
    # ------------------------------------------------------------------

    def export_view(self, view, **kwargs) -> bytes:
        raise NotImplementedError

    def filename(self, view, generated_at: datetime) -> str:
        raise NotImplementedError

    def export_to_file(self, view, out_dir, generated_at: Optional[datetime] = None, **kwargs) -> str:
        """Export *view* into *out_dir* under its standard filename."""
        generated_at = generated_at or datetime.now()
        data = self.export_view(view, generated_at=generated_at, **kwargs)
        return self.save_bytes(data, os.path.join(out_dir, self.filename(view, generated_at)))

    def generate_export(self, views: Iterable, generated_at: Optional[datetime] = None, **kwargs):
        """Generate export — single file for one view, ZIP for multiple.

        Returns tuple ``(bytes_data, extension_str, filename_or_none)``.
        """
        views = list(views)
        generated_at = generated_at or datetime.now()

        if len(views) == 1:
            data = self.export_view(views[0], generated_at=generated_at, **kwargs)
            return (data, self.extension, self.filename(views[0], generated_at))

        zip_buffer = BytesIO()
        with zipfile.ZipFile(zip_buffer, 'w', zipfile.ZIP_DEFLATED) as zf:
            for view in views:
                data = self.export_view(view, generated_at=generated_at, **kwargs)
                zf.writestr(self.zip_entry(self.filename(view, generated_at)), data)
        return (zip_buffer.getvalue(), 'zip', None)
