"""Export Dialog — configuration UI for matrix exports (spreadsheet, document, image)."""

import tkinter as tk
from tkinter import ttk, messagebox, filedialog
import logging
from datetime import datetime

from base_exporter import BaseExporter, ExportIOError
from batch_export import BatchExporter
from config import CHART_KINDS, COLOR_THEMES, DEFAULT_CHART
from document_export import DocumentExporter
from export_job import document_job
from image_export import ImageExporter
from spreadsheet_export import SpreadsheetExporter
from view_builder import ViewBuilder, data_type_name

logger = logging.getLogger(__name__)

FORMAT_CHOICES = [
    ("xlsx", "Excel (.xlsx)"),
    ("pdf", "PDF document (.pdf)"),
    ("png", "PNG image (.png)"),
    ("zip", "All formats (.zip)"),
]

FILE_TYPES = {
    "xlsx": [("Excel files", "*.xlsx")],
    "pdf": [("PDF files", "*.pdf")],
    "png": [("PNG images", "*.png")],
    "zip": [("ZIP files", "*.zip")],
}


class ExportDialog:
    """Matrix export configuration dialog.

    Args:
        root: parent tk widget
        views: MatrixViews available for export (one per data type)
        settings: RenderSettings shared with the screen views
    """

    def __init__(self, root, views, settings=None):
        self.root = root
        self.views = list(views)
        self.builder = ViewBuilder(settings)
        self.settings = self.builder.settings
        self._job = None
        self._status_var = None

    def show(self):
        """Show configuration dialog for matrix export."""
        if not self.views:
            messagebox.showwarning("No Data", "There is no matrix to export.")
            return

        win = tk.Toplevel(self.root)
        win.title("Export Matrix")
        win.geometry("460x560")
        win.configure(bg="#f4f4f4")

        # 1. Data Type Selection
        type_frame = tk.LabelFrame(win, text=" Data Types ", padx=10, pady=8, bg="#f4f4f4", font=("Segoe UI", 10, "bold"))
        type_frame.pack(fill=tk.X, padx=10, pady=(10, 5))

        self._type_vars = {}
        for view in self.views:
            var = tk.BooleanVar(value=True)
            self._type_vars[view.data_type] = var
            tk.Checkbutton(type_frame, text=f"{data_type_name(view.data_type)} ({view.row_count} rows)",
                           variable=var, bg="#f4f4f4", font=("Segoe UI", 9)).pack(anchor="w")

        # 2. Output Format
        fmt_frame = tk.LabelFrame(win, text=" Output Format ", padx=10, pady=8, bg="#f4f4f4", font=("Segoe UI", 10, "bold"))
        fmt_frame.pack(fill=tk.X, padx=10, pady=5)

        self._format_var = tk.StringVar(value="xlsx")
        for value, label in FORMAT_CHOICES:
            tk.Radiobutton(fmt_frame, text=label, variable=self._format_var,
                           value=value, bg="#f4f4f4", font=("Segoe UI", 9)).pack(anchor="w")

        # 3. Chart and Theme
        style_frame = tk.LabelFrame(win, text=" Appearance ", padx=10, pady=8, bg="#f4f4f4", font=("Segoe UI", 10, "bold"))
        style_frame.pack(fill=tk.X, padx=10, pady=5)

        self._chart_var = tk.StringVar(value=DEFAULT_CHART)
        for kind in CHART_KINDS:
            tk.Radiobutton(style_frame, text=kind.title(), variable=self._chart_var,
                           value=kind, bg="#f4f4f4", font=("Segoe UI", 9)).pack(anchor="w")

        self._theme_var = tk.StringVar(value=self.settings.theme)
        ttk.Combobox(style_frame, textvariable=self._theme_var, values=sorted(COLOR_THEMES),
                     state="readonly").pack(anchor="w", pady=(6, 0))

        # 4. Status, Generate and Cancel
        self._status_var = tk.StringVar(value="Select data types and a format, then click Export.")
        tk.Label(win, textvariable=self._status_var, bg="#f4f4f4",
                 font=("Segoe UI", 9, "italic"), fg="#555").pack(fill=tk.X, padx=10)

        btn_row = tk.Frame(win, bg="#f4f4f4")
        btn_row.pack(fill=tk.X, padx=10, pady=15)
        tk.Button(btn_row, text="Cancel Export", command=self._cancel,
                  bg="#e74c3c", fg="white", font=("Segoe UI", 9, "bold"), padx=8).pack(side=tk.LEFT)
        tk.Button(btn_row, text="Export ►", command=lambda: self._generate(win),
                  bg="#2c3e50", fg="white", font=("Segoe UI", 11, "bold"), padx=20, pady=6).pack(side=tk.RIGHT)

        win.focus_set()
        win.grab_set()

    # ------------------------------------------------------------------
    # Export orchestration
    # ------------------------------------------------------------------

    def _selected_views(self):
        theme = self._theme_var.get()
        return [self.builder.with_theme(v, theme) for v in self.views
                if self._type_vars[v.data_type].get()]

    def _set_status(self, text):
        if self._status_var is not None:
            self._status_var.set(text)

    def _save(self, data, path):
        """Write *data*; shows the failure and returns False when the write is refused."""
        try:
            BaseExporter.save_bytes(data, path)
        except ExportIOError as e:
            messagebox.showerror("Export Error", f"Export failed:\n{e}")
            self._set_status(f"✗ Export failed: {e.reason}")
            return False
        self._set_status(f"✓ Exported → {path}")
        return True

    def _generate(self, dialog):
        views = self._selected_views()
        if not views:
            messagebox.showwarning("No Selection", "Please select at least one data type.")
            return

        fmt = self._format_var.get()
        chart = self._chart_var.get()
        generated_at = datetime.now()

        if fmt == "pdf" and len(views) == 1:
            self._start_document_job(views[0], chart, generated_at)
            return

        try:
            dialog.config(cursor="wait")
            dialog.update()
            if fmt == "zip":
                batch = BatchExporter(self.settings, chart=chart)
                data, _ = batch.export_zip_bytes(views, generated_at=generated_at)
                initial = BaseExporter.batch_filename(views[0].subject, generated_at)
                ext = "zip"
            else:
                exporter = {
                    "xlsx": SpreadsheetExporter(self.settings),
                    "pdf": DocumentExporter(self.settings, chart=chart),
                    "png": ImageExporter(self.settings, chart=chart),
                }[fmt]
                data, ext, initial = exporter.generate_export(views, generated_at=generated_at)
                initial = initial or f"{exporter.safe_name(views[0].subject)}_{fmt}_export.zip"
        except Exception as e:
            logger.error("Matrix export failed: %s", e)
            messagebox.showerror("Export Error", f"Export failed:\n{e}")
            self._set_status(f"✗ Export failed: {e}")
            return
        finally:
            dialog.config(cursor="")

        save_path = filedialog.asksaveasfilename(
            defaultextension=f".{ext}",
            filetypes=FILE_TYPES[ext],
            initialfile=initial,
            title="Save Matrix Export"
        )
        if save_path and self._save(data, save_path):
            messagebox.showinfo("Success", f"Matrix exported to:\n{save_path}")
            dialog.destroy()

    def _start_document_job(self, view, chart, generated_at):
        save_path = filedialog.asksaveasfilename(
            defaultextension=".pdf",
            filetypes=FILE_TYPES["pdf"],
            initialfile=DocumentExporter.document_filename(view.subject, view.data_type),
            title="Save Matrix Document"
        )
        if not save_path:
            return

        def on_progress(done, total):
            self.root.after(0, lambda: self._set_status(f"Rendering page {done} of {total}..."))

        def on_done(job):
            self.root.after(0, self._on_job_done, job)

        self._job = document_job(view, save_path, generated_at=generated_at, chart=chart,
                                 on_progress=on_progress, on_done=on_done).start()
        self._set_status("Rendering document...")

    def _cancel(self):
        if self._job is not None and not self._job.done:
            self._job.cancel()
            self._set_status("Cancelling...")

    def _on_job_done(self, job):
        self._job = None
        if job.cancelled:
            self._set_status("Export cancelled; nothing was written.")
        elif job.error is not None:
            logger.error("Document export failed: %s", job.error)
            messagebox.showerror("Export Error", f"Export failed:\n{job.error}")
            self._set_status(f"✗ Export failed: {job.error}")
        else:
            self._set_status(f"✓ Exported → {job.result}")
            messagebox.showinfo("Success", f"Matrix exported to:\n{job.result}")
