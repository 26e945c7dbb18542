"""Tests for export_job — background exports with progress and cancellation."""
import os
import tempfile
import threading
import unittest

from base_exporter import ExportCancelled, ExportIOError
from export_job import ExportJob, document_job, exporter_job
from layout_tiler import tile
from pivot_matrix import PivotMatrix
from spreadsheet_export import SpreadsheetExporter
from view_builder import ViewBuilder


def _view(n_rows=6, n_cols=3):
    rows = [f"Item {i}" for i in range(n_rows)]
    columns = [f"01/{d:02d}/24" for d in range(1, n_cols + 1)]
    data = {r: {c: i + j + 1 for j, c in enumerate(columns)} for i, r in enumerate(rows)}
    matrix = PivotMatrix.from_payload({"rows": rows, "columns": columns, "data": data})
    return ViewBuilder().build(matrix, "symptom", "P-001")


class TestExportJob(unittest.TestCase):
    def test_result(self):
        job = ExportJob(lambda cancel, progress: 42).start()
        self.assertTrue(job.join(10))
        self.assertTrue(job.succeeded)
        self.assertEqual(job.result, 42)

    def test_error_captured(self):
        def task(cancel, progress):
            raise RuntimeError("disk on fire")

        with self.assertLogs("MatrixViewer.ExportJob", level="ERROR"):
            job = ExportJob(task).start()
            job.join(10)
        self.assertIsInstance(job.error, RuntimeError)
        self.assertFalse(job.succeeded)

    def test_cancel(self):
        started = threading.Event()

        def task(cancel, progress):
            started.set()
            cancel.wait(10)
            raise ExportCancelled("stopped")

        job = ExportJob(task).start()
        started.wait(10)
        job.cancel()
        self.assertTrue(job.join(10))
        self.assertTrue(job.cancelled)
        self.assertIsNone(job.error)

    def test_progress_and_done_callbacks(self):
        seen = []
        finished = []

        def task(cancel, progress):
            progress(1, 2)
            progress(2, 2)
            return "ok"

        job = ExportJob(task, on_progress=lambda d, t: seen.append((d, t)),
                        on_done=finished.append).start()
        job.join(10)
        self.assertEqual(seen, [(1, 2), (2, 2)])
        self.assertEqual(job.progress, (2, 2))
        self.assertEqual(finished, [job])


class TestDocumentJob(unittest.TestCase):
    def test_writes_pdf(self):
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "out.pdf")
            job = document_job(_view(), path).start()
            self.assertTrue(job.join(60))
            self.assertTrue(job.succeeded, job.error)
            self.assertEqual(job.result, path)
            self.assertTrue(os.path.isfile(path))

    def test_cancelled_before_first_page(self):
        view = _view()
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "out.pdf")
            job = document_job(view, path, page_blocks=tile(view, 2, 3))
            job.cancel()
            job.start().join(60)
            self.assertTrue(job.cancelled)
            self.assertFalse(os.path.exists(path))

    def test_refused_write_reported(self):
        with self.assertLogs("MatrixViewer.ExportJob", level="ERROR"):
            job = document_job(_view(), "/nonexistent/dir/out.pdf").start()
            job.join(60)
        self.assertIsInstance(job.error, ExportIOError)


class TestExporterJob(unittest.TestCase):
    def test_spreadsheet(self):
        with tempfile.TemporaryDirectory() as d:
            job = exporter_job(SpreadsheetExporter(), _view(), d).start()
            job.join(60)
            self.assertTrue(job.succeeded, job.error)
            self.assertTrue(job.result.endswith(".xlsx"))
            self.assertEqual(job.progress, (1, 1))


if __name__ == "__main__":
    unittest.main()
