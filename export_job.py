"""
Export Job
==========
Runs an export off the calling thread so the UI stays responsive.

A job wraps a task ``task(cancel_event, progress_callback) -> result``.
Callers poll ``done`` / ``result`` / ``error`` or pass ``on_done``, which
runs on the worker thread (GUI callers re-schedule it with ``after``).
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from base_exporter import BaseExporter, ExportCancelled
from document_export import to_document

logger = logging.getLogger("MatrixViewer.ExportJob")


class ExportJob:
    """One cancellable background export."""

    def __init__(self, task: Callable, name: str = "export",
                 on_progress: Optional[Callable[[int, int], None]] = None,
                 on_done: Optional[Callable[["ExportJob"], None]] = None):
        self.name = name
        self._task = task
        self._on_progress = on_progress
        self._on_done = on_done
        self._cancel_event = threading.Event()
        self._finished = threading.Event()
        self._thread = threading.Thread(target=self._run, name=f"ExportJob-{name}", daemon=True)
        self.result = None
        self.error: Optional[BaseException] = None
        self.cancelled = False
        self.progress = (0, 0)

    def start(self) -> "ExportJob":
        logger.info("Starting export job %s", self.name)
        self._thread.start()
        return self

    def cancel(self):
        """Request cancellation; honoured at the next page boundary."""
        self._cancel_event.set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the job. Returns True when it has finished."""
        return self._finished.wait(timeout)

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    @property
    def succeeded(self) -> bool:
        return self.done and not self.cancelled and self.error is None

    def _report_progress(self, done, total):
        self.progress = (done, total)
        if self._on_progress:
            self._on_progress(done, total)

    def _run(self):
        try:
            self.result = self._task(self._cancel_event, self._report_progress)
            logger.info("Export job %s finished", self.name)
        except ExportCancelled as e:
            self.cancelled = True
            logger.info("Export job %s cancelled: %s", self.name, e)
        except Exception as e:
            self.error = e
            logger.error("Export job %s failed: %s", self.name, e)
        finally:
            self._finished.set()
            if self._on_done:
                self._on_done(self)


def document_job(view, path, generated_at: Optional[datetime] = None, **kwargs) -> ExportJob:
    """Job rendering *view* to a PDF at *path*; the result is the saved path.

    Nothing is written when the job is cancelled or fails.
    """
    generated_at = generated_at or datetime.now()
    job_kwargs = {k: kwargs.pop(k) for k in ("on_progress", "on_done") if k in kwargs}

    def task(cancel_event, progress_callback):
        data = to_document(view, generated_at=generated_at, cancel_event=cancel_event,
                           progress_callback=progress_callback, **kwargs)
        return BaseExporter.save_bytes(data, path)

    return ExportJob(task, name=f"{view.data_type}-pdf", **job_kwargs)


def exporter_job(exporter: BaseExporter, view, out_dir, generated_at: Optional[datetime] = None,
                 **job_kwargs) -> ExportJob:
    """Job running ``exporter.export_to_file`` for formats without pages."""
    generated_at = generated_at or datetime.now()

    def task(cancel_event, progress_callback):
        if cancel_event.is_set():
            raise ExportCancelled("Cancelled before start")
        path = exporter.export_to_file(view, out_dir, generated_at=generated_at)
        progress_callback(1, 1)
        return path

    return ExportJob(task, name=f"{view.data_type}-{exporter.extension}", **job_kwargs)
