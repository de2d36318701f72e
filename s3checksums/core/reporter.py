"""Reporter: persists run and debug reports as JSON.

Layout: ``{results_dir}/report.json`` and ``{results_dir}/debug_report.json``.
Writes go through a temp file and ``os.replace`` so a reader never sees a
half-written report.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel

from s3checksums.models.reports import DebugReport, ReconcileReport

logger = logging.getLogger(__name__)

REPORT_FILENAME = "report.json"
DEBUG_REPORT_FILENAME = "debug_report.json"


class Reporter:
    """Writes reports under a results directory.

    Parameters
    ----------
    results_dir:
        Directory for report files (created on first write).
    """

    def __init__(self, results_dir: Path) -> None:
        self._dir = Path(results_dir)

    @property
    def report_path(self) -> Path:
        return self._dir / REPORT_FILENAME

    @property
    def debug_report_path(self) -> Path:
        return self._dir / DEBUG_REPORT_FILENAME

    def _write(self, path: Path, model: BaseModel) -> Path:
        self._dir.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(model.model_dump_json(indent=2) + "\n", encoding="utf-8")
        os.replace(tmp, path)
        logger.info("Report written to %s", path)
        return path

    def write(self, report: ReconcileReport) -> Path:
        return self._write(self.report_path, report)

    def write_debug(self, report: DebugReport) -> Path:
        return self._write(self.debug_report_path, report)

    def load(self) -> ReconcileReport:
        """Read the last run report back."""
        if not self.report_path.exists():
            raise FileNotFoundError(f"Report not found: {self.report_path}")
        return ReconcileReport.model_validate_json(self.report_path.read_text(encoding="utf-8"))
