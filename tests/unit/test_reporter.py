"""Unit tests for report models and the Reporter."""

from __future__ import annotations

import json

import pytest

from s3checksums.core.reporter import Reporter
from s3checksums.models.classification import ClassificationOutcome, OrphanSets
from s3checksums.models.plan import (
    ExecutionResult,
    ExecutionSummary,
    ItemOutcome,
    ItemResult,
    PlanItem,
    ProcessingPlan,
    RecordAction,
)
from s3checksums.models.reports import DebugReport, ReconcileReport
from s3checksums.models.sync import SyncResult, SyncStatus


def _plan() -> ProcessingPlan:
    return ProcessingPlan(
        items=(
            PlanItem(key="dist/m.zip", classification=ClassificationOutcome.MISSING,
                     action=RecordAction.GENERATE),
            PlanItem(key="dist/c.zip", classification=ClassificationOutcome.CORRUPT,
                     action=RecordAction.FIX),
        ),
        already_valid=3,
        missing=1,
        corrupt=1,
    )


class TestReconcileReport:
    def test_from_plan_dry_run(self):
        report = ReconcileReport.from_plan(
            _plan(),
            dry_run=True,
            orphans=OrphanSets(orphaned_records=("dist/gone.zip",)),
            sync=SyncResult(strategy="mtime", status=SyncStatus.PARTIAL, failed=("dist/x.zip",)),
            bucket="b",
            prefix="dist/",
        )
        assert report.mode == "dry-run"
        assert (report.missing, report.empty, report.corrupt) == (1, 0, 1)
        assert report.total_to_process == 2
        assert report.already_valid == 3
        assert report.orphaned_records == 1
        assert report.orphans.records == ["dist/gone.zip"]
        assert report.orphans_checked is True
        assert report.sync is not None and report.sync.status == "partial"
        assert report.sync.failed == ["dist/x.zip"]
        assert [i.outcome for i in report.items] == [None, None]
        assert report.execution is None

    def test_unchecked_orphans_are_distinguishable_from_none_found(self):
        unchecked = ReconcileReport.from_plan(_plan(), dry_run=True)
        checked = ReconcileReport.from_plan(_plan(), dry_run=True, orphans=OrphanSets())
        assert unchecked.orphans_checked is False
        assert checked.orphans_checked is True
        assert unchecked.orphaned_records == checked.orphaned_records == 0

    def test_with_execution_fills_outcomes(self):
        report = ReconcileReport.from_plan(_plan(), dry_run=False)
        execution = ExecutionResult(
            summary=ExecutionSummary(generated=1, failed=1, batches=1),
            results=(
                ItemResult(key="dist/m.zip", action=RecordAction.GENERATE, outcome=ItemOutcome.OK),
                ItemResult(key="dist/c.zip", action=RecordAction.FIX, outcome=ItemOutcome.FAILED),
            ),
            batch_sizes=(2,),
        )
        assert execution.outcomes() == {
            "dist/m.zip": ItemOutcome.OK,
            "dist/c.zip": ItemOutcome.FAILED,
        }
        updated = report.with_execution(execution)
        assert updated.mode == "run"
        assert [i.outcome for i in updated.items] == [ItemOutcome.OK, ItemOutcome.FAILED]
        assert updated.execution == execution.summary
        # original is unchanged (frozen)
        assert report.items[0].outcome is None


class TestReporter:
    def test_write_and_load(self, tmp_path):
        reporter = Reporter(tmp_path / "results")
        report = ReconcileReport.from_plan(_plan(), dry_run=True, bucket="b", prefix="dist/")

        path = reporter.write(report)

        assert path == tmp_path / "results" / "report.json"
        data = json.loads(path.read_text())
        assert data["mode"] == "dry-run"
        assert data["missing"] == 1
        assert data["items"][0] == {
            "key": "dist/m.zip",
            "action": "generate",
            "classification": "missing",
            "outcome": None,
        }
        assert reporter.load() == report
        assert not list((tmp_path / "results").glob("*.tmp"))

    def test_write_debug(self, tmp_path):
        reporter = Reporter(tmp_path / "results")
        path = reporter.write_debug(DebugReport(prefix="dist/", limit=30))
        assert path.name == "debug_report.json"
        assert json.loads(path.read_text())["limit"] == 30

    def test_load_missing_report(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Reporter(tmp_path / "results").load()
