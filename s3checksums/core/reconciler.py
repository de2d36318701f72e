"""Reconciler: the central coordinator for a checksum reconciliation run.

Wires the inventory builder, mirror synchronizer, classifier, orphan
detector, plan builder, batch executor and reporter together from a single
immutable ``ReconcilerSettings``.

Control flow::

    preflight -> inventories -> mirror sync -> (debug) -> classify
      -> orphans -> plan -> report -> stop if dry-run -> execute -> report
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from enum import IntEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from s3checksums.config import ReconcilerSettings
from s3checksums.core.classifier import Classifier
from s3checksums.core.debug import DebugComparator
from s3checksums.core.executor import BatchExecutor
from s3checksums.core.hasher import Hasher
from s3checksums.core.inventory import InventoryBuilder
from s3checksums.core.layout import RecordLayout
from s3checksums.core.mirror import LocalMirror, MirrorSynchronizer, strategy_for
from s3checksums.core.orphans import detect_orphans, log_orphans
from s3checksums.core.planner import build_plan
from s3checksums.core.preflight import run_preflight
from s3checksums.core.rclone import RcloneSynchronizer
from s3checksums.core.reporter import Reporter
from s3checksums.core.retry import RetryPolicy
from s3checksums.models.classification import Classification, OrphanSets
from s3checksums.models.plan import ExecutionResult, ProcessingPlan
from s3checksums.models.reports import DebugReport, ReconcileReport
from s3checksums.models.sync import SyncResult
from s3checksums.store.base import ObjectStore

logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Process exit status.

    Individual item failures never change the status; they only show up in
    the report's failed count.
    """

    OK = 0
    CONFIGURATION_ERROR = 2
    INVENTORY_ERROR = 3


class RunResult(BaseModel):
    """Everything a run produced, for the CLI and for tests."""

    model_config = ConfigDict(frozen=True)

    report: ReconcileReport
    report_path: Path
    classification: Classification
    plan: ProcessingPlan
    sync: SyncResult
    dry_run: bool
    orphans: OrphanSets | None = None
    execution: ExecutionResult | None = None
    debug: DebugReport | None = None


class Reconciler:
    """Runs one reconciliation pass.

    Parameters
    ----------
    settings:
        The immutable run settings.
    store:
        Object store to reconcile.  Built from ``settings.store`` with boto3
        when not provided.
    hasher:
        Digest calculator.  Taken from preflight when not provided.
    sleep:
        Sleep function used between retries (tests pass a no-op).
    rclone_runner:
        ``subprocess.run``-compatible callable for the rclone synchronizer.
    """

    def __init__(
        self,
        settings: ReconcilerSettings,
        store: ObjectStore | None = None,
        *,
        hasher: Hasher | None = None,
        sleep: Callable[[float], Any] | None = None,
        rclone_runner: Callable[..., subprocess.CompletedProcess] | None = None,
    ) -> None:
        self.settings = settings
        self._store = store
        self._hasher = hasher
        self._sleep = sleep
        self._rclone_runner = rclone_runner
        self.policy = RetryPolicy(
            max_attempts=settings.retry_attempts,
            base_delay=settings.retry_base_delay,
            backoff_factor=settings.retry_backoff,
        )
        self.layout = RecordLayout.from_settings(settings)

    # ------------------------------------------------------------------
    # Component wiring
    # ------------------------------------------------------------------

    def _resolve_store(self) -> ObjectStore:
        if self._store is None:
            from s3checksums.store.s3 import S3ObjectStore

            self._store = S3ObjectStore.from_settings(self.settings.store)
        return self._store

    def _synchronizer(
        self, store: ObjectStore, mirror: LocalMirror
    ) -> MirrorSynchronizer | RcloneSynchronizer:
        if self.settings.use_rclone:
            kwargs: dict[str, Any] = {"sleep": self._sleep}
            if self._rclone_runner is not None:
                kwargs["runner"] = self._rclone_runner
            return RcloneSynchronizer(self.settings, mirror, self.layout, self.policy, **kwargs)
        return MirrorSynchronizer(
            store,
            mirror,
            self.layout,
            strategy_for(self.settings.sync_mode),
            self.policy,
            sleep=self._sleep,
        )

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> RunResult:
        """Execute one pass.

        Raises
        ------
        ConfigurationError
            Before any network call, when the settings are unusable.
        InventoryError
            When either full listing cannot be obtained.
        """
        settings = self.settings
        preflight_hasher = run_preflight(settings)
        hasher = self._hasher or preflight_hasher
        store = self._resolve_store()

        logger.info("Bucket: %s | Prefix: %s | Working directory: %s",
                    store.bucket, settings.prefix, settings.root_dir)

        mirror = LocalMirror(settings.checksums_dir, settings.record_suffix)
        reporter = Reporter(settings.results_dir)
        builder = InventoryBuilder(store, self.layout, self.policy, sleep=self._sleep)

        records = builder.build_record_inventory()
        sync_result = self._synchronizer(store, mirror).sync(records)

        dry_run = settings.dry_run
        debug_report: DebugReport | None = None
        if settings.debug:
            comparator = DebugComparator(store, mirror, self.layout, self.policy, sleep=self._sleep)
            debug_report = comparator.compare(records, settings.prefix, settings.debug_limit)
            reporter.write_debug(debug_report)
            dry_run = True

        artifacts = builder.build_artifact_inventory(settings.prefix)

        classification = Classifier(mirror, hasher).classify(
            artifacts, records, unavailable=sync_result.failed
        )

        orphans: OrphanSets | None = None
        if settings.check_orphans:
            orphans = detect_orphans(artifacts, records)
            log_orphans(
                orphans,
                record_prefix=settings.record_prefix,
                display_limit=settings.orphan_display_limit,
            )

        plan = build_plan(classification)

        # The plan is always persisted before any artifact is transferred.
        report = ReconcileReport.from_plan(
            plan,
            dry_run=dry_run,
            orphans=orphans,
            sync=sync_result,
            bucket=store.bucket,
            prefix=settings.prefix,
        )
        report_path = reporter.write(report)

        if dry_run:
            logger.info("DRY-RUN mode: no artifacts will be downloaded.")
            return RunResult(
                report=report,
                report_path=report_path,
                classification=classification,
                plan=plan,
                sync=sync_result,
                dry_run=True,
                orphans=orphans,
                debug=debug_report,
            )

        executor = BatchExecutor(
            store,
            mirror,
            self.layout,
            hasher,
            settings.downloads_dir,
            batch_size=settings.batch_size,
            policy=self.policy,
            workers=settings.workers,
            keep_downloads=settings.keep_downloads,
            sleep=self._sleep,
        )
        execution = executor.execute(plan)
        report = report.with_execution(execution)
        report_path = reporter.write(report)

        return RunResult(
            report=report,
            report_path=report_path,
            classification=classification,
            plan=plan,
            sync=sync_result,
            dry_run=False,
            orphans=orphans,
            execution=execution,
            debug=debug_report,
        )
