"""Report models: the durable, machine-readable outcome of a run."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from s3checksums.models.classification import ClassificationOutcome, OrphanSets
from s3checksums.models.plan import (
    ExecutionResult,
    ExecutionSummary,
    ItemOutcome,
    ProcessingPlan,
    RecordAction,
)
from s3checksums.models.sync import SyncResult


class ReportItem(BaseModel):
    """One planned item; ``outcome`` stays ``None`` until it is executed."""

    model_config = ConfigDict(frozen=True)

    key: str
    action: RecordAction
    classification: ClassificationOutcome
    outcome: ItemOutcome | None = None


class OrphanListing(BaseModel):
    model_config = ConfigDict(frozen=True)

    records: list[str] = []
    artifacts: list[str] = []


class SyncSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: str = ""
    status: str = ""
    downloaded: int = 0
    skipped: int = 0
    failed: list[str] = []


class ReconcileReport(BaseModel):
    """Counts per classification and orphan category, plus per-item actions.

    Written after every run, including dry-runs, and always before any
    artifact is transferred.
    """

    model_config = ConfigDict(frozen=True)

    mode: str  # "dry-run" | "run"
    bucket: str = ""
    prefix: str = ""
    missing: int = 0
    empty: int = 0
    corrupt: int = 0
    total_to_process: int = 0
    already_valid: int = 0
    orphans_checked: bool = False
    orphaned_records: int = 0
    orphaned_artifacts: int = 0
    items: list[ReportItem] = []
    orphans: OrphanListing = OrphanListing()
    sync: SyncSummary | None = None
    execution: ExecutionSummary | None = None
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def from_plan(
        cls,
        plan: ProcessingPlan,
        *,
        dry_run: bool,
        orphans: OrphanSets | None = None,
        sync: SyncResult | None = None,
        bucket: str = "",
        prefix: str = "",
    ) -> ReconcileReport:
        orphans = orphans or OrphanSets(checked=False)
        return cls(
            mode="dry-run" if dry_run else "run",
            bucket=bucket,
            prefix=prefix,
            missing=plan.missing,
            empty=plan.empty,
            corrupt=plan.corrupt,
            total_to_process=plan.total_to_process,
            already_valid=plan.already_valid,
            orphans_checked=orphans.checked,
            orphaned_records=len(orphans.orphaned_records),
            orphaned_artifacts=len(orphans.orphaned_artifacts),
            items=[
                ReportItem(
                    key=item.key,
                    action=item.action,
                    classification=item.classification,
                )
                for item in plan.items
            ],
            orphans=OrphanListing(
                records=list(orphans.orphaned_records),
                artifacts=list(orphans.orphaned_artifacts),
            ),
            sync=(
                SyncSummary(
                    strategy=sync.strategy,
                    status=sync.status.value,
                    downloaded=len(sync.downloaded),
                    skipped=len(sync.skipped),
                    failed=list(sync.failed),
                )
                if sync is not None
                else None
            ),
        )

    def with_execution(self, execution: ExecutionResult) -> ReconcileReport:
        """Return a copy carrying per-item outcomes and the execution summary."""
        outcomes = execution.outcomes()
        items = [
            item.model_copy(update={"outcome": outcomes.get(item.key)})
            for item in self.items
        ]
        return self.model_copy(
            update={
                "items": items,
                "execution": execution.summary,
                "generated_at": datetime.now(timezone.utc),
            }
        )


class StrategyDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: str
    would_download: bool


class DebugEntry(BaseModel):
    """Local vs remote comparison for one sampled record."""

    model_config = ConfigDict(frozen=True)

    key: str
    local_present: bool
    remote_present: bool
    exact_match: bool
    normalized_match: bool
    local_preview: str = ""
    remote_preview: str = ""
    decisions: list[StrategyDecision] = []
    error: str = ""


class DebugReport(BaseModel):
    """Diagnostic comparison of a bounded sample of records."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    limit: int
    sampled: int = 0
    exact_matches: int = 0
    normalized_only_matches: int = 0
    mismatches: int = 0
    missing_local: int = 0
    entries: list[DebugEntry] = []
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
