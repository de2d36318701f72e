"""s3checksums data models: all Pydantic v2, all frozen (immutable)."""

from s3checksums.models.classification import (
    Classification,
    ClassificationOutcome,
    OrphanSets,
)
from s3checksums.models.inventory import (
    ArtifactInventory,
    ListPage,
    ObjectInfo,
    RecordInventory,
)
from s3checksums.models.plan import (
    ExecutionResult,
    ExecutionSummary,
    ItemOutcome,
    ItemResult,
    PlanItem,
    ProcessingPlan,
    RecordAction,
    UploadItem,
)
from s3checksums.models.reports import (
    DebugEntry,
    DebugReport,
    ReconcileReport,
    ReportItem,
    StrategyDecision,
)
from s3checksums.models.sync import SyncMode, SyncResult, SyncStatus

__all__ = [
    "ArtifactInventory",
    "Classification",
    "ClassificationOutcome",
    "DebugEntry",
    "DebugReport",
    "ExecutionResult",
    "ExecutionSummary",
    "ItemOutcome",
    "ItemResult",
    "ListPage",
    "ObjectInfo",
    "OrphanSets",
    "PlanItem",
    "ProcessingPlan",
    "RecordAction",
    "RecordInventory",
    "ReconcileReport",
    "ReportItem",
    "StrategyDecision",
    "SyncMode",
    "SyncResult",
    "SyncStatus",
    "UploadItem",
]
