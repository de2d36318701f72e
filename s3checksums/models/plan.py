"""Processing plan and execution models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from s3checksums.models.classification import ClassificationOutcome


class RecordAction(str, Enum):
    """Repair action for a flagged record."""

    GENERATE = "generate"  # record missing
    FIX = "fix"  # record empty or corrupt


class ItemOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"


ACTION_FOR: dict[ClassificationOutcome, RecordAction] = {
    ClassificationOutcome.MISSING: RecordAction.GENERATE,
    ClassificationOutcome.EMPTY: RecordAction.FIX,
    ClassificationOutcome.CORRUPT: RecordAction.FIX,
}


class PlanItem(BaseModel):
    """A single artifact scheduled for record generation or repair."""

    model_config = ConfigDict(frozen=True)

    key: str
    classification: ClassificationOutcome
    action: RecordAction


class ProcessingPlan(BaseModel):
    """Ordered ``missing -> empty -> corrupt`` work list, fixed before execution."""

    model_config = ConfigDict(frozen=True)

    items: tuple[PlanItem, ...] = ()
    already_valid: int = 0
    missing: int = 0
    empty: int = 0
    corrupt: int = 0

    @property
    def total_to_process(self) -> int:
        return self.missing + self.empty + self.corrupt

    def __len__(self) -> int:
        return len(self.items)


class UploadItem(BaseModel):
    """A computed digest waiting in the upload queue."""

    model_config = ConfigDict(frozen=True)

    key: str
    digest: str
    action: RecordAction


class ItemResult(BaseModel):
    """Outcome of processing one plan item."""

    model_config = ConfigDict(frozen=True)

    key: str
    action: RecordAction
    outcome: ItemOutcome
    digest: str = ""
    error: str = ""


class ExecutionSummary(BaseModel):
    """Aggregate counters across all upload batches."""

    model_config = ConfigDict(frozen=True)

    generated: int = 0
    fixed: int = 0
    failed: int = 0
    batches: int = 0


class ExecutionResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: ExecutionSummary = ExecutionSummary()
    results: tuple[ItemResult, ...] = ()
    batch_sizes: tuple[int, ...] = ()

    def outcomes(self) -> dict[str, ItemOutcome]:
        """Map of artifact key to outcome; built once per lookup pass."""
        return {result.key: result.outcome for result in self.results}

    def outcome_of(self, key: str) -> ItemOutcome | None:
        return self.outcomes().get(key)
