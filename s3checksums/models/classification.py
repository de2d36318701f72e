"""Record classification models: the four-way partition of artifact keys."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ClassificationOutcome(str, Enum):
    """State of a single artifact's hash record."""

    VALID = "valid"
    MISSING = "missing"
    EMPTY = "empty"
    CORRUPT = "corrupt"


class Classification(BaseModel):
    """Partition of the artifact inventory into valid/missing/empty/corrupt.

    Every artifact key appears in exactly one of the four tuples, and each
    tuple preserves artifact-inventory order.
    """

    model_config = ConfigDict(frozen=True)

    valid: tuple[str, ...] = ()
    missing: tuple[str, ...] = ()
    empty: tuple[str, ...] = ()
    corrupt: tuple[str, ...] = ()

    def keys_for(self, outcome: ClassificationOutcome) -> tuple[str, ...]:
        return getattr(self, outcome.value)

    def outcome_of(self, key: str) -> ClassificationOutcome | None:
        """Return the bucket holding *key*, or ``None`` if it was not classified."""
        for outcome in ClassificationOutcome:
            if key in self.keys_for(outcome):
                return outcome
        return None

    @property
    def total(self) -> int:
        return len(self.valid) + len(self.missing) + len(self.empty) + len(self.corrupt)

    def counts(self) -> dict[str, int]:
        return {outcome.value: len(self.keys_for(outcome)) for outcome in ClassificationOutcome}


class OrphanSets(BaseModel):
    """Keys present on one side of the artifact/record relationship only."""

    model_config = ConfigDict(frozen=True)

    orphaned_records: tuple[str, ...] = ()  # records without an artifact
    orphaned_artifacts: tuple[str, ...] = ()  # artifacts without a record
    checked: bool = True
