"""Orphan detection: records without artifacts and artifacts without records.

Computed from the two remote inventories only; the local mirror plays no
part.  Linear in records + artifacts, so it is opt-in.
"""

from __future__ import annotations

import logging

from s3checksums.models.classification import OrphanSets
from s3checksums.models.inventory import ArtifactInventory, RecordInventory

logger = logging.getLogger(__name__)


def detect_orphans(
    artifacts: ArtifactInventory,
    records: RecordInventory,
    *,
    scope_prefix: str | None = None,
) -> OrphanSets:
    """Compare both inventories.

    Records are only considered when their artifact key falls under
    *scope_prefix* (defaults to the artifact inventory's prefix), so records
    for other prefixes are not reported as orphans.
    """
    scope = artifacts.prefix if scope_prefix is None else scope_prefix
    artifact_keys = artifacts.key_set()
    record_keys = records.key_set()

    orphaned_records = tuple(
        key for key in records.keys if key.startswith(scope) and key not in artifact_keys
    )
    orphaned_artifacts = tuple(key for key in artifacts.keys if key not in record_keys)
    return OrphanSets(
        orphaned_records=orphaned_records,
        orphaned_artifacts=orphaned_artifacts,
    )


def log_orphans(orphans: OrphanSets, *, record_prefix: str, display_limit: int = 20) -> None:
    """Log orphan counts and the first *display_limit* keys of each list."""
    if orphans.orphaned_records:
        logger.warning(
            "Orphaned records in %s (no corresponding artifact): %d",
            record_prefix, len(orphans.orphaned_records),
        )
        _log_truncated(
            [f"{record_prefix}{k}" for k in orphans.orphaned_records], display_limit
        )
    else:
        logger.info("No orphaned records found in %s", record_prefix)

    if orphans.orphaned_artifacts:
        logger.warning(
            "Orphaned artifacts (no corresponding record): %d",
            len(orphans.orphaned_artifacts),
        )
        _log_truncated(list(orphans.orphaned_artifacts), display_limit)
    else:
        logger.info("No orphaned artifacts found")


def _log_truncated(keys: list[str], limit: int) -> None:
    for key in keys[:limit]:
        logger.warning("  - %s", key)
    if len(keys) > limit:
        logger.warning("  ... and %d more file(s)", len(keys) - limit)
