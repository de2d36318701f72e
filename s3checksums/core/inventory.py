"""Inventory builder: lists existing records and source artifacts.

Both inventories must be complete before classification starts.  Each
listing page is retried; a page that still fails after the retry ceiling
aborts the whole inventory with ``InventoryError``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

from s3checksums.core.layout import RecordLayout
from s3checksums.core.retry import RetryPolicy, retry
from s3checksums.models.inventory import ArtifactInventory, ObjectInfo, RecordInventory
from s3checksums.store.base import ObjectStore

logger = logging.getLogger(__name__)


class InventoryError(RuntimeError):
    """Raised when a full listing cannot be obtained."""


class InventoryBuilder:
    """Builds the record and artifact inventories from the object store.

    Parameters
    ----------
    store:
        The object store to list.
    layout:
        Record key layout (prefix, suffix, allowed extensions).
    policy:
        Retry policy applied to every page request.
    sleep:
        Sleep function used between retries.
    """

    def __init__(
        self,
        store: ObjectStore,
        layout: RecordLayout,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._store = store
        self._layout = layout
        self._policy = policy or RetryPolicy()
        self._retry_kwargs: dict[str, Any] = {"sleep": sleep} if sleep else {}

    def _list_all(self, prefix: str) -> Iterator[ObjectInfo]:
        token: str | None = None
        page_no = 0
        while True:
            page_no += 1
            result = retry(
                lambda: self._store.list_page(prefix, token),
                self._policy,
                description=f"list s3://{self._store.bucket}/{prefix} page {page_no}",
                **self._retry_kwargs,
            )
            if not result.ok:
                raise InventoryError(
                    f"Listing {prefix!r} failed on page {page_no}: {result.error_message}"
                ) from result.error
            page = result.value
            yield from page.objects
            token = page.next_token
            if token is None:
                return

    def build_record_inventory(self) -> RecordInventory:
        """List all records and map them back to artifact keys."""
        prefix = self._layout.record_prefix
        logger.info("Building record inventory from s3://%s/%s", self._store.bucket, prefix)
        objects: dict[str, ObjectInfo] = {}
        for info in self._list_all(prefix):
            artifact_key = self._layout.artifact_key(info.key)
            if artifact_key is None:
                continue
            objects[artifact_key] = info
        keys = tuple(sorted(objects))
        logger.info("Remote records found: %d", len(keys))
        return RecordInventory(keys=keys, objects=objects)

    def build_artifact_inventory(self, prefix: str) -> ArtifactInventory:
        """List candidate artifacts (allowed extensions, no directory markers)."""
        logger.info("Building artifact inventory from s3://%s/%s", self._store.bucket, prefix)
        keys = {
            info.key for info in self._list_all(prefix) if self._layout.is_candidate(info.key)
        }
        logger.info("Candidates in %s: %d", prefix, len(keys))
        return ArtifactInventory(prefix=prefix, keys=tuple(sorted(keys)))
