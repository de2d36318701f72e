"""Batch executor: download, hash and upload records for every plan item.

Items are processed in plan order.  Computed digests go into an in-memory
``UploadQueue`` and are written to the store whenever the queue reaches the
batch size, plus one final flush for the remainder.  A failure on one item
is counted and never stops the run.
"""

from __future__ import annotations

import collections
import logging
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

from s3checksums.core.hasher import Hasher
from s3checksums.core.layout import RecordLayout
from s3checksums.core.mirror import LocalMirror
from s3checksums.core.retry import RetryPolicy, retry
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
from s3checksums.store.base import ObjectStore

logger = logging.getLogger(__name__)

RECORD_CONTENT_TYPE = "text/plain"


class UploadQueue:
    """Bounded FIFO of computed digests awaiting a batched write.

    ``drain`` removes the first ``batch_size`` items under a lock, so a flush
    always sees a consistent snapshot.
    """

    def __init__(self, batch_size: int) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._batch_size = batch_size
        self._items: collections.deque[UploadItem] = collections.deque()
        self._lock = threading.Lock()

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def add(self, item: UploadItem) -> None:
        with self._lock:
            self._items.append(item)

    def is_full(self) -> bool:
        return len(self) >= self._batch_size

    def drain(self) -> list[UploadItem]:
        """Remove and return up to ``batch_size`` items from the head."""
        with self._lock:
            count = min(self._batch_size, len(self._items))
            return [self._items.popleft() for _ in range(count)]


class BatchExecutor:
    """Repairs hash records for a processing plan.

    Parameters
    ----------
    store:
        Object store holding artifacts and records.
    mirror:
        Local mirror; updated as soon as a digest is computed.
    layout:
        Record key layout.
    hasher:
        Digest calculator.
    scratch_dir:
        Directory for downloaded artifacts.
    batch_size:
        Upload queue flush threshold.
    policy:
        Retry policy for downloads and uploads.
    workers:
        Download+hash concurrency; ``1`` keeps everything on the calling thread.
    keep_downloads:
        Leave downloaded artifacts in ``scratch_dir`` after hashing.
    """

    def __init__(
        self,
        store: ObjectStore,
        mirror: LocalMirror,
        layout: RecordLayout,
        hasher: Hasher,
        scratch_dir: Path,
        *,
        batch_size: int = 20,
        policy: RetryPolicy | None = None,
        workers: int = 1,
        keep_downloads: bool = False,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._store = store
        self._mirror = mirror
        self._layout = layout
        self._hasher = hasher
        self._scratch = Path(scratch_dir)
        self._policy = policy or RetryPolicy()
        self._workers = max(1, workers)
        self._keep_downloads = keep_downloads
        self._retry_kwargs: dict[str, Any] = {"sleep": sleep} if sleep else {}
        self.queue = UploadQueue(batch_size)
        self._batch_sizes: list[int] = []

    # ------------------------------------------------------------------
    # Per-item preparation (download + hash)
    # ------------------------------------------------------------------

    def scratch_path(self, key: str) -> Path:
        dest = self._scratch / key
        if not dest.resolve().is_relative_to(self._scratch.resolve()):
            raise ValueError(f"Key escapes the scratch directory: {key!r}")
        return dest

    def _prepare(self, item: PlanItem) -> tuple[PlanItem, str | None, str]:
        """Return ``(item, digest, error)``; ``digest`` is ``None`` on failure."""
        try:
            dest = self.scratch_path(item.key)
        except ValueError as exc:
            return item, None, str(exc)
        result = retry(
            lambda: self._store.download(item.key, dest),
            self._policy,
            description=f"download {item.key}",
            **self._retry_kwargs,
        )
        if not result.ok:
            return item, None, result.error_message
        try:
            digest = self._hasher.digest_file(dest)
        except OSError as exc:
            return item, None, f"hash failed: {exc}"
        finally:
            if not self._keep_downloads:
                dest.unlink(missing_ok=True)
        return item, digest, ""

    def _prepared(self, items: tuple[PlanItem, ...]) -> Iterator[tuple[PlanItem, str | None, str]]:
        if self._workers == 1:
            for item in items:
                yield self._prepare(item)
            return
        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            # map() yields in submission order, so enqueueing stays in plan order
            yield from pool.map(self._prepare, items)

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def flush(self) -> list[ItemResult]:
        """Write one batch of queued records to the store."""
        batch = self.queue.drain()
        if not batch:
            return []
        self._batch_sizes.append(len(batch))
        logger.info("Uploading batch of %d record(s)", len(batch))

        results: list[ItemResult] = []
        for queued in batch:
            record_key = self._layout.record_key(queued.key)
            result = retry(
                lambda: self._store.put(
                    record_key, queued.digest.encode("ascii"), RECORD_CONTENT_TYPE
                ),
                self._policy,
                description=f"put {record_key}",
                **self._retry_kwargs,
            )
            if result.ok:
                outcome = ItemOutcome.OK
            else:
                outcome = ItemOutcome.FAILED
                logger.warning("FAILED upload: %s (%s)", record_key, result.error_message)
                self._invalidate(queued.key)
            results.append(
                ItemResult(
                    key=queued.key,
                    action=queued.action,
                    outcome=outcome,
                    digest=queued.digest,
                    error=result.error_message,
                )
            )
        return results

    def _invalidate(self, key: str) -> None:
        # the bucket still holds the old record; the next sync must fetch it
        try:
            self._mirror.discard(key)
        except (OSError, ValueError) as exc:
            logger.warning("Cannot invalidate mirror entry for %s: %s", key, exc)

    # ------------------------------------------------------------------
    # Execute
    # ------------------------------------------------------------------

    def execute(self, plan: ProcessingPlan) -> ExecutionResult:
        """Attempt every plan item and return per-item outcomes and totals."""
        logger.info("Starting artifact processing (downloads + digest computation)...")
        results: list[ItemResult] = []

        for item, digest, error in self._prepared(plan.items):
            if digest is None:
                logger.warning("FAILED: %s (%s)", item.key, error)
                results.append(
                    ItemResult(
                        key=item.key, action=item.action, outcome=ItemOutcome.FAILED, error=error
                    )
                )
                continue

            self.queue.add(UploadItem(key=item.key, digest=digest, action=item.action))
            try:
                self._mirror.write_bytes(item.key, digest.encode("ascii"))
            except (OSError, ValueError) as exc:
                logger.warning("Cannot update mirror for %s: %s", item.key, exc)
            logger.info("Processed: %s (action: %s)", item.key, item.action.value)

            if self.queue.is_full():
                results.extend(self.flush())

        while len(self.queue):
            results.extend(self.flush())

        summary = _summarize(results, batches=len(self._batch_sizes))
        logger.info(
            "Execution summary: generated=%d fixed=%d failed=%d",
            summary.generated, summary.fixed, summary.failed,
        )
        return ExecutionResult(
            summary=summary,
            results=tuple(results),
            batch_sizes=tuple(self._batch_sizes),
        )


def _summarize(results: list[ItemResult], *, batches: int) -> ExecutionSummary:
    generated = fixed = failed = 0
    for r in results:
        if r.outcome == ItemOutcome.FAILED:
            failed += 1
        elif r.action == RecordAction.GENERATE:
            generated += 1
        else:
            fixed += 1
    return ExecutionSummary(generated=generated, fixed=fixed, failed=failed, batches=batches)
