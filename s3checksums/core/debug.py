"""Debug comparator: explains drift between the local mirror and the bucket.

For a bounded sample of records it fetches the remote bytes, compares them
with the mirrored copy, and asks every sync strategy whether it would
re-download the key.  Read-only: nothing is written to the mirror or the
store.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from s3checksums.core.layout import RecordLayout
from s3checksums.core.mirror import LocalMirror, SyncStrategy, all_strategies
from s3checksums.core.retry import RetryPolicy, retry
from s3checksums.models.inventory import RecordInventory
from s3checksums.models.reports import DebugEntry, DebugReport, StrategyDecision
from s3checksums.store.base import ObjectNotFoundError, ObjectStore

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(rb"\s+")
_PREVIEW_CHARS = 48


def _preview(data: bytes | None) -> str:
    if data is None:
        return ""
    return data[:_PREVIEW_CHARS].decode("utf-8", errors="replace")


class DebugComparator:
    """Samples records and compares local vs remote bytes.

    Parameters
    ----------
    store:
        Object store to read remote records from.
    mirror:
        Local mirror to compare against.
    layout:
        Record key layout.
    policy:
        Retry policy for remote reads.
    strategies:
        Strategies to evaluate; all ``SyncMode`` strategies by default.
    """

    def __init__(
        self,
        store: ObjectStore,
        mirror: LocalMirror,
        layout: RecordLayout,
        policy: RetryPolicy | None = None,
        *,
        strategies: list[SyncStrategy] | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._store = store
        self._mirror = mirror
        self._layout = layout
        self._policy = policy or RetryPolicy()
        self._strategies = strategies if strategies is not None else all_strategies()
        self._retry_kwargs: dict[str, Any] = {"sleep": sleep} if sleep else {}

    def sample(self, records: RecordInventory, prefix: str, limit: int) -> list[str]:
        return [key for key in records.keys if key.startswith(prefix)][:limit]

    def compare_key(self, key: str, records: RecordInventory) -> DebugEntry:
        record_key = self._layout.record_key(key)
        try:
            local = self._mirror.read_bytes(key)
        except ValueError as exc:
            logger.warning("Debug: cannot compare %s: %s", key, exc)
            return DebugEntry(
                key=key,
                local_present=False,
                remote_present=False,
                exact_match=False,
                normalized_match=False,
                error=str(exc),
            )

        def _fetch() -> bytes | None:
            try:
                return self._store.get(record_key)
            except ObjectNotFoundError:
                return None

        fetched = retry(_fetch, self._policy, description=f"get {record_key}", **self._retry_kwargs)
        remote = fetched.value if fetched.ok else None

        both = local is not None and remote is not None
        exact = both and local == remote
        normalized = both and _WHITESPACE.sub(b"", local) == _WHITESPACE.sub(b"", remote)

        decisions: list[StrategyDecision] = []
        info = records.objects.get(key)
        if info is not None:
            for strategy in self._strategies:
                decisions.append(
                    StrategyDecision(
                        strategy=strategy.name,
                        would_download=strategy.needs_download(info, self._mirror, key),
                    )
                )

        return DebugEntry(
            key=key,
            local_present=local is not None,
            remote_present=remote is not None,
            exact_match=exact,
            normalized_match=normalized,
            local_preview=_preview(local),
            remote_preview=_preview(remote),
            decisions=decisions,
            error="" if fetched.ok else fetched.error_message,
        )

    def compare(self, records: RecordInventory, prefix: str, limit: int = 30) -> DebugReport:
        keys = self.sample(records, prefix, limit)
        logger.info("Debug: comparing %d local vs remote record(s) under %s", len(keys), prefix)
        entries = [self.compare_key(key, records) for key in keys]

        exact = sum(1 for e in entries if e.exact_match)
        normalized_only = sum(1 for e in entries if e.normalized_match and not e.exact_match)
        missing_local = sum(1 for e in entries if not e.local_present)
        mismatches = sum(
            1 for e in entries if e.local_present and not e.normalized_match
        )
        if mismatches:
            logger.warning("Debug: %d mirrored record(s) differ from the bucket", mismatches)
        return DebugReport(
            prefix=prefix,
            limit=limit,
            sampled=len(entries),
            exact_matches=exact,
            normalized_only_matches=normalized_only,
            mismatches=mismatches,
            missing_local=missing_local,
            entries=entries,
        )
