"""Local mirror of hash records and the strategies that keep it fresh.

Storage layout: ``{root}/{artifact_key}{suffix}``. The record prefix is
stripped, so ``.checksums/dist/a.zip.sha1`` lands at ``{root}/dist/a.zip.sha1``.

The mirror is owned by a single run; nothing else writes to it meanwhile.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict

from s3checksums.core.hasher import md5_hex
from s3checksums.core.layout import RecordLayout
from s3checksums.core.retry import RetryPolicy, retry
from s3checksums.models.inventory import ObjectInfo, RecordInventory
from s3checksums.models.sync import SyncMode, SyncResult, SyncStatus
from s3checksums.store.base import ObjectStore

logger = logging.getLogger(__name__)


class LocalStat(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: int
    mtime: datetime


class LocalMirror:
    """Filesystem cache of record bytes keyed by artifact key.

    Parameters
    ----------
    root:
        Mirror root directory (created if missing).
    suffix:
        Record suffix appended to each artifact key.
    """

    def __init__(self, root: Path, suffix: str = ".sha1") -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)
        self._suffix = suffix

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        path = self._root / f"{key}{self._suffix}"
        resolved = path.resolve()
        if not resolved.is_relative_to(self._root.resolve()):
            raise ValueError(f"Key escapes the mirror root: {key!r}")
        return path

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def read_bytes(self, key: str) -> bytes | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        return path.read_bytes()

    def read_text(self, key: str) -> str | None:
        data = self.read_bytes(key)
        if data is None:
            return None
        return data.decode("utf-8", errors="replace")

    def write_bytes(self, key: str, data: bytes, *, mtime: datetime | None = None) -> Path:
        """Write record bytes; optionally stamp the file with the remote mtime."""
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".part")
        tmp.write_bytes(data)
        os.replace(tmp, path)
        if mtime is not None:
            ts = mtime.timestamp()
            os.utime(path, (ts, ts))
        return path

    def discard(self, key: str) -> bool:
        """Drop the mirrored copy so the next sync fetches the remote record.

        Returns ``True`` when a file was removed.
        """
        path = self.path_for(key)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def stat(self, key: str) -> LocalStat | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        st = path.stat()
        return LocalStat(
            size=st.st_size,
            mtime=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def keys(self) -> list[str]:
        """All artifact keys that currently have a mirrored record."""
        out: list[str] = []
        for path in self._root.rglob(f"*{self._suffix}"):
            if path.is_file():
                rel = path.relative_to(self._root).as_posix()
                out.append(rel[: -len(self._suffix)])
        return sorted(out)


# ---------------------------------------------------------------------------
# Sync strategies
# ---------------------------------------------------------------------------


class SyncStrategy(Protocol):
    """Decides whether the mirrored copy of a record must be re-downloaded."""

    name: str

    def needs_download(self, remote: ObjectInfo, mirror: LocalMirror, key: str) -> bool:
        ...


class SizeOnlyStrategy:
    """Re-download when absent or the size differs.

    Records are fixed-length digests, so a same-length change is missed.
    """

    name = SyncMode.SIZE_ONLY.value

    def needs_download(self, remote: ObjectInfo, mirror: LocalMirror, key: str) -> bool:
        local = mirror.stat(key)
        return local is None or local.size != remote.size


class MtimeStrategy:
    """Re-download when absent, size differs, or the remote copy is newer."""

    name = SyncMode.MTIME.value

    def needs_download(self, remote: ObjectInfo, mirror: LocalMirror, key: str) -> bool:
        local = mirror.stat(key)
        if local is None or local.size != remote.size:
            return True
        return int(remote.last_modified.timestamp()) > int(local.mtime.timestamp())


class MtimeExactStrategy:
    """Re-download unless size and mtime (to the second) match exactly."""

    name = SyncMode.MTIME_EXACT.value

    def needs_download(self, remote: ObjectInfo, mirror: LocalMirror, key: str) -> bool:
        local = mirror.stat(key)
        if local is None or local.size != remote.size:
            return True
        return int(remote.last_modified.timestamp()) != int(local.mtime.timestamp())


class ChecksumStrategy:
    """Compare the local MD5 against the remote ETag, ignoring timestamps.

    Multipart ETags (``<md5>-<parts>``) are not content MD5s and always
    trigger a download.
    """

    name = SyncMode.CHECKSUM.value

    def needs_download(self, remote: ObjectInfo, mirror: LocalMirror, key: str) -> bool:
        data = mirror.read_bytes(key)
        if data is None or "-" in remote.etag or not remote.etag:
            return True
        return md5_hex(data) != remote.etag


_STRATEGIES: dict[SyncMode, type] = {
    SyncMode.SIZE_ONLY: SizeOnlyStrategy,
    SyncMode.MTIME: MtimeStrategy,
    SyncMode.MTIME_EXACT: MtimeExactStrategy,
    SyncMode.CHECKSUM: ChecksumStrategy,
}


def strategy_for(mode: SyncMode | str) -> SyncStrategy:
    return _STRATEGIES[SyncMode(mode)]()


def all_strategies() -> list[SyncStrategy]:
    return [strategy_for(mode) for mode in SyncMode]


# ---------------------------------------------------------------------------
# Synchronizer
# ---------------------------------------------------------------------------


class MirrorSynchronizer:
    """Brings remote records into the local mirror using one strategy.

    Parameters
    ----------
    store:
        Source object store.
    mirror:
        Destination local mirror.
    layout:
        Record key layout.
    strategy:
        Decides which records need a fresh download.
    policy:
        Retry policy for each record download.
    """

    def __init__(
        self,
        store: ObjectStore,
        mirror: LocalMirror,
        layout: RecordLayout,
        strategy: SyncStrategy,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._store = store
        self._mirror = mirror
        self._layout = layout
        self._strategy = strategy
        self._policy = policy or RetryPolicy()
        self._retry_kwargs: dict[str, Any] = {"sleep": sleep} if sleep else {}

    def sync(self, records: RecordInventory) -> SyncResult:
        """Download every record the strategy flags; never raises per key."""
        logger.info(
            "Syncing s3://%s/%s -> %s (strategy: %s)",
            self._store.bucket,
            self._layout.record_prefix,
            self._mirror.root,
            self._strategy.name,
        )
        downloaded: list[str] = []
        skipped: list[str] = []
        failed: list[str] = []

        for key in records.keys:
            remote = records.objects[key]
            try:
                stale = self._strategy.needs_download(remote, self._mirror, key)
            except (OSError, ValueError) as exc:
                logger.warning("Cannot inspect mirrored record for %s: %s", key, exc)
                failed.append(key)
                continue
            if not stale:
                skipped.append(key)
                continue

            result = retry(
                lambda: self._store.get(remote.key),
                self._policy,
                description=f"get {remote.key}",
                **self._retry_kwargs,
            )
            if not result.ok:
                failed.append(key)
                continue
            try:
                self._mirror.write_bytes(key, result.value, mtime=remote.last_modified)
            except (OSError, ValueError) as exc:
                logger.warning("Cannot write mirrored record for %s: %s", key, exc)
                failed.append(key)
                continue
            downloaded.append(key)

        status = SyncStatus.PARTIAL if failed else SyncStatus.COMPLETE
        if failed:
            logger.error(
                "Partial sync of records: %d failed (treated as absent)", len(failed)
            )
        logger.info(
            "Mirror sync %s: %d downloaded, %d up to date",
            status.value, len(downloaded), len(skipped),
        )
        return SyncResult(
            strategy=self._strategy.name,
            status=status,
            downloaded=tuple(downloaded),
            skipped=tuple(skipped),
            failed=tuple(failed),
        )
