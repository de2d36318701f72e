"""Unit tests for the LocalMirror, sync strategies and MirrorSynchronizer."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from s3checksums.core.hasher import md5_hex
from s3checksums.core.mirror import (
    ChecksumStrategy,
    LocalMirror,
    MirrorSynchronizer,
    MtimeExactStrategy,
    MtimeStrategy,
    SizeOnlyStrategy,
    all_strategies,
    strategy_for,
)
from s3checksums.models.inventory import ObjectInfo, RecordInventory
from s3checksums.models.sync import SyncMode, SyncStatus
from s3checksums.store.base import ObjectStoreError
from s3checksums.store.memory import InMemoryObjectStore

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
DIGEST = b"a9993e364706816aba3e25717850c26c9cd0d89d"


def _remote(data: bytes = DIGEST, modified: datetime = T0, etag: str | None = None) -> ObjectInfo:
    return ObjectInfo(
        key=".checksums/dist/a.zip.sha1",
        size=len(data),
        last_modified=modified,
        etag=md5_hex(data) if etag is None else etag,
    )


class TestLocalMirror:
    def test_write_and_read(self, mirror: LocalMirror):
        mirror.write_bytes("dist/a.zip", DIGEST)
        assert mirror.exists("dist/a.zip")
        assert mirror.read_bytes("dist/a.zip") == DIGEST
        assert mirror.path_for("dist/a.zip").name == "a.zip.sha1"

    def test_missing_key_reads_none(self, mirror: LocalMirror):
        assert mirror.read_bytes("dist/none.zip") is None
        assert mirror.stat("dist/none.zip") is None

    def test_write_stamps_mtime(self, mirror: LocalMirror):
        mirror.write_bytes("dist/a.zip", DIGEST, mtime=T0)
        stat = mirror.stat("dist/a.zip")
        assert stat is not None
        assert int(stat.mtime.timestamp()) == int(T0.timestamp())
        assert stat.size == len(DIGEST)

    def test_keys_lists_mirrored_records(self, mirror: LocalMirror):
        mirror.write_bytes("dist/b.tar", DIGEST)
        mirror.write_bytes("dist/sub/a.zip", DIGEST)
        assert mirror.keys() == ["dist/b.tar", "dist/sub/a.zip"]

    def test_rejects_keys_escaping_root(self, mirror: LocalMirror):
        with pytest.raises(ValueError, match="escapes"):
            mirror.path_for("../../outside.zip")

    def test_discard_removes_only_that_record(self, mirror: LocalMirror):
        mirror.write_bytes("dist/a.zip", DIGEST)
        mirror.write_bytes("dist/b.zip", DIGEST)
        assert mirror.discard("dist/a.zip") is True
        assert mirror.discard("dist/a.zip") is False
        assert mirror.keys() == ["dist/b.zip"]


class TestStrategies:
    def test_registry(self):
        assert isinstance(strategy_for(SyncMode.SIZE_ONLY), SizeOnlyStrategy)
        assert isinstance(strategy_for("mtime"), MtimeStrategy)
        assert isinstance(strategy_for("mtime-exact"), MtimeExactStrategy)
        assert isinstance(strategy_for("checksum"), ChecksumStrategy)
        assert [s.name for s in all_strategies()] == [m.value for m in SyncMode]

    @pytest.mark.parametrize("mode", list(SyncMode))
    def test_absent_local_copy_always_downloads(self, mirror, mode):
        assert strategy_for(mode).needs_download(_remote(), mirror, "dist/a.zip")

    @pytest.mark.parametrize("mode", list(SyncMode))
    def test_identical_copy_is_skipped(self, mirror, mode):
        mirror.write_bytes("dist/a.zip", DIGEST, mtime=T0)
        assert not strategy_for(mode).needs_download(_remote(), mirror, "dist/a.zip")

    def test_size_only_misses_same_length_change(self, mirror):
        mirror.write_bytes("dist/a.zip", DIGEST, mtime=T0)
        changed = b"b" * len(DIGEST)
        remote = _remote(changed, modified=T0 + timedelta(hours=1))
        assert not SizeOnlyStrategy().needs_download(remote, mirror, "dist/a.zip")
        assert MtimeStrategy().needs_download(remote, mirror, "dist/a.zip")
        assert ChecksumStrategy().needs_download(remote, mirror, "dist/a.zip")

    def test_mtime_ignores_older_remote(self, mirror):
        mirror.write_bytes("dist/a.zip", DIGEST, mtime=T0)
        remote = _remote(modified=T0 - timedelta(hours=1))
        assert not MtimeStrategy().needs_download(remote, mirror, "dist/a.zip")
        assert MtimeExactStrategy().needs_download(remote, mirror, "dist/a.zip")

    def test_mtime_compares_whole_seconds(self, mirror):
        mirror.write_bytes("dist/a.zip", DIGEST, mtime=T0)
        remote = _remote(modified=T0 + timedelta(milliseconds=400))
        assert not MtimeStrategy().needs_download(remote, mirror, "dist/a.zip")
        assert not MtimeExactStrategy().needs_download(remote, mirror, "dist/a.zip")

    def test_checksum_always_downloads_multipart_etag(self, mirror):
        mirror.write_bytes("dist/a.zip", DIGEST, mtime=T0)
        remote = _remote(etag=f"{md5_hex(DIGEST)}-2")
        assert ChecksumStrategy().needs_download(remote, mirror, "dist/a.zip")


class _FlakyGetStore(InMemoryObjectStore):
    def __init__(self, failing: set[str], **kwargs) -> None:
        super().__init__(**kwargs)
        self.failing = failing

    def get(self, key: str) -> bytes:
        if key in self.failing:
            self.get_calls.append(key)
            raise ObjectStoreError("connection reset")
        return super().get(key)


def _records(store: InMemoryObjectStore, layout) -> RecordInventory:
    objects = {}
    for key in store.keys():
        artifact = layout.artifact_key(key)
        if artifact is not None:
            info = store.head(key)
            objects[artifact] = info
    return RecordInventory(keys=tuple(sorted(objects)), objects=objects)


class TestMirrorSynchronizer:
    def test_downloads_then_skips(self, store, mirror, layout, no_sleep):
        store.seed(".checksums/dist/a.zip.sha1", DIGEST, last_modified=T0)
        store.seed(".checksums/dist/b.zip.sha1", DIGEST, last_modified=T0)
        records = _records(store, layout)
        sync = MirrorSynchronizer(store, mirror, layout, MtimeStrategy(), sleep=no_sleep)

        first = sync.sync(records)
        assert first.status == SyncStatus.COMPLETE
        assert first.downloaded == ("dist/a.zip", "dist/b.zip")
        assert mirror.read_bytes("dist/a.zip") == DIGEST

        second = sync.sync(records)
        assert second.downloaded == ()
        assert second.skipped == ("dist/a.zip", "dist/b.zip")

    def test_failed_download_is_partial(self, mirror, layout, no_sleep):
        store = _FlakyGetStore({".checksums/dist/b.zip.sha1"})
        store.seed(".checksums/dist/a.zip.sha1", DIGEST, last_modified=T0)
        store.seed(".checksums/dist/b.zip.sha1", DIGEST, last_modified=T0)

        result = MirrorSynchronizer(
            store, mirror, layout, SizeOnlyStrategy(), sleep=no_sleep
        ).sync(_records(store, layout))

        assert result.is_partial
        assert result.failed == ("dist/b.zip",)
        assert result.downloaded == ("dist/a.zip",)
        assert store.get_calls.count(".checksums/dist/b.zip.sha1") == 3
        assert not mirror.exists("dist/b.zip")
