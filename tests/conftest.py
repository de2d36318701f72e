"""Shared test fixtures for s3checksums."""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from s3checksums.config import ReconcilerSettings, StoreSettings
from s3checksums.core.hasher import Hasher
from s3checksums.core.layout import RecordLayout
from s3checksums.core.mirror import LocalMirror
from s3checksums.core.retry import RetryPolicy
from s3checksums.store.memory import InMemoryObjectStore

# A fixed point in the past so "remote newer than local" comparisons are stable.
REMOTE_TIME = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep real S3_/S3C_ variables and any .env file out of the tests."""
    for name in list(os.environ):
        if name.startswith(("S3_", "S3C_")) or name == "DRY_RUN":
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def no_sleep() -> Callable[[float], Any]:
    """Sleep replacement that records requested delays instead of waiting."""
    delays: list[float] = []

    def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays  # type: ignore[attr-defined]
    return _sleep


@pytest.fixture
def hasher() -> Hasher:
    return Hasher("sha1")


@pytest.fixture
def layout() -> RecordLayout:
    return RecordLayout()


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy()


@pytest.fixture
def mirror(tmp_path: Path) -> LocalMirror:
    return LocalMirror(tmp_path / "work" / "checksums")


@pytest.fixture
def store() -> InMemoryObjectStore:
    return InMemoryObjectStore(bucket="test-bucket")


@pytest.fixture
def settings(tmp_path: Path) -> ReconcilerSettings:
    """Settings pointing at a temp working directory and a named bucket."""
    return ReconcilerSettings(
        store=StoreSettings(bucket="test-bucket"),
        root_dir=tmp_path / "work",
    )


@pytest.fixture
def seed_artifact(store: InMemoryObjectStore, hasher: Hasher) -> Callable[..., str]:
    """Factory fixture: put an artifact and, optionally, its record.

    ``record`` may be ``"valid"`` (correct digest), ``None`` (no record) or
    raw bytes to store as the record body.  Returns the artifact's digest.
    """

    def _factory(
        key: str,
        data: bytes | None = None,
        *,
        record: str | bytes | None = "valid",
        modified: datetime = REMOTE_TIME,
    ) -> str:
        body = data if data is not None else f"payload of {key}".encode()
        store.seed(key, body, last_modified=modified)
        digest = hasher.digest(body)
        if record == "valid":
            store.seed(f".checksums/{key}.sha1", digest.encode(), last_modified=modified)
        elif isinstance(record, bytes):
            store.seed(f".checksums/{key}.sha1", record, last_modified=modified)
        return digest

    return _factory
