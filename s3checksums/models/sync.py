"""Local mirror synchronization models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class SyncMode(str, Enum):
    """Strategy used to decide whether a mirrored record must be re-downloaded.

    ``SIZE_ONLY`` ignores timestamps entirely.  Every record is a fixed-length
    hex digest, so a remote change that keeps the byte length is never
    picked up in this mode.
    """

    SIZE_ONLY = "size-only"
    MTIME = "mtime"
    MTIME_EXACT = "mtime-exact"
    CHECKSUM = "checksum"


class SyncStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"


class SyncResult(BaseModel):
    """Outcome of bringing remote records into the local mirror.

    Keys listed in ``failed`` must be treated as absent from the mirror.
    """

    model_config = ConfigDict(frozen=True)

    strategy: str
    status: SyncStatus = SyncStatus.COMPLETE
    downloaded: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def is_partial(self) -> bool:
        return self.status == SyncStatus.PARTIAL
