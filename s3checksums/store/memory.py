"""In-memory Object Store for tests and offline dry runs.

Objects live in a dict keyed by object key.  Listings are returned in
sorted key order, ``page_size`` objects at a time, with the next start index
as the continuation token.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from s3checksums.core.hasher import md5_hex
from s3checksums.models.inventory import ListPage, ObjectInfo
from s3checksums.store.base import ObjectNotFoundError


class InMemoryObjectStore:
    """Dict-backed bucket.

    Parameters
    ----------
    bucket:
        Name reported by ``bucket``.
    page_size:
        Maximum objects per ``list_page`` call.
    """

    def __init__(self, bucket: str = "memory", *, page_size: int = 1000) -> None:
        self._bucket = bucket
        self._page_size = page_size
        self._objects: dict[str, tuple[bytes, datetime, str]] = {}
        self.put_calls: list[str] = []
        self.get_calls: list[str] = []

    @property
    def bucket(self) -> str:
        return self._bucket

    # ------------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------------

    def seed(
        self,
        key: str,
        data: bytes,
        *,
        last_modified: datetime | None = None,
        content_type: str = "application/octet-stream",
    ) -> None:
        """Place an object without counting it as a ``put`` call."""
        self._objects[key] = (
            data,
            last_modified or datetime.now(timezone.utc),
            content_type,
        )

    def remove(self, key: str) -> None:
        self._objects.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._objects)

    def content_type(self, key: str) -> str:
        return self._objects[key][2]

    # ------------------------------------------------------------------
    # ObjectStore protocol
    # ------------------------------------------------------------------

    def _info(self, key: str) -> ObjectInfo:
        data, modified, _ = self._objects[key]
        return ObjectInfo(key=key, size=len(data), last_modified=modified, etag=md5_hex(data))

    def list_page(self, prefix: str, token: str | None = None) -> ListPage:
        matching = [k for k in sorted(self._objects) if k.startswith(prefix)]
        start = int(token) if token else 0
        end = start + self._page_size
        objects = tuple(self._info(k) for k in matching[start:end])
        next_token = str(end) if end < len(matching) else None
        return ListPage(objects=objects, next_token=next_token)

    def get(self, key: str) -> bytes:
        self.get_calls.append(key)
        if key not in self._objects:
            raise ObjectNotFoundError(key)
        return self._objects[key][0]

    def download(self, key: str, dest: Path) -> None:
        data = self.get(key)
        dest = Path(dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(data)

    def put(self, key: str, data: bytes, content_type: str = "text/plain") -> None:
        self.put_calls.append(key)
        self._objects[key] = (data, datetime.now(timezone.utc), content_type)

    def head(self, key: str) -> ObjectInfo | None:
        if key not in self._objects:
            return None
        return self._info(key)
