"""Object Store contract consumed by the reconciliation core.

Keys are ``/``-delimited strings without newlines.  Listing is paginated and
treated as eventually consistent; ``get``/``put`` by key are treated as
strongly consistent.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from s3checksums.models.inventory import ListPage, ObjectInfo


class ObjectStoreError(RuntimeError):
    """Raised when an object-store request fails."""


class ObjectNotFoundError(ObjectStoreError):
    """Raised by ``get``/``download`` when the key does not exist."""


@runtime_checkable
class ObjectStore(Protocol):
    """Minimal bucket interface: list / get / download / put / head."""

    @property
    def bucket(self) -> str:
        ...

    def list_page(self, prefix: str, token: str | None = None) -> ListPage:
        """Return one page of objects under *prefix*.

        Pass the previous page's ``next_token`` to continue; ``None`` in the
        returned page means the listing is complete.
        """
        ...

    def get(self, key: str) -> bytes:
        ...

    def download(self, key: str, dest: Path) -> None:
        ...

    def put(self, key: str, data: bytes, content_type: str = "text/plain") -> None:
        ...

    def head(self, key: str) -> ObjectInfo | None:
        ...


def normalize_etag(etag: str | None) -> str:
    """Strip quotes and weak-validator markers, lowercase the remainder."""
    if not etag:
        return ""
    e = etag.strip()
    if e.startswith("W/"):
        e = e[2:]
    return e.strip('"').strip("'").lower()
