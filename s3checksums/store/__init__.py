"""Object Store backends."""

from s3checksums.store.base import (
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
)
from s3checksums.store.memory import InMemoryObjectStore

__all__ = [
    "InMemoryObjectStore",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
]
