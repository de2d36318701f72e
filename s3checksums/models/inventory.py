"""Object listing and inventory models."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


class ObjectInfo(BaseModel):
    """Listing metadata for a single object in the store."""

    model_config = ConfigDict(frozen=True)

    key: str
    size: int = 0
    last_modified: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    etag: str = ""  # normalized: no quotes, lowercase


class ListPage(BaseModel):
    """One page of a paginated listing."""

    model_config = ConfigDict(frozen=True)

    objects: tuple[ObjectInfo, ...] = ()
    next_token: str | None = None


class RecordInventory(BaseModel):
    """Artifact keys that currently have a hash record in the store.

    ``keys`` is sorted and de-duplicated.  ``objects`` maps each artifact key
    to the listing metadata of its record object, which the mirror
    synchronizer compares against the local copy.
    """

    model_config = ConfigDict(frozen=True)

    keys: tuple[str, ...] = ()
    objects: dict[str, ObjectInfo] = {}

    def __contains__(self, key: object) -> bool:
        return key in self.objects

    def __len__(self) -> int:
        return len(self.keys)

    def key_set(self) -> frozenset[str]:
        return frozenset(self.keys)


class ArtifactInventory(BaseModel):
    """Source artifact keys with an allowed extension, sorted and unique."""

    model_config = ConfigDict(frozen=True)

    prefix: str
    keys: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.keys)

    def key_set(self) -> frozenset[str]:
        return frozenset(self.keys)
