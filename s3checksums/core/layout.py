"""Mapping between artifact keys and hash-record keys.

``dist/vendor/pkg/1.0.0.zip`` is recorded at
``.checksums/dist/vendor/pkg/1.0.0.zip.sha1``.
"""

from __future__ import annotations

from s3checksums.config import ReconcilerSettings


class RecordLayout:
    """Derives record keys from artifact keys and back.

    Parameters
    ----------
    record_prefix:
        Prefix under which all records live (``".checksums/"``).
    suffix:
        Fixed record suffix (``".sha1"``).
    extensions:
        Allowed artifact extensions, without the leading dot.
    """

    def __init__(
        self,
        record_prefix: str = ".checksums/",
        suffix: str = ".sha1",
        extensions: tuple[str, ...] = ("zip", "tar"),
    ) -> None:
        self.record_prefix = record_prefix
        self.suffix = suffix
        self.extensions = tuple(e.lower() for e in extensions)

    @classmethod
    def from_settings(cls, settings: ReconcilerSettings) -> RecordLayout:
        return cls(settings.record_prefix, settings.record_suffix, settings.extensions)

    def record_key(self, artifact_key: str) -> str:
        return f"{self.record_prefix}{artifact_key}{self.suffix}"

    def artifact_key(self, record_key: str) -> str | None:
        """Recover the artifact key, or ``None`` if *record_key* is not a record."""
        if not record_key.startswith(self.record_prefix) or not record_key.endswith(self.suffix):
            return None
        key = record_key[len(self.record_prefix):-len(self.suffix)]
        return key or None

    def is_candidate(self, key: str) -> bool:
        """True for non-directory keys with an allowed extension."""
        if not key or key.endswith("/"):
            return False
        name = key.rsplit("/", 1)[-1]
        if "." not in name:
            return False
        return name.rsplit(".", 1)[-1].lower() in self.extensions
