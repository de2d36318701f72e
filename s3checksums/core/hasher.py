"""Content digest helpers for hash records.

The record suffix stays ``.sha1`` whatever algorithm is configured, so
existing tooling keeps finding the records.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

DEFAULT_CHUNK_SIZE = 1024 * 1024


class HashBackendError(RuntimeError):
    """Raised when the requested hashing algorithm is not available."""


class Hasher:
    """Stateless digest calculator bound to one ``hashlib`` algorithm.

    Parameters
    ----------
    algorithm:
        Any name accepted by ``hashlib.new`` (default ``"sha1"``).
    """

    def __init__(self, algorithm: str = "sha1") -> None:
        try:
            probe = hashlib.new(algorithm)
        except (ValueError, TypeError) as exc:
            raise HashBackendError(
                f"Hashing backend unavailable for algorithm {algorithm!r}"
            ) from exc
        self._algorithm = algorithm
        self._hex_length = probe.digest_size * 2
        self._sentinel = probe.hexdigest()

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def hex_length(self) -> int:
        """Length of a hex digest (40 for sha1)."""
        return self._hex_length

    @property
    def sentinel(self) -> str:
        """Digest of an empty input. A record holding it counts as empty."""
        return self._sentinel

    def digest(self, data: bytes) -> str:
        """Return the lowercase hex digest of raw bytes."""
        return hashlib.new(self._algorithm, data).hexdigest()

    def digest_file(self, path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
        """Stream a local file through the hash and return its hex digest."""
        h = hashlib.new(self._algorithm)
        with Path(path).open("rb") as fh:
            while chunk := fh.read(chunk_size):
                h.update(chunk)
        return h.hexdigest()


def md5_hex(data: bytes) -> str:
    """MD5 of raw bytes, comparable with a single-part S3 ETag."""
    return hashlib.md5(data).hexdigest()
