"""Preflight configuration guard: runs before any network call.

Validates the settings once at startup and fails hard (raises
``ConfigurationError``) when a run could not proceed safely.  All
violations are collected and reported together.
"""

from __future__ import annotations

import logging

from s3checksums.config import ReconcilerSettings
from s3checksums.core.hasher import HashBackendError, Hasher
from s3checksums.core.rclone import is_rclone_available

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when the run configuration is unusable.

    The process should exit with the configuration-error status rather than
    continue.
    """


def run_preflight(settings: ReconcilerSettings) -> Hasher:
    """Validate *settings* and return the configured ``Hasher``.

    Constraints enforced
    --------------------
    1. A bucket is configured.
    2. Static credentials are either complete or absent.
    3. The hashing backend exists.
    4. ``rclone`` is on ``PATH`` when rclone sync is requested.
    5. The source prefix and extension allow-list are non-empty.

    Raises
    ------
    ConfigurationError
        If any constraint is violated.
    """
    violations: list[str] = []
    store = settings.store

    if not store.bucket:
        violations.append("S3_BUCKET is required.")

    if bool(store.access_key_id) != bool(store.secret_access_key):
        violations.append(
            "S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY must be set together."
        )

    hasher: Hasher | None = None
    try:
        hasher = Hasher(settings.hash_algorithm)
    except HashBackendError as exc:
        violations.append(f"{exc}. Set S3C_HASH_ALGORITHM to a hashlib algorithm.")

    if settings.use_rclone and not is_rclone_available():
        violations.append('Required command "rclone" not found (S3C_USE_RCLONE=true).')

    if not settings.prefix:
        violations.append("S3C_PREFIX must not be empty.")

    if not settings.extensions:
        violations.append("S3C_EXTENSIONS must list at least one extension.")

    if violations:
        msg = "Configuration check failed.\n" + "\n".join(f"  - {v}" for v in violations)
        logger.critical(msg)
        raise ConfigurationError(msg)

    assert hasher is not None
    logger.debug("Configuration check passed.")
    return hasher
