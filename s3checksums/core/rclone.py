"""Optional external synchronizer backed by ``rclone sync --checksum``.

rclone compares object checksums instead of timestamps and parallelizes
transfers/checks itself.  Credentials reach rclone through ``RCLONE_S3_*``
environment variables so they never appear on the command line.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from collections.abc import Callable
from typing import Any

from s3checksums.config import ReconcilerSettings
from s3checksums.core.layout import RecordLayout
from s3checksums.core.mirror import LocalMirror
from s3checksums.core.retry import RetryPolicy, retry
from s3checksums.models.inventory import RecordInventory
from s3checksums.models.sync import SyncResult, SyncStatus

logger = logging.getLogger(__name__)

RCLONE_BINARY = "rclone"


class RcloneError(RuntimeError):
    """Raised when an rclone invocation exits non-zero."""


def is_rclone_available() -> bool:
    return shutil.which(RCLONE_BINARY) is not None


class RcloneSynchronizer:
    """Mirror synchronizer that delegates transfers to rclone.

    Parameters
    ----------
    settings:
        Run settings; provides the bucket, credentials and rclone tuning.
    mirror:
        Destination local mirror.
    layout:
        Record key layout.
    policy:
        Retry policy for the whole rclone invocation.
    runner:
        ``subprocess.run``-compatible callable (injectable for tests).
    """

    name = "rclone-checksum"

    def __init__(
        self,
        settings: ReconcilerSettings,
        mirror: LocalMirror,
        layout: RecordLayout,
        policy: RetryPolicy | None = None,
        *,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        self._settings = settings
        self._mirror = mirror
        self._layout = layout
        self._policy = policy or RetryPolicy()
        self._runner = runner
        self._retry_kwargs: dict[str, Any] = {"sleep": sleep} if sleep else {}

    def command(self) -> list[str]:
        store = self._settings.store
        source = f":s3:{store.bucket}/{self._layout.record_prefix}"
        cmd = [
            RCLONE_BINARY,
            "sync",
            source,
            str(self._mirror.root),
            "--checksum",
            "--transfers",
            str(self._settings.rclone_transfers),
            "--checkers",
            str(self._settings.rclone_checkers),
            "--include",
            f"*{self._layout.suffix}",
        ]
        if self._settings.rclone_args:
            cmd.extend(shlex.split(self._settings.rclone_args))
        return cmd

    def environment(self) -> dict[str, str]:
        store = self._settings.store
        env = dict(os.environ)
        env["RCLONE_S3_PROVIDER"] = env.get("RCLONE_S3_PROVIDER", "Other")
        if store.has_static_credentials:
            env["RCLONE_S3_ACCESS_KEY_ID"] = store.access_key_id
            env["RCLONE_S3_SECRET_ACCESS_KEY"] = store.secret_access_key
        else:
            env["RCLONE_S3_ENV_AUTH"] = "true"
        if store.region:
            env["RCLONE_S3_REGION"] = store.region
        if store.endpoint:
            env["RCLONE_S3_ENDPOINT"] = store.endpoint
        if store.use_path_style_endpoint:
            env["RCLONE_S3_FORCE_PATH_STYLE"] = "true"
        return env

    def _run_once(self) -> None:
        proc = self._runner(
            self.command(),
            env=self.environment(),
            capture_output=True,
            text=True,
        )
        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip().splitlines()
            tail = stderr[-1] if stderr else ""
            raise RcloneError(f"rclone exited with {proc.returncode}: {tail}")

    def sync(self, records: RecordInventory) -> SyncResult:
        """Run rclone; on failure flag every key whose local copy looks stale."""
        logger.info(
            "Syncing s3://%s/%s -> %s via rclone (transfers=%d, checkers=%d)",
            self._settings.store.bucket,
            self._layout.record_prefix,
            self._mirror.root,
            self._settings.rclone_transfers,
            self._settings.rclone_checkers,
        )
        result = retry(self._run_once, self._policy, description="rclone sync", **self._retry_kwargs)
        if result.ok:
            return SyncResult(strategy=self.name, downloaded=records.keys)

        logger.error(
            "Partial/failed rclone sync (continuing; stale records treated as absent): %s",
            result.error_message,
        )
        failed: list[str] = []
        skipped: list[str] = []
        for key in records.keys:
            local = self._mirror.stat(key)
            if local is None or local.size != records.objects[key].size:
                failed.append(key)
            else:
                skipped.append(key)
        return SyncResult(
            strategy=self.name,
            status=SyncStatus.PARTIAL,
            skipped=tuple(skipped),
            failed=tuple(failed),
        )
