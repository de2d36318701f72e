"""Run configuration: env-driven, constructed once and passed explicitly.

Two pydantic-settings classes read the environment (or a ``.env`` file):

- ``StoreSettings``: bucket identity and credentials, ``S3_*`` variables.
- ``ReconcilerSettings``: everything else, ``S3C_*`` variables.

Both are frozen.  Components never read the environment themselves; they
receive the settings object through their constructor.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from s3checksums.models.sync import SyncMode


class StoreSettings(BaseSettings):
    """Connection settings for the S3-compatible bucket.

    Examples
    --------
    ::

        export S3_BUCKET=privatesatis
        export S3_ENDPOINT=https://<account>.r2.cloudflarestorage.com
        export S3_USE_PATH_STYLE_ENDPOINT=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="S3_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    bucket: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    region: str = ""
    endpoint: str = ""
    use_path_style_endpoint: bool = False

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.access_key_id and self.secret_access_key)


class ReconcilerSettings(BaseSettings):
    """Reconciliation settings with ``S3C_*`` environment overrides.

    Examples
    --------
    ::

        export S3C_PREFIX=dist/vendor/
        export S3C_SYNC_MODE=mtime-exact
        export S3C_CHECK_ORPHANS=true
        export S3C_DRY_RUN=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="S3C_",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    store: StoreSettings = Field(default_factory=StoreSettings)

    log_level: str = "INFO"

    # Working directory: checksums/ (mirror), downloads/ (scratch), results/
    root_dir: Path = Path("temp")

    # Key layout
    prefix: str = "dist/"
    record_prefix: str = ".checksums/"
    record_suffix: str = ".sha1"
    extensions: Annotated[tuple[str, ...], NoDecode] = ("zip", "tar")
    hash_algorithm: str = "sha1"

    # Execution
    dry_run: bool = False
    batch_size: int = Field(default=20, ge=1)
    workers: int = Field(default=1, ge=1)
    keep_downloads: bool = False

    # Retry
    retry_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=1.0, ge=0)
    retry_backoff: float = Field(default=2.0, ge=1)

    # Mirror synchronization
    sync_mode: SyncMode = SyncMode.MTIME
    use_rclone: bool = False
    rclone_transfers: int = Field(default=8, ge=1)
    rclone_checkers: int = Field(default=16, ge=1)
    rclone_args: str = ""

    # Diagnostics
    check_orphans: bool = False
    orphan_display_limit: int = Field(default=20, ge=0)
    debug: bool = False
    debug_limit: int = Field(default=30, ge=1)

    @field_validator("extensions", mode="before")
    @classmethod
    def _split_extensions(cls, value: object) -> object:
        """Accept ``"zip tar"``, ``"zip,tar"`` or ``[".zip", "tar"]``."""
        if isinstance(value, str):
            value = value.replace(",", " ").split()
        if isinstance(value, (list, tuple)):
            return tuple(str(v).strip().lstrip(".").lower() for v in value if str(v).strip())
        return value

    @field_validator("record_prefix")
    @classmethod
    def _normalize_record_prefix(cls, value: str) -> str:
        value = value.lstrip("/")
        if value and not value.endswith("/"):
            value += "/"
        return value

    @property
    def checksums_dir(self) -> Path:
        return self.root_dir / "checksums"

    @property
    def downloads_dir(self) -> Path:
        return self.root_dir / "downloads"

    @property
    def results_dir(self) -> Path:
        return self.root_dir / "results"

    def with_overrides(self, **overrides: object) -> ReconcilerSettings:
        """Return a copy with non-``None`` overrides applied (CLI flags)."""
        update = {k: v for k, v in overrides.items() if v is not None}
        if not update:
            return self
        return self.model_validate({**self.model_dump(), **update})
