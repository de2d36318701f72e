"""Unit tests for the preflight configuration guard."""

from __future__ import annotations

import pytest

from s3checksums.config import ReconcilerSettings, StoreSettings
from s3checksums.core import preflight
from s3checksums.core.preflight import ConfigurationError, run_preflight


class TestPreflight:
    def test_valid_settings_return_hasher(self, settings):
        hasher = run_preflight(settings)
        assert hasher.algorithm == "sha1"

    def test_missing_bucket(self, tmp_path):
        settings = ReconcilerSettings(store=StoreSettings(), root_dir=tmp_path)
        with pytest.raises(ConfigurationError, match="S3_BUCKET"):
            run_preflight(settings)

    def test_half_credentials(self, tmp_path):
        settings = ReconcilerSettings(
            store=StoreSettings(bucket="b", access_key_id="AKID"), root_dir=tmp_path
        )
        with pytest.raises(ConfigurationError, match="must be set together"):
            run_preflight(settings)

    def test_unknown_hash_algorithm(self, settings):
        with pytest.raises(ConfigurationError, match="S3C_HASH_ALGORITHM"):
            run_preflight(settings.with_overrides(hash_algorithm="nope"))

    def test_rclone_required_when_enabled(self, settings, monkeypatch):
        monkeypatch.setattr(preflight, "is_rclone_available", lambda: False)
        with pytest.raises(ConfigurationError, match="rclone"):
            run_preflight(settings.with_overrides(use_rclone=True))

    def test_collects_every_violation(self, tmp_path, monkeypatch):
        monkeypatch.setattr(preflight, "is_rclone_available", lambda: False)
        settings = ReconcilerSettings(
            store=StoreSettings(secret_access_key="x"),
            root_dir=tmp_path,
            use_rclone=True,
            prefix="",
        )
        with pytest.raises(ConfigurationError) as excinfo:
            run_preflight(settings)
        message = str(excinfo.value)
        for fragment in ("S3_BUCKET", "set together", "rclone", "S3C_PREFIX"):
            assert fragment in message
