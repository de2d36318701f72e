"""Unit tests for the artifact/record key layout."""

from __future__ import annotations

import pytest

from s3checksums.core.layout import RecordLayout


class TestRecordLayout:
    def test_record_key(self, layout: RecordLayout):
        assert (
            layout.record_key("dist/vendor/pkg/1.0.0.zip")
            == ".checksums/dist/vendor/pkg/1.0.0.zip.sha1"
        )

    def test_artifact_key_inverts_record_key(self, layout: RecordLayout):
        key = "dist/a b/c.tar"
        assert layout.artifact_key(layout.record_key(key)) == key

    @pytest.mark.parametrize(
        "record_key",
        [
            "dist/a.zip.sha1",  # outside the record prefix
            ".checksums/dist/a.zip.md5",  # wrong suffix
            ".checksums/.sha1",  # nothing in between
        ],
    )
    def test_artifact_key_rejects_non_records(self, layout: RecordLayout, record_key: str):
        assert layout.artifact_key(record_key) is None

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("dist/a.zip", True),
            ("dist/a.tar", True),
            ("dist/A.ZIP", True),
            ("dist/a.tar.gz", False),
            ("dist/a.txt", False),
            ("dist/folder/", False),
            ("dist/zip", False),
            ("", False),
        ],
    )
    def test_is_candidate(self, layout: RecordLayout, key: str, expected: bool):
        assert layout.is_candidate(key) is expected

    def test_custom_extensions(self):
        layout = RecordLayout(extensions=("whl",))
        assert layout.is_candidate("dist/pkg.whl")
        assert not layout.is_candidate("dist/pkg.zip")

    def test_from_settings(self, settings):
        layout = RecordLayout.from_settings(settings)
        assert layout.record_prefix == ".checksums/"
        assert layout.suffix == ".sha1"
        assert layout.extensions == ("zip", "tar")
