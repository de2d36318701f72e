"""Unit tests for orphan detection."""

from __future__ import annotations

import logging

from s3checksums.core.classifier import Classifier
from s3checksums.core.orphans import detect_orphans, log_orphans
from s3checksums.models.classification import OrphanSets
from s3checksums.models.inventory import ArtifactInventory, ObjectInfo, RecordInventory


def _records(*keys: str) -> RecordInventory:
    return RecordInventory(
        keys=tuple(sorted(keys)),
        objects={k: ObjectInfo(key=f".checksums/{k}.sha1") for k in keys},
    )


class TestDetectOrphans:
    def test_both_directions(self):
        artifacts = ArtifactInventory(prefix="dist/", keys=("dist/a.zip", "dist/b.zip"))
        records = _records("dist/a.zip", "dist/gone.zip")

        orphans = detect_orphans(artifacts, records)

        assert orphans.orphaned_records == ("dist/gone.zip",)
        assert orphans.orphaned_artifacts == ("dist/b.zip",)

    def test_swapping_sides_swaps_lists(self):
        a = ("dist/a.zip", "dist/b.zip")
        r = ("dist/b.zip", "dist/c.zip")
        forward = detect_orphans(ArtifactInventory(prefix="dist/", keys=a), _records(*r))
        backward = detect_orphans(ArtifactInventory(prefix="dist/", keys=r), _records(*a))
        assert forward.orphaned_records == backward.orphaned_artifacts
        assert forward.orphaned_artifacts == backward.orphaned_records

    def test_records_outside_prefix_are_not_orphans(self):
        artifacts = ArtifactInventory(prefix="dist/vendor/", keys=("dist/vendor/a.zip",))
        records = _records("dist/vendor/a.zip", "dist/other/x.zip")
        assert detect_orphans(artifacts, records).orphaned_records == ()

    def test_explicit_scope_prefix(self):
        artifacts = ArtifactInventory(prefix="dist/vendor/", keys=())
        records = _records("dist/other/x.zip")
        assert detect_orphans(artifacts, records, scope_prefix="").orphaned_records == (
            "dist/other/x.zip",
        )


class TestOrphanSymmetry:
    def test_valid_keys_and_orphans_never_overlap(self, mirror, hasher):
        digest = hasher.digest(b"payload")
        artifacts = ArtifactInventory(
            prefix="dist/", keys=("dist/a.zip", "dist/b.zip", "dist/c.zip", "dist/d.zip")
        )
        records = _records("dist/a.zip", "dist/c.zip", "dist/d.zip", "dist/gone.zip")
        mirror.write_bytes("dist/a.zip", digest.encode())
        mirror.write_bytes("dist/c.zip", b"")
        mirror.write_bytes("dist/gone.zip", digest.encode())

        classification = Classifier(mirror, hasher).classify(artifacts, records)
        orphans = detect_orphans(artifacts, records)

        assert classification.valid == ("dist/a.zip",)
        assert set(classification.valid).isdisjoint(orphans.orphaned_artifacts)
        assert set(classification.valid).isdisjoint(orphans.orphaned_records)
        assert set(orphans.orphaned_records).isdisjoint(artifacts.keys)
        assert set(orphans.orphaned_artifacts) <= set(classification.missing)
        assert orphans.orphaned_records == ("dist/gone.zip",)
        assert orphans.orphaned_artifacts == ("dist/b.zip",)

class TestLogOrphans:
    def test_truncates_listing(self, caplog):
        orphans = OrphanSets(orphaned_records=tuple(f"dist/{i}.zip" for i in range(25)))
        with caplog.at_level(logging.INFO, logger="s3checksums.core.orphans"):
            log_orphans(orphans, record_prefix=".checksums/", display_limit=20)
        assert "Orphaned records in .checksums/" in caplog.text
        assert ".checksums/dist/19.zip" in caplog.text
        assert ".checksums/dist/20.zip" not in caplog.text
        assert "... and 5 more file(s)" in caplog.text
        assert "No orphaned artifacts found" in caplog.text
