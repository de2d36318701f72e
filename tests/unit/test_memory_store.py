"""Unit tests for the in-memory Object Store used by the test suite."""

from __future__ import annotations

import pytest

from s3checksums.store.base import ObjectNotFoundError, ObjectStore
from s3checksums.store.memory import InMemoryObjectStore


class TestInMemoryObjectStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, ObjectStore)

    def test_pages_in_key_order(self):
        store = InMemoryObjectStore(page_size=2)
        for key in ("dist/c.zip", "dist/a.zip", "dist/b.zip"):
            store.seed(key, b"x")
        first = store.list_page("dist/")
        assert [o.key for o in first.objects] == ["dist/a.zip", "dist/b.zip"]
        second = store.list_page("dist/", first.next_token)
        assert [o.key for o in second.objects] == ["dist/c.zip"]
        assert second.next_token is None

    def test_put_records_calls_and_content_type(self, store):
        store.put("k", b"v", "text/plain")
        assert store.put_calls == ["k"]
        assert store.content_type("k") == "text/plain"
        assert store.head("k").size == 1

    def test_missing_key(self, store, tmp_path):
        with pytest.raises(ObjectNotFoundError):
            store.get("nope")
        with pytest.raises(ObjectNotFoundError):
            store.download("nope", tmp_path / "nope")
        assert store.head("nope") is None
