"""
Tests for widget key-value storage.
"""

import json

from scanstation.widgets.store import JsonFileStore, MemoryStore, read_json, write_json


class TestMemoryStore:
    def test_set_get_remove(self):
        store = MemoryStore()

        store.set_item("k", "v")
        assert store.get_item("k") == "v"

        store.remove_item("k")
        assert store.get_item("k") is None

    def test_instances_are_isolated(self):
        a, b = MemoryStore(), MemoryStore()
        a.set_item("k", "v")
        assert b.get_item("k") is None


class TestJsonFileStore:
    """Tests for the file-backed store."""

    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "state" / "store.json"

        JsonFileStore(path).set_item("app100.progress", "40")

        assert JsonFileStore(path).get_item("app100.progress") == "40"
        assert json.loads(path.read_text()) == {"app100.progress": "40"}

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStore(tmp_path / "none.json").get_item("k") is None

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{broken")

        store = JsonFileStore(path)

        assert store.get_item("k") is None
        store.set_item("k", "v")
        assert store.get_item("k") == "v"

    def test_remove(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        store.set_item("a", "1")
        store.set_item("b", "2")

        store.remove_item("a")

        assert store.get_item("a") is None
        assert store.get_item("b") == "2"


class TestJsonHelpers:
    def test_round_trip(self):
        store = MemoryStore()
        write_json(store, "k", {"title": "Café", "n": [1, 2]})

        assert read_json(store, "k") == {"title": "Café", "n": [1, 2]}
        assert "Café" in store.get_item("k")

    def test_default_for_missing_or_invalid(self):
        store = MemoryStore({"bad": "{not json"})

        assert read_json(store, "missing", []) == []
        assert read_json(store, "bad", "fallback") == "fallback"
