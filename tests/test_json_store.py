"""Tests for key-value storage adapters."""

import json

import pytest

from dailyq.adapters.json_store import JsonFileStore, MemoryStore, StorageError


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "store.json"


class TestJsonFileStore:
    def test_missing_file_reads_empty(self, path):
        store = JsonFileStore(path)
        assert store.get("anything") is None
        assert store.keys() == []

    def test_set_creates_parent_dirs(self, path):
        store = JsonFileStore(path)
        store.set("answer_2024-01-05", "hello")
        assert path.exists()
        assert json.loads(path.read_text())["answer_2024-01-05"] == "hello"

    def test_values_keep_their_types(self, path):
        store = JsonFileStore(path)
        store.set("flag", True)
        store.set("hour", 7)
        store.set("todos", [{"text": "a"}])
        assert store.get("flag") is True
        assert store.get("hour") == 7
        assert store.get("todos") == [{"text": "a"}]

    def test_unicode_kept_readable(self, path):
        store = JsonFileStore(path)
        store.set("question", "오늘 가장 감사했던 일은?")
        assert "오늘" in path.read_text(encoding="utf-8")

    def test_delete(self, path):
        store = JsonFileStore(path)
        store.set("a", 1)
        store.set("b", 2)
        store.delete("a")
        store.delete("missing")
        assert store.keys() == ["b"]

    def test_clear_removes_file(self, path):
        store = JsonFileStore(path)
        store.set("a", 1)
        store.clear()
        assert not path.exists()
        assert store.get("a") is None

    def test_clear_without_file(self, path):
        JsonFileStore(path).clear()

    def test_corrupt_file_raises(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("{broken")
        with pytest.raises(StorageError, match="Failed to read"):
            JsonFileStore(path).get("a")

    def test_non_object_file_raises(self, path):
        path.parent.mkdir(parents=True)
        path.write_text("[1, 2]")
        with pytest.raises(StorageError, match="not an object"):
            JsonFileStore(path).get("a")

    def test_unserializable_value_raises_and_keeps_file(self, path):
        store = JsonFileStore(path)
        store.set("a", 1)
        with pytest.raises(StorageError, match="Failed to write"):
            store.set("b", object())
        assert store.get("a") == 1
        assert [p.name for p in path.parent.iterdir()] == ["store.json"]

    def test_expands_user(self):
        store = JsonFileStore("~/dailyq-test/store.json")
        assert "~" not in str(store.path)


class TestMemoryStore:
    def test_get_set(self):
        store = MemoryStore()
        store.set("a", [1, 2])
        assert store.get("a") == [1, 2]

    def test_returns_copies(self):
        store = MemoryStore()
        store.set("todos", [{"text": "a"}])
        store.get("todos").append({"text": "b"})
        assert store.get("todos") == [{"text": "a"}]

    def test_initial_values(self):
        store = MemoryStore({"a": 1})
        assert store.keys() == ["a"]

    def test_clear(self):
        store = MemoryStore({"a": 1, "b": 2})
        store.clear()
        assert store.keys() == []

    def test_unserializable_value_raises(self):
        with pytest.raises(StorageError):
            MemoryStore().set("a", object())
