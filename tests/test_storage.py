import pytest

import storage
from errors import StorageError
from storage import InMemoryStore, JsonFileStore, make_store


def test_in_memory_store():
    store = InMemoryStore()
    assert store.get("k") is None
    store.set("k", "v")
    assert store.get("k") == "v"
    store.remove("k")
    store.remove("k")
    assert store.get("k") is None


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "state" / "game.json"
    store = JsonFileStore(path)
    assert store.get("a") is None

    store.set("a", "1")
    store.set("b", '{"nested": true}')

    reopened = JsonFileStore(path)
    assert reopened.get("a") == "1"
    assert reopened.get("b") == '{"nested": true}'

    reopened.remove("a")
    assert JsonFileStore(path).get("a") is None
    assert JsonFileStore(path).get("b") == '{"nested": true}'


def test_json_file_store_leaves_no_temp_files(tmp_path):
    store = JsonFileStore(tmp_path / "game.json")
    store.set("a", "1")
    assert [p.name for p in tmp_path.iterdir()] == ["game.json"]


def test_failed_replace_removes_temp_file(tmp_path, monkeypatch):
    store = JsonFileStore(tmp_path / "game.json")
    store.set("a", "1")

    def refuse(src, dst):
        raise OSError("read-only")

    monkeypatch.setattr(storage.os, "replace", refuse)
    with pytest.raises(StorageError):
        store.set("a", "2")

    assert [p.name for p in tmp_path.iterdir()] == ["game.json"]
    assert store.get("a") == "1"


def test_json_file_store_corrupt_file(tmp_path):
    path = tmp_path / "game.json"
    path.write_text("not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStore(path).get("a")


def test_json_file_store_non_object(tmp_path):
    path = tmp_path / "game.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStore(path).get("a")


def test_make_store(tmp_path):
    assert isinstance(make_store(), InMemoryStore)
    assert isinstance(make_store(str(tmp_path / "x.json")), JsonFileStore)
