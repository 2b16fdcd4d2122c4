from __future__ import annotations

import json

import pytest

from state.s3_store import S3Storage
from state.storage import FileStorage, MemoryStorage, Storage, storage_from_env


def test_memory_storage_contract():
    store = MemoryStorage({"a": "1"})
    assert isinstance(store, Storage)

    assert store.get_item("a") == "1"
    assert store.get_item("missing") is None
    store.set_item("b", "2")
    store.remove_item("a")
    store.remove_item("never-there")
    assert store.snapshot() == {"b": "2"}


def test_file_storage_persists_between_instances(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    first = FileStorage(path)
    first.set_item("todos", '["a"]')
    first.set_item("user", '{"id":1}')
    first.remove_item("user")

    second = FileStorage(path)
    assert second.get_item("todos") == '["a"]'
    assert second.get_item("user") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {"todos": '["a"]'}


def test_file_storage_ignores_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")

    store = FileStorage(path)
    assert store.get_item("a") is None
    store.set_item("a", "1")
    assert FileStorage(path).get_item("a") == "1"


def test_file_storage_write_errors_propagate(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = FileStorage(blocker / "storage.json")  # parent is a file

    with pytest.raises(OSError):
        store.set_item("a", "1")


def test_file_storage_default_path_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("STATE_SYNC_DIR", str(tmp_path))
    assert FileStorage().path == tmp_path / "storage.json"


def test_storage_from_env_selects_backend(monkeypatch, tmp_path):
    monkeypatch.setenv("STATE_SYNC_STORAGE", "memory")
    assert isinstance(storage_from_env(), MemoryStorage)

    monkeypatch.setenv("STATE_SYNC_STORAGE", "file")
    monkeypatch.setenv("STATE_SYNC_DIR", str(tmp_path))
    assert isinstance(storage_from_env(), FileStorage)

    monkeypatch.delenv("STATE_SYNC_STORAGE")
    assert isinstance(storage_from_env(), FileStorage)


def test_storage_from_env_s3(monkeypatch):
    monkeypatch.setenv("STATE_SYNC_STORAGE", "s3")
    monkeypatch.setenv("STATE_SYNC_BUCKET", "bucket")
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    assert isinstance(storage_from_env(), S3Storage)


def test_storage_from_env_rejects_unknown(monkeypatch):
    monkeypatch.setenv("STATE_SYNC_STORAGE", "redis")
    with pytest.raises(RuntimeError):
        storage_from_env()


def test_file_storage_failed_write_keeps_previous_state(monkeypatch, tmp_path):
    path = tmp_path / "storage.json"
    store = FileStorage(path)
    store.set_item("a", "1")

    def partial_dump(obj, fp, **kwargs):
        fp.write('{"a": ')
        raise OSError("disk full")

    monkeypatch.setattr(json, "dump", partial_dump)
    with pytest.raises(OSError):
        store.set_item("b", "2")
    with pytest.raises(OSError):
        store.remove_item("a")
    monkeypatch.undo()

    assert store.get_item("b") is None
    assert store.get_item("a") == "1"
    assert FileStorage(path).get_item("a") == "1"
    assert [p.name for p in tmp_path.iterdir()] == ["storage.json"]
