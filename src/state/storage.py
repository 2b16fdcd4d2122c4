from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable


ENV_STORAGE = "STATE_SYNC_STORAGE"
ENV_STORAGE_DIR = "STATE_SYNC_DIR"

DEFAULT_STORAGE_FILE = "storage.json"


@runtime_checkable
class Storage(Protocol):
    """
    String key/value store used for persisted state slices.

    - `get_item` returns None when nothing is stored under `key`.
    - `set_item` and `remove_item` may raise; the sync writer reports such
      failures as warnings instead of propagating them.
    """

    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Dict-backed storage for tests and short-lived processes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


def _default_storage_file() -> Path:
    # Prefer explicit env var, else project-local .state folder
    base = os.environ.get(ENV_STORAGE_DIR)
    if base:
        return Path(base) / DEFAULT_STORAGE_FILE
    return Path(".state") / DEFAULT_STORAGE_FILE


class FileStorage:
    """
    Storage backed by a single JSON document: { key: text, ... }.

    - Loaded lazily on first access; a missing or corrupt file starts empty.
    - Every mutation rewrites the whole file through a temp file and
      `os.replace`. Write errors propagate and leave both the file and the
      in-memory view unchanged.
    """

    def __init__(self, path: Optional[os.PathLike[str] | str] = None) -> None:
        self._path = Path(path) if path else _default_storage_file()
        self._data: Dict[str, str] = {}
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self._path.exists():
            return
        try:
            with self._path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, ValueError):
            # Corrupt storage file: start fresh
            self._data = {}
            return
        if isinstance(raw, dict):
            self._data = {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def _save(self, data: Dict[str, str]) -> None:
        # Sibling temp file, swapped in only once fully written
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
        self._data = data

    def get_item(self, key: str) -> Optional[str]:
        self._ensure_loaded()
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._ensure_loaded()
        self._save({**self._data, key: value})

    def remove_item(self, key: str) -> None:
        self._ensure_loaded()
        if key in self._data:
            self._save({k: v for k, v in self._data.items() if k != key})


def storage_from_env() -> Storage:
    """
    Select a storage backend from `STATE_SYNC_STORAGE`.

    - "memory": MemoryStorage
    - "file" (default): FileStorage under `STATE_SYNC_DIR`
    - "s3": S3Storage configured from its own environment variables
    """
    kind = (os.environ.get(ENV_STORAGE) or "file").strip().lower()
    if kind == "memory":
        return MemoryStorage()
    if kind == "file":
        return FileStorage()
    if kind == "s3":
        from .s3_store import S3Storage

        return S3Storage.from_env()
    raise RuntimeError(f"Unknown storage backend in {ENV_STORAGE}: {kind!r}")
