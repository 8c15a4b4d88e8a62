"""
storage.py
==========
Durable key-value stores for persisted session records.

The game core only needs three operations on string blobs:
    get(key) -> str | None,  set(key, value),  remove(key)

InMemoryStore is the default and what tests use. JsonFileStore keeps every
key in one JSON document on disk so a CLI game survives a restart.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from errors import StorageError

logger = logging.getLogger("informant_trail.storage")


class DurableStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class InMemoryStore:
    """Process-lifetime store backed by a dict."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """
    File-backed store: a single JSON object mapping key -> string blob.

    Writes go to a temp file in the same directory and are then moved over
    the target, so a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read store file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Store file {self.path} does not hold a JSON object")
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        except OSError as exc:
            raise StorageError(f"Cannot write store file {self.path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write store file {self.path}: {exc}") from exc
        finally:
            # Gone already when the replace succeeded.
            Path(tmp_name).unlink(missing_ok=True)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
        logger.debug("Stored %d chars under %r in %s", len(value), key, self.path)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def make_store(path: Optional[str] = None) -> DurableStore:
    """JsonFileStore when a path is configured, InMemoryStore otherwise."""
    if path:
        return JsonFileStore(path)
    return InMemoryStore()
