"""
Key-Value Storage Backends

Durable storage used by ``KeypairStore`` to persist sandbox keypairs. Each
chain writes one whole record under its own namespace key, so a failed write
never corrupts a previously stored record.

Backends:
    - InMemoryStorage: dict-backed, lives as long as the process.
    - JsonFileStorage: a single JSON object on disk, replaced atomically.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from ..engine.exceptions import KeyPersistenceError


class KeyValueStorage(ABC):
    """
    Minimal string key-value contract.

    ``get`` returns ``None`` for a missing key. ``set``/``delete`` raise
    ``KeyPersistenceError`` when the backend is unavailable or full; callers
    decide whether that is fatal.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, mainly for tests and ephemeral sandboxes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)


class JsonFileStorage(KeyValueStorage):
    """
    Stores all keys in one JSON object at ``path``.

    Writes go to a temporary file in the same directory followed by
    ``os.replace``, so readers see either the old or the new document.
    An unreadable file is treated as empty.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".pseudo-", suffix=".json", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, sort_keys=True)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise KeyPersistenceError(f"Could not write {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._write(data)
