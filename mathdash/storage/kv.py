"""
Key-Value Store - Where the history list lives.

The store:
- Maps a namespace key to a JSON string
- Is opened lazily, once, on first use
- Can be closed any number of times

Two backends: in-memory (tests, server default without a data dir) and
one-JSON-file-per-key on local disk.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from pathlib import Path
import hashlib
import threading


class KeyValueStore(ABC):
    """Abstract string-to-string store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str):
        """Store a value, replacing any previous one."""

    def close(self):
        """Release resources. Idempotent."""


class MemoryStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str):
        with self._lock:
            self._data[key] = value


class JsonFileStore(KeyValueStore):
    """
    File-based store, one file per key.

    Usage:
        store = JsonFileStore(data_dir="~/.mathdash")
        store.set("mental-math-history", "[]")
        raw = store.get("mental-math-history")
    """

    def __init__(self, data_dir: str | Path):
        self.data_dir = Path(data_dir).expanduser()
        self._ready = False
        self._closed = False
        self._lock = threading.Lock()

    def _ensure_dir(self):
        """Create the data directory on first write."""
        if not self._ready:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            self._ready = True

    def _get_path(self, key: str) -> Path:
        """
        Get file path for a key.

        Keys are hashed so any namespace string is a safe file name.
        """
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]
        return self.data_dir / f"{digest}.json"

    def get(self, key: str) -> str | None:
        path = self._get_path(key)
        with self._lock:
            if not path.exists():
                return None
            return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str):
        with self._lock:
            if self._closed:
                raise RuntimeError("Store is closed")
            self._ensure_dir()
            path = self._get_path(key)
            tmp_path = path.with_suffix(".tmp")
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)

    def close(self):
        with self._lock:
            self._closed = True
