from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class KeyValueStore(ABC):
    """
    Abstract string key-value storage medium.

    Values are opaque strings; the store never interprets them. Writes replace
    the whole value of a key. Implementations may raise on read/write failure;
    callers decide how to absorb it.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None if the key is missing."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete key. Missing keys are ignored."""

    @property
    def backend_name(self) -> str:
        return type(self).__name__


class InMemoryKeyValueStore(KeyValueStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = RLock()
        self._items: Dict[str, str] = dict(initial or {})

    @property
    def backend_name(self) -> str:
        return "memory"

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"value for {key!r} must be str, got {type(value).__name__}")
        with self._lock:
            self._items[key] = value

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Store backed by a single JSON object file mapping keys to string values.

    Every write rewrites the file through a temporary file in the same
    directory followed by os.replace, so readers see either the old or the new
    content. A missing file reads as an empty store.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = RLock()

    @property
    def backend_name(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        with open(self._path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self._path} does not contain a JSON object")
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=str(self._path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"value for {key!r} must be str, got {type(value).__name__}")
        with self._lock:
            try:
                data = self._read_all()
            except ValueError:
                # Unreadable file: start over rather than refuse every write.
                logger.warning("Replacing unreadable store file %s", self._path)
                data = {}
            data[key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning("Replacing unreadable store file %s", self._path)
                self._write_all({})
                return
            if data.pop(key, None) is not None:
                self._write_all(data)
