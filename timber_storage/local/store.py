"""
Local key-value store.

The local store is the device-side analog of browser localStorage: one
JSON value per fixed key. It never raises on I/O. A corrupt blob loads as
None, a failed write is logged and dropped, and the caller carries on
with its in-memory state.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from ..exceptions import StorageIOError, ValidationError
from .file_ops import delete_file, read_json, write_json_atomic

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise ValidationError("key", "must be a simple identifier", key)
    return key


class KeyValueStore(ABC):
    """Synchronous JSON key-value storage.

    ``load`` returns None when a key is absent or unreadable. ``save`` and
    ``remove`` swallow (and log) failures.
    """

    @abstractmethod
    def load(self, key: str) -> Any | None:
        """Load the value stored under ``key``."""
        ...

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Serialize ``value`` and overwrite ``key``."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...


class FileKeyValueStore(KeyValueStore):
    """Key-value store backed by one JSON file per key.

    Directory structure:
    {base_path}/
      {key}.json
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        """Initialize file storage.

        Args:
            base_path: Directory for blob files. Defaults to ~/.timber/local
        """
        self.base_path = Path(base_path) if base_path else Path.home() / ".timber" / "local"

    def _path(self, key: str) -> Path:
        return self.base_path / f"{_check_key(key)}.json"

    def load(self, key: str) -> Any | None:
        path = self._path(key)
        try:
            return read_json(path)
        except StorageIOError as e:
            logger.warning(f"Error reading local key {key!r}: {e.details.get('cause', e)}")
            return None

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        try:
            write_json_atomic(path, value)
        except StorageIOError as e:
            logger.warning(f"Error saving local key {key!r}: {e.details.get('cause', e)}")

    def remove(self, key: str) -> None:
        path = self._path(key)
        try:
            delete_file(path)
        except StorageIOError as e:
            logger.warning(f"Error removing local key {key!r}: {e.details.get('cause', e)}")


class MemoryKeyValueStore(KeyValueStore):
    """In-process key-value store.

    Values are kept as JSON text so callers get the same copy semantics
    (and the same serialization failures) as with the file store.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.save(key, value)

    def load(self, key: str) -> Any | None:
        raw = self._data.get(_check_key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Error reading local key {key!r}: {e}")
            return None

    def save(self, key: str, value: Any) -> None:
        try:
            self._data[_check_key(key)] = json.dumps(copy.deepcopy(value))
        except (TypeError, ValueError) as e:
            logger.warning(f"Error saving local key {key!r}: {e}")

    def remove(self, key: str) -> None:
        self._data.pop(_check_key(key), None)

    def put_raw(self, key: str, raw: str) -> None:
        """Store raw text under ``key`` (used to simulate corrupt blobs)."""
        self._data[_check_key(key)] = raw

    def keys(self) -> list[str]:
        return sorted(self._data)
