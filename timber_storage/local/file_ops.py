"""
JSON file operations for local storage.

Provides read/write operations for JSON blob files with:
- Atomic writes using temp file + rename (never a partial write)
- Consistent StorageIOError wrapping of OS and parse failures

All functions are synchronous; the local store never suspends.
"""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from ..exceptions import StorageIOError


def ensure_directory(path: Path) -> None:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path to ensure exists
    """
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise StorageIOError("create_directory", str(path), e) from e


def read_json(path: Path) -> Any | None:
    """Read a JSON file.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON data or None if file doesn't exist or is empty
    """
    try:
        if not path.exists():
            return None
        content = path.read_text(encoding="utf-8")
        return json.loads(content) if content.strip() else None
    except json.JSONDecodeError as e:
        raise StorageIOError("parse_json", str(path), e) from e
    except OSError as e:
        raise StorageIOError("read_json", str(path), e) from e


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON file atomically using temp file + rename.

    The payload is serialized before the temp file is created, so a
    serialization failure leaves the existing file untouched.

    Args:
        path: Target path for JSON file
        data: Data to serialize as JSON
    """
    try:
        payload = json.dumps(data, indent=2, default=_json_serializer)
    except (TypeError, ValueError) as e:
        raise StorageIOError("serialize_json", str(path), e) from e

    ensure_directory(path.parent)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=".tmp_",
        suffix=".json",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())

        # Atomic rename
        os.replace(temp_path, path)
    except Exception as e:
        # Clean up temp file on error
        try:
            os.remove(temp_path)
        except OSError:
            pass
        raise StorageIOError("write_json", str(path), e) from e


def delete_file(path: Path) -> None:
    """Delete a file if it exists.

    Args:
        path: Path to delete
    """
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise StorageIOError("delete", str(path), e) from e


def _json_serializer(obj: Any) -> Any:
    """Custom JSON serializer for non-standard types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
