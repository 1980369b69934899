"""
Local persistent storage.

Provides the synchronous key-value store that holds each store's JSON
blob on the device. Uses atomic writes for data integrity.

Key classes:
- KeyValueStore: Abstract load/save/remove interface
- FileKeyValueStore: One JSON file per key
- MemoryKeyValueStore: In-process store for tests and ephemeral sessions
"""

from .file_ops import read_json, write_json_atomic
from .store import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

__all__ = [
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    # Low-level file operations
    "read_json",
    "write_json_atomic",
]
