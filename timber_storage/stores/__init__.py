"""
Identity-driven stores for profile, inventory, and hunts.
"""

from .base import ChangeListener, RecordCollection, SyncedStore
from .hunts import HuntStore
from .inventory import InventoryStore
from .profile import ProfileStore

__all__ = [
    "SyncedStore",
    "RecordCollection",
    "ChangeListener",
    "ProfileStore",
    "InventoryStore",
    "HuntStore",
]
