"""
Timber Storage

Dual-mode persistence for the Talkin' Timber waterfowl hunting app.

Provides:
- Profile/onboarding, inventory, and hunt log/plan stores
- Local key-value persistence for anonymous (signed-out) use
- Remote document sync (Cosmos DB, Firestore) when signed in
- One-shot migration of local data on first sign-in

Usage:

    >>> from timber_storage import SessionIdentityProvider, TimberConfig, TimberStorage
    >>> identity = SessionIdentityProvider()
    >>> async with await TimberStorage.create(TimberConfig.from_environment(), identity) as storage:
    ...     await identity.initialize()              # anonymous, local only
    ...     await storage.inventory.seed_from_master_list()
    ...     await identity.sign_in("uid-123")        # migrates local gear once
    ...     storage.inventory.list()

Remote backends:

    # Cosmos DB (default dependency)
    from timber_storage.remote import CosmosDocumentClient, CosmosConfig

    # Firestore (pip install timber-storage[firestore])
    from timber_storage.remote.firestore import FirestoreDocumentClient

    # In-memory, for offline development and tests
    from timber_storage.remote import InMemoryDocumentClient
"""

from .app import TimberStorage, build_remote_client
from .catalog import MASTER_GEAR_LIST, GearTemplate
from .checklist import SetupChecklistTracker
from .config import RemoteBackend, TimberConfig

# Exceptions
from .exceptions import (
    AuthenticationError,
    RecordNotFoundError,
    StorageConnectionError,
    StorageIOError,
    StoreNotLoadedError,
    SyncError,
    TimberStorageError,
    ValidationError,
)

# Identity module
from .identity import (
    ConfigFileIdentityProvider,
    IdentityProvider,
    IdentityState,
    SessionIdentityProvider,
)
from .local import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from .logging_utils import configure_logging
from .models import (
    GearRef,
    Harvest,
    HunterExperience,
    HuntLog,
    HuntPlan,
    InventoryCategory,
    InventoryItem,
    ItemStatus,
    LocationRef,
    PlanGearItem,
    PlanStatus,
    ProfileRecord,
    SetupChecklist,
    TemperatureUnit,
    WeatherSnapshot,
    WindSpeedUnit,
    adjust_harvest,
    category_icon,
)
from .remote import CosmosConfig, CosmosDocumentClient, InMemoryDocumentClient, RemoteDocumentClient
from .session import Anonymous, Authenticated, SessionLoading, SessionState, StoreStatus
from .stores import HuntStore, InventoryStore, ProfileStore
from .sync import BestEffortSync, SyncResult

# Conditional import for the optional Firestore backend
try:
    from .remote.firestore import FirestoreDocumentClient  # noqa: F401

    _has_firestore = True
except ImportError:
    _has_firestore = False


__all__ = [
    # Wiring
    "TimberStorage",
    "TimberConfig",
    "RemoteBackend",
    "build_remote_client",
    # Stores
    "ProfileStore",
    "InventoryStore",
    "HuntStore",
    "SetupChecklistTracker",
    "StoreStatus",
    "SessionState",
    "SessionLoading",
    "Anonymous",
    "Authenticated",
    "BestEffortSync",
    "SyncResult",
    # Records
    "ProfileRecord",
    "SetupChecklist",
    "HunterExperience",
    "TemperatureUnit",
    "WindSpeedUnit",
    "InventoryItem",
    "InventoryCategory",
    "ItemStatus",
    "HuntLog",
    "HuntPlan",
    "PlanStatus",
    "PlanGearItem",
    "GearRef",
    "Harvest",
    "LocationRef",
    "WeatherSnapshot",
    "adjust_harvest",
    "category_icon",
    "MASTER_GEAR_LIST",
    "GearTemplate",
    # Local storage
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    # Logging
    "configure_logging",
    # Remote storage
    "RemoteDocumentClient",
    "InMemoryDocumentClient",
    "CosmosDocumentClient",
    "CosmosConfig",
    # Identity
    "IdentityProvider",
    "IdentityState",
    "SessionIdentityProvider",
    "ConfigFileIdentityProvider",
    # Exceptions
    "TimberStorageError",
    "RecordNotFoundError",
    "StoreNotLoadedError",
    "StorageIOError",
    "StorageConnectionError",
    "AuthenticationError",
    "ValidationError",
    "SyncError",
]

if _has_firestore:
    __all__.append("FirestoreDocumentClient")

__version__ = "0.1.0"
