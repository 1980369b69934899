"""
Storage wiring and lifecycle.

TimberStorage assembles the local store, the configured remote client,
the three stores, and the checklist tracker, and starts them against one
identity provider.

Usage:

    identity = SessionIdentityProvider()
    async with await TimberStorage.create(TimberConfig.from_settings_file(), identity) as storage:
        await identity.initialize()
        await storage.inventory.seed_from_master_list()
"""

from __future__ import annotations

import logging
from typing import Any

from .checklist import SetupChecklistTracker
from .config import RemoteBackend, TimberConfig
from .identity import IdentityProvider
from .local import FileKeyValueStore, KeyValueStore
from .logging_utils import configure_logging
from .remote import CosmosDocumentClient, InMemoryDocumentClient, RemoteDocumentClient
from .stores import HuntStore, InventoryStore, ProfileStore

logger = logging.getLogger(__name__)


def build_remote_client(config: TimberConfig) -> RemoteDocumentClient | None:
    """Create the remote client selected by ``config`` (not yet initialized)."""
    backend = config.remote_backend
    if backend is RemoteBackend.NONE:
        return None
    if backend is RemoteBackend.MEMORY:
        return InMemoryDocumentClient()
    if backend is RemoteBackend.COSMOS:
        assert config.cosmos is not None
        return CosmosDocumentClient(config.cosmos)
    if backend is RemoteBackend.FIRESTORE:
        from .remote.firestore import FirestoreDocumentClient

        return FirestoreDocumentClient(
            credentials_path=config.firestore.credentials_path,
            project_id=config.firestore.project_id,
        )
    raise ValueError(f"Unsupported remote backend: {backend}")


class TimberStorage:
    """The profile, inventory, and hunt stores sharing one identity."""

    def __init__(
        self,
        identity: IdentityProvider,
        local: KeyValueStore,
        remote: RemoteDocumentClient | None = None,
        saved_locations_limit: int = 10,
    ):
        self.identity = identity
        self.local = local
        self.remote = remote
        self.profile = ProfileStore(identity, local, remote, saved_locations_limit=saved_locations_limit)
        self.inventory = InventoryStore(identity, local, remote)
        self.hunts = HuntStore(identity, local, remote)
        self.checklist = SetupChecklistTracker(self.profile, self.inventory, self.hunts)
        self._started = False

    @classmethod
    async def create(cls, config: TimberConfig | None = None, identity: IdentityProvider | None = None) -> TimberStorage:
        """Build storage from configuration.

        A remote backend that fails to initialize is dropped and the
        stores run local-only.

        Args:
            config: Storage configuration (from environment if None)
            identity: Identity provider (a SessionIdentityProvider if None)
        """
        if config is None:
            config = TimberConfig.from_environment()
        if config.log_format is not None:
            configure_logging(config.log_format, config.log_level)
        if identity is None:
            from .identity import SessionIdentityProvider

            identity = SessionIdentityProvider()

        remote = build_remote_client(config)
        if remote is not None:
            try:
                await remote.initialize()
                logger.info(f"Remote sync enabled ({config.remote_backend.value})")
            except Exception as e:
                logger.warning(f"Remote sync unavailable, running in local-only mode: {e}")
                remote = None
        else:
            logger.info("Storage initialized in local-only mode (no remote backend)")

        return cls(
            identity,
            FileKeyValueStore(config.local_path),
            remote,
            saved_locations_limit=config.saved_locations_limit,
        )

    @property
    def remote_available(self) -> bool:
        return self.remote is not None

    @property
    def stores(self) -> tuple[ProfileStore, InventoryStore, HuntStore]:
        return self.profile, self.inventory, self.hunts

    async def start(self) -> None:
        """Subscribe every store to identity changes and load current state."""
        if self._started:
            return
        self.checklist.start()
        for store in self.stores:
            await store.start()
        self._started = True

    async def flush(self) -> None:
        """Wait for all pending remote writes."""
        for store in self.stores:
            await store.sync.flush()

    async def stop(self) -> None:
        """Unsubscribe, wait for pending remote writes, and close the remote client."""
        self.checklist.stop()
        for store in self.stores:
            await store.stop()
        if self.remote is not None:
            await self.remote.close()
        self._started = False

    async def __aenter__(self) -> TimberStorage:
        await self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.stop()

    async def wipe_all_data(self) -> None:
        """Delete inventory, logs, and plans, and reset onboarding progress."""
        await self.inventory.clear()
        await self.hunts.clear_logs()
        await self.hunts.clear_plans()
        await self.profile.reset()
        logger.info("All user data wiped")
