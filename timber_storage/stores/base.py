"""
Shared machinery for identity-driven stores.

A store subscribes to the identity provider and, on every identity
change, decides which backing store is authoritative:

- SessionLoading: nothing is materialized and reads raise StoreNotLoadedError.
- Anonymous: state is loaded from the local key-value store.
- Authenticated: state is loaded from the remote document store, migrating
  pre-existing local state on first sign-in.

Writes always commit to the local store first. When signed in they are
also handed to BestEffortSync for the remote store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterator
from typing import Any, ClassVar, Generic, TypeVar, assert_never

from ..exceptions import RecordNotFoundError, StoreNotLoadedError, TimberStorageError
from ..identity import IdentityProvider, IdentityState
from ..local import KeyValueStore
from ..logging_utils import StoreLoggerAdapter, get_storage_logger
from ..models import _Record, document_body, new_id
from ..remote import RemoteCollection, RemoteDocumentClient
from ..session import Anonymous, Authenticated, SessionLoading, SessionState, StoreStatus, session_state
from ..sync import BestEffortSync

R = TypeVar("R", bound=_Record)

ChangeListener = Callable[["SyncedStore"], Awaitable[None]]


class SyncedStore(ABC):
    """Base class for stores mirrored between local and remote storage."""

    name: ClassVar[str] = "store"

    def __init__(
        self,
        identity: IdentityProvider,
        local: KeyValueStore,
        remote: RemoteDocumentClient | None = None,
    ):
        self.identity = identity
        self.local = local
        self.remote = remote
        self._session: SessionState = SessionLoading()
        self._status = StoreStatus.LOADING
        self._generation = 0
        self._unsubscribe: Callable[[], None] | None = None
        self._listeners: list[ChangeListener] = []
        self._log_context: dict[str, Any] = {"store": self.name, "user_id": None}
        self.log = StoreLoggerAdapter(get_storage_logger(self.name), self._log_context)
        self.sync = BestEffortSync(self.log, collection=self.name)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Subscribe to identity changes and load for the current identity."""
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.subscribe(self._on_identity)
        await self._on_identity(self.identity.state)

    async def stop(self) -> None:
        """Unsubscribe and wait for pending remote writes."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        await self.sync.flush()

    @property
    def status(self) -> StoreStatus:
        return self._status

    @property
    def is_ready(self) -> bool:
        return self._status is StoreStatus.READY

    @property
    def session(self) -> SessionState:
        return self._session

    def on_change(self, listener: ChangeListener) -> Callable[[], None]:
        """Register an async listener called after every load and mutation."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                await listener(self)
            except Exception:
                self.log.exception("Change listener failed")

    # =========================================================================
    # Identity-driven loading
    # =========================================================================

    async def _on_identity(self, identity: IdentityState) -> None:
        session = session_state(identity)
        self._generation += 1
        generation = self._generation
        self._session = session
        self._status = StoreStatus.LOADING
        self._log_context["user_id"] = identity.user_id

        if isinstance(session, SessionLoading):
            self._clear_state()
            return
        elif isinstance(session, Anonymous):
            self._load_local()
        elif isinstance(session, Authenticated):
            if self.remote is None:
                self.log.warning("Signed in without a remote backend, using local state")
                self._load_local()
            else:
                await self._load_authenticated(session.user_id, generation)
        else:
            assert_never(session)

        if generation != self._generation:
            return
        self._status = StoreStatus.READY
        await self._notify()

    async def _load_authenticated(self, user_id: str, generation: int) -> None:
        # Queued writes must land before the remote state is read back
        await self.sync.flush()
        if generation != self._generation:
            return
        try:
            loaded = await self._fetch_remote(user_id)
        except TimberStorageError as e:
            if generation != self._generation:
                return
            self.log.warning(f"Remote load failed, keeping local state: {e.message}")
            self._load_local()
            return
        if generation != self._generation:
            self.log.debug("Discarding load for superseded identity")
            return
        self._apply_remote(user_id, loaded)

    @abstractmethod
    def _clear_state(self) -> None:
        """Drop materialized state while identity is unresolved."""
        ...

    @abstractmethod
    def _load_local(self) -> None:
        """Materialize state from the local store."""
        ...

    @abstractmethod
    async def _fetch_remote(self, user_id: str) -> Any:
        """Fetch (and, on first sign-in, migrate) remote state."""
        ...

    @abstractmethod
    def _apply_remote(self, user_id: str, loaded: Any) -> None:
        """Adopt state returned by _fetch_remote."""
        ...

    # =========================================================================
    # Write helpers
    # =========================================================================

    def _require_ready(self) -> None:
        if self._status is not StoreStatus.READY:
            raise StoreNotLoadedError(self.name)

    def _remote_user(self) -> str | None:
        """User id whose remote store receives writes, or None for local-only."""
        if isinstance(self._session, Authenticated) and self.remote is not None:
            return self._session.user_id
        return None


class RecordCollection(Generic[R]):
    """One record collection of a store, persisted as a local list blob.

    Args:
        store: Owning store (provides local, remote, and logging)
        record_type: Record class with to_dict/from_dict
        local_key: Local key holding the list blob
        migrated_key: Local key listing users already migrated
        pending_key: Local key holding interrupted migrations
        remote_name: Remote collection name
        order_by: Remote list ordering field (descending)
        prepend: Whether new records go first in the local list
    """

    def __init__(
        self,
        store: SyncedStore,
        record_type: type[R],
        local_key: str,
        migrated_key: str,
        pending_key: str,
        remote_name: str,
        order_by: str,
        prepend: bool = False,
    ):
        self.store = store
        self.record_type = record_type
        self.local_key = local_key
        self.migrated_key = migrated_key
        self.pending_key = pending_key
        self.remote_name = remote_name
        self.order_by = order_by
        self.prepend = prepend
        self.records: list[R] = []

    def __iter__(self) -> Iterator[R]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    # Local state

    def read_local(self) -> list[R]:
        raw = self.store.local.load(self.local_key)
        return self._parse(raw if isinstance(raw, list) else [], "local")

    def save_local(self) -> None:
        self.store.local.save(self.local_key, [r.to_dict() for r in self.records])

    def _parse(self, docs: list[Any], source: str) -> list[R]:
        records: list[R] = []
        for doc in docs:
            try:
                records.append(self.record_type.from_dict(doc))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                self.store.log.warning(f"Skipping unreadable {self.remote_name} record from {source}: {e}")
        return records

    # Lookup and mutation of the in-memory list

    def find(self, record_id: str) -> R | None:
        return next((r for r in self.records if getattr(r, "id") == record_id), None)

    def require(self, record_id: str) -> R:
        record = self.find(record_id)
        if record is None:
            raise RecordNotFoundError(self.remote_name, record_id)
        return record

    def insert(self, record: R) -> None:
        if self.prepend:
            self.records.insert(0, record)
        else:
            self.records.append(record)

    def replace(self, record: R) -> None:
        record_id = getattr(record, "id")
        self.records = [record if getattr(r, "id") == record_id else r for r in self.records]

    def remove(self, record_id: str) -> None:
        self.records = [r for r in self.records if getattr(r, "id") != record_id]

    # Remote state

    def remote(self, user_id: str) -> RemoteCollection:
        if self.store.remote is None:
            raise TimberStorageError("No remote backend configured")
        return self.store.remote.collection(user_id, self.remote_name, order_by=self.order_by)

    async def fetch_remote(self, user_id: str) -> list[R]:
        """List the remote collection, migrating local records on first sign-in.

        Migration is considered only for a user never loaded before, and
        runs when local records exist and the remote collection is empty.
        A migration interrupted by a remote failure resumes on the next
        load. Every successful load marks the user as migrated.
        """
        remote = self.remote(user_id)
        docs = await remote.list_all()
        if not self.was_migrated(user_id):
            pending = self._pending_migrations().get(user_id)
            local_records = self.read_local()
            if local_records and (pending or not docs):
                await self._migrate(remote, local_records, docs, pending, user_id)
                docs = await remote.list_all()
            self._mark_migrated(user_id)
        return self._parse(docs, "remote")

    def was_migrated(self, user_id: str) -> bool:
        marker = self.store.local.load(self.migrated_key)
        return isinstance(marker, list) and user_id in marker

    def _mark_migrated(self, user_id: str) -> None:
        marker = self.store.local.load(self.migrated_key)
        users = list(marker) if isinstance(marker, list) else []
        if user_id not in users:
            users.append(user_id)
            self.store.local.save(self.migrated_key, users)

        pending = self._pending_migrations()
        if pending.pop(user_id, None) is not None:
            self.store.local.save(self.pending_key, pending)

    def _pending_migrations(self) -> dict[str, dict[str, str]]:
        pending = self.store.local.load(self.pending_key)
        return dict(pending) if isinstance(pending, dict) else {}

    async def _migrate(
        self,
        remote: RemoteCollection,
        records: list[R],
        existing: list[dict[str, Any]],
        plan: dict[str, str] | None,
        user_id: str,
    ) -> None:
        if plan:
            # Records added since the interrupted run are not part of it
            records = [r for r in records if getattr(r, "id") in plan]
            self.store.log.info(f"Resuming migration of {len(records)} {self.remote_name} records")
        else:
            # Fresh remote ids; local ids are not carried over
            plan = {getattr(r, "id"): new_id() for r in records}
            pending = self._pending_migrations()
            pending[user_id] = plan
            self.store.local.save(self.pending_key, pending)
            self.store.log.info(f"Migrating {len(records)} local {self.remote_name} records to remote")

        created = {doc.get("id") for doc in existing}
        for record in records:
            remote_id = plan[getattr(record, "id")]
            if remote_id not in created:
                await remote.create(document_body(record.to_dict()), document_id=remote_id)

    def submit(self, operation: str, write: Callable[[RemoteCollection], Awaitable[Any]]) -> None:
        """Send a write to the remote collection if signed in."""
        user_id = self.store._remote_user()
        if user_id is None:
            return
        self.store.sync.submit(f"{self.remote_name}.{operation}", write(self.remote(user_id)))

