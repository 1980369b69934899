"""
Inventory store.

Gear items, persisted locally as one list blob and remotely as one
document per item keyed by the item's client-generated id.
"""

from __future__ import annotations

from typing import Any

from ..catalog import MASTER_GEAR_LIST
from ..keys import (
    INVENTORY_COLLECTION,
    INVENTORY_KEY,
    INVENTORY_MIGRATED_KEY,
    INVENTORY_MIGRATION_PENDING_KEY,
)
from ..models import InventoryCategory, InventoryItem, ItemStatus, document_body, utc_now
from .base import RecordCollection, SyncedStore

_CATEGORY_ORDER = {category: index for index, category in enumerate(InventoryCategory)}


class InventoryStore(SyncedStore):
    name = "inventory"

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.items: RecordCollection[InventoryItem] = RecordCollection(
            self,
            InventoryItem,
            local_key=INVENTORY_KEY,
            migrated_key=INVENTORY_MIGRATED_KEY,
            pending_key=INVENTORY_MIGRATION_PENDING_KEY,
            remote_name=INVENTORY_COLLECTION,
            order_by="updatedAt",
        )

    # =========================================================================
    # Loading
    # =========================================================================

    def _clear_state(self) -> None:
        self.items.records = []

    def _load_local(self) -> None:
        self.items.records = self.items.read_local()

    async def _fetch_remote(self, user_id: str) -> list[InventoryItem]:
        return await self.items.fetch_remote(user_id)

    def _apply_remote(self, user_id: str, loaded: list[InventoryItem]) -> None:
        self.items.records = loaded

    # =========================================================================
    # Reads
    # =========================================================================

    def list(self, include_archived: bool = False) -> list[InventoryItem]:
        self._require_ready()
        return [item for item in self.items if include_archived or not item.archived]

    def get(self, item_id: str) -> InventoryItem | None:
        self._require_ready()
        return self.items.find(item_id)

    def all_checked(self) -> bool:
        """True when there is at least one item and every item is checked."""
        items = self.list()
        return bool(items) and all(item.is_checked for item in items)

    def sorted_for_display(self) -> list[InventoryItem]:
        """Missing items first, then by category order, then by name."""
        return sorted(
            self.list(),
            key=lambda item: (
                item.status is not ItemStatus.MISSING,
                _CATEGORY_ORDER[item.category],
                item.name.lower(),
            ),
        )

    # =========================================================================
    # Writes
    # =========================================================================

    async def add(self, item: InventoryItem) -> InventoryItem:
        self._require_ready()
        item.validate()
        self.items.insert(item)
        self.items.save_local()
        body = document_body(item.to_dict())
        self.items.submit("create", lambda remote: remote.create(body, document_id=item.id))
        await self._notify()
        return item

    async def update(self, item_id: str, **fields: Any) -> InventoryItem:
        self._require_ready()
        current = self.items.require(item_id)
        updated = current.with_updates({**fields, "updated_at": utc_now()})
        updated.validate()
        self.items.replace(updated)
        self.items.save_local()
        changes = updated.wire_fields(fields)
        self.items.submit("update", lambda remote: remote.update(item_id, changes))
        await self._notify()
        return updated

    async def delete(self, item_id: str) -> None:
        """Hard-delete an item. Hunt logs and plans keep their gear snapshots."""
        self._require_ready()
        self.items.require(item_id)
        self.items.remove(item_id)
        self.items.save_local()
        self.items.submit("delete", lambda remote: remote.delete(item_id))
        await self._notify()

    async def clear(self) -> None:
        """Remove every item from the active backing store."""
        self._require_ready()
        self.items.records = []
        self.items.save_local()
        self.items.submit("delete_all", lambda remote: remote.delete_all())
        await self._notify()

    async def seed_from_master_list(self) -> list[InventoryItem]:
        """Append every catalog item as a new inventory item.

        Existing items are not checked for duplicates; seeding twice
        yields two copies of the catalog.
        """
        self._require_ready()
        seeded = [template.to_item() for template in MASTER_GEAR_LIST]
        for item in seeded:
            self.items.insert(item)
        self.items.save_local()
        for item in seeded:
            body = document_body(item.to_dict())
            self.items.submit(
                "create", lambda remote, body=body, item_id=item.id: remote.create(body, document_id=item_id)
            )
        self.log.info(f"Seeded {len(seeded)} items from the master gear list")
        await self._notify()
        return seeded

    async def toggle_checked(self, item_id: str) -> InventoryItem:
        self._require_ready()
        current = self.items.require(item_id)
        return await self.update(item_id, is_checked=not current.is_checked)

    async def reset_checks(self) -> None:
        """Uncheck every item."""
        self._require_ready()
        checked = [item for item in self.items if item.is_checked]
        now = utc_now()
        for item in checked:
            self.items.replace(item.with_updates({"is_checked": False, "updated_at": now}))
        self.items.save_local()
        for item in checked:
            self.items.submit(
                "update", lambda remote, item_id=item.id: remote.update(item_id, {"isChecked": False})
            )
        await self._notify()

    async def archive(self, item_id: str) -> InventoryItem:
        """Soft-delete an item; archived items are hidden from list()."""
        return await self.update(item_id, archived=True)
