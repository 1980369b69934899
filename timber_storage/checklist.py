"""
Derived setup checklist tracking.

Two checklist items are not set by the hunter directly but follow from
other stores: ``firstHunt`` once any hunt log exists, and ``firstCheck``
once every inventory item is checked at the same time.
"""

from __future__ import annotations

from collections.abc import Callable

from .stores import HuntStore, InventoryStore, ProfileStore, SyncedStore


class SetupChecklistTracker:
    """Watches inventory and hunt changes and checks off derived items.

    Marks are one-way; removing logs or unchecking gear later does not
    clear them.
    """

    def __init__(self, profile: ProfileStore, inventory: InventoryStore, hunts: HuntStore):
        self.profile = profile
        self.inventory = inventory
        self.hunts = hunts
        self._unsubscribers: list[Callable[[], None]] = []

    def start(self) -> None:
        if self._unsubscribers:
            return
        for store in (self.profile, self.inventory, self.hunts):
            self._unsubscribers.append(store.on_change(self._on_change))

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

    async def _on_change(self, store: SyncedStore) -> None:
        await self.evaluate()

    async def evaluate(self) -> None:
        """Check off derived items whose conditions currently hold."""
        if not self.profile.is_ready:
            return
        checklist = self.profile.profile.setup_checklist

        if not checklist.first_hunt and self._in_step(self.hunts) and self.hunts.log_count > 0:
            await self.profile._mark_derived("firstHunt")

        if not checklist.first_check and self._in_step(self.inventory) and self.inventory.all_checked():
            await self.profile._mark_derived("firstCheck")

    def _in_step(self, store: SyncedStore) -> bool:
        # Only state loaded for the profile's identity counts
        return store.is_ready and store.session == self.profile.session
