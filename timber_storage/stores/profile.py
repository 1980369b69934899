"""
Profile and onboarding store.

Holds the single per-user ProfileRecord. Locally it is split across a
preferences key and an onboarding key; remotely it is one document.
"""

from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Any

from ..exceptions import StoreNotLoadedError, ValidationError
from ..keys import (
    LEGACY_PREFERENCES_KEY,
    ONBOARDING_KEY,
    PROFILE_COLLECTION,
    PROFILE_DOCUMENT_ID,
    PROFILE_KEY,
)
from ..models import (
    CHECKLIST_ITEMS,
    HunterExperience,
    ProfileRecord,
    SetupChecklist,
    TemperatureUnit,
    WindSpeedUnit,
    document_body,
    utc_now,
)
from .base import SyncedStore

DEFAULT_SAVED_LOCATIONS_LIMIT = 10

# Fields carried over from pre-unification local blobs
_LEGACY_PREFERENCE_FIELDS = (
    "hunterName",
    "homeLocation",
    "temperatureUnit",
    "windSpeedUnit",
    "notificationsEnabled",
)
_LEGACY_ONBOARDING_FIELDS = {
    "hunterName": "hunterName",
    "hunterExperience": "hunterExperience",
    "hunterStyle": "hunterStyle",
    "hunterBrandAffinities": "brandAffinities",
}

DERIVED_CHECKLIST_ITEMS = ("firstHunt", "firstCheck")

_ENUM_FIELDS: dict[str, type[Enum]] = {
    "hunter_experience": HunterExperience,
    "temperature_unit": TemperatureUnit,
    "wind_speed_unit": WindSpeedUnit,
}

_ONBOARDING_FIELDS = (
    "onboarding_completed",
    "onboarding_completed_at",
    "setup_checklist",
    "tooltips_shown",
)


class ProfileStore(SyncedStore):
    """Per-user preferences, onboarding progress, and setup checklist.

    The setup checklist is monotonic: items only go from unchecked to
    checked, and only reset() clears them.
    """

    name = "profile"

    def __init__(self, *args: Any, saved_locations_limit: int = DEFAULT_SAVED_LOCATIONS_LIMIT, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.saved_locations_limit = saved_locations_limit
        self._profile: ProfileRecord | None = None

    @property
    def profile(self) -> ProfileRecord:
        """The current profile.

        Raises:
            StoreNotLoadedError: While identity is still resolving
        """
        if self._profile is None or not self.is_ready:
            raise StoreNotLoadedError(self.name)
        return self._profile

    # =========================================================================
    # Loading
    # =========================================================================

    def _clear_state(self) -> None:
        self._profile = None

    def _load_local(self) -> None:
        self._profile = self.read_local()

    def read_local(self) -> ProfileRecord:
        """Assemble the profile from the local keys, synthesizing defaults."""
        prefs = self.local.load(PROFILE_KEY)
        onboarding = self.local.load(ONBOARDING_KEY)
        if not isinstance(onboarding, dict):
            onboarding = {}

        if not isinstance(prefs, dict):
            prefs = self._fold_legacy(onboarding)

        data = dict(prefs or {})
        for key in (*ProfileRecord.ONBOARDING_KEYS, "completed", "completedAt"):
            if key in onboarding:
                data[key] = onboarding[key]
        return ProfileRecord.from_dict(data)

    def _fold_legacy(self, onboarding: dict[str, Any]) -> dict[str, Any] | None:
        """Carry values from pre-unification keys into the preferences key once."""
        migrated: dict[str, Any] = {}
        legacy = self.local.load(LEGACY_PREFERENCES_KEY)
        if isinstance(legacy, dict):
            migrated.update({k: legacy[k] for k in _LEGACY_PREFERENCE_FIELDS if k in legacy})
        for old_key, new_key in _LEGACY_ONBOARDING_FIELDS.items():
            if onboarding.get(old_key):
                migrated[new_key] = onboarding[old_key]

        if not migrated:
            return None

        prefs, _ = ProfileRecord.from_dict(migrated).split_local()
        self.local.save(PROFILE_KEY, prefs)
        self.log.info("Folded legacy preferences into the profile")
        return prefs

    async def _fetch_remote(self, user_id: str) -> dict[str, Any] | None:
        assert self.remote is not None
        return await self.remote.get(user_id, PROFILE_COLLECTION, PROFILE_DOCUMENT_ID)

    def _apply_remote(self, user_id: str, loaded: dict[str, Any] | None) -> None:
        if loaded is not None:
            self._profile = ProfileRecord.from_dict(loaded)
            return

        # First sign-in: the local profile becomes the remote document
        self._profile = self.read_local()
        self.log.info("No remote profile found, creating it from local state")
        assert self.remote is not None
        self.sync.submit(
            "create",
            self.remote.create(
                user_id,
                PROFILE_COLLECTION,
                document_body(self._profile.to_dict()),
                document_id=PROFILE_DOCUMENT_ID,
            ),
        )

    # =========================================================================
    # Writes
    # =========================================================================

    async def _commit(self, updated: ProfileRecord, changed: list[str]) -> ProfileRecord:
        self._profile = updated
        prefs, onboarding = updated.split_local()
        self.local.save(PROFILE_KEY, prefs)
        self.local.save(ONBOARDING_KEY, onboarding)

        user_id = self._remote_user()
        if user_id is not None and changed:
            assert self.remote is not None
            self.sync.submit(
                "update",
                self.remote.update(
                    user_id, PROFILE_COLLECTION, PROFILE_DOCUMENT_ID, updated.wire_fields(changed)
                ),
            )
        await self._notify()
        return updated

    async def update(self, **fields: Any) -> ProfileRecord:
        """Apply a partial update.

        Checklist values are merged, never cleared, and the derived items
        (firstHunt, firstCheck) are ignored. Tooltip ids are only added.
        """
        current = self.profile
        fields = dict(fields)

        if "setup_checklist" in fields:
            requested = fields["setup_checklist"]
            if not isinstance(requested, SetupChecklist):
                requested = SetupChecklist.from_dict(requested)
            requested = replace(requested, first_hunt=False, first_check=False)
            fields["setup_checklist"] = current.setup_checklist.merged(requested)

        if "tooltips_shown" in fields:
            shown = list(current.tooltips_shown)
            shown.extend(t for t in fields["tooltips_shown"] if t not in shown)
            fields["tooltips_shown"] = shown

        if "saved_locations" in fields:
            fields["saved_locations"] = list(fields["saved_locations"])[: self.saved_locations_limit]

        for name, enum_cls in _ENUM_FIELDS.items():
            value = fields.get(name)
            if value is None or isinstance(value, enum_cls):
                continue
            try:
                fields[name] = enum_cls(value)
            except ValueError as e:
                choices = ", ".join(member.value for member in enum_cls)
                raise ValidationError(name, f"must be one of: {choices}", str(value)) from e

        updated = current.with_updates(fields)
        return await self._commit(updated, list(fields))

    async def set_hunter_profile(self, name: str, experience: HunterExperience | str | None) -> ProfileRecord:
        if not name or not name.strip():
            raise ValidationError("hunter_name", "must not be empty")
        return await self.update(hunter_name=name.strip(), hunter_experience=experience)

    async def complete_onboarding(self) -> ProfileRecord:
        """Finish onboarding; this also checks off the profile and gear items."""
        current = self.profile
        updated = current.with_updates(
            {
                "onboarding_completed": True,
                "onboarding_completed_at": utc_now(),
                "setup_checklist": current.setup_checklist.marked("profile", "gear"),
            }
        )
        return await self._commit(
            updated, ["onboarding_completed", "onboarding_completed_at", "setup_checklist"]
        )

    async def mark_checklist_item(self, item: str) -> ProfileRecord:
        """Check off a setup checklist item. Already-checked items are left alone.

        Raises:
            ValidationError: For unknown items and for the derived items
                (firstHunt, firstCheck), which only SetupChecklistTracker sets
        """
        if item in DERIVED_CHECKLIST_ITEMS:
            raise ValidationError("setupChecklist", f"{item} follows from hunt and inventory state")
        return await self._mark(item)

    async def _mark_derived(self, item: str) -> ProfileRecord:
        if item not in DERIVED_CHECKLIST_ITEMS:
            raise ValidationError("setupChecklist", f"not a derived checklist item: {item}")
        return await self._mark(item)

    async def _mark(self, item: str) -> ProfileRecord:
        if item not in CHECKLIST_ITEMS:
            raise ValidationError("setupChecklist", f"unknown checklist item: {item}")
        current = self.profile
        if current.setup_checklist.is_marked(item):
            return current
        updated = current.with_updates({"setup_checklist": current.setup_checklist.marked(item)})
        return await self._commit(updated, ["setup_checklist"])

    async def mark_tooltip_shown(self, tooltip_id: str) -> ProfileRecord:
        current = self.profile
        if tooltip_id in current.tooltips_shown:
            return current
        updated = current.with_updates({"tooltips_shown": [*current.tooltips_shown, tooltip_id]})
        return await self._commit(updated, ["tooltips_shown"])

    def was_tooltip_shown(self, tooltip_id: str) -> bool:
        return tooltip_id in self.profile.tooltips_shown

    def checklist_progress(self) -> tuple[int, int, int]:
        """Return (completed, total, percentage) for the setup checklist."""
        return self.profile.setup_checklist.progress()

    async def add_saved_location(self, location: str) -> ProfileRecord:
        """Move ``location`` to the front of the saved list, capped at the limit."""
        location = location.strip()
        current = self.profile
        if not location:
            return current
        saved = [location, *(loc for loc in current.saved_locations if loc != location)]
        updated = current.with_updates({"saved_locations": saved[: self.saved_locations_limit]})
        return await self._commit(updated, ["saved_locations"])

    async def remove_saved_location(self, location: str) -> ProfileRecord:
        current = self.profile
        if location not in current.saved_locations:
            return current
        saved = [loc for loc in current.saved_locations if loc != location]
        updated = current.with_updates({"saved_locations": saved})
        return await self._commit(updated, ["saved_locations"])

    async def reset(self) -> ProfileRecord:
        """Reset onboarding progress, checklist, and tooltips.

        This is the only operation that clears checklist items.
        Preferences (name, units, locations) are kept.
        """
        current = self.profile
        defaults = ProfileRecord()
        updated = current.with_updates({name: getattr(defaults, name) for name in _ONBOARDING_FIELDS})
        return await self._commit(updated, list(_ONBOARDING_FIELDS))
