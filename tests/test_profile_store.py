"""Tests for ProfileStore."""

import asyncio
import logging

import pytest

from conftest import USER_ID
from timber_storage.exceptions import StoreNotLoadedError, ValidationError
from timber_storage.keys import LEGACY_PREFERENCES_KEY, ONBOARDING_KEY, PROFILE_KEY
from timber_storage.local import MemoryKeyValueStore
from timber_storage.models import HunterExperience, SetupChecklist, TemperatureUnit
from timber_storage.session import Anonymous, Authenticated, StoreStatus
from timber_storage.stores import ProfileStore


@pytest.fixture
async def store(identity, local, remote):
    store = ProfileStore(identity, local, remote, saved_locations_limit=3)
    await store.start()
    yield store
    await store.stop()


class TestProfileLoading:
    """Tests for identity-driven loading."""

    @pytest.mark.asyncio
    async def test_unresolved_identity(self, store):
        """Nothing is readable while identity is resolving."""
        assert store.status is StoreStatus.LOADING
        with pytest.raises(StoreNotLoadedError):
            store.profile
        with pytest.raises(StoreNotLoadedError):
            await store.update(hunter_name="Ada")

    @pytest.mark.asyncio
    async def test_anonymous_defaults(self, store, identity):
        await identity.initialize()

        assert store.status is StoreStatus.READY
        assert store.session == Anonymous()
        assert store.profile.hunter_name == "Hunter"
        assert store.profile.setup_checklist == SetupChecklist()

    @pytest.mark.asyncio
    async def test_folds_legacy_preferences(self, identity, remote):
        """Values from pre-unification keys are carried into the profile."""
        local = MemoryKeyValueStore(
            {
                LEGACY_PREFERENCES_KEY: {"hunterName": "Old Timer", "temperatureUnit": "C"},
                ONBOARDING_KEY: {"completed": True, "hunterExperience": "veteran"},
            }
        )
        store = ProfileStore(identity, local, remote)
        await store.start()
        await identity.initialize()

        profile = store.profile
        assert profile.hunter_name == "Old Timer"
        assert profile.temperature_unit is TemperatureUnit.C
        assert profile.hunter_experience is HunterExperience.VETERAN
        assert profile.onboarding_completed is True
        assert local.load(PROFILE_KEY)["hunterName"] == "Old Timer"

    @pytest.mark.asyncio
    async def test_remote_profile_wins(self, store, identity, remote):
        await remote.create(USER_ID, "profile", {"hunterName": "Remote Ada"}, "data")
        await identity.initialize()
        await store.update(hunter_name="Local Bob")

        await identity.sign_in(USER_ID)

        assert store.session == Authenticated(USER_ID)
        assert store.profile.hunter_name == "Remote Ada"
        assert remote.count_calls("create", "profile") == 1

    @pytest.mark.asyncio
    async def test_first_sign_in_creates_remote_profile(self, store, identity, remote):
        """Without a remote profile, the local one is written up."""
        await identity.initialize()
        await store.set_hunter_profile("Ada", "intermediate")

        await identity.sign_in(USER_ID)
        await store.sync.flush()

        doc = remote.documents(USER_ID, "profile")["data"]
        assert doc["hunterName"] == "Ada"
        assert doc["hunterExperience"] == "intermediate"
        assert store.profile.hunter_name == "Ada"

    @pytest.mark.asyncio
    async def test_remote_read_failure_keeps_local(self, store, identity, remote, caplog):
        await identity.initialize()
        await store.update(hunter_name="Ada")
        remote.failing = {"get"}

        with caplog.at_level(logging.WARNING, logger="timber_storage"):
            await identity.sign_in(USER_ID)

        assert store.is_ready
        assert store.profile.hunter_name == "Ada"
        assert "Remote load failed" in caplog.text
        assert remote.count_calls("create", "profile") == 0

    @pytest.mark.asyncio
    async def test_superseded_load_is_discarded(self, store, identity, remote):
        """A slow sign-in load does not overwrite state from a later sign-out."""
        await remote.create(USER_ID, "profile", {"hunterName": "Remote Ada"}, "data")
        remote.latency = 0.05

        sign_in = asyncio.create_task(identity.sign_in(USER_ID))
        await asyncio.sleep(0)
        await identity.sign_out()
        await sign_in

        assert store.session == Anonymous()
        assert store.is_ready
        assert store.profile.hunter_name == "Hunter"


class TestProfileWrites:
    """Tests for profile mutations."""

    @pytest.fixture
    async def ready(self, store, identity):
        await identity.initialize()
        return store

    @pytest.mark.asyncio
    async def test_update_splits_local_keys(self, ready, local):
        await ready.set_hunter_profile("  Ada  ", HunterExperience.FIRST)
        await ready.complete_onboarding()

        prefs = local.load(PROFILE_KEY)
        onboarding = local.load(ONBOARDING_KEY)
        assert prefs["hunterName"] == "Ada"
        assert prefs["hunterExperience"] == "first"
        assert onboarding["onboardingCompleted"] is True
        assert onboarding["setupChecklist"]["profile"] is True

    @pytest.mark.asyncio
    async def test_empty_hunter_name(self, ready):
        with pytest.raises(ValidationError):
            await ready.set_hunter_profile("   ", None)

    @pytest.mark.asyncio
    async def test_complete_onboarding(self, ready):
        profile = await ready.complete_onboarding()

        assert profile.onboarding_completed is True
        assert profile.onboarding_completed_at is not None
        assert ready.checklist_progress() == (2, 4, 50)

    @pytest.mark.asyncio
    async def test_checklist_is_monotonic(self, ready):
        """Updates never uncheck items and cannot set derived ones."""
        await ready.mark_checklist_item("profile")

        profile = await ready.update(
            setup_checklist={"profile": False, "gear": True, "firstHunt": True}
        )

        assert profile.setup_checklist == SetupChecklist(profile=True, gear=True)

    @pytest.mark.asyncio
    async def test_mark_checklist_item(self, ready):
        await ready.mark_checklist_item("gear")
        again = await ready.mark_checklist_item("gear")

        assert again.setup_checklist.gear is True
        with pytest.raises(ValidationError):
            await ready.mark_checklist_item("secondHunt")

    @pytest.mark.asyncio
    async def test_derived_items_are_not_user_settable(self, ready):
        for item in ("firstHunt", "firstCheck"):
            with pytest.raises(ValidationError):
                await ready.mark_checklist_item(item)

        assert ready.profile.setup_checklist == SetupChecklist()

    @pytest.mark.asyncio
    async def test_invalid_enum_values_are_rejected(self, ready, local):
        with pytest.raises(ValidationError) as exc_info:
            await ready.set_hunter_profile("Ada", "expert")
        with pytest.raises(ValidationError):
            await ready.update(wind_speed_unit="knots")

        assert exc_info.value.field == "hunter_experience"
        assert ready.profile.hunter_name == "Hunter"
        assert local.load(PROFILE_KEY) is None

    @pytest.mark.asyncio
    async def test_tooltips_are_recorded_once(self, ready):
        await ready.mark_tooltip_shown("inventory-intro")
        await ready.mark_tooltip_shown("inventory-intro")
        profile = await ready.update(tooltips_shown=["log-intro"])

        assert profile.tooltips_shown == ["inventory-intro", "log-intro"]
        assert ready.was_tooltip_shown("log-intro")
        assert not ready.was_tooltip_shown("plan-intro")

    @pytest.mark.asyncio
    async def test_saved_locations(self, ready):
        """Most recent first, deduplicated, capped at the limit."""
        for name in ("Marsh", "River", "Bayou", "Lake"):
            await ready.add_saved_location(name)
        await ready.add_saved_location(" River ")
        await ready.add_saved_location("")

        assert ready.profile.saved_locations == ["River", "Lake", "Bayou"]

        await ready.remove_saved_location("Lake")
        assert ready.profile.saved_locations == ["River", "Bayou"]

    @pytest.mark.asyncio
    async def test_reset_keeps_preferences(self, ready):
        await ready.set_hunter_profile("Ada", "veteran")
        await ready.complete_onboarding()
        await ready.mark_tooltip_shown("inventory-intro")

        profile = await ready.reset()

        assert profile.hunter_name == "Ada"
        assert profile.onboarding_completed is False
        assert profile.onboarding_completed_at is None
        assert profile.setup_checklist == SetupChecklist()
        assert profile.tooltips_shown == []

    @pytest.mark.asyncio
    async def test_signed_in_update_reaches_remote(self, store, identity, remote):
        await identity.sign_in(USER_ID)
        await store.update(home_location="Bayou Flats", temperature_unit="C")
        await store.sync.flush()

        doc = remote.documents(USER_ID, "profile")["data"]
        assert doc["homeLocation"] == "Bayou Flats"
        assert doc["temperatureUnit"] == "C"

    @pytest.mark.asyncio
    async def test_remote_write_failure_is_not_raised(self, store, identity, remote, local):
        await identity.sign_in(USER_ID)
        await store.sync.flush()
        remote.failing = {"update"}

        profile = await store.update(hunter_name="Ada")
        results = await store.sync.flush()

        assert profile.hunter_name == "Ada"
        assert local.load(PROFILE_KEY)["hunterName"] == "Ada"
        assert [r.ok for r in results] == [False]


class TestProfileSessions:
    """Tests for sign-out/sign-in with remote writes still queued."""

    @pytest.mark.asyncio
    async def test_round_trip_with_pending_writes(self, store, identity, remote):
        await identity.sign_in(USER_ID)
        remote.latency = 0.01
        await store.set_hunter_profile("Ada", "veteran")
        await store.add_saved_location("Bayou Flats")
        await store.complete_onboarding()
        before = store.profile

        await identity.sign_out()
        await identity.sign_in(USER_ID)

        assert store.profile == before
        assert remote.count_calls("create", "profile") == 1

    @pytest.mark.asyncio
    async def test_same_user_refire_does_not_recreate_profile(self, store, identity, remote):
        await identity.initialize()
        await store.set_hunter_profile("Ada", None)
        remote.latency = 0.01
        await identity.sign_in(USER_ID)
        await store.update(home_location="Bayou Flats")

        await identity.sign_in(USER_ID)

        doc = remote.documents(USER_ID, "profile")["data"]
        assert doc["hunterName"] == "Ada"
        assert doc["homeLocation"] == "Bayou Flats"
        assert remote.count_calls("create", "profile") == 1
        assert store.profile.home_location == "Bayou Flats"
