"""Tests for InventoryStore."""

import logging
from unittest.mock import patch

import pytest

from conftest import USER_ID, make_item
from timber_storage.catalog import MASTER_GEAR_LIST
from timber_storage.exceptions import RecordNotFoundError, StoreNotLoadedError, ValidationError
from timber_storage.keys import INVENTORY_KEY, INVENTORY_MIGRATED_KEY, INVENTORY_MIGRATION_PENDING_KEY
from timber_storage.models import InventoryCategory, ItemStatus
from timber_storage.stores import InventoryStore


@pytest.fixture
async def store(identity, local, remote):
    store = InventoryStore(identity, local, remote)
    await store.start()
    yield store
    await store.stop()


@pytest.fixture
async def anonymous(store, identity):
    await identity.initialize()
    return store


@pytest.fixture
async def signed_in(store, identity):
    await identity.sign_in(USER_ID)
    return store


def _without_timestamps(items):
    """Item dicts sorted by id, minus server-assigned timestamps."""
    return sorted(
        ({k: v for k, v in item.to_dict().items() if k not in ("createdAt", "updatedAt")} for item in items),
        key=lambda item: item["id"],
    )


class TestInventoryLoading:
    """Tests for loading and first sign-in migration."""

    @pytest.mark.asyncio
    async def test_reads_raise_while_loading(self, store):
        with pytest.raises(StoreNotLoadedError):
            store.list()
        with pytest.raises(StoreNotLoadedError):
            await store.add(make_item())

    @pytest.mark.asyncio
    async def test_anonymous_uses_local(self, anonymous, local, remote):
        item = await anonymous.add(make_item())

        assert [i.id for i in anonymous.list()] == [item.id]
        assert local.load(INVENTORY_KEY)[0]["name"] == "Shotgun"
        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_first_sign_in_migrates_local_items(self, anonymous, identity, remote, local):
        """K local items become exactly K remote documents, once."""
        for name in ("Shotgun", "Decoys", "Duck Call"):
            await anonymous.add(make_item(name))

        await identity.sign_in(USER_ID)

        assert len(remote.documents(USER_ID, "inventory")) == 3
        assert sorted(i.name for i in anonymous.list()) == ["Decoys", "Duck Call", "Shotgun"]
        assert local.load(INVENTORY_MIGRATED_KEY) == [USER_ID]

        await identity.sign_out()
        await identity.sign_in(USER_ID)

        assert len(remote.documents(USER_ID, "inventory")) == 3
        assert remote.count_calls("create", "inventory") == 3

    @pytest.mark.asyncio
    async def test_migration_is_one_shot_even_when_remote_emptied(self, anonymous, identity, remote, local):
        """A user already migrated never gets local records uploaded again."""
        await anonymous.add(make_item())
        local_blob = local.load(INVENTORY_KEY)
        await identity.sign_in(USER_ID)
        await anonymous.clear()
        await anonymous.sync.flush()
        local.save(INVENTORY_KEY, local_blob)

        await identity.sign_out()
        await identity.sign_in(USER_ID)

        assert anonymous.list() == []
        assert remote.documents(USER_ID, "inventory") == {}
        assert remote.count_calls("create", "inventory") == 1

    @pytest.mark.asyncio
    async def test_sign_out_and_back_in_restores_remote_items(self, signed_in, identity):
        item = await signed_in.add(make_item("Blind Bag", "Blind"))
        await signed_in.sync.flush()

        await identity.sign_out()
        await identity.sign_in(USER_ID)

        assert [i.id for i in signed_in.list()] == [item.id]
        assert signed_in.get(item.id).name == "Blind Bag"

    @pytest.mark.asyncio
    async def test_same_user_refire_keeps_remote_unchanged(self, signed_in, identity, remote):
        """A repeated sign-in event with a create still queued does not migrate it again."""
        remote.latency = 0.01
        item = await signed_in.add(make_item())

        await identity.sign_in(USER_ID)

        assert list(remote.documents(USER_ID, "inventory")) == [item.id]
        assert [i.id for i in signed_in.list()] == [item.id]
        assert remote.count_calls("create", "inventory") == 1

    @pytest.mark.asyncio
    async def test_round_trip_with_pending_writes(self, signed_in, identity, remote):
        """Signing out and back in right after writing yields the same items."""
        remote.latency = 0.01
        shotgun = await signed_in.add(make_item())
        await signed_in.add(make_item("Mallard Decoys", "Decoy", quantity=12))
        await signed_in.update(shotgun.id, notes="Cleaned")
        before = _without_timestamps(signed_in.list())

        await identity.sign_out()
        await identity.sign_in(USER_ID)

        assert _without_timestamps(signed_in.list()) == before
        assert len(remote.documents(USER_ID, "inventory")) == 2

    @pytest.mark.asyncio
    async def test_interrupted_migration_resumes(self, anonymous, identity, remote, local, caplog):
        """A migration cut short by a remote failure finishes on the next sign-in."""
        for name in ("Shotgun", "Decoys", "Duck Call"):
            await anonymous.add(make_item(name))
        real_create = remote.create

        async def fail_from_second_create(*args, **kwargs):
            if remote.count_calls("create", "inventory") == 1:
                remote.failing = {"create"}
            return await real_create(*args, **kwargs)

        with patch.object(remote, "create", side_effect=fail_from_second_create):
            with caplog.at_level(logging.WARNING, logger="timber_storage"):
                await identity.sign_in(USER_ID)

        assert "Remote load failed" in caplog.text
        assert len(remote.documents(USER_ID, "inventory")) == 1
        assert local.load(INVENTORY_MIGRATED_KEY) is None

        remote.failing = set()
        await identity.sign_out()
        await identity.sign_in(USER_ID)

        assert len(remote.documents(USER_ID, "inventory")) == 3
        assert sorted(i.name for i in anonymous.list()) == ["Decoys", "Duck Call", "Shotgun"]
        assert local.load(INVENTORY_MIGRATED_KEY) == [USER_ID]
        assert local.load(INVENTORY_MIGRATION_PENDING_KEY) == {}

    @pytest.mark.asyncio
    async def test_remote_list_failure_falls_back_to_local(self, anonymous, identity, remote, caplog):
        await anonymous.add(make_item())
        remote.failing = {"list_all"}

        with caplog.at_level(logging.WARNING, logger="timber_storage"):
            await identity.sign_in(USER_ID)

        assert anonymous.is_ready
        assert [i.name for i in anonymous.list()] == ["Shotgun"]
        assert "Remote load failed" in caplog.text


class TestInventoryWrites:
    """Tests for inventory mutations."""

    @pytest.mark.asyncio
    async def test_read_your_writes_before_remote_confirms(self, signed_in, remote):
        """A slow remote never delays visibility of a local write."""
        remote.latency = 0.05

        item = await signed_in.add(make_item())

        assert signed_in.get(item.id) == item
        assert remote.documents(USER_ID, "inventory") == {}
        await signed_in.sync.flush()
        assert item.id in remote.documents(USER_ID, "inventory")

    @pytest.mark.asyncio
    async def test_remote_failure_is_logged(self, signed_in, remote, caplog):
        remote.failing = {"create"}

        with caplog.at_level(logging.WARNING, logger="timber_storage"):
            item = await signed_in.add(make_item())
            results = await signed_in.sync.flush()

        assert signed_in.get(item.id) is not None
        assert [r.ok for r in results] == [False]
        assert "Remote inventory.create failed" in caplog.text
        record = next(r for r in caplog.records if "inventory.create" in r.getMessage())
        assert record.user_id == USER_ID
        assert record.store == "inventory"

    @pytest.mark.asyncio
    async def test_update_sends_changed_fields(self, signed_in, remote):
        item = await signed_in.add(make_item())

        updated = await signed_in.update(item.id, quantity=2, notes="Cleaned")
        await signed_in.sync.flush()

        assert updated.updated_at >= item.updated_at
        doc = remote.documents(USER_ID, "inventory")[item.id]
        assert doc["quantity"] == 2
        assert doc["notes"] == "Cleaned"

    @pytest.mark.asyncio
    async def test_invalid_update_leaves_item_unchanged(self, anonymous):
        item = await anonymous.add(make_item())

        with pytest.raises(ValidationError):
            await anonymous.update(item.id, quantity=-1)

        assert anonymous.get(item.id).quantity == 1

    @pytest.mark.asyncio
    async def test_add_rejects_empty_name(self, anonymous):
        with pytest.raises(ValidationError):
            await anonymous.add(make_item(name=" "))

    @pytest.mark.asyncio
    async def test_delete(self, signed_in, remote):
        item = await signed_in.add(make_item())

        await signed_in.delete(item.id)
        await signed_in.sync.flush()

        assert signed_in.list() == []
        assert remote.documents(USER_ID, "inventory") == {}
        with pytest.raises(RecordNotFoundError):
            await signed_in.delete(item.id)

    @pytest.mark.asyncio
    async def test_seed_twice_duplicates_catalog(self, signed_in, remote):
        await signed_in.seed_from_master_list()
        await signed_in.seed_from_master_list()
        await signed_in.sync.flush()

        assert len(signed_in.list()) == 2 * len(MASTER_GEAR_LIST) == 84
        assert len(remote.documents(USER_ID, "inventory")) == 84

    @pytest.mark.asyncio
    async def test_clear(self, signed_in, remote, local):
        await signed_in.seed_from_master_list()
        await signed_in.clear()
        await signed_in.sync.flush()

        assert signed_in.list() == []
        assert local.load(INVENTORY_KEY) == []
        assert remote.documents(USER_ID, "inventory") == {}

    @pytest.mark.asyncio
    async def test_checks(self, anonymous):
        assert anonymous.all_checked() is False

        first = await anonymous.add(make_item("Shotgun"))
        second = await anonymous.add(make_item("Shells", "Ammo"))
        await anonymous.toggle_checked(first.id)
        assert anonymous.all_checked() is False

        await anonymous.toggle_checked(second.id)
        assert anonymous.all_checked() is True

        await anonymous.reset_checks()
        assert not any(i.is_checked for i in anonymous.list())

    @pytest.mark.asyncio
    async def test_archive_hides_item(self, anonymous):
        item = await anonymous.add(make_item())

        await anonymous.archive(item.id)

        assert anonymous.list() == []
        assert [i.id for i in anonymous.list(include_archived=True)] == [item.id]

    @pytest.mark.asyncio
    async def test_sorted_for_display(self, anonymous):
        await anonymous.add(make_item("zebra decoys", "Decoy"))
        await anonymous.add(make_item("Alpha Decoys", "Decoy"))
        await anonymous.add(make_item("Thermos", "Other", status=ItemStatus.MISSING))
        await anonymous.add(make_item("Shotgun", "Firearm"))

        ordered = anonymous.sorted_for_display()

        assert [i.name for i in ordered] == ["Thermos", "Shotgun", "Alpha Decoys", "zebra decoys"]
        assert ordered[1].category is InventoryCategory.FIREARM
