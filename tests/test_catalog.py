"""Tests for the master gear catalog."""

from timber_storage.catalog import MASTER_GEAR_LIST
from timber_storage.models import InventoryCategory, ItemStatus


class TestMasterGearList:
    """Tests for MASTER_GEAR_LIST."""

    def test_size(self):
        assert len(MASTER_GEAR_LIST) == 42

    def test_waders_are_clothing(self):
        waders = next(t for t in MASTER_GEAR_LIST if t.name == "Chest Waders")
        assert waders.category is InventoryCategory.CLOTHING

    def test_every_template_is_valid(self):
        for template in MASTER_GEAR_LIST:
            item = template.to_item()
            item.validate()
            assert item.status is ItemStatus.READY
            assert not item.is_checked

    def test_to_item_gives_fresh_ids(self):
        template = MASTER_GEAR_LIST[0]
        first, second = template.to_item(), template.to_item()

        assert first.id != second.id
        assert first.specs == second.specs == dict(template.specs)
