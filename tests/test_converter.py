"""
Tests for the RecordConverter module.
"""

import pytest

from mpdb_migrator.core.converter import ConversionError, build_player_inventory
from mpdb_migrator.core.models import (
    DEFAULT_PROFILE_TEMPLATE,
    ItemStack,
    LocationData,
    PLAYER_INVENTORY_SIZE,
)


def _blob(prefix, count):
    return ";".join(f"{prefix}_{i}:{i + 1}" for i in range(count))


class TestBuildPlayerInventory:
    """Tests for the inventory container layout."""

    def test_full_slot_mapping(self):
        """Test 36 main items and 4 armor items land in their slots."""
        inventory = [ItemStack(material=f"ITEM_{i}") for i in range(36)]
        armor = [ItemStack(material=f"ARMOR_{i}") for i in range(4)]

        contents = build_player_inventory(inventory, armor)

        assert len(contents) == PLAYER_INVENTORY_SIZE
        assert contents[:36] == inventory
        assert contents[36:40] == armor

    def test_short_lists_leave_empty_slots(self):
        """Test missing positions stay empty."""
        contents = build_player_inventory(
            [ItemStack(material="STONE"), None, ItemStack(material="DIRT")],
            [ItemStack(material="IRON_BOOTS")],
        )

        assert contents[0].material == "STONE"
        assert contents[1] is None
        assert contents[2].material == "DIRT"
        assert all(slot is None for slot in contents[3:36])
        assert contents[36].material == "IRON_BOOTS"
        assert contents[37:40] == [None, None, None]

    def test_overflow_is_dropped(self):
        """Test items past the end of a region are not written elsewhere."""
        inventory = [ItemStack(material="STONE")] * 40
        armor = [ItemStack(material="IRON_BOOTS")] * 6

        contents = build_player_inventory(inventory, armor)

        assert len(contents) == PLAYER_INVENTORY_SIZE
        assert all(slot.material == "STONE" for slot in contents[:36])
        assert all(slot.material == "IRON_BOOTS" for slot in contents[36:])


class TestRecordConverter:
    """Tests for RecordConverter class."""

    def test_slot_mapping_through_codecs(self, converter, item_codec, make_record):
        """Test decode order is kept for inventory (0-35) and armor (36-39)."""
        record = make_record(inventory=_blob("ITEM", 36), armor=_blob("ARMOR", 4))

        profile = converter.convert(record)
        contents = item_codec.decode_items(profile.inventory.serialized_items)

        assert len(contents) == 40
        assert [item.material for item in contents[:36]] == [f"ITEM_{i}" for i in range(36)]
        assert [item.amount for item in contents[:36]] == [i + 1 for i in range(36)]
        assert [item.material for item in contents[36:]] == [f"ARMOR_{i}" for i in range(4)]

    def test_ender_chest_converted_without_remapping(self, converter, item_codec, make_record):
        """Test the ender chest keeps its decoded order and length."""
        record = make_record(ender_chest="DIAMOND:5;-;EMERALD:2")

        profile = converter.convert(record)
        contents = item_codec.decode_items(profile.ender_chest.serialized_items)

        assert len(contents) == 3
        assert contents[0] == ItemStack(material="DIAMOND", amount=5)
        assert contents[1] is None
        assert contents[2] == ItemStack(material="EMERALD", amount=2)

    def test_experience_copied(self, converter, make_record):
        """Test XP fields come from the record."""
        record = make_record(exp_level=30, exp_progress=0.75, total_exp=1395)

        status = converter.convert(record).status

        assert status.exp_level == 30
        assert status.exp_progress == 0.75
        assert status.total_experience == 1395

    def test_neutral_defaults(self, converter, make_record):
        """Test untracked fields carry the default template values."""
        profile = converter.convert(make_record())

        assert profile.status.health == 20
        assert profile.status.max_health == 20
        assert profile.status.hunger == 20
        assert profile.status.saturation == 10
        assert profile.status.game_mode == "SURVIVAL"
        assert profile.status.is_flying is False
        assert profile.potion_effects.serialized_potion_effects == ""
        assert profile.advancements == []
        assert profile.statistics.untyped_statistics == {}
        assert profile.statistics.block_statistics == {}
        assert profile.statistics.item_statistics == {}
        assert profile.statistics.entity_statistics == {}
        assert profile.location == LocationData()
        assert profile.location.world_name == "world"
        assert profile.persistent_data.persistent_data_map == {}

    def test_schema_version_tag(self, converter, make_record):
        """Test the profile is tagged with the destination version."""
        assert converter.convert(make_record()).minecraft_version == "1.19.2"

    def test_conversion_is_pure(self, converter, make_record):
        """Test converting twice gives equal profiles and leaves the template alone."""
        record = make_record()
        template_before = DEFAULT_PROFILE_TEMPLATE.model_dump()

        first = converter.convert(record)
        second = converter.convert(record)

        assert first == second
        assert first is not second
        assert DEFAULT_PROFILE_TEMPLATE.model_dump() == template_before

    @pytest.mark.parametrize("field", ["inventory", "armor", "ender_chest"])
    def test_corrupt_blob_raises(self, converter, make_record, field):
        """Test an undecodable blob fails with the offending user."""
        record = make_record(**{field: "CORRUPT"})

        with pytest.raises(ConversionError) as exc_info:
            converter.convert(record)

        assert exc_info.value.user_uuid == record.user.uuid
        assert record.user.username in str(exc_info.value)

    def test_empty_blobs(self, converter, item_codec, make_record):
        """Test empty legacy containers give an empty inventory."""
        record = make_record(inventory="", armor="", ender_chest="")

        profile = converter.convert(record)

        assert item_codec.decode_items(profile.inventory.serialized_items) == [None] * 40
        assert item_codec.decode_items(profile.ender_chest.serialized_items) == []
