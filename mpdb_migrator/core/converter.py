"""
Record Converter

Converts MySQLPlayerDataBridge transfer records into destination user
profiles.
"""

from uuid import UUID

from mpdb_migrator.core.codec import CodecError, ItemCodec, LegacyCodec
from mpdb_migrator.core.models import (
    ARMOR_SLOT_OFFSET,
    ARMOR_SLOTS,
    DEFAULT_PROFILE_TEMPLATE,
    MAIN_INVENTORY_SLOTS,
    PLAYER_INVENTORY_SIZE,
    CanonicalUserProfile,
    ItemData,
    ItemList,
    LegacyTransferRecord,
)


class ConversionError(Exception):
    """Raised when a legacy record cannot be converted."""

    def __init__(self, message: str, user_uuid: UUID | None = None):
        super().__init__(message)
        self.user_uuid = user_uuid


def build_player_inventory(inventory: ItemList, armor: ItemList) -> ItemList:
    """
    Lay out a player inventory container.

    Main inventory items keep their decoded positions in slots 0-35 and armor
    items are placed in slots 36-39. Items past the end of either region are
    dropped and missing positions are left empty.
    """
    contents: ItemList = [None] * PLAYER_INVENTORY_SIZE
    for slot, item in enumerate(inventory[:MAIN_INVENTORY_SLOTS]):
        contents[slot] = item
    for slot, item in enumerate(armor[:ARMOR_SLOTS]):
        contents[ARMOR_SLOT_OFFSET + slot] = item
    return contents


class RecordConverter:
    """
    Converts legacy records into destination profiles.

    Blobs are decoded with the legacy codec and the resulting containers are
    re-encoded with the destination item codec. Everything not tracked by the
    legacy schema comes from DEFAULT_PROFILE_TEMPLATE.

    Example:
        >>> converter = RecordConverter(mpdb_codec, JsonItemCodec(), "1.19.2")
        >>> profile = converter.convert(record)
    """

    def __init__(
        self,
        legacy_codec: LegacyCodec,
        item_codec: ItemCodec,
        schema_version: str,
    ):
        self.legacy_codec = legacy_codec
        self.item_codec = item_codec
        self.schema_version = schema_version

    def convert(self, record: LegacyTransferRecord) -> CanonicalUserProfile:
        """
        Convert one record.

        Raises:
            ConversionError: If a blob cannot be decoded or re-encoded
        """
        inventory = self._decode(record, record.serialized_inventory, "inventory")
        armor = self._decode(record, record.serialized_armor, "armor")
        ender_chest = self._decode(record, record.serialized_ender_chest, "ender chest")

        contents = build_player_inventory(inventory, armor)

        try:
            serialized_inventory = self.item_codec.encode_items(contents)
            serialized_ender_chest = self.item_codec.encode_items(ender_chest)
        except CodecError as e:
            raise ConversionError(
                f"Failed to serialize items for {record.user.username}: {e}",
                user_uuid=record.user.uuid,
            ) from e

        status = DEFAULT_PROFILE_TEMPLATE.status.model_copy(update={
            "total_experience": record.total_exp,
            "exp_level": record.exp_level,
            "exp_progress": record.exp_progress,
        })

        return DEFAULT_PROFILE_TEMPLATE.model_copy(deep=True, update={
            "status": status,
            "inventory": ItemData(serialized_items=serialized_inventory),
            "ender_chest": ItemData(serialized_items=serialized_ender_chest),
            "minecraft_version": self.schema_version,
        })

    def _decode(self, record: LegacyTransferRecord, blob: str, label: str) -> ItemList:
        try:
            return list(self.legacy_codec.decode_items(blob))
        except CodecError as e:
            raise ConversionError(
                f"Failed to decode {label} data for {record.user.username} "
                f"({record.user.uuid}): {e}",
                user_uuid=record.user.uuid,
            ) from e
