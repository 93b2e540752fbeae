"""
Data Models

Legacy transfer records extracted from MySQLPlayerDataBridge and the
destination user profile document they are converted into.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


# Container layout of a player inventory in the destination format
MAIN_INVENTORY_SLOTS = 36
ARMOR_SLOTS = 4
PLAYER_INVENTORY_SIZE = MAIN_INVENTORY_SLOTS + ARMOR_SLOTS
ARMOR_SLOT_OFFSET = MAIN_INVENTORY_SLOTS


class SaveCause(Enum):
    """Why a profile was written to the destination store."""
    MPDB_MIGRATION = "MPDB_MIGRATION"


@dataclass(frozen=True)
class User:
    """A player identity shared by the legacy and destination systems."""

    uuid: UUID
    username: str


class ItemStack(BaseModel):
    """A single decoded item occupying one container slot."""

    material: str = Field(..., min_length=1, description="Item material key")
    amount: int = Field(default=1, ge=1, le=127, description="Stack size")
    data: dict[str, Any] = Field(default_factory=dict, description="Item metadata")

    model_config = {"frozen": True}


# Ordered container contents; None marks an empty slot
ItemList = list[ItemStack | None]


@dataclass(frozen=True)
class LegacyTransferRecord:
    """
    One row of the MySQLPlayerDataBridge export query.

    The serialized fields are opaque legacy blobs, only meaningful to a
    LegacyCodec.
    """

    user: User
    serialized_inventory: str
    serialized_armor: str
    serialized_ender_chest: str
    exp_level: int
    exp_progress: float
    total_exp: int


class StatusData(BaseModel):
    """Health, hunger and experience state."""

    health: float = 20.0
    max_health: float = 20.0
    health_scale: float = 0.0
    hunger: int = 20
    saturation: float = 10.0
    saturation_exhaustion: float = 1.0
    selected_item_slot: int = 0
    total_experience: int = Field(default=0, ge=0)
    exp_level: int = Field(default=0, ge=0)
    exp_progress: float = 0.0
    game_mode: str = "SURVIVAL"
    is_flying: bool = False


class ItemData(BaseModel):
    """A container serialized by the destination item codec."""

    serialized_items: str = ""


class PotionEffectData(BaseModel):
    serialized_potion_effects: str = ""


class StatisticsData(BaseModel):
    untyped_statistics: dict[str, int] = Field(default_factory=dict)
    block_statistics: dict[str, dict[str, int]] = Field(default_factory=dict)
    item_statistics: dict[str, dict[str, int]] = Field(default_factory=dict)
    entity_statistics: dict[str, dict[str, int]] = Field(default_factory=dict)


class LocationData(BaseModel):
    world_name: str = "world"
    world_uuid: UUID = UUID(int=0)
    world_environment: str = "NORMAL"
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0


class PersistentDataContainerData(BaseModel):
    persistent_data_map: dict[str, Any] = Field(default_factory=dict)


class CanonicalUserProfile(BaseModel):
    """
    A user profile in the destination format.

    Only status experience, inventory and ender chest are sourced from the
    legacy data; every other block carries neutral defaults.
    """

    status: StatusData = Field(default_factory=StatusData)
    inventory: ItemData = Field(default_factory=ItemData)
    ender_chest: ItemData = Field(default_factory=ItemData)
    potion_effects: PotionEffectData = Field(default_factory=PotionEffectData)
    advancements: list[dict[str, Any]] = Field(default_factory=list)
    statistics: StatisticsData = Field(default_factory=StatisticsData)
    location: LocationData = Field(default_factory=LocationData)
    persistent_data: PersistentDataContainerData = Field(
        default_factory=PersistentDataContainerData
    )
    minecraft_version: str = ""

    def to_json(self) -> str:
        """Serialize for storage."""
        return self.model_dump_json()


# Neutral defaults for every field the legacy schema does not track
DEFAULT_PROFILE_TEMPLATE = CanonicalUserProfile()
