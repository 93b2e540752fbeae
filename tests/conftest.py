"""
Shared fixtures: a fake legacy codec, record factories and a quiet logger.
"""

import uuid

import pytest

from mpdb_migrator.config import MigrationConfig
from mpdb_migrator.core.codec import CodecError, JsonItemCodec
from mpdb_migrator.core.converter import RecordConverter
from mpdb_migrator.core.logger import MigrationLogger
from mpdb_migrator.core.models import ItemStack, LegacyTransferRecord, User


CORRUPT_BLOB = "CORRUPT"


class FakeLegacyCodec:
    """
    Decodes blobs of the form ``STONE:64;-;DIRT:3`` where ``-`` is an
    empty slot. The CORRUPT_BLOB sentinel is rejected.
    """

    def decode_items(self, blob):
        if blob == CORRUPT_BLOB:
            raise CodecError("Unreadable legacy item data")
        if not blob:
            return []
        items = []
        for part in blob.split(";"):
            if part == "-":
                items.append(None)
            else:
                material, amount = part.split(":")
                items.append(ItemStack(material=material, amount=int(amount)))
        return items


class FakeReader:
    """Returns a fixed list of records, or raises the given error."""

    def __init__(self, records=None, error=None):
        self.records = records or []
        self.error = error
        self.calls = 0
        self.config = None

    def factory(self, config, logger):
        """Reader factory hook for MigrationOrchestrator."""
        self.config = config
        return self

    def read_all(self):
        self.calls += 1
        if self.error:
            raise self.error
        return list(self.records)


@pytest.fixture
def legacy_codec():
    return FakeLegacyCodec()


@pytest.fixture
def item_codec():
    return JsonItemCodec()


@pytest.fixture
def converter(legacy_codec, item_codec):
    return RecordConverter(legacy_codec, item_codec, schema_version="1.19.2")


@pytest.fixture
def logger(tmp_path):
    return MigrationLogger(output_dir=tmp_path / "logs", console_output=False)


@pytest.fixture
def config(tmp_path):
    return MigrationConfig.model_validate({
        "name": "test_migration",
        "source": {
            "host": "db.example.net",
            "username": "mpdbadmin",
            "password": "hunter2secret",
        },
        "destination": {"backend": "memory"},
        "logging": {"output_dir": str(tmp_path / "logs"), "console_progress": False},
    })


@pytest.fixture
def make_record():
    """Factory for transfer records with unique users."""

    def factory(
        username="Steve",
        inventory="STONE:64;-;DIRT:3",
        armor="IRON_HELMET:1;IRON_CHESTPLATE:1;IRON_LEGGINGS:1;IRON_BOOTS:1",
        ender_chest="DIAMOND:5",
        exp_level=12,
        exp_progress=0.5,
        total_exp=345,
    ):
        return LegacyTransferRecord(
            user=User(uuid=uuid.uuid4(), username=username),
            serialized_inventory=inventory,
            serialized_armor=armor,
            serialized_ender_chest=ender_chest,
            exp_level=exp_level,
            exp_progress=exp_progress,
            total_exp=total_exp,
        )

    return factory


@pytest.fixture
def make_reader():
    """Factory for readers returning fixed records or failing."""

    def factory(records=None, error=None):
        return FakeReader(records=records, error=error)

    return factory
