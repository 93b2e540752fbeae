"""
Core migration modules.
"""

from mpdb_migrator.core.models import (
    User,
    ItemStack,
    LegacyTransferRecord,
    CanonicalUserProfile,
    DEFAULT_PROFILE_TEMPLATE,
    SaveCause,
)
from mpdb_migrator.core.codec import CodecError, LegacyCodec, ItemCodec, JsonItemCodec, load_codec
from mpdb_migrator.core.logger import MigrationLogger, AuditEntry, SummaryReport
from mpdb_migrator.core.reader import LegacyReader, LegacyReaderError, build_export_query
from mpdb_migrator.core.converter import RecordConverter, ConversionError, build_player_inventory
from mpdb_migrator.core.migrator import (
    MigrationOrchestrator,
    MigrationSummary,
    RecordFailure,
    RunState,
    FatalMigrationError,
    RecordPersistError,
)
from mpdb_migrator.core.wizard import MigrationWizard, ConfigurationError, obfuscate
from mpdb_migrator.core.session import MigrationSession


__all__ = [
    "User",
    "ItemStack",
    "LegacyTransferRecord",
    "CanonicalUserProfile",
    "DEFAULT_PROFILE_TEMPLATE",
    "SaveCause",
    "CodecError",
    "LegacyCodec",
    "ItemCodec",
    "JsonItemCodec",
    "load_codec",
    "MigrationLogger",
    "AuditEntry",
    "SummaryReport",
    "LegacyReader",
    "LegacyReaderError",
    "build_export_query",
    "RecordConverter",
    "ConversionError",
    "build_player_inventory",
    "MigrationOrchestrator",
    "MigrationSummary",
    "RecordFailure",
    "RunState",
    "FatalMigrationError",
    "RecordPersistError",
    "MigrationWizard",
    "ConfigurationError",
    "obfuscate",
    "MigrationSession",
]
