"""
Configuration management for the migrator.
"""

from mpdb_migrator.config.loader import (
    ConfigLoader,
    MigrationConfig,
    SourceConfig,
    DestinationConfig,
    ImportConfig,
    LoggingConfig,
    validate_table_name,
)

__all__ = [
    "ConfigLoader",
    "MigrationConfig",
    "SourceConfig",
    "DestinationConfig",
    "ImportConfig",
    "LoggingConfig",
    "validate_table_name",
]
