"""
Destination stores for migrated user profiles.
"""

from mpdb_migrator.config.loader import DestinationConfig
from mpdb_migrator.store.interface import DestinationStore, StoreError
from mpdb_migrator.store.memory import InMemoryDestinationStore, StoredProfile
from mpdb_migrator.store.mysql import MySQLDestinationStore


def create_store(config: DestinationConfig) -> DestinationStore:
    """Create the destination store selected by the configuration."""
    if config.backend == "memory":
        return InMemoryDestinationStore()
    store = MySQLDestinationStore(config)
    store.initialize()
    return store


__all__ = [
    "DestinationStore",
    "StoreError",
    "InMemoryDestinationStore",
    "StoredProfile",
    "MySQLDestinationStore",
    "create_store",
]
