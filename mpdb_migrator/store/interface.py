"""
Destination Store Interface

Contract for the user data store that migrated profiles are written to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mpdb_migrator.core.models import CanonicalUserProfile, SaveCause, User


class StoreError(Exception):
    """Raised when the destination store rejects an operation."""
    pass


@runtime_checkable
class DestinationStore(Protocol):
    """
    Persistent storage for user profiles.

    Implementations must accept concurrent writes for distinct users.
    """

    def wipe(self) -> None:
        """Delete all user data. A no-op on an empty store."""
        ...

    def ensure_user(self, user: User) -> None:
        """Create the user if missing, or refresh its username."""
        ...

    def write_profile(
        self,
        user: User,
        profile: CanonicalUserProfile,
        save_cause: SaveCause,
    ) -> None:
        """Persist a profile snapshot for an existing user."""
        ...
