"""
In-Memory Destination Store

Thread-safe store used for rehearsal runs and tests.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from mpdb_migrator.core.models import CanonicalUserProfile, SaveCause, User
from mpdb_migrator.store.interface import StoreError


@dataclass
class StoredProfile:
    """A profile snapshot as persisted by the store."""

    user: User
    profile: CanonicalUserProfile
    save_cause: SaveCause
    saved_at: datetime


class InMemoryDestinationStore:
    """
    Keeps users and their latest profile snapshots in dictionaries.

    Example:
        >>> store = InMemoryDestinationStore()
        >>> store.ensure_user(user)
        >>> store.write_profile(user, profile, SaveCause.MPDB_MIGRATION)
        >>> store.profile_count
        1
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[UUID, User] = {}
        self._profiles: dict[UUID, StoredProfile] = {}

    def wipe(self) -> None:
        with self._lock:
            self._users.clear()
            self._profiles.clear()

    def ensure_user(self, user: User) -> None:
        with self._lock:
            self._users[user.uuid] = user

    def write_profile(
        self,
        user: User,
        profile: CanonicalUserProfile,
        save_cause: SaveCause,
    ) -> None:
        with self._lock:
            if user.uuid not in self._users:
                raise StoreError(f"User {user.username} ({user.uuid}) does not exist")
            self._profiles[user.uuid] = StoredProfile(
                user=user,
                profile=profile,
                save_cause=save_cause,
                saved_at=datetime.now(),
            )

    def get_profile(self, uuid: UUID) -> StoredProfile | None:
        with self._lock:
            return self._profiles.get(uuid)

    def get_user(self, uuid: UUID) -> User | None:
        with self._lock:
            return self._users.get(uuid)

    @property
    def profile_count(self) -> int:
        with self._lock:
            return len(self._profiles)

    @property
    def user_count(self) -> int:
        with self._lock:
            return len(self._users)
