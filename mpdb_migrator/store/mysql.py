"""
MySQL Destination Store

Writes migrated profiles into the destination user data tables.
"""

import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

import mysql.connector
from mysql.connector import Error as MySQLError
from mysql.connector.pooling import MySQLConnectionPool

from mpdb_migrator.config.loader import DestinationConfig
from mpdb_migrator.core.models import CanonicalUserProfile, SaveCause, User
from mpdb_migrator.store.interface import StoreError


CREATE_USERS_TABLE = """
CREATE TABLE IF NOT EXISTS `{users}` (
    `uuid` CHAR(36) NOT NULL,
    `username` VARCHAR(16) NOT NULL,
    PRIMARY KEY (`uuid`)
) CHARACTER SET utf8mb4
""".strip()

CREATE_USER_DATA_TABLE = """
CREATE TABLE IF NOT EXISTS `{user_data}` (
    `version_uuid` CHAR(36) NOT NULL,
    `player_uuid` CHAR(36) NOT NULL,
    `timestamp` DATETIME NOT NULL,
    `save_cause` VARCHAR(32) NOT NULL,
    `pinned` BOOLEAN NOT NULL DEFAULT FALSE,
    `data` MEDIUMTEXT NOT NULL,
    PRIMARY KEY (`version_uuid`, `player_uuid`),
    FOREIGN KEY (`player_uuid`) REFERENCES `{users}` (`uuid`) ON DELETE CASCADE
) CHARACTER SET utf8mb4
""".strip()


class MySQLDestinationStore:
    """
    Destination store backed by MySQL.

    Connections come from a pool; a semaphore keeps concurrent callers from
    exhausting it.

    Example:
        >>> store = MySQLDestinationStore(config.destination)
        >>> store.initialize()
        >>> store.wipe()
    """

    def __init__(self, config: DestinationConfig):
        self.config = config
        self.users_table = config.users_table
        self.user_data_table = config.user_data_table

        self._pool: MySQLConnectionPool | None = None
        self._pool_lock = threading.Lock()
        self._slots = threading.BoundedSemaphore(config.pool_size)

    def _get_pool(self) -> MySQLConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                try:
                    self._pool = MySQLConnectionPool(
                        pool_name="MPDB_MIGRATOR_POOL",
                        pool_size=self.config.pool_size,
                        host=self.config.host,
                        port=self.config.port,
                        user=self.config.username,
                        password=self.config.password,
                        database=self.config.database,
                        charset="utf8mb4",
                        autocommit=False,
                    )
                except MySQLError as e:
                    raise StoreError(
                        f"Failed to connect to destination database '{self.config.database}': {e}"
                    ) from e
            return self._pool

    @contextmanager
    def _connection(self) -> Iterator[mysql.connector.MySQLConnection]:
        """Borrow a pooled connection, committing on success."""
        pool = self._get_pool()
        with self._slots:
            try:
                connection = pool.get_connection()
            except MySQLError as e:
                raise StoreError(f"Failed to get destination connection: {e}") from e
            try:
                yield connection
                connection.commit()
            except MySQLError as e:
                connection.rollback()
                raise StoreError(str(e)) from e
            except Exception:
                connection.rollback()
                raise
            finally:
                connection.close()

    def initialize(self) -> None:
        """Create the destination tables if they do not exist."""
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute(CREATE_USERS_TABLE.format(users=self.users_table))
                cursor.execute(CREATE_USER_DATA_TABLE.format(
                    users=self.users_table, user_data=self.user_data_table,
                ))
            finally:
                cursor.close()

    def wipe(self) -> None:
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute(f"DELETE FROM `{self.user_data_table}`")
                cursor.execute(f"DELETE FROM `{self.users_table}`")
            finally:
                cursor.close()

    def ensure_user(self, user: User) -> None:
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute(
                    f"INSERT INTO `{self.users_table}` (`uuid`, `username`) VALUES (%s, %s) "
                    f"ON DUPLICATE KEY UPDATE `username` = VALUES(`username`)",
                    (str(user.uuid), user.username),
                )
            finally:
                cursor.close()

    def write_profile(
        self,
        user: User,
        profile: CanonicalUserProfile,
        save_cause: SaveCause,
    ) -> None:
        with self._connection() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute(
                    f"INSERT INTO `{self.user_data_table}` "
                    f"(`version_uuid`, `player_uuid`, `timestamp`, `save_cause`, `data`) "
                    f"VALUES (%s, %s, %s, %s, %s)",
                    (
                        str(uuid.uuid4()),
                        str(user.uuid),
                        datetime.now(),
                        save_cause.value,
                        profile.to_json(),
                    ),
                )
            finally:
                cursor.close()
