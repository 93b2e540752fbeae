"""
Legacy Reader

Downloads player data from the MySQLPlayerDataBridge tables with a single
join query and materializes it as transfer records.
"""

from typing import Any
from uuid import UUID

import mysql.connector

from mpdb_migrator.config.loader import SourceConfig, validate_table_name
from mpdb_migrator.core.logger import MigrationLogger
from mpdb_migrator.core.models import LegacyTransferRecord, User


class LegacyReaderError(Exception):
    """Raised when the legacy database cannot be read."""
    pass


# Identifiers cannot be bound as parameters, so table names are validated
# and backtick-quoted before being formatted in.
EXPORT_QUERY = """
SELECT `{inventory}`.`player_uuid`, `{inventory}`.`player_name`,
       `inventory`, `armor`, `enderchest`, `exp_lvl`, `exp`, `total_exp`
FROM `{inventory}`
    INNER JOIN `{ender_chest}`
        ON `{inventory}`.`player_uuid` = `{ender_chest}`.`player_uuid`
    INNER JOIN `{experience}`
        ON `{inventory}`.`player_uuid` = `{experience}`.`player_uuid`
""".strip()


def build_export_query(
    inventory_table: str,
    ender_chest_table: str,
    experience_table: str,
) -> str:
    """
    Build the export query for the given legacy table names.

    Raises:
        LegacyReaderError: If a table name fails validation
    """
    try:
        tables = {
            "inventory": validate_table_name(inventory_table),
            "ender_chest": validate_table_name(ender_chest_table),
            "experience": validate_table_name(experience_table),
        }
    except ValueError as e:
        raise LegacyReaderError(str(e)) from e

    return EXPORT_QUERY.format(**tables)


def _text(value: Any) -> str:
    """Blob columns may come back as bytes depending on the column type."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


class LegacyReader:
    """
    Reads the full MySQLPlayerDataBridge export into memory.

    The connection is owned by the reader for the duration of read_all() and
    closed before it returns.

    Example:
        >>> reader = LegacyReader(config.source, logger)
        >>> records = reader.read_all()
        >>> print(len(records))
    """

    def __init__(
        self,
        source: SourceConfig,
        logger: MigrationLogger | None = None,
        progress_interval: int = 25,
    ):
        """
        Initialize reader.

        Args:
            source: Legacy database connection settings
            logger: Sink for progress messages
            progress_interval: Log progress every N downloaded records
        """
        self.source = source
        self.logger = logger
        self.progress_interval = max(1, progress_interval)

    def read_all(self) -> list[LegacyTransferRecord]:
        """
        Run the export query and return every joined row.

        Returns:
            List of transfer records, one per player

        Raises:
            LegacyReaderError: On connection, query or row format failure
        """
        query = build_export_query(
            self.source.inventory_table,
            self.source.ender_chest_table,
            self.source.experience_table,
        )

        self._log("Establishing connection to MySQLPlayerDataBridge database...")
        try:
            connection = mysql.connector.connect(
                host=self.source.host,
                port=self.source.port,
                user=self.source.username,
                password=self.source.password,
                database=self.source.database,
                connection_timeout=self.source.connect_timeout,
                charset="utf8mb4",
            )
        except mysql.connector.Error as e:
            raise LegacyReaderError(
                f"Failed to connect to MySQLPlayerDataBridge database '{self.source.database}': {e}"
            ) from e

        records: list[LegacyTransferRecord] = []
        try:
            self._log("Downloading raw data from the MySQLPlayerDataBridge database...")
            cursor = connection.cursor(dictionary=True)
            try:
                cursor.execute(query)
                for row in cursor:
                    records.append(self._row_to_record(row))
                    if len(records) % self.progress_interval == 0:
                        self._log(
                            f"Downloaded MySQLPlayerDataBridge data for {len(records)} players..."
                        )
            finally:
                cursor.close()
        except mysql.connector.Error as e:
            raise LegacyReaderError(f"Failed to query MySQLPlayerDataBridge data: {e}") from e
        finally:
            connection.close()

        self._log(
            f"Completed download of {len(records)} entries from the "
            f"MySQLPlayerDataBridge database!"
        )
        return records

    def _row_to_record(self, row: dict[str, Any]) -> LegacyTransferRecord:
        """Map one result row to a transfer record."""
        try:
            user = User(
                uuid=UUID(_text(row["player_uuid"])),
                username=_text(row["player_name"]),
            )
            return LegacyTransferRecord(
                user=user,
                serialized_inventory=_text(row["inventory"]),
                serialized_armor=_text(row["armor"]),
                serialized_ender_chest=_text(row["enderchest"]),
                exp_level=int(row["exp_lvl"] or 0),
                exp_progress=float(row["exp"] or 0.0),
                total_exp=int(row["total_exp"] or 0),
            )
        except (KeyError, ValueError, TypeError, UnicodeDecodeError) as e:
            raise LegacyReaderError(
                f"Malformed MySQLPlayerDataBridge row for player "
                f"'{row.get('player_name', '?')}': {e}"
            ) from e

    def _log(self, message: str) -> None:
        if self.logger:
            self.logger.log_info(message)
