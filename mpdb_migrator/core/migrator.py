"""
Migration Orchestrator

Wipes the destination, downloads the legacy data and converts and loads
each player's profile in parallel.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Protocol

from mpdb_migrator.config.loader import MigrationConfig
from mpdb_migrator.core.converter import ConversionError, RecordConverter
from mpdb_migrator.core.logger import AuditEntry, MigrationLogger
from mpdb_migrator.core.models import LegacyTransferRecord, SaveCause, User
from mpdb_migrator.core.reader import LegacyReader
from mpdb_migrator.store.interface import DestinationStore


class FatalMigrationError(Exception):
    """Raised when the run is aborted before any record is loaded."""
    pass


class RecordPersistError(Exception):
    """Raised when a converted profile cannot be written."""

    def __init__(self, message: str, user: User):
        super().__init__(message)
        self.user = user


class RunState(Enum):
    """Lifecycle of a migration run."""
    NOT_STARTED = "not_started"
    WIPING = "wiping"
    EXTRACTING = "extracting"
    CONVERTING = "converting"
    COMPLETED = "completed"
    FATAL_ABORTED = "fatal_aborted"


class RecordSource(Protocol):
    def read_all(self) -> list[LegacyTransferRecord]:
        ...


ReaderFactory = Callable[[MigrationConfig, MigrationLogger], RecordSource]


def default_reader_factory(config: MigrationConfig, logger: MigrationLogger) -> RecordSource:
    return LegacyReader(
        config.source,
        logger=logger,
        progress_interval=config.import_settings.progress_interval,
    )


@dataclass
class RecordFailure:
    """A record that could not be migrated."""

    user: User
    stage: str  # convert, persist
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class MigrationSummary:
    """Result of a completed migration run."""

    records_processed: int = 0
    succeeded: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    failures: list[RecordFailure] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "records_processed": self.records_processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "elapsed_seconds": self.elapsed_seconds,
            "failures": [
                {
                    "user_uuid": str(f.user.uuid),
                    "username": f.user.username,
                    "stage": f.stage,
                    "message": f.message,
                }
                for f in self.failures
            ],
        }


class MigrationOrchestrator:
    """
    Runs a full, destructive MySQLPlayerDataBridge migration.

    The destination is wiped before the legacy data is downloaded. Once
    conversion starts every record is handled independently and the run
    always completes; failures are collected into the summary.

    Example:
        >>> orchestrator = MigrationOrchestrator(store, converter, logger)
        >>> summary = orchestrator.run(config)
        >>> print(summary.succeeded, summary.failed)
    """

    def __init__(
        self,
        store: DestinationStore,
        converter: RecordConverter,
        logger: MigrationLogger,
        reader_factory: ReaderFactory | None = None,
        max_workers: int = 8,
    ):
        """
        Initialize orchestrator.

        Args:
            store: Destination store to wipe and load
            converter: Converts legacy records into profiles
            logger: Progress and audit sink
            reader_factory: Builds the legacy reader for a run
            max_workers: Parallel conversion/load workers
        """
        self.store = store
        self.converter = converter
        self.logger = logger
        self.reader_factory = reader_factory or default_reader_factory
        self.max_workers = max_workers

        self._state = RunState.NOT_STARTED
        self._run_lock = threading.Lock()

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def run(self, config: MigrationConfig) -> MigrationSummary:
        """
        Run the migration.

        Args:
            config: Migration settings; a private copy is used for the run

        Returns:
            MigrationSummary with counts and per-record failures

        Raises:
            FatalMigrationError: If the wipe or the legacy download fails
            RuntimeError: If a run is already in progress
        """
        if not self._run_lock.acquire(blocking=False):
            raise RuntimeError("A migration is already in progress")

        try:
            return self._run(config.model_copy(deep=True))
        finally:
            self._run_lock.release()

    def _run(self, config: MigrationConfig) -> MigrationSummary:
        started = time.monotonic()
        self.logger.start_migration(config.name)
        self.logger.log_info("Starting migration from MySQLPlayerDataBridge...")

        # 1. Wipe the destination
        self._state = RunState.WIPING
        self.logger.log_info("Preparing existing database (wiping)...")
        try:
            self.store.wipe()
        except Exception as e:
            self._abort(f"Failed to wipe the destination database: {e}")
            raise FatalMigrationError(f"Failed to wipe the destination database: {e}") from e
        self.logger.log_info(
            f"Successfully wiped user data database "
            f"(took {(time.monotonic() - started) * 1000:.0f}ms)"
        )

        # 2. Download legacy data
        self._state = RunState.EXTRACTING
        try:
            records = self.reader_factory(config, self.logger).read_all()
        except Exception as e:
            message = (
                f"Error while migrating data: {e} - "
                f"are your source database credentials correct?"
            )
            self._abort(message)
            raise FatalMigrationError(message) from e

        # 3. Convert and load each record
        self._state = RunState.CONVERTING
        self.logger.log_info(
            f"Converting raw MySQLPlayerDataBridge data for {len(records)} players..."
        )
        summary = MigrationSummary(records_processed=len(records))

        if records:
            with ThreadPoolExecutor(
                max_workers=min(self.max_workers, len(records)),
                thread_name_prefix="mpdb-migrate",
            ) as executor:
                futures = [executor.submit(self._migrate_record, record) for record in records]
                for future in as_completed(futures):
                    failure = future.result()
                    if failure is None:
                        summary.succeeded += 1
                    else:
                        summary.failed += 1
                        summary.failures.append(failure)

        # 4. Report
        summary.elapsed_seconds = time.monotonic() - started
        self._state = RunState.COMPLETED
        self.logger.log_success(
            f"Migration complete for {summary.succeeded}/{summary.records_processed} users "
            f"in {summary.elapsed_seconds:.1f} seconds!"
        )
        if summary.failed:
            self.logger.log_warning(f"{summary.failed} users could not be migrated")
        self._write_report()

        return summary

    def _migrate_record(self, record: LegacyTransferRecord) -> RecordFailure | None:
        """Convert and persist one record, returning its failure if any."""
        user = record.user
        started = time.monotonic()
        failure: RecordFailure | None = None

        try:
            profile = self.converter.convert(record)
        except ConversionError as e:
            failure = RecordFailure(user=user, stage="convert", error=e)
        except Exception as e:
            failure = RecordFailure(
                user=user,
                stage="convert",
                error=ConversionError(f"Unexpected conversion error: {e}", user_uuid=user.uuid),
            )
        else:
            try:
                self.store.ensure_user(user)
                self.store.write_profile(user, profile, SaveCause.MPDB_MIGRATION)
            except Exception as e:
                failure = RecordFailure(
                    user=user,
                    stage="persist",
                    error=RecordPersistError(f"Failed to save user data: {e}", user=user),
                )

        if failure:
            self.logger.log_error(
                f"Failed to migrate MySQLPlayerDataBridge data for "
                f"{user.username} ({user.uuid}): {failure.message}"
            )
        else:
            self.logger.log_debug(f"Migrated {user.username} ({user.uuid})")

        self.logger.log_record(AuditEntry(
            timestamp=datetime.now().isoformat(),
            user_uuid=str(user.uuid),
            username=user.username,
            action="fail" if failure else "migrate",
            success=failure is None,
            stage=failure.stage if failure else None,
            error_message=failure.message if failure else None,
            save_cause=None if failure else SaveCause.MPDB_MIGRATION.value,
            duration_ms=(time.monotonic() - started) * 1000,
        ))

        return failure

    def _abort(self, message: str) -> None:
        self._state = RunState.FATAL_ABORTED
        self.logger.log_fatal(message)
        self._write_report()

    def _write_report(self) -> None:
        """Write the audit exports; a failed write is logged, never raised."""
        try:
            self.logger.end_migration()
        except OSError as e:
            self.logger.log_error(f"Failed to write migration report: {e}")
