"""
Migration Logger

Console progress, per-user audit trail and summary reports for migration runs.
"""

import csv
import json
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.text import Text


class LogLevel(Enum):
    """Log level for entries."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


_LEVEL_ORDER = {
    LogLevel.DEBUG: 10,
    LogLevel.INFO: 20,
    LogLevel.SUCCESS: 20,
    LogLevel.WARNING: 30,
    LogLevel.ERROR: 40,
}


@dataclass
class AuditEntry:
    """A single audit log entry for one migrated user."""

    timestamp: str
    user_uuid: str
    username: str
    action: str  # migrate, fail

    # Status
    success: bool = True
    stage: str | None = None  # convert, persist
    error_message: str | None = None
    save_cause: str | None = None

    # Additional metadata
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "timestamp": self.timestamp,
            "user_uuid": self.user_uuid,
            "username": self.username,
            "action": self.action,
            "success": self.success,
            "stage": self.stage,
            "error_message": self.error_message,
            "save_cause": self.save_cause,
            "duration_ms": self.duration_ms,
        }


@dataclass
class SummaryReport:
    """Summary of a migration run."""

    migration_name: str
    started_at: datetime
    completed_at: datetime | None = None

    total_records: int = 0
    successful_records: int = 0
    failed_records: int = 0

    error_summary: dict[str, int] = field(default_factory=dict)  # error_type -> count
    fatal_error: str | None = None

    @property
    def success_rate(self) -> float:
        if self.total_records == 0:
            return 0.0
        return self.successful_records / self.total_records * 100

    @property
    def duration(self) -> str:
        if not self.completed_at:
            return "In progress"
        delta = self.completed_at - self.started_at
        minutes = int(delta.total_seconds() // 60)
        seconds = int(delta.total_seconds() % 60)
        return f"{minutes}m {seconds}s"

    def to_text(self) -> str:
        """Generate human-readable summary."""
        lines = [
            "=" * 60,
            f"MIGRATION SUMMARY: {self.migration_name}",
            "=" * 60,
            f"{'Status:':<20} {'FAILED' if self.fatal_error else 'COMPLETED'}",
            f"{'Started:':<20} {self.started_at.strftime('%Y-%m-%d %H:%M:%S')}",
            f"{'Duration:':<20} {self.duration}",
            "",
            "RECORD STATISTICS",
            "-" * 40,
            f"{'Total Records:':<20} {self.total_records:,}",
            f"{'Successful:':<20} {self.successful_records:,} ({self.success_rate:.1f}%)",
            f"{'Failed:':<20} {self.failed_records:,}",
        ]

        if self.fatal_error:
            lines.extend(["", "FATAL ERROR", "-" * 40, f"  {self.fatal_error}"])

        if self.error_summary:
            lines.extend([
                "",
                "ERROR SUMMARY",
                "-" * 40,
            ])
            for error_type, count in sorted(
                self.error_summary.items(), key=lambda x: -x[1]
            ):
                lines.append(f"  {error_type}: {count}")

        lines.append("=" * 60)
        return "\n".join(lines)


class MigrationLogger:
    """
    Logger for migration runs.

    Safe to call from the conversion worker threads.

    Features:
    - Per-user audit trail
    - JSON and CSV export
    - Human-readable summary reports
    - Console output with Rich

    Example:
        >>> logger = MigrationLogger("./logs")
        >>> logger.start_migration("mpdb_migration")
        >>> logger.log_record(entry)
        >>> summary = logger.end_migration()
    """

    def __init__(
        self,
        output_dir: str | Path = "./logs",
        console_output: bool = True,
        level: str = "INFO",
        export_json: bool = True,
        export_csv: bool = True,
        console: Console | None = None,
    ):
        """
        Initialize logger.

        Args:
            output_dir: Directory for log files
            console_output: Whether to print to console
            level: Minimum level printed to the console
            export_json: Write the audit trail as JSON on end_migration
            export_csv: Write the audit trail as CSV on end_migration
            console: Rich console to print to
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.console_output = console_output
        self.level = LogLevel(level)
        self.export_json_enabled = export_json
        self.export_csv_enabled = export_csv

        self._console = console or Console()
        self._lock = threading.Lock()
        self._entries: list[AuditEntry] = []
        self._current_migration: str | None = None
        self._summary: SummaryReport | None = None
        self._log_file: Path | None = None

    @classmethod
    def from_config(cls, logging_config: Any, console: Console | None = None) -> "MigrationLogger":
        """Create a logger from a LoggingConfig."""
        return cls(
            output_dir=logging_config.output_dir,
            console_output=logging_config.console_progress,
            level=logging_config.level,
            export_json=logging_config.export_json,
            export_csv=logging_config.export_csv,
            console=console,
        )

    @property
    def summary(self) -> SummaryReport | None:
        return self._summary

    def start_migration(self, name: str) -> None:
        """
        Start a new migration logging session.

        Args:
            name: Migration name/identifier
        """
        with self._lock:
            self._current_migration = name
            self._entries = []

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self._log_file = self.output_dir / f"{name}_{timestamp}.json"

            self._summary = SummaryReport(
                migration_name=name,
                started_at=datetime.now(),
            )

        self._log_message(LogLevel.INFO, f"Starting migration: {name}")

    def log_record(self, entry: AuditEntry) -> None:
        """
        Log the outcome for a single user.

        Args:
            entry: Audit entry for the user
        """
        with self._lock:
            self._entries.append(entry)

            if not self._summary:
                return

            self._summary.total_records += 1
            if entry.success:
                self._summary.successful_records += 1
            else:
                self._summary.failed_records += 1

                error_type = entry.error_message or "Unknown error"
                # Truncate long error messages for categorization
                if len(error_type) > 50:
                    error_type = error_type[:50] + "..."
                self._summary.error_summary[error_type] = (
                    self._summary.error_summary.get(error_type, 0) + 1
                )

    def log_fatal(self, message: str) -> None:
        """Record a run-aborting error."""
        with self._lock:
            if self._summary:
                self._summary.fatal_error = message
        self._log_message(LogLevel.ERROR, message)

    def log_error(self, message: str) -> None:
        """Log an error message."""
        self._log_message(LogLevel.ERROR, message)

    def log_warning(self, message: str) -> None:
        """Log a warning message."""
        self._log_message(LogLevel.WARNING, message)

    def log_info(self, message: str) -> None:
        """Log an info message."""
        self._log_message(LogLevel.INFO, message)

    def log_debug(self, message: str) -> None:
        self._log_message(LogLevel.DEBUG, message)

    def log_success(self, message: str) -> None:
        self._log_message(LogLevel.SUCCESS, message)

    def end_migration(self) -> SummaryReport:
        """
        End the migration session and generate reports.

        Returns:
            Summary report
        """
        if not self._summary:
            raise RuntimeError("No migration in progress")

        self._summary.completed_at = datetime.now()

        # Export logs
        if self.export_json_enabled:
            self.export_json()
        if self.export_csv_enabled:
            self.export_csv()

        # Print summary
        if self.console_output:
            self._console.print(self._summary.to_text(), markup=False, highlight=False)

        # Save summary
        summary_file = self.output_dir / f"{self._current_migration}_summary.txt"
        with open(summary_file, "w", encoding="utf-8") as f:
            f.write(self._summary.to_text())

        return self._summary

    def export_json(self, filepath: Path | None = None) -> Path:
        """
        Export audit log to JSON file.

        Args:
            filepath: Custom output path (uses default if None)

        Returns:
            Path to exported file
        """
        output_path = filepath or self._log_file or (
            self.output_dir / f"migration_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        )

        with self._lock:
            entries = [e.to_dict() for e in self._entries]

        data = {
            "migration": self._current_migration,
            "started_at": self._summary.started_at.isoformat() if self._summary else None,
            "completed_at": self._summary.completed_at.isoformat() if self._summary and self._summary.completed_at else None,
            "fatal_error": self._summary.fatal_error if self._summary else None,
            "entries": entries,
        }

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return output_path

    def export_csv(self, filepath: Path | None = None) -> Path:
        """
        Export audit log to CSV file.

        Args:
            filepath: Custom output path

        Returns:
            Path to exported file
        """
        output_path = filepath or (
            self.output_dir / f"{self._current_migration}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        )

        with self._lock:
            entries = list(self._entries)

        if not entries:
            return output_path

        fieldnames = [
            "timestamp", "user_uuid", "username", "action", "success",
            "stage", "error_message", "save_cause", "duration_ms",
        ]

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
            writer.writeheader()
            for entry in entries:
                writer.writerow(entry.to_dict())

        return output_path

    def get_errors(self) -> list[AuditEntry]:
        """Get all error entries."""
        with self._lock:
            return [e for e in self._entries if not e.success]

    def _log_message(self, level: LogLevel, message: str) -> None:
        """Log a message to console."""
        if not self.console_output or _LEVEL_ORDER[level] < _LEVEL_ORDER[self.level]:
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        colors = {
            LogLevel.DEBUG: "dim",
            LogLevel.INFO: "blue",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red bold",
            LogLevel.SUCCESS: "green bold",
        }
        color = colors.get(level, "white")
        self._console.print(
            Text.assemble((timestamp, "dim"), " ", (level.value, color), " ", message),
            highlight=False,
        )
