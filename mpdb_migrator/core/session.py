"""
Migration Session

Runs the migration as a background job and keeps settings from changing
while a run is in progress.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor

from mpdb_migrator.config.loader import MigrationConfig
from mpdb_migrator.core.migrator import MigrationOrchestrator, MigrationSummary
from mpdb_migrator.core.wizard import ConfigurationError, MigrationWizard, obfuscate


class MigrationSession:
    """
    Command surface for one migration session.

    ``set`` and ``start`` are serialized: settings cannot change once a run
    has been submitted, and only one run may be in flight.

    Example:
        >>> session = MigrationSession(config, orchestrator)
        >>> session.set("host", "10.0.0.5")
        True
        >>> summary = session.start().result()
    """

    def __init__(self, config: MigrationConfig, orchestrator: MigrationOrchestrator):
        self.config = config
        self.orchestrator = orchestrator
        self.logger = orchestrator.logger
        self.wizard = MigrationWizard(config)

        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mpdb-session")
        self._future: Future[MigrationSummary] | None = None

    @property
    def is_running(self) -> bool:
        return self._future is not None and not self._future.done()

    def set(self, parameter: str, value: str) -> bool:
        """
        Change a source setting.

        Returns:
            True if the setting was changed
        """
        with self._lock:
            if self.is_running:
                self.logger.log_warning(
                    f"Cannot set {parameter} while a migration is in progress"
                )
                return False

            try:
                self.wizard.set(parameter, value)
            except ConfigurationError as e:
                self.logger.log_warning(
                    f"Invalid operation, could not set {parameter} to "
                    f"{obfuscate(value)} (is it a valid option?): {e}"
                )
                return False

        self.logger.log_info(f"Successfully set {parameter} to {obfuscate(value)}")
        return True

    def describe(self) -> str:
        """Help menu with the current masked settings."""
        return self.wizard.describe()

    def start(self) -> "Future[MigrationSummary]":
        """
        Start the migration in the background.

        The run works on a snapshot of the settings taken here.

        Raises:
            RuntimeError: If a migration is already in progress
        """
        with self._lock:
            if self.is_running:
                raise RuntimeError("A migration is already in progress")
            snapshot = self.config.model_copy(deep=True)
            self._future = self._executor.submit(self.orchestrator.run, snapshot)
            return self._future

    def shutdown(self, wait: bool = True) -> None:
        """Release the background worker."""
        self._executor.shutdown(wait=wait)
