"""
Migration Wizard

Operator-facing settings for the MySQLPlayerDataBridge source connection,
and the help/status menu that shows them.
"""

from pydantic import ValidationError

from mpdb_migrator.config.loader import MigrationConfig, SourceConfig


class ConfigurationError(Exception):
    """Raised when a wizard parameter cannot be set."""
    pass


# Settable parameters, in menu order
PARAMETERS = (
    "host",
    "port",
    "username",
    "password",
    "database",
    "inventory_table",
    "ender_chest_table",
    "experience_table",
)

# Rendered obfuscated wherever they are shown
SECRET_PARAMETERS = frozenset({"host", "username", "password"})


HELP_MENU = """\
=== MySQLPlayerDataBridge Migration Wizard ==========
This will migrate inventories, ender chests and XP
from the MySQLPlayerDataBridge plugin database.

To prevent excessive migration times, other non-vital
data will not be transferred.

[!] Existing data in the database will be wiped. [!]

STEP 1] Please ensure no players are on any servers.

STEP 2] The migrator will need to connect to the database
used to hold the source MySQLPlayerDataBridge data.
Please check these database parameters are OK:
- host: {host}
- port: {port}
- username: {username}
- password: {password}
- database: {database}
- inventory_table: {inventory_table}
- ender_chest_table: {ender_chest_table}
- experience_table: {experience_table}
If any of these are not correct, please correct them
using the command:
"mpdb-migrate set <config> <parameter> <value>"
(e.g.: "mpdb-migrate set config.yaml host 1.2.3.4")

STEP 3] Data will be migrated into the destination
database configured in the "destination" section of
the configuration file. Please make sure you're happy
with this before proceeding.

STEP 4] To start the migration, please run:
"mpdb-migrate start <config>"
"""


def obfuscate(value: str) -> str:
    """
    Mask a sensitive value, keeping only its first and last character.

    Values of two characters or fewer are masked completely.

    Example:
        >>> obfuscate("secret")
        's****t'
    """
    if not value:
        return ""
    if len(value) <= 2:
        return "*" * len(value)
    return value[0] + "*" * (len(value) - 2) + value[-1]


class MigrationWizard:
    """
    Holds and edits the source connection settings of a migration.

    Example:
        >>> wizard = MigrationWizard(config)
        >>> wizard.set("port", "3307")
        >>> print(wizard.describe())
    """

    identifier = "mpdb"
    name = "MySQLPlayerDataBridge Migrator"

    def __init__(self, config: MigrationConfig):
        self.config = config

    def set(self, parameter: str, value: str) -> SourceConfig:
        """
        Set a source parameter.

        The new value is validated before anything is changed.

        Returns:
            The updated source settings

        Raises:
            ConfigurationError: If the parameter is unknown or the value invalid
        """
        key = parameter.lower()
        if key not in PARAMETERS:
            raise ConfigurationError(
                f"Unknown parameter '{parameter}' "
                f"(valid options: {', '.join(PARAMETERS)})"
            )

        try:
            updated = SourceConfig.model_validate({
                **self.config.source.model_dump(),
                key: value,
            })
        except ValidationError as e:
            errors = "; ".join(err["msg"] for err in e.errors())
            raise ConfigurationError(f"Invalid value for '{key}': {errors}") from e

        self.config.source = updated
        return updated

    def display_value(self, parameter: str) -> str:
        """Current value of a parameter as it may be shown to the operator."""
        value = str(getattr(self.config.source, parameter))
        return obfuscate(value) if parameter in SECRET_PARAMETERS else value

    def describe(self) -> str:
        """Help menu populated with the current (masked) settings."""
        return HELP_MENU.format(**{p: self.display_value(p) for p in PARAMETERS})
