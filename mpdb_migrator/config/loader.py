"""
Configuration Loader

Handles loading and validating YAML/JSON configuration files for migrations.
Supports environment variable substitution for sensitive values.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv


# Load environment variables from .env file if present
load_dotenv()


# MySQL unquoted identifier characters, up to the 64 character limit
TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_$]{1,64}$")


def validate_table_name(name: str) -> str:
    """
    Check that a table name is safe to interpolate into a query.

    Raises:
        ValueError: If the name contains characters outside the allow-list
    """
    if not isinstance(name, str) or not TABLE_NAME_PATTERN.match(name):
        raise ValueError(
            f"Invalid table name: {name!r} "
            f"(only letters, digits, '_' and '$' are allowed, max 64 characters)"
        )
    return name


class SourceConfig(BaseModel):
    """Connection to the MySQLPlayerDataBridge database."""

    host: str = Field(default="localhost", min_length=1, description="Database host")
    port: int = Field(default=3306, ge=1, le=65535, description="Database port")
    username: str = Field(default="root", description="Database username")
    password: str = Field(default="", description="Database password")
    database: str = Field(default="minecraft", min_length=1, description="Database name")
    inventory_table: str = Field(default="mpdb_inventory")
    ender_chest_table: str = Field(default="mpdb_enderchest")
    experience_table: str = Field(default="mpdb_experience")
    connect_timeout: int = Field(default=10, ge=1, le=300)

    @field_validator("inventory_table", "ender_chest_table", "experience_table")
    @classmethod
    def validate_tables(cls, v: str) -> str:
        return validate_table_name(v)


class DestinationConfig(BaseModel):
    """Destination user data store."""

    backend: Literal["mysql", "memory"] = Field(
        default="mysql",
        description="Store implementation: mysql, or memory for rehearsal runs"
    )
    host: str = Field(default="localhost")
    port: int = Field(default=3306, ge=1, le=65535)
    username: str = Field(default="root")
    password: str = Field(default="")
    database: str = Field(default="husksync")
    users_table: str = Field(default="husksync_users")
    user_data_table: str = Field(default="husksync_user_data")
    pool_size: int = Field(default=10, ge=1, le=32, description="Connection pool size")
    schema_version: str = Field(
        default="1.19.2",
        min_length=1,
        description="Version tag stored alongside every migrated profile"
    )

    @field_validator("users_table", "user_data_table")
    @classmethod
    def validate_tables(cls, v: str) -> str:
        return validate_table_name(v)


class ImportConfig(BaseModel):
    """Global import settings."""

    max_workers: int = Field(default=8, ge=1, le=64, description="Parallel conversion workers")
    progress_interval: int = Field(
        default=25, ge=1, description="Log download progress every N records"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    output_dir: str = Field(default="./logs", description="Log output directory")
    export_json: bool = Field(default=True, description="Export logs as JSON")
    export_csv: bool = Field(default=True, description="Export logs as CSV")
    console_progress: bool = Field(default=True, description="Show console progress")


class MigrationConfig(BaseModel):
    """Root configuration for a migration."""

    name: str = Field(default="mpdb_migration", description="Migration name/identifier")

    source: SourceConfig = Field(
        default_factory=SourceConfig,
        description="MySQLPlayerDataBridge database settings"
    )
    destination: DestinationConfig = Field(
        default_factory=DestinationConfig,
        description="Destination store settings"
    )
    codec: str = Field(
        default="",
        description="Legacy codec import path, e.g. 'my_plugin.codec:MpdbCodec'"
    )
    codec_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword arguments passed to the legacy codec factory"
    )
    import_settings: ImportConfig = Field(
        default_factory=ImportConfig,
        alias="import",
        description="Import settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings"
    )

    model_config = {"populate_by_name": True}


class ConfigLoader:
    """
    Loads and validates migration configuration from YAML/JSON files.

    Supports environment variable substitution using ${VAR_NAME} syntax.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load("config/mpdb.yaml")
        >>> print(config.source.host)
    """

    # Pattern for environment variable substitution
    ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def __init__(self, env_file: Path | None = None):
        """
        Initialize config loader.

        Args:
            env_file: Optional path to .env file
        """
        if env_file:
            load_dotenv(env_file)

    def load(self, config_path: str | Path, require_env: bool = True) -> MigrationConfig:
        """
        Load configuration from file.

        Args:
            config_path: Path to YAML or JSON config file
            require_env: Fail on unset ${VAR} references. When False they are
                left as literal text, which is enough for editing and display.

        Returns:
            Validated MigrationConfig object

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(config_path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        # Substitute environment variables
        content = self._substitute_env_vars(content, strict=require_env)

        # Parse YAML (also handles JSON as subset of YAML)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse configuration: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        # Validate with Pydantic
        try:
            return MigrationConfig.model_validate(data)
        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

    def update_value(
        self,
        config_path: str | Path,
        section: str,
        key: str,
        value: Any,
    ) -> None:
        """
        Persist a single setting without expanding other ${VAR} references.

        Args:
            config_path: Path to the YAML config file
            section: Top-level section, e.g. "source"
            key: Setting name inside the section
            value: New value
        """
        path = Path(config_path)
        data: dict[str, Any] = {}
        if path.exists():
            try:
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Failed to parse configuration: {e}") from e

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        section_data = data.get(section)
        if not isinstance(section_data, dict):
            section_data = {}
        section_data[key] = value
        data[section] = section_data

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    def _substitute_env_vars(self, content: str, strict: bool = True) -> str:
        """
        Replace ${VAR_NAME} with environment variable values.

        Args:
            content: Configuration content string
            strict: Raise on unset variables instead of keeping the reference

        Returns:
            Content with substituted values
        """
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            value = os.environ.get(var_name)
            if value is None:
                if not strict:
                    return match.group(0)
                raise ValueError(
                    f"Environment variable '{var_name}' is not set. "
                    f"Please set it or update the configuration."
                )
            return value

        return self.ENV_PATTERN.sub(replace, content)

    @staticmethod
    def create_example_config(output_path: str | Path) -> None:
        """
        Create an example configuration file.

        Args:
            output_path: Where to write the example config
        """
        example = {
            "name": "mpdb_migration",
            "source": {
                "host": "${MPDB_HOST}",
                "port": 3306,
                "username": "${MPDB_USER}",
                "password": "${MPDB_PASSWORD}",
                "database": "minecraft",
                "inventory_table": "mpdb_inventory",
                "ender_chest_table": "mpdb_enderchest",
                "experience_table": "mpdb_experience",
            },
            "destination": {
                "backend": "mysql",
                "host": "${HUSKSYNC_DB_HOST}",
                "port": 3306,
                "username": "${HUSKSYNC_DB_USER}",
                "password": "${HUSKSYNC_DB_PASSWORD}",
                "database": "husksync",
                "users_table": "husksync_users",
                "user_data_table": "husksync_user_data",
                "schema_version": "1.19.2",
            },
            "codec": "mpdb_converter.codec:MpdbCodec",
            "import": {
                "max_workers": 8,
                "progress_interval": 25,
            },
            "logging": {
                "level": "INFO",
                "output_dir": "./logs",
                "export_json": True,
                "export_csv": True,
            },
        }

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(example, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
