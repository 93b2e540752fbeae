"""
Tests for the configuration loader.
"""

import pytest
import yaml

from mpdb_migrator.config import ConfigLoader, MigrationConfig, SourceConfig


class TestConfigLoader:
    """Tests for ConfigLoader class."""

    @pytest.fixture
    def loader(self):
        return ConfigLoader()

    def test_load_with_env_substitution(self, loader, tmp_path, monkeypatch):
        """Test ${VAR} references are replaced from the environment."""
        monkeypatch.setenv("MPDB_TEST_HOST", "10.1.2.3")
        monkeypatch.setenv("MPDB_TEST_PASSWORD", "s3cret")
        path = tmp_path / "config.yaml"
        path.write_text(
            "name: rehearsal\n"
            "source:\n"
            "  host: ${MPDB_TEST_HOST}\n"
            "  port: 3307\n"
            "  password: ${MPDB_TEST_PASSWORD}\n"
            "destination:\n"
            "  backend: memory\n"
            "import:\n"
            "  max_workers: 4\n",
            encoding="utf-8",
        )

        config = loader.load(path)

        assert config.name == "rehearsal"
        assert config.source.host == "10.1.2.3"
        assert config.source.port == 3307
        assert config.source.password == "s3cret"
        assert config.destination.backend == "memory"
        assert config.import_settings.max_workers == 4
        assert config.import_settings.progress_interval == 25

    def test_defaults(self, loader, tmp_path):
        """Test an empty file gives the default settings."""
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        config = loader.load(path)

        assert config.source.port == 3306
        assert config.source.inventory_table == "mpdb_inventory"
        assert config.source.ender_chest_table == "mpdb_enderchest"
        assert config.source.experience_table == "mpdb_experience"
        assert config.destination.schema_version == "1.19.2"

    def test_missing_env_var(self, loader, tmp_path, monkeypatch):
        """Test an unset variable is reported by name."""
        monkeypatch.delenv("MPDB_TEST_UNSET", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("source:\n  host: ${MPDB_TEST_UNSET}\n", encoding="utf-8")

        with pytest.raises(ValueError) as exc_info:
            loader.load(path)

        assert "MPDB_TEST_UNSET" in str(exc_info.value)

    def test_unset_env_var_kept_when_not_required(self, loader, tmp_path, monkeypatch):
        """Test unset variables stay literal while set ones are substituted."""
        monkeypatch.delenv("MPDB_TEST_UNSET", raising=False)
        monkeypatch.setenv("MPDB_TEST_DB", "legacy")
        path = tmp_path / "config.yaml"
        path.write_text(
            "source:\n"
            "  host: ${MPDB_TEST_UNSET}\n"
            "  database: ${MPDB_TEST_DB}\n",
            encoding="utf-8",
        )

        config = loader.load(path, require_env=False)

        assert config.source.host == "${MPDB_TEST_UNSET}"
        assert config.source.database == "legacy"

    def test_missing_file(self, loader, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            loader.load(tmp_path / "nope.yaml")

    def test_invalid_table_name(self, loader, tmp_path):
        """Test unsafe table names are rejected at load time."""
        path = tmp_path / "config.yaml"
        path.write_text("source:\n  inventory_table: 'inv`--'\n", encoding="utf-8")

        with pytest.raises(ValueError):
            loader.load(path)

    def test_not_a_mapping(self, loader, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError):
            loader.load(path)

    def test_update_value_keeps_env_references(self, loader, tmp_path):
        """Test persisting one setting does not expand other variables."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "source:\n"
            "  host: ${MPDB_HOST}\n"
            "  password: ${MPDB_PASSWORD}\n"
            "  port: 3306\n",
            encoding="utf-8",
        )

        loader.update_value(path, "source", "port", 3307)

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["source"]["port"] == 3307
        assert data["source"]["host"] == "${MPDB_HOST}"
        assert data["source"]["password"] == "${MPDB_PASSWORD}"

    def test_update_value_creates_section(self, loader, tmp_path):
        """Test a missing section is created."""
        path = tmp_path / "config.yaml"
        path.write_text("name: demo\n", encoding="utf-8")

        loader.update_value(path, "source", "database", "legacy")

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data == {"name": "demo", "source": {"database": "legacy"}}

    def test_example_config(self, tmp_path):
        """Test the example config references secrets through the environment."""
        path = tmp_path / "nested" / "example.yaml"

        ConfigLoader.create_example_config(path)

        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["source"]["password"] == "${MPDB_PASSWORD}"
        assert data["destination"]["password"] == "${HUSKSYNC_DB_PASSWORD}"
        assert data["import"]["progress_interval"] == 25
        MigrationConfig.model_validate({**data, "source": {}, "destination": {}})


class TestSourceConfig:
    """Tests for SourceConfig validation."""

    @pytest.mark.parametrize("port", [0, 65536, -1])
    def test_port_range(self, port):
        """Test ports outside the valid range are rejected."""
        with pytest.raises(ValueError):
            SourceConfig(port=port)

    def test_table_names_with_dollar(self):
        """Test '$' is allowed in table names."""
        assert SourceConfig(inventory_table="inv$2").inventory_table == "inv$2"
