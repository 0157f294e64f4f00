"""
Tests for the Configuration Management Module.

Covers:
- ConfigLoader: file loading, schema validation, caching, JiraConfig conversion.
- SchemaRegistry: schema loading and validation.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from jira_xray.config.loader import ConfigLoader, ConfigurationError
from jira_xray.config.schema_registry import SchemaRegistry, SchemaValidationError
from jira_xray.jira_client.http_client import JiraConfig


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sample_connection() -> dict:
    """Return a valid Jira connection dictionary."""
    return {
        "host": "jira.example.com",
        "protocol": "https",
        "port": 8443,
        "base": "/jira",
        "xray_version": "1.0",
        "auth_method": "token",
        "api_token": "abc",
        "verify_ssl": False,
        "timeout_sec": 10,
    }


# ---------------------------------------------------------------------------
# ConfigLoader Tests
# ---------------------------------------------------------------------------


class TestConfigLoader:
    """Tests for the ConfigLoader class."""

    def test_load_yaml(self, tmp_config_dir: Path, sample_connection: dict) -> None:
        """Test loading a valid YAML connection file."""
        (tmp_config_dir / "jira.yaml").write_text(yaml.safe_dump(sample_connection))
        loader = ConfigLoader(config_dir=tmp_config_dir)
        assert loader.load("jira.yaml") == sample_connection

    def test_load_json(self, tmp_config_dir: Path, sample_connection: dict) -> None:
        """Test loading a valid JSON connection file."""
        (tmp_config_dir / "jira.json").write_text(json.dumps(sample_connection))
        loader = ConfigLoader(config_dir=tmp_config_dir)
        assert loader.load("jira.json")["host"] == "jira.example.com"

    def test_load_client_config(self, tmp_config_dir: Path, sample_connection: dict) -> None:
        """Test conversion into a JiraConfig."""
        (tmp_config_dir / "jira.yaml").write_text(yaml.safe_dump(sample_connection))
        config = ConfigLoader(config_dir=tmp_config_dir).load_client_config()

        assert isinstance(config, JiraConfig)
        assert config.base_url == "https://jira.example.com:8443"
        assert config.base == "/jira"
        assert config.verify_ssl is False
        assert config.timeout_sec == 10

    def test_file_not_found(self, tmp_config_dir: Path) -> None:
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ConfigLoader(config_dir=tmp_config_dir).load("missing.yaml")

    def test_unsupported_extension(self, tmp_config_dir: Path) -> None:
        """Test that unsupported file types are rejected."""
        (tmp_config_dir / "jira.ini").write_text("[jira]\nhost=x\n")
        with pytest.raises(ConfigurationError, match="Unsupported"):
            ConfigLoader(config_dir=tmp_config_dir).load("jira.ini")

    def test_invalid_yaml(self, tmp_config_dir: Path) -> None:
        """Test that unparsable YAML raises ConfigurationError."""
        (tmp_config_dir / "jira.yaml").write_text("host: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Failed to parse"):
            ConfigLoader(config_dir=tmp_config_dir).load("jira.yaml")

    def test_non_mapping(self, tmp_config_dir: Path) -> None:
        """Test that a top-level list is rejected."""
        (tmp_config_dir / "jira.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigLoader(config_dir=tmp_config_dir).load("jira.yaml")

    def test_missing_host_fails_validation(self, tmp_config_dir: Path) -> None:
        """Test that host is required."""
        (tmp_config_dir / "jira.yaml").write_text("protocol: https\n")
        with pytest.raises(ConfigurationError, match="host"):
            ConfigLoader(config_dir=tmp_config_dir).load("jira.yaml")

    def test_unknown_key_fails_validation(self, tmp_config_dir: Path) -> None:
        """Test that unknown keys are rejected."""
        (tmp_config_dir / "jira.yaml").write_text("host: jira.local\nhostname: x\n")
        with pytest.raises(ConfigurationError):
            ConfigLoader(config_dir=tmp_config_dir).load("jira.yaml")

    def test_skip_validation(self, tmp_config_dir: Path) -> None:
        """Test loading without schema validation."""
        (tmp_config_dir / "other.yaml").write_text("anything: 1\n")
        data = ConfigLoader(config_dir=tmp_config_dir).load("other.yaml", validate=False)
        assert data == {"anything": 1}

    def test_cache(self, tmp_config_dir: Path) -> None:
        """Test that loaded configs are cached until cleared."""
        path = tmp_config_dir / "jira.yaml"
        path.write_text("host: first\n")
        loader = ConfigLoader(config_dir=tmp_config_dir)
        assert loader.load("jira.yaml")["host"] == "first"

        path.write_text("host: second\n")
        assert loader.load("jira.yaml")["host"] == "first"

        loader.clear_cache()
        assert loader.load("jira.yaml")["host"] == "second"


# ---------------------------------------------------------------------------
# SchemaRegistry Tests
# ---------------------------------------------------------------------------


class TestSchemaRegistry:
    """Tests for the SchemaRegistry class."""

    def test_packaged_schema(self) -> None:
        """Test that the connection schema ships with the package."""
        schema = SchemaRegistry().get_schema("jira_connection_schema")
        assert "host" in schema["required"]

    def test_missing_schema(self, tmp_path: Path) -> None:
        """Test that a missing schema raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            SchemaRegistry(tmp_path).get_schema("nope")

    def test_validation_errors_collected(self) -> None:
        """Test that every violation is reported."""
        with pytest.raises(SchemaValidationError) as exc_info:
            SchemaRegistry().validate(
                {"protocol": "ftp", "auth_method": "kerberos"}, "jira_connection_schema"
            )
        assert len(exc_info.value.errors) == 3

    def test_valid_data(self) -> None:
        """Test that valid data passes."""
        SchemaRegistry().validate({"host": "jira.local"}, "jira_connection_schema")
