"""
Configuration Loader Module.

Loads Jira connection settings:
- Reading YAML and JSON configuration files.
- Schema validation using JSON Schema.
- Conversion into a JiraConfig for the Xray client.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from jira_xray.config.schema_registry import (
    PACKAGED_SCHEMA_DIR,
    SchemaRegistry,
    SchemaValidationError,
)
from jira_xray.jira_client.http_client import JiraConfig


class ConfigurationError(Exception):
    """Raised when a configuration file is invalid or cannot be loaded."""

    pass


class ConfigLoader:
    """
    Configuration loader with schema validation.

    Attributes:
        config_dir: Base directory for configuration files.
        schema_registry: Registry of JSON schemas for validation.
    """

    SUPPORTED_EXTENSIONS = {".yaml", ".yml", ".json"}
    CONNECTION_SCHEMA = "jira_connection_schema"

    def __init__(
        self,
        config_dir: str | Path = "config",
        schema_dir: str | Path | None = None,
    ) -> None:
        """
        Initialize the configuration loader.

        Args:
            config_dir: Path to the directory containing configuration files.
            schema_dir: Path to the directory containing JSON schema files.
                        Defaults to the schemas shipped with the package.
        """
        self.config_dir = Path(config_dir)
        self.schema_registry = SchemaRegistry(schema_dir or PACKAGED_SCHEMA_DIR)
        self._cache: Dict[str, Dict[str, Any]] = {}

        logger.info(f"ConfigLoader initialized — config_dir={self.config_dir}")

    def load(
        self,
        filename: str,
        schema_name: Optional[str] = None,
        *,
        validate: bool = True,
        use_cache: bool = True,
    ) -> Dict[str, Any]:
        """
        Load a configuration file with optional schema validation.

        Args:
            filename: Name or path of the config file.
            schema_name: JSON schema name to validate against (without extension).
                         Defaults to the Jira connection schema.
            validate: Whether to validate against the schema.
            use_cache: Whether to use cached config if available.

        Returns:
            Parsed configuration as a dictionary.

        Raises:
            ConfigurationError: If the file cannot be loaded or fails validation.
            FileNotFoundError: If the configuration file does not exist.
        """
        file_path = self._resolve_path(filename)
        cache_key = str(file_path.resolve())

        if use_cache and cache_key in self._cache:
            logger.debug(f"Returning cached config for: {filename}")
            return self._cache[cache_key]

        logger.info(f"Loading configuration: {file_path}")
        data = self._read_file(file_path)

        if validate:
            self._validate(data, schema_name or self.CONNECTION_SCHEMA)

        if use_cache:
            self._cache[cache_key] = data

        return data

    def load_client_config(self, filename: str = "jira.yaml") -> JiraConfig:
        """
        Load a Jira connection file into a JiraConfig.

        Args:
            filename: Connection filename (default: jira.yaml).
        """
        return JiraConfig(**self.load(filename, self.CONNECTION_SCHEMA))

    def clear_cache(self) -> None:
        """Clear all cached configurations."""
        self._cache.clear()
        logger.debug("Configuration cache cleared.")

    def _resolve_path(self, filename: str) -> Path:
        """Resolve a filename to a full path, checking config_dir first."""
        path = Path(filename)
        if path.is_absolute() and path.exists():
            return path

        config_path = self.config_dir / filename
        if config_path.exists():
            return config_path

        if path.exists():
            return path

        raise FileNotFoundError(
            f"Configuration file not found: {filename} "
            f"(searched in {self.config_dir} and current directory)"
        )

    def _read_file(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse a YAML or JSON file."""
        suffix = file_path.suffix.lower()
        if suffix not in self.SUPPORTED_EXTENSIONS:
            raise ConfigurationError(
                f"Unsupported file format '{suffix}'. "
                f"Supported: {sorted(self.SUPPORTED_EXTENSIONS)}"
            )

        try:
            content = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Failed to read file {file_path}: {e}") from e

        try:
            if suffix in {".yaml", ".yml"}:
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to parse {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Configuration file must contain a mapping (dict), "
                f"got {type(data).__name__}: {file_path}"
            )

        return data

    def _validate(self, data: Dict[str, Any], schema_name: str) -> None:
        """Validate configuration data against a JSON schema."""
        try:
            self.schema_registry.validate(data, schema_name)
        except (SchemaValidationError, FileNotFoundError) as e:
            raise ConfigurationError(
                f"Configuration validation failed against schema '{schema_name}': {e}"
            ) from e
