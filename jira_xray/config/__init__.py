"""
Configuration Management Module.

Handles loading and validation of:
- Jira connection files (JSON/YAML).
- JSON schemas shipped with the package.
"""

from jira_xray.config.loader import ConfigLoader, ConfigurationError
from jira_xray.config.schema_registry import SchemaRegistry, SchemaValidationError

__all__ = ["ConfigLoader", "ConfigurationError", "SchemaRegistry", "SchemaValidationError"]
