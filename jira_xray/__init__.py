"""
Jira Xray Client - Core Package.

This package contains:
- Jira Client: Xray import request building and sending.
- Configuration: Jira connection file loading and validation.
- CLI: the xray-import command.
"""

__version__ = "0.1.0"
