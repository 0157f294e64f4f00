"""
Root conftest.py — Shared Pytest fixtures.

Provides fixtures for:
- Jira connection settings.
- Request builders and clients wired to a mocked requests.Session.
"""

from __future__ import annotations

from typing import Any, Optional
from unittest.mock import MagicMock

import pytest

from jira_xray.jira_client.http_client import JiraConfig, JiraHttpClient
from jira_xray.jira_client.import_request import XrayImportRequestBuilder
from jira_xray.jira_client.xray_client import JiraXrayClient


def make_response(payload: Any = None, status_code: int = 200) -> MagicMock:
    """Build a mock requests.Response returning the given JSON payload."""
    response = MagicMock()
    response.status_code = status_code
    response.content = b"" if payload is None else b"{...}"
    response.json.return_value = payload
    return response


@pytest.fixture
def jira_config() -> JiraConfig:
    """Return connection settings for a test Jira instance."""
    return JiraConfig(
        host="jira.example.com",
        protocol="https",
        auth_method="basic",
        username="ci-bot",
        password="secret",
    )


@pytest.fixture
def builder(jira_config: JiraConfig) -> XrayImportRequestBuilder:
    """Create a request builder for the test Jira instance."""
    return XrayImportRequestBuilder(jira_config)


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock requests.Session answering every request with {"ok": true}."""
    session = MagicMock()
    session.request.return_value = make_response({"ok": True})
    return session


@pytest.fixture
def http_client(jira_config: JiraConfig, mock_session: MagicMock) -> JiraHttpClient:
    """Create an HTTP client using the mocked session."""
    return JiraHttpClient(jira_config, session=mock_session)


@pytest.fixture
def xray_client(http_client: JiraHttpClient) -> JiraXrayClient:
    """Create an Xray client sending through the mocked session."""
    return JiraXrayClient(http_client=http_client)


def sent_kwargs(session: MagicMock, call_index: Optional[int] = None) -> dict:
    """Return the keyword arguments of a session.request call (last by default)."""
    call = session.request.call_args if call_index is None else (
        session.request.call_args_list[call_index]
    )
    return call.kwargs
