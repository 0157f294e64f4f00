"""
Jira Xray Client Module.

Provides integration with the "Xray for Jira" import REST API:
- Building import requests (JSON, XML, bundle) under /rest/raven/{version}.
- Normalizing query parameters such as test environments.
- Sending requests through an authenticated Jira HTTP client.
- Modelling results in the Xray JSON format.
"""

from jira_xray.jira_client.http_client import JiraClientError, JiraConfig, JiraHttpClient
from jira_xray.jira_client.import_request import (
    ByIssueMetadata,
    ByQuery,
    ImportQuery,
    ImportRequest,
    InvalidArgumentError,
    XrayImportRequestBuilder,
    normalize_test_environments,
    request_mode,
    split_test_environments,
)
from jira_xray.jira_client.xray_client import JiraXrayClient
from jira_xray.jira_client.xray_json import (
    XrayEvidence,
    XrayExecutionInfo,
    XrayExecutionResults,
    XrayTestCaseResult,
    XrayTestRun,
    XrayTestStep,
)

__all__ = [
    "JiraClientError",
    "JiraConfig",
    "JiraHttpClient",
    "ByIssueMetadata",
    "ByQuery",
    "ImportQuery",
    "ImportRequest",
    "InvalidArgumentError",
    "XrayImportRequestBuilder",
    "normalize_test_environments",
    "request_mode",
    "split_test_environments",
    "JiraXrayClient",
    "XrayEvidence",
    "XrayExecutionInfo",
    "XrayExecutionResults",
    "XrayTestCaseResult",
    "XrayTestRun",
    "XrayTestStep",
]
