"""
Xray Import Request Builder.

Turns an import call into an ImportRequest descriptor ready for the HTTP
executor:
- Endpoint selection under /rest/raven/{version}/import/execution.
- JSON body versus multipart form depending on issue metadata.
- Query parameter serialization with test environment normalization.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import unquote

from loguru import logger

from jira_xray.jira_client.http_client import JiraConfig
from jira_xray.jira_client.xray_json import XrayExecutionResults

JSON_IMPORT_KINDS = ("cucumber", "behave")
XML_IMPORT_KINDS = ("junit", "testng", "nunit", "robot")

IMPORT_EXECUTION_PATH = "/import/execution"

_TEST_ENVIRONMENT_SEPARATOR = re.compile(r"\s*;\s*")

TestEnvironments = Union[str, Sequence[str]]


class InvalidArgumentError(ValueError):
    """Raised when an import call is given an illegal combination of arguments."""


def split_test_environments(value: Optional[TestEnvironments]) -> List[str]:
    """
    Split test environments into a list of trimmed, non-empty names.

    Args:
        value: A ";"-delimited string, or a sequence of names.

    Returns:
        Names in input order, duplicates kept.
    """
    if value is None:
        return []
    if isinstance(value, str):
        entries: Sequence[str] = _TEST_ENVIRONMENT_SEPARATOR.split(value)
    else:
        entries = value
    return [entry.strip() for entry in entries if entry.strip()]


def normalize_test_environments(value: Optional[TestEnvironments]) -> Optional[str]:
    """
    Normalize test environments to the ";"-joined form Xray expects.

    Returns None when nothing is left, so the parameter can be omitted.
    """
    environments = split_test_environments(value)
    if not environments:
        return None
    return ";".join(environments)


@dataclass
class ImportQuery:
    """
    Query parameters for XML imports without issue metadata.

    Attributes:
        test_exec_key: Existing Test Execution to update. Either this or
            project_key should be given.
        project_key: Project in which a new Test Execution is created.
        test_plan_key: Associated Test Plan.
        test_environments: ";"-delimited string or list of environments.
        revision: Source code revision under test.
        fix_version: Jira "Fix Version" for the Test Execution.
        extra: Any further query parameters, sent unchanged.
    """

    test_exec_key: Optional[str] = None
    project_key: Optional[str] = None
    test_plan_key: Optional[str] = None
    test_environments: Optional[TestEnvironments] = None
    revision: Optional[str] = None
    fix_version: Optional[str] = None
    extra: Dict[str, str] = field(default_factory=dict)

    WIRE_NAMES = {
        "test_exec_key": "testExecKey",
        "project_key": "projectKey",
        "test_plan_key": "testPlanKey",
        "test_environments": "testEnvironments",
        "revision": "revision",
        "fix_version": "fixVersion",
    }

    @classmethod
    def from_mapping(cls, query: Mapping[str, Any]) -> ImportQuery:
        """Build a query from a mapping keyed by the Xray parameter names."""
        by_wire_name = {wire: attr for attr, wire in cls.WIRE_NAMES.items()}
        known: Dict[str, Any] = {}
        extra: Dict[str, str] = {}
        for key, value in query.items():
            if key in by_wire_name:
                known[by_wire_name[key]] = value
            else:
                extra[key] = value
        return cls(extra=extra, **known)

    def to_params(self) -> Dict[str, str]:
        """Serialize to query parameters, omitting unset fields."""
        params: Dict[str, str] = dict(self.extra)
        for attr, wire in self.WIRE_NAMES.items():
            value = getattr(self, attr)
            if attr == "test_environments":
                value = normalize_test_environments(value)
            if value is not None:
                params[wire] = value
        return params


@dataclass(frozen=True)
class ByQuery:
    """XML import identified by query parameters."""

    query: ImportQuery


@dataclass(frozen=True)
class ByIssueMetadata:
    """XML import that creates a Test Execution from issue metadata."""

    issue_metadata: Any


RequestMode = Union[ByQuery, ByIssueMetadata]


def request_mode(
    query: Union[ImportQuery, Mapping[str, Any], None] = None,
    issue_metadata: Any = None,
) -> RequestMode:
    """
    Resolve the two optional XML import arguments into a RequestMode.

    Raises:
        InvalidArgumentError: If both or neither argument is given.
    """
    if query is not None and issue_metadata is not None:
        raise InvalidArgumentError(
            'Provide either the "query" or "issue_metadata" parameter, not both'
        )
    if query is not None:
        if not isinstance(query, ImportQuery):
            query = ImportQuery.from_mapping(query)
        return ByQuery(query)
    if issue_metadata is not None:
        return ByIssueMetadata(issue_metadata)
    raise InvalidArgumentError(
        'Must provide either the "query" or "issue_metadata" parameter'
    )


@dataclass(frozen=True)
class ImportRequest:
    """
    A fully formed request against an Xray import endpoint.

    Attributes:
        method: HTTP method.
        path: Path relative to the Xray REST root.
        url: Absolute, percent-decoded URI.
        body: JSON body, if any.
        form_fields: Multipart form fields, if any.
        query_params: Query string parameters, if any.
    """

    method: str
    path: str
    url: str
    body: Any = None
    form_fields: Optional[Mapping[str, Any]] = None
    query_params: Optional[Mapping[str, str]] = None


class XrayImportRequestBuilder:
    """
    Builds ImportRequest descriptors for the Xray import endpoints.

    Holds only the connection settings needed for URI assembly; each
    build call is independent.
    """

    def __init__(self, config: JiraConfig) -> None:
        self._config = config

    def make_uri(self, pathname: str, intermediate_path: Optional[str] = None) -> str:
        """
        Create the URI for a path within the Xray REST API.

        Args:
            pathname: Path after /rest/raven/{version}.
            intermediate_path: Replaces /rest/raven/{version} for this call,
                unless the client was configured with its own.

        Returns:
            The absolute URI, percent-decoded.
        """
        config = self._config
        middle = (
            config.intermediate_path
            or intermediate_path
            or f"/rest/raven/{config.xray_version}"
        )
        uri = f"{config.base_url}{config.base}{middle}{pathname}"
        return unquote(uri)

    def _request(self, path: str, **kwargs: Any) -> ImportRequest:
        url = self.make_uri(path)
        logger.debug(f"Built Xray import request: POST {url}")
        return ImportRequest(method="POST", path=path, url=url, **kwargs)

    @staticmethod
    def _check_kind(kind: str, allowed: Sequence[str]) -> None:
        if kind not in allowed:
            raise InvalidArgumentError(
                f"Unsupported import format '{kind}'. Supported: {', '.join(allowed)}"
            )

    def build_json_import_request(
        self,
        kind: str,
        results: Any,
        issue_metadata: Any = None,
    ) -> ImportRequest:
        """
        Build a Cucumber or Behave JSON import.

        Without issue metadata the results are the JSON body; with it, both
        go as multipart fields "result" and "info".
        """
        self._check_kind(kind, JSON_IMPORT_KINDS)
        path = f"{IMPORT_EXECUTION_PATH}/{kind}"
        if issue_metadata is None:
            return self._request(path, body=results)
        return self._request(
            f"{path}/multipart",
            form_fields={"result": results, "info": issue_metadata},
        )

    def build_xml_import_request(
        self,
        kind: str,
        results: Any,
        query: Union[ImportQuery, Mapping[str, Any], None] = None,
        issue_metadata: Any = None,
    ) -> ImportRequest:
        """
        Build a JUnit, TestNG, NUnit or Robot Framework XML import.

        Args:
            kind: One of "junit", "testng", "nunit", "robot".
            results: XML as str, bytes or a binary file object.
            query: Query parameters. Exclusive with issue_metadata.
            issue_metadata: Jira issue fields for a new Test Execution.

        Raises:
            InvalidArgumentError: If both or neither of query and
                issue_metadata are given, or kind is unknown.
        """
        return self.build_xml_import_request_for_mode(
            kind, results, request_mode(query, issue_metadata)
        )

    def build_xml_import_request_for_mode(
        self,
        kind: str,
        results: Any,
        mode: RequestMode,
    ) -> ImportRequest:
        """Build an XML import from an already resolved RequestMode."""
        self._check_kind(kind, XML_IMPORT_KINDS)
        path = f"{IMPORT_EXECUTION_PATH}/{kind}"
        if isinstance(mode, ByQuery):
            return self._request(
                path,
                form_fields={"file": results},
                query_params=mode.query.to_params(),
            )
        return self._request(
            f"{path}/multipart",
            form_fields={"file": results, "info": mode.issue_metadata},
        )

    def build_bundle_import_request(self, results: Any) -> ImportRequest:
        """Build an import of multiple results packed in one compressed file."""
        return self._request(
            f"{IMPORT_EXECUTION_PATH}/bundle", form_fields={"file": results}
        )

    def build_raw_json_import_request(
        self,
        results: Union[XrayExecutionResults, Mapping[str, Any]],
    ) -> ImportRequest:
        """Build an import of results in the Xray JSON format."""
        if isinstance(results, XrayExecutionResults):
            results = results.to_dict()
        return self._request(IMPORT_EXECUTION_PATH, body=results)
