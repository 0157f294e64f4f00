"""
Xray REST API Client.

Extends a Jira HTTP client with the "Xray for Jira" import endpoints:
- Xray JSON, Cucumber JSON and Behave JSON results.
- JUnit, TestNG, NUnit and Robot Framework XML results.
- Multiple results bundled in one compressed file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional, Union

from loguru import logger

from jira_xray.jira_client.http_client import JiraConfig, JiraHttpClient
from jira_xray.jira_client.import_request import (
    ImportQuery,
    ImportRequest,
    InvalidArgumentError,
    XrayImportRequestBuilder,
)
from jira_xray.jira_client.xray_json import XrayExecutionResults

QueryArg = Union[ImportQuery, Mapping[str, Any], None]


class JiraXrayClient:
    """
    Client for the Xray import REST API.

    Builds each request with XrayImportRequestBuilder and sends it through
    a JiraHttpClient sharing the same connection settings.

    Usage::

        client = JiraXrayClient(
            host="jira.example.com",
            protocol="https",
            username="ci-bot",
            password="secret",
        )
        with open("results.xml", "rb") as f:
            client.import_exec_results_from_junit(
                f, query=ImportQuery(project_key="CALC", test_environments="iOS;Android")
            )
    """

    def __init__(
        self,
        config: Optional[JiraConfig] = None,
        http_client: Optional[JiraHttpClient] = None,
        **settings: Any,
    ) -> None:
        """
        Initialize the Xray client.

        Args:
            config: Connection settings. Built from **settings when omitted.
            http_client: Executor to send requests through. Created from
                config when omitted; its config is used when config is omitted.
            **settings: JiraConfig fields (host, protocol, port, base,
                intermediate_path, xray_version, auth_method, ...).

        Raises:
            InvalidArgumentError: If config differs from http_client's config.
        """
        if http_client is not None:
            if config is not None and config != http_client.config:
                raise InvalidArgumentError(
                    "config must match the http_client's config; pass only one of them"
                )
            config = http_client.config
        elif config is None:
            config = JiraConfig(**settings)
        self._config = config
        self._http = http_client or JiraHttpClient(config)
        self._builder = XrayImportRequestBuilder(config)
        logger.info(
            f"JiraXrayClient initialized — url={config.base_url}, "
            f"xray_version={config.xray_version}"
        )

    @classmethod
    def from_config_file(
        cls,
        filename: Union[str, Path],
        config_dir: Union[str, Path] = "config",
    ) -> JiraXrayClient:
        """Create a client from a YAML or JSON connection file."""
        from jira_xray.config.loader import ConfigLoader

        return cls(config=ConfigLoader(config_dir).load_client_config(str(filename)))

    @property
    def config(self) -> JiraConfig:
        return self._config

    @property
    def builder(self) -> XrayImportRequestBuilder:
        return self._builder

    def make_xray_uri(self, pathname: str, intermediate_path: Optional[str] = None) -> str:
        """Create the URI for a path within the Xray REST API."""
        return self._builder.make_uri(pathname, intermediate_path)

    def _send(self, request: ImportRequest) -> Any:
        logger.info(f"Importing execution results: {request.path}")
        return self._http.send(request)

    # ------------------------------------------------------------------
    # JSON imports
    # ------------------------------------------------------------------

    def import_exec_results_from_xray(
        self, results: Union[XrayExecutionResults, Mapping[str, Any]]
    ) -> Any:
        """Import results in the Xray JSON format."""
        return self._send(self._builder.build_raw_json_import_request(results))

    def import_exec_results_from_cucumber(self, results: Any, issue_data: Any = None) -> Any:
        """
        Import results in the Cucumber JSON format.

        Args:
            results: Cucumber JSON report.
            issue_data: Jira issue fields for the new Test Execution.
        """
        return self._send(
            self._builder.build_json_import_request("cucumber", results, issue_data)
        )

    def import_exec_results_from_behave(self, results: Any, issue_data: Any = None) -> Any:
        """Import results in the Behave JSON format."""
        return self._send(
            self._builder.build_json_import_request("behave", results, issue_data)
        )

    # ------------------------------------------------------------------
    # XML imports
    # ------------------------------------------------------------------

    def import_exec_results_from_junit(
        self, results: Any, query: QueryArg = None, issue_data: Any = None
    ) -> Any:
        """
        Import results in the JUnit XML format.

        Args:
            results: XML as str, bytes or a binary file object.
            query: Query parameters. Exclusive with issue_data.
            issue_data: Jira issue fields for the new Test Execution.

        Raises:
            InvalidArgumentError: If both or neither of query and
                issue_data are given.
            JiraClientError: If the request fails.
        """
        return self._send(
            self._builder.build_xml_import_request("junit", results, query, issue_data)
        )

    def import_exec_results_from_testng(
        self, results: Any, query: QueryArg = None, issue_data: Any = None
    ) -> Any:
        """Import results in the TestNG XML format."""
        return self._send(
            self._builder.build_xml_import_request("testng", results, query, issue_data)
        )

    def import_exec_results_from_nunit(
        self, results: Any, query: QueryArg = None, issue_data: Any = None
    ) -> Any:
        """Import results in the NUnit (2.6 or 3.0) XML format."""
        return self._send(
            self._builder.build_xml_import_request("nunit", results, query, issue_data)
        )

    def import_exec_results_from_robot(
        self, results: Any, query: QueryArg = None, issue_data: Any = None
    ) -> Any:
        """Import results in the Robot Framework XML format."""
        return self._send(
            self._builder.build_xml_import_request("robot", results, query, issue_data)
        )

    # ------------------------------------------------------------------
    # Bundle imports
    # ------------------------------------------------------------------

    def import_multiple_exec_results(self, results: Any) -> Any:
        """Import multiple results packed in a compressed file (e.g. ZIP)."""
        return self._send(self._builder.build_bundle_import_request(results))

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._http.close()

    def __enter__(self) -> JiraXrayClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
