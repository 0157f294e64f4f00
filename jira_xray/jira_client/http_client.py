"""
Jira HTTP Client.

Minimal HTTP executor wrapped by the Xray extension:
- Connection settings for a Jira instance (host, port, base path, auth).
- A lazily created, authenticated requests.Session.
- Sending ImportRequest descriptors and translating transport failures.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

import requests
from loguru import logger

if TYPE_CHECKING:
    from jira_xray.jira_client.import_request import ImportRequest


class JiraClientError(Exception):
    """Raised when a request to the Jira instance fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class JiraConfig:
    """Connection settings for a Jira instance with the Xray add-on."""

    host: str = ""
    protocol: str = "http"
    port: Optional[int] = None
    base: str = ""
    intermediate_path: Optional[str] = None
    xray_version: str = "1.0"
    auth_method: str = "basic"  # "basic", "token" or "none"
    username: str = ""
    password: str = ""
    api_token: str = ""
    verify_ssl: bool = True
    timeout_sec: int = 30

    @property
    def base_url(self) -> str:
        """Scheme, host and optional port, without any path."""
        netloc = f"{self.host}:{self.port}" if self.port else self.host
        return f"{self.protocol}://{netloc}"


class JiraHttpClient:
    """
    Sends ImportRequest descriptors to a Jira instance.

    Usage::

        client = JiraHttpClient(JiraConfig(host="jira.example.com",
                                           protocol="https",
                                           auth_method="token",
                                           api_token="your-token-here"))
        response = client.send(request)
    """

    def __init__(
        self,
        config: JiraConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the HTTP client.

        Args:
            config: Connection settings.
            session: Pre-built session to use instead of creating one.
        """
        self._config = config
        self._session = session
        logger.info(f"JiraHttpClient initialized — url={config.base_url}")

    @property
    def config(self) -> JiraConfig:
        return self._config

    def _get_session(self) -> requests.Session:
        """Get or create an HTTP session with authentication applied."""
        if self._session is None:
            session = requests.Session()
            session.verify = self._config.verify_ssl
            session.headers.update({"Accept": "application/json"})

            if self._config.auth_method == "token":
                session.headers["Authorization"] = f"Bearer {self._config.api_token}"
            elif self._config.auth_method == "basic":
                session.auth = (self._config.username, self._config.password)

            self._session = session
            logger.debug(f"Jira session created — auth={self._config.auth_method}")

        return self._session

    @staticmethod
    def _encode_form_field(name: str, value: Any) -> Any:
        """Encode structured values as JSON parts; pass files and text through."""
        if isinstance(value, (dict, list)):
            return (f"{name}.json", json.dumps(value), "application/json")
        return value

    def send(self, request: ImportRequest) -> Any:
        """
        Execute a request descriptor.

        Args:
            request: The request built by XrayImportRequestBuilder.

        Returns:
            Parsed JSON response, or None if the response has no body.

        Raises:
            JiraClientError: If the request fails at the HTTP or transport level.
        """
        session = self._get_session()
        kwargs: Dict[str, Any] = {}
        if request.body is not None:
            kwargs["json"] = request.body
        if request.form_fields is not None:
            kwargs["files"] = {
                name: self._encode_form_field(name, value)
                for name, value in request.form_fields.items()
            }
        if request.query_params is not None:
            kwargs["params"] = dict(request.query_params)

        logger.debug(f"Jira API {request.method} {request.url}")

        try:
            response = session.request(
                method=request.method,
                url=request.url,
                timeout=self._config.timeout_sec,
                **kwargs,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            logger.error(f"Jira API HTTP error: {e} (status={status_code})")
            raise JiraClientError(
                f"Jira API request failed: {e}", status_code=status_code
            ) from e
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Jira API connection error: {e}")
            raise JiraClientError(f"Cannot connect to Jira: {e}") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Jira API timeout: {e}")
            raise JiraClientError(
                f"Jira API request timed out after {self._config.timeout_sec}s"
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Jira API request error: {e}")
            raise JiraClientError(f"Jira API request failed: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except requests.exceptions.JSONDecodeError as e:
            logger.error(f"Jira API returned a non-JSON response: {e}")
            raise JiraClientError(
                f"Invalid JSON response from Jira: {e}",
                status_code=response.status_code,
            ) from e

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            self._session.close()
            self._session = None
            logger.debug("Jira client session closed")

    def __enter__(self) -> JiraHttpClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
