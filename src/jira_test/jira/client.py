"""Jira REST API client.

Supports Jira Cloud (REST API v3) and Jira Data Center/Server (REST API v2).
When the configured API version is "auto", the client probes v3 first and
falls back to v2. Detection runs lazily on the first call that needs it and
is memoized on the client instance.
"""

from __future__ import annotations

import base64
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, NoReturn

import httpx

from jira_test.errors import JiraClientError
from jira_test.jira.models import JiraIssue
from jira_test.observability import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from jira_test.config import ApiVersion, JiraConfig

ISSUE_FIELDS = "summary,labels,subtasks,issuelinks,issuetype"
SEARCH_FIELDS = "summary,labels,issuetype"
DEFAULT_TIMEOUT_SECONDS = 30.0


class JiraClient:
    """Jira REST client for issues and comments.

    Attributes:
        config: Jira connection configuration.

    Example:
        >>> from jira_test.config import load_config
        >>> with JiraClient(load_config().jira) as client:
        ...     issue = client.get_issue("PROJ-123")
        ...     client.add_comment("PROJ-123", "All tests passed")
    """

    def __init__(
        self,
        config: JiraConfig,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize JiraClient.

        Args:
            config: Jira connection configuration.
            transport: Optional httpx transport (used by tests to fake Jira).
            timeout: Request timeout in seconds.
            logger: Optional structlog logger. Uses default if not provided.
        """
        self.config = config
        self._logger = logger or get_logger(__name__)
        self._detected_api_version: ApiVersion | None = None
        self._http = httpx.Client(
            base_url=config.base_url,
            headers=self.build_headers(),
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> JiraClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def build_headers(self) -> dict[str, str]:
        """Build JSON and Authorization headers for the configured auth type."""
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        auth = self.config.auth
        if auth.type == "basic":
            raw = f"{auth.email}:{auth.api_token.get_secret_value()}".encode()
            headers["Authorization"] = f"Basic {base64.b64encode(raw).decode('ascii')}"
        else:
            headers["Authorization"] = f"Bearer {auth.token.get_secret_value()}"

        return headers

    @property
    def api_version(self) -> ApiVersion:
        """REST API version in use, detecting it on first access.

        Raises:
            JiraClientError: If neither v3 nor v2 answers.
        """
        if self.config.api_version != "auto":
            return self.config.api_version

        if self._detected_api_version is None:
            self._detected_api_version = self._detect_api_version()
        return self._detected_api_version

    def _detect_api_version(self) -> ApiVersion:
        """Probe /myself on v3 (Cloud), then v2 (DC/Server)."""
        for version, path in (("v3", "/rest/api/3/myself"), ("v2", "/rest/api/2/myself")):
            if self._probe(path):
                self._logger.debug("jira_api_version_detected", api_version=version)
                return version  # type: ignore[return-value]

        self._logger.error("jira_api_version_detection_failed", base_url=self.config.base_url)
        raise JiraClientError(
            "Failed to connect to Jira API. Check your JIRA_BASE_URL and authentication."
        )

    def _probe(self, path: str) -> bool:
        try:
            response = self._http.get(path)
        except httpx.RequestError as exc:
            self._logger.debug("jira_probe_failed", path=path, error=str(exc))
            return False
        return response.is_success

    def _api_path(self, suffix: str) -> str:
        number = "3" if self.api_version == "v3" else "2"
        return f"/rest/api/{number}{suffix}"

    def get_issue(self, issue_key: str) -> JiraIssue:
        """Fetch an issue with its summary, labels, subtasks and links.

        Args:
            issue_key: Issue key (e.g., "PROJ-123").

        Returns:
            Normalized JiraIssue.

        Raises:
            JiraClientError: If the request fails.
        """
        data = self._request(
            "GET",
            self._api_path(f"/issue/{issue_key}"),
            params={"fields": ISSUE_FIELDS},
        )
        issue = JiraIssue.model_validate(data)
        self._logger.info(
            "jira_issue_fetched",
            key=issue.key,
            subtasks=len(issue.fields.subtasks),
            links=len(issue.fields.issuelinks),
        )
        return issue

    def get_issues(self, issue_keys: Sequence[str]) -> list[JiraIssue]:
        """Fetch several issues with a single JQL search.

        Args:
            issue_keys: Issue keys to fetch. An empty sequence makes no request.

        Returns:
            Issues found by the search, in the order Jira returns them.

        Raises:
            JiraClientError: If the request fails.
        """
        if not issue_keys:
            return []

        jql = "key in ({})".format(",".join(f'"{key}"' for key in issue_keys))
        data = self._request(
            "GET",
            self._api_path("/search"),
            params={"jql": jql, "fields": SEARCH_FIELDS},
        )
        issues = (data or {}).get("issues") or []
        return [JiraIssue.model_validate(issue) for issue in issues]

    def add_comment(self, issue_key: str, text: str) -> None:
        """Post a plain-text comment on an issue.

        v3 requires a document body, so the text is wrapped one paragraph
        per line; v2 accepts the text as-is.

        Raises:
            JiraClientError: If the request fails.
        """
        if self.api_version == "v3":
            body: dict[str, Any] = {"body": text_to_document(text)}
        else:
            body = {"body": text}

        self._request("POST", self._api_path(f"/issue/{issue_key}/comment"), json=body)
        self._logger.info("jira_comment_posted", key=issue_key)

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        with self._translate_transport_errors(path):
            response = self._http.request(method, path, params=params, json=json)

        if not response.is_success:
            self._raise_for_response(response)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise JiraClientError(
                f"Jira API returned invalid JSON for {path}",
                status_code=response.status_code,
            ) from exc

    @contextmanager
    def _translate_transport_errors(self, path: str) -> Iterator[None]:
        try:
            yield
        except httpx.RequestError as exc:
            self._logger.error("jira_request_failed", path=path, error=str(exc))
            raise JiraClientError(f"Failed to reach Jira: {exc}") from exc

    def _raise_for_response(self, response: httpx.Response) -> NoReturn:
        """Convert an error response into JiraClientError.

        Messages are collected from ``errorMessages``, ``message`` and the
        values of ``errors``, in that order.
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        messages: list[str] = []
        if isinstance(body, dict):
            messages.extend(str(m) for m in body.get("errorMessages") or [])
            if body.get("message"):
                messages.append(str(body["message"]))
            errors = body.get("errors")
            if isinstance(errors, dict):
                messages.extend(str(v) for v in errors.values())

        message = "; ".join(messages) if messages else f"Jira API error: HTTP {response.status_code}"

        self._logger.warning(
            "jira_request_rejected",
            path=response.request.url.path,
            status=response.status_code,
        )
        raise JiraClientError(message, status_code=response.status_code, api_errors=messages)


def text_to_document(text: str) -> dict[str, Any]:
    """Wrap plain text in a minimal Atlassian document, one paragraph per line."""
    content: list[dict[str, Any]] = []
    for line in text.split("\n"):
        if line:
            content.append({"type": "paragraph", "content": [{"type": "text", "text": line}]})
        else:
            content.append({"type": "paragraph"})
    return {"version": 1, "type": "doc", "content": content}


__all__ = [
    "DEFAULT_TIMEOUT_SECONDS",
    "ISSUE_FIELDS",
    "SEARCH_FIELDS",
    "JiraClient",
    "text_to_document",
]
