"""In-memory Jira REST API for tests.

FakeJira serves the endpoints jira-test calls through httpx.MockTransport;
subtask() and issue_link() build the stubs Jira embeds in a parent issue.
"""

from __future__ import annotations

import json
import re
from collections.abc import Sequence
from typing import Any

import httpx

from jira_test.config import JiraConfig
from jira_test.jira.client import JiraClient

BASE_URL = "https://jira.example.com"


class FakeJira:
    """In-memory Jira REST API.

    Serves /myself, /issue/{key}, /search and /issue/{key}/comment for a
    single API version (v3 for Cloud, v2 for Data Center). Requests for the
    other version get 404, which drives API version detection.

    Attributes:
        issues: Issue payloads by key.
        requests: Every request received, in order.
        comments: (issue key, request body) for every posted comment.
        reject_comments_on: Keys whose comment requests get 403.
    """

    def __init__(self, *, cloud: bool = True) -> None:
        self.cloud = cloud
        self.issues: dict[str, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.comments: list[tuple[str, dict[str, Any]]] = []
        self.reject_comments_on: set[str] = set()

    @property
    def version(self) -> str:
        return "3" if self.cloud else "2"

    def add_issue(
        self,
        key: str,
        summary: str,
        *,
        labels: Sequence[str] = (),
        subtasks: Sequence[dict[str, Any]] = (),
        links: Sequence[dict[str, Any]] = (),
    ) -> dict[str, Any]:
        """Register an issue and return its payload."""
        issue = {
            "key": key,
            "id": str(10000 + len(self.issues)),
            "fields": {
                "summary": summary,
                "labels": list(labels),
                "issuetype": {"name": "Story"},
                "subtasks": list(subtasks),
                "issuelinks": list(links),
            },
        }
        self.issues[key] = issue
        return issue

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, config: JiraConfig) -> JiraClient:
        return JiraClient(config, transport=self.transport())

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        match = re.match(r"^/rest/api/(\d)/(.+)$", request.url.path)
        if not match or match.group(1) != self.version:
            return httpx.Response(404, json={"errorMessages": ["Not found"]})

        resource = match.group(2)

        if resource == "myself":
            return httpx.Response(200, json={"accountId": "557058:abc", "displayName": "CI Bot"})

        if resource == "search":
            keys = re.findall(r'"([^"]+)"', request.url.params.get("jql", ""))
            found = [self.issues[k] for k in keys if k in self.issues]
            return httpx.Response(200, json={"startAt": 0, "total": len(found), "issues": found})

        comment = re.match(r"^issue/([^/]+)/comment$", resource)
        if comment and request.method == "POST":
            key = comment.group(1)
            if key in self.reject_comments_on:
                return httpx.Response(
                    403,
                    json={"errorMessages": ["You do not have permission to comment on this issue."]},
                )
            self.comments.append((key, json.loads(request.content)))
            return httpx.Response(201, json={"id": str(len(self.comments))})

        issue = re.match(r"^issue/([^/]+)$", resource)
        if issue:
            key = issue.group(1)
            if key not in self.issues:
                return httpx.Response(
                    404,
                    json={
                        "errorMessages": ["Issue does not exist or you do not have permission to see it."],
                        "errors": {},
                    },
                )
            return httpx.Response(200, json=self.issues[key])

        return httpx.Response(404, json={"errorMessages": ["Not found"]})


def subtask(key: str, summary: str, labels: Sequence[str] = ()) -> dict[str, Any]:
    """Subtask stub as embedded in a parent issue."""
    return {"key": key, "id": key.split("-")[-1], "fields": {"summary": summary, "labels": list(labels)}}


def issue_link(
    key: str,
    *,
    name: str = "Test",
    inward: str = "is tested by",
    outward: str = "tests",
    direction: str = "inward",
) -> dict[str, Any]:
    """Issue link stub pointing at ``key``."""
    issue_field = "inwardIssue" if direction == "inward" else "outwardIssue"
    return {
        "id": f"link-{key}",
        "type": {"name": name, "inward": inward, "outward": outward},
        issue_field: {"key": key, "fields": {"summary": "stub summary"}},
    }


