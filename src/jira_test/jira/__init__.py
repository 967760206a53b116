"""Jira integration: REST client, payload models and test-case collector."""

from __future__ import annotations

from jira_test.jira.client import JiraClient
from jira_test.jira.collector import (
    DEFAULT_LINK_TYPE,
    CollectorResult,
    collect_test_cases,
    extract_linked_issue_keys,
    matches_platform_filter,
    parse_platform,
)
from jira_test.jira.models import IssueLink, JiraIssue

__all__ = [
    "DEFAULT_LINK_TYPE",
    "CollectorResult",
    "IssueLink",
    "JiraClient",
    "JiraIssue",
    "collect_test_cases",
    "extract_linked_issue_keys",
    "matches_platform_filter",
    "parse_platform",
]
