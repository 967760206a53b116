"""Collector for Jira test cases.

Test cases come from two sources on a parent issue:
- its subtasks
- issues linked to it with a given link type (e.g., "is tested by")

Both are filtered by ``platform:*`` labels.

Functions:
    collect_test_cases: Collect test cases for a parent issue
    extract_linked_issue_keys: Keys of issues linked with a link type
    matches_platform_filter: Platform label filter
    parse_platform: Parse a CLI platform value
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from jira_test.models import Platform, TestCase, TestCaseOrigin

if TYPE_CHECKING:
    from jira_test.jira.client import JiraClient
    from jira_test.jira.models import IssueLink

logger = structlog.get_logger(__name__)

DEFAULT_LINK_TYPE = "is tested by"
PLATFORM_LABEL_PREFIX = "platform:"


class CollectorResult(BaseModel):
    """Test cases collected for a parent issue.

    Attributes:
        parent_key: Parent issue key
        parent_summary: Parent issue summary
        test_cases: Subtask test cases followed by linked test cases
        skipped_by_platform: Count of cases rejected by the platform filter
        missing_keys: Linked keys the search did not return (deleted or hidden)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    parent_key: str
    parent_summary: str = ""
    test_cases: tuple[TestCase, ...] = ()
    skipped_by_platform: int = Field(default=0, ge=0)
    missing_keys: tuple[str, ...] = ()


def collect_test_cases(
    client: JiraClient,
    issue_key: str,
    *,
    link_type: str = DEFAULT_LINK_TYPE,
    platform: Platform = Platform.ALL,
) -> CollectorResult:
    """Collect test cases from a Jira issue.

    Linked issues are fetched with one search; their summaries and labels
    come from that search rather than from the link stubs.

    Args:
        client: Jira client.
        issue_key: Parent issue key.
        link_type: Link type name, inward or outward label (case-insensitive).
        platform: Platform label filter.

    Returns:
        CollectorResult with subtasks first, then linked issues in link order.

    Raises:
        JiraClientError: If Jira requests fail.
    """
    parent = client.get_issue(issue_key)

    test_cases: list[TestCase] = []
    skipped = 0

    for subtask in parent.fields.subtasks:
        labels = subtask.fields.labels
        if not matches_platform_filter(labels, platform):
            skipped += 1
            continue
        test_cases.append(
            TestCase(
                key=subtask.key,
                title=subtask.fields.summary,
                labels=tuple(labels),
                origin=TestCaseOrigin.SUBTASK,
            )
        )

    linked_keys = extract_linked_issue_keys(parent.fields.issuelinks, link_type)
    missing: list[str] = []

    if linked_keys:
        linked_by_key = {issue.key: issue for issue in client.get_issues(linked_keys)}

        for key in linked_keys:
            issue = linked_by_key.get(key)
            if issue is None:
                missing.append(key)
                continue

            labels = issue.fields.labels
            if not matches_platform_filter(labels, platform):
                skipped += 1
                continue

            test_cases.append(
                TestCase(
                    key=issue.key,
                    title=issue.fields.summary,
                    labels=tuple(labels),
                    origin=TestCaseOrigin.LINKED,
                    link_type=link_type,
                )
            )

    if missing:
        logger.warning("linked_issues_missing", parent=parent.key, keys=missing)

    logger.info(
        "test_cases_collected",
        parent=parent.key,
        count=len(test_cases),
        skipped_by_platform=skipped,
    )

    return CollectorResult(
        parent_key=parent.key,
        parent_summary=parent.fields.summary,
        test_cases=tuple(test_cases),
        skipped_by_platform=skipped,
        missing_keys=tuple(missing),
    )


def extract_linked_issue_keys(links: Sequence[IssueLink], link_type: str) -> list[str]:
    """Extract issue keys from links matching ``link_type``.

    A link matches when its type name, inward label or outward label equals
    ``link_type`` case-insensitively. Both the inward and outward issue of a
    matching link are returned.

    Example:
        >>> extract_linked_issue_keys(parent.fields.issuelinks, "Is Tested By")
        ['PROJ-201', 'PROJ-202']
    """
    wanted = link_type.lower()
    keys: list[str] = []

    for link in links:
        names = {link.type.name.lower(), link.type.inward.lower(), link.type.outward.lower()}
        if wanted not in names:
            continue
        if link.inward_issue is not None:
            keys.append(link.inward_issue.key)
        if link.outward_issue is not None:
            keys.append(link.outward_issue.key)

    return keys


def matches_platform_filter(labels: Sequence[str], platform: Platform) -> bool:
    """Check whether labels pass the platform filter.

    - ALL: always included
    - WEB / MOBILE: included if labelled ``platform:<name>`` or if the issue
      has no ``platform:*`` label at all (case-insensitive)
    """
    if platform == Platform.ALL:
        return True

    lowered = [label.lower() for label in labels]
    if not any(label.startswith(PLATFORM_LABEL_PREFIX) for label in lowered):
        return True

    return f"{PLATFORM_LABEL_PREFIX}{platform.value}" in lowered


def parse_platform(value: str) -> Platform:
    """Parse a platform name (case-insensitive).

    Raises:
        ValueError: If the value is not web, mobile or all.
    """
    try:
        return Platform(value.lower())
    except ValueError:
        msg = f"Invalid platform: {value}. Must be one of: web, mobile, all"
        raise ValueError(msg) from None


__all__ = [
    "DEFAULT_LINK_TYPE",
    "PLATFORM_LABEL_PREFIX",
    "CollectorResult",
    "collect_test_cases",
    "extract_linked_issue_keys",
    "matches_platform_filter",
    "parse_platform",
]
