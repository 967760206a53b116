"""Jira comments for a finished run.

Two kinds of comment are posted:
- a short pass notice on the issue of every passed test case
- a summary on the parent issue listing every test case, followed by
  coverage lines when a coverage summary is available

Posting failures never fail the run; they come back as warning strings.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from jira_test.errors import JiraClientError
from jira_test.models import RunOutcome, TestCaseResult
from jira_test.reconciler import summarize

if TYPE_CHECKING:
    from jira_test.jira.client import JiraClient
    from jira_test.runner.jest import CoverageData, FileCoverage

logger = structlog.get_logger(__name__)

RUN_BY = "jira-test CLI"

_OUTCOME_MARKERS = {
    RunOutcome.PASSED: "[PASS]",
    RunOutcome.FAILED: "[FAIL]",
    RunOutcome.UNMATCHED: "[NOT FOUND]",
}


def format_duration(duration_ms: float | None, missing: str = "-") -> str:
    """Render a duration such as ``12ms``; zero or None renders ``missing``."""
    if not duration_ms:
        return missing
    return f"{duration_ms:g}ms"


def build_passed_comment(result: TestCaseResult) -> str:
    """Comment text posted on a passed test case's own issue."""
    return "\n".join(
        [
            "Test Passed",
            f'Test: "{result.test_case.title}"',
            f"Duration: {format_duration(result.duration_ms, missing='N/A')}",
            f"Run by: {RUN_BY}",
        ]
    )


def _coverage_line(label: str, statements: float, branches: float, functions: float, lines: float) -> str:
    return (
        f"  {label} - Stmts: {statements:g}% | Branch: {branches:g}% | "
        f"Funcs: {functions:g}% | Lines: {lines:g}%"
    )


def _file_line(entry: FileCoverage) -> str:
    return _coverage_line(entry.file, entry.statements, entry.branches, entry.functions, entry.lines)


def build_parent_comment_text(
    results: Sequence[TestCaseResult],
    coverage: CoverageData | None = None,
) -> str:
    """Summary comment text for the parent issue.

    Example:
        Test Run Summary
        2 subtasks tested - 1 passed, 0 failed, 1 not found

        Test Results:
          [PASS] PROJ-2 - "adds item to cart" (12ms)
          [NOT FOUND] PROJ-3 - "removes item" (-)
    """
    counts = summarize(results)
    lines = [
        "Test Run Summary",
        (
            f"{counts.total} subtasks tested - {counts.passed} passed, "
            f"{counts.failed} failed, {counts.unmatched} not found"
        ),
        "",
        "Test Results:",
    ]

    for result in results:
        lines.append(
            f"  {_OUTCOME_MARKERS[result.outcome]} {result.test_case.key} - "
            f'"{result.test_case.title}" ({format_duration(result.duration_ms)})'
        )

    if coverage is not None:
        if coverage.component_files:
            lines.extend(["", "Component Coverage:"])
            lines.extend(_file_line(entry) for entry in coverage.component_files)

        lines.extend(["", "Overall Coverage:"])
        if not coverage.filtered:
            lines.append(
                _coverage_line(
                    "All files",
                    coverage.statements,
                    coverage.branches,
                    coverage.functions,
                    coverage.lines,
                )
            )
        lines.extend(_file_line(entry) for entry in coverage.files)

    return "\n".join(lines)


def post_comments(
    client: JiraClient,
    parent_key: str,
    results: Sequence[TestCaseResult],
    coverage: CoverageData | None = None,
) -> list[str]:
    """Post pass comments and the parent summary.

    Args:
        client: Jira client.
        parent_key: Parent issue key.
        results: Reconciled results.
        coverage: Coverage summary to include in the parent comment.

    Returns:
        Warning messages for comments that could not be posted.
    """
    warnings: list[str] = []

    for result in results:
        if result.outcome != RunOutcome.PASSED:
            continue
        key = result.test_case.key
        try:
            client.add_comment(key, build_passed_comment(result))
        except JiraClientError as exc:
            logger.warning("comment_post_failed", key=key, error=exc.message)
            warnings.append(f"Failed to post comment on {key}: {exc.message}")

    try:
        client.add_comment(parent_key, build_parent_comment_text(results, coverage))
    except JiraClientError as exc:
        logger.warning("comment_post_failed", key=parent_key, error=exc.message)
        warnings.append(f"Failed to post summary comment on {parent_key}: {exc.message}")

    return warnings


__all__ = [
    "RUN_BY",
    "build_parent_comment_text",
    "build_passed_comment",
    "format_duration",
    "post_comments",
]
