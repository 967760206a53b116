"""JSON report of a test run.

The report is written once, at the end of a run, to
``.jira-test-report.json`` unless another path is given.

Example output:
    {
      "version": "1.0",
      "timestamp": "2026-01-01T12:00:00Z",
      "input": {"jira_key": "PROJ-123", "platform": "all", ...},
      "parent_issue": {"key": "PROJ-123", "summary": "Checkout"},
      "test_cases": [...],
      "summary": {"total": 2, "passed": 1, "failed": 0, "not_found": 1},
      "overall_result": "pass",
      "is_dry_run": false
    }
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field

from jira_test.models import RunOutcome, TestCaseOrigin, TestCaseResult
from jira_test.reconciler import summarize

logger = structlog.get_logger(__name__)

REPORT_VERSION = "1.0"
DEFAULT_REPORT_PATH = ".jira-test-report.json"


class _ReportModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ReportInput(_ReportModel):
    """Options the run was started with."""

    jira_key: str
    platform: str
    link_type: str
    match_mode: str


class ReportParentIssue(_ReportModel):
    """The parent issue whose test cases ran."""

    key: str
    summary: str


class ReportLocation(_ReportModel):
    """A located test definition."""

    file: str
    line: int


class ReportTestCase(_ReportModel):
    """One test case and its outcome."""

    jira_key: str
    summary: str
    labels: list[str]
    source: TestCaseOrigin
    status: RunOutcome
    matched_test_count: int = Field(..., ge=0, le=1)
    duration_ms: float | None = None
    locations: list[ReportLocation] = Field(default_factory=list)
    failure_message: str | None = None


class ReportSummary(_ReportModel):
    """Outcome counts."""

    total: int
    passed: int
    failed: int
    not_found: int


class JsonReport(_ReportModel):
    """Machine-readable report of a run.

    Attributes:
        version: Report format version
        timestamp: Generation time (UTC)
        input: Run options
        parent_issue: Parent issue key and summary
        test_cases: One entry per test case, in collection order
        summary: Outcome counts
        overall_result: no_tests, fail or pass
        is_dry_run: Whether tests were executed
    """

    version: Literal["1.0"] = REPORT_VERSION
    timestamp: datetime
    input: ReportInput
    parent_issue: ReportParentIssue
    test_cases: list[ReportTestCase]
    summary: ReportSummary
    overall_result: Literal["pass", "fail", "no_tests"]
    is_dry_run: bool


def generate_report(
    *,
    jira_key: str,
    parent_summary: str,
    platform: str,
    link_type: str,
    match_mode: str,
    results: Sequence[TestCaseResult],
    is_dry_run: bool,
) -> JsonReport:
    """Build the JSON report for a run.

    Args:
        jira_key: Parent issue key.
        parent_summary: Parent issue summary.
        platform: Platform filter in effect.
        link_type: Link type used to collect linked test cases.
        match_mode: Matching mode.
        results: Reconciled results, in collection order.
        is_dry_run: Whether tests were executed.

    Returns:
        JsonReport with counts and the overall result.
    """
    test_cases = [
        ReportTestCase(
            jira_key=result.test_case.key,
            summary=result.test_case.title,
            labels=list(result.test_case.labels),
            source=result.test_case.origin,
            status=result.outcome,
            matched_test_count=1 if result.runner_result else 0,
            duration_ms=result.duration_ms,
            locations=[
                ReportLocation(file=location.file, line=location.line)
                for location in (result.locations.locations if result.locations else ())
            ],
            failure_message=result.runner_result.failure_message if result.runner_result else None,
        )
        for result in results
    ]

    counts = summarize(results)

    return JsonReport(
        timestamp=datetime.now(timezone.utc),
        input=ReportInput(
            jira_key=jira_key,
            platform=platform,
            link_type=link_type,
            match_mode=match_mode,
        ),
        parent_issue=ReportParentIssue(key=jira_key, summary=parent_summary),
        test_cases=test_cases,
        summary=ReportSummary(
            total=counts.total,
            passed=counts.passed,
            failed=counts.failed,
            not_found=counts.unmatched,
        ),
        overall_result=counts.overall_result,  # type: ignore[arg-type]
        is_dry_run=is_dry_run,
    )


def write_json_report(report: JsonReport, output_path: Path | str = DEFAULT_REPORT_PATH) -> Path:
    """Write a report as indented JSON.

    Args:
        report: Report to write.
        output_path: Destination file; relative paths resolve against the cwd.

    Returns:
        Absolute path of the written file.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(output_path).resolve()
    path.write_text(report.model_dump_json(indent=2) + "\n", encoding="utf-8")
    logger.info("json_report_written", path=str(path), overall_result=report.overall_result)
    return path


__all__ = [
    "DEFAULT_REPORT_PATH",
    "REPORT_VERSION",
    "JsonReport",
    "ReportInput",
    "ReportLocation",
    "ReportParentIssue",
    "ReportSummary",
    "ReportTestCase",
    "generate_report",
    "write_json_report",
]
