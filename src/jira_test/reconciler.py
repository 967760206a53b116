"""Reconciler mapping runner results back onto Jira test cases.

Each test case is matched to the first runner result whose title is
exactly equal to the test case title (case-sensitive, no normalization).

When the runner reports several tests with the same title, the first one
wins. Two Jira issues sharing that title therefore receive the same
outcome even if the runner's entries disagree.

Functions:
    classify: Outcome for one test case
    reconcile: Outcomes for all test cases, order and multiplicity preserved
    summarize: Outcome counts for reporting
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import structlog
from pydantic import BaseModel, ConfigDict

from jira_test.models import (
    LocatorResult,
    RunnerTestResult,
    RunOutcome,
    TestCase,
    TestCaseResult,
)

logger = structlog.get_logger(__name__)

PASSED_STATUS = "passed"


def classify(runner_result: RunnerTestResult | None) -> RunOutcome:
    """Classify a matched runner entry.

    Args:
        runner_result: The matching runner entry, or None when nothing matched.

    Returns:
        UNMATCHED for None, PASSED for status "passed", FAILED otherwise.
    """
    if runner_result is None:
        return RunOutcome.UNMATCHED
    if runner_result.status == PASSED_STATUS:
        return RunOutcome.PASSED
    return RunOutcome.FAILED


def reconcile(
    test_cases: Sequence[TestCase],
    runner_results: Sequence[RunnerTestResult],
    locations: Mapping[str, LocatorResult] | None = None,
) -> list[TestCaseResult]:
    """Reconcile runner results with Jira test cases.

    Args:
        test_cases: Test cases as returned by the matcher, duplicates included.
        runner_results: Assertions reported by the runner, in runner order.
        locations: Optional locator results keyed by title.

    Returns:
        One TestCaseResult per input test case, in input order.

    Example:
        >>> results = reconcile(
        ...     [TestCase(key="A-1", title="t1"), TestCase(key="A-2", title="t2")],
        ...     [RunnerTestResult(title="t1", status="passed")],
        ... )
        >>> [r.outcome.value for r in results]
        ['passed', 'unmatched']
    """
    first_by_title: dict[str, RunnerTestResult] = {}
    for result in runner_results:
        first_by_title.setdefault(result.title, result)

    reconciled: list[TestCaseResult] = []
    for test_case in test_cases:
        match = first_by_title.get(test_case.title)
        reconciled.append(
            TestCaseResult(
                test_case=test_case,
                outcome=classify(match),
                runner_result=match,
                locations=locations.get(test_case.title) if locations else None,
            )
        )

    logger.debug(
        "results_reconciled",
        test_cases=len(test_cases),
        runner_results=len(runner_results),
        unmatched=sum(1 for r in reconciled if r.outcome == RunOutcome.UNMATCHED),
    )
    return reconciled


class OutcomeCounts(BaseModel):
    """Outcome counts over a set of reconciled results."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = 0
    passed: int = 0
    failed: int = 0
    unmatched: int = 0

    @property
    def overall_result(self) -> str:
        """Overall verdict: no_tests when empty, fail when anything failed, else pass."""
        if self.total == 0:
            return "no_tests"
        return "fail" if self.failed > 0 else "pass"


def summarize(results: Sequence[TestCaseResult]) -> OutcomeCounts:
    """Count reconciled outcomes."""
    outcomes = [r.outcome for r in results]
    return OutcomeCounts(
        total=len(outcomes),
        passed=outcomes.count(RunOutcome.PASSED),
        failed=outcomes.count(RunOutcome.FAILED),
        unmatched=outcomes.count(RunOutcome.UNMATCHED),
    )


__all__ = ["PASSED_STATUS", "OutcomeCounts", "classify", "reconcile", "summarize"]
