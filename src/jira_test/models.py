"""Pydantic models shared across jira-test.

This module defines the data flowing between the collector, matcher,
runner, reconciler and reporters:

Models:
    TestCaseOrigin: Where a test case was collected from (subtask or link)
    Platform: Platform label filter (web, mobile, all)
    TestCase: A Jira issue that corresponds to one named test
    MatchResult: Test name pattern built from a set of test cases
    RunnerTestResult: One assertion reported by the test runner
    TestLocation: Source location of a test definition
    LocatorResult: Locations found for one title
    RunOutcome: Reconciled outcome of a test case (passed, failed, unmatched)
    TestCaseResult: A test case paired with its outcome

Invariants:
    - TestCase is immutable; matching uses ``title``, identity uses ``key``.
    - MatchResult.test_cases is the collector's list unchanged, duplicates
      included, while the pattern is built from unique titles.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TestCaseOrigin(str, Enum):
    """Source of a collected test case."""

    __test__ = False

    SUBTASK = "subtask"
    LINKED = "linked"


class Platform(str, Enum):
    """Platform filter applied to ``platform:*`` labels.

    Attributes:
        WEB: Keep cases labelled platform:web or carrying no platform label
        MOBILE: Keep cases labelled platform:mobile or carrying no platform label
        ALL: Keep every case
    """

    WEB = "web"
    MOBILE = "mobile"
    ALL = "all"


class TestCase(BaseModel):
    """A Jira issue that corresponds to one named test.

    Attributes:
        key: Jira issue key (e.g., "PROJ-124")
        title: Issue summary, matched exactly against runner test titles
        labels: Issue labels in Jira order
        origin: Whether the issue is a subtask or a linked issue
        link_type: Link type name for linked issues

    Example:
        >>> case = TestCase(
        ...     key="HOTEL-101",
        ...     title="should display booking summary",
        ...     labels=["platform:web"],
        ...     origin=TestCaseOrigin.SUBTASK,
        ... )
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str = Field(..., min_length=1)
    title: str
    labels: tuple[str, ...] = ()
    origin: TestCaseOrigin = TestCaseOrigin.SUBTASK
    link_type: str | None = None


class MatchResult(BaseModel):
    """Test name pattern built from collected test cases.

    Attributes:
        pattern: Regular expression for the runner's name filter ("" = nothing to run)
        test_cases: The input test cases, unmodified and in input order
        warnings: Duplicate-title warnings, in first-seen order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str = ""
    test_cases: tuple[TestCase, ...] = ()
    warnings: tuple[str, ...] = ()


class RunnerTestResult(BaseModel):
    """One assertion as reported by the test runner.

    Attributes:
        title: The test's own title (without enclosing describe names)
        status: Runner status ("passed", "failed", ...)
        failure_message: Joined failure messages, if any
        duration_ms: Assertion duration in milliseconds, if reported
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str
    status: str
    failure_message: str | None = None
    duration_ms: float | None = None


class TestLocation(BaseModel):
    """Source location of a test definition.

    Attributes:
        file: Path relative to the repository root
        line: 1-based line number
        column: 1-based column, if known
        match: The matching source line, stripped
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    file: str
    line: int = Field(..., ge=1)
    column: int | None = None
    match: str = ""


class LocatorResult(BaseModel):
    """Locations found for one test title.

    An empty ``locations`` list means the title was not found; ``error``
    is set when the search itself failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    title: str
    locations: tuple[TestLocation, ...] = ()
    error: str | None = None

    @property
    def found(self) -> bool:
        """Check if at least one location was found."""
        return bool(self.locations)


class RunOutcome(str, Enum):
    """Reconciled outcome of a test case.

    Attributes:
        PASSED: The matching runner entry passed
        FAILED: The matching runner entry reported any other status
        UNMATCHED: No runner entry carries the test case title
    """

    PASSED = "passed"
    FAILED = "failed"
    UNMATCHED = "unmatched"


class TestCaseResult(BaseModel):
    """A test case paired with its reconciled outcome.

    Attributes:
        test_case: The Jira test case
        outcome: Passed, failed or unmatched
        runner_result: First runner entry with an identical title, if any
        locations: Locator output for the title, when --locate was used
    """

    __test__ = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    test_case: TestCase
    outcome: RunOutcome
    runner_result: RunnerTestResult | None = None
    locations: LocatorResult | None = None

    @property
    def duration_ms(self) -> float | None:
        """Duration reported by the runner for the matched entry."""
        return self.runner_result.duration_ms if self.runner_result else None


__all__ = [
    "LocatorResult",
    "MatchResult",
    "Platform",
    "RunOutcome",
    "RunnerTestResult",
    "TestCase",
    "TestCaseOrigin",
    "TestCaseResult",
    "TestLocation",
]
