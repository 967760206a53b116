"""Tests for jira_test.reconciler."""

from __future__ import annotations

from collections.abc import Callable

from jira_test.models import (
    LocatorResult,
    RunnerTestResult,
    RunOutcome,
    TestCase,
    TestLocation,
)
from jira_test.reconciler import classify, reconcile, summarize


class TestClassify:
    """Tests for classify."""

    def test_no_match_is_unmatched(self) -> None:
        assert classify(None) == RunOutcome.UNMATCHED

    def test_passed_status(self, make_runner_result: Callable[..., RunnerTestResult]) -> None:
        assert classify(make_runner_result("t", status="passed")) == RunOutcome.PASSED

    def test_any_other_status_is_failed(self, make_runner_result: Callable[..., RunnerTestResult]) -> None:
        for status in ("failed", "pending", "skipped", "todo"):
            assert classify(make_runner_result("t", status=status)) == RunOutcome.FAILED


class TestReconcile:
    """Tests for reconcile."""

    def test_passed_and_unmatched(
        self,
        make_test_case: Callable[..., TestCase],
        make_runner_result: Callable[..., RunnerTestResult],
    ) -> None:
        t1, t2 = make_test_case("t1"), make_test_case("t2")

        results = reconcile([t1, t2], [make_runner_result("t1")])

        assert [r.outcome for r in results] == [RunOutcome.PASSED, RunOutcome.UNMATCHED]
        assert results[0].runner_result is not None
        assert results[1].runner_result is None

    def test_length_and_order_preserved(
        self,
        make_test_case: Callable[..., TestCase],
        make_runner_result: Callable[..., RunnerTestResult],
    ) -> None:
        cases = [make_test_case("c"), make_test_case("a"), make_test_case("b")]

        results = reconcile(cases, [make_runner_result("a"), make_runner_result("zzz")])

        assert len(results) == len(cases)
        assert [r.test_case for r in results] == cases

    def test_empty_runner_results(self, make_test_case: Callable[..., TestCase]) -> None:
        results = reconcile([make_test_case("a")], [])

        assert results[0].outcome == RunOutcome.UNMATCHED

    def test_failure_carries_runner_entry(
        self,
        make_test_case: Callable[..., TestCase],
        make_runner_result: Callable[..., RunnerTestResult],
    ) -> None:
        entry = make_runner_result("a", status="failed", failure_message="Expected 1")

        [result] = reconcile([make_test_case("a")], [entry])

        assert result.outcome == RunOutcome.FAILED
        assert result.runner_result == entry

    def test_title_match_is_exact(
        self,
        make_test_case: Callable[..., TestCase],
        make_runner_result: Callable[..., RunnerTestResult],
    ) -> None:
        """No trimming or case folding is applied."""
        results = reconcile(
            [make_test_case("Adds item"), make_test_case("adds item ")],
            [make_runner_result("adds item")],
        )

        assert [r.outcome for r in results] == [RunOutcome.UNMATCHED, RunOutcome.UNMATCHED]

    def test_first_runner_entry_wins(
        self,
        make_test_case: Callable[..., TestCase],
        make_runner_result: Callable[..., RunnerTestResult],
    ) -> None:
        """Duplicate runner titles resolve to the first entry for every test case."""
        cases = [make_test_case("x", key="A-1"), make_test_case("x", key="A-2")]
        entries = [make_runner_result("x", status="failed"), make_runner_result("x", status="passed")]

        results = reconcile(cases, entries)

        assert [r.outcome for r in results] == [RunOutcome.FAILED, RunOutcome.FAILED]
        assert [r.test_case.key for r in results] == ["A-1", "A-2"]

    def test_locations_attached_by_title(self, make_test_case: Callable[..., TestCase]) -> None:
        located = LocatorResult(
            title="a",
            locations=(TestLocation(file="src/a.test.ts", line=3, column=5),),
        )

        results = reconcile([make_test_case("a"), make_test_case("b")], [], {"a": located})

        assert results[0].locations == located
        assert results[1].locations is None


class TestSummarize:
    """Tests for summarize."""

    def test_counts(
        self,
        make_test_case: Callable[..., TestCase],
        make_runner_result: Callable[..., RunnerTestResult],
    ) -> None:
        results = reconcile(
            [make_test_case("a"), make_test_case("b"), make_test_case("c")],
            [make_runner_result("a"), make_runner_result("b", status="failed")],
        )

        counts = summarize(results)

        assert (counts.total, counts.passed, counts.failed, counts.unmatched) == (3, 1, 1, 1)
        assert counts.overall_result == "fail"

    def test_overall_result_no_tests(self) -> None:
        assert summarize([]).overall_result == "no_tests"

    def test_unmatched_only_passes(self, make_test_case: Callable[..., TestCase]) -> None:
        """Unmatched test cases do not fail the run."""
        assert summarize(reconcile([make_test_case("a")], [])).overall_result == "pass"
