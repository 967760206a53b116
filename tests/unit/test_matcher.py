"""Tests for jira_test.matcher.build_pattern."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import patch

import pytest

from jira_test.errors import PatternConstructionError, UnsupportedModeError
from jira_test.matcher import build_pattern, pattern_matches
from jira_test.models import MatchResult, TestCase


class TestBuildPattern:
    """Tests for build_pattern in title mode."""

    def test_empty_input(self) -> None:
        """No test cases produce an empty result."""
        assert build_pattern([], "title") == MatchResult(pattern="", test_cases=(), warnings=())

    def test_single_title(self, make_test_case: Callable[..., TestCase]) -> None:
        """A single title gives an end-anchored pattern."""
        result = build_pattern([make_test_case("a")], "title")

        assert result.pattern == "a$"
        assert result.warnings == ()

    def test_two_titles(self, make_test_case: Callable[..., TestCase]) -> None:
        """Two titles give grouped alternatives with the expected matches."""
        result = build_pattern([make_test_case("a"), make_test_case("b")], "title")

        assert result.pattern == "(a$)|(b$)"
        assert pattern_matches(result.pattern, "a")
        assert pattern_matches(result.pattern, "Suite a")
        assert not pattern_matches(result.pattern, "a details")
        assert not pattern_matches(result.pattern, "ax")

    def test_default_mode_is_title(self, make_test_case: Callable[..., TestCase]) -> None:
        assert build_pattern([make_test_case("a")]).pattern == "a$"

    def test_test_cases_returned_unchanged(self, make_test_case: Callable[..., TestCase]) -> None:
        """The result carries the input test cases in input order."""
        cases = [make_test_case("b"), make_test_case("a"), make_test_case("c")]

        result = build_pattern(cases)

        assert list(result.test_cases) == cases


class TestDuplicateTitles:
    """Tests for duplicate title handling."""

    def test_duplicate_produces_one_warning(self, make_test_case: Callable[..., TestCase]) -> None:
        """Two issues with the same title yield one warning naming the title and count."""
        cases = [make_test_case("x", key="A-1"), make_test_case("x", key="A-2")]

        result = build_pattern(cases)

        assert len(result.warnings) == 1
        assert '"x"' in result.warnings[0]
        assert "2" in result.warnings[0]
        assert len(result.test_cases) == 2

    def test_warning_text(self, make_test_case: Callable[..., TestCase]) -> None:
        result = build_pattern([make_test_case("x"), make_test_case("x"), make_test_case("x")])

        assert result.warnings == (
            'Duplicate test title "x" found in 3 Jira test cases. All matches will be run.',
        )

    def test_pattern_built_from_unique_titles(self, make_test_case: Callable[..., TestCase]) -> None:
        """Duplicated titles appear once in the pattern, in first-seen order."""
        cases = [make_test_case("b"), make_test_case("a"), make_test_case("b")]

        result = build_pattern(cases)

        assert result.pattern == "(b$)|(a$)"
        assert len(result.test_cases) == 3

    def test_warnings_in_first_seen_order(self, make_test_case: Callable[..., TestCase]) -> None:
        cases = [make_test_case(t) for t in ("y", "x", "y", "x", "z")]

        result = build_pattern(cases)

        assert [w.split('"')[1] for w in result.warnings] == ["y", "x"]

    def test_titles_differing_in_case_are_distinct(self, make_test_case: Callable[..., TestCase]) -> None:
        """Deduplication is case-sensitive."""
        result = build_pattern([make_test_case("Login"), make_test_case("login")])

        assert result.warnings == ()
        assert result.pattern == "(Login$)|(login$)"


class TestModeValidation:
    """Tests for unsupported modes."""

    def test_unsupported_mode_raises(self, make_test_case: Callable[..., TestCase]) -> None:
        with pytest.raises(UnsupportedModeError) as exc_info:
            build_pattern([make_test_case("a")], "summary")

        assert exc_info.value.mode == "summary"
        assert "summary" in exc_info.value.message

    def test_mode_checked_before_empty_input(self) -> None:
        """An unsupported mode is rejected even with no test cases."""
        with pytest.raises(UnsupportedModeError):
            build_pattern([], "ticket-key")


class TestPatternValidation:
    """Tests for the compiled pattern check."""

    def test_invalid_generated_pattern_raises(self, make_test_case: Callable[..., TestCase]) -> None:
        with patch("jira_test.matcher.combined_pattern", return_value="(broken"):
            with pytest.raises(PatternConstructionError) as exc_info:
                build_pattern([make_test_case("a")])

        assert exc_info.value.pattern == "(broken"
