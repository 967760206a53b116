"""Test-case matcher.

Turns collected Jira test cases into a single Jest ``--testNamePattern``.
Only the "title" mode is supported: a test case matches a Jest test whose
title equals the issue summary exactly.

Usage:
    from jira_test.matcher import build_pattern

    result = build_pattern(collector_result.test_cases, mode="title")
    for warning in result.warnings:
        print(warning)
    run_jest(JestRunnerOptions(pattern=result.pattern, ...))
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

import structlog

from jira_test.errors import PatternConstructionError, UnsupportedModeError
from jira_test.matcher.patterns import (
    combined_pattern,
    escape_pattern,
    exact_match_pattern,
    is_valid_pattern,
    pattern_matches,
)
from jira_test.models import MatchResult, TestCase

logger = structlog.get_logger(__name__)

TITLE_MODE = "title"
SUPPORTED_MODES: frozenset[str] = frozenset({TITLE_MODE})


def build_pattern(test_cases: Sequence[TestCase], mode: str = TITLE_MODE) -> MatchResult:
    """Build a test name pattern from test cases.

    The pattern is built from unique titles (case-sensitive), but the
    returned ``test_cases`` is the full input so every Jira issue gets
    its own outcome later, including issues that share a title.

    Args:
        test_cases: Collected test cases, in collector order.
        mode: Matching mode. Only "title" is supported.

    Returns:
        MatchResult with the pattern, the unmodified test cases and one
        warning per duplicated title.

    Raises:
        UnsupportedModeError: If ``mode`` is not "title".
        PatternConstructionError: If the generated pattern does not compile.

    Example:
        >>> result = build_pattern([TestCase(key="A-1", title="a"),
        ...                         TestCase(key="A-2", title="b")])
        >>> result.pattern
        '(a$)|(b$)'
    """
    if mode not in SUPPORTED_MODES:
        raise UnsupportedModeError(mode)

    if not test_cases:
        return MatchResult(pattern="", test_cases=(), warnings=())

    titles = [tc.title for tc in test_cases]
    unique_titles = list(dict.fromkeys(titles))

    warnings: list[str] = []
    if len(unique_titles) < len(titles):
        counts = Counter(titles)
        for title in unique_titles:
            count = counts[title]
            if count > 1:
                warnings.append(
                    f'Duplicate test title "{title}" found in {count} Jira test cases. '
                    "All matches will be run."
                )
        logger.warning(
            "duplicate_test_titles",
            total=len(titles),
            unique=len(unique_titles),
        )

    pattern = combined_pattern(unique_titles)

    if not is_valid_pattern(pattern):
        raise PatternConstructionError(pattern)

    logger.debug("test_pattern_built", titles=len(unique_titles), pattern=pattern)

    return MatchResult(
        pattern=pattern,
        test_cases=tuple(test_cases),
        warnings=tuple(warnings),
    )


__all__ = [
    "SUPPORTED_MODES",
    "TITLE_MODE",
    "build_pattern",
    "combined_pattern",
    "escape_pattern",
    "exact_match_pattern",
    "is_valid_pattern",
    "pattern_matches",
]
