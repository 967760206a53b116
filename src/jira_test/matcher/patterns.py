"""Regular-expression helpers for test name patterns.

Jest reports a test's full name as the enclosing describe() names followed
by the test title ("Booking Feature should display summary"). Patterns
built here therefore anchor only the end of the title.

Functions:
    escape_pattern: Escape regex metacharacters in literal text
    exact_match_pattern: Pattern matching a title as a full-name suffix
    combined_pattern: Alternation of exact-match patterns
    is_valid_pattern: Check that a pattern compiles
    pattern_matches: Search a string with a pattern, never raising
"""

from __future__ import annotations

import re

# . * + ? ^ $ { } ( ) | [ ] \
_SPECIAL_CHARS = re.compile(r"[.*+?^${}()|\[\]\\]")


def escape_pattern(text: str) -> str:
    """Escape every regex metacharacter in ``text``.

    Only ``. * + ? ^ $ { } ( ) | [ ] \\`` are escaped, so the result is
    valid both for Python's ``re`` and for the JavaScript engine Jest uses.

    Example:
        >>> escape_pattern("total (USD) is $5.00")
        'total \\\\(USD\\\\) is \\\\$5\\\\.00'
    """
    return _SPECIAL_CHARS.sub(lambda m: "\\" + m.group(0), text)


def exact_match_pattern(title: str) -> str:
    """Build a pattern matching ``title`` at the end of a full test name.

    No start anchor, so describe() prefixes are allowed; the end anchor
    rejects longer titles that merely start with ``title``.

    Example:
        >>> exact_match_pattern("process order")
        'process order$'
    """
    return f"{escape_pattern(title)}$"


def combined_pattern(titles: list[str]) -> str:
    """Combine titles into one alternation pattern.

    Args:
        titles: Literal titles, in the order they should appear.

    Returns:
        "" for no titles, the exact-match pattern for one title, otherwise
        each exact-match pattern in parentheses joined with ``|``.

    Example:
        >>> combined_pattern(["a", "b"])
        '(a$)|(b$)'
    """
    if not titles:
        return ""

    if len(titles) == 1:
        return exact_match_pattern(titles[0])

    return "|".join(f"({exact_match_pattern(t)})" for t in titles)


def is_valid_pattern(pattern: str) -> bool:
    """Check whether ``pattern`` compiles as a regular expression."""
    try:
        re.compile(pattern)
    except re.error:
        return False
    return True


def pattern_matches(pattern: str, text: str) -> bool:
    """Search ``text`` with ``pattern``; invalid patterns never match."""
    try:
        return re.search(pattern, text) is not None
    except re.error:
        return False


__all__ = [
    "combined_pattern",
    "escape_pattern",
    "exact_match_pattern",
    "is_valid_pattern",
    "pattern_matches",
]
