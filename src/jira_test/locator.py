"""Locator for test definitions by title.

Finds ``it("<title>"`` / ``test("<title>"`` calls in JavaScript and
TypeScript sources. Uses ripgrep when it is on PATH and falls back to a
Python scan of ``*.test.*`` / ``*.spec.*`` files otherwise.

A title that is not found yields an empty location list; a search that
fails yields a LocatorResult with ``error`` set. Neither raises.

Functions:
    locate_tests: Locate every title under a repository
    parse_ripgrep_output: Parse ``file:line:column:match`` lines
    format_location: Render a location as ``file:line``
"""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

import structlog

from jira_test.matcher.patterns import escape_pattern
from jira_test.models import LocatorResult, TestLocation

logger = structlog.get_logger(__name__)

TEST_FILE_PATTERN = re.compile(r"\.(test|spec)\.(js|ts|jsx|tsx)$")
_RIPGREP_LINE = re.compile(r"^(.+?):(\d+):(\d+):(.*)$")
_SKIPPED_DIRS = frozenset({"node_modules"})


def definition_pattern(title: str) -> str:
    """Regex matching an it()/test() call whose first argument is ``title``."""
    return rf"""(it|test)\s*\(\s*["'`]{escape_pattern(title)}["'`]"""


def locate_tests(repo_path: Path, titles: Sequence[str]) -> list[LocatorResult]:
    """Locate test definitions for each title.

    Args:
        repo_path: Repository root to search.
        titles: Test titles, typically Jira issue summaries.

    Returns:
        One LocatorResult per title, in input order.
    """
    use_ripgrep = shutil.which("rg") is not None
    logger.debug("locating_tests", repo=str(repo_path), titles=len(titles), ripgrep=use_ripgrep)

    results: list[LocatorResult] = []
    for title in titles:
        try:
            if use_ripgrep:
                results.append(_find_with_ripgrep(repo_path, title))
            else:
                results.append(LocatorResult(title=title, locations=tuple(_scan_repo(repo_path, title))))
        except OSError as exc:
            logger.warning("locate_failed", title=title, error=str(exc))
            results.append(LocatorResult(title=title, error=str(exc)))

    return results


def _find_with_ripgrep(repo_path: Path, title: str) -> LocatorResult:
    args = [
        "rg",
        "--line-number",
        "--column",
        "--no-heading",
        "--type",
        "js",
        "--type",
        "ts",
        definition_pattern(title),
        str(repo_path),
    ]
    completed = subprocess.run(args, capture_output=True, text=True, check=False)

    # Exit code 1 means no matches
    if completed.returncode not in (0, 1) and completed.stderr:
        return LocatorResult(title=title, error=f"ripgrep error: {completed.stderr.strip()}")

    return LocatorResult(
        title=title,
        locations=tuple(parse_ripgrep_output(completed.stdout, repo_path)),
    )


def parse_ripgrep_output(output: str, repo_path: Path) -> list[TestLocation]:
    """Parse ripgrep ``--line-number --column --no-heading`` output.

    Malformed lines are ignored. Paths under ``repo_path`` become relative;
    other paths are kept as reported.

    Example:
        >>> parse_ripgrep_output('/repo/a.test.ts:3:5:  it("x", () => {', Path("/repo"))
        [TestLocation(file='a.test.ts', line=3, column=5, match='it("x", () => {')]
    """
    locations: list[TestLocation] = []

    for line in output.strip().splitlines():
        match = _RIPGREP_LINE.match(line)
        if not match:
            continue
        file_path, line_num, col_num, text = match.groups()
        locations.append(
            TestLocation(
                file=_relative_to(file_path, repo_path),
                line=int(line_num),
                column=int(col_num),
                match=text.strip(),
            )
        )

    return locations


def _relative_to(file_path: str, repo_path: Path) -> str:
    try:
        relative = Path(file_path).relative_to(repo_path)
    except ValueError:
        return file_path
    return relative.as_posix() or file_path


def _scan_repo(repo_path: Path, title: str) -> list[TestLocation]:
    """Scan test files under ``repo_path`` without ripgrep.

    Hidden directories and node_modules are skipped.
    """
    regex = re.compile(definition_pattern(title))
    locations: list[TestLocation] = []

    for dirpath, dirnames, filenames in os.walk(repo_path):
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in _SKIPPED_DIRS
        )
        for filename in sorted(filenames):
            if filename.startswith(".") or not TEST_FILE_PATTERN.search(filename):
                continue
            file_path = Path(dirpath) / filename
            content = file_path.read_text(encoding="utf-8", errors="replace")
            for index, line in enumerate(content.splitlines(), start=1):
                found = regex.search(line)
                if found:
                    locations.append(
                        TestLocation(
                            file=file_path.relative_to(repo_path).as_posix(),
                            line=index,
                            column=found.start() + 1,
                            match=line.strip(),
                        )
                    )

    return locations


def format_location(location: TestLocation) -> str:
    """Format a location as ``file:line``."""
    return f"{location.file}:{location.line}"


__all__ = [
    "TEST_FILE_PATTERN",
    "format_location",
    "locate_tests",
    "parse_ripgrep_output",
    "definition_pattern",
]
