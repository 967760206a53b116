"""File mode - run one test file and report it against its Jira ticket.

The ticket key comes from the first ``describe('ABC-123', ...)`` block in
the file. The test runner is detected from the nearest package.json.
"""

from __future__ import annotations

import json
import re
import shlex
from pathlib import Path

from pydantic import BaseModel, ConfigDict
from rich.console import Console
from rich.markup import escape

from jira_test.cli import output
from jira_test.cli.commands.run import create_client
from jira_test.cli.errors import EXIT_SUCCESS, EXIT_TEST_FAILURE, CLIError
from jira_test.config import load_config
from jira_test.jira.collector import DEFAULT_LINK_TYPE, collect_test_cases
from jira_test.models import Platform
from jira_test.reconciler import reconcile, summarize
from jira_test.reporting.comments import post_comments
from jira_test.reporting.json_report import DEFAULT_REPORT_PATH, generate_report, write_json_report
from jira_test.reporting.terminal import (
    print_dry_run_command,
    print_error,
    print_summary,
    print_test_case_results,
    print_warnings,
)
from jira_test.runner.jest import (
    JestRunnerOptions,
    build_jest_command,
    component_file_name,
    run_jest,
)

FILE_MATCH_MODE = "ticket-key"
TEST_FILE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")
_DESCRIBE_KEY = re.compile(r"""describe\s*\(\s*['"`]([A-Z]+-\d+)['"`]""")


class TestRunnerInfo(BaseModel):
    """Test runner detected for a project."""

    __test__ = False

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    command: str


DEFAULT_RUNNER = TestRunnerInfo(name="jest", command="jest")


def is_test_file_target(target: str) -> bool:
    """Check whether a CLI target names a test file rather than a ticket key.

    Example:
        >>> is_test_file_target("calculator.test.ts"), is_test_file_target("PROJ-1")
        (True, False)
    """
    return target.endswith(TEST_FILE_SUFFIXES) or "/" in target or "\\" in target


def extract_jira_key_from_file(file_path: Path) -> str | None:
    """Return the ticket key of the first ``describe('ABC-123', ...)`` block.

    Returns None when the file has no such block or cannot be read.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    match = _DESCRIBE_KEY.search(content)
    return match.group(1) if match else None


def _package_dirs(start_dir: Path) -> list[Path]:
    return [d for d in (start_dir, *start_dir.parents) if (d / "package.json").is_file()]


def detect_test_runner(start_dir: Path) -> TestRunnerInfo:
    """Detect the test runner from the nearest package.json declaring one.

    Dependencies and devDependencies are checked for vitest, then jest
    (or @jest/core), then mocha. Unreadable package.json files are skipped.
    Defaults to jest.
    """
    for directory in _package_dirs(start_dir):
        try:
            package = json.loads((directory / "package.json").read_text(encoding="utf-8"))
        except (OSError, ValueError):
            continue
        if not isinstance(package, dict):
            continue

        deps = {**(package.get("dependencies") or {}), **(package.get("devDependencies") or {})}
        if "vitest" in deps:
            return TestRunnerInfo(name="vitest", command="vitest run")
        if "jest" in deps or "@jest/core" in deps:
            return DEFAULT_RUNNER
        if "mocha" in deps:
            return TestRunnerInfo(name="mocha", command="mocha")

    return DEFAULT_RUNNER


def find_project_root(start_dir: Path) -> Path:
    """Nearest directory containing package.json, else ``start_dir``."""
    package_dirs = _package_dirs(start_dir)
    return package_dirs[0] if package_dirs else start_dir


def run_file_command(
    test_file: str,
    *,
    comment: bool = True,
    dry: bool = False,
    report_json: str = DEFAULT_REPORT_PATH,
    console: Console | None = None,
) -> int:
    """Run one test file and report its results against its Jira ticket.

    Args:
        test_file: Path to the test file.
        comment: Post comments on Jira.
        dry: Print the runner command instead of running it.
        report_json: JSON report path.
        console: Optional Rich console (defaults to the CLI console).

    Returns:
        EXIT_SUCCESS, or EXIT_TEST_FAILURE when a test failed.

    Raises:
        CLIError: If the file is missing or carries no ticket key.
        ConfigError: If Jira configuration is missing.
        JiraClientError: If Jira requests fail.
    """
    if console is None:
        console = output.get_console()

    path = Path(test_file).resolve()
    if not path.is_file():
        raise CLIError(f"File not found: {path}")

    jira_key = extract_jira_key_from_file(path)
    if jira_key is None:
        raise CLIError(
            "No Jira ticket found in test file\n"
            "Add a describe block with a Jira ticket key (e.g., describe('PROJ-123', ...))"
        )

    runner = detect_test_runner(path.parent)
    project_root = find_project_root(path.parent)
    config = load_config()

    console.print()
    console.print("[bold]JIRA Test Runner (File Mode)[/bold]")
    console.print(f"Test file: {escape(path.name)}")
    console.print(f"Jira ticket: {jira_key}")
    console.print(f"Test runner: {runner.name}")
    console.print()

    runner_options = JestRunnerOptions(
        jest_cmd=f"{runner.command} {shlex.quote(str(path))}",
        repo_path=project_root,
        pattern=jira_key,
        dry_run=dry,
    )
    if dry:
        print_dry_run_command(build_jest_command(runner_options), console)

    jest_result = run_jest(runner_options)
    if jest_result.error:
        print_error(jest_result.error, console=console)
    summary = jest_result.summary
    console.print(f"{summary.total} tests ran - {summary.passed} passed, {summary.failed} failed")
    console.print()

    with create_client(config.jira) as client:
        collected = collect_test_cases(
            client,
            jira_key,
            link_type=DEFAULT_LINK_TYPE,
            platform=Platform.ALL,
        )
        console.print(f"Found {len(collected.test_cases)} test cases in {jira_key}")

        component = component_file_name(path.name)
        console.print(f"Looking for coverage of: {escape(component)}")
        console.print()
        coverage = jest_result.coverage.restrict_to(component) if jest_result.coverage else None

        results = reconcile(collected.test_cases, jest_result.test_results)
        print_test_case_results(results, console)
        print_summary(results, console)

        if comment and not dry:
            print_warnings(post_comments(client, jira_key, results, coverage), console)

    report = generate_report(
        jira_key=jira_key,
        parent_summary=collected.parent_summary,
        platform=Platform.ALL.value,
        link_type=DEFAULT_LINK_TYPE,
        match_mode=FILE_MATCH_MODE,
        results=results,
        is_dry_run=dry,
    )
    written = write_json_report(report, report_json)
    console.print(f"[green]✓[/green] Report saved to {escape(written.name)}")

    if jest_result.error or summary.failed > 0 or summarize(results).failed > 0:
        return EXIT_TEST_FAILURE
    return EXIT_SUCCESS


__all__ = [
    "FILE_MATCH_MODE",
    "TestRunnerInfo",
    "detect_test_runner",
    "extract_jira_key_from_file",
    "find_project_root",
    "is_test_file_target",
    "run_file_command",
]
