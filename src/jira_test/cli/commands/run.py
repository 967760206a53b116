"""jira-test run command - Run the tests mapped from a Jira issue.

Flow: collect test cases -> build the test name pattern -> run Jest once
-> reconcile -> print results -> post comments -> write the JSON report.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import click
from rich.console import Console

from jira_test.cli import output
from jira_test.cli.errors import (
    EXIT_SUCCESS,
    EXIT_TEST_FAILURE,
    CLIError,
    handle_errors,
)
from jira_test.config import JiraConfig, load_config
from jira_test.errors import UnsupportedModeError
from jira_test.jira.client import JiraClient
from jira_test.jira.collector import DEFAULT_LINK_TYPE, collect_test_cases, parse_platform
from jira_test.locator import locate_tests
from jira_test.matcher import SUPPORTED_MODES, TITLE_MODE, build_pattern
from jira_test.models import LocatorResult, TestCaseResult
from jira_test.reconciler import reconcile, summarize
from jira_test.reporting.comments import post_comments
from jira_test.reporting.json_report import DEFAULT_REPORT_PATH, generate_report, write_json_report
from jira_test.reporting.terminal import (
    print_dry_run_command,
    print_error,
    print_header,
    print_no_test_cases,
    print_summary,
    print_test_case_results,
    print_warnings,
)
from jira_test.runner.jest import JestRunnerOptions, build_jest_command, run_jest


@dataclass
class RunOptions:
    """Grouped run command options."""

    platform: str = "all"
    link_type: str = DEFAULT_LINK_TYPE
    mode: str = TITLE_MODE
    dry: bool = False
    locate: bool = False
    jest_cmd: str = "jest"
    repo: Path = field(default_factory=Path.cwd)
    report_json: str = DEFAULT_REPORT_PATH
    comment: bool = True


def create_client(config: JiraConfig) -> JiraClient:
    """Create the Jira client for a run."""
    return JiraClient(config)


def _save_report(
    jira_key: str,
    parent_summary: str,
    options: RunOptions,
    results: Sequence[TestCaseResult],
    *,
    is_dry_run: bool,
) -> None:
    report = generate_report(
        jira_key=jira_key,
        parent_summary=parent_summary,
        platform=options.platform.lower(),
        link_type=options.link_type,
        match_mode=options.mode,
        results=results,
        is_dry_run=is_dry_run,
    )
    write_json_report(report, options.report_json)


def run_command(jira_key: str, options: RunOptions, console: Console | None = None) -> int:
    """Run the tests mapped from ``jira_key``.

    Args:
        jira_key: Parent issue key.
        options: Run options.
        console: Optional Rich console (defaults to the CLI console).

    Returns:
        EXIT_SUCCESS, or EXIT_TEST_FAILURE when a test case failed or the
        runner could not run.

    Raises:
        CLIError: For an invalid platform.
        UnsupportedModeError: For a match mode other than "title".
        ConfigError: If Jira configuration is missing.
        JiraClientError: If Jira requests fail.
    """
    if console is None:
        console = output.get_console()

    try:
        platform = parse_platform(options.platform)
    except ValueError as exc:
        raise CLIError(str(exc)) from None

    if options.mode not in SUPPORTED_MODES:
        raise UnsupportedModeError(options.mode)

    config = load_config()

    with create_client(config.jira) as client:
        collected = collect_test_cases(
            client,
            jira_key,
            link_type=options.link_type,
            platform=platform,
        )

        if not collected.test_cases:
            print_no_test_cases(jira_key, console)
            _save_report(jira_key, collected.parent_summary, options, [], is_dry_run=options.dry)
            return EXIT_SUCCESS

        match = build_pattern(collected.test_cases, options.mode)

        print_header(
            jira_key,
            collected.parent_summary,
            platform.value,
            skipped_by_platform=collected.skipped_by_platform,
            is_dry_run=options.dry,
            console=console,
        )
        print_warnings(match.warnings, console)

        locations: dict[str, LocatorResult] | None = None
        if options.locate:
            located = locate_tests(options.repo, [tc.title for tc in collected.test_cases])
            locations = {result.title: result for result in located}

        runner_options = JestRunnerOptions(
            jest_cmd=options.jest_cmd,
            repo_path=options.repo,
            pattern=match.pattern,
            dry_run=options.dry,
        )

        if options.dry:
            print_dry_run_command(build_jest_command(runner_options), console)
            results = reconcile(match.test_cases, [], locations)
            print_test_case_results(results, console)
            print_summary(results, console)
            _save_report(jira_key, collected.parent_summary, options, results, is_dry_run=True)
            return EXIT_SUCCESS

        jest_result = run_jest(runner_options)
        if jest_result.error:
            print_error(jest_result.error, console=console)

        results = reconcile(match.test_cases, jest_result.test_results, locations)
        print_test_case_results(results, console)
        print_summary(results, console)

        if options.comment:
            print_warnings(post_comments(client, jira_key, results, jest_result.coverage), console)

        _save_report(jira_key, collected.parent_summary, options, results, is_dry_run=False)

    if jest_result.error or summarize(results).failed > 0:
        return EXIT_TEST_FAILURE
    return EXIT_SUCCESS


@click.command()
@click.argument("jira_key")
@click.option(
    "--platform",
    default="all",
    show_default=True,
    help="Platform filter: web, mobile, or all.",
)
@click.option(
    "--link-type",
    default=DEFAULT_LINK_TYPE,
    show_default=True,
    help="Jira link type name for test case links.",
)
@click.option(
    "--mode",
    default=TITLE_MODE,
    show_default=True,
    help="Matching mode. Only `title` is supported.",
)
@click.option("--dry", is_flag=True, default=False, help="Print what would run without executing tests.")
@click.option(
    "--locate",
    is_flag=True,
    default=False,
    help="Find and display file locations for matching test titles.",
)
@click.option("--jest-cmd", default="jest", show_default=True, help="Jest command to run.")
@click.option(
    "--repo",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository root path [default: current directory].",
)
@click.option(
    "--report-json",
    default=DEFAULT_REPORT_PATH,
    show_default=True,
    help="Output JSON report path.",
)
@click.option(
    "--comment/--no-comment",
    default=True,
    help="Post results as comments on the Jira issues.",
)
def run(
    jira_key: str,
    platform: str,
    link_type: str,
    mode: str,
    dry: bool,
    locate: bool,
    jest_cmd: str,
    repo: Path | None,
    report_json: str,
    comment: bool,
) -> None:
    """Run tests mapped from a Jira issue.

    Collects the issue's subtasks and linked test cases, runs Jest once
    with a pattern matching their titles, and reports each test case as
    passed, failed, or not found.

    Examples:

        jira-test run PROJ-123

        jira-test run PROJ-123 --platform web --locate

        jira-test run PROJ-123 --dry --jest-cmd "npm test"
    """
    options = RunOptions(
        platform=platform,
        link_type=link_type,
        mode=mode,
        dry=dry,
        locate=locate,
        jest_cmd=jest_cmd,
        repo=repo or Path.cwd(),
        report_json=report_json,
        comment=comment,
    )

    with handle_errors():
        exit_code = run_command(jira_key, options)

    raise SystemExit(exit_code)
