"""Terminal reporter.

Rich output for a test run: header, warnings, one block per test case,
summary counts and dry-run preview.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

from jira_test.locator import format_location
from jira_test.models import RunOutcome, TestCaseResult
from jira_test.reconciler import summarize

SNIPPET_MAX_LENGTH = 120
_SNIPPET_MARKERS = ("Expected", "Received", "Error:", "AssertionError")


def _status_label(outcome: RunOutcome) -> str:
    """Get icon and label markup for an outcome."""
    labels = {
        RunOutcome.PASSED: "[green]✓ PASS[/green]",
        RunOutcome.FAILED: "[red]✗ FAIL[/red]",
        RunOutcome.UNMATCHED: "[yellow]? NOT FOUND[/yellow]",
    }
    return labels[outcome]


def print_header(
    jira_key: str,
    parent_summary: str,
    platform: str,
    *,
    skipped_by_platform: int = 0,
    is_dry_run: bool = False,
    console: Console | None = None,
) -> None:
    """Print the run header.

    Args:
        jira_key: Parent issue key
        parent_summary: Parent issue summary
        platform: Platform filter in effect
        skipped_by_platform: Test cases removed by the platform filter
        is_dry_run: Whether tests will be executed
        console: Optional Rich console (creates one if not provided)
    """
    if console is None:
        console = Console()

    console.print()
    console.print("[bold]JIRA Test Runner[/bold]")
    console.print(Rule(style="dim"))
    console.print(f"[bold]Issue:[/bold] {escape(jira_key)} - {escape(parent_summary)}")
    console.print(f"[bold]Platform filter:[/bold] {escape(platform)}")

    if is_dry_run:
        console.print(f"\n[yellow]{escape('[DRY RUN MODE - Tests will not be executed]')}[/yellow]")

    if skipped_by_platform > 0:
        console.print(f"[dim]({skipped_by_platform} test cases filtered by platform)[/dim]")
    console.print()


def print_warnings(warnings: Sequence[str], console: Console | None = None) -> None:
    """Print matcher and comment warnings; prints nothing when empty."""
    if not warnings:
        return
    if console is None:
        console = Console()

    console.print("[bold yellow]Warnings:[/bold yellow]")
    for message in warnings:
        console.print(f"[yellow]  ⚠ {escape(message)}[/yellow]")
    console.print()


def print_test_case_results(results: Sequence[TestCaseResult], console: Console | None = None) -> None:
    """Print one block per test case.

    Each block shows status, key, title, labels, located definitions and,
    for failures, a one-line failure snippet.
    """
    if console is None:
        console = Console()

    console.print("[bold]Test Cases:[/bold]")
    console.print()

    for result in results:
        test_case = result.test_case
        console.print(f"{_status_label(result.outcome)} [cyan]{escape(test_case.key)}[/cyan]")
        console.print(f"  [dim]Title:[/dim] {escape(test_case.title)}")

        if test_case.labels:
            console.print(f"  [dim]Labels:[/dim] {escape(', '.join(test_case.labels))}")

        if result.locations is not None and result.locations.found:
            console.print("  [dim]Location(s):[/dim]")
            for location in result.locations.locations:
                console.print(f"    [blue]{escape(format_location(location))}[/blue]")

        failure = result.runner_result.failure_message if result.runner_result else None
        if result.outcome == RunOutcome.FAILED and failure:
            console.print("  [dim]Failure:[/dim]")
            console.print(f"    [red]{escape(get_failure_snippet(failure))}[/red]")

        console.print()


def print_summary(results: Sequence[TestCaseResult], console: Console | None = None) -> None:
    """Print outcome counts, omitting zero counts."""
    if console is None:
        console = Console()

    counts = summarize(results)
    parts: list[str] = []
    if counts.passed:
        parts.append(f"[green]{counts.passed} passed[/green]")
    if counts.failed:
        parts.append(f"[red]{counts.failed} failed[/red]")
    if counts.unmatched:
        parts.append(f"[yellow]{counts.unmatched} not found[/yellow]")

    console.print(Rule(style="dim"))
    console.print("[bold]Summary:[/bold]")
    console.print(f"  {', '.join(parts)}" if parts else "  [dim]No test cases[/dim]")
    console.print()


def print_no_test_cases(jira_key: str, console: Console | None = None) -> None:
    """Print the message shown when an issue has no test cases."""
    if console is None:
        console = Console()

    console.print()
    console.print(f"[yellow]No test cases found for {escape(jira_key)}[/yellow]")
    console.print()


def print_dry_run_command(command: str, console: Console | None = None) -> None:
    """Print the runner command a dry run would execute."""
    if console is None:
        console = Console()

    console.print("[bold]Command that would be executed:[/bold]")
    console.print(f"[cyan]  {escape(command)}[/cyan]")
    console.print()


def print_error(message: str, details: str | None = None, console: Console | None = None) -> None:
    """Print an error with optional dimmed details."""
    if console is None:
        console = Console(stderr=True)

    console.print()
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    if details:
        console.print(f"[dim]{escape(details)}[/dim]")
    console.print()


def get_failure_snippet(message: str) -> str:
    """Pick the most relevant line of a failure message.

    The first line mentioning an expectation or error wins; otherwise the
    first non-empty line. Truncated to 120 characters.

    Example:
        >>> get_failure_snippet("Error: boom\\n    at Object.<anonymous>")
        'Error: boom'
    """
    lines = [line.strip() for line in message.splitlines() if line.strip()]

    for line in lines:
        if any(marker in line for marker in _SNIPPET_MARKERS):
            return line[:SNIPPET_MAX_LENGTH]

    return lines[0][:SNIPPET_MAX_LENGTH] if lines else "Unknown error"


__all__ = [
    "get_failure_snippet",
    "print_dry_run_command",
    "print_error",
    "print_header",
    "print_no_test_cases",
    "print_summary",
    "print_test_case_results",
    "print_warnings",
]
