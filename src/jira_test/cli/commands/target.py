"""Default command - ``jira-test <target>``.

A target that looks like a test file path runs file mode; anything else is
treated as a Jira key and run with the ``run`` command defaults.
"""

from __future__ import annotations

import click

from jira_test.cli.commands.run import RunOptions, run_command
from jira_test.cli.commands.run_file import is_test_file_target, run_file_command
from jira_test.cli.errors import handle_errors


@click.command(hidden=True)
@click.argument("target")
@click.option(
    "--comment/--no-comment",
    default=True,
    help="Post results as comments on the Jira issues.",
)
@click.option("--dry", is_flag=True, default=False, help="Print what would run without executing tests.")
def target(target: str, comment: bool, dry: bool) -> None:
    """Run a test file or the tests mapped from a Jira key.

    Examples:

        jira-test src/calculator.test.ts

        jira-test PROJ-123 --no-comment
    """
    with handle_errors():
        if is_test_file_target(target):
            exit_code = run_file_command(target, comment=comment, dry=dry)
        else:
            exit_code = run_command(target, RunOptions(comment=comment, dry=dry))

    raise SystemExit(exit_code)
