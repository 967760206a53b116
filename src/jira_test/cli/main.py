"""CLI entry point for jira-test.

Commands load lazily so that ``jira-test --help`` stays fast. A first
argument that is not a known command is handed to the default ``target``
command, so ``jira-test PROJ-123`` and ``jira-test app.test.ts`` work
without naming a subcommand.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from jira_test import __version__
from jira_test.cli.output import set_no_color
from jira_test.observability import configure_logging

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

DEFAULT_COMMAND = "target"


class LazyGroup(rclick.RichGroup):
    """Click group with lazily imported commands and a default command.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
        default_command: Command receiving arguments that name no command.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        default_command: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"run": "jira_test.cli.commands.run.run"}
            default_command: Name of the command used when no command is named.
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}
        self.default_command = default_command

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, importing it on first use.

        Args:
            ctx: Click context.
            cmd_name: Name of the command to get.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        """Resolve the command, routing unknown first arguments to the default.

        Args:
            ctx: Click context.
            args: Remaining arguments, starting with the command name.

        Returns:
            Command name, command and the arguments it receives.
        """
        if (
            self.default_command
            and args
            and not args[0].startswith("-")
            and self.get_command(ctx, args[0]) is None
        ):
            cmd = self.get_command(ctx, self.default_command)
            return self.default_command, cmd, args
        return super().resolve_command(ctx, args)


LAZY_COMMANDS = {
    "run": "jira_test.cli.commands.run.run",
    DEFAULT_COMMAND: "jira_test.cli.commands.target.target",
}


@click.group(
    cls=LazyGroup,
    lazy_subcommands=LAZY_COMMANDS,
    default_command=DEFAULT_COMMAND,
)
@click.version_option(version=__version__, prog_name="jira-test")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def cli(verbose: bool) -> None:
    """jira-test - Run the Jest tests mapped from a Jira issue.

    Test cases are the issue's subtasks and linked issues; each one's
    summary is the exact title of a Jest test.

    **Usage:**

    - `jira-test PROJ-123` - Run the tests of a Jira issue
    - `jira-test src/cart.test.ts` - Run a test file and report it to its ticket
    - `jira-test run PROJ-123 --platform web --locate` - Run with all options

    **Configuration:** `JIRA_BASE_URL` plus `JIRA_EMAIL` and `JIRA_API_TOKEN`
    (Jira Cloud) or `JIRA_PAT` (Data Center/Server), from the environment
    or a `.env` file.

    **Exit codes:** 0 success, 1 test failure, 2 configuration error, 3 Jira error.
    """
    configure_logging(log_level="DEBUG" if verbose else "WARNING")


if __name__ == "__main__":
    cli()
