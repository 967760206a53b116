"""CLI error handling for jira-test.

Maps jira-test exceptions onto user-facing messages and exit codes:

- 0: success
- 1: at least one test case failed
- 2: configuration or usage error
- 3: Jira API error
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from jira_test.cli.output import error
from jira_test.errors import ConfigError, JiraClientError, JiraTestError

EXIT_SUCCESS = 0
EXIT_TEST_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_JIRA_ERROR = 3


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 2).
    """

    def __init__(self, message: str, exit_code: int = EXIT_CONFIG_ERROR) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
        """
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


@contextmanager
def handle_errors() -> Iterator[None]:
    """Translate jira-test exceptions raised inside the block into CLIError.

    Raises:
        CLIError: With the exit code matching the failure.

    Example:
        >>> with handle_errors():
        ...     config = load_config()
    """
    try:
        yield
    except ConfigError as exc:
        raise CLIError(f"Configuration error: {exc.message}", exit_code=EXIT_CONFIG_ERROR) from exc
    except JiraClientError as exc:
        raise CLIError(f"Jira API error: {exc}", exit_code=EXIT_JIRA_ERROR) from exc
    except JiraTestError as exc:
        raise CLIError(exc.message, exit_code=EXIT_CONFIG_ERROR) from exc
    except OSError as exc:
        raise CLIError(f"Unexpected error: {exc}", exit_code=EXIT_CONFIG_ERROR) from exc


__all__ = [
    "EXIT_CONFIG_ERROR",
    "EXIT_JIRA_ERROR",
    "EXIT_SUCCESS",
    "EXIT_TEST_FAILURE",
    "CLIError",
    "handle_errors",
]
