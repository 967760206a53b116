"""Allow ``python -m jira_test``."""

from jira_test.cli.main import cli

if __name__ == "__main__":
    cli()
