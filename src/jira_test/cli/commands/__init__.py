"""jira-test CLI commands."""
