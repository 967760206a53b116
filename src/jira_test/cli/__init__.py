"""Command-line interface for jira-test."""
