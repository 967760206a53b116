"""jira-test: run the Jest tests mapped from a Jira issue.

This package provides:
- A Jira REST client (Cloud v3 and Data Center/Server v2) and test-case collector
- Exact-title test name pattern construction with duplicate detection
- A Jest runner wrapper with coverage summary parsing
- Reconciliation of runner results onto Jira test cases
- Terminal, JSON and Jira comment reporting

Example:
    >>> from jira_test import JiraClient, build_pattern, collect_test_cases, load_config
    >>> with JiraClient(load_config().jira) as client:
    ...     collected = collect_test_cases(client, "PROJ-123")
    >>> build_pattern(collected.test_cases).pattern
    '(adds item to cart$)|(removes item from cart$)'
"""

from __future__ import annotations

import importlib

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "load_config",
    "AppConfig",
    "JiraConfig",
    # Jira
    "JiraClient",
    "collect_test_cases",
    "CollectorResult",
    # Matching and reconciliation
    "build_pattern",
    "reconcile",
    # Runner
    "run_jest",
    "JestRunnerOptions",
    # Models
    "TestCase",
    "MatchResult",
    "RunnerTestResult",
    "RunOutcome",
    "TestCaseResult",
    # Exceptions
    "JiraTestError",
    "ConfigError",
    "JiraClientError",
    "UnsupportedModeError",
    "PatternConstructionError",
]

_EXPORTS = {
    "load_config": "jira_test.config",
    "AppConfig": "jira_test.config",
    "JiraConfig": "jira_test.config",
    "JiraClient": "jira_test.jira.client",
    "collect_test_cases": "jira_test.jira.collector",
    "CollectorResult": "jira_test.jira.collector",
    "build_pattern": "jira_test.matcher",
    "reconcile": "jira_test.reconciler",
    "run_jest": "jira_test.runner.jest",
    "JestRunnerOptions": "jira_test.runner.jest",
    "TestCase": "jira_test.models",
    "MatchResult": "jira_test.models",
    "RunnerTestResult": "jira_test.models",
    "RunOutcome": "jira_test.models",
    "TestCaseResult": "jira_test.models",
    "JiraTestError": "jira_test.errors",
    "ConfigError": "jira_test.errors",
    "JiraClientError": "jira_test.errors",
    "UnsupportedModeError": "jira_test.errors",
    "PatternConstructionError": "jira_test.errors",
}


def __getattr__(name: str) -> object:
    """Lazy import of public API members."""
    if name in _EXPORTS:
        return getattr(importlib.import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
