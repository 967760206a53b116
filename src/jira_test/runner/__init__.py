"""Test runner integration."""

from __future__ import annotations

from jira_test.runner.jest import (
    CoverageData,
    FileCoverage,
    JestRunnerOptions,
    RunnerRunResult,
    RunSummary,
    build_jest_command,
    read_coverage_summary,
    run_jest,
)

__all__ = [
    "CoverageData",
    "FileCoverage",
    "JestRunnerOptions",
    "RunSummary",
    "RunnerRunResult",
    "build_jest_command",
    "read_coverage_summary",
    "run_jest",
]
