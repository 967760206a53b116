"""Jest runner integration.

Builds the runner command line, executes it once in the repository, and
parses the ``--json`` report and the ``json-summary`` coverage report.

Functions:
    build_jest_args: Runner arguments for a test name pattern
    build_jest_argv: Full argv for a runner command
    run_jest: Execute the runner and parse its output
    parse_jest_output: Parse runner stdout into a RunnerRunResult
    read_coverage_summary: Read coverage/coverage-summary.json
    component_file_name: Derive a source file name from a test file name
    build_jest_command: Display string for dry runs
"""

from __future__ import annotations

import json
import os
import re
import shlex
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from jira_test.models import RunnerTestResult

logger = structlog.get_logger(__name__)

PACKAGE_MANAGERS = ("npm", "yarn", "pnpm")
COVERAGE_SUMMARY_PATH = Path("coverage") / "coverage-summary.json"
_JSON_REPORT = re.compile(r"\{.*\"numTotalTests\".*\}", re.DOTALL)
_TEST_INFIX = re.compile(r"\.(test|spec)\.")


class JestRunnerOptions(BaseModel):
    """Options for a single runner invocation.

    Attributes:
        jest_cmd: Runner command, e.g. "jest", "npx jest" or "npm test"
        repo_path: Working directory for the run
        pattern: Test name pattern passed to --testNamePattern
        dry_run: Skip execution and return an empty result
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    jest_cmd: str = "jest"
    repo_path: Path = Field(default_factory=Path.cwd)
    pattern: str
    dry_run: bool = False


class FileCoverage(BaseModel):
    """Coverage percentages for one source file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    file: str
    statements: float = 0
    branches: float = 0
    functions: float = 0
    lines: float = 0


class CoverageData(BaseModel):
    """Coverage summary of a run.

    Attributes:
        statements: Overall statement coverage percentage
        branches: Overall branch coverage percentage
        functions: Overall function coverage percentage
        lines: Overall line coverage percentage
        files: Per-file coverage, restricted to component files when filtered
        component_files: Per-file coverage of the sources under test
        filtered: True when ``files`` was restricted to component files
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    statements: float = 0
    branches: float = 0
    functions: float = 0
    lines: float = 0
    files: tuple[FileCoverage, ...] = ()
    component_files: tuple[FileCoverage, ...] = ()
    filtered: bool = False

    def restrict_to(self, file_name: str) -> CoverageData:
        """Return a copy keeping only coverage entries for ``file_name``."""
        return self.model_copy(
            update={
                "files": tuple(f for f in self.files if f.file == file_name),
                "component_files": tuple(f for f in self.component_files if f.file == file_name),
            }
        )


class RunSummary(BaseModel):
    """Test counts reported by the runner."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    total: int = 0
    passed: int = 0
    failed: int = 0


class RunnerRunResult(BaseModel):
    """Outcome of one runner invocation.

    Attributes:
        success: Runner reported success
        exit_code: Process exit code
        test_results: One entry per assertion, in report order
        test_file_paths: Test files that ran
        summary: Test counts
        coverage: Coverage summary, if one was written
        raw_output: Combined stdout and stderr
        error: Set when the runner could not be started or parsed
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool
    exit_code: int
    test_results: tuple[RunnerTestResult, ...] = ()
    test_file_paths: tuple[str, ...] = ()
    summary: RunSummary = Field(default_factory=RunSummary)
    coverage: CoverageData | None = None
    raw_output: str = ""
    error: str | None = None


def build_jest_args(pattern: str) -> list[str]:
    """Build runner arguments restricting the run to ``pattern``."""
    return [
        "--testNamePattern",
        pattern,
        "--json",
        "--testLocationInResults",
        "--coverage",
        "--coverageReporters=json-summary",
    ]


def build_jest_argv(jest_cmd: str, repo_path: Path, pattern: str) -> list[str]:
    """Build the full argv for a runner command.

    Package manager commands (npm, yarn, pnpm) receive ``--`` before the
    runner arguments. A bare command resolves to the repository's
    ``node_modules/.bin`` copy when one exists.
    """
    parts = shlex.split(jest_cmd) or ["jest"]
    args = build_jest_args(pattern)

    if parts and parts[0] in PACKAGE_MANAGERS:
        return [*parts, "--", *args]

    local_bin = repo_path / "node_modules" / ".bin" / parts[0]
    if local_bin.exists():
        parts[0] = str(local_bin)

    return [*parts, *args]


def run_jest(options: JestRunnerOptions) -> RunnerRunResult:
    """Run the test runner once and parse its output.

    Args:
        options: Runner options.

    Returns:
        Parsed run result with coverage attached when available. Failures to
        start the process are reported through ``error``.
    """
    if options.dry_run:
        return RunnerRunResult(
            success=True,
            exit_code=0,
            raw_output=f"[DRY RUN] Would run Jest with pattern: {options.pattern}",
        )

    cwd = options.repo_path.resolve()
    argv = build_jest_argv(options.jest_cmd, cwd, options.pattern)
    env = {**os.environ, "FORCE_COLOR": "0"}

    logger.info("jest_started", argv=argv, cwd=str(cwd))

    try:
        completed = subprocess.run(
            argv,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        logger.error("jest_spawn_failed", command=argv[0], error=str(exc))
        return RunnerRunResult(
            success=False,
            exit_code=1,
            error=f"Failed to run Jest: {exc}",
        )

    result = parse_jest_output(completed.stdout, completed.stderr, completed.returncode)
    coverage = read_coverage_summary(cwd, result.test_file_paths)

    logger.info(
        "jest_finished",
        exit_code=result.exit_code,
        total=result.summary.total,
        passed=result.summary.passed,
        failed=result.summary.failed,
        coverage=coverage is not None,
    )

    return result.model_copy(update={"coverage": coverage})


def parse_jest_output(stdout: str, stderr: str, exit_code: int) -> RunnerRunResult:
    """Parse the runner's ``--json`` report out of its stdout.

    The report may be surrounded by other output; the document containing
    ``numTotalTests`` is extracted. Assertion statuses other than "passed"
    are reported as "failed".

    Args:
        stdout: Runner standard output.
        stderr: Runner standard error.
        exit_code: Runner exit code.

    Returns:
        Parsed result. Output without a report gives an empty result, with
        ``error`` set when the exit code is non-zero.
    """
    raw_output = stdout + stderr

    match = _JSON_REPORT.search(stdout)
    if not match:
        return RunnerRunResult(
            success=exit_code == 0,
            exit_code=exit_code,
            raw_output=raw_output,
            error="Failed to parse Jest output" if exit_code != 0 else None,
        )

    try:
        report: dict[str, Any] = json.loads(match.group(0))
    except ValueError:
        logger.warning("jest_output_unparsable", exit_code=exit_code)
        return RunnerRunResult(
            success=False,
            exit_code=exit_code,
            raw_output=raw_output,
            error="Failed to parse Jest JSON output",
        )

    test_results: list[RunnerTestResult] = []
    test_file_paths: list[str] = []

    for test_file in report.get("testResults") or []:
        if test_file.get("testFilePath"):
            test_file_paths.append(test_file["testFilePath"])
        for assertion in test_file.get("assertionResults") or []:
            messages = assertion.get("failureMessages") or []
            test_results.append(
                RunnerTestResult(
                    title=assertion.get("title", ""),
                    status="passed" if assertion.get("status") == "passed" else "failed",
                    failure_message="\n".join(messages) if messages else None,
                    duration_ms=assertion.get("duration"),
                )
            )

    return RunnerRunResult(
        success=report.get("success") is True,
        exit_code=exit_code,
        test_results=tuple(test_results),
        test_file_paths=tuple(test_file_paths),
        summary=RunSummary(
            total=report.get("numTotalTests") or 0,
            passed=report.get("numPassedTests") or 0,
            failed=report.get("numFailedTests") or 0,
        ),
        raw_output=raw_output,
    )


def component_file_name(test_file: str) -> str:
    """Derive a source file name from a test file path.

    Example:
        >>> component_file_name("src/Button.spec.tsx")
        'Button.tsx'
    """
    return _TEST_INFIX.sub(".", Path(test_file).name, count=1)


def read_coverage_summary(repo_path: Path, test_file_paths: Sequence[str] = ()) -> CoverageData | None:
    """Read the json-summary coverage report written by the runner.

    Per-file entries are restricted to the components under test (source
    files named after the test files) when any of them appear in the report.

    Args:
        repo_path: Repository the runner ran in.
        test_file_paths: Test files reported by the runner.

    Returns:
        CoverageData, or None when the report is missing or malformed.
    """
    summary_path = repo_path / COVERAGE_SUMMARY_PATH

    try:
        data = json.loads(summary_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.debug("coverage_summary_unavailable", path=str(summary_path), error=str(exc))
        return None

    if not isinstance(data, dict) or not isinstance(data.get("total"), dict):
        return None

    components = {component_file_name(p) for p in test_file_paths}
    all_files: list[FileCoverage] = []
    matched: list[FileCoverage] = []

    for key, value in data.items():
        if key == "total" or not isinstance(value, dict):
            continue
        entry = FileCoverage(file=Path(key).name, **_percentages(value))
        all_files.append(entry)
        if entry.file in components:
            matched.append(entry)

    filtered = bool(matched)

    return CoverageData(
        **_percentages(data["total"]),
        files=tuple(matched if filtered else all_files),
        component_files=tuple(matched),
        filtered=filtered,
    )


def _percentages(metrics: dict[str, Any]) -> dict[str, float]:
    # istanbul reports "Unknown" when a file has nothing to cover
    values: dict[str, float] = {}
    for name in ("statements", "branches", "functions", "lines"):
        pct = (metrics.get(name) or {}).get("pct")
        values[name] = pct if isinstance(pct, (int, float)) else 0
    return values


def build_jest_command(options: JestRunnerOptions) -> str:
    """Render the runner command for display."""
    return f'{options.jest_cmd} --testNamePattern "{options.pattern}"'


__all__ = [
    "CoverageData",
    "FileCoverage",
    "JestRunnerOptions",
    "RunSummary",
    "RunnerRunResult",
    "build_jest_args",
    "build_jest_argv",
    "build_jest_command",
    "component_file_name",
    "parse_jest_output",
    "read_coverage_summary",
    "run_jest",
]
