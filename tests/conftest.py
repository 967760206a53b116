"""Shared test fixtures for jira-test.

Provides:
- Environment fixtures for Jira configuration
- A FakeJira-backed JiraClient (see jira_fakes.py)
- Factories for test cases and runner results
- A recording Rich console
- CliRunner fixtures
"""

from __future__ import annotations

import io
import itertools
import logging
from collections.abc import Callable, Generator, Sequence
from pathlib import Path

import pytest
import structlog
from click.testing import CliRunner
from jira_fakes import BASE_URL, FakeJira
from rich.console import Console

from jira_test.config import JiraConfig, PatAuth
from jira_test.jira.client import JiraClient
from jira_test.models import RunnerTestResult, TestCase, TestCaseOrigin

JIRA_ENV_VARS = (
    "JIRA_BASE_URL",
    "JIRA_EMAIL",
    "JIRA_API_TOKEN",
    "JIRA_PAT",
    "JIRA_API_VERSION",
)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    before = list(root.handlers)
    yield
    structlog.reset_defaults()
    for handler in root.handlers[:]:
        if handler not in before:
            root.removeHandler(handler)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Remove JIRA_* variables and run in an empty directory (no .env)."""
    for name in JIRA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def jira_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Environment with Data Center PAT credentials."""
    clean_env.setenv("JIRA_BASE_URL", BASE_URL)
    clean_env.setenv("JIRA_PAT", "pat-secret")
    return clean_env


@pytest.fixture
def jira_config() -> JiraConfig:
    """PAT configuration with automatic API version detection."""
    return JiraConfig(base_url=BASE_URL, auth=PatAuth(token="pat-secret"))


@pytest.fixture
def fake_jira() -> FakeJira:
    """Jira Cloud (v3) fake."""
    return FakeJira(cloud=True)


@pytest.fixture
def jira_client(fake_jira: FakeJira, jira_config: JiraConfig) -> Generator[JiraClient, None, None]:
    """JiraClient wired to fake_jira."""
    with fake_jira.client(jira_config) as client:
        yield client


@pytest.fixture
def make_test_case() -> Callable[..., TestCase]:
    """Factory for TestCase instances with sequential keys."""
    counter = itertools.count(1)

    def _make(
        title: str,
        key: str | None = None,
        labels: Sequence[str] = (),
        origin: TestCaseOrigin = TestCaseOrigin.SUBTASK,
    ) -> TestCase:
        return TestCase(
            key=key or f"PROJ-{next(counter)}",
            title=title,
            labels=tuple(labels),
            origin=origin,
        )

    return _make


@pytest.fixture
def make_runner_result() -> Callable[..., RunnerTestResult]:
    """Factory for RunnerTestResult instances."""

    def _make(
        title: str,
        status: str = "passed",
        failure_message: str | None = None,
        duration_ms: float | None = 5,
    ) -> RunnerTestResult:
        return RunnerTestResult(
            title=title,
            status=status,
            failure_message=failure_message,
            duration_ms=duration_ms,
        )

    return _make


@pytest.fixture
def recording_console() -> Console:
    """Wide, colorless console recording everything printed to it.

    Read the output with ``recording_console.export_text()``.
    """
    return Console(
        file=io.StringIO(),
        record=True,
        width=200,
        no_color=True,
        force_terminal=False,
        highlight=False,
    )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Click test runner inside a temporary working directory."""
    with cli_runner.isolated_filesystem():
        yield cli_runner
