"""Tests for file mode (jira_test.cli.commands.run_file)."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from jira_fakes import FakeJira, subtask
from rich.console import Console

from jira_test.cli.commands.run_file import (
    detect_test_runner,
    extract_jira_key_from_file,
    find_project_root,
    is_test_file_target,
    run_file_command,
)
from jira_test.cli.errors import CLIError
from jira_test.models import RunnerTestResult
from jira_test.runner.jest import CoverageData, FileCoverage, RunnerRunResult, RunSummary

CALCULATOR_TEST = """\
describe('PROJ-1', () => {
  it('adds numbers', () => {
    expect(add(1, 2)).toBe(3);
  });
});
"""


def write_package(directory: Path, **deps: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "package.json").write_text(json.dumps({"name": "app", "devDependencies": deps}))


class TestIsTestFileTarget:
    @pytest.mark.parametrize(
        ("target", "expected"),
        [
            ("calculator.test.ts", True),
            ("Button.tsx", True),
            ("src/cart", True),
            ("src\\cart.js", True),
            ("PROJ-123", False),
            ("proj-1", False),
        ],
    )
    def test_detection(self, target: str, expected: bool) -> None:
        assert is_test_file_target(target) is expected


class TestExtractJiraKeyFromFile:
    """Tests for extract_jira_key_from_file."""

    def test_first_describe_key(self, tmp_path: Path) -> None:
        path = tmp_path / "a.test.ts"
        path.write_text("describe(\"PROJ-7\", () => {});\ndescribe('PROJ-8', () => {});\n")

        assert extract_jira_key_from_file(path) == "PROJ-7"

    def test_backticks_and_spacing(self, tmp_path: Path) -> None:
        path = tmp_path / "a.test.ts"
        path.write_text("describe ( `ABC-42`, () => {});\n")

        assert extract_jira_key_from_file(path) == "ABC-42"

    def test_describe_without_key(self, tmp_path: Path) -> None:
        path = tmp_path / "a.test.ts"
        path.write_text("describe('Calculator', () => {});\n")

        assert extract_jira_key_from_file(path) is None

    def test_missing_file(self, tmp_path: Path) -> None:
        assert extract_jira_key_from_file(tmp_path / "nope.test.ts") is None


class TestDetectTestRunner:
    """Tests for detect_test_runner and find_project_root."""

    @pytest.mark.parametrize(
        ("deps", "name", "command"),
        [
            ({"vitest": "^1.0.0", "jest": "^29"}, "vitest", "vitest run"),
            ({"jest": "^29"}, "jest", "jest"),
            ({"@jest/core": "^29"}, "jest", "jest"),
            ({"mocha": "^10"}, "mocha", "mocha"),
        ],
    )
    def test_from_dependencies(self, tmp_path: Path, deps: dict[str, str], name: str, command: str) -> None:
        write_package(tmp_path, **deps)

        runner = detect_test_runner(tmp_path)

        assert (runner.name, runner.command) == (name, command)

    def test_defaults_to_jest(self, tmp_path: Path) -> None:
        assert detect_test_runner(tmp_path).name == "jest"

    def test_walks_up_to_package_declaring_runner(self, tmp_path: Path) -> None:
        write_package(tmp_path, vitest="^1")
        write_package(tmp_path / "packages" / "ui")
        nested = tmp_path / "packages" / "ui" / "src"
        nested.mkdir()

        assert detect_test_runner(nested).name == "vitest"
        assert find_project_root(nested) == tmp_path / "packages" / "ui"

    def test_unreadable_package_json_skipped(self, tmp_path: Path) -> None:
        write_package(tmp_path, mocha="^10")
        child = tmp_path / "child"
        child.mkdir()
        (child / "package.json").write_text("{broken")

        assert detect_test_runner(child).name == "mocha"

    def test_project_root_falls_back_to_start(self, tmp_path: Path) -> None:
        start = tmp_path / "loose"
        start.mkdir()

        with patch("jira_test.cli.commands.run_file._package_dirs", return_value=[]):
            assert find_project_root(start) == start


class TestRunFileCommand:
    """Tests for run_file_command."""

    @pytest.fixture
    def project(self, tmp_path: Path, fake_jira: FakeJira, jira_env: pytest.MonkeyPatch) -> Path:
        write_package(tmp_path, jest="^29")
        test_file = tmp_path / "src" / "calculator.test.ts"
        test_file.parent.mkdir()
        test_file.write_text(CALCULATOR_TEST)
        fake_jira.add_issue("PROJ-1", "Calculator", subtasks=[subtask("PROJ-2", "adds numbers")])
        return test_file

    @pytest.fixture
    def file_mode(self, fake_jira: FakeJira) -> Iterator[MagicMock]:
        with (
            patch("jira_test.cli.commands.run_file.create_client", side_effect=fake_jira.client),
            patch("jira_test.cli.commands.run_file.run_jest") as run_jest,
        ):
            yield run_jest

    def test_runs_file_with_ticket_pattern(
        self, project: Path, file_mode: MagicMock, fake_jira: FakeJira, recording_console: Console, tmp_path: Path
    ) -> None:
        file_mode.return_value = RunnerRunResult(
            success=True,
            exit_code=0,
            test_results=(RunnerTestResult(title="adds numbers", status="passed", duration_ms=2),),
            summary=RunSummary(total=1, passed=1),
            coverage=CoverageData(
                files=(FileCoverage(file="calculator.ts", lines=100), FileCoverage(file="other.ts")),
                component_files=(FileCoverage(file="calculator.ts", lines=100),),
                filtered=True,
            ),
        )

        exit_code = run_file_command(str(project), console=recording_console)

        assert exit_code == 0
        options = file_mode.call_args.args[0]
        assert options.pattern == "PROJ-1"
        assert options.jest_cmd == f"jest {project.resolve()}"
        assert options.repo_path == tmp_path.resolve()

        output = recording_console.export_text()
        assert "JIRA Test Runner (File Mode)" in output
        assert "Jira ticket: PROJ-1" in output
        assert "1 tests ran - 1 passed, 0 failed" in output
        assert "Found 1 test cases in PROJ-1" in output
        assert "Looking for coverage of: calculator.ts" in output
        assert "Report saved to .jira-test-report.json" in output

        assert [key for key, _ in fake_jira.comments] == ["PROJ-2", "PROJ-1"]
        summary = json.dumps(fake_jira.comments[1][1])
        assert "calculator.ts" in summary
        assert "other.ts" not in summary

        report = json.loads((tmp_path / ".jira-test-report.json").read_text())
        assert report["input"]["match_mode"] == "ticket-key"

    def test_failed_run_exits_one(
        self, project: Path, file_mode: MagicMock, recording_console: Console
    ) -> None:
        file_mode.return_value = RunnerRunResult(
            success=False,
            exit_code=1,
            test_results=(RunnerTestResult(title="adds numbers", status="failed", failure_message="Expected: 3"),),
            summary=RunSummary(total=1, failed=1),
        )

        assert run_file_command(str(project), comment=False, console=recording_console) == 1

    def test_dry_run_posts_nothing(
        self, project: Path, fake_jira: FakeJira, recording_console: Console
    ) -> None:
        with (
            patch("jira_test.cli.commands.run_file.create_client", side_effect=fake_jira.client),
            patch("jira_test.runner.jest.subprocess.run") as subprocess_run,
        ):
            exit_code = run_file_command(str(project), dry=True, console=recording_console)

        subprocess_run.assert_not_called()
        assert exit_code == 0
        assert fake_jira.comments == []
        assert "Command that would be executed:" in recording_console.export_text()

    def test_missing_file(self, tmp_path: Path, recording_console: Console) -> None:
        with pytest.raises(CLIError) as exc_info:
            run_file_command(str(tmp_path / "gone.test.ts"), console=recording_console)

        assert exc_info.value.message.startswith("File not found:")

    def test_file_without_ticket(self, tmp_path: Path, recording_console: Console) -> None:
        path = tmp_path / "plain.test.ts"
        path.write_text("describe('Calculator', () => {});\n")

        with pytest.raises(CLIError) as exc_info:
            run_file_command(str(path), console=recording_console)

        assert exc_info.value.message.startswith("No Jira ticket found in test file")
