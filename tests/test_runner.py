"""Tests for the doctor check runner."""

import asyncio
import time
from collections.abc import Callable
from pathlib import Path

import pytest

from docent.config import DocentSettings
from docent.doctor import CheckRunner, DoctorRequest, run_doctor
from docent.doctor.files import scan_executor
from docent.doctor.models import Category, CheckName, Issue, Severity
from docent.doctor.runner import select_checks
from docent.exceptions import GitTimeoutError, ToolUnavailableError


def _settings(check_timeout: float = 30) -> DocentSettings:
    # model_copy skips validation, allowing sub-second timeouts in tests
    return DocentSettings().model_copy(update={"check_timeout": check_timeout})


async def _one_error(root: Path, docs_dir: str, git_timeout: float) -> list[Issue]:
    return [Issue(severity=Severity.ERROR, category=Category.BROKEN_LINK, message="broken")]


async def _one_warning(root: Path, docs_dir: str, git_timeout: float) -> list[Issue]:
    return [Issue(severity=Severity.WARNING, category=Category.GIT_STATUS, message="dirty")]


async def _slow(root: Path, docs_dir: str, git_timeout: float) -> list[Issue]:
    await asyncio.sleep(10)
    return [Issue(severity=Severity.ERROR, category=Category.DEBUG_CODE, message="late")]


async def _no_git(root: Path, docs_dir: str, git_timeout: float) -> list[Issue]:
    raise ToolUnavailableError("git")


async def _git_hangs(root: Path, docs_dir: str, git_timeout: float) -> list[Issue]:
    raise GitTimeoutError("grep", 15)


async def _crash(root: Path, docs_dir: str, git_timeout: float) -> list[Issue]:
    raise RuntimeError("boom")


class TestSelectChecks:
    """Tests for select_checks."""

    def test_none_selects_all(self) -> None:
        """Test no selection means every registered check."""
        assert select_checks(None) == list(CheckName)

    def test_none_selects_all_available(self) -> None:
        """Test no selection is limited to the available checks."""
        available = {CheckName.LINKS: _one_error}
        assert select_checks(None, available) == [CheckName.LINKS]

    def test_explicit_selection(self) -> None:
        """Test explicit names keep their given order."""
        assert select_checks(["structure", "links"]) == [CheckName.STRUCTURE, CheckName.LINKS]

    def test_unknown_and_duplicate_names_dropped(self) -> None:
        """Test unknown names and repeats are dropped."""
        assert select_checks(["links", "spelling", "links"]) == [CheckName.LINKS]

    def test_empty_selection(self) -> None:
        """Test an empty selection runs nothing."""
        assert select_checks([]) == []


class TestCheckRunner:
    """Tests for CheckRunner."""

    @pytest.mark.asyncio
    async def test_aggregates_issues(self, tmp_path: Path) -> None:
        """Test issues from every check are merged in check order."""
        runner = CheckRunner(
            tmp_path,
            "docs",
            settings=_settings(),
            checks={CheckName.LINKS: _one_error, CheckName.UNCOMMITTED: _one_warning},
        )

        result = await runner.run()

        assert [issue.message for issue in result.issues] == ["broken", "dirty"]
        assert result.tool_failures == []
        assert result.score == 87
        assert result.healthy is False

    @pytest.mark.asyncio
    async def test_timeout_becomes_tool_failure(self, tmp_path: Path) -> None:
        """Test a check exceeding its timeout is recorded and the rest still report."""
        runner = CheckRunner(
            tmp_path,
            "docs",
            settings=_settings(check_timeout=0.05),
            checks={CheckName.DEBUG_CODE: _slow, CheckName.UNCOMMITTED: _one_warning},
        )

        result = await runner.run()

        assert [issue.message for issue in result.issues] == ["dirty"]
        assert len(result.tool_failures) == 1
        failure = result.tool_failures[0]
        assert failure.check == "debug-code"
        assert failure.tool == "timeout"
        assert result.healthy is True

    @pytest.mark.asyncio
    async def test_missing_tool_becomes_tool_failure(self, tmp_path: Path) -> None:
        """Test a missing git binary is a tool failure, not an issue."""
        runner = CheckRunner(
            tmp_path,
            "docs",
            settings=_settings(),
            checks={CheckName.TEMP_FILES: _no_git},
        )

        result = await runner.run()

        assert result.issues == []
        assert result.tool_failures[0].tool == "git"
        assert "not installed" in result.tool_failures[0].reason
        assert result.score == 100

    @pytest.mark.asyncio
    async def test_git_timeout_reported_against_git(self, tmp_path: Path) -> None:
        """Test a timed-out git call names git and its own timeout."""
        runner = CheckRunner(
            tmp_path,
            "docs",
            settings=_settings(),
            checks={CheckName.DEBUG_CODE: _git_hangs},
        )

        result = await runner.run()

        assert result.issues == []
        failure = result.tool_failures[0]
        assert failure.check == "debug-code"
        assert failure.tool == "git"
        assert failure.reason == "'git grep' timed out after 15 seconds"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_tool_failure(self, tmp_path: Path) -> None:
        """Test an unexpected exception is isolated to its check."""
        runner = CheckRunner(
            tmp_path,
            "docs",
            settings=_settings(),
            checks={CheckName.STRUCTURE: _crash, CheckName.LINKS: _one_error},
        )

        result = await runner.run()

        assert [issue.message for issue in result.issues] == ["broken"]
        assert result.tool_failures[0].check == "structure"
        assert result.tool_failures[0].tool == "internal"
        assert result.tool_failures[0].reason == "boom"

    @pytest.mark.asyncio
    async def test_runs_only_enabled_checks(self, tmp_path: Path) -> None:
        """Test only the enabled checks run."""
        runner = CheckRunner(
            tmp_path,
            "docs",
            settings=_settings(),
            checks={CheckName.LINKS: _one_error, CheckName.UNCOMMITTED: _one_warning},
        )

        result = await runner.run(["uncommitted"])

        assert [issue.message for issue in result.issues] == ["dirty"]

    @pytest.mark.asyncio
    async def test_run_check_records_timing(self, tmp_path: Path) -> None:
        """Test a single check outcome carries its execution time."""
        runner = CheckRunner(
            tmp_path, "docs", settings=_settings(), checks={CheckName.LINKS: _one_error}
        )

        outcome = await runner.run_check(CheckName.LINKS)

        assert outcome.check == CheckName.LINKS
        assert outcome.failure is None
        assert len(outcome.issues) == 1
        assert outcome.execution_time_ms >= 0

    @pytest.mark.asyncio
    async def test_scan_pool_released_after_run(self, tmp_path: Path) -> None:
        """Test the run's scan pool is unset once the run finishes."""
        runner = CheckRunner(
            tmp_path, "docs", settings=_settings(), checks={CheckName.LINKS: _one_error}
        )

        await runner.run()

        assert scan_executor.get() is None


class TestRunDoctor:
    """End-to-end runs over a real directory."""

    @pytest.mark.asyncio
    async def test_missing_docs_directory(self, tmp_path: Path) -> None:
        """Test a missing docs directory is one error and nothing else."""
        request = DoctorRequest(
            project_path=tmp_path,
            enabled_checks=["docs-quality", "links", "structure"],
        )

        result = await run_doctor(request, _settings())

        assert len(result.issues) == 1
        assert result.issues[0].category == Category.DOCUMENTATION
        assert result.score == 90
        assert result.healthy is False

    @pytest.mark.asyncio
    async def test_healthy_project(self, project: Path, write_file: Callable[..., Path]) -> None:
        """Test a documented project is healthy with one confirmation."""
        write_file("docs/README.md", "# Docs\n\nRun `scripts/deploy.sh`.\n")
        write_file("scripts/deploy.sh")

        request = DoctorRequest(
            project_path=project,
            enabled_checks=["docs-quality", "links", "structure"],
        )
        result = await run_doctor(request, _settings())

        assert result.healthy is True
        assert result.tool_failures == []
        assert [issue.severity for issue in result.issues] == ["info"]

    @pytest.mark.asyncio
    async def test_custom_docs_dir(self, tmp_path: Path, write_file: Callable[..., Path]) -> None:
        """Test a non-default docs directory is honored."""
        write_file("documentation/README.md", "# Docs\n")

        request = DoctorRequest(
            project_path=tmp_path,
            docs_dir="documentation",
            enabled_checks=["docs-quality"],
        )
        result = await run_doctor(request, _settings())

        assert result.issues == []
        assert result.score == 100

    def test_timed_out_scan_does_not_delay_report(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a blocking scan past its timeout does not hold up the result."""

        def stuck_scan(root: Path, docs_dir: str) -> list[Issue]:
            time.sleep(2)
            return []

        monkeypatch.setattr("docent.doctor.structure.reconcile_structure", stuck_scan)
        request = DoctorRequest(project_path=project, enabled_checks=["structure"])

        started = time.monotonic()
        result = asyncio.run(run_doctor(request, _settings(check_timeout=0.1)))
        elapsed = time.monotonic() - started

        assert elapsed < 1.5
        assert [failure.tool for failure in result.tool_failures] == ["timeout"]
        assert result.issues == []
