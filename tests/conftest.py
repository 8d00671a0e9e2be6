"""Pytest fixtures for docent tests."""

import shutil
import subprocess
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo logging configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., Path]:
    """Write a file below tmp_path, creating parent directories."""

    def _write(relative: str, content: str = "", mode: int | None = None) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if mode is not None:
            path.chmod(mode)
        return path

    return _write


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Empty project with a docs directory."""
    (tmp_path / "docs").mkdir()
    return tmp_path


def _git(cwd: Path, *args: str) -> None:
    subprocess.run(
        [
            "git",
            "-c",
            "user.email=test@example.com",
            "-c",
            "user.name=Test",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git(tmp_path: Path) -> Callable[..., None]:
    """Run git commands in tmp_path."""

    def _run(*args: str) -> None:
        _git(tmp_path, *args)

    return _run


@pytest.fixture
def git_repo(tmp_path: Path, git: Callable[..., None]) -> Path:
    """Initialized git repository with a docs directory."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    git("init", "-q")
    (tmp_path / "docs").mkdir()
    return tmp_path
