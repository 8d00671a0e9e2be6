"""Git text surface used by the doctor checks.

Every helper shells out to ``git`` and returns parsed text output. A missing
``git`` binary raises ToolUnavailableError and a slow call raises GitTimeoutError;
"not a repository" and "no matches" are ordinary results.
"""

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path

import structlog

from .exceptions import GitTimeoutError, ToolUnavailableError

logger = structlog.get_logger()

DEFAULT_GIT_TIMEOUT = 15.0

# git grep exits 1 when nothing matched
GREP_NO_MATCH = 1


@dataclass
class GitResult:
    """Raw outcome of a git invocation."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass
class GrepMatch:
    """A single ``git grep -n`` hit."""

    path: str
    line: int
    text: str

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"


async def run_git(
    cwd: Path,
    args: list[str],
    timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> GitResult:
    """Run a git command in ``cwd``.

    Args:
        cwd: Working directory
        args: Git command arguments
        timeout: Command timeout in seconds

    Returns:
        GitResult with decoded output

    Raises:
        ToolUnavailableError: If git is not installed
        GitTimeoutError: If the command does not finish in time
    """
    cmd = ["git", *args]

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env={
                **os.environ,
                "GIT_TERMINAL_PROMPT": "0",  # Disable prompts
            },
        )
    except FileNotFoundError as e:
        raise ToolUnavailableError("git") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        logger.warning("Git command timed out", args=args, timeout=timeout)
        raise GitTimeoutError(args[0] if args else "", timeout) from None

    return GitResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def is_git_repo(cwd: Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> bool:  # noqa: ASYNC109
    """Check whether ``cwd`` is inside a git work tree."""
    if not cwd.is_dir():
        return False
    result = await run_git(cwd, ["rev-parse", "--is-inside-work-tree"], timeout)
    return result.success and result.stdout.strip() == "true"


async def git_status(cwd: Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> list[str]:  # noqa: ASYNC109
    """Return ``git status --porcelain`` lines, one per changed path."""
    result = await run_git(cwd, ["status", "--porcelain"], timeout)
    if not result.success:
        logger.debug("Git status failed", cwd=str(cwd), stderr=result.stderr.strip())
        return []
    return [line for line in result.stdout.splitlines() if line.strip()]


def parse_grep_output(output: str) -> list[GrepMatch]:
    """Parse ``path:line:text`` records produced by ``git grep -n``."""
    matches = []
    for record in output.splitlines():
        parts = record.split(":", 2)
        if len(parts) < 3 or not parts[1].isdigit():
            continue
        path, line, text = parts
        matches.append(GrepMatch(path=path, line=int(line), text=text.strip()))
    return matches


async def git_grep(
    cwd: Path,
    pattern: str,
    pathspecs: list[str],
    timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> list[GrepMatch]:
    """Search tracked files for an extended regex."""
    result = await run_git(
        cwd,
        ["grep", "-n", "-I", "-E", "-e", pattern, "--", *pathspecs],
        timeout,
    )
    if result.returncode == GREP_NO_MATCH:
        return []
    if not result.success:
        logger.debug("Git grep failed", pattern=pattern, stderr=result.stderr.strip())
        return []
    return parse_grep_output(result.stdout)


async def git_ls_files(
    cwd: Path,
    pathspecs: list[str],
    untracked: bool = False,
    timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> list[str]:
    """List tracked files (or untracked, non-ignored files) matching pathspecs."""
    args = ["ls-files"]
    if untracked:
        args += ["--others", "--exclude-standard"]
    result = await run_git(cwd, [*args, "--", *pathspecs], timeout)
    if not result.success:
        logger.debug("Git ls-files failed", untracked=untracked, stderr=result.stderr.strip())
        return []
    return [line for line in result.stdout.splitlines() if line]
