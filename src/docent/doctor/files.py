"""Project file enumeration and glob matching."""

import asyncio
import fnmatch
import os
import re
from collections.abc import Callable, Iterable
from concurrent.futures import Executor
from contextvars import ContextVar
from functools import lru_cache, partial
from pathlib import Path
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

# Pool for blocking scans, owned by the running CheckRunner
scan_executor: ContextVar[Executor | None] = ContextVar("scan_executor", default=None)

# Matched against every path segment
DEFAULT_IGNORE_PATTERNS = (
    # Version control
    ".git",
    ".hg",
    ".svn",
    # Build and dist output
    "dist",
    "build",
    # Dependency caches
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "vendor",
    # Lockfiles
    "*.lock",
    "package-lock.json",
    "pnpm-lock.yaml",
    "npm-shrinkwrap.json",
    # Logs
    "*.log",
    "logs",
    # OS and editor artifacts
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
    ".idea",
    ".vscode",
)

# Build tooling caches, additionally skipped during structure reconciliation
BUILD_CACHE_PATTERNS = (
    ".cache",
    ".next",
    ".nuxt",
    ".turbo",
    ".parcel-cache",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    ".nyc_output",
    ".eslintcache",
    "coverage",
    "htmlcov",
    "*.egg-info",
    "*.tsbuildinfo",
)

STRUCTURE_IGNORE_PATTERNS = DEFAULT_IGNORE_PATTERNS + BUILD_CACHE_PATTERNS

MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdx")


@lru_cache(maxsize=512)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    """Translate a path glob to a regex.

    ``**/`` matches zero or more directories, ``**`` matches anything,
    ``*`` and ``?`` never cross a ``/``.
    """
    regex = ""
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            regex += "(?:.*/)?"
            i += 3
        elif pattern.startswith("**", i):
            regex += ".*"
            i += 2
        elif pattern[i] == "*":
            regex += "[^/]*"
            i += 1
        elif pattern[i] == "?":
            regex += "[^/]"
            i += 1
        else:
            regex += re.escape(pattern[i])
            i += 1
    return re.compile(f"^{regex}$")


def matches_glob(path: str, pattern: str) -> bool:
    """Test a project-relative POSIX path against a glob."""
    return _glob_regex(pattern).match(path) is not None


def is_ignored_name(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def is_markdown(path: str) -> bool:
    return path.lower().endswith(MARKDOWN_EXTENSIONS)


def enumerate_files(
    root: str | Path,
    ignore: Iterable[str] = DEFAULT_IGNORE_PATTERNS,
    include_hidden: bool = False,
    exclude_dirs: Iterable[str] = (),
) -> list[str]:
    """List project files as sorted, root-relative POSIX paths.

    Args:
        root: Project root
        ignore: Glob patterns matched against each path segment
        include_hidden: Keep entries whose name starts with a dot
        exclude_dirs: Root-relative directories to skip entirely

    Returns:
        Lexicographically ordered file paths; directories are not listed.
        Unreadable directories are skipped.
    """
    root = Path(root)
    ignore = tuple(ignore)
    excluded = {d.strip("/") for d in exclude_dirs if d.strip("/")}
    files: list[str] = []

    # os.walk skips directories it cannot read
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = Path(dirpath).relative_to(root).as_posix()
        prefix = "" if rel_dir == "." else f"{rel_dir}/"

        kept = []
        for name in dirnames:
            if not include_hidden and name.startswith("."):
                continue
            if is_ignored_name(name, ignore) or f"{prefix}{name}" in excluded:
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in filenames:
            if not include_hidden and name.startswith("."):
                continue
            if is_ignored_name(name, ignore):
                continue
            files.append(f"{prefix}{name}")

    files.sort()
    logger.debug("Enumerated project files", root=str(root), count=len(files))
    return files


def find_markdown_files(root: str | Path, subdir: str | None = None) -> list[str]:
    """List root-relative markdown files, optionally only those under ``subdir``."""
    if not subdir:
        return [f for f in enumerate_files(root) if is_markdown(f)]

    prefix = f"{subdir.strip('/')}/"
    files = enumerate_files(Path(root) / subdir)
    return [f"{prefix}{f}" for f in files if is_markdown(f)]


def path_exists(path: Path) -> bool:
    """``Path.exists`` that reads permission and other OS errors as missing."""
    try:
        return path.exists()
    except OSError:
        return False


async def run_in_executor(func: Callable[..., T], *args: Any) -> T:
    """Run blocking filesystem work in the current run's scan pool.

    Falls back to the loop's default pool outside a doctor run.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(scan_executor.get(), partial(func, *args))
