"""Doctor checks.

Each check is an async function of ``(root, docs_dir, git_timeout)`` returning
a list of issues. A check returns no issues when its input (docs directory,
git repository) is absent; docs-quality is the exception and reports a
missing docs directory as an error. Tool failures propagate to the runner.
"""

import asyncio
import posixpath
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog

from ..detector import analyze_project
from ..git import DEFAULT_GIT_TIMEOUT, git_grep, git_ls_files, git_status, is_git_repo
from .files import enumerate_files, find_markdown_files, path_exists, run_in_executor
from .markdown import extract_links, read_markdown
from .models import Category, CheckName, Issue, Severity
from .rules import (
    DEBUG_PATTERNS,
    DEBUG_SCAN_EXCLUSIONS,
    DEBUG_SOURCE_PATHSPECS,
    TEMP_FILE_PATTERNS,
    TEST_MARKER_PATHSPECS,
    TEST_MARKER_PATTERNS,
    first_exclusion,
)
from .structure import check_structure

logger = structlog.get_logger()

CheckFunc = Callable[[Path, str, float], Awaitable[list[Issue]]]

MAX_SNIPPET_LENGTH = 80

ROOT_DOC_NAMES = ("readme.md", "index.md")


def _snippet(text: str) -> str:
    if len(text) > MAX_SNIPPET_LENGTH:
        return f"{text[:MAX_SNIPPET_LENGTH]}..."
    return text


# =============================================================================
# BROKEN LINKS
# =============================================================================


def _scan_broken_links(root: Path, docs_dir: str) -> list[Issue]:
    issues = []
    for source in find_markdown_files(root, subdir=docs_dir):
        content = read_markdown(root / source)
        if content is None:
            continue

        for link in extract_links(content, source, root):
            if path_exists(link.resolved):
                continue
            issues.append(
                Issue(
                    severity=Severity.ERROR,
                    category=Category.BROKEN_LINK,
                    message=f"Link to non-existent file '{link.target}'",
                    location=link.location,
                    fix="Create the file or update the link",
                )
            )
    return issues


async def check_broken_links(
    root: Path,
    docs_dir: str,
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ARG001, ASYNC109
) -> list[Issue]:
    """Report relative markdown links whose target does not exist."""
    if not (root / docs_dir).is_dir():
        return []
    return await run_in_executor(_scan_broken_links, root, docs_dir)


# =============================================================================
# DEBUG CODE AND TEST MARKERS
# =============================================================================


async def check_debug_code(
    root: Path,
    docs_dir: str,  # noqa: ARG001
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> list[Issue]:
    """Report debug statements left in tracked source files."""
    if not await is_git_repo(root, git_timeout):
        return []

    results = await asyncio.gather(
        *(
            git_grep(root, pattern.regex, DEBUG_SOURCE_PATHSPECS, git_timeout)
            for pattern in DEBUG_PATTERNS
        )
    )

    issues = []
    for pattern, matches in zip(DEBUG_PATTERNS, results, strict=True):
        for match in matches:
            excluded = first_exclusion(match.path, DEBUG_SCAN_EXCLUSIONS)
            if excluded:
                logger.debug("Skipping excluded match", path=match.path, exclusion=excluded)
                continue
            issues.append(
                Issue(
                    severity=pattern.severity,
                    category=Category.DEBUG_CODE,
                    message=f"Found debug code: {_snippet(match.text)}",
                    location=match.location,
                    fix=pattern.fix,
                )
            )
    return issues


async def check_test_markers(
    root: Path,
    docs_dir: str,  # noqa: ARG001
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> list[Issue]:
    """Report exclusive and skip markers committed in test files."""
    if not await is_git_repo(root, git_timeout):
        return []

    results = await asyncio.gather(
        *(
            git_grep(root, pattern.regex, TEST_MARKER_PATHSPECS, git_timeout)
            for pattern in TEST_MARKER_PATTERNS
        )
    )

    return [
        Issue(
            severity=pattern.severity,
            category=Category.TEST_MARKER,
            message=f"Found {pattern.name} in test file",
            location=match.location,
            fix=pattern.fix,
        )
        for pattern, matches in zip(TEST_MARKER_PATTERNS, results, strict=True)
        for match in matches
    ]


# =============================================================================
# DOCUMENTATION QUALITY
# =============================================================================


def _assess_docs(root: Path, docs_dir: str) -> list[Issue]:
    analysis = analyze_project(root)
    doc_files = [f for f in enumerate_files(root / docs_dir) if f.lower().endswith(".md")]
    basenames = [posixpath.basename(f).lower() for f in doc_files]
    issues = []

    has_root_doc = any("/" not in f and f.lower() in ROOT_DOC_NAMES for f in doc_files)
    if not has_root_doc:
        issues.append(
            Issue(
                severity=Severity.WARNING,
                category=Category.DOCUMENTATION,
                message=f"No README.md in {docs_dir} directory",
                location=docs_dir,
                fix=f"Create {docs_dir}/README.md to provide documentation overview",
            )
        )

    if analysis.structure.has_tests and not any(name.startswith("test") for name in basenames):
        issues.append(
            Issue(
                severity=Severity.INFO,
                category=Category.DOCUMENTATION,
                message="Project has tests but no testing documentation",
                location=docs_dir,
                fix="Consider adding testing guide or documentation",
            )
        )

    if analysis.is_complex and not any(name.startswith("architect") for name in basenames):
        issues.append(
            Issue(
                severity=Severity.INFO,
                category=Category.DOCUMENTATION,
                message="Complex project without architecture documentation",
                location=docs_dir,
                fix="Consider documenting system architecture",
            )
        )

    return issues


async def check_docs_quality(
    root: Path,
    docs_dir: str,
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ARG001, ASYNC109
) -> list[Issue]:
    """Check that the documentation covers what the project needs."""
    if not (root / docs_dir).is_dir():
        return [
            Issue(
                severity=Severity.ERROR,
                category=Category.DOCUMENTATION,
                message=f"Documentation directory '{docs_dir}' does not exist",
                location=str(root),
                fix=f"Create the '{docs_dir}' directory with a README.md overview",
            )
        ]
    return await run_in_executor(_assess_docs, root, docs_dir)


# =============================================================================
# GIT WORKING TREE
# =============================================================================


async def check_uncommitted_changes(
    root: Path,
    docs_dir: str,  # noqa: ARG001
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> list[Issue]:
    """Summarize a dirty working tree as a single warning."""
    if not await is_git_repo(root, git_timeout):
        return []

    changes = await git_status(root, git_timeout)
    if not changes:
        return []

    return [
        Issue(
            severity=Severity.WARNING,
            category=Category.GIT_STATUS,
            message=f"{len(changes)} uncommitted change(s)",
            location=str(root),
            fix="Commit or stash changes before release",
        )
    ]


async def check_temp_files(
    root: Path,
    docs_dir: str,  # noqa: ARG001
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ASYNC109
) -> list[Issue]:
    """Report ephemeral artifacts, tracked or not yet ignored."""
    if not await is_git_repo(root, git_timeout):
        return []

    tracked, untracked = await asyncio.gather(
        git_ls_files(root, TEMP_FILE_PATTERNS, untracked=False, timeout=git_timeout),
        git_ls_files(root, TEMP_FILE_PATTERNS, untracked=True, timeout=git_timeout),
    )
    tracked_files = set(tracked)

    issues = []
    for file in dict.fromkeys([*tracked, *untracked]):
        is_tracked = file in tracked_files
        issues.append(
            Issue(
                severity=Severity.ERROR if is_tracked else Severity.WARNING,
                category=Category.TEMP_FILES,
                message=f"Temporary file found: {file}",
                location=file,
                fix=f"Remove from git: git rm --cached {file}" if is_tracked else f"Delete file: rm {file}",
            )
        )
    return issues


# Registry of built-in checks, in report order
CHECKS: dict[CheckName, CheckFunc] = {
    CheckName.LINKS: check_broken_links,
    CheckName.DEBUG_CODE: check_debug_code,
    CheckName.TEST_MARKERS: check_test_markers,
    CheckName.DOCS_QUALITY: check_docs_quality,
    CheckName.UNCOMMITTED: check_uncommitted_changes,
    CheckName.TEMP_FILES: check_temp_files,
    CheckName.STRUCTURE: check_structure,
}
