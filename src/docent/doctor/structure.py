"""Structure reconciliation between documentation and the file tree.

Forward pass: every path documented in an inline code span must exist.
Inverse pass: every real file should be documented; undocumented files are
classified by the prioritized severity rules, and files no rule matches are
grouped per top-level directory so large trees do not flood the report.
"""

import os
import posixpath
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from ..git import DEFAULT_GIT_TIMEOUT
from .files import (
    STRUCTURE_IGNORE_PATTERNS,
    enumerate_files,
    find_markdown_files,
    path_exists,
    run_in_executor,
)
from .markdown import DocumentedPath, extract_documented_paths, is_placeholder, read_markdown
from .models import Category, Issue, Severity
from .rules import RECONCILE_EXCLUSIONS, SeverityClassifier, SeverityRule, first_exclusion

logger = structlog.get_logger()

# Unmatched files in one top-level directory are reported once this many pile up
GROUP_THRESHOLD = 3


@dataclass
class DocumentedPathSet:
    """Root-relative paths and bare file names asserted by documentation."""

    paths: set[str] = field(default_factory=set)
    basenames: set[str] = field(default_factory=set)

    def add(self, path: str) -> None:
        self.paths.add(path)
        if "/" not in path:
            self.basenames.add(path)

    def __contains__(self, file: str) -> bool:
        return file in self.paths or posixpath.basename(file) in self.basenames


def collect_documented_paths(root: Path) -> list[DocumentedPath]:
    """Scan every markdown file in the project for documented paths."""
    refs = []
    for source in find_markdown_files(root):
        content = read_markdown(root / source)
        if content is not None:
            refs.extend(extract_documented_paths(content, source))
    return refs


def _relative_to_root(candidate: Path, root: Path) -> str:
    return Path(os.path.relpath(os.path.normpath(candidate), root)).as_posix()


def resolve_documented_path(ref: DocumentedPath, root: Path, basenames: set[str]) -> str | None:
    """Find the real file a documented path refers to.

    Tries the project root, then the directory of the mentioning markdown
    file, then (bare names only) any project file with that name.

    Returns:
        Root-relative path of the file, or None if nothing matches
    """
    candidates = []
    if not ref.path.startswith("../"):
        candidates.append(root / ref.path)
    candidates.append((root / ref.source).parent / ref.path)

    for candidate in candidates:
        if path_exists(candidate):
            return _relative_to_root(candidate, root)

    if ref.is_bare and ref.path in basenames:
        return ref.path
    return None


def _forward_pass(
    refs: list[DocumentedPath],
    root: Path,
    files: list[str],
    documented: DocumentedPathSet,
) -> list[Issue]:
    basenames = {posixpath.basename(f) for f in files}
    issues = []
    reported: set[tuple[str, str]] = set()

    for ref in refs:
        documented.add(ref.path)
        if is_placeholder(ref.path):
            continue

        resolved = resolve_documented_path(ref, root, basenames)
        if resolved is not None:
            documented.add(resolved)
            continue

        if (ref.path, ref.location) in reported:
            continue
        reported.add((ref.path, ref.location))
        issues.append(
            Issue(
                severity=Severity.WARNING,
                category=Category.STRUCTURE,
                message=f"Documented path '{ref.path}' does not exist",
                location=ref.location,
                fix="Update the documentation or restore the file",
            )
        )

    return issues


def _rule_issues(rule: SeverityRule, files: list[str], docs_dir: str) -> list[Issue]:
    shown = files if rule.max_reports is None else files[: rule.max_reports]
    issues = [
        Issue(
            severity=rule.severity,
            category=Category.STRUCTURE,
            message=f"{rule.reason}: {file}",
            location=file,
            fix=f"Document {file} in {docs_dir}/ or remove it",
        )
        for file in shown
    ]

    remainder = files[len(shown) :]
    if remainder:
        issues.append(
            Issue(
                severity=Severity.INFO,
                category=Category.STRUCTURE,
                message=f"{len(remainder)} more undocumented file(s) matching '{rule.name}'",
                location=f"{remainder[0].split('/', 1)[0]}/",
                fix=f"Document these files in {docs_dir}/",
            )
        )
    return issues


def _inverse_pass(
    files: list[str],
    documented: DocumentedPathSet,
    docs_dir: str,
    classifier: SeverityClassifier,
) -> list[Issue]:
    by_rule: dict[str, list[str]] = defaultdict(list)
    unmatched: dict[str, list[str]] = defaultdict(list)

    for file in files:
        if file in documented or first_exclusion(file, RECONCILE_EXCLUSIONS):
            continue

        rule = classifier.classify(file)
        if rule is not None:
            by_rule[rule.name].append(file)
        elif "/" in file:
            unmatched[file.split("/", 1)[0]].append(file)
        # Unmatched files at the project root are not reported

    issues = []
    for rule in classifier.rules:
        if by_rule.get(rule.name):
            issues.extend(_rule_issues(rule, by_rule[rule.name], docs_dir))

    for directory, group in sorted(unmatched.items()):
        if len(group) < GROUP_THRESHOLD:
            continue
        issues.append(
            Issue(
                severity=Severity.INFO,
                category=Category.STRUCTURE,
                message=f"{len(group)} undocumented files in '{directory}/'",
                location=f"{directory}/",
                fix=f"Describe the purpose of {directory}/ in {docs_dir}/",
            )
        )

    return issues


def reconcile_structure(
    root: Path,
    docs_dir: str,
    classifier: SeverityClassifier | None = None,
) -> list[Issue]:
    """Run both reconciliation passes and return their issues."""
    classifier = classifier or SeverityClassifier()
    refs = collect_documented_paths(root)
    files = enumerate_files(
        root,
        ignore=STRUCTURE_IGNORE_PATTERNS,
        include_hidden=True,
        exclude_dirs=[docs_dir],
    )

    documented = DocumentedPathSet()
    issues = _forward_pass(refs, root, files, documented)
    issues += _inverse_pass(files, documented, docs_dir, classifier)

    checked = len({ref.path for ref in refs})
    logger.debug(
        "Structure reconciled",
        documented_paths=checked,
        files=len(files),
        issues=len(issues),
    )

    if checked and not issues:
        return [
            Issue(
                severity=Severity.INFO,
                category=Category.STRUCTURE,
                message=f"Documentation matches project structure ({checked} documented path(s) checked)",
            )
        ]
    return issues


async def check_structure(
    root: Path,
    docs_dir: str,
    git_timeout: float = DEFAULT_GIT_TIMEOUT,  # noqa: ARG001, ASYNC109
) -> list[Issue]:
    """Reconcile documented paths with the real file tree."""
    if not (root / docs_dir).is_dir():
        return []
    return await run_in_executor(reconcile_structure, root, docs_dir)
