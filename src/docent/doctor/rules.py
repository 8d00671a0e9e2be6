"""Rule tables for the doctor checks.

Everything here is data: search patterns, path exclusions and the prioritized
severity rules used by structure reconciliation. Checks consume these tables
and do not carry their own special cases.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .files import is_markdown, matches_glob
from .models import Severity

# =============================================================================
# PATH PREDICATES
# =============================================================================


@dataclass(frozen=True)
class PathPredicate:
    """A named test on a root-relative POSIX path."""

    name: str
    test: Callable[[str], bool]

    def __call__(self, path: str) -> bool:
        return self.test(path)


def first_exclusion(path: str, table: Iterable[PathPredicate]) -> str | None:
    """Return the name of the first predicate matching ``path``."""
    for predicate in table:
        if predicate(path):
            return predicate.name
    return None


_TEST_FILE_PATTERNS = (
    re.compile(r"(^|/)test[-_][^/]*$"),
    re.compile(r"[-_.]test\.[^/]+$"),
    re.compile(r"\.spec\.[^/]+$"),
    re.compile(r"(^|/)tests?/"),
    re.compile(r"(^|/)__tests__/"),
)

# The engine's own modules spell out the patterns it searches for
ENGINE_SOURCE_SUFFIXES = ("docent/doctor/rules.py", "docent/doctor/checks.py")

ROOT_MANIFESTS = ("pyproject.toml", "Cargo.toml", "Pipfile")

DOCENT_CONFIG_FILES = (".docentrc", ".docentrc.yaml", ".docentrc.yml")


def is_test_file(path: str) -> bool:
    """Match common test-file naming conventions."""
    return any(pattern.search(path) for pattern in _TEST_FILE_PATTERNS)


def is_engine_source(path: str) -> bool:
    return path.endswith(ENGINE_SOURCE_SUFFIXES)


DEBUG_SCAN_EXCLUSIONS = (
    PathPredicate("engine-source", is_engine_source),
    PathPredicate("test-file", is_test_file),
)

RECONCILE_EXCLUSIONS = (
    PathPredicate("markdown", is_markdown),
    PathPredicate("docent-config", lambda path: path in DOCENT_CONFIG_FILES),
    PathPredicate("project-manifest", lambda path: path in ROOT_MANIFESTS),
)

# =============================================================================
# SEARCH PATTERNS
# =============================================================================


@dataclass(frozen=True)
class SearchPattern:
    """A regex searched with ``git grep -E``."""

    name: str
    regex: str
    severity: Severity
    fix: str


DEBUG_SOURCE_PATHSPECS = ["src/", "*.ts", "*.tsx", "*.js", "*.jsx", "*.mjs", "*.cjs", "*.py"]

# Ordered; a line matched by several patterns is reported once per pattern
DEBUG_PATTERNS = (
    SearchPattern("console.log", r"console\.log", Severity.WARNING, "Remove debug logging before release"),
    SearchPattern("console.debug", r"console\.debug", Severity.WARNING, "Remove debug logging before release"),
    SearchPattern("debugger", r"debugger", Severity.ERROR, "Remove debugger statement"),
    SearchPattern("breakpoint", r"breakpoint\(\)", Severity.ERROR, "Remove breakpoint() call"),
    SearchPattern("pdb", r"pdb\.set_trace", Severity.ERROR, "Remove pdb.set_trace() call"),
    SearchPattern("todo-remove", r"TODO.*remove", Severity.ERROR, "Resolve the TODO before release"),
    SearchPattern("fixme-release", r"FIXME.*before.*release", Severity.ERROR, "Resolve the FIXME before release"),
    SearchPattern("xxx", r"XXX", Severity.ERROR, "Remove debug code before release"),
)

TEST_MARKER_PATHSPECS = [
    "test/",
    "tests/",
    "__tests__/",
    "*.test.ts",
    "*.test.tsx",
    "*.test.js",
    "*.spec.ts",
    "*.spec.tsx",
    "*.spec.js",
]

TEST_MARKER_PATTERNS = (
    SearchPattern(".only()", r"\.only\(", Severity.ERROR, "Remove .only() before committing"),
    SearchPattern(".skip()", r"\.skip\(", Severity.ERROR, "Remove .skip() before committing"),
)

# Ephemeral artifacts that agents and release tooling leave behind
TEMP_FILE_PATTERNS = [
    "*.tmp",
    "*.temp",
    "*-temp.*",
    "temp-*",
    "test-output.*",
    "scratch.*",
    "debug-*",
    "output-*",
    "*.log",
    "server-output.*",
    "release-notes.md",
    "lint-errors.txt",
    "continuation-prompt.txt",
    "*.tgz",
]

# =============================================================================
# SEVERITY RULES
# =============================================================================


@dataclass(frozen=True)
class SeverityRule:
    """Maps path globs to a severity.

    Rules are evaluated by ascending ``priority``; the first match wins.
    ``max_reports`` caps individual findings for the rule, the remainder is
    summarized in a single rollup.
    """

    name: str
    patterns: tuple[str, ...]
    severity: Severity
    reason: str
    priority: int
    max_reports: int | None = None

    def matches(self, path: str) -> bool:
        return any(matches_glob(path, pattern) for pattern in self.patterns)


_SCRIPT_EXTENSIONS = ("sh", "bash", "zsh", "fish", "ps1", "py", "js", "mjs", "ts", "rb", "pl")

SEVERITY_RULES = (
    SeverityRule(
        name="example-code",
        patterns=tuple(
            f"{d}/**" for d in ("examples", "example", "demo", "demos", "samples", "sample")
        ),
        severity=Severity.INFO,
        reason="Undocumented example",
        priority=10,
        max_reports=5,
    ),
    SeverityRule(
        name="script",
        patterns=tuple(
            f"{d}/**/*.{ext}" for d in ("scripts", "bin") for ext in _SCRIPT_EXTENSIONS
        ),
        severity=Severity.ERROR,
        reason="Undocumented executable script",
        priority=20,
    ),
    SeverityRule(
        name="ci-workflow",
        patterns=(
            ".github/workflows/*.yml",
            ".github/workflows/*.yaml",
            ".gitlab-ci.yml",
            ".circleci/config.yml",
            "azure-pipelines.yml",
            "Jenkinsfile",
        ),
        severity=Severity.ERROR,
        reason="Undocumented CI workflow",
        priority=30,
    ),
    SeverityRule(
        name="container-build",
        patterns=(
            "**/Dockerfile",
            "**/Dockerfile.*",
            "**/*.dockerfile",
            "**/Containerfile",
        ),
        severity=Severity.ERROR,
        reason="Undocumented container build file",
        priority=40,
    ),
    SeverityRule(
        name="compose",
        patterns=(
            "**/docker-compose*.yml",
            "**/docker-compose*.yaml",
            "**/compose.yml",
            "**/compose.yaml",
        ),
        severity=Severity.WARNING,
        reason="Undocumented container compose file",
        priority=50,
    ),
    SeverityRule(
        name="underscore-directory",
        patterns=("_*/**",),
        severity=Severity.WARNING,
        reason="Undocumented underscore-prefixed directory",
        priority=60,
    ),
    SeverityRule(
        name="root-test-file",
        patterns=("test-*", "test_*", "*.test.*", "*_test.*", "*-test.*", "*.spec.*"),
        severity=Severity.WARNING,
        reason="Undocumented test file at project root",
        priority=70,
    ),
    SeverityRule(
        name="config-file",
        patterns=("**/*.yml", "**/*.yaml", "**/*.toml"),
        severity=Severity.WARNING,
        reason="Undocumented configuration file",
        priority=80,
    ),
)


class SeverityClassifier:
    """Classifies undocumented files through a prioritized rule table."""

    def __init__(self, rules: Iterable[SeverityRule] = SEVERITY_RULES) -> None:
        self.rules = sorted(rules, key=lambda rule: rule.priority)

    def classify(self, path: str) -> SeverityRule | None:
        """Return the highest-priority rule matching ``path``."""
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None
