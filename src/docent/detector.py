"""Project profiler.

Detects languages, frameworks, build tools and basic layout from the files at
the project root. Only the root directory is inspected.
"""

import json
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger()

# package.json dependency -> framework
NPM_FRAMEWORKS = {
    "express": "Express",
    "fastify": "Fastify",
    "react": "React",
    "vue": "Vue",
    "next": "Next.js",
    "@modelcontextprotocol/sdk": "MCP",
}

# Python distribution name -> framework
PYTHON_FRAMEWORKS = {
    "fastapi": "FastAPI",
    "django": "Django",
    "flask": "Flask",
    "click": "click",
}

TEST_DIRS = ("test", "tests", "__tests__")
DOCS_DIRS = ("docs", "documentation")
SOURCE_DIRS = ("src", "lib")

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass
class ProjectStructure:
    has_tests: bool = False
    has_docs: bool = False
    source_dir: str | None = None


@dataclass
class AnalysisResult:
    """Profile of a project."""

    languages: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    build_tools: list[str] = field(default_factory=list)
    structure: ProjectStructure = field(default_factory=ProjectStructure)

    @property
    def is_complex(self) -> bool:
        """More than one language or any framework."""
        return len(self.languages) > 1 or len(self.frameworks) > 0


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _requirement_names(lines: list[str]) -> set[str]:
    names = set()
    for line in lines:
        match = _REQUIREMENT_NAME.match(line)
        if match:
            names.add(match.group(1).lower().replace("_", "-"))
    return names


def _npm_frameworks(package_json: Path) -> list[str]:
    try:
        data: dict[str, Any] = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return []
    if not isinstance(data, dict):
        return []
    deps = {**(data.get("dependencies") or {}), **(data.get("devDependencies") or {})}
    return [name for dep, name in NPM_FRAMEWORKS.items() if dep in deps]


def _python_frameworks(root: Path, files: set[str]) -> list[str]:
    names: set[str] = set()

    if "pyproject.toml" in files:
        try:
            with open(root / "pyproject.toml", "rb") as f:
                data = tomllib.load(f)
            names |= _requirement_names(data.get("project", {}).get("dependencies", []))
        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError):
            logger.debug("Could not read pyproject.toml", root=str(root))

    if "requirements.txt" in files:
        try:
            lines = (root / "requirements.txt").read_text(encoding="utf-8").splitlines()
            names |= _requirement_names([line for line in lines if not line.startswith("-")])
        except (OSError, ValueError):
            logger.debug("Could not read requirements.txt", root=str(root))

    return [framework for dist, framework in PYTHON_FRAMEWORKS.items() if dist in names]


def analyze_project(root: str | Path) -> AnalysisResult:
    """Analyze project structure, languages, frameworks and build tools.

    Args:
        root: Project root directory

    Returns:
        AnalysisResult; empty if the directory cannot be read
    """
    root = Path(root)
    result = AnalysisResult()

    try:
        files = {entry.name for entry in root.iterdir()}
    except OSError:
        logger.debug("Could not read project root", root=str(root))
        return result

    if "package.json" in files:
        result.build_tools.append("npm")
        result.languages += ["TypeScript", "JavaScript"]
        result.frameworks += _npm_frameworks(root / "package.json")

    if "Cargo.toml" in files:
        result.build_tools.append("cargo")
        result.languages.append("Rust")

    if "go.mod" in files:
        result.build_tools.append("go")
        result.languages.append("Go")

    if "pyproject.toml" in files or "requirements.txt" in files:
        result.build_tools.append("pip")
        result.languages.append("Python")
        result.frameworks += _python_frameworks(root, files)

    result.structure = ProjectStructure(
        has_tests=any(name in files for name in TEST_DIRS),
        has_docs=any(name in files for name in DOCS_DIRS),
        source_dir=next((name for name in SOURCE_DIRS if name in files), None),
    )
    result.languages = _dedupe(result.languages)
    result.frameworks = _dedupe(result.frameworks)
    result.build_tools = _dedupe(result.build_tools)

    logger.debug(
        "Analyzed project",
        languages=result.languages,
        frameworks=result.frameworks,
        has_tests=result.structure.has_tests,
    )
    return result
