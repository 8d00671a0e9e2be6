"""Data contracts for the doctor engine."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, computed_field

from .scoring import score_band, score_issues


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class CheckName(str, Enum):
    """Identifiers accepted in ``enabled_checks``."""

    LINKS = "links"
    DEBUG_CODE = "debug-code"
    TEST_MARKERS = "test-markers"
    DOCS_QUALITY = "docs-quality"
    UNCOMMITTED = "uncommitted"
    TEMP_FILES = "temp-files"
    STRUCTURE = "structure"


class Category(str, Enum):
    """Issue category; each check emits exactly one."""

    BROKEN_LINK = "Broken Link"
    DEBUG_CODE = "Debug Code"
    TEST_MARKER = "Test Marker"
    DOCUMENTATION = "Documentation"
    GIT_STATUS = "Git Status"
    TEMP_FILES = "Temporary Files"
    STRUCTURE = "Structure Mismatch"


CHECK_CATEGORIES: dict[CheckName, Category] = {
    CheckName.LINKS: Category.BROKEN_LINK,
    CheckName.DEBUG_CODE: Category.DEBUG_CODE,
    CheckName.TEST_MARKERS: Category.TEST_MARKER,
    CheckName.DOCS_QUALITY: Category.DOCUMENTATION,
    CheckName.UNCOMMITTED: Category.GIT_STATUS,
    CheckName.TEMP_FILES: Category.TEMP_FILES,
    CheckName.STRUCTURE: Category.STRUCTURE,
}


class Issue(BaseModel):
    """A single finding produced by a check."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    severity: Severity
    category: Category
    message: str
    location: str | None = None
    fix: str | None = None


class ToolFailure(BaseModel):
    """A check that could not run to completion.

    Kept apart from issues so tool problems never read as content findings.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    check: CheckName
    tool: str
    reason: str


class DoctorRequest(BaseModel):
    """Input contract for a doctor run."""

    project_path: Path = Field(default_factory=Path.cwd)
    docs_dir: str = "docs"
    enabled_checks: list[str] | None = None
    """Check names to run; None runs every check."""


class DoctorResult(BaseModel):
    """Aggregate result of a doctor run.

    ``score``, ``healthy`` and ``band`` are derived from ``issues`` and cannot
    be set directly.
    """

    issues: list[Issue] = Field(default_factory=list)
    tool_failures: list[ToolFailure] = Field(default_factory=list)

    def count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity.value)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int:
        return score_issues(self.issues)[0]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def healthy(self) -> bool:
        return score_issues(self.issues)[1]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def band(self) -> str:
        return score_band(self.score)
