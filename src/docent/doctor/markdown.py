"""Markdown scanning for hyperlinks and documented paths.

Two independent extractions run over each markdown file:

- Hyperlinks ``[text](target)`` for broken-link detection. Lines inside
  fenced code blocks are skipped.
- Inline code spans that look like file paths, for structure reconciliation.
  These are collected regardless of fences: a path shown in a code block
  still documents that the file exists.
"""

import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

import structlog

logger = structlog.get_logger()

FENCE_MARKERS = ("```", "~~~")

LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
CODE_SPAN_PATTERN = re.compile(r"`([^`\n]+)`")
URI_SCHEME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

SOURCE_EXTENSIONS = (
    "py", "js", "mjs", "cjs", "jsx", "ts", "tsx", "go", "rs", "rb",
    "java", "kt", "swift", "c", "h", "cpp", "cs", "php",
)
MARKUP_EXTENSIONS = ("md", "mdx", "html", "css", "scss", "json", "yaml", "yml", "toml", "xml")
LOCK_EXTENSIONS = ("lock",)
SHELL_EXTENSIONS = ("sh", "bash", "zsh", "fish", "ps1")

DOCUMENTED_EXTENSIONS = SOURCE_EXTENSIONS + MARKUP_EXTENSIONS + LOCK_EXTENSIONS + SHELL_EXTENSIONS

PATH_PATTERN = re.compile(
    r"^(?:\.{0,2}/)?[\w@~.+-]+(?:/[\w@~.+-]+)*\.(?:"
    + "|".join(DOCUMENTED_EXTENSIONS)
    + r")$",
    re.IGNORECASE,
)

PLACEHOLDER_MARKERS = ("example", "placeholder", "path/to/")
# Only recognized at the start of a path segment: `my-app/` but not `dummy-data.py`
PLACEHOLDER_SEGMENT_PATTERN = re.compile(r"(?:^|/)(?:(?:my|your)[-_]|(?:foo|xxx)\b)")
OWNER_PLACEHOLDER_PREFIXES = ("user/", "username/", "owner/", "org/", "@org/", "@scope/", "@your")


@dataclass(frozen=True)
class MarkdownLink:
    """A relative hyperlink found in a markdown file."""

    source: str
    line: int
    target: str
    resolved: Path

    @property
    def location(self) -> str:
        return f"{self.source}:{self.line}"


@dataclass(frozen=True)
class DocumentedPath:
    """A file path mentioned in an inline code span."""

    path: str
    """Normalized path; root-relative unless it climbs with ``../``."""
    source: str
    line: int

    @property
    def location(self) -> str:
        return f"{self.source}:{self.line}"

    @property
    def is_bare(self) -> bool:
        """A bare file name such as ``deploy.sh``."""
        return "/" not in self.path


def read_markdown(path: Path) -> str | None:
    """Read a markdown file, or None if it cannot be read."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.debug("Skipping unreadable markdown file", path=str(path))
        return None


def fenced_lines(lines: list[str]) -> set[int]:
    """Return 1-based numbers of lines inside fenced code blocks.

    Fence lines themselves count as inside.
    """
    inside: set[int] = set()
    in_fence = False
    for number, line in enumerate(lines, 1):
        if line.strip().startswith(FENCE_MARKERS):
            inside.add(number)
            in_fence = not in_fence
        elif in_fence:
            inside.add(number)
    return inside


def is_absolute_url(target: str) -> bool:
    return bool(URI_SCHEME_PATTERN.match(target)) or target.startswith("//")


def _clean_link_target(target: str) -> str:
    target = target.strip()
    if target.startswith("<") and ">" in target:
        return target[1 : target.index(">")]
    # Drop an optional title: [text](path "title")
    return target.split()[0] if target else target


def extract_links(content: str, source: str, root: Path) -> list[MarkdownLink]:
    """Extract relative hyperlinks outside fenced code blocks.

    Args:
        content: Markdown text
        source: Root-relative path of the markdown file
        root: Project root

    Returns:
        Links with targets resolved against the markdown file's directory.
        A leading ``/`` resolves against the project root.
    """
    lines = content.splitlines()
    in_code = fenced_lines(lines)
    source_dir = (root / source).parent
    links = []

    for number, line in enumerate(lines, 1):
        if number in in_code:
            continue
        for match in LINK_PATTERN.finditer(line):
            target = _clean_link_target(match.group(2))
            if not target or target.startswith("#") or is_absolute_url(target):
                continue

            path_only = unquote(target.split("#", 1)[0].split("?", 1)[0])
            if not path_only:
                continue

            if path_only.startswith("/"):
                resolved = root / path_only.lstrip("/")
            else:
                resolved = source_dir / path_only
            links.append(MarkdownLink(source=source, line=number, target=target, resolved=resolved))

    return links


def normalize_documented_path(raw: str) -> str | None:
    """Normalize a code-span path, or None if it is not a path reference."""
    candidate = raw.strip()
    if not PATH_PATTERN.match(candidate):
        return None

    # A leading separator means the project root, never the filesystem root
    if candidate.startswith("/"):
        candidate = candidate.lstrip("/")
    normalized = posixpath.normpath(candidate)
    return None if normalized in (".", "") else normalized


def is_placeholder(path: str) -> bool:
    """Recognize illustrative paths that are not expected to exist."""
    lowered = path.lower()
    if any(marker in lowered for marker in PLACEHOLDER_MARKERS):
        return True
    if PLACEHOLDER_SEGMENT_PATTERN.search(lowered):
        return True
    return lowered.startswith(OWNER_PLACEHOLDER_PREFIXES)


def extract_documented_paths(content: str, source: str) -> list[DocumentedPath]:
    """Extract path references from inline code spans, fences included."""
    paths = []
    for number, line in enumerate(content.splitlines(), 1):
        for match in CODE_SPAN_PATTERN.finditer(line):
            normalized = normalize_documented_path(match.group(1))
            if normalized:
                paths.append(DocumentedPath(path=normalized, source=source, line=number))
    return paths
