"""Configuration for docent.

Settings come from (highest priority first):
1. Command line arguments
2. Project config file (.docentrc.yaml, .docentrc.yml or .docentrc)
3. Environment variables (DOCENT_*)
4. Default values
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

logger = structlog.get_logger()

# Checked in order, first existing file wins
CONFIG_FILES = (".docentrc.yaml", ".docentrc.yml", ".docentrc")


class DocentSettings(BaseSettings):
    """Runtime settings for the doctor engine."""

    model_config = SettingsConfigDict(
        env_prefix="DOCENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    docs_dir: str = Field(
        default="docs",
        description="Documentation directory, relative to the project root",
    )
    check_timeout: float = Field(
        default=30.0,
        ge=1,
        le=600,
        description="Per-check execution timeout in seconds",
    )
    git_timeout: float = Field(
        default=15.0,
        ge=1,
        le=300,
        description="Timeout for a single git invocation in seconds",
    )
    log_level: str = Field(
        default="WARNING",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )


@dataclass
class DocentConfig:
    """Project configuration."""

    # Docs directory relative to the project root (e.g. "docs", "documentation")
    root: str


def _read_config_file(config_path: Path) -> dict[str, Any]:
    content = config_path.read_text(encoding="utf-8")
    if config_path.suffix in (".yaml", ".yml"):
        parsed = yaml.safe_load(content)
    else:
        parsed = json.loads(content)

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigurationError(config_path.name, "expected a mapping at the top level")
    return parsed


def load_config(project_path: str | Path, settings: DocentSettings | None = None) -> DocentConfig:
    """Load docent configuration for a project.

    Args:
        project_path: Root directory of the project
        settings: Settings supplying the default docs directory

    Returns:
        DocentConfig naming the docs directory

    Raises:
        ConfigurationError: If a config file exists but cannot be parsed
    """
    project_path = Path(project_path)
    settings = settings or DocentSettings()
    root = settings.docs_dir

    for name in CONFIG_FILES:
        config_path = project_path / name
        if not config_path.is_file():
            continue

        try:
            data = _read_config_file(config_path)
        except ConfigurationError:
            raise
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(name, str(e)) from e

        configured_root = data.get("root")
        if configured_root:
            root = str(configured_root)
        logger.debug("Loaded project config", path=str(config_path), root=root)
        break

    return DocentConfig(root=root)
