"""Docent - CLI entry point."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
import structlog

from . import __version__
from .config import DocentSettings, load_config
from .doctor import CheckName, DoctorRequest, format_report, run_doctor
from .exceptions import ConfigurationError

EXIT_UNHEALTHY = 1
EXIT_CONFIG_ERROR = 2

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def configure_logging(level: str) -> None:
    """Configure structlog; logs go to stderr so stdout carries only the report."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            LOG_LEVELS.get(level.upper(), logging.WARNING)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


@click.group()
@click.version_option(version=__version__, prog_name="docent")
def cli() -> None:
    """Docent - documentation-aware project health checks."""
    pass


@cli.command()
@click.option(
    "--path",
    "project_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root directory",
)
@click.option(
    "--docs-dir",
    default=None,
    help="Documentation directory (overrides .docentrc and DOCENT_DOCS_DIR)",
)
@click.option(
    "--check",
    "checks",
    multiple=True,
    type=click.Choice([c.value for c in CheckName]),
    help="Check to run; repeat for several. Runs all checks if omitted.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["markdown", "json"]),
    default="markdown",
    show_default=True,
    help="Report format",
)
@click.option(
    "--timeout",
    type=click.FloatRange(1, 600),
    default=None,
    help="Per-check timeout in seconds",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def doctor(
    project_path: Path,
    docs_dir: str | None,
    checks: tuple[str, ...],
    output_format: str,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Run project health checks.

    Checks broken links, debug code, test markers, documentation quality,
    uncommitted changes, temporary files and documentation/structure drift.
    Exits with status 1 when any error-level issue is found.
    """
    settings = DocentSettings()
    if timeout is not None:
        settings = settings.model_copy(update={"check_timeout": timeout})
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        config = load_config(project_path, settings)
    except ConfigurationError as e:
        click.echo(click.style("Error: ", fg="red", bold=True) + str(e), err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    request = DoctorRequest(
        project_path=project_path,
        docs_dir=docs_dir or config.root,
        enabled_checks=list(checks) or None,
    )
    result = asyncio.run(run_doctor(request, settings))

    if output_format == "json":
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2, ensure_ascii=False))
    else:
        click.echo(format_report(result), nl=False)

    if not result.healthy:
        sys.exit(EXIT_UNHEALTHY)


@cli.command()
def version() -> None:
    """Show version information."""
    click.echo(f"docent v{__version__}")


if __name__ == "__main__":
    cli()
