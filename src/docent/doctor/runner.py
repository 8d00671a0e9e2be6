"""Check runner that executes the selected doctor checks concurrently.

A check that times out, needs a missing tool or raises contributes no issues;
the failure is recorded on the result's separate tool-failure channel.
"""

import asyncio
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from ..config import DocentSettings
from ..exceptions import GitTimeoutError, ToolUnavailableError
from .checks import CHECKS, CheckFunc
from .files import scan_executor
from .models import CheckName, DoctorRequest, DoctorResult, Issue, ToolFailure

logger = structlog.get_logger()


@dataclass
class CheckOutcome:
    """Result of running a single check."""

    check: CheckName
    issues: list[Issue] = field(default_factory=list)
    failure: ToolFailure | None = None
    execution_time_ms: float = 0


def select_checks(
    names: Iterable[str] | None,
    available: Iterable[CheckName] = CHECKS,
) -> list[CheckName]:
    """Resolve requested check names, dropping unknown ones.

    None selects every available check.
    """
    known = list(available)
    if names is None:
        return known

    selected = []
    for name in names:
        try:
            check = CheckName(name)
        except ValueError:
            logger.warning("Ignoring unknown check", check=name)
            continue
        if check not in known:
            logger.warning("Ignoring unavailable check", check=name)
            continue
        if check not in selected:
            selected.append(check)
    return selected


class CheckRunner:
    """Runs doctor checks against a project."""

    def __init__(
        self,
        root: Path,
        docs_dir: str,
        settings: DocentSettings | None = None,
        checks: dict[CheckName, CheckFunc] | None = None,
    ) -> None:
        """Initialize check runner.

        Args:
            root: Project root directory
            docs_dir: Documentation directory, relative to root
            settings: Timeouts; defaults are read from the environment
            checks: Check registry override
        """
        self.root = root
        self.docs_dir = docs_dir
        self.settings = settings or DocentSettings()
        self.checks = checks if checks is not None else CHECKS

    async def run_check(self, name: CheckName) -> CheckOutcome:
        """Run a single check under the configured timeout."""
        start_time = time.time()
        check = self.checks[name]
        timeout = self.settings.check_timeout

        try:
            issues = await asyncio.wait_for(
                check(self.root, self.docs_dir, self.settings.git_timeout),
                timeout=timeout,
            )
        except GitTimeoutError as e:
            logger.warning("Git call timed out", check=name.value, command=e.command)
            failure = ToolFailure(check=name, tool="git", reason=str(e))
        except TimeoutError:
            logger.warning("Check timed out", check=name.value, timeout=timeout)
            failure = ToolFailure(
                check=name,
                tool="timeout",
                reason=f"Check timed out after {timeout:g} seconds",
            )
        except ToolUnavailableError as e:
            logger.warning("Check tool unavailable", check=name.value, tool=e.tool)
            failure = ToolFailure(check=name, tool=e.tool, reason=str(e))
        except Exception as e:
            logger.warning("Check failed", check=name.value, error=str(e), exc_info=True)
            failure = ToolFailure(check=name, tool="internal", reason=str(e) or type(e).__name__)
        else:
            execution_time_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Check completed",
                check=name.value,
                issues=len(issues),
                execution_time_ms=execution_time_ms,
            )
            return CheckOutcome(check=name, issues=issues, execution_time_ms=execution_time_ms)

        return CheckOutcome(
            check=name,
            failure=failure,
            execution_time_ms=(time.time() - start_time) * 1000,
        )

    async def run(self, names: Iterable[str] | None = None) -> DoctorResult:
        """Run the selected checks concurrently and aggregate their issues."""
        selected = select_checks(names, self.checks)
        logger.info("Starting doctor run", root=str(self.root), checks=[c.value for c in selected])

        executor = ThreadPoolExecutor(thread_name_prefix="docent-scan")
        token = scan_executor.set(executor)
        try:
            outcomes = await asyncio.gather(*(self.run_check(name) for name in selected))
        finally:
            scan_executor.reset(token)
            # Scans abandoned by timed-out checks must not hold up the report
            executor.shutdown(wait=False, cancel_futures=True)

        result = DoctorResult(
            issues=[issue for outcome in outcomes for issue in outcome.issues],
            tool_failures=[outcome.failure for outcome in outcomes if outcome.failure],
        )

        logger.info(
            "Doctor run complete",
            score=result.score,
            healthy=result.healthy,
            issues=len(result.issues),
            tool_failures=len(result.tool_failures),
        )
        return result


async def run_doctor(request: DoctorRequest, settings: DocentSettings | None = None) -> DoctorResult:
    """Run a doctor invocation described by ``request``."""
    root = Path(request.project_path).resolve()
    runner = CheckRunner(root, request.docs_dir, settings=settings)
    return await runner.run(request.enabled_checks)
