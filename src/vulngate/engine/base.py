"""Engine and collector protocols plus the dependency-check launcher helpers.

Provides:
- Engine: Protocol of the vulnerability analysis engine driven by a run
- EngineFactory: Async callable creating an Engine from settings
- DependencyCollector: Protocol of the collaborator feeding the engine
- LauncherResult: Decoded output of a launcher run
- find_launcher: Resolve the dependency-check launcher on PATH
- run_launcher: Invoke the launcher with a timeout, without a shell
"""

import asyncio
import shutil
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from vulngate.core.config import ReportFormat, load_config
from vulngate.core.models import Dependency
from vulngate.core.settings import SettingsStore

logger = structlog.get_logger()


@runtime_checkable
class Engine(Protocol):
    """Protocol for the analysis engine.

    ``analyze_dependencies`` raises ExceptionCollection and ``write_reports``
    raises ReportError on failure.
    """

    def scan(self, path: str | Path) -> list[Dependency]:
        """Register a file or directory and return the dependencies created for it."""
        ...

    async def analyze_dependencies(self) -> None:
        """Update vulnerability data and analyze all registered dependencies."""
        ...

    async def write_reports(
        self,
        display_name: str,
        group_id: str,
        name: str,
        version: str,
        output_dir: Path,
        report_format: ReportFormat,
    ) -> None:
        """Write the reports for the analyzed dependencies."""
        ...

    def get_dependencies(self) -> list[Dependency]:
        """Return all dependencies known to the engine."""
        ...

    async def close(self) -> None:
        """Release engine resources."""
        ...


EngineFactory = Callable[[SettingsStore], Awaitable[Engine]]


@runtime_checkable
class DependencyCollector(Protocol):
    """Protocol for the collaborator that loads the build's dependencies."""

    async def scan_dependencies(self, engine: Engine) -> None:
        """Register every in-scope artifact with the engine."""
        ...


@dataclass(frozen=True)
class LauncherResult:
    """Decoded output of one dependency-check launcher invocation."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def find_launcher(binary: str | None = None) -> str | None:
    """Resolve the dependency-check launcher.

    Args:
        binary: Launcher name or path; defaults to $VULNGATE_DC_BINARY

    Returns:
        Absolute path of the launcher, or None if it is not installed
    """
    return shutil.which(binary or load_config().dependency_check_binary)


async def run_launcher(
    args: list[str],
    binary: str | None = None,
    timeout: int | None = None,
) -> LauncherResult:
    """Invoke the dependency-check launcher with arguments (never via a shell).

    Args:
        args: Launcher arguments
        binary: Launcher name or path; defaults to $VULNGATE_DC_BINARY
        timeout: Seconds to wait; defaults to $VULNGATE_DC_TIMEOUT

    Raises:
        asyncio.TimeoutError: If the launcher is still running after timeout;
            the process is killed first
        OSError: If the launcher cannot be started
    """
    if binary is None or timeout is None:
        config = load_config()
        binary = binary or config.dependency_check_binary
        timeout = timeout if timeout is not None else config.dependency_check_timeout

    log = logger.bind(launcher=binary, timeout=timeout, args=len(args))
    try:
        process = await asyncio.create_subprocess_exec(
            binary,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        log.error("launcher_start_failed", error=str(e))
        raise
    log.debug("launcher_started", pid=process.pid)

    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        log.warning("launcher_timeout", pid=process.pid)
        process.kill()
        await process.communicate()
        raise

    result = LauncherResult(
        stdout=out.decode("utf-8", errors="replace"),
        stderr=err.decode("utf-8", errors="replace"),
        returncode=process.returncode or 0,
    )
    log.debug("launcher_finished", returncode=result.returncode)
    return result
