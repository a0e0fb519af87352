"""OWASP dependency-check engine driven through its command line launcher.

Settings reach the launcher through a generated properties file. Analysis
always produces a JSON report in a private working directory; that report is
merged back into the dependencies registered by the collector, so evidence
and project references attached before analysis survive.
"""

import asyncio
import json
import shutil
import tempfile
from pathlib import Path
from typing import Any

import structlog

from vulngate.core.config import ReportFormat
from vulngate.core.exceptions import (
    AnalysisError,
    EngineInitError,
    ExceptionCollection,
    ReportError,
)
from vulngate.core.models import Confidence, Dependency, Vulnerability
from vulngate.core.settings import SettingKey, SettingsStore
from .base import find_launcher, run_launcher

logger = structlog.get_logger()

JSON_REPORT_NAME = "dependency-check-report.json"


def _confidence(value: Any) -> Confidence | None:
    try:
        return Confidence(str(value).upper())
    except ValueError:
        return None


def parse_vulnerability(entry: dict[str, Any]) -> Vulnerability:
    """Build a Vulnerability from a JSON report entry.

    Prefers the CVSS v3 base score, then a CVSS v3 vector, then the CVSS v2
    score. Entries without any score count as 0.0.
    """
    name = entry.get("name", "unknown")
    cvssv3 = entry.get("cvssv3") or {}
    cvssv2 = entry.get("cvssv2") or {}

    if cvssv3.get("baseScore") is not None:
        return Vulnerability(name=name, cvss_score=float(cvssv3["baseScore"]))
    if cvssv3.get("vectorString"):
        return Vulnerability.from_vector(name, cvssv3["vectorString"])
    if cvssv2.get("score") is not None:
        return Vulnerability(name=name, cvss_score=float(cvssv2["score"]))
    return Vulnerability(name=name)


class DependencyCheckEngine:
    """Engine implementation wrapping the dependency-check CLI.

    Create instances with ``await DependencyCheckEngine.create(settings)``;
    the constructor does no I/O.
    """

    name = "dependency-check"

    def __init__(
        self,
        settings: SettingsStore,
        binary: str,
        work_dir: Path,
        properties_file: Path,
        timeout: int = 3600,
    ):
        self.settings = settings
        self.binary = binary
        self.work_dir = work_dir
        self.properties_file = properties_file
        self.timeout = timeout
        self.log = logger.bind(engine=self.name)
        self._dependencies: list[Dependency] = []
        self._by_path: dict[str, Dependency] = {}
        self._scan_paths: list[str] = []
        self._json_report: Path | None = None

    @classmethod
    async def create(
        cls,
        settings: SettingsStore,
        binary: str = "dependency-check.sh",
        timeout: int = 3600,
    ) -> "DependencyCheckEngine":
        """Prepare an engine for one run.

        Raises:
            EngineInitError: If the launcher is missing or the data directory
                or working files cannot be created
        """
        if find_launcher(binary) is None:
            raise EngineInitError(
                f"{binary} not installed. "
                "Install: https://owasp.org/www-project-dependency-check/"
            )

        data_directory = settings.get(SettingKey.DATA_DIRECTORY)
        work_dir = None
        try:
            if data_directory:
                Path(data_directory).mkdir(parents=True, exist_ok=True)
            work_dir = Path(tempfile.mkdtemp(prefix="vulngate-"))
            properties_file = settings.write_properties()
        except OSError as e:
            if work_dir is not None:
                shutil.rmtree(work_dir, ignore_errors=True)
            raise EngineInitError(f"Unable to prepare the dependency-check data store: {e}") from e

        logger.debug("engine_created", binary=binary, work_dir=str(work_dir))
        return cls(settings, binary, work_dir, properties_file, timeout=timeout)

    def scan(self, path: str | Path) -> list[Dependency]:
        """Register a file or every file below a directory.

        Scanning the same file twice returns the dependency created the first
        time.
        """
        root = Path(path)
        if root.is_dir():
            files = sorted(f for f in root.rglob("*") if f.is_file())
        else:
            files = [root]

        found = []
        for file in files:
            key = str(file.resolve())
            dependency = self._by_path.get(key)
            if dependency is None:
                dependency = Dependency(file_name=file.name, file_path=key)
                self._by_path[key] = dependency
                self._dependencies.append(dependency)
                self._scan_paths.append(key)
            found.append(dependency)
        return found

    def _base_args(self) -> list[str]:
        args = []
        for path in self._scan_paths:
            args.extend(["--scan", path])
        args.extend(["--propertyfile", str(self.properties_file)])
        return args

    async def analyze_dependencies(self) -> None:
        """Run the analysis and merge the JSON report into the dependencies.

        Raises:
            ExceptionCollection: Fatal if no report was produced, non-fatal if
                the launcher failed after writing one
        """
        if not self._scan_paths:
            self.log.info("analysis_skipped", reason="no dependencies registered")
            return

        args = self._base_args() + [
            "--format", ReportFormat.JSON.value,
            "--out", str(self.work_dir),
        ]
        try:
            result = await run_launcher(args, binary=self.binary, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ExceptionCollection(
                [AnalysisError(f"dependency-check timed out after {self.timeout}s")], fatal=True
            ) from e
        except OSError as e:
            raise ExceptionCollection([AnalysisError(str(e))], fatal=True) from e

        report = self.work_dir / JSON_REPORT_NAME
        if not report.exists():
            raise ExceptionCollection(
                [AnalysisError(
                    f"dependency-check failed with code {result.returncode}: "
                    f"{result.stderr.strip()}"
                )],
                fatal=True,
            )

        try:
            self._merge_report(json.loads(report.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            raise ExceptionCollection([AnalysisError(f"Unreadable report: {e}")], fatal=True) from e
        self._json_report = report

        if not result.ok:
            raise ExceptionCollection(
                [AnalysisError(
                    f"dependency-check exited with code {result.returncode}: "
                    f"{result.stderr.strip()}"
                )],
                fatal=False,
            )

    def _merge_report(self, report: dict[str, Any]) -> None:
        for entry in report.get("dependencies", []):
            file_path = entry.get("filePath", "")
            dependency = self._by_path.get(file_path)
            if dependency is None:
                dependency = Dependency(
                    file_name=entry.get("fileName", Path(file_path).name), file_path=file_path
                )
                self._dependencies.append(dependency)
                if file_path:
                    self._by_path[file_path] = dependency

            for package in entry.get("packages", []):
                dependency.add_identifier("purl", package["id"], _confidence(package.get("confidence")))
            for cpe in entry.get("vulnerabilityIds", []):
                dependency.add_identifier("cpe", cpe["id"], _confidence(cpe.get("confidence")))
            for vulnerability in entry.get("vulnerabilities", []):
                dependency.add_vulnerability(parse_vulnerability(vulnerability))

        self.log.debug("report_merged", dependencies=len(self._dependencies))

    async def write_reports(
        self,
        display_name: str,
        group_id: str,
        name: str,
        version: str,
        output_dir: Path,
        report_format: ReportFormat,
    ) -> None:
        """Write reports for the analyzed dependencies into output_dir.

        JSON reports are copied from the analysis run; other formats are
        rendered by re-running the launcher without updating its data.

        Raises:
            ReportError: If the report cannot be written
        """
        log = self.log.bind(project=display_name, group=group_id, name=name, version=version)
        if not self._scan_paths:
            log.warning(
                "report_skipped",
                reason="no dependencies registered",
                output=str(output_dir),
                format=report_format.value,
            )
            return
        if self._json_report is None:
            raise ReportError("No analysis results available to report")

        output = Path(output_dir)
        try:
            output.mkdir(parents=True, exist_ok=True)
            if report_format == ReportFormat.JSON:
                shutil.copyfile(self._json_report, output / JSON_REPORT_NAME)
                log.info("report_written", output=str(output), format=report_format.value)
                return
        except OSError as e:
            raise ReportError(f"Unable to write report to {output}: {e}") from e

        args = self._base_args() + [
            "--noupdate",
            "--project", display_name,
            "--format", report_format.value,
            "--out", str(output),
        ]
        try:
            result = await run_launcher(args, binary=self.binary, timeout=self.timeout)
        except (asyncio.TimeoutError, OSError) as e:
            raise ReportError(f"Unable to generate {report_format.value} report: {e}") from e
        if not result.ok:
            raise ReportError(
                f"dependency-check report generation failed with code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        log.info("report_written", output=str(output), format=report_format.value)

    def get_dependencies(self) -> list[Dependency]:
        return list(self._dependencies)

    async def close(self) -> None:
        """Remove the working directory."""
        shutil.rmtree(self.work_dir, ignore_errors=True)
        self.log.debug("engine_closed")
