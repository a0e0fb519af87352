"""AnalyzeAgent for orchestrating one dependency analysis run.

Drives the engine through creation, dependency collection, analysis, report
writing and evaluation, then releases it. Tooling errors escalate only when
the policy's ``fail_on_error`` is set; the CVSS threshold gate always fails
the run. Cleanup runs exactly once before any outcome is returned.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from vulngate.core.config import Policy
from vulngate.core.evaluation import count_by_severity, evaluate_threshold, summarize
from vulngate.core.exceptions import (
    ConfigError,
    EngineInitError,
    ExceptionCollection,
    ReportError,
    ScanFailure,
    ThresholdViolation,
)
from vulngate.core.settings import SettingsStore, translate_policy
from vulngate.engine.base import DependencyCollector, Engine, EngineFactory
from vulngate.host.build import ProjectContext
from .base import BaseAgent

logger = structlog.get_logger()


class Phase(str, Enum):
    """Phases of an analysis run, in execution order."""

    INIT = "init"
    ENGINE_CREATE = "engine_create"
    COLLECT = "collect"
    ANALYZE = "analyze"
    REPORT = "report"
    EVALUATE = "evaluate"
    CLEANUP = "cleanup"
    DONE = "done"
    ABORTED = "aborted"


class RunStatus(str, Enum):
    COMPLETED = "completed"
    COMPLETED_WITH_WARNINGS = "completed_with_warnings"
    ABORTED = "aborted"


@dataclass
class RunOutcome:
    """Terminal result of an analysis run.

    Attributes:
        status: How the run ended
        reason: Aggregate human-readable message for ABORTED runs
        error: The failure behind an ABORTED run
        phases: Phases visited, in order
        vulnerabilities: Total vulnerabilities found (None if never evaluated)
    """

    status: RunStatus
    reason: str | None = None
    error: Exception | None = None
    phases: list[Phase] = field(default_factory=list)
    vulnerabilities: int | None = None

    @property
    def failed(self) -> bool:
        return self.status == RunStatus.ABORTED


class AnalyzeAgent(BaseAgent):
    """Dependency analysis agent.

    Pipeline:
    1. Translate the policy into engine settings
    2. Create the engine
    3. Collect the build's in-scope dependencies
    4. Analyze them
    5. Write the reports
    6. Summarize results and enforce the CVSS threshold
    7. Release settings and engine
    """

    def __init__(
        self,
        policy: Policy,
        project: ProjectContext,
        engine_factory: EngineFactory,
        collector: DependencyCollector,
        session_id: str | None = None,
    ):
        """Initialize the agent.

        Args:
            policy: Scan policy for this run
            project: Project identity used for reports and logs
            engine_factory: Async factory creating the engine from settings
            collector: Collaborator loading dependencies into the engine
            session_id: Optional session ID (generates new UUID if not provided)
        """
        super().__init__(session_id)
        self.policy = policy
        self.project = project
        self.engine_factory = engine_factory
        self.collector = collector
        self.log = self.log.bind(project=project.name)
        self.phases: list[Phase] = []
        self.settings: SettingsStore | None = None
        self._cleaned_up = False
        self._warnings = False
        self._vulnerabilities: int | None = None
        self._retained: ExceptionCollection | None = None

    def _enter(self, phase: Phase) -> None:
        self.phases.append(phase)
        self.log.debug("phase_entered", phase=phase.value)

    def _outcome(self, status: RunStatus) -> RunOutcome:
        return RunOutcome(
            status=status, phases=list(self.phases), vulnerabilities=self._vulnerabilities
        )

    def _abort(self, error: Exception) -> RunOutcome:
        self._enter(Phase.ABORTED)
        self.log.error("analysis_aborted", error=str(error))
        outcome = self._outcome(RunStatus.ABORTED)
        outcome.reason = str(error)
        outcome.error = error
        return outcome

    def _finish(self) -> RunOutcome:
        self._enter(Phase.DONE)
        if self._warnings:
            return self._outcome(RunStatus.COMPLETED_WITH_WARNINGS)
        return self._outcome(RunStatus.COMPLETED)

    async def _cleanup(self, engine: Engine | None) -> None:
        """Release settings and engine; later calls are no-ops."""
        if self._cleaned_up:
            return
        self._cleaned_up = True
        self._enter(Phase.CLEANUP)
        try:
            if self.settings is not None:
                self.settings.cleanup()
        finally:
            if engine is not None:
                await engine.close()

    async def run(self) -> RunOutcome:
        """Execute the analysis pipeline.

        Returns:
            RunOutcome; ABORTED outcomes carry a ScanFailure, ConfigError or
            ThresholdViolation as ``error``

        Example:
            >>> agent = AnalyzeAgent(policy, project, DependencyCheckEngine.create, collector)
            >>> outcome = await agent.run()
            >>> if outcome.failed:
            ...     print(outcome.reason)
        """
        self.log.info("analysis_start")

        self._enter(Phase.INIT)
        try:
            self.settings = translate_policy(self.policy)
        except ConfigError as e:
            return self._abort(e)

        self._enter(Phase.ENGINE_CREATE)
        try:
            engine = await self.engine_factory(self.settings)
        except EngineInitError as e:
            msg = "Unable to connect to the dependency-check database"
            await self._cleanup(None)
            if self.policy.fail_on_error:
                return self._abort(ScanFailure(msg, [e]))
            self.log.error("engine_unavailable", message=msg, error=str(e))
            self._warnings = True
            return self._finish()

        try:
            failure = await self._drive(engine)
        finally:
            await self._cleanup(engine)

        if failure is not None:
            return self._abort(failure)

        retained = self._retained
        if self.policy.fail_on_error and retained is not None and retained.exceptions:
            return self._abort(
                ScanFailure("One or more exceptions occurred during analysis", retained.exceptions)
            )

        self.log.info("analysis_complete", vulnerabilities=self._vulnerabilities)
        return self._finish()

    async def _drive(self, engine: Engine) -> Exception | None:
        """Run collect, analyze, report and evaluate.

        Returns:
            The error that must abort the run, or None
        """
        fail_on_error = self.policy.fail_on_error

        self._enter(Phase.COLLECT)
        await self.collector.scan_dependencies(engine)

        self._enter(Phase.ANALYZE)
        self.log.info("analysis_running", dependencies=len(engine.get_dependencies()))
        try:
            await engine.analyze_dependencies()
        except ExceptionCollection as ex:
            if fail_on_error and ex.fatal:
                return ScanFailure("Analysis failed.", [ex])
            self.log.warning("analysis_errors", errors=len(ex), fatal=ex.fatal, error=str(ex))
            self._warnings = True
            self._retained = ex

        self._enter(Phase.REPORT)
        self.log.info("report_generating", output=self.policy.output_directory)
        try:
            await engine.write_reports(
                self.project.display_name,
                self.project.group,
                self.project.name,
                self.project.version,
                Path(self.policy.output_directory),
                self.policy.format,
            )
        except ReportError as ex:
            if fail_on_error:
                if self._retained is not None:
                    self._retained.add_exception(ex)
                    return ScanFailure("Error generating the report", self._retained.exceptions)
                return ScanFailure("Error generating the report", [ex])
            self.log.error("report_failed", error=str(ex))
            self._warnings = True

        self._enter(Phase.EVALUATE)
        dependencies = engine.get_dependencies()
        summary = summarize(dependencies, self.policy.show_summary)
        self._vulnerabilities = summary.total
        self.log.info(
            "vulnerabilities_found",
            count=summary.total,
            by_severity=count_by_severity(dependencies),
        )
        if summary.block:
            self.log.info("vulnerability_summary", summary=summary.block)
        try:
            evaluate_threshold(dependencies, self.policy.fail_build_on_cvss)
        except ThresholdViolation as ex:
            return ex
        return None
