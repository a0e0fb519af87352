"""Exception hierarchy for dependency analysis runs.

Provides:
- VulngateError: Base class for every error raised by vulngate
- ConfigError: Invalid policy, raised before any engine interaction
- EngineInitError: The analysis engine could not be constructed
- AnalysisError: A single failure of the analysis step
- ExceptionCollection: Errors collected while analyzing dependencies
- ReportError: The engine failed to write its reports
- ThresholdViolation: Vulnerabilities at or above the CVSS failure threshold
- ScanFailure: Aggregate failure surfaced to the caller of a run
"""


class VulngateError(Exception):
    """Base exception for all vulngate errors."""
    pass


class ConfigError(VulngateError):
    """Raised when the policy is invalid."""
    pass


class EngineInitError(VulngateError):
    """Raised when the engine cannot be created (e.g. database unreachable)."""
    pass


class AnalysisError(VulngateError):
    """Raised for a single failure while analyzing dependencies."""
    pass


class ReportError(VulngateError):
    """Raised when the engine fails to write the reports."""
    pass


class ExceptionCollection(VulngateError):
    """Ordered collection of errors captured during analysis.

    Carries partial-failure state across phases without aborting the run
    immediately. The ``fatal`` flag tells whether the engine considers the
    analysis results unusable.

    Attributes:
        exceptions: Captured errors, in the order they occurred
        fatal: Whether any captured error invalidates the analysis
    """

    def __init__(self, exceptions: list[Exception] | None = None, fatal: bool = False):
        self.exceptions: list[Exception] = list(exceptions or [])
        self.fatal = fatal
        super().__init__(self._render())

    def add_exception(self, exc: Exception) -> None:
        """Append an error to the collection."""
        self.exceptions.append(exc)
        self.args = (self._render(),)

    def _render(self) -> str:
        if not self.exceptions:
            return "No exceptions"
        return "\n".join(f"- {type(e).__name__}: {e}" for e in self.exceptions)

    def __len__(self) -> int:
        return len(self.exceptions)


class ThresholdViolation(VulngateError):
    """Raised when vulnerabilities meet or exceed the CVSS failure threshold.

    Attributes:
        threshold: Configured CVSS threshold
        names: Names of the offending vulnerabilities, in encounter order
    """

    def __init__(self, threshold: float, names: list[str]):
        self.threshold = threshold
        self.names = list(names)
        super().__init__(
            "Dependency-Analyze Failure:\n"
            "One or more dependencies were identified with vulnerabilities that have "
            f"a CVSS score greater than or equal to '{threshold:.1f}': {', '.join(self.names)}\n"
            "See the dependency-check report for more details."
        )


class ScanFailure(VulngateError):
    """Aggregate failure of an analysis run.

    Attributes:
        causes: Underlying errors that led to the failure
    """

    def __init__(self, message: str, causes: list[Exception] | None = None):
        self.message = message
        self.causes = list(causes or [])
        super().__init__(self._render())

    def _render(self) -> str:
        if not self.causes:
            return self.message
        details = "\n".join(f"  {type(c).__name__}: {c}" for c in self.causes)
        return f"{self.message}\n{details}"
