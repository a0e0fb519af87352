"""Evaluation of analysis results.

Builds the console summary of vulnerable dependencies and enforces the CVSS
failure threshold. All rendering helpers are pure: they return lists of
lines that callers join once.

Provides:
- Summary: Vulnerability count plus the optional summary block
- summary_lines: One line per vulnerable dependency
- summarize: Count vulnerabilities and build the summary block
- count_by_severity: Vulnerability counts per CVSS rating
- threshold_violations: Vulnerability names at or above a threshold
- evaluate_threshold: Raise ThresholdViolation when the gate is hit
"""

from collections import Counter
from dataclasses import dataclass

from vulngate.core.exceptions import ThresholdViolation
from vulngate.core.models import Dependency, Vulnerability

MAX_CVSS_SCORE = 10.0

SUMMARY_HEADER = "One or more dependencies were identified with known vulnerabilities:"
SUMMARY_FOOTER = "See the dependency-check report for more details."


@dataclass(frozen=True)
class Summary:
    """Result of summarizing an analysis.

    Attributes:
        total: Number of vulnerabilities across all dependencies
        block: Rendered summary block, or None when there is nothing to show
    """

    total: int
    block: str | None = None


def all_vulnerabilities(dependencies: list[Dependency]) -> list[Vulnerability]:
    """Flatten vulnerabilities across dependencies, keeping encounter order."""
    return [v for dependency in dependencies for v in dependency.vulnerabilities]


def summary_lines(dependencies: list[Dependency]) -> list[str]:
    """Render one line per dependency that has vulnerabilities.

    Format: ``<file name> (<id>, <id>) : <vulnerability>, <vulnerability>``
    """
    lines = []
    for dependency in dependencies:
        if not dependency.vulnerabilities:
            continue
        ids = ", ".join(identifier.value for identifier in dependency.identifiers)
        names = ", ".join(v.name for v in dependency.vulnerabilities)
        lines.append(f"{dependency.file_name} ({ids}) : {names}")
    return lines


def summarize(dependencies: list[Dependency], show_summary: bool) -> Summary:
    """Count vulnerabilities and, if requested, build the summary block.

    Args:
        dependencies: Analyzed dependencies
        show_summary: Whether the per-dependency block should be rendered

    Returns:
        Summary with the total and the block (None if disabled or empty)
    """
    total = len(all_vulnerabilities(dependencies))
    if not show_summary:
        return Summary(total=total)

    lines = summary_lines(dependencies)
    if not lines:
        return Summary(total=total)

    block = "\n".join([SUMMARY_HEADER, "", *lines, "", SUMMARY_FOOTER])
    return Summary(total=total, block=block)


def count_by_severity(dependencies: list[Dependency]) -> dict[str, int]:
    """Count vulnerabilities per CVSS rating (critical/high/medium/low/none)."""
    return dict(Counter(v.severity for v in all_vulnerabilities(dependencies)))


def threshold_violations(dependencies: list[Dependency], threshold: float) -> list[str]:
    """Names of vulnerabilities scored at or above the threshold.

    Returns an empty list when the threshold exceeds the maximum CVSS score,
    which disables the gate.
    """
    if threshold > MAX_CVSS_SCORE:
        return []
    return [
        v.name for v in all_vulnerabilities(dependencies) if v.cvss_score >= threshold
    ]


def evaluate_threshold(dependencies: list[Dependency], threshold: float) -> None:
    """Fail when any vulnerability meets or exceeds the CVSS threshold.

    Raises:
        ThresholdViolation: Naming the threshold and the offending vulnerabilities
    """
    names = threshold_violations(dependencies, threshold)
    if names:
        raise ThresholdViolation(threshold, names)
