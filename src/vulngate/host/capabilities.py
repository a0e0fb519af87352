"""Versioned capabilities of the host build API.

Older hosts lack group resolvability flags and project display names. The
matching implementation is chosen once per run from the host version instead
of probing each object.

Provides:
- HostCapabilities: Protocol for host-dependent queries
- ModernHostCapabilities: Hosts from MODERN_HOST_VERSION onwards
- LegacyHostCapabilities: Fallback for older or unknown hosts
- resolve_capabilities: Select the implementation for a host version
- project_context: Resolve the project identity through the capabilities
"""

from typing import Protocol

import structlog

from vulngate.core.classifier import ConfigurationGroup
from .build import ProjectContext, ProjectInfo

logger = structlog.get_logger()

MODERN_HOST_VERSION = (3, 3)


class HostCapabilities(Protocol):
    def display_name(self, project: ProjectInfo) -> str:
        ...

    def can_be_resolved(self, group: ConfigurationGroup) -> bool:
        ...


class ModernHostCapabilities:
    """Uses the display name and resolvability flag reported by the host."""

    def display_name(self, project: ProjectInfo) -> str:
        return project.display_name or project.name

    def can_be_resolved(self, group: ConfigurationGroup) -> bool:
        return group.can_be_resolved is not False


class LegacyHostCapabilities:
    """Every group is resolvable and the project name doubles as display name."""

    def display_name(self, project: ProjectInfo) -> str:
        return project.name

    def can_be_resolved(self, group: ConfigurationGroup) -> bool:
        return True


def parse_version(version: str | None) -> tuple[int, ...]:
    """Parse the numeric prefix of a dotted version ("7.6.1-rc" -> (7, 6, 1))."""
    parts = []
    for part in (version or "").split("."):
        digits = ""
        for char in part:
            if not char.isdigit():
                break
            digits += char
        if not digits:
            break
        parts.append(int(digits))
    return tuple(parts)


def resolve_capabilities(host_version: str | None) -> HostCapabilities:
    """Select the capability implementation for a host version.

    Unknown versions fall back to the legacy behaviour.
    """
    parsed = parse_version(host_version)
    if parsed and parsed >= MODERN_HOST_VERSION:
        capabilities: HostCapabilities = ModernHostCapabilities()
    else:
        capabilities = LegacyHostCapabilities()
    logger.debug(
        "host_capabilities_resolved",
        host_version=host_version,
        implementation=type(capabilities).__name__,
    )
    return capabilities


def project_context(project: ProjectInfo, capabilities: HostCapabilities) -> ProjectContext:
    """Resolve the project identity handed to an analysis run."""
    return ProjectContext(
        name=project.name,
        group=project.group,
        version=project.version,
        display_name=capabilities.display_name(project),
    )
