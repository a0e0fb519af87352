"""Host build integration.

Provides:
- BuildManifest, GroupSpec, ProjectInfo, ProjectContext: manifest model
- HostCapabilities and its versioned implementations
- ConfigurationCollector: DependencyCollector over a manifest
"""

from .build import BuildManifest, GroupSpec, ProjectContext, ProjectInfo
from .capabilities import (
    HostCapabilities,
    LegacyHostCapabilities,
    ModernHostCapabilities,
    project_context,
    resolve_capabilities,
)
from .collector import ConfigurationCollector

__all__ = [
    "BuildManifest",
    "GroupSpec",
    "ProjectContext",
    "ProjectInfo",
    "HostCapabilities",
    "LegacyHostCapabilities",
    "ModernHostCapabilities",
    "project_context",
    "resolve_capabilities",
    "ConfigurationCollector",
]
