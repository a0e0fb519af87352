"""Dependency collection from a build manifest.

Feeds every artifact of the in-scope groups to the engine and enriches the
resulting dependencies with the artifact's coordinates.
"""

import structlog

from vulngate.core.classifier import should_scan
from vulngate.core.config import Policy
from vulngate.core.enrichment import enrich_dependencies
from vulngate.engine.base import Engine
from .build import BuildManifest, GroupSpec
from .capabilities import HostCapabilities, resolve_capabilities

logger = structlog.get_logger()


class ConfigurationCollector:
    """DependencyCollector backed by a BuildManifest.

    A group is loaded when the host reports it as resolvable and the policy
    selects it for scanning.
    """

    def __init__(
        self,
        manifest: BuildManifest,
        policy: Policy,
        capabilities: HostCapabilities | None = None,
    ):
        """Initialize the collector.

        Args:
            manifest: Build manifest exported by the host
            policy: Active scan policy
            capabilities: Host capabilities (resolved from the manifest's
                host version if not provided)
        """
        self.manifest = manifest
        self.policy = policy
        self.capabilities = capabilities or resolve_capabilities(manifest.host_version)
        self.log = logger.bind(project=manifest.project.name)

    def select_groups(self) -> list[GroupSpec]:
        """Return the groups whose artifacts should be analyzed."""
        selected = []
        for group in self.manifest.groups:
            if not self.capabilities.can_be_resolved(group):
                self.log.debug("group_skipped", group=group.name, reason="not resolvable")
            elif not should_scan(group, self.policy):
                self.log.debug("group_skipped", group=group.name, reason="excluded by policy")
            else:
                selected.append(group)
        return selected

    async def scan_dependencies(self, engine: Engine) -> None:
        """Register the artifacts of every selected group with the engine."""
        groups = self.select_groups()
        artifacts = 0
        for group in groups:
            for artifact in group.artifacts:
                path = self.manifest.artifact_path(artifact)
                if path is None or not path.exists():
                    self.log.warning(
                        "artifact_missing",
                        group=group.name,
                        artifact=artifact.coordinate,
                        file=str(path) if path else None,
                    )
                    continue
                dependencies = engine.scan(path)
                enrich_dependencies(dependencies, artifact, group.name)
                artifacts += 1

        self.log.info(
            "dependencies_collected",
            groups=[g.name for g in groups],
            artifacts=artifacts,
        )
