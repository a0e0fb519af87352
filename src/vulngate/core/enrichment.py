"""Attach build coordinates to dependencies found in a resolved artifact."""

import structlog

from vulngate.core.models import ArtifactCoordinates, Confidence, Dependency

logger = structlog.get_logger()

EVIDENCE_SOURCE = "gradle"
EVIDENCE_FIELD = "artifact"
IDENTIFIER_NAMESPACE = "maven"


def enrich_dependencies(
    dependencies: list[Dependency] | None,
    artifact: ArtifactCoordinates,
    group_name: str,
) -> None:
    """Add evidence, identifiers and the group reference to dependencies.

    When the artifact maps to exactly one dependency, its vendor, product and
    version are attached as one HIGHEST-confidence evidence record and, if
    group, name and version are all known, as a Maven identifier. Several
    dependencies from one artifact (e.g. a fat archive) make that mapping
    ambiguous, so they only receive the group reference.

    Args:
        dependencies: Dependencies the engine created for the artifact
        artifact: Coordinates of the resolved artifact
        group_name: Name of the group the artifact was resolved in
    """
    if not dependencies:
        return

    if len(dependencies) == 1:
        dependency = dependencies[0]
        dependency.add_evidence(
            EVIDENCE_SOURCE, EVIDENCE_FIELD, artifact.evidence_value, Confidence.HIGHEST
        )
        coordinate = artifact.coordinate
        if coordinate is not None:
            dependency.add_identifier(IDENTIFIER_NAMESPACE, coordinate, Confidence.HIGHEST)
        dependency.add_project_reference(group_name)
        return

    logger.debug(
        "ambiguous_artifact",
        artifact=artifact.coordinate or artifact.file,
        dependencies=len(dependencies),
    )
    for dependency in dependencies:
        dependency.add_project_reference(group_name)
