"""Tests for dependency enrichment with build coordinates."""

from vulngate.core.enrichment import enrich_dependencies
from vulngate.core.models import ArtifactCoordinates, Confidence, Dependency

ARTIFACT = ArtifactCoordinates(
    group="org.apache.logging.log4j", name="log4j-core", version="2.14.1",
    file="log4j-core-2.14.1.jar",
)


def test_single_dependency_gets_evidence_identifier_and_reference():
    dependency = Dependency(file_name="log4j-core-2.14.1.jar")

    enrich_dependencies([dependency], ARTIFACT, "runtimeClasspath")

    assert len(dependency.evidence) == 1
    evidence = dependency.evidence[0]
    assert evidence.source == "gradle"
    assert evidence.value == "org.apache.logging.log4j:log4j-core:2.14.1"
    assert evidence.confidence == Confidence.HIGHEST

    assert len(dependency.identifiers) == 1
    identifier = dependency.identifiers[0]
    assert identifier.namespace == "maven"
    assert identifier.value == "org.apache.logging.log4j:log4j-core:2.14.1"
    assert identifier.confidence == Confidence.HIGHEST

    assert dependency.project_references == {"runtimeClasspath"}


def test_single_dependency_without_version_gets_no_identifier():
    dependency = Dependency(file_name="local.jar")
    artifact = ArtifactCoordinates(group="com.example", name="local", file="local.jar")

    enrich_dependencies([dependency], artifact, "compileClasspath")

    assert len(dependency.evidence) == 1
    assert dependency.evidence[0].value == "com.example:local:"
    assert dependency.identifiers == []
    assert dependency.project_references == {"compileClasspath"}


def test_multiple_dependencies_only_get_reference():
    """One artifact yielding several dependencies is ambiguous."""
    dependencies = [Dependency(file_name=f"inner-{i}.jar") for i in range(3)]

    enrich_dependencies(dependencies, ARTIFACT, "runtimeClasspath")

    for dependency in dependencies:
        assert dependency.evidence == []
        assert dependency.identifiers == []
        assert dependency.project_references == {"runtimeClasspath"}


def test_no_dependencies_is_noop():
    enrich_dependencies([], ARTIFACT, "runtimeClasspath")
    enrich_dependencies(None, ARTIFACT, "runtimeClasspath")


def test_references_accumulate_across_groups():
    dependency = Dependency(file_name="log4j-core-2.14.1.jar")

    enrich_dependencies([dependency], ARTIFACT, "compileClasspath")
    enrich_dependencies([dependency], ARTIFACT, "runtimeClasspath")

    assert dependency.project_references == {"compileClasspath", "runtimeClasspath"}
    assert len(dependency.identifiers) == 1
    assert len(dependency.evidence) == 1


def test_add_evidence_skips_duplicates():
    dependency = Dependency(file_name="a.jar")

    dependency.add_evidence("gradle", "artifact", "g:n:1", Confidence.HIGHEST)
    dependency.add_evidence("gradle", "artifact", "g:n:1", Confidence.HIGHEST)
    dependency.add_evidence("gradle", "artifact", "g:n:2", Confidence.HIGHEST)

    assert [e.value for e in dependency.evidence] == ["g:n:1", "g:n:2"]
