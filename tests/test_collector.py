"""Tests for the build manifest, host capabilities and dependency collection."""

import json

import pytest
from unittest.mock import MagicMock

from vulngate.core.classifier import ConfigurationGroup
from vulngate.core.config import Policy
from vulngate.core.models import Dependency
from vulngate.host import (
    BuildManifest,
    ConfigurationCollector,
    LegacyHostCapabilities,
    ModernHostCapabilities,
    ProjectInfo,
    project_context,
    resolve_capabilities,
)
from vulngate.host.capabilities import parse_version


@pytest.fixture
def manifest_file(tmp_path):
    """Manifest with runtime, test, unresolvable and lint groups."""
    libs = tmp_path / "libs"
    libs.mkdir()
    (libs / "log4j-core-2.14.1.jar").write_bytes(b"PK")
    (libs / "junit-4.12.jar").write_bytes(b"PK")
    (libs / "lint.jar").write_bytes(b"PK")

    manifest = {
        "host_version": "7.6.1",
        "project": {"name": "app", "group": "com.example", "version": "1.0",
                    "display_name": "root project 'app'"},
        "groups": [
            {
                "name": "runtimeClasspath",
                "hierarchy": ["runtimeClasspath", "runtimeOnly", "implementation"],
                "can_be_resolved": True,
                "artifacts": [
                    {"group": "org.apache.logging.log4j", "name": "log4j-core",
                     "version": "2.14.1", "file": "libs/log4j-core-2.14.1.jar"},
                    {"group": "org.missing", "name": "gone", "version": "1",
                     "file": "libs/gone.jar"},
                ],
            },
            {
                "name": "testRuntimeClasspath",
                "hierarchy": ["testRuntimeClasspath", "testImplementation"],
                "can_be_resolved": True,
                "artifacts": [{"group": "junit", "name": "junit", "version": "4.12",
                               "file": "libs/junit-4.12.jar"}],
            },
            {
                "name": "implementation",
                "hierarchy": ["implementation"],
                "can_be_resolved": False,
                "artifacts": [],
            },
            {
                "name": "lintClassPath",
                "hierarchy": ["lintClassPath"],
                "can_be_resolved": True,
                "artifacts": [{"file": "libs/lint.jar"}],
            },
        ],
    }
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(manifest))
    return path


def fake_engine():
    engine = MagicMock()
    engine.scan.side_effect = lambda path: [Dependency(file_name=path.name, file_path=str(path))]
    return engine


def test_parse_version():
    assert parse_version("7.6.1-rc-1") == (7, 6, 1)
    assert parse_version("3.3") == (3, 3)
    assert parse_version(None) == ()
    assert parse_version("unknown") == ()


@pytest.mark.parametrize("version,expected", [
    ("3.3", ModernHostCapabilities),
    ("8.0", ModernHostCapabilities),
    ("3.2.1", LegacyHostCapabilities),
    ("2.14", LegacyHostCapabilities),
    (None, LegacyHostCapabilities),
])
def test_resolve_capabilities(version, expected):
    assert isinstance(resolve_capabilities(version), expected)


def test_legacy_capabilities_treat_every_group_as_resolvable():
    group = ConfigurationGroup(name="api", can_be_resolved=False)
    project = ProjectInfo(name="app", display_name="root project 'app'")

    capabilities = LegacyHostCapabilities()

    assert capabilities.can_be_resolved(group) is True
    assert capabilities.display_name(project) == "app"


def test_modern_capabilities_use_host_flags():
    capabilities = ModernHostCapabilities()

    assert capabilities.can_be_resolved(ConfigurationGroup(name="api", can_be_resolved=False)) is False
    assert capabilities.can_be_resolved(ConfigurationGroup(name="api")) is True
    assert capabilities.display_name(ProjectInfo(name="app", display_name="App")) == "App"
    assert capabilities.display_name(ProjectInfo(name="app")) == "app"


def test_manifest_loading_and_project_context(manifest_file):
    build = BuildManifest.from_file(manifest_file)

    context = project_context(build.project, resolve_capabilities(build.host_version))

    assert [g.name for g in build.groups] == [
        "runtimeClasspath", "testRuntimeClasspath", "implementation", "lintClassPath",
    ]
    assert build.groups[0].artifacts[0].coordinate == "org.apache.logging.log4j:log4j-core:2.14.1"
    assert context.display_name == "root project 'app'"
    assert context.group == "com.example"
    assert build.artifact_path(build.groups[0].artifacts[0]) == (
        manifest_file.parent / "libs/log4j-core-2.14.1.jar"
    )


def test_select_groups_applies_resolvability_and_policy(manifest_file):
    build = BuildManifest.from_file(manifest_file)
    collector = ConfigurationCollector(build, Policy(skip_configurations={"lintClassPath"}))

    assert [g.name for g in collector.select_groups()] == ["runtimeClasspath"]


def test_select_groups_with_scan_list(manifest_file):
    build = BuildManifest.from_file(manifest_file)
    policy = Policy(scan_configurations={"lintClassPath", "implementation"})

    collector = ConfigurationCollector(build, policy)

    assert [g.name for g in collector.select_groups()] == ["lintClassPath"]


@pytest.mark.asyncio
async def test_scan_dependencies_enriches_in_scope_artifacts(manifest_file):
    build = BuildManifest.from_file(manifest_file)
    collector = ConfigurationCollector(build, Policy(skip_configurations={"lintClassPath"}))
    engine = fake_engine()

    await collector.scan_dependencies(engine)

    assert engine.scan.call_count == 1
    (scanned,) = engine.scan.call_args.args
    assert scanned.name == "log4j-core-2.14.1.jar"


@pytest.mark.asyncio
async def test_scan_dependencies_records_group_reference(manifest_file):
    build = BuildManifest.from_file(manifest_file)
    collector = ConfigurationCollector(build, Policy(skip_test_groups=False, skip_configurations={"lintClassPath"}))
    created = []
    engine = MagicMock()

    def scan(path):
        dependency = Dependency(file_name=path.name, file_path=str(path))
        created.append(dependency)
        return [dependency]

    engine.scan.side_effect = scan

    await collector.scan_dependencies(engine)

    assert [d.file_name for d in created] == ["log4j-core-2.14.1.jar", "junit-4.12.jar"]
    assert created[0].project_references == {"runtimeClasspath"}
    assert created[0].identifiers[0].value == "org.apache.logging.log4j:log4j-core:2.14.1"
    assert created[1].project_references == {"testRuntimeClasspath"}


@pytest.mark.asyncio
async def test_legacy_host_scans_unresolvable_flagged_groups(manifest_file):
    build = BuildManifest.from_file(manifest_file)
    policy = Policy(scan_configurations={"implementation"})

    collector = ConfigurationCollector(build, policy, capabilities=LegacyHostCapabilities())

    assert [g.name for g in collector.select_groups()] == ["implementation"]
