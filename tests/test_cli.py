"""Unit tests for CLI commands with mocked engine."""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from asyncclick.testing import CliRunner

from vulngate.cli.check import cli, load_policy
from vulngate.core.models import Dependency, Vulnerability


@pytest.fixture
def manifest(tmp_path):
    """Manifest with one runtime artifact and one test artifact."""
    (tmp_path / "log4j-core-2.14.1.jar").write_bytes(b"PK")
    (tmp_path / "junit-4.12.jar").write_bytes(b"PK")
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps({
        "host_version": "8.5",
        "project": {"name": "app", "group": "com.example", "version": "1.0"},
        "groups": [
            {"name": "runtimeClasspath", "hierarchy": ["runtimeClasspath", "implementation"],
             "can_be_resolved": True,
             "artifacts": [{"group": "org.apache.logging.log4j", "name": "log4j-core",
                            "version": "2.14.1", "file": "log4j-core-2.14.1.jar"}]},
            {"name": "testRuntimeClasspath", "hierarchy": ["testRuntimeClasspath", "testCompile"],
             "can_be_resolved": True,
             "artifacts": [{"group": "junit", "name": "junit", "version": "4.12",
                            "file": "junit-4.12.jar"}]},
            {"name": "api", "hierarchy": ["api"], "can_be_resolved": False, "artifacts": []},
        ],
    }))
    return path


@pytest.fixture
def policy_file(tmp_path):
    def write(**values):
        path = tmp_path / "policy.json"
        path.write_text(json.dumps(values))
        return str(path)
    return write


def mock_engine(score: float = 9.8):
    dependency = Dependency(file_name="log4j-core-2.14.1.jar")
    dependency.add_vulnerability(Vulnerability(name="CVE-2021-44228", cvss_score=score))
    engine = MagicMock()
    engine.scan.return_value = [dependency]
    engine.analyze_dependencies = AsyncMock()
    engine.write_reports = AsyncMock()
    engine.get_dependencies.return_value = [dependency]
    engine.close = AsyncMock()
    return engine


@pytest.mark.asyncio
async def test_commands_exist():
    runner = CliRunner()
    result = await runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("check", "classify", "settings"):
        assert command in result.output


@pytest.mark.asyncio
async def test_check_passes_below_threshold(manifest, policy_file):
    runner = CliRunner()
    engine = mock_engine(score=5.0)

    with patch("vulngate.engine.DependencyCheckEngine.create", new=AsyncMock(return_value=engine)):
        result = await runner.invoke(
            cli, ["check", str(manifest), "-p", policy_file(fail_build_on_cvss=7.0)]
        )

    assert result.exit_code == 0
    assert "[+] Found 1 vulnerabilities in project app" in result.output
    assert "[+] Analysis completed" in result.output
    engine.scan.assert_called_once()
    engine.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_check_fails_on_threshold(manifest):
    runner = CliRunner()
    engine = mock_engine(score=9.8)

    with patch("vulngate.engine.DependencyCheckEngine.create", new=AsyncMock(return_value=engine)):
        result = await runner.invoke(cli, ["check", str(manifest), "--fail-on-cvss", "7"])

    assert result.exit_code == 1
    assert "[-] Dependency analysis failed" in result.output
    assert "CVE-2021-44228" in result.output


@pytest.mark.asyncio
async def test_check_missing_engine_with_fail_on_error(manifest, policy_file):
    runner = CliRunner()

    with patch("vulngate.engine.base.shutil.which", return_value=None):
        result = await runner.invoke(
            cli, ["check", str(manifest), "-p", policy_file(fail_on_error=True)]
        )

    assert result.exit_code == 1
    assert "Unable to connect to the dependency-check database" in result.output


@pytest.mark.asyncio
async def test_check_missing_engine_without_fail_on_error(manifest, policy_file):
    runner = CliRunner()

    with patch("vulngate.engine.base.shutil.which", return_value=None):
        result = await runner.invoke(
            cli, ["check", str(manifest), "-p", policy_file(fail_on_error=False)]
        )

    assert result.exit_code == 0
    assert "[+] Analysis completed with warnings" in result.output


@pytest.mark.asyncio
async def test_check_invalid_policy(manifest, policy_file):
    runner = CliRunner()

    result = await runner.invoke(
        cli, ["check", str(manifest), "-p", policy_file(scan_configurations=["a"], skip_configurations=["b"])]
    )

    assert result.exit_code == 1
    assert "only specify one" in result.output


@pytest.mark.asyncio
async def test_classify_lists_groups(manifest):
    runner = CliRunner()

    result = await runner.invoke(cli, ["classify", str(manifest)])

    assert result.exit_code == 0
    assert "runtimeClasspath: scan=yes test=no resolvable=yes" in result.output
    assert "testRuntimeClasspath: scan=no test=yes resolvable=yes" in result.output
    assert "api: scan=no test=no resolvable=no" in result.output


@pytest.mark.asyncio
async def test_settings_masks_passwords(policy_file):
    runner = CliRunner()
    path = policy_file(
        auto_update=False,
        data={"username": "dc", "password": "secret"},
        suppression_file="a.xml",
        suppression_files=["b.xml"],
    )

    result = await runner.invoke(cli, ["settings", "-p", path])

    assert result.exit_code == 0
    assert "odc.autoupdate=false" in result.output
    assert "data.user=dc" in result.output
    assert "data.password=********" in result.output
    assert "secret" not in result.output
    assert "suppression.file=b.xml,a.xml" in result.output


@pytest.mark.asyncio
async def test_settings_rejects_negative_valid_for_hours(policy_file):
    runner = CliRunner()

    result = await runner.invoke(cli, ["settings", "-p", policy_file(cve_valid_for_hours=-1)])

    assert result.exit_code == 1
    assert "[-] Invalid policy" in result.output


def test_load_policy_applies_overrides(policy_file):
    policy = load_policy(policy_file(show_summary=False), format="JSON", output_directory=None)

    assert policy.show_summary is False
    assert policy.format.value == "JSON"
    assert policy.output_directory == "build/reports"
