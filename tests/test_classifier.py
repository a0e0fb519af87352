"""Tests for dependency group classification."""

import pytest

from vulngate.core.classifier import ConfigurationGroup, is_test_group, should_scan
from vulngate.core.config import Policy


def group(name: str, *ancestors: str) -> ConfigurationGroup:
    return ConfigurationGroup(name=name, hierarchy=(name, *ancestors))


@pytest.mark.parametrize("name", ["testCompile", "testRuntimeClasspath", "androidTestImplementation", "test"])
def test_name_prefix_marks_test_group(name):
    assert is_test_group(group(name)) is True


@pytest.mark.parametrize("ancestor", ["testCompile", "androidTestCompile"])
def test_test_ancestor_marks_test_group(ancestor):
    """Any ancestor named testCompile/androidTestCompile makes a test group."""
    g = group("integrationRuntime", "integrationCompile", ancestor, "compile")

    assert is_test_group(g) is True


def test_deep_ancestor_is_checked():
    g = group("fooRuntime", "a", "b", "c", "testCompile")

    assert is_test_group(g) is True


def test_non_test_group():
    g = group("runtimeClasspath", "runtime", "compile", "testing")

    assert is_test_group(g) is False


def test_ancestor_match_is_exact():
    """Ancestors only count when named exactly testCompile/androidTestCompile."""
    g = group("implementation", "testCompileOnly", "myTestCompile")

    assert is_test_group(g) is False


def test_empty_hierarchy_uses_name_only():
    assert is_test_group(ConfigurationGroup(name="compile")) is False
    assert is_test_group(ConfigurationGroup(name="testFixtures")) is True


def test_default_policy_scans_non_test_groups():
    policy = Policy()

    assert should_scan(group("runtimeClasspath"), policy) is True
    assert should_scan(group("testRuntimeClasspath"), policy) is False


def test_test_groups_scanned_when_not_skipped():
    policy = Policy(skip_test_groups=False)

    assert should_scan(group("testRuntimeClasspath"), policy) is True


def test_skip_list_excludes_group():
    policy = Policy(skip_configurations={"lintClassPath"})

    assert should_scan(group("lintClassPath"), policy) is False
    assert should_scan(group("runtimeClasspath"), policy) is True


def test_scan_list_restricts_groups():
    policy = Policy(scan_configurations={"runtimeClasspath"})

    assert should_scan(group("runtimeClasspath"), policy) is True
    assert should_scan(group("compileClasspath"), policy) is False


def test_test_exclusion_overrides_scan_list():
    """A listed test group is still skipped when test groups are skipped."""
    policy = Policy(scan_configurations={"testRuntimeClasspath"}, skip_test_groups=True)

    assert should_scan(group("testRuntimeClasspath"), policy) is False


def test_classifier_ignores_resolvability():
    """Resolvability is checked by the collector, not by should_scan."""
    g = ConfigurationGroup(name="api", hierarchy=("api",), can_be_resolved=False)

    assert should_scan(g, Policy()) is True
