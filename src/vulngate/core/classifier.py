"""Scope rules for dependency groups.

Decides whether a dependency group (a Gradle-style configuration) is a test
group and whether it falls within the scan policy. Resolvability is the
collector's concern and is not checked here.

Provides:
- ConfigurationGroup: Named group with its ancestor hierarchy
- is_test_group: Test-group detection over the whole hierarchy
- should_scan: Scan decision under a policy
"""

from pydantic import BaseModel, ConfigDict, Field
import structlog

from vulngate.core.config import Policy

logger = structlog.get_logger()

TEST_GROUP_PREFIXES = ("test", "androidTest")
TEST_GROUP_ANCESTORS = frozenset({"testCompile", "androidTestCompile"})


class ConfigurationGroup(BaseModel):
    """Dependency group as exposed by the host build.

    Attributes:
        name: Group name (e.g. "runtimeClasspath")
        hierarchy: The group and all of its ancestors, in host order
        can_be_resolved: Resolvability flag; None on hosts that predate it
    """

    model_config = ConfigDict(frozen=True)

    name: str
    hierarchy: tuple[str, ...] = Field(default_factory=tuple)
    can_be_resolved: bool | None = None


def is_test_group(group: ConfigurationGroup) -> bool:
    """Check whether a group holds test dependencies.

    A group is a test group if its name starts with "test" or "androidTest",
    or if any entry of its hierarchy is named "testCompile" or
    "androidTestCompile".
    """
    result = group.name.startswith(TEST_GROUP_PREFIXES) or any(
        ancestor in TEST_GROUP_ANCESTORS for ancestor in group.hierarchy
    )
    logger.debug(
        "test_group_check",
        hierarchy=" --> ".join(group.hierarchy or (group.name,)),
        is_test_group=result,
    )
    return result


def should_scan(group: ConfigurationGroup, policy: Policy) -> bool:
    """Decide whether a group is in scope for the scan.

    Skip-list membership and test-group exclusion take precedence over the
    allow-list.

    Args:
        group: Group to classify (assumed resolvable)
        policy: Active scan policy

    Returns:
        True if the group's artifacts should be analyzed
    """
    skip = group.name in policy.skip_configurations or (
        policy.skip_test_groups and is_test_group(group)
    )
    if skip:
        return False
    return not policy.scan_configurations or group.name in policy.scan_configurations
