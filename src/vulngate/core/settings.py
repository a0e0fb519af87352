"""Translation of a scan policy into dependency-check engine settings.

Only options the policy explicitly supplies are written to the store; anything
left unset keeps the engine's own default.

Provides:
- SettingKey: Property names understood by dependency-check
- SettingsStore: Typed settings consumed by the engine
- determine_suppressions: Merge the single and multiple suppression file options
- translate_policy: Validate a Policy and build its SettingsStore
"""

import os
import tempfile
from enum import Enum
from pathlib import Path

import structlog

from vulngate.core.config import Policy
from vulngate.core.exceptions import ConfigError

logger = structlog.get_logger()

SettingValue = bool | str | int | list[str]


class SettingKey(str, Enum):
    """dependency-check property names."""

    AUTO_UPDATE = "odc.autoupdate"
    SUPPRESSION_FILE = "suppression.file"
    HINTS_FILE = "hints.file"

    PROXY_SERVER = "proxy.server"
    PROXY_PORT = "proxy.port"
    PROXY_USERNAME = "proxy.username"
    PROXY_PASSWORD = "proxy.password"

    DATA_DIRECTORY = "data.directory"
    DB_DRIVER_NAME = "data.driver_name"
    DB_DRIVER_PATH = "data.driver_path"
    DB_CONNECTION_STRING = "data.connection_string"
    DB_USER = "data.user"
    DB_PASSWORD = "data.password"

    CVE_MODIFIED_12_URL = "cve.url-1.2.modified"
    CVE_MODIFIED_20_URL = "cve.url-2.0.modified"
    CVE_SCHEMA_1_2 = "cve.url-1.2.base"
    CVE_SCHEMA_2_0 = "cve.url-2.0.base"
    DOWNLOADER_QUICK_QUERY_TIMESTAMP = "odc.downloader.quick.query.timestamp"
    CVE_CHECK_VALID_FOR_HOURS = "cve.check.validforhours"

    ANALYZER_JAR_ENABLED = "analyzer.jar.enabled"
    ANALYZER_NUSPEC_ENABLED = "analyzer.nuspec.enabled"
    ANALYZER_CENTRAL_ENABLED = "analyzer.central.enabled"
    ANALYZER_NEXUS_ENABLED = "analyzer.nexus.enabled"
    ANALYZER_NEXUS_URL = "analyzer.nexus.url"
    ANALYZER_NEXUS_USES_PROXY = "analyzer.nexus.proxy"
    ANALYZER_EXPERIMENTAL_ENABLED = "analyzer.experimental.enabled"
    ANALYZER_ARCHIVE_ENABLED = "analyzer.archive.enabled"
    ADDITIONAL_ZIP_EXTENSIONS = "extensions.zip"
    ANALYZER_ASSEMBLY_ENABLED = "analyzer.assembly.enabled"
    ANALYZER_ASSEMBLY_MONO_PATH = "analyzer.assembly.mono.path"
    ANALYZER_COCOAPODS_ENABLED = "analyzer.cocoapods.enabled"
    ANALYZER_SWIFT_PACKAGE_MANAGER_ENABLED = "analyzer.swift.package.manager.enabled"
    ANALYZER_BUNDLE_AUDIT_ENABLED = "analyzer.bundle.audit.enabled"
    ANALYZER_BUNDLE_AUDIT_PATH = "analyzer.bundle.audit.path"
    ANALYZER_PYTHON_DISTRIBUTION_ENABLED = "analyzer.python.distribution.enabled"
    ANALYZER_PYTHON_PACKAGE_ENABLED = "analyzer.python.package.enabled"
    ANALYZER_RUBY_GEMSPEC_ENABLED = "analyzer.ruby.gemspec.enabled"
    ANALYZER_OPENSSL_ENABLED = "analyzer.openssl.enabled"
    ANALYZER_CMAKE_ENABLED = "analyzer.cmake.enabled"
    ANALYZER_AUTOCONF_ENABLED = "analyzer.autoconf.enabled"
    ANALYZER_COMPOSER_LOCK_ENABLED = "analyzer.composer.lock.enabled"
    ANALYZER_NODE_PACKAGE_ENABLED = "analyzer.node.package.enabled"
    ANALYZER_NSP_PACKAGE_ENABLED = "analyzer.nsp.package.enabled"


class SettingsStore:
    """Typed settings handed to the engine.

    Owned by a single analysis run. ``cleanup()`` removes the properties file
    written by ``write_properties()``; it is safe to call more than once.
    """

    def __init__(self):
        self._values: dict[SettingKey, SettingValue] = {}
        self._properties_file: Path | None = None

    def __contains__(self, key: SettingKey) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: SettingKey, default: SettingValue | None = None) -> SettingValue | None:
        return self._values.get(key, default)

    def items(self) -> list[tuple[SettingKey, SettingValue]]:
        return list(self._values.items())

    def set_boolean_if_not_none(self, key: SettingKey, value: bool | None) -> None:
        if value is not None:
            self._values[key] = bool(value)

    def set_string_if_not_empty(self, key: SettingKey, value: str | None) -> None:
        if value:
            self._values[key] = value

    def set_array_if_not_empty(self, key: SettingKey, values: list[str] | None) -> None:
        present = [value for value in values or [] if value]
        if present:
            self._values[key] = present

    def set_int(self, key: SettingKey, value: int) -> None:
        self._values[key] = value

    def to_properties(self) -> str:
        """Render the settings in Java properties syntax.

        Arrays are comma-joined, booleans lower-cased.
        """
        lines = []
        for key, value in self._values.items():
            if isinstance(value, bool):
                rendered = "true" if value else "false"
            elif isinstance(value, list):
                rendered = ",".join(value)
            else:
                rendered = str(value)
            rendered = rendered.replace("\\", "\\\\").replace("\n", "\\n")
            lines.append(f"{key.value}={rendered}")
        return "\n".join(lines) + "\n"

    def write_properties(self, directory: str | None = None) -> Path:
        """Write the settings to a temporary properties file.

        Returns:
            Path of the written file (removed again by cleanup())
        """
        if self._properties_file is None:
            fd, name = tempfile.mkstemp(prefix="vulngate-", suffix=".properties", dir=directory)
            os.close(fd)
            self._properties_file = Path(name)
        self._properties_file.write_text(self.to_properties(), encoding="utf-8")
        return self._properties_file

    def cleanup(self) -> None:
        """Release the settings and delete temporary files."""
        if self._properties_file is not None:
            self._properties_file.unlink(missing_ok=True)
            self._properties_file = None
        self._values.clear()


def verify_policy(policy: Policy) -> None:
    """Check cross-field constraints of a policy.

    Raises:
        ConfigError: If both scan and skip lists are set, or
            cve_valid_for_hours is negative
    """
    if policy.scan_configurations and policy.skip_configurations:
        raise ConfigError(
            "you can only specify one of scan_configurations or skip_configurations"
        )
    if policy.cve_valid_for_hours is not None and policy.cve_valid_for_hours < 0:
        raise ConfigError("Invalid setting: `cve_valid_for_hours` must be 0 or greater")


def determine_suppressions(
    suppression_files: tuple[str, ...] | list[str], suppression_file: str | None
) -> list[str]:
    """Combine the suppression file list and the single suppression file.

    The single file is appended after the list entries. Neither input is
    modified.
    """
    merged = list(suppression_files)
    if suppression_file:
        merged.append(suppression_file)
    return merged


def translate_policy(policy: Policy) -> SettingsStore:
    """Build the engine settings for a policy.

    Args:
        policy: Validated scan policy

    Returns:
        SettingsStore holding only explicitly supplied options

    Raises:
        ConfigError: If the policy violates a cross-field constraint
    """
    verify_policy(policy)

    settings = SettingsStore()
    settings.set_boolean_if_not_none(SettingKey.AUTO_UPDATE, policy.auto_update)
    settings.set_array_if_not_empty(
        SettingKey.SUPPRESSION_FILE,
        determine_suppressions(policy.suppression_files, policy.suppression_file),
    )
    settings.set_string_if_not_empty(SettingKey.HINTS_FILE, policy.hints_file)

    proxy = policy.proxy
    settings.set_string_if_not_empty(SettingKey.PROXY_SERVER, proxy.server)
    if proxy.port is not None:
        settings.set_string_if_not_empty(SettingKey.PROXY_PORT, str(proxy.port))
    settings.set_string_if_not_empty(SettingKey.PROXY_USERNAME, proxy.username)
    settings.set_string_if_not_empty(SettingKey.PROXY_PASSWORD, proxy.password)

    data = policy.data
    settings.set_string_if_not_empty(SettingKey.DATA_DIRECTORY, data.directory)
    settings.set_string_if_not_empty(SettingKey.DB_DRIVER_NAME, data.driver)
    settings.set_string_if_not_empty(SettingKey.DB_DRIVER_PATH, data.driver_path)
    settings.set_string_if_not_empty(SettingKey.DB_CONNECTION_STRING, data.connection_string)
    settings.set_string_if_not_empty(SettingKey.DB_USER, data.username)
    settings.set_string_if_not_empty(SettingKey.DB_PASSWORD, data.password)

    cve = policy.cve
    settings.set_string_if_not_empty(SettingKey.CVE_MODIFIED_12_URL, cve.url12_modified)
    settings.set_string_if_not_empty(SettingKey.CVE_MODIFIED_20_URL, cve.url20_modified)
    settings.set_string_if_not_empty(SettingKey.CVE_SCHEMA_1_2, cve.url12_base)
    settings.set_string_if_not_empty(SettingKey.CVE_SCHEMA_2_0, cve.url20_base)
    settings.set_boolean_if_not_none(
        SettingKey.DOWNLOADER_QUICK_QUERY_TIMESTAMP, policy.quick_query_timestamp
    )
    if policy.cve_valid_for_hours is not None:
        settings.set_int(SettingKey.CVE_CHECK_VALID_FOR_HOURS, policy.cve_valid_for_hours)

    analyzers = policy.analyzers
    for key, value in (
        (SettingKey.ANALYZER_JAR_ENABLED, analyzers.jar_enabled),
        (SettingKey.ANALYZER_NUSPEC_ENABLED, analyzers.nuspec_enabled),
        (SettingKey.ANALYZER_CENTRAL_ENABLED, analyzers.central_enabled),
        (SettingKey.ANALYZER_NEXUS_ENABLED, analyzers.nexus_enabled),
        (SettingKey.ANALYZER_NEXUS_USES_PROXY, analyzers.nexus_uses_proxy),
        (SettingKey.ANALYZER_EXPERIMENTAL_ENABLED, analyzers.experimental_enabled),
        (SettingKey.ANALYZER_ARCHIVE_ENABLED, analyzers.archive_enabled),
        (SettingKey.ANALYZER_ASSEMBLY_ENABLED, analyzers.assembly_enabled),
        (SettingKey.ANALYZER_COCOAPODS_ENABLED, analyzers.cocoapods_enabled),
        (SettingKey.ANALYZER_SWIFT_PACKAGE_MANAGER_ENABLED, analyzers.swift_enabled),
        (SettingKey.ANALYZER_BUNDLE_AUDIT_ENABLED, analyzers.bundle_audit_enabled),
        (SettingKey.ANALYZER_PYTHON_DISTRIBUTION_ENABLED, analyzers.py_distribution_enabled),
        (SettingKey.ANALYZER_PYTHON_PACKAGE_ENABLED, analyzers.py_package_enabled),
        (SettingKey.ANALYZER_RUBY_GEMSPEC_ENABLED, analyzers.rubygems_enabled),
        (SettingKey.ANALYZER_OPENSSL_ENABLED, analyzers.openssl_enabled),
        (SettingKey.ANALYZER_CMAKE_ENABLED, analyzers.cmake_enabled),
        (SettingKey.ANALYZER_AUTOCONF_ENABLED, analyzers.autoconf_enabled),
        (SettingKey.ANALYZER_COMPOSER_LOCK_ENABLED, analyzers.composer_enabled),
        (SettingKey.ANALYZER_NODE_PACKAGE_ENABLED, analyzers.node_enabled),
        (SettingKey.ANALYZER_NSP_PACKAGE_ENABLED, analyzers.nsp_enabled),
    ):
        settings.set_boolean_if_not_none(key, value)

    for key, value in (
        (SettingKey.ANALYZER_NEXUS_URL, analyzers.nexus_url),
        (SettingKey.ADDITIONAL_ZIP_EXTENSIONS, analyzers.zip_extensions),
        (SettingKey.ANALYZER_ASSEMBLY_MONO_PATH, analyzers.path_to_mono),
        (SettingKey.ANALYZER_BUNDLE_AUDIT_PATH, analyzers.path_to_bundle_audit),
    ):
        settings.set_string_if_not_empty(key, value)

    logger.debug("settings_initialized", count=len(settings))
    return settings
