"""Configuration for dependency analysis runs.

Two layers of configuration:
- Policy: the declarative scan policy of one build (what to scan, how to
  fail, which engine options to pass through). Loaded from a JSON file and
  never mutated after creation.
- AppConfig: process-level settings read from the environment (engine
  binary, subprocess timeout, logging).

Provides:
- ReportFormat: Report formats understood by the engine
- ProxyConfig, DataConfig, CveConfig, AnalyzerConfig: nested engine options
- Policy: Immutable scan policy
- AppConfig / load_config: Environment-driven application settings
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class ReportFormat(str, Enum):
    """Report formats accepted by dependency-check."""

    HTML = "HTML"
    XML = "XML"
    CSV = "CSV"
    JSON = "JSON"
    JUNIT = "JUNIT"
    SARIF = "SARIF"
    ALL = "ALL"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ProxyConfig(_Frozen):
    server: str | None = None
    port: int | None = None
    username: str | None = None
    password: str | None = None


class DataConfig(_Frozen):
    """Vulnerability data store location and credentials."""

    directory: str | None = None
    driver: str | None = None
    driver_path: str | None = None
    connection_string: str | None = None
    username: str | None = None
    password: str | None = None


class CveConfig(_Frozen):
    """CVE feed URLs for both NVD schema versions."""

    url12_modified: str | None = None
    url20_modified: str | None = None
    url12_base: str | None = None
    url20_base: str | None = None


class AnalyzerConfig(_Frozen):
    """Per-analyzer enable flags and auxiliary paths.

    ``None`` leaves the engine's own default in effect.
    """

    experimental_enabled: bool | None = None
    archive_enabled: bool | None = None
    zip_extensions: str | None = None
    jar_enabled: bool | None = None
    central_enabled: bool | None = None
    nexus_enabled: bool | None = None
    nexus_url: str | None = None
    nexus_uses_proxy: bool | None = None
    nuspec_enabled: bool | None = None
    assembly_enabled: bool | None = None
    path_to_mono: str | None = None
    cocoapods_enabled: bool | None = None
    swift_enabled: bool | None = None
    bundle_audit_enabled: bool | None = None
    path_to_bundle_audit: str | None = None
    py_distribution_enabled: bool | None = None
    py_package_enabled: bool | None = None
    rubygems_enabled: bool | None = None
    openssl_enabled: bool | None = None
    cmake_enabled: bool | None = None
    autoconf_enabled: bool | None = None
    composer_enabled: bool | None = None
    node_enabled: bool | None = None
    nsp_enabled: bool | None = None


class Policy(_Frozen):
    """Scan policy for one build.

    Attributes:
        scan_configurations: Allow-list of group names (empty = all groups)
        skip_configurations: Deny-list of group names
        skip_test_groups: Whether test groups are excluded from the scan
        fail_on_error: Whether tooling errors fail the run
        fail_build_on_cvss: CVSS threshold; values above 10 disable the gate
        show_summary: Whether to log the per-dependency summary block
        output_directory: Where the engine writes its reports
        format: Report format
        cve_valid_for_hours: Hours before the CVE data is refreshed (>= 0)
    """

    scan_configurations: frozenset[str] = frozenset()
    skip_configurations: frozenset[str] = frozenset()
    skip_test_groups: bool = True
    fail_on_error: bool = True
    fail_build_on_cvss: float = Field(default=11.0, ge=0)
    show_summary: bool = True
    output_directory: str = "build/reports"
    format: ReportFormat = ReportFormat.HTML

    auto_update: bool | None = None
    suppression_file: str | None = None
    suppression_files: tuple[str, ...] = ()
    hints_file: str | None = None
    quick_query_timestamp: bool | None = None
    cve_valid_for_hours: int | None = None

    proxy: ProxyConfig = Field(default_factory=ProxyConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    cve: CveConfig = Field(default_factory=CveConfig)
    analyzers: AnalyzerConfig = Field(default_factory=AnalyzerConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "Policy":
        """Load a policy from a JSON file."""
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


class AppConfig(BaseModel):
    """Application configuration loaded from the environment.

    Attributes:
        dependency_check_binary: dependency-check launcher (VULNGATE_DC_BINARY)
        dependency_check_timeout: Seconds allowed per engine invocation (VULNGATE_DC_TIMEOUT)
        log_level: Minimum log level (VULNGATE_LOG_LEVEL)
        log_format: "console" or "json" (VULNGATE_LOG_FORMAT)
    """

    dependency_check_binary: str = Field(
        default_factory=lambda: os.getenv("VULNGATE_DC_BINARY", "dependency-check.sh")
    )
    dependency_check_timeout: int = Field(
        default_factory=lambda: int(os.getenv("VULNGATE_DC_TIMEOUT", "3600"))
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("VULNGATE_LOG_LEVEL", "INFO").upper()
    )
    log_format: str = Field(
        default_factory=lambda: os.getenv("VULNGATE_LOG_FORMAT", "console").lower()
    )


def load_config() -> AppConfig:
    """Load application configuration from the environment.

    Returns:
        Populated AppConfig instance
    """
    return AppConfig()
