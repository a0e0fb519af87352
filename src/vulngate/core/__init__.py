"""Core scan policy, settings, scope and evaluation logic.

Provides:
- Policy and engine option models
- Settings translation for dependency-check (SettingsStore)
- Dependency group classification (scan/skip/test rules)
- Dependency enrichment with build coordinates
- Result summary and CVSS threshold enforcement
"""

from .classifier import ConfigurationGroup, is_test_group, should_scan
from .config import AppConfig, Policy, ReportFormat, load_config
from .enrichment import enrich_dependencies
from .evaluation import Summary, evaluate_threshold, summarize
from .exceptions import (
    AnalysisError,
    ConfigError,
    EngineInitError,
    ExceptionCollection,
    ReportError,
    ScanFailure,
    ThresholdViolation,
    VulngateError,
)
from .models import ArtifactCoordinates, Confidence, Dependency, Evidence, Identifier, Vulnerability
from .settings import SettingKey, SettingsStore, translate_policy

__all__ = [
    "ConfigurationGroup",
    "is_test_group",
    "should_scan",
    "AppConfig",
    "Policy",
    "ReportFormat",
    "load_config",
    "enrich_dependencies",
    "Summary",
    "evaluate_threshold",
    "summarize",
    "AnalysisError",
    "ConfigError",
    "EngineInitError",
    "ExceptionCollection",
    "ReportError",
    "ScanFailure",
    "ThresholdViolation",
    "VulngateError",
    "ArtifactCoordinates",
    "Confidence",
    "Dependency",
    "Evidence",
    "Identifier",
    "Vulnerability",
    "SettingKey",
    "SettingsStore",
    "translate_policy",
]
