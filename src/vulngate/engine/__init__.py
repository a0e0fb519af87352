"""Analysis engine integration.

Provides:
- Engine, EngineFactory and DependencyCollector protocols
- Launcher helpers shared by engine implementations
- DependencyCheckEngine wrapping the OWASP dependency-check CLI
"""

from .base import (
    DependencyCollector,
    Engine,
    EngineFactory,
    LauncherResult,
    find_launcher,
    run_launcher,
)
from .dependency_check import DependencyCheckEngine

__all__ = [
    "DependencyCollector",
    "Engine",
    "EngineFactory",
    "LauncherResult",
    "find_launcher",
    "run_launcher",
    "DependencyCheckEngine",
]
