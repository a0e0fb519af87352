"""Agent orchestration layer for dependency analysis runs.

Provides:
- BaseAgent with session identity and bound logging
- AnalyzeAgent driving the engine from settings to evaluation
- Phase, RunStatus and RunOutcome describing a run
"""

from .base import BaseAgent
from .analyze import AnalyzeAgent, Phase, RunOutcome, RunStatus

__all__ = ["BaseAgent", "AnalyzeAgent", "Phase", "RunOutcome", "RunStatus"]
