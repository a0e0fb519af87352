"""Base agent with shared run identity and logging.

Provides:
- BaseAgent: Session ID management and a logger bound to it
"""

import structlog
from uuid import uuid4

logger = structlog.get_logger()


class BaseAgent:
    """Base agent for orchestrated runs.

    Provides common functionality for all agents:
    - Session ID management
    - Structured logging bound to the agent and session
    """

    def __init__(self, session_id: str | None = None):
        """Initialize base agent.

        Args:
            session_id: Optional session ID (generates new UUID if not provided)
        """
        self.session_id = session_id or str(uuid4())
        self.log = logger.bind(agent=self.__class__.__name__, session_id=self.session_id)
