import logging
import time
from threading import Lock
from typing import Dict, List, Optional

from prepwise.agent.session_agent import SessionAgent

logger = logging.getLogger(__name__)

class CallRegistry:
    """Thread-safe registry of live session agents."""

    def __init__(self, session_timeout: int = 3600):
        self.session_timeout = session_timeout
        self._agents: Dict[str, SessionAgent] = {}
        self._lock = Lock()

    def add(self, agent: SessionAgent) -> SessionAgent:
        self.prune()
        with self._lock:
            self._agents[agent.agent_id] = agent
        agent.attach()
        logger.info(f"Registered agent {agent.agent_id} for user {agent.user_id}")
        return agent

    def get(self, agent_id: str) -> Optional[SessionAgent]:
        with self._lock:
            return self._agents.get(agent_id)

    def find_by_call_id(self, call_id: str) -> Optional[SessionAgent]:
        with self._lock:
            for agent in self._agents.values():
                if agent.voice_client.call_id == call_id:
                    return agent
        return None

    def remove(self, agent_id: str) -> bool:
        with self._lock:
            agent = self._agents.pop(agent_id, None)
        if not agent:
            return False
        agent.detach()
        logger.info(f"Removed agent {agent_id}")
        return True

    def prune(self) -> List[str]:
        """Drop agents older than the session timeout."""
        cutoff = time.time() - self.session_timeout
        with self._lock:
            expired = [agent_id for agent_id, agent in self._agents.items() if agent.created_at < cutoff]
        for agent_id in expired:
            self.remove(agent_id)
        if expired:
            logger.info(f"Pruned {len(expired)} expired agents")
        return expired

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)
