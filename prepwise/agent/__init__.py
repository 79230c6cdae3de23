"""
Session Agent Module

This module contains the call lifecycle components:
- Call status state machine and transcript accumulation
- Registry of live agents
"""

from .session_agent import SessionAgent, CallStatus, AgentType, SavedMessage
from .registry import CallRegistry

__all__ = [
    'SessionAgent',
    'CallStatus',
    'AgentType',
    'SavedMessage',
    'CallRegistry'
]
