"""
Sessions Package - mapping of local conversations to remote LangGraph sessions.

This package provides the session handle model, the concurrent handle map,
the session store, the best-effort cleanup worker, the expiry reaper and the
orchestrator that composes them.

Reference Documents:
- GUIDELINES pp. 949: Repository pattern for data access abstraction
- GUIDELINES pp. 2145: Graceful degradation
"""

from langgraph_bridge.sessions.cleanup import CleanupJob, CleanupWorker
from langgraph_bridge.sessions.handle import ANONYMOUS_USER, LocalKey, SessionHandle
from langgraph_bridge.sessions.handle_map import HandleMap, ShardedHandleMap
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator
from langgraph_bridge.sessions.reaper import ExpiryReaper
from langgraph_bridge.sessions.store import SessionStore

__all__ = [
    "ANONYMOUS_USER",
    "LocalKey",
    "SessionHandle",
    "HandleMap",
    "ShardedHandleMap",
    "CleanupJob",
    "CleanupWorker",
    "SessionStore",
    "ExpiryReaper",
    "SessionOrchestrator",
]
