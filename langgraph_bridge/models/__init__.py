"""
Models Package - wire models for the remote LangGraph API and the bridge's
own HTTP surface.
"""

from langgraph_bridge.models.api import (
    ConversationEndResponse,
    ExpireResponse,
    HealthResponse,
    ReadinessResponse,
    SessionCountResponse,
    TurnReply,
    TurnRequest,
)
from langgraph_bridge.models.remote import (
    ConversationMessage,
    ErrorBody,
    QueryRequest,
    QueryResult,
    SessionCreated,
    SessionEnded,
    SessionHistory,
)

__all__ = [
    # Remote API
    "QueryRequest",
    "SessionCreated",
    "QueryResult",
    "ConversationMessage",
    "SessionHistory",
    "SessionEnded",
    "ErrorBody",
    # Bridge API
    "TurnRequest",
    "TurnReply",
    "ConversationEndResponse",
    "ExpireResponse",
    "SessionCountResponse",
    "HealthResponse",
    "ReadinessResponse",
]
