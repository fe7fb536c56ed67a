"""
Clients Package - remote LangGraph API access.

This package provides the pooled HTTP client factory and the LangGraph
session client built on it.

Reference Documents:
- GUIDELINES pp. 2309: Connection pooling per downstream service
- GUIDELINES pp. 2145: Graceful degradation
"""

from langgraph_bridge.clients.http import (
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_MAX_KEEPALIVE,
    DEFAULT_TIMEOUT_SECONDS,
    create_http_client,
)
from langgraph_bridge.clients.langgraph import LangGraphClient

__all__ = [
    # HTTP Client Factory
    "create_http_client",
    "DEFAULT_MAX_CONNECTIONS",
    "DEFAULT_MAX_KEEPALIVE",
    "DEFAULT_TIMEOUT_SECONDS",
    # LangGraph Client
    "LangGraphClient",
]
