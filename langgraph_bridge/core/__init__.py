"""
Core module for LangGraph Bridge.

This module contains configuration and the error taxonomy.
"""

from langgraph_bridge.core.config import Settings, get_settings
from langgraph_bridge.core.exceptions import (
    BridgeError,
    BridgeValidationError,
    DecodeError,
    ErrorCode,
    RemoteCallCancelled,
    RemoteError,
    ServiceUnavailableError,
    TransportError,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "BridgeError",
    "BridgeValidationError",
    "RemoteError",
    "TransportError",
    "DecodeError",
    "RemoteCallCancelled",
    "ServiceUnavailableError",
]
