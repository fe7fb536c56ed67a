"""LangGraph Bridge - maps conversations to remote LangGraph sessions.

Note: Import `app` directly from `langgraph_bridge.main` to avoid circular imports.
"""

__version__ = "1.0.0"

__all__ = ["main", "api", "clients", "core", "models", "sessions", "services"]
