"""API Package - FastAPI routes and dependencies.

Components:
- routes: API endpoint routers (health, conversations, sessions)
- deps: FastAPI dependency injection functions

Note: Import routers directly from langgraph_bridge.api.routes to avoid circular imports.
"""

__all__ = ["routes", "deps"]
