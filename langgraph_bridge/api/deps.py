"""
API Dependencies

This module provides FastAPI dependency injection functions for the API layer.

Reference Documents:
- GUIDELINES: Sinha pp. 89-91 (Dependency injection patterns)

Pattern: All dependencies are factory functions that can be overridden in
tests using FastAPI's dependency_overrides mechanism.
"""

from fastapi import HTTPException, Request, status

from langgraph_bridge.core.config import Settings, get_settings as _get_settings
from langgraph_bridge.services.turns import TurnService
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator


def get_settings() -> Settings:
    """Get application settings (singleton from core.config)."""
    return _get_settings()


def get_orchestrator(request: Request) -> SessionOrchestrator:
    """
    Get the SessionOrchestrator created during application startup.

    Raises:
        HTTPException: 503 if the application has not finished starting
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session orchestrator is not initialized",
        )
    return orchestrator


def get_turn_service(request: Request) -> TurnService:
    """
    Get a TurnService bound to the application's orchestrator.

    Turns get the deadline from the settings the application started with.
    """
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return TurnService(
        get_orchestrator(request), turn_timeout_seconds=settings.turn_timeout_seconds
    )


__all__ = [
    "get_settings",
    "get_orchestrator",
    "get_turn_service",
]
