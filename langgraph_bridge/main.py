"""
LangGraph Bridge - Main Application Entry Point

This module provides the FastAPI application exposing the session bridge.
The lifespan builds the LangGraph client and SessionOrchestrator from
settings, starts the cleanup worker and expiry reaper, and stops them on
shutdown.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI

from langgraph_bridge import __version__
from langgraph_bridge.api.routes.conversations import router as conversations_router
from langgraph_bridge.api.routes.health import router as health_router
from langgraph_bridge.api.routes.sessions import router as sessions_router
from langgraph_bridge.core.config import Settings, get_settings
from langgraph_bridge.observability.logging import configure_logging, get_logger
from langgraph_bridge.observability.metrics import get_metrics_app
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator

APP_NAME = "LangGraph Bridge"
APP_DESCRIPTION = "Maps conversations to remote LangGraph sessions"

SHUTDOWN_DRAIN_TIMEOUT_SECONDS = 10.0

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[SessionOrchestrator] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (default: get_settings() at startup)
        orchestrator: Pre-built orchestrator (for testing); built from
                      settings at startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        resolved = settings or get_settings()
        configure_logging(level=resolved.log_level, force=True, service_name=resolved.service_name)

        if orchestrator is not None:
            app.state.orchestrator = orchestrator
        else:
            app.state.orchestrator = SessionOrchestrator.from_settings(resolved)
        app.state.orchestrator.start()
        app.state.environment = resolved.environment
        app.state.settings = resolved
        logger.info(
            "service starting",
            service=resolved.service_name,
            version=__version__,
            environment=resolved.environment,
            langgraph_base_url=resolved.langgraph_base_url,
        )

        yield

        logger.info("service shutting down", service=resolved.service_name)
        await app.state.orchestrator.close(drain_timeout=SHUTDOWN_DRAIN_TIMEOUT_SECONDS)
        app.state.orchestrator = None

    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(health_router)
    app.include_router(conversations_router)
    app.include_router(sessions_router)
    app.mount("/metrics", get_metrics_app())

    @app.get("/", tags=["Info"])
    async def root() -> dict[str, Any]:
        """Root endpoint returning basic service information."""
        return {"service": APP_NAME, "version": __version__}

    return app


app = create_app()
