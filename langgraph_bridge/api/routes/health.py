"""
Health Router - liveness and readiness endpoints.

Liveness reports the process and its live session count. Readiness probes
the remote LangGraph API and answers 503 when it is unhealthy.

Reference Documents:
- Building Microservices (Newman) pp. 273-275: Service metrics and synthetic monitoring
- Building Python Microservices with FastAPI (Sinha) pp. 89-91: Dependency injection patterns
"""

import logging
import os

from fastapi import APIRouter, Depends, Response, status

from langgraph_bridge.api.deps import get_orchestrator
from langgraph_bridge.models.api import HealthResponse, ReadinessResponse
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)

APP_VERSION = os.getenv("LANGGRAPH_BRIDGE_VERSION", "1.0.0")
READINESS_PROBE_TIMEOUT_SECONDS = 5.0

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health(
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(
        status="healthy",
        version=APP_VERSION,
        active_sessions=orchestrator.active_session_count(),
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> ReadinessResponse:
    """
    Readiness probe.

    Returns 200 when the LangGraph API is healthy, 503 otherwise.
    """
    langgraph_ok = await orchestrator.is_healthy(timeout=READINESS_PROBE_TIMEOUT_SECONDS)
    if not langgraph_ok:
        logger.warning("Readiness check failed: LangGraph API unhealthy")
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return ReadinessResponse(status="not_ready", checks={"langgraph": False})

    return ReadinessResponse(status="ready", checks={"langgraph": True})
