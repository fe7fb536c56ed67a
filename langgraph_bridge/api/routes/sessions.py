"""
Sessions Router - operational endpoints over live session handles.

Endpoints:
- GET  /v1/sessions/count  - live handle count
- POST /v1/sessions/expire - run an expiry sweep now
"""

from fastapi import APIRouter, Depends

from langgraph_bridge.api.deps import get_orchestrator
from langgraph_bridge.models.api import ExpireResponse, SessionCountResponse
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator

router = APIRouter(
    prefix="/v1/sessions",
    tags=["Sessions"],
)


@router.get("/count", response_model=SessionCountResponse)
async def session_count(
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> SessionCountResponse:
    return SessionCountResponse(active_sessions=orchestrator.active_session_count())


@router.post("/expire", response_model=ExpireResponse)
async def expire_sessions(
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
) -> ExpireResponse:
    return ExpireResponse(expired=await orchestrator.expire_sessions())
