"""
Conversations Router - turn and end-of-conversation endpoints.

Endpoints:
- POST   /v1/conversations/{conversation_id}/turns
- DELETE /v1/conversations/{conversation_id}

Turns always answer 200 with a TurnReply; degraded outcomes (fallback,
error, ignored) are carried in TurnReply.kind rather than as HTTP errors.
"""

from fastapi import APIRouter, Depends

from langgraph_bridge.api.deps import get_turn_service
from langgraph_bridge.models.api import ConversationEndResponse, TurnReply, TurnRequest
from langgraph_bridge.services.turns import TurnService

router = APIRouter(
    prefix="/v1/conversations",
    tags=["Conversations"],
)


@router.post(
    "/{conversation_id}/turns",
    response_model=TurnReply,
    summary="Process one user message",
)
async def post_turn(
    conversation_id: str,
    request: TurnRequest,
    service: TurnService = Depends(get_turn_service),
) -> TurnReply:
    return await service.handle_turn(conversation_id, request.user_id, request.text)


@router.delete(
    "/{conversation_id}",
    response_model=ConversationEndResponse,
    summary="End a conversation and its remote sessions",
)
async def end_conversation(
    conversation_id: str,
    service: TurnService = Depends(get_turn_service),
) -> ConversationEndResponse:
    ended = await service.end_conversation(conversation_id)
    return ConversationEndResponse(conversation_id=conversation_id, sessions_ended=ended)
