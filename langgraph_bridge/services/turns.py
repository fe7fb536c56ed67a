"""
Turn Service - processing of one conversational turn against LangGraph.

Flow per turn:
1. Blank text is ignored.
2. Unhealthy backend: reply with a canned fallback, no session is created.
3. Otherwise get-or-create the conversation's session and send the query.
4. Remote failures, running out of the turn deadline included, degrade to an
   apology reply instead of ending the turn with an exception.

Pattern: Graceful degradation (Building Microservices p. 274)
"""

import asyncio
from typing import Optional

from langgraph_bridge.core.exceptions import (
    BridgeValidationError,
    RemoteCallCancelled,
    RemoteError,
    ServiceUnavailableError,
)
from langgraph_bridge.models.api import TurnReply
from langgraph_bridge.observability.logging import correlation_id_context, get_logger
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator

logger = get_logger(__name__)

FALLBACK_TEMPLATE = (
    "I'm currently experiencing technical difficulties with my AI backend. "
    "However, I can still provide a simple response: You said '{text}'. "
    "Please try again in a few moments for more intelligent responses."
)
BACKEND_DOWN_MESSAGE = (
    "Sorry, my AI backend is not responding right now. Please try again shortly."
)
INVALID_REQUEST_MESSAGE = "Sorry, I couldn't process that message."


def _remaining(expires_at: Optional[float], operation: str) -> Optional[float]:
    """Seconds left on the turn deadline, or None when the turn has none."""
    if expires_at is None:
        return None
    remaining = expires_at - asyncio.get_running_loop().time()
    if remaining <= 0:
        raise RemoteCallCancelled("turn deadline exceeded", operation=operation)
    return remaining


class TurnService:
    """
    Caller-facing turn handler built on the SessionOrchestrator.

    Args:
        orchestrator: Session orchestrator of the running application
        turn_timeout_seconds: Default deadline for a whole turn (None: no limit)
    """

    def __init__(
        self,
        orchestrator: SessionOrchestrator,
        turn_timeout_seconds: Optional[float] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._turn_timeout_seconds = turn_timeout_seconds

    async def handle_turn(
        self,
        conversation_id: str,
        user_id: Optional[str],
        text: str,
        timeout: Optional[float] = None,
    ) -> TurnReply:
        """
        Answer one user message.

        The health check, session lookup and query share one deadline; each
        remote call gets whatever time the previous ones left over.

        Args:
            conversation_id: Conversation the message belongs to
            user_id: Sender; blank maps to the anonymous user
            text: Extracted user text
            timeout: Deadline in seconds for the whole turn
                     (default: the service's turn timeout)

        Returns:
            TurnReply describing the answer or the degraded outcome
        """
        if timeout is None:
            timeout = self._turn_timeout_seconds
        expires_at = None if timeout is None else asyncio.get_running_loop().time() + timeout

        text = (text or "").strip()
        with correlation_id_context(conversation_id):
            if not text:
                logger.warning("received empty message", user_id=user_id)
                return TurnReply(kind="ignored")

            try:
                await self._orchestrator.require_healthy(
                    timeout=_remaining(expires_at, "health_check")
                )
                session_id = await self._orchestrator.get_or_create_session(
                    conversation_id, user_id, timeout=_remaining(expires_at, "create_session")
                )
                result = await self._orchestrator.send_query(
                    session_id, text, timeout=_remaining(expires_at, "send_query")
                )
            except ServiceUnavailableError:
                logger.warning("langgraph service is unhealthy, providing fallback response")
                return TurnReply(kind="fallback", text=FALLBACK_TEMPLATE.format(text=text))
            except RemoteError as e:
                logger.error(
                    "langgraph service error",
                    user_id=user_id,
                    operation=e.operation,
                    error=e.message,
                )
                return TurnReply(kind="error", text=BACKEND_DOWN_MESSAGE)
            except BridgeValidationError as e:
                logger.error("invalid turn", user_id=user_id, field=e.field, error=e.message)
                return TurnReply(kind="error", text=INVALID_REQUEST_MESSAGE)

            logger.info("processed turn", user_id=user_id, session_id=session_id)
            return TurnReply(
                kind="answer",
                text=result.response,
                session_id=session_id,
                message_count=result.message_count,
                processing_time=result.processing_time,
            )

    async def end_conversation(
        self,
        conversation_id: str,
        timeout: Optional[float] = None,
    ) -> int:
        """End a conversation's sessions; failures are logged, never raised."""
        with correlation_id_context(conversation_id):
            logger.info("ending conversation")
            return await self._orchestrator.end_conversation(conversation_id, timeout=timeout)
