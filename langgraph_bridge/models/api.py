"""
API Models - request and response bodies of the bridge's HTTP surface.

Reference Documents:
- Sinha pp. 193-195: Pydantic for validation at API boundaries
- ANTI_PATTERN_ANALYSIS §1.1: Optional types with explicit None
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Turns
# =============================================================================


class TurnRequest(BaseModel):
    """One user message within a conversation."""

    user_id: Optional[str] = Field(default=None, description="Sender identifier")
    text: str = Field(..., description="Extracted user text")


TurnKind = Literal["answer", "fallback", "error", "ignored"]


class TurnReply(BaseModel):
    """
    Outcome of processing one turn.

    Attributes:
        kind: answer (backend responded), fallback (backend unhealthy, canned
              reply), error (remote call failed), ignored (blank input)
        text: Reply text to send back to the user (None when ignored)
        session_id: Remote session used for the turn, if any
        message_count: Remote message count after the turn, if known
        processing_time: Remote processing time in seconds, if known
    """

    kind: TurnKind = Field(..., description="Reply kind")
    text: Optional[str] = Field(default=None, description="Reply text")
    session_id: Optional[str] = Field(default=None, description="Remote session id")
    message_count: Optional[int] = Field(default=None, description="Remote message count")
    processing_time: Optional[float] = Field(
        default=None, description="Remote processing time (seconds)"
    )


# =============================================================================
# Conversations & Sessions
# =============================================================================


class ConversationEndResponse(BaseModel):
    """Result of ending a conversation."""

    conversation_id: str
    sessions_ended: int


class ExpireResponse(BaseModel):
    """Result of a manual expiry sweep."""

    expired: int


class SessionCountResponse(BaseModel):
    """Number of live session handles."""

    active_sessions: int


# =============================================================================
# Health
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    active_sessions: int


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    checks: dict[str, bool]
