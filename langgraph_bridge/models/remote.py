"""
Remote API Models - LangGraph session API wire format

This module contains the request and response bodies exchanged with the
remote LangGraph API. Required fields carry no defaults so that a body
missing any of them fails validation instead of producing a partial result.

Reference Documents:
- GUIDELINES pp. 276: Domain modeling with Pydantic
- Sinha pp. 193-195: Pydantic for validation at API boundaries

Endpoints:
- POST   /api/v1/sessions/               -> SessionCreated
- POST   /api/v1/chat/{session_id}/query -> QueryResult
- GET    /api/v1/chat/{session_id}/history -> SessionHistory
- DELETE /api/v1/sessions/{session_id}   -> SessionEnded
- non-2xx responses                      -> ErrorBody (best-effort)
"""

from typing import Optional

from pydantic import BaseModel, Field


# =============================================================================
# Request Models
# =============================================================================


class QueryRequest(BaseModel):
    """Body of a query sent to a remote session."""

    query: str = Field(..., description="User query text")


# =============================================================================
# Response Models
# =============================================================================


class SessionCreated(BaseModel):
    """
    Response to session creation.

    Attributes:
        session_id: Opaque remote session identifier
        created_at: Creation time as a Unix timestamp
        message_count: Number of messages in the new session
    """

    session_id: str = Field(..., min_length=1, description="Remote session identifier")
    created_at: float = Field(..., description="Creation time (Unix seconds)")
    message_count: int = Field(..., ge=0, description="Messages in session")


class QueryResult(BaseModel):
    """
    Response to a query.

    Attributes:
        session_id: Remote session the query ran in
        query: The query as received by the backend
        response: Assistant response text
        message_count: Updated message count
        processing_time: Backend processing time in seconds
        timestamp: Response time as a Unix timestamp
    """

    session_id: str = Field(..., description="Remote session identifier")
    query: str = Field(..., description="Echoed query")
    response: str = Field(..., description="Response text")
    message_count: int = Field(..., ge=0, description="Messages in session")
    processing_time: float = Field(..., ge=0.0, description="Processing time (seconds)")
    timestamp: float = Field(..., description="Response time (Unix seconds)")


class ConversationMessage(BaseModel):
    """A single entry of a remote session's conversation history."""

    role: str = Field(..., description="Message role (user/assistant)")
    content: str = Field(..., description="Message content")
    timestamp: float = Field(..., description="Message time (Unix seconds)")


class SessionHistory(BaseModel):
    """
    Conversation history of a remote session.

    The order of conversation_history is the backend's chronological order,
    preserved verbatim.
    """

    session_id: str = Field(..., description="Remote session identifier")
    created_at: float = Field(..., description="Creation time (Unix seconds)")
    last_activity: float = Field(..., description="Last activity (Unix seconds)")
    message_count: int = Field(..., ge=0, description="Messages in session")
    conversation_history: list[ConversationMessage] = Field(
        ..., description="Chronological message history"
    )


class SessionEnded(BaseModel):
    """Response to session termination."""

    session_id: str = Field(..., description="Remote session identifier")
    success: bool = Field(..., description="Whether the session was ended")
    message: str = Field(..., description="Human-readable outcome")


class ErrorBody(BaseModel):
    """
    Structured error body returned with non-2xx responses.

    Parsed best-effort for diagnostic logging only.
    """

    error: Optional[str] = Field(default=None, description="Error code")
    detail: Optional[str] = Field(default=None, description="Error detail")
    timestamp: Optional[float] = Field(default=None, description="Error time")
