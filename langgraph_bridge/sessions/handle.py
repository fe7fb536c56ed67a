"""
Session Handle - local record of one conversation-to-remote-session mapping.

Pattern: Domain models as value objects (Percival & Gregory pp. 59-65)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

ANONYMOUS_USER = "anonymous"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Default clock: timezone-aware UTC now."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LocalKey:
    """
    Identity of one local conversational thread.

    Attributes:
        conversation_id: Conversation identifier from the channel
        user_id: User identifier, or "anonymous" when the channel has none
    """

    conversation_id: str
    user_id: str = ANONYMOUS_USER

    @classmethod
    def of(cls, conversation_id: str, user_id: Optional[str] = None) -> "LocalKey":
        """Build a key, substituting the anonymous sentinel for a blank user id."""
        if user_id is None or not user_id.strip():
            user_id = ANONYMOUS_USER
        return cls(conversation_id=conversation_id, user_id=user_id)

    def __str__(self) -> str:
        return f"{self.conversation_id}:{self.user_id}"


@dataclass
class SessionHandle:
    """
    Mapping of a local key to a remote LangGraph session.

    remote_session_id is fixed at construction. last_activity only moves
    forward; mutate it through touch() while holding the owning map's lock.
    """

    local_key: LocalKey
    remote_session_id: str
    created_at: datetime
    last_activity: datetime = field(default=None)  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.last_activity is None:
            self.last_activity = self.created_at

    def __setattr__(self, name: str, value: object) -> None:
        if name == "remote_session_id" and "remote_session_id" in self.__dict__:
            raise AttributeError("remote_session_id is immutable once assigned")
        super().__setattr__(name, value)

    def is_expired(self, now: datetime, timeout: timedelta) -> bool:
        """A handle is expired iff it has been idle for longer than timeout."""
        return now - self.last_activity > timeout

    def touch(self, now: datetime) -> None:
        """Record activity at now; never moves last_activity backwards."""
        if now > self.last_activity:
            self.last_activity = now
