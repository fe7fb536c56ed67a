"""Session Orchestrator - lifecycle facade over store, client, cleanup and reaper.

The orchestrator adds no session policy of its own. It wires the
SessionStore, CleanupWorker and ExpiryReaper around one LangGraphClient,
threads the caller's deadline through to every remote call, and owns the
start/stop lifecycle of the background parts.
"""

from typing import Any, Optional

from langgraph_bridge.clients.langgraph import LangGraphClient
from langgraph_bridge.core.config import Settings, get_settings
from langgraph_bridge.core.exceptions import ServiceUnavailableError
from langgraph_bridge.models.remote import QueryResult, SessionHistory
from langgraph_bridge.observability.logging import get_logger
from langgraph_bridge.sessions.cleanup import CleanupWorker
from langgraph_bridge.sessions.reaper import ExpiryReaper
from langgraph_bridge.sessions.store import SessionStore

logger = get_logger(__name__)


class SessionOrchestrator:
    """Entry point used by turn handlers.

    Args:
        client: LangGraph client shared by all components
        settings: Application settings. Defaults to get_settings().
        store: Pre-built store (for testing)
        cleanup: Pre-built cleanup worker (for testing)
        reaper: Pre-built reaper (for testing)
        owns_client: Close the client on close()
    """

    def __init__(
        self,
        client: LangGraphClient,
        settings: Optional[Settings] = None,
        store: Optional[SessionStore] = None,
        cleanup: Optional[CleanupWorker] = None,
        reaper: Optional[ExpiryReaper] = None,
        owns_client: bool = False,
    ) -> None:
        settings = settings or get_settings()
        self._client = client
        self._owns_client = owns_client
        self._cleanup = cleanup or CleanupWorker(
            client, timeout_seconds=settings.cleanup_timeout_seconds
        )
        self._store = store or SessionStore(
            client,
            self._cleanup,
            session_timeout_seconds=settings.session_timeout_seconds,
        )
        self._reaper = reaper or ExpiryReaper(
            self._store.sweep, interval_seconds=settings.sweep_interval_seconds
        )
        self._started = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionOrchestrator":
        """Build an orchestrator that owns a client configured from settings."""
        return cls(LangGraphClient.from_settings(settings), settings=settings, owns_client=True)

    @property
    def client(self) -> LangGraphClient:
        return self._client

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def cleanup(self) -> CleanupWorker:
        return self._cleanup

    @property
    def reaper(self) -> ExpiryReaper:
        return self._reaper

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start the cleanup worker and the expiry reaper."""
        if self._started:
            return
        self._cleanup.start()
        self._reaper.start()
        self._started = True
        logger.info(
            "session orchestrator started",
            session_timeout_seconds=self._store.session_timeout.total_seconds(),
            sweep_interval_seconds=self._reaper.interval_seconds,
        )

    async def close(self, drain_timeout: Optional[float] = None) -> None:
        """Stop the reaper, drain pending terminations, and close an owned client."""
        await self._reaper.stop()
        unfinished = await self._store.wait_for_terminations(drain_timeout)
        if unfinished:
            logger.warning("conversation terminations still running at close", pending=unfinished)
        await self._cleanup.stop(drain=True, drain_timeout=drain_timeout)
        if self._owns_client:
            await self._client.close()
        self._started = False
        logger.info("session orchestrator stopped")

    async def __aenter__(self) -> "SessionOrchestrator":
        self.start()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # =========================================================================
    # Operations
    # =========================================================================

    async def get_or_create_session(
        self,
        conversation_id: str,
        user_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Return the remote session id for a conversation/user pair."""
        return await self._store.get_or_create(conversation_id, user_id, timeout=timeout)

    async def send_query(
        self,
        session_id: str,
        text: str,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """Send a query to a remote session."""
        return await self._client.send_query(session_id, text, timeout=timeout)

    async def get_history(
        self,
        session_id: str,
        timeout: Optional[float] = None,
    ) -> SessionHistory:
        """Fetch a remote session's conversation history."""
        return await self._client.get_history(session_id, timeout=timeout)

    async def end_conversation(
        self,
        conversation_id: str,
        timeout: Optional[float] = None,
    ) -> int:
        """End every session of a conversation. Returns the number removed."""
        return await self._store.end_conversation(conversation_id, timeout=timeout)

    async def expire_sessions(self) -> int:
        """Run a sweep now. Returns 0 if one was already in progress."""
        removed = await self._reaper.run_once()
        return removed or 0

    def active_session_count(self) -> int:
        return self._store.count()

    async def is_healthy(self, timeout: Optional[float] = None) -> bool:
        return await self._client.is_healthy(timeout=timeout)

    async def require_healthy(self, timeout: Optional[float] = None) -> None:
        """
        Raise ServiceUnavailableError when the backend probe is unhealthy,
        letting callers take a degraded path before creating a session.
        """
        if not await self._client.is_healthy(timeout=timeout):
            raise ServiceUnavailableError("LangGraph service is unhealthy")
