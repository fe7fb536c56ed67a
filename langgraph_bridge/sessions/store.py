"""
Session Store - maps local conversations to remote LangGraph sessions.

The store decides, per (conversation, user) key, whether to reuse the
current remote session, replace an expired one, or create a new one. Local
removal is synchronous and authoritative; remote termination of removed
sessions is best-effort. Expired and displaced sessions go to the
CleanupWorker; conversation ends run in a task the store keeps, which
outlives the caller.

Concurrency:
- A cache hit is a single atomic touch on the handle map and performs no I/O.
- The map is never locked across the remote create call.
- Two callers racing to create a session for the same key may both create
  one; the last insert wins and the displaced remote session is queued for
  cleanup.
- A failed or cancelled create leaves the map untouched.

Pattern: Repository pattern (Percival & Gregory pp. 86)
Pattern: Dependency injection for client and clock (Sinha pp. 89-90)
"""

import asyncio
from datetime import timedelta
from typing import AsyncIterator, Optional

from langgraph_bridge.clients.langgraph import LangGraphClient
from langgraph_bridge.core.exceptions import BridgeError, BridgeValidationError
from langgraph_bridge.observability.logging import get_logger
from langgraph_bridge.observability.metrics import record_session_event, set_active_sessions
from langgraph_bridge.sessions.cleanup import CleanupWorker
from langgraph_bridge.sessions.handle import Clock, LocalKey, SessionHandle, utcnow
from langgraph_bridge.sessions.handle_map import HandleMap, ShardedHandleMap

logger = get_logger(__name__)

DEFAULT_SESSION_TIMEOUT_SECONDS = 1800.0
DEFAULT_SCAN_BATCH_SIZE = 256


class SessionStore:
    """
    Store of live session handles keyed by (conversation, user).

    Args:
        client: LangGraph client used to create and end remote sessions
        cleanup: Worker receiving best-effort terminations
        session_timeout_seconds: Idle time after which a handle expires
        handle_map: Concurrent mapping implementation (default: sharded)
        clock: Source of timezone-aware "now" (default: UTC wall clock)
        scan_batch_size: Keys examined between event loop yields in full scans
    """

    def __init__(
        self,
        client: LangGraphClient,
        cleanup: CleanupWorker,
        session_timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS,
        handle_map: Optional[HandleMap] = None,
        clock: Optional[Clock] = None,
        scan_batch_size: int = DEFAULT_SCAN_BATCH_SIZE,
    ) -> None:
        if scan_batch_size < 1:
            raise ValueError("scan_batch_size must be at least 1")
        self._client = client
        self._cleanup = cleanup
        self._timeout = timedelta(seconds=session_timeout_seconds)
        self._handles: HandleMap = handle_map if handle_map is not None else ShardedHandleMap()
        self._clock: Clock = clock or utcnow
        self._scan_batch_size = scan_batch_size
        self._terminations: set[asyncio.Future[list[None]]] = set()

    @property
    def pending_terminations(self) -> int:
        """Remote terminations started by end_conversation still running."""
        return len(self._terminations)

    @property
    def session_timeout(self) -> timedelta:
        return self._timeout

    async def get_or_create(
        self,
        conversation_id: str,
        user_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """
        Return a reusable remote session id for (conversation_id, user_id).

        Args:
            conversation_id: Conversation identifier (non-empty)
            user_id: User identifier; blank maps to "anonymous"
            timeout: Caller deadline in seconds for a remote create

        Returns:
            The remote session id

        Raises:
            BridgeValidationError: If conversation_id is empty
            TransportError, DecodeError, RemoteCallCancelled: From session creation
        """
        if conversation_id is None or not conversation_id.strip():
            raise BridgeValidationError("conversation_id must not be empty", field="conversation_id")

        key = LocalKey.of(conversation_id, user_id)
        now = self._clock()

        handle = self._handles.touch_if(key, lambda h: not h.is_expired(now, self._timeout), now)
        if handle is not None:
            record_session_event("reused")
            logger.debug(
                "reusing langgraph session",
                session_id=handle.remote_session_id,
                conversation_id=conversation_id,
            )
            return handle.remote_session_id

        stale = self._handles.remove_if(key, lambda h: h.is_expired(now, self._timeout))
        if stale is not None:
            self._sync_gauge()
            record_session_event("expired")
            logger.info(
                "langgraph session expired, creating new one",
                session_id=stale.remote_session_id,
                conversation_id=conversation_id,
            )
            self._cleanup.submit(stale.remote_session_id, reason="expired")

        try:
            created = await self._client.create_session(timeout=timeout)
        except BridgeError as e:
            logger.error(
                "failed to create langgraph session",
                conversation_id=conversation_id,
                error=e.message,
            )
            raise

        created_at = self._clock()
        handle = SessionHandle(
            local_key=key,
            remote_session_id=created.session_id,
            created_at=created_at,
            last_activity=created_at,
        )
        displaced = self._handles.put(key, handle)
        self._sync_gauge()
        record_session_event("created")

        if displaced is not None and displaced.remote_session_id != handle.remote_session_id:
            record_session_event("displaced")
            logger.info(
                "concurrent session creation, keeping latest",
                session_id=handle.remote_session_id,
                displaced_session_id=displaced.remote_session_id,
                conversation_id=conversation_id,
            )
            self._cleanup.submit(displaced.remote_session_id, reason="displaced")

        logger.info(
            "created langgraph session for conversation",
            session_id=handle.remote_session_id,
            conversation_id=conversation_id,
        )
        return handle.remote_session_id

    async def end_conversation(
        self,
        conversation_id: str,
        timeout: Optional[float] = None,
    ) -> int:
        """
        Remove every handle of a conversation and end their remote sessions.

        Handles are removed before any remote call is made. Each remote
        termination runs with the cleanup timeout in a task of its own, so
        cancelling the caller, or the caller's deadline passing, stops the
        wait but not the terminations. Remote failures are logged per session
        and never abort the others or raise.

        Args:
            conversation_id: Conversation to end (all users)
            timeout: Seconds to wait for the remote terminations (None waits)

        Returns:
            Number of handles removed
        """
        if conversation_id is None or not conversation_id.strip():
            return 0

        removed: list[SessionHandle] = []
        async for key in self._scan_keys():
            if key.conversation_id != conversation_id:
                continue
            handle = self._handles.pop(key)
            if handle is not None:
                removed.append(handle)

        if not removed:
            return 0

        self._sync_gauge()
        record_session_event("ended", len(removed))

        terminations = asyncio.gather(
            *(self._end_remote(handle, conversation_id) for handle in removed)
        )
        self._terminations.add(terminations)
        terminations.add_done_callback(self._terminations.discard)
        try:
            await asyncio.wait_for(asyncio.shield(terminations), timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "ending langgraph sessions continues past caller deadline",
                conversation_id=conversation_id,
                session_count=len(removed),
                timeout_seconds=timeout,
            )
        except asyncio.CancelledError:
            logger.info(
                "caller cancelled, ending langgraph sessions in background",
                conversation_id=conversation_id,
                session_count=len(removed),
            )
            raise
        return len(removed)

    async def sweep(self) -> int:
        """
        Remove every expired handle and queue its remote termination.

        Re-checks expiry per key under that key's lock, so a handle reused
        during the sweep is kept. Yields to the event loop every
        ``scan_batch_size`` keys so turns keep flowing during a large sweep.

        Returns:
            Number of handles removed
        """
        now = self._clock()
        expired: list[SessionHandle] = []
        async for key in self._scan_keys():
            handle = self._handles.remove_if(key, lambda h: h.is_expired(now, self._timeout))
            if handle is not None:
                expired.append(handle)
                self._cleanup.submit(handle.remote_session_id, reason="expired")

        if not expired:
            return 0

        self._sync_gauge()
        record_session_event("expired", len(expired))
        logger.info("cleaned up expired conversation sessions", expired_count=len(expired))
        return len(expired)

    async def wait_for_terminations(self, timeout: Optional[float] = None) -> int:
        """
        Wait for remote terminations started by end_conversation.

        Returns:
            Terminations still running when the wait ended
        """
        if self._terminations:
            await asyncio.wait(set(self._terminations), timeout=timeout)
        return len(self._terminations)

    def count(self) -> int:
        """Number of live handles."""
        return len(self._handles)

    def get_handle(self, conversation_id: str, user_id: Optional[str] = None) -> Optional[SessionHandle]:
        """Current handle for a key without touching it (diagnostics)."""
        return self._handles.get(LocalKey.of(conversation_id, user_id))

    async def _scan_keys(self) -> AsyncIterator[LocalKey]:
        """Snapshot of the keys, handed out with a yield every batch."""
        for index, key in enumerate(self._handles.keys(), start=1):
            yield key
            if index % self._scan_batch_size == 0:
                await asyncio.sleep(0)

    async def _end_remote(self, handle: SessionHandle, conversation_id: str) -> None:
        try:
            await self._client.end_session(
                handle.remote_session_id, timeout=self._cleanup.timeout_seconds
            )
        except BridgeError as e:
            logger.warning(
                "failed to end langgraph session for conversation",
                session_id=handle.remote_session_id,
                conversation_id=conversation_id,
                error=e.message,
            )
            return
        except Exception as e:
            logger.error(
                "unexpected error ending langgraph session for conversation",
                session_id=handle.remote_session_id,
                conversation_id=conversation_id,
                error=repr(e),
            )
            return
        logger.info(
            "ended langgraph session for conversation",
            session_id=handle.remote_session_id,
            conversation_id=conversation_id,
        )

    def _sync_gauge(self) -> None:
        set_active_sessions(len(self._handles))
