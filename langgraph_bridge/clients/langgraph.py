"""
LangGraph Client - resilient client for the remote LangGraph session API.

This module provides the client that creates, queries, inspects and ends
remote LangGraph sessions, plus a health probe. Every low-level failure is
translated into the bridge's error taxonomy:

- BridgeValidationError: empty input, raised before any network I/O
- TransportError: connection failure, httpx timeout, non-2xx status
- DecodeError: 2xx status with a body that does not match the response model
- RemoteCallCancelled: the caller's deadline fired mid-call

Retry policy: only idempotent reads (get_history, is_healthy) are retried,
only on TransportError, bounded by max_retry_attempts with a fixed delay.
create_session, send_query and end_session are never retried here because
a retry can create duplicate remote state.

Reference Documents:
- GUIDELINES pp. 2309: Connection pooling per downstream service
- GUIDELINES pp. 2145: Graceful degradation
- GUIDELINES pp. 2319: Newman "log when timeouts occur"

Pattern: Client adapter for microservice communication
Anti-Pattern §1.1 Avoided: Uses Optional[T] with explicit None defaults
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from langgraph_bridge.clients.http import DEFAULT_TIMEOUT_SECONDS, create_http_client
from langgraph_bridge.core.config import Settings
from langgraph_bridge.core.exceptions import (
    BridgeError,
    BridgeValidationError,
    DecodeError,
    RemoteCallCancelled,
    TransportError,
)
from langgraph_bridge.models.remote import (
    ErrorBody,
    QueryRequest,
    QueryResult,
    SessionCreated,
    SessionEnded,
    SessionHistory,
)
from langgraph_bridge.observability.logging import get_logger
from langgraph_bridge.observability.metrics import record_remote_call

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

logger = get_logger(__name__)


# =============================================================================
# API Paths
# =============================================================================

SESSIONS_PATH = "/api/v1/sessions/"
QUERY_PATH = "/api/v1/chat/{session_id}/query"
HISTORY_PATH = "/api/v1/chat/{session_id}/history"
SESSION_PATH = "/api/v1/sessions/{session_id}"
HEALTH_PATH = "/api/v1/health"

DEFAULT_MAX_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.0

_QUERY_LOG_LIMIT = 50


def _require(value: Optional[str], field: str) -> str:
    """Reject None, empty and whitespace-only arguments."""
    if value is None or not value.strip():
        raise BridgeValidationError(f"{field} must not be empty", field=field)
    return value


def _outcome(error: BridgeError) -> str:
    """Metric label for a failed call."""
    return str(getattr(error.error_code, "value", error.error_code)).lower()


def _preview(text: str) -> str:
    return text if len(text) <= _QUERY_LOG_LIMIT else f"{text[:_QUERY_LOG_LIMIT]}..."


# =============================================================================
# LangGraphClient Class
# =============================================================================


class LangGraphClient:
    """
    Client for the remote LangGraph session API.

    All operations accept ``timeout``: the caller's deadline in seconds for
    the whole operation, retries included. When it fires the in-flight
    request is aborted and RemoteCallCancelled is raised. Task cancellation
    (asyncio.CancelledError) is logged and propagated unchanged.

    Example:
        >>> async with LangGraphClient(base_url="http://langgraph:8000") as client:
        ...     created = await client.create_session()
        ...     result = await client.send_query(created.session_id, "Capital of France?")
        ...     print(result.response)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_retry_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
        retry_delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    ) -> None:
        """
        Initialize LangGraphClient.

        Args:
            base_url: Base URL of the LangGraph API
            http_client: Optional pre-configured HTTP client (for testing)
            timeout_seconds: Per-request timeout in seconds
            max_retry_attempts: Additional attempts for idempotent reads
            retry_delay_seconds: Delay between retry attempts
        """
        if http_client is not None:
            self._client = http_client
            self._owns_client = False
        else:
            if not base_url:
                raise BridgeValidationError("base_url must not be empty", field="base_url")
            self._client = create_http_client(
                base_url=base_url,
                timeout_seconds=timeout_seconds,
            )
            self._owns_client = True

        self._max_retry_attempts = max_retry_attempts
        self._retry_delay_seconds = retry_delay_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "LangGraphClient":
        """Build a client from application settings."""
        return cls(
            base_url=settings.langgraph_base_url,
            timeout_seconds=settings.langgraph_timeout_seconds,
            max_retry_attempts=settings.langgraph_max_retry_attempts,
            retry_delay_seconds=settings.langgraph_retry_delay_seconds,
        )

    async def close(self) -> None:
        """Close the HTTP client if owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LangGraphClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # =========================================================================
    # Remote Operations
    # =========================================================================

    async def create_session(self, timeout: Optional[float] = None) -> SessionCreated:
        """
        Create a new remote session.

        Not idempotent: every call creates a distinct remote session, so it
        is never retried.

        Returns:
            SessionCreated with the remote session id

        Raises:
            TransportError, DecodeError, RemoteCallCancelled
        """
        logger.info("creating langgraph session")

        async def attempt() -> SessionCreated:
            response = await self._send("create_session", "POST", SESSIONS_PATH, json={})
            return self._decode("create_session", response, SessionCreated)

        created = await self._call("create_session", attempt, timeout)
        logger.info("created langgraph session", session_id=created.session_id)
        return created

    async def send_query(
        self,
        session_id: str,
        query: str,
        timeout: Optional[float] = None,
    ) -> QueryResult:
        """
        Send a query to a remote session.

        Args:
            session_id: Remote session id (non-empty)
            query: Query text (non-empty)

        Returns:
            QueryResult with the response text and updated message count

        Raises:
            BridgeValidationError: If either argument is empty (no request made)
            TransportError, DecodeError, RemoteCallCancelled
        """
        _require(session_id, "session_id")
        _require(query, "query")

        logger.info(
            "sending query to langgraph session",
            session_id=session_id,
            query=_preview(query),
        )
        path = QUERY_PATH.format(session_id=quote(session_id, safe=""))
        body = QueryRequest(query=query).model_dump()

        async def attempt() -> QueryResult:
            response = await self._send("send_query", "POST", path, json=body)
            return self._decode("send_query", response, QueryResult)

        result = await self._call("send_query", attempt, timeout)
        logger.info(
            "received langgraph response",
            session_id=session_id,
            processing_time_ms=round(result.processing_time * 1000, 1),
            message_count=result.message_count,
        )
        return result

    async def get_history(
        self,
        session_id: str,
        timeout: Optional[float] = None,
    ) -> SessionHistory:
        """
        Fetch the conversation history of a remote session.

        Idempotent: retried on TransportError.

        Raises:
            BridgeValidationError: If session_id is empty (no request made)
            TransportError, DecodeError, RemoteCallCancelled
        """
        _require(session_id, "session_id")

        logger.debug("getting langgraph session history", session_id=session_id)
        path = HISTORY_PATH.format(session_id=quote(session_id, safe=""))

        async def attempt() -> SessionHistory:
            response = await self._send("get_history", "GET", path)
            return self._decode("get_history", response, SessionHistory)

        history = await self._call("get_history", attempt, timeout, retry=True)
        logger.debug(
            "retrieved langgraph session history",
            session_id=session_id,
            message_count=history.message_count,
        )
        return history

    async def end_session(
        self,
        session_id: str,
        timeout: Optional[float] = None,
    ) -> SessionEnded:
        """
        End a remote session.

        Safe to call for an unknown or already-ended id: the backend's
        refusal surfaces as a classified TransportError, nothing else.

        Raises:
            BridgeValidationError: If session_id is empty (no request made)
            TransportError, DecodeError, RemoteCallCancelled
        """
        _require(session_id, "session_id")

        logger.info("ending langgraph session", session_id=session_id)
        path = SESSION_PATH.format(session_id=quote(session_id, safe=""))

        async def attempt() -> SessionEnded:
            response = await self._send("end_session", "DELETE", path)
            return self._decode("end_session", response, SessionEnded)

        ended = await self._call("end_session", attempt, timeout)
        logger.info("ended langgraph session", session_id=session_id, success=ended.success)
        return ended

    async def is_healthy(self, timeout: Optional[float] = None) -> bool:
        """
        Probe the remote API health endpoint.

        Never raises: any failure, non-2xx status or deadline expiry is
        logged and reported as unhealthy.

        Returns:
            True if the API answered with a 2xx status
        """

        async def attempt() -> httpx.Response:
            return await self._send("health_check", "GET", HEALTH_PATH)

        try:
            await self._call("health_check", attempt, timeout, retry=True)
        except BridgeError as e:
            logger.warning(
                "langgraph health check failed",
                error=e.message,
                error_code=_outcome(e),
            )
            return False
        except Exception as e:
            logger.warning("langgraph health check failed", error=str(e))
            return False

        logger.debug("langgraph health check", healthy=True)
        return True

    # =========================================================================
    # Internals
    # =========================================================================

    async def _call(
        self,
        operation: str,
        attempt: Callable[[], Awaitable[T]],
        timeout: Optional[float],
        retry: bool = False,
    ) -> T:
        """Run one operation under the caller's deadline and record metrics."""
        started = time.perf_counter()
        work = self._with_retry(operation, attempt) if retry else attempt()
        try:
            if timeout is None:
                result = await work
            else:
                result = await asyncio.wait_for(work, timeout)
        except asyncio.TimeoutError as e:
            error = RemoteCallCancelled(
                f"LangGraph {operation} cancelled: deadline of {timeout}s exceeded",
                operation=operation,
            )
            record_remote_call(operation, _outcome(error), time.perf_counter() - started)
            logger.warning("langgraph call cancelled by deadline", operation=operation, timeout=timeout)
            raise error from e
        except asyncio.CancelledError:
            record_remote_call(operation, "cancelled", time.perf_counter() - started)
            logger.info("langgraph call cancelled", operation=operation)
            raise
        except BridgeError as e:
            record_remote_call(operation, _outcome(e), time.perf_counter() - started)
            raise

        record_remote_call(operation, "success", time.perf_counter() - started)
        return result

    async def _with_retry(
        self,
        operation: str,
        attempt: Callable[[], Awaitable[T]],
    ) -> T:
        """Retry an idempotent operation on TransportError."""
        attempt_number = 0
        while True:
            try:
                return await attempt()
            except TransportError as e:
                if attempt_number >= self._max_retry_attempts:
                    raise
                attempt_number += 1
                logger.warning(
                    "retrying langgraph call",
                    operation=operation,
                    attempt=attempt_number,
                    max_attempts=self._max_retry_attempts,
                    status_code=e.status_code,
                    error=e.message,
                )
                await asyncio.sleep(self._retry_delay_seconds)

    async def _send(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request and reject transport failures and non-2xx statuses."""
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise TransportError(f"LangGraph {operation} timed out: {e}", operation=operation) from e
        except httpx.ConnectError as e:
            raise TransportError(
                f"LangGraph service unavailable during {operation}: {e}", operation=operation
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"LangGraph {operation} failed: {e}", operation=operation) from e

        if not response.is_success:
            self._log_error_response(operation, response)
            raise TransportError(
                f"LangGraph {operation} failed with status {response.status_code}",
                operation=operation,
                status_code=response.status_code,
            )
        return response

    def _decode(self, operation: str, response: httpx.Response, model: type[M]) -> M:
        """Deserialize a success body; anything short of a full match is an error."""
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(
                "invalid langgraph response body",
                operation=operation,
                status_code=response.status_code,
                error=str(e),
            )
            raise DecodeError(
                f"LangGraph {operation} returned an unreadable {model.__name__}",
                operation=operation,
            ) from e

    def _log_error_response(self, operation: str, response: httpx.Response) -> None:
        """Best-effort diagnostic log of a structured error body."""
        try:
            body = ErrorBody.model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(
                "failed to parse langgraph error response",
                operation=operation,
                status_code=response.status_code,
                error=str(e),
            )
            return

        logger.warning(
            "langgraph api error",
            operation=operation,
            status_code=response.status_code,
            error=body.error,
            detail=body.detail,
        )
