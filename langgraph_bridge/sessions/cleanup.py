"""
Cleanup Worker - supervised queue for best-effort remote session termination.

Expired, swept and displaced handles are removed from the local map
synchronously; ending their remote counterparts is submitted here as
independent units of work. Each termination runs on a worker task with its
own timeout, outside the submitting caller's cancellation scope, and its
failure is logged and counted, never propagated.

Pattern: Fire-and-forget with a supervised worker (Newman - graceful degradation)
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from langgraph_bridge.clients.langgraph import LangGraphClient
from langgraph_bridge.core.exceptions import BridgeError
from langgraph_bridge.observability.logging import get_logger
from langgraph_bridge.observability.metrics import record_cleanup_failure

logger = get_logger(__name__)

DEFAULT_CLEANUP_TIMEOUT_SECONDS = 10.0
DEFAULT_MAX_QUEUE = 1000


@dataclass(frozen=True)
class CleanupJob:
    """One remote session to terminate and why."""

    session_id: str
    reason: str


class CleanupWorker:
    """
    Background terminator of remote sessions.

    submit() never blocks and never raises; jobs submitted while the worker
    is stopped, or when the queue is full, are dropped with a warning.

    Example:
        >>> worker = CleanupWorker(client)
        >>> worker.start()
        >>> worker.submit("sess-123", reason="expired")
        >>> await worker.stop()
    """

    def __init__(
        self,
        client: LangGraphClient,
        timeout_seconds: float = DEFAULT_CLEANUP_TIMEOUT_SECONDS,
        workers: int = 1,
        max_queue: int = DEFAULT_MAX_QUEUE,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._worker_count = workers
        self._queue: asyncio.Queue[CleanupJob] = asyncio.Queue(maxsize=max_queue)
        self._tasks: list[asyncio.Task[None]] = []
        self._accepting = False

    @property
    def is_running(self) -> bool:
        """Whether the worker accepts and processes jobs."""
        return self._accepting

    @property
    def timeout_seconds(self) -> float:
        """Deadline applied to each remote termination."""
        return self._timeout_seconds

    @property
    def pending(self) -> int:
        """Jobs waiting in the queue."""
        return self._queue.qsize()

    def start(self) -> None:
        """Start the worker tasks. Must be called from a running event loop."""
        if self._accepting:
            return
        self._tasks = [
            asyncio.create_task(self._run(), name=f"langgraph-cleanup-{index}")
            for index in range(self._worker_count)
        ]
        self._accepting = True
        logger.debug("cleanup worker started", workers=self._worker_count)

    def submit(self, session_id: str, reason: str) -> bool:
        """
        Queue a remote session for termination.

        Returns:
            True if queued, False if dropped
        """
        if not self._accepting:
            logger.warning("cleanup worker not running, dropping job", session_id=session_id, reason=reason)
            record_cleanup_failure()
            return False
        try:
            self._queue.put_nowait(CleanupJob(session_id=session_id, reason=reason))
        except asyncio.QueueFull:
            logger.warning("cleanup queue full, dropping job", session_id=session_id, reason=reason)
            record_cleanup_failure()
            return False
        return True

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def stop(self, drain: bool = True, drain_timeout: Optional[float] = None) -> None:
        """
        Stop accepting jobs and shut the worker tasks down.

        Args:
            drain: Finish queued jobs before stopping
            drain_timeout: Upper bound in seconds on draining (None waits)
        """
        self._accepting = False
        if drain and self._tasks:
            try:
                await asyncio.wait_for(self._queue.join(), drain_timeout)
            except asyncio.TimeoutError:
                logger.warning("cleanup drain timed out", pending=self._queue.qsize())

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        dropped = 0
        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
            dropped += 1
        if dropped:
            logger.warning("cleanup worker stopped with unprocessed jobs", dropped=dropped)
            for _ in range(dropped):
                record_cleanup_failure()
        logger.debug("cleanup worker stopped")

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self._terminate(job)
            finally:
                self._queue.task_done()

    async def _terminate(self, job: CleanupJob) -> None:
        try:
            ended = await self._client.end_session(job.session_id, timeout=self._timeout_seconds)
        except BridgeError as e:
            record_cleanup_failure()
            logger.warning(
                "failed to end langgraph session",
                session_id=job.session_id,
                reason=job.reason,
                error=e.message,
            )
            return
        except Exception as e:
            record_cleanup_failure()
            logger.error(
                "unexpected error ending langgraph session",
                session_id=job.session_id,
                reason=job.reason,
                error=repr(e),
            )
            return

        logger.debug(
            "cleaned up langgraph session",
            session_id=job.session_id,
            reason=job.reason,
            success=ended.success,
        )
