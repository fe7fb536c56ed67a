"""
Expiry Reaper - periodic single-flight sweep of idle session handles.

A single asyncio task ticks on a fixed interval, independent of the session
timeout. Each tick launches the sweep unless the previous one is still
running, in which case the tick is skipped rather than queued. stop()
releases the ticker; no tick is delivered after it returns.
"""

import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

from langgraph_bridge.observability.logging import get_logger
from langgraph_bridge.observability.metrics import record_sweep

logger = get_logger(__name__)

DEFAULT_SWEEP_INTERVAL_SECONDS = 300.0

SweepFn = Callable[[], Union[int, Awaitable[int]]]


class ExpiryReaper:
    """
    Background driver of SessionStore.sweep().

    Args:
        sweep: Sync or async callable returning the number of handles removed
        interval_seconds: Time between ticks
    """

    def __init__(
        self,
        sweep: SweepFn,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._sweep = sweep
        self._interval_seconds = interval_seconds
        self._stop_event = asyncio.Event()
        self._ticker: Optional[asyncio.Task[None]] = None
        self._in_flight: Optional[asyncio.Task[Optional[int]]] = None

    @property
    def interval_seconds(self) -> float:
        return self._interval_seconds

    @property
    def is_running(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def sweep_in_progress(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def start(self) -> None:
        """Start ticking. Idempotent; must be called from a running event loop."""
        if self.is_running:
            return
        self._stop_event = asyncio.Event()
        self._ticker = asyncio.create_task(self._tick_loop(), name="langgraph-expiry-reaper")
        logger.info("expiry reaper started", interval_seconds=self._interval_seconds)

    async def stop(self) -> None:
        """Stop ticking and wait for an in-flight sweep to finish."""
        if self._ticker is None:
            return
        self._stop_event.set()
        await self._ticker
        self._ticker = None
        if self._in_flight is not None:
            await asyncio.gather(self._in_flight, return_exceptions=True)
            self._in_flight = None
        logger.info("expiry reaper stopped")

    async def run_once(self) -> Optional[int]:
        """
        Run one sweep now, honoring single-flight.

        Returns:
            Handles removed, or None if skipped because a sweep is running
            or the sweep failed
        """
        if self.sweep_in_progress:
            record_sweep("skipped")
            logger.info("sweep still running, skipping")
            return None
        self._in_flight = asyncio.create_task(self._run_sweep())
        return await asyncio.shield(self._in_flight)

    async def _tick_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), self._interval_seconds)
            except asyncio.TimeoutError:
                pass
            if self._stop_event.is_set():
                return
            self._tick()

    def _tick(self) -> None:
        if self.sweep_in_progress:
            record_sweep("skipped")
            logger.info("sweep still running, skipping tick")
            return
        self._in_flight = asyncio.create_task(self._run_sweep(), name="langgraph-expiry-sweep")

    async def _run_sweep(self) -> Optional[int]:
        try:
            result = self._sweep()
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            record_sweep("failed")
            logger.error("expiry sweep failed", error=repr(e))
            return None
        record_sweep("completed")
        if result:
            logger.debug("expiry sweep completed", removed=result)
        return result
