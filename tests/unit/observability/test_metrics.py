"""
Tests for Prometheus metrics.
"""

import httpx
import pytest
from prometheus_client import REGISTRY

from langgraph_bridge.clients.langgraph import LangGraphClient
from langgraph_bridge.core.exceptions import TransportError
from langgraph_bridge.observability.metrics import (
    generate_metrics,
    record_cleanup_failure,
    record_remote_call,
    record_session_event,
    record_sweep,
    set_active_sessions,
)


def sample(name: str, labels: dict = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMetricHelpers:
    """Tests for the recording helpers."""

    def test_record_remote_call(self) -> None:
        labels = {"operation": "send_query", "outcome": "success"}
        before = sample("langgraph_bridge_remote_calls_total", labels)

        record_remote_call("send_query", "success", 0.2)

        assert sample("langgraph_bridge_remote_calls_total", labels) == before + 1

    def test_record_session_event_ignores_zero(self) -> None:
        labels = {"event": "expired"}
        before = sample("langgraph_bridge_session_events_total", labels)

        record_session_event("expired", 0)
        record_session_event("expired", 3)

        assert sample("langgraph_bridge_session_events_total", labels) == before + 3

    def test_active_sessions_gauge(self) -> None:
        set_active_sessions(7)
        assert sample("langgraph_bridge_active_sessions") == 7

    def test_cleanup_failures(self) -> None:
        before = sample("langgraph_bridge_cleanup_failures_total")
        record_cleanup_failure()
        assert sample("langgraph_bridge_cleanup_failures_total") == before + 1

    def test_sweeps(self) -> None:
        before = sample("langgraph_bridge_sweeps_total", {"result": "skipped"})
        record_sweep("skipped")
        assert sample("langgraph_bridge_sweeps_total", {"result": "skipped"}) == before + 1

    def test_generate_metrics_text(self) -> None:
        assert "langgraph_bridge_remote_calls_total" in generate_metrics()


class TestClientMetrics:
    """The client labels failures with the lower-cased error code."""

    @pytest.mark.asyncio
    async def test_transport_failure_outcome(self) -> None:
        labels = {"operation": "create_session", "outcome": "transport_error"}
        before = sample("langgraph_bridge_remote_calls_total", labels)
        http_client = httpx.AsyncClient(
            base_url="http://langgraph.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        client = LangGraphClient(http_client=http_client)

        with pytest.raises(TransportError):
            await client.create_session()

        assert sample("langgraph_bridge_remote_calls_total", labels) == before + 1
