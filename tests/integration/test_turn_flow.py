"""
Integration tests: TurnService -> SessionOrchestrator -> LangGraphClient
against an in-memory LangGraph API served through httpx.MockTransport.
"""

import itertools
import json
import time

import httpx
import pytest

from langgraph_bridge.clients.langgraph import LangGraphClient
from langgraph_bridge.services.turns import TurnService
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator

pytestmark = pytest.mark.integration


class FakeLangGraphAPI:
    """Minimal stateful stand-in for the remote session API."""

    def __init__(self) -> None:
        self.sessions: dict[str, list[dict]] = {}
        self.healthy = True
        self._ids = itertools.count(1)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        now = time.time()

        if path == "/api/v1/health":
            return httpx.Response(200 if self.healthy else 503, json={"status": "ok"})

        if path == "/api/v1/sessions/" and request.method == "POST":
            session_id = f"lg-{next(self._ids)}"
            self.sessions[session_id] = []
            return httpx.Response(
                201, json={"session_id": session_id, "created_at": now, "message_count": 0}
            )

        parts = path.strip("/").split("/")
        if parts[:3] == ["api", "v1", "chat"] and parts[4] == "query":
            session_id = parts[3]
            if session_id not in self.sessions:
                return httpx.Response(404, json={"error": "not_found", "detail": "Session not found"})
            query = json.loads(request.content)["query"]
            history = self.sessions[session_id]
            history.append({"role": "user", "content": query, "timestamp": now})
            answer = f"echo: {query}"
            history.append({"role": "assistant", "content": answer, "timestamp": now})
            return httpx.Response(
                200,
                json={
                    "session_id": session_id,
                    "query": query,
                    "response": answer,
                    "message_count": len(history),
                    "processing_time": 0.01,
                    "timestamp": now,
                },
            )

        if parts[:3] == ["api", "v1", "sessions"] and request.method == "DELETE":
            session_id = parts[3]
            if self.sessions.pop(session_id, None) is None:
                return httpx.Response(404, json={"error": "not_found", "detail": "Session not found"})
            return httpx.Response(
                200, json={"session_id": session_id, "success": True, "message": "Session ended"}
            )

        return httpx.Response(404)


@pytest.fixture
def backend() -> FakeLangGraphAPI:
    return FakeLangGraphAPI()


@pytest.fixture
def orchestrator(backend, test_settings) -> SessionOrchestrator:
    http_client = httpx.AsyncClient(
        base_url="http://langgraph.test", transport=httpx.MockTransport(backend)
    )
    client = LangGraphClient(http_client=http_client, max_retry_attempts=0)
    return SessionOrchestrator(client, settings=test_settings)


class TestTurnFlow:
    """End-to-end turn handling."""

    @pytest.mark.asyncio
    async def test_conversation_reuses_remote_session(self, orchestrator, backend) -> None:
        async with orchestrator:
            service = TurnService(orchestrator)
            first = await service.handle_turn("conv-1", "alice", "hello")
            second = await service.handle_turn("conv-1", "alice", "again")

        assert first.kind == second.kind == "answer"
        assert second.text == "echo: again"
        assert first.session_id == second.session_id
        assert second.message_count == 4
        assert len(backend.sessions) == 1

    @pytest.mark.asyncio
    async def test_end_conversation_ends_remote_sessions(self, orchestrator, backend) -> None:
        async with orchestrator:
            service = TurnService(orchestrator)
            await service.handle_turn("conv-1", "alice", "hello")
            await service.handle_turn("conv-1", "bob", "hello")

            assert await service.end_conversation("conv-1") == 2

        assert backend.sessions == {}

    @pytest.mark.asyncio
    async def test_unhealthy_backend_creates_no_session(self, orchestrator, backend) -> None:
        backend.healthy = False

        async with orchestrator:
            reply = await TurnService(orchestrator).handle_turn("conv-1", "alice", "hello")

        assert reply.kind == "fallback"
        assert backend.sessions == {}

    @pytest.mark.asyncio
    async def test_remote_session_lost(self, orchestrator, backend) -> None:
        """A session dropped by the backend surfaces as an error reply."""
        async with orchestrator:
            service = TurnService(orchestrator)
            first = await service.handle_turn("conv-1", "alice", "hello")
            backend.sessions.pop(first.session_id)

            reply = await service.handle_turn("conv-1", "alice", "again")

        assert reply.kind == "error"
