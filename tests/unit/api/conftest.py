"""
Shared fixtures for API tests.

The application is built with create_app() and an injected orchestrator
mock, so the lifespan runs without touching the network.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from langgraph_bridge.main import create_app
from langgraph_bridge.models.remote import QueryResult
from langgraph_bridge.sessions.orchestrator import SessionOrchestrator


@pytest.fixture
def api_orchestrator():
    orchestrator = AsyncMock(spec=SessionOrchestrator)
    orchestrator.active_session_count.return_value = 2
    orchestrator.is_healthy.return_value = True
    orchestrator.require_healthy.return_value = None
    orchestrator.get_or_create_session.return_value = "remote-1"
    orchestrator.send_query.return_value = QueryResult(
        session_id="remote-1",
        query="hello",
        response="Hi there!",
        message_count=2,
        processing_time=0.3,
        timestamp=1704110401.0,
    )
    orchestrator.end_conversation.return_value = 2
    orchestrator.expire_sessions.return_value = 3
    return orchestrator


@pytest.fixture
def client(api_orchestrator, test_settings):
    app = create_app(settings=test_settings, orchestrator=api_orchestrator)
    with TestClient(app) as test_client:
        yield test_client
