"""
Pytest configuration for the LangGraph Bridge test suite.

Reference Documents:
- GUIDELINES pp. 155-157: "high and low gear" testing philosophy
- GUIDELINES pp. 157: FakeRepository pattern using duck typing

This configuration sets up:
- Project root on sys.path
- A base URL so Settings() can be built without a deployment environment
- Test markers for categorization
- Shared fakes: a controllable clock and a mocked LangGraph client
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root to Python path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("LANGGRAPH_BRIDGE_LANGGRAPH_BASE_URL", "http://langgraph.test")

from langgraph_bridge.clients.langgraph import LangGraphClient  # noqa: E402
from langgraph_bridge.core.config import Settings, get_settings  # noqa: E402
from langgraph_bridge.models.remote import QueryResult, SessionCreated, SessionEnded  # noqa: E402

BASE_URL = "http://langgraph.test"


# =============================================================================
# Test Markers
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for component interactions")
    config.addinivalue_line("markers", "slow: Tests that take a long time to run")


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Ensure every test sees a fresh Settings singleton."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with short timings suitable for tests."""
    return Settings(
        langgraph_base_url=BASE_URL,
        langgraph_max_retry_attempts=2,
        langgraph_retry_delay_seconds=0.0,
        session_timeout_seconds=60.0,
        sweep_interval_seconds=60.0,
        cleanup_timeout_seconds=1.0,
        turn_timeout_seconds=5.0,
    )


# =============================================================================
# Clock
# =============================================================================


class FakeClock:
    """Manually advanced clock returning timezone-aware datetimes."""

    def __init__(self, start: datetime = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# LangGraph Client Fakes
# =============================================================================


def session_created(session_id: str, message_count: int = 0) -> SessionCreated:
    return SessionCreated(session_id=session_id, created_at=1704110400.0, message_count=message_count)


def query_result(session_id: str, query: str, response: str = "Paris.") -> QueryResult:
    return QueryResult(
        session_id=session_id,
        query=query,
        response=response,
        message_count=2,
        processing_time=0.25,
        timestamp=1704110401.0,
    )


@pytest.fixture
def mock_langgraph_client():
    """
    AsyncMock of LangGraphClient.

    create_session hands out remote-1, remote-2, ... in call order;
    end_session and send_query succeed; is_healthy reports True.
    """
    client = AsyncMock(spec=LangGraphClient)
    counter = {"n": 0}

    async def create_session(timeout=None):
        counter["n"] += 1
        return session_created(f"remote-{counter['n']}")

    async def end_session(session_id, timeout=None):
        return SessionEnded(session_id=session_id, success=True, message="Session ended")

    async def send_query(session_id, query, timeout=None):
        return query_result(session_id, query)

    client.create_session.side_effect = create_session
    client.end_session.side_effect = end_session
    client.send_query.side_effect = send_query
    client.is_healthy.return_value = True
    return client
