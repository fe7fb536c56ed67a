"""
HTTP Client Module - connection pool factory for the LangGraph API.

One pooled httpx.AsyncClient is built per LangGraphClient and shared by
every remote session call. It is configured once here and not mutated
afterwards.

Reference Documents:
- GUIDELINES pp. 2309: Connection pooling per downstream service (Newman)
- GUIDELINES pp. 2319: Timeout configuration and logging

Pattern: Factory pattern for creating configured HTTP clients
"""

from typing import Optional

import httpx

DEFAULT_TIMEOUT_SECONDS: float = 30.0
DEFAULT_MAX_CONNECTIONS: int = 100
DEFAULT_MAX_KEEPALIVE: int = 20

USER_AGENT: str = "langgraph-bridge/1.0"
"""Sent on every request so the LangGraph side can attribute bridge traffic."""


def default_headers(extra: Optional[dict[str, str]] = None) -> dict[str, str]:
    """Headers sent on every LangGraph request; ``extra`` wins on conflict."""
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    headers.update(extra or {})
    return headers


def create_http_client(
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    max_connections: Optional[int] = None,
    max_keepalive: Optional[int] = None,
    headers: Optional[dict[str, str]] = None,
) -> httpx.AsyncClient:
    """
    Build the pooled client used to reach the LangGraph API.

    The transport never retries on its own: retry policy lives in
    LangGraphClient, which only retries idempotent reads.

    Args:
        base_url: LangGraph API root (e.g., "http://langgraph:8000")
        timeout_seconds: Per-request httpx timeout (default: 30.0)
        max_connections: Pool size (default: 100)
        max_keepalive: Idle keepalive connections kept (default: 20)
        headers: Extra headers merged over the defaults

    Example:
        >>> client = create_http_client(base_url="http://langgraph:8000")
        >>> async with client:
        ...     response = await client.get("/api/v1/health")
    """
    limits = httpx.Limits(
        max_connections=DEFAULT_MAX_CONNECTIONS if max_connections is None else max_connections,
        max_keepalive_connections=DEFAULT_MAX_KEEPALIVE if max_keepalive is None else max_keepalive,
    )
    transport = httpx.AsyncHTTPTransport(retries=0, limits=limits)

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(DEFAULT_TIMEOUT_SECONDS if timeout_seconds is None else timeout_seconds),
        headers=default_headers(headers),
        transport=transport,
    )
