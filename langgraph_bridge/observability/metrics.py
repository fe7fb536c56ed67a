"""
Prometheus Metrics Module

This module provides Prometheus metrics for the session bridge: remote call
outcomes and latency, live session handles, lifecycle events, best-effort
cleanup failures and sweep runs.

Reference Documents:
- GUIDELINES pp. 2309-2319: "Prometheus for metrics collection and structured logging"
- Newman (Building Microservices pp. 273-275): Services "expose basic metrics
  themselves" including "response times and error rates"

Pattern: Metrics collection for observability
"""

from typing import Any, Callable

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    make_asgi_app,
)


# =============================================================================
# Remote Call Metrics
# =============================================================================

REMOTE_CALLS_TOTAL = Counter(
    name="langgraph_bridge_remote_calls_total",
    documentation="Total calls to the remote LangGraph API by outcome",
    labelnames=["operation", "outcome"],
)

REMOTE_CALL_DURATION_SECONDS = Histogram(
    name="langgraph_bridge_remote_call_duration_seconds",
    documentation="Remote LangGraph API call duration in seconds",
    labelnames=["operation"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

# =============================================================================
# Session Lifecycle Metrics
# =============================================================================

ACTIVE_SESSIONS = Gauge(
    name="langgraph_bridge_active_sessions",
    documentation="Number of live local session handles",
)

SESSION_EVENTS_TOTAL = Counter(
    name="langgraph_bridge_session_events_total",
    documentation="Session handle lifecycle events",
    labelnames=["event"],
)

CLEANUP_FAILURES_TOTAL = Counter(
    name="langgraph_bridge_cleanup_failures_total",
    documentation="Best-effort remote session terminations that failed or were dropped",
)

SWEEPS_TOTAL = Counter(
    name="langgraph_bridge_sweeps_total",
    documentation="Expiry sweeps by result (completed/skipped/failed)",
    labelnames=["result"],
)


# =============================================================================
# Helper Functions
# =============================================================================


def record_remote_call(operation: str, outcome: str, duration: float) -> None:
    """
    Record one remote API call.

    Args:
        operation: Remote operation (create_session, send_query, ...)
        outcome: "success" or the error code of the failure
        duration: Wall-clock duration in seconds
    """
    REMOTE_CALLS_TOTAL.labels(operation=operation, outcome=outcome).inc()
    REMOTE_CALL_DURATION_SECONDS.labels(operation=operation).observe(duration)


def record_session_event(event: str, count: int = 1) -> None:
    """
    Record session handle lifecycle events.

    Args:
        event: created, reused, expired, ended or displaced
        count: Number of events
    """
    if count > 0:
        SESSION_EVENTS_TOTAL.labels(event=event).inc(count)


def set_active_sessions(count: int) -> None:
    """Set the live session handle gauge."""
    ACTIVE_SESSIONS.set(count)


def record_cleanup_failure() -> None:
    """Record a failed or dropped best-effort termination."""
    CLEANUP_FAILURES_TOTAL.inc()


def record_sweep(result: str) -> None:
    """
    Record an expiry sweep run.

    Args:
        result: completed, skipped or failed
    """
    SWEEPS_TOTAL.labels(result=result).inc()


# =============================================================================
# Metrics Endpoint
# =============================================================================


def get_metrics_app() -> Callable[..., Any]:
    """
    Get ASGI app for /metrics endpoint.

    Returns:
        ASGI application that serves Prometheus metrics
    """
    return make_asgi_app()


def generate_metrics() -> str:
    """
    Generate Prometheus metrics text format.

    Returns:
        Prometheus exposition format text
    """
    return generate_latest(REGISTRY).decode("utf-8")
