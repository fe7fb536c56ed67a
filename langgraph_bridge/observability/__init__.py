"""
Observability Package

This package provides observability infrastructure:
- Structured JSON logging with correlation IDs (structlog)
- Prometheus metrics for remote calls and session lifecycle

Reference Documents:
- GUIDELINES pp. 2309-2319: Observability = metrics + logging
- GUIDELINES pp. 2319: Newman "log when timeouts occur"
"""

from langgraph_bridge.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)
from langgraph_bridge.observability.metrics import (
    generate_metrics,
    get_metrics_app,
    record_cleanup_failure,
    record_remote_call,
    record_session_event,
    record_sweep,
    set_active_sessions,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_context",
    # Metrics
    "get_metrics_app",
    "generate_metrics",
    "record_remote_call",
    "record_session_event",
    "set_active_sessions",
    "record_cleanup_failure",
    "record_sweep",
]
