"""
Structured Logging Module

JSON logs via structlog. Every line carries a level, a UTC timestamp and,
while a turn is being processed, the conversation it belongs to as
``correlation_id``, so that a foreground turn and the background cleanup it
triggers can be joined in the log pipeline.

Reference Documents:
- GUIDELINES pp. 2309-2319: "Prometheus for metrics collection and structured logging"
- GUIDELINES pp. 2319: Newman "log when timeouts occur, look at what happens"

Pattern: Singleton configuration (configure once at startup)
"""

import contextvars
import logging
import sys
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator, Optional, TextIO

import structlog
from structlog.types import EventDict, Processor

_configured: bool = False
_LOGGER_NAME_KEY = "logger_name"
_service_name: Optional[str] = None

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


# =============================================================================
# Correlation ID Context
# =============================================================================

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "langgraph_bridge_correlation_id", default=None
)


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def correlation_id_context(correlation_id: str) -> Generator[None, None, None]:
    """
    Scope a correlation ID (normally the conversation id) to a block.

    The previous value is restored on exit, so scopes nest.

    Example:
        >>> with correlation_id_context("conv-12345"):
        ...     logger.info("processing turn")
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield
    finally:
        _correlation_id.reset(token)


# =============================================================================
# Processors
# =============================================================================


def add_correlation_id(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Attach the active correlation ID unless the call site set one."""
    current = get_correlation_id()
    if current is not None:
        event_dict.setdefault("correlation_id", current)
    return event_dict


def add_service(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    if _service_name is not None:
        event_dict.setdefault("service", _service_name)
    return event_dict


def add_timestamp(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


_RENAMED_KEYS = {"log_level": "level", _LOGGER_NAME_KEY: "logger"}


def rename_keys(
    logger: logging.Logger, _method_name: str, event_dict: EventDict
) -> EventDict:
    """Emit ``level`` and ``logger`` rather than the internal key names."""
    for source, target in _RENAMED_KEYS.items():
        if source in event_dict:
            event_dict[target] = event_dict.pop(source)
    return event_dict


def _processors() -> list[Processor]:
    return [
        structlog.stdlib.add_log_level,
        rename_keys,
        add_timestamp,
        add_service,
        add_correlation_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


# =============================================================================
# Configuration
# =============================================================================


def configure_logging(
    level: str = "INFO",
    stream: Optional[TextIO] = None,
    force: bool = False,
    service_name: Optional[str] = None,
) -> None:
    """
    Configure structlog once for the process.

    Later calls are ignored unless ``force`` is set; the application
    lifespan forces a reconfiguration with the level from Settings.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream (default: sys.stdout)
        force: Reconfigure even if already configured
        service_name: Added to every line as ``service`` when given
    """
    global _configured, _service_name

    if _configured and not force:
        return

    _service_name = service_name
    structlog.configure(
        processors=_processors(),
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=False,
    )
    _configured = True


def reset_logging() -> None:
    """Forget the configuration so the next call reconfigures. Tests only."""
    global _configured, _service_name
    _configured = False
    _service_name = None


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a logger that tags every line with ``logger=name``.

    Configures logging with defaults if nothing has yet.
    """
    configure_logging()
    # Stays lazy so module-level loggers follow later reconfiguration.
    # ``logger`` is wrap_logger's own parameter name, hence the internal key.
    return structlog.get_logger(**{_LOGGER_NAME_KEY: name})


def _level_to_int(level: str) -> int:
    return _LEVELS.get(level.upper(), logging.INFO)
