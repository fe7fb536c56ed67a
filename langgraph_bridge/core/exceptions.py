"""
Custom exceptions for LangGraph Bridge.

This module provides the error taxonomy for remote session calls. All
exceptions inherit from BridgeError and include error codes for consistent
error handling, logging and API responses.

Taxonomy:
- BridgeValidationError: empty or malformed input, no network call made
- TransportError: connection failure, timeout, or non-2xx status
- DecodeError: success status but unparseable body
- RemoteCallCancelled: caller deadline fired mid-call
- ServiceUnavailableError: health probe reported unhealthy (caller fallback path)

Reference:
- ANTI_PATTERN_ANALYSIS.md: Exception handling patterns
- GUIDELINES: Specific exceptions, always capture with 'as e'
"""

from enum import Enum
from typing import Any, Optional


# =============================================================================
# Error Codes Enum
# =============================================================================


class ErrorCode(str, Enum):
    """
    Error codes for LangGraph Bridge exceptions.

    These codes provide a consistent way to identify error types
    across the API and in logging.
    """

    BRIDGE_ERROR = "BRIDGE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    DECODE_ERROR = "DECODE_ERROR"
    CANCELLED = "CANCELLED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


# =============================================================================
# Base Exception
# =============================================================================


class BridgeError(Exception):
    """
    Base exception for all LangGraph Bridge errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.BRIDGE_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Validation
# =============================================================================


class BridgeValidationError(BridgeError):
    """
    Exception for invalid caller input.

    Raised before any network I/O when an argument is empty or malformed.
    Not retried: it indicates a programming or contract error.

    Note: Named BridgeValidationError to avoid conflict with
    pydantic.ValidationError.

    Attributes:
        field: Name of the field that failed validation.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: str = ErrorCode.VALIDATION_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.field = field


# =============================================================================
# Remote Call Errors
# =============================================================================


class RemoteError(BridgeError):
    """
    Base exception for failures of a call to the remote LangGraph API.

    Attributes:
        operation: Name of the remote operation (e.g., "create_session").
    """

    def __init__(
        self,
        message: str,
        operation: str,
        error_code: str = ErrorCode.BRIDGE_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.operation = operation


class TransportError(RemoteError):
    """
    Exception for connection failures, timeouts and non-2xx responses.

    This is the caller's signal to apply fallback behavior rather than
    retry indefinitely.

    Attributes:
        status_code: HTTP status code from the remote API (if a response arrived).
    """

    def __init__(
        self,
        message: str,
        operation: str,
        status_code: Optional[int] = None,
        error_code: str = ErrorCode.TRANSPORT_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, operation, error_code, **kwargs)
        self.status_code = status_code


class DecodeError(RemoteError):
    """Exception for a success status whose body cannot be deserialized."""

    def __init__(
        self,
        message: str,
        operation: str,
        error_code: str = ErrorCode.DECODE_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, operation, error_code, **kwargs)


class RemoteCallCancelled(RemoteError):
    """
    Exception raised when the caller's deadline fires mid-call.

    Distinct from TransportError: the remote side did not fail, the
    caller stopped waiting.
    """

    def __init__(
        self,
        message: str,
        operation: str,
        error_code: str = ErrorCode.CANCELLED,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, operation, error_code, **kwargs)


# =============================================================================
# Service Availability
# =============================================================================


class ServiceUnavailableError(BridgeError):
    """
    Exception raised on the caller-facing fallback path when the health
    probe reports the remote backend unhealthy.

    Never raised by the client itself.
    """

    def __init__(
        self,
        message: str = "LangGraph service is unavailable",
        error_code: str = ErrorCode.SERVICE_UNAVAILABLE,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
