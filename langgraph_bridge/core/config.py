"""
Core configuration module for LangGraph Bridge.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the LANGGRAPH_BRIDGE_ prefix.

Reference:
- GUIDELINES: Sinha pp. 193-195 - Pydantic BaseSettings pattern
- GUIDELINES pp. 2319: Newman - timeout configuration per downstream service
"""

from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the LANGGRAPH_BRIDGE_ prefix for environment variables.
    Example: LANGGRAPH_BRIDGE_LANGGRAPH_BASE_URL=http://langgraph:8000
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="langgraph-bridge",
        description="Name of the service for logging and identification",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # =========================================================================
    # Remote LangGraph API
    # =========================================================================
    langgraph_base_url: str = Field(
        ...,
        description="Base URL of the remote LangGraph session API",
    )
    langgraph_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Per-call timeout in seconds for LangGraph API calls",
    )
    langgraph_max_retry_attempts: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Additional attempts for idempotent calls on transport failure",
    )
    langgraph_retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Delay in seconds between retry attempts",
    )

    # =========================================================================
    # Session Lifecycle
    # =========================================================================
    session_timeout_seconds: float = Field(
        default=1800.0,
        gt=0.0,
        description="Idle time after which a local session handle expires",
    )
    sweep_interval_seconds: float = Field(
        default=300.0,
        gt=0.0,
        description="Interval between background expiry sweeps",
    )
    cleanup_timeout_seconds: float = Field(
        default=10.0,
        gt=0.0,
        le=300.0,
        description="Timeout for each best-effort remote session termination",
    )
    turn_timeout_seconds: float = Field(
        default=60.0,
        gt=0.0,
        le=600.0,
        description="Deadline shared by every remote call made for one turn",
    )

    model_config = {
        "env_prefix": "LANGGRAPH_BRIDGE_",
        "case_sensitive": False,
        "extra": "ignore",
    }

    # =========================================================================
    # Field Validators
    # =========================================================================
    @field_validator("langgraph_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate LangGraph base URL format."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("LangGraph base URL must be an http:// or https:// URL")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()


# =============================================================================
# Settings Singleton
# =============================================================================


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.
    This provides singleton behavior without global state.

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
