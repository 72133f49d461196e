"""Centralized engine settings using pydantic-settings.

This module provides a single source of truth for the provider-session
defaults loaded from environment variables. Per-resource values override
these defaults; the orchestrators themselves never read settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crd_apply_engine.constants import (
    DEFAULT_FIELD_MANAGER,
    DEFAULT_FORCE_CONFLICTS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_WAIT_TIMEOUT,
)


class Settings(BaseSettings):
    """Engine configuration loaded from environment variables.

    All settings have sensible defaults. Override via environment variables
    as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server-side apply defaults
    field_manager: str = Field(
        default=DEFAULT_FIELD_MANAGER,
        min_length=1,
        validation_alias="CRD_ENGINE_FIELD_MANAGER",
        description="Default field manager used for server-side apply",
    )
    force_conflicts: bool = Field(
        default=DEFAULT_FORCE_CONFLICTS,
        validation_alias="CRD_ENGINE_FORCE_CONFLICTS",
        description="Force server-side apply changes against field conflicts",
    )

    # Wait defaults
    wait_timeout_seconds: float = Field(
        default=DEFAULT_WAIT_TIMEOUT,
        ge=0,
        validation_alias="CRD_ENGINE_WAIT_TIMEOUT_SECONDS",
        description="Default wait timeout; zero means check once and don't wait",
    )
    poll_interval_seconds: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        ge=0,
        validation_alias="CRD_ENGINE_POLL_INTERVAL_SECONDS",
        description="Default number of seconds between two condition checks",
    )

    # Remote calls
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        validation_alias="CRD_ENGINE_REQUEST_TIMEOUT_SECONDS",
        description="Upper bound for a single Kubernetes API call",
    )
    kubeconfig_context: str = Field(
        default="",
        validation_alias="KUBECONFIG_CONTEXT",
        description="Kubeconfig context for out-of-cluster use (empty = current)",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )

    # Tracing
    tracing_enabled: bool = Field(
        default=False,
        validation_alias="TRACING_ENABLED",
        description="Enable OpenTelemetry tracing",
    )
    tracing_endpoint: str = Field(
        default="http://localhost:4317",
        validation_alias="OTEL_EXPORTER_OTLP_ENDPOINT",
        description="OTLP collector endpoint (gRPC)",
    )
    tracing_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        validation_alias="TRACING_SAMPLE_RATE",
        description="Fraction of root spans to sample",
    )


# Global settings instance - initialized once at module import
settings = Settings()
