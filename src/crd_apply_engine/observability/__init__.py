"""
Observability utilities for the CRD apply engine.

This module provides metrics, tracing, and structured logging
capabilities for production monitoring and troubleshooting.
"""

from .logging import ResourceLogger, setup_structured_logging
from .metrics import MetricsCollector, get_metrics_registry
from .tracing import setup_tracing, shutdown_tracing, traced_operation

__all__ = [
    "MetricsCollector",
    "get_metrics_registry",
    "ResourceLogger",
    "setup_structured_logging",
    "setup_tracing",
    "shutdown_tracing",
    "traced_operation",
]
