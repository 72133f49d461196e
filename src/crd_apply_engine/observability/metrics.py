"""
Prometheus metrics for the CRD apply engine.

This module provides metrics for resource operations performed through the
per-kind adapters. Exposition is left to the embedding process; no HTTP
server is started here.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import CollectorRegistry, Counter, Histogram

from crd_apply_engine.errors import WaitTimeoutError, WaitTimeoutExceededError

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

OPERATIONS_TOTAL = Counter(
    "crd_engine_operations_total",
    "Total number of resource operations",
    ["operation", "resource_type", "result"],
    registry=None,  # Registered in get_metrics_registry()
)

OPERATION_DURATION = Histogram(
    "crd_engine_operation_duration_seconds",
    "Time spent on resource operations including waits",
    ["operation", "resource_type"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
    registry=None,
)

OPERATION_ERRORS = Counter(
    "crd_engine_operation_errors_total",
    "Total number of failed resource operations",
    ["operation", "resource_type", "error_type", "retryable"],
    registry=None,
)

WAIT_TIMEOUTS = Counter(
    "crd_engine_wait_timeouts_total",
    "Operations that succeeded but did not finish reconciling in time",
    ["operation", "resource_type"],
    registry=None,
)

_ALL_METRICS = (OPERATIONS_TOTAL, OPERATION_DURATION, OPERATION_ERRORS, WAIT_TIMEOUTS)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()
        for metric in _ALL_METRICS:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects metrics for resource operations."""

    def __init__(self):
        self.registry = get_metrics_registry()

    @contextmanager
    def track_operation(self, operation: str, resource_type: str) -> Iterator[None]:
        """
        Context manager to track one resource operation.

        Args:
            operation: Operation name (create, read, update, delete, import)
            resource_type: Type name of the resource
        """
        start_time = time.monotonic()
        result = "unknown"

        try:
            yield
            result = "success"
        except Exception as e:
            result = "error"
            if isinstance(e, WaitTimeoutError | WaitTimeoutExceededError):
                result = "wait_timeout"
                WAIT_TIMEOUTS.labels(
                    operation=operation, resource_type=resource_type
                ).inc()

            retryable = "true" if getattr(e, "retryable", False) else "false"
            OPERATION_ERRORS.labels(
                operation=operation,
                resource_type=resource_type,
                error_type=type(e).__name__,
                retryable=retryable,
            ).inc()
            raise
        finally:
            OPERATIONS_TOTAL.labels(
                operation=operation, resource_type=resource_type, result=result
            ).inc()
            OPERATION_DURATION.labels(
                operation=operation, resource_type=resource_type
            ).observe(time.monotonic() - start_time)
