"""
Unit tests for OpenTelemetry tracing module.

Tests the tracing setup and the traced_operation context manager.

Note: OpenTelemetry has global state that can only be set once per process.
Tests that need to capture spans use a module-scoped tracer provider,
while tests that mock the setup use patches to avoid global state issues.
"""

from unittest.mock import MagicMock, patch

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import SpanKind, StatusCode

from crd_apply_engine.errors import WaitTimeoutError
from crd_apply_engine.observability.tracing import (
    get_tracer,
    is_tracing_enabled,
    setup_tracing,
    shutdown_tracing,
    traced_operation,
)


# Module-scoped fixtures for tests that need actual span capture
@pytest.fixture(scope="module")
def module_in_memory_exporter():
    """Module-scoped in-memory span exporter for testing."""
    return InMemorySpanExporter()


@pytest.fixture(scope="module")
def module_tracer_provider(module_in_memory_exporter):
    """Module-scoped tracer provider - set once for all tests in this module."""
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(module_in_memory_exporter))
    trace.set_tracer_provider(provider)
    return provider


@pytest.fixture(autouse=True)
def reset_tracing_state():
    """Reset tracing module state before and after each test."""
    import crd_apply_engine.observability.tracing as tracing_module

    tracing_module._initialized = False
    tracing_module._tracer_provider = None
    yield
    tracing_module._initialized = False
    tracing_module._tracer_provider = None


@pytest.fixture
def clear_spans(module_in_memory_exporter, module_tracer_provider):
    """Clear spans before each test that uses the module exporter."""
    module_in_memory_exporter.clear()
    yield module_in_memory_exporter
    module_in_memory_exporter.clear()


class TestSetupTracing:
    """Test setup_tracing function."""

    def test_setup_tracing_disabled(self):
        """Test setup_tracing with enabled=False returns None."""
        result = setup_tracing(enabled=False)
        assert result is None
        assert not is_tracing_enabled()

    @patch("crd_apply_engine.observability.tracing.OTLPSpanExporter")
    @patch("crd_apply_engine.observability.tracing.trace.set_tracer_provider")
    def test_setup_tracing_enabled(self, mock_set_provider, mock_exporter):
        """Test setup_tracing with enabled=True creates TracerProvider."""
        mock_exporter.return_value = MagicMock()

        result = setup_tracing(
            enabled=True,
            endpoint="http://localhost:4317",
            service_name="test-service",
            sample_rate=0.5,
        )

        assert isinstance(result, TracerProvider)
        assert is_tracing_enabled()
        mock_set_provider.assert_called_once_with(result)
        mock_exporter.assert_called_once_with(
            endpoint="http://localhost:4317",
            insecure=True,
            headers={},
        )

    @patch("crd_apply_engine.observability.tracing.OTLPSpanExporter")
    @patch("crd_apply_engine.observability.tracing.trace.set_tracer_provider")
    def test_setup_tracing_idempotent(self, mock_set_provider, mock_exporter):
        """Test that calling setup_tracing twice is idempotent."""
        mock_exporter.return_value = MagicMock()

        result1 = setup_tracing(enabled=True)
        result2 = setup_tracing(enabled=True)

        assert result1 is result2
        mock_exporter.assert_called_once()

    @patch("crd_apply_engine.observability.tracing.OTLPSpanExporter")
    @patch("crd_apply_engine.observability.tracing.trace.set_tracer_provider")
    def test_setup_tracing_with_custom_headers(self, mock_set_provider, mock_exporter):
        """Test setup_tracing with custom headers."""
        mock_exporter.return_value = MagicMock()
        custom_headers = {"Authorization": "Bearer token123"}

        setup_tracing(
            enabled=True,
            endpoint="http://collector:4317",
            headers=custom_headers,
        )

        mock_exporter.assert_called_once_with(
            endpoint="http://collector:4317",
            insecure=True,
            headers=custom_headers,
        )

    @patch("crd_apply_engine.observability.tracing.OTLPSpanExporter")
    @patch("crd_apply_engine.observability.tracing.trace.set_tracer_provider")
    def test_shutdown_tracing(self, mock_set_provider, mock_exporter):
        """Test shutdown_tracing flushes and resets state."""
        mock_exporter.return_value = MagicMock()
        setup_tracing(enabled=True, use_simple_processor=True)
        assert is_tracing_enabled()

        shutdown_tracing()

        assert not is_tracing_enabled()

    def test_get_tracer_without_setup(self):
        """A tracer is available even when tracing is disabled."""
        assert get_tracer("test") is not None


class TestTracedOperation:
    """Test traced_operation context manager."""

    def test_successful_operation(self, clear_spans):
        """Test span is recorded with attributes and OK status."""
        with traced_operation(
            "create_camel_apache_org_build_v1",
            {"k8s.resource.name": "sample", "k8s.namespace": "default"},
        ):
            pass

        spans = clear_spans.get_finished_spans()
        assert len(spans) == 1
        span = spans[0]
        assert span.name == "create_camel_apache_org_build_v1"
        assert span.kind == SpanKind.INTERNAL
        assert span.attributes["k8s.resource.name"] == "sample"
        assert span.status.status_code == StatusCode.OK

    def test_failed_operation(self, clear_spans):
        """Test span records the exception and ERROR status."""
        with pytest.raises(WaitTimeoutError):
            with traced_operation("update_camel_apache_org_build_v1"):
                raise WaitTimeoutError("status.phase", 30, "Succeeded")

        span = clear_spans.get_finished_spans()[0]
        assert span.status.status_code == StatusCode.ERROR
        assert "status.phase" in span.status.description
        assert "Action required" not in span.status.description
        assert any(event.name == "exception" for event in span.events)

    def test_yields_active_span(self, clear_spans):
        with traced_operation("read_camel_apache_org_build_v1") as span:
            span.set_attribute("k8s.resource.found", True)

        finished = clear_spans.get_finished_spans()[0]
        assert finished.attributes["k8s.resource.found"] is True
