"""
Provider session for the CRD apply engine.

A session wires the settings into the ambient stack (structured logging,
tracing) and owns the single Kubernetes client shared by every resource
adapter built from it.
"""

import logging

from crd_apply_engine.observability.logging import setup_structured_logging
from crd_apply_engine.observability.tracing import setup_tracing, shutdown_tracing
from crd_apply_engine.resources.custom_resource import CustomResource, build_resource
from crd_apply_engine.resources.kind import KindRegistry, default_registry
from crd_apply_engine.settings import Settings
from crd_apply_engine.settings import settings as default_settings
from crd_apply_engine.utils.kubernetes import KubernetesObjectClient

logger = logging.getLogger(__name__)


def configure_logging(engine_settings: Settings) -> None:
    """Configure structured logging for the engine based on settings."""
    setup_structured_logging(
        log_level=engine_settings.log_level.upper(),
        enable_json_formatting=engine_settings.json_logs,
        correlation_id_enabled=engine_settings.correlation_ids,
    )


def configure_tracing(engine_settings: Settings) -> None:
    setup_tracing(
        enabled=engine_settings.tracing_enabled,
        endpoint=engine_settings.tracing_endpoint,
        sample_rate=engine_settings.tracing_sample_rate,
    )


class ProviderSession:
    """
    One configured provider: settings, kind registry and shared client.

    Usage:
        session = ProviderSession().start()
        builds = session.resource("camel_apache_org_build_v1")
        builds.create(model)
        session.close()
    """

    def __init__(
        self,
        engine_settings: Settings | None = None,
        registry: KindRegistry | None = None,
        client: KubernetesObjectClient | None = None,
    ):
        """
        Initialize the session.

        Args:
            engine_settings: Provider defaults, the global settings if not provided
            registry: Kinds served by this session, the default registry if not provided
            client: Remote object client, created from settings if not provided
        """
        self.settings = engine_settings or default_settings
        self.registry = default_registry if registry is None else registry
        self.client = client or KubernetesObjectClient(
            request_timeout=self.settings.request_timeout_seconds,
            kubeconfig_context=self.settings.kubeconfig_context or None,
        )
        self._resources: dict[str, CustomResource] = {}

    def start(self) -> "ProviderSession":
        """Configure logging and tracing; returns the session for chaining."""
        configure_logging(self.settings)
        configure_tracing(self.settings)
        logger.info(
            f"Provider session started: field_manager={self.settings.field_manager}, "
            f"force_conflicts={self.settings.force_conflicts}, "
            f"{len(self.registry)} registered kinds"
        )
        return self

    def resource(self, type_name: str) -> CustomResource:
        """
        Get the adapter for a registered type name.

        Adapters are cached; all of them share the session's client.

        Raises:
            ConfigurationError: If the type name is not registered
        """
        if type_name not in self._resources:
            self._resources[type_name] = build_resource(
                type_name, self.client, self.registry, self.settings
            )
        return self._resources[type_name]

    def close(self) -> None:
        """Flush pending spans."""
        shutdown_tracing()
        self._resources.clear()
