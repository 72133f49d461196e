"""
Resource kinds and the registry of per-kind adapters.

A ResourceKind is everything that differs between two generated custom
resources as far as synchronization is concerned: where the kind lives in
the API and whether its objects are namespaced.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass

from crd_apply_engine.errors import ConfigurationError
from crd_apply_engine.models.coordinate import ResourceCoordinate

# Word boundaries in CamelCase kinds, keeping acronyms together ("FederatedHPA")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(kind: str) -> str:
    """CamelCase kind to snake_case ("APIcast" -> "ap_icast")."""
    return _CAMEL_BOUNDARY.sub("_", kind).lower()


@dataclass(frozen=True)
class ResourceKind:
    """API location and scope of one custom resource kind."""

    group: str
    version: str
    plural: str
    kind: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    @property
    def type_name(self) -> str:
        """Terraform-style type name, e.g. camel_apache_org_build_v1."""
        parts = [snake_case(self.kind), self.version]
        if self.group:
            parts.insert(0, re.sub(r"[.\-]", "_", self.group))
        return "_".join(parts)

    def coordinate_for(self, name: str, namespace: str | None = None) -> ResourceCoordinate:
        """
        Build the coordinate of one object of this kind.

        Raises:
            ConfigurationError: If a namespaced kind is addressed without namespace
        """
        if self.namespaced and not namespace:
            raise ConfigurationError(
                f"{self.kind} objects are namespaced; metadata.namespace is required"
            )
        return ResourceCoordinate(
            group=self.group,
            version=self.version,
            resource_kind=self.plural,
            namespace=namespace if self.namespaced else "",
            name=name,
        )


class KindRegistry:
    """Registered kinds keyed by type name."""

    def __init__(self, kinds: tuple[ResourceKind, ...] = ()):
        self._kinds: dict[str, ResourceKind] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind: ResourceKind) -> ResourceKind:
        existing = self._kinds.get(kind.type_name)
        if existing is not None and existing != kind:
            raise ConfigurationError(
                f"Type name '{kind.type_name}' is already registered for a different kind"
            )
        self._kinds[kind.type_name] = kind
        return kind

    def get(self, type_name: str) -> ResourceKind:
        try:
            return self._kinds[type_name]
        except KeyError:
            raise ConfigurationError(
                f"Unknown resource type '{type_name}'",
                user_action="Register the kind before building its adapter",
            ) from None

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._kinds

    def __iter__(self) -> Iterator[ResourceKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)


# A sample of generated kinds; callers register the rest
default_registry = KindRegistry(
    (
        ResourceKind("acid.zalan.do", "v1", "postgresqls", "postgresql"),
        ResourceKind("acme.cert-manager.io", "v1", "challenges", "Challenge"),
        ResourceKind("apps.3scale.net", "v1alpha1", "apicasts", "APIcast"),
        ResourceKind("autoscaling", "v2", "horizontalpodautoscalers", "HorizontalPodAutoscaler"),
        ResourceKind("autoscaling.karmada.io", "v1alpha1", "federatedhpas", "FederatedHPA"),
        ResourceKind("camel.apache.org", "v1", "builds", "Build"),
        ResourceKind("camel.apache.org", "v1", "integrationkits", "IntegrationKit"),
        ResourceKind("cert-manager.io", "v1", "certificates", "Certificate"),
        ResourceKind("cilium.io", "v2", "ciliumnodes", "CiliumNode", namespaced=False),
        ResourceKind(
            "admissionregistration.k8s.io",
            "v1",
            "mutatingwebhookconfigurations",
            "MutatingWebhookConfiguration",
            namespaced=False,
        ),
    )
)
