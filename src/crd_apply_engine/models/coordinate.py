"""
Resource coordinates identifying one remote object.

A coordinate is the (group, version, resource, namespace, name) tuple the
Kubernetes API uses to address a custom object. Coordinates are frozen:
every operation takes a fresh coordinate or reuses an existing one.
"""

from pydantic import BaseModel, Field


class ResourceCoordinate(BaseModel):
    """Immutable address of a single remote object."""

    model_config = {"frozen": True, "populate_by_name": True}

    group: str = Field(
        "", description="API group, empty for the core group (e.g. camel.apache.org)"
    )
    version: str = Field(..., min_length=1, description="API version (e.g. v1)")
    resource_kind: str = Field(
        ...,
        min_length=1,
        alias="resourceKind",
        description="Plural resource name used in API paths (e.g. builds)",
    )
    namespace: str = Field(
        "", description="Namespace of the object, empty for cluster-scoped kinds"
    )
    name: str = Field(..., min_length=1, description="Name of the object")

    @property
    def api_version(self) -> str:
        """apiVersion string as written in manifests."""
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    @property
    def namespaced(self) -> bool:
        """Whether the object lives inside a namespace."""
        return bool(self.namespace)

    @property
    def object_id(self) -> str:
        """Identifier in 'namespace/name' form, or 'name' when cluster-scoped."""
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        return f"{self.resource_kind}.{self.api_version} {self.object_id}"
