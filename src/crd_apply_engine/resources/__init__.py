"""Per-kind resource adapters built on the apply and delete engine."""

from crd_apply_engine.resources.custom_resource import CustomResource, build_resource
from crd_apply_engine.resources.kind import (
    KindRegistry,
    ResourceKind,
    default_registry,
    snake_case,
)

__all__ = [
    "CustomResource",
    "KindRegistry",
    "ResourceKind",
    "build_resource",
    "default_registry",
    "snake_case",
]
