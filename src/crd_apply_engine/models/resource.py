"""
Resource configuration model consumed by the per-kind adapters.

This mirrors the attributes every generated custom resource exposes:
object metadata and spec, server-side apply overrides, deletion
propagation, and the wait_for_upsert / wait_for_delete blocks.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from crd_apply_engine.constants import DEFAULT_POLL_INTERVAL, DEFAULT_WAIT_TIMEOUT
from crd_apply_engine.errors import ConfigurationError
from crd_apply_engine.models.types import Document, KubernetesMetadata
from crd_apply_engine.models.wait import (
    DeletionPropagation,
    WaitPolicy,
    WaitSpecification,
)


class ObjectMetadata(BaseModel):
    """User-managed subset of Kubernetes ObjectMeta."""

    model_config = {"populate_by_name": True, "extra": "ignore"}

    name: str = Field(..., min_length=1, description="Name of the object")
    namespace: str | None = Field(None, description="Namespace of the object")
    labels: dict[str, str] | None = Field(None, description="Object labels")
    annotations: dict[str, str] | None = Field(None, description="Object annotations")

    def to_manifest(self) -> KubernetesMetadata:
        return self.model_dump(exclude_none=True)


class WaitForUpsert(BaseModel):
    """Condition to wait for after create or update."""

    model_config = {"populate_by_name": True}

    jsonpath: str = Field(
        ...,
        min_length=1,
        description=(
            "Relaxed JSONPath expression to use. See "
            "https://pkg.go.dev/k8s.io/kubectl/pkg/cmd/get#RelaxedJSONPathExpression"
        ),
    )
    value: str | None = Field(
        None,
        description=(
            "The value to wait for. If not specified, waiting will complete as soon "
            "as JSONPath expression exists and has any non-empty value."
        ),
    )
    timeout: float | None = Field(
        None,
        ge=0,
        description=(
            "Seconds to wait before giving up. Zero means check once and don't wait. "
            "If not specified uses the value from the provider configuration."
        ),
    )
    poll_interval: float | None = Field(
        None,
        ge=0,
        description="Seconds to wait before checking again.",
    )

    def to_specification(
        self,
        default_timeout: float = DEFAULT_WAIT_TIMEOUT,
        default_poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> WaitSpecification:
        return WaitSpecification(
            jsonpath=self.jsonpath,
            expected_value=self.value,
            timeout=default_timeout if self.timeout is None else self.timeout,
            poll_interval=(
                default_poll_interval
                if self.poll_interval is None
                else self.poll_interval
            ),
        )


class WaitForDelete(BaseModel):
    """Wait for the object to disappear after deletion."""

    model_config = {"populate_by_name": True}

    timeout: float | None = Field(
        None,
        ge=0,
        description=(
            "Seconds to wait before giving up. Zero means check once and don't wait. "
            "If not specified uses the value from the provider configuration."
        ),
    )
    poll_interval: float | None = Field(
        None,
        ge=0,
        description="Seconds to wait before checking again.",
    )

    def to_policy(
        self,
        default_timeout: float = DEFAULT_WAIT_TIMEOUT,
        default_poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> WaitPolicy:
        return WaitPolicy(
            timeout=default_timeout if self.timeout is None else self.timeout,
            poll_interval=(
                default_poll_interval
                if self.poll_interval is None
                else self.poll_interval
            ),
        )


class ResourceModel(BaseModel):
    """Configuration and state of one managed custom resource."""

    model_config = {"populate_by_name": True}

    id: str | None = Field(
        None, description="Contains the value 'metadata.namespace/metadata.name'"
    )
    metadata: ObjectMetadata
    spec: Document | None = Field(None, description="Kind-specific desired state")
    force_conflicts: bool | None = Field(
        None,
        description=(
            "If true, server-side apply will force the changes against conflicts. "
            "If not specified uses the value from the provider configuration."
        ),
    )
    field_manager: str | None = Field(
        None,
        min_length=1,
        description=(
            "The name of the manager used to track field ownership. "
            "If not specified uses the value from the provider configuration."
        ),
    )
    deletion_propagation: DeletionPropagation | None = Field(
        None,
        description=(
            "Decides if a deletion will propagate to the dependents of the object, "
            "and how the garbage collector will handle the propagation."
        ),
    )
    wait_for_upsert: list[WaitForUpsert] = Field(
        default_factory=list,
        description="Wait for specific conditions after create/update of resources.",
    )
    wait_for_delete: WaitForDelete | None = Field(
        None, description="Wait for deletion of resources."
    )

    @field_validator("deletion_propagation", mode="before")
    @classmethod
    def _parse_propagation(cls, value: Any) -> Any:
        if value is None:
            return None
        try:
            return DeletionPropagation.parse(value)
        except ConfigurationError as e:
            # Surface as a pydantic validation error
            raise ValueError(str(e).splitlines()[0]) from e

    def wait_specifications(
        self,
        default_timeout: float = DEFAULT_WAIT_TIMEOUT,
        default_poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> list[WaitSpecification]:
        return [
            wait.to_specification(default_timeout, default_poll_interval)
            for wait in self.wait_for_upsert
        ]

    def to_document(self, api_version: str, kind: str) -> Document:
        """Build the desired-state document sent to the API server."""
        document: Document = {
            "apiVersion": api_version,
            "kind": kind,
            "metadata": self.metadata.to_manifest(),
        }
        if self.spec is not None:
            document["spec"] = self.spec
        return document
