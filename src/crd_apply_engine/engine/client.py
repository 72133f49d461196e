"""
Capability interface the engine requires from a remote object store.

The engine never constructs a client: one long-lived client is created per
provider session and shared across operations, so implementations must be
safe for concurrent use. Implementations raise ResourceNotFoundError for a
missing object and ClientError for every other failure.
"""

from typing import Protocol

from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.types import Document
from crd_apply_engine.models.wait import ApplyOptions, DeletionPropagation


class RemoteObjectClient(Protocol):
    """get / apply_patch / delete keyed by a resource coordinate."""

    def get(
        self, coordinate: ResourceCoordinate, context: OperationContext | None = None
    ) -> Document: ...

    def apply_patch(
        self,
        coordinate: ResourceCoordinate,
        body: bytes,
        options: ApplyOptions,
        context: OperationContext | None = None,
    ) -> Document: ...

    def delete(
        self,
        coordinate: ResourceCoordinate,
        propagation: DeletionPropagation | None = None,
        context: OperationContext | None = None,
    ) -> None: ...
