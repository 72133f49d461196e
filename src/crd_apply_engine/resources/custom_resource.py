"""
Generic per-kind resource adapter.

Every generated custom resource delegates create, read, update, delete and
import to one CustomResource parameterized by its ResourceKind. The adapter
owns the ambient concerns (provider defaults, logging, metrics, tracing);
the synchronization itself is done by the engine orchestrators.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from crd_apply_engine.constants import ERROR_IMPORT_ID, ID_SEPARATOR
from crd_apply_engine.engine.apply import ApplyAndWaitOrchestrator
from crd_apply_engine.engine.client import RemoteObjectClient
from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.engine.delete import DeleteAndWaitOrchestrator
from crd_apply_engine.errors import (
    ConfigurationError,
    EngineError,
    ResourceNotFoundError,
)
from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.resource import ObjectMetadata, ResourceModel
from crd_apply_engine.models.types import Document
from crd_apply_engine.models.wait import ApplyOptions
from crd_apply_engine.observability.logging import ResourceLogger
from crd_apply_engine.observability.metrics import MetricsCollector
from crd_apply_engine.observability.tracing import traced_operation
from crd_apply_engine.resources.kind import (
    KindRegistry,
    ResourceKind,
    default_registry,
)
from crd_apply_engine.settings import Settings
from crd_apply_engine.settings import settings as default_settings


class CustomResource:
    """
    Adapter mapping resource lifecycle calls onto the engine.

    Holds no per-object state; one instance serves every object of its kind
    and may be used from several threads at once.
    """

    def __init__(
        self,
        kind: ResourceKind,
        client: RemoteObjectClient,
        engine_settings: Settings | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            kind: Kind served by this adapter
            client: Shared remote object client
            engine_settings: Provider defaults, the global settings if not provided
        """
        self.kind = kind
        self.client = client
        self.settings = engine_settings or default_settings
        self.applier = ApplyAndWaitOrchestrator(client)
        self.deleter = DeleteAndWaitOrchestrator(client)
        self.logger = ResourceLogger(f"{__name__}.{kind.type_name}")
        self.metrics = MetricsCollector()

    @property
    def type_name(self) -> str:
        return self.kind.type_name

    def coordinate(self, model: ResourceModel) -> ResourceCoordinate:
        return self.kind.coordinate_for(model.metadata.name, model.metadata.namespace)

    def apply_options(self, model: ResourceModel) -> ApplyOptions:
        """Resolve per-resource apply options against the provider defaults."""
        field_manager = model.field_manager or self.settings.field_manager
        force_conflicts = model.force_conflicts
        if force_conflicts is None:
            force_conflicts = self.settings.force_conflicts
        return ApplyOptions(field_manager=field_manager, force_conflicts=force_conflicts)

    def create(
        self, model: ResourceModel, context: OperationContext | None = None
    ) -> ResourceModel:
        """Create the object and wait for its wait_for_upsert conditions."""
        return self._upsert("create", model, context)

    def update(
        self, model: ResourceModel, context: OperationContext | None = None
    ) -> ResourceModel:
        """Update the object and wait for its wait_for_upsert conditions."""
        return self._upsert("update", model, context)

    def read(
        self, model: ResourceModel, context: OperationContext | None = None
    ) -> ResourceModel | None:
        """
        Refresh the model from the live object.

        Returns:
            The refreshed model, or None when the object no longer exists
        """
        coordinate = self.coordinate(model)
        with self._operation("read", coordinate):
            try:
                document = self.client.get(coordinate, context)
            except ResourceNotFoundError:
                document = None
        if document is None:
            self.logger.info(
                f"{self.type_name} {coordinate.object_id} no longer exists",
                resource_type=self.type_name,
                resource_name=coordinate.name,
                namespace=coordinate.namespace,
            )
            return None
        return self._merge(model, document, coordinate)

    def delete(
        self, model: ResourceModel, context: OperationContext | None = None
    ) -> None:
        """Delete the object and honor its wait_for_delete block."""
        coordinate = self.coordinate(model)
        wait = None
        if model.wait_for_delete is not None:
            wait = model.wait_for_delete.to_policy(
                self.settings.wait_timeout_seconds, self.settings.poll_interval_seconds
            )
        with self._operation("delete", coordinate):
            self.deleter.delete_and_wait(
                coordinate, model.deletion_propagation, wait, context
            )

    def import_state(self, import_id: str) -> ResourceModel:
        """
        Build a model addressing an existing object from its import ID.

        Namespaced kinds take 'namespace/name', cluster-scoped kinds 'name'.

        Raises:
            ConfigurationError: If the ID does not match the expected format
        """
        parts = import_id.split(ID_SEPARATOR)
        if self.kind.namespaced:
            expected = "namespace/name"
            valid = len(parts) == 2 and all(parts)
        else:
            expected = "name"
            valid = len(parts) == 1 and bool(parts[0])
        if not valid:
            raise ConfigurationError(ERROR_IMPORT_ID.format(expected, import_id))

        namespace, name = (parts[0], parts[1]) if self.kind.namespaced else (None, parts[0])
        self.logger.debug(
            f"Parsed import ID {import_id!r}",
            resource_type=self.type_name,
            resource_name=name,
            namespace=namespace or "",
            operation="import",
        )
        return ResourceModel(
            id=import_id, metadata=ObjectMetadata(name=name, namespace=namespace)
        )

    def read_data_source(
        self,
        name: str,
        namespace: str | None = None,
        context: OperationContext | None = None,
    ) -> ResourceModel:
        """
        Look up an existing object.

        Raises:
            ResourceNotFoundError: If the object does not exist
        """
        coordinate = self.kind.coordinate_for(name, namespace)
        with self._operation("read_data_source", coordinate):
            document = self.client.get(coordinate, context)
        model = ResourceModel(metadata=ObjectMetadata(name=name, namespace=namespace))
        return self._merge(model, document, coordinate)

    def _upsert(
        self,
        operation: str,
        model: ResourceModel,
        context: OperationContext | None,
    ) -> ResourceModel:
        coordinate = self.coordinate(model)
        document = model.to_document(self.kind.api_version, self.kind.kind)
        with self._operation(operation, coordinate):
            final = self.applier.apply_and_wait(
                coordinate,
                document,
                self.apply_options(model),
                model.wait_specifications(
                    self.settings.wait_timeout_seconds,
                    self.settings.poll_interval_seconds,
                ),
                context,
            )
        return self._merge(model, final, coordinate)

    def _merge(
        self, model: ResourceModel, document: Document, coordinate: ResourceCoordinate
    ) -> ResourceModel:
        """Copy server-side metadata and spec into the model."""
        metadata = model.metadata
        server_metadata = document.get("metadata")
        if isinstance(server_metadata, dict) and server_metadata.get("name"):
            metadata = ObjectMetadata.model_validate(server_metadata)
        return model.model_copy(
            update={
                "id": coordinate.object_id,
                "metadata": metadata,
                "spec": document.get("spec"),
            }
        )

    @contextmanager
    def _operation(self, operation: str, coordinate: ResourceCoordinate) -> Iterator[None]:
        start = time.monotonic()
        self.logger.log_operation_start(
            operation, self.type_name, coordinate.name, coordinate.namespace
        )
        attributes = {
            "k8s.resource.type": self.type_name,
            "k8s.resource.name": coordinate.name,
            "k8s.namespace": coordinate.namespace,
        }
        with (
            self.metrics.track_operation(operation, self.type_name),
            traced_operation(f"{operation}_{self.type_name}", attributes),
        ):
            try:
                yield
            except EngineError as e:
                self.logger.log_operation_error(
                    operation,
                    self.type_name,
                    coordinate.name,
                    coordinate.namespace,
                    e,
                    time.monotonic() - start,
                )
                raise
        self.logger.log_operation_success(
            operation,
            self.type_name,
            coordinate.name,
            coordinate.namespace,
            time.monotonic() - start,
        )


def build_resource(
    type_name: str,
    client: RemoteObjectClient,
    registry: KindRegistry | None = None,
    engine_settings: Settings | None = None,
) -> CustomResource:
    """
    Build the adapter for a registered type name.

    Raises:
        ConfigurationError: If the type name is not registered
    """
    if registry is None:
        registry = default_registry
    return CustomResource(registry.get(type_name), client, engine_settings)
