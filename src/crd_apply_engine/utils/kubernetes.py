"""
Kubernetes utilities for the CRD apply engine.

This module provides the production remote object client used by the
engine, backed by the Kubernetes custom objects API.

Key functionality:
- Kubernetes client management and configuration
- Server-side apply of custom objects
- Get and delete of namespaced and cluster-scoped custom objects
- Translation of API failures into engine client errors
"""

import logging
import threading
from typing import Any

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from crd_apply_engine.constants import (
    APPLY_PATCH_CONTENT_TYPE,
    DEFAULT_REQUEST_TIMEOUT,
    ERROR_CANCELLED,
)
from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.engine.documents import deserialize_document
from crd_apply_engine.errors import (
    ClientError,
    OperationCancelledError,
    ResourceNotFoundError,
)
from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.types import Document
from crd_apply_engine.models.wait import ApplyOptions, DeletionPropagation

logger = logging.getLogger(__name__)


def get_kubernetes_client(context: str | None = None) -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    This function handles both in-cluster and local development configurations.

    Args:
        context: Kubeconfig context to use outside a cluster (None = current)

    Returns:
        Configured Kubernetes API client
    """
    try:
        # Try in-cluster config first (when running in a pod)
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            # Fall back to local kubeconfig (for development)
            config.load_kube_config(context=context or None)
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    return client.ApiClient()


def _translate_api_exception(
    e: ApiException, operation: str, coordinate: ResourceCoordinate
) -> ClientError:
    if e.status == 404:
        return ResourceNotFoundError(f"{coordinate} not found", cause=e)
    return ClientError(
        f"Failed to {operation} {coordinate}: {e.body or e.reason}",
        status=e.status,
        reason=e.reason,
        cause=e,
    )


class KubernetesObjectClient:
    """
    Remote object client over the Kubernetes custom objects API.

    One instance is shared by all operations of a provider session; the
    underlying ApiClient connection pool is safe for concurrent use.
    """

    def __init__(
        self,
        api_client: client.ApiClient | None = None,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        kubeconfig_context: str | None = None,
    ):
        """
        Initialize the client.

        Args:
            api_client: Kubernetes API client, created lazily if not provided
            request_timeout: Upper bound in seconds for a single API call
            kubeconfig_context: Kubeconfig context used when creating a client
        """
        self.api_client = api_client
        self.request_timeout = request_timeout
        self.kubeconfig_context = kubeconfig_context
        self._custom_api: client.CustomObjectsApi | None = None
        self._lock = threading.Lock()

    @property
    def custom_api(self) -> client.CustomObjectsApi:
        """Get or create the custom objects API."""
        if self._custom_api is None:
            with self._lock:
                if self._custom_api is None:
                    if self.api_client is None:
                        self.api_client = get_kubernetes_client(self.kubeconfig_context)
                    self._custom_api = client.CustomObjectsApi(self.api_client)
        return self._custom_api

    def _call(
        self,
        operation: str,
        coordinate: ResourceCoordinate,
        method: str,
        context: OperationContext | None,
        **kwargs: Any,
    ) -> Any:
        """
        Invoke a custom objects API method for the coordinate's scope.

        Args:
            operation: Operation name for messages (get, apply, delete)
            coordinate: Addressed object
            method: API method name without its scope, e.g. "get_{}_custom_object"
            context: Operation context bounding the request timeout
            **kwargs: Extra arguments for the API method

        Raises:
            OperationCancelledError: If the context's deadline has already passed
            ClientError: For configuration, API or transport failures
        """
        timeout = self.request_timeout
        if context is not None:
            timeout = context.request_timeout(self.request_timeout)
            # The API rejects a non-positive request timeout
            if timeout <= 0:
                raise OperationCancelledError(ERROR_CANCELLED.format(coordinate))

        kwargs.update(
            group=coordinate.group,
            version=coordinate.version,
            plural=coordinate.resource_kind,
            name=coordinate.name,
            _request_timeout=timeout,
        )
        if coordinate.namespaced:
            kwargs["namespace"] = coordinate.namespace
        scope = "namespaced" if coordinate.namespaced else "cluster"

        logger.debug(f"Kubernetes {operation} {coordinate}")
        try:
            api_method = getattr(self.custom_api, method.format(scope))
            return api_method(**kwargs)
        except ApiException as e:
            raise _translate_api_exception(e, operation, coordinate) from e
        except urllib3.exceptions.HTTPError as e:
            raise ClientError(
                f"Failed to {operation} {coordinate}: {e}", cause=e
            ) from e
        except config.ConfigException as e:
            raise ClientError(
                f"Failed to {operation} {coordinate}: "
                f"Kubernetes configuration unavailable: {e}",
                cause=e,
            ) from e

    def get(
        self, coordinate: ResourceCoordinate, context: OperationContext | None = None
    ) -> Document:
        """
        Read the current state of an object.

        Raises:
            ResourceNotFoundError: If the object does not exist
            ClientError: For any other API or transport failure
        """
        return self._call("get", coordinate, "get_{}_custom_object", context)

    def apply_patch(
        self,
        coordinate: ResourceCoordinate,
        body: bytes,
        options: ApplyOptions,
        context: OperationContext | None = None,
    ) -> Document:
        """
        Server-side apply a serialized object.

        The API client encodes the patch body itself, so the serialized
        document is decoded back into a mapping before it is sent.

        Args:
            coordinate: Object to apply
            body: JSON-encoded desired state (valid apply-patch YAML)
            options: Field manager and force flag
            context: Operation context bounding the request timeout

        Returns:
            The object as returned by the API server
        """
        return self._call(
            "apply",
            coordinate,
            "patch_{}_custom_object",
            context,
            body=deserialize_document(body),
            field_manager=options.field_manager,
            force=options.force_conflicts,
            _content_type=APPLY_PATCH_CONTENT_TYPE,
        )

    def delete(
        self,
        coordinate: ResourceCoordinate,
        propagation: DeletionPropagation | None = None,
        context: OperationContext | None = None,
    ) -> None:
        """
        Delete an object.

        Raises:
            ResourceNotFoundError: If the object is already gone
            ClientError: For any other API or transport failure
        """
        kwargs: dict[str, Any] = {}
        if propagation is not None:
            kwargs["propagation_policy"] = propagation.value
        self._call("delete", coordinate, "delete_{}_custom_object", context, **kwargs)
