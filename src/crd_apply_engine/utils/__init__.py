"""
Utils package - Kubernetes integration for the CRD apply engine.

Contains helper modules for:
- Kubernetes client configuration
- The custom objects remote client used by the engine
"""

from crd_apply_engine.utils.kubernetes import (
    KubernetesObjectClient,
    get_kubernetes_client,
)

__all__ = [
    "KubernetesObjectClient",
    "get_kubernetes_client",
]
