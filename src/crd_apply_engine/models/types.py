"""
Type aliases for structural typing of remote documents.

Remote objects are loosely typed nested JSON trees. The aliases below make
the expected structure explicit without reflection-heavy wrappers:
- JsonValue: the closed set of JSON node types the evaluator matches on
- Document: a top-level JSON object (desired state or server response)
"""

from typing import Any

type JsonValue = (
    dict[str, JsonValue] | list[JsonValue] | str | int | float | bool | None
)
"""
Any node of a decoded JSON document.

The JSONPath evaluator pattern-matches on exactly these variants, so an
unexpected shape resolves to "not found" instead of raising.
"""

type Document = dict[str, Any]
"""
A Kubernetes object serialized as a JSON object.

Expected structure:
- apiVersion: str
- kind: str
- metadata: dict (name, namespace, labels, annotations, ...)
- spec / status: dict with kind-specific content
"""

type KubernetesMetadata = dict[str, Any]
"""
Kubernetes ObjectMeta structure.

Expected structure:
- name: str
- namespace: str
- labels: dict[str, str]
- annotations: dict[str, str]
- uid: str
- resourceVersion: str
- generation: int
"""
