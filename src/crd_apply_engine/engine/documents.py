"""JSON (de)serialization of desired and final documents."""

import json
from typing import Any

from crd_apply_engine.errors import SerializationError
from crd_apply_engine.models.types import Document


def serialize_document(document: Document) -> bytes:
    """Encode a desired-state document for a server-side apply request."""
    try:
        return json.dumps(document, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(
            f"Desired state is not JSON serializable: {e}", cause=e
        ) from e


def deserialize_document(payload: Any) -> Document:
    """Decode a server response into a document.

    Accepts an already decoded mapping or raw JSON bytes/text.
    """
    if isinstance(payload, bytes | str):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise SerializationError(f"Server response is not valid JSON: {e}", cause=e) from e
    if not isinstance(payload, dict):
        raise SerializationError(
            f"Server response is not a JSON object (got {type(payload).__name__})"
        )
    return payload
