"""
Constants used throughout the CRD apply engine.

This module defines all constant values used by the engine including:
- Server-side apply defaults
- Wait defaults inherited by wait specifications
- Deletion propagation policies
- Error message templates
"""

# Server-side apply
APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"
DEFAULT_FIELD_MANAGER = "crd-apply-engine"
DEFAULT_FORCE_CONFLICTS = False

# Wait defaults (seconds)
DEFAULT_WAIT_TIMEOUT = 30
DEFAULT_POLL_INTERVAL = 5

# Upper bound for a single remote call (seconds)
DEFAULT_REQUEST_TIMEOUT = 30

# Deletion propagation policies accepted by the Kubernetes API
PROPAGATION_ORPHAN = "Orphan"
PROPAGATION_BACKGROUND = "Background"
PROPAGATION_FOREGROUND = "Foreground"

# Resource ID separator ("namespace/name")
ID_SEPARATOR = "/"

# Error message templates
ERROR_PATCH_FAILED = "Server-side apply of {} failed"
ERROR_DELETE_FAILED = "Deletion of {} failed"
ERROR_CANCELLED = "Operation on {} was cancelled"
ERROR_IMPORT_ID = "Expected import identifier with format: '{}' Got: '{}'"
ERROR_INVALID_PROPAGATION = (
    "Deletion propagation '{}' is not supported. Supported values: {}"
)
