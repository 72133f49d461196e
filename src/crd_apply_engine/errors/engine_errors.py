"""
Engine error hierarchy with categorization and retry hints.

This module defines the error types raised by the apply/delete engine and
its Kubernetes client. Callers can tell "the operation failed" apart from
"the operation succeeded but did not finish reconciling in time" by class.
"""


class EngineError(Exception):
    """
    Base error class for all engine-related exceptions.

    Provides categorization, retry hints, and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        retryable: bool = False,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize engine error.

        Args:
            message: Human-readable error description
            category: Error category (client, apply, wait, delete, configuration)
            retryable: Whether repeating the whole operation is expected to help
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.user_action = user_action
        self.cause = cause

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ClientError(EngineError):
    """Error communicating with the remote object store."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        reason: str | None = None,
        cause: Exception | None = None,
    ):
        if status:
            message = f"HTTP {status}: {message}"
        if reason:
            message = f"{message} (reason: {reason})"

        # 5xx and transport errors (no status) may clear up on their own
        retryable = status is None or status >= 500

        super().__init__(
            message=message,
            category="client",
            retryable=retryable,
            user_action="Check RBAC permissions and cluster connectivity",
            cause=cause,
        )
        self.status = status
        self.reason = reason


class ResourceNotFoundError(ClientError):
    """The addressed remote object does not exist."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message=message, status=404, reason="NotFound", cause=cause)
        self.user_action = None


class ConfigurationError(EngineError):
    """Error in caller-supplied configuration."""

    def __init__(self, message: str, user_action: str | None = None):
        super().__init__(
            message=message,
            category="configuration",
            retryable=False,
            user_action=user_action or "Review and correct resource configuration",
        )


class ApplyError(EngineError):
    """Base class for failures of the apply-and-wait operation."""


class PatchFailedError(ApplyError):
    """The server-side apply call itself failed; nothing is retried."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="apply",
            retryable=False,
            user_action="Inspect the API server response and the desired state",
            cause=cause,
        )


class SerializationError(ApplyError):
    """A document could not be converted to or from JSON."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="serialization",
            retryable=False,
            user_action="Ensure the document only contains JSON compatible values",
            cause=cause,
        )


class MalformedWaitSpecificationError(ApplyError):
    """A wait path expression could not be parsed."""

    def __init__(self, jsonpath: str, reason: str):
        super().__init__(
            message=f"Invalid JSONPath expression '{jsonpath}': {reason}",
            category="configuration",
            retryable=False,
            user_action=(
                "Use dotted field access and bracket indexing only, "
                "e.g. status.conditions[0].type"
            ),
        )
        self.jsonpath = jsonpath
        self.reason = reason


class WaitTimeoutError(ApplyError):
    """The apply succeeded but a post-condition never became true."""

    def __init__(self, jsonpath: str, timeout: float, expected: str | None = None):
        target = f"'{jsonpath}'" if expected is None else f"'{jsonpath}' == '{expected}'"
        super().__init__(
            message=(
                f"Apply succeeded but condition {target} was not met "
                f"within {timeout:g} seconds"
            ),
            category="wait",
            retryable=True,
            user_action=(
                "The object was applied and is left as-is; check its controller "
                "or increase the wait timeout"
            ),
        )
        self.jsonpath = jsonpath
        self.timeout = timeout
        self.expected = expected


class DeleteError(EngineError):
    """Base class for failures of the delete-and-wait operation."""


class DeleteFailedError(DeleteError):
    """The delete call failed for a reason other than not-found."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message,
            category="delete",
            retryable=False,
            user_action="Check RBAC permissions and finalizers on the object",
            cause=cause,
        )


class WaitTimeoutExceededError(DeleteError):
    """The object was still present after the deletion wait budget."""

    def __init__(self, resource: str, timeout: float):
        super().__init__(
            message=(
                f"Deletion of {resource} was accepted but the object still exists "
                f"after {timeout:g} seconds"
            ),
            category="wait",
            retryable=True,
            user_action=(
                "Check finalizers and dependents blocking removal, "
                "or increase the deletion wait timeout"
            ),
        )
        self.resource = resource
        self.timeout = timeout


class OperationCancelledError(EngineError):
    """Ambient cancellation was observed; reflects caller intent, not budget."""

    def __init__(self, message: str):
        super().__init__(message=message, category="cancelled", retryable=False)
