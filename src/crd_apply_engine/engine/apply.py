"""
Apply-and-wait orchestration.

Makes the remote object match a desired-state document using server-side
apply, then optionally waits until post-apply conditions hold on the live
object. The apply is never retried and never rolled back: a wait timeout
leaves the object in its applied, possibly still reconciling, state.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from crd_apply_engine.constants import ERROR_CANCELLED, ERROR_PATCH_FAILED
from crd_apply_engine.engine.client import RemoteObjectClient
from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.engine.documents import deserialize_document, serialize_document
from crd_apply_engine.engine.jsonpath import FieldPath, condition_met, parse_path
from crd_apply_engine.engine.poller import PollState, PollTarget, run_poll_loop
from crd_apply_engine.errors import (
    ClientError,
    OperationCancelledError,
    PatchFailedError,
    WaitTimeoutError,
)
from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.types import Document
from crd_apply_engine.models.wait import ApplyOptions, WaitSpecification


@dataclass
class _LatestDocument:
    document: Document


class ApplyAndWaitOrchestrator:
    """Drives create/update: apply desired state, then wait on conditions."""

    def __init__(self, client: RemoteObjectClient):
        """
        Initialize orchestrator.

        Args:
            client: Shared remote object client (not owned by the orchestrator)
        """
        self.client = client

    def apply_and_wait(
        self,
        coordinate: ResourceCoordinate,
        desired_document: Document,
        apply_options: ApplyOptions,
        wait_specs: Sequence[WaitSpecification] = (),
        context: OperationContext | None = None,
    ) -> Document:
        """
        Apply the desired document and wait for every condition.

        Args:
            coordinate: Object to apply
            desired_document: Full object; apiVersion and kind already set
            apply_options: Field manager and force flag, forwarded verbatim
            wait_specs: Conditions that must all hold after the apply
            context: Cancellation and deadline for the whole operation

        Returns:
            The server's response when there are no conditions, otherwise the
            last fetched state of the object

        Raises:
            MalformedWaitSpecificationError: Before any I/O, for a bad path
            SerializationError: If the document cannot be encoded or decoded
            PatchFailedError: If the apply call fails
            WaitTimeoutError: If a condition did not hold within its timeout
            OperationCancelledError: If the context was cancelled
        """
        context = context or OperationContext()

        # Fail fast on configuration errors, before any network call
        paths = [parse_path(spec.jsonpath) for spec in wait_specs]
        body = serialize_document(desired_document)

        if context.cancelled:
            raise OperationCancelledError(ERROR_CANCELLED.format(coordinate))

        try:
            response = self.client.apply_patch(coordinate, body, apply_options, context)
        except ClientError as e:
            raise PatchFailedError(
                f"{ERROR_PATCH_FAILED.format(coordinate)}: {e.args[0]}", cause=e
            ) from e

        latest = _LatestDocument(deserialize_document(response))
        if not wait_specs:
            return latest.document

        targets = [
            PollTarget(
                label=spec.jsonpath,
                policy=spec.policy,
                check=self._condition_check(
                    coordinate, path, spec.expected_value, latest, context
                ),
            )
            for spec, path in zip(wait_specs, paths, strict=True)
        ]
        result = run_poll_loop(targets, context)

        if result.state is PollState.CANCELLED:
            raise OperationCancelledError(ERROR_CANCELLED.format(coordinate))
        if result.state is PollState.TIMED_OUT:
            failed = next(
                spec
                for spec, target in zip(wait_specs, targets, strict=True)
                if target is result.target
            )
            raise WaitTimeoutError(
                failed.jsonpath, failed.timeout, failed.expected_value
            )
        return latest.document

    def _condition_check(
        self,
        coordinate: ResourceCoordinate,
        path: FieldPath,
        expected_value: str | None,
        latest: _LatestDocument,
        context: OperationContext,
    ) -> Callable[[], bool]:
        def check() -> bool:
            try:
                document = deserialize_document(self.client.get(coordinate, context))
            except ClientError:
                # Inconclusive; the object may be briefly unavailable
                return False
            latest.document = document
            return condition_met(document, path, expected_value)

        return check
