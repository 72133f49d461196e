"""
Delete-and-wait orchestration.

Deletion is idempotent: an object that is already gone counts as deleted.
When a wait is requested the orchestrator polls until the object is absent.
"""

from crd_apply_engine.constants import ERROR_CANCELLED, ERROR_DELETE_FAILED
from crd_apply_engine.engine.client import RemoteObjectClient
from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.engine.poller import PollState, PollTarget, run_poll_loop
from crd_apply_engine.errors import (
    ClientError,
    DeleteFailedError,
    OperationCancelledError,
    ResourceNotFoundError,
    WaitTimeoutExceededError,
)
from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.wait import (
    DeletionPropagation,
    WaitPolicy,
    WaitSpecification,
)


class DeleteAndWaitOrchestrator:
    """Drives deletion: issue delete, then optionally wait for absence."""

    def __init__(self, client: RemoteObjectClient):
        self.client = client

    def delete_and_wait(
        self,
        coordinate: ResourceCoordinate,
        propagation: DeletionPropagation | None = None,
        wait: WaitPolicy | WaitSpecification | None = None,
        context: OperationContext | None = None,
    ) -> None:
        """
        Delete the object and optionally block until it is gone.

        A zero wait timeout performs one existence check and returns
        regardless of its outcome.

        Args:
            coordinate: Object to delete
            propagation: Deletion propagation policy, or None for the server default
            wait: Timeout and poll interval for the absence wait, or None
            context: Cancellation and deadline for the whole operation

        Raises:
            DeleteFailedError: If the delete call fails other than not-found
            WaitTimeoutExceededError: If the object outlived the wait budget
            OperationCancelledError: If the context was cancelled
        """
        context = context or OperationContext()
        if context.cancelled:
            raise OperationCancelledError(ERROR_CANCELLED.format(coordinate))

        try:
            self.client.delete(coordinate, propagation, context)
        except ResourceNotFoundError:
            return
        except ClientError as e:
            raise DeleteFailedError(
                f"{ERROR_DELETE_FAILED.format(coordinate)}: {e.args[0]}", cause=e
            ) from e

        if wait is None:
            return
        policy = wait.policy if isinstance(wait, WaitSpecification) else wait

        target = PollTarget(
            label=str(coordinate),
            policy=policy,
            check=lambda: self._is_absent(coordinate, context),
        )
        result = run_poll_loop([target], context)

        if result.state is PollState.CANCELLED:
            raise OperationCancelledError(ERROR_CANCELLED.format(coordinate))
        if result.state is PollState.TIMED_OUT:
            raise WaitTimeoutExceededError(str(coordinate), policy.timeout)

    def _is_absent(
        self, coordinate: ResourceCoordinate, context: OperationContext
    ) -> bool:
        try:
            self.client.get(coordinate, context)
        except ResourceNotFoundError:
            return True
        except ClientError:
            # Inconclusive; keep polling until the timeout decides
            return False
        return False
