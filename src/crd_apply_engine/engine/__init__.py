"""
Engine package - the resource-agnostic apply/reconcile/wait state machine.

Contains:
- Condition evaluation over relaxed JSONPath expressions
- The shared poll loop
- Apply-and-wait and delete-and-wait orchestrators
"""

from crd_apply_engine.engine.apply import ApplyAndWaitOrchestrator
from crd_apply_engine.engine.client import RemoteObjectClient
from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.engine.delete import DeleteAndWaitOrchestrator
from crd_apply_engine.engine.jsonpath import (
    NOT_FOUND,
    FieldPath,
    Found,
    NotFound,
    condition_met,
    evaluate,
    parse_path,
)
from crd_apply_engine.engine.poller import (
    PollResult,
    PollState,
    PollTarget,
    run_poll_loop,
)

__all__ = [
    "ApplyAndWaitOrchestrator",
    "DeleteAndWaitOrchestrator",
    "OperationContext",
    "RemoteObjectClient",
    "FieldPath",
    "Found",
    "NotFound",
    "NOT_FOUND",
    "parse_path",
    "evaluate",
    "condition_met",
    "PollResult",
    "PollState",
    "PollTarget",
    "run_poll_loop",
]
