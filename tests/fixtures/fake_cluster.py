"""
In-memory stand-ins for the remote object store and the clock.

FakeObjectClient implements the RemoteObjectClient protocol and records
every call. FakeContext is an OperationContext whose sleep() advances a
fake clock instead of blocking, so poll loop timing can be asserted
exactly.
"""

import json
from collections import deque
from typing import Any

from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.errors import ResourceNotFoundError
from crd_apply_engine.models.coordinate import ResourceCoordinate
from crd_apply_engine.models.wait import ApplyOptions, DeletionPropagation

# Timeline value meaning "the object does not exist"
ABSENT = None


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeContext(OperationContext):
    """Operation context that never blocks; sleeping advances the fake clock."""

    def __init__(self, deadline: float | None = None, clock: FakeClock | None = None):
        self.clock = clock or FakeClock()
        super().__init__(deadline=deadline, clock=self.clock)
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> bool:
        self.sleeps.append(seconds)
        self.clock.advance(seconds)
        return not self.cancelled


class FakeObjectClient:
    """
    Scriptable remote object client.

    Reads are answered, in order of precedence, from a queue of scripted
    responses, from a timeline keyed by fake clock time, or from the last
    applied document. Scripted entries may be documents, exceptions to
    raise, or ABSENT.
    """

    def __init__(self, clock: FakeClock | None = None):
        self.clock = clock or FakeClock()
        self.calls: list[tuple[str, ResourceCoordinate]] = []
        self.applied: list[dict[str, Any]] = []
        self.deleted: list[DeletionPropagation | None] = []
        self.get_responses: deque[Any] = deque()
        self.timeline: list[tuple[float, Any]] = []
        self.apply_response: dict[str, Any] | None = None
        self.apply_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.current: Any = ABSENT

    @property
    def get_count(self) -> int:
        return sum(1 for operation, _ in self.calls if operation == "get")

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    def set_timeline(self, *entries: tuple[float, Any]) -> None:
        """Object state from each given time onwards, e.g. (0, doc), (12, ready)."""
        self.timeline = sorted(entries, key=lambda entry: entry[0])

    def get(self, coordinate: ResourceCoordinate, context: OperationContext | None = None):
        self.calls.append(("get", coordinate))
        if self.get_responses:
            response = self.get_responses.popleft()
        elif self.timeline:
            response = ABSENT
            for since, state in self.timeline:
                if since <= self.clock():
                    response = state
        else:
            response = self.current

        if isinstance(response, Exception):
            raise response
        if response is ABSENT:
            raise ResourceNotFoundError(f"{coordinate} not found")
        return response

    def apply_patch(
        self,
        coordinate: ResourceCoordinate,
        body: bytes,
        options: ApplyOptions,
        context: OperationContext | None = None,
    ):
        self.calls.append(("apply", coordinate))
        self.last_options = options
        document = json.loads(body)
        self.applied.append(document)
        if self.apply_error is not None:
            raise self.apply_error
        self.current = self.apply_response if self.apply_response is not None else document
        return self.current

    def delete(
        self,
        coordinate: ResourceCoordinate,
        propagation: DeletionPropagation | None = None,
        context: OperationContext | None = None,
    ) -> None:
        self.calls.append(("delete", coordinate))
        self.deleted.append(propagation)
        if self.delete_error is not None:
            raise self.delete_error
        if self.current is ABSENT and not self.timeline and not self.get_responses:
            raise ResourceNotFoundError(f"{coordinate} not found")


def build_document(name: str = "sample", namespace: str = "default", **status: Any):
    """A camel.apache.org Build document with the given status fields."""
    document: dict[str, Any] = {
        "apiVersion": "camel.apache.org/v1",
        "kind": "Build",
        "metadata": {"name": name, "namespace": namespace, "resourceVersion": "1"},
        "spec": {"tasks": [{"builder": {"name": "builder"}}]},
    }
    if status:
        document["status"] = status
    return document


def ready_conditions(status: str = "True") -> list[dict[str, str]]:
    return [{"type": "Ready", "status": status, "reason": "Reconciled"}]
