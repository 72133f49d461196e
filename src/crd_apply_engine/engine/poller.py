"""
Shared poll loop used by the apply and delete orchestrators.

Each wait target runs the state machine

    CHECKING -> SATISFIED | TIMED_OUT | CHECKED_ONCE | CHECKING

Targets are checked sequentially in declaration order within one cycle,
one remote read per target per cycle. The loop stops issuing reads as soon
as any target times out. Cancellation is checked at the top of every
cycle, before the first read included.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from crd_apply_engine.engine.context import OperationContext
from crd_apply_engine.models.wait import WaitPolicy


class PollState(StrEnum):
    """States of a wait target and outcomes of a poll loop."""

    CHECKING = "checking"
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"
    # A one-shot target (zero timeout) whose single check was not satisfied
    CHECKED_ONCE = "checked_once"


@dataclass
class PollTarget:
    """One condition being waited on."""

    label: str
    policy: WaitPolicy
    check: Callable[[], bool]
    state: PollState = field(default=PollState.CHECKING, init=False)
    checks: int = field(default=0, init=False)
    started_at: float = field(default=0.0, init=False)
    next_check_at: float = field(default=0.0, init=False)

    def start(self, now: float) -> None:
        self.state = PollState.CHECKING
        self.checks = 0
        self.started_at = now
        self.next_check_at = now

    def observe(self, satisfied: bool, now: float) -> PollState:
        """Record the outcome of one check taken at the given time."""
        self.checks += 1
        if satisfied:
            self.state = PollState.SATISFIED
        elif self.policy.one_shot:
            self.state = PollState.CHECKED_ONCE
        elif now > self.started_at + self.policy.timeout:
            self.state = PollState.TIMED_OUT
        else:
            self.next_check_at = now + self.policy.poll_interval
        return self.state


@dataclass(frozen=True)
class PollResult:
    """Outcome of a poll loop; target names the one that timed out."""

    state: PollState
    target: PollTarget | None = None

    @property
    def succeeded(self) -> bool:
        return self.state in (PollState.SATISFIED, PollState.CHECKED_ONCE)


def run_poll_loop(
    targets: Sequence[PollTarget], context: OperationContext
) -> PollResult:
    """
    Poll every target until all settle, one times out, or the context is cancelled.

    Args:
        targets: Conditions to wait on, checked in declaration order
        context: Cancellation signal and clock for the operation

    Returns:
        PollResult with the overall state
    """
    start = context.now()
    for target in targets:
        target.start(start)

    while True:
        if context.cancelled:
            return PollResult(PollState.CANCELLED)

        now = context.now()
        for target in targets:
            if target.state is not PollState.CHECKING or target.next_check_at > now:
                continue
            if target.observe(target.check(), context.now()) is PollState.TIMED_OUT:
                return PollResult(PollState.TIMED_OUT, target)

        pending = [t for t in targets if t.state is PollState.CHECKING]
        if not pending:
            if any(t.state is PollState.CHECKED_ONCE for t in targets):
                return PollResult(PollState.CHECKED_ONCE)
            return PollResult(PollState.SATISFIED)

        wake_at = min(t.next_check_at for t in pending)
        context.sleep(max(wake_at - context.now(), 0.0))
