"""
Operation context carrying cancellation and an optional deadline.

One context is threaded through every remote call and every inter-poll
sleep of a single apply or delete operation, so a caller-level budget can
abort a poll loop that is mid-sleep.
"""

import threading
import time
from collections.abc import Callable

type Clock = Callable[[], float]


class OperationContext:
    """
    Cancellation signal and deadline for one engine operation.

    The context is cancelled when cancel() is called (from any thread) or
    when the optional deadline passes.
    """

    def __init__(self, deadline: float | None = None, clock: Clock = time.monotonic):
        """
        Initialize operation context.

        Args:
            deadline: Absolute time on the clock after which the context is
                cancelled, or None for no deadline
            clock: Monotonic time source in seconds
        """
        self._clock = clock
        self._deadline = deadline
        self._cancel_event = threading.Event()

    @classmethod
    def with_timeout(
        cls, seconds: float, clock: Clock = time.monotonic
    ) -> "OperationContext":
        """Create a context that cancels itself after the given budget."""
        return cls(deadline=clock() + seconds, clock=clock)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        """Whether the caller cancelled or the deadline passed."""
        if self._cancel_event.is_set():
            return True
        return self._deadline is not None and self._clock() >= self._deadline

    def cancel(self) -> None:
        """Signal cancellation; wakes up a pending sleep()."""
        self._cancel_event.set()

    def now(self) -> float:
        return self._clock()

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(self._deadline - self._clock(), 0.0)

    def request_timeout(self, cap: float) -> float:
        """Timeout for one remote call: the cap, reduced to the remaining budget."""
        remaining = self.remaining()
        if remaining is None:
            return cap
        return min(cap, remaining)

    def sleep(self, seconds: float) -> bool:
        """
        Block for the given time unless cancelled first.

        Args:
            seconds: Time to sleep

        Returns:
            True if the full sleep elapsed, False if it was interrupted
        """
        if seconds > 0:
            remaining = self.remaining()
            if remaining is not None and remaining < seconds:
                # Wake at the deadline so the caller observes cancellation
                self._cancel_event.wait(remaining)
                return False
            if self._cancel_event.wait(seconds):
                return False
        return not self.cancelled
