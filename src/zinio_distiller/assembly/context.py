"""Cancellation and deadline signal shared by the download stages."""

import threading
import time

from .exceptions import OperationCancelledError


class RunContext:
    """A cancellable execution context with an optional deadline.

    A context is cancelled once its event is set or its deadline (a
    time.monotonic() value) has passed. Child contexts created with
    with_timeout() share the parent's event, so cancelling the parent
    cancels every child, while a child's deadline never outlives the
    parent's.

    Example:
        context = RunContext()
        page_context = context.with_timeout(30)
        page_context.check()
    """

    def __init__(
        self,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self.deadline = deadline
        self._event = cancel_event or threading.Event()

    def __repr__(self) -> str:
        return f"RunContext(deadline={self.deadline}, cancelled={self.cancelled})"

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left until the deadline, or None for an unbounded context."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def with_timeout(self, seconds: float) -> "RunContext":
        """Derive a child context that expires after at most `seconds`."""
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return RunContext(deadline=deadline, cancel_event=self._event)

    def check(self) -> None:
        """Raise if the context is cancelled or past its deadline.

        Raises:
            OperationCancelledError: If the context is no longer live
        """
        if self._event.is_set():
            raise OperationCancelledError("operation cancelled")
        if self.cancelled:
            raise OperationCancelledError("deadline exceeded")
