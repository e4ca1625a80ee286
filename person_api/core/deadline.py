"""Cooperative deadlines for repository work running in worker threads.

A worker thread cannot be interrupted, so the work itself checks its
``Deadline`` between repository calls and once more right before it
commits. Once a commit has started the operation is settled: it will run to
completion and can no longer be cancelled.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from contextvars import ContextVar
from typing import TypeVar

from person_api.core.exceptions import OperationTimeoutError

T = TypeVar("T")

_current_deadline: ContextVar[Deadline | None] = ContextVar("current_deadline", default=None)


class Deadline:
    def __init__(self, operation: str, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        self._expires_at = time.monotonic() + timeout
        self._lock = threading.Lock()
        self._cancelled = False
        self._settled = False

    @property
    def settled(self) -> bool:
        return self._settled

    def cancel(self) -> bool:
        """Stop the work at its next check. Returns False if it already settled."""
        with self._lock:
            if self._settled:
                return False
            self._cancelled = True
            return True

    def check(self) -> None:
        with self._lock:
            if self._settled:
                return
            self._raise_if_expired()

    def settle(self) -> None:
        """Mark the point of no return; raises if the deadline has passed."""
        with self._lock:
            self._raise_if_expired()
            self._settled = True

    def _raise_if_expired(self) -> None:
        if self._cancelled or time.monotonic() >= self._expires_at:
            raise OperationTimeoutError(f"{self.operation} timed out after {self.timeout}s")


def check_deadline() -> None:
    """Fail with ``OperationTimeoutError`` if the current operation ran out of time."""
    deadline = _current_deadline.get()
    if deadline is not None:
        deadline.check()


def settle_deadline() -> None:
    deadline = _current_deadline.get()
    if deadline is not None:
        deadline.settle()


def run_with_deadline(deadline: Deadline, func: Callable[[], T]) -> T:
    """Run ``func`` under ``deadline``; a result produced too late is discarded."""
    token = _current_deadline.set(deadline)
    try:
        deadline.check()
        result = func()
        deadline.check()
        return result
    finally:
        _current_deadline.reset(token)
