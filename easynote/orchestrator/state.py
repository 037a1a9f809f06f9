"""
Retry State - Per-task record owned by the orchestrator.

One RetryState exists per submitted task, from submission until its terminal
outcome is dispatched. It holds at most one pending retry and a terminal
flag that can be claimed exactly once.
"""

import threading
from enum import Enum
from typing import TYPE_CHECKING, Optional

from easynote.exceptions import AIException
from easynote.llm.prompts import TaskKind

if TYPE_CHECKING:
    from easynote.orchestrator.callbacks import CompletionCallback
    from easynote.orchestrator.delay_queue import ScheduledRetry


class TaskPhase(str, Enum):
    """Lifecycle of one task."""
    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"
    INTERRUPTED = "interrupted"
    DISPATCHED = "dispatched"

    @property
    def is_terminal(self) -> bool:
        return self in (
            TaskPhase.SUCCEEDED,
            TaskPhase.EXHAUSTED,
            TaskPhase.INTERRUPTED,
            TaskPhase.DISPATCHED,
        )


class RetryState:
    """
    Mutable state of one task.

    Attributes:
        input_text: Text submitted by the caller
        task_kind: Selected task kind
        callback: Receiver of the terminal outcome
        max_attempts: Retries allowed (0 when retries are disabled)
        retry_delay: Seconds to wait before each retry
        generation: Orchestrator generation the task was submitted under
        attempts_so_far: Retries already made
        phase: Current TaskPhase
        last_error: Failure of the most recent attempt
    """

    def __init__(
        self,
        input_text: str,
        task_kind: TaskKind,
        callback: "CompletionCallback",
        max_attempts: int,
        retry_delay: float,
        generation: int = 0,
    ):
        self.input_text = input_text
        self.task_kind = task_kind
        self.callback = callback
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self.generation = generation
        self.attempts_so_far = 0
        self.phase = TaskPhase.IDLE
        self.last_error: Optional[AIException] = None
        self._lock = threading.Lock()
        self._pending: Optional["ScheduledRetry"] = None
        self._finished = False

    @property
    def attempt_number(self) -> int:
        """1-based number of the current attempt."""
        return self.attempts_so_far + 1

    @property
    def finished(self) -> bool:
        with self._lock:
            return self._finished

    @property
    def can_retry(self) -> bool:
        return self.attempts_so_far < self.max_attempts

    def record_retry(self) -> int:
        """Count one more retry and return the new total."""
        if not self.can_retry:
            raise RuntimeError(
                f"Retry budget exhausted ({self.attempts_so_far}/{self.max_attempts})"
            )
        self.attempts_so_far += 1
        self.phase = TaskPhase.RETRYING
        return self.attempts_so_far

    def hold(self, scheduled: "ScheduledRetry") -> None:
        """
        Occupy the single pending-retry slot.

        If the task already finished, the retry is cancelled on the spot.
        """
        with self._lock:
            if self._pending is not None:
                raise RuntimeError("A retry is already pending for this task")
            if self._finished:
                scheduled.cancel()
                return
            self._pending = scheduled

    def release(self, scheduled: "ScheduledRetry") -> None:
        """Free the slot once ``scheduled`` starts running."""
        with self._lock:
            if self._pending is scheduled:
                self._pending = None

    def cancel_pending(self) -> bool:
        """Cancel the pending retry, if any. Returns True if one was cancelled."""
        with self._lock:
            pending, self._pending = self._pending, None
        if pending is None:
            return False
        pending.cancel()
        return True

    def finish(self, phase: TaskPhase) -> bool:
        """
        Claim the terminal outcome.

        Returns True for the first caller only; every later call returns False.
        """
        with self._lock:
            if self._finished:
                return False
            self._finished = True
            self.phase = phase
            return True

    def __repr__(self) -> str:
        return (
            f"RetryState(kind={self.task_kind.value}, phase={self.phase.value}, "
            f"attempts={self.attempts_so_far}/{self.max_attempts})"
        )
