"""
Completion Callbacks - Receivers of a task's terminal outcome.

Exactly one of on_success / on_failure is called per submitted task.
"""

from abc import ABC, abstractmethod
from concurrent.futures import Future
from typing import Callable, Optional

from easynote.exceptions import AIException


class CompletionCallback(ABC):
    """Receiver of one terminal outcome."""

    @abstractmethod
    def on_success(self, reply_text: str) -> None:
        pass

    @abstractmethod
    def on_failure(self, error: AIException) -> None:
        pass


class FunctionCallback(CompletionCallback):
    """
    Adapter for plain functions.

    Example:
        callback = FunctionCallback(
            on_success=lambda text: print(text),
            on_failure=lambda error: print(error.message),
        )
    """

    def __init__(
        self,
        on_success: Callable[[str], None],
        on_failure: Optional[Callable[[AIException], None]] = None,
    ):
        self._on_success = on_success
        self._on_failure = on_failure

    def on_success(self, reply_text: str) -> None:
        self._on_success(reply_text)

    def on_failure(self, error: AIException) -> None:
        if self._on_failure is not None:
            self._on_failure(error)


class FutureCallback(CompletionCallback):
    """Resolves a concurrent.futures.Future with the reply or the failure."""

    def __init__(self, future: Optional["Future[str]"] = None):
        self.future: "Future[str]" = future if future is not None else Future()

    def on_success(self, reply_text: str) -> None:
        if self.future.set_running_or_notify_cancel():
            self.future.set_result(reply_text)

    def on_failure(self, error: AIException) -> None:
        if self.future.set_running_or_notify_cancel():
            self.future.set_exception(error)
