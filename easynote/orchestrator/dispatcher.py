"""
Result Dispatcher - Delivers terminal outcomes on the consumer's context.

A consumer context is wherever the caller wants callbacks to run: the thread
that produced the result, a dedicated consumer thread (the stand-in for a UI
thread), or an asyncio event loop. Delivery is synchronous when the
dispatcher is already running on that context, otherwise it is posted.

A context that has been torn down drops deliveries silently.
"""

import asyncio
import queue
import threading
from abc import ABC, abstractmethod
from typing import Callable, Optional

from easynote.exceptions import AIException
from easynote.logging import get_logger
from easynote.orchestrator.callbacks import CompletionCallback

logger = get_logger("ai-dispatcher")

Liveness = Callable[[], bool]


def _always_live() -> bool:
    return True


# ============================================================================
# EXECUTION CONTEXTS
# ============================================================================

class ExecutionContext(ABC):
    """Where callbacks are allowed to run."""

    @abstractmethod
    def is_current(self) -> bool:
        """True if the calling thread is already on this context."""
        pass

    @abstractmethod
    def post(self, fn: Callable[[], None]) -> bool:
        """
        Queue ``fn`` for execution on this context.

        Returns:
            False if the context is torn down and ``fn`` was dropped
        """
        pass


class InlineContext(ExecutionContext):
    """Runs callbacks on whichever thread produced the result."""

    def is_current(self) -> bool:
        return True

    def post(self, fn: Callable[[], None]) -> bool:
        fn()
        return True


class ThreadContext(ExecutionContext):
    """
    Dedicated consumer thread draining a FIFO queue.

    Example:
        context = ThreadContext(name="ui")
        context.start()
        ...
        context.stop()  # queued callbacks are dropped
    """

    _STOP = object()

    def __init__(self, name: str = "ai-consumer"):
        self.name = name
        self._lock = threading.Lock()
        self._queue: Optional["queue.Queue"] = None
        self._alive: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ThreadContext":
        with self._lock:
            if self._alive is not None and self._alive.is_set():
                return self
            # Fresh queue per start so nothing queued before a stop leaks through
            self._queue = queue.Queue()
            self._alive = threading.Event()
            self._alive.set()
            self._thread = threading.Thread(
                target=self._loop,
                args=(self._queue, self._alive),
                name=self.name,
                daemon=True,
            )
            self._thread.start()
        return self

    def _loop(self, tasks: "queue.Queue", alive: threading.Event) -> None:
        while True:
            item = tasks.get()
            if item is self._STOP:
                return
            if not alive.is_set():
                continue
            try:
                item()
            except Exception:
                logger.exception("Consumer task raised", extra={"context": self.name})

    @property
    def running(self) -> bool:
        with self._lock:
            return self._alive is not None and self._alive.is_set()

    def is_current(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def post(self, fn: Callable[[], None]) -> bool:
        with self._lock:
            if self._alive is None or not self._alive.is_set():
                return False
            self._queue.put(fn)
        return True

    def stop(self, timeout: Optional[float] = 1.0) -> None:
        """Tear the context down. Anything still queued is discarded."""
        with self._lock:
            if self._alive is None or not self._alive.is_set():
                return
            self._alive.clear()
            tasks, thread = self._queue, self._thread
        tasks.put(self._STOP)
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)


class AsyncioContext(ExecutionContext):
    """Runs callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop

    def is_current(self) -> bool:
        try:
            return asyncio.get_running_loop() is self.loop
        except RuntimeError:
            return False

    def post(self, fn: Callable[[], None]) -> bool:
        if self.loop.is_closed():
            return False
        try:
            self.loop.call_soon_threadsafe(fn)
        except RuntimeError:
            # Loop closed between the check and the call
            return False
        return True


# ============================================================================
# DISPATCHER
# ============================================================================

class ResultDispatcher:
    """
    Delivers one outcome to a callback on the consumer context.

    The dispatcher does not deduplicate: the orchestrator claims the terminal
    outcome on the task's RetryState before dispatching.
    """

    def __init__(self, context: Optional[ExecutionContext] = None):
        self.context = context or InlineContext()

    def dispatch_success(
        self,
        callback: CompletionCallback,
        reply_text: str,
        is_live: Liveness = _always_live,
    ) -> None:
        self._deliver(lambda: callback.on_success(reply_text), is_live, "success")

    def dispatch_failure(
        self,
        callback: CompletionCallback,
        error: AIException,
        is_live: Liveness = _always_live,
    ) -> None:
        self._deliver(lambda: callback.on_failure(error), is_live, error.kind)

    def _deliver(self, invoke: Callable[[], None], is_live: Liveness, outcome: str) -> None:
        def deliver() -> None:
            # Re-checked on the consumer side: shutdown may have happened while queued
            if not is_live():
                logger.debug("Dropping delivery for discarded task", extra={"outcome": outcome})
                return
            try:
                invoke()
            except Exception:
                logger.exception("Result callback raised", extra={"outcome": outcome})

        if self.context.is_current():
            deliver()
            return

        if not self.context.post(deliver):
            logger.debug("Consumer context unavailable, delivery dropped", extra={"outcome": outcome})
