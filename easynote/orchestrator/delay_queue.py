"""
Delay Queue - Single-worker executor for delayed retries.

Every scheduled item waits its delay and then runs its action on one worker
thread, so retries are serialized across all tasks of an orchestrator. A
forced stop wakes waiting items (which take their interrupt path) and drops
items that have not started. reset() replaces the stopped executor with a
fresh one.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from easynote.logging import get_logger

logger = get_logger("ai-delay-queue")


class ScheduledRetry:
    """Handle for one scheduled item. Cancelling it is idempotent."""

    def __init__(self):
        self._cancelled = threading.Event()
        self.future: Optional[Future] = None
        self.started = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()
        if self.future is not None:
            self.future.cancel()


class DelayQueue:
    """
    One-at-a-time delayed execution.

    Example:
        queue = DelayQueue()
        handle = queue.schedule(do_retry, delay=1.0, on_interrupt=give_up)
        handle.cancel()  # do_retry will not run
    """

    def __init__(self, name: str = "ai-retry"):
        self._name = name
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor
        self._stopped: threading.Event
        self._start()

    def _start(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self._name)
        self._stopped = threading.Event()

    @property
    def is_stopped(self) -> bool:
        with self._lock:
            return self._stopped.is_set()

    def schedule(
        self,
        action: Callable[[], None],
        delay: float,
        on_interrupt: Callable[[], None],
        handle: Optional[ScheduledRetry] = None,
    ) -> ScheduledRetry:
        """
        Run ``action`` on the worker after ``delay`` seconds.

        ``on_interrupt`` runs instead if the queue is stopped while waiting.
        Neither runs if the handle is cancelled first.

        Args:
            action: Work to run after the delay
            delay: Seconds to wait
            on_interrupt: Called if the wait is cut short by a stop
            handle: Pre-created handle, for callers that register it before queueing

        Raises:
            RuntimeError: The queue has been stopped and not reset
        """
        handle = handle or ScheduledRetry()
        with self._lock:
            executor, stopped = self._executor, self._stopped
            if stopped.is_set():
                raise RuntimeError("Delay queue is stopped")

            def run() -> None:
                if handle.cancelled:
                    return
                if stopped.wait(delay):
                    if not handle.cancelled:
                        on_interrupt()
                    return
                if handle.cancelled:
                    return
                handle.started = True
                action()

            handle.future = executor.submit(run)
            handle.future.add_done_callback(self._report_error)
        return handle

    @staticmethod
    def _report_error(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Scheduled retry raised", exc_info=error)

    def shutdown(self) -> None:
        """Stop the queue: wake waiting items and drop unstarted ones. Idempotent."""
        with self._lock:
            self._stopped.set()
            self._executor.shutdown(wait=False, cancel_futures=True)

    def reset(self) -> None:
        """Force-stop the current executor and start a fresh one."""
        with self._lock:
            self._stopped.set()
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._start()
        logger.debug("Delay queue recreated", extra={"queue": self._name})
