"""
Retry Orchestrator - Drives one text-processing task to a single outcome.

State machine per task:

    IDLE -> ATTEMPTING -> SUCCEEDED
                       -> RETRYING -> ATTEMPTING ...
                       -> EXHAUSTED

An attempt builds the prompt, encodes the request and hands it to the
transport gateway. Its completion decides: a decoded reply succeeds, any
other outcome is a retryable failure. Retries wait a fixed delay on the
orchestrator's single-worker DelayQueue, never on the consumer context.

Guarantees:
    - one attempt in flight per task; the next one is only scheduled from
      the previous attempt's completion
    - exactly one terminal callback per task (claimed on the RetryState)
    - success cancels any retry still pending for the same task
    - after shutdown(), in-flight completions and queued deliveries of
      earlier tasks are discarded; new submissions work normally

Example:
    orchestrator = RetryOrchestrator(AIConfig.from_env())
    orchestrator.submit("你好", TaskKind.TRANSLATE, FunctionCallback(print))
"""

import threading
from concurrent.futures import Future
from functools import partial
from typing import Optional, Union

from easynote.config import AIConfig
from easynote.exceptions import (
    AIException,
    BusinessFailure,
    InterruptedRetryError,
    InvalidInputError,
    NotInitializedError,
    RetryExhaustedError,
    TransportFailure,
)
from easynote.llm import codec
from easynote.llm.client import ArkHttpGateway, TransportGateway, TransportOutcome
from easynote.llm.codec import CompletionResult
from easynote.llm.prompts import TaskKind, get_system_prompt
from easynote.logging import get_logger
from easynote.orchestrator.callbacks import CompletionCallback, FutureCallback
from easynote.orchestrator.delay_queue import DelayQueue, ScheduledRetry
from easynote.orchestrator.dispatcher import ExecutionContext, ResultDispatcher
from easynote.orchestrator.state import RetryState, TaskPhase

logger = get_logger("ai-orchestrator")

# Longest slice of an error body quoted in failure messages
_BODY_PREVIEW = 200


class RetryOrchestrator:
    """
    Submits tasks and delivers their terminal outcome to a callback.

    Args:
        config: AI configuration (endpoint, credentials, retry policy)
        gateway: Transport gateway (defaults to ArkHttpGateway)
        context: Consumer execution context for callbacks (defaults to inline)
    """

    def __init__(
        self,
        config: Optional[AIConfig],
        gateway: Optional[TransportGateway] = None,
        context: Optional[ExecutionContext] = None,
    ):
        if config is None:
            raise NotInitializedError("AI configuration has not been supplied")
        self.config = config
        self.gateway = gateway or ArkHttpGateway(config)
        self.dispatcher = ResultDispatcher(context)
        self._delay_queue = DelayQueue(name="ai-retry")
        self._lock = threading.Lock()
        self._generation = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def submit(
        self,
        text: Optional[str],
        task_kind: Optional[Union[TaskKind, str]],
        callback: CompletionCallback,
    ) -> None:
        """
        Start a task. The outcome arrives later through ``callback``.

        Invalid text or a missing task kind is reported through the callback
        without contacting the endpoint.

        Raises:
            ValueError: callback is None
        """
        if callback is None:
            raise ValueError("callback must not be None")

        error = self._validate(text, task_kind)
        if error is not None:
            logger.warning(f"Rejected task: {error.message}")
            self.dispatcher.dispatch_failure(callback, error)
            return

        policy = self.config.orchestrator
        with self._lock:
            generation = self._generation
        state = RetryState(
            input_text=text,
            task_kind=TaskKind.parse(task_kind),
            callback=callback,
            max_attempts=policy.max_attempts,
            retry_delay=policy.retry_delay_seconds,
            generation=generation,
        )
        logger.debug(
            "Task submitted",
            extra={"task_kind": state.task_kind.value, "max_retries": state.max_attempts}
        )
        self._attempt(state)

    def submit_future(
        self,
        text: Optional[str],
        task_kind: Optional[Union[TaskKind, str]],
    ) -> "Future[str]":
        """
        Start a task and return a Future for its reply.

        The future fails with the terminal AIException.
        """
        callback = FutureCallback()
        self.submit(text, task_kind, callback)
        return callback.future

    def shutdown(self) -> None:
        """
        Discard every task submitted so far and restart the delay queue.

        Pending retries never run, queued deliveries are dropped and
        attempts that complete later are ignored. Idempotent.
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
        self._delay_queue.reset()
        logger.info("Orchestrator shut down", extra={"generation": generation})

    # ------------------------------------------------------------------
    # Attempt lifecycle
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(
        text: Optional[str],
        task_kind: Optional[Union[TaskKind, str]],
    ) -> Optional[InvalidInputError]:
        if not isinstance(text, str) or not text.strip():
            return InvalidInputError("Input text is empty")
        if task_kind is None or (isinstance(task_kind, str) and not task_kind.strip()):
            return InvalidInputError("Task kind is missing")
        return None

    def _is_live(self, state: RetryState) -> bool:
        with self._lock:
            return state.generation == self._generation

    def _attempt(self, state: RetryState) -> None:
        if state.finished or not self._is_live(state):
            return

        state.phase = TaskPhase.ATTEMPTING
        request = codec.encode(
            get_system_prompt(state.task_kind),
            state.input_text,
            self.config.model_id,
            thinking_type=self.config.thinking_type,
        )
        logger.debug(
            f"Attempt {state.attempt_number} started",
            extra={"task_kind": state.task_kind.value, "attempt": state.attempt_number}
        )

        try:
            future = self.gateway.send(self.config.auth_header, codec.to_payload(request))
        except Exception as e:
            self._handle_failure(state, TransportFailure(f"Transport refused the request: {e}", cause=e))
            return

        future.add_done_callback(partial(self._on_attempt_complete, state))

    def _on_attempt_complete(self, state: RetryState, future: "Future[TransportOutcome]") -> None:
        if not self._is_live(state):
            logger.debug("Discarding attempt completed after shutdown")
            return

        try:
            outcome = future.result()
        except Exception as e:
            outcome = TransportOutcome(error=e)

        try:
            result = self._evaluate(outcome)
        except Exception as e:
            logger.exception("Could not evaluate attempt outcome")
            result = CompletionResult.fail(
                BusinessFailure(
                    f"Could not evaluate response: {e!r}",
                    cause=e,
                    status_code=outcome.status_code,
                )
            )

        if result.success:
            self._succeed(state, result.reply_text, outcome)
        else:
            self._handle_failure(state, result.error)

    @staticmethod
    def _evaluate(outcome: TransportOutcome) -> CompletionResult:
        if outcome.is_transport_failure:
            cause = outcome.error
            message = f"Transport failure: {cause}" if cause is not None else "Transport failure: no response"
            return CompletionResult.fail(TransportFailure(message, cause=cause))

        if not outcome.ok:
            body = outcome.body or ""
            if isinstance(body, bytes):
                body = body.decode("utf-8", errors="replace")
            preview = body.strip()[:_BODY_PREVIEW]
            message = f"HTTP {outcome.status_code}"
            if preview:
                message = f"{message}: {preview}"
            return CompletionResult.fail(
                BusinessFailure(message, status_code=outcome.status_code)
            )

        return codec.decode(outcome.body)

    def _succeed(self, state: RetryState, reply_text: str, outcome: TransportOutcome) -> None:
        # A retry may already sit in the queue; it must never run
        if state.cancel_pending():
            logger.debug("Cancelled pending retry after success")
        if not state.finish(TaskPhase.SUCCEEDED):
            return
        logger.info(
            "Task succeeded",
            extra={
                "task_kind": state.task_kind.value,
                "attempt": state.attempt_number,
                "latency_ms": round(outcome.latency_ms, 2) if outcome.latency_ms is not None else None,
            }
        )
        self._dispatch_success(state, reply_text)

    def _handle_failure(self, state: RetryState, error: AIException) -> None:
        state.last_error = error

        if not state.can_retry:
            exhausted = RetryExhaustedError(state.attempts_so_far, error)
            if state.finish(TaskPhase.EXHAUSTED):
                logger.error(
                    exhausted.message,
                    extra={"task_kind": state.task_kind.value, "error": exhausted.to_dict()}
                )
                self._dispatch_failure(state, exhausted)
            return

        retry_number = state.record_retry()
        logger.warning(
            f"Attempt failed, retry {retry_number}/{state.max_attempts} in {state.retry_delay:.1f}s: {error.message}",
            extra={"task_kind": state.task_kind.value, "error_kind": error.kind}
        )

        # Slot is taken before the item is queued so a zero delay cannot race it
        scheduled = ScheduledRetry()
        state.hold(scheduled)
        try:
            self._delay_queue.schedule(
                partial(self._run_retry, state, scheduled),
                delay=state.retry_delay,
                on_interrupt=partial(self._interrupt, state),
                handle=scheduled,
            )
        except RuntimeError as e:
            self._interrupt(state, cause=e)

    def _run_retry(self, state: RetryState, scheduled: ScheduledRetry) -> None:
        state.release(scheduled)
        self._attempt(state)

    def _interrupt(self, state: RetryState, cause: Optional[BaseException] = None) -> None:
        state.cancel_pending()
        error = InterruptedRetryError(
            f"Retry {state.attempts_so_far} was interrupted before it ran"
            + (f": {state.last_error.message}" if state.last_error is not None else ""),
            cause=cause or state.last_error,
        )
        if state.finish(TaskPhase.INTERRUPTED):
            logger.warning(
                error.message,
                extra={"task_kind": state.task_kind.value, "error": error.to_dict()}
            )
            self._dispatch_failure(state, error)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _dispatch_success(self, state: RetryState, reply_text: str) -> None:
        state.phase = TaskPhase.DISPATCHED
        self.dispatcher.dispatch_success(state.callback, reply_text, partial(self._is_live, state))

    def _dispatch_failure(self, state: RetryState, error: AIException) -> None:
        state.phase = TaskPhase.DISPATCHED
        self.dispatcher.dispatch_failure(state.callback, error, partial(self._is_live, state))
