"""
Orchestrator Module

Retry state machine, delay queue and result delivery.
"""

from easynote.orchestrator.callbacks import CompletionCallback, FunctionCallback, FutureCallback
from easynote.orchestrator.delay_queue import DelayQueue, ScheduledRetry
from easynote.orchestrator.dispatcher import (
    AsyncioContext,
    ExecutionContext,
    InlineContext,
    ResultDispatcher,
    ThreadContext,
)
from easynote.orchestrator.processor import RetryOrchestrator
from easynote.orchestrator.state import RetryState, TaskPhase

__all__ = [
    "CompletionCallback",
    "FunctionCallback",
    "FutureCallback",
    "DelayQueue",
    "ScheduledRetry",
    "ExecutionContext",
    "InlineContext",
    "ThreadContext",
    "AsyncioContext",
    "ResultDispatcher",
    "RetryOrchestrator",
    "RetryState",
    "TaskPhase",
]
