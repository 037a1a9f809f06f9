"""
EasyNote AI

Client-side orchestration of text-processing requests (translate, polish,
summarize, correct) against a chat-completion endpoint.

Usage:
    from easynote import AIConfig, RetryOrchestrator, FunctionCallback, TaskKind

    orchestrator = RetryOrchestrator(AIConfig.from_env())
    orchestrator.submit(
        "Hello world",
        TaskKind.TRANSLATE,
        FunctionCallback(on_success=print, on_failure=print),
    )
"""

from easynote.config import AIConfig, OrchestratorConfig
from easynote.exceptions import (
    AIException,
    BusinessFailure,
    InterruptedRetryError,
    InvalidInputError,
    MalformedResponseError,
    NotInitializedError,
    RetryExhaustedError,
    TransportFailure,
)
from easynote.llm import TaskKind, get_system_prompt
from easynote.orchestrator import (
    AsyncioContext,
    CompletionCallback,
    FunctionCallback,
    FutureCallback,
    InlineContext,
    RetryOrchestrator,
    ThreadContext,
)
from easynote.provider import AIProvider

__version__ = "0.1.0"

__all__ = [
    # Configuration
    "AIConfig",
    "OrchestratorConfig",
    # Errors
    "AIException",
    "BusinessFailure",
    "InterruptedRetryError",
    "InvalidInputError",
    "MalformedResponseError",
    "NotInitializedError",
    "RetryExhaustedError",
    "TransportFailure",
    # Prompts
    "TaskKind",
    "get_system_prompt",
    # Orchestration
    "RetryOrchestrator",
    "CompletionCallback",
    "FunctionCallback",
    "FutureCallback",
    "InlineContext",
    "ThreadContext",
    "AsyncioContext",
    # Facade
    "AIProvider",
]
