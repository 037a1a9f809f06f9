"""
AI Provider - Process-wide facade over the retry orchestrator.

The application initializes the provider once at startup, uses it from
anywhere, and destroys it on exit. Using it before init() raises
NotInitializedError.

Example:
    from easynote import provider
    from easynote.llm import TaskKind

    provider.init()  # AIConfig.from_env()
    provider.process("你好世界", TaskKind.TRANSLATE, callback)
    ...
    provider.destroy()
"""

import threading
from concurrent.futures import Future
from typing import Optional, Union

from easynote.config import AIConfig
from easynote.exceptions import NotInitializedError
from easynote.llm.client import TransportGateway
from easynote.llm.prompts import TaskKind
from easynote.logging import get_logger
from easynote.orchestrator.callbacks import CompletionCallback
from easynote.orchestrator.dispatcher import ExecutionContext
from easynote.orchestrator.processor import RetryOrchestrator

logger = get_logger("ai-provider")


class AIProvider:
    """
    Owns one orchestrator and its gateway.

    Args:
        config: AI configuration
        gateway: Optional transport gateway (ArkHttpGateway by default)
        context: Optional consumer context for callbacks
    """

    def __init__(
        self,
        config: AIConfig,
        gateway: Optional[TransportGateway] = None,
        context: Optional[ExecutionContext] = None,
    ):
        self.config = config
        self.orchestrator = RetryOrchestrator(config, gateway=gateway, context=context)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def process(
        self,
        text: Optional[str],
        task_kind: Optional[Union[TaskKind, str]],
        callback: CompletionCallback,
    ) -> None:
        """Process text with any task kind; the outcome goes to ``callback``."""
        self._ensure_open()
        self.orchestrator.submit(text, task_kind, callback)

    def process_future(
        self,
        text: Optional[str],
        task_kind: Optional[Union[TaskKind, str]],
    ) -> "Future[str]":
        self._ensure_open()
        return self.orchestrator.submit_future(text, task_kind)

    def run(
        self,
        text: Optional[str],
        task_kind: Optional[Union[TaskKind, str]],
        timeout: Optional[float] = None,
    ) -> str:
        """
        Process text and block until the reply arrives.

        Do not call from the consumer context itself: with a ThreadContext
        or AsyncioContext the delivery would wait behind this call.

        Raises:
            AIException: The terminal failure of the task
            concurrent.futures.TimeoutError: No outcome within ``timeout``
        """
        return self.process_future(text, task_kind).result(timeout=timeout)

    def destroy(self) -> None:
        """Discard in-flight work and release the gateway. Idempotent."""
        if self._closed:
            return
        self._closed = True
        self.orchestrator.shutdown()
        self.orchestrator.gateway.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise NotInitializedError("AI provider has been destroyed")


# ============================================================================
# PROCESS-WIDE INSTANCE
# ============================================================================

_provider: Optional[AIProvider] = None
_provider_lock = threading.Lock()


def init(
    config: Optional[AIConfig] = None,
    gateway: Optional[TransportGateway] = None,
    context: Optional[ExecutionContext] = None,
) -> AIProvider:
    """
    Create the process-wide provider.

    Re-initializing destroys the previous provider first.

    Args:
        config: Configuration (AIConfig.from_env() when omitted)
        gateway: Optional transport gateway
        context: Optional consumer context for callbacks

    Raises:
        NotInitializedError: Required settings are missing from the environment
    """
    global _provider

    if config is None:
        config = AIConfig.from_env()

    with _provider_lock:
        previous, _provider = _provider, AIProvider(config, gateway=gateway, context=context)
        provider = _provider

    if previous is not None:
        previous.destroy()

    logger.info("AI provider initialized", extra={"model": config.model_id})
    return provider


def get_provider() -> AIProvider:
    """
    Return the process-wide provider.

    Raises:
        NotInitializedError: init() has not been called
    """
    with _provider_lock:
        provider = _provider
    if provider is None:
        raise NotInitializedError("AI provider is not initialized; call init() first")
    return provider


def is_initialized() -> bool:
    with _provider_lock:
        return _provider is not None


def process(
    text: Optional[str],
    task_kind: Optional[Union[TaskKind, str]],
    callback: CompletionCallback,
) -> None:
    """Submit a task to the process-wide provider."""
    get_provider().process(text, task_kind, callback)


def destroy() -> None:
    """Tear down the process-wide provider. Safe to call repeatedly."""
    global _provider

    with _provider_lock:
        provider, _provider = _provider, None

    if provider is not None:
        provider.destroy()
        logger.info("AI provider destroyed")
