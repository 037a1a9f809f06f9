"""
Test doubles for the transport gateway and completion callbacks.
"""
import json
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Optional, Union

from easynote.config import AIConfig
from easynote.exceptions import AIException
from easynote.llm.client import TransportGateway, TransportOutcome
from easynote.orchestrator.callbacks import CompletionCallback


def make_config(**overrides) -> AIConfig:
    values = dict(
        base_url="https://ark.example.com/api/v3",
        model_id="doubao-test",
        api_key="sk-test",
        retry_enabled=True,
        max_retry_count=3,
        retry_delay_ms=0,
    )
    values.update(overrides)
    return AIConfig(**values)


def ok(content: Optional[str]) -> TransportOutcome:
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    return TransportOutcome(status_code=200, body=json.dumps(body, ensure_ascii=False), latency_ms=1.0)


def http_error(status: int = 500, body: str = '{"error": "server busy"}') -> TransportOutcome:
    return TransportOutcome(status_code=status, body=body, latency_ms=1.0)


def network_error(message: str = "connection reset") -> TransportOutcome:
    return TransportOutcome(error=ConnectionResetError(message), latency_ms=1.0)


Scripted = Union[TransportOutcome, Callable[[], TransportOutcome]]


class FakeGateway(TransportGateway):
    """
    Resolves each send() immediately with the next scripted outcome.

    The last outcome repeats once the script runs out. A scripted callable is
    invoked inside send(), so it may raise to simulate a refusing transport.
    """

    def __init__(self, outcomes: List[Scripted]):
        self.outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.calls)

    def send(self, auth_header: str, payload: Dict[str, Any]) -> "Future[TransportOutcome]":
        with self._lock:
            self.calls.append({"auth_header": auth_header, "payload": payload})
            index = min(len(self.calls) - 1, len(self.outcomes) - 1)
        outcome = self.outcomes[index]
        if callable(outcome):
            outcome = outcome()
        future: "Future[TransportOutcome]" = Future()
        future.set_result(outcome)
        return future

    def close(self) -> None:
        self.closed = True


class HeldGateway(TransportGateway):
    """Returns unresolved futures; the test resolves them by hand."""

    def __init__(self):
        self.futures: List[Future] = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        with self._lock:
            return len(self.futures)

    def send(self, auth_header: str, payload: Dict[str, Any]) -> "Future[TransportOutcome]":
        future: "Future[TransportOutcome]" = Future()
        with self._lock:
            self.futures.append(future)
        return future

    def resolve(self, index: int, outcome: TransportOutcome) -> None:
        self.futures[index].set_result(outcome)


class RecordingCallback(CompletionCallback):
    """Records every delivery and the thread it arrived on."""

    def __init__(self):
        self.successes: List[str] = []
        self.failures: List[AIException] = []
        self.threads: List[threading.Thread] = []
        self.done = threading.Event()
        self._lock = threading.Lock()

    def on_success(self, reply_text: str) -> None:
        with self._lock:
            self.successes.append(reply_text)
            self.threads.append(threading.current_thread())
        self.done.set()

    def on_failure(self, error: AIException) -> None:
        with self._lock:
            self.failures.append(error)
            self.threads.append(threading.current_thread())
        self.done.set()

    @property
    def deliveries(self) -> int:
        with self._lock:
            return len(self.successes) + len(self.failures)

    def wait(self, timeout: float = 2.0) -> bool:
        return self.done.wait(timeout)


def wait_for(predicate: Callable[[], bool], timeout: float = 2.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
