"""
Transport Gateway - Executes one chat-completion HTTP call.

This module defines the contract the orchestrator consumes and a default
urllib adapter for Ark-compatible endpoints.

Design Patterns:
    - Strategy Pattern: any gateway implementing send() can be injected
    - Adapter Pattern: HTTP errors and network failures are normalized into
      a TransportOutcome instead of raised

Example:
    gateway = ArkHttpGateway(AIConfig.from_env())
    future = gateway.send("Bearer sk-...", payload)
    outcome = future.result()
    print(outcome.status_code, outcome.body)
"""

import json
import socket
import time
import urllib.error
import urllib.request
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from easynote.config import AIConfig
from easynote.logging import get_logger

logger = get_logger("ai-gateway")


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class TransportOutcome:
    """
    Result of one HTTP exchange.

    Exactly one of the following holds:
        - status_code is 2xx: the call succeeded (body may still be unusable)
        - status_code is set but not 2xx: the endpoint rejected the call
        - error is set: no response was received

    Attributes:
        status_code: HTTP status, None on transport failure
        body: Response body; raw bytes for answered calls, text for HTTP errors
        error: Transport-level exception (timeout, DNS, reset)
        latency_ms: Wall-clock time of the exchange
    """
    status_code: Optional[int] = None
    body: Optional[Union[str, bytes]] = None
    error: Optional[BaseException] = None
    latency_ms: Optional[float] = None

    @property
    def is_transport_failure(self) -> bool:
        return self.error is not None or self.status_code is None

    @property
    def ok(self) -> bool:
        """HTTP success (2xx) with no transport error."""
        return not self.is_transport_failure and 200 <= self.status_code < 300


# ============================================================================
# ABSTRACT BASE CLASS
# ============================================================================

class TransportGateway(ABC):
    """
    Contract for the HTTP transport.

    send() must not block the caller: it returns a Future that resolves to a
    TransportOutcome. Implementations should resolve failures into outcomes
    rather than set exceptions on the future; the orchestrator treats an
    exception on the future as a transport failure either way.
    """

    @abstractmethod
    def send(self, auth_header: str, payload: Dict[str, Any]) -> "Future[TransportOutcome]":
        """
        Start one POST to the chat-completion endpoint.

        Args:
            auth_header: Value for the Authorization header
            payload: JSON-ready request body

        Returns:
            Future resolving to the TransportOutcome
        """
        pass

    def close(self) -> None:
        """Release transport resources."""


# ============================================================================
# ARK HTTP GATEWAY
# ============================================================================

class ArkHttpGateway(TransportGateway):
    """
    urllib gateway for Volcano Ark (OpenAI-compatible) chat completions.

    Requests run on a small thread pool so send() returns immediately.

    Example:
        gateway = ArkHttpGateway(config)
        outcome = gateway.send(config.auth_header, payload).result()
    """

    def __init__(self, config: AIConfig, max_workers: int = 4):
        """
        Initialize gateway.

        Args:
            config: AI configuration (base URL, timeout, body logging)
            max_workers: Concurrent HTTP calls allowed
        """
        self.config = config
        self._chat_url = config.chat_url
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="ai-http",
        )

    def send(self, auth_header: str, payload: Dict[str, Any]) -> "Future[TransportOutcome]":
        return self._executor.submit(self.execute, auth_header, payload)

    def execute(self, auth_header: str, payload: Dict[str, Any]) -> TransportOutcome:
        """Perform the POST synchronously. Never raises for HTTP or network errors."""
        start_time = time.time()
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")

        if self.config.log_bodies:
            logger.debug(f"--> POST {self._chat_url}", extra={"body": data.decode("utf-8")})

        req = urllib.request.Request(
            self._chat_url,
            data=data,
            headers={
                "Content-Type": "application/json",
                "Authorization": auth_header,
            },
            method="POST"
        )

        try:
            with urllib.request.urlopen(req, timeout=self.config.timeout) as response:
                body = response.read()
                status = response.status

        except urllib.error.HTTPError as e:
            error_body = ""
            try:
                error_body = e.read().decode("utf-8", errors="replace")
            except OSError:
                logger.debug("Could not read HTTP error body", extra={"status_code": e.code})

            latency_ms = (time.time() - start_time) * 1000
            logger.warning(
                f"Chat completion HTTP error: {e.code}",
                extra={"status_code": e.code, "latency_ms": round(latency_ms, 2)}
            )
            self._log_body(e.code, error_body)
            return TransportOutcome(status_code=e.code, body=error_body, latency_ms=latency_ms)

        except (urllib.error.URLError, socket.timeout, OSError) as e:
            latency_ms = (time.time() - start_time) * 1000
            logger.warning(
                f"Chat completion request failed: {e}",
                extra={"latency_ms": round(latency_ms, 2)}
            )
            return TransportOutcome(error=e, latency_ms=latency_ms)

        latency_ms = (time.time() - start_time) * 1000
        logger.debug(
            "Chat completion response received",
            extra={
                "model": payload.get("model"),
                "status_code": status,
                "latency_ms": round(latency_ms, 2),
            }
        )
        self._log_body(status, body)
        return TransportOutcome(status_code=status, body=body, latency_ms=latency_ms)

    def _log_body(self, status: int, body: Union[str, bytes]) -> None:
        if self.config.log_bodies:
            if isinstance(body, bytes):
                body = body.decode("utf-8", errors="replace")
            logger.debug(f"<-- {status} {self._chat_url}", extra={"body": body})

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
