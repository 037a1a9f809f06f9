"""
AI Exceptions - Failure taxonomy for the request orchestrator.

Every failure carries a human-readable message, the originating cause (when
there is one) and a ``retryable`` flag. The flag is diagnostic: the
orchestrator decides whether to retry, callers only ever see the terminal
outcome.

Hierarchy:
    AIException
    ├── InvalidInputError       (empty text / missing task kind)
    ├── NotInitializedError     (configuration missing)
    ├── TransportFailure        (network, DNS, timeout)
    ├── BusinessFailure         (non-2xx status, undecodable body)
    │   └── MalformedResponseError
    ├── RetryExhaustedError     (terminal, wraps the last failure)
    └── InterruptedRetryError   (retry delay cancelled, terminal)
"""

from typing import Optional


class AIException(Exception):
    """
    Base class for all AI request failures.

    Attributes:
        message: Human readable description
        cause: Underlying exception, if any
        retryable: Whether another attempt could succeed
    """

    kind: str = "ai_error"
    default_retryable: bool = True

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        retryable: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.retryable = self.default_retryable if retryable is None else retryable
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict:
        """Serialize for structured logging."""
        return {
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
            "cause": repr(self.cause) if self.cause is not None else None,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, retryable={self.retryable})"


class InvalidInputError(AIException):
    """Text is empty or the task kind is missing. Never retried."""

    kind = "invalid_input"
    default_retryable = False


class NotInitializedError(AIException):
    """An operation was invoked before configuration was supplied."""

    kind = "not_initialized"
    default_retryable = False


class TransportFailure(AIException):
    """The HTTP call never produced a response (timeout, DNS, reset)."""

    kind = "transport_failure"


class BusinessFailure(AIException):
    """The endpoint answered, but not with a usable completion."""

    kind = "business_failure"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        retryable: Optional[bool] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message, cause=cause, retryable=retryable)
        self.status_code = status_code

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["status_code"] = self.status_code
        return data


class MalformedResponseError(BusinessFailure):
    """The response body is missing the result, first choice or message."""

    kind = "malformed_response"


class RetryExhaustedError(AIException):
    """
    Terminal failure after every allowed retry failed.

    Attributes:
        attempts: Number of retries that were made
        last_error: The failure of the final attempt
    """

    kind = "exhausted"
    default_retryable = False

    def __init__(self, attempts: int, last_error: AIException):
        noun = "attempt" if attempts == 1 else "attempts"
        super().__init__(
            f"AI request failed after {attempts} retry {noun}: {last_error.message}",
            cause=last_error,
        )
        self.attempts = attempts
        self.last_error = last_error

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["attempts"] = self.attempts
        data["last_error"] = self.last_error.to_dict()
        return data


class InterruptedRetryError(AIException):
    """The wait before a retry was cancelled. Not retried further."""

    kind = "interrupted_retry"
    default_retryable = False
