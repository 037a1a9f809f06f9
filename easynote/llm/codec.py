"""
Request Codec - Builds outbound payloads and decodes inbound replies.

Decoding follows one rule: structural absence fails, empty content succeeds.
A missing body, missing first choice or missing message object is a
MalformedResponseError; a present message whose content is null decodes to
the empty string.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from easynote.exceptions import AIException, MalformedResponseError
from easynote.llm.models import (
    ChatCompletionResponse,
    ChatMessage,
    CompletionRequest,
    Role,
    Thinking,
)

RawBody = Union[str, bytes, Dict[str, Any], None]


@dataclass
class CompletionResult:
    """
    Outcome of decoding one response.

    Attributes:
        success: Whether a reply was extracted
        reply_text: Extracted reply (empty string when content was null)
        error: Classified failure when success is False
    """
    success: bool
    reply_text: str = ""
    error: Optional[AIException] = None

    @classmethod
    def ok(cls, reply_text: str) -> "CompletionResult":
        return cls(success=True, reply_text=reply_text)

    @classmethod
    def fail(cls, error: AIException) -> "CompletionResult":
        return cls(success=False, error=error)

    @property
    def failed(self) -> bool:
        return not self.success


def encode(
    system_prompt: str,
    user_text: str,
    model_id: str,
    thinking_type: Optional[str] = None,
) -> CompletionRequest:
    """
    Wrap a system prompt and user text as a two-message request.

    Args:
        system_prompt: Instruction for the model
        user_text: Text to process
        model_id: Configured model identifier
        thinking_type: Optional thinking switch value (omitted when None)

    Returns:
        Frozen CompletionRequest with stream=False
    """
    return CompletionRequest(
        model=model_id,
        messages=(
            ChatMessage(role=Role.SYSTEM, content=system_prompt),
            ChatMessage(role=Role.USER, content=user_text),
        ),
        stream=False,
        thinking=Thinking(type=thinking_type) if thinking_type else None,
    )


def to_payload(request: CompletionRequest) -> Dict[str, Any]:
    """Serialize a request to a JSON-ready dict."""
    return request.model_dump(mode="json", exclude_none=True)


def decode(raw_body: RawBody) -> CompletionResult:
    """
    Extract choices[0].message.content from a response body.

    Args:
        raw_body: Response body as text, bytes or an already parsed dict

    Returns:
        CompletionResult with the reply, or a MalformedResponseError failure
    """
    if raw_body is None:
        return CompletionResult.fail(MalformedResponseError("Response body is empty"))

    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            return CompletionResult.fail(
                MalformedResponseError("Response body is not valid UTF-8", cause=e)
            )

    if isinstance(raw_body, str):
        if not raw_body.strip():
            return CompletionResult.fail(MalformedResponseError("Response body is empty"))
        try:
            raw_body = json.loads(raw_body)
        except RecursionError as e:
            return CompletionResult.fail(
                MalformedResponseError("Response body is nested too deeply", cause=e)
            )
        except ValueError as e:
            # JSONDecodeError, and oversized integer literals
            return CompletionResult.fail(
                MalformedResponseError(f"Response body is not valid JSON: {e}", cause=e)
            )

    if not isinstance(raw_body, dict):
        return CompletionResult.fail(
            MalformedResponseError(
                f"Response result is absent (got {type(raw_body).__name__})"
            )
        )

    try:
        response = ChatCompletionResponse.model_validate(raw_body)
    except ValidationError as e:
        return CompletionResult.fail(
            MalformedResponseError("Response does not match the completion schema", cause=e)
        )

    if not response.choices:
        return CompletionResult.fail(MalformedResponseError("Response contains no choices"))

    message = response.choices[0].message
    if message is None:
        return CompletionResult.fail(MalformedResponseError("First choice has no message"))

    return CompletionResult.ok(message.content if message.content is not None else "")
