"""
Chat Completion Schemas - Wire models for the chat-completion endpoint.

Request models are frozen: a request is built fresh for every attempt and
never mutated afterwards. Response models are lenient (every field optional)
so structural problems surface in the codec as classified failures instead of
validation noise.
"""
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# REQUEST MODELS
# ============================================================================

class Role(str, Enum):
    """Author of a chat message."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One message of a conversation."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role = Field(..., description="Message author")
    content: str = Field(..., description="Message text")


class Thinking(BaseModel):
    """Deep-thinking switch understood by Ark models (e.g. 'disabled')."""

    model_config = ConfigDict(frozen=True)

    type: str = Field(default="disabled", description="'disabled', 'enabled' or 'auto'")


class CompletionRequest(BaseModel):
    """
    Outbound chat-completion request.

    Serialized body:
        {"model": ..., "messages": [{"role": ..., "content": ...}], "stream": false}
    """

    model_config = ConfigDict(frozen=True)

    model: str = Field(..., description="Model identifier")
    messages: Tuple[ChatMessage, ...] = Field(..., description="Ordered conversation")
    stream: bool = Field(default=False, description="Streaming is never requested")
    thinking: Optional[Thinking] = Field(default=None, description="Optional thinking switch")


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class ResponseMessage(BaseModel):
    """Message inside a returned choice."""
    role: Optional[str] = None
    content: Optional[str] = None


class Choice(BaseModel):
    """One completion alternative."""
    index: Optional[int] = None
    message: Optional[ResponseMessage] = None
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    """Token accounting reported by the endpoint."""
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatCompletionResponse(BaseModel):
    """Inbound chat-completion response. Only choices[0].message.content is consumed."""
    id: Optional[str] = None
    model: Optional[str] = None
    choices: Optional[List[Choice]] = None
    usage: Optional[Usage] = None
