"""
LLM Integration Module

Everything needed to talk to one chat-completion endpoint:

Architecture:
    - prompts: TaskKind and the fixed system prompt per kind
    - models: pydantic wire models for requests and responses
    - codec: encode requests, decode replies into CompletionResult
    - client: TransportGateway contract and the urllib ArkHttpGateway
"""

from easynote.llm.client import ArkHttpGateway, TransportGateway, TransportOutcome
from easynote.llm.codec import CompletionResult, decode, encode, to_payload
from easynote.llm.models import ChatCompletionResponse, ChatMessage, CompletionRequest, Role, Thinking
from easynote.llm.prompts import TaskKind, get_system_prompt

__all__ = [
    # Prompts
    "TaskKind",
    "get_system_prompt",
    # Models
    "Role",
    "ChatMessage",
    "Thinking",
    "CompletionRequest",
    "ChatCompletionResponse",
    # Codec
    "CompletionResult",
    "encode",
    "decode",
    "to_payload",
    # Transport
    "TransportGateway",
    "TransportOutcome",
    "ArkHttpGateway",
]
