"""
Chat completions API integration.

This package provides:
- Typed request/response models
- An authenticated async HTTP client
- A fail-fast SSE decoder for streamed completions
- Error types carrying request context
- Rough token estimates
"""

from __future__ import annotations

from .client import ChatClient
from .exceptions import (
    APIError,
    ConfigurationError,
    FramingError,
    LLMError,
    PayloadDecodeError,
    ResponseDecodeError,
    StreamingError,
)
from .models import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ChatRole,
    ChoiceDelta,
    ChunkChoice,
    FinishReason,
    ImageContentPart,
    ImageUrl,
    TextContentPart,
    Tool,
    ToolChoice,
    ToolChoiceFunction,
    ToolFunction,
    Usage,
)
from .tokens import count_message_tokens, count_tokens

__all__ = [
    # Client
    "ChatClient",
    # Errors
    "APIError",
    "ConfigurationError",
    "FramingError",
    "LLMError",
    "PayloadDecodeError",
    "ResponseDecodeError",
    "StreamingError",
    # Models
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "ChatRole",
    "ChoiceDelta",
    "ChunkChoice",
    "FinishReason",
    "ImageContentPart",
    "ImageUrl",
    "TextContentPart",
    "Tool",
    "ToolChoice",
    "ToolChoiceFunction",
    "ToolFunction",
    "Usage",
    # Tokens
    "count_message_tokens",
    "count_tokens",
]
