"""Async chat completions client with a streaming SSE decoder."""

from __future__ import annotations

from .config import Configuration
from .llm import (
    APIError,
    ChatClient,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ConfigurationError,
    FramingError,
    LLMError,
    PayloadDecodeError,
    StreamingError,
)
from .llm.streaming import DeltaAccumulator, SSEDecoder, decode_sse_stream

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "ChatClient",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "Configuration",
    "ConfigurationError",
    "DeltaAccumulator",
    "FramingError",
    "LLMError",
    "PayloadDecodeError",
    "SSEDecoder",
    "StreamingError",
    "decode_sse_stream",
]
