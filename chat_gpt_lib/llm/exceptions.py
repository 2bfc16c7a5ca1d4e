"""
Error handling for chat completion operations.

This module provides the error hierarchy with rich context:
- Configuration problems (missing API key, invalid settings)
- API errors reported in the response body
- Response bodies that do not match the expected schema
- Streaming failures (truncated streams, undecodable payloads)

Transport failures are raised by httpx and are not wrapped here.
"""

from __future__ import annotations

from typing import Any


class LLMError(Exception):
    """Base error with rich context."""

    def __init__(
        self,
        message: str,
        provider: str = "openai",
        model: str | None = None,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model = model
        self.status_code = status_code
        self.response_data = response_data or {}


class ConfigurationError(LLMError):
    """Invalid or missing client configuration."""
    pass


class APIError(LLMError):
    """Error reported by the API in a non-success response."""

    def __init__(
        self,
        message: str,
        err_type: str | None = None,
        code: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.err_type = err_type
        self.code = code


class ResponseDecodeError(LLMError):
    """Successful response whose body does not match the expected schema."""
    pass


class StreamingError(LLMError):
    """Streaming-specific errors."""
    pass


class FramingError(StreamingError):
    """Stream ended in the middle of an event."""

    def __init__(self, message: str, remainder: bytes = b"", **kwargs: Any):
        super().__init__(message, **kwargs)
        self.remainder = remainder


class PayloadDecodeError(StreamingError):
    """A data field is neither the sentinel nor a valid chunk payload."""

    def __init__(self, message: str, raw_data: str = "", **kwargs: Any):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
