"""
HTTP client for the chat completions endpoint.

Handles bearer authentication, the optional organization header, error body
parsing and hands streaming response bodies to the SSE decoder.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from chat_gpt_lib.logging_utils import log_operation, operation_context

from .exceptions import APIError, ConfigurationError, ResponseDecodeError
from .models import (
    APIErrorBody,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
)
from .streaming.parser import decode_sse_stream

if TYPE_CHECKING:
    from chat_gpt_lib.config import Configuration

DEFAULT_BASE_URL = "https://api.openai.com/v1/"
CHAT_COMPLETIONS_ENDPOINT = "chat/completions"


def _normalize_base_url(base_url: str) -> str:
    # httpx joins relative paths onto the base URL path only with a trailing slash
    return base_url.rstrip("/") + "/"


async def raise_for_api_error(response: httpx.Response) -> None:
    """Raise APIError for a non-success response, parsing the error body if present."""
    if response.is_success:
        return

    body = (await response.aread()).decode("utf-8", errors="replace")
    try:
        details = APIErrorBody.model_validate_json(body).error
    except ValidationError:
        raise APIError(
            f"HTTP {response.status_code} returned from OpenAI API; body: {body}",
            status_code=response.status_code,
        ) from None

    raise APIError(
        details.message,
        err_type=details.type,
        code=str(details.code) if details.code is not None else None,
        status_code=response.status_code,
        response_data=details.model_dump(exclude_none=True),
    )


class ChatClient:
    """Async client for chat completions, plain and streamed."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        organization: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ConfigurationError("Missing API key")

        headers = {"Authorization": f"Bearer {api_key}"}
        if organization:
            headers["OpenAI-Organization"] = organization

        self.base_url = _normalize_base_url(base_url)
        self.organization = organization
        # None disables every httpx timeout, including reads between chunks
        self.client: httpx.AsyncClient = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ChatClient:
        """Build a client from the YAML and environment configuration."""
        client_config = config.get_client_config()
        return cls(
            config.api_key,
            base_url=client_config["base_url"],
            organization=config.organization,
            timeout=client_config["timeout"],
            transport=transport,
        )

    @log_operation("create_chat_completion")
    async def create_chat_completion(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        """Send a chat completion request and return the complete response."""
        payload = request.model_copy(update={"stream": None}).to_payload()
        response = await self.client.post(CHAT_COMPLETIONS_ENDPOINT, json=payload)
        await raise_for_api_error(response)

        try:
            return ChatCompletionResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise ResponseDecodeError(
                f"Unexpected chat completion response: {e}",
                model=request.model,
                status_code=response.status_code,
            ) from e

    async def stream_chat_completion(
        self, request: ChatCompletionRequest
    ) -> AsyncGenerator[ChatCompletionChunk]:
        """
        Stream a chat completion as decoded chunks.

        Closing the generator early closes the HTTP response. Transport
        errors from httpx propagate unchanged.
        """
        payload: dict[str, Any] = request.model_copy(update={"stream": True}).to_payload()

        async with operation_context(
            "stream_chat_completion", context={"model": request.model}
        ) as op_logger:
            async with self.client.stream(
                "POST", CHAT_COMPLETIONS_ENDPOINT, json=payload
            ) as response:
                await raise_for_api_error(response)

                content_type = response.headers.get("content-type", "")
                if "text/event-stream" not in content_type:
                    op_logger.warning(
                        "Unexpected content type for stream", content_type=content_type
                    )

                chunks = decode_sse_stream(response.aiter_bytes(), model=request.model)
                try:
                    async for chunk in chunks:
                        yield chunk
                finally:
                    await chunks.aclose()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> ChatClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
