"""
Wire models for the chat completions endpoint.

This module provides the pydantic models exchanged with the API:
- Request bodies
- Complete (non-streaming) responses
- Streaming chunks carrying choice deltas
- The error body returned with non-success statuses
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    """Message roles understood by the API."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"
    FUNCTION = "function"


class FinishReason(str, Enum):
    """Finish reasons reported on the last delta of a choice."""
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"
    FUNCTION_CALL = "function_call"


class ImageUrl(BaseModel):
    url: str
    detail: str | None = None


class TextContentPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImageContentPart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


ContentPart = Annotated[
    TextContentPart | ImageContentPart, Field(discriminator="type")
]


class ChatMessage(BaseModel):
    """
    A single message in a conversation.

    ``content`` is either plain text or a list of typed parts, which is how
    images are attached to user messages.
    """
    role: str
    content: str | list[ContentPart] | None = None
    name: str | None = None
    tool_calls: list[dict[str, Any]] | None = None
    tool_call_id: str | None = None

    def text(self) -> str:
        """Text of the message, joining text parts and skipping images."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "".join(
            part.text for part in self.content if isinstance(part, TextContentPart)
        )


class ToolFunction(BaseModel):
    """Function the model may call; ``parameters`` is a JSON schema."""
    name: str
    description: str | None = None
    parameters: dict[str, Any] | None = None


class Tool(BaseModel):
    type: Literal["function"] = "function"
    function: ToolFunction


class ToolChoiceFunction(BaseModel):
    name: str


class ToolChoice(BaseModel):
    """Forces the model to call one named function."""
    type: Literal["function"] = "function"
    function: ToolChoiceFunction


class ChatCompletionRequest(BaseModel):
    """Body of a chat completion request."""
    model: str
    messages: list[ChatMessage]
    temperature: float | None = None
    top_p: float | None = None
    n: int | None = None
    stream: bool | None = None
    stop: list[str] | None = None
    max_tokens: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    logit_bias: dict[str, int] | None = None
    user: str | None = None
    tools: list[Tool] | None = None
    # "none", "auto", "required" or a specific function
    tool_choice: str | ToolChoice | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize, leaving out unset optional fields."""
        return self.model_dump(mode="json", exclude_none=True)


class Usage(BaseModel):
    """Token usage statistics."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionChoice(BaseModel):
    index: int
    message: ChatMessage
    finish_reason: str | None = None


class ChatCompletionResponse(BaseModel):
    """Complete chat completion response."""
    id: str
    object: str
    created: int
    model: str
    choices: list[ChatCompletionChoice]
    usage: Usage | None = None
    system_fingerprint: str | None = None


class ToolCallFunctionDelta(BaseModel):
    name: str | None = None
    arguments: str | None = None


class ToolCallDelta(BaseModel):
    """Fragment of a tool call; fragments share an index."""
    index: int = 0
    id: str | None = None
    type: str | None = None
    function: ToolCallFunctionDelta | None = None


class ChoiceDelta(BaseModel):
    """Incremental role/content fields of one choice."""
    model_config = ConfigDict(extra="allow")

    role: str | None = None
    content: str | None = None
    tool_calls: list[ToolCallDelta] | None = None


class ChunkChoice(BaseModel):
    index: int
    delta: ChoiceDelta = Field(default_factory=ChoiceDelta)
    finish_reason: str | None = None
    logprobs: Any = None


class ChatCompletionChunk(BaseModel):
    """
    Decoded payload of one streamed event.

    Only ``choices`` is required; identifying fields are optional because
    compatible servers do not always send them on every chunk.
    """
    id: str | None = None
    object: str | None = None
    created: int | None = None
    model: str | None = None
    choices: list[ChunkChoice]
    usage: Usage | None = None
    system_fingerprint: str | None = None


class APIErrorDetails(BaseModel):
    message: str
    type: str | None = None
    param: str | None = None
    code: str | int | None = None


class APIErrorBody(BaseModel):
    """Error body returned with non-success statuses."""
    error: APIErrorDetails
