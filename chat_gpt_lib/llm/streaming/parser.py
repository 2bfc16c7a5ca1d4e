"""
SSE decoder for streamed chat completions with delta accumulation.

Bytes from the HTTP response body are framed into events (one event per
blank-line delimited block), the ``data`` field of each event is decoded
into a ChatCompletionChunk and the stream ends at the ``[DONE]`` sentinel.
Decoding is fail-fast: the first undecodable payload ends the stream.
"""

from __future__ import annotations

import re
from collections.abc import AsyncGenerator, AsyncIterable, Iterator
from typing import Any

import structlog
from pydantic import ValidationError

from ..exceptions import FramingError, PayloadDecodeError
from ..models import ChatCompletionChunk, ChatMessage, ToolCallDelta, Usage
from .models import (
    AccumulatedChoice,
    AccumulatedToolCall,
    DecoderState,
    DecoderStats,
)

logger = structlog.get_logger(__name__)

# Constants
DONE_SENTINEL = "[DONE]"
DATA_FIELD = "data"

# Two consecutive line terminators, each LF or CRLF
_FRAME_BOUNDARY = re.compile(rb"\r?\n\r?\n")
_LINE_BREAK = re.compile(r"\r?\n")
# A boundary is at most 4 bytes long
_BOUNDARY_OVERLAP = 3


class FrameBuffer:
    """Accumulates raw bytes and hands out complete SSE frames."""

    def __init__(self) -> None:
        self._data = bytearray()
        self._scan_from = 0

    def __len__(self) -> int:
        return len(self._data)

    def append(self, chunk: bytes) -> None:
        self._data.extend(chunk)

    def next_frame(self) -> bytes | None:
        """Remove and return the next complete frame, without its boundary."""
        match = _FRAME_BOUNDARY.search(self._data, self._scan_from)
        if match is None:
            # Only a boundary that includes new bytes can match next time
            self._scan_from = max(0, len(self._data) - _BOUNDARY_OVERLAP)
            return None

        frame = bytes(self._data[:match.start()])
        del self._data[:match.end()]
        self._scan_from = 0
        return frame

    def remainder(self) -> bytes:
        return bytes(self._data)

    def clear(self) -> int:
        """Drop buffered bytes and return how many were dropped."""
        dropped = len(self._data)
        self._data.clear()
        self._scan_from = 0
        return dropped


def extract_data(frame: str) -> str | None:
    """
    Return the ``data`` value of an event, or None if it has none.

    Field names must match exactly. One leading space is stripped from each
    value; multiple data lines are joined with newlines. Comments and other
    fields are ignored.
    """
    values: list[str] = []
    for line in _LINE_BREAK.split(frame):
        if not line or line.startswith(":"):
            continue

        name, _, value = line.partition(":")
        if name != DATA_FIELD:
            continue

        if value.startswith(" "):
            value = value[1:]
        values.append(value)

    if not values:
        return None
    return "\n".join(values)


class SSEDecoder:
    """
    Incremental decoder from raw SSE bytes to chat completion chunks.

    One decoder serves exactly one response body. ``feed`` buffers the bytes
    immediately but decodes lazily: each item pulled from the returned
    iterator decodes at most the frames needed to produce it. Frames left
    unpulled stay buffered and are served by the next ``feed`` or ``finish``.
    """

    def __init__(self, model: str | None = None) -> None:
        self.model = model
        self.state = DecoderState.STREAMING
        self.stats = DecoderStats()
        self._buffer = FrameBuffer()
        self._log = logger.bind(model=model) if model else logger

    @property
    def is_terminated(self) -> bool:
        return self.state is not DecoderState.STREAMING

    @property
    def buffered_bytes(self) -> int:
        return len(self._buffer)

    def feed(self, chunk: bytes) -> Iterator[ChatCompletionChunk]:
        """Buffer a chunk and return an iterator over the payloads it completes."""
        self.stats.chunks_received += 1
        self.stats.bytes_received += len(chunk)

        if self.is_terminated:
            self.stats.bytes_discarded += len(chunk)
            return iter(())

        self._buffer.append(chunk)
        return self._drain()

    def finish(self) -> list[ChatCompletionChunk]:
        """
        Signal the end of the byte stream.

        Returns payloads of complete frames that were never pulled. Raises
        FramingError if a non-blank partial frame is left over.
        """
        if self.is_terminated:
            return []

        payloads = list(self._drain())
        if self.is_terminated:
            return payloads

        remainder = self._buffer.remainder()
        if remainder.strip():
            raise self._fail(
                FramingError(
                    f"Stream ended inside an event ({len(remainder)} bytes "
                    "without a terminating blank line)",
                    remainder=remainder,
                    model=self.model,
                )
            )

        self._terminate(DecoderState.DONE)
        self._log.debug("SSE stream ended", **self.stats.as_dict())
        return payloads

    def close(self) -> None:
        """Release the buffer; further input is discarded."""
        if self.state is DecoderState.STREAMING:
            self._terminate(DecoderState.CLOSED)
        else:
            self.stats.bytes_discarded += self._buffer.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get decoding statistics for monitoring."""
        return {"state": self.state.value, **self.stats.as_dict()}

    def _drain(self) -> Iterator[ChatCompletionChunk]:
        while self.state is DecoderState.STREAMING:
            frame = self._buffer.next_frame()
            if frame is None:
                return

            payload = self._decode_frame(frame)
            if payload is not None:
                self.stats.payloads_emitted += 1
                yield payload

    def _decode_frame(self, frame: bytes) -> ChatCompletionChunk | None:
        self.stats.frames_decoded += 1

        # Only the data value has to be valid UTF-8; bad bytes in comments
        # and other fields are carried through as surrogates and dropped
        data = extract_data(frame.decode("utf-8", errors="surrogateescape"))
        if data is None or not data.strip():
            # keep-alive
            self.stats.frames_ignored += 1
            self._log.debug("Ignoring SSE frame without data", frame_size=len(frame))
            return None

        raw = data.encode("utf-8", errors="surrogateescape")
        try:
            data = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise self._fail(
                PayloadDecodeError(
                    f"SSE data is not valid UTF-8: {e}",
                    raw_data=raw.decode("utf-8", errors="replace"),
                    model=self.model,
                )
            ) from e

        if data == DONE_SENTINEL:
            self._terminate(DecoderState.DONE)
            self._log.debug("SSE stream completed", **self.stats.as_dict())
            return None

        try:
            return ChatCompletionChunk.model_validate_json(data)
        except ValidationError as e:
            raise self._fail(
                PayloadDecodeError(
                    f"Invalid chat completion chunk: {e}",
                    raw_data=data,
                    model=self.model,
                )
            ) from e

    def _terminate(self, state: DecoderState) -> None:
        self.state = state
        self.stats.bytes_discarded += self._buffer.clear()

    def _fail(self, error: Exception) -> Exception:
        self._terminate(DecoderState.FAILED)
        self._log.warning(
            "SSE stream failed",
            error_type=type(error).__name__,
            error_message=str(error),
            **self.stats.as_dict(),
        )
        return error


async def decode_sse_stream(
    byte_stream: AsyncIterable[bytes],
    *,
    model: str | None = None,
) -> AsyncGenerator[ChatCompletionChunk]:
    """
    Decode an async byte stream into chat completion chunks.

    The next chunk is only requested once every payload of the current one
    has been consumed. Ends on the sentinel, on a clean end of input, or by
    raising StreamingError. Exceptions raised by the byte stream propagate
    unchanged. Closing the generator closes the byte stream as well.
    """
    decoder = SSEDecoder(model=model)
    chunks = aiter(byte_stream)

    try:
        async for chunk in chunks:
            for payload in decoder.feed(chunk):
                yield payload
            if decoder.is_terminated:
                break
        else:
            for payload in decoder.finish():
                yield payload

    finally:
        decoder.close()
        aclose = getattr(chunks, "aclose", None)
        if aclose is not None:
            await aclose()


class DeltaAccumulator:
    """
    Rebuilds complete assistant messages from streamed deltas.

    Deltas are keyed by choice index: content is concatenated, the first
    role wins, the last finish reason wins and tool call fragments are
    merged by tool call index.
    """

    def __init__(self) -> None:
        self._choices: dict[int, AccumulatedChoice] = {}
        self.chunk_count = 0
        self.id: str | None = None
        self.model: str | None = None
        self.usage: Usage | None = None

    def add(self, chunk: ChatCompletionChunk) -> None:
        self.chunk_count += 1
        self.id = self.id or chunk.id
        self.model = self.model or chunk.model
        if chunk.usage is not None:
            self.usage = chunk.usage

        for choice in chunk.choices:
            state = self._choices.setdefault(
                choice.index, AccumulatedChoice(index=choice.index)
            )
            state.delta_count += 1
            delta = choice.delta

            if delta.role and state.role is None:
                state.role = delta.role

            if delta.content:
                state.content += delta.content

            if delta.tool_calls:
                self._accumulate_tool_calls(state, delta.tool_calls)

            if choice.finish_reason:
                state.finish_reason = choice.finish_reason

    def _accumulate_tool_calls(
        self, state: AccumulatedChoice, tool_calls_delta: list[ToolCallDelta]
    ) -> None:
        for fragment in tool_calls_delta:
            call = state.tool_calls.setdefault(
                fragment.index, AccumulatedToolCall(index=fragment.index)
            )

            if fragment.id:
                call.id += fragment.id
            if fragment.type:
                call.type = fragment.type
            if fragment.function is not None:
                if fragment.function.name:
                    call.name += fragment.function.name
                if fragment.function.arguments:
                    call.arguments += fragment.function.arguments

    def content(self, index: int = 0) -> str:
        """Accumulated content of one choice ("" if it never appeared)."""
        state = self._choices.get(index)
        return state.content if state else ""

    def choices(self) -> list[AccumulatedChoice]:
        return [self._choices[index] for index in sorted(self._choices)]

    def to_messages(self) -> list[ChatMessage]:
        """One assistant message per choice, ordered by choice index."""
        messages = []
        for state in self.choices():
            tool_calls = [
                state.tool_calls[i].to_dict() for i in sorted(state.tool_calls)
            ]
            messages.append(
                ChatMessage(
                    role=state.role or "assistant",
                    content=state.content or None,
                    tool_calls=tool_calls or None,
                )
            )
        return messages

    def reset(self) -> None:
        """Reset accumulator state for a new stream."""
        self._choices.clear()
        self.chunk_count = 0
        self.id = None
        self.model = None
        self.usage = None
