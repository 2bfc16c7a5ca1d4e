"""
Streaming-specific dataclasses for SSE decoding and delta accumulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DecoderState(Enum):
    """Lifecycle of an SSE decoder."""
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass
class DecoderStats:
    """Counters for one decoded stream."""
    bytes_received: int = 0
    chunks_received: int = 0
    frames_decoded: int = 0
    frames_ignored: int = 0
    payloads_emitted: int = 0
    bytes_discarded: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "bytes_received": self.bytes_received,
            "chunks_received": self.chunks_received,
            "frames_decoded": self.frames_decoded,
            "frames_ignored": self.frames_ignored,
            "payloads_emitted": self.payloads_emitted,
            "bytes_discarded": self.bytes_discarded,
        }


@dataclass
class AccumulatedToolCall:
    """Tool call rebuilt from streamed fragments."""
    index: int
    id: str = ""
    type: str = "function"
    name: str = ""
    arguments: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type,
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class AccumulatedChoice:
    """Mutable state of one choice while its deltas arrive."""
    index: int
    role: str | None = None
    content: str = ""
    finish_reason: str | None = None
    tool_calls: dict[int, AccumulatedToolCall] = field(default_factory=dict)
    delta_count: int = 0

    @property
    def is_finished(self) -> bool:
        return self.finish_reason is not None
