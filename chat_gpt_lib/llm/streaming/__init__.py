"""
Streaming functionality for chat completions.

This module contains:
- SSE framing and decoding
- Delta accumulation
"""

from __future__ import annotations

from .models import AccumulatedChoice, AccumulatedToolCall, DecoderState, DecoderStats
from .parser import (
    DONE_SENTINEL,
    DeltaAccumulator,
    FrameBuffer,
    SSEDecoder,
    decode_sse_stream,
    extract_data,
)

__all__ = [
    "DONE_SENTINEL",
    "AccumulatedChoice",
    "AccumulatedToolCall",
    "DecoderState",
    "DecoderStats",
    "DeltaAccumulator",
    "FrameBuffer",
    "SSEDecoder",
    "decode_sse_stream",
    "extract_data",
]
