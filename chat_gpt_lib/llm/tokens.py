"""
Rough token estimates for prompts and messages.

One token is taken to be about four characters of English text. The
estimate is only meant for budgeting (e.g. picking ``max_tokens``), not
for billing; other languages and punctuation-heavy text will be off.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import ChatMessage

CHARS_PER_TOKEN = 4


def count_tokens(text: str) -> int:
    return len(text) // CHARS_PER_TOKEN


def count_message_tokens(messages: Iterable[ChatMessage]) -> int:
    """Sum of the estimates for the text of each message; images count as zero."""
    return sum(count_tokens(message.text()) for message in messages)
