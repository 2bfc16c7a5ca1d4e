"""
Command line entry point: stream a chat completion to stdout.

Usage: python -m chat_gpt_lib.main "your prompt"
"""

from __future__ import annotations

import asyncio
import sys
from contextlib import aclosing

import httpx
import structlog

from chat_gpt_lib.config import Configuration
from chat_gpt_lib.llm.client import ChatClient
from chat_gpt_lib.llm.exceptions import LLMError
from chat_gpt_lib.llm.models import ChatCompletionRequest, ChatMessage, ChatRole
from chat_gpt_lib.llm.streaming.parser import DeltaAccumulator
from chat_gpt_lib.llm.tokens import count_message_tokens
from chat_gpt_lib.logging_utils import configure_logging

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT = "You are a helpful assistant."


def build_request(prompt: str, client_config: dict) -> ChatCompletionRequest:
    return ChatCompletionRequest(
        model=client_config["model"],
        messages=[
            ChatMessage(role=ChatRole.SYSTEM.value, content=SYSTEM_PROMPT),
            ChatMessage(role=ChatRole.USER.value, content=prompt),
        ],
        temperature=client_config["temperature"],
        max_tokens=client_config["max_tokens"],
    )


async def stream_prompt(client: ChatClient, request: ChatCompletionRequest) -> str:
    """Print deltas of the first choice as they arrive and return the full text."""
    accumulator = DeltaAccumulator()

    async with aclosing(client.stream_chat_completion(request)) as chunks:
        async for chunk in chunks:
            accumulator.add(chunk)
            for choice in chunk.choices:
                if choice.index == 0 and choice.delta.content:
                    print(choice.delta.content, end="", flush=True)

    print()
    return accumulator.content()


async def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    prompt = " ".join(args).strip()
    if not prompt:
        print('usage: chat-gpt-stream "prompt"', file=sys.stderr)
        return 2

    try:
        config = Configuration()
        configure_logging(config.get_logging_config().get("level", "INFO"))
        client_config = config.get_client_config()

        request = build_request(prompt, client_config)
        logger.debug(
            "Sending prompt",
            model=request.model,
            estimated_prompt_tokens=count_message_tokens(request.messages),
        )

        async with ChatClient.from_config(config) as client:
            await stream_prompt(client, request)
    except (LLMError, httpx.HTTPError) as e:
        logger.error("Chat completion failed", error_type=type(e).__name__)
        print(f"error: {e}", file=sys.stderr)
        return 1

    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
