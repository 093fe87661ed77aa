"""
Anthropic API client utilities.

Async Claude calls with automatic retry for transient failures.
"""

import asyncio
import logging
from typing import Optional

import anthropic
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from config import settings

logger = logging.getLogger(__name__)

# Lazy initialization of Anthropic client, one per event loop
_claude_client = None
_client_loop = None


def get_claude_client() -> anthropic.AsyncAnthropic:
    """Get or create the Anthropic client for the running event loop."""
    global _claude_client, _client_loop
    loop = asyncio.get_running_loop()
    if _claude_client is None or _client_loop is not loop:
        _claude_client = anthropic.AsyncAnthropic(api_key=settings.CLAUDE_API_KEY)
        _client_loop = loop
    return _claude_client


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(
        (
            anthropic.APIConnectionError,
            anthropic.RateLimitError,
            anthropic.InternalServerError,
        )
    ),
    reraise=True,
)
async def call_claude_with_retry(prompt: str, model: Optional[str] = None) -> str:
    """
    Send a single-turn prompt to Claude and return the concatenated text.

    Retries up to 3 times for connection errors, rate limits and 5xx
    responses. Authentication and bad-request errors propagate at once.
    """
    client = get_claude_client()
    message = await client.messages.create(
        model=model or settings.CLAUDE_MODEL,
        max_tokens=settings.MAX_TOKENS,
        messages=[{"role": "user", "content": prompt}],
    )
    return "".join(
        block.text for block in message.content if getattr(block, "type", None) == "text"
    )
