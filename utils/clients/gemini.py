"""
Google Gemini client utilities (google-genai SDK).
"""

import asyncio
import logging
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

from config import settings

logger = logging.getLogger(__name__)

_gemini_client = None
_client_loop = None


def get_gemini_client() -> genai.Client:
    """Get or create the Gemini client for the running event loop."""
    global _gemini_client, _client_loop
    loop = asyncio.get_running_loop()
    if _gemini_client is None or _client_loop is not loop:
        _gemini_client = genai.Client(api_key=settings.GEMINI_API_KEY)
        _client_loop = loop
    return _gemini_client


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (genai_errors.ServerError, httpx.TransportError)):
        return True
    return isinstance(exc, genai_errors.ClientError) and getattr(exc, "code", None) == 429


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception(_is_transient),
    reraise=True,
)
async def call_gemini_with_retry(prompt: str, model: Optional[str] = None) -> str:
    """Generate content with Gemini; rate limits and 5xx are retried."""
    client = get_gemini_client()
    response = await client.aio.models.generate_content(
        model=model or settings.GEMINI_MODEL,
        contents=prompt,
    )
    return response.text or ""
