"""
Provider-agnostic LLM adapter.

``LLMClient.generate_json`` is the only entry point the analyzers use. It
calls the configured primary provider, extracts a JSON object from the
reply and, when the primary fails, retries once against the secondary
provider if that provider has a real API key.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from config import settings, is_configured
from core.errors import (
    AnalysisError,
    LLMResponseError,
    ProviderNotConfiguredError,
    sanitize_error,
)
from utils.clients.anthropic import call_claude_with_retry
from utils.clients.gemini import call_gemini_with_retry
from utils.parsing.json import extract_json

logger = logging.getLogger(__name__)


class LLMProvider:
    """A named text-generation callable plus the key that enables it."""

    def __init__(
        self,
        name: str,
        call: Callable[[str, Optional[str]], Awaitable[str]],
        api_key: Callable[[], str],
    ):
        self.name = name
        self.call = call
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return is_configured(self._api_key())


def default_providers() -> Dict[str, LLMProvider]:
    return {
        "gemini": LLMProvider("gemini", call_gemini_with_retry, lambda: settings.GEMINI_API_KEY),
        "claude": LLMProvider("claude", call_claude_with_retry, lambda: settings.CLAUDE_API_KEY),
    }


class LLMClient:
    def __init__(
        self,
        primary: Optional[str] = None,
        providers: Optional[Dict[str, LLMProvider]] = None,
        timeout: Optional[float] = None,
    ):
        self.providers = providers or default_providers()
        self.primary = (primary or settings.LLM_PRIMARY_PROVIDER).lower()
        if self.primary not in self.providers:
            raise ValueError(f"Unknown LLM provider: {self.primary}")
        self.timeout = timeout if timeout is not None else settings.LLM_TIMEOUT

    @property
    def secondary(self) -> Optional[str]:
        for name in self.providers:
            if name != self.primary:
                return name
        return None

    def available_providers(self) -> list:
        return [name for name, provider in self.providers.items() if provider.configured]

    async def generate_json(
        self,
        prompt: str,
        schema_hint: Optional[Type[BaseModel]] = None,
        models: Optional[Dict[str, str]] = None,
    ) -> dict:
        """
        Generate a JSON object for ``prompt``.

        Args:
            prompt: Full prompt text
            schema_hint: Optional pydantic model the reply must validate against
            models: Optional per-provider model override, e.g. {"gemini": "gemini-1.5-pro"}

        Returns:
            Parsed JSON (validated and dumped when ``schema_hint`` is given)

        Raises:
            ProviderNotConfiguredError: No provider has a usable key
            AnalysisError: Primary failed and no secondary could recover
        """
        models = models or {}
        order = [name for name in (self.primary, self.secondary) if name]
        configured = [name for name in order if self.providers[name].configured]

        if not configured:
            raise ProviderNotConfiguredError(
                "No LLM provider configured (set GEMINI_API_KEY or CLAUDE_API_KEY)"
            )

        first_error = None
        for name in configured:
            try:
                return await self._generate_with(name, prompt, schema_hint, models.get(name))
            except Exception as e:
                message = sanitize_error(str(e))
                if first_error is None:
                    first_error = e
                if name != configured[-1]:
                    logger.warning(f"⚠️ {name} failed ({message}), falling back to {configured[-1]}")
                else:
                    logger.error(f"❌ {name} failed: {message}")

        if isinstance(first_error, AnalysisError):
            raise first_error
        raise AnalysisError(
            f"AI analysis failed: {sanitize_error(str(first_error))}", code="LLM_CALL_FAILED"
        ) from first_error

    async def _generate_with(
        self,
        name: str,
        prompt: str,
        schema_hint: Optional[Type[BaseModel]],
        model: Optional[str],
    ) -> dict:
        provider = self.providers[name]
        logger.info(f"🤖 Calling {name} ({len(prompt)} chars)")
        try:
            text = await asyncio.wait_for(provider.call(prompt, model), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise AnalysisError(
                f"{name} did not respond within {self.timeout:.0f}s", code="LLM_TIMEOUT"
            )

        data = extract_json(text)
        if schema_hint is None:
            return data

        try:
            return schema_hint.model_validate(data).model_dump()
        except ValidationError as e:
            raise LLMResponseError(
                f"AI response did not match {schema_hint.__name__}: {e.error_count()} field error(s)"
            )
