# Clients subpackage - External API clients
from .anthropic import call_claude_with_retry, get_claude_client
from .gemini import call_gemini_with_retry, get_gemini_client
from .llm import LLMClient, LLMProvider

__all__ = [
    "call_claude_with_retry",
    "get_claude_client",
    "call_gemini_with_retry",
    "get_gemini_client",
    "LLMClient",
    "LLMProvider",
]
