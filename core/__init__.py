# Core package - Infrastructure components
from .errors import (
    AnalysisError,
    ContentFetchError,
    LLMResponseError,
    ProviderNotConfiguredError,
    FrameworkLoadError,
    ToolUnavailableError,
    ScriptExecutionError,
    sanitize_error,
)
from .models import ScrapedContent, StepResult, ActionItem, Recommendation
from .browser import BrowserHandle
from .cache import RedisClient, get_redis_client, close_redis_client
from .celery import celery_app

__all__ = [
    # Errors
    "AnalysisError",
    "ContentFetchError",
    "LLMResponseError",
    "ProviderNotConfiguredError",
    "FrameworkLoadError",
    "ToolUnavailableError",
    "ScriptExecutionError",
    "sanitize_error",
    # Models
    "ScrapedContent",
    "StepResult",
    "ActionItem",
    "Recommendation",
    # Browser
    "BrowserHandle",
    # Redis/Cache
    "RedisClient",
    "get_redis_client",
    "close_redis_client",
    # Celery
    "celery_app",
]
