"""
Centralized configuration for the Website Strategy Analyzer
All environment variables and settings are defined here
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


PLACEHOLDER_KEYS = {
    "",
    "your-gemini-api-key",
    "your-claude-api-key",
    "your-google-api-key",
    "your-api-key",
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Provides centralized configuration with validation and defaults.
    """

    # ======================
    # LLM Providers
    # ======================
    GEMINI_API_KEY: str = Field(default="", description="Google Gemini API key")
    CLAUDE_API_KEY: str = Field(default="", description="Anthropic Claude API key")
    LLM_PRIMARY_PROVIDER: str = Field(
        default="gemini",
        description="Provider tried first: 'gemini' or 'claude'"
    )
    GEMINI_MODEL: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model used for framework analyses"
    )
    GEMINI_INSIGHTS_MODEL: str = Field(
        default="gemini-1.5-pro",
        description="Gemini model used for strategic synthesis"
    )
    CLAUDE_MODEL: str = Field(
        default="claude-3-haiku-20240307",
        description="Claude model to use for analysis"
    )
    MAX_TOKENS: int = Field(default=3500, description="Max tokens for Claude response")
    LLM_TIMEOUT: float = Field(
        default=60.0,
        description="Seconds before a single provider call is cancelled"
    )

    # ======================
    # External Tools
    # ======================
    GOOGLE_API_KEY: str = Field(default="", description="PageSpeed Insights API key")
    PAGESPEED_ENDPOINT: str = Field(
        default="https://www.googleapis.com/pagespeedonline/v5/runPagespeed",
        description="PageSpeed Insights REST endpoint"
    )
    PAGESPEED_TIMEOUT: float = Field(default=60.0, description="PageSpeed request timeout")
    PAGEAUDIT_COMMAND: str = Field(
        default="",
        description="Command that runs the local page audit script, e.g. node pageaudit.js"
    )
    PAGEAUDIT_TIMEOUT: int = Field(default=120, description="Page audit timeout in seconds")
    PAGEAUDIT_MAX_OUTPUT: int = Field(
        default=10 * 1024 * 1024,
        description="Max bytes read from page audit output"
    )
    LIGHTHOUSE_ALL_PAGES_COMMAND: str = Field(
        default="",
        description="Command that runs Lighthouse against every discovered page"
    )
    LIGHTHOUSE_ALL_PAGES_TIMEOUT: int = Field(
        default=300,
        description="All-pages Lighthouse timeout in seconds"
    )
    LIGHTHOUSE_ALL_PAGES_MAX_OUTPUT: int = Field(
        default=20 * 1024 * 1024,
        description="Max bytes read from all-pages Lighthouse output"
    )

    # ======================
    # Content Fetching
    # ======================
    HTTP_TIMEOUT: float = Field(default=30.0, description="Scrape request timeout")
    SCRAPE_CHAR_LIMIT: int = Field(
        default=8000,
        description="Characters of clean text kept per page"
    )
    PROMPT_CONTENT_LIMIT: int = Field(
        default=4000,
        description="Characters of clean text embedded in prompts"
    )
    USER_AGENT: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User agent sent by the scraper"
    )

    # ======================
    # Browser Configuration
    # ======================
    BROWSER_MAX_PAGES: int = Field(
        default=5,
        description="Max concurrent pages open on the shared browser"
    )
    BROWSER_LAUNCH_TIMEOUT: int = Field(
        default=20,
        description="Timeout for launching browser in seconds"
    )
    BROWSER_NAVIGATION_TIMEOUT: int = Field(
        default=45000,
        description="Page navigation timeout in milliseconds"
    )
    VIEWPORT_WIDTH: int = Field(default=1920, description="Browser viewport width")
    VIEWPORT_HEIGHT: int = Field(default=1080, description="Browser viewport height")

    # ======================
    # Redis / Celery Configuration
    # ======================
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL"
    )
    CELERY_BROKER_URL: Optional[str] = Field(
        default=None,
        description="Celery broker URL (defaults to REDIS_URL if not set)"
    )
    CELERY_RESULT_BACKEND: str = Field(
        default="redis://localhost:6379/1",
        description="Celery result backend URL"
    )
    CELERY_RESULT_EXPIRES: int = Field(
        default=86400,
        description="Time in seconds before task results expire"
    )
    CACHE_TTL: int = Field(
        default=86400,  # 24 hours
        description="Cache time-to-live in seconds"
    )
    TASK_TIME_LIMIT: int = Field(
        default=900,
        description="Hard time limit for tasks in seconds"
    )
    TASK_SOFT_TIME_LIMIT: int = Field(
        default=840,
        description="Soft time limit for tasks in seconds"
    )
    WORKER_PREFETCH_MULTIPLIER: int = Field(default=1, description="Tasks to prefetch per worker")
    WORKER_MAX_TASKS_PER_CHILD: int = Field(
        default=10,
        description="Max tasks before worker restart"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @property
    def celery_broker(self) -> str:
        """Get Celery broker URL, defaulting to REDIS_URL if not set"""
        return self.CELERY_BROKER_URL or self.REDIS_URL

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# Global settings instance
settings = Settings()


# ======================
# Convenience Functions
# ======================

def is_configured(key: Optional[str]) -> bool:
    """True when an API key is present and not a template placeholder"""
    return bool(key) and key.strip().lower() not in PLACEHOLDER_KEYS


def get_gemini_api_key() -> str:
    """Get Gemini API key"""
    return settings.GEMINI_API_KEY


def get_claude_api_key() -> str:
    """Get Claude API key"""
    return settings.CLAUDE_API_KEY


def get_google_api_key() -> str:
    """Get PageSpeed API key"""
    return settings.GOOGLE_API_KEY


def get_redis_url() -> str:
    """Get Redis connection URL"""
    return settings.REDIS_URL
