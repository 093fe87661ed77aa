"""
Shared Playwright browser handle.

One handle is created by whoever owns the process lifetime (the API
lifespan or a Celery task) and passed to the functions that need a real
browser. Pages are only handed out through ``async with handle.page()``
so they are closed even when the caller raises.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from playwright.async_api import async_playwright, Browser, Page

from config import settings

logger = logging.getLogger(__name__)


class BrowserHandle:
    """
    Owns one Chromium instance and bounds the number of concurrently open pages.
    """

    def __init__(
        self,
        max_pages: int = settings.BROWSER_MAX_PAGES,
        launch_timeout: int = settings.BROWSER_LAUNCH_TIMEOUT,
    ):
        self.max_pages = max_pages
        self.launch_timeout = launch_timeout

        self.playwright = None
        self.browser: Optional[Browser] = None
        self.started_at: Optional[datetime] = None
        self.pages_served = 0

        self.semaphore = asyncio.Semaphore(max_pages)
        self._lock = asyncio.Lock()
        self._active = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._closing = False

    @property
    def is_running(self) -> bool:
        return self.browser is not None and self.browser.is_connected()

    async def start(self):
        """Launch the browser if it is not already running"""
        async with self._lock:
            if self.is_running:
                return
            self._closing = False
            logger.info("🚀 Launching shared browser...")
            self.playwright = await async_playwright().start()
            try:
                self.browser = await asyncio.wait_for(
                    self.playwright.chromium.launch(
                        headless=True,
                        args=[
                            "--disable-blink-features=AutomationControlled",
                            "--disable-dev-shm-usage",  # Prevents memory issues in Docker
                            "--no-sandbox",
                            "--disable-gpu",
                        ],
                    ),
                    timeout=self.launch_timeout,
                )
            except Exception:
                await self.playwright.stop()
                self.playwright = None
                raise
            self.started_at = datetime.now()
            logger.info("✅ Shared browser ready")

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Open a fresh context and page; both are closed on exit."""
        if self._closing:
            raise RuntimeError("Browser handle is closing")
        if not self.is_running:
            await self.start()

        async with self.semaphore:
            self._active += 1
            self._idle.clear()
            context = None
            try:
                context = await self.browser.new_context(
                    viewport={"width": settings.VIEWPORT_WIDTH, "height": settings.VIEWPORT_HEIGHT},
                    user_agent=settings.USER_AGENT,
                )
                page = await context.new_page()
                page.set_default_navigation_timeout(settings.BROWSER_NAVIGATION_TIMEOUT)
                self.pages_served += 1
                yield page
            finally:
                if context is not None:
                    try:
                        await context.close()
                    except Exception as e:
                        logger.warning(f"⚠️ Error closing browser context: {str(e)}")
                self._active -= 1
                if self._active == 0:
                    self._idle.set()

    async def health_check(self) -> dict:
        uptime = (datetime.now() - self.started_at).total_seconds() if self.started_at else 0
        return {
            "status": "healthy" if self.is_running else "stopped",
            "active_pages": self._active,
            "max_pages": self.max_pages,
            "pages_served": self.pages_served,
            "uptime_seconds": round(uptime, 1),
        }

    async def close(self, timeout: float = 30.0):
        """Stop handing out pages, wait for open ones, then shut the browser down"""
        self._closing = True
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"⚠️ Closing browser with {self._active} page(s) still open")

        async with self._lock:
            if self.browser is not None:
                try:
                    await self.browser.close()
                except Exception as e:
                    logger.warning(f"⚠️ Error closing browser: {str(e)}")
                self.browser = None
            if self.playwright is not None:
                await self.playwright.stop()
                self.playwright = None
        logger.info("🧹 Shared browser closed")

    async def __aenter__(self) -> "BrowserHandle":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
