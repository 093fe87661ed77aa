"""
Celery tasks for background analysis.

The worker has no FastAPI lifespan, so each task owns the browser handle
and HTTP client it hands to the pipeline and closes them when done.
"""

import asyncio
import logging
from typing import Optional

import httpx
from celery import Task
from fastapi.encoders import jsonable_encoder

from config import settings
from core.browser import BrowserHandle
from core.cache import get_redis_client
from core.celery import celery_app
from core.errors import AnalysisError, sanitize_error
from analyzer.pipeline import AnalysisPipeline
from utils.clients.llm import LLMClient

logger = logging.getLogger(__name__)


class CallbackTask(Task):
    """Base task that logs success and failure"""

    def on_success(self, retval, task_id, args, kwargs):
        logger.info(f"✅ Task {task_id} completed successfully")

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"❌ Task {task_id} failed: {sanitize_error(str(exc))}")


async def _run_comprehensive(url: str, options: dict, task: Optional[Task] = None) -> dict:
    def progress(status: str, percent: int):
        if task is not None:
            task.update_state(
                state="PROGRESS",
                meta={"percent": percent, "status": status, "url": url},
            )

    async with BrowserHandle() as browser:
        async with httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT,
            follow_redirects=True,
            headers={"User-Agent": settings.USER_AGENT},
        ) as http_client:
            pipeline = AnalysisPipeline(llm=LLMClient(), browser=browser, http_client=http_client)
            return await pipeline.run_comprehensive(url, progress=progress, **options)


@celery_app.task(
    bind=True,
    base=CallbackTask,
    name="tasks.run_comprehensive_analysis",
    time_limit=settings.TASK_TIME_LIMIT,
    soft_time_limit=settings.TASK_SOFT_TIME_LIMIT,
)
def run_comprehensive_analysis(
    self,
    url: str,
    keyword: Optional[str] = None,
    include_page_audit: bool = True,
    include_lighthouse: bool = True,
    include_all_pages: bool = False,
) -> dict:
    """
    Run a comprehensive analysis in the worker and cache the result.

    Returns the same ``{success, data, message}`` body the synchronous
    endpoint returns.
    """
    options = {
        "keyword": keyword,
        "include_page_audit": include_page_audit,
        "include_lighthouse": include_lighthouse,
        "include_all_pages": include_all_pages,
        "render_js": False,
    }
    logger.info(f"🚀 Starting comprehensive analysis task {self.request.id} for {url}")

    try:
        redis_client = get_redis_client()
    except RuntimeError as e:
        logger.warning(f"⚠️ Running without cache: {str(e)}")
        redis_client = None

    if redis_client:
        cached = redis_client.get_cached_analysis(url, options)
        if cached:
            logger.info(f"💾 Cache hit for {url}, returning cached result")
            return {"success": True, "data": cached, "message": "Loaded from cache", "cached": True}

    try:
        result = asyncio.run(_run_comprehensive(url, options, task=self))
    except AnalysisError as e:
        logger.error(f"❌ Analysis failed for {url}: {e.message}")
        return e.to_dict()

    data = jsonable_encoder(result)
    if redis_client:
        redis_client.cache_analysis(url, options, data)

    return {"success": True, "data": data, "message": "Comprehensive analysis completed"}
