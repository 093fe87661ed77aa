import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from api.models import (
    ComprehensiveRequest,
    Phase1Request,
    Phase2Request,
    Phase3Request,
    StepRequest,
    UnifiedRequest,
)
from analyzer.pipeline import AnalysisPipeline, STEPS
from config import settings
from core.cache import RedisClient, get_redis_client
from core.errors import AnalysisError, ValidationFailedError, sanitize_error
from core.models import ScrapedContent

logger = logging.getLogger(__name__)

# Create router
router = APIRouter()


def get_pipeline(request: Request) -> AnalysisPipeline:
    return request.app.state.pipeline


def get_cache() -> Optional[RedisClient]:
    """Redis is optional for synchronous requests; run uncached when it is down."""
    try:
        return get_redis_client()
    except RuntimeError as e:
        logger.warning(f"⚠️ Cache unavailable: {str(e)}")
        return None


def ok(data, message: str) -> dict:
    return {"success": True, "data": jsonable_encoder(data), "message": message}


def _failure(e: Exception, code: str, action: str) -> AnalysisError:
    """Wrap unexpected exceptions so the handler returns a coded 500"""
    if isinstance(e, AnalysisError):
        return e
    logger.exception(f"❌ {action} failed")
    return AnalysisError(f"{action} failed: {sanitize_error(str(e))}", code=code)


@router.get("/")
async def root():
    return {
        "service": "Website Strategy Analyzer",
        "status": "running",
        "endpoints": {
            "comprehensive": "/api/analyze/comprehensive (POST)",
            "phase1": "/api/analyze/phase1-complete (POST)",
            "phase2": "/api/analyze/phase2-complete (POST)",
            "phase3": "/api/analyze/phase3-complete (POST)",
            "step_by_step": "/api/analyze/step-by-step (POST)",
            "unified": "/api/analyze/unified (POST)",
            "async": "/api/analyze/async (POST)",
        },
    }


@router.get("/health")
async def health(pipeline: AnalysisPipeline = Depends(get_pipeline)):
    cache = get_cache()
    browser = await pipeline.browser.health_check() if pipeline.browser else {"status": "disabled"}
    return {
        "status": "healthy",
        "llm_providers": pipeline.llm.available_providers(),
        "primary_provider": pipeline.llm.primary,
        "browser": browser,
        "cache": "connected" if cache and cache.ping() else "unavailable",
    }


@router.post("/api/analyze/comprehensive")
async def analyze_comprehensive(
    request: ComprehensiveRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """
    Full analysis in one request: base framework analysis, page audit,
    Lighthouse, all-pages Lighthouse (optional) and AI insights.
    """
    url = str(request.url)
    options = request.model_dump(exclude={"url", "use_cache"})
    cache = get_cache() if request.use_cache else None

    if cache:
        cached = cache.get_cached_analysis(url, options)
        if cached:
            logger.info(f"💾 Cache hit for {url}")
            return {
                **ok(cached, "Comprehensive analysis loaded from cache"),
                "tools": cached.get("tools"),
                "cached": True,
            }

    try:
        result = await pipeline.run_comprehensive(
            url,
            keyword=request.keyword,
            include_page_audit=request.include_page_audit,
            include_lighthouse=request.include_lighthouse,
            include_all_pages=request.include_all_pages,
            render_js=request.render_js,
        )
    except Exception as e:
        raise _failure(e, "COMPREHENSIVE_ANALYSIS_FAILED", "Comprehensive analysis")

    body = ok(result, "Comprehensive analysis completed")
    if cache:
        cache.cache_analysis(url, options, body["data"])
    return {**body, "tools": result["tools"]}


@router.post("/api/analyze/phase1-complete")
async def analyze_phase1(
    request: Phase1Request,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """Phase 1: content collection, SEO and QA heuristics, Lighthouse, Trends."""
    try:
        result = await pipeline.run_phase1(str(request.url), request.keyword, request.render_js)
    except Exception as e:
        raise _failure(e, "PHASE1_FAILED", "Phase 1")
    return ok(result, "Phase 1 data collection completed")


@router.post("/api/analyze/phase2-complete")
async def analyze_phase2(
    request: Phase2Request,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """Phase 2: framework analyses, reusing Phase 1 content when provided."""
    content = None
    if request.phase1_data and isinstance(request.phase1_data.get("content"), dict):
        try:
            content = ScrapedContent.model_validate(request.phase1_data["content"])
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ValidationFailedError(
                f"Invalid phase1Data.content: {', '.join(fields) or 'malformed'}"
            )

    try:
        result = await pipeline.run_phase2(
            str(request.url), content, request.frameworks, request.keyword
        )
    except Exception as e:
        raise _failure(e, "PHASE2_FAILED", "Phase 2")

    return ok(
        result,
        f"Phase 2 completed: {len(result['completed_analyses'])} succeeded, "
        f"{len(result['failed_analyses'])} failed",
    )


@router.post("/api/analyze/phase3-complete")
async def analyze_phase3(
    request: Phase3Request,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """Phase 3: strategic synthesis over the Phase 1 and Phase 2 results."""
    if not request.phase1_data or not request.phase2_data:
        raise ValidationFailedError(
            "url, phase1Data and phase2Data are required", code="MISSING_PARAMETERS"
        )

    try:
        result = await pipeline.run_phase3(
            str(request.url), request.phase1_data, request.phase2_data
        )
    except Exception as e:
        raise _failure(e, "PHASE3_FAILED", "Phase 3")
    return ok(result, "Phase 3 strategic analysis completed")


@router.post("/api/analyze/step-by-step")
async def analyze_step(
    request: StepRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """Run one step of the comprehensive flow: base-analysis, pageaudit, lighthouse, gemini-insights."""
    if request.step not in STEPS:
        raise ValidationFailedError(
            f"Invalid step '{request.step}'. Valid steps: {', '.join(STEPS)}",
            code="INVALID_STEP",
        )

    try:
        result = await pipeline.run_step(
            request.step, str(request.url), request.keyword, request.previous_results
        )
    except Exception as e:
        raise _failure(e, "STEP_FAILED", f"Step {request.step}")
    return ok(result, f"Step {request.step} completed")


@router.post("/api/analyze/unified")
async def analyze_unified(
    request: UnifiedRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    frameworks = request.selected_frameworks()
    if not frameworks:
        raise ValidationFailedError("Select at least one framework")

    try:
        result = await pipeline.run_unified(
            str(request.url),
            frameworks,
            keyword=request.keyword,
            include_lighthouse=request.include_lighthouse,
            include_trends=request.include_trends,
        )
    except Exception as e:
        raise _failure(e, "UNIFIED_ANALYSIS_FAILED", "Unified analysis")
    return ok(result, f"{len(result['completed'])}/{len(frameworks)} analyses completed")


@router.post("/api/analyze/async")
async def analyze_async(request: ComprehensiveRequest):
    """
    Submit a comprehensive analysis for background processing.
    Returns immediately with a task_id for status polling.
    """
    try:
        from tasks import run_comprehensive_analysis

        task = run_comprehensive_analysis.delay(
            str(request.url),
            request.keyword,
            request.include_page_audit,
            request.include_lighthouse,
            request.include_all_pages,
        )
    except Exception as e:
        raise _failure(e, "TASK_SUBMISSION_FAILED", "Task submission")

    return {
        "success": True,
        "task_id": task.id,
        "status": "PENDING",
        "message": "Analysis task submitted successfully",
        "poll_url": f"/api/analyze/status/{task.id}",
    }


@router.get("/api/analyze/status/{task_id}")
async def get_task_status(task_id: str):
    """
    Check the status of a background analysis task.

    Returns PENDING, STARTED, PROGRESS (with percent and status text),
    SUCCESS (with the result) or FAILURE (with the error).
    """
    from celery.result import AsyncResult
    from core.celery import celery_app

    task = AsyncResult(task_id, app=celery_app)
    response = {"task_id": task_id, "status": task.state}

    if task.state == "PENDING":
        response["message"] = "Task is waiting in queue"
    elif task.state == "STARTED":
        response["message"] = "Task is being processed"
    elif task.state == "PROGRESS":
        response["message"] = "Task is in progress"
        response["progress"] = task.info
    elif task.state == "SUCCESS":
        response["message"] = "Task completed successfully"
        response["result"] = task.result
    elif task.state == "FAILURE":
        response["message"] = "Task failed"
        response["error"] = sanitize_error(str(task.info))
    else:
        response["message"] = f"Unknown state: {task.state}"

    return response


@router.delete("/api/cache")
async def clear_cache():
    cache = get_cache()
    if cache is None:
        raise AnalysisError("Cache is unavailable", code="CACHE_UNAVAILABLE")
    deleted = cache.clear_cache()
    logger.info(f"🧹 Cleared {deleted} cached analyses")
    return {"success": True, "deleted": deleted, "ttl_seconds": settings.CACHE_TTL}
