"""
Analysis orchestration.

``AnalysisPipeline`` owns its collaborators (LLM adapter, browser handle,
HTTP client, tool callers) and sequences them for each endpoint:

    fetch content -> frameworks in parallel -> external tools
        -> AI synthesis -> report

Every step after the content fetch produces a StepResult; only a failed
content fetch aborts a run, since nothing downstream can work without it.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional

import httpx

from config import settings
from core.browser import BrowserHandle
from core.errors import ToolUnavailableError, ValidationFailedError
from core.models import ScrapedContent, StepResult
from analyzer.frameworks import run_frameworks
from analyzer.prompts import build_insights_prompt, build_synthesis_prompt
from analyzer.report import ReportBuilder
from analyzer.schemas import InsightsOutput, SynthesisOutput
from analyzer.seo import build_tool_links, run_qa_checks, score_meta
from analyzer.taxonomy import FRAMEWORKS
from utils.clients.llm import LLMClient
from utils.clients.pagespeed import fetch_lighthouse
from utils.clients.scripts import run_script
from utils.clients.trends import fetch_trends
from utils.scraper import fetch_content, fetch_rendered_content

logger = logging.getLogger(__name__)

STEPS = ("base-analysis", "pageaudit", "lighthouse", "gemini-insights")

INSIGHTS_MODELS = {"gemini": settings.GEMINI_INSIGHTS_MODEL}


async def capture(awaitable: Awaitable[Any]) -> StepResult:
    """Await one step and fold its outcome into a StepResult."""
    try:
        result = await awaitable
    except Exception as e:
        logger.warning(f"⚠️ Step failed: {e}")
        return StepResult.from_exception(e)
    if isinstance(result, StepResult):
        return result
    return StepResult.success(result)


def as_step(value: Any) -> Optional[StepResult]:
    """Rebuild a StepResult from client-supplied phase data."""
    if value is None:
        return None
    if isinstance(value, StepResult):
        return value
    if isinstance(value, dict) and value.get("status") in ("ok", "failed", "unavailable"):
        return StepResult.model_validate(value)
    return StepResult.success(value)


def _unavailable(reason: str) -> Awaitable[StepResult]:
    async def _result():
        return StepResult.unavailable(reason, code="SKIPPED")
    return _result()


class AnalysisPipeline:
    def __init__(
        self,
        llm: Optional[LLMClient] = None,
        browser: Optional[BrowserHandle] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        fetcher: Optional[Callable[..., Awaitable[ScrapedContent]]] = None,
        lighthouse: Optional[Callable[[str], Awaitable[StepResult]]] = None,
        trends: Optional[Callable[[Optional[str]], Awaitable[StepResult]]] = None,
        script_runner: Optional[Callable[..., Awaitable[Any]]] = None,
    ):
        self.llm = llm or LLMClient()
        self.browser = browser
        self.http_client = http_client
        self._fetcher = fetcher
        self._lighthouse = lighthouse
        self._trends = trends
        self._run_script = script_runner or run_script

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    async def fetch(self, url: str, render_js: bool = False) -> ScrapedContent:
        if self._fetcher is not None:
            return await self._fetcher(url)
        if render_js and self.browser is not None:
            return await fetch_rendered_content(url, self.browser)
        return await fetch_content(url, client=self.http_client)

    async def lighthouse(self, url: str) -> StepResult:
        if self._lighthouse is not None:
            return await self._lighthouse(url)
        return await fetch_lighthouse(url, client=self.http_client)

    async def trends(self, keyword: Optional[str]) -> StepResult:
        if self._trends is not None:
            return await self._trends(keyword)
        return await fetch_trends(keyword, self.browser)

    async def page_audit(self, url: str) -> Any:
        if not settings.PAGEAUDIT_COMMAND:
            raise ToolUnavailableError("PAGEAUDIT_COMMAND is not configured")
        return await self._run_script(
            settings.PAGEAUDIT_COMMAND,
            [url],
            timeout=settings.PAGEAUDIT_TIMEOUT,
            max_output=settings.PAGEAUDIT_MAX_OUTPUT,
        )

    async def lighthouse_all_pages(self, url: str) -> Any:
        if not settings.LIGHTHOUSE_ALL_PAGES_COMMAND:
            raise ToolUnavailableError("LIGHTHOUSE_ALL_PAGES_COMMAND is not configured")
        return await self._run_script(
            settings.LIGHTHOUSE_ALL_PAGES_COMMAND,
            [url],
            timeout=settings.LIGHTHOUSE_ALL_PAGES_TIMEOUT,
            max_output=settings.LIGHTHOUSE_ALL_PAGES_MAX_OUTPUT,
        )

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------

    async def base_analysis(
        self,
        url: str,
        keyword: Optional[str] = None,
        frameworks: Iterable[str] = FRAMEWORKS,
        render_js: bool = False,
    ) -> dict:
        content = await self.fetch(url, render_js=render_js)
        framework_results = await run_frameworks(self.llm, content, url, frameworks, keyword)
        return {
            "content": content,
            "seo": StepResult.success(score_meta(content)),
            "qa": StepResult.success(run_qa_checks(content)),
            "frameworks": framework_results,
        }

    async def insights(self, url: str, keyword: Optional[str], collected: dict) -> StepResult:
        prompt = build_insights_prompt(url, keyword, _compact(collected))
        return await capture(
            self.llm.generate_json(prompt, schema_hint=InsightsOutput, models=INSIGHTS_MODELS)
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def run_phase1(self, url: str, keyword: Optional[str] = None, render_js: bool = False) -> dict:
        """Content collection: scrape, SEO/QA heuristics, Lighthouse, Trends."""
        start = time.time()
        logger.info(f"🚀 Phase 1 for {url}")
        content = await self.fetch(url, render_js=render_js)
        trend_keyword = keyword or (content.extracted_keywords[0] if content.extracted_keywords else None)

        lighthouse, trends = await asyncio.gather(
            capture(self.lighthouse(url)),
            capture(self.trends(trend_keyword)),
        )
        seo = score_meta(content)
        qa = run_qa_checks(content)

        performance = lighthouse.data["scores"].get("performance") if lighthouse.is_ok else None
        logger.info(f"✅ Phase 1 for {url} finished in {time.time() - start:.1f}s")
        return {
            "url": url,
            "keyword": trend_keyword,
            "content": content,
            "seo": StepResult.success(seo),
            "qa": StepResult.success(qa),
            "lighthouse": lighthouse,
            "trends": trends,
            "tool_links": build_tool_links(url, keyword, content.extracted_keywords),
            "summary": {
                "word_count": content.word_count,
                "seo_score": seo["overall_score"],
                "qa_score": qa["score"],
                "performance_score": performance,
                "lighthouse_status": lighthouse.status,
                "trends_status": trends.status,
            },
        }

    async def run_phase2(
        self,
        url: str,
        content: Optional[ScrapedContent] = None,
        frameworks: Iterable[str] = FRAMEWORKS,
        keyword: Optional[str] = None,
    ) -> dict:
        """Framework analyses; reuses phase 1 content when supplied."""
        logger.info(f"🚀 Phase 2 for {url}")
        if content is None:
            content = await self.fetch(url)
        results = await run_frameworks(self.llm, content, url, frameworks, keyword)
        return {
            "url": url,
            "frameworks": results,
            "completed_analyses": [n for n, r in results.items() if r.is_ok],
            "failed_analyses": [n for n, r in results.items() if not r.is_ok],
        }

    async def run_phase3(self, url: str, phase1: dict, phase2: dict) -> dict:
        """Strategic synthesis over phase 1 and phase 2 output."""
        logger.info(f"🚀 Phase 3 for {url}")
        sections = sections_from_phases(phase1, phase2)
        prompt = build_synthesis_prompt(url, _compact(phase1), _compact(phase2))
        synthesis = await capture(
            self.llm.generate_json(prompt, schema_hint=SynthesisOutput, models=INSIGHTS_MODELS)
        )
        sections["insights"] = synthesis
        return {
            "url": url,
            "synthesis": synthesis,
            "report": ReportBuilder(url).build(sections),
        }

    # ------------------------------------------------------------------
    # Single-request runs
    # ------------------------------------------------------------------

    async def run_comprehensive(
        self,
        url: str,
        keyword: Optional[str] = None,
        include_page_audit: bool = True,
        include_lighthouse: bool = True,
        include_all_pages: bool = False,
        render_js: bool = False,
        progress: Optional[Callable[[str, int], None]] = None,
    ) -> dict:
        """
        Base analysis, then the optional tools, then AI insights, then the report.

        ``progress`` is called with (status message, percent) between steps.
        """
        start = time.time()
        notify = progress or (lambda message, percent: None)
        logger.info(f"🚀 Comprehensive analysis for {url}")

        notify("Collecting page content and running framework analyses", 10)
        base = await self.base_analysis(url, keyword, render_js=render_js)

        notify("Running performance and audit tools", 50)
        page_audit, lighthouse, all_pages = await asyncio.gather(
            capture(self.page_audit(url)) if include_page_audit else _unavailable("Page audit not requested"),
            capture(self.lighthouse(url)) if include_lighthouse else _unavailable("Lighthouse not requested"),
            capture(self.lighthouse_all_pages(url)) if include_all_pages else _unavailable("All-pages Lighthouse not requested"),
        )

        notify("Generating strategic insights", 75)
        sections: Dict[str, StepResult] = dict(base["frameworks"])
        sections.update({
            "seo": base["seo"],
            "qa": base["qa"],
            "page_audit": page_audit,
            "lighthouse": lighthouse,
            "all_pages": all_pages,
        })
        insights = await self.insights(url, keyword, sections)
        sections["insights"] = insights

        notify("Building report", 95)
        report = ReportBuilder(url).build(sections)
        logger.info(f"✅ Comprehensive analysis for {url} finished in {time.time() - start:.1f}s")

        return {
            "url": url,
            "keyword": keyword,
            "content": base["content"],
            "seo": base["seo"],
            "qa": base["qa"],
            "frameworks": base["frameworks"],
            "page_audit": page_audit,
            "lighthouse": lighthouse,
            "all_pages": all_pages,
            "insights": insights,
            "tool_links": build_tool_links(url, keyword, base["content"].extracted_keywords),
            "report": report,
            "tools": {
                "page_audit": page_audit.status,
                "lighthouse": lighthouse.status,
                "all_pages": all_pages.status,
                "insights": insights.status,
            },
        }

    async def run_step(
        self,
        step: str,
        url: str,
        keyword: Optional[str] = None,
        previous: Optional[dict] = None,
    ) -> dict:
        """Run one named step of the comprehensive flow."""
        if step not in STEPS:
            raise ValidationFailedError(
                f"Invalid step '{step}'. Valid steps: {', '.join(STEPS)}", code="INVALID_STEP"
            )

        if step == "base-analysis":
            data = await self.base_analysis(url, keyword)
        elif step == "pageaudit":
            data = {"page_audit": await capture(self.page_audit(url))}
        elif step == "lighthouse":
            data = {"lighthouse": await capture(self.lighthouse(url))}
        else:
            if not previous:
                raise ValidationFailedError(
                    "gemini-insights requires the results of the previous steps",
                    code="MISSING_PARAMETERS",
                )
            insights = await self.insights(url, keyword, previous)
            sections = sections_from_phases(previous, previous)
            sections["insights"] = insights
            data = {"insights": insights, "report": ReportBuilder(url).build(sections)}

        index = STEPS.index(step)
        return {
            "step": step,
            "url": url,
            "data": data,
            "next_step": STEPS[index + 1] if index + 1 < len(STEPS) else None,
        }

    async def run_unified(
        self,
        url: str,
        frameworks: Iterable[str],
        keyword: Optional[str] = None,
        include_lighthouse: bool = False,
        include_trends: bool = False,
    ) -> dict:
        """Caller-selected frameworks and tools, one report."""
        logger.info(f"🚀 Unified analysis for {url}")
        base = await self.base_analysis(url, keyword, frameworks)
        lighthouse, trends = await asyncio.gather(
            capture(self.lighthouse(url)) if include_lighthouse else _unavailable("Lighthouse not requested"),
            capture(self.trends(keyword)) if include_trends else _unavailable("Trends not requested"),
        )

        sections: Dict[str, StepResult] = dict(base["frameworks"])
        sections.update({"seo": base["seo"], "qa": base["qa"]})
        if include_lighthouse:
            sections["lighthouse"] = lighthouse
        if include_trends:
            sections["trends"] = trends

        results = base["frameworks"]
        return {
            "url": url,
            "content": base["content"],
            "frameworks": results,
            "lighthouse": lighthouse,
            "trends": trends,
            "report": ReportBuilder(url).build(sections),
            "completed": [n for n, r in results.items() if r.is_ok],
            "failed": [n for n, r in results.items() if not r.is_ok],
            "errors": {n: r.error for n, r in results.items() if not r.is_ok},
        }


def sections_from_phases(phase1: dict, phase2: dict) -> Dict[str, StepResult]:
    """Collect report sections out of (possibly client-round-tripped) phase data."""
    sections: Dict[str, StepResult] = {}
    for name in ("seo", "qa", "lighthouse", "trends", "page_audit", "all_pages"):
        step = as_step((phase1 or {}).get(name))
        if step is not None:
            sections[name] = step
    for name, value in ((phase2 or {}).get("frameworks") or {}).items():
        step = as_step(value)
        if step is not None and name in FRAMEWORKS:
            sections[name] = step
    return sections


def _compact(value: Any) -> Any:
    """JSON-ready copy for prompts: StepResults reduced to their data, page text dropped."""
    if isinstance(value, StepResult):
        return value.data if value.is_ok else {"status": value.status}
    if isinstance(value, ScrapedContent):
        return value.model_dump(exclude={"clean_text", "headings"})
    if isinstance(value, dict):
        return {
            k: _compact(v) for k, v in value.items()
            if k not in ("clean_text", "elements", "themes", "baseline")
        }
    if isinstance(value, list):
        return [_compact(v) for v in value]
    return value
