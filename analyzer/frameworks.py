"""
Per-framework analyses.

All frameworks share one flow: build the prompt, ask the LLM adapter for
JSON, post-process the reply against the fixed taxonomy. Independent
frameworks run concurrently and a failure in one never discards the
others' results.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from core.errors import FrameworkLoadError, LLMResponseError
from core.models import ScrapedContent, StepResult
from analyzer.prompts import build_prompt
from analyzer.scoring import (
    as_number,
    keyword_baseline,
    tally_archetypes,
    tally_elements,
    tally_themes,
)
from analyzer.taxonomy import FRAMEWORKS, ELEMENT_FRAMEWORKS
from utils.clients.llm import LLMClient

logger = logging.getLogger(__name__)

GOLDEN_CIRCLE_COMPONENTS = ("why", "how", "what", "who")


def _string_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if v not in (None, "")]
    return [str(value)]


def process_golden_circle(raw: dict) -> dict:
    components = {}
    scores = []
    for name in GOLDEN_CIRCLE_COMPONENTS:
        component = raw.get(name)
        if not isinstance(component, dict):
            components[name] = {"statement": "", "score": None, "evidence": [], "assessed": False}
            continue
        score = as_number(component.get("score"))
        if score is not None:
            score = max(0.0, min(10.0, score))
            scores.append(score)
        components[name] = {
            "statement": str(component.get("statement") or ""),
            "score": score,
            "evidence": _string_list(component.get("evidence")),
            "assessed": score is not None,
        }

    if not scores:
        raise LLMResponseError("Golden Circle response scored none of why/how/what/who")

    return {
        **components,
        "overall_score": int(sum(scores) / len(scores) * 10 + 0.5),
        "insights": _string_list(raw.get("insights")),
        "recommendations": _string_list(raw.get("recommendations")),
    }


def process_elements(framework: str) -> Callable[[dict], dict]:
    def _process(raw: dict) -> dict:
        result = tally_elements(framework, raw)
        result["summary_text"] = str(raw.get("summary") or "")
        result["recommendations"] = _string_list(raw.get("recommendations"))
        return result
    return _process


def process_clifton(raw: dict) -> dict:
    result = tally_themes(raw)
    if result["assessed_themes"] == 0:
        raise LLMResponseError("CliftonStrengths response scored none of the 34 themes")
    result["summary_text"] = str(raw.get("summary") or "")
    result["recommendations"] = _string_list(raw.get("recommendations"))
    return result


def process_archetypes(raw: dict) -> dict:
    result = tally_archetypes(raw)
    if result["assessed_archetypes"] == 0:
        raise LLMResponseError("Brand archetypes response scored none of the 12 archetypes")
    result["summary_text"] = str(raw.get("summary") or "")
    result["recommendations"] = _string_list(raw.get("recommendations"))
    return result


def process_revenue_trends(raw: dict) -> dict:
    result = dict(raw)
    score = as_number(raw.get("market_opportunity_score"))
    result["market_opportunity_score"] = max(0.0, min(100.0, score)) if score is not None else None
    result["recommendations"] = _string_list(raw.get("recommendations"))
    return result


class FrameworkAnalyzer:
    def __init__(self, name: str, postprocess: Callable[[dict], dict]):
        if name not in FRAMEWORKS:
            raise FrameworkLoadError(f"Unknown framework: {name}")
        self.name = name
        self.postprocess = postprocess

    async def analyze(
        self,
        llm: LLMClient,
        content: ScrapedContent,
        url: str,
        keyword: Optional[str] = None,
    ) -> dict:
        prompt = build_prompt(self.name, content, url, keyword)
        raw = await llm.generate_json(prompt)
        if not isinstance(raw, dict):
            raise LLMResponseError(f"{self.name} response was not a JSON object")

        result = self.postprocess(raw)
        result["framework"] = self.name
        if self.name in ELEMENT_FRAMEWORKS:
            result["baseline"] = keyword_baseline(self.name, content.clean_text)
        return result


ANALYZERS: Dict[str, FrameworkAnalyzer] = {
    "golden_circle": FrameworkAnalyzer("golden_circle", process_golden_circle),
    "b2c_elements": FrameworkAnalyzer("b2c_elements", process_elements("b2c_elements")),
    "b2b_elements": FrameworkAnalyzer("b2b_elements", process_elements("b2b_elements")),
    "clifton_strengths": FrameworkAnalyzer("clifton_strengths", process_clifton),
    "revenue_trends": FrameworkAnalyzer("revenue_trends", process_revenue_trends),
    "brand_archetypes": FrameworkAnalyzer("brand_archetypes", process_archetypes),
}


async def run_frameworks(
    llm: LLMClient,
    content: ScrapedContent,
    url: str,
    frameworks: Iterable[str] = FRAMEWORKS,
    keyword: Optional[str] = None,
) -> Dict[str, StepResult]:
    """
    Run the requested frameworks concurrently.

    Returns one StepResult per framework; a raised exception becomes a
    failed result for that framework only.
    """
    names = list(dict.fromkeys(frameworks))
    unknown = [n for n in names if n not in ANALYZERS]
    if unknown:
        raise FrameworkLoadError(f"Unknown framework(s): {', '.join(unknown)}")

    logger.info(f"🧠 Running {len(names)} framework analyses for {url}")
    outcomes = await asyncio.gather(
        *(ANALYZERS[n].analyze(llm, content, url, keyword) for n in names),
        return_exceptions=True,
    )

    results = {}
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            logger.warning(f"⚠️ {name} failed: {outcome}")
            results[name] = StepResult.from_exception(outcome)
        else:
            results[name] = StepResult.success(outcome)

    completed = [n for n, r in results.items() if r.is_ok]
    logger.info(f"✅ Frameworks complete: {len(completed)}/{len(names)} succeeded")
    return results
