"""
PageSpeed Insights (Lighthouse) client.

Failures never produce zeroed scores: the caller gets an ``unavailable``
StepResult and overall-score math skips it.
"""

import logging
from typing import Optional

import httpx

from config import settings, is_configured
from core.models import StepResult

logger = logging.getLogger(__name__)

CATEGORIES = ("performance", "accessibility", "best-practices", "seo")

CORE_WEB_VITALS = {
    "lcp": "largest-contentful-paint",
    "fcp": "first-contentful-paint",
    "cls": "cumulative-layout-shift",
    "tbt": "total-blocking-time",
    "ttfb": "server-response-time",
    "speed_index": "speed-index",
}


def normalize_lighthouse(data: dict, strategy: str = "mobile") -> Optional[dict]:
    """
    Reduce a runPagespeed response to 0-100 category scores, web vitals and
    the top five opportunities. Returns None when no category was scored.
    """
    lighthouse = data.get("lighthouseResult") or {}
    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    scores = {}
    for category in CATEGORIES:
        raw = (categories.get(category) or {}).get("score")
        scores[category.replace("-", "_")] = round(raw * 100) if raw is not None else None

    available = [score for score in scores.values() if score is not None]
    if not available:
        return None

    vitals = {
        name: (audits.get(audit_id) or {}).get("displayValue")
        for name, audit_id in CORE_WEB_VITALS.items()
    }

    opportunities = []
    for audit_id, audit in audits.items():
        details = audit.get("details") or {}
        if details.get("type") != "opportunity":
            continue
        savings_ms = details.get("overallSavingsMs") or 0
        if savings_ms > 0:
            opportunities.append({
                "id": audit_id,
                "title": audit.get("title", audit_id),
                "savings_ms": round(savings_ms),
                "description": (audit.get("description") or "")[:160],
            })
    opportunities.sort(key=lambda item: item["savings_ms"], reverse=True)

    return {
        "strategy": strategy,
        "scores": scores,
        "overall": round(sum(available) / len(available)),
        "core_web_vitals": vitals,
        "opportunities": opportunities[:5],
        "recommendations": lighthouse_recommendations(scores),
    }


def lighthouse_recommendations(scores: dict) -> list:
    recommendations = []
    performance = scores.get("performance")
    if performance is not None and performance < 50:
        recommendations.append("Critical: optimize images, defer render-blocking scripts and enable caching")
    elif performance is not None and performance < 90:
        recommendations.append("Improve load speed: compress assets and reduce unused JavaScript")
    accessibility = scores.get("accessibility")
    if accessibility is not None and accessibility < 90:
        recommendations.append("Fix accessibility issues: alt text, color contrast and form labels")
    best_practices = scores.get("best_practices")
    if best_practices is not None and best_practices < 90:
        recommendations.append("Address best-practice warnings: HTTPS resources and console errors")
    seo = scores.get("seo")
    if seo is not None and seo < 90:
        recommendations.append("Resolve SEO audit failures: meta tags, crawlability and link text")
    return recommendations


async def fetch_lighthouse(
    url: str,
    strategy: str = "mobile",
    client: Optional[httpx.AsyncClient] = None,
) -> StepResult:
    """Run PageSpeed Insights for ``url`` and normalize the result."""
    params = [("url", url), ("strategy", strategy)]
    params.extend(("category", category.upper().replace("-", "_")) for category in CATEGORIES)
    if is_configured(settings.GOOGLE_API_KEY):
        params.append(("key", settings.GOOGLE_API_KEY))

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.PAGESPEED_TIMEOUT)
    try:
        logger.info(f"⚡ Running PageSpeed ({strategy}) for {url}")
        response = await client.get(
            settings.PAGESPEED_ENDPOINT, params=params, timeout=settings.PAGESPEED_TIMEOUT
        )
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPStatusError as e:
        logger.warning(f"⚠️ PageSpeed returned HTTP {e.response.status_code} for {url}")
        return StepResult.unavailable(f"PageSpeed Insights returned HTTP {e.response.status_code}")
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"⚠️ PageSpeed request failed for {url}: {type(e).__name__}")
        return StepResult.unavailable(f"PageSpeed Insights request failed: {type(e).__name__}")
    finally:
        if owns_client:
            await client.aclose()

    normalized = normalize_lighthouse(payload, strategy)
    if normalized is None:
        return StepResult.unavailable("PageSpeed Insights returned no category scores")

    logger.info(f"✅ PageSpeed overall {normalized['overall']} for {url}")
    return StepResult.success(normalized)
