"""
On-page SEO and content QA heuristics computed from the scraped page,
plus direct links into the manual Google / performance tools.
"""

from typing import List, Optional
from urllib.parse import quote, urlparse

from core.models import ScrapedContent

IDEAL_TITLE_LENGTH = 60
IDEAL_DESCRIPTION_LENGTH = 160
MIN_WORD_COUNT = 300


def _clamp(value: float, low: float = 0, high: float = 10) -> float:
    return max(low, min(high, value))


def score_meta(content: ScrapedContent) -> dict:
    """0-10 scores for title, description, headings, links and structured data."""
    title_length = len(content.title)
    description_length = len(content.meta_description)
    heading_count = content.h1_count + content.h2_count + content.h3_count

    scores = {
        "title": _clamp(10 - abs(IDEAL_TITLE_LENGTH - title_length)) if title_length else 0,
        "description": (
            _clamp(10 - abs(IDEAL_DESCRIPTION_LENGTH - description_length))
            if description_length else 0
        ),
        "headings": min(10, heading_count),
        "links": min(10, content.link_count // 5),
        "structured_data": min(10, len(content.structured_data_types) * 5),
    }
    return {
        "title_length": title_length,
        "description_length": description_length,
        "heading_count": heading_count,
        "structured_data_types": content.structured_data_types,
        "has_ssl": content.has_ssl,
        "scores": scores,
        "overall_score": round(sum(scores.values()) / len(scores), 1),
    }


def run_qa_checks(content: ScrapedContent) -> dict:
    issues: List[dict] = []

    def add(severity: str, check: str, message: str):
        issues.append({"severity": severity, "check": check, "message": message})

    if not content.title:
        add("critical", "title", "Page has no <title>")
    if not content.meta_description:
        add("warning", "meta_description", "Page has no meta description")
    if content.word_count < MIN_WORD_COUNT:
        add("warning", "word_count", f"Only {content.word_count} words of visible content (under {MIN_WORD_COUNT})")
    if content.image_count == 0:
        add("info", "images", "Page has no images")
    if content.link_count == 0:
        add("warning", "links", "Page has no links")
    if content.h1_count == 0:
        add("error", "h1", "Page has no H1 heading")

    errors = sum(1 for i in issues if i["severity"] in ("critical", "error"))
    warnings = sum(1 for i in issues if i["severity"] == "warning")
    return {
        "issues": issues,
        "error_count": errors,
        "warning_count": warnings,
        "score": max(0, 100 - 20 * errors - 10 * warnings),
    }


def build_tool_links(url: str, keyword: Optional[str] = None, keywords: Optional[List[str]] = None) -> dict:
    """Direct links for checking the site by hand in each external tool."""
    domain = urlparse(url).netloc
    query = keyword or ", ".join((keywords or [])[:5]) or domain
    encoded_url = quote(url, safe="")
    return {
        "google_trends": f"https://trends.google.com/trends/explore?q={quote(query, safe='')}",
        "google_analytics": "https://analytics.google.com/analytics/web/",
        "search_console": (
            "https://search.google.com/search-console/performance/search-analytics"
            f"?resource_id={quote(f'sc-domain:{domain}', safe='')}"
        ),
        "pagespeed": f"https://pagespeed.web.dev/analysis?url={encoded_url}",
        "gtmetrix": f"https://gtmetrix.com/analyze.html?url={encoded_url}",
        "webpagetest": f"https://www.webpagetest.org/result/?url={encoded_url}",
    }
