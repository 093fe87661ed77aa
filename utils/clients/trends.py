"""
Google Trends lookup through the shared browser.

Trends has no public API, so the explore page is rendered and its
related-query / related-topic widgets are read. Anything the page does not
show is reported as unavailable rather than filled in.
"""

import logging
from typing import Optional
from urllib.parse import quote_plus

from core.browser import BrowserHandle
from core.models import StepResult

logger = logging.getLogger(__name__)

TRENDS_EXPLORE_URL = "https://trends.google.com/trends/explore?q={query}&date=today%2012-m"

_EXTRACT_WIDGETS = """
() => {
  const read = (selector) => Array.from(document.querySelectorAll(selector))
    .map((item) => ({
      label: (item.querySelector('.label-text') || item).textContent.trim(),
      value: (item.querySelector('.rising-value, .progress-value') || {}).textContent || null,
    }))
    .filter((item) => item.label && item.label.length < 80);
  return {
    related_queries: read('.fe-related-queries .item'),
    related_topics: read('.fe-related-topics .item'),
  };
}
"""


def build_trends_url(keyword: str) -> str:
    return TRENDS_EXPLORE_URL.format(query=quote_plus(keyword))


async def fetch_trends(keyword: Optional[str], browser: Optional[BrowserHandle]) -> StepResult:
    if not keyword:
        return StepResult.unavailable("No keyword supplied for Google Trends", code="MISSING_KEYWORD")
    if browser is None:
        return StepResult.unavailable("No browser available for Google Trends")

    trends_url = build_trends_url(keyword)
    logger.info(f"📈 Reading Google Trends for '{keyword}'")
    try:
        async with browser.page() as page:
            await page.goto(trends_url, wait_until="networkidle")
            await page.wait_for_timeout(3000)
            data = await page.evaluate(_EXTRACT_WIDGETS)
    except Exception as e:
        logger.warning(f"⚠️ Google Trends scrape failed for '{keyword}': {str(e)}")
        return StepResult.unavailable(f"Google Trends could not be loaded: {type(e).__name__}")

    if not data.get("related_queries") and not data.get("related_topics"):
        logger.warning(f"⚠️ Google Trends showed no related data for '{keyword}'")
        return StepResult.unavailable("Google Trends returned no related queries or topics")

    return StepResult.success({
        "keyword": keyword,
        "source_url": trends_url,
        "related_queries": data.get("related_queries", [])[:10],
        "related_topics": data.get("related_topics", [])[:10],
    })
