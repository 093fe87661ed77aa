"""Content fetcher: download a page and reduce it to analyzable text.

Two entry points share one extractor:
- ``fetch_content`` does a plain HTTP GET (no JavaScript).
- ``fetch_rendered_content`` loads the page in the shared browser first,
  for sites that build their content client-side.
"""

import json
import logging
import re
from collections import Counter
from typing import List, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from config import settings
from core.browser import BrowserHandle
from core.errors import ContentFetchError
from core.models import ScrapedContent

logger = logging.getLogger(__name__)

_REQUEST_HEADERS = {
    "User-Agent": settings.USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

STOP_WORDS = {
    "about", "above", "after", "again", "below", "being", "between", "could",
    "doing", "during", "every", "further", "having", "other", "should", "their",
    "there", "these", "those", "through", "under", "where", "which", "while",
    "would", "yours",
}

KEYWORD_LIMIT = 20


def extract_keywords(text: str, limit: int = KEYWORD_LIMIT) -> List[str]:
    """Most frequent words longer than four characters."""
    words = re.sub(r"[^\w\s]", " ", text.lower()).split()
    counts = Counter(w for w in words if len(w) > 4 and w not in STOP_WORDS and not w.isdigit())
    return [word for word, _ in counts.most_common(limit)]


def _structured_data_types(soup: BeautifulSoup) -> List[str]:
    types: List[str] = []
    for script_tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            ld = json.loads(script_tag.string or "")
        except ValueError:
            continue
        for item in ld if isinstance(ld, list) else [ld]:
            if not isinstance(item, dict):
                continue
            sd_type = item.get("@type", "")
            if isinstance(sd_type, list):
                types.extend(str(t) for t in sd_type if t)
            elif sd_type:
                types.append(str(sd_type))
    return list(dict.fromkeys(types))[:10]


def parse_html(html: str, url: str, char_limit: Optional[int] = None, rendered: bool = False) -> ScrapedContent:
    """Build a ScrapedContent from raw HTML."""
    char_limit = char_limit or settings.SCRAPE_CHAR_LIMIT
    soup = BeautifulSoup(html, "html.parser")

    # Structured data lives in script tags, read it before they are removed
    structured_data_types = _structured_data_types(soup)

    title = soup.title.get_text(strip=True) if soup.title else ""

    meta_description = ""
    meta_tag = soup.find("meta", attrs={"name": re.compile(r"^description$", re.I)})
    if meta_tag and meta_tag.get("content"):
        meta_description = meta_tag["content"].strip()

    og_tags = {}
    for tag in soup.find_all("meta", attrs={"property": re.compile(r"^og:", re.I)}):
        if tag.get("content"):
            og_tags[tag["property"].lower()] = tag["content"].strip()

    canonical_url = None
    canonical_tag = soup.find("link", attrs={"rel": "canonical"})
    if canonical_tag and canonical_tag.get("href"):
        canonical_url = canonical_tag["href"].strip()

    image_count = len(soup.find_all("img"))
    link_count = len(soup.find_all("a", href=True))

    for tag in soup.find_all(["script", "style", "noscript", "template", "svg"]):
        tag.decompose()

    heading_tags = {level: soup.find_all(level) for level in ("h1", "h2", "h3")}
    headings = [
        h.get_text(" ", strip=True)
        for h in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
        if h.get_text(strip=True)
    ]

    visible_text = re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()

    return ScrapedContent(
        url=url,
        title=title,
        meta_description=meta_description,
        clean_text=visible_text[:char_limit],
        headings=headings,
        word_count=len(visible_text.split()),
        image_count=image_count,
        link_count=link_count,
        extracted_keywords=extract_keywords(visible_text),
        h1_count=len(heading_tags["h1"]),
        h2_count=len(heading_tags["h2"]),
        h3_count=len(heading_tags["h3"]),
        og_tags=og_tags,
        canonical_url=canonical_url,
        structured_data_types=structured_data_types,
        has_ssl=urlparse(url).scheme == "https",
        rendered=rendered,
    )


async def fetch_content(url: str, client: Optional[httpx.AsyncClient] = None) -> ScrapedContent:
    """
    Fetch ``url`` over plain HTTP and extract its visible content.

    Raises:
        ContentFetchError: network failure or non-2xx response
    """
    logger.info(f"📡 Fetching {url}")
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(
            headers=_REQUEST_HEADERS,
            timeout=settings.HTTP_TIMEOUT,
            follow_redirects=True,
        )
    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"❌ Scrape of {url} returned HTTP {e.response.status_code}")
        raise ContentFetchError(
            f"Failed to scrape website content: HTTP {e.response.status_code}"
        )
    except httpx.HTTPError as e:
        logger.error(f"❌ Scrape of {url} failed: {str(e)}")
        raise ContentFetchError(f"Failed to scrape website content: {type(e).__name__}")
    finally:
        if owns_client:
            await client.aclose()

    content = parse_html(response.text, str(response.url))
    logger.info(f"✅ Scraped {url}: {content.word_count} words, {len(content.headings)} headings")
    return content


async def fetch_rendered_content(url: str, browser: BrowserHandle) -> ScrapedContent:
    """Load ``url`` in the shared browser and extract the rendered DOM."""
    logger.info(f"🌐 Rendering {url} in browser")
    try:
        async with browser.page() as page:
            response = await page.goto(url, wait_until="networkidle")
            if response is not None and not response.ok:
                raise ContentFetchError(
                    f"Failed to scrape website content: HTTP {response.status}"
                )
            html = await page.content()
            final_url = page.url
    except ContentFetchError:
        raise
    except Exception as e:
        logger.error(f"❌ Rendered scrape of {url} failed: {str(e)}")
        raise ContentFetchError(f"Failed to scrape website content: {type(e).__name__}")

    return parse_html(html, final_url, rendered=True)
