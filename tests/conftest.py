"""Shared fixtures: sample page content and an in-memory LLM."""

import pytest

from analyzer.prompts import PERSONAS
from core.browser import BrowserHandle
from core.errors import LLMResponseError
from core.models import ScrapedContent


SAMPLE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Acme Analytics | Grow Revenue With Data</title>
  <meta name="description" content="Acme turns your product data into revenue insights.">
  <meta property="og:title" content="Acme Analytics">
  <meta property="og:image" content="https://acme.io/og.png">
  <link rel="canonical" href="https://acme.io/">
  <script type="application/ld+json">{"@context": "https://schema.org", "@type": "Organization", "name": "Acme"}</script>
  <script>var hidden = "trackingpixelsecret";</script>
  <style>.hero { color: red; }</style>
</head>
<body>
  <h1>Revenue analytics for growing teams</h1>
  <h2>Save time on reporting</h2>
  <h2>Integrates with your stack</h2>
  <p>Acme helps revenue teams reduce cost and save time. Our analytics platform
     integrates with every major CRM so revenue leaders see the whole funnel.</p>
  <img src="/hero.png" alt="Dashboard">
  <img src="/logo.png">
  <a href="/pricing">Pricing</a>
  <a href="https://docs.acme.io">Docs</a>
  <a href="mailto:sales@acme.io">Contact</a>
</body>
</html>
"""


GOOD_RESPONSES = {
    "golden_circle": {
        "why": {"statement": "Every team deserves clear revenue data", "score": 8, "evidence": ["Grow revenue with data"]},
        "how": {"statement": "Unified analytics platform", "score": 6, "evidence": []},
        "what": {"statement": "Revenue analytics software", "score": 9, "evidence": ["Revenue analytics for growing teams"]},
        "who": {"statement": "Revenue leaders", "score": 4, "evidence": []},
        "insights": ["Purpose is stated but not repeated below the fold"],
        "recommendations": ["Name the target customer in the hero"],
    },
    "b2c_elements": {
        "elements": {
            "saves_time": {"present": True, "evidence": "Save time on reporting"},
            "simplifies": {"present": True, "evidence": "see the whole funnel"},
            "reduces_cost": {"present": False},
        },
        "summary": "Functional value dominates",
        "recommendations": ["Add emotional proof points"],
    },
    "b2b_elements": {
        "elements": {
            "cost_reduction": {"present": True, "score": 8, "evidence": "reduce cost"},
            "integration": "present",
            "expertise": {"present": True, "evidence": "revenue leaders"},
        },
        "summary": "Strong on integration",
        "recommendations": ["Publish compliance details"],
    },
    "clifton_strengths": {
        "themes": {
            "achiever": {"score": 80, "evidence": "Grow revenue"},
            "communication": {"score": 60},
            "learner": 40,
        },
        "summary": "Driven, results-first voice",
        "recommendations": ["Show more customer empathy"],
    },
    "revenue_trends": {
        "market_opportunity_score": 72,
        "underserved_demand_identified": True,
        "recommendations": ["Publish a revenue attribution guide"],
    },
    "brand_archetypes": {
        "archetypes": {
            "sage": {"score": 0.85, "evidence": "revenue insights"},
            "The Ruler": {"score": 0.6},
            "creator": 0.55,
            "jester": {"score": 0.2},
        },
        "summary": "An expert guide for revenue teams",
        "recommendations": ["Lean into the Sage voice with original research"],
    },
    "insights": {
        "executive_summary": "Acme communicates functional value well but hides its purpose.",
        "key_strengths": ["Clear product description"],
        "critical_weaknesses": ["No named audience"],
    },
}


class FakeLLM:
    """
    Stands in for LLMClient. Framework prompts are routed by their persona
    line; anything else (insights, synthesis) uses the "insights" reply.
    """

    primary = "gemini"

    def __init__(self, responses=None, failures=None):
        self.responses = dict(GOOD_RESPONSES if responses is None else responses)
        self.failures = failures or {}
        self.prompts = []

    def available_providers(self):
        return ["gemini"]

    def _route(self, prompt):
        for name, persona in PERSONAS.items():
            if persona in prompt:
                return name
        return "insights"

    async def generate_json(self, prompt, schema_hint=None, models=None):
        self.prompts.append(prompt)
        name = self._route(prompt)
        if name in self.failures:
            raise self.failures[name]
        if name not in self.responses:
            raise LLMResponseError(f"No canned reply for {name}")
        data = self.responses[name]
        if schema_hint is not None:
            return schema_hint.model_validate(data).model_dump()
        return data


@pytest.fixture
def sample_html():
    return SAMPLE_HTML


@pytest.fixture
def content():
    return ScrapedContent(
        url="https://acme.io",
        title="Acme Analytics | Grow Revenue With Data",
        meta_description="Acme turns your product data into revenue insights.",
        clean_text=(
            "Revenue analytics for growing teams. Save time on reporting. "
            "Acme helps revenue teams reduce cost and save time. Our platform integrates with every CRM."
        ),
        headings=["Revenue analytics for growing teams", "Save time on reporting"],
        word_count=420,
        image_count=2,
        link_count=12,
        extracted_keywords=["revenue", "analytics", "teams"],
        h1_count=1,
        h2_count=2,
        has_ssl=True,
    )


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def llm_factory():
    return FakeLLM


class FakeResponse:
    def __init__(self, status=200):
        self.status = status
        self.ok = 200 <= status < 300


class FakePage:
    """Playwright page double: records navigation, returns canned DOM data."""

    def __init__(self, html="", status=200, widgets=None, error=None):
        self.html = html
        self.status = status
        self.widgets = widgets
        self.error = error
        self.url = "about:blank"
        self.visited = []

    def set_default_navigation_timeout(self, timeout):
        self.navigation_timeout = timeout

    async def goto(self, url, wait_until=None):
        self.visited.append(url)
        if self.error is not None:
            raise self.error
        self.url = url
        return FakeResponse(self.status)

    async def wait_for_timeout(self, timeout):
        pass

    async def evaluate(self, script):
        return self.widgets or {}

    async def content(self):
        return self.html


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.contexts = []
        self.closed = False

    def is_connected(self):
        return not self.closed

    async def new_context(self, **kwargs):
        context = FakeContext(self.page)
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed = True


@pytest.fixture
def browser_factory():
    """BrowserHandle around a fake Chromium, so no real browser is launched."""
    def _make(page=None, max_pages=2):
        handle = BrowserHandle(max_pages=max_pages)
        handle.browser = FakeBrowser(page or FakePage())
        return handle
    return _make


@pytest.fixture
def page_factory():
    return FakePage
