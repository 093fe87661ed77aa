import asyncio

import httpx

from config import settings
from utils.clients.pagespeed import fetch_lighthouse, normalize_lighthouse


PAGESPEED_PAYLOAD = {
    "lighthouseResult": {
        "categories": {
            "performance": {"score": 0.45},
            "accessibility": {"score": 0.9},
            "best-practices": {"score": 1.0},
            "seo": {"score": 0.85},
        },
        "audits": {
            "largest-contentful-paint": {"displayValue": "4.1 s"},
            "cumulative-layout-shift": {"displayValue": "0.02"},
            "unused-javascript": {
                "title": "Reduce unused JavaScript",
                "details": {"type": "opportunity", "overallSavingsMs": 1250.4},
            },
            "modern-image-formats": {
                "title": "Serve images in next-gen formats",
                "details": {"type": "opportunity", "overallSavingsMs": 2300},
            },
            "uses-text-compression": {
                "title": "Enable text compression",
                "details": {"type": "opportunity", "overallSavingsMs": 0},
            },
            "dom-size": {"title": "Avoid an excessive DOM size", "details": {"type": "table"}},
        },
    }
}


def test_normalize_lighthouse():
    result = normalize_lighthouse(PAGESPEED_PAYLOAD, "desktop")
    assert result["strategy"] == "desktop"
    assert result["scores"] == {"performance": 45, "accessibility": 90, "best_practices": 100, "seo": 85}
    assert result["overall"] == 80
    assert result["core_web_vitals"]["lcp"] == "4.1 s"
    assert result["core_web_vitals"]["tbt"] is None
    assert [o["id"] for o in result["opportunities"]] == ["modern-image-formats", "unused-javascript"]
    assert result["opportunities"][1]["savings_ms"] == 1250
    assert result["recommendations"][0].startswith("Critical")


def test_normalize_without_scores_is_none():
    assert normalize_lighthouse({"lighthouseResult": {"categories": {}}}) is None
    assert normalize_lighthouse({}) is None


def _run(handler):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_lighthouse("https://acme.io", client=client)
    return asyncio.run(run())


def test_fetch_lighthouse_ok():
    seen = {}

    def handler(request):
        seen["params"] = request.url.params
        return httpx.Response(200, json=PAGESPEED_PAYLOAD)

    result = _run(handler)
    assert result.status == "ok"
    assert result.data["overall"] == 80
    assert seen["params"]["url"] == "https://acme.io"
    assert seen["params"].get_list("category") == ["PERFORMANCE", "ACCESSIBILITY", "BEST_PRACTICES", "SEO"]


def test_fetch_lighthouse_http_error_is_unavailable():
    result = _run(lambda request: httpx.Response(429, json={"error": {"message": "Quota exceeded"}}))
    assert result.status == "unavailable"
    assert result.code == "TOOL_UNAVAILABLE"
    assert "HTTP 429" in result.error
    assert result.data is None


def test_fetch_lighthouse_network_error_is_unavailable():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    result = _run(handler)
    assert result.status == "unavailable"
    assert "ReadTimeout" in result.error


def test_fetch_lighthouse_empty_payload_is_unavailable():
    result = _run(lambda request: httpx.Response(200, json={"lighthouseResult": {}}))
    assert result.status == "unavailable"
    assert result.data is None


def test_shared_client_uses_pagespeed_timeout():
    seen = {}

    def handler(request):
        seen.update(request.extensions["timeout"])
        return httpx.Response(200, json=PAGESPEED_PAYLOAD)

    async def run():
        async with httpx.AsyncClient(timeout=5.0, transport=httpx.MockTransport(handler)) as client:
            return await fetch_lighthouse("https://acme.io", client=client)

    assert asyncio.run(run()).is_ok
    assert seen["read"] == settings.PAGESPEED_TIMEOUT
