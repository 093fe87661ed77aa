from analyzer.seo import build_tool_links, run_qa_checks, score_meta
from core.models import ScrapedContent


def test_score_meta_ideal_page():
    content = ScrapedContent(
        url="https://acme.io",
        title="a" * 60,
        meta_description="b" * 160,
        h1_count=1,
        h2_count=3,
        h3_count=2,
        link_count=25,
        structured_data_types=["Organization"],
        has_ssl=True,
    )
    result = score_meta(content)
    assert result["scores"] == {
        "title": 10,
        "description": 10,
        "headings": 6,
        "links": 5,
        "structured_data": 5,
    }
    assert result["overall_score"] == 7.2
    assert result["has_ssl"] is True


def test_score_meta_empty_page():
    result = score_meta(ScrapedContent(url="http://acme.io"))
    assert result["overall_score"] == 0
    assert result["scores"]["title"] == 0


def test_long_title_is_penalized():
    result = score_meta(ScrapedContent(url="https://acme.io", title="t" * 65))
    assert result["scores"]["title"] == 5


def test_qa_checks_empty_page():
    result = run_qa_checks(ScrapedContent(url="https://acme.io"))
    checks = {issue["check"]: issue["severity"] for issue in result["issues"]}
    assert checks == {
        "title": "critical",
        "meta_description": "warning",
        "word_count": "warning",
        "images": "info",
        "links": "warning",
        "h1": "error",
    }
    assert result["error_count"] == 2
    assert result["warning_count"] == 3
    assert result["score"] == 30


def test_qa_checks_clean_page(content):
    result = run_qa_checks(content)
    assert result["issues"] == []
    assert result["score"] == 100


def test_tool_links_use_keyword_or_extracted_keywords():
    links = build_tool_links("https://acme.io/pricing", None, ["analytics", "revenue"])
    assert links["google_trends"].endswith("q=analytics%2C%20revenue")
    assert links["pagespeed"] == "https://pagespeed.web.dev/analysis?url=https%3A%2F%2Facme.io%2Fpricing"
    assert "sc-domain%3Aacme.io" in links["search_console"]

    with_keyword = build_tool_links("https://acme.io", "crm analytics")
    assert with_keyword["google_trends"].endswith("q=crm%20analytics")

    fallback = build_tool_links("https://acme.io")
    assert fallback["google_trends"].endswith("q=acme.io")
