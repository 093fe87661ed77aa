import pytest

from analyzer.report import ReportBuilder, rate
from core.models import StepResult


@pytest.mark.parametrize("score, label", [
    (95, "Excellent"),
    (80, "Excellent"),
    (79.9, "Good"),
    (60, "Good"),
    (59, "Fair"),
    (40, "Fair"),
    (39, "Poor"),
    (0, "Poor"),
    (None, "Unavailable"),
])
def test_rate(score, label):
    assert rate(score) == label


def test_nothing_available():
    report = ReportBuilder("https://acme.io").build({
        "lighthouse": StepResult.unavailable("PageSpeed Insights returned HTTP 429"),
        "golden_circle": StepResult(status="failed", error="Invalid JSON response from AI"),
    })
    assert report.overall_score is None
    assert report.rating == "Unavailable"
    assert report.scores == {}
    assert report.key_strengths == []
    assert report.action_items == []
    assert report.executive_summary == ""
    assert report.sections["lighthouse"].status == "unavailable"
    assert report.sections["golden_circle"].error == "Invalid JSON response from AI"


def test_unavailable_sections_do_not_count_as_zero():
    sections = {
        "golden_circle": StepResult.success({
            "overall_score": 80,
            "why": {"score": 9, "statement": "We exist to make revenue visible"},
            "how": {"score": 3, "statement": ""},
            "recommendations": ["Lead with the WHY"],
        }),
        "qa": StepResult.success({
            "score": 60,
            "issues": [{"severity": "error", "check": "h1", "message": "Page has no H1 heading"}],
        }),
        "lighthouse": StepResult.unavailable("no key"),
    }
    report = ReportBuilder("https://acme.io/pricing").build(sections)

    assert report.scores == {"golden_circle": 80, "qa": 60}
    assert report.overall_score == 70
    assert report.rating == "Good"
    assert "Clear WHY: We exist to make revenue visible" in report.key_strengths
    assert "Weak HOW messaging (3/10)" in report.key_weaknesses
    assert "Page has no H1 heading" in report.key_weaknesses
    assert [r.title for r in report.recommendations] == ["Lead with the WHY"]

    assert report.action_items[0].title == "Page has no H1 heading"
    assert report.action_items[0].priority == "High"
    assert report.action_items[0].id == "action-1"
    assert {item.source for item in report.action_items} == {"qa", "golden_circle"}
    assert report.action_items[0] in report.roadmap.immediate

    assert report.executive_summary.startswith("acme.io scores 70/100 (Good)")
    assert "Not included: lighthouse" in report.executive_summary


def test_element_sections_and_lighthouse():
    sections = {
        "b2b_elements": StepResult.success({
            "overall_percentage": 45,
            "categories": {"table_stakes": {"percentage": 0}, "functional": {"percentage": 78}},
            "summary": {
                "strong_categories": ["functional"],
                "weak_categories": ["table_stakes"],
                "missing_categories": ["table_stakes"],
            },
        }),
        "lighthouse": StepResult.success({
            "overall": 62,
            "scores": {"performance": 35, "accessibility": 95, "best_practices": None, "seo": 88},
            "opportunities": [
                {"title": "Reduce unused JavaScript", "savings_ms": 1800},
                {"title": "Properly size images", "savings_ms": 300},
            ],
            "recommendations": ["Critical: optimize images, defer render-blocking scripts and enable caching"],
        }),
    }
    report = ReportBuilder("https://acme.io").build(sections)

    assert report.scores == {"b2b_elements": 45, "lighthouse": 62}
    assert "B2B Elements of Value: strong functional value (78%)" in report.key_strengths
    assert "Lighthouse accessibility score 95" in report.key_strengths
    assert "Lighthouse performance score 35" in report.key_weaknesses
    assert "B2B Elements of Value: no table stakes elements communicated" in report.key_weaknesses
    assert not any("weak table stakes" in w for w in report.key_weaknesses)

    titles = [item.title for item in report.action_items]
    assert titles.index("Reduce unused JavaScript") < titles.index("Properly size images")
    assert "Add table stakes messaging" in titles
    assert report.recommendations[-1].priority == "High"
    assert report.recommendations[-1].category == "performance"


def test_insights_drive_summary_and_actions():
    sections = {
        "qa": StepResult.success({"score": 90, "issues": []}),
        "insights": StepResult.success({
            "executive_summary": "Acme needs a sharper audience statement.",
            "key_strengths": ["Clear pricing"],
            "critical_weaknesses": ["No named audience"],
            "priority_actions": [
                {"action": "Rewrite hero copy", "priority": "critical", "effort": "low", "impact": "high"},
                {"action": "Launch case studies", "priority": "whenever", "effort": "High"},
                {"priority": "High"},
            ],
        }),
    }
    report = ReportBuilder("https://acme.io").build(sections)

    assert report.executive_summary == "Acme needs a sharper audience statement."
    assert "Clear pricing" in report.key_strengths
    assert "No named audience" in report.key_weaknesses
    assert [item.title for item in report.action_items] == ["Rewrite hero copy", "Launch case studies"]
    assert report.action_items[0].priority == "Critical"
    assert report.action_items[1].priority == "Medium"
    assert report.roadmap.immediate[0].title == "Rewrite hero copy"
    assert report.roadmap.long_term[0].title == "Launch case studies"


def test_action_ids_restart_per_build():
    sections = {"qa": StepResult.success({"score": 80, "issues": [
        {"severity": "warning", "check": "links", "message": "Page has no links"},
    ]})}
    builder = ReportBuilder("https://acme.io")
    builder.build(sections)
    assert builder.build(sections).action_items[0].id == "action-1"


def test_brand_archetype_section():
    sections = {
        "brand_archetypes": StepResult.success({
            "overall_score": 0.53,
            "primary_archetype": "regular_guy_girl",
            "primary_score": 0.82,
            "recommendations": ["Keep the plain-spoken tone in product pages"],
        }),
    }
    report = ReportBuilder("https://acme.io").build(sections)
    assert report.scores == {"brand_archetypes": 53}
    assert "Clear brand personality: regular guy girl archetype (0.82)" in report.key_strengths
    assert [r.category for r in report.recommendations] == ["brand_archetypes"]


def test_weak_brand_archetypes():
    sections = {"brand_archetypes": StepResult.success({"overall_score": 0.2, "primary_score": 0.3})}
    report = ReportBuilder("https://acme.io").build(sections)
    assert report.key_strengths == []
    assert "No clear brand archetype: every archetype scores below 0.40" in report.key_weaknesses
