"""
Report aggregation.

Combines whatever step results are available into one report. Every
derived field is computed from the inputs: sections that did not run or
failed are listed with their status and contribute nothing, and the
overall score only averages scores that actually exist.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from core.models import ActionItem, Recommendation, StepResult

logger = logging.getLogger(__name__)

RATING_BANDS = ((80, "Excellent"), (60, "Good"), (40, "Fair"))

SCORE_LABELS = {
    "golden_circle": "Golden Circle",
    "b2c_elements": "B2C Elements of Value",
    "b2b_elements": "B2B Elements of Value",
    "clifton_strengths": "CliftonStrengths",
    "revenue_trends": "Revenue Opportunity",
    "brand_archetypes": "Brand Archetypes",
    "lighthouse": "Lighthouse",
    "seo": "On-page SEO",
    "qa": "Content QA",
}

PRIORITY_ORDER = {"Critical": 0, "High": 1, "Medium": 2, "Low": 3}
LEVELS = ("High", "Medium", "Low")


def rate(score: Optional[float]) -> str:
    if score is None:
        return "Unavailable"
    for threshold, label in RATING_BANDS:
        if score >= threshold:
            return label
    return "Poor"


class SectionStatus(BaseModel):
    status: str
    error: Optional[str] = None


class Roadmap(BaseModel):
    immediate: List[ActionItem] = Field(default_factory=list)
    short_term: List[ActionItem] = Field(default_factory=list)
    long_term: List[ActionItem] = Field(default_factory=list)


class ComprehensiveReport(BaseModel):
    url: str
    generated_at: str
    overall_score: Optional[int] = None
    rating: str = "Unavailable"
    scores: Dict[str, int] = Field(default_factory=dict)
    executive_summary: str = ""
    key_strengths: List[str] = Field(default_factory=list)
    key_weaknesses: List[str] = Field(default_factory=list)
    recommendations: List[Recommendation] = Field(default_factory=list)
    action_items: List[ActionItem] = Field(default_factory=list)
    roadmap: Roadmap = Field(default_factory=Roadmap)
    sections: Dict[str, SectionStatus] = Field(default_factory=dict)


def _data(result: Optional[StepResult]) -> Optional[dict]:
    if result is None or not result.is_ok or not isinstance(result.data, dict):
        return None
    return result.data


def _level(value, default: str = "Medium") -> str:
    text = str(value or "").strip().title()
    return text if text in LEVELS else default


class ReportBuilder:
    """
    Usage:
        report = ReportBuilder(url).build(sections)

    ``sections`` maps a section name (framework names, ``lighthouse``,
    ``seo``, ``qa``, ``page_audit``, ``trends``, ``insights``) to its
    StepResult. Missing keys are simply absent from the report.
    """

    def __init__(self, url: str):
        self.url = url
        self._action_count = 0

    def build(self, sections: Dict[str, StepResult]) -> ComprehensiveReport:
        self._action_count = 0
        scores = self.collect_scores(sections)
        overall = int(sum(scores.values()) / len(scores) + 0.5) if scores else None

        action_items = sorted(
            self.collect_action_items(sections),
            key=lambda item: PRIORITY_ORDER[item.priority],
        )

        report = ComprehensiveReport(
            url=self.url,
            generated_at=datetime.now(timezone.utc).isoformat(),
            overall_score=overall,
            rating=rate(overall),
            scores=scores,
            key_strengths=self.extract_strengths(sections),
            key_weaknesses=self.extract_weaknesses(sections),
            recommendations=self.collect_recommendations(sections),
            action_items=action_items,
            roadmap=self.build_roadmap(action_items),
            sections={
                name: SectionStatus(status=result.status, error=result.error)
                for name, result in sections.items()
            },
        )
        report.executive_summary = self.executive_summary(sections, report)
        logger.info(f"📊 Report for {self.url}: score={overall} from {len(scores)} section(s)")
        return report

    # ------------------------------------------------------------------
    # Scores
    # ------------------------------------------------------------------

    def collect_scores(self, sections: Dict[str, StepResult]) -> Dict[str, int]:
        scores = {}

        def put(name, value):
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                scores[name] = int(max(0, min(100, value)) + 0.5)

        golden = _data(sections.get("golden_circle"))
        if golden:
            put("golden_circle", golden.get("overall_score"))
        for name in ("b2c_elements", "b2b_elements"):
            data = _data(sections.get(name))
            if data:
                put(name, data.get("overall_percentage"))
        clifton = _data(sections.get("clifton_strengths"))
        if clifton:
            domain_scores = [s for s in (clifton.get("domain_scores") or {}).values() if s is not None]
            if domain_scores:
                put("clifton_strengths", sum(domain_scores) / len(domain_scores))
        revenue = _data(sections.get("revenue_trends"))
        if revenue:
            put("revenue_trends", revenue.get("market_opportunity_score"))
        archetypes = _data(sections.get("brand_archetypes"))
        if archetypes and archetypes.get("overall_score") is not None:
            put("brand_archetypes", archetypes["overall_score"] * 100)
        lighthouse = _data(sections.get("lighthouse"))
        if lighthouse:
            put("lighthouse", lighthouse.get("overall"))
        seo = _data(sections.get("seo"))
        if seo and seo.get("overall_score") is not None:
            put("seo", seo["overall_score"] * 10)
        qa = _data(sections.get("qa"))
        if qa:
            put("qa", qa.get("score"))
        return scores

    # ------------------------------------------------------------------
    # Strengths / weaknesses
    # ------------------------------------------------------------------

    def extract_strengths(self, sections: Dict[str, StepResult]) -> List[str]:
        strengths = []

        golden = _data(sections.get("golden_circle"))
        if golden:
            for component in ("why", "how", "what", "who"):
                part = golden.get(component) or {}
                if (part.get("score") or 0) >= 7:
                    statement = part.get("statement") or "clearly communicated"
                    strengths.append(f"Clear {component.upper()}: {statement}")

        for name in ("b2c_elements", "b2b_elements"):
            data = _data(sections.get(name))
            if not data:
                continue
            for category in (data.get("summary") or {}).get("strong_categories", []):
                pct = (data.get("categories") or {}).get(category, {}).get("percentage", 0)
                strengths.append(f"{SCORE_LABELS[name]}: strong {category.replace('_', ' ')} value ({pct}%)")

        clifton = _data(sections.get("clifton_strengths"))
        if clifton and clifton.get("top_themes"):
            strengths.append(f"Brand voice expresses {', '.join(clifton['top_themes'][:3])}")

        archetypes = _data(sections.get("brand_archetypes"))
        if archetypes and (archetypes.get("primary_score") or 0) >= 0.6:
            strengths.append(
                f"Clear brand personality: {archetypes['primary_archetype'].replace('_', ' ')} archetype "
                f"({archetypes['primary_score']:.2f})"
            )

        lighthouse = _data(sections.get("lighthouse"))
        if lighthouse:
            for category, score in (lighthouse.get("scores") or {}).items():
                if score is not None and score >= 90:
                    strengths.append(f"Lighthouse {category.replace('_', ' ')} score {score}")

        insights = _data(sections.get("insights"))
        if insights:
            strengths.extend(str(s) for s in insights.get("key_strengths") or insights.get("what_is_working") or [])

        return list(dict.fromkeys(strengths))

    def extract_weaknesses(self, sections: Dict[str, StepResult]) -> List[str]:
        weaknesses = []

        golden = _data(sections.get("golden_circle"))
        if golden:
            for component in ("why", "how", "what", "who"):
                score = (golden.get(component) or {}).get("score")
                if score is not None and score < 5:
                    weaknesses.append(f"Weak {component.upper()} messaging ({score:g}/10)")

        for name in ("b2c_elements", "b2b_elements"):
            data = _data(sections.get(name))
            if not data:
                continue
            summary = data.get("summary") or {}
            for category in summary.get("missing_categories", []):
                weaknesses.append(f"{SCORE_LABELS[name]}: no {category.replace('_', ' ')} elements communicated")
            for category in summary.get("weak_categories", []):
                if category not in summary.get("missing_categories", []):
                    pct = (data.get("categories") or {}).get(category, {}).get("percentage", 0)
                    weaknesses.append(f"{SCORE_LABELS[name]}: weak {category.replace('_', ' ')} value ({pct}%)")

        archetypes = _data(sections.get("brand_archetypes"))
        if archetypes and archetypes.get("primary_score") is not None and archetypes["primary_score"] < 0.4:
            weaknesses.append("No clear brand archetype: every archetype scores below 0.40")

        lighthouse = _data(sections.get("lighthouse"))
        if lighthouse:
            for category, score in (lighthouse.get("scores") or {}).items():
                if score is not None and score < 50:
                    weaknesses.append(f"Lighthouse {category.replace('_', ' ')} score {score}")

        qa = _data(sections.get("qa"))
        if qa:
            weaknesses.extend(
                issue["message"] for issue in qa.get("issues", [])
                if issue.get("severity") in ("critical", "error")
            )

        insights = _data(sections.get("insights"))
        if insights:
            weaknesses.extend(
                str(w) for w in insights.get("critical_weaknesses") or insights.get("what_is_not_working") or []
            )

        return list(dict.fromkeys(weaknesses))

    # ------------------------------------------------------------------
    # Recommendations and actions
    # ------------------------------------------------------------------

    def collect_recommendations(self, sections: Dict[str, StepResult]) -> List[Recommendation]:
        recommendations = []
        for name in (
            "golden_circle",
            "b2c_elements",
            "b2b_elements",
            "clifton_strengths",
            "revenue_trends",
            "brand_archetypes",
        ):
            data = _data(sections.get(name))
            if data:
                for text in data.get("recommendations") or []:
                    recommendations.append(Recommendation(title=str(text), category=name))

        lighthouse = _data(sections.get("lighthouse"))
        if lighthouse:
            for text in lighthouse.get("recommendations") or []:
                priority = "High" if text.startswith("Critical") else "Medium"
                recommendations.append(Recommendation(title=text, priority=priority, category="performance"))

        insights = _data(sections.get("insights"))
        if insights:
            for change in insights.get("recommended_changes") or []:
                if isinstance(change, dict) and change.get("change"):
                    recommendations.append(Recommendation(
                        title=str(change["change"]),
                        description=str(change.get("rationale") or ""),
                        priority=_level(change.get("priority")),
                        category="strategy",
                    ))
        return recommendations

    def _action(self, **fields) -> ActionItem:
        self._action_count += 1
        return ActionItem(id=f"action-{self._action_count}", **fields)

    def collect_action_items(self, sections: Dict[str, StepResult]) -> List[ActionItem]:
        items = []

        qa = _data(sections.get("qa"))
        if qa:
            priority_for = {"critical": "Critical", "error": "High", "warning": "Medium", "info": "Low"}
            for issue in qa.get("issues", []):
                items.append(self._action(
                    title=issue["message"],
                    priority=priority_for.get(issue.get("severity"), "Low"),
                    effort="Low",
                    impact="High" if issue.get("severity") in ("critical", "error") else "Medium",
                    estimated_time="1-2 hours",
                    source="qa",
                ))

        lighthouse = _data(sections.get("lighthouse"))
        if lighthouse:
            for opportunity in lighthouse.get("opportunities") or []:
                savings = opportunity.get("savings_ms") or 0
                items.append(self._action(
                    title=opportunity.get("title", ""),
                    description=f"Estimated savings {savings} ms",
                    priority="High" if savings >= 1000 else "Medium",
                    effort="Medium",
                    impact="High" if savings >= 1000 else "Medium",
                    estimated_time="1-3 days",
                    source="lighthouse",
                ))

        for name in ("b2c_elements", "b2b_elements"):
            data = _data(sections.get(name))
            if data:
                for category in (data.get("summary") or {}).get("missing_categories", []):
                    items.append(self._action(
                        title=f"Add {category.replace('_', ' ')} messaging",
                        description=f"No {SCORE_LABELS[name]} elements in this category were found on the page",
                        priority="Medium",
                        effort="Medium",
                        impact="Medium",
                        estimated_time="1-2 weeks",
                        source=name,
                    ))

        golden = _data(sections.get("golden_circle"))
        if golden:
            for component in ("why", "how", "what", "who"):
                score = (golden.get(component) or {}).get("score")
                if score is not None and score < 5:
                    items.append(self._action(
                        title=f"Clarify the {component.upper()} on the homepage",
                        priority="High" if component == "why" else "Medium",
                        effort="Low",
                        impact="High",
                        estimated_time="1 week",
                        source="golden_circle",
                    ))

        insights = _data(sections.get("insights"))
        if insights:
            for action in insights.get("priority_actions") or []:
                if not isinstance(action, dict) or not action.get("action"):
                    continue
                priority = str(action.get("priority") or "").title()
                items.append(self._action(
                    title=str(action["action"]),
                    priority=priority if priority in PRIORITY_ORDER else "Medium",
                    effort=_level(action.get("effort")),
                    impact=_level(action.get("impact")),
                    estimated_time=str(action.get("estimated_time") or ""),
                    source="insights",
                ))

        return items

    def build_roadmap(self, items: List[ActionItem]) -> Roadmap:
        roadmap = Roadmap()
        for item in items:
            if item.priority in ("Critical", "High") and item.effort != "High":
                roadmap.immediate.append(item)
            elif item.priority == "Low" or item.effort == "High":
                roadmap.long_term.append(item)
            else:
                roadmap.short_term.append(item)
        return roadmap

    def executive_summary(self, sections: Dict[str, StepResult], report: ComprehensiveReport) -> str:
        insights = _data(sections.get("insights"))
        if insights and insights.get("executive_summary"):
            return str(insights["executive_summary"])
        if report.overall_score is None:
            return ""

        site = urlparse(self.url).netloc or self.url
        unavailable = [name for name, s in report.sections.items() if s.status != "ok"]
        summary = (
            f"{site} scores {report.overall_score}/100 ({report.rating}) across "
            f"{len(report.scores)} scored section(s)."
        )
        if report.key_weaknesses:
            summary += f" Top issue: {report.key_weaknesses[0]}."
        if unavailable:
            summary += f" Not included: {', '.join(sorted(unavailable))}."
        return summary
