"""
Prompt templates for the framework analyses.

Every prompt follows the PTCF convention: Persona, Task, Context (the
scraped page plus the framework reference table) and Format (the JSON
shape the model must return).
"""

import json
from typing import Optional

from config import settings
from core.errors import FrameworkLoadError
from core.models import ScrapedContent
from analyzer.taxonomy import reference_text

PERSONAS = {
    "golden_circle": "You are a brand strategist trained in Simon Sinek's Golden Circle methodology.",
    "b2c_elements": "You are a consumer marketing analyst who applies Bain & Company's B2C Elements of Value.",
    "b2b_elements": "You are a B2B value-proposition consultant who applies Bain & Company's B2B Elements of Value.",
    "clifton_strengths": "You are an organizational psychologist who reads brand voice through Gallup's CliftonStrengths themes.",
    "revenue_trends": "You are a Senior Content Strategy Director who finds underserved market demand and turns it into revenue.",
    "brand_archetypes": "You are a brand narrative strategist who applies the Jambojon framework of 12 brand archetypes.",
}

TASKS = {
    "golden_circle": (
        "Evaluate how clearly the website communicates its WHY, HOW, WHAT and WHO. "
        "Score each component 0-10 using the scoring guide and quote the page text that supports each score."
    ),
    "b2c_elements": (
        "Decide for every one of the 30 elements whether the website's messaging delivers it. "
        "Mark an element present only when the page gives concrete evidence, and quote that evidence."
    ),
    "b2b_elements": (
        "Decide for every one of the 42 elements whether the website's messaging delivers it to business buyers. "
        "Mark an element present only when the page gives concrete evidence, and quote that evidence."
    ),
    "clifton_strengths": (
        "Score every one of the 34 themes 0-100 for how strongly the website's language expresses it. "
        "Use 0 for themes with no supporting language."
    ),
    "revenue_trends": (
        "Analyze the core keywords and content to identify one high-growth, low-competition topic, "
        "three revenue-driving content ideas, the main market gaps and the competitive landscape."
    ),
    "brand_archetypes": (
        "Score every one of the 12 archetypes from 0.0 to 1.0. Weight keyword presence 40%, "
        "thematic alignment with the archetype 30% and value delivery and tone 30%. "
        "Use 0.8-1.0 for a dominant archetype, 0.6-0.79 strong, 0.4-0.59 moderate and below 0.4 weak or absent."
    ),
}

ELEMENT_VERDICT = {"present": True, "score": 8, "evidence": "quoted page text"}

FORMATS = {
    "golden_circle": {
        "why": {"statement": "", "score": 0, "evidence": [""]},
        "how": {"statement": "", "score": 0, "evidence": [""]},
        "what": {"statement": "", "score": 0, "evidence": [""]},
        "who": {"statement": "", "score": 0, "evidence": [""]},
        "insights": [""],
        "recommendations": [""],
    },
    "b2c_elements": {
        "elements": {"<element_name>": ELEMENT_VERDICT},
        "summary": "",
        "recommendations": [""],
    },
    "b2b_elements": {
        "elements": {"<element_name>": ELEMENT_VERDICT},
        "summary": "",
        "recommendations": [""],
    },
    "clifton_strengths": {
        "themes": {"<theme_name>": {"score": 0, "evidence": ""}},
        "summary": "",
        "recommendations": [""],
    },
    "revenue_trends": {
        "market_opportunity_score": 0,
        "underserved_demand_identified": False,
        "revenue_opportunity_brief": {
            "subject": "",
            "identified_topic": "",
            "competition_level": "Low|Medium|High",
            "growth_potential": "Low|Medium|High",
            "revenue_opportunities": [
                {
                    "content_title": "",
                    "target_audience": "",
                    "search_volume_estimate": "Low|Medium|High",
                    "implementation_effort": "Low|Medium|High",
                    "timeline_to_revenue": "",
                }
            ],
        },
        "market_gaps": [{"gap": "", "search_intent": "", "content_angle": ""}],
        "competitive_analysis": {
            "content_gaps": [""],
            "differentiation_opportunities": [""],
        },
        "recommendations": [""],
    },
    "brand_archetypes": {
        "archetypes": {"<archetype_name>": {"score": 0.0, "evidence": "quoted page text"}},
        "summary": "",
        "recommendations": [""],
    },
}


def _content_block(content: ScrapedContent, url: str, keyword: Optional[str] = None) -> str:
    limit = settings.PROMPT_CONTENT_LIMIT
    block = f"""URL: {url}
Title: {content.title or "(none)"}
Meta Description: {content.meta_description or "(none)"}
Headings: {json.dumps(content.headings[:25])}
Core Keywords: {", ".join(content.extracted_keywords) or "(none)"}"""
    if keyword:
        block += f"\nTarget Keyword: {keyword}"
    block += f"\n\nPage Content:\n{content.clean_text[:limit]}"
    return block


def build_prompt(
    framework: str,
    content: ScrapedContent,
    url: str,
    keyword: Optional[str] = None,
) -> str:
    """
    Assemble the PTCF prompt for one framework.

    Raises:
        FrameworkLoadError: unknown framework or unreadable reference file
    """
    if framework not in PERSONAS:
        raise FrameworkLoadError(f"Unknown framework: {framework}")

    return f"""{PERSONAS[framework]}

TASK:
{TASKS[framework]}

WEBSITE CONTENT:
{_content_block(content, url, keyword)}

FRAMEWORK REFERENCE:
{reference_text(framework)}

OUTPUT FORMAT:
Return ONLY valid JSON (no markdown, no commentary) with this structure:
{json.dumps(FORMATS[framework], indent=2)}
"""


def build_insights_prompt(url: str, keyword: Optional[str], collected: dict) -> str:
    """Strategic insights over everything the comprehensive run collected."""
    return f"""You are a senior digital strategy consultant preparing an executive briefing.

TASK:
Using the analysis data below for {url}{f' (target keyword: {keyword})' if keyword else ''},
write strategic insights. Base every statement on the data; do not invent metrics.

ANALYSIS DATA:
{json.dumps(collected, indent=2, default=str)[:12000]}

OUTPUT FORMAT:
Return ONLY valid JSON with this structure:
{{
  "executive_summary": "",
  "key_strengths": [""],
  "critical_weaknesses": [""],
  "competitive_advantages": [""],
  "transformation_opportunities": [""],
  "implementation_roadmap": {{"immediate": [""], "short_term": [""], "long_term": [""]}},
  "success_metrics": {{"current": [""], "target": [""], "measurement": [""]}}
}}
"""


def build_synthesis_prompt(url: str, phase1: dict, phase2: dict) -> str:
    """Phase 3: turn collected data and framework results into a strategy."""
    return f"""You are a Chief Marketing Strategist synthesizing a full website assessment.

TASK:
Combine the content and performance data (Phase 1) with the framework analyses
(Phase 2) for {url} into a prioritized strategy. Reference the findings that
support each recommendation.

PHASE 1 DATA:
{json.dumps(phase1, indent=2, default=str)[:6000]}

PHASE 2 FRAMEWORK RESULTS:
{json.dumps(phase2, indent=2, default=str)[:8000]}

OUTPUT FORMAT:
Return ONLY valid JSON with this structure:
{{
  "executive_summary": "",
  "what_is_working": [""],
  "what_is_not_working": [""],
  "recommended_changes": [{{"change": "", "rationale": "", "priority": "High|Medium|Low"}}],
  "impact_analysis": {{"revenue": "", "conversion": "", "brand": ""}},
  "quick_wins": [""],
  "long_term_strategy": [""],
  "priority_actions": [{{"action": "", "priority": "Critical|High|Medium|Low", "effort": "High|Medium|Low", "impact": "High|Medium|Low", "estimated_time": ""}}]
}}
"""
