from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class ImplementationRoadmap(BaseModel):
    model_config = ConfigDict(extra="allow")

    immediate: List[str] = Field(default_factory=list)
    short_term: List[str] = Field(default_factory=list)
    long_term: List[str] = Field(default_factory=list)


class InsightsOutput(BaseModel):
    """Strategic insights returned for a comprehensive run."""

    model_config = ConfigDict(extra="allow")

    executive_summary: str
    key_strengths: List[str] = Field(default_factory=list)
    critical_weaknesses: List[str] = Field(default_factory=list)
    competitive_advantages: List[str] = Field(default_factory=list)
    transformation_opportunities: List[str] = Field(default_factory=list)
    implementation_roadmap: ImplementationRoadmap = Field(default_factory=ImplementationRoadmap)
    success_metrics: Dict[str, Any] = Field(default_factory=dict)


class SynthesisOutput(BaseModel):
    """Phase 3 strategic synthesis."""

    model_config = ConfigDict(extra="allow")

    executive_summary: str
    what_is_working: List[str] = Field(default_factory=list)
    what_is_not_working: List[str] = Field(default_factory=list)
    recommended_changes: List[Dict[str, Any]] = Field(default_factory=list)
    impact_analysis: Dict[str, Any] = Field(default_factory=dict)
    quick_wins: List[str] = Field(default_factory=list)
    long_term_strategy: List[str] = Field(default_factory=list)
    priority_actions: List[Dict[str, Any]] = Field(default_factory=list)
