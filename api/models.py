from typing import Any, Dict, List, Literal, Optional, get_args
from pydantic import BaseModel, ConfigDict, Field, HttpUrl


FrameworkName = Literal[
    "golden_circle",
    "b2c_elements",
    "b2b_elements",
    "clifton_strengths",
    "revenue_trends",
    "brand_archetypes",
]


class RequestModel(BaseModel):
    # Accept both snake_case and the camelCase names older clients send
    model_config = ConfigDict(populate_by_name=True)


class ComprehensiveRequest(RequestModel):
    url: HttpUrl
    keyword: Optional[str] = None
    include_page_audit: bool = Field(default=True, alias="includePageAudit")
    include_lighthouse: bool = Field(default=True, alias="includeLighthouse")
    include_all_pages: bool = Field(default=False, alias="includeAllPages")
    render_js: bool = Field(default=False, alias="renderJs")
    use_cache: bool = Field(default=True, alias="useCache")


class Phase1Request(RequestModel):
    url: HttpUrl
    keyword: Optional[str] = None
    render_js: bool = Field(default=False, alias="renderJs")


class Phase2Request(RequestModel):
    url: HttpUrl
    keyword: Optional[str] = None
    frameworks: List[FrameworkName] = Field(
        default_factory=lambda: list(get_args(FrameworkName))
    )
    phase1_data: Optional[Dict[str, Any]] = Field(default=None, alias="phase1Data")


class Phase3Request(RequestModel):
    url: HttpUrl
    phase1_data: Optional[Dict[str, Any]] = Field(default=None, alias="phase1Data")
    phase2_data: Optional[Dict[str, Any]] = Field(default=None, alias="phase2Data")


class StepRequest(RequestModel):
    url: HttpUrl
    step: str
    keyword: Optional[str] = None
    previous_results: Optional[Dict[str, Any]] = Field(default=None, alias="previousResults")


class UnifiedRequest(RequestModel):
    url: HttpUrl
    keyword: Optional[str] = None
    include_golden_circle: bool = Field(default=True, alias="includeGoldenCircle")
    include_elements_of_value: bool = Field(default=True, alias="includeElementsOfValue")
    include_b2b_elements: bool = Field(default=True, alias="includeB2BElements")
    include_clifton_strengths: bool = Field(default=True, alias="includeCliftonStrengths")
    include_revenue_trends: bool = Field(default=False, alias="includeRevenueTrends")
    include_brand_archetypes: bool = Field(default=False, alias="includeBrandArchetypes")
    include_lighthouse: bool = Field(default=False, alias="includeLighthouse")
    include_trends: bool = Field(default=False, alias="includeTrends")

    def selected_frameworks(self) -> List[str]:
        toggles = {
            "golden_circle": self.include_golden_circle,
            "b2c_elements": self.include_elements_of_value,
            "b2b_elements": self.include_b2b_elements,
            "clifton_strengths": self.include_clifton_strengths,
            "revenue_trends": self.include_revenue_trends,
            "brand_archetypes": self.include_brand_archetypes,
        }
        return [name for name, enabled in toggles.items() if enabled]


class ApiResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    message: Optional[str] = None
    error: Optional[str] = None
