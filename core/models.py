from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from core.errors import AnalysisError, sanitize_error


StepStatus = Literal["ok", "failed", "unavailable"]
Level = Literal["High", "Medium", "Low"]
Priority = Literal["Critical", "High", "Medium", "Low"]


class ScrapedContent(BaseModel):
    url: str
    title: str = ""
    meta_description: str = ""
    clean_text: str = ""
    headings: List[str] = Field(default_factory=list)
    word_count: int = 0
    image_count: int = 0
    link_count: int = 0
    extracted_keywords: List[str] = Field(default_factory=list)
    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0
    og_tags: Dict[str, str] = Field(default_factory=dict)
    canonical_url: Optional[str] = None
    structured_data_types: List[str] = Field(default_factory=list)
    has_ssl: bool = False
    rendered: bool = False


class StepResult(BaseModel):
    """
    Outcome of one pipeline step.

    ``ok`` carries data, ``failed`` means the step raised, ``unavailable``
    means the step ran but real data could not be obtained (missing key,
    empty tool response). Consumers must never treat the latter two as zero.
    """

    status: StepStatus = "ok"
    data: Optional[Any] = None
    error: Optional[str] = None
    code: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, data: Any) -> "StepResult":
        return cls(status="ok", data=data)

    @classmethod
    def unavailable(cls, reason: str, code: str = "TOOL_UNAVAILABLE") -> "StepResult":
        return cls(status="unavailable", error=sanitize_error(reason), code=code)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "StepResult":
        if isinstance(exc, AnalysisError):
            status = "unavailable" if exc.code in ("TOOL_UNAVAILABLE", "PROVIDER_NOT_CONFIGURED") else "failed"
            return cls(status=status, error=exc.message, code=exc.code)
        return cls(status="failed", error=sanitize_error(str(exc)) or type(exc).__name__, code="STEP_FAILED")


class ActionItem(BaseModel):
    id: str
    title: str
    description: str = ""
    priority: Priority = "Medium"
    effort: Level = "Medium"
    impact: Level = "Medium"
    estimated_time: str = ""
    source: str = ""


class Recommendation(BaseModel):
    title: str
    description: str = ""
    priority: Level = "Medium"
    category: str = ""
