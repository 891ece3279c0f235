from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.features.audit.schemas.deep_analysis import DeepAnalysis
from app.features.audit.schemas.signals import (
    ContentAnalysis,
    PerformanceAnalysis,
    Screenshots,
    SEOAnalysis,
    TechnicalAnalysis,
)
from app.platform.config import settings

IssueCategory = Literal["seo", "technical", "content", "performance"]
IssueType = Literal["error", "warning", "info"]
Impact = Literal["high", "medium", "low"]
AuditStatus = Literal["running", "completed", "failed"]

CATEGORIES: tuple = ("seo", "technical", "content", "performance")


class AuditOptions(BaseModel):
    """Per-request audit switches. camelCase keys are accepted as well."""
    include_screenshots: bool = Field(
        default=True, validation_alias=AliasChoices("include_screenshots", "includeScreenshots")
    )
    mobile_test: bool = Field(
        default=True, validation_alias=AliasChoices("mobile_test", "mobileTest")
    )
    deep_scan: bool = Field(
        default=True, validation_alias=AliasChoices("deep_scan", "deepScan")
    )
    timeout_ms: int = Field(
        default=settings.DEFAULT_TIMEOUT_MS, gt=0, validation_alias=AliasChoices("timeout_ms", "timeoutMs", "timeout")
    )


class AuditRequest(BaseModel):
    url: str
    options: AuditOptions = Field(default_factory=AuditOptions)
    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("user_id", "userId"))

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://example.com",
                "options": {"includeScreenshots": False, "deepScan": True, "timeoutMs": 30000},
            }
        }


class Issue(BaseModel):
    """A single rule-derived finding. Created by the issue rules only."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: IssueType
    category: IssueCategory
    title: str
    description: str
    element: Optional[str] = None
    location: Optional[str] = None
    impact: Impact
    recommendation: str


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    priority: Impact
    category: IssueCategory
    action_items: List[str] = Field(default_factory=list)
    estimated_impact: Impact


class CategoryScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int = 100
    max_score: int = 100
    issues: List[Issue] = Field(default_factory=list)


class CategoryScores(BaseModel):
    model_config = ConfigDict(frozen=True)

    seo: CategoryScore = Field(default_factory=CategoryScore)
    technical: CategoryScore = Field(default_factory=CategoryScore)
    content: CategoryScore = Field(default_factory=CategoryScore)
    performance: CategoryScore = Field(default_factory=CategoryScore)

    def as_list(self) -> List[CategoryScore]:
        return [getattr(self, name) for name in CATEGORIES]


class AuditResult(BaseModel):
    """
    The complete record for one audit.

    Built once by the audit service; storage only fills in the identity and
    bookkeeping fields on a copy.
    """
    model_config = ConfigDict(frozen=True)

    # Assigned at persistence time
    id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    status: Optional[AuditStatus] = None
    processing_time: Optional[int] = None

    url: str
    timestamp: datetime
    overall_score: int
    categories: CategoryScores

    seo: SEOAnalysis
    technical: TechnicalAnalysis
    content: ContentAnalysis
    performance: PerformanceAnalysis
    screenshots: Optional[Screenshots] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
    issues: List[Issue] = Field(default_factory=list)
    llm_analysis: Optional[DeepAnalysis] = None


class AuditSummary(BaseModel):
    id: str
    url: str
    score: int
    created_at: datetime
    status: AuditStatus = "completed"
    user_id: Optional[str] = None


class AuditFilters(BaseModel):
    url: Optional[str] = None
    min_score: Optional[int] = None
    user_id: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
