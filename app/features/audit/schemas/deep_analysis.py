"""
Deep Analysis Schemas

Shape of the expert report produced by either the heuristic generator or a
generative-analysis service. Each tier carries its own priority tag so a
tier list can only ever hold issues of that tier.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

DeepIssueCategory = Literal["seo", "technical", "content", "performance", "navigation", "accessibility"]


class DetailedIssue(BaseModel):
    id: str
    title: str
    description: str
    impact: str
    fix: str
    business_impact: str
    code_example: Optional[str] = None
    category: DeepIssueCategory = "seo"
    estimated_fix_time: Optional[str] = None


class CriticalIssue(DetailedIssue):
    priority: Literal["critical"] = "critical"


class HighPriorityIssue(DetailedIssue):
    priority: Literal["high"] = "high"


class MediumPriorityIssue(DetailedIssue):
    priority: Literal["medium"] = "medium"


class ContentQualityAssessment(BaseModel):
    overall_score: int
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class BusinessImpactProjections(BaseModel):
    search_visibility_increase: str
    user_experience_improvement: str
    conversion_rate_impact: str


class ActionItem(BaseModel):
    priority: Literal["immediate", "high", "medium", "low"]
    task: str
    timeline: str
    code_example: Optional[str] = None
    success_metrics: Optional[List[str]] = None


class DeepAnalysis(BaseModel):
    critical_issues: List[CriticalIssue] = Field(default_factory=list)
    high_priority_issues: List[HighPriorityIssue] = Field(default_factory=list)
    medium_priority_issues: List[MediumPriorityIssue] = Field(default_factory=list)
    content_quality_assessment: ContentQualityAssessment
    business_impact_projections: BusinessImpactProjections
    action_items: List[ActionItem] = Field(default_factory=list)
