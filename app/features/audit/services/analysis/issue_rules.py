"""
Issue & Recommendation Deriver

Turns the four signal bundles into an ordered list of issues and the fixed
recommendations. Rules are evaluated top to bottom, so the issue order is
stable for identical input.
"""
import math
from dataclasses import dataclass
from typing import Callable, List, Tuple

from app.features.audit.schemas.audit import Issue, Recommendation
from app.features.audit.schemas.signals import (
    ContentAnalysis,
    PerformanceAnalysis,
    SEOAnalysis,
    TechnicalAnalysis,
)

SLOW_LOAD_THRESHOLD_MS = 3000


@dataclass(frozen=True)
class Signals:
    seo: SEOAnalysis
    technical: TechnicalAnalysis
    content: ContentAnalysis
    performance: PerformanceAnalysis


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _meta_description_text(s: Signals) -> str:
    if s.seo.meta_description.content:
        return (
            f"Meta description is {s.seo.meta_description.length} characters. "
            "Optimal length is 120-160 characters."
        )
    return "Meta description is missing."


IssueRule = Tuple[Callable[[Signals], bool], Callable[[Signals], Issue]]

ISSUE_RULES: List[IssueRule] = [
    (
        lambda s: not s.seo.title.is_optimal,
        lambda s: Issue(
            id="title-length",
            type="warning",
            category="seo",
            title="Title tag length not optimal",
            description=f"Title is {s.seo.title.length} characters. Optimal length is 30-60 characters.",
            element="title",
            impact="medium",
            recommendation="Optimize title tag length to 30-60 characters for better search visibility.",
        ),
    ),
    (
        lambda s: not s.seo.meta_description.is_optimal,
        lambda s: Issue(
            id="meta-description",
            type="error",
            category="seo",
            title="Meta description issues",
            description=_meta_description_text(s),
            element='meta[name="description"]',
            impact="high",
            recommendation="Add or optimize meta description to 120-160 characters.",
        ),
    ),
    (
        lambda s: len(s.seo.heading_structure.h1) == 0,
        lambda s: Issue(
            id="missing-h1",
            type="error",
            category="seo",
            title="Missing H1 tag",
            description="Page does not have an H1 tag.",
            element="h1",
            impact="high",
            recommendation="Add a descriptive H1 tag to clearly identify the page topic.",
        ),
    ),
    (
        lambda s: len(s.seo.heading_structure.h1) > 1,
        lambda s: Issue(
            id="multiple-h1",
            type="warning",
            category="seo",
            title="Multiple H1 tags",
            description=f"Page has {len(s.seo.heading_structure.h1)} H1 tags.",
            element="h1",
            impact="medium",
            recommendation="Use only one H1 tag per page for better SEO structure.",
        ),
    ),
    (
        lambda s: s.content.images.without_alt > 0,
        lambda s: Issue(
            id="images-without-alt",
            type="warning",
            category="content",
            title="Images without alt text",
            description=f"{s.content.images.without_alt} images are missing alt text.",
            element="img",
            impact="medium",
            recommendation="Add descriptive alt text to all images for accessibility and SEO.",
        ),
    ),
    (
        lambda s: s.content.links.empty > 0,
        lambda s: Issue(
            id="empty-links",
            type="warning",
            category="content",
            title="Empty link text",
            description=f"{s.content.links.empty} links have empty or missing text.",
            element="a",
            impact="medium",
            recommendation="Add descriptive text to all links for better user experience and SEO.",
        ),
    ),
    (
        lambda s: not s.technical.security.has_ssl,
        lambda s: Issue(
            id="no-ssl",
            type="error",
            category="technical",
            title="No SSL certificate",
            description="Website is not using HTTPS.",
            impact="high",
            recommendation="Install SSL certificate to secure the website and improve search rankings.",
        ),
    ),
    (
        lambda s: not s.technical.mobile_optimization.has_viewport,
        lambda s: Issue(
            id="no-viewport",
            type="error",
            category="technical",
            title="Missing viewport meta tag",
            description="Page does not have a viewport meta tag.",
            element='meta[name="viewport"]',
            impact="high",
            recommendation="Add viewport meta tag for proper mobile display.",
        ),
    ),
    (
        lambda s: s.technical.load_time > SLOW_LOAD_THRESHOLD_MS,
        lambda s: Issue(
            id="slow-loading",
            type="warning",
            category="performance",
            title="Slow page load time",
            description=f"Page loads in {_round_half_up(s.technical.load_time)}ms.",
            impact="medium",
            recommendation="Optimize images, minify CSS/JS, and use caching to improve load times.",
        ),
    ),
]

FIXED_RECOMMENDATIONS: List[Recommendation] = [
    Recommendation(
        id="seo-optimization",
        title="SEO Optimization",
        description="Improve search engine visibility with better meta tags and content structure.",
        priority="high",
        category="seo",
        action_items=[
            "Optimize title tag length",
            "Add or improve meta description",
            "Ensure single H1 tag per page",
            "Add Open Graph tags",
        ],
        estimated_impact="high",
    ),
    Recommendation(
        id="technical-improvements",
        title="Technical Improvements",
        description="Enhance website security and mobile optimization.",
        priority="medium",
        category="technical",
        action_items=[
            "Implement HTTPS if not already",
            "Add viewport meta tag",
            "Optimize mobile experience",
            "Fix broken links",
        ],
        estimated_impact="medium",
    ),
]


def derive_issues(
    seo: SEOAnalysis,
    technical: TechnicalAnalysis,
    content: ContentAnalysis,
    performance: PerformanceAnalysis,
) -> List[Issue]:
    signals = Signals(seo=seo, technical=technical, content=content, performance=performance)
    return [factory(signals) for predicate, factory in ISSUE_RULES if predicate(signals)]


def derive_recommendations() -> List[Recommendation]:
    return [recommendation.model_copy(deep=True) for recommendation in FIXED_RECOMMENDATIONS]


def analyze_issues_and_recommendations(
    seo: SEOAnalysis,
    technical: TechnicalAnalysis,
    content: ContentAnalysis,
    performance: PerformanceAnalysis,
) -> Tuple[List[Issue], List[Recommendation]]:
    """Issues in rule order, then the recommendations that always apply."""
    return derive_issues(seo, technical, content, performance), derive_recommendations()
