"""
Heuristic Deep-Analysis Generator

Builds a DeepAnalysis from the audit alone using fixed rule tables. Pure and
deterministic: the same audit always yields the same report.
"""
import math
from typing import Callable, List, Tuple, TypeVar

from app.features.audit.schemas.audit import AuditResult
from app.features.audit.schemas.deep_analysis import (
    ActionItem,
    BusinessImpactProjections,
    ContentQualityAssessment,
    CriticalIssue,
    DeepAnalysis,
    HighPriorityIssue,
    MediumPriorityIssue,
)
from app.features.audit.services.deep_analysis.base import DeepAnalyzer
from app.platform.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

SLOW_LOAD_MS = 3000
THIN_CONTENT_WORDS = 300

Rule = Tuple[Callable[[AuditResult], bool], Callable[[AuditResult], T]]


def _apply(rules: List[Rule], audit: AuditResult) -> List[T]:
    return [build(audit) for applies, build in rules if applies(audit)]


def _placeholder_count(audit: AuditResult) -> int:
    return len(audit.content.placeholder_links)


def _is_slow(audit: AuditResult) -> bool:
    return audit.technical.load_time > SLOW_LOAD_MS


# ─────────────────────────────────────────────
# Issue tiers
# ─────────────────────────────────────────────

CRITICAL_RULES: List[Rule] = [
    (
        lambda a: not a.seo.meta_description.content,
        lambda a: CriticalIssue(
            id="missing-meta-description",
            title="Meta Description Missing",
            description='No <meta name="description"> tag found',
            impact="Poor search engine visibility and click-through rates",
            fix="Add compelling 150-160 character descriptions for each page",
            business_impact="High - affects search rankings and CTR",
            code_example='<meta name="description" content="Your compelling description here">',
            category="seo",
            estimated_fix_time="15 minutes",
        ),
    ),
    (
        lambda a: not a.seo.canonical,
        lambda a: CriticalIssue(
            id="missing-canonical",
            title="Canonical Links Missing",
            description='No <link rel="canonical"> tags found',
            impact="Potential duplicate content issues",
            fix="Add canonical URLs to all pages",
            business_impact="Medium - affects search indexing",
            code_example='<link rel="canonical" href="https://example.com/page">',
            category="seo",
            estimated_fix_time="15 minutes",
        ),
    ),
    (
        lambda a: not a.seo.open_graph.title,
        lambda a: CriticalIssue(
            id="missing-open-graph",
            title="Open Graph Meta Tags Missing",
            description=(
                "No Facebook/social media sharing optimization. "
                "Missing: og:title, og:description, og:image, og:url"
            ),
            impact="Poor social media sharing appearance",
            fix="Implement complete OG tag set",
            business_impact="Medium - affects social media reach",
            code_example=(
                '<meta property="og:title" content="[Page title]">\n'
                '<meta property="og:description" content="[Page description]">\n'
                '<meta property="og:image" content="[Social sharing image URL]">\n'
                '<meta property="og:url" content="[Current page URL]">\n'
                '<meta property="og:type" content="website">'
            ),
            category="seo",
            estimated_fix_time="30 minutes",
        ),
    ),
    (
        lambda a: not a.seo.viewport,
        lambda a: CriticalIssue(
            id="missing-viewport",
            title="Viewport Meta Tag Missing",
            description="Need to verify mobile viewport configuration",
            impact="Poor mobile experience and rankings",
            fix="Add viewport meta tag for proper mobile display",
            business_impact="High - affects mobile SEO",
            code_example='<meta name="viewport" content="width=device-width, initial-scale=1">',
            category="technical",
            estimated_fix_time="5 minutes",
        ),
    ),
]

HIGH_PRIORITY_RULES: List[Rule] = [
    (
        lambda a: _placeholder_count(a) > 0,
        lambda a: HighPriorityIssue(
            id="broken-navigation",
            title="Broken Navigation Links",
            description=(
                f"{_placeholder_count(a)} navigation links point to placeholders (#, #_, example.com)"
            ),
            impact="Users cannot navigate the main site sections",
            fix="Replace placeholder links with actual URLs",
            business_impact="High - affects user experience and engagement",
            code_example=(
                '<!-- Replace these: -->\n<a href="#_">What We Do</a>\n'
                '<!-- With actual URLs: -->\n<a href="/services">What We Do</a>'
            ),
            category="navigation",
            estimated_fix_time="1 hour",
        ),
    ),
    (
        lambda a: not a.seo.title.is_optimal,
        lambda a: HighPriorityIssue(
            id="title-optimization",
            title="Title Tag Not Optimal",
            description=f"Title is {a.seo.title.length} characters. Optimal length is 30-60 characters",
            impact="Suboptimal search visibility and click-through rates",
            fix="Optimize title tag to 30-60 characters",
            business_impact="Medium - affects search rankings and CTR",
            category="seo",
            estimated_fix_time="15 minutes",
        ),
    ),
    (
        lambda a: a.content.images.without_alt > 0,
        lambda a: HighPriorityIssue(
            id="images-accessibility",
            title="Images Without Alt Text",
            description=f"{a.content.images.without_alt} images are missing descriptive alt text",
            impact="Poor accessibility for screen readers and SEO",
            fix="Add descriptive alt text to all images",
            business_impact="Medium - affects accessibility compliance and SEO",
            code_example='<img src="logo.png" alt="Company Name - Professional Services">',
            category="accessibility",
            estimated_fix_time="30 minutes",
        ),
    ),
    (
        lambda a: not a.technical.security.has_ssl,
        lambda a: HighPriorityIssue(
            id="no-ssl",
            title="No SSL Certificate",
            description="Website is not using HTTPS",
            impact="Security warnings and poor search rankings",
            fix="Install SSL certificate and redirect HTTP to HTTPS",
            business_impact="High - affects trust and search rankings",
            category="technical",
            estimated_fix_time="2 hours",
        ),
    ),
]

MEDIUM_PRIORITY_RULES: List[Rule] = [
    (
        lambda a: a.content.has_suspicious_testimonials,
        lambda a: MediumPriorityIssue(
            id="fake-testimonials",
            title="Inappropriate Testimonials",
            description="Testimonials contain clearly fake/test content with celebrity names",
            impact="Damages credibility and professionalism",
            fix="Replace with real client testimonials or remove section",
            business_impact="Medium - affects brand credibility",
            category="content",
            estimated_fix_time="1 hour",
        ),
    ),
    (
        _is_slow,
        lambda a: MediumPriorityIssue(
            id="slow-loading",
            title="Slow Page Load Time",
            description=f"Page loads in {int(math.floor(a.technical.load_time + 0.5))}ms",
            impact="Poor user experience and search rankings",
            fix="Optimize images, minify CSS/JS, and use caching",
            business_impact="Medium - affects user engagement",
            category="performance",
            estimated_fix_time="1 day",
        ),
    ),
    (
        lambda a: a.content.word_count < THIN_CONTENT_WORDS,
        lambda a: MediumPriorityIssue(
            id="thin-content",
            title="Thin Content",
            description=f"Page has only {a.content.word_count} words",
            impact="Poor search engine rankings for competitive terms",
            fix="Add more comprehensive, valuable content",
            business_impact="Medium - affects SEO performance",
            category="content",
            estimated_fix_time="1 day",
        ),
    ),
]

# ─────────────────────────────────────────────
# Content quality
# ─────────────────────────────────────────────

# (applies, deduction, issue text)
CONTENT_DEDUCTIONS: List[Tuple[Callable[[AuditResult], bool], Callable[[AuditResult], int], Callable[[AuditResult], str]]] = [
    (
        lambda a: not a.seo.meta_description.content,
        lambda a: 20,
        lambda a: "Missing meta description tags",
    ),
    (
        lambda a: _placeholder_count(a) > 0,
        lambda a: 5 * _placeholder_count(a),
        lambda a: f"{_placeholder_count(a)} broken/placeholder links detected",
    ),
    (
        lambda a: a.content.images.without_alt > 0,
        lambda a: 3 * a.content.images.without_alt,
        lambda a: f"{a.content.images.without_alt} images missing alt text",
    ),
    (
        lambda a: a.content.has_suspicious_testimonials,
        lambda a: 15,
        lambda a: "Fake testimonials detected",
    ),
]

CONTENT_RECOMMENDATIONS = [
    "Add compelling meta descriptions to all pages",
    "Fix all broken and placeholder links",
    "Add descriptive alt text to all images",
    "Replace test content with real testimonials",
    "Implement proper heading hierarchy",
]

# ─────────────────────────────────────────────
# Action items
# ─────────────────────────────────────────────

ACTION_ITEM_RULES: List[Rule] = [
    (
        lambda a: not a.seo.meta_description.content,
        lambda a: ActionItem(
            priority="immediate",
            task="Add meta descriptions to all pages",
            timeline="Today",
            code_example='<meta name="description" content="Compelling 150-160 character description">',
            success_metrics=["Improved search result snippets", "Higher click-through rates"],
        ),
    ),
    (
        lambda a: _placeholder_count(a) > 0,
        lambda a: ActionItem(
            priority="immediate",
            task="Fix main navigation links - replace #_ with actual URLs",
            timeline="Today",
            code_example='<a href="/services">What We Do</a>',
            success_metrics=["Functional navigation", "Reduced bounce rate"],
        ),
    ),
    (
        lambda a: a.content.has_suspicious_testimonials,
        lambda a: ActionItem(
            priority="immediate",
            task="Replace fake testimonials with real content or remove",
            timeline="Today",
            success_metrics=["Improved credibility", "Better user trust"],
        ),
    ),
    (
        lambda a: not a.seo.open_graph.title,
        lambda a: ActionItem(
            priority="high",
            task="Implement Open Graph tags for social sharing",
            timeline="This week",
            code_example=(
                '<meta property="og:title" content="Page Title">\n'
                '<meta property="og:description" content="Page Description">'
            ),
            success_metrics=["Better social sharing", "Increased social engagement"],
        ),
    ),
    (
        lambda a: a.content.images.without_alt > 0,
        lambda a: ActionItem(
            priority="high",
            task="Audit image alt attributes",
            timeline="This week",
            code_example='<img src="image.jpg" alt="Descriptive alt text">',
            success_metrics=["Better accessibility", "Improved SEO"],
        ),
    ),
    (
        lambda a: True,
        lambda a: ActionItem(
            priority="medium",
            task="Content proofreading and corrections",
            timeline="This month",
            success_metrics=["Professional appearance", "Better user experience"],
        ),
    ),
    (
        lambda a: True,
        lambda a: ActionItem(
            priority="medium",
            task="Implement structured data markup",
            timeline="This month",
            success_metrics=["Rich search results", "Better search visibility"],
        ),
    ),
]

# (has navigation issues, has second signal) -> text
UX_IMPACT = {
    (True, True): "High - functional navigation and performance fixes",
    (True, False): "Medium - functional navigation will reduce bounce rate",
    (False, True): "Medium - performance improvements will help engagement",
    (False, False): "Low to Medium - minor improvements",
}

CONVERSION_IMPACT = {
    (True, True): "Medium to High - working contact methods and credible testimonials",
    (True, False): "Medium - working contact methods will improve lead generation",
    (False, True): "Medium - professional testimonials will increase credibility",
    (False, False): "Low to Medium - minor conversion improvements",
}


def critical_issues(audit: AuditResult) -> List[CriticalIssue]:
    return _apply(CRITICAL_RULES, audit)


def high_priority_issues(audit: AuditResult) -> List[HighPriorityIssue]:
    return _apply(HIGH_PRIORITY_RULES, audit)


def medium_priority_issues(audit: AuditResult) -> List[MediumPriorityIssue]:
    return _apply(MEDIUM_PRIORITY_RULES, audit)


def content_quality_score(audit: AuditResult) -> int:
    """100 minus each applicable deduction, clamped to [0, 100]."""
    score = 100
    for applies, deduction, _ in CONTENT_DEDUCTIONS:
        if applies(audit):
            score -= deduction(audit)
    return max(0, min(100, score))


def assess_content_quality(audit: AuditResult) -> ContentQualityAssessment:
    return ContentQualityAssessment(
        overall_score=content_quality_score(audit),
        issues=[describe(audit) for applies, _, describe in CONTENT_DEDUCTIONS if applies(audit)],
        recommendations=list(CONTENT_RECOMMENDATIONS),
    )


def search_visibility_impact(audit: AuditResult) -> str:
    count = len(critical_issues(audit))
    if count >= 3:
        return "30-50% with proper meta tags and fixes"
    if count >= 2:
        return "20-30% with SEO improvements"
    return "10-20% with minor optimizations"


def project_business_impact(audit: AuditResult) -> BusinessImpactProjections:
    has_navigation_issues = _placeholder_count(audit) > 0
    return BusinessImpactProjections(
        search_visibility_increase=search_visibility_impact(audit),
        user_experience_improvement=UX_IMPACT[(has_navigation_issues, _is_slow(audit))],
        conversion_rate_impact=CONVERSION_IMPACT[
            (has_navigation_issues, audit.content.has_suspicious_testimonials)
        ],
    )


def action_items(audit: AuditResult) -> List[ActionItem]:
    return _apply(ACTION_ITEM_RULES, audit)


def generate_heuristic_analysis(audit: AuditResult) -> DeepAnalysis:
    return DeepAnalysis(
        critical_issues=critical_issues(audit),
        high_priority_issues=high_priority_issues(audit),
        medium_priority_issues=medium_priority_issues(audit),
        content_quality_assessment=assess_content_quality(audit),
        business_impact_projections=project_business_impact(audit),
        action_items=action_items(audit),
    )


class HeuristicDeepAnalyzer(DeepAnalyzer):
    name = "heuristic"

    async def analyze(self, audit: AuditResult, page_content: str = "") -> DeepAnalysis:
        analysis = generate_heuristic_analysis(audit)
        logger.info(
            f"Heuristic analysis for {audit.url}: {len(analysis.critical_issues)} critical, "
            f"{len(analysis.high_priority_issues)} high, {len(analysis.medium_priority_issues)} medium"
        )
        return analysis
