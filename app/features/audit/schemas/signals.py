"""
Signal Bundle Schemas

Raw signals gathered from a loaded page, grouped into the four bundles
(SEO, technical, content, performance) plus screenshots. Every field has a
default so a missing DOM signal never invalidates a bundle.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


# ── SEO ────────────────────────────────────────────

class TitleSignal(BaseModel):
    content: Optional[str] = None
    length: int = 0
    is_optimal: bool = False


class MetaDescriptionSignal(BaseModel):
    content: Optional[str] = None
    length: int = 0
    is_optimal: bool = False


class OpenGraphSignal(BaseModel):
    """Open Graph tags for social media sharing"""
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None


class HeadingStructure(BaseModel):
    h1: List[str] = Field(default_factory=list)
    h2: List[str] = Field(default_factory=list)
    h3: List[str] = Field(default_factory=list)
    h4: List[str] = Field(default_factory=list)
    h5: List[str] = Field(default_factory=list)
    h6: List[str] = Field(default_factory=list)


class SEOAnalysis(BaseModel):
    title: TitleSignal = Field(default_factory=TitleSignal)
    meta_description: MetaDescriptionSignal = Field(default_factory=MetaDescriptionSignal)
    meta_keywords: Optional[str] = None
    viewport: Optional[str] = None
    charset: Optional[str] = None
    canonical: Optional[str] = None
    hreflang: List[str] = Field(default_factory=list)
    robots: Optional[str] = None
    open_graph: OpenGraphSignal = Field(default_factory=OpenGraphSignal)
    heading_structure: HeadingStructure = Field(default_factory=HeadingStructure)


# ── Technical ──────────────────────────────────────

class NetworkRequests(BaseModel):
    total: int = 0
    failed: int = 0
    total_size: int = 0


class MobileOptimization(BaseModel):
    has_viewport: bool = False
    is_responsive: bool = False
    touch_target_size: bool = True


class AccessibilitySummary(BaseModel):
    score: int = 100
    issues: List[str] = Field(default_factory=list)


class SecuritySummary(BaseModel):
    has_ssl: bool = False
    mixed_content: bool = False
    vulnerabilities: List[str] = Field(default_factory=list)


class TechnicalAnalysis(BaseModel):
    # Timings in milliseconds; zero when the browser did not report them
    load_time: float = 0
    first_contentful_paint: float = 0
    largest_contentful_paint: float = 0
    cumulative_layout_shift: float = 0
    time_to_interactive: float = 0
    network_requests: NetworkRequests = Field(default_factory=NetworkRequests)
    mobile_optimization: MobileOptimization = Field(default_factory=MobileOptimization)
    accessibility: AccessibilitySummary = Field(default_factory=AccessibilitySummary)
    security: SecuritySummary = Field(default_factory=SecuritySummary)


# ── Content ────────────────────────────────────────

class ImageStats(BaseModel):
    total: int = 0
    without_alt: int = 0
    with_empty_alt: int = 0
    lazy_loaded: int = 0
    oversized: int = 0


class LinkStats(BaseModel):
    total: int = 0
    internal: int = 0
    external: int = 0
    broken: int = 0
    nofollow: int = 0
    empty: int = 0


class StructuredData(BaseModel):
    has_structured_data: bool = False
    types: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)


class PlaceholderLink(BaseModel):
    href: str
    text: str = ""


class ContentAnalysis(BaseModel):
    word_count: int = 0
    readability_score: float = 0
    images: ImageStats = Field(default_factory=ImageStats)
    links: LinkStats = Field(default_factory=LinkStats)
    structured_data: StructuredData = Field(default_factory=StructuredData)
    placeholder_links: List[PlaceholderLink] = Field(default_factory=list)
    has_suspicious_testimonials: bool = False


# ── Performance ────────────────────────────────────

class PerformanceMetrics(BaseModel):
    first_contentful_paint: float = 0
    largest_contentful_paint: float = 0
    first_input_delay: float = 0
    cumulative_layout_shift: float = 0
    speed_index: float = 0
    time_to_interactive: float = 0


class Opportunity(BaseModel):
    title: str
    description: str
    savings: float
    type: Literal["time", "bytes"]


class ScriptResources(BaseModel):
    total: int = 0
    unused: int = 0
    blocking: int = 0


class ImageResources(BaseModel):
    total: int = 0
    unoptimized: int = 0
    total_size: int = 0


class ResourceBreakdown(BaseModel):
    javascript: ScriptResources = Field(default_factory=ScriptResources)
    css: ScriptResources = Field(default_factory=ScriptResources)
    images: ImageResources = Field(default_factory=ImageResources)


class PerformanceAnalysis(BaseModel):
    overall_score: int = 0
    metrics: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    opportunities: List[Opportunity] = Field(default_factory=list)
    resources: ResourceBreakdown = Field(default_factory=ResourceBreakdown)


# ── Screenshots ────────────────────────────────────

class Screenshots(BaseModel):
    """Base64 data URLs captured at desktop and mobile viewport sizes."""
    desktop: Optional[str] = None
    mobile: Optional[str] = None
    timestamp: str
