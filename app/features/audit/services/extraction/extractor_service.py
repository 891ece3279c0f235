"""
Extraction Collector

Loads one page through a PageSession and gathers the four signal bundles
(SEO, technical, content, performance) plus optional screenshots.

Steps run strictly in order because the screenshot step resizes the shared
page viewport. Only navigation may fail the extraction; every field lookup
degrades to an empty/None value.
"""
import base64
import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from app.features.audit.schemas.audit import AuditOptions
from app.features.audit.schemas.signals import (
    AccessibilitySummary,
    ContentAnalysis,
    HeadingStructure,
    ImageResources,
    ImageStats,
    LinkStats,
    MetaDescriptionSignal,
    MobileOptimization,
    NetworkRequests,
    OpenGraphSignal,
    Opportunity,
    PerformanceAnalysis,
    PerformanceMetrics,
    PlaceholderLink,
    ResourceBreakdown,
    Screenshots,
    ScriptResources,
    SecuritySummary,
    SEOAnalysis,
    StructuredData,
    TechnicalAnalysis,
    TitleSignal,
)
from app.features.audit.services.browser.page_session import PageSession
from app.features.audit.services.extraction import page_scripts
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ExtractionResult:
    seo: SEOAnalysis
    technical: TechnicalAnalysis
    content: ContentAnalysis
    performance: PerformanceAnalysis
    screenshots: Optional[Screenshots]
    page_text: str = ""


class ExtractorService:
    # SEO Best Practice Constants
    TITLE_MIN_LENGTH = 30
    TITLE_MAX_LENGTH = 60
    DESCRIPTION_MIN_LENGTH = 120
    DESCRIPTION_MAX_LENGTH = 160

    # (field, selector, attribute) for single-valued head lookups
    HEAD_LOOKUPS = (
        ("meta_description", 'meta[name="description"]', "content"),
        ("meta_keywords", 'meta[name="keywords"]', "content"),
        ("viewport", 'meta[name="viewport"]', "content"),
        ("charset", "meta[charset]", "charset"),
        ("canonical", 'link[rel="canonical"]', "href"),
        ("robots", 'meta[name="robots"]', "content"),
    )

    OPEN_GRAPH_TAGS = {
        "title": 'meta[property="og:title"]',
        "description": 'meta[property="og:description"]',
        "image": 'meta[property="og:image"]',
        "url": 'meta[property="og:url"]',
        "type": 'meta[property="og:type"]',
    }

    HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")

    PLACEHOLDER_HREFS = {"", "#", "#_", "javascript:void(0)", "javascript:void(0);", "javascript:;"}
    PLACEHOLDER_HOSTS = ("example.com", "example.org")

    SUSPICIOUS_TESTIMONIAL_MARKERS = (
        "lorem ipsum",
        "dolor sit amet",
        "john doe",
        "jane doe",
        "test testimonial",
        "sample testimonial",
        "your name here",
        "elon musk",
        "bill gates",
        "steve jobs",
        "oprah winfrey",
        "barack obama",
        "taylor swift",
        "kim kardashian",
    )

    LARGE_IMAGE_BUDGET_BYTES = 1024 * 1024
    EAGER_IMAGE_ALLOWANCE = 3

    # ─────────────────────────────────────────────
    # Orchestration
    # ─────────────────────────────────────────────

    @staticmethod
    async def collect(session: PageSession, url: str, options: AuditOptions) -> ExtractionResult:
        """
        Navigate once and extract every signal bundle.

        Raises:
            NavigationError: the page could not be loaded (fatal for the audit)
        """
        await session.navigate(url, wait_until="networkidle", timeout_ms=options.timeout_ms)
        await session.wait_for_body(settings.BODY_WAIT_TIMEOUT_MS)

        timing = await session.evaluate(page_scripts.TIMING_SCRIPT) or {}

        seo = await ExtractorService.extract_seo(session)
        technical = await ExtractorService.extract_technical(session, timing, options)
        page_text = await session.evaluate(page_scripts.BODY_TEXT_SCRIPT) or ""
        content = await ExtractorService.extract_content(session, url, page_text)
        performance = await ExtractorService.extract_performance(session, timing, content.images)

        screenshots = None
        if options.include_screenshots:
            screenshots = await ExtractorService.capture_screenshots(session)

        logger.info(
            f"Extracted signals for {url}: {len(session.network.requests)} requests, "
            f"{content.word_count} words, load {technical.load_time:.0f}ms"
        )
        return ExtractionResult(
            seo=seo,
            technical=technical,
            content=content,
            performance=performance,
            screenshots=screenshots,
            page_text=page_text,
        )

    # ─────────────────────────────────────────────
    # SEO
    # ─────────────────────────────────────────────

    @staticmethod
    def is_title_optimal(title: Optional[str]) -> bool:
        length = len(title or "")
        return ExtractorService.TITLE_MIN_LENGTH <= length <= ExtractorService.TITLE_MAX_LENGTH

    @staticmethod
    def is_description_optimal(description: Optional[str]) -> bool:
        if description is None:
            return False
        return ExtractorService.DESCRIPTION_MIN_LENGTH <= len(description) <= ExtractorService.DESCRIPTION_MAX_LENGTH

    @staticmethod
    def group_headings(headings: Iterable[Dict[str, str]]) -> HeadingStructure:
        grouped: Dict[str, List[str]] = {tag: [] for tag in ExtractorService.HEADING_TAGS}
        for heading in headings:
            tag = (heading.get("tag") or "").lower()
            if tag in grouped:
                grouped[tag].append(heading.get("text") or "")
        return HeadingStructure(**grouped)

    @staticmethod
    async def extract_seo(session: PageSession) -> SEOAnalysis:
        title = await session.title()

        head = {}
        for field_name, selector, attribute in ExtractorService.HEAD_LOOKUPS:
            head[field_name] = await session.query_attribute(selector, attribute)

        open_graph = {}
        for key, selector in ExtractorService.OPEN_GRAPH_TAGS.items():
            open_graph[key] = await session.query_attribute(selector, "content")

        hreflang_rows = await session.query_all_attributes('link[rel="alternate"][hreflang]', ["hreflang"])
        hreflang = [row["hreflang"] for row in hreflang_rows if row.get("hreflang")]

        heading_rows = await session.evaluate(
            "() => Array.from(document.querySelectorAll('h1, h2, h3, h4, h5, h6'))"
            ".map(el => ({ tag: el.tagName.toLowerCase(), text: (el.textContent || '').trim() }))"
        ) or []

        description = head.pop("meta_description")
        return SEOAnalysis(
            title=TitleSignal(
                content=title,
                length=len(title or ""),
                is_optimal=ExtractorService.is_title_optimal(title),
            ),
            meta_description=MetaDescriptionSignal(
                content=description,
                length=len(description or ""),
                is_optimal=ExtractorService.is_description_optimal(description),
            ),
            hreflang=hreflang,
            open_graph=OpenGraphSignal(**open_graph),
            heading_structure=ExtractorService.group_headings(heading_rows),
            **head,
        )

    # ─────────────────────────────────────────────
    # Technical
    # ─────────────────────────────────────────────

    @staticmethod
    def score_accessibility(counts: Dict[str, Any]) -> AccessibilitySummary:
        """100 minus 15 for each kind of finding present, floored at 0."""
        findings = []
        if counts.get("inputsMissingLabel"):
            findings.append(f"{counts['inputsMissingLabel']} form fields without a label")
        if counts.get("buttonsMissingLabel"):
            findings.append(f"{counts['buttonsMissingLabel']} buttons without an accessible name")
        if counts.get("emptyHeadings"):
            findings.append(f"{counts['emptyHeadings']} empty headings")
        if counts.get("missingLang"):
            findings.append("Document language (<html lang>) is not declared")
        return AccessibilitySummary(score=max(0, 100 - 15 * len(findings)), issues=findings)

    @staticmethod
    def detect_mixed_content(page_url: str, resource_urls: Iterable[str]) -> List[str]:
        if not page_url.startswith("https://"):
            return []
        return [u for u in resource_urls if u.startswith("http://")]

    @staticmethod
    async def extract_technical(session: PageSession, timing: Dict[str, Any], options: AuditOptions) -> TechnicalAnalysis:
        has_viewport = await session.exists('meta[name="viewport"]')
        has_ssl = session.url.startswith("https://")

        is_responsive = has_viewport
        touch_target_size = True
        if options.mobile_test:
            mobile = await session.evaluate(page_scripts.MOBILE_SCRIPT)
            if mobile:
                is_responsive = has_viewport and not mobile.get("horizontalOverflow", False)
                touch_target_size = not mobile.get("smallTouchTargets")

        counts = await session.evaluate(page_scripts.ACCESSIBILITY_SCRIPT) or {}

        insecure = ExtractorService.detect_mixed_content(session.url, timing.get("resourceUrls") or [])
        vulnerabilities = []
        if not has_ssl:
            vulnerabilities.append("Page is served over unencrypted HTTP")
        if insecure:
            vulnerabilities.append(f"{len(insecure)} resources loaded over insecure HTTP")

        return TechnicalAnalysis(
            load_time=timing.get("loadTime") or 0,
            first_contentful_paint=timing.get("firstContentfulPaint") or 0,
            largest_contentful_paint=timing.get("largestContentfulPaint") or 0,
            cumulative_layout_shift=timing.get("cumulativeLayoutShift") or 0,
            time_to_interactive=timing.get("timeToInteractive") or 0,
            network_requests=NetworkRequests(
                total=len(session.network.requests),
                failed=len(session.network.failed_responses),
                total_size=int(timing.get("totalSize") or 0),
            ),
            mobile_optimization=MobileOptimization(
                has_viewport=has_viewport,
                is_responsive=is_responsive,
                touch_target_size=touch_target_size,
            ),
            accessibility=ExtractorService.score_accessibility(counts),
            security=SecuritySummary(
                has_ssl=has_ssl,
                mixed_content=bool(insecure),
                vulnerabilities=vulnerabilities,
            ),
        )

    # ─────────────────────────────────────────────
    # Content
    # ─────────────────────────────────────────────

    @staticmethod
    def calculate_readability(text: str) -> float:
        """Flesch reading ease, clamped to 0-100."""
        clean_text = " ".join(text.split())
        words = clean_text.split()
        word_count = len(words)
        if word_count == 0:
            return 0

        sentence_count = len([s for s in re.split(r'[.!?]+', clean_text) if s.strip()]) or 1
        syllable_count = sum(1 for char in clean_text.lower() if char in "aeiouy")

        avg_sentence_len = word_count / sentence_count
        avg_syllables_per_word = syllable_count / word_count

        score = 206.835 - (1.015 * avg_sentence_len) - (84.6 * avg_syllables_per_word)
        return round(max(0.0, min(100.0, score)), 2)

    @staticmethod
    def classify_images(images: List[Dict[str, Any]]) -> ImageStats:
        without_alt = [img for img in images if img.get("alt") is None or not img["alt"].strip()]
        empty_alt = [img for img in images if img.get("alt") == ""]
        lazy = [img for img in images if img.get("loading") == "lazy"]
        oversized = [
            img for img in images
            if (img.get("renderedWidth") or 0) > 0
            and (img.get("naturalWidth") or 0) > 2 * img["renderedWidth"]
        ]
        return ImageStats(
            total=len(images),
            without_alt=len(without_alt),
            with_empty_alt=len(empty_alt),
            lazy_loaded=len(lazy),
            oversized=len(oversized),
        )

    @staticmethod
    def classify_links(links: List[Dict[str, Any]], page_url: str, failed_urls: Optional[set] = None) -> LinkStats:
        failed_urls = failed_urls or set()
        internal = external = nofollow = empty = broken = 0

        for link in links:
            href = link.get("href") or ""
            if (href.startswith("/") and not href.startswith("//")) or page_url in href:
                internal += 1
            elif href.startswith("http"):
                external += 1
            if "nofollow" in (link.get("rel") or ""):
                nofollow += 1
            if not (link.get("text") or "").strip():
                empty += 1
            if link.get("absolute") in failed_urls:
                broken += 1

        return LinkStats(
            total=len(links),
            internal=internal,
            external=external,
            broken=broken,
            nofollow=nofollow,
            empty=empty,
        )

    @staticmethod
    def find_placeholder_links(links: List[Dict[str, Any]]) -> List[PlaceholderLink]:
        placeholders = []
        for link in links:
            href = (link.get("href") or "").strip()
            host = (urlparse(href).hostname or "") if href.startswith(("http://", "https://", "//")) else ""
            is_placeholder_host = any(
                host == h or host.endswith("." + h) for h in ExtractorService.PLACEHOLDER_HOSTS
            )
            if href.lower() in ExtractorService.PLACEHOLDER_HREFS or is_placeholder_host:
                placeholders.append(PlaceholderLink(href=href, text=(link.get("text") or "").strip()))
        return placeholders

    @staticmethod
    def has_suspicious_testimonials(texts: Iterable[str]) -> bool:
        for text in texts:
            lowered = text.lower()
            if any(marker in lowered for marker in ExtractorService.SUSPICIOUS_TESTIMONIAL_MARKERS):
                return True
        return False

    @staticmethod
    def parse_structured_data(json_ld_blocks: Iterable[str], itemtypes: Iterable[str] = ()) -> StructuredData:
        types: List[str] = []
        errors: List[str] = []

        def collect_types(node: Any) -> None:
            if isinstance(node, list):
                for item in node:
                    collect_types(item)
            elif isinstance(node, dict):
                node_type = node.get("@type")
                for t in (node_type if isinstance(node_type, list) else [node_type]):
                    if isinstance(t, str) and t not in types:
                        types.append(t)
                if "@graph" in node:
                    collect_types(node["@graph"])

        block_count = 0
        for index, block in enumerate(json_ld_blocks, start=1):
            if not block.strip():
                continue
            block_count += 1
            try:
                collect_types(json.loads(block))
            except json.JSONDecodeError as e:
                errors.append(f"JSON-LD block {index} is not valid JSON: {e.msg}")

        for itemtype in itemtypes:
            name = itemtype.rstrip("/").rsplit("/", 1)[-1] if itemtype else ""
            if name and name not in types:
                types.append(name)

        return StructuredData(
            has_structured_data=bool(block_count or types),
            types=types,
            errors=errors,
        )

    @staticmethod
    async def extract_content(session: PageSession, url: str, page_text: str) -> ContentAnalysis:
        images = await session.evaluate(page_scripts.IMAGES_SCRIPT) or []
        links = await session.evaluate(page_scripts.LINKS_SCRIPT) or []
        json_ld = await session.query_all_text('script[type="application/ld+json"]')
        itemtype_rows = await session.query_all_attributes("[itemtype]", ["itemtype"])
        testimonial_texts = await session.evaluate(page_scripts.TESTIMONIALS_SCRIPT) or []

        return ContentAnalysis(
            word_count=len(page_text.split()),
            readability_score=ExtractorService.calculate_readability(page_text),
            images=ExtractorService.classify_images(images),
            links=ExtractorService.classify_links(links, session.url or url, session.network.failed_urls),
            structured_data=ExtractorService.parse_structured_data(
                json_ld, [row.get("itemtype") or "" for row in itemtype_rows]
            ),
            placeholder_links=ExtractorService.find_placeholder_links(links),
            has_suspicious_testimonials=ExtractorService.has_suspicious_testimonials(testimonial_texts),
        )

    # ─────────────────────────────────────────────
    # Performance
    # ─────────────────────────────────────────────

    @staticmethod
    def calculate_performance_score(load_time_ms: float) -> int:
        """
        Calculate performance score (0-100) based on load time.
        <= 500ms = 100
        >= 10s = 0
        Linear interpolation in between.
        """
        if load_time_ms <= 500:
            return 100
        if load_time_ms >= 10000:
            return 0

        score = 100 * (10000 - load_time_ms) / 9500
        return int(max(0, min(100, score)))

    @staticmethod
    def build_opportunities(resources: ResourceBreakdown, images: Optional[ImageStats] = None) -> List[Opportunity]:
        opportunities = []

        if resources.javascript.blocking:
            opportunities.append(Opportunity(
                title="Eliminate render-blocking scripts",
                description=f"{resources.javascript.blocking} scripts in <head> block rendering. Add async or defer.",
                savings=150 * resources.javascript.blocking,
                type="time",
            ))

        if resources.css.blocking:
            opportunities.append(Opportunity(
                title="Reduce render-blocking stylesheets",
                description=f"{resources.css.blocking} stylesheets block first paint. Inline critical CSS and load the rest later.",
                savings=100 * resources.css.blocking,
                type="time",
            ))

        if resources.images.total_size > ExtractorService.LARGE_IMAGE_BUDGET_BYTES:
            opportunities.append(Opportunity(
                title="Properly size and compress images",
                description=f"Images weigh {resources.images.total_size // 1024} KB in total. Serve modern formats at display size.",
                savings=resources.images.total_size - ExtractorService.LARGE_IMAGE_BUDGET_BYTES,
                type="bytes",
            ))

        if images is not None:
            eager = images.total - images.lazy_loaded - ExtractorService.EAGER_IMAGE_ALLOWANCE
            if eager > 0 and resources.images.total:
                average = resources.images.total_size / resources.images.total
                opportunities.append(Opportunity(
                    title="Defer offscreen images",
                    description=f"{eager} images load eagerly. Add loading=\"lazy\" to images below the fold.",
                    savings=round(average * eager),
                    type="bytes",
                ))

        return opportunities

    @staticmethod
    async def extract_performance(session: PageSession, timing: Dict[str, Any], images: Optional[ImageStats] = None) -> PerformanceAnalysis:
        raw = await session.evaluate(page_scripts.RESOURCES_SCRIPT) or {}

        resources = ResourceBreakdown(
            javascript=ScriptResources(**(raw.get("javascript") or {})),
            css=ScriptResources(**(raw.get("css") or {})),
            images=ImageResources(
                total=(raw.get("images") or {}).get("total", 0),
                unoptimized=(raw.get("images") or {}).get("unoptimized", 0),
                total_size=int((raw.get("images") or {}).get("totalSize", 0)),
            ),
        )

        load_time = timing.get("loadTime") or 0
        return PerformanceAnalysis(
            overall_score=ExtractorService.calculate_performance_score(load_time),
            metrics=PerformanceMetrics(
                first_contentful_paint=timing.get("firstContentfulPaint") or 0,
                largest_contentful_paint=timing.get("largestContentfulPaint") or 0,
                first_input_delay=0,
                cumulative_layout_shift=timing.get("cumulativeLayoutShift") or 0,
                speed_index=load_time,
                time_to_interactive=timing.get("timeToInteractive") or 0,
            ),
            opportunities=ExtractorService.build_opportunities(resources, images),
            resources=resources,
        )

    # ─────────────────────────────────────────────
    # Screenshots
    # ─────────────────────────────────────────────

    @staticmethod
    def to_data_url(image: Optional[bytes]) -> Optional[str]:
        if image is None:
            return None
        return f"data:image/png;base64,{base64.b64encode(image).decode('ascii')}"

    @staticmethod
    async def capture_screenshots(session: PageSession) -> Screenshots:
        """Desktop full-page capture, then mobile viewport capture; one shared timestamp."""
        timestamp = datetime.now(timezone.utc).isoformat()

        desktop = await session.screenshot(full_page=True)
        await session.set_viewport(settings.MOBILE_VIEWPORT_WIDTH, settings.MOBILE_VIEWPORT_HEIGHT)
        mobile = await session.screenshot(full_page=True)

        return Screenshots(
            desktop=ExtractorService.to_data_url(desktop),
            mobile=ExtractorService.to_data_url(mobile),
            timestamp=timestamp,
        )
