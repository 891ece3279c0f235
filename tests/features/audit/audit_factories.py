"""
Builders shared by the audit tests.

``make_clean_signals`` describes a well-built page that should produce no
issues; ``make_bare_signals`` a page with nothing in its head, no H1, no SSL
and a slow load. ``FakePageSession`` stands in for the Playwright-backed
session.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

from app.features.audit.schemas.audit import AuditResult
from app.features.audit.schemas.signals import (
    ContentAnalysis,
    HeadingStructure,
    ImageStats,
    LinkStats,
    MetaDescriptionSignal,
    MobileOptimization,
    OpenGraphSignal,
    PerformanceAnalysis,
    SecuritySummary,
    SEOAnalysis,
    TechnicalAnalysis,
    TitleSignal,
)
from app.features.audit.services.analysis.issue_rules import analyze_issues_and_recommendations
from app.features.audit.services.analysis.scoring import calculate_category_scores, calculate_overall_score
from app.features.audit.services.browser.page_session import NetworkLog
from app.features.audit.services.extraction import page_scripts

CLEAN_TITLE = "Handmade Ceramic Mugs and Bowls | Clay Studio"  # 45 characters
CLEAN_DESCRIPTION = (
    "Shop handmade ceramic mugs, bowls and plates thrown in our studio. "
    "Small batches, food safe glazes and free shipping on orders over $50 USD."
)  # 140 characters


def make_clean_signals() -> Dict[str, Any]:
    return {
        "seo": SEOAnalysis(
            title=TitleSignal(content=CLEAN_TITLE, length=len(CLEAN_TITLE), is_optimal=True),
            meta_description=MetaDescriptionSignal(
                content=CLEAN_DESCRIPTION, length=len(CLEAN_DESCRIPTION), is_optimal=True
            ),
            viewport="width=device-width, initial-scale=1",
            canonical="https://claystudio.test/",
            open_graph=OpenGraphSignal(
                title="Clay Studio",
                description="Handmade ceramics",
                image="https://claystudio.test/og.png",
                url="https://claystudio.test/",
                type="website",
            ),
            heading_structure=HeadingStructure(h1=["Handmade ceramics"], h2=["Mugs", "Bowls"]),
        ),
        "technical": TechnicalAnalysis(
            load_time=800,
            mobile_optimization=MobileOptimization(has_viewport=True, is_responsive=True),
            security=SecuritySummary(has_ssl=True),
        ),
        "content": ContentAnalysis(
            word_count=650,
            readability_score=62.5,
            images=ImageStats(total=4),
            links=LinkStats(total=12, internal=10, external=2),
        ),
        "performance": PerformanceAnalysis(overall_score=96),
    }


def make_bare_signals() -> Dict[str, Any]:
    return {
        "seo": SEOAnalysis(),
        "technical": TechnicalAnalysis(load_time=5000),
        "content": ContentAnalysis(word_count=40),
        "performance": PerformanceAnalysis(overall_score=47),
    }


def build_audit(url: str = "https://claystudio.test/", **signals) -> AuditResult:
    issues, recommendations = analyze_issues_and_recommendations(
        signals["seo"], signals["technical"], signals["content"], signals["performance"]
    )
    categories = calculate_category_scores(issues)
    return AuditResult(
        url=url,
        timestamp=datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc),
        overall_score=calculate_overall_score(categories),
        categories=categories,
        issues=issues,
        recommendations=recommendations,
        **signals,
    )


class FakePageSession:
    """
    Scripted PageSession: head lookups come from ``attributes`` keyed by
    (selector, attribute), in-page scripts from ``scripts`` keyed by the
    page_scripts constant name.
    """

    def __init__(
        self,
        url: str = "https://claystudio.test/",
        title: Optional[str] = None,
        attributes: Optional[Dict[tuple, str]] = None,
        present: Optional[set] = None,
        texts: Optional[Dict[str, List[str]]] = None,
        rows: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        scripts: Optional[Dict[str, Any]] = None,
        headings: Optional[List[Dict[str, str]]] = None,
        navigation_error: Optional[Exception] = None,
    ):
        self._url = url
        self._title = title
        self.attributes = attributes or {}
        self.present = present or set()
        self.texts = texts or {}
        self.rows = rows or {}
        self.scripts = scripts or {}
        self.headings = headings or []
        self.navigation_error = navigation_error
        self.network = NetworkLog()
        self.calls: List[str] = []
        self.viewport = (1920, 1080)
        self.screenshot_viewports: List[tuple] = []

    @property
    def url(self) -> str:
        return self._url

    async def navigate(self, url: str, wait_until: str = "networkidle", timeout_ms: int = 30000) -> None:
        self.calls.append(f"navigate:{wait_until}:{timeout_ms}")
        if self.navigation_error:
            raise self.navigation_error

    async def wait_for_body(self, timeout_ms: int) -> None:
        self.calls.append("wait_for_body")

    async def title(self) -> Optional[str]:
        self.calls.append("title")
        return self._title

    async def query_attribute(self, selector: str, attribute: str) -> Optional[str]:
        return self.attributes.get((selector, attribute))

    async def exists(self, selector: str) -> bool:
        return selector in self.present

    async def query_all_text(self, selector: str) -> List[str]:
        return list(self.texts.get(selector, []))

    async def query_all_attributes(self, selector: str, attributes) -> List[Dict[str, Any]]:
        return list(self.rows.get(selector, []))

    async def evaluate(self, script: str, arg: Any = None) -> Optional[Any]:
        for name in dir(page_scripts):
            if name.endswith("_SCRIPT") and getattr(page_scripts, name) == script:
                self.calls.append(f"evaluate:{name}")
                return self.scripts.get(name)
        if "h1, h2, h3, h4, h5, h6" in script:
            return self.headings
        return None

    async def set_viewport(self, width: int, height: int) -> None:
        self.calls.append(f"set_viewport:{width}x{height}")
        self.viewport = (width, height)

    async def screenshot(self, full_page: bool = True) -> bytes:
        self.calls.append("screenshot")
        self.screenshot_viewports.append(self.viewport)
        return b"\x89PNG" + str(self.viewport).encode()


class FakeBrowserManager:
    def __init__(self, launch_error: Optional[Exception] = None):
        self.launch_error = launch_error
        self.contexts_opened = 0
        self.contexts_closed = 0

    @asynccontextmanager
    async def new_context(self):
        if self.launch_error:
            raise self.launch_error
        self.contexts_opened += 1
        context = MagicMock()
        context.new_page = AsyncMock(return_value=MagicMock())
        try:
            yield context
        finally:
            self.contexts_closed += 1
