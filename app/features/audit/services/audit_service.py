"""
Audit Orchestrator

validate URL -> extract -> derive issues -> score -> assemble AuditResult
-> deep analysis (when requested) -> save.

Invalid URLs are rejected before the browser is touched. Navigation failures
propagate as NavigationError; nothing is stored for a failed audit.
"""
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError

from app.features.audit.schemas.audit import (
    AuditFilters,
    AuditOptions,
    AuditResult,
    AuditSummary,
)
from app.features.audit.services.analysis.issue_rules import analyze_issues_and_recommendations
from app.features.audit.services.analysis.scoring import (
    calculate_category_scores,
    calculate_overall_score,
)
from app.features.audit.services.browser.page_session import PageSession
from app.features.audit.services.deep_analysis.base import DeepAnalyzer
from app.features.audit.services.deep_analysis.factory import get_deep_analyzer
from app.features.audit.services.extraction.extractor_service import ExtractionResult, ExtractorService
from app.features.audit.services.storage.base import AuditStorage
from app.features.audit.services.storage.factory import get_audit_storage
from app.platform.browser import BrowserManager, get_browser_manager
from app.platform.exceptions import AuditNotFoundError, BrowserUnavailableError, InvalidURLError
from app.platform.logger import get_logger
from app.platform.utils.url_validator import validate_url

logger = get_logger(__name__)


@dataclass
class AuditOutcome:
    audit_id: str
    processing_time: int
    audit: AuditResult


class AuditService:

    def __init__(
        self,
        storage: AuditStorage,
        browser_manager: BrowserManager,
        deep_analyzer: DeepAnalyzer,
        extractor: type = ExtractorService,
    ):
        self.storage = storage
        self.browser_manager = browser_manager
        self.deep_analyzer = deep_analyzer
        self.extractor = extractor

    async def _extract(self, url: str, options: AuditOptions) -> ExtractionResult:
        try:
            async with self.browser_manager.new_context() as context:
                page = await context.new_page()
                session = PageSession(page)
                return await self.extractor.collect(session, url, options)
        except PlaywrightError as e:
            reason = str(e).splitlines()[0] if str(e) else type(e).__name__
            logger.error(f"Browser failure while auditing {url}: {reason}")
            raise BrowserUnavailableError(reason) from e

    @staticmethod
    def assemble(url: str, extraction: ExtractionResult, user_id: Optional[str] = None) -> AuditResult:
        """Derive issues, score them and build the immutable audit record."""
        issues, recommendations = analyze_issues_and_recommendations(
            extraction.seo, extraction.technical, extraction.content, extraction.performance
        )
        categories = calculate_category_scores(issues)

        return AuditResult(
            url=url,
            user_id=user_id,
            timestamp=datetime.now(timezone.utc),
            overall_score=calculate_overall_score(categories),
            categories=categories,
            seo=extraction.seo,
            technical=extraction.technical,
            content=extraction.content,
            performance=extraction.performance,
            screenshots=extraction.screenshots,
            recommendations=recommendations,
            issues=issues,
        )

    async def audit(self, url: str, options: Optional[AuditOptions] = None, user_id: Optional[str] = None) -> AuditOutcome:
        """
        Run the full pipeline and store the result.

        Raises:
            InvalidURLError: url is not an absolute http(s) URL
            NavigationError: the page could not be loaded
            BrowserUnavailableError: Chromium could not be launched or opened no page
        """
        options = options or AuditOptions()
        is_valid, cleaned_url, error = validate_url(url)
        if not is_valid:
            raise InvalidURLError(f"Invalid URL: {error}")

        started = time.perf_counter()
        logger.info(f"Starting audit for {cleaned_url} (deep_scan={options.deep_scan})")

        extraction = await self._extract(cleaned_url, options)
        audit = self.assemble(cleaned_url, extraction, user_id)

        if options.deep_scan:
            analysis = await self.deep_analyzer.analyze(audit, extraction.page_text)
            audit = audit.model_copy(update={"llm_analysis": analysis})

        processing_time = int((time.perf_counter() - started) * 1000)
        audit = audit.model_copy(update={"processing_time": processing_time})

        audit_id = await self.storage.save_audit(audit)
        stored = await self.storage.get_audit(audit_id) or audit

        logger.info(
            f"Audit {audit_id} for {cleaned_url} completed in {processing_time}ms: "
            f"score {audit.overall_score}, {len(audit.issues)} issues"
        )
        return AuditOutcome(audit_id=audit_id, processing_time=processing_time, audit=stored)

    async def run_audit(self, url: str, options: Optional[AuditOptions] = None, user_id: Optional[str] = None) -> str:
        outcome = await self.audit(url, options, user_id)
        return outcome.audit_id

    async def get_audit_result(self, audit_id: str) -> Optional[AuditResult]:
        return await self.storage.get_audit(audit_id)

    async def require_audit(self, audit_id: str) -> AuditResult:
        audit = await self.storage.get_audit(audit_id)
        if audit is None:
            raise AuditNotFoundError(audit_id)
        return audit

    async def get_user_audits(self, user_id: str) -> List[AuditSummary]:
        return await self.storage.list_audits(AuditFilters(user_id=user_id))

    async def search_audits(self, query: str) -> List[AuditSummary]:
        return await self.storage.list_audits(AuditFilters(url=query))

    async def list_audits(self, filters: Optional[AuditFilters] = None) -> List[AuditSummary]:
        return await self.storage.list_audits(filters)

    async def delete_audit(self, audit_id: str) -> bool:
        return await self.storage.delete_audit(audit_id)


def get_audit_service() -> AuditService:
    """FastAPI dependency wiring the shared collaborators."""
    return AuditService(
        storage=get_audit_storage(),
        browser_manager=get_browser_manager(),
        deep_analyzer=get_deep_analyzer(),
    )
