from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.features.audit.schemas.audit import AuditFilters, AuditResult, AuditSummary
from app.features.audit.services.storage.base import AuditStorage, as_utc
from app.platform.db.base import new_id
from app.platform.logger import get_logger

logger = get_logger(__name__)


class InMemoryAuditStorage(AuditStorage):
    """Process-local storage; contents are lost on restart."""

    def __init__(self):
        self._audits: Dict[str, AuditResult] = {}

    async def save_audit(self, audit: AuditResult) -> str:
        audit_id = new_id()
        now = datetime.now(timezone.utc)
        self._audits[audit_id] = audit.model_copy(update={
            "id": audit_id,
            "created_at": now,
            "updated_at": now,
            "status": audit.status or "completed",
        }, deep=True)
        logger.info(
            f"Saved audit {audit_id} for {audit.url} "
            f"(deep analysis: {'yes' if audit.llm_analysis else 'no'})"
        )
        return audit_id

    async def get_audit(self, audit_id: str) -> Optional[AuditResult]:
        audit = self._audits.get(audit_id)
        # Callers get their own copy; the stored record never changes
        return audit.model_copy(deep=True) if audit else None

    async def list_audits(self, filters: Optional[AuditFilters] = None) -> List[AuditSummary]:
        filters = filters or AuditFilters()
        audits = list(self._audits.values())

        if filters.url:
            needle = filters.url.lower()
            audits = [a for a in audits if needle in a.url.lower()]
        if filters.min_score is not None:
            audits = [a for a in audits if a.overall_score >= filters.min_score]
        if filters.user_id:
            audits = [a for a in audits if a.user_id == filters.user_id]
        if filters.date_from:
            date_from = as_utc(filters.date_from)
            audits = [a for a in audits if a.created_at >= date_from]
        if filters.date_to:
            date_to = as_utc(filters.date_to)
            audits = [a for a in audits if a.created_at <= date_to]

        audits.sort(key=lambda a: (a.created_at, a.id), reverse=True)
        return [
            AuditSummary(
                id=a.id,
                url=a.url,
                score=a.overall_score,
                created_at=a.created_at,
                status=a.status or "completed",
                user_id=a.user_id,
            )
            for a in audits
        ]

    async def delete_audit(self, audit_id: str) -> bool:
        deleted = self._audits.pop(audit_id, None) is not None
        if deleted:
            logger.info(f"Deleted audit {audit_id}")
        return deleted
