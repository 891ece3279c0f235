from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from app.features.audit.schemas.audit import AuditFilters, AuditResult, AuditSummary


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so stored and filter values compare."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AuditStorage(ABC):
    """
    Persistence for completed audits.

    ``save_audit`` assigns id, created_at, updated_at and status (default
    ``completed``) on a copy of the audit; the caller's instance is untouched.
    ``list_audits`` returns summaries newest first.
    """

    @abstractmethod
    async def save_audit(self, audit: AuditResult) -> str:
        ...

    @abstractmethod
    async def get_audit(self, audit_id: str) -> Optional[AuditResult]:
        ...

    @abstractmethod
    async def list_audits(self, filters: Optional[AuditFilters] = None) -> List[AuditSummary]:
        ...

    @abstractmethod
    async def delete_audit(self, audit_id: str) -> bool:
        ...
