from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.features.audit.models.audit_record import AuditRecord
from app.features.audit.schemas.audit import AuditFilters, AuditResult, AuditSummary
from app.features.audit.services.storage.base import AuditStorage, as_utc
from app.platform.db.base import new_id
from app.platform.logger import get_logger

logger = get_logger(__name__)

# Stored as columns rather than inside the JSON payload
RECORD_FIELDS = {"id", "user_id", "created_at", "updated_at", "status"}


class SqlAlchemyAuditStorage(AuditStorage):
    """Audits persisted in the ``audits`` table through an async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @staticmethod
    def _to_result(record: AuditRecord) -> AuditResult:
        return AuditResult.model_validate({
            **record.payload,
            "id": record.id,
            "user_id": record.user_id,
            "status": record.status,
            "created_at": as_utc(record.created_at),
            "updated_at": as_utc(record.updated_at),
        })

    async def save_audit(self, audit: AuditResult) -> str:
        now = datetime.now(timezone.utc)
        record = AuditRecord(
            id=new_id(),
            url=audit.url,
            user_id=audit.user_id,
            status=audit.status or "completed",
            overall_score=audit.overall_score,
            payload=audit.model_dump(mode="json", exclude=RECORD_FIELDS),
            created_at=now,
            updated_at=now,
        )
        async with self.session_factory() as db:
            db.add(record)
            await db.commit()

        logger.info(f"Saved audit {record.id} for {audit.url}")
        return record.id

    async def get_audit(self, audit_id: str) -> Optional[AuditResult]:
        async with self.session_factory() as db:
            result = await db.execute(select(AuditRecord).where(AuditRecord.id == audit_id))
            record = result.scalars().first()
        return self._to_result(record) if record else None

    async def list_audits(self, filters: Optional[AuditFilters] = None) -> List[AuditSummary]:
        filters = filters or AuditFilters()
        query = select(AuditRecord)

        if filters.url:
            query = query.where(AuditRecord.url.ilike(f"%{filters.url}%"))
        if filters.min_score is not None:
            query = query.where(AuditRecord.overall_score >= filters.min_score)
        if filters.user_id:
            query = query.where(AuditRecord.user_id == filters.user_id)
        if filters.date_from:
            query = query.where(AuditRecord.created_at >= as_utc(filters.date_from))
        if filters.date_to:
            query = query.where(AuditRecord.created_at <= as_utc(filters.date_to))

        query = query.order_by(AuditRecord.created_at.desc(), AuditRecord.id.desc())

        async with self.session_factory() as db:
            result = await db.execute(query)
            records = result.scalars().all()

        return [
            AuditSummary(
                id=r.id,
                url=r.url,
                score=r.overall_score,
                created_at=as_utc(r.created_at),
                status=r.status,
                user_id=r.user_id,
            )
            for r in records
        ]

    async def delete_audit(self, audit_id: str) -> bool:
        async with self.session_factory() as db:
            result = await db.execute(delete(AuditRecord).where(AuditRecord.id == audit_id))
            await db.commit()

        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted audit {audit_id}")
        return deleted
