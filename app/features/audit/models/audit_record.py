from sqlalchemy import JSON, Column, Index, Integer, String

from app.platform.db.base import BaseModel


class AuditRecord(BaseModel):
    """One stored audit. The full AuditResult lives in ``payload``; the
    filterable fields are duplicated into columns."""

    __tablename__ = "audits"

    url = Column(String(2048), nullable=False, index=True)
    user_id = Column(String, nullable=True, index=True)
    status = Column(String(20), nullable=False, default="completed")
    overall_score = Column(Integer, nullable=False, default=0)
    payload = Column(JSON, nullable=False)

    __table_args__ = (
        Index("ix_audits_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<AuditRecord(id={self.id}, url={self.url}, score={self.overall_score})>"
