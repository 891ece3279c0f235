from typing import Optional

from app.features.audit.services.storage.base import AuditStorage
from app.features.audit.services.storage.memory import InMemoryAuditStorage
from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)

_storage: Optional[AuditStorage] = None


def get_audit_storage() -> AuditStorage:
    """Process-wide storage backend selected by STORAGE_BACKEND."""
    global _storage
    if _storage is None:
        if settings.STORAGE_BACKEND == "database":
            from app.features.audit.services.storage.sqlalchemy_storage import SqlAlchemyAuditStorage
            from app.platform.db.session import SessionLocal

            _storage = SqlAlchemyAuditStorage(SessionLocal)
        else:
            _storage = InMemoryAuditStorage()
        logger.info(f"Using {type(_storage).__name__} for audit records")
    return _storage
