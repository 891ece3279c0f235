from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.platform.config import settings


def build_engine(database_url: str):
    engine_kwargs = {
        "echo": False,
        "future": True,
        "pool_pre_ping": True,
    }
    # SQLite drivers manage their own pool; sizing options only apply to server databases
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_recycle=1800,
            pool_size=20,
            max_overflow=30,  # (burst capacity)
            pool_timeout=30,
        )
    return create_async_engine(database_url, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False, autocommit=False)


async def init_models() -> None:
    """Create tables that do not exist yet (used for the SQLite/dev setup)."""
    from app.platform.db.base import Base
    from app.features.audit.models import audit_record  # noqa: F401  (registers the table)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
