"""Async database engine, session factory and declarative base"""

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator, Optional
from billing.config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": settings.DEBUG, "future": True}
    if url.startswith("sqlite"):
        # aiosqlite connections are handed between threads by the pool
        kwargs["connect_args"] = {"check_same_thread": False}
    return kwargs


engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)

Base = declarative_base()


async def init_models(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables on the given engine (demo-friendly, migrations live in alembic/)."""
    # Registers every table on Base.metadata
    from billing.models import db_models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session (dependency for FastAPI)"""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
