"""Database session management."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from student_tracker.config import get_settings
from student_tracker.db.base import Base

settings = get_settings()

engine_kwargs: dict = {"echo": settings.debug}
if settings.database_url.startswith("postgresql"):
    engine_kwargs.update(pool_pre_ping=True, pool_size=5, max_overflow=10)
    if settings.database_requires_ssl:
        engine_kwargs["connect_args"] = {"ssl": "require"}

# Create async engine
engine = create_async_engine(settings.database_url, **engine_kwargs)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create all tables. Used for local development and tests."""
    from student_tracker.db import models  # noqa: F401 - Import models to register them

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
