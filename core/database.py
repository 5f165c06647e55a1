"""
Database session management with SQLAlchemy async
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from core.config import settings
import logging

logger = logging.getLogger(__name__)


def build_engine(url: str = None, echo: bool = None) -> AsyncEngine:
    """Create an async engine for the catalog database"""
    return create_async_engine(
        url or settings.DATABASE_URL,
        echo=settings.ENVIRONMENT == "development" if echo is None else echo,
        poolclass=NullPool,
        future=True
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """Session factory shared by readers and writers"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def init_models(engine: AsyncEngine):
    """Create all catalog tables"""
    # Import models so every table is registered on the metadata
    import models  # noqa: F401
    from models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Catalog tables created")


engine = build_engine()

async_session_maker = build_session_maker(engine)
