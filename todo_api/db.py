import asyncio
import logging
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from .config import Settings, get_settings
from .models import Base

logger = logging.getLogger(__name__)


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database"""
    options = {
        "echo": settings.db_echo,
        "pool_pre_ping": True,  # Verify connections before use
    }

    if settings.is_sqlite:
        if ":memory:" in settings.database_url or settings.database_url.endswith("sqlite+aiosqlite://"):
            # Every session must see the same in-memory database
            options["poolclass"] = StaticPool
    else:
        options["pool_size"] = settings.db_pool_size
        options["max_overflow"] = settings.db_max_overflow
        options["pool_recycle"] = 300

    return create_async_engine(settings.database_url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


settings = get_settings()
engine = build_engine(settings)
AsyncSessionLocal = build_session_factory(engine)


async def create_schema(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db():
    """Initialize the database by creating all tables"""
    max_retries = max(settings.db_init_retries, 1)
    retry_delay = settings.db_init_retry_delay

    for attempt in range(max_retries):
        try:
            logger.info("Database connection attempt %d/%d", attempt + 1, max_retries)
            await create_schema(engine)
            logger.info("Database tables created successfully")
            return
        except Exception as e:
            logger.warning("Database connection attempt %d failed: %s", attempt + 1, e)
            if attempt < max_retries - 1:
                logger.info("Retrying in %d seconds...", retry_delay)
                await asyncio.sleep(retry_delay)
            else:
                logger.error("All database connection attempts failed")
                raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    async with AsyncSessionLocal() as session:
        yield session


async def close_db():
    """Close database connections"""
    await engine.dispose()
    logger.info("Database connections closed")
