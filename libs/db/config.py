from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from libs.common.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Create the async engine on first use so importing this module never
    opens a connection (tests run against the in-memory store).
    """
    settings = get_settings()
    # echo=True for local dev to see SQL queries
    return create_async_engine(
        settings.DATABASE_URL,
        echo=(settings.ENVIRONMENT == "local"),
        future=True,
        pool_pre_ping=True,  # Test connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(), class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
