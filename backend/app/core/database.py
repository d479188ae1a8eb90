from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator, Optional
import asyncio

from app.core.config import settings
from app.core.logging_config import logger

# Create base class for models (can be defined before engine)
Base = declarative_base()

# Lazy engine initialization - create on first use to avoid import-time issues
_engine: Optional[AsyncEngine] = None
_async_session_local: Optional[async_sessionmaker[AsyncSession]] = None


def get_database_url() -> str:
    """Get properly formatted database URL"""
    db_url = settings.SQLALCHEMY_DATABASE_URL
    if db_url.startswith("postgresql://"):
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://")
    return db_url


def get_engine() -> AsyncEngine:
    """
    Get or create the database engine (lazy initialization).

    Connection pooling strategy:
    - SQLite: NullPool (tests and local experiments)
    - Everything else: bounded pool of DB_POOL_SIZE connections, callers
      wait up to DB_POOL_TIMEOUT seconds for a free one
    """
    global _engine
    if _engine is None:
        db_url = get_database_url()

        if "sqlite" in db_url:
            _engine = create_async_engine(
                db_url,
                echo=settings.DB_ECHO,
                connect_args={"check_same_thread": False},
                poolclass=NullPool,
            )
        else:
            _engine = create_async_engine(
                db_url,
                echo=settings.DB_ECHO,
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_pre_ping=True,  # Verify connections before use
            )
    return _engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory (lazy initialization)"""
    global _async_session_local
    if _async_session_local is None:
        _async_session_local = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False
        )
    return _async_session_local


def AsyncSessionLocal():
    """Create a new async session"""
    return get_session_local()()


# Dependency to get DB session
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get database session - only commits if there are pending changes"""
    session_factory = get_session_local()
    async with session_factory() as session:
        try:
            yield session
            # Only commit if there are pending changes (new, dirty, or deleted objects)
            if session.new or session.dirty or session.deleted:
                await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def ping_database() -> None:
    """Run a trivial query, raising on any connectivity problem"""
    eng = get_engine()
    async with eng.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def check_database_connection(
    max_retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
    timeout: Optional[float] = None,
) -> bool:
    """
    Probe the database at startup.

    Tries up to ``max_retries`` times, waiting ``retry_delay`` seconds between
    attempts, each attempt bounded by ``timeout`` seconds. Returns False
    instead of raising so the service can still come up and report the
    outage through /health.
    """
    max_retries = max_retries or settings.DB_CONNECT_RETRIES
    retry_delay = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay
    timeout = timeout or settings.DB_CONNECT_TIMEOUT

    for attempt in range(1, max_retries + 1):
        try:
            await asyncio.wait_for(ping_database(), timeout=timeout)
            logger.info(f"[Database] Connection established (attempt {attempt}/{max_retries})")
            return True
        except Exception as e:
            logger.warning(
                f"[Database] Connection attempt {attempt}/{max_retries} failed: {type(e).__name__}: {e}"
            )
            if attempt < max_retries:
                await asyncio.sleep(retry_delay)

    logger.error(f"[Database] Could not connect after {max_retries} attempts")
    return False


# Database initialization
async def init_db():
    """Create any missing tables"""
    import app.models  # noqa: F401 - register models on the metadata

    eng = get_engine()
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db():
    """Close database connection"""
    global _engine, _async_session_local
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _async_session_local = None
