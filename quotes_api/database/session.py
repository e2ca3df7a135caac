"""
Database Session Management

Async SQLAlchemy engine + AsyncSession for request handlers, sync engine for
scripts (seeding, admin promotion). Alembic builds its own engine from
DATABASE_URL.

Usage (async - request handlers):
    from quotes_api.database.session import get_db
    async def handler(db: AsyncSession = Depends(get_db)): ...

Usage (sync - scripts):
    from quotes_api.database.session import get_session
    with get_session() as session:
        session.query(Quote).count()
"""

from contextlib import contextmanager
from typing import AsyncGenerator, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from quotes_api.core.config import get_settings


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str) -> dict:
    kwargs = {"pool_pre_ping": True, "echo": False}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=10, max_overflow=20)
    return kwargs


def build_async_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, **_engine_kwargs(url))


# ── Async engine (request handlers) ──
async_engine: AsyncEngine = build_async_engine(get_settings().async_database_url)

AsyncSessionLocal = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

# ── Sync engine (scripts), created on first use ──
_sync_engine: Optional[Engine] = None


def configure_engine(url: str) -> AsyncEngine:
    """Rebind the async engine and session factory (tests, alternate databases)."""
    global async_engine, AsyncSessionLocal
    async_engine = build_async_engine(url)
    AsyncSessionLocal = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    return async_engine


def get_sync_engine() -> Engine:
    global _sync_engine
    if _sync_engine is None:
        url = get_settings().database_url
        _sync_engine = create_engine(url, **_engine_kwargs(url))
    return _sync_engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Sync context manager for scripts."""
    session = sessionmaker(
        bind=get_sync_engine(),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Async FastAPI dependency: yields AsyncSession."""
    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_models() -> None:
    """Create tables (use Alembic in production)."""
    import quotes_api.database.models  # noqa: F401 - registers every model on Base

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
