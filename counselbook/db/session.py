# counselbook/db/session.py
import os
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import create_engine as create_sync_engine
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from counselbook.core.config import get_settings
from counselbook.db.base import Base

settings = get_settings()

IS_TEST = "PYTEST_CURRENT_TEST" in os.environ or "PYTEST_VERSION" in os.environ

# Async driver -> sync driver used for schema DDL outside the event loop.
_SYNC_DRIVERS = {
    "postgresql+asyncpg": "postgresql",
    "sqlite+aiosqlite": "sqlite",
}


def _engine_options(db_url: str) -> dict[str, Any]:
    """
    Engine keyword arguments for the booking store.

    - SQLite gets a busy timeout: conflicting claims and publishes queue on
      the database write lock instead of failing with "database is locked".
    - Under pytest, connections are not pooled, since the TestClient and
      pytest-asyncio each run their own event loop.
    """
    options: dict[str, Any] = {"echo": False}
    if make_url(db_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS}
    if IS_TEST:
        options["poolclass"] = NullPool
    return options


engine = create_async_engine(settings.DB_URL, **_engine_options(settings.DB_URL))

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    class_=AsyncSession,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per HTTP request.

    Stores and engines built from this session commit or roll back their
    own work; the session is closed when the request finishes.
    """
    async with AsyncSessionLocal() as session:
        yield session


async def init_db_for_startup() -> None:
    """
    Create the slot, request and people tables if they are missing.

    Existing rows are left alone.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _build_sync_db_url(async_url: str) -> str:
    """
    Map the configured async URL onto its synchronous driver, e.g.
    `sqlite+aiosqlite:///x.db` -> `sqlite:///x.db`. Other URLs pass through.
    """
    url = make_url(async_url)
    sync_driver = _SYNC_DRIVERS.get(url.drivername)
    if sync_driver is None:
        return async_url
    return url.set(drivername=sync_driver).render_as_string(hide_password=False)


def reset_schema_sync() -> None:
    """
    Drop and recreate every table through a synchronous engine.

    The test fixtures call this before each test, outside any event loop.
    """
    sync_engine = create_sync_engine(_build_sync_db_url(settings.DB_URL))
    try:
        with sync_engine.begin() as conn:
            Base.metadata.drop_all(bind=conn)
            Base.metadata.create_all(bind=conn)
    finally:
        sync_engine.dispose()
