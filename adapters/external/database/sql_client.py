from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from config.settings import settings


def get_sql_engine(url: str | None = None, *, pool_size: int | None = None) -> AsyncEngine:
    """
    Build the async engine for the row store (MySQL via aiomysql by default).

    The pool is the only shared resource on the query path; repositories
    check connections out per call.
    """
    url = url or settings.DATABASE_URL
    kwargs = {"pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = int(pool_size or settings.DB_POOL_SIZE)
        kwargs["pool_recycle"] = 3600
    return create_async_engine(url, **kwargs)
