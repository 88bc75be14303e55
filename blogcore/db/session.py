# blogcore/db/session.py
from typing import AsyncGenerator, Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from blogcore.config import settings

# ---------------------------------------------------------------------
# ENV
# ---------------------------------------------------------------------
DATABASE_URL = settings.DATABASE_URL


# ---------------------------------------------------------------------
# ENGINE
# ---------------------------------------------------------------------
def build_engine(url: str = DATABASE_URL, *, echo: bool = settings.SQL_ECHO) -> AsyncEngine:
    engine_kwargs = dict(
        echo=echo,
        future=True,
        pool_pre_ping=True,
    )
    # pgbouncer in front of Postgres: leave pooling to the bouncer
    if "pooler.supabase.com" in url or url.startswith("sqlite"):
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs["pool_recycle"] = settings.DB_POOL_RECYCLE
    return create_async_engine(url, **engine_kwargs)


engine = build_engine()


# ---------------------------------------------------------------------
# SESSION FACTORY
# ---------------------------------------------------------------------
def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


AsyncSessionLocal = build_sessionmaker(engine)


# ---------------------------------------------------------------------
# DEPENDENCY
# ---------------------------------------------------------------------
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


SessionDep = Annotated[AsyncSession, Depends(get_session)]


# ---------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------
async def create_db_and_tables(bind: AsyncEngine = engine) -> None:
    # table classes must be registered on the metadata first
    from blogcore.db import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_engine(bind: AsyncEngine = engine) -> None:
    await bind.dispose()
