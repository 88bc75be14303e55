# blogcore/api/health/router.py
import logging

from fastapi import APIRouter
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from blogcore.api.categories.dependencies import CategoryCacheDep
from blogcore.db.session import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/z")
async def healthz(db: SessionDep):
    try:
        await db.execute(select(1))
        return {"ok": True}
    except (SQLAlchemyError, OSError) as e:
        logger.warning("health check could not reach the database: %s", e)
        return {"ok": False, "error": str(e)}


@router.get("/cache")
async def cache_stats(cache: CategoryCacheDep):
    return cache.stats()
