from typing import Annotated
from fastapi import Depends, Request

from blogcore.db.session import SessionDep

from .cache import CategoryCache
from .service import CategoryService


def get_category_cache(request: Request) -> CategoryCache:
    """The process-wide cache created in the lifespan."""
    return request.app.state.category_cache


CategoryCacheDep = Annotated[CategoryCache, Depends(get_category_cache)]


async def get_category_service(session: SessionDep, cache: CategoryCacheDep) -> CategoryService:
    return CategoryService(session, cache)


CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
