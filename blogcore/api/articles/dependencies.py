from typing import Annotated
from fastapi import Depends

from blogcore.api.categories.dependencies import CategoryServiceDep
from blogcore.db.session import SessionDep

from .service import ArticleService


async def get_article_service(session: SessionDep, categories: CategoryServiceDep) -> ArticleService:
    """ArticleService reading category metadata through the shared cache"""
    return ArticleService(session, categories)


ArticleServiceDep = Annotated[ArticleService, Depends(get_article_service)]
