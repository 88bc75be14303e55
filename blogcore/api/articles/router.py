# blogcore/api/articles/router.py
from typing import Literal, Optional
from fastapi import APIRouter, Query, status

from blogcore.api.analytics.dependencies import AnalyticsDep
from blogcore.api.analytics.models import BehaviorAction, BehaviorEvent
from blogcore.db.models import utcnow

from .dependencies import ArticleServiceDep
from .schemas import ArticleCreate, ArticleUpdate, build_filter, build_pagination

router = APIRouter(prefix="/articles", tags=["articles"])

Lang = Literal["en", "ar"]


# ------------------------------
# List
# ------------------------------
@router.get("", summary="List articles", description="Filtered listing with offset or cursor pagination. Bodies are omitted.")
async def list_articles(
    articles: ArticleServiceDep,
    category_id: Optional[str] = None,
    featured: Optional[bool] = None,
    published: bool = True,
    language: Optional[str] = "en",
    limit: int = 20,
    offset: int = 0,
    cursor: Optional[str] = None,
    sort_by: Optional[str] = "publishedAt",
    sort_order: Optional[str] = "desc",
):
    # validated here, before any query is built
    filt = build_filter(
        category_id=category_id, featured=featured, published=published, language=language
    )
    page = build_pagination(
        limit=limit, offset=offset, cursor=cursor, sort_by=sort_by, sort_order=sort_order
    )
    result = await articles.list_articles(filt, page)
    return {**result, "limit": page.limit, "offset": page.offset}


# ------------------------------
# Search
# ------------------------------
@router.get("/search", summary="Search published articles")
async def search_articles(
    articles: ArticleServiceDep,
    q: str = Query(..., min_length=1),
    language: Lang = "en",
):
    items = await articles.search_articles(q, language)
    return {"items": items, "total": len(items)}


# ------------------------------
# Detail
# ------------------------------
@router.get("/id/{article_id}", summary="Article by id (admin editing)")
async def get_article_by_id(article_id: int, articles: ArticleServiceDep, language: Lang = "en"):
    return await articles.get_article_by_id(article_id, language)


@router.get("/{slug}", summary="Article by slug", description="Passing session_id also records a view.")
async def get_article_by_slug(
    slug: str,
    articles: ArticleServiceDep,
    analytics: AnalyticsDep,
    language: Lang = "en",
    session_id: Optional[str] = None,
):
    item = await articles.get_article_by_slug(slug, language)
    if session_id:
        analytics.track_behavior(
            BehaviorEvent(
                session_id=session_id,
                article_id=item["id"],
                action=BehaviorAction.VIEW,
                timestamp=utcnow(),
                metadata={"language": language},
            )
        )
    return item


# ------------------------------
# Admin writes
# ------------------------------
@router.post("", status_code=status.HTTP_201_CREATED, summary="Create article")
async def create_article(body: ArticleCreate, articles: ArticleServiceDep):
    return await articles.create_article(body)


@router.put("/{article_id}", summary="Update article")
async def update_article(article_id: int, body: ArticleUpdate, articles: ArticleServiceDep):
    return await articles.update_article(article_id, body)


@router.delete("/{article_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete article")
async def delete_article(article_id: int, articles: ArticleServiceDep):
    await articles.delete_article(article_id)
