# blogcore/api/articles/service.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, asc, delete, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogcore.api.categories.service import CategoryService
from blogcore.db.models import Article, Category, utcnow
from blogcore.errors import NotFound, ValidationError, store_errors
from blogcore.i18n import project

from .cursor import Cursor, CursorResult, IgnoredCursor, decode_cursor, encode_cursor
from .schemas import ArticleCreate, ArticleFilter, ArticleUpdate, Pagination

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50

ARTICLE_TEXT_FIELDS = ("title", "excerpt", "meta_description")
REQUIRED_FIELDS = ("slug", "title_en", "content_en", "author_name", "published", "featured")

# ------------------------------------------------------------------------------ #
# Columns
# ------------------------------------------------------------------------------ #
# listings leave out the heavy bilingual body
LIST_COLUMNS = (
    Article.id,
    Article.slug,
    Article.title_en,
    Article.title_ar,
    Article.excerpt_en,
    Article.excerpt_ar,
    Article.meta_description_en,
    Article.meta_description_ar,
    Article.featured_image,
    Article.author_name,
    Article.author_image,
    Article.category_id,
    Article.published,
    Article.featured,
    Article.reading_time,
    Article.published_at,
    Article.created_at,
    Article.updated_at,
)
DETAIL_COLUMNS = LIST_COLUMNS + (Article.content_en, Article.content_ar)


# ------------------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------------------ #
def localize_article(
    row: Dict[str, Any], lang: Optional[str], *, include_content: bool = False
) -> Dict[str, Any]:
    fields = ARTICLE_TEXT_FIELDS + (("content",) if include_content else ())
    return project(row, fields, lang)


def _sort_key(sort_by: str):
    if sort_by == "publishedAt":
        # drafts have no published_at; they order by creation time instead
        return func.coalesce(Article.published_at, Article.created_at)
    if sort_by == "createdAt":
        return Article.created_at
    return Article.id


def _sort_value(row: Dict[str, Any], sort_by: str):
    if sort_by == "publishedAt":
        return row["published_at"] or row["created_at"]
    if sort_by == "createdAt":
        return row["created_at"]
    return row["id"]


def _order_by(sort_by: str, descending: bool) -> list:
    direction = desc if descending else asc
    if sort_by == "id":
        return [direction(Article.id)]
    # id breaks ties between equal timestamps
    return [direction(_sort_key(sort_by)), direction(Article.id)]


def _seek_condition(sort_by: str, descending: bool, cursor: Cursor):
    if sort_by == "id":
        return Article.id < cursor.id if descending else Article.id > cursor.id

    key = _sort_key(sort_by)
    if descending:
        return or_(key < cursor.value, and_(key == cursor.value, Article.id < cursor.id))
    return or_(key > cursor.value, and_(key == cursor.value, Article.id > cursor.id))


def _filter_conditions(filt: ArticleFilter) -> list:
    conds = []
    if filt.published is not None:
        conds.append(Article.published == filt.published)
    if filt.featured is not None:
        conds.append(Article.featured == filt.featured)
    if filt.category_id is not None:
        conds.append(Article.category_id == filt.category_id)
    return conds


# ------------------------------------------------------------------------------ #
# Service
# ------------------------------------------------------------------------------ #
class ArticleService:
    def __init__(self, session: AsyncSession, categories: CategoryService):
        self.session = session
        self.categories = categories

    async def _attach_categories(
        self, rows: Iterable[Dict[str, Any]], lang: Optional[str]
    ) -> List[Dict[str, Any]]:
        rows = list(rows)
        if not rows:
            return rows
        cats = await self.categories.category_map(lang)
        for r in rows:
            cid = r.get("category_id")
            r["category"] = cats.get(cid) if cid is not None else None
        return rows

    async def _verified_cursor(self, token: Optional[str], sort_by: str) -> Optional[CursorResult]:
        cursor = decode_cursor(token, sort_by)
        if not isinstance(cursor, Cursor) or sort_by == "id":
            return cursor

        # a cursor minted under the other timestamp key decodes fine; its row gives it away
        with store_errors("verify cursor"):
            row = (
                await self.session.execute(
                    select(Article.id, Article.published_at, Article.created_at).where(
                        Article.id == cursor.id
                    )
                )
            ).mappings().first()
        if row is not None and _sort_value(row, sort_by) != cursor.value:
            logger.warning(
                "Invalid cursor provided, ignoring: %s value does not match row %s", sort_by, cursor.id
            )
            return IgnoredCursor(reason=f"cursor does not match {sort_by} of row {cursor.id}")
        return cursor

    # ---------- list ----------
    async def list_articles(self, filt: ArticleFilter, page: Pagination) -> Dict[str, Any]:
        descending = page.sort_order == "desc"
        conds = _filter_conditions(filt)

        cursor = await self._verified_cursor(page.cursor, page.sort_by)
        seek = []
        if isinstance(cursor, Cursor):
            seek.append(_seek_condition(page.sort_by, descending, cursor))

        stmt = select(*LIST_COLUMNS)
        if conds or seek:
            stmt = stmt.where(and_(*conds, *seek))
        stmt = stmt.order_by(*_order_by(page.sort_by, descending)).limit(page.limit + 1)
        # an ignored cursor counts as no cursor, so offset mode takes over
        if not isinstance(cursor, Cursor):
            stmt = stmt.offset(page.offset)

        # the count sees the filter only, never the seek predicate
        count_stmt = select(func.count()).select_from(Article)
        if conds:
            count_stmt = count_stmt.where(and_(*conds))

        with store_errors("list articles"):
            rows = (await self.session.execute(stmt)).mappings().all()
            total = (await self.session.execute(count_stmt)).scalar_one()

        has_next = len(rows) > page.limit
        page_rows = [dict(r) for r in rows[: page.limit]]

        next_cursor = None
        if has_next and page_rows:
            last = page_rows[-1]
            next_cursor = encode_cursor(last["id"], page.sort_by, _sort_value(last, page.sort_by))

        page_rows = await self._attach_categories(page_rows, filt.language)
        return {
            "articles": [localize_article(r, filt.language) for r in page_rows],
            "total": int(total),
            "has_next": has_next,
            "next_cursor": next_cursor,
        }

    # ---------- detail ----------
    async def _get_one(self, where, lang: Optional[str]) -> Dict[str, Any]:
        with store_errors("get article"):
            row = (
                await self.session.execute(select(*DETAIL_COLUMNS).where(where).limit(1))
            ).mappings().first()
        if not row:
            raise NotFound("Article")
        rows = await self._attach_categories([dict(row)], lang)
        return localize_article(rows[0], lang, include_content=True)

    async def get_article_by_slug(self, slug: str, lang: Optional[str] = "en") -> Dict[str, Any]:
        return await self._get_one(Article.slug == slug, lang)

    async def get_article_by_id(self, article_id: int, lang: Optional[str] = "en") -> Dict[str, Any]:
        return await self._get_one(Article.id == article_id, lang)

    # ---------- search ----------
    async def search_articles(self, query: str, lang: Optional[str] = "en") -> List[Dict[str, Any]]:
        q = (query or "").strip()
        if not q:
            raise ValidationError("Search query required")
        like = f"%{q}%"

        stmt = (
            select(*DETAIL_COLUMNS)
            .select_from(Article)
            .outerjoin(Category, Category.id == Article.category_id)
            .where(
                Article.published.is_(True),
                or_(
                    Article.title_en.ilike(like),
                    Article.title_ar.ilike(like),
                    Article.content_en.ilike(like),
                    Article.content_ar.ilike(like),
                    Category.name_en.ilike(like),
                    Category.name_ar.ilike(like),
                ),
            )
            .order_by(*_order_by("publishedAt", True))
            .limit(SEARCH_LIMIT)
        )
        with store_errors("search articles"):
            rows = (await self.session.execute(stmt)).mappings().all()

        items = await self._attach_categories((dict(r) for r in rows), lang)
        return [localize_article(r, lang, include_content=True) for r in items]

    # ---------- recommendation inputs ----------
    async def recent_published(self, limit: int = 100) -> List[Dict[str, Any]]:
        stmt = (
            select(
                Article.id,
                Article.category_id,
                Article.reading_time,
                Article.published_at,
                Article.created_at,
            )
            .where(Article.published.is_(True))
            .order_by(*_order_by("publishedAt", True))
            .limit(limit)
        )
        with store_errors("load recommendation candidates"):
            rows = (await self.session.execute(stmt)).mappings().all()
        return [dict(r) for r in rows]

    async def category_ids_for(self, article_ids: Iterable[int]) -> Dict[int, Optional[int]]:
        ids = sorted(set(article_ids))
        if not ids:
            return {}
        with store_errors("load article categories"):
            rows = (
                await self.session.execute(
                    select(Article.id, Article.category_id).where(Article.id.in_(ids))
                )
            ).all()
        return {r.id: r.category_id for r in rows}

    # ---------- admin writes ----------
    async def _check_references(self, category_id: Optional[int]) -> None:
        if category_id is not None and not await self.categories.exists(category_id):
            raise ValidationError(f"category {category_id} does not exist")

    async def _ensure_slug_free(self, slug: str, *, exclude_id: Optional[int] = None) -> None:
        stmt = select(Article.id).where(Article.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Article.id != exclude_id)
        if (await self.session.execute(stmt)).first():
            raise ValidationError(f"article slug '{slug}' already exists")

    async def create_article(self, data: ArticleCreate) -> Dict[str, Any]:
        values = data.model_dump(exclude={"publish_now"})
        if data.publish_now:
            values["published"] = True
            values["published_at"] = utcnow()

        await self._check_references(values.get("category_id"))
        with store_errors("create article"):
            await self._ensure_slug_free(data.slug)
            row = Article(**values)
            self.session.add(row)
            await self.session.commit()
            await self.session.refresh(row)
        logger.info("article %s created (published=%s)", row.id, row.published)
        return await self.get_article_by_id(row.id)

    async def update_article(self, article_id: int, data: ArticleUpdate) -> Dict[str, Any]:
        changes = data.model_dump(exclude_unset=True, exclude={"publish_now"})
        if data.publish_now:
            changes["published"] = True
            changes["published_at"] = utcnow()
        changes["updated_at"] = utcnow()

        nulled = [k for k in REQUIRED_FIELDS if k in changes and changes[k] is None]
        if nulled:
            raise ValidationError(f"fields cannot be null: {', '.join(nulled)}")
        if "category_id" in changes:
            await self._check_references(changes["category_id"])
        with store_errors("update article"):
            row = (
                await self.session.execute(select(Article).where(Article.id == article_id))
            ).scalar_one_or_none()
            if not row:
                raise NotFound("Article")
            if "slug" in changes and changes["slug"] != row.slug:
                await self._ensure_slug_free(changes["slug"], exclude_id=article_id)
            for key, value in changes.items():
                setattr(row, key, value)
            await self.session.commit()
        return await self.get_article_by_id(article_id)

    async def delete_article(self, article_id: int) -> None:
        with store_errors("delete article"):
            result = await self.session.execute(delete(Article).where(Article.id == article_id))
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFound("Article")
            await self.session.commit()
