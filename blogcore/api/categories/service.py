# blogcore/api/categories/service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import asc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from blogcore.db.models import Article, Category
from blogcore.errors import NotFound, ValidationError, store_errors
from blogcore.i18n import project

from .cache import ALL_CATEGORIES_KEY, CategoryCache, slug_key
from .schemas import CategoryCreate, CategoryUpdate

CATEGORY_TEXT_FIELDS = ("name", "description")


def _row_to_dict(c: Category) -> Dict[str, Any]:
    return {
        "id": c.id,
        "slug": c.slug,
        "name_en": c.name_en,
        "name_ar": c.name_ar,
        "description_en": c.description_en,
        "description_ar": c.description_ar,
        "icon_name": c.icon_name,
        "created_at": c.created_at,
    }


def localize_category(row: Dict[str, Any], lang: Optional[str]) -> Dict[str, Any]:
    return project(row, CATEGORY_TEXT_FIELDS, lang)


class CategoryService:
    def __init__(self, session: AsyncSession, cache: CategoryCache):
        self.session = session
        self.cache = cache

    # ---------- reads (through the cache) ----------
    async def _load_all(self) -> List[Dict[str, Any]]:
        rows = (
            await self.session.execute(select(Category).order_by(asc(Category.name_en)))
        ).scalars().all()
        return [_row_to_dict(c) for c in rows]

    async def get_categories(self, lang: Optional[str] = None) -> List[Dict[str, Any]]:
        rows = await self.cache.get_or_load(ALL_CATEGORIES_KEY, self._load_all)
        return [localize_category(r, lang) for r in rows]

    async def get_category_by_slug(
        self, slug: str, lang: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        async def load() -> Optional[Dict[str, Any]]:
            row = (
                await self.session.execute(select(Category).where(Category.slug == slug))
            ).scalar_one_or_none()
            return _row_to_dict(row) if row else None

        row = await self.cache.get_or_load(slug_key(slug), load)
        return localize_category(row, lang) if row else None

    async def category_map(self, lang: Optional[str] = None) -> Dict[int, Dict[str, Any]]:
        return {c["id"]: c for c in await self.get_categories(lang)}

    async def exists(self, category_id: int) -> bool:
        return category_id in await self.category_map()

    # ---------- writes (invalidate everything) ----------
    async def _get_row(self, category_id: int) -> Category:
        row = (
            await self.session.execute(select(Category).where(Category.id == category_id))
        ).scalar_one_or_none()
        if not row:
            raise NotFound("Category")
        return row

    async def _ensure_slug_free(self, slug: str, *, exclude_id: Optional[int] = None) -> None:
        stmt = select(Category.id).where(Category.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        if (await self.session.execute(stmt)).first():
            raise ValidationError(f"category slug '{slug}' already exists")

    async def create_category(self, data: CategoryCreate) -> Dict[str, Any]:
        with store_errors("create category"):
            await self._ensure_slug_free(data.slug)
            row = Category(**data.model_dump())
            self.session.add(row)
            await self.session.commit()
            await self.session.refresh(row)
        self.cache.invalidate()
        return _row_to_dict(row)

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Dict[str, Any]:
        changes = data.model_dump(exclude_unset=True)
        with store_errors("update category"):
            row = await self._get_row(category_id)
            if "slug" in changes and changes["slug"] != row.slug:
                await self._ensure_slug_free(changes["slug"], exclude_id=category_id)
            for key, value in changes.items():
                setattr(row, key, value)
            await self.session.commit()
            await self.session.refresh(row)
        self.cache.invalidate()
        return _row_to_dict(row)

    async def delete_category(self, category_id: int) -> None:
        with store_errors("delete category"):
            row = await self._get_row(category_id)
            # articles keep existing, just uncategorised
            await self.session.execute(
                update(Article).where(Article.category_id == category_id).values(category_id=None)
            )
            await self.session.delete(row)
            await self.session.commit()
        self.cache.invalidate()
