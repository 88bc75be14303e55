# blogcore/api/categories/router.py
from typing import Literal, Optional
from fastapi import APIRouter, status

from blogcore.errors import NotFound

from .dependencies import CategoryServiceDep
from .schemas import CategoryCreate, CategoryUpdate

router = APIRouter(prefix="/categories", tags=["categories"])

Lang = Literal["en", "ar"]


@router.get("", summary="List categories")
async def list_categories(categories: CategoryServiceDep, language: Optional[Lang] = None):
    return {"items": await categories.get_categories(language)}


@router.get("/{slug}", summary="Category by slug")
async def get_category(slug: str, categories: CategoryServiceDep, language: Optional[Lang] = None):
    item = await categories.get_category_by_slug(slug, language)
    if not item:
        raise NotFound("Category")
    return item


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create category")
async def create_category(body: CategoryCreate, categories: CategoryServiceDep):
    return await categories.create_category(body)


@router.put("/{category_id}", summary="Update category")
async def update_category(category_id: int, body: CategoryUpdate, categories: CategoryServiceDep):
    return await categories.update_category(category_id, body)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete category")
async def delete_category(category_id: int, categories: CategoryServiceDep):
    await categories.delete_category(category_id)
