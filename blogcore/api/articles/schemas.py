# blogcore/api/articles/schemas.py
from typing import Any, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from blogcore.db.models import naive_utc
from blogcore.errors import ValidationError, format_errors

from .cursor import SORT_KEYS

MAX_PAGE_SIZE = 100

Language = Literal["en", "ar"]
SortKey = Literal["publishedAt", "createdAt", "id"]
SortOrder = Literal["asc", "desc"]


# -----------------------------
# Listing
# -----------------------------
class ArticleFilter(BaseModel):
    category_id: Optional[int] = Field(default=None, ge=1)
    featured: Optional[bool] = None
    published: Optional[bool] = True
    language: Language = "en"

    @field_validator("category_id", mode="before")
    @classmethod
    def _numeric_category(cls, v):
        # "12" is fine, "news" or 1.5 is not
        if v is None or v == "":
            return None
        if isinstance(v, bool):
            raise ValueError("category_id must be an integer")
        if isinstance(v, str):
            if not v.strip().isdigit():
                raise ValueError("category_id must be an integer")
            return int(v)
        return v


class Pagination(BaseModel):
    limit: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)
    cursor: Optional[str] = None
    sort_by: SortKey = "publishedAt"
    sort_order: SortOrder = "desc"


def build_filter(**raw: Any) -> ArticleFilter:
    try:
        return ArticleFilter(**{k: v for k, v in raw.items() if v is not None})
    except PydanticValidationError as e:
        raise ValidationError("invalid article filter", {"errors": format_errors(e.errors())}) from e


def build_pagination(**raw: Any) -> Pagination:
    try:
        return Pagination(**{k: v for k, v in raw.items() if v is not None})
    except PydanticValidationError as e:
        raise ValidationError(
            f"invalid pagination (sort_by must be one of {', '.join(SORT_KEYS)})",
            {"errors": format_errors(e.errors())},
        ) from e


# -----------------------------
# Admin writes
# -----------------------------
class ArticleCreate(BaseModel):
    slug: str = Field(min_length=1, max_length=200)
    title_en: str = Field(min_length=1, max_length=300)
    title_ar: Optional[str] = Field(default=None, max_length=300)
    excerpt_en: Optional[str] = None
    excerpt_ar: Optional[str] = None
    content_en: str
    content_ar: Optional[str] = None
    meta_description_en: Optional[str] = Field(default=None, max_length=160)
    meta_description_ar: Optional[str] = Field(default=None, max_length=160)
    featured_image: Optional[str] = None
    author_name: str = Field(min_length=1, max_length=100)
    author_image: Optional[str] = None
    category_id: Optional[int] = None
    published: bool = False
    featured: bool = False
    reading_time: Optional[int] = Field(default=None, ge=0)
    published_at: Optional[datetime] = None
    publish_now: bool = False

    @field_validator("published_at")
    @classmethod
    def _utc_published_at(cls, v):
        return naive_utc(v)


class ArticleUpdate(BaseModel):
    slug: Optional[str] = Field(default=None, min_length=1, max_length=200)
    title_en: Optional[str] = Field(default=None, min_length=1, max_length=300)
    title_ar: Optional[str] = Field(default=None, max_length=300)
    excerpt_en: Optional[str] = None
    excerpt_ar: Optional[str] = None
    content_en: Optional[str] = None
    content_ar: Optional[str] = None
    meta_description_en: Optional[str] = Field(default=None, max_length=160)
    meta_description_ar: Optional[str] = Field(default=None, max_length=160)
    featured_image: Optional[str] = None
    author_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    author_image: Optional[str] = None
    category_id: Optional[int] = None
    published: Optional[bool] = None
    featured: Optional[bool] = None
    reading_time: Optional[int] = Field(default=None, ge=0)
    published_at: Optional[datetime] = None
    publish_now: bool = False

    @field_validator("published_at")
    @classmethod
    def _utc_published_at(cls, v):
        return naive_utc(v)
