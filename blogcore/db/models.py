# blogcore/db/models.py
from typing import Optional
from datetime import datetime, timezone
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    # columns are timestamp WITHOUT time zone, stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Aware datetimes are shifted to UTC and stripped; naive ones are taken as UTC already."""
    if value is not None and value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _timestamp() -> DateTime:
    # timestamp WITHOUT time zone on every backend and sqlmodel release
    return DateTime(timezone=False)


class Category(SQLModel, table=True):
    __tablename__ = "categories"
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(max_length=100, unique=True, index=True)
    name_en: str = Field(max_length=200)
    name_ar: str = Field(max_length=200)
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    icon_name: Optional[str] = Field(default=None, max_length=50)
    created_at: datetime = Field(default_factory=utcnow, sa_type=_timestamp())


class Article(SQLModel, table=True):
    __tablename__ = "articles"
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(max_length=200, unique=True, index=True)
    title_en: str = Field(max_length=300)
    title_ar: Optional[str] = Field(default=None, max_length=300)
    excerpt_en: Optional[str] = None
    excerpt_ar: Optional[str] = None
    content_en: str
    content_ar: Optional[str] = None
    meta_description_en: Optional[str] = Field(default=None, max_length=160)
    meta_description_ar: Optional[str] = Field(default=None, max_length=160)
    featured_image: Optional[str] = Field(default=None, max_length=500)
    author_name: str = Field(max_length=100)
    author_image: Optional[str] = Field(default=None, max_length=500)
    category_id: Optional[int] = Field(default=None, foreign_key="categories.id", index=True)
    published: bool = Field(default=False, index=True)
    featured: bool = Field(default=False)
    reading_time: Optional[int] = None  # minutes
    published_at: Optional[datetime] = Field(default=None, index=True, sa_type=_timestamp())
    created_at: datetime = Field(default_factory=utcnow, sa_type=_timestamp())
    updated_at: datetime = Field(default_factory=utcnow, sa_type=_timestamp())
