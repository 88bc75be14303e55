# blogcore/api/categories/schemas.py
from typing import Optional
from pydantic import BaseModel, Field


class CategoryCreate(BaseModel):
    slug: str = Field(min_length=1, max_length=100)
    name_en: str = Field(min_length=1, max_length=200)
    name_ar: str = Field(min_length=1, max_length=200)
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    icon_name: Optional[str] = Field(default=None, max_length=50)


class CategoryUpdate(BaseModel):
    slug: Optional[str] = Field(default=None, min_length=1, max_length=100)
    name_en: Optional[str] = Field(default=None, min_length=1, max_length=200)
    name_ar: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description_en: Optional[str] = None
    description_ar: Optional[str] = None
    icon_name: Optional[str] = Field(default=None, max_length=50)
