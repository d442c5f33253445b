"""Pydantic schemas for brands and categories."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)


class BrandUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)


class CategoryCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=150)
    brand_id: int = Field(..., alias="brandId")


class CategoryUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=150)
    brand_id: int | None = Field(default=None, alias="brandId")


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    brand_id: int
    created_at: datetime | None = None


class BrandResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime | None = None
    categories: list[CategoryResponse] = Field(default_factory=list)
