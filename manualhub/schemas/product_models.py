"""Pydantic schemas for product models."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PublicModelUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    category_id: int = Field(..., alias="categoryId")


class PersonalModelUpdate(BaseModel):
    name: str


class ProductModelResponse(BaseModel):
    """Serialized product model; public models carry category and brand, personal ones an owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category_id: int | None = None
    category_name: str | None = None
    brand_id: int | None = None
    brand_name: str | None = None
    owner_id: int | None = None
    manual_id: int | None = None
    is_personal: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
