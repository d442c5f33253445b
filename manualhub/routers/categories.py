"""Category catalog routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import CategoryCreate, CategoryResponse, CategoryUpdate, CommonResponse
from ..services import (
    create_category,
    delete_category,
    get_category,
    list_categories,
    list_categories_by_brand,
    require_admin,
    update_category,
)

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
def list_categories_endpoint(db: Session = Depends(get_session)) -> list[CategoryResponse]:
    return [CategoryResponse.model_validate(category) for category in list_categories(db)]


@router.get("/brand/{brand_id}", response_model=list[CategoryResponse])
def list_brand_categories_endpoint(brand_id: int, db: Session = Depends(get_session)) -> list[CategoryResponse]:
    return [CategoryResponse.model_validate(category) for category in list_categories_by_brand(db, brand_id)]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category_endpoint(category_id: int, db: Session = Depends(get_session)) -> CategoryResponse:
    return CategoryResponse.model_validate(get_category(db, category_id))


@router.post("", response_model=CommonResponse, status_code=status.HTTP_201_CREATED)
def create_category_endpoint(
    payload: CategoryCreate,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    category = create_category(db, name=payload.name, brand_id=payload.brand_id)
    return CommonResponse(message="Category created successfully", data=CategoryResponse.model_validate(category))


@router.put("/{category_id}", response_model=CommonResponse)
def update_category_endpoint(
    category_id: int,
    payload: CategoryUpdate,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    category = update_category(db, category_id, name=payload.name, brand_id=payload.brand_id)
    return CommonResponse(message="Category updated successfully", data=CategoryResponse.model_validate(category))


@router.delete("/{category_id}", response_model=CommonResponse)
def delete_category_endpoint(
    category_id: int,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    delete_category(db, category_id)
    return CommonResponse(message="Category deleted successfully")
