"""Brand catalog routes; reads are public, writes require an administrator."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import BrandCreate, BrandResponse, BrandUpdate, CommonResponse
from ..services import create_brand, delete_brand, get_brand, list_brands, require_admin, update_brand

router = APIRouter(prefix="/api/brands", tags=["brands"])


@router.get("", response_model=list[BrandResponse])
def list_brands_endpoint(db: Session = Depends(get_session)) -> list[BrandResponse]:
    return [BrandResponse.model_validate(brand) for brand in list_brands(db)]


@router.get("/{brand_id}", response_model=BrandResponse)
def get_brand_endpoint(brand_id: int, db: Session = Depends(get_session)) -> BrandResponse:
    return BrandResponse.model_validate(get_brand(db, brand_id))


@router.post("", response_model=CommonResponse, status_code=status.HTTP_201_CREATED)
def create_brand_endpoint(
    payload: BrandCreate,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    brand = create_brand(db, payload.name)
    return CommonResponse(message="Brand created successfully", data=BrandResponse.model_validate(brand))


@router.put("/{brand_id}", response_model=CommonResponse)
def update_brand_endpoint(
    brand_id: int,
    payload: BrandUpdate,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    brand = update_brand(db, brand_id, payload.name)
    return CommonResponse(message="Brand updated successfully", data=BrandResponse.model_validate(brand))


@router.delete("/{brand_id}", response_model=CommonResponse)
def delete_brand_endpoint(
    brand_id: int,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    delete_brand(db, brand_id)
    return CommonResponse(message="Brand deleted successfully")
