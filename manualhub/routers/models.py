"""Product model routes: registration, queries, updates and deletion."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import ProductModel, User
from ..schemas import CommonResponse, PersonalModelUpdate, ProductModelResponse, PublicModelUpdate
from ..services import (
    ManualUpload,
    delete_model_by_admin,
    delete_personal_model,
    get_current_user,
    list_all_models,
    list_public_models,
    list_public_models_by_category,
    list_user_models,
    register_personal_model,
    register_public_model,
    require_admin,
    update_personal_model,
    update_public_model,
)

router = APIRouter(prefix="/api/models", tags=["models"])


def _to_model_response(model: ProductModel) -> ProductModelResponse:
    return ProductModelResponse(
        id=model.id,
        name=model.name,
        category_id=model.category_id,
        category_name=model.category.name if model.category is not None else None,
        brand_id=model.brand_id,
        brand_name=model.brand.name if model.brand is not None else None,
        owner_id=model.owner_id,
        manual_id=model.manual_id,
        is_personal=model.is_personal,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _read_upload(file: UploadFile) -> ManualUpload:
    return ManualUpload(filename=file.filename, content_type=file.content_type, data=file.file.read())


@router.get("/public", response_model=list[ProductModelResponse])
def list_public_models_endpoint(db: Session = Depends(get_session)) -> list[ProductModelResponse]:
    return [_to_model_response(model) for model in list_public_models(db)]


@router.get("/category/{category_id}", response_model=list[ProductModelResponse])
def list_category_models_endpoint(category_id: int, db: Session = Depends(get_session)) -> list[ProductModelResponse]:
    return [_to_model_response(model) for model in list_public_models_by_category(db, category_id)]


@router.post("/public", response_model=CommonResponse, status_code=status.HTTP_201_CREATED)
def register_public_model_endpoint(
    name: str = Form(""),
    category_id: int = Form(..., alias="categoryId"),
    manual_file: UploadFile = File(..., alias="manualFile"),
    admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    model = register_public_model(
        db,
        name=name,
        category_id=category_id,
        upload=_read_upload(manual_file),
        uploader=admin,
    )
    return CommonResponse(message="Public model registered successfully", data=_to_model_response(model))


@router.get("/personal", response_model=list[ProductModelResponse])
def list_personal_models_endpoint(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[ProductModelResponse]:
    return [_to_model_response(model) for model in list_user_models(db, current_user.id)]


@router.post("/personal", response_model=CommonResponse, status_code=status.HTTP_201_CREATED)
def register_personal_model_endpoint(
    name: str = Form(""),
    manual_file: UploadFile = File(..., alias="manualFile"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CommonResponse:
    model = register_personal_model(db, name=name, owner=current_user, upload=_read_upload(manual_file))
    return CommonResponse(message="Personal model registered successfully", data=_to_model_response(model))


@router.put("/public/{model_id}", response_model=CommonResponse)
def update_public_model_endpoint(
    model_id: int,
    payload: PublicModelUpdate,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    model = update_public_model(db, model_id, name=payload.name, category_id=payload.category_id)
    return CommonResponse(message="Public model updated successfully", data=_to_model_response(model))


@router.put("/personal/{model_id}", response_model=CommonResponse)
def update_personal_model_endpoint(
    model_id: int,
    payload: PersonalModelUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CommonResponse:
    model = update_personal_model(db, model_id, name=payload.name, user_id=current_user.id)
    return CommonResponse(message="Personal model updated successfully", data=_to_model_response(model))


@router.get("/admin/all", response_model=list[ProductModelResponse])
def list_all_models_endpoint(
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> list[ProductModelResponse]:
    return [_to_model_response(model) for model in list_all_models(db)]


@router.delete("/personal/{model_id}", response_model=CommonResponse)
def delete_personal_model_endpoint(
    model_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> CommonResponse:
    delete_personal_model(db, model_id, user_id=current_user.id)
    return CommonResponse(message="Personal model deleted successfully")


@router.delete("/admin/{model_id}", response_model=CommonResponse)
def delete_model_endpoint(
    model_id: int,
    _admin: User = Depends(require_admin()),
    db: Session = Depends(get_session),
) -> CommonResponse:
    delete_model_by_admin(db, model_id)
    return CommonResponse(message="Model deleted successfully")
