"""Model registry: queries and class-preserving mutations for product models."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import (
    CatalogError,
    CategoryNotFoundError,
    ForbiddenError,
    ModelNotFoundError,
    StorageError,
    UserNotFoundError,
    WrongClassError,
)
from ..models import Category, ProductModel, User
from .document_store import DocumentStore
from .manual_service import ManualRemoval, stage_manual_removal
from .name_validator import ModelNameError, NameRejection, ensure_model_name_available

logger = logging.getLogger(__name__)


def get_model(db: Session, model_id: int) -> ProductModel:
    model = db.get(ProductModel, model_id)
    if model is None:
        raise ModelNotFoundError(f"Model {model_id} not found")
    return model


def _get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise CategoryNotFoundError(f"Category {category_id} not found")
    return category


def list_public_models(db: Session) -> list[ProductModel]:
    stmt = select(ProductModel).where(ProductModel.owner_id.is_(None)).order_by(ProductModel.id)
    models = list(db.scalars(stmt))
    logger.debug("Found %d public models", len(models))
    return models


def list_public_models_by_category(db: Session, category_id: int) -> list[ProductModel]:
    _get_category(db, category_id)
    stmt = (
        select(ProductModel)
        .where(ProductModel.category_id == category_id, ProductModel.owner_id.is_(None))
        .order_by(ProductModel.id)
    )
    return list(db.scalars(stmt))


def list_user_models(db: Session, user_id: int) -> list[ProductModel]:
    if db.get(User, user_id) is None:
        raise UserNotFoundError(f"User {user_id} not found")
    stmt = select(ProductModel).where(ProductModel.owner_id == user_id).order_by(ProductModel.id)
    return list(db.scalars(stmt))


def list_all_models(db: Session) -> list[ProductModel]:
    return list(db.scalars(select(ProductModel).order_by(ProductModel.id)))


def _commit_model(db: Session, model: ProductModel, *, action: str) -> ProductModel:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ModelNameError(NameRejection.DUPLICATE_NAME, model.name) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s model %s", action, model.id)
        raise StorageError(f"Unable to {action} model") from exc
    db.refresh(model)
    return model


def update_public_model(db: Session, model_id: int, *, name: str, category_id: int) -> ProductModel:
    """Rename a public model and move it to ``category_id`` (brand follows the category)."""

    model = get_model(db, model_id)
    if model.owner_id is not None:
        raise WrongClassError("Personal models cannot be updated through the public model endpoint.")

    category = _get_category(db, category_id)
    ensure_model_name_available(db, name, exclude_model_id=model.id)

    model.name = name
    model.category_id = category.id
    model.brand_id = category.brand_id
    logger.info("Updating public model %s (category=%s brand=%s)", model.id, category.id, category.brand_id)
    return _commit_model(db, model, action="update")


def update_personal_model(db: Session, model_id: int, *, name: str, user_id: int) -> ProductModel:
    model = get_model(db, model_id)
    if model.owner_id is None or model.owner_id != user_id:
        raise ForbiddenError("You are not allowed to update this model.")

    ensure_model_name_available(db, name, exclude_model_id=model.id)

    model.name = name
    logger.info("Updating personal model %s for user %s", model.id, user_id)
    return _commit_model(db, model, action="update")


def remove_model(db: Session, model: ProductModel, *, store: DocumentStore | None = None) -> None:
    """Delete ``model`` after removing its manual (file and row).

    Authorisation is the caller's job; the manual deletion runs as a
    system-initiated cascade. The manual file is only gone once the commit
    has succeeded.
    """

    model_id = model.id
    removal: ManualRemoval | None = None
    try:
        if model.manual_id is not None:
            removal = stage_manual_removal(db, model_id, requester=None, store=store)
        db.delete(model)
        db.commit()
    except CatalogError:
        db.rollback()
        if removal is not None:
            removal.revert()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        if removal is not None:
            removal.revert()
        logger.exception("Failed to delete model %s", model_id)
        raise StorageError("Unable to delete model") from exc

    if removal is not None:
        removal.finish()
    logger.info("Deleted model %s", model_id)


def delete_personal_model(
    db: Session,
    model_id: int,
    *,
    user_id: int,
    store: DocumentStore | None = None,
) -> None:
    logger.debug("Deleting personal model %s requested by user %s", model_id, user_id)
    model = get_model(db, model_id)
    if model.owner_id is None or model.owner_id != user_id:
        raise ForbiddenError("You are not allowed to delete this model.")
    remove_model(db, model, store=store)


def delete_model_by_admin(db: Session, model_id: int, *, store: DocumentStore | None = None) -> None:
    logger.debug("Deleting model %s by admin", model_id)
    model = get_model(db, model_id)
    remove_model(db, model, store=store)


__all__ = [
    "get_model",
    "list_public_models",
    "list_public_models_by_category",
    "list_user_models",
    "list_all_models",
    "update_public_model",
    "update_personal_model",
    "remove_model",
    "delete_personal_model",
    "delete_model_by_admin",
]
