"""Brand and category management for the public catalog."""
from __future__ import annotations

import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import BrandNotFoundError, CategoryNotFoundError, ConflictError, StorageError, ValidationError
from ..models import Brand, Category, ProductModel
from .document_store import DocumentStore
from .product_model_service import remove_model

logger = logging.getLogger(__name__)


def _clean_name(name: str | None, *, label: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{label} name is required.")
    return cleaned


def _commit(db: Session, *, conflict_message: str, failure_message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(conflict_message) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(failure_message)
        raise StorageError(failure_message) from exc


# Brands


def list_brands(db: Session) -> list[Brand]:
    return list(db.scalars(select(Brand).order_by(Brand.name)))


def get_brand(db: Session, brand_id: int) -> Brand:
    brand = db.get(Brand, brand_id)
    if brand is None:
        raise BrandNotFoundError(f"Brand {brand_id} not found")
    return brand


def create_brand(db: Session, name: str) -> Brand:
    cleaned = _clean_name(name, label="Brand")
    if db.scalar(select(Brand.id).where(Brand.name == cleaned)) is not None:
        raise ConflictError(f"Brand '{cleaned}' already exists.")

    brand = Brand(name=cleaned)
    db.add(brand)
    _commit(db, conflict_message=f"Brand '{cleaned}' already exists.", failure_message="Unable to create brand")
    db.refresh(brand)
    logger.info("Created brand %s (%s)", brand.id, brand.name)
    return brand


def update_brand(db: Session, brand_id: int, name: str) -> Brand:
    brand = get_brand(db, brand_id)
    cleaned = _clean_name(name, label="Brand")
    duplicate = db.scalar(select(Brand.id).where(Brand.name == cleaned, Brand.id != brand.id))
    if duplicate is not None:
        raise ConflictError(f"Brand '{cleaned}' already exists.")

    brand.name = cleaned
    _commit(db, conflict_message=f"Brand '{cleaned}' already exists.", failure_message="Unable to update brand")
    db.refresh(brand)
    return brand


def _delete_models(db: Session, models: list[ProductModel], store: DocumentStore | None) -> int:
    # Each model goes in its own transaction so a failure never leaves a row
    # pointing at a file that was already removed.
    for model in models:
        remove_model(db, model, store=store)
    return len(models)


def delete_brand(db: Session, brand_id: int, *, store: DocumentStore | None = None) -> None:
    """Delete a brand, its categories and every model (with manuals) beneath it."""

    brand = get_brand(db, brand_id)
    category_ids = [category.id for category in brand.categories]

    stmt = select(ProductModel).where(ProductModel.brand_id == brand.id)
    if category_ids:
        stmt = select(ProductModel).where(
            or_(ProductModel.brand_id == brand.id, ProductModel.category_id.in_(category_ids))
        )
    removed = _delete_models(db, list(db.scalars(stmt)), store)

    brand = get_brand(db, brand_id)
    db.delete(brand)
    _commit(db, conflict_message="Brand is still referenced.", failure_message="Unable to delete brand")
    logger.info("Deleted brand %s with %d categories and %d models", brand_id, len(category_ids), removed)


# Categories


def list_categories(db: Session) -> list[Category]:
    return list(db.scalars(select(Category).order_by(Category.id)))


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise CategoryNotFoundError(f"Category {category_id} not found")
    return category


def list_categories_by_brand(db: Session, brand_id: int) -> list[Category]:
    get_brand(db, brand_id)
    return list(db.scalars(select(Category).where(Category.brand_id == brand_id).order_by(Category.id)))


def _ensure_category_name_free(db: Session, brand_id: int, name: str, *, exclude_id: int | None = None) -> None:
    stmt = select(Category.id).where(Category.brand_id == brand_id, Category.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Category.id != exclude_id)
    if db.scalar(stmt) is not None:
        raise ConflictError(f"Category '{name}' already exists for this brand.")


def create_category(db: Session, *, name: str, brand_id: int) -> Category:
    brand = get_brand(db, brand_id)
    cleaned = _clean_name(name, label="Category")
    _ensure_category_name_free(db, brand.id, cleaned)

    category = Category(name=cleaned, brand_id=brand.id)
    db.add(category)
    _commit(
        db,
        conflict_message=f"Category '{cleaned}' already exists for this brand.",
        failure_message="Unable to create category",
    )
    db.refresh(category)
    logger.info("Created category %s (%s) under brand %s", category.id, category.name, brand.id)
    return category


def update_category(db: Session, category_id: int, *, name: str, brand_id: int | None = None) -> Category:
    """Rename a category and optionally move it to another brand.

    Public models in the category follow it to the new brand.
    """

    category = get_category(db, category_id)
    cleaned = _clean_name(name, label="Category")
    target_brand_id = get_brand(db, brand_id).id if brand_id is not None else category.brand_id
    _ensure_category_name_free(db, target_brand_id, cleaned, exclude_id=category.id)

    category.name = cleaned
    if target_brand_id != category.brand_id:
        category.brand_id = target_brand_id
        for model in db.scalars(select(ProductModel).where(ProductModel.category_id == category.id)):
            model.brand_id = target_brand_id

    _commit(
        db,
        conflict_message=f"Category '{cleaned}' already exists for this brand.",
        failure_message="Unable to update category",
    )
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int, *, store: DocumentStore | None = None) -> None:
    """Delete a category together with every model (and manual) filed under it."""

    get_category(db, category_id)
    models = list(db.scalars(select(ProductModel).where(ProductModel.category_id == category_id)))
    removed = _delete_models(db, models, store)

    db.delete(get_category(db, category_id))
    _commit(db, conflict_message="Category is still referenced.", failure_message="Unable to delete category")
    logger.info("Deleted category %s with %d models", category_id, removed)


__all__ = [
    "list_brands",
    "get_brand",
    "create_brand",
    "update_brand",
    "delete_brand",
    "list_categories",
    "get_category",
    "list_categories_by_brand",
    "create_category",
    "update_category",
    "delete_category",
]
