"""Manual registry: persisted records pointing at stored manual files."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import CatalogError, ForbiddenError, ManualNotFoundError, StorageError, UserNotFoundError
from ..models import Manual, ProductModel, User
from .document_store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)


def create_manual_record(
    db: Session,
    *,
    storage_key: str,
    original_filename: str,
    model_name: str,
    uploader_id: int | None,
    ml_processed: bool,
) -> Manual:
    """Add a manual row to the session and flush it so it receives an id.

    The caller owns the transaction boundary.
    """

    manual = Manual(
        file_name=original_filename,
        file_path=storage_key,
        model_name=model_name,
        upload_date=datetime.now(timezone.utc),
        uploader_id=uploader_id,
        ml_processed=ml_processed,
    )
    db.add(manual)
    db.flush()
    return manual


def get_manual(db: Session, manual_id: int) -> Manual:
    manual = db.get(Manual, manual_id)
    if manual is None:
        raise ManualNotFoundError(f"Manual {manual_id} not found")
    return manual


def get_manual_for_model(db: Session, model_id: int) -> Manual | None:
    model = db.get(ProductModel, model_id)
    if model is not None and model.manual_id is not None:
        return db.get(Manual, model.manual_id)
    return db.scalar(select(Manual).where(Manual.product_model_id == model_id))


def list_manuals_for_uploader(db: Session, user_id: int) -> list[Manual]:
    if db.get(User, user_id) is None:
        raise UserNotFoundError(f"User {user_id} not found")
    stmt = select(Manual).where(Manual.uploader_id == user_id).order_by(Manual.upload_date.desc())
    return list(db.scalars(stmt))


def can_read_manual(db: Session, manual: Manual, user: User) -> bool:
    """Admins and uploaders can read any manual; everyone can read public ones."""

    if user.is_admin or (manual.uploader_id is not None and manual.uploader_id == user.id):
        return True
    if manual.product_model_id is None:
        return False
    model = db.get(ProductModel, manual.product_model_id)
    return model is not None and model.owner_id is None


def load_manual_file(
    db: Session,
    manual_id: int,
    *,
    requester: User,
    store: DocumentStore | None = None,
) -> tuple[Manual, Path]:
    """Return the manual row and the readable path of its document."""

    manual = get_manual(db, manual_id)
    if not can_read_manual(db, manual, requester):
        raise ForbiddenError("You are not allowed to download this manual.")
    path = (store or get_document_store()).open_path(manual.file_path)
    return manual, path


@dataclass
class ManualRemoval:
    """A flushed manual deletion whose file is detached until the commit."""

    manual_id: int
    stored_value: str
    store: DocumentStore
    tombstone: Path | None = None

    def finish(self) -> None:
        if self.tombstone is not None:
            self.store.purge(self.tombstone)
            self.tombstone = None

    def revert(self) -> None:
        if self.tombstone is not None:
            self.store.restore(self.stored_value, self.tombstone)
            self.tombstone = None


def stage_manual_removal(
    db: Session,
    model_id: int,
    *,
    requester: User | None,
    store: DocumentStore | None = None,
) -> ManualRemoval:
    """Flush the removal of the manual linked to ``model_id`` and detach its file.

    ``requester=None`` marks a system-initiated cascade (model, category or
    brand deletion) that was already authorised upstream. Nothing is final
    until the caller commits and calls :meth:`ManualRemoval.finish`; on
    failure it rolls back and calls :meth:`ManualRemoval.revert`.
    """

    manual = get_manual_for_model(db, model_id)
    if manual is None:
        raise ManualNotFoundError(f"No manual is linked to model {model_id}")

    if requester is not None and not requester.is_admin and manual.uploader_id != requester.id:
        raise ForbiddenError("You are not allowed to delete this manual.")

    model = db.get(ProductModel, model_id)
    if model is not None and model.manual_id == manual.id:
        model.manual_id = None
        db.flush()
    db.delete(manual)
    db.flush()

    removal = ManualRemoval(manual_id=manual.id, stored_value=manual.file_path, store=store or get_document_store())
    removal.tombstone = removal.store.detach(manual.file_path)
    if removal.tombstone is None:
        logger.warning("Manual file already missing | manual=%s key=%s", manual.id, manual.file_path)
    return removal


def delete_manual_for_model(
    db: Session,
    model_id: int,
    *,
    requester: User | None,
    store: DocumentStore | None = None,
) -> None:
    """Delete the manual linked to ``model_id``, row and file together.

    A file that cannot be removed, or a commit that fails, aborts the whole
    deletion: the row stays and so does its file.
    """

    removal: ManualRemoval | None = None
    try:
        removal = stage_manual_removal(db, model_id, requester=requester, store=store)
        db.commit()
    except (SQLAlchemyError, StorageError) as exc:
        db.rollback()
        if removal is not None:
            removal.revert()
        logger.exception("Failed to delete manual for model %s", model_id)
        if isinstance(exc, CatalogError):
            raise
        raise StorageError("Unable to delete manual record") from exc

    removal.finish()
    logger.info("Deleted manual %s for model %s", removal.manual_id, model_id)


__all__ = [
    "ManualRemoval",
    "create_manual_record",
    "get_manual",
    "get_manual_for_model",
    "list_manuals_for_uploader",
    "can_read_manual",
    "load_manual_file",
    "stage_manual_removal",
    "delete_manual_for_model",
]
