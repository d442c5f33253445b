"""Registration pipeline for new product models and their manuals.

Every registration walks the same stages::

    VALIDATING -> PROCESSING -> STORING_FILE -> PERSISTING_MANUAL
               -> PERSISTING_MODEL -> LINKING -> DONE

Nothing is written before the ML server has accepted the document, and a
failure while persisting rows rolls the transaction back and removes the
stored file again.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..clients.ml_server import ManualProcessingClient, get_ml_client
from ..errors import (
    AuthorizationError,
    CatalogError,
    CategoryNotFoundError,
    ExternalProcessingError,
    InvalidManualFileError,
    NotFoundError,
    StorageError,
    UserNotFoundError,
    ValidationError,
)
from ..models import Category, ProductModel, User
from .document_store import DocumentStore, get_document_store
from .manual_service import create_manual_record
from .name_validator import (
    ModelNameError,
    NameRejection,
    ensure_model_name_available,
    model_name_exists,
)

logger = logging.getLogger(__name__)

PDF_EXTENSION = ".pdf"


class IngestionStage(str, enum.Enum):
    VALIDATING = "VALIDATING"
    PROCESSING = "PROCESSING"
    STORING_FILE = "STORING_FILE"
    PERSISTING_MANUAL = "PERSISTING_MANUAL"
    PERSISTING_MODEL = "PERSISTING_MODEL"
    LINKING = "LINKING"
    DONE = "DONE"


class IngestionError(CatalogError):
    """Raised when a registration fails; records the stage it failed in.

    Instances are always also an instance of the cause's category
    (``ValidationError``, ``ExternalProcessingError`` ...), see :func:`ingestion_error`.
    """

    def __init__(self, stage: IngestionStage, model_name: str | None, cause: CatalogError) -> None:
        CatalogError.__init__(self, cause.message)
        self.stage = stage
        self.model_name = model_name
        self.cause = cause
        self.status_code = cause.status_code


class IngestionValidationError(IngestionError, ValidationError):
    pass


class IngestionProcessingError(IngestionError, ExternalProcessingError):
    pass


class IngestionStorageError(IngestionError, StorageError):
    pass


class IngestionNotFoundError(IngestionError, NotFoundError):
    pass


class IngestionAuthorizationError(IngestionError, AuthorizationError):
    pass


_ERROR_TYPES: tuple[tuple[type[CatalogError], type[IngestionError]], ...] = (
    (ValidationError, IngestionValidationError),
    (ExternalProcessingError, IngestionProcessingError),
    (StorageError, IngestionStorageError),
    (NotFoundError, IngestionNotFoundError),
    (AuthorizationError, IngestionAuthorizationError),
)


def ingestion_error(stage: IngestionStage, model_name: str | None, cause: CatalogError) -> IngestionError:
    for category, error_type in _ERROR_TYPES:
        if isinstance(cause, category):
            return error_type(stage, model_name, cause)
    return IngestionError(stage, model_name, cause)


@dataclass(frozen=True)
class ManualUpload:
    filename: str | None
    content_type: str | None
    data: bytes


def validate_manual_upload(upload: ManualUpload | None) -> ManualUpload:
    if upload is None or not upload.data:
        raise InvalidManualFileError("Manual file is required.")
    filename = (upload.filename or "").strip()
    if not filename.lower().endswith(PDF_EXTENSION):
        raise InvalidManualFileError("Only PDF manuals are accepted.")
    if "pdf" not in (upload.content_type or "").lower():
        raise InvalidManualFileError("Only PDF manuals are accepted.")
    return upload


@dataclass
class _Target:
    """Resolved destination of a registration: a category or an owner."""

    category_id: int | None = None
    brand_id: int | None = None
    owner_id: int | None = None
    uploader_id: int | None = None


class _Run:
    def __init__(self, name: str | None) -> None:
        self.name = name
        self.stage = IngestionStage.VALIDATING

    def advance(self, stage: IngestionStage) -> None:
        logger.debug("Ingestion %s -> %s | name=%s", self.stage.value, stage.value, self.name)
        self.stage = stage

    def fail(self, cause: CatalogError) -> IngestionError:
        logger.info("Ingestion failed | stage=%s name=%s error=%s", self.stage.value, self.name, cause.message)
        return ingestion_error(self.stage, self.name, cause)


def _discard_file(store: DocumentStore, key: str) -> None:
    try:
        store.delete(key)
    except StorageError:
        logger.warning("Unable to remove stored manual after failed registration | key=%s", key)


def _persist(db: Session, run: _Run, *, name: str, key: str, upload: ManualUpload, target: _Target) -> ProductModel:
    run.advance(IngestionStage.PERSISTING_MANUAL)
    manual = create_manual_record(
        db,
        storage_key=key,
        original_filename=upload.filename or key,
        model_name=name,
        uploader_id=target.uploader_id,
        ml_processed=True,
    )

    run.advance(IngestionStage.PERSISTING_MODEL)
    model = ProductModel(
        name=name,
        category_id=target.category_id,
        brand_id=target.brand_id,
        owner_id=target.owner_id,
    )
    db.add(model)
    db.flush()

    run.advance(IngestionStage.LINKING)
    model.manual_id = manual.id
    manual.product_model_id = model.id
    db.flush()
    db.commit()
    return model


def _persist_with_retry(
    db: Session,
    run: _Run,
    *,
    name: str,
    key: str,
    upload: ManualUpload,
    target: _Target,
    store: DocumentStore,
) -> ProductModel:
    retried = False
    while True:
        try:
            return _persist(db, run, name=name, key=key, upload=upload, target=target)
        except IntegrityError as exc:
            db.rollback()
            if model_name_exists(db, name):
                _discard_file(store, key)
                raise run.fail(ModelNameError(NameRejection.DUPLICATE_NAME, name)) from exc
            if retried:
                logger.exception("Persisting model %s failed after retry", name)
                _discard_file(store, key)
                raise run.fail(StorageError("Unable to save model")) from exc
            logger.warning("Unique constraint conflict while persisting model %s; retrying once", name)
            retried = True
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Persisting model %s failed", name)
            _discard_file(store, key)
            raise run.fail(StorageError("Unable to save model")) from exc
        except CatalogError as exc:
            db.rollback()
            _discard_file(store, key)
            raise run.fail(exc) from exc


def _register(
    db: Session,
    run: _Run,
    *,
    name: str,
    upload: ManualUpload,
    target: _Target,
    client: ManualProcessingClient | None,
    store: DocumentStore | None,
) -> ProductModel:
    ml_client = client or get_ml_client()
    document_store = store or get_document_store()

    run.advance(IngestionStage.PROCESSING)
    try:
        ml_client.submit(
            upload.data,
            filename=upload.filename or "manual.pdf",
            content_type=upload.content_type or "application/pdf",
            doc_name=name,
        )
    except CatalogError as exc:
        raise run.fail(exc) from exc

    run.advance(IngestionStage.STORING_FILE)
    try:
        key = document_store.store(upload.data, upload.filename)
    except CatalogError as exc:
        # The ML server keeps its copy; there is no remote delete to call.
        logger.warning("Manual accepted by the ML server but not stored locally | doc_name=%s", name)
        raise run.fail(exc) from exc

    model = _persist_with_retry(db, run, name=name, key=key, upload=upload, target=target, store=document_store)
    run.advance(IngestionStage.DONE)
    logger.info("Registered model %s (id=%s manual=%s key=%s)", model.name, model.id, model.manual_id, key)
    return model


def register_public_model(
    db: Session,
    *,
    name: str,
    category_id: int,
    upload: ManualUpload,
    uploader: User | None = None,
    client: ManualProcessingClient | None = None,
    store: DocumentStore | None = None,
) -> ProductModel:
    """Register a public model in ``category_id``; the brand follows the category."""

    run = _Run(name)
    try:
        ensure_model_name_available(db, name)
        validate_manual_upload(upload)
        category = db.get(Category, category_id)
        if category is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")
    except CatalogError as exc:
        raise run.fail(exc) from exc

    target = _Target(
        category_id=category.id,
        brand_id=category.brand_id,
        uploader_id=uploader.id if uploader is not None else None,
    )
    return _register(db, run, name=name, upload=upload, target=target, client=client, store=store)


def register_personal_model(
    db: Session,
    *,
    name: str,
    owner: User,
    upload: ManualUpload,
    client: ManualProcessingClient | None = None,
    store: DocumentStore | None = None,
) -> ProductModel:
    """Register a model owned by ``owner``, who is also recorded as the uploader."""

    run = _Run(name)
    try:
        ensure_model_name_available(db, name)
        validate_manual_upload(upload)
        if owner is None or db.get(User, owner.id) is None:
            raise UserNotFoundError("Owner not found")
    except CatalogError as exc:
        raise run.fail(exc) from exc

    target = _Target(owner_id=owner.id, uploader_id=owner.id)
    return _register(db, run, name=name, upload=upload, target=target, client=client, store=store)


__all__ = [
    "IngestionStage",
    "IngestionError",
    "IngestionValidationError",
    "IngestionProcessingError",
    "IngestionStorageError",
    "IngestionNotFoundError",
    "IngestionAuthorizationError",
    "ManualUpload",
    "ingestion_error",
    "register_personal_model",
    "register_public_model",
    "validate_manual_upload",
]
