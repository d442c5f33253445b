"""Tests for model updates, deletions and ownership rules."""
from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from manualhub.errors import (
    AuthorizationError,
    ForbiddenError,
    ManualNotFoundError,
    ModelNotFoundError,
    StorageError,
    WrongClassError,
)
from manualhub.models import Manual, ProductModel
from manualhub.services import product_model_service
from manualhub.services.ingestion_service import register_personal_model, register_public_model
from manualhub.services.manual_service import delete_manual_for_model, list_manuals_for_uploader, load_manual_file
from manualhub.services.name_validator import ModelNameError, NameRejection


@pytest.fixture
def two_users(user_factory):
    return user_factory("first@example.com"), user_factory("second@example.com")


def test_user_cannot_update_someone_elses_model(db_session, two_users, pdf_upload):
    first, second = two_users
    model = register_personal_model(db_session, name="Second's Kettle", owner=second, upload=pdf_upload())

    with pytest.raises(AuthorizationError):
        product_model_service.update_personal_model(db_session, model.id, name="Hijacked", user_id=first.id)

    db_session.expire_all()
    assert db_session.get(ProductModel, model.id).name == "Second's Kettle"


def test_owner_can_rename_personal_model(db_session, two_users, pdf_upload):
    first, _ = two_users
    model = register_personal_model(db_session, name="Kettle", owner=first, upload=pdf_upload())

    updated = product_model_service.update_personal_model(db_session, model.id, name="Kettle Pro", user_id=first.id)
    assert updated.name == "Kettle Pro"
    assert updated.owner_id == first.id


def test_public_update_rejects_personal_models(db_session, two_users, category_factory, pdf_upload):
    first, _ = two_users
    category = category_factory(category_id=5)
    model = register_personal_model(db_session, name="Kettle", owner=first, upload=pdf_upload())

    with pytest.raises(WrongClassError):
        product_model_service.update_public_model(db_session, model.id, name="Kettle", category_id=category.id)


def test_public_update_rederives_brand_and_allows_same_name(db_session, category_factory, pdf_upload):
    printers = category_factory("Acme", "Printers", category_id=5)
    scanners = category_factory("Globex", "Scanners")
    model = register_public_model(db_session, name="PRNT-200", category_id=printers.id, upload=pdf_upload())

    updated = product_model_service.update_public_model(db_session, model.id, name="PRNT-200", category_id=scanners.id)

    assert updated.category_id == scanners.id
    assert updated.brand_id == scanners.brand_id
    assert updated.owner_id is None


def test_public_update_rejects_names_taken_by_other_models(db_session, category_factory, pdf_upload):
    category = category_factory(category_id=5)
    register_public_model(db_session, name="PRNT-100", category_id=category.id, upload=pdf_upload())
    model = register_public_model(db_session, name="PRNT-200", category_id=category.id, upload=pdf_upload())

    with pytest.raises(ModelNameError) as excinfo:
        product_model_service.update_public_model(db_session, model.id, name="PRNT-100", category_id=category.id)
    assert excinfo.value.reason is NameRejection.DUPLICATE_NAME


def test_personal_delete_removes_manual_row_and_file(db_session, two_users, pdf_upload, document_store):
    first, second = two_users
    model = register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload())
    manual = db_session.get(Manual, model.manual_id)
    key = manual.file_path

    with pytest.raises(ForbiddenError):
        product_model_service.delete_personal_model(db_session, model.id, user_id=second.id)

    product_model_service.delete_personal_model(db_session, model.id, user_id=first.id)

    db_session.expire_all()
    assert db_session.get(ProductModel, model.id) is None
    assert db_session.get(Manual, manual.id) is None
    assert not document_store.exists(key)


def test_admin_delete_works_for_any_model(db_session, two_users, category_factory, pdf_upload):
    first, _ = two_users
    category = category_factory(category_id=5)
    personal = register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload())
    public = register_public_model(db_session, name="PRNT-200", category_id=category.id, upload=pdf_upload())

    product_model_service.delete_model_by_admin(db_session, personal.id)
    product_model_service.delete_model_by_admin(db_session, public.id)

    assert product_model_service.list_all_models(db_session) == []
    with pytest.raises(ModelNotFoundError):
        product_model_service.get_model(db_session, public.id)


def test_file_deletion_failure_keeps_model_and_manual(db_session, two_users, pdf_upload, document_store, monkeypatch):
    first, _ = two_users
    model = register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload())

    def _broken_detach(stored_value: str):
        raise StorageError("Unable to delete manual file")

    monkeypatch.setattr(document_store, "detach", _broken_detach)

    with pytest.raises(StorageError):
        product_model_service.delete_personal_model(db_session, model.id, user_id=first.id)

    db_session.expire_all()
    reloaded = db_session.get(ProductModel, model.id)
    assert reloaded is not None
    assert db_session.get(Manual, reloaded.manual_id) is not None


def _failing_commit() -> None:
    raise OperationalError("COMMIT", None, Exception("disk I/O error"))


def test_commit_failure_keeps_model_manual_and_file(db_session, two_users, pdf_upload, document_store, stored_files, monkeypatch):
    first, _ = two_users
    model = register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload())
    manual = db_session.get(Manual, model.manual_id)
    key = manual.file_path

    monkeypatch.setattr(db_session, "commit", _failing_commit)

    with pytest.raises(StorageError):
        product_model_service.delete_personal_model(db_session, model.id, user_id=first.id)

    db_session.expire_all()
    reloaded = db_session.get(ProductModel, model.id)
    assert reloaded is not None
    assert reloaded.manual_id == manual.id
    assert db_session.get(Manual, manual.id) is not None
    assert document_store.exists(key)
    assert [path.name for path in stored_files()] == [key]


def test_commit_failure_keeps_manual_file_on_manual_delete(db_session, two_users, pdf_upload, document_store, stored_files, monkeypatch):
    first, _ = two_users
    model = register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload())
    key = db_session.get(Manual, model.manual_id).file_path

    monkeypatch.setattr(db_session, "commit", _failing_commit)

    with pytest.raises(StorageError):
        delete_manual_for_model(db_session, model.id, requester=first)

    db_session.expire_all()
    assert db_session.get(ProductModel, model.id).manual_id is not None
    assert document_store.exists(key)
    assert [path.name for path in stored_files()] == [key]


def test_queries_separate_public_and_personal_models(db_session, two_users, category_factory, pdf_upload):
    first, second = two_users
    printers = category_factory("Acme", "Printers", category_id=5)
    scanners = category_factory("Acme", "Scanners")
    register_public_model(db_session, name="PRNT-200", category_id=printers.id, upload=pdf_upload())
    register_public_model(db_session, name="SCAN-10", category_id=scanners.id, upload=pdf_upload())
    register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload())

    assert [m.name for m in product_model_service.list_public_models(db_session)] == ["PRNT-200", "SCAN-10"]
    assert [m.name for m in product_model_service.list_public_models_by_category(db_session, scanners.id)] == ["SCAN-10"]
    assert [m.name for m in product_model_service.list_user_models(db_session, first.id)] == ["Toaster"]
    assert product_model_service.list_user_models(db_session, second.id) == []
    assert len(product_model_service.list_all_models(db_session)) == 3


def test_manual_registry_access_rules(db_session, two_users, category_factory, pdf_upload):
    first, second = two_users
    category = category_factory(category_id=5)
    personal = register_personal_model(db_session, name="Toaster", owner=first, upload=pdf_upload("toaster.pdf"))
    public = register_public_model(db_session, name="PRNT-200", category_id=category.id, upload=pdf_upload())

    manual, path = load_manual_file(db_session, personal.manual_id, requester=first)
    assert manual.file_name == "toaster.pdf"
    assert path.is_file()

    with pytest.raises(ForbiddenError):
        load_manual_file(db_session, personal.manual_id, requester=second)
    # Public manuals are readable by everyone.
    load_manual_file(db_session, public.manual_id, requester=second)

    assert [m.file_name for m in list_manuals_for_uploader(db_session, first.id)] == ["toaster.pdf"]

    with pytest.raises(ForbiddenError):
        delete_manual_for_model(db_session, personal.id, requester=second)
    delete_manual_for_model(db_session, personal.id, requester=first)

    db_session.expire_all()
    assert db_session.get(ProductModel, personal.id).manual_id is None
    with pytest.raises(ManualNotFoundError):
        delete_manual_for_model(db_session, personal.id, requester=first)
