"""Shared fixtures for the manualhub test-suite."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Iterator

import pytest
from sqlalchemy import delete

# Ensure the database URL and JWT secret are available before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_manualhub.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from manualhub.clients.ml_server import Answer, set_ml_client  # noqa: E402
from manualhub.database import Base, SessionLocal, engine  # noqa: E402
from manualhub.errors import CatalogError  # noqa: E402
from manualhub.models import Brand, Category, Manual, ProductModel, User  # noqa: E402
from manualhub.services.document_store import DocumentStore, set_document_store  # noqa: E402
from manualhub.services.ingestion_service import ManualUpload  # noqa: E402

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


class StubMLClient:
    """In-memory stand-in for the ML server."""

    def __init__(self) -> None:
        self.submissions: list[dict[str, object]] = []
        self.questions: list[tuple[str, str]] = []
        self.submit_error: CatalogError | None = None
        self.answer = Answer(message="success", answer="Press the power button [1].", images=["page-3.png"])

    def submit(self, data: bytes, *, filename: str, content_type: str, doc_name: str) -> None:
        self.submissions.append(
            {"data": data, "filename": filename, "content_type": content_type, "doc_name": doc_name}
        )
        if self.submit_error is not None:
            raise self.submit_error

    def ask(self, doc_name: str, question: str) -> Answer:
        self.questions.append((doc_name, question))
        return self.answer


def _wipe_tables() -> None:
    with SessionLocal() as session:
        session.execute(delete(Manual))
        session.execute(delete(ProductModel))
        session.execute(delete(Category))
        session.execute(delete(Brand))
        session.execute(delete(User))
        session.commit()


@pytest.fixture(scope="module", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.create_all(bind=engine)
    yield
    _wipe_tables()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    _wipe_tables()
    yield


@pytest.fixture(autouse=True)
def stub_ml() -> Iterator[StubMLClient]:
    client = StubMLClient()
    set_ml_client(client)
    yield client
    set_ml_client(None)


@pytest.fixture(autouse=True)
def document_store(tmp_path: Path) -> Iterator[DocumentStore]:
    store = DocumentStore(tmp_path / "manuals")
    set_document_store(store)
    yield store
    set_document_store(None)


@pytest.fixture
def db_session() -> Iterator:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_factory() -> Callable[..., User]:
    def _factory(email: str, *, role: str = "user") -> User:
        with SessionLocal() as session:
            user = User(email=email, hashed_password="test-hash", role=role)
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _factory


@pytest.fixture
def category_factory() -> Callable[..., Category]:
    def _factory(brand_name: str = "Acme", category_name: str = "Printers", *, category_id: int | None = None) -> Category:
        with SessionLocal() as session:
            brand = session.query(Brand).filter(Brand.name == brand_name).one_or_none()
            if brand is None:
                brand = Brand(name=brand_name)
                session.add(brand)
                session.flush()
            category = Category(name=category_name, brand_id=brand.id)
            if category_id is not None:
                category.id = category_id
            session.add(category)
            session.commit()
            session.refresh(category)
            return category

    return _factory


@pytest.fixture
def pdf_upload() -> Callable[..., ManualUpload]:
    def _factory(filename: str = "manual.pdf", *, content_type: str = "application/pdf", data: bytes = PDF_BYTES) -> ManualUpload:
        return ManualUpload(filename=filename, content_type=content_type, data=data)

    return _factory


@pytest.fixture
def stored_files(document_store: DocumentStore) -> Callable[[], list[Path]]:
    def _list() -> list[Path]:
        if not document_store.root.exists():
            return []
        return sorted(path for path in document_store.root.iterdir() if path.is_file())

    return _list
