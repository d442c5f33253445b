"""Tests for registration, login and the administrator bootstrap."""
from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select

from manualhub.config import get_settings
from manualhub.main import app
from manualhub.models import User
from manualhub.services import auth_service


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def test_register_login_and_me(client):
    response = client.post("/api/auth/register", json={"email": "Reader@Example.com", "password": "hunter22"})
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "user"
    assert body["token_type"] == "bearer"

    duplicate = client.post("/api/auth/register", json={"email": "reader@example.com", "password": "hunter22"})
    assert duplicate.status_code == 409

    bad_login = client.post("/api/auth/login", json={"email": "reader@example.com", "password": "wrong-pass"})
    assert bad_login.status_code == 401

    login = client.post("/api/auth/login", json={"email": "reader@example.com", "password": "hunter22"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "reader@example.com"


def test_me_requires_a_valid_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}).status_code == 401


def test_admin_only_routes_reject_regular_users(client):
    register = client.post("/api/auth/register", json={"email": "user@example.com", "password": "hunter22"})
    token = register.json()["access_token"]

    response = client.post("/api/brands", json={"name": "Acme"}, headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_ensure_default_admin_is_idempotent(db_session, monkeypatch):
    settings = get_settings().model_copy(
        update={"default_admin_email": "Admin@Example.com", "default_admin_password": "s3cret-admin"}
    )
    monkeypatch.setattr(auth_service, "get_settings", lambda: settings)

    first = auth_service.ensure_default_admin(db_session)
    second = auth_service.ensure_default_admin(db_session)

    assert first is not None and second is not None
    assert first.id == second.id
    assert first.is_admin
    admins = list(db_session.scalars(select(User).where(User.email == "admin@example.com")))
    assert len(admins) == 1
    assert auth_service.verify_password("s3cret-admin", admins[0].hashed_password)


def test_ensure_default_admin_skips_when_unconfigured(db_session, monkeypatch):
    settings = get_settings().model_copy(update={"default_admin_email": None, "default_admin_password": None})
    monkeypatch.setattr(auth_service, "get_settings", lambda: settings)

    assert auth_service.ensure_default_admin(db_session) is None
    assert list(db_session.scalars(select(User))) == []
