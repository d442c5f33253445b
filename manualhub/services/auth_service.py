"""Accounts, bearer tokens and role guards for the catalog API."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_session
from ..models import ROLE_ADMIN, ROLE_USER, User
from ..schemas import RegisterRequest
from ..security.secrets import MissingSecretError, is_placeholder, require_secret

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
DEFAULT_TOKEN_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "1440"))


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    try:
        return _pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.exception("Password verification failed due to an unexpected error")
        return False


def create_access_token(subject: int, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT holding the provided user id."""

    expire_delta = timedelta(minutes=expires_minutes or DEFAULT_TOKEN_MINUTES)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "exp": now + expire_delta, "iat": now}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=ALGORITHM)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> int:
    """Return the user id carried by ``token`` or raise a 401."""

    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
        return int(payload["sub"])
    except JWTError as exc:
        raise _unauthorized("Invalid token") from exc
    except (KeyError, TypeError, ValueError) as exc:
        raise _unauthorized("Invalid token payload") from exc


def register_user(db: Session, payload: RegisterRequest) -> Tuple[User, str]:
    """Persist a new user and return the user with an access token."""

    email = _normalize_email(str(payload.email))
    existing = db.scalar(select(User).where(User.email == email))
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")

    user = User(email=email, hashed_password=hash_password(payload.password), role=ROLE_USER)

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to register user")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to register user") from exc

    logger.info("Registered user %s", user.id)
    return user, create_access_token(user.id)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user against stored credentials."""

    user = db.scalar(select(User).where(User.email == _normalize_email(email)))
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def ensure_default_admin(db: Session) -> User | None:
    """Create the configured administrator account when it does not exist yet.

    Skipped when ``DEFAULT_ADMIN_EMAIL`` or ``DEFAULT_ADMIN_PASSWORD`` is unset.
    An existing account with that email is left untouched.
    """

    settings = get_settings()
    if not settings.default_admin_email or is_placeholder(settings.default_admin_password):
        logger.info("Default administrator not configured; skipping bootstrap")
        return None

    email = _normalize_email(settings.default_admin_email)
    existing = db.scalar(select(User).where(User.email == email))
    if existing is not None:
        logger.debug("Default administrator %s already exists", email)
        return existing

    admin = User(email=email, hashed_password=hash_password(settings.default_admin_password), role=ROLE_ADMIN)
    try:
        db.add(admin)
        db.commit()
        db.refresh(admin)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to create default administrator")
        raise

    logger.info("Created default administrator account %s", email)
    return admin


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
    db: Session = Depends(get_session),
) -> User:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing bearer token")

    user = db.get(User, decode_access_token(credentials.credentials))
    if user is None:
        # Token outlived its account.
        raise _unauthorized("Invalid token")
    return user


def require_roles(*allowed_roles: str):
    normalized = {role.lower() for role in allowed_roles if role}

    def _resolver(user: User = Depends(get_current_user)) -> User:
        role = (getattr(user, "role", None) or ROLE_USER).lower()
        if normalized and role not in normalized:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _resolver


def require_admin():
    return require_roles(ROLE_ADMIN)


__all__ = [
    "register_user",
    "authenticate_user",
    "create_access_token",
    "decode_access_token",
    "ensure_default_admin",
    "hash_password",
    "verify_password",
    "get_current_user",
    "require_roles",
    "require_admin",
]
