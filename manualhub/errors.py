"""Typed failures raised by the catalog, ingestion and Q&A services.

Routers never inspect messages; they rely on the category (and its
``status_code``) to build the HTTP response.
"""
from __future__ import annotations

from fastapi import status


class CatalogError(RuntimeError):
    """Base class for every domain failure surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Raised when caller-supplied input violates a domain rule."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidManualFileError(ValidationError):
    """Raised when an uploaded manual is empty or not a PDF."""


class ExternalProcessingError(CatalogError):
    """Raised when the ML server rejects a request or cannot be reached."""

    status_code = status.HTTP_502_BAD_GATEWAY


class StorageError(CatalogError):
    """Raised when the document store cannot complete a filesystem operation."""


class DocumentNotReadableError(StorageError):
    """Raised when a stored manual cannot be resolved to a readable file."""

    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(CatalogError):
    """Raised when the requester lacks ownership or role for an operation."""

    status_code = status.HTTP_403_FORBIDDEN


class ForbiddenError(AuthorizationError):
    """Raised when a user acts on a model or manual they do not own."""


class WrongClassError(AuthorizationError):
    """Raised when a public-model operation targets a personal model (or vice versa)."""

    status_code = status.HTTP_409_CONFLICT


class NotFoundError(CatalogError):
    """Raised when a referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ModelNotFoundError(NotFoundError):
    pass


class CategoryNotFoundError(NotFoundError):
    pass


class BrandNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class ManualNotFoundError(NotFoundError):
    pass


class ConflictError(ValidationError):
    """Raised when a write collides with an existing unique value."""

    status_code = status.HTTP_409_CONFLICT


__all__ = [
    "CatalogError",
    "ValidationError",
    "InvalidManualFileError",
    "ExternalProcessingError",
    "StorageError",
    "DocumentNotReadableError",
    "AuthorizationError",
    "ForbiddenError",
    "WrongClassError",
    "NotFoundError",
    "ModelNotFoundError",
    "CategoryNotFoundError",
    "BrandNotFoundError",
    "UserNotFoundError",
    "ManualNotFoundError",
    "ConflictError",
]
