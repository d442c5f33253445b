"""Helpers for reading credentials (JWT key, ML server key, admin password)."""
from __future__ import annotations

import os
from typing import Final

__all__ = ["MissingSecretError", "require_secret", "is_placeholder", "usable_secret"]


class MissingSecretError(RuntimeError):
    """Raised when a required secret environment variable is missing or a placeholder."""


# Values shipped in sample .env files; never accepted as real credentials.
_PLACEHOLDER_VALUES: Final[frozenset[str]] = frozenset(
    {
        "changeme",
        "change-me",
        "placeholder",
        "example",
        "your-api-key",
        "your-key-here",
    }
)


def is_placeholder(value: str | None) -> bool:
    if not value:
        return True
    normalized = value.strip().lower()
    return not normalized or normalized in _PLACEHOLDER_VALUES


def usable_secret(value: str | None) -> str | None:
    """Return the trimmed value, or ``None`` when it is empty or a placeholder."""

    if is_placeholder(value):
        return None
    return value.strip()


def require_secret(name: str) -> str:
    value = usable_secret(os.getenv(name))
    if value is None:
        raise MissingSecretError(f"Environment variable {name} is required and must not use a placeholder value")
    return value
