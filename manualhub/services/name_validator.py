"""Validation rules for proposed product model names."""
from __future__ import annotations

import enum
from functools import lru_cache
from typing import Callable, Sequence

from fastapi import status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import ProductModel
from ..errors import ValidationError

MIN_NAME_LENGTH = 3

CodepointRange = tuple[int, int]


class NameRejection(str, enum.Enum):
    EMPTY_NAME = "EmptyName"
    TOO_SHORT = "TooShort"
    FORBIDDEN_SCRIPT = "ForbiddenScript"
    DUPLICATE_NAME = "DuplicateName"


_REJECTION_MESSAGES: dict[NameRejection, str] = {
    NameRejection.EMPTY_NAME: "Model name is required.",
    NameRejection.TOO_SHORT: f"Model name must be at least {MIN_NAME_LENGTH} characters long.",
    NameRejection.FORBIDDEN_SCRIPT: "Model name contains characters from a script that is not allowed.",
    NameRejection.DUPLICATE_NAME: "A model with this name already exists.",
}


class ModelNameError(ValidationError):
    """Raised when a proposed model name is rejected."""

    def __init__(self, reason: NameRejection, name: str | None = None) -> None:
        super().__init__(_REJECTION_MESSAGES[reason])
        self.reason = reason
        self.name = name
        if reason is NameRejection.DUPLICATE_NAME:
            self.status_code = status.HTTP_409_CONFLICT


def parse_codepoint_ranges(value: str) -> tuple[CodepointRange, ...]:
    """Parse ``"3131-3163,AC00-D7A3"`` style hex ranges into inclusive tuples."""

    ranges: list[CodepointRange] = []
    for chunk in (value or "").split(","):
        token = chunk.strip()
        if not token:
            continue
        start_raw, _, end_raw = token.partition("-")
        try:
            start = int(start_raw.strip(), 16)
            end = int((end_raw or start_raw).strip(), 16)
        except ValueError as exc:
            raise ValueError(f"Invalid codepoint range: {token!r}") from exc
        if end < start:
            raise ValueError(f"Codepoint range is reversed: {token!r}")
        ranges.append((start, end))
    return tuple(ranges)


@lru_cache(maxsize=1)
def forbidden_script_ranges() -> tuple[CodepointRange, ...]:
    return parse_codepoint_ranges(get_settings().forbidden_script_ranges)


def contains_forbidden_script(value: str, ranges: Sequence[CodepointRange]) -> bool:
    for char in value:
        codepoint = ord(char)
        for start, end in ranges:
            if start <= codepoint <= end:
                return True
    return False


def validate_model_name(
    name: str | None,
    *,
    name_exists: Callable[[str], bool] | None = None,
    forbidden_ranges: Sequence[CodepointRange] | None = None,
) -> str:
    """Return the accepted name or raise :class:`ModelNameError`.

    Rules are checked in order and the first failure wins: empty, too short,
    forbidden script, duplicate. The duplicate lookup is case-sensitive and is
    only consulted once the purely local checks have passed.
    """

    if name is None or not name.strip():
        raise ModelNameError(NameRejection.EMPTY_NAME, name)

    if len(name.strip()) < MIN_NAME_LENGTH:
        raise ModelNameError(NameRejection.TOO_SHORT, name)

    ranges = forbidden_script_ranges() if forbidden_ranges is None else forbidden_ranges
    if contains_forbidden_script(name, ranges):
        raise ModelNameError(NameRejection.FORBIDDEN_SCRIPT, name)

    if name_exists is not None and name_exists(name):
        raise ModelNameError(NameRejection.DUPLICATE_NAME, name)

    return name


def model_name_exists(db: Session, name: str, *, exclude_model_id: int | None = None) -> bool:
    stmt = select(ProductModel.id).where(ProductModel.name == name)
    if exclude_model_id is not None:
        stmt = stmt.where(ProductModel.id != exclude_model_id)
    return db.scalar(stmt.limit(1)) is not None


def ensure_model_name_available(db: Session, name: str | None, *, exclude_model_id: int | None = None) -> str:
    """Validate ``name`` against the format rules and the current catalog."""

    return validate_model_name(
        name,
        name_exists=lambda candidate: model_name_exists(db, candidate, exclude_model_id=exclude_model_id),
    )


__all__ = [
    "MIN_NAME_LENGTH",
    "NameRejection",
    "ModelNameError",
    "parse_codepoint_ranges",
    "forbidden_script_ranges",
    "contains_forbidden_script",
    "validate_model_name",
    "model_name_exists",
    "ensure_model_name_available",
]
