"""Shared response envelopes."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class CommonResponse(BaseModel):
    """Envelope returned by every mutating endpoint and by the error handler."""

    message: str
    data: Any = None
