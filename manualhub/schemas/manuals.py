"""Pydantic schemas for manual records."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ManualResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: int
    file_name: str
    model_name: str
    upload_date: datetime
    uploader_id: int | None = None
    ml_processed: bool
    product_model_id: int | None = None
