"""Pydantic schemas for the manual question-answering endpoint."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: int = Field(..., alias="modelId")
    question: str = Field(..., min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    message: str | None = None
    answer: str | None = None
    images: list[str] = Field(default_factory=list)
