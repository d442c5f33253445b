"""Question answering over an ingested manual, delegated to the ML server."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..clients.ml_server import Answer, ManualProcessingClient, get_ml_client
from ..errors import ValidationError
from .product_model_service import get_model

logger = logging.getLogger(__name__)


def answer_question(
    db: Session,
    *,
    model_id: int,
    question: str,
    client: ManualProcessingClient | None = None,
) -> Answer:
    """Ask the ML server about the manual of ``model_id``.

    The ML server indexes documents by model name, so the name (not the id)
    is sent as ``doc_name``.
    """

    if not (question or "").strip():
        raise ValidationError("Question is required.")

    model = get_model(db, model_id)
    logger.info("Answering question for model %s (%s)", model.id, model.name)
    return (client or get_ml_client()).ask(model.name, question)


__all__ = ["answer_question"]
