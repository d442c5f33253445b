"""Question-answering route for ingested manuals."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_session
from ..schemas import ChatRequest, ChatResponse
from ..services import answer_question

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("/manual", response_model=ChatResponse)
def ask_manual_endpoint(payload: ChatRequest, db: Session = Depends(get_session)) -> ChatResponse:
    answer = answer_question(db, model_id=payload.model_id, question=payload.question)
    return ChatResponse(message=answer.message, answer=answer.answer, images=answer.images)
