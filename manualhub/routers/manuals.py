"""Manual listing and download routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import ManualResponse
from ..services import get_current_user, list_manuals_for_uploader, load_manual_file

router = APIRouter(prefix="/api/manuals", tags=["manuals"])


@router.get("/mine", response_model=list[ManualResponse])
def list_my_manuals_endpoint(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> list[ManualResponse]:
    return [ManualResponse.model_validate(manual) for manual in list_manuals_for_uploader(db, current_user.id)]


@router.get("/{manual_id}/download")
def download_manual_endpoint(
    manual_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_session),
) -> FileResponse:
    manual, path = load_manual_file(db, manual_id, requester=current_user)
    return FileResponse(path, media_type="application/pdf", filename=manual.file_name)
