"""미디어 라이브러리 API 라우터입니다. 업로드는 multipart/form-data로 받습니다."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.media import MediaFileOut, MediaUpdate
from app.services import media_service
from app.services.audit_service import track
from app.utils.permissions import CONTENT_EDITORS

router = APIRouter(prefix="/api/admin/media", tags=["media"])


@router.get("", response_model=ApiResponse[List[MediaFileOut]])
def list_media(
    mime_type: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(media_service.list_media(db, mime_type))


@router.post("", response_model=ApiResponse[MediaFileOut], status_code=201)
async def upload_media(
    request: Request,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    alt_text: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = await media_service.upload_media(db, file, current_user, alt_text)
    track(background_tasks, request, current_user, "upload", "media", resource_id=row.media_id,
          metadata={"filename": row.original_name, "size": row.size})
    return ok(row, "파일이 업로드되었습니다.")


@router.put("/{media_id}", response_model=ApiResponse[MediaFileOut])
def update_media(
    media_id: int,
    data: MediaUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    return ok(media_service.update_media(db, media_id, data.alt_text))


@router.delete("", response_model=ApiResponse[None])
def delete_media(
    id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    media_service.delete_media(db, id, current_user)
    track(background_tasks, request, current_user, "delete", "media", resource_id=id, severity="medium")
    return ok(message="파일이 삭제되었습니다.")
