"""미디어 라이브러리 도메인 서비스입니다. 업로드 파일과 메타데이터 행을 함께 관리합니다."""

import logging
import mimetypes
import os
from typing import List, Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import NotFound
from app.models.media import MediaFile
from app.models.user import User
from app.utils.helpers import save_upload
from app.utils.permissions import is_admin

logger = logging.getLogger(__name__)

MEDIA_SUBFOLDER = "media"


def list_media(db: Session, mime_prefix: Optional[str] = None) -> List[MediaFile]:
    q = db.query(MediaFile)
    if mime_prefix:
        q = q.filter(MediaFile.mime_type.like(f"{mime_prefix}%"))
    return q.order_by(MediaFile.created_at.desc(), MediaFile.media_id.desc()).all()


def get_media(db: Session, media_id: int) -> MediaFile:
    row = db.get(MediaFile, media_id)
    if not row:
        raise NotFound("미디어 파일을 찾을 수 없습니다.")
    return row


async def upload_media(db: Session, file: UploadFile, current_user: User, alt_text: Optional[str] = None) -> MediaFile:
    saved = await save_upload(file, subfolder=MEDIA_SUBFOLDER)
    row = MediaFile(
        filename=saved["stored_name"],
        original_name=saved["filename"],
        url=saved["url"],
        mime_type=file.content_type or mimetypes.guess_type(saved["filename"])[0],
        size=saved["size"],
        alt_text=alt_text,
        uploaded_by=current_user.user_id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("[media] %s uploaded by %s (%d bytes)", row.filename, current_user.email, row.size)
    return row


def update_media(db: Session, media_id: int, alt_text: Optional[str]) -> MediaFile:
    row = get_media(db, media_id)
    row.alt_text = alt_text
    db.commit()
    db.refresh(row)
    return row


def delete_media(db: Session, media_id: int, current_user: User) -> None:
    row = get_media(db, media_id)
    if not is_admin(current_user) and row.uploaded_by != current_user.user_id:
        raise HTTPException(status_code=403, detail="본인이 업로드한 파일만 삭제할 수 있습니다.")
    path = os.path.join(settings.UPLOAD_DIR, MEDIA_SUBFOLDER, row.filename)
    if os.path.exists(path):
        os.remove(path)
    else:
        logger.warning("[media] file for %s is already missing", row.filename)
    db.delete(row)
    db.commit()
    logger.info("[media] %s deleted by %s", row.filename, current_user.email)
