"""사이트 섹션/설정과 콘텐츠 버전 이력 API 라우터입니다."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.portfolio import ContentSectionOut, ContentSectionUpsert, SiteSettingOut, SiteSettingUpdate
from app.schemas.version import (
    ContentRestoreRequest,
    ContentRestoreResult,
    ContentType,
    ContentVersionOut,
    VersionComparison,
)
from app.services import portfolio_service, version_service
from app.services.audit_service import track
from app.utils.permissions import ADMIN, CONTENT_EDITORS

router = APIRouter(prefix="/api/admin/content", tags=["content"])


@router.get("")
def get_content(
    section: Optional[str] = None,
    published_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if section:
        row = portfolio_service.get_section(db, section)
        return ok(ContentSectionOut.model_validate(row))
    rows = portfolio_service.list_sections(db, published_only)
    return ok([ContentSectionOut.model_validate(row) for row in rows])


@router.post("", response_model=ApiResponse[ContentSectionOut])
def save_content(
    data: ContentSectionUpsert,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.upsert_section(db, data, current_user)
    track(background_tasks, request, current_user, "update", "content_section", resource_id=row.section_key)
    return ok(row, "콘텐츠가 저장되었습니다.")


@router.delete("", response_model=ApiResponse[None])
def delete_content(
    request: Request,
    background_tasks: BackgroundTasks,
    section: str = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    portfolio_service.delete_section(db, section)
    track(background_tasks, request, current_user, "delete", "content_section", resource_id=section, severity="medium")
    return ok(message="삭제되었습니다.")


@router.get("/settings", response_model=ApiResponse[List[SiteSettingOut]])
def list_settings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(portfolio_service.list_settings(db))


@router.put("/settings/{setting_key}", response_model=ApiResponse[SiteSettingOut])
def update_setting(
    setting_key: str,
    data: SiteSettingUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    row = portfolio_service.update_setting(db, setting_key, data)
    track(background_tasks, request, current_user, "update", "site_settings", resource_id=setting_key)
    return ok(row, "설정이 저장되었습니다.")


@router.get("/versions", response_model=ApiResponse[List[ContentVersionOut]])
def list_versions(
    content_type: ContentType = Query(..., alias="contentType"),
    content_id: int = Query(..., alias="contentId"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    rows = version_service.list_versions(db, content_type=content_type, content_id=content_id, limit=limit)
    return ok([version_service.to_response(row) for row in rows])


@router.put("/versions", response_model=ApiResponse[ContentRestoreResult])
def restore_version(
    body: ContentRestoreRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    _, row = version_service.restore_version(
        db,
        content_type=body.content_type,
        content_id=body.content_id,
        version=body.version,
        restored_by=current_user.user_id,
    )
    track(
        background_tasks, request, current_user, "restore", body.content_type,
        resource_id=body.content_id, severity="medium",
        metadata={"restored_from_version": body.version, "new_version": row.version},
    )
    result = ContentRestoreResult(
        content_type=body.content_type,
        content_id=body.content_id,
        restored_version=body.version,
        new_version=row.version,
    )
    return ok(result, f"버전 {body.version}(으)로 복원되었습니다.")


@router.get("/compare", response_model=ApiResponse[VersionComparison])
def compare_versions(
    content_type: ContentType = Query(..., alias="contentType"),
    content_id: int = Query(..., alias="contentId"),
    version1: int = Query(...),
    version2: int = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(version_service.compare_versions(
        db, content_type=content_type, content_id=content_id, version1=version1, version2=version2
    ))
