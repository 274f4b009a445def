"""케이스 스터디 관리 API 라우터입니다. 저장 시마다 버전 이력과 감사 로그를 남깁니다."""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.project import CaseStudyCreate, CaseStudyOut, CaseStudyUpdate
from app.services import content_service
from app.services.audit_service import track
from app.utils.permissions import CONTENT_EDITORS

router = APIRouter(prefix="/api/admin/case-studies", tags=["case-studies"])


@router.get("", response_model=ApiResponse[List[CaseStudyOut]])
def list_case_studies(
    published_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(content_service.list_content(db, "case_study", published_only))


@router.get("/slug/{slug}", response_model=ApiResponse[CaseStudyOut])
def get_case_study_by_slug(slug: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(content_service.get_by_slug(db, "case_study", slug))


@router.get("/{case_study_id}", response_model=ApiResponse[CaseStudyOut])
def get_case_study(case_study_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(content_service.get_content(db, "case_study", case_study_id))


@router.post("", response_model=ApiResponse[CaseStudyOut], status_code=201)
def create_case_study(
    data: CaseStudyCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    case_study = content_service.create_content(db, "case_study", data, current_user)
    track(background_tasks, request, current_user, "create", "case_study", resource_id=case_study.case_study_id,
          metadata={"slug": case_study.slug})
    return ok(case_study, "케이스 스터디가 생성되었습니다.")


@router.put("/{case_study_id}", response_model=ApiResponse[CaseStudyOut])
def update_case_study(
    case_study_id: int,
    data: CaseStudyUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    case_study = content_service.update_content(db, "case_study", case_study_id, data, current_user)
    track(background_tasks, request, current_user, "update", "case_study", resource_id=case_study_id)
    return ok(case_study, "케이스 스터디가 수정되었습니다.")


@router.delete("/{case_study_id}", response_model=ApiResponse[None])
def delete_case_study(
    case_study_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    content_service.delete_content(db, "case_study", case_study_id)
    track(background_tasks, request, current_user, "delete", "case_study", resource_id=case_study_id, severity="medium")
    return ok(message="삭제되었습니다.")
