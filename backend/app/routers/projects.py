"""프로젝트 관리 API 라우터입니다. 저장 시마다 버전 이력과 감사 로그를 남깁니다."""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.project import ProjectCreate, ProjectOut, ProjectUpdate
from app.services import content_service
from app.services.audit_service import track
from app.utils.permissions import CONTENT_EDITORS

router = APIRouter(prefix="/api/admin/projects", tags=["projects"])


@router.get("", response_model=ApiResponse[List[ProjectOut]])
def list_projects(
    published_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(content_service.list_content(db, "project", published_only))


@router.get("/slug/{slug}", response_model=ApiResponse[ProjectOut])
def get_project_by_slug(slug: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(content_service.get_by_slug(db, "project", slug))


@router.get("/{project_id}", response_model=ApiResponse[ProjectOut])
def get_project(project_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(content_service.get_content(db, "project", project_id))


@router.post("", response_model=ApiResponse[ProjectOut], status_code=201)
def create_project(
    data: ProjectCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    project = content_service.create_content(db, "project", data, current_user)
    track(background_tasks, request, current_user, "create", "project", resource_id=project.project_id,
          metadata={"slug": project.slug})
    return ok(project, "프로젝트가 생성되었습니다.")


@router.put("/{project_id}", response_model=ApiResponse[ProjectOut])
def update_project(
    project_id: int,
    data: ProjectUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    project = content_service.update_content(db, "project", project_id, data, current_user)
    track(background_tasks, request, current_user, "update", "project", resource_id=project_id)
    return ok(project, "프로젝트가 수정되었습니다.")


@router.delete("/{project_id}", response_model=ApiResponse[None])
def delete_project(
    project_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    content_service.delete_content(db, "project", project_id)
    track(background_tasks, request, current_user, "delete", "project", resource_id=project_id, severity="medium")
    return ok(message="삭제되었습니다.")
