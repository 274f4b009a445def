"""경력/기술 카테고리/도구 관리 API 라우터입니다."""

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.portfolio import (
    ExperienceCreate,
    ExperienceOut,
    ExperienceUpdate,
    SkillCategoryCreate,
    SkillCategoryOut,
    SkillCategoryUpdate,
    ToolCreate,
    ToolOut,
    ToolUpdate,
)
from app.services import portfolio_service
from app.services.audit_service import track
from app.utils.permissions import CONTENT_EDITORS

router = APIRouter(tags=["portfolio"])


@router.get("/api/admin/experience", response_model=ApiResponse[List[ExperienceOut]])
def list_experience(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(portfolio_service.list_experience(db))


@router.post("/api/admin/experience", response_model=ApiResponse[ExperienceOut], status_code=201)
def create_experience(
    data: ExperienceCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.create_experience(db, data)
    track(background_tasks, request, current_user, "create", "experience", resource_id=row.experience_id)
    return ok(row, "경력이 추가되었습니다.")


@router.put("/api/admin/experience/{experience_id}", response_model=ApiResponse[ExperienceOut])
def update_experience(
    experience_id: int,
    data: ExperienceUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.update_experience(db, experience_id, data)
    track(background_tasks, request, current_user, "update", "experience", resource_id=experience_id)
    return ok(row, "경력이 수정되었습니다.")


@router.delete("/api/admin/experience/{experience_id}", response_model=ApiResponse[None])
def delete_experience(
    experience_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    portfolio_service.delete_experience(db, experience_id)
    track(background_tasks, request, current_user, "delete", "experience", resource_id=experience_id, severity="medium")
    return ok(message="삭제되었습니다.")


@router.get("/api/admin/skills", response_model=ApiResponse[List[SkillCategoryOut]])
def list_skills(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(portfolio_service.list_skill_categories(db))


@router.post("/api/admin/skills", response_model=ApiResponse[SkillCategoryOut], status_code=201)
def create_skill_category(
    data: SkillCategoryCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.create_skill_category(db, data)
    track(background_tasks, request, current_user, "create", "skill_category", resource_id=row.category_id)
    return ok(row, "기술 카테고리가 추가되었습니다.")


@router.put("/api/admin/skills/{category_id}", response_model=ApiResponse[SkillCategoryOut])
def update_skill_category(
    category_id: int,
    data: SkillCategoryUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.update_skill_category(db, category_id, data)
    track(background_tasks, request, current_user, "update", "skill_category", resource_id=category_id)
    return ok(row, "기술 카테고리가 수정되었습니다.")


@router.delete("/api/admin/skills/{category_id}", response_model=ApiResponse[None])
def delete_skill_category(
    category_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    portfolio_service.delete_skill_category(db, category_id)
    track(background_tasks, request, current_user, "delete", "skill_category", resource_id=category_id, severity="medium")
    return ok(message="삭제되었습니다.")


@router.get("/api/admin/tools", response_model=ApiResponse[List[ToolOut]])
def list_tools(
    category_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(portfolio_service.list_tools(db, category_id))


@router.post("/api/admin/tools", response_model=ApiResponse[ToolOut], status_code=201)
def create_tool(
    data: ToolCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.create_tool(db, data)
    track(background_tasks, request, current_user, "create", "tool", resource_id=row.tool_id)
    return ok(row, "도구가 추가되었습니다.")


@router.put("/api/admin/tools/{tool_id}", response_model=ApiResponse[ToolOut])
def update_tool(
    tool_id: int,
    data: ToolUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    row = portfolio_service.update_tool(db, tool_id, data)
    track(background_tasks, request, current_user, "update", "tool", resource_id=tool_id)
    return ok(row, "도구가 수정되었습니다.")


@router.delete("/api/admin/tools/{tool_id}", response_model=ApiResponse[None])
def delete_tool(
    tool_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    portfolio_service.delete_tool(db, tool_id)
    track(background_tasks, request, current_user, "delete", "tool", resource_id=tool_id, severity="medium")
    return ok(message="삭제되었습니다.")
