"""블로그 게시글 관리 API 라우터입니다."""

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.middleware.auth_middleware import get_current_user, require_roles
from app.models.user import User
from app.schemas.blog import BlogPostCreate, BlogPostOut, BlogPostUpdate
from app.schemas.common import ApiResponse, ok
from app.services import content_service
from app.services.audit_service import track
from app.utils.permissions import CONTENT_EDITORS

router = APIRouter(prefix="/api/admin/blog", tags=["blog"])


@router.get("", response_model=ApiResponse[List[BlogPostOut]])
def list_posts(
    published_only: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ok(content_service.list_content(db, "blog", published_only))


@router.get("/slug/{slug}", response_model=ApiResponse[BlogPostOut])
def get_post_by_slug(slug: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(content_service.get_by_slug(db, "blog", slug))


@router.get("/{post_id}", response_model=ApiResponse[BlogPostOut])
def get_post(post_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return ok(content_service.get_content(db, "blog", post_id))


@router.post("", response_model=ApiResponse[BlogPostOut], status_code=201)
def create_post(
    data: BlogPostCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    post = content_service.create_content(db, "blog", data, current_user)
    track(background_tasks, request, current_user, "create", "blog", resource_id=post.post_id,
          metadata={"slug": post.slug, "published": bool(post.is_published)})
    return ok(post, "게시글이 생성되었습니다.")


@router.put("/{post_id}", response_model=ApiResponse[BlogPostOut])
def update_post(
    post_id: int,
    data: BlogPostUpdate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    post = content_service.update_content(db, "blog", post_id, data, current_user)
    track(background_tasks, request, current_user, "update", "blog", resource_id=post_id)
    return ok(post, "게시글이 수정되었습니다.")


@router.delete("/{post_id}", response_model=ApiResponse[None])
def delete_post(
    post_id: int,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(*CONTENT_EDITORS)),
):
    content_service.delete_content(db, "blog", post_id)
    track(background_tasks, request, current_user, "delete", "blog", resource_id=post_id, severity="medium")
    return ok(message="삭제되었습니다.")
