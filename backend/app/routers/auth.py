"""관리자 인증 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.common import ApiResponse, ok
from app.schemas.user import LoginRequest, TokenResponse, UserOut
from app.services.audit_service import track
from app.services.auth_service import create_access_token, mock_login
from app.middleware.auth_middleware import get_current_user
from app.models.user import User

router = APIRouter(prefix="/api/admin/auth", tags=["auth"])


@router.post("/login", response_model=ApiResponse[TokenResponse])
def login(
    body: LoginRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    user = mock_login(db, body.email)
    token = create_access_token(user.user_id, user.role)
    track(background_tasks, request, user, "login", "auth", resource_id=user.user_id)
    return ok(TokenResponse(access_token=token, user=UserOut.model_validate(user)))


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    request: Request,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
):
    track(background_tasks, request, current_user, "logout", "auth", resource_id=current_user.user_id)
    return ok(message="로그아웃 되었습니다.")


@router.get("/me", response_model=ApiResponse[UserOut])
def me(current_user: User = Depends(get_current_user)):
    return ok(current_user)
