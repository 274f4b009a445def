"""관리자 인증 도메인 서비스입니다. 토큰 발급과 모의 로그인(이메일 기반)을 담당합니다."""

import logging
from datetime import datetime, timedelta

from fastapi import HTTPException, status
from jose import jwt
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User
from app.utils.permissions import ALL_ROLES

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(user_id: int, role: str) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "role": role, "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def mock_login(db: Session, email: str) -> User:
    # 실제 비밀번호/SSO 검증은 외부 인증 계층의 몫이다.
    normalized = email.strip().lower()
    user = (
        db.query(User)
        .filter(func.lower(User.email) == normalized, User.is_active == True)
        .first()
    )
    if not user or user.role not in ALL_ROLES:
        logger.warning("[auth] login rejected for %s", normalized)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"'{email}'에 해당하는 활성 관리자 계정을 찾을 수 없습니다.",
        )
    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user
