"""관리자 API 인증/인가 의존성입니다.

토큰의 role 클레임이 현재 계정 역할과 다르면(역할 변경 이후 발급 토큰) 재로그인을 요구한다.
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from app.database import get_db
from app.models.user import User
from app.config import settings
from app.services.auth_service import ALGORITHM

# 토큰 누락도 401 AUTHENTICATION_ERROR로 통일하기 위해 직접 검사한다.
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise _unauthorized("토큰이 유효하지 않거나 만료되었습니다.")


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise _unauthorized("로그인이 필요합니다.")

    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("토큰에 사용자 정보가 없습니다.")

    user = db.query(User).filter(User.user_id == user_id, User.is_active == True).first()
    if not user:
        raise _unauthorized("비활성화되었거나 존재하지 않는 계정입니다.")
    if payload.get("role") != user.role:
        raise _unauthorized("계정 권한이 변경되었습니다. 다시 로그인해 주세요.")
    return user


def require_roles(*roles: str):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"권한이 없습니다. 필요한 역할: {', '.join(roles)}",
            )
        return current_user
    return checker
