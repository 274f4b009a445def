"""관리자 역할 상수와 역할 판별 헬퍼입니다."""

from app.models.user import User


ADMIN = "admin"
EDITOR = "editor"
VIEWER = "viewer"

CONTENT_EDITORS = (ADMIN, EDITOR)
ALL_ROLES = (ADMIN, EDITOR, VIEWER)


def is_admin(user: User) -> bool:
    return user.role == ADMIN
