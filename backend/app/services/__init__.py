"""서비스 레이어 패키지 초기화 모듈입니다."""

from app.services import (
    auth_service,
    audit_service,
    table_registry,
    version_service,
    content_service,
    portfolio_service,
    media_service,
    backup_service,
    data_transfer_service,
)
