"""감사 로그 조회/집계/내보내기 API 라우터입니다."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import ValidationFailed
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.schemas.audit import (
    AuditCleanupResult,
    AuditEventFilter,
    AuditEventOut,
    AuditEventPage,
    AuditSummary,
    AuditTimelinePoint,
)
from app.schemas.common import ok
from app.services import audit_service
from app.utils.permissions import ADMIN

router = APIRouter(prefix="/api/admin/audit", tags=["audit"])

ACTIONS = ("events", "summary", "timeline", "search", "export")


def _filters(
    event_action: Optional[str] = Query(None, alias="eventAction"),
    resource: Optional[str] = None,
    user_id: Optional[int] = Query(None, alias="userId"),
    success: Optional[bool] = None,
    severity: Optional[str] = None,
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> AuditEventFilter:
    severities = [s.strip().lower() for s in (severity or "").split(",") if s.strip()]
    return AuditEventFilter(
        action=event_action,
        resource=resource,
        user_id=user_id,
        success=success,
        severity=severities or None,
        date_from=date_from,
        date_to=date_to,
        limit=limit,
        offset=offset,
    )


@router.get("")
def audit_query(
    request: Request,
    background_tasks: BackgroundTasks,
    action: str = "events",
    days: int = Query(30, ge=1, le=3650),
    query: Optional[str] = None,
    format: str = "json",
    filters: AuditEventFilter = Depends(_filters),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    if action == "events":
        rows, total = audit_service.list_events(db, filters)
        return ok(AuditEventPage(
            events=[AuditEventOut(**audit_service.to_response(row)) for row in rows],
            total=total,
            limit=filters.limit,
            offset=filters.offset,
        ))
    if action == "summary":
        return ok(AuditSummary(**audit_service.summarize(db, days)))
    if action == "timeline":
        return ok([AuditTimelinePoint(**point) for point in audit_service.timeline(db, days)])
    if action == "search":
        if not (query or "").strip():
            raise ValidationFailed("검색어(query)가 필요합니다.", code="MISSING_QUERY")
        rows = audit_service.search_events(db, query, filters.limit)
        return ok([AuditEventOut(**audit_service.to_response(row)) for row in rows])
    if action == "export":
        filename, content_type, body = audit_service.export_events(db, format, filters)
        audit_service.track(background_tasks, request, current_user, "export", "audit_log", severity="medium",
                            metadata={"format": format})
        return Response(
            content=body,
            media_type=content_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    raise ValidationFailed(
        f"지원하지 않는 action 입니다: {action} (허용: {', '.join(ACTIONS)})",
        code="INVALID_ACTION",
    )


@router.delete("")
def audit_cleanup(
    request: Request,
    background_tasks: BackgroundTasks,
    retention_days: Optional[int] = Query(None, alias="retentionDays", ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    """보존 기간이 지난 감사 이벤트를 삭제한다."""
    keep_days = retention_days or settings.AUDIT_RETENTION_DAYS
    deleted = audit_service.cleanup_old_events(db, keep_days)
    audit_service.track(background_tasks, request, current_user, "cleanup", "audit_log", severity="high",
                        metadata={"deleted": deleted, "retention_days": keep_days})
    return ok(AuditCleanupResult(deleted_count=deleted, retention_days=keep_days))
