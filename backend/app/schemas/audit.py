"""감사 로그 조회/집계 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AuditEventFilter(BaseModel):
    action: Optional[str] = None
    resource: Optional[str] = None
    user_id: Optional[int] = None
    success: Optional[bool] = None
    severity: Optional[List[str]] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    limit: int = Field(default=50, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class AuditEventOut(BaseModel):
    event_id: int
    action: str
    resource: str
    resource_id: Optional[str] = None
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    ip_address: Optional[str] = None
    timestamp: datetime
    success: bool
    severity: str
    metadata: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None


class AuditEventPage(BaseModel):
    events: List[AuditEventOut]
    total: int
    limit: int
    offset: int


class AuditCount(BaseModel):
    count: int
    action: Optional[str] = None
    user: Optional[str] = None


class AuditSummary(BaseModel):
    total_events: int
    recent_activity: int
    top_actions: List[AuditCount]
    top_users: List[AuditCount]
    failure_rate: float
    critical_events: int


class AuditTimelinePoint(BaseModel):
    date: str
    events: int
    failures: int
    critical: int


class AuditCleanupResult(BaseModel):
    deleted_count: int
    retention_days: int
