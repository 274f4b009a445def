"""감사 로그 기록/조회 도메인 서비스입니다.

기록은 요청 처리와 분리된 부가 경로다. `AuditLogger.record`는 절대 예외를 던지지 않고
제한된 크기의 메모리 큐에 이벤트를 넣기만 하며, 실제 DB 쓰기는 응답 이후 백그라운드
작업(`flush`)에서 수행한다. 큐가 가득 차거나 쓰기가 실패한 이벤트는 버려진다(최대 1회 전달).
"""

import csv
import io
import json
import logging
import queue
import threading
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import BackgroundTasks, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.config import settings
from app.models.audit import AuditEvent
from app.schemas.audit import AuditEventFilter

logger = logging.getLogger(__name__)

SEVERITIES = ("low", "medium", "high", "critical")
EXPORT_FORMATS = {"json": "application/json", "csv": "text/csv"}
EXPORT_COLUMNS = [
    "event_id", "timestamp", "action", "resource", "resource_id", "user_id",
    "user_email", "ip_address", "success", "severity", "error_message", "metadata",
]


def _normalize_severity(value: Optional[str]) -> str:
    text = str(value or "low").strip().lower()
    return text if text in SEVERITIES else "low"


class AuditLogger:
    def __init__(self, session_factory: Optional[Callable[[], Session]] = None, max_queue: Optional[int] = None):
        self._session_factory = session_factory
        self._max_queue = max_queue or settings.AUDIT_QUEUE_SIZE
        self._queue: "queue.Queue[Dict[str, Any]]" = queue.Queue(maxsize=self._max_queue)
        self._flush_lock = threading.Lock()
        self.dropped = 0

    def configure(self, session_factory: Optional[Callable[[], Session]] = None, max_queue: Optional[int] = None) -> None:
        if session_factory is not None:
            self._session_factory = session_factory
        if max_queue is not None and max_queue != self._max_queue:
            self._max_queue = max_queue
            self._queue = queue.Queue(maxsize=max_queue)

    def reset(self) -> None:
        self._queue = queue.Queue(maxsize=self._max_queue)
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def record(
        self,
        action: str,
        resource: str,
        *,
        resource_id: Any = None,
        user_id: Optional[int] = None,
        user_email: Optional[str] = None,
        ip_address: Optional[str] = None,
        success: bool = True,
        severity: str = "low",
        metadata: Optional[Dict[str, Any]] = None,
        error_message: Optional[str] = None,
    ) -> bool:
        event = {
            "action": str(action),
            "resource": str(resource),
            "resource_id": str(resource_id) if resource_id is not None else None,
            "user_id": user_id,
            "user_email": user_email,
            "ip_address": ip_address,
            "timestamp": datetime.utcnow(),
            "success": bool(success),
            "severity": _normalize_severity(severity),
            "meta": metadata,
            "error_message": error_message,
        }
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            self.dropped += 1
            logger.warning("[audit] queue full, dropped event %s/%s", action, resource)
            return False

    def flush(self) -> int:
        """큐에 쌓인 이벤트를 DB에 기록하고 기록된 개수를 돌려준다."""
        with self._flush_lock:
            batch: List[Dict[str, Any]] = []
            while True:
                try:
                    batch.append(self._queue.get_nowait())
                except queue.Empty:
                    break
            if not batch:
                return 0

            factory = self._session_factory
            if factory is None:
                from app.database import SessionLocal
                factory = SessionLocal

            db = factory()
            try:
                db.add_all([AuditEvent(**event) for event in batch])
                db.commit()
                return len(batch)
            except Exception as exc:
                db.rollback()
                self.dropped += len(batch)
                logger.warning("[audit] failed to write %d events: %s", len(batch), exc)
                return 0
            finally:
                db.close()


audit_logger = AuditLogger()


def client_ip(request: Optional[Request]) -> Optional[str]:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def track(
    background_tasks: BackgroundTasks,
    request: Optional[Request],
    user,
    action: str,
    resource: str,
    **kwargs,
) -> None:
    """관리자 작업 1건을 기록하고 응답 이후 flush를 예약한다."""
    audit_logger.record(
        action,
        resource,
        user_id=getattr(user, "user_id", None),
        user_email=getattr(user, "email", None),
        ip_address=client_ip(request),
        **kwargs,
    )
    background_tasks.add_task(audit_logger.flush)


def _apply_filters(q, filters: AuditEventFilter):
    if filters.action:
        q = q.filter(AuditEvent.action == filters.action)
    if filters.resource:
        q = q.filter(AuditEvent.resource == filters.resource)
    if filters.user_id is not None:
        q = q.filter(AuditEvent.user_id == filters.user_id)
    if filters.success is not None:
        q = q.filter(AuditEvent.success == filters.success)
    if filters.severity:
        q = q.filter(AuditEvent.severity.in_(filters.severity))
    if filters.date_from:
        q = q.filter(AuditEvent.timestamp >= filters.date_from)
    if filters.date_to:
        q = q.filter(AuditEvent.timestamp <= filters.date_to)
    return q


def list_events(db: Session, filters: AuditEventFilter) -> Tuple[List[AuditEvent], int]:
    audit_logger.flush()
    q = _apply_filters(db.query(AuditEvent), filters)
    total = q.count()
    rows = (
        q.order_by(AuditEvent.timestamp.desc(), AuditEvent.event_id.desc())
        .offset(filters.offset)
        .limit(filters.limit)
        .all()
    )
    return rows, total


def search_events(db: Session, query: str, limit: int = 50) -> List[AuditEvent]:
    audit_logger.flush()
    pattern = f"%{query.strip()}%"
    return (
        db.query(AuditEvent)
        .filter(
            or_(
                AuditEvent.action.ilike(pattern),
                AuditEvent.resource.ilike(pattern),
                AuditEvent.resource_id.ilike(pattern),
                AuditEvent.user_email.ilike(pattern),
                AuditEvent.error_message.ilike(pattern),
            )
        )
        .order_by(AuditEvent.timestamp.desc(), AuditEvent.event_id.desc())
        .limit(limit)
        .all()
    )


def summarize(db: Session, days: int = 30) -> Dict[str, Any]:
    audit_logger.flush()
    now = datetime.utcnow()
    rows = db.query(AuditEvent).filter(AuditEvent.timestamp >= now - timedelta(days=days)).all()

    total = len(rows)
    failed = sum(1 for row in rows if not row.success)
    day_ago = now - timedelta(hours=24)
    actions = Counter(row.action for row in rows)
    users = Counter(row.user_email or str(row.user_id) for row in rows if row.user_email or row.user_id)

    return {
        "total_events": total,
        "recent_activity": sum(1 for row in rows if row.timestamp >= day_ago),
        "top_actions": [{"action": k, "count": v} for k, v in actions.most_common(10)],
        "top_users": [{"user": k, "count": v} for k, v in users.most_common(10)],
        "failure_rate": round(failed / total * 100, 2) if total else 0.0,
        "critical_events": sum(1 for row in rows if row.severity == "critical"),
    }


def timeline(db: Session, days: int = 7) -> List[Dict[str, Any]]:
    audit_logger.flush()
    today = datetime.utcnow().date()
    start = today - timedelta(days=max(days, 1) - 1)
    buckets = {
        start + timedelta(days=i): {"events": 0, "failures": 0, "critical": 0}
        for i in range((today - start).days + 1)
    }
    rows = db.query(AuditEvent).filter(
        AuditEvent.timestamp >= datetime.combine(start, datetime.min.time())
    ).all()
    for row in rows:
        bucket = buckets.get(row.timestamp.date())
        if bucket is None:
            continue
        bucket["events"] += 1
        if not row.success:
            bucket["failures"] += 1
        if row.severity == "critical":
            bucket["critical"] += 1
    return [{"date": day.isoformat(), **counts} for day, counts in sorted(buckets.items())]


def to_response(row: AuditEvent) -> Dict[str, Any]:
    return {
        "event_id": row.event_id,
        "action": row.action,
        "resource": row.resource,
        "resource_id": row.resource_id,
        "user_id": row.user_id,
        "user_email": row.user_email,
        "ip_address": row.ip_address,
        "timestamp": row.timestamp,
        "success": row.success,
        "severity": row.severity,
        "metadata": row.meta,
        "error_message": row.error_message,
    }


def export_events(db: Session, fmt: str, filters: AuditEventFilter) -> Tuple[str, str, str]:
    """(filename, content_type, body)를 돌려준다. 필터의 limit/offset은 무시한다."""
    fmt = (fmt or "json").lower()
    if fmt not in EXPORT_FORMATS:
        fmt = "json"
    audit_logger.flush()
    rows = (
        _apply_filters(db.query(AuditEvent), filters)
        .order_by(AuditEvent.timestamp.desc(), AuditEvent.event_id.desc())
        .all()
    )
    records = []
    for row in rows:
        item = to_response(row)
        item["timestamp"] = row.timestamp.isoformat() if row.timestamp else None
        records.append(item)

    filename = f"audit-log-{datetime.utcnow().date().isoformat()}.{fmt}"
    if fmt == "json":
        return filename, EXPORT_FORMATS[fmt], json.dumps(records, ensure_ascii=False, indent=2)

    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    for item in records:
        item["metadata"] = json.dumps(item["metadata"], ensure_ascii=False) if item["metadata"] is not None else ""
        writer.writerow(item)
    return filename, EXPORT_FORMATS[fmt], buf.getvalue()


def cleanup_old_events(db: Session, retention_days: int) -> int:
    audit_logger.flush()
    cutoff = datetime.utcnow() - timedelta(days=retention_days)
    deleted = db.query(AuditEvent).filter(AuditEvent.timestamp < cutoff).delete(synchronize_session=False)
    db.commit()
    logger.info("[audit] removed %d events older than %d days", deleted, retention_days)
    return deleted
