"""감사 로그 큐 기록(최대 1회 전달)과 조회/집계/내보내기 API를 검증합니다."""

import csv
import io
from datetime import datetime, timedelta

from sqlalchemy.orm import sessionmaker

from app.models.audit import AuditEvent
from app.schemas.audit import AuditEventFilter
from app.services import audit_service
from app.services.audit_service import AuditLogger, audit_logger
from tests.helpers import ADMIN, EDITOR, auth_headers


def _record_batch(total: int, failures: int):
    for i in range(total):
        audit_logger.record(
            "update" if i % 2 else "create",
            "project",
            resource_id=i,
            user_email="admin@portfolio.dev",
            success=i >= failures,
            severity="critical" if i == 0 else "low",
        )


def test_summary_failure_rate(db):
    _record_batch(total=10, failures=3)
    summary = audit_service.summarize(db, days=30)
    assert summary["total_events"] == 10
    assert summary["failure_rate"] == 30.0
    assert summary["critical_events"] == 1
    assert summary["recent_activity"] == 10
    assert summary["top_actions"][0]["count"] == 5
    assert summary["top_users"] == [{"user": "admin@portfolio.dev", "count": 10}]


def test_summary_of_empty_log(db):
    summary = audit_service.summarize(db)
    assert summary["total_events"] == 0
    assert summary["failure_rate"] == 0.0


def test_record_normalizes_severity_and_never_raises(db):
    assert audit_logger.record("login", "auth", severity="EXTREME") is True
    audit_logger.flush()
    assert db.query(AuditEvent).one().severity == "low"


def test_full_queue_drops_events(db):
    logger = AuditLogger(session_factory=sessionmaker(bind=db.get_bind()), max_queue=2)
    assert logger.record("a", "r") is True
    assert logger.record("b", "r") is True
    assert logger.record("c", "r") is False
    assert logger.dropped == 1
    assert logger.flush() == 2
    assert logger.pending == 0


def test_failed_flush_drops_batch(db):
    logger = AuditLogger(session_factory=sessionmaker(bind=db.get_bind()), max_queue=10)
    logger.record("export", "data", metadata={"bad": object()})
    assert logger.flush() == 0
    assert logger.dropped == 1
    assert logger.pending == 0
    assert db.query(AuditEvent).count() == 0


def test_timeline_is_zero_filled(db):
    old = AuditEvent(action="create", resource="blog", timestamp=datetime.utcnow() - timedelta(days=2),
                     success=False, severity="critical")
    db.add(old)
    db.commit()
    audit_logger.record("create", "blog")

    points = audit_service.timeline(db, days=7)
    assert len(points) == 7
    assert points[-1]["date"] == datetime.utcnow().date().isoformat()
    assert points[-1]["events"] == 1
    assert points[-3] == {
        "date": (datetime.utcnow().date() - timedelta(days=2)).isoformat(),
        "events": 1,
        "failures": 1,
        "critical": 1,
    }
    assert sum(p["events"] for p in points) == 2


def test_list_events_filters(db):
    _record_batch(total=6, failures=2)
    rows, total = audit_service.list_events(db, AuditEventFilter(success=False))
    assert total == 2
    rows, total = audit_service.list_events(db, AuditEventFilter(severity=["critical"]))
    assert [r.resource_id for r in rows] == ["0"]
    rows, total = audit_service.list_events(db, AuditEventFilter(limit=2, offset=1))
    assert total == 6
    assert len(rows) == 2


def test_cleanup_old_events(db):
    db.add(AuditEvent(action="old", resource="x", timestamp=datetime.utcnow() - timedelta(days=400)))
    db.add(AuditEvent(action="new", resource="x", timestamp=datetime.utcnow()))
    db.commit()
    assert audit_service.cleanup_old_events(db, 365) == 1
    assert [row.action for row in db.query(AuditEvent).all()] == ["new"]


def test_mutations_are_audited_after_response(client, seed_users):
    headers = auth_headers(client, ADMIN)
    client.post("/api/admin/projects", headers=headers, json={"title": "Audited", "description": "d"})

    resp = client.get("/api/admin/audit?action=events&resource=project", headers=headers)
    assert resp.status_code == 200
    page = resp.json()["data"]
    assert page["total"] == 1
    event = page["events"][0]
    assert event["action"] == "create"
    assert event["user_email"] == ADMIN
    assert event["metadata"] == {"slug": "audited"}
    assert event["ip_address"] is not None


def test_audit_api_search_and_validation(client, seed_users):
    headers = auth_headers(client, ADMIN)
    audit_logger.record("restore", "backup", resource_id="backup-xyz", success=False, error_message="checksum mismatch")

    resp = client.get("/api/admin/audit?action=search&query=CHECKSUM", headers=headers)
    assert [e["resource_id"] for e in resp.json()["data"]] == ["backup-xyz"]

    resp = client.get("/api/admin/audit?action=search", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_QUERY"

    resp = client.get("/api/admin/audit?action=bogus", headers=headers)
    assert resp.json()["error"]["code"] == "INVALID_ACTION"


def test_audit_api_summary_timeline(client, seed_users):
    headers = auth_headers(client, ADMIN)
    summary = client.get("/api/admin/audit?action=summary&days=7", headers=headers).json()["data"]
    assert summary["total_events"] >= 1
    timeline = client.get("/api/admin/audit?action=timeline&days=3", headers=headers).json()["data"]
    assert len(timeline) == 3


def test_audit_api_export_csv(client, seed_users):
    headers = auth_headers(client, ADMIN)
    audit_logger.record("delete", "media", resource_id=7, severity="medium", metadata={"filename": "a.png"})

    resp = client.get("/api/admin/audit?action=export&format=csv&eventAction=delete", headers=headers)
    assert resp.status_code == 200
    assert resp.headers["content-disposition"].startswith('attachment; filename="audit-log-')
    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert len(rows) == 1
    assert rows[0]["resource"] == "media"
    assert rows[0]["metadata"] == '{"filename": "a.png"}'


def test_audit_requires_admin(client, seed_users):
    resp = client.get("/api/admin/audit?action=events", headers=auth_headers(client, EDITOR))
    assert resp.status_code == 403


def test_failed_import_is_audited_despite_error_response(client, db, seed_users):
    resp = client.post(
        "/api/admin/data/import",
        headers=auth_headers(client, ADMIN),
        files={"file": ("broken.json", b"{not json", "application/json")},
    )
    assert resp.status_code == 400
    assert audit_logger.pending == 0

    db.expire_all()
    event = db.query(AuditEvent).filter_by(action="import", resource="data").one()
    assert event.success is False
    assert event.severity == "high"
    assert event.user_email == ADMIN


def test_failed_restore_is_audited_despite_error_response(client, db, seed_users):
    resp = client.post(
        "/api/admin/backup/system?action=restore", headers=auth_headers(client, ADMIN), json={"backupId": "missing"}
    )
    assert resp.status_code == 404

    db.expire_all()
    event = db.query(AuditEvent).filter_by(action="restore", resource="backup").one()
    assert event.success is False
    assert event.severity == "critical"
    assert event.resource_id == "missing"


def test_audit_cleanup_requires_delete(client, db, seed_users):
    headers = auth_headers(client, ADMIN)
    db.add(AuditEvent(action="old", resource="x", timestamp=datetime.utcnow() - timedelta(days=400)))
    db.commit()

    resp = client.get("/api/admin/audit?action=cleanup", headers=headers)
    assert resp.json()["error"]["code"] == "INVALID_ACTION"
    db.expire_all()
    assert db.query(AuditEvent).filter_by(action="old").count() == 1

    resp = client.delete("/api/admin/audit?retentionDays=365", headers=headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"] == {"deleted_count": 1, "retention_days": 365}
    db.expire_all()
    assert db.query(AuditEvent).filter_by(action="old").count() == 0

    assert client.delete("/api/admin/audit", headers=auth_headers(client, EDITOR)).status_code == 403
