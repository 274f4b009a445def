"""백업 생성/무결성 검증/복원/보존 정책과 백업 API를 검증합니다."""

import gzip
import json
import os
from datetime import date

import pytest

from app.config import settings
from app.errors import ConflictError, IntegrityCheckFailed
from app.models.backup import BackupManifest
from app.models.content_version import ContentVersion
from app.models.portfolio import ExperienceEntry
from app.models.project import Project
from app.models.user import User
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services import backup_service, content_service
from tests.helpers import ADMIN, EDITOR, auth_headers


def _payload_file(manifest: BackupManifest) -> str:
    return os.path.join(settings.BACKUP_DIR, manifest.filename)


def test_create_backup_writes_compressed_payload(db, seed_content):
    manifest = backup_service.create_backup(db, "manual", created_by=seed_content["project"].created_by)
    assert manifest.status == "completed"
    assert manifest.filename.endswith(".json.gz")
    assert manifest.completed_at is not None

    with open(_payload_file(manifest), "rb") as f:
        raw = f.read()
    assert manifest.size == len(raw)
    payload = json.loads(gzip.decompress(raw))
    assert payload["backup_id"] == manifest.backup_id
    assert len(payload["tables"]["project"]) == 1
    assert "content_version" in payload["tables"]
    assert manifest.record_count == sum(payload["record_counts"].values())
    assert backup_service.validate_backup_integrity(db, manifest.backup_id) is True


def test_uncompressed_backup_without_system_tables(db, seed_content):
    manifest = backup_service.create_backup(db, include_system_data=False, include_media=False, compression=False)
    assert manifest.filename.endswith(".json")
    assert "admin_user" not in manifest.tables
    assert "media_file" not in manifest.tables
    with open(_payload_file(manifest), "rb") as f:
        assert json.loads(f.read())["format"] == backup_service.BACKUP_FORMAT


def test_failed_backup_keeps_manifest(db, seed_content, monkeypatch):
    def boom(session, specs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(backup_service, "_snapshot_tables", boom)
    manifest = backup_service.create_backup(db)
    assert manifest.status == "failed"
    assert manifest.error_message == "disk full"
    assert db.query(BackupManifest).count() == 1


def test_checksum_mismatch_refuses_restore_and_leaves_tables(db, seed_content):
    manifest = backup_service.create_backup(db, compression=False)
    project = seed_content["project"]
    project.title = "Changed After Backup"
    db.commit()

    with open(_payload_file(manifest), "ab") as f:
        f.write(b" ")

    assert backup_service.validate_backup_integrity(db, manifest.backup_id) is False
    with pytest.raises(IntegrityCheckFailed):
        backup_service.restore_from_backup(db, manifest.backup_id)

    db.expire_all()
    assert db.query(Project).one().title == "Changed After Backup"
    # 검증 실패 시 복원 전 백업도 만들지 않는다.
    assert db.query(BackupManifest).count() == 1


def test_full_restore_replaces_tables(db, seed_content):
    manifest = backup_service.create_backup(db)
    db.add(ExperienceEntry(company="New Co", position="Dev", start_date=date(2020, 1, 1)))
    db.query(Project).delete()
    db.commit()

    result = backup_service.restore_from_backup(db, manifest.backup_id)
    assert result["backup_id"] == manifest.backup_id
    assert result["pre_restore_backup_id"] is not None
    assert "project" in result["restored_tables"]

    db.expire_all()
    assert db.query(Project).one().title == "Order Dashboard"
    assert db.query(ExperienceEntry).count() == 0
    assert db.query(User).count() == 3
    pre = db.get(BackupManifest, result["pre_restore_backup_id"])
    assert pre.backup_type == "pre-update"
    assert pre.status == "completed"


def test_restore_keeps_version_history_append_only(db, seed_users):
    admin = seed_users["admin"]
    project = content_service.create_content(db, "project", ProjectCreate(title="Alpha", description="d"), admin)
    project_id = project.project_id
    manifest = backup_service.create_backup(db)
    content_service.update_content(db, "project", project_id, ProjectUpdate(title="Beta"), admin)

    backup_service.restore_from_backup(db, manifest.backup_id)
    db.expire_all()
    assert db.get(Project, project_id).title == "Alpha"

    admin = db.get(User, admin.user_id)
    content_service.update_content(db, "project", project_id, ProjectUpdate(title="Gamma"), admin)

    versions = (
        db.query(ContentVersion)
        .filter_by(content_type="project", content_id=project_id)
        .order_by(ContentVersion.version)
        .all()
    )
    assert [(v.version, v.title) for v in versions] == [(1, "Alpha"), (2, "Beta"), (3, "Gamma")]
    assert db.get(Project, project_id).title == "Gamma"


def test_restore_rejects_incomplete_backup(db, seed_content, monkeypatch):
    monkeypatch.setattr(backup_service, "_snapshot_tables", lambda session, specs: 1 / 0)
    manifest = backup_service.create_backup(db)
    with pytest.raises(ConflictError) as excinfo:
        backup_service.restore_from_backup(db, manifest.backup_id)
    assert excinfo.value.code == "BACKUP_NOT_RESTORABLE"


def test_scheduled_backup_retention(db, seed_users):
    backup_service.update_schedule(db, schedule="daily", retention=2)
    ids = [backup_service.create_backup(db, "scheduled").backup_id for _ in range(4)]
    remaining = {row.backup_id for row in db.query(BackupManifest).all()}
    assert remaining == set(ids[-2:])
    assert not any(name.startswith(ids[0]) for name in os.listdir(settings.BACKUP_DIR))


def test_statistics(db, seed_users, monkeypatch):
    backup_service.create_backup(db)
    backup_service.create_backup(db)
    monkeypatch.setattr(backup_service, "_snapshot_tables", lambda session, specs: 1 / 0)
    backup_service.create_backup(db)

    stats = backup_service.get_backup_statistics(db)
    assert stats["total_backups"] == 3
    assert stats["successful_backups"] == 2
    assert stats["failed_backups"] == 1
    assert stats["success_rate"] == 66.67
    assert stats["total_size"] > 0
    assert stats["oldest_backup"] <= stats["newest_backup"]


def test_backup_api_create_history_and_delete(client, seed_content):
    headers = auth_headers(client, ADMIN)
    resp = client.post(
        "/api/admin/backup/system?action=create",
        headers=headers,
        json={"type": "manual", "includeMedia": False, "compression": False},
    )
    assert resp.status_code == 200, resp.text
    backup = resp.json()["data"]
    assert backup["status"] == "completed"
    assert backup["metadata"]["include_media"] is False

    history = client.get("/api/admin/backup/system?action=history", headers=headers).json()["data"]
    assert [b["id"] for b in history] == [backup["id"]]

    points = client.get("/api/admin/backup/system?action=recovery-points", headers=headers).json()["data"]
    assert points[0]["backup_id"] == backup["id"]

    resp = client.get(f"/api/admin/backup/system?action=validate&backupId={backup['id']}", headers=headers)
    assert resp.json()["data"]["is_valid"] is True

    resp = client.delete(f"/api/admin/backup/system?backupId={backup['id']}", headers=headers)
    assert resp.status_code == 200
    resp = client.get(f"/api/admin/backup/system?action=validate&backupId={backup['id']}", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "BACKUP_NOT_FOUND"


def test_backup_api_selective_restore(client, db, seed_content):
    headers = auth_headers(client, ADMIN)
    backup_id = client.post("/api/admin/backup/system?action=create", headers=headers, json={}).json()["data"]["id"]
    project_id = seed_content["project"].project_id
    client.put(f"/api/admin/projects/{project_id}", headers=headers, json={"title": "After Backup"})

    resp = client.post(
        "/api/admin/backup/system?action=restore",
        headers=headers,
        json={"backupId": backup_id, "selectiveTables": ["project"], "createPreRestoreBackup": False},
    )
    assert resp.status_code == 200, resp.text
    result = resp.json()["data"]
    assert result["restored_tables"] == ["project"]
    assert result["pre_restore_backup_id"] is None

    db.expire_all()
    assert db.get(Project, project_id).title == "Order Dashboard"


def test_backup_api_validation_errors(client, seed_users):
    headers = auth_headers(client, ADMIN)
    resp = client.post("/api/admin/backup/system?action=restore", headers=headers, json={})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "MISSING_BACKUP_ID"

    resp = client.get("/api/admin/backup/system?action=validate", headers=headers)
    assert resp.json()["error"]["code"] == "MISSING_BACKUP_ID"

    resp = client.get("/api/admin/backup/system?action=explode", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_ACTION"

    resp = client.post("/api/admin/backup/system?action=create", headers=headers, json={"type": "weird"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_backup_api_integrity_failure(client, seed_content):
    headers = auth_headers(client, ADMIN)
    backup = client.post(
        "/api/admin/backup/system?action=create", headers=headers, json={"compression": False}
    ).json()["data"]
    with open(os.path.join(settings.BACKUP_DIR, backup["filename"]), "wb") as f:
        f.write(b"{}")

    resp = client.post("/api/admin/backup/system?action=restore", headers=headers, json={"backupId": backup["id"]})
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "INTEGRITY_CHECK_FAILED"


def test_backup_schedule_roundtrip(client, seed_users):
    headers = auth_headers(client, ADMIN)
    default = client.get("/api/admin/backup/system?action=schedule", headers=headers).json()["data"]
    assert default["is_enabled"] is False

    resp = client.post(
        "/api/admin/backup/system?action=schedule",
        headers=headers,
        json={"schedule": "weekly", "retention": 7, "destinations": ["local", "s3"]},
    )
    saved = resp.json()["data"]
    assert saved["schedule"] == "weekly"
    assert saved["retention"] == 7
    assert saved["destinations"] == ["local", "s3"]
    assert saved["is_enabled"] is True

    status = client.get("/api/admin/backup/system", headers=headers).json()["data"]
    assert status["schedule"]["schedule"] == "weekly"


def test_backup_requires_admin(client, seed_users):
    resp = client.get("/api/admin/backup/system?action=history", headers=auth_headers(client, EDITOR))
    assert resp.status_code == 403
