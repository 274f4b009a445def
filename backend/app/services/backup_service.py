"""전체 데이터 백업/복원 도메인 서비스입니다.

백업은 매니페스트(DB 행)와 페이로드(BACKUP_DIR 아래 JSON 파일, 선택적으로 gzip)로 나뉜다.
매니페스트의 checksum은 저장된 페이로드 바이트의 sha256이며, 복원 전 재계산 값과 다르면
어떤 테이블도 건드리지 않고 복원을 거부한다.

상태 전이: pending -> in_progress -> completed | failed
"""

import gzip
import json
import logging
import os
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.errors import AppError, ConflictError, IntegrityCheckFailed, NotFound, ValidationFailed
from app.models.backup import BackupManifest, BackupSchedule
from app.services import table_registry
from app.utils.serialization import dict_to_attrs, row_to_dict, sha256_hex

logger = logging.getLogger(__name__)

BACKUP_FORMAT = "portfolio-cms-backup"
BACKUP_FORMAT_VERSION = "1.0.0"
BACKUP_TYPES = ("manual", "scheduled", "pre-update")
SCHEDULES = ("hourly", "daily", "weekly", "monthly")

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class RestoreFailed(AppError):
    status_code = 500
    code = "RESTORE_FAILED"


def _backup_dir() -> str:
    os.makedirs(settings.BACKUP_DIR, exist_ok=True)
    return settings.BACKUP_DIR


def _payload_path(manifest: BackupManifest) -> str:
    return os.path.join(settings.BACKUP_DIR, manifest.filename or "")


def _new_backup_id() -> str:
    return f"backup-{datetime.utcnow().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:8]}"


def _snapshot_tables(db: Session, specs: List[table_registry.TableSpec]) -> Dict[str, List[Dict[str, Any]]]:
    tables: Dict[str, List[Dict[str, Any]]] = {}
    for spec in specs:
        tables[spec.name] = [row_to_dict(row) for row in db.query(spec.model).all()]
    return tables


def create_backup(
    db: Session,
    backup_type: str = "manual",
    *,
    include_media: bool = True,
    include_system_data: bool = True,
    compression: Optional[bool] = None,
    tables: Optional[List[str]] = None,
    created_by: Optional[int] = None,
) -> BackupManifest:
    if backup_type not in BACKUP_TYPES:
        raise ValidationFailed(f"지원하지 않는 백업 유형입니다: {backup_type}", code="INVALID_BACKUP_TYPE")
    specs, unknown = table_registry.resolve_tables(
        tables, include_media=include_media, include_system_data=include_system_data
    )
    if unknown:
        raise ValidationFailed(f"알 수 없는 테이블: {', '.join(unknown)}", code="UNKNOWN_TABLE")
    compressed = settings.BACKUP_COMPRESSION if compression is None else bool(compression)

    manifest = BackupManifest(
        backup_id=_new_backup_id(),
        created_at=datetime.utcnow(),
        backup_type=backup_type,
        status=STATUS_PENDING,
        tables=[spec.name for spec in specs],
        include_media=include_media,
        include_system_data=include_system_data,
        compressed=compressed,
        created_by=created_by,
    )
    db.add(manifest)
    db.commit()

    manifest.status = STATUS_IN_PROGRESS
    db.commit()
    logger.info("[backup] %s started (%s, %d tables)", manifest.backup_id, backup_type, len(specs))

    try:
        snapshot = _snapshot_tables(db, specs)
        record_count = sum(len(rows) for rows in snapshot.values())
        payload = {
            "format": BACKUP_FORMAT,
            "version": BACKUP_FORMAT_VERSION,
            "backup_id": manifest.backup_id,
            "backup_type": backup_type,
            "created_at": datetime.utcnow().isoformat(),
            "record_counts": {name: len(rows) for name, rows in snapshot.items()},
            "tables": snapshot,
        }
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        if compressed:
            data = gzip.compress(data)
        filename = f"{manifest.backup_id}.json.gz" if compressed else f"{manifest.backup_id}.json"
        with open(os.path.join(_backup_dir(), filename), "wb") as f:
            f.write(data)

        manifest.filename = filename
        manifest.size = len(data)
        manifest.checksum = sha256_hex(data)
        manifest.record_count = record_count
        manifest.status = STATUS_COMPLETED
        manifest.completed_at = datetime.utcnow()
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("[backup] %s failed", manifest.backup_id)
        manifest.status = STATUS_FAILED
        manifest.error_message = str(exc) or exc.__class__.__name__
        db.commit()
        db.refresh(manifest)
        return manifest

    db.refresh(manifest)
    logger.info(
        "[backup] %s completed: %d records, %d bytes",
        manifest.backup_id, manifest.record_count, manifest.size,
    )
    if backup_type == "scheduled":
        apply_retention(db)
    return manifest


def get_backup(db: Session, backup_id: str) -> BackupManifest:
    manifest = db.get(BackupManifest, backup_id)
    if manifest is None:
        raise NotFound("백업을 찾을 수 없습니다.", code="BACKUP_NOT_FOUND")
    return manifest


def _read_payload_bytes(manifest: BackupManifest) -> Optional[bytes]:
    path = _payload_path(manifest)
    if not manifest.filename or not os.path.exists(path):
        return None
    with open(path, "rb") as f:
        return f.read()


def validate_backup_integrity(db: Session, backup_id: str) -> bool:
    manifest = get_backup(db, backup_id)
    if manifest.status != STATUS_COMPLETED or not manifest.checksum:
        return False
    data = _read_payload_bytes(manifest)
    if data is None:
        logger.warning("[backup] %s payload missing", backup_id)
        return False
    valid = sha256_hex(data) == manifest.checksum
    if not valid:
        logger.warning("[backup] %s checksum mismatch", backup_id)
    return valid


def load_payload(manifest: BackupManifest) -> Dict[str, Any]:
    data = _read_payload_bytes(manifest)
    if data is None:
        raise NotFound("백업 파일을 찾을 수 없습니다.", code="BACKUP_PAYLOAD_MISSING")
    try:
        if manifest.compressed:
            data = gzip.decompress(data)
        payload = json.loads(data.decode("utf-8"))
    except (OSError, ValueError) as exc:
        raise IntegrityCheckFailed(f"백업 파일을 읽을 수 없습니다: {exc}")
    if not isinstance(payload, dict) or not isinstance(payload.get("tables"), dict):
        raise IntegrityCheckFailed("백업 파일 형식이 올바르지 않습니다.")
    return payload


def restore_from_backup(
    db: Session,
    backup_id: str,
    *,
    create_pre_restore_backup: bool = True,
    validate_integrity: bool = True,
    selective_tables: Optional[List[str]] = None,
    restored_by: Optional[int] = None,
) -> Dict[str, Any]:
    manifest = get_backup(db, backup_id)
    if manifest.status != STATUS_COMPLETED:
        raise ConflictError(
            f"완료되지 않은 백업은 복원할 수 없습니다. (status={manifest.status})",
            code="BACKUP_NOT_RESTORABLE",
        )
    if validate_integrity and not validate_backup_integrity(db, backup_id):
        raise IntegrityCheckFailed("백업 무결성 검증에 실패했습니다. 복원을 중단합니다.")

    payload = load_payload(manifest)
    snapshot = payload["tables"]
    names = list(selective_tables) if selective_tables else list(snapshot.keys())
    missing = [name for name in names if name not in snapshot]
    specs, unknown = table_registry.resolve_tables(names)
    if unknown or missing:
        raise ValidationFailed(
            f"백업에 없는 테이블입니다: {', '.join(sorted(set(unknown) | set(missing)))}",
            code="UNKNOWN_TABLE",
        )

    pre_restore_backup_id = None
    if create_pre_restore_backup:
        pre = create_backup(
            db,
            "pre-update",
            include_media=True,
            include_system_data=True,
            created_by=restored_by,
        )
        if pre.status != STATUS_COMPLETED:
            raise ConflictError("복원 전 백업 생성에 실패해 복원을 중단합니다.", code="PRE_RESTORE_BACKUP_FAILED")
        pre_restore_backup_id = pre.backup_id

    logger.info("[backup] restoring %s (%d tables)", backup_id, len(specs))
    restored_records = 0
    try:
        for spec in reversed(specs):
            if not spec.append_only:
                db.query(spec.model).delete()
        for spec in specs:
            for record in snapshot.get(spec.name) or []:
                if spec.append_only:
                    restored_records += _restore_missing_row(db, spec, record)
                    continue
                db.add(spec.model(**dict_to_attrs(spec.model, record, strict=False)))
                restored_records += 1
            db.flush()
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("[backup] restore of %s failed", backup_id)
        raise RestoreFailed(f"복원 중 오류가 발생해 변경을 모두 취소했습니다: {exc}")

    logger.info("[backup] restore of %s completed: %d records", backup_id, restored_records)
    return {
        "backup_id": backup_id,
        "restored_tables": [spec.name for spec in specs],
        "restored_records": restored_records,
        "pre_restore_backup_id": pre_restore_backup_id,
    }


def _restore_missing_row(db: Session, spec: table_registry.TableSpec, record: Dict[str, Any]) -> int:
    """백업 이후 기록된 이력은 그대로 두고, 현재 DB에 없는 행만 다시 추가한다."""
    if table_registry.natural_key_exists(db, spec, record):
        return 0
    attrs = dict_to_attrs(spec.model, record, strict=False)
    # 새 행 번호는 DB가 정한다.
    for column in spec.model.__table__.primary_key.columns:
        attrs.pop(column.key, None)
    db.add(spec.model(**attrs))
    db.flush()
    return 1


def delete_backup(db: Session, backup_id: str) -> None:
    manifest = get_backup(db, backup_id)
    path = _payload_path(manifest)
    if manifest.filename and os.path.exists(path):
        os.remove(path)
    db.delete(manifest)
    db.commit()
    logger.info("[backup] %s deleted", backup_id)


def get_backup_history(db: Session, limit: int = 50) -> List[BackupManifest]:
    return (
        db.query(BackupManifest)
        .order_by(BackupManifest.created_at.desc(), BackupManifest.backup_id.desc())
        .limit(limit)
        .all()
    )


def get_recovery_points(db: Session) -> List[Dict[str, Any]]:
    rows = (
        db.query(BackupManifest)
        .filter(BackupManifest.status == STATUS_COMPLETED)
        .order_by(BackupManifest.created_at.desc(), BackupManifest.backup_id.desc())
        .all()
    )
    return [
        {
            "backup_id": row.backup_id,
            "backup_type": row.backup_type,
            "created_at": row.created_at,
            "tables": row.tables or [],
            "record_count": row.record_count or 0,
            "size": row.size or 0,
        }
        for row in rows
    ]


def get_backup_statistics(db: Session) -> Dict[str, Any]:
    rows = db.query(BackupManifest).all()
    total = len(rows)
    completed = [row for row in rows if row.status == STATUS_COMPLETED]
    failed = [row for row in rows if row.status == STATUS_FAILED]
    created = sorted(row.created_at for row in rows if row.created_at)
    latest = max(rows, key=lambda row: (row.created_at or datetime.min, row.backup_id), default=None)
    return {
        "total_backups": total,
        "successful_backups": len(completed),
        "failed_backups": len(failed),
        "total_size": sum(row.size or 0 for row in completed),
        "success_rate": round(len(completed) / total * 100, 2) if total else 0.0,
        "oldest_backup": created[0] if created else None,
        "newest_backup": created[-1] if created else None,
        "last_backup": to_response(latest) if latest else None,
    }


def apply_retention(db: Session) -> int:
    """보존 개수를 넘는 오래된 정기 백업을 삭제하고 삭제 건수를 돌려준다."""
    schedule = db.query(BackupSchedule).first()
    keep = schedule.retention if schedule else settings.BACKUP_RETENTION_COUNT
    rows = (
        db.query(BackupManifest)
        .filter(
            BackupManifest.backup_type == "scheduled",
            BackupManifest.status == STATUS_COMPLETED,
        )
        .order_by(BackupManifest.created_at.desc(), BackupManifest.backup_id.desc())
        .all()
    )
    expired = rows[keep:]
    for row in expired:
        delete_backup(db, row.backup_id)
    return len(expired)


def get_schedule(db: Session) -> Dict[str, Any]:
    row = db.query(BackupSchedule).first()
    if row is None:
        return {
            "schedule": "daily",
            "retention": settings.BACKUP_RETENTION_COUNT,
            "include_media": True,
            "include_system_data": True,
            "compression": settings.BACKUP_COMPRESSION,
            "destinations": ["local"],
            "is_enabled": False,
            "updated_at": None,
        }
    return {
        "schedule": row.schedule,
        "retention": row.retention,
        "include_media": row.include_media,
        "include_system_data": row.include_system_data,
        "compression": row.compression,
        "destinations": row.destinations or [],
        "is_enabled": row.is_enabled,
        "updated_at": row.updated_at,
    }


def update_schedule(db: Session, *, updated_by: Optional[int] = None, **options) -> Dict[str, Any]:
    schedule = str(options.get("schedule") or "daily").strip().lower()
    if schedule not in SCHEDULES:
        raise ValidationFailed(f"지원하지 않는 백업 주기입니다: {schedule}", code="INVALID_SCHEDULE")
    row = db.query(BackupSchedule).first()
    if row is None:
        row = BackupSchedule()
        db.add(row)
    row.schedule = schedule
    row.retention = max(int(options.get("retention", settings.BACKUP_RETENTION_COUNT)), 1)
    row.include_media = bool(options.get("include_media", True))
    row.include_system_data = bool(options.get("include_system_data", True))
    row.compression = bool(options.get("compression", True))
    row.destinations = list(options.get("destinations") or ["local"])
    row.is_enabled = bool(options.get("is_enabled", True))
    row.updated_by = updated_by
    db.commit()
    return get_schedule(db)


def to_response(row: BackupManifest) -> Dict[str, Any]:
    return {
        "id": row.backup_id,
        "type": row.backup_type,
        "status": row.status,
        "created_at": row.created_at,
        "completed_at": row.completed_at,
        "size": row.size or 0,
        "checksum": row.checksum,
        "filename": row.filename,
        "compressed": bool(row.compressed),
        "error_message": row.error_message,
        "metadata": {
            "record_count": row.record_count or 0,
            "tables": row.tables or [],
            "include_media": bool(row.include_media),
            "include_system_data": bool(row.include_system_data),
        },
    }
