"""시스템 백업/복원 API 라우터입니다. `?action=` 파라미터로 세부 작업을 분기합니다."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, Query, Request
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import AppError, ValidationFailed
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.schemas.backup import (
    BackupCreateRequest,
    BackupManifestOut,
    BackupRestoreRequest,
    BackupRestoreResult,
    BackupScheduleOut,
    BackupScheduleRequest,
    BackupStatistics,
    BackupValidation,
    RecoveryPoint,
)
from app.schemas.common import ok
from app.services import backup_service
from app.services.audit_service import audit_logger, client_ip, track
from app.utils.permissions import ADMIN

router = APIRouter(prefix="/api/admin/backup", tags=["backup"])

GET_ACTIONS = ("status", "history", "recovery-points", "statistics", "validate", "schedule")
POST_ACTIONS = ("create", "restore", "schedule")


def _parse(model, body: Optional[Dict[str, Any]]) -> BaseModel:
    try:
        return model.model_validate(body or {})
    except ValidationError as exc:
        missing = [".".join(str(p) for p in err["loc"]) for err in exc.errors() if err["type"] == "missing"]
        if missing:
            raise ValidationFailed(f"필수 항목이 누락되었습니다: {', '.join(missing)}", code="MISSING_REQUIRED_FIELDS")
        raise ValidationFailed("요청 형식이 올바르지 않습니다.", details=[err["msg"] for err in exc.errors()])


def _invalid_action(action: str, allowed) -> ValidationFailed:
    return ValidationFailed(
        f"지원하지 않는 action 입니다: {action} (허용: {', '.join(allowed)})",
        code="INVALID_ACTION",
    )


@router.get("/system")
def backup_query(
    action: str = "status",
    backup_id: Optional[str] = Query(None, alias="backupId"),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    if action == "history":
        rows = backup_service.get_backup_history(db, limit)
        return ok([BackupManifestOut(**backup_service.to_response(row)) for row in rows])
    if action == "recovery-points":
        return ok([RecoveryPoint(**point) for point in backup_service.get_recovery_points(db)])
    if action == "statistics":
        return ok(BackupStatistics(**backup_service.get_backup_statistics(db)))
    if action == "schedule":
        return ok(BackupScheduleOut(**backup_service.get_schedule(db)))
    if action == "validate":
        if not backup_id:
            raise ValidationFailed("backupId가 필요합니다.", code="MISSING_BACKUP_ID")
        is_valid = backup_service.validate_backup_integrity(db, backup_id)
        message = "무결성 검증을 통과했습니다." if is_valid else "체크섬이 일치하지 않거나 백업 파일이 없습니다."
        return ok(BackupValidation(backup_id=backup_id, is_valid=is_valid, message=message))
    if action == "status":
        stats = backup_service.get_backup_statistics(db)
        return ok({
            "last_backup": stats["last_backup"],
            "total_backups": stats["total_backups"],
            "success_rate": stats["success_rate"],
            "schedule": BackupScheduleOut(**backup_service.get_schedule(db)),
        })
    raise _invalid_action(action, GET_ACTIONS)


@router.post("/system")
def backup_command(
    request: Request,
    background_tasks: BackgroundTasks,
    action: str = "create",
    body: Optional[Dict[str, Any]] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    if action == "create":
        options = _parse(BackupCreateRequest, body)
        manifest = backup_service.create_backup(
            db,
            options.type,
            include_media=options.include_media,
            include_system_data=options.include_system_data,
            compression=options.compression,
            tables=options.tables or None,
            created_by=current_user.user_id,
        )
        succeeded = manifest.status == backup_service.STATUS_COMPLETED
        track(
            background_tasks, request, current_user, "create", "backup",
            resource_id=manifest.backup_id, success=succeeded,
            severity="medium" if succeeded else "high",
            error_message=manifest.error_message,
            metadata={"type": manifest.backup_type, "record_count": manifest.record_count},
        )
        message = "백업이 생성되었습니다." if succeeded else "백업 생성에 실패했습니다."
        return ok(BackupManifestOut(**backup_service.to_response(manifest)), message)

    if action == "restore":
        options = _parse(BackupRestoreRequest, body)
        if not options.backup_id:
            raise ValidationFailed("backupId가 필요합니다.", code="MISSING_BACKUP_ID")
        # admin_user 테이블까지 다시 적재될 수 있으므로 행위자 정보를 먼저 보관한다.
        actor_id, actor_email = current_user.user_id, current_user.email
        try:
            result = backup_service.restore_from_backup(
                db,
                options.backup_id,
                create_pre_restore_backup=options.create_pre_restore_backup,
                validate_integrity=options.validate_integrity,
                selective_tables=options.selective_tables or None,
                restored_by=actor_id,
            )
        except AppError as exc:
            audit_logger.record(
                "restore", "backup", resource_id=options.backup_id, user_id=actor_id, user_email=actor_email,
                ip_address=client_ip(request), success=False, severity="critical", error_message=str(exc.detail),
            )
            audit_logger.flush()
            raise
        audit_logger.record(
            "restore", "backup", resource_id=options.backup_id, user_id=actor_id, user_email=actor_email,
            ip_address=client_ip(request), severity="high",
            metadata={"restored_records": result["restored_records"], "tables": result["restored_tables"]},
        )
        background_tasks.add_task(audit_logger.flush)
        return ok(BackupRestoreResult(**result), "복원이 완료되었습니다.")

    if action == "schedule":
        options = _parse(BackupScheduleRequest, body)
        schedule = backup_service.update_schedule(db, updated_by=current_user.user_id, **options.model_dump())
        track(background_tasks, request, current_user, "update", "backup_schedule", metadata=options.model_dump())
        return ok(BackupScheduleOut(**schedule), "백업 일정이 저장되었습니다.")

    raise _invalid_action(action, POST_ACTIONS)


@router.delete("/system")
def delete_backup(
    request: Request,
    background_tasks: BackgroundTasks,
    backup_id: Optional[str] = Query(None, alias="backupId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    if not backup_id:
        raise ValidationFailed("backupId가 필요합니다.", code="MISSING_BACKUP_ID")
    backup_service.delete_backup(db, backup_id)
    track(background_tasks, request, current_user, "delete", "backup", resource_id=backup_id, severity="high")
    return ok(message="백업이 삭제되었습니다.")
