"""데이터 내보내기/가져오기 API 라우터입니다."""

from typing import Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import AppError
from app.middleware.auth_middleware import require_roles
from app.models.user import User
from app.schemas.common import ApiResponse, ok
from app.schemas.data_transfer import ExportOptions, ImportOptions, ImportResult
from app.services import data_transfer_service, table_registry
from app.services.audit_service import audit_logger, track
from app.utils.permissions import ADMIN

router = APIRouter(prefix="/api/admin/data", tags=["data"])


def _download(result: data_transfer_service.ExportResult) -> Response:
    headers = {
        "Content-Disposition": f'attachment; filename="{result.filename}"',
        "X-Export-Checksum": result.checksum or "",
        "X-Export-Timestamp": result.timestamp.isoformat(),
    }
    return Response(content=result.file, media_type=result.content_type, headers=headers)


def _run_export(db: Session, options: ExportOptions, request: Request, background_tasks: BackgroundTasks, user: User):
    result = data_transfer_service.export_data(db, options)
    track(
        background_tasks, request, user, "export", "data", severity="medium",
        metadata={"format": options.format, "filename": result.filename, "size": result.size},
    )
    return _download(result)


@router.get("/export")
def export_data_get(
    request: Request,
    background_tasks: BackgroundTasks,
    tables: Optional[str] = None,
    include_media: bool = Query(False, alias="includeMedia"),
    include_system_data: bool = Query(False, alias="includeSystemData"),
    compression: bool = True,
    format: Literal["json", "csv", "zip"] = "json",
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    options = ExportOptions(
        tables=[name.strip() for name in (tables or "").split(",") if name.strip()],
        include_media=include_media,
        include_system_data=include_system_data,
        compression=compression,
        format=format,
    )
    return _run_export(db, options, request, background_tasks, current_user)


@router.post("/export")
def export_data_post(
    options: ExportOptions,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    return _run_export(db, options, request, background_tasks, current_user)


@router.get("/import")
def import_capabilities(current_user: User = Depends(require_roles(ADMIN))):
    return ok({
        "supported_formats": ["json", "zip"],
        "max_size": settings.MAX_IMPORT_SIZE,
        "tables": [spec.name for spec in table_registry.TABLES],
    })


@router.post("/import", response_model=ApiResponse[ImportResult])
def import_data(
    request: Request,
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    overwrite: bool = Form(False),
    validate_data: bool = Form(True, alias="validateData"),
    create_backup: bool = Form(True, alias="createBackup"),
    skip_errors: bool = Form(False, alias="skipErrors"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(ADMIN)),
):
    options = ImportOptions(
        overwrite=overwrite,
        validate_data=validate_data,
        create_backup=create_backup,
        skip_errors=skip_errors,
    )
    raw = file.file.read()
    try:
        data = data_transfer_service.parse_import_file(file.filename, raw)
        result = data_transfer_service.import_data(db, data, options, performed_by=current_user.user_id)
    except AppError as exc:
        track(
            background_tasks, request, current_user, "import", "data", success=False, severity="high",
            error_message=str(exc.detail), metadata={"filename": file.filename},
        )
        # 오류 응답에서는 백그라운드 작업이 실행되지 않으므로 바로 기록한다.
        audit_logger.flush()
        raise
    track(
        background_tasks, request, current_user, "import", "data", severity="high",
        metadata={
            "filename": file.filename,
            "imported": result["imported"],
            "skipped": result["skipped"],
            "errors": len(result["errors"]),
        },
    )
    return ok(ImportResult(**result), result["message"])
