"""데이터 내보내기/가져오기 도메인 서비스입니다.

내보내기는 선택한 테이블 전체를 메모리에 읽어 JSON/CSV(zip)/ZIP 번들 하나로 만든다.
페이지네이션이나 스트리밍은 하지 않으므로 처리 가능한 데이터 크기는 프로세스 메모리에 묶인다.

가져오기는 파일 파싱/크기 검사/구조 검증을 모두 쓰기 전에 끝낸다. 각 레코드는 SAVEPOINT 안에서
적재되며, skip_errors=False이면 첫 실패에서 전체 트랜잭션을 되돌린다(커밋되는 행 0건).
"""

import csv
import io
import json
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ImportAborted, PayloadTooLarge, ValidationFailed
from app.models.media import MediaFile
from app.schemas.data_transfer import ExportOptions, ImportOptions
from app.services import backup_service, table_registry
from app.utils.serialization import dict_to_attrs, primary_key_of, row_to_dict, sha256_hex

logger = logging.getLogger(__name__)

METADATA_KEY = "_metadata"
CONTENT_TYPES = {
    "json": "application/json",
    "zip": "application/zip",
}


@dataclass
class ExportResult:
    filename: str
    content_type: str
    file: bytes
    size: int
    timestamp: datetime
    checksum: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)


def export_data(db: Session, options: ExportOptions) -> ExportResult:
    logger.info("[data] export started: %s", options.model_dump())
    specs, unknown = table_registry.resolve_tables(
        options.tables,
        include_media=options.include_media,
        include_system_data=options.include_system_data,
    )
    for name in unknown:
        logger.warning("[data] unknown table %s skipped", name)

    timestamp = datetime.utcnow()
    data: Dict[str, Any] = {}
    for spec in specs:
        data[spec.name] = [row_to_dict(row) for row in db.query(spec.model).all()]
        logger.info("[data] exported %d records from %s", len(data[spec.name]), spec.name)

    data[METADATA_KEY] = {
        "exported_at": timestamp.isoformat(),
        "version": settings.EXPORT_FORMAT_VERSION,
        "options": options.model_dump(),
        "total_tables": len(specs),
        "total_records": sum(len(rows) for name, rows in data.items() if name != METADATA_KEY),
    }

    base_filename = f"{settings.EXPORT_FILENAME_PREFIX}-{timestamp.date().isoformat()}"
    if options.format == "json":
        result = _export_json(data, base_filename, options.compression)
    elif options.format == "csv":
        result = _export_csv(data, base_filename, options.compression)
    else:
        result = _export_zip(db, data, base_filename, options.include_media)
    result.timestamp = timestamp

    logger.info("[data] export completed: %s (%d bytes)", result.filename, result.size)
    return result


def _export_json(data: Dict[str, Any], base_filename: str, compression: bool) -> ExportResult:
    if compression:
        text = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    else:
        text = json.dumps(data, ensure_ascii=False, indent=2)
    body = text.encode("utf-8")
    return ExportResult(
        filename=f"{base_filename}.json",
        content_type=CONTENT_TYPES["json"],
        file=body,
        size=len(body),
        timestamp=datetime.utcnow(),
        checksum=sha256_hex(body),
        data=data,
    )


def _csv_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _to_csv(records: List[Dict[str, Any]]) -> str:
    if not records:
        return ""
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=list(records[0].keys()), quoting=csv.QUOTE_NONNUMERIC)
    writer.writeheader()
    for record in records:
        writer.writerow({k: _csv_cell(v) for k, v in record.items()})
    return buf.getvalue()


def _export_csv(data: Dict[str, Any], base_filename: str, compression: bool) -> ExportResult:
    buf = io.BytesIO()
    method = zipfile.ZIP_DEFLATED if compression else zipfile.ZIP_STORED
    with zipfile.ZipFile(buf, "w", compression=method) as zf:
        for name, records in data.items():
            if name == METADATA_KEY or not isinstance(records, list):
                continue
            zf.writestr(f"{name}.csv", _to_csv(records))
        zf.writestr(f"{METADATA_KEY}.json", json.dumps(data[METADATA_KEY], ensure_ascii=False, indent=2))
    body = buf.getvalue()
    return ExportResult(
        filename=f"{base_filename}.zip",
        content_type=CONTENT_TYPES["zip"],
        file=body,
        size=len(body),
        timestamp=datetime.utcnow(),
        checksum=sha256_hex(body),
    )


def _export_zip(db: Session, data: Dict[str, Any], base_filename: str, include_media: bool) -> ExportResult:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("data.json", json.dumps(data, ensure_ascii=False, indent=2))
        for name, records in data.items():
            if name == METADATA_KEY:
                continue
            zf.writestr(f"tables/{name}.json", json.dumps(records, ensure_ascii=False, indent=2))
        if include_media:
            # 실제 파일이 아닌 메타데이터만 포함한다.
            for media in db.query(MediaFile).all():
                zf.writestr(
                    f"media/{media.filename}.meta.json",
                    json.dumps(row_to_dict(media), ensure_ascii=False, indent=2),
                )
    body = buf.getvalue()
    return ExportResult(
        filename=f"{base_filename}.zip",
        content_type=CONTENT_TYPES["zip"],
        file=body,
        size=len(body),
        timestamp=datetime.utcnow(),
        checksum=sha256_hex(body),
    )


def _coerce_csv_value(column, raw: Any) -> Any:
    if raw is None or raw == "":
        return None
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw
    if python_type is bool:
        return str(raw).strip().lower() in ("true", "1", "yes")
    # 변환할 수 없는 값은 그대로 넘겨 해당 행만 적재 단계에서 실패하게 한다.
    try:
        if python_type is int:
            return int(float(raw))
        if python_type is float:
            return float(raw)
    except ValueError:
        return raw
    if python_type in (dict, list):
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            return raw
    if python_type is str:
        return str(raw)
    return raw


def _rows_from_csv(table_name: str, text: str) -> List[Dict[str, Any]]:
    rows = list(csv.DictReader(io.StringIO(text)))
    spec = table_registry.get_spec(table_name)
    if spec is None:
        return rows
    columns = {attr.columns[0].name: attr.columns[0] for attr in inspect(spec.model).column_attrs}
    coerced = []
    for row in rows:
        coerced.append({
            key: _coerce_csv_value(columns[key], value) if key in columns else value
            for key, value in row.items()
        })
    return coerced


def parse_import_file(filename: str, raw: bytes) -> Dict[str, Any]:
    """업로드 파일을 가져오기용 dict 번들로 해석한다. 쓰기 전에 호출되어야 한다."""
    if len(raw) > settings.MAX_IMPORT_SIZE:
        raise PayloadTooLarge(
            f"가져오기 파일은 최대 {settings.MAX_IMPORT_SIZE // (1024 * 1024)}MB까지 허용됩니다.",
        )
    name = (filename or "").lower()
    try:
        if name.endswith(".zip"):
            return _parse_zip(raw)
        return json.loads(raw.decode("utf-8"))
    except (ValueError, zipfile.BadZipFile, KeyError) as exc:
        raise ValidationFailed(f"가져오기 파일을 해석할 수 없습니다: {exc}", code="INVALID_IMPORT_FILE")


def _parse_zip(raw: bytes) -> Dict[str, Any]:
    with zipfile.ZipFile(io.BytesIO(raw)) as zf:
        names = zf.namelist()
        if "data.json" in names:
            return json.loads(zf.read("data.json").decode("utf-8"))
        data: Dict[str, Any] = {}
        for entry in names:
            if entry == f"{METADATA_KEY}.json":
                data[METADATA_KEY] = json.loads(zf.read(entry).decode("utf-8"))
            elif entry.endswith(".csv") and "/" not in entry:
                data[entry[:-4]] = _rows_from_csv(entry[:-4], zf.read(entry).decode("utf-8"))
        if not data:
            raise ValueError("zip 안에 data.json 또는 CSV 테이블이 없습니다.")
        return data


def validate_import_data(data: Any) -> List[str]:
    if not isinstance(data, dict):
        return ["데이터는 객체여야 합니다."]
    errors = []
    if METADATA_KEY not in data:
        errors.append("메타데이터(_metadata)가 없습니다.")
    for name, records in data.items():
        if name == METADATA_KEY:
            continue
        if not table_registry.is_known(name):
            errors.append(f"알 수 없는 테이블: {name}")
        elif not isinstance(records, list):
            errors.append(f"{name} 테이블은 배열이어야 합니다.")
    return errors


def import_data(
    db: Session,
    data: Any,
    options: ImportOptions,
    *,
    performed_by: Optional[int] = None,
) -> Dict[str, Any]:
    logger.info("[data] import started: %s", options.model_dump())
    if options.validate_data:
        problems = validate_import_data(data)
        if problems:
            raise ValidationFailed(
                f"데이터 검증에 실패했습니다: {', '.join(problems)}",
                code="INVALID_IMPORT_DATA",
            )
    elif not isinstance(data, dict):
        raise ValidationFailed("데이터는 객체여야 합니다.", code="INVALID_IMPORT_DATA")

    backup_id = None
    if options.create_backup:
        manifest = backup_service.create_backup(db, "pre-update", created_by=performed_by)
        if manifest.status != backup_service.STATUS_COMPLETED:
            if not options.skip_errors:
                raise ImportAborted("가져오기 전 백업 생성에 실패해 가져오기를 중단합니다.")
            logger.warning("[data] pre-import backup failed, continuing")
        else:
            backup_id = manifest.backup_id

    names = [name for name in data if name != METADATA_KEY]
    specs, unknown = table_registry.resolve_tables(names)
    for name in unknown:
        logger.warning("[data] unknown table %s skipped", name)

    imported = 0
    skipped = 0
    errors: List[Dict[str, Any]] = []

    for spec in specs:
        records = data.get(spec.name)
        if not isinstance(records, list):
            continue
        table_imported = 0
        for record in records:
            record_key = primary_key_of(spec.model, record) if isinstance(record, dict) else None
            try:
                with db.begin_nested():
                    attrs = dict_to_attrs(spec.model, record, strict=options.validate_data)
                    existing = db.get(spec.model, record_key) if record_key is not None else None
                    if spec.append_only and (existing is not None or table_registry.natural_key_exists(db, spec, record)):
                        # 버전 이력은 덮어쓰지 않는다.
                        skipped += 1
                        continue
                    if existing is not None and not options.overwrite:
                        skipped += 1
                        continue
                    if existing is not None:
                        for key, value in attrs.items():
                            setattr(existing, key, value)
                    else:
                        db.add(spec.model(**attrs))
                    db.flush()
                imported += 1
                table_imported += 1
            except (ValueError, TypeError, SQLAlchemyError) as exc:
                error = {
                    "table": spec.name,
                    "record": record_key if record_key is not None else "unknown",
                    "error": _error_text(exc),
                }
                errors.append(error)
                if not options.skip_errors:
                    db.rollback()
                    logger.warning("[data] import aborted at %s: %s", spec.name, error["error"])
                    raise ImportAborted(
                        f"{spec.name} 레코드 적재에 실패해 가져오기를 취소했습니다. (적재된 행 0건)",
                        details={"errors": errors, "backup_id": backup_id},
                    )
                skipped += 1
                logger.warning("[data] skipped record in %s: %s", spec.name, error["error"])
        logger.info("[data] imported %d/%d records into %s", table_imported, len(records), spec.name)

    db.commit()
    result = {
        "success": not errors or options.skip_errors,
        "imported": imported,
        "skipped": skipped,
        "errors": errors,
        "message": f"가져오기 완료: {imported}건 가져옴, {skipped}건 건너뜀, 오류 {len(errors)}건",
        "backup_id": backup_id,
    }
    logger.info("[data] %s", result["message"])
    return result


def _error_text(exc: Exception) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig or exc)
