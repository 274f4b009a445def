"""데이터 내보내기/가져오기 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.common import CAMEL_REQUEST


class ExportOptions(BaseModel):
    model_config = CAMEL_REQUEST

    tables: List[str] = Field(default_factory=list)
    include_media: bool = False
    include_system_data: bool = False
    compression: bool = True
    format: Literal["json", "csv", "zip"] = "json"


class ImportOptions(BaseModel):
    model_config = CAMEL_REQUEST

    overwrite: bool = False
    validate_data: bool = True
    create_backup: bool = True
    skip_errors: bool = False


class ImportRowError(BaseModel):
    table: str
    record: Any = None
    error: str


class ImportResult(BaseModel):
    success: bool
    imported: int
    skipped: int
    errors: List[ImportRowError]
    message: str
    backup_id: Optional[str] = None
