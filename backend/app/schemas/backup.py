"""백업/복원 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.common import CAMEL_REQUEST


class BackupMetadata(BaseModel):
    record_count: int
    tables: List[str]
    include_media: bool
    include_system_data: bool


class BackupManifestOut(BaseModel):
    id: str
    type: str
    status: str
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    size: int
    checksum: Optional[str] = None
    filename: Optional[str] = None
    compressed: bool
    error_message: Optional[str] = None
    metadata: BackupMetadata


class BackupCreateRequest(BaseModel):
    model_config = CAMEL_REQUEST

    type: Literal["manual", "scheduled", "pre-update"] = "manual"
    include_media: bool = True
    include_system_data: bool = True
    compression: bool = True
    tables: List[str] = Field(default_factory=list)


class BackupRestoreRequest(BaseModel):
    model_config = CAMEL_REQUEST

    backup_id: Optional[str] = None
    selective_tables: List[str] = Field(default_factory=list)
    create_pre_restore_backup: bool = True
    validate_integrity: bool = True


class BackupRestoreResult(BaseModel):
    backup_id: str
    restored_tables: List[str]
    restored_records: int
    pre_restore_backup_id: Optional[str] = None


class BackupScheduleRequest(BaseModel):
    model_config = CAMEL_REQUEST

    schedule: Literal["hourly", "daily", "weekly", "monthly"] = "daily"
    retention: int = Field(default=30, ge=1, le=365)
    include_media: bool = True
    include_system_data: bool = True
    compression: bool = True
    destinations: List[str] = Field(default_factory=lambda: ["local"])
    is_enabled: bool = True


class BackupScheduleOut(BaseModel):
    schedule: str
    retention: int
    include_media: bool
    include_system_data: bool
    compression: bool
    destinations: List[str]
    is_enabled: bool
    updated_at: Optional[datetime] = None


class RecoveryPoint(BaseModel):
    backup_id: str
    backup_type: str
    created_at: Optional[datetime] = None
    tables: List[str]
    record_count: int
    size: int


class BackupStatistics(BaseModel):
    total_backups: int
    successful_backups: int
    failed_backups: int
    total_size: int
    success_rate: float
    oldest_backup: Optional[datetime] = None
    newest_backup: Optional[datetime] = None
    last_backup: Optional[BackupManifestOut] = None


class BackupValidation(BaseModel):
    backup_id: str
    is_valid: bool
    message: str
