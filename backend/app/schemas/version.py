"""콘텐츠 버전 이력 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

from app.schemas.common import CAMEL_REQUEST

ContentType = Literal["blog", "project", "case_study"]


class FieldChange(BaseModel):
    field: str
    old_value: Any = None
    new_value: Any = None
    change_type: Literal["added", "modified", "removed"]


class ContentVersionOut(BaseModel):
    version_id: int
    content_type: str
    content_id: int
    version: int
    title: str
    content: Dict[str, Any]
    metadata: Optional[Dict[str, Any]] = None
    changes: List[FieldChange]
    change_type: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    checksum: str
    size: int
    compressed: bool


class ContentRestoreRequest(BaseModel):
    model_config = CAMEL_REQUEST

    content_type: ContentType
    content_id: int
    version: int


class ContentRestoreResult(BaseModel):
    content_type: str
    content_id: int
    restored_version: int
    new_version: int


class VersionComparison(BaseModel):
    content_type: str
    content_id: int
    version1: ContentVersionOut
    version2: ContentVersionOut
    changes: List[FieldChange]
