"""미디어 라이브러리 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MediaFileOut(BaseModel):
    media_id: int
    filename: str
    original_name: str
    url: str
    mime_type: Optional[str] = None
    size: int
    alt_text: Optional[str] = None
    uploaded_by: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class MediaUpdate(BaseModel):
    alt_text: Optional[str] = None
