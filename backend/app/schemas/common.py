"""모든 API 응답이 공유하는 `{success, data, message}` 봉투 스키마입니다."""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# 관리자 UI가 보내는 camelCase 키(backupId, skipErrors 등)와 snake_case 모두 허용한다.
CAMEL_REQUEST = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorInfo(BaseModel):
    code: str
    message: str


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorInfo] = None
    message: Optional[str] = None


def ok(data=None, message: Optional[str] = None) -> dict:
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body
