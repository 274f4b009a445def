"""ORM 레코드와 JSON 호환 dict 사이의 변환 헬퍼입니다.

백업/내보내기/버전 스냅샷이 모두 같은 규칙으로 레코드를 직렬화한다.
날짜/시간은 ISO 문자열, Decimal은 문자열로 저장하고 역직렬화 시 컬럼 타입에 맞춰 복원한다.
"""

import hashlib
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import Date, DateTime, inspect

logger = logging.getLogger(__name__)


def serialize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def row_to_dict(instance, exclude: Optional[List[str]] = None) -> Dict[str, Any]:
    """컬럼명(테이블 기준) → 직렬화된 값 dict를 만든다."""
    skip = set(exclude or [])
    data: Dict[str, Any] = {}
    for attr in inspect(instance).mapper.column_attrs:
        column = attr.columns[0]
        if column.name in skip:
            continue
        data[column.name] = serialize_value(getattr(instance, attr.key))
    return data


def _parse_temporal(column, value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(column.type, DateTime) and isinstance(value, str):
        return datetime.fromisoformat(value)
    if isinstance(column.type, Date) and isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def _parse_number(column, value: Any) -> Any:
    if value is None or isinstance(value, bool):
        return value
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type is int and not isinstance(value, int):
        number = float(value)
        if not number.is_integer():
            raise ValueError(value)
        return int(number)
    if python_type is float and not isinstance(value, (int, float)):
        return float(value)
    return value


def dict_to_attrs(model, record: Dict[str, Any], *, strict: bool = True) -> Dict[str, Any]:
    """직렬화된 dict를 모델 생성자 kwargs(속성명 기준)로 되돌린다.

    Args:
        model: SQLAlchemy 모델 클래스
        record: 컬럼명 기준 dict
        strict: True면 알 수 없는 컬럼/필수 컬럼 누락 시 ValueError

    Raises:
        ValueError: 레코드 형태가 테이블과 맞지 않을 때
    """
    if not isinstance(record, dict):
        raise ValueError("레코드는 객체(dict)여야 합니다.")

    by_name = {attr.columns[0].name: attr for attr in inspect(model).column_attrs}
    unknown = sorted(set(record) - set(by_name))
    if unknown and strict:
        raise ValueError(f"알 수 없는 컬럼: {', '.join(unknown)}")

    attrs: Dict[str, Any] = {}
    for name, attr in by_name.items():
        if name not in record:
            continue
        column = attr.columns[0]
        try:
            attrs[attr.key] = _parse_temporal(column, record[name])
        except ValueError:
            raise ValueError(f"{name} 값의 날짜 형식이 올바르지 않습니다: {record[name]!r}")
        try:
            attrs[attr.key] = _parse_number(column, attrs[attr.key])
        except (TypeError, ValueError):
            raise ValueError(f"{name} 값은 숫자여야 합니다: {record[name]!r}")

    if strict:
        missing = [
            name
            for name, attr in by_name.items()
            if _is_required(attr.columns[0]) and attrs.get(attr.key) is None
        ]
        if missing:
            raise ValueError(f"필수 컬럼 누락: {', '.join(missing)}")
    return attrs


def _is_required(column) -> bool:
    if column.nullable or column.default is not None or column.server_default is not None:
        return False
    if column.primary_key and column.autoincrement in (True, "auto") and _is_integer(column):
        return False
    return True


def _is_integer(column) -> bool:
    try:
        return column.type.python_type is int
    except NotImplementedError:
        return False


def primary_key_of(model, record: Dict[str, Any]) -> Optional[Any]:
    pk_column = inspect(model).primary_key[0]
    return record.get(pk_column.name)
