"""URL 슬러그 생성/검증/중복 회피 유틸리티입니다.

세 함수 모두 예외를 던지지 않는다. 잘못된 입력은 규칙을 벗어난 슬러그(예: 빈 문자열)를
그대로 돌려주며, 검증은 호출 측에서 `validate_slug`로 수행한다.
"""

import re
from typing import Iterable, Optional

from sqlalchemy.orm import Session

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
SLUG_MIN_LENGTH = 3
SLUG_MAX_LENGTH = 100

_WHITESPACE = re.compile(r"\s+")
_NON_WORD = re.compile(r"[^\w\-]", re.ASCII)
_MULTI_HYPHEN = re.compile(r"--+")
_EDGE_HYPHEN = re.compile(r"^-+|-+$")


def generate_slug(text: str) -> str:
    slug = (text or "").lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_WORD.sub("", slug)
    slug = _MULTI_HYPHEN.sub("-", slug)
    return _EDGE_HYPHEN.sub("", slug)


def validate_slug(slug: str) -> bool:
    if not isinstance(slug, str):
        return False
    return bool(SLUG_PATTERN.fullmatch(slug)) and SLUG_MIN_LENGTH <= len(slug) <= SLUG_MAX_LENGTH


def ensure_unique_slug(base_slug: str, existing: Iterable[str]) -> str:
    taken = set(existing)
    slug = base_slug
    counter = 1
    while slug in taken:
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug


def existing_slugs(db: Session, model, exclude_id: Optional[int] = None) -> set:
    pk = model.__mapper__.primary_key[0]
    q = db.query(model.slug)
    if exclude_id is not None:
        q = q.filter(pk != exclude_id)
    return {row[0] for row in q.all() if row[0]}


def slug_for(db: Session, model, title: str, exclude_id: Optional[int] = None) -> str:
    """모델 테이블의 기존 슬러그와 겹치지 않는 슬러그를 제목으로부터 만든다."""
    return ensure_unique_slug(generate_slug(title), existing_slugs(db, model, exclude_id))
