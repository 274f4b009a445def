"""콘텐츠 버전 저장/조회/복원 공용 기능을 제공하는 도메인 서비스입니다."""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFound, ValidationFailed
from app.models.blog import BlogPost
from app.models.content_version import ContentVersion
from app.models.project import CaseStudy, Project
from app.utils.serialization import dict_to_attrs, serialize_value, sha256_hex
from app.utils.slug import existing_slugs

logger = logging.getLogger(__name__)

CONTENT_MODELS = {
    "project": Project,
    "case_study": CaseStudy,
    "blog": BlogPost,
}

VERSIONED_FIELDS = {
    "project": [
        "title", "slug", "description", "content", "technologies", "image_url", "demo_url",
        "github_url", "category", "is_featured", "is_published", "display_order", "case_study_id",
    ],
    "case_study": [
        "title", "slug", "client", "summary", "challenge", "solution", "results",
        "technologies", "cover_image", "is_published", "display_order",
    ],
    "blog": [
        "title", "slug", "excerpt", "content", "tags", "cover_image", "is_published", "published_at",
    ],
}

CHANGE_ADDED = "added"
CHANGE_MODIFIED = "modified"
CHANGE_REMOVED = "removed"

# 동일 콘텐츠에 대한 동시 저장이 같은 버전 번호를 잡으면 유니크 제약으로 실패하고 재시도한다.
MAX_VERSION_ATTEMPTS = 5


def _model_for(content_type: str):
    model = CONTENT_MODELS.get(content_type)
    if model is None:
        raise ValidationFailed(
            f"지원하지 않는 콘텐츠 유형입니다: {content_type}",
            code="INVALID_CONTENT_TYPE",
        )
    return model


def snapshot_of(content_type: str, record) -> Dict[str, Any]:
    return {name: serialize_value(getattr(record, name)) for name in VERSIONED_FIELDS[content_type]}


def compute_changes(old: Optional[Dict[str, Any]], new: Dict[str, Any]) -> List[Dict[str, Any]]:
    """두 스냅샷의 필드 단위 차이를 필드명 순으로 돌려준다. 값이 같은 필드는 제외한다."""
    old = old or {}
    changes: List[Dict[str, Any]] = []
    for field in sorted(set(old) | set(new)):
        in_old = field in old and old[field] is not None
        in_new = field in new and new[field] is not None
        if in_old and in_new:
            if old[field] != new[field]:
                changes.append({"field": field, "old_value": old[field], "new_value": new[field], "change_type": CHANGE_MODIFIED})
        elif in_new:
            changes.append({"field": field, "old_value": None, "new_value": new[field], "change_type": CHANGE_ADDED})
        elif in_old:
            changes.append({"field": field, "old_value": old[field], "new_value": None, "change_type": CHANGE_REMOVED})
    return changes


def latest_version(db: Session, *, content_type: str, content_id: int) -> Optional[ContentVersion]:
    return (
        db.query(ContentVersion)
        .filter(
            ContentVersion.content_type == content_type,
            ContentVersion.content_id == content_id,
        )
        .order_by(ContentVersion.version.desc())
        .first()
    )


def _next_version_no(db: Session, content_type: str, content_id: int) -> int:
    current_max = (
        db.query(func.max(ContentVersion.version))
        .filter(
            ContentVersion.content_type == content_type,
            ContentVersion.content_id == content_id,
        )
        .scalar()
    )
    return (current_max or 0) + 1


def create_content_version(
    db: Session,
    *,
    content_type: str,
    content_id: int,
    snapshot: Dict[str, Any],
    created_by: Optional[int],
    change_type: str,
    previous: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> ContentVersion:
    _model_for(content_type)
    if previous is None and change_type != "create":
        prev_row = latest_version(db, content_type=content_type, content_id=content_id)
        previous = prev_row.content if prev_row else None

    encoded = json.dumps(snapshot, ensure_ascii=False, sort_keys=True).encode("utf-8")
    changes = compute_changes(previous, snapshot)

    for _ in range(MAX_VERSION_ATTEMPTS):
        row = ContentVersion(
            content_type=content_type,
            content_id=content_id,
            version=_next_version_no(db, content_type, content_id),
            title=str(snapshot.get("title") or ""),
            content=snapshot,
            meta=metadata,
            changes=changes,
            change_type=change_type,
            created_by=created_by,
            checksum=sha256_hex(encoded),
            size=len(encoded),
            compressed=False,
        )
        try:
            with db.begin_nested():
                db.add(row)
        except IntegrityError:
            logger.warning("[version] version collision on %s:%s, retrying", content_type, content_id)
            continue
        db.commit()
        db.refresh(row)
        return row

    raise ConflictError("버전 번호를 할당하지 못했습니다. 잠시 후 다시 시도해 주세요.", code="VERSION_CONFLICT")


def list_versions(
    db: Session,
    *,
    content_type: str,
    content_id: int,
    limit: Optional[int] = None,
) -> List[ContentVersion]:
    q = (
        db.query(ContentVersion)
        .filter(
            ContentVersion.content_type == content_type,
            ContentVersion.content_id == content_id,
        )
        .order_by(ContentVersion.version.desc())
    )
    if limit:
        q = q.limit(limit)
    return q.all()


def get_version(db: Session, *, content_type: str, content_id: int, version: int) -> ContentVersion:
    row = (
        db.query(ContentVersion)
        .filter(
            ContentVersion.content_type == content_type,
            ContentVersion.content_id == content_id,
            ContentVersion.version == version,
        )
        .first()
    )
    if not row:
        raise NotFound("버전 이력을 찾을 수 없습니다.", code="VERSION_NOT_FOUND")
    return row


def compare_versions(
    db: Session,
    *,
    content_type: str,
    content_id: int,
    version1: int,
    version2: int,
) -> Dict[str, Any]:
    left = get_version(db, content_type=content_type, content_id=content_id, version=version1)
    right = get_version(db, content_type=content_type, content_id=content_id, version=version2)
    return {
        "content_type": content_type,
        "content_id": content_id,
        "version1": to_response(left),
        "version2": to_response(right),
        "changes": compute_changes(left.content, right.content),
    }


def get_live_record(db: Session, content_type: str, content_id: int):
    model = _model_for(content_type)
    record = db.get(model, content_id)
    if record is None:
        raise NotFound("콘텐츠를 찾을 수 없습니다.", code="CONTENT_NOT_FOUND")
    return record


def restore_version(
    db: Session,
    *,
    content_type: str,
    content_id: int,
    version: int,
    restored_by: Optional[int],
) -> Tuple[Any, ContentVersion]:
    """지정 버전의 스냅샷을 현재 레코드에 덮어쓰고, 복원 자체를 새 버전으로 남긴다."""
    model = _model_for(content_type)
    record = get_live_record(db, content_type, content_id)
    target = get_version(db, content_type=content_type, content_id=content_id, version=version)

    before = snapshot_of(content_type, record)
    restorable = {k: v for k, v in (target.content or {}).items() if k in VERSIONED_FIELDS[content_type]}
    metadata: Dict[str, Any] = {"restored_from_version": version}
    old_slug = restorable.get("slug")
    if old_slug and old_slug != record.slug and old_slug in existing_slugs(db, model, content_id):
        # 다른 레코드가 가져간 슬러그는 되돌리지 않고 현재 슬러그를 유지한다.
        restorable.pop("slug")
        metadata["slug_kept"] = record.slug
        logger.warning("[version] %s:%s slug '%s' is taken, keeping '%s'", content_type, content_id, old_slug, record.slug)
    for key, value in dict_to_attrs(model, restorable, strict=False).items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)

    row = create_content_version(
        db,
        content_type=content_type,
        content_id=content_id,
        snapshot=snapshot_of(content_type, record),
        created_by=restored_by,
        change_type="restore",
        previous=before,
        metadata=metadata,
    )
    logger.info("[version] %s:%s restored to v%s as v%s", content_type, content_id, version, row.version)
    return record, row


def to_response(row: ContentVersion) -> Dict[str, Any]:
    return {
        "version_id": row.version_id,
        "content_type": row.content_type,
        "content_id": row.content_id,
        "version": row.version,
        "title": row.title,
        "content": row.content or {},
        "metadata": row.meta,
        "changes": row.changes or [],
        "change_type": row.change_type,
        "created_by": row.created_by,
        "created_at": row.created_at,
        "checksum": row.checksum,
        "size": row.size,
        "compressed": bool(row.compressed),
    }
