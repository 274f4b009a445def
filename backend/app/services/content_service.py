"""프로젝트/케이스 스터디/블로그 CRUD 도메인 서비스입니다. 슬러그 부여와 버전 기록을 함께 처리합니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFound, ValidationFailed
from app.models.project import CaseStudy, Project
from app.models.user import User
from app.services import version_service
from app.utils.slug import existing_slugs, generate_slug, slug_for, validate_slug

OWNER_FIELDS = {
    "project": "created_by",
    "case_study": "created_by",
    "blog": "author_id",
}

LABELS = {
    "project": "프로젝트",
    "case_study": "케이스 스터디",
    "blog": "게시글",
}


def _resolve_slug(db: Session, model, *, title: str, requested: Optional[str], exclude_id: Optional[int] = None) -> str:
    if requested:
        slug = generate_slug(requested)
        if not validate_slug(slug):
            raise ValidationFailed(f"사용할 수 없는 슬러그입니다: {requested}", code="INVALID_SLUG")
        if slug in existing_slugs(db, model, exclude_id):
            raise ConflictError(f"이미 사용 중인 슬러그입니다: {slug}", code="SLUG_TAKEN")
        return slug

    slug = slug_for(db, model, title, exclude_id=exclude_id)
    if not validate_slug(slug):
        raise ValidationFailed(
            "제목으로 슬러그를 만들 수 없습니다. 슬러그를 직접 입력해 주세요.",
            code="INVALID_SLUG",
        )
    return slug


def _check_cleared_fields(model, payload: dict) -> None:
    # 명시적 null은 기본값 없는 nullable 컬럼만 비울 수 있다.
    table = model.__table__
    for key, value in payload.items():
        column = table.columns.get(key)
        if value is None and column is not None and (not column.nullable or column.default is not None):
            raise ValidationFailed(f"'{key}' 값은 비울 수 없습니다.", code="VALIDATION_ERROR")


def _check_references(db: Session, content_type: str, payload: dict) -> None:
    if content_type == "project" and payload.get("case_study_id") is not None:
        if db.get(CaseStudy, payload["case_study_id"]) is None:
            raise ValidationFailed("연결할 케이스 스터디를 찾을 수 없습니다.", code="INVALID_REFERENCE")


def list_content(db: Session, content_type: str, published_only: bool = False) -> List:
    model = version_service.CONTENT_MODELS[content_type]
    q = db.query(model)
    if published_only:
        q = q.filter(model.is_published == True)
    if hasattr(model, "display_order"):
        q = q.order_by(model.display_order, model.created_at.desc())
    else:
        q = q.order_by(model.created_at.desc())
    return q.all()


def get_content(db: Session, content_type: str, content_id: int):
    model = version_service.CONTENT_MODELS[content_type]
    record = db.get(model, content_id)
    if record is None:
        raise NotFound(f"{LABELS[content_type]}을(를) 찾을 수 없습니다.")
    return record


def get_by_slug(db: Session, content_type: str, slug: str):
    model = version_service.CONTENT_MODELS[content_type]
    record = db.query(model).filter(model.slug == slug).first()
    if record is None:
        raise NotFound(f"{LABELS[content_type]}을(를) 찾을 수 없습니다.")
    return record


def create_content(db: Session, content_type: str, data: BaseModel, current_user: User):
    model = version_service.CONTENT_MODELS[content_type]
    payload = data.model_dump()
    requested_slug = payload.pop("slug", None)
    _check_references(db, content_type, payload)

    payload["slug"] = _resolve_slug(db, model, title=payload["title"], requested=requested_slug)
    payload[OWNER_FIELDS[content_type]] = current_user.user_id
    if content_type == "blog" and payload.get("is_published"):
        payload["published_at"] = datetime.utcnow()

    record = model(**payload)
    db.add(record)
    db.commit()
    db.refresh(record)

    version_service.create_content_version(
        db,
        content_type=content_type,
        content_id=_pk(record),
        snapshot=version_service.snapshot_of(content_type, record),
        created_by=current_user.user_id,
        change_type="create",
    )
    return record


def update_content(db: Session, content_type: str, content_id: int, data: BaseModel, current_user: User):
    model = version_service.CONTENT_MODELS[content_type]
    record = get_content(db, content_type, content_id)
    before = version_service.snapshot_of(content_type, record)

    payload = data.model_dump(exclude_unset=True)
    requested_slug = payload.pop("slug", None)
    regenerate = payload.pop("regenerate_slug", False)
    _check_cleared_fields(model, payload)
    _check_references(db, content_type, payload)

    if requested_slug and requested_slug != record.slug:
        payload["slug"] = _resolve_slug(db, model, title=record.title, requested=requested_slug, exclude_id=content_id)
    elif regenerate:
        payload["slug"] = _resolve_slug(
            db, model, title=payload.get("title", record.title), requested=None, exclude_id=content_id
        )

    if content_type == "blog" and payload.get("is_published") and record.published_at is None:
        payload["published_at"] = datetime.utcnow()

    for key, value in payload.items():
        setattr(record, key, value)
    db.commit()
    db.refresh(record)

    after = version_service.snapshot_of(content_type, record)
    if version_service.compute_changes(before, after):
        version_service.create_content_version(
            db,
            content_type=content_type,
            content_id=content_id,
            snapshot=after,
            created_by=current_user.user_id,
            change_type="update",
            previous=before,
        )
    return record


def delete_content(db: Session, content_type: str, content_id: int) -> None:
    record = get_content(db, content_type, content_id)
    if content_type == "case_study":
        db.query(Project).filter(Project.case_study_id == content_id).update(
            {Project.case_study_id: None}, synchronize_session=False
        )
    db.delete(record)
    db.commit()


def _pk(record) -> int:
    return getattr(record, record.__mapper__.primary_key[0].key)

