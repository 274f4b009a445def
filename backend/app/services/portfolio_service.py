"""사이트 섹션/설정, 경력, 기술 카테고리, 도구 CRUD 도메인 서비스입니다."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.errors import ConflictError, NotFound, ValidationFailed
from app.models.portfolio import ExperienceEntry, SkillCategory, Tool
from app.models.site_content import ContentSection, SiteSettings
from app.models.user import User
from app.schemas.portfolio import (
    ContentSectionUpsert,
    ExperienceCreate,
    ExperienceUpdate,
    SiteSettingUpdate,
    SkillCategoryCreate,
    SkillCategoryUpdate,
    ToolCreate,
    ToolUpdate,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 사이트 섹션
# ---------------------------------------------------------------------------

def list_sections(db: Session, published_only: bool = False) -> List[ContentSection]:
    q = db.query(ContentSection)
    if published_only:
        q = q.filter(ContentSection.is_published == True)
    return q.order_by(ContentSection.display_order, ContentSection.section_key).all()


def get_section(db: Session, section_key: str) -> ContentSection:
    row = db.query(ContentSection).filter(ContentSection.section_key == section_key).first()
    if not row:
        raise NotFound(f"섹션 '{section_key}'을(를) 찾을 수 없습니다.")
    return row


def upsert_section(db: Session, data: ContentSectionUpsert, current_user: User) -> ContentSection:
    if not (data.content or "").strip():
        raise ValidationFailed("섹션 본문(content)은 필수입니다.", code="MISSING_CONTENT")
    row = db.query(ContentSection).filter(ContentSection.section_key == data.section_key).first()
    if row is None:
        row = ContentSection(section_key=data.section_key)
        db.add(row)
    for key, value in data.model_dump(exclude={"section_key"}).items():
        setattr(row, key, value)
    row.updated_by = current_user.user_id
    db.commit()
    db.refresh(row)
    return row


def delete_section(db: Session, section_key: str) -> None:
    row = get_section(db, section_key)
    db.delete(row)
    db.commit()


def list_settings(db: Session) -> List[SiteSettings]:
    return db.query(SiteSettings).order_by(SiteSettings.setting_key).all()


def update_setting(db: Session, setting_key: str, data: SiteSettingUpdate) -> SiteSettings:
    row = db.get(SiteSettings, setting_key)
    if row is None:
        row = SiteSettings(setting_key=setting_key)
        db.add(row)
    row.value = data.value
    if data.description is not None:
        row.description = data.description
    db.commit()
    db.refresh(row)
    return row


# ---------------------------------------------------------------------------
# 경력
# ---------------------------------------------------------------------------

def _check_period(start_date, end_date, is_current: bool) -> None:
    if is_current:
        return
    if start_date and end_date and end_date < start_date:
        raise ValidationFailed("종료일은 시작일보다 빠를 수 없습니다.", code="INVALID_PERIOD")


def list_experience(db: Session) -> List[ExperienceEntry]:
    return (
        db.query(ExperienceEntry)
        .order_by(ExperienceEntry.display_order, ExperienceEntry.start_date.desc())
        .all()
    )


def get_experience(db: Session, experience_id: int) -> ExperienceEntry:
    row = db.get(ExperienceEntry, experience_id)
    if not row:
        raise NotFound("경력 항목을 찾을 수 없습니다.")
    return row


def create_experience(db: Session, data: ExperienceCreate) -> ExperienceEntry:
    _check_period(data.start_date, data.end_date, data.is_current)
    payload = data.model_dump()
    if payload["is_current"]:
        payload["end_date"] = None
    row = ExperienceEntry(**payload)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_experience(db: Session, experience_id: int, data: ExperienceUpdate) -> ExperienceEntry:
    row = get_experience(db, experience_id)
    payload = data.model_dump(exclude_unset=True)
    is_current = payload.get("is_current", row.is_current)
    _check_period(payload.get("start_date", row.start_date), payload.get("end_date", row.end_date), is_current)
    for key, value in payload.items():
        setattr(row, key, value)
    if is_current:
        row.end_date = None
    db.commit()
    db.refresh(row)
    return row


def delete_experience(db: Session, experience_id: int) -> None:
    row = get_experience(db, experience_id)
    db.delete(row)
    db.commit()


# ---------------------------------------------------------------------------
# 기술 카테고리 / 도구
# ---------------------------------------------------------------------------

def _ensure_category_name_free(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(SkillCategory).filter(SkillCategory.name == name)
    if exclude_id is not None:
        q = q.filter(SkillCategory.category_id != exclude_id)
    if q.first():
        raise ConflictError(f"이미 존재하는 카테고리입니다: {name}", code="DUPLICATE_CATEGORY")


def list_skill_categories(db: Session) -> List[SkillCategory]:
    return db.query(SkillCategory).order_by(SkillCategory.display_order, SkillCategory.name).all()


def get_skill_category(db: Session, category_id: int) -> SkillCategory:
    row = db.get(SkillCategory, category_id)
    if not row:
        raise NotFound("기술 카테고리를 찾을 수 없습니다.")
    return row


def create_skill_category(db: Session, data: SkillCategoryCreate) -> SkillCategory:
    _ensure_category_name_free(db, data.name)
    row = SkillCategory(**data.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_skill_category(db: Session, category_id: int, data: SkillCategoryUpdate) -> SkillCategory:
    row = get_skill_category(db, category_id)
    payload = data.model_dump(exclude_unset=True)
    if payload.get("name"):
        _ensure_category_name_free(db, payload["name"], exclude_id=category_id)
    for key, value in payload.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def delete_skill_category(db: Session, category_id: int) -> None:
    row = get_skill_category(db, category_id)
    # 소속 도구는 남기고 카테고리 연결만 끊는다.
    db.query(Tool).filter(Tool.category_id == category_id).update(
        {Tool.category_id: None}, synchronize_session=False
    )
    db.delete(row)
    db.commit()


def _check_tool_category(db: Session, category_id: Optional[int]) -> None:
    if category_id is not None and db.get(SkillCategory, category_id) is None:
        raise ValidationFailed("연결할 기술 카테고리를 찾을 수 없습니다.", code="INVALID_REFERENCE")


def list_tools(db: Session, category_id: Optional[int] = None) -> List[Tool]:
    q = db.query(Tool)
    if category_id is not None:
        q = q.filter(Tool.category_id == category_id)
    return q.order_by(Tool.display_order, Tool.name).all()


def get_tool(db: Session, tool_id: int) -> Tool:
    row = db.get(Tool, tool_id)
    if not row:
        raise NotFound("도구를 찾을 수 없습니다.")
    return row


def create_tool(db: Session, data: ToolCreate) -> Tool:
    _check_tool_category(db, data.category_id)
    row = Tool(**data.model_dump())
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def update_tool(db: Session, tool_id: int, data: ToolUpdate) -> Tool:
    row = get_tool(db, tool_id)
    payload = data.model_dump(exclude_unset=True)
    if "category_id" in payload:
        _check_tool_category(db, payload["category_id"])
    for key, value in payload.items():
        setattr(row, key, value)
    db.commit()
    db.refresh(row)
    return row


def delete_tool(db: Session, tool_id: int) -> None:
    row = get_tool(db, tool_id)
    db.delete(row)
    db.commit()
