"""사이트 섹션/설정, 경력, 기술 카테고리, 도구 요청·응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import CAMEL_REQUEST


class ContentSectionUpsert(BaseModel):
    model_config = CAMEL_REQUEST

    section_key: str = Field(min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=200)
    subtitle: Optional[str] = None
    content: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    is_published: bool = True
    display_order: int = 0


class ContentSectionOut(BaseModel):
    section_id: int
    section_key: str
    title: str
    subtitle: Optional[str] = None
    content: str
    data: Optional[Dict[str, Any]] = None
    is_published: bool
    display_order: int
    updated_by: Optional[int] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SiteSettingUpdate(BaseModel):
    value: Any = None
    description: Optional[str] = None


class SiteSettingOut(BaseModel):
    setting_key: str
    value: Any = None
    description: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ExperienceBase(BaseModel):
    company: str = Field(min_length=1, max_length=150)
    position: str = Field(min_length=1, max_length=150)
    location: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    description: Optional[str] = None
    achievements: List[str] = Field(default_factory=list)
    technologies: List[str] = Field(default_factory=list)
    display_order: int = 0

    @field_validator("achievements", "technologies", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class ExperienceCreate(ExperienceBase):
    pass


class ExperienceUpdate(BaseModel):
    company: Optional[str] = Field(default=None, min_length=1, max_length=150)
    position: Optional[str] = Field(default=None, min_length=1, max_length=150)
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: Optional[bool] = None
    description: Optional[str] = None
    achievements: Optional[List[str]] = None
    technologies: Optional[List[str]] = None
    display_order: Optional[int] = None


class ExperienceOut(ExperienceBase):
    experience_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SkillItem(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    level: int = Field(default=0, ge=0, le=100)


class SkillCategoryBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    icon: Optional[str] = None
    skills: List[SkillItem] = Field(default_factory=list)
    display_order: int = 0

    @field_validator("skills", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class SkillCategoryCreate(SkillCategoryBase):
    pass


class SkillCategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    icon: Optional[str] = None
    skills: Optional[List[SkillItem]] = None
    display_order: Optional[int] = None


class SkillCategoryOut(SkillCategoryBase):
    category_id: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ToolBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    category_id: Optional[int] = None
    icon_url: Optional[str] = None
    website_url: Optional[str] = None
    proficiency: int = Field(default=0, ge=0, le=100)
    display_order: int = 0


class ToolCreate(ToolBase):
    pass


class ToolUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    category_id: Optional[int] = None
    icon_url: Optional[str] = None
    website_url: Optional[str] = None
    proficiency: Optional[int] = Field(default=None, ge=0, le=100)
    display_order: Optional[int] = None


class ToolOut(ToolBase):
    tool_id: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
