"""Project/CaseStudy 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


class ProjectBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    content: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    category: Optional[str] = None
    is_featured: bool = False
    is_published: bool = True
    display_order: int = 0
    case_study_id: Optional[int] = None

    @field_validator("technologies", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class ProjectCreate(ProjectBase):
    slug: Optional[str] = None


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = None
    regenerate_slug: bool = False
    description: Optional[str] = None
    content: Optional[str] = None
    technologies: Optional[List[str]] = None
    image_url: Optional[str] = None
    demo_url: Optional[str] = None
    github_url: Optional[str] = None
    category: Optional[str] = None
    is_featured: Optional[bool] = None
    is_published: Optional[bool] = None
    display_order: Optional[int] = None
    case_study_id: Optional[int] = None


class ProjectOut(ProjectBase):
    project_id: int
    slug: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CaseStudyBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    client: Optional[str] = None
    summary: Optional[str] = None
    challenge: Optional[str] = None
    solution: Optional[str] = None
    results: Optional[str] = None
    technologies: List[str] = Field(default_factory=list)
    cover_image: Optional[str] = None
    is_published: bool = False
    display_order: int = 0

    @field_validator("technologies", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class CaseStudyCreate(CaseStudyBase):
    slug: Optional[str] = None


class CaseStudyUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = None
    regenerate_slug: bool = False
    client: Optional[str] = None
    summary: Optional[str] = None
    challenge: Optional[str] = None
    solution: Optional[str] = None
    results: Optional[str] = None
    technologies: Optional[List[str]] = None
    cover_image: Optional[str] = None
    is_published: Optional[bool] = None
    display_order: Optional[int] = None


class CaseStudyOut(CaseStudyBase):
    case_study_id: int
    slug: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
