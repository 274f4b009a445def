"""BlogPost 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class BlogPostBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    excerpt: Optional[str] = None
    content: str = Field(min_length=1)
    tags: List[str] = Field(default_factory=list)
    cover_image: Optional[str] = None
    is_published: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class BlogPostCreate(BlogPostBase):
    slug: Optional[str] = None


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = None
    regenerate_slug: bool = False
    excerpt: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_image: Optional[str] = None
    is_published: Optional[bool] = None


class BlogPostOut(BlogPostBase):
    post_id: int
    slug: str
    published_at: Optional[datetime] = None
    author_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
