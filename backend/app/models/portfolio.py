"""경력/기술/도구 섹션의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class ExperienceEntry(Base):
    __tablename__ = "experience_entry"

    experience_id = Column(Integer, primary_key=True, autoincrement=True)
    company = Column(String(150), nullable=False)
    position = Column(String(150), nullable=False)
    location = Column(String(150))
    start_date = Column(Date, nullable=False)
    end_date = Column(Date)
    is_current = Column(Boolean, default=False)
    description = Column(Text)
    achievements = Column(JSON)  # list[str]
    technologies = Column(JSON)  # list[str]
    display_order = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())


class SkillCategory(Base):
    __tablename__ = "skill_category"

    category_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    icon = Column(String(100))
    skills = Column(JSON)  # [{name, level}]
    display_order = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())

    tools = relationship("Tool", back_populates="category")


class Tool(Base):
    __tablename__ = "tool"

    tool_id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("skill_category.category_id"), nullable=True)
    name = Column(String(100), nullable=False)
    icon_url = Column(String(500))
    website_url = Column(String(500))
    proficiency = Column(Integer, default=0)  # 0~100
    display_order = Column(Integer, default=0)
    created_at = Column(DateTime, server_default=func.now())

    category = relationship("SkillCategory", back_populates="tools")

    __table_args__ = (
        Index("idx_tool_category", "category_id"),
    )
