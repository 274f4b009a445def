"""포트폴리오 프로젝트/케이스 스터디 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class CaseStudy(Base):
    __tablename__ = "case_study"

    case_study_id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(120), unique=True, nullable=False)
    client = Column(String(150))
    summary = Column(Text)
    challenge = Column(Text)
    solution = Column(Text)
    results = Column(Text)
    technologies = Column(JSON)  # list[str]
    cover_image = Column(String(500))
    is_published = Column(Boolean, default=False)
    display_order = Column(Integer, default=0)
    created_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    projects = relationship("Project", back_populates="case_study")


class Project(Base):
    __tablename__ = "project"

    project_id = Column(Integer, primary_key=True, autoincrement=True)
    case_study_id = Column(Integer, ForeignKey("case_study.case_study_id"), nullable=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(120), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    content = Column(Text)
    technologies = Column(JSON)  # list[str]
    image_url = Column(String(500))
    demo_url = Column(String(500))
    github_url = Column(String(500))
    category = Column(String(50))
    is_featured = Column(Boolean, default=False)
    is_published = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)
    created_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    case_study = relationship("CaseStudy", back_populates="projects")

    __table_args__ = (
        Index("idx_project_case_study", "case_study_id"),
    )
