"""사이트 섹션(hero/about 등)과 전역 설정을 저장하는 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, String, Text, DateTime, Integer, Boolean, JSON, ForeignKey
from sqlalchemy.sql import func

from app.database import Base


class ContentSection(Base):
    __tablename__ = "content_section"

    section_id = Column(Integer, primary_key=True, autoincrement=True)
    section_key = Column(String(50), unique=True, nullable=False)  # hero/about/contact/...
    title = Column(String(200), nullable=False)
    subtitle = Column(String(300))
    content = Column(Text, nullable=False)
    data = Column(JSON)
    is_published = Column(Boolean, default=True)
    display_order = Column(Integer, default=0)
    updated_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class SiteSettings(Base):
    __tablename__ = "site_settings"

    setting_key = Column(String(80), primary_key=True)
    value = Column(JSON)
    description = Column(String(300))
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
