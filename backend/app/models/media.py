"""미디어 라이브러리 파일 메타데이터 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class MediaFile(Base):
    __tablename__ = "media_file"

    media_id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(255), nullable=False)
    original_name = Column(String(255), nullable=False)
    url = Column(String(500), nullable=False)
    mime_type = Column(String(100))
    size = Column(Integer, default=0)
    alt_text = Column(String(300))
    uploaded_by = Column(Integer, ForeignKey("admin_user.user_id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
